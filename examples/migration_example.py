"""
Migration Example

This example runs a complete V1 -> V2 migration on a fresh ledger:
- Booting a ledger with a pool factory, router and legacy token
- Deploying and pre-funding a migration orchestrator
- Running migrate() in one atomic transaction
- Showing that a second run is rejected and leaves nothing behind

Run with: python examples/migration_example.py
"""

import asyncio

from tokenmigration import AlreadyMigrated, LiquidityPair, SuccessorToken
from tokenmigration.testing import LedgerHarness
from tokenmigration.types import BURN_ADDRESS

# =============================================================================
# Main Example
# =============================================================================


async def main():
    """Demonstrate a migration end to end."""
    print("=" * 60)
    print("Token Migration Example")
    print("=" * 60)

    harness = await LedgerHarness.create()
    config = harness.config(
        dao_amount=4_000,
        agent_amount=1_000,
        airdrop_amount=500,
        pool_amount=4_500,
    )

    # Step 1: Deploy the orchestrator with 100 units of base currency
    print("\n1. Deploying the orchestrator")
    orchestrator = await harness.deploy_orchestrator(config, value=100)
    print(f"   Orchestrator: {orchestrator}")
    print(f"   Base currency held: {await harness.ledger.native_balance(orchestrator)}")

    # Step 2: Migrate
    print("\n2. Running the migration")
    report = await harness.migrate(orchestrator)
    print(f"   Successor asset: {report.successor_asset}")
    print(f"   Claim contract:  {report.claim_contract}")
    print(f"   Pool:            {report.pool} (created: {report.pool_created})")
    print(f"   Events committed: {report.event_count}")

    # Step 3: Inspect the outcome
    print("\n3. Balances of the successor asset")
    token = await harness.ledger.load(report.successor_asset, SuccessorToken)
    for label, account in [
        ("dao", harness.dao),
        ("agent", harness.agent),
        ("claims", report.claim_contract),
        ("pool", report.pool),
        ("orchestrator", orchestrator),
    ]:
        print(f"   {label:<13} {token.balance_of(account)}")
    print(f"   total supply  {token.total_supply}")

    pair = await harness.ledger.load(report.pool, LiquidityPair)
    print(f"\n   Pool reserves: {pair.reserves}")
    print(f"   Receipts at the sink: {pair.receipt_balance(BURN_ADDRESS)}")

    # Step 4: The migration runs once
    print("\n4. Running the migration again")
    before = await harness.snapshot()
    try:
        await harness.migrate(orchestrator)
    except AlreadyMigrated as e:
        print(f"   Rejected: {e}")
    print(f"   Ledger unchanged: {await harness.snapshot() == before}")

    print("\n" + "=" * 60)
    print("Example completed successfully!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
