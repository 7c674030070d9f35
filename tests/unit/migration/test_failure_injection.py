"""
A failure at any step of migrate() leaves the ledger exactly as it was.

Each case lets the real step run, then raises, so the step's own effects
are already in the transaction when it aborts.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

import pytest

from tokenmigration.contracts.claim import ClaimDistributor
from tokenmigration.contracts.pool import LiquidityPair, PoolFactory, PoolRouter
from tokenmigration.contracts.token import FungibleToken, SuccessorToken
from tokenmigration.exceptions import ContractRevert
from tokenmigration.migration import (
    ClaimFunding,
    LiquidityPoolManager,
    SuccessorAssetDeployer,
)
from tokenmigration.testing import LedgerHarness
from tokenmigration.types import derive_contract_address


class InjectedFailure(ContractRevert):
    def __init__(self, step: str) -> None:
        super().__init__(None, f"Injected failure after {step}")


def fail_after(step: str, original: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        await original(*args, **kwargs)
        raise InjectedFailure(step)

    return wrapper


STEPS = [
    (ClaimFunding, "deploy_distributor"),
    (SuccessorAssetDeployer, "deploy"),
    (SuccessorToken, "initialize"),
    (ClaimFunding, "fund"),
    (FungibleToken, "approve"),
    (ClaimDistributor, "deposit"),
    (LiquidityPoolManager, "ensure_pool"),
    (PoolFactory, "create_pair"),
    (LiquidityPoolManager, "deposit_liquidity"),
    (PoolRouter, "add_liquidity_native"),
    (LiquidityPair, "mint"),
    (LiquidityPair, "burn_receipt"),
]


@pytest.mark.asyncio
@pytest.mark.parametrize(("owner", "method"), STEPS, ids=[f"{c.__name__}.{m}" for c, m in STEPS])
async def test_failure_leaves_no_trace(
    harness: LedgerHarness,
    monkeypatch: pytest.MonkeyPatch,
    owner: type,
    method: str,
) -> None:
    orchestrator = await harness.deploy_orchestrator(value=10)
    harness.clear_published()
    before = await harness.snapshot()

    monkeypatch.setattr(owner, method, fail_after(method, getattr(owner, method)))
    with pytest.raises(InjectedFailure):
        await harness.migrate(orchestrator)

    assert await harness.snapshot() == before
    assert harness.published_events == []
    assert harness.pool_index.pools == []
    contract = await harness.service.get_orchestrator(orchestrator)
    assert not contract.has_migrated
    assert contract.successor_asset is None
    assert await harness.ledger.native_balance(orchestrator) == 10

    # The right to migrate was never consumed
    monkeypatch.undo()
    report = await harness.migrate(orchestrator)
    assert report.claim_contract == derive_contract_address(orchestrator, 0)
    assert report.successor_asset == derive_contract_address(orchestrator, 1)
