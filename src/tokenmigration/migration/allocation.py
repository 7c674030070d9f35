"""
Fixed allocation of the successor asset's initial supply.

Three recipients are minted at initialization: the DAO, the operational
wallet, and the orchestrator itself, which receives the airdrop and pool
allocations it must hand on during the migration.
"""

from dataclasses import dataclass

from tokenmigration.exceptions import InvalidConfigurationError
from tokenmigration.migration.config import MigrationConfig
from tokenmigration.types import Address


@dataclass(frozen=True)
class FixedAllocationLedger:
    """
    The four amounts and the recipients they are minted to.

    Amounts never change after construction.
    """

    dao: Address
    agent: Address
    dao_amount: int
    agent_amount: int
    airdrop_amount: int
    pool_amount: int

    def __post_init__(self) -> None:
        negative = [
            name
            for name in ("dao_amount", "agent_amount", "airdrop_amount", "pool_amount")
            if getattr(self, name) < 0
        ]
        if negative:
            raise InvalidConfigurationError(
                f"Allocation amounts must be non-negative: {', '.join(negative)}", negative
            )
        if self.dao == self.agent:
            raise InvalidConfigurationError(
                f"DAO and operational wallet are both {self.dao}", ["dao", "agent"]
            )

    @classmethod
    def from_config(cls, config: MigrationConfig) -> "FixedAllocationLedger":
        return cls(
            dao=config.dao,
            agent=config.agent,
            dao_amount=config.dao_amount,
            agent_amount=config.agent_amount,
            airdrop_amount=config.airdrop_amount,
            pool_amount=config.pool_amount,
        )

    @property
    def orchestrator_share(self) -> int:
        """What the orchestrator holds between initialization and redistribution."""
        return self.pool_amount + self.airdrop_amount

    @property
    def total_supply(self) -> int:
        return self.dao_amount + self.agent_amount + self.orchestrator_share

    def distribution(self, orchestrator: Address) -> tuple[list[Address], list[int]]:
        """Parallel recipient and amount lists for successor-asset initialization."""
        recipients = [self.dao, self.agent, orchestrator]
        amounts = [self.dao_amount, self.agent_amount, self.orchestrator_share]
        return recipients, amounts


__all__ = ["FixedAllocationLedger"]
