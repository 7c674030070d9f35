"""Off-ledger read models built from committed events."""

from tokenmigration.projections.pools import PoolIndex, PoolRecord

__all__ = ["PoolIndex", "PoolRecord"]
