"""Runtime settings for building a ledger."""

from dataclasses import asdict, dataclass
from typing import Any

from tokenmigration.exceptions import InvalidConfigurationError
from tokenmigration.stores.in_memory import InMemoryEventStore
from tokenmigration.stores.interface import EventStore
from tokenmigration.stores.sqlite import SQLiteEventStore

BACKENDS = ("memory", "sqlite")


@dataclass(frozen=True)
class LedgerSettings:
    """
    Which event store backs the ledger, and how.

    Attributes:
        backend: "memory" or "sqlite"
        database: SQLite database path (":memory:" for a private in-memory database)
        wal_mode: Enable SQLite WAL journaling for file databases
        busy_timeout: SQLite busy timeout in milliseconds
        enable_tracing: Emit OpenTelemetry spans from the store and ledger

    Example:
        >>> settings = LedgerSettings(backend="sqlite", database="migration.db")
        >>> ledger = await Ledger.from_settings(settings)
    """

    backend: str = "memory"
    database: str = ":memory:"
    wal_mode: bool = True
    busy_timeout: int = 5000
    enable_tracing: bool = True

    def __post_init__(self) -> None:
        if self.backend not in BACKENDS:
            raise InvalidConfigurationError(
                f"backend must be one of {', '.join(BACKENDS)}, got {self.backend!r}"
            )
        if self.busy_timeout < 0:
            raise InvalidConfigurationError(
                f"busy_timeout must be >= 0, got {self.busy_timeout}"
            )
        if self.backend == "sqlite" and not self.database:
            raise InvalidConfigurationError("database is required for the sqlite backend")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LedgerSettings":
        unknown = set(data) - set(cls.__dataclass_fields__)
        if unknown:
            raise InvalidConfigurationError(
                f"Unknown ledger settings: {', '.join(sorted(unknown))}"
            )
        return cls(**data)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def create_store(self) -> EventStore:
        """Build the configured event store. SQLite stores still need ``initialize()``."""
        if self.backend == "sqlite":
            return SQLiteEventStore(
                self.database,
                wal_mode=self.wal_mode,
                busy_timeout=self.busy_timeout,
                enable_tracing=self.enable_tracing,
            )
        return InMemoryEventStore(enable_tracing=self.enable_tracing)


__all__ = ["LedgerSettings"]
