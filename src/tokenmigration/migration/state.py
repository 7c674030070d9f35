"""
Migration lifecycle phase.

State machine transitions:
    PENDING -> COMPLETED

The single transition claims the one-time migration right. It is taken as
the very first effect of ``migrate()``; if anything later fails, the whole
transaction (this transition included) is rolled back.
"""

from enum import Enum

from tokenmigration.exceptions import InvalidPhaseTransitionError


class MigrationPhase(Enum):
    """
    Attributes:
        PENDING: Orchestrator deployed, migration not yet performed.
        COMPLETED: Migration performed. Terminal.
    """

    PENDING = "pending"
    COMPLETED = "completed"

    @property
    def is_terminal(self) -> bool:
        return self is MigrationPhase.COMPLETED

    def can_transition_to(self, target: "MigrationPhase") -> bool:
        return self is MigrationPhase.PENDING and target is MigrationPhase.COMPLETED

    def transition_to(self, target: "MigrationPhase") -> "MigrationPhase":
        """
        Raises:
            InvalidPhaseTransitionError: For anything but PENDING -> COMPLETED
        """
        if not self.can_transition_to(target):
            raise InvalidPhaseTransitionError(self.value, target.value)
        return target


__all__ = ["MigrationPhase"]
