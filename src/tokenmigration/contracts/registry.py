"""
Contract type registry.

Every concrete ``Contract`` subclass registers itself under its
``contract_type`` so a transaction can rebuild whatever contract lives at an
address from the type name stored alongside its stream.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from tokenmigration.exceptions import ContractNotFoundError

if TYPE_CHECKING:
    from tokenmigration.contracts.base import Contract

logger = logging.getLogger(__name__)


class DuplicateContractTypeError(ValueError):
    """Raised when two different classes claim the same contract type name."""

    def __init__(self, contract_type: str, existing: type, new: type) -> None:
        self.contract_type = contract_type
        super().__init__(
            f"Contract type '{contract_type}' is already registered to {existing.__qualname__}. "
            f"Cannot register {new.__qualname__} with the same type name."
        )


class ContractRegistry:
    """Thread-safe mapping of contract type names to contract classes."""

    def __init__(self) -> None:
        self._registry: dict[str, type[Contract]] = {}
        self._lock = threading.RLock()

    def register(self, contract_class: type[Contract]) -> type[Contract]:
        contract_type = contract_class.contract_type
        with self._lock:
            existing = self._registry.get(contract_type)
            if existing is not None and existing is not contract_class:
                raise DuplicateContractTypeError(contract_type, existing, contract_class)
            self._registry[contract_type] = contract_class
        logger.debug("Registered contract type '%s'", contract_type)
        return contract_class

    def get(self, contract_type: str) -> type[Contract]:
        """
        Get a contract class by type name.

        Raises:
            ContractNotFoundError: If no class is registered under the name
        """
        with self._lock:
            try:
                return self._registry[contract_type]
            except KeyError:
                raise ContractNotFoundError("<unknown>", contract_type) from None

    def list_types(self) -> list[str]:
        with self._lock:
            return sorted(self._registry)

    def __contains__(self, contract_type: str) -> bool:
        with self._lock:
            return contract_type in self._registry


default_contract_registry = ContractRegistry()

__all__ = ["ContractRegistry", "DuplicateContractTypeError", "default_contract_registry"]
