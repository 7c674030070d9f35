"""
Migration parameters, fixed when the orchestrator is deployed.

Field names are snake_case; camelCase aliases (``daoAmount``,
``legacyAsset``...) are accepted so existing deployment files load as-is.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from tokenmigration.exceptions import InvalidConfigurationError
from tokenmigration.types import RESERVED_ADDRESSES, Address, to_address


class MigrationConfig(BaseModel):
    """
    Immutable configuration of one migration.

    Attributes:
        legacy_asset: The V1 token the claim distributor is bound to
        name: Successor asset name
        symbol: Successor asset symbol
        dao: Receives ``dao_amount`` and ownership of the successor asset
        agent: Operational wallet; receives ``agent_amount``
        dao_amount: Minted to the DAO
        agent_amount: Minted to the operational wallet
        airdrop_amount: Deposited into the claim distributor
        pool_amount: Deposited into the pool with the orchestrator's base currency
        router: Pool router used for the liquidity deposit
        owner: The only account allowed to call ``migrate()``

    Example:
        >>> config = MigrationConfig.from_mapping({
        ...     "legacyAsset": v1, "name": "Token V2", "symbol": "TKN",
        ...     "dao": dao, "agent": agent, "router": router, "owner": owner,
        ...     "daoAmount": 400, "agentAmount": 100,
        ...     "airdropAmount": 50, "poolAmount": 450,
        ... })
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    legacy_asset: Address
    name: str = Field(min_length=1)
    symbol: str = Field(min_length=1)
    dao: Address
    agent: Address
    dao_amount: int = Field(ge=0, strict=True)
    agent_amount: int = Field(ge=0, strict=True)
    airdrop_amount: int = Field(ge=0, strict=True)
    pool_amount: int = Field(ge=0, strict=True)
    router: Address
    owner: Address

    @field_validator("legacy_asset", "dao", "agent", "router", "owner", mode="before")
    @classmethod
    def _normalize_address(cls, value: Any) -> Address:
        address = to_address(value)
        if address in RESERVED_ADDRESSES:
            raise ValueError(f"reserved address {address} is not allowed")
        return address

    @model_validator(mode="after")
    def _check_roles(self) -> MigrationConfig:
        if self.legacy_asset == self.router:
            raise ValueError("legacy_asset and router must be different contracts")
        if self.dao == self.agent:
            raise ValueError("dao and agent must be different accounts")
        return self

    @property
    def total_supply(self) -> int:
        return self.dao_amount + self.agent_amount + self.airdrop_amount + self.pool_amount

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> MigrationConfig:
        """
        Raises:
            InvalidConfigurationError: Listing every invalid field
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            errors = [
                f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
                for err in e.errors()
            ]
            raise InvalidConfigurationError(
                f"Invalid migration configuration: {'; '.join(errors)}", errors
            ) from e

    @classmethod
    def from_file(cls, path: str | Path) -> MigrationConfig:
        """
        Load a JSON configuration file.

        Raises:
            InvalidConfigurationError: If the file is unreadable, not JSON or invalid
        """
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise InvalidConfigurationError(f"Cannot read migration configuration {path}: {e}") from e
        if not isinstance(data, dict):
            raise InvalidConfigurationError(
                f"Migration configuration {path} must be a JSON object"
            )
        return cls.from_mapping(data)


__all__ = ["MigrationConfig"]
