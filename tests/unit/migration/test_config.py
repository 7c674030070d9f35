"""Tests for migration configuration, the allocation ledger and the phase machine."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from pydantic import ValidationError

from tokenmigration.exceptions import InvalidConfigurationError, InvalidPhaseTransitionError
from tokenmigration.migration.allocation import FixedAllocationLedger
from tokenmigration.migration.config import MigrationConfig
from tokenmigration.migration.state import MigrationPhase
from tokenmigration.types import BURN_ADDRESS, ZERO_ADDRESS, account_address, derive_contract_address


def camel_config(**overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "legacyAsset": derive_contract_address(account_address("deployer"), 2),
        "name": "Successor Token",
        "symbol": "NEW",
        "dao": account_address("dao"),
        "agent": account_address("agent"),
        "daoAmount": 400,
        "agentAmount": 100,
        "airdropAmount": 50,
        "poolAmount": 450,
        "router": derive_contract_address(account_address("deployer"), 1),
        "owner": account_address("owner"),
    }
    data.update(overrides)
    return data


class TestMigrationConfig:
    def test_accepts_camel_case_mapping(self) -> None:
        config = MigrationConfig.from_mapping(camel_config())
        assert config.dao_amount == 400
        assert config.pool_amount == 450
        assert config.total_supply == 1000

    def test_accepts_field_names(self) -> None:
        config = MigrationConfig.from_mapping(camel_config())
        again = MigrationConfig(**config.model_dump())
        assert again == config

    def test_normalizes_addresses(self) -> None:
        dao = account_address("dao")
        config = MigrationConfig.from_mapping(camel_config(dao=dao.upper().replace("0X", "0x")))
        assert config.dao == dao

    def test_is_frozen(self) -> None:
        config = MigrationConfig.from_mapping(camel_config())
        with pytest.raises(ValidationError):
            config.dao_amount = 1  # type: ignore[misc]

    @pytest.mark.parametrize("field", ["dao", "agent", "owner", "router", "legacyAsset"])
    def test_rejects_zero_address(self, field: str) -> None:
        with pytest.raises(InvalidConfigurationError) as exc_info:
            MigrationConfig.from_mapping(camel_config(**{field: ZERO_ADDRESS}))
        assert exc_info.value.errors

    def test_rejects_burn_address(self) -> None:
        with pytest.raises(InvalidConfigurationError):
            MigrationConfig.from_mapping(camel_config(dao=BURN_ADDRESS))

    def test_rejects_negative_amount(self) -> None:
        with pytest.raises(InvalidConfigurationError, match="poolAmount|pool_amount"):
            MigrationConfig.from_mapping(camel_config(poolAmount=-1))

    def test_rejects_non_integer_amount(self) -> None:
        with pytest.raises(InvalidConfigurationError):
            MigrationConfig.from_mapping(camel_config(daoAmount="400"))

    def test_rejects_empty_symbol(self) -> None:
        with pytest.raises(InvalidConfigurationError):
            MigrationConfig.from_mapping(camel_config(symbol=""))

    def test_rejects_unknown_field(self) -> None:
        with pytest.raises(InvalidConfigurationError):
            MigrationConfig.from_mapping(camel_config(treasury=account_address("t")))

    def test_rejects_router_equal_to_legacy_asset(self) -> None:
        router = derive_contract_address(account_address("deployer"), 1)
        with pytest.raises(InvalidConfigurationError, match="different"):
            MigrationConfig.from_mapping(camel_config(legacyAsset=router))

    def test_rejects_dao_equal_to_agent(self) -> None:
        with pytest.raises(InvalidConfigurationError, match="dao and agent") as exc_info:
            MigrationConfig.from_mapping(camel_config(agent=account_address("dao")))
        assert len(exc_info.value.errors) == 1

    def test_zero_amounts_are_valid(self) -> None:
        config = MigrationConfig.from_mapping(
            camel_config(daoAmount=0, agentAmount=0, airdropAmount=0, poolAmount=0)
        )
        assert config.total_supply == 0

    def test_collects_every_error(self) -> None:
        with pytest.raises(InvalidConfigurationError) as exc_info:
            MigrationConfig.from_mapping(camel_config(daoAmount=-1, agentAmount=-2))
        assert len(exc_info.value.errors) == 2


class TestMigrationConfigFromFile:
    def test_loads_json(self, tmp_path: Path) -> None:
        path = tmp_path / "migration.json"
        path.write_text(json.dumps(camel_config()), encoding="utf-8")
        assert MigrationConfig.from_file(path).symbol == "NEW"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(InvalidConfigurationError, match="Cannot read"):
            MigrationConfig.from_file(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(InvalidConfigurationError):
            MigrationConfig.from_file(path)

    def test_json_array(self, tmp_path: Path) -> None:
        path = tmp_path / "array.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(InvalidConfigurationError, match="JSON object"):
            MigrationConfig.from_file(path)


class TestFixedAllocationLedger:
    def test_from_config(self) -> None:
        config = MigrationConfig.from_mapping(camel_config())
        allocation = FixedAllocationLedger.from_config(config)
        assert allocation.orchestrator_share == 500
        assert allocation.total_supply == config.total_supply == 1000

    def test_distribution_order(self) -> None:
        config = MigrationConfig.from_mapping(camel_config())
        orchestrator = account_address("orchestrator")
        recipients, amounts = FixedAllocationLedger.from_config(config).distribution(orchestrator)
        assert recipients == [config.dao, config.agent, orchestrator]
        assert amounts == [400, 100, 500]
        assert sum(amounts) == config.total_supply

    def test_rejects_negative_amounts(self) -> None:
        with pytest.raises(InvalidConfigurationError) as exc_info:
            FixedAllocationLedger(
                dao=account_address("dao"),
                agent=account_address("agent"),
                dao_amount=-1,
                agent_amount=0,
                airdrop_amount=-5,
                pool_amount=0,
            )
        assert exc_info.value.errors == ["dao_amount", "airdrop_amount"]

    def test_rejects_shared_dao_and_agent(self) -> None:
        with pytest.raises(InvalidConfigurationError) as exc_info:
            FixedAllocationLedger(
                dao=account_address("dao"),
                agent=account_address("dao"),
                dao_amount=400,
                agent_amount=100,
                airdrop_amount=50,
                pool_amount=450,
            )
        assert exc_info.value.errors == ["dao", "agent"]


class TestMigrationPhase:
    def test_pending_to_completed(self) -> None:
        assert MigrationPhase.PENDING.can_transition_to(MigrationPhase.COMPLETED)
        assert MigrationPhase.PENDING.transition_to(MigrationPhase.COMPLETED) is MigrationPhase.COMPLETED

    @pytest.mark.parametrize(
        ("current", "target"),
        [
            (MigrationPhase.COMPLETED, MigrationPhase.PENDING),
            (MigrationPhase.COMPLETED, MigrationPhase.COMPLETED),
            (MigrationPhase.PENDING, MigrationPhase.PENDING),
        ],
    )
    def test_other_transitions_raise(self, current: MigrationPhase, target: MigrationPhase) -> None:
        assert not current.can_transition_to(target)
        with pytest.raises(InvalidPhaseTransitionError) as exc_info:
            current.transition_to(target)
        assert exc_info.value.current == current.value
        assert exc_info.value.target == target.value

    def test_terminal(self) -> None:
        assert MigrationPhase.COMPLETED.is_terminal
        assert not MigrationPhase.PENDING.is_terminal
