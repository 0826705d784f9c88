"""Tests for bridge configuration loading."""

import json

import pytest

from tokenbridge.bridge_types import ContextKind, Network
from tokenbridge.config import (
    MAINNET_CHAINS,
    TESTNET_CHAINS,
    BridgeConfig,
    builtin_chains,
    load_config,
)
from tokenbridge.errors import ConfigurationError


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in ("TOKENBRIDGE_CONFIG", "TOKENBRIDGE_NETWORK", "TOKENBRIDGE_UNBOUNDED_APPROVALS"):
        monkeypatch.delenv(name, raising=False)


def write_config(tmp_path, data):
    path = tmp_path / "bridge.json"
    path.write_text(json.dumps(data))
    return str(path)


class TestBuiltinTables:
    """Test the built-in chain tables."""

    def test_mainnet_ids(self):
        assert MAINNET_CHAINS["solana"].id == 1
        assert MAINNET_CHAINS["ethereum"].id == 2
        assert MAINNET_CHAINS["sei"].context == ContextKind.SEI
        assert MAINNET_CHAINS["ethereum"].contracts.token_bridge

    def test_testnet_names(self):
        assert "goerli" in TESTNET_CHAINS
        assert "ethereum" not in TESTNET_CHAINS

    def test_devnet_is_empty(self):
        assert builtin_chains(Network.DEVNET) == {}

    def test_tables_are_copies(self):
        chains = builtin_chains(Network.MAINNET)
        chains.pop("ethereum")
        assert "ethereum" in MAINNET_CHAINS


class TestBridgeConfig:
    """Test BridgeConfig construction."""

    def test_for_network(self):
        config = BridgeConfig.for_network(Network.TESTNET, unbounded_approvals=True)
        assert config.network == Network.TESTNET
        assert config.unbounded_approvals
        assert "mumbai" in config.chains

    def test_from_dict_merges_over_builtins(self):
        config = BridgeConfig.from_dict(
            {
                "network": "mainnet",
                "chains": {"polygon": {"contracts": {"relayer": "0xrelayer"}}},
                "rpcs": {"polygon": "https://polygon.example"},
            }
        )
        polygon = config.chains["polygon"]
        assert polygon.contracts.relayer == "0xrelayer"
        assert polygon.contracts.token_bridge == MAINNET_CHAINS["polygon"].contracts.token_bridge
        assert polygon.finality_threshold == 512
        assert config.rpcs == {"polygon": "https://polygon.example"}

    def test_from_dict_adds_chain(self):
        config = BridgeConfig.from_dict(
            {"network": "DEVNET", "chains": {"anvil": {"id": 2, "context": "Ethereum"}}}
        )
        assert list(config.chains) == ["anvil"]
        assert config.chains["anvil"].key == "anvil"

    def test_incomplete_new_chain(self):
        with pytest.raises(ConfigurationError) as exc_info:
            BridgeConfig.from_dict({"network": "DEVNET", "chains": {"anvil": {"id": 2}}})
        assert exc_info.value.config_key == "chains.anvil"

    def test_unknown_network(self):
        with pytest.raises(ConfigurationError):
            BridgeConfig.from_dict({"network": "moonnet"})

    def test_to_dict_round_trip(self):
        config = BridgeConfig.for_network(Network.TESTNET)
        restored = BridgeConfig.from_dict(config.to_dict())
        assert restored.chains == config.chains
        assert restored.network == config.network

    def test_environment_overrides(self):
        config = BridgeConfig()
        config.apply_environment_overrides(
            {"TOKENBRIDGE_NETWORK": "testnet", "TOKENBRIDGE_UNBOUNDED_APPROVALS": "yes"}
        )
        assert config.network == Network.TESTNET
        assert config.unbounded_approvals
        assert config.environment_overrides["TOKENBRIDGE_UNBOUNDED_APPROVALS"] is True

    def test_invalid_environment_value(self):
        with pytest.raises(ConfigurationError):
            BridgeConfig().apply_environment_overrides({"TOKENBRIDGE_NETWORK": "moonnet"})


class TestLoadConfig:
    """Test load_config."""

    def test_defaults_to_mainnet(self):
        config = load_config()
        assert config.network == Network.MAINNET
        assert config.chains == MAINNET_CHAINS

    def test_file_from_environment(self, tmp_path, monkeypatch):
        path = write_config(tmp_path, {"network": "TESTNET", "unbounded_approvals": True})
        monkeypatch.setenv("TOKENBRIDGE_CONFIG", path)

        config = load_config()

        assert config.network == Network.TESTNET
        assert config.unbounded_approvals

    def test_environment_network_selects_table(self, tmp_path, monkeypatch):
        path = write_config(tmp_path, {"chains": {"mumbai": {"contracts": {"relayer": "0x1"}}}})
        monkeypatch.setenv("TOKENBRIDGE_NETWORK", "testnet")

        config = load_config(path)

        assert config.network == Network.TESTNET
        assert config.chains["mumbai"].id == 5
        assert config.chains["mumbai"].contracts.relayer == "0x1"

    def test_environment_overrides_file(self, tmp_path, monkeypatch):
        path = write_config(tmp_path, {"unbounded_approvals": True})
        monkeypatch.setenv("TOKENBRIDGE_UNBOUNDED_APPROVALS", "false")
        assert not load_config(path).unbounded_approvals

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config(str(tmp_path / "missing.json"))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bridge.json"
        path.write_text("{not json")
        with pytest.raises(ConfigurationError):
            load_config(str(path))
