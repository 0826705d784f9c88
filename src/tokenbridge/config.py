"""
Bridge configuration.

A ``BridgeConfig`` names the network, the chains the bridge may touch (ids,
finality thresholds, native decimals, contract addresses) and the RPC
endpoints. Built-in tables cover the well-known mainnet and testnet chains;
a JSON file can add chains or override individual fields, and a few
environment variables override the file.
"""

import json
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .bridge_types import ChainConfig, ContextKind, Contracts, Network
from .errors import ConfigurationError
from .logging import LogContext, get_logger

logger = get_logger(__name__)

CONFIG_PATH_ENV = "TOKENBRIDGE_CONFIG"

ENV_MAPPINGS = {
    "TOKENBRIDGE_NETWORK": ("network", Network),
    "TOKENBRIDGE_UNBOUNDED_APPROVALS": ("unbounded_approvals", bool),
}


def _chain(key, chain_id, context, finality, decimals, **contracts) -> ChainConfig:
    return ChainConfig(
        key=key,
        id=chain_id,
        context=context,
        contracts=Contracts(**contracts),
        finality_threshold=finality,
        native_token_decimals=decimals,
    )


_ETH_CORE = "0x98f3c9e6E3fAce36bAAd05FE09d375Ef1464288B"

MAINNET_CHAINS = {
    chain.key: chain
    for chain in (
        _chain(
            "solana",
            1,
            ContextKind.SOLANA,
            32,
            9,
            core="worm2ZoG2kUd4vFXhvjh93UUH596ayRfgQ2MgjNMTth",
            token_bridge="wormDTUJ6AWPNvk59vGQbDvGJmqbDTdgWgAqcLBCgUb",
        ),
        _chain(
            "ethereum",
            2,
            ContextKind.EVM,
            64,
            18,
            core=_ETH_CORE,
            token_bridge="0x3ee18B2214AFF97000D974cf647E7C347E8fa585",
        ),
        _chain(
            "bsc",
            4,
            ContextKind.EVM,
            15,
            18,
            core=_ETH_CORE,
            token_bridge="0xB6F6D86a8f9879A9c87f643768d9efc38c1Da6E7",
        ),
        _chain(
            "polygon",
            5,
            ContextKind.EVM,
            512,
            18,
            core="0x7A4B5a56256163F07b2C80A7cA55aBE66c4ec4d7",
            token_bridge="0x5a58505a96D1dbf8dF91cB21B54419FC36e93fdE",
        ),
        _chain(
            "avalanche",
            6,
            ContextKind.EVM,
            1,
            18,
            core="0x54a8e5f9c4CbA08F9943965859F6c34eAF03E26c",
            token_bridge="0x0e082F06FF657D94310cB8cE8B0D9a04541d8052",
        ),
        _chain("fantom", 10, ContextKind.EVM, 1, 18),
        _chain("celo", 14, ContextKind.EVM, 1, 18),
        _chain("moonbeam", 16, ContextKind.EVM, 1, 18),
        _chain("sui", 21, ContextKind.SUI, 0, 9),
        _chain("aptos", 22, ContextKind.APTOS, 0, 8),
        _chain("arbitrum", 23, ContextKind.EVM, 1, 18),
        _chain("optimism", 24, ContextKind.EVM, 1, 18),
        _chain("base", 30, ContextKind.EVM, 512, 18),
        _chain("sei", 32, ContextKind.SEI, 0, 6),
    )
}

TESTNET_CHAINS = {
    chain.key: chain
    for chain in (
        _chain("solana", 1, ContextKind.SOLANA, 32, 9),
        _chain("goerli", 2, ContextKind.EVM, 64, 18),
        _chain("bsc", 4, ContextKind.EVM, 15, 18),
        _chain("mumbai", 5, ContextKind.EVM, 64, 18),
        _chain("fuji", 6, ContextKind.EVM, 1, 18),
        _chain("fantom", 10, ContextKind.EVM, 1, 18),
        _chain("alfajores", 14, ContextKind.EVM, 1, 18),
        _chain("moonbasealpha", 16, ContextKind.EVM, 1, 18),
        _chain("sui", 21, ContextKind.SUI, 0, 9),
        _chain("aptos", 22, ContextKind.APTOS, 0, 8),
        _chain("basegoerli", 30, ContextKind.EVM, 512, 18),
        _chain("sei", 32, ContextKind.SEI, 0, 6),
    )
}


def builtin_chains(network: Network) -> Dict[str, ChainConfig]:
    """The built-in chain table of a network (devnet starts empty)."""
    if network == Network.MAINNET:
        return dict(MAINNET_CHAINS)
    if network == Network.TESTNET:
        return dict(TESTNET_CHAINS)
    return {}


@dataclass
class BridgeConfig:
    """Configuration of one bridge deployment."""

    network: Network = Network.MAINNET
    chains: Dict[str, ChainConfig] = field(default_factory=dict)
    rpcs: Dict[str, str] = field(default_factory=dict)
    unbounded_approvals: bool = False
    environment_overrides: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def for_network(cls, network: Network, **kwargs) -> "BridgeConfig":
        return cls(network=network, chains=builtin_chains(network), **kwargs)

    def apply_environment_overrides(self, environ: Optional[Dict[str, str]] = None) -> None:
        """Apply ``TOKENBRIDGE_*`` environment variable overrides."""
        environ = os.environ if environ is None else environ
        for env_var, (attr_name, attr_type) in ENV_MAPPINGS.items():
            env_value = environ.get(env_var)
            if env_value is None:
                continue
            if attr_type == bool:
                value = env_value.lower() in ("true", "1", "yes", "on")
            else:
                try:
                    value = attr_type(env_value.upper())
                except ValueError as e:
                    raise ConfigurationError(
                        f"Invalid environment variable {env_var}={env_value}",
                        config_key=env_var,
                        config_value=env_value,
                        cause=e,
                    ) from e
            setattr(self, attr_name, value)
            self.environment_overrides[env_var] = value

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "network": self.network.value,
            "chains": {key: chain.to_dict() for key, chain in self.chains.items()},
            "rpcs": dict(self.rpcs),
            "unbounded_approvals": self.unbounded_approvals,
        }

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "BridgeConfig":
        """Create configuration from dictionary.

        Chain entries are merged over the built-in table of the network: an
        entry for a known chain only needs the fields it changes.
        """
        try:
            network = Network(str(config_dict.get("network", Network.MAINNET.value)).upper())
        except ValueError as e:
            raise ConfigurationError(
                f"Unknown network {config_dict.get('network')!r}",
                config_key="network",
                config_value=config_dict.get("network"),
                cause=e,
            ) from e

        chains = builtin_chains(network)
        for key, overrides in config_dict.get("chains", {}).items():
            chains[key] = _merge_chain(key, chains.get(key), overrides)

        return cls(
            network=network,
            chains=chains,
            rpcs=dict(config_dict.get("rpcs", {})),
            unbounded_approvals=bool(config_dict.get("unbounded_approvals", False)),
        )

    def __str__(self) -> str:
        return (
            f"BridgeConfig(network={self.network.value}, chains={len(self.chains)}, "
            f"unbounded_approvals={self.unbounded_approvals})"
        )


def _merge_chain(
    key: str, base: Optional[ChainConfig], overrides: Dict[str, Any]
) -> ChainConfig:
    data = base.to_dict() if base else {"key": key}
    contracts = dict(data.get("contracts", {}))
    contracts.update(overrides.get("contracts", {}))
    data.update({name: value for name, value in overrides.items() if name != "contracts"})
    data["contracts"] = contracts
    data["key"] = key
    try:
        return ChainConfig.from_dict(data)
    except (KeyError, ValueError) as e:
        raise ConfigurationError(
            f"Incomplete or invalid configuration for chain {key!r}: {e}",
            config_key=f"chains.{key}",
            config_value=overrides,
            cause=e,
        ) from e


def load_config(path: Optional[str] = None) -> BridgeConfig:
    """Load the bridge configuration.

    ``path`` defaults to ``$TOKENBRIDGE_CONFIG``; without either, the
    built-in mainnet table is used. Environment overrides apply last.
    """
    path = path or os.environ.get(CONFIG_PATH_ENV)
    data: Dict[str, Any] = {}
    if path:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(
                f"Cannot load configuration from {path}: {e}",
                config_key=CONFIG_PATH_ENV,
                config_value=path,
                cause=e,
            ) from e

    # the network selects the built-in table the file is merged over
    network = os.environ.get("TOKENBRIDGE_NETWORK")
    if network:
        data = dict(data, network=network)

    config = BridgeConfig.from_dict(data)
    config.apply_environment_overrides()

    logger.debug(
        f"Loaded {config}",
        context=LogContext(component="config", operation="load_config", metadata={"path": path}),
    )
    return config
