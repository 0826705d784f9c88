"""Shared fixtures for the tokenbridge test suite."""

import pytest
from bridge_fakes import FakeProvider, make_chains

from tokenbridge.bridge_types import Network
from tokenbridge.config import BridgeConfig
from tokenbridge.registry import BridgeRegistry


@pytest.fixture
def config():
    return BridgeConfig(network=Network.TESTNET, chains=make_chains())


@pytest.fixture
def journal():
    """Shared record of provider and signer calls, in order."""
    return []


@pytest.fixture
def providers(config, journal):
    return {key: FakeProvider(journal=journal) for key in config.chains}


@pytest.fixture
def registry(config, providers):
    return BridgeRegistry(config, providers=providers)
