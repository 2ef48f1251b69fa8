"""Pytest configuration and fixtures for deployconf tests."""

import os

import pytest

# Un-prefixed variables read by DeploySettings
SETTINGS_ENV = (
    "INFURA_KEY",
    "ETHERSCAN_API_KEY",
    "PK",
    "MNEMONIC",
    "NODE_URL",
    "CUSTOM_DETERMINISTIC_DEPLOYMENT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Clear deployconf environment variables and any .env before each test."""
    for key in list(os.environ.keys()):
        if key.startswith("DEPLOY_") or key in SETTINGS_ENV:
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def registry():
    """Registry with the built-in chain table."""
    from deployconf.chains.registry import ChainRegistry

    return ChainRegistry()
