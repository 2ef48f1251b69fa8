"""deployconf: multi-chain deployment configuration resolver."""

from importlib.metadata import PackageNotFoundError, version

from .accounts import AccountsConfig
from .chains import ChainId, ChainRecord, ChainRegistry
from .config import DeploySettings
from .exceptions import (
    ConfigurationError,
    IntegrityViolationError,
    MalformedFactoryRecordError,
    MissingSecretError,
    UnknownChainError,
)
from .factory import DeterministicDeployment, SingletonFactoryRecord
from .resolver import NetworkResolver, ResolvedNetworkConfig

try:
    __version__ = version("deployconf")
except PackageNotFoundError:
    __version__ = None

__all__ = [
    "AccountsConfig",
    "ChainId",
    "ChainRecord",
    "ChainRegistry",
    "ConfigurationError",
    "DeploySettings",
    "DeterministicDeployment",
    "IntegrityViolationError",
    "MalformedFactoryRecordError",
    "MissingSecretError",
    "NetworkResolver",
    "ResolvedNetworkConfig",
    "SingletonFactoryRecord",
    "UnknownChainError",
]
