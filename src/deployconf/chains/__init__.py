"""Chain registry, RPC endpoints and explorer wiring."""

from .endpoints import IN_PROCESS_RPC_URL, EndpointResolver
from .explorers import (
    ExplorerConfig,
    ExplorerCredentials,
    ExplorerResolver,
    verify_explorer_integrity,
)
from .registry import ChainId, ChainRecord, ChainRegistry, to_chain_id, validate_tables

__all__ = [
    "IN_PROCESS_RPC_URL",
    "ChainId",
    "ChainRecord",
    "ChainRegistry",
    "EndpointResolver",
    "ExplorerConfig",
    "ExplorerCredentials",
    "ExplorerResolver",
    "to_chain_id",
    "validate_tables",
    "verify_explorer_integrity",
]
