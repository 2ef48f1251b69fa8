"""Observability module for deployconf."""

from .logging import clear_network, configure_logging, get_logger, set_network

__all__ = [
    "clear_network",
    "configure_logging",
    "get_logger",
    "set_network",
]
