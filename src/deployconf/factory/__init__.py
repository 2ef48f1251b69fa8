"""Deterministic deployment via a pre-signed singleton factory transaction."""

from .records import (
    BUILTIN_PROFILES,
    DEFAULT_PROFILE,
    DeterministicDeployment,
    SingletonFactoryRecord,
    load_profiles,
    select_profile,
)
from .registry import SingletonFactoryRegistry
from .resolver import FactoryResolver

__all__ = [
    "BUILTIN_PROFILES",
    "DEFAULT_PROFILE",
    "DeterministicDeployment",
    "FactoryResolver",
    "SingletonFactoryRecord",
    "SingletonFactoryRegistry",
    "load_profiles",
    "select_profile",
]
