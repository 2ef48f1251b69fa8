"""Deterministic factory resolution."""

import logging

from deployconf.chains.registry import ChainId, to_chain_id
from deployconf.exceptions import MalformedFactoryRecordError
from deployconf.factory.records import FactoryProfile, SingletonFactoryRecord
from deployconf.factory.registry import SingletonFactoryRegistry

logger = logging.getLogger(__name__)


class FactoryResolver:
    """Pick the singleton factory record for a chain.

    Sources, highest priority first:

    1. the active custom network, which pins its override record for every
       requested chain
    2. the override profile, by chain id
    3. the external registry, by chain id

    Parameters
    ----------
    overrides : FactoryProfile
        Raw override records keyed by chain id (the selected profile).
    registry : SingletonFactoryRegistry | None
        External registry, if one is configured.
    active_network : int | None
        Chain id whose override record is pinned.
    verify_signer : bool
        Recover the raw transaction's sender and compare it to the record.

    Raises
    ------
    UnknownChainError
        If ``active_network`` is outside the supported set.
    """

    def __init__(
        self,
        overrides: FactoryProfile,
        registry: SingletonFactoryRegistry | None = None,
        active_network: int | None = None,
        verify_signer: bool = False,
    ):
        self._overrides = overrides
        self._registry = registry
        self._active_network = to_chain_id(active_network) if active_network is not None else None
        self._verify_signer = verify_signer

    @property
    def active_network(self) -> ChainId | None:
        return self._active_network

    def resolve(self, chain_id: ChainId) -> SingletonFactoryRecord | None:
        """Return the factory record for a chain, or None if no source has one.

        Raises
        ------
        MalformedFactoryRecordError
            If the selected record is incomplete or invalid, or the active
            custom network has no override record.
        """
        chain = to_chain_id(chain_id)
        record = self._select(chain)
        if record is not None and self._verify_signer:
            record.verify_signer()
        return record

    def _select(self, chain: ChainId) -> SingletonFactoryRecord | None:
        active = self._active_network
        if active is not None:
            if active not in self._overrides:
                raise MalformedFactoryRecordError(
                    f"Active custom network {int(active)} has no singleton factory override"
                )
            if active != chain:
                logger.warning(
                    "Active custom network %d pins the factory record for chain %d",
                    active,
                    chain,
                )
            return SingletonFactoryRecord.parse(active, self._overrides[active])

        if chain in self._overrides:
            return SingletonFactoryRecord.parse(chain, self._overrides[chain])

        if self._registry is not None:
            return self._registry.lookup(chain)

        return None
