"""RPC endpoint resolution.

Selection order for a chain:

1. an explicit RPC override, when one is given
2. the managed provider (Infura), when it serves the chain and a key is set
3. the first public fallback endpoint
4. the in-process placeholder for a chain with no remote endpoint

A chain only the managed provider can serve fails without a provider key.
"""

import logging
from collections.abc import Mapping, Sequence
from types import MappingProxyType

from pydantic import SecretStr

from deployconf.chains.registry import ChainId, ChainRegistry
from deployconf.exceptions import MissingSecretError

logger = logging.getLogger(__name__)

# Resolved URL for a chain that runs inside the deployment tool itself
IN_PROCESS_RPC_URL = ""

DEFAULT_TIMEOUT_MS = 40_000

ENDPOINT_CANDIDATES: Mapping[ChainId, tuple[str, ...]] = MappingProxyType(
    {
        ChainId.HARDHAT: (),
        ChainId.MAINNET: (),
        ChainId.RINKEBY: (),
        ChainId.GOERLI: (),
        ChainId.KOVAN: (),
        ChainId.POLYGON: (),
        ChainId.XDAI: ("https://xdai.poanetwork.dev", "https://rpc.gnosischain.com"),
        ChainId.EWC: ("https://rpc.energyweb.org",),
        ChainId.VOLTA: ("https://volta-rpc.energyweb.org",),
        ChainId.BSC: ("https://bsc-dataseed.binance.org/",),
        ChainId.ARBITRUM: ("https://arb1.arbitrum.io/rpc",),
        ChainId.FANTOM_TESTNET: ("https://rpc.testnet.fantom.network/",),
        ChainId.HEDERA_TESTNET: ("https://testnet.hashio.io/api",),
        ChainId.HEDERA_MAINNET: ("https://mainnet.hashio.io/api",),
        ChainId.OPBNB_MAINNET: ("https://opbnb.publicnode.com",),
        ChainId.HORIZEN_TESTNET: ("https://gobi-rpc.horizenlabs.io/ethv1",),
        ChainId.HORIZEN_MAINNET: ("https://rpc.ankr.com/horizen_eon",),
    }
)

MANAGED_PROVIDER_SUPPORT: Mapping[ChainId, bool] = MappingProxyType(
    {
        ChainId.MAINNET: True,
        ChainId.RINKEBY: True,
        ChainId.GOERLI: True,
        ChainId.KOVAN: True,
        ChainId.POLYGON: True,
    }
)

# Infura subdomains that differ from the network slug
INFURA_NETWORK_NAMES: Mapping[ChainId, str] = MappingProxyType(
    {
        ChainId.POLYGON: "polygon-mainnet",
    }
)

NETWORK_TIMEOUTS_MS: Mapping[ChainId, int] = MappingProxyType(
    {
        ChainId.HEDERA_MAINNET: 120_000,
    }
)


def provider_base_url(chain_id: ChainId, name: str) -> str:
    """Return the managed-provider URL prefix; the provider key is appended."""
    return f"https://{INFURA_NETWORK_NAMES.get(chain_id, name)}.infura.io/v3/"


class EndpointResolver:
    """Resolve the RPC URL and request timeout for a chain.

    Parameters
    ----------
    registry : ChainRegistry
        Chain registry used to name chains.
    provider_key : SecretStr | None
        Managed-provider API key, if configured.
    candidates : Mapping[ChainId, Sequence[str]]
        Ordered public fallback endpoints per chain.
    managed_support : Mapping[ChainId, bool]
        Chains the managed provider can serve. Absence means unsupported.
    timeouts_ms : Mapping[ChainId, int]
        Per-chain request timeouts.
    default_timeout_ms : int
        Timeout for chains without an entry in ``timeouts_ms``.
    """

    def __init__(
        self,
        registry: ChainRegistry,
        provider_key: SecretStr | None = None,
        candidates: Mapping[ChainId, Sequence[str]] = ENDPOINT_CANDIDATES,
        managed_support: Mapping[ChainId, bool] = MANAGED_PROVIDER_SUPPORT,
        timeouts_ms: Mapping[ChainId, int] = NETWORK_TIMEOUTS_MS,
        default_timeout_ms: int = DEFAULT_TIMEOUT_MS,
    ):
        self._registry = registry
        self._provider_key = provider_key
        self._candidates = candidates
        self._managed_support = managed_support
        self._timeouts_ms = timeouts_ms
        self._default_timeout_ms = default_timeout_ms

    def supports_managed_provider(self, chain_id: ChainId) -> bool:
        """Whether the managed provider can serve this chain."""
        return bool(self._managed_support.get(chain_id, False))

    def resolve(self, chain_id: ChainId, override_url: str | None = None) -> str:
        """Return the RPC URL for a chain.

        Parameters
        ----------
        chain_id : ChainId
            The chain to resolve.
        override_url : str | None
            Explicit RPC URL that wins over every table.

        Returns
        -------
        str
            The RPC URL, or ``IN_PROCESS_RPC_URL`` for a chain with an
            empty fallback list that the managed provider does not serve.

        Raises
        ------
        MissingSecretError
            If only the managed provider serves the chain and no provider
            key is configured.
        """
        record = self._registry.get(chain_id)
        if override_url:
            logger.debug("Using RPC override for %s", record.name)
            return override_url

        managed = self.supports_managed_provider(record.chain_id)
        key = self._provider_key.get_secret_value() if self._provider_key else ""
        if managed and key:
            return provider_base_url(record.chain_id, record.name) + key

        candidates = self._candidates.get(record.chain_id, ())
        if candidates:
            if managed:
                logger.info("No provider key set; using public endpoint for %s", record.name)
            return candidates[0]

        if managed:
            raise MissingSecretError(
                f"Could not find Infura key in env, unable to connect to network {record.name}. "
                "Set INFURA_KEY"
            )
        return IN_PROCESS_RPC_URL

    def timeout_ms(self, chain_id: ChainId) -> int:
        """Return the request timeout for a chain in milliseconds."""
        return self._timeouts_ms.get(chain_id, self._default_timeout_ms)
