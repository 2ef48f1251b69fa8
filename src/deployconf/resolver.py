"""Network configuration resolution.

``NetworkResolver.from_settings`` is the single entry point: it validates
the static tables and the explorer key integrity before handing out a
resolver, so no network can be resolved from an inconsistent setup.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from deployconf.accounts import AccountsConfig
from deployconf.chains.endpoints import (
    ENDPOINT_CANDIDATES,
    IN_PROCESS_RPC_URL,
    MANAGED_PROVIDER_SUPPORT,
    NETWORK_TIMEOUTS_MS,
    EndpointResolver,
)
from deployconf.chains.explorers import (
    EXPLORER_CONFIGS,
    ExplorerCredentials,
    ExplorerResolver,
    explorer_api_keys,
    verify_explorer_integrity,
)
from deployconf.chains.registry import CHAIN_NAMES, ChainId, ChainRegistry, validate_tables
from deployconf.config import DeploySettings
from deployconf.factory.records import DeterministicDeployment, load_profiles, select_profile
from deployconf.factory.registry import SingletonFactoryRegistry
from deployconf.factory.resolver import FactoryResolver
from deployconf.observability.logging import clear_network, get_logger, set_network

logger = get_logger(__name__)

# Options for the chain the deployment tool runs in-process
LOCAL_CHAIN_OPTIONS: Mapping[str, Any] = MappingProxyType(
    {
        "allowUnlimitedContractSize": True,
        "blockGasLimit": 100_000_000,
        "gas": 100_000_000,
    }
)


@dataclass(frozen=True)
class ResolvedNetworkConfig:
    """Configuration of one network, as consumed by the deployment tool."""

    name: str
    chain_id: ChainId
    rpc_url: str
    accounts: AccountsConfig
    timeout_ms: int
    explorer: ExplorerCredentials | None = None
    options: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def in_process(self) -> bool:
        """True when no remote endpoint is used."""
        return self.rpc_url == IN_PROCESS_RPC_URL

    def to_dict(self, reveal_secrets: bool = False) -> dict[str, Any]:
        """Serialize, redacting secrets unless asked otherwise.

        The RPC URL may embed the managed-provider key, so it is redacted too.
        """
        rpc_url = self.rpc_url
        if not reveal_secrets and "infura.io/v3/" in rpc_url:
            rpc_url = rpc_url.split("/v3/")[0] + "/v3/[REDACTED]"

        data: dict[str, Any] = {
            "name": self.name,
            "chainId": int(self.chain_id),
            "rpcUrl": rpc_url,
            "accounts": self.accounts.to_dict(reveal_secrets=reveal_secrets),
            "timeoutMs": self.timeout_ms,
        }
        if self.explorer is not None:
            data["explorer"] = self.explorer.to_dict(reveal_secrets=reveal_secrets)
        if self.options:
            data["options"] = dict(self.options)
        return data


class NetworkResolver:
    """Resolve complete network configurations by network name.

    Parameters
    ----------
    registry : ChainRegistry
        The supported chains.
    endpoints : EndpointResolver
        RPC endpoint selection.
    explorers : ExplorerResolver
        Explorer verification wiring.
    factories : FactoryResolver
        Singleton factory selection.
    accounts : AccountsConfig
        Deployment accounts shared by every network.
    deterministic : bool
        Whether deterministic deployment is enabled.
    rpc_override : str | None
        RPC URL that replaces the resolved endpoint.
    timeout_ms : int | None
        Request timeout that replaces the per-chain value.
    """

    def __init__(
        self,
        registry: ChainRegistry,
        endpoints: EndpointResolver,
        explorers: ExplorerResolver,
        factories: FactoryResolver,
        accounts: AccountsConfig,
        deterministic: bool = False,
        rpc_override: str | None = None,
        timeout_ms: int | None = None,
    ):
        self.registry = registry
        self.endpoints = endpoints
        self.explorers = explorers
        self.factories = factories
        self.accounts = accounts
        self.deterministic = deterministic
        self._rpc_override = rpc_override
        self._timeout_ms = timeout_ms

    @classmethod
    def from_settings(cls, settings: DeploySettings) -> "NetworkResolver":
        """Build a resolver from settings, failing fast on bad configuration.

        Raises
        ------
        ConfigurationError
            If a static table is incomplete or references an unknown chain,
            an explorer has no API-key entry, or the factory sources are
            unusable.
        """
        api_keys = explorer_api_keys(settings.etherscan_api_key)

        extra_profiles = None
        if settings.factory_profile_file:
            extra_profiles = load_profiles(settings.factory_profile_file)
        overrides = select_profile(settings.factory_profile, extra_profiles)

        validate_tables(
            complete={
                "chain names": CHAIN_NAMES,
                "endpoint candidates": ENDPOINT_CANDIDATES,
            },
            partial={
                "managed provider support": MANAGED_PROVIDER_SUPPORT,
                "network timeouts": NETWORK_TIMEOUTS_MS,
                "explorer configs": EXPLORER_CONFIGS,
                "explorer api keys": api_keys,
                "factory profile": overrides,
            },
        )
        verify_explorer_integrity(EXPLORER_CONFIGS, api_keys)

        registry = ChainRegistry()
        factory_registry = None
        if settings.factory_registry_dir:
            factory_registry = SingletonFactoryRegistry(settings.factory_registry_dir)

        factories = FactoryResolver(
            overrides,
            registry=factory_registry,
            active_network=settings.active_custom_network,
            verify_signer=settings.verify_factory_signer,
        )
        accounts = AccountsConfig.from_secrets(settings.private_key, settings.mnemonic)

        logger.debug(
            "resolver_ready",
            chains=len(registry),
            factory_profile=settings.factory_profile,
            deterministic=settings.custom_deterministic_deployment,
        )
        return cls(
            registry=registry,
            endpoints=EndpointResolver(registry, provider_key=settings.infura_key),
            explorers=ExplorerResolver(EXPLORER_CONFIGS, api_keys),
            factories=factories,
            accounts=accounts,
            deterministic=settings.custom_deterministic_deployment,
            rpc_override=settings.node_url,
            timeout_ms=settings.timeout_ms,
        )

    def resolve(
        self,
        network: str,
        verify: bool = True,
        rpc_url: str | None = None,
    ) -> ResolvedNetworkConfig:
        """Resolve the full configuration of a network.

        Parameters
        ----------
        network : str
            Network slug, legacy alias or decimal chain id.
        verify : bool
            Include explorer credentials, requiring their secrets.
        rpc_url : str | None
            RPC URL override for this call only.

        Raises
        ------
        UnknownChainError
            If the network is not supported.
        MissingSecretError
            If a required provider or explorer secret is absent.
        """
        record = self.registry.parse(network)
        set_network(record.name)
        try:
            url = self.endpoints.resolve(record.chain_id, override_url=rpc_url or self._rpc_override)
            explorer = self.explorers.credentials(record.chain_id) if verify else None
            config = ResolvedNetworkConfig(
                name=record.name,
                chain_id=record.chain_id,
                rpc_url=url,
                accounts=self.accounts,
                timeout_ms=self._timeout_ms or self.endpoints.timeout_ms(record.chain_id),
                explorer=explorer,
                options=LOCAL_CHAIN_OPTIONS if url == IN_PROCESS_RPC_URL else MappingProxyType({}),
            )
            logger.info(
                "network_resolved",
                chain_id=int(record.chain_id),
                in_process=config.in_process,
                explorer=explorer is not None,
            )
            if self.accounts.uses_default_mnemonic and not config.in_process:
                logger.warning("default_mnemonic_on_remote_network")
            return config
        finally:
            clear_network()

    def deterministic_deployment(self, network: str) -> DeterministicDeployment | None:
        """Return the deterministic deployment setup for a network.

        Returns None when deterministic deployment is disabled or no factory
        record exists for the chain; the caller then deploys without a fixed
        address.

        Raises
        ------
        MalformedFactoryRecordError
            If the selected factory record is incomplete or invalid.
        """
        if not self.deterministic:
            return None

        record = self.registry.parse(network)
        set_network(record.name)
        try:
            factory = self.factories.resolve(record.chain_id)
            if factory is None:
                logger.info("singleton_factory_unavailable", chain_id=int(record.chain_id))
                return None
            logger.info(
                "singleton_factory_resolved",
                chain_id=int(factory.chain_id),
                factory=factory.address,
                funding=str(factory.funding),
            )
            return DeterministicDeployment.from_record(factory)
        finally:
            clear_network()
