"""Block-explorer verification wiring.

Only chains whose explorer the verification plugin cannot discover on its
own are listed here. Every listed chain must also have an API-key entry;
``verify_explorer_integrity`` enforces that before anything is deployed.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from pydantic import SecretStr

from deployconf.chains.registry import ChainId, ChainRegistry
from deployconf.exceptions import IntegrityViolationError, MissingSecretError


@dataclass(frozen=True)
class ExplorerConfig:
    """Explorer endpoints for a chain."""

    chain_id: ChainId
    api_base_url: str
    browser_url: str


@dataclass(frozen=True)
class ExplorerCredentials:
    """Everything the verification plugin needs for one chain."""

    api_key: str
    api_base_url: str
    browser_url: str

    def to_dict(self, reveal_secrets: bool = False) -> dict[str, str]:
        """Serialize for the deployment tool, redacting the key by default."""
        return {
            "apiKey": self.api_key if reveal_secrets or not self.api_key else "[REDACTED]",
            "apiBaseUrl": self.api_base_url,
            "browserUrl": self.browser_url,
        }


EXPLORER_CONFIGS: Mapping[ChainId, ExplorerConfig] = MappingProxyType(
    {
        ChainId.OPBNB_MAINNET: ExplorerConfig(
            chain_id=ChainId.OPBNB_MAINNET,
            api_base_url="https://api-opbnb.bscscan.com/api",
            browser_url="https://opbnb.bscscan.com/",
        ),
    }
)


def explorer_api_keys(etherscan_api_key: SecretStr | None) -> dict[ChainId, str | None]:
    """Build the API-key table from configured secrets.

    A value of ``None`` means the entry exists but its secret is absent.
    """
    etherscan = etherscan_api_key.get_secret_value() if etherscan_api_key else None
    return {
        ChainId.OPBNB_MAINNET: etherscan,
    }


def verify_explorer_integrity(
    configs: Mapping[ChainId, ExplorerConfig],
    api_keys: Mapping[ChainId, str | None],
) -> None:
    """Fail if any chain with explorer configuration lacks an API-key entry.

    Raises
    ------
    IntegrityViolationError
        Naming every offending chain id.
    """
    missing = [chain_id for chain_id in configs if chain_id not in api_keys]
    if missing:
        raise IntegrityViolationError(missing)


class ExplorerResolver:
    """Resolve explorer endpoints and credentials for a chain.

    Parameters
    ----------
    configs : Mapping[ChainId, ExplorerConfig]
        Explorer endpoints for chains that need them.
    api_keys : Mapping[ChainId, str | None]
        API key per chain; ``""`` for explorers needing none, ``None`` when
        the secret is absent.
    """

    def __init__(
        self,
        configs: Mapping[ChainId, ExplorerConfig],
        api_keys: Mapping[ChainId, str | None],
    ):
        self._configs = configs
        self._api_keys = api_keys

    def resolve(self, chain_id: ChainId) -> ExplorerConfig | None:
        """Return the explorer config, or None if the plugin defaults apply."""
        return self._configs.get(chain_id)

    def credentials(self, chain_id: ChainId) -> ExplorerCredentials | None:
        """Return explorer endpoints plus API key for a chain.

        Raises
        ------
        IntegrityViolationError
            If the chain has explorer configuration but no key entry.
        MissingSecretError
            If the key entry exists but its secret is not configured.
        """
        config = self.resolve(chain_id)
        if config is None:
            return None
        if chain_id not in self._api_keys:
            raise IntegrityViolationError([chain_id])
        api_key = self._api_keys[chain_id]
        if api_key is None:
            raise MissingSecretError(
                f"Missing explorer API key for chain id {int(chain_id)}. Set ETHERSCAN_API_KEY"
            )
        return ExplorerCredentials(
            api_key=api_key,
            api_base_url=config.api_base_url,
            browser_url=config.browser_url,
        )

    def plugin_config(self, registry: ChainRegistry, reveal_secrets: bool = False) -> dict[str, Any]:
        """Render the verification plugin's ``etherscan`` section."""
        api_key: dict[str, str | None] = {}
        custom_chains = []
        for chain_id, config in sorted(self._configs.items()):
            name = registry.name_of(chain_id)
            key = self._api_keys.get(chain_id)
            api_key[name] = key if reveal_secrets or not key else "[REDACTED]"
            custom_chains.append(
                {
                    "network": name,
                    "chainId": int(chain_id),
                    "urls": {
                        "apiURL": config.api_base_url,
                        "browserURL": config.browser_url,
                    },
                }
            )
        return {"apiKey": api_key, "customChains": custom_chains}
