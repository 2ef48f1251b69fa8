"""Deployment accounts handed to the deployment tool."""

import re
from dataclasses import dataclass

from eth_account import Account
from eth_account.signers.local import LocalAccount
from pydantic import SecretStr

from deployconf.exceptions import ConfigurationError

# Well-known development mnemonic. Never fund accounts derived from it on a live chain.
DEFAULT_MNEMONIC = "candy maple cake sugar pudding cream honey rich smooth crumble sweet treat"

# Derivation path of the deployer (named account index 0)
DEPLOYER_PATH = "m/44'/60'/0'/0/0"

REDACTED = "[REDACTED]"

PRIVATE_KEY_PATTERN = re.compile(r"^(?:0x)?[0-9a-fA-F]{64}$")


@dataclass(frozen=True)
class AccountsConfig:
    """Either a list of private keys or an HD wallet mnemonic.

    Attributes
    ----------
    private_keys : tuple[SecretStr, ...]
        Explicit private keys; the first one deploys.
    mnemonic : SecretStr | None
        Mnemonic used when no private key is configured.
    """

    private_keys: tuple[SecretStr, ...] = ()
    mnemonic: SecretStr | None = None

    def __post_init__(self):
        for key in self.private_keys:
            if not PRIVATE_KEY_PATTERN.match(key.get_secret_value()):
                raise ConfigurationError("PK is not a 32-byte hex private key")

    @classmethod
    def from_secrets(
        cls,
        private_key: SecretStr | None = None,
        mnemonic: SecretStr | None = None,
    ) -> "AccountsConfig":
        """Build accounts the way the deployment tool expects them.

        A private key wins over a mnemonic; without either the development
        mnemonic is used.

        Raises
        ------
        ConfigurationError
            If the private key is not 32 bytes of hex.
        """
        if private_key is not None and private_key.get_secret_value():
            return cls(private_keys=(private_key,))
        if mnemonic is not None and mnemonic.get_secret_value():
            return cls(mnemonic=mnemonic)
        return cls(mnemonic=SecretStr(DEFAULT_MNEMONIC))

    @property
    def uses_default_mnemonic(self) -> bool:
        return (
            not self.private_keys
            and self.mnemonic is not None
            and self.mnemonic.get_secret_value() == DEFAULT_MNEMONIC
        )

    def deployer_account(self) -> LocalAccount:
        """Derive the deployer account.

        Returns
        -------
        LocalAccount
            The first private key's account, or account index 0 of the
            mnemonic.

        Raises
        ------
        ConfigurationError
            If nothing is configured.
        """
        if self.private_keys:
            return Account.from_key(self.private_keys[0].get_secret_value())
        if self.mnemonic is None:
            raise ConfigurationError("No private key or mnemonic configured")
        Account.enable_unaudited_hdwallet_features()
        return Account.from_mnemonic(self.mnemonic.get_secret_value(), account_path=DEPLOYER_PATH)

    def to_dict(self, reveal_secrets: bool = False) -> list[str] | dict[str, str]:
        """Serialize for the deployment tool, redacting secrets by default."""
        if self.private_keys:
            return [
                key.get_secret_value() if reveal_secrets else REDACTED for key in self.private_keys
            ]
        mnemonic = self.mnemonic.get_secret_value() if self.mnemonic else ""
        return {"mnemonic": mnemonic if reveal_secrets else REDACTED}
