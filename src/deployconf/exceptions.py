"""Exception classes for deployconf.

Every error here is a startup-time configuration failure: the process is
expected to stop before touching any chain.
"""


class ConfigurationError(ValueError):
    """Base exception for deployment configuration errors."""

    pass


class UnknownChainError(ConfigurationError):
    """Raised when a chain id or network name is outside the supported set."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Unknown chain: {value!r}")


class MissingSecretError(ConfigurationError):
    """Raised when a provider or explorer secret required by a network is absent."""

    pass


class IntegrityViolationError(ConfigurationError):
    """Raised when explorer configuration exists without a matching API-key entry."""

    def __init__(self, chain_ids: list[int]):
        self.chain_ids = sorted(int(chain_id) for chain_id in chain_ids)
        joined = ", ".join(str(chain_id) for chain_id in self.chain_ids)
        super().__init__(f"Explorer configured without API key entry for chain id(s): {joined}")


class MalformedFactoryRecordError(ConfigurationError):
    """Raised when a singleton factory record is incomplete or invalid."""

    pass
