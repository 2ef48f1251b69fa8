"""Configuration management for deployconf using Pydantic Settings."""

from enum import Enum

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from deployconf.factory.records import DEFAULT_PROFILE


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    TEXT = "text"


class DeploySettings(BaseSettings):
    """Secrets and deployment switches loaded once from the environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    # Secrets
    infura_key: SecretStr | None = Field(default=None, alias="INFURA_KEY")
    etherscan_api_key: SecretStr | None = Field(default=None, alias="ETHERSCAN_API_KEY")
    private_key: SecretStr | None = Field(default=None, alias="PK")
    mnemonic: SecretStr | None = Field(default=None, alias="MNEMONIC")

    # Network
    node_url: str | None = Field(default=None, alias="NODE_URL")
    timeout_ms: int | None = Field(default=None, alias="DEPLOY_TIMEOUT_MS", gt=0)

    # Deterministic deployment
    custom_deterministic_deployment: bool = Field(
        default=False, alias="CUSTOM_DETERMINISTIC_DEPLOYMENT"
    )
    active_custom_network: int | None = Field(default=None, alias="DEPLOY_ACTIVE_CUSTOM_NETWORK")
    factory_profile: str = Field(default=DEFAULT_PROFILE, alias="DEPLOY_FACTORY_PROFILE")
    factory_profile_file: str | None = Field(default=None, alias="DEPLOY_FACTORY_PROFILE_FILE")
    factory_registry_dir: str | None = Field(default=None, alias="DEPLOY_FACTORY_REGISTRY_DIR")
    verify_factory_signer: bool = Field(default=False, alias="DEPLOY_VERIFY_FACTORY_SIGNER")

    # Observability
    log_level: str = Field(default="INFO", alias="DEPLOY_LOG_LEVEL")
    log_format: LogFormat = Field(default=LogFormat.TEXT, alias="DEPLOY_LOG_FORMAT")
