"""
Configuration management for algotx.

Supports configuration via environment variables and .env files.
"""

from enum import Enum
from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class NetworkType(str, Enum):
    """Ledger networks."""
    MAINNET = "mainnet"
    TESTNET = "testnet"
    BETANET = "betanet"
    LOCAL = "local"


class AlgoTxConfig(BaseSettings):
    """
    Configuration settings for the transaction pipeline.

    All settings can be configured via environment variables with the ALGOTX_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="ALGOTX_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Network settings
    network: NetworkType = Field(
        default=NetworkType.TESTNET,
        description="Network to connect to"
    )

    # Node settings
    algod_url: Optional[str] = Field(
        default=None,
        description="Custom algod base URL (optional)"
    )
    algod_token: SecretStr = Field(
        default=SecretStr(""),
        description="algod API token"
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="HTTP request timeout"
    )

    # Signing key settings
    signing_key_path: Optional[str] = Field(
        default=None,
        description="Path to a file holding the base64 private key"
    )
    signing_key_b64: Optional[SecretStr] = Field(
        default=None,
        description="Base64 private key (alternative to file path)"
    )

    # Transaction defaults
    validity_rounds: int = Field(
        default=1000,
        ge=1,
        description="Width of the validity window for new transactions"
    )

    # Tracking settings
    poll_interval_seconds: float = Field(
        default=1.0,
        gt=0,
        description="Initial delay between status polls"
    )
    poll_backoff_factor: float = Field(
        default=1.5,
        ge=1.0,
        description="Multiplier applied to the poll delay after each poll"
    )
    poll_max_interval_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Upper bound for the poll delay"
    )
    poll_timeout_seconds: Optional[float] = Field(
        default=None,
        description="Wall-clock limit for waiting on a transaction"
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format"
    )

    @property
    def node_url(self) -> str:
        """Get the appropriate algod URL based on network."""
        if self.algod_url:
            return self.algod_url

        network_urls = {
            NetworkType.MAINNET: "https://mainnet-api.algonode.cloud",
            NetworkType.TESTNET: "https://testnet-api.algonode.cloud",
            NetworkType.BETANET: "https://betanet-api.algonode.cloud",
            NetworkType.LOCAL: "http://localhost:4001",
        }
        return network_urls.get(self.network, "https://testnet-api.algonode.cloud")


# Global config instance
_config: Optional[AlgoTxConfig] = None


def get_config() -> AlgoTxConfig:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = AlgoTxConfig()
    return _config


def set_config(config: AlgoTxConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config
