"""Core configuration - centralized config for the peergate package.

All environment-based configuration should flow through this module.

Usage:
    from peergate.core.config import get_config
    config = get_config()

    rate = config.acceptance_rate
    log_level = config.log_level
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CoreSettings(BaseSettings):
    """Core configuration settings for PeerGate.

    Settings are read from environment variables with the PEERGATE_ prefix,
    or from a local ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ==========================================================================
    # LOGGING SETTINGS
    # ==========================================================================

    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
        validation_alias="PEERGATE_LOG_LEVEL",
    )
    log_format: str = Field(
        default="",
        description="Log format: 'json', 'text', or '' (auto-detect)",
        validation_alias="PEERGATE_LOG_FORMAT",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (optional)",
        validation_alias="PEERGATE_LOG_FILE",
    )

    # ==========================================================================
    # STORAGE SETTINGS
    # ==========================================================================

    storage_path: str = Field(
        default=str(Path.home() / ".peergate"),
        description="Base directory for membership snapshots",
        validation_alias="PEERGATE_STORAGE_PATH",
    )

    # ==========================================================================
    # ADMISSION SETTINGS
    # ==========================================================================

    acceptance_rate: float = Field(
        default=0.5,
        description="Fraction of current members that must vouch for a candidate",
        validation_alias="PEERGATE_ACCEPTANCE_RATE",
    )
    identity_secret_key: str | None = Field(
        default=None,
        description="Ed25519 secret key hex for this peer",
        validation_alias="PEERGATE_IDENTITY_SECRET_KEY",
    )
    ca_public_key: str | None = Field(
        default=None,
        description="Ed25519 public key hex of the group certificate authority",
        validation_alias="PEERGATE_CA_PUBLIC_KEY",
    )

    @field_validator("acceptance_rate")
    @classmethod
    def _check_rate(cls, value: float) -> float:
        if not 0.0 < value <= 1.0:
            raise ValueError("acceptance_rate must be in (0, 1]")
        return value

    @property
    def snapshot_dir(self) -> Path:
        """Directory holding per-group membership snapshots."""
        return Path(self.storage_path).expanduser() / "group"


# ==========================================================================
# GLOBAL CONFIG INSTANCE (lazy loaded)
# ==========================================================================

_config: CoreSettings | None = None


def get_config() -> CoreSettings:
    """Get the global configuration instance.

    Returns:
        The singleton CoreSettings instance.
    """
    global _config
    if _config is None:
        _config = CoreSettings()
    return _config


def clear_config_cache() -> None:
    """Clear the config cache. Useful for testing."""
    global _config
    _config = None
