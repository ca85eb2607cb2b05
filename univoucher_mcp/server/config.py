"""Configuration management with validation.

This module provides centralized configuration for the UniVoucher MCP server with:
- YAML file support (univoucher_config.yml)
- Environment variable overrides
- Validation in dataclass __post_init__
- Type-safe configuration classes

Configuration precedence (highest to lowest):
1. Environment variables (UNIVOUCHER_*)
2. YAML config file
3. Default values

Example univoucher_config.yml:
    api:
      base_url: "https://api.univoucher.com/v1"
      timeout_seconds: 30
      max_retries: 1

    docs:
      docs_path: "./docs"

    server:
      log_level: "INFO"
      log_format: "text"

Usage:
    config = load_config()
    provider = UniVoucherAPIProvider(config.api, signing_key=config.signing_key)
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
DEFAULT_CONFIG_FILE = "univoucher_config.yml"
CREDENTIAL_PREFIX = "0x"


def normalize_credential(raw: str | None) -> str | None:
    """Strip whitespace and the optional 0x prefix from a signing key.

    Returns:
        Canonical key, or None when nothing usable was supplied
    """
    if raw is None:
        return None
    key = raw.strip()
    if key[:2].lower() == CREDENTIAL_PREFIX:
        key = key[2:]
    return key or None


@dataclass(frozen=True)
class APIConfig:
    """Remote UniVoucher REST API configuration.

    Attributes:
        version: Configuration schema version (for migration compatibility)
        base_url: Base URL of the v1 REST API
        openapi_url: URL of the machine-readable OpenAPI document
        timeout_seconds: Per-request timeout
        max_retries: Retries on transient failures (timeouts, connection errors, 5xx)
    """

    version: str = "1.0.0"
    base_url: str = "https://api.univoucher.com/v1"
    openapi_url: str = "https://api.univoucher.com/openapi.yaml"
    timeout_seconds: float = 30.0
    max_retries: int = 1

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not self.base_url.startswith(("http://", "https://")):
            msg = f"base_url must be an http(s) URL, got '{self.base_url}'"
            raise ValueError(msg)

        if not self.openapi_url.startswith(("http://", "https://")):
            msg = f"openapi_url must be an http(s) URL, got '{self.openapi_url}'"
            raise ValueError(msg)

        if self.timeout_seconds <= 0:
            msg = f"timeout_seconds must be > 0, got {self.timeout_seconds}"
            raise ValueError(msg)

        if not (0 <= self.max_retries <= 3):
            msg = f"max_retries must be 0-3, got {self.max_retries}"
            raise ValueError(msg)

        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))


@dataclass(frozen=True)
class DocsConfig:
    """Documentation source configuration.

    Attributes:
        version: Configuration schema version (for migration compatibility)
        docs_path: Directory holding the Markdown documentation tree
    """

    version: str = "1.0.0"
    # Source-checkout default; installed packages set UNIVOUCHER_DOCS_PATH
    docs_path: str = str(PROJECT_ROOT / "docs")

    def __post_init__(self) -> None:
        """Normalize docs_path (use object.__setattr__ for frozen dataclass)."""
        normalized_path = str(Path(self.docs_path).expanduser().resolve())
        object.__setattr__(self, "docs_path", normalized_path)


@dataclass(frozen=True)
class ServerConfig:
    """Server configuration.

    Attributes:
        version: Configuration schema version (for migration compatibility)
        name: MCP server name announced to clients
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: "text" for human-readable lines, "json" for structured output
    """

    version: str = "1.0.0"
    name: str = "univoucher-mcp"
    log_level: str = "INFO"
    log_format: str = "text"

    def __post_init__(self) -> None:
        """Validate configuration."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.log_level.upper() not in valid_levels:
            msg = f"log_level must be one of {valid_levels}, got '{self.log_level}'"
            raise ValueError(msg)
        object.__setattr__(self, "log_level", self.log_level.upper())

        if self.log_format not in ["text", "json"]:
            msg = f"log_format must be 'text' or 'json', got '{self.log_format}'"
            raise ValueError(msg)


@dataclass
class Config:
    """Root configuration object.

    Attributes:
        api: Remote API configuration
        docs: Documentation configuration
        server: Server configuration
        signing_key: Normalized signing key for create_gift_card (never logged)
        _config_path: Path to the config file that was loaded, if any
    """

    api: APIConfig = field(default_factory=APIConfig)
    docs: DocsConfig = field(default_factory=DocsConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    signing_key: str | None = field(default=None, repr=False)
    _config_path: Path | None = None

    def __post_init__(self) -> None:
        self.signing_key = normalize_credential(self.signing_key)

    @property
    def has_signing_key(self) -> bool:
        return self.signing_key is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary (signing key reported as a presence flag only).

        Returns:
            Dictionary representation of config
        """
        return {
            "api": dict(self.api.__dict__),
            "docs": dict(self.docs.__dict__),
            "server": dict(self.server.__dict__),
            "signing_key_configured": self.has_signing_key,
            "config_path": str(self._config_path) if self._config_path else None,
        }


def _section(yaml_config: dict[str, Any], name: str) -> dict[str, Any]:
    section = yaml_config.get(name) or {}
    if not isinstance(section, dict):
        msg = f"Config section '{name}' must be a mapping, got {type(section).__name__}"
        raise ValueError(msg)
    return section


def load_config(config_path: Path | str | None = None) -> Config:
    """Load configuration from YAML file and environment variables.

    Precedence (highest to lowest):
    1. Environment variables (UNIVOUCHER_*)
    2. YAML config file
    3. Default values

    Args:
        config_path: Optional path to config YAML file (default: ./univoucher_config.yml)

    Returns:
        Config object

    Raises:
        ValueError: If the resulting configuration fails validation

    Environment variables:
        UNIVOUCHER_API_BASE_URL: REST API base URL
        UNIVOUCHER_OPENAPI_URL: OpenAPI document URL
        UNIVOUCHER_TIMEOUT_SECONDS: Per-request timeout
        UNIVOUCHER_MAX_RETRIES: Retries on transient failures
        UNIVOUCHER_DOCS_PATH: Documentation root directory
        UNIVOUCHER_LOG_LEVEL: Log level (DEBUG/INFO/WARNING/ERROR/CRITICAL)
        UNIVOUCHER_LOG_FORMAT: Log format (text/json)
        UNIVOUCHER_PRIVATE_KEY: Signing key, with or without 0x prefix
    """
    config = Config()

    config_path = Path(config_path) if config_path is not None else Path(DEFAULT_CONFIG_FILE)

    if config_path.exists():
        logger.info("Loading configuration from %s", config_path)
        try:
            with open(config_path, encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f) or {}

            api_dict = _section(yaml_config, "api")
            config.api = APIConfig(**{**config.api.__dict__, **api_dict})

            docs_dict = _section(yaml_config, "docs")
            config.docs = DocsConfig(**{**config.docs.__dict__, **docs_dict})

            server_dict = _section(yaml_config, "server")
            config.server = ServerConfig(**{**config.server.__dict__, **server_dict})

            config._config_path = config_path
            logger.info("Configuration loaded from %s", config_path)

        except (OSError, TypeError, yaml.YAMLError) as e:
            logger.warning("Failed to load config from %s: %s", config_path, e)
            logger.info("Using default configuration with environment overrides")

    # API config
    if os.getenv("UNIVOUCHER_API_BASE_URL"):
        config.api = APIConfig(
            **{**config.api.__dict__, "base_url": os.getenv("UNIVOUCHER_API_BASE_URL")}
        )

    if os.getenv("UNIVOUCHER_OPENAPI_URL"):
        config.api = APIConfig(
            **{**config.api.__dict__, "openapi_url": os.getenv("UNIVOUCHER_OPENAPI_URL")}
        )

    if os.getenv("UNIVOUCHER_TIMEOUT_SECONDS"):
        config.api = APIConfig(
            **{
                **config.api.__dict__,
                "timeout_seconds": float(os.getenv("UNIVOUCHER_TIMEOUT_SECONDS")),
            }
        )

    if os.getenv("UNIVOUCHER_MAX_RETRIES"):
        config.api = APIConfig(
            **{**config.api.__dict__, "max_retries": int(os.getenv("UNIVOUCHER_MAX_RETRIES"))}
        )

    # Docs config
    if os.getenv("UNIVOUCHER_DOCS_PATH"):
        config.docs = DocsConfig(
            **{**config.docs.__dict__, "docs_path": os.getenv("UNIVOUCHER_DOCS_PATH")}
        )

    # Server config
    if os.getenv("UNIVOUCHER_LOG_LEVEL"):
        config.server = ServerConfig(
            **{**config.server.__dict__, "log_level": os.getenv("UNIVOUCHER_LOG_LEVEL")}
        )

    if os.getenv("UNIVOUCHER_LOG_FORMAT"):
        config.server = ServerConfig(
            **{**config.server.__dict__, "log_format": os.getenv("UNIVOUCHER_LOG_FORMAT")}
        )

    # Credential
    config.signing_key = normalize_credential(os.getenv("UNIVOUCHER_PRIVATE_KEY"))
    if config.has_signing_key:
        logger.info("Signing key configured; create_gift_card is enabled")
    else:
        logger.info("No signing key configured; create_gift_card will be rejected")

    return config


__all__ = [
    "APIConfig",
    "Config",
    "DocsConfig",
    "ServerConfig",
    "load_config",
    "normalize_credential",
]
