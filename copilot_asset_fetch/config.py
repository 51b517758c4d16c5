# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Environment-driven configuration for asset fetching."""

import logging
import os
from dataclasses import dataclass

from .exceptions import ConfigurationError

HTTP_CLIENT_TYPES = ("streaming", "raw")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _env_int(env_var: str, fallback: int) -> int:
    raw = os.getenv(env_var)
    if raw is None or raw.strip() == "":
        return fallback
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{env_var} must be an integer, got {raw!r}") from e
    if value < 0:
        raise ConfigurationError(f"{env_var} must not be negative, got {value}")
    return value


def _env_bool(env_var: str, fallback: bool) -> bool:
    raw = os.getenv(env_var)
    if raw is None or raw.strip() == "":
        return fallback
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    raise ConfigurationError(f"{env_var} must be a boolean, got {raw!r}")


@dataclass
class AssetFetchConfig:
    """Settings used to build a ready-to-use orchestrator."""

    install_root: str = "./installed_assets"
    """Base directory for the filesystem installer."""

    resource_root: str | None = None
    """Package name or directory holding bundled resources (None = no resource fetcher)."""

    http_client: str = "streaming"
    """HTTP fetcher flavour: 'streaming' (httpx) or 'raw' (aiohttp)."""

    timeout_ms: int = 5000
    """Response timeout for the raw HTTP fetcher."""

    progress_interval_ms: int = 125
    """Minimum milliseconds between progress events."""

    chunk_size: int = 4096
    """Read/write buffer size."""

    strict_http: bool = False
    """Raise TransferFault on raw HTTP timeouts and non-200 responses."""

    log_level: str = "INFO"

    def __post_init__(self) -> None:
        self.http_client = self.http_client.lower()
        self.log_level = self.log_level.upper()
        if self.http_client not in HTTP_CLIENT_TYPES:
            raise ConfigurationError(
                f"Unknown http_client: {self.http_client}. Must be one of: {', '.join(HTTP_CLIENT_TYPES)}"
            )
        if self.log_level not in LOG_LEVELS:
            raise ConfigurationError(f"Invalid log level: {self.log_level}. Must be one of {list(LOG_LEVELS)}")
        if self.chunk_size <= 0:
            raise ConfigurationError(f"chunk_size must be positive, got {self.chunk_size}")
        if self.timeout_ms < 0 or self.progress_interval_ms < 0:
            raise ConfigurationError("timeout_ms and progress_interval_ms must not be negative")

    @property
    def timeout(self) -> float:
        return self.timeout_ms / 1000

    @property
    def progress_interval(self) -> float:
        return self.progress_interval_ms / 1000

    @classmethod
    def from_env(cls, **overrides) -> "AssetFetchConfig":
        """Build a config from ASSET_FETCH_* environment variables.

        Explicit keyword overrides win over the environment, which wins over
        the defaults.

        Raises:
            ConfigurationError: If a variable holds an invalid value
        """
        values = {
            "install_root": os.getenv("ASSET_FETCH_INSTALL_ROOT") or cls.install_root,
            "resource_root": os.getenv("ASSET_FETCH_RESOURCE_ROOT") or None,
            "http_client": os.getenv("ASSET_FETCH_HTTP_CLIENT") or cls.http_client,
            "timeout_ms": _env_int("ASSET_FETCH_TIMEOUT_MS", cls.timeout_ms),
            "progress_interval_ms": _env_int("ASSET_FETCH_PROGRESS_INTERVAL_MS", cls.progress_interval_ms),
            "chunk_size": _env_int("ASSET_FETCH_CHUNK_SIZE", cls.chunk_size),
            "strict_http": _env_bool("ASSET_FETCH_STRICT_HTTP", cls.strict_http),
            "log_level": os.getenv("LOG_LEVEL") or cls.log_level,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for scripts that use this package.

    Args:
        level: Logging level; defaults to LOG_LEVEL env or INFO
    """
    level = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    if level not in LOG_LEVELS:
        raise ConfigurationError(f"Invalid log level: {level}. Must be one of {list(LOG_LEVELS)}")
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
