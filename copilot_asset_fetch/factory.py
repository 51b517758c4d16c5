# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Factory functions for fetchers, installers and orchestrators."""

import logging

from .base import AssetFetcher, AssetInstaller
from .config import AssetFetchConfig
from .exceptions import UnsupportedProviderTypeError
from .file_installer import FileSystemInstaller
from .orchestrator import FetchOrchestrator
from .raw_http_fetcher import RawHTTPFetcher
from .resource_fetcher import BundledResourceFetcher
from .streaming_http_fetcher import StreamingHTTPFetcher

logger = logging.getLogger(__name__)


def create_fetcher(fetcher_type: str, **kwargs) -> AssetFetcher:
    """Factory function to create an asset fetcher.

    Args:
        fetcher_type: "http" / "streaming_http", "raw_http" or "resource"
        **kwargs: Fetcher-specific constructor arguments

    Returns:
        AssetFetcher instance

    Raises:
        UnsupportedProviderTypeError: If fetcher type is not supported

    Examples:
        >>> fetcher = create_fetcher("raw_http", timeout=2.0, strict=True)
        >>> fetcher = create_fetcher("resource", root="my_game.streaming_assets")
    """
    fetcher_type = fetcher_type.lower()

    if fetcher_type in ("http", "streaming_http"):
        return StreamingHTTPFetcher(**kwargs)
    elif fetcher_type == "raw_http":
        return RawHTTPFetcher(**kwargs)
    elif fetcher_type == "resource":
        return BundledResourceFetcher(**kwargs)
    else:
        raise UnsupportedProviderTypeError(f"Unsupported fetcher type: {fetcher_type}")


def create_installer(installer_type: str, **kwargs) -> AssetInstaller:
    """Factory function to create an asset installer.

    Args:
        installer_type: "filesystem"
        **kwargs: Installer-specific constructor arguments

    Raises:
        UnsupportedProviderTypeError: If installer type is not supported
    """
    installer_type = installer_type.lower()

    if installer_type == "filesystem":
        return FileSystemInstaller(**kwargs)
    else:
        raise UnsupportedProviderTypeError(f"Unsupported installer type: {installer_type}")


def create_orchestrator(config: AssetFetchConfig | None = None) -> FetchOrchestrator:
    """Build an orchestrator with the standard providers registered.

    The bundled resource fetcher (when a resource root is configured) is
    registered before the HTTP fetcher, followed by a filesystem installer
    rooted at ``config.install_root``.

    Args:
        config: Settings to use; defaults to AssetFetchConfig.from_env()
    """
    if config is None:
        config = AssetFetchConfig.from_env()

    orchestrator = FetchOrchestrator()

    if config.resource_root:
        orchestrator.register_fetcher(
            create_fetcher(
                "resource",
                root=config.resource_root,
                chunk_size=config.chunk_size,
                progress_interval=config.progress_interval,
            )
        )

    if config.http_client == "raw":
        http_fetcher = create_fetcher(
            "raw_http",
            timeout=config.timeout,
            strict=config.strict_http,
            chunk_size=config.chunk_size,
            progress_interval=config.progress_interval,
        )
    else:
        http_fetcher = create_fetcher(
            "streaming_http",
            chunk_size=config.chunk_size,
            progress_interval=config.progress_interval,
        )
    orchestrator.register_fetcher(http_fetcher)

    orchestrator.register_installer(create_installer("filesystem", base_dir=config.install_root))

    logger.info(
        f"Created orchestrator with {len(orchestrator.fetchers)} fetchers, "
        f"installing to {config.install_root}"
    )
    return orchestrator
