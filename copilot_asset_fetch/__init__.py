# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Copilot-for-Consensus Asset Fetch Adapter.

Resolves a pluggable fetcher for a source locator and a pluggable installer
for a destination locator, then runs the transfer asynchronously with
throttled progress reporting and guaranteed cleanup of the destination.
"""

__version__ = "0.1.0"

from .base import DEFAULT_CHUNK_SIZE, AssetFetcher, AssetInstaller, AssetSink
from .cancellation import CancellationToken
from .config import AssetFetchConfig, configure_logging
from .driver import FetchDriver
from .exceptions import (
    AssetFetchError,
    ConfigurationError,
    DuplicateRegistrationError,
    InstallFailedError,
    InvalidArgumentError,
    ResolutionError,
    TransferFault,
    UnsupportedProviderTypeError,
)
from .factory import create_fetcher, create_installer, create_orchestrator
from .file_installer import FileSink, FileSystemInstaller
from .locator import Locator
from .orchestrator import FetchHandle, FetchOrchestrator
from .progress import (
    INDETERMINATE,
    ProgressCallback,
    ProgressEvent,
    ProgressThrottle,
    null_progress,
)
from .raw_http_fetcher import RawHTTPFetcher
from .registry import ProviderRegistry
from .resource_fetcher import BundledResourceFetcher
from .streaming_http_fetcher import StreamingHTTPFetcher

__all__ = [
    # Version
    "__version__",
    # Base classes
    "AssetFetcher",
    "AssetInstaller",
    "AssetSink",
    "DEFAULT_CHUNK_SIZE",
    # Models
    "Locator",
    "ProgressEvent",
    "ProgressCallback",
    "ProgressThrottle",
    "INDETERMINATE",
    "null_progress",
    "CancellationToken",
    # Orchestration
    "ProviderRegistry",
    "FetchOrchestrator",
    "FetchHandle",
    "FetchDriver",
    # Fetchers
    "StreamingHTTPFetcher",
    "RawHTTPFetcher",
    "BundledResourceFetcher",
    # Installers
    "FileSystemInstaller",
    "FileSink",
    # Configuration and factory
    "AssetFetchConfig",
    "configure_logging",
    "create_fetcher",
    "create_installer",
    "create_orchestrator",
    # Exceptions
    "AssetFetchError",
    "InvalidArgumentError",
    "DuplicateRegistrationError",
    "ResolutionError",
    "InstallFailedError",
    "TransferFault",
    "ConfigurationError",
    "UnsupportedProviderTypeError",
]
