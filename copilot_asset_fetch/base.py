# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Base classes for fetchers, installers and the sinks that connect them."""

from abc import ABC, abstractmethod

from .cancellation import CancellationToken
from .locator import Locator
from .progress import ProgressCallback

DEFAULT_CHUNK_SIZE = 4 << 10
"""Read/write buffer size shared by the fetchers."""


class AssetSink(ABC):
    """Writable byte-stream destination opened by an installer."""

    @abstractmethod
    async def write(self, data: bytes) -> None:
        """Write a chunk of bytes.

        Args:
            data: Bytes to append to the destination
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the destination. Repeated calls are no-ops."""
        pass

    @property
    @abstractmethod
    def closed(self) -> bool:
        """True once the sink has been closed."""
        pass

    @property
    @abstractmethod
    def bytes_written(self) -> int:
        """Total number of bytes written so far."""
        pass


class AssetFetcher(ABC):
    """Abstract base class for asset fetchers.

    Fetchers are registered once and shared across operations, so
    implementations must not keep per-transfer state on the instance.
    """

    @abstractmethod
    def can_resolve(self, locator: Locator) -> bool:
        """Return True if this fetcher can retrieve ``locator``."""
        pass

    @abstractmethod
    async def fetch(
        self,
        locator: Locator,
        sink: AssetSink,
        progress: ProgressCallback,
        cancel_token: CancellationToken,
    ) -> int:
        """Stream the asset at ``locator`` into ``sink``.

        The sink is owned by the caller and must not be closed here.

        Args:
            locator: Source locator
            sink: Destination opened by an installer
            progress: Progress consumer
            cancel_token: Cooperative cancellation signal

        Returns:
            Number of bytes written to the sink

        Raises:
            TransferFault: If the transfer fails mid-flight
            asyncio.CancelledError: If the transfer was cancelled
        """
        pass


class AssetInstaller(ABC):
    """Abstract base class for asset installers.

    An installer holds at most one open sink at a time; use one instance per
    concurrent operation.
    """

    @abstractmethod
    def can_resolve(self, locator: Locator) -> bool:
        """Return True if this installer can write to ``locator``."""
        pass

    @abstractmethod
    def open(self, locator: Locator) -> AssetSink:
        """Open a writable sink for ``locator``.

        Raises:
            InstallFailedError: If the destination cannot be opened
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Close the current sink. Repeated calls are no-ops."""
        pass
