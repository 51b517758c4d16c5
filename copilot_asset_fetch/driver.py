# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Fetch driver: a fetcher bound to a single source locator."""

import logging

from .base import AssetFetcher, AssetSink
from .cancellation import CancellationToken
from .exceptions import InvalidArgumentError
from .locator import Locator
from .progress import ProgressCallback, null_progress

logger = logging.getLogger(__name__)


class FetchDriver:
    """Streams one source into caller-owned sinks.

    Unlike ``FetchOrchestrator.fetch`` the caller owns the sink and its
    lifetime; the driver never closes it.

    Example:
        >>> async with orchestrator.create_driver("https://cdn.example.com/a.bin") as driver:
        ...     await driver.fetch(sink)
    """

    def __init__(self, fetcher: AssetFetcher, source: Locator | str):
        if fetcher is None:
            raise InvalidArgumentError("fetcher is required")

        self.fetcher = fetcher
        self.source = Locator.coerce(source)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def fetch(
        self,
        sink: AssetSink,
        cancel_token: CancellationToken | None = None,
        progress: ProgressCallback | None = None,
    ) -> int:
        """Stream the bound source into ``sink``.

        Returns:
            Number of bytes written

        Raises:
            InvalidArgumentError: If the driver was closed or sink is None
        """
        if self._closed:
            raise InvalidArgumentError(f"Driver for {self.source} is closed")
        if sink is None:
            raise InvalidArgumentError("sink is required")

        return await self.fetcher.fetch(
            self.source,
            sink,
            progress or null_progress,
            cancel_token or CancellationToken(),
        )

    def close(self) -> None:
        if not self._closed:
            logger.debug(f"Closed fetch driver for {self.source}")
        self._closed = True

    async def __aenter__(self) -> "FetchDriver":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
