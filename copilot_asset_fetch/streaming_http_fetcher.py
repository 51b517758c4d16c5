# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Streaming HTTP fetcher implementation backed by httpx."""

import logging

import httpx

from .base import DEFAULT_CHUNK_SIZE, AssetFetcher, AssetSink
from .cancellation import CancellationToken
from .exceptions import TransferFault
from .locator import Locator
from .progress import (
    DEFAULT_PROGRESS_INTERVAL,
    ProgressCallback,
    ProgressThrottle,
    progress_ratio,
)

logger = logging.getLogger(__name__)

DEFAULT_HTTP_TIMEOUT = 60.0


class _DownloadHandler:
    """Receives the content length and body chunks of one response."""

    def __init__(self, sink: AssetSink, throttle: ProgressThrottle):
        self.sink = sink
        self.throttle = throttle
        self.content_length: int | None = None
        self.downloaded = 0
        self.received = 0

    def receive_content_length(self, header: str | None) -> None:
        if header and header.isdigit():
            self.content_length = int(header)

    async def receive_data(self, chunk: bytes, received: int) -> None:
        """Write a decoded chunk.

        Args:
            chunk: Decoded body bytes
            received: Encoded bytes read off the wire so far, comparable to Content-Length
        """
        await self.sink.write(chunk)
        self.downloaded += len(chunk)
        self.received = received
        self.throttle.tick(self.progress)

    @property
    def progress(self) -> float | None:
        return progress_ratio(self.received, self.content_length)


class StreamingHTTPFetcher(AssetFetcher):
    """Fetcher for http/https sources using a managed streaming client.

    When no client is injected a fresh ``httpx.AsyncClient`` is created per
    fetch, so one instance can serve concurrent operations. An injected client
    is shared and never closed by the fetcher.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = DEFAULT_HTTP_TIMEOUT,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        progress_interval: float = DEFAULT_PROGRESS_INTERVAL,
        headers: dict[str, str] | None = None,
    ):
        """Initialize streaming HTTP fetcher.

        Args:
            client: Optional shared httpx client (None = one client per fetch)
            timeout: Transport timeout in seconds for self-created clients
            chunk_size: Size of body chunks handed to the sink
            progress_interval: Minimum seconds between progress events
            headers: Extra request headers
        """
        self._client = client
        self.timeout = timeout
        self.chunk_size = chunk_size
        self.progress_interval = progress_interval
        self.headers = dict(headers or {})

    def can_resolve(self, locator: Locator) -> bool:
        return locator.is_http()

    async def fetch(
        self,
        locator: Locator,
        sink: AssetSink,
        progress: ProgressCallback,
        cancel_token: CancellationToken,
    ) -> int:
        throttle = ProgressThrottle(str(locator), progress, self.progress_interval, cancel_token)
        handler = _DownloadHandler(sink, throttle)

        logger.info(f"Downloading {locator}")
        try:
            if self._client is not None:
                await self._stream(self._client, locator, handler, cancel_token)
            else:
                async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                    await self._stream(client, locator, handler, cancel_token)
        except httpx.HTTPError as e:
            error_msg = f"HTTP fetch failed for {locator}: {e}"
            logger.error(error_msg)
            raise TransferFault(error_msg, locator=str(locator)) from e
        except OSError as e:
            error_msg = f"Writing {locator} to sink failed: {e}"
            logger.error(error_msg)
            raise TransferFault(error_msg, locator=str(locator)) from e

        logger.info(f"Downloaded {handler.downloaded} bytes from {locator}")
        return handler.downloaded

    async def _stream(
        self,
        client: httpx.AsyncClient,
        locator: Locator,
        handler: _DownloadHandler,
        cancel_token: CancellationToken,
    ) -> None:
        async with client.stream("GET", locator.url, headers=self.headers) as response:
            if not response.is_success:
                error_msg = f"HTTP {response.status_code} fetching {locator}"
                logger.error(error_msg)
                raise TransferFault(error_msg, locator=str(locator), status_code=response.status_code)

            handler.receive_content_length(response.headers.get("Content-Length"))
            async for chunk in response.aiter_bytes(self.chunk_size):
                cancel_token.raise_if_cancelled()
                await handler.receive_data(chunk, response.num_bytes_downloaded)
