# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Low-level HTTP fetcher implementation with an explicit timeout race.

The response is raced against a timer task. With the default ``strict=False``
this fetcher keeps its legacy contract: a timeout or a non-200 status ends the
fetch with zero bytes written and no exception. Pass ``strict=True`` to raise
``TransferFault`` in both cases instead.
"""

import asyncio
import logging

import aiohttp

from .base import DEFAULT_CHUNK_SIZE, AssetFetcher, AssetSink
from .cancellation import CancellationToken
from .exceptions import InvalidArgumentError, TransferFault
from .locator import Locator
from .progress import (
    DEFAULT_PROGRESS_INTERVAL,
    ProgressCallback,
    ProgressThrottle,
    progress_ratio,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0
HTTP_OK = 200


class RawHTTPFetcher(AssetFetcher):
    """Fetcher for http/https sources using aiohttp directly."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        strict: bool = False,
        session: aiohttp.ClientSession | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        progress_interval: float = DEFAULT_PROGRESS_INTERVAL,
    ):
        """Initialize raw HTTP fetcher.

        Args:
            timeout: Seconds to wait for the response before giving up
            strict: Raise TransferFault on timeout or non-200 status
            session: Optional shared aiohttp session (None = one session per fetch)
            chunk_size: Size of body chunks handed to the sink
            progress_interval: Minimum seconds between progress events

        Raises:
            InvalidArgumentError: If timeout is negative
        """
        if timeout < 0:
            raise InvalidArgumentError(f"timeout must not be negative, got {timeout}")

        self.timeout = timeout
        self.strict = strict
        self._session = session
        self.chunk_size = chunk_size
        self.progress_interval = progress_interval

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

        logger.info(f"Requesting {locator} (timeout {self.timeout}s)")
        try:
            if self._session is not None:
                return await self._fetch(self._session, locator, sink, throttle, cancel_token)

            # The timer race is the only response timeout
            timeout = aiohttp.ClientTimeout(total=None)
            async with aiohttp.ClientSession(timeout=timeout) as session:
                return await self._fetch(session, locator, sink, throttle, cancel_token)
        except aiohttp.ClientError as e:
            error_msg = f"HTTP fetch failed for {locator}: {e}"
            logger.error(error_msg)
            raise TransferFault(error_msg, locator=str(locator)) from e

    async def _fetch(
        self,
        session: aiohttp.ClientSession,
        locator: Locator,
        sink: AssetSink,
        throttle: ProgressThrottle,
        cancel_token: CancellationToken,
    ) -> int:
        request = asyncio.create_task(self._send(session, locator))
        timer = asyncio.create_task(asyncio.sleep(self.timeout))
        try:
            done, _ = await asyncio.wait({request, timer}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            timer.cancel()
            await _abort(request)
            raise

        if request not in done:
            await _abort(request)
            return self._give_up(f"Timed out after {self.timeout}s waiting for {locator}", locator)

        timer.cancel()
        response = request.result()
        async with response:
            if response.status != HTTP_OK:
                return self._give_up(f"HTTP {response.status} fetching {locator}", locator, response.status)

            total = response.content_length
            written = 0
            async for chunk in response.content.iter_chunked(self.chunk_size):
                cancel_token.raise_if_cancelled()
                await sink.write(chunk)
                written += len(chunk)
                throttle.tick(progress_ratio(written, total))

        logger.info(f"Downloaded {written} bytes from {locator}")
        return written

    async def _send(self, session: aiohttp.ClientSession, locator: Locator) -> aiohttp.ClientResponse:
        return await session.get(locator.url)

    def _give_up(self, message: str, locator: Locator, status_code: int | None = None) -> int:
        if self.strict:
            logger.error(message)
            raise TransferFault(message, locator=str(locator), status_code=status_code)

        logger.warning(f"{message}; completing with zero bytes")
        return 0


async def _abort(request: asyncio.Task) -> None:
    """Cancel an in-flight request task and release any response it produced."""
    request.cancel()
    await asyncio.wait({request})
    if request.cancelled():
        return
    if request.exception() is None:
        request.result().release()
