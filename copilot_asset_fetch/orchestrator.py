# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Fetch orchestration: resolve providers, run the transfer, clean up."""

import asyncio
import logging
from typing import Any, Callable, Generator

from .base import AssetFetcher, AssetInstaller, AssetSink
from .cancellation import CancellationToken
from .driver import FetchDriver
from .exceptions import AssetFetchError, InstallFailedError, InvalidArgumentError, ResolutionError
from .locator import Locator
from .progress import ProgressCallback, null_progress
from .registry import ProviderRegistry

logger = logging.getLogger(__name__)


class FetchHandle:
    """Completion token for one fetch-and-install operation.

    Awaiting the handle yields the number of bytes transferred, or raises the
    transfer's ``TransferFault`` / ``asyncio.CancelledError``. Completion of the
    handle does not wait for the installer to be closed; use ``wait_cleanup``
    for that.
    """

    def __init__(
        self,
        task: asyncio.Task,
        cancel_token: CancellationToken,
        source: Locator,
        destination: Locator,
    ):
        self._task = task
        self.cancel_token = cancel_token
        self.source = source
        self.destination = destination
        self._cleanup: asyncio.Task | None = None

    def __await__(self) -> Generator[Any, None, int]:
        return self._task.__await__()

    def cancel(self) -> bool:
        """Request cancellation of the transfer.

        Returns:
            False if the transfer had already finished
        """
        self.cancel_token.cancel()
        return self._task.cancel()

    def done(self) -> bool:
        return self._task.done()

    def cancelled(self) -> bool:
        return self._task.cancelled()

    def result(self) -> int:
        return self._task.result()

    def exception(self) -> BaseException | None:
        return self._task.exception()

    def add_done_callback(self, callback: Callable[["FetchHandle"], None]) -> None:
        self._task.add_done_callback(lambda _task: callback(self))

    @property
    def cleanup_done(self) -> bool:
        return self._cleanup is not None and self._cleanup.done()

    async def wait_cleanup(self) -> None:
        """Wait until the installer for this operation has been closed."""
        if self._cleanup is not None:
            await asyncio.wait({self._cleanup})

    def __repr__(self) -> str:
        state = "pending"
        if self._task.cancelled():
            state = "cancelled"
        elif self._task.done():
            state = "failed" if self._task.exception() else "done"
        return f"<FetchHandle {self.source} -> {self.destination} {state}>"


class FetchOrchestrator:
    """Composes fetcher and installer registries into managed transfers.

    Providers are registered during setup; ``fetch`` then resolves one of
    each per request. The orchestrator does not serialize access to an
    installer, so concurrent operations must target distinct installer
    instances.

    Example:
        >>> orchestrator = FetchOrchestrator()
        >>> orchestrator.register_fetcher(BundledResourceFetcher("my_game.assets"))
        >>> orchestrator.register_installer(FileSystemInstaller("/tmp/out"))
        >>> handle = orchestrator.fetch(
        ...     "fetch://streamingassets/foo.bin", "install://filestream/bar.bin"
        ... )
        >>> size = await handle
    """

    def __init__(self) -> None:
        self.fetchers: ProviderRegistry[AssetFetcher] = ProviderRegistry("fetcher")
        self.installers: ProviderRegistry[AssetInstaller] = ProviderRegistry("installer")
        self._pending: set[asyncio.Task] = set()

    def register_fetcher(self, fetcher: AssetFetcher) -> None:
        self.fetchers.register(fetcher)

    def register_installer(self, installer: AssetInstaller) -> None:
        self.installers.register(installer)

    def resolve_fetcher(self, source: Locator | str) -> AssetFetcher:
        """Return the fetcher for ``source``.

        Raises:
            InvalidArgumentError: If the locator is empty or malformed
            ResolutionError: If no registered fetcher can handle it
        """
        locator = _parse(source, "source")
        fetcher = self.fetchers.resolve(locator)
        if fetcher is None:
            raise ResolutionError(f"No fetcher can resolve source {locator}", side="fetcher", locator=str(locator))
        return fetcher

    def resolve_installer(self, destination: Locator | str) -> AssetInstaller:
        """Return the installer for ``destination``.

        Raises:
            InvalidArgumentError: If the locator is empty or malformed
            ResolutionError: If no registered installer can handle it
        """
        locator = _parse(destination, "destination")
        installer = self.installers.resolve(locator)
        if installer is None:
            raise ResolutionError(
                f"No installer can resolve destination {locator}", side="installer", locator=str(locator)
            )
        return installer

    def create_driver(self, source: Locator | str) -> FetchDriver:
        """Bind the fetcher for ``source`` into a reusable driver."""
        locator = _parse(source, "source")
        return FetchDriver(self.resolve_fetcher(locator), locator)

    def fetch(
        self,
        source: Locator | str,
        destination: Locator | str,
        progress: ProgressCallback | None = None,
    ) -> FetchHandle:
        """Start fetching ``source`` into ``destination``.

        Validation, resolution and opening the destination happen before this
        method returns; the transfer itself runs as a task on the current event
        loop. The installer is closed by a background task once the transfer
        reaches any terminal state.

        Awaiting the handle does not wait for that close. To reuse the same
        installer for another fetch, await ``handle.wait_cleanup()`` first;
        opening it while the previous sink is still open raises
        ``InstallFailedError``.

        Args:
            source: Source locator (e.g. 'https://cdn.example.com/a.bin')
            destination: Destination locator (e.g. 'install://filestream/a.bin')
            progress: Optional progress callback

        Returns:
            FetchHandle for the running transfer

        Raises:
            InvalidArgumentError: If either locator is empty or malformed
            ResolutionError: If no fetcher or installer matches
            InstallFailedError: If the destination cannot be opened
            RuntimeError: If called without a running event loop
        """
        source_locator = _parse(source, "source")
        dest_locator = _parse(destination, "destination")

        fetcher = self.resolve_fetcher(source_locator)
        installer = self.resolve_installer(dest_locator)

        loop = asyncio.get_running_loop()
        sink = self._open(installer, dest_locator)

        cancel_token = CancellationToken()
        transfer = loop.create_task(
            fetcher.fetch(source_locator, sink, progress or null_progress, cancel_token),
            name=f"fetch {source_locator}",
        )
        handle = FetchHandle(transfer, cancel_token, source_locator, dest_locator)
        handle._cleanup = self._track(
            loop.create_task(self._cleanup(installer, transfer, handle), name=f"cleanup {dest_locator}")
        )

        logger.info(
            f"Started fetch {source_locator} -> {dest_locator} "
            f"({type(fetcher).__name__} -> {type(installer).__name__})"
        )
        return handle

    async def wait_closed(self) -> None:
        """Wait for every outstanding cleanup task to finish."""
        if self._pending:
            await asyncio.wait(set(self._pending))

    @property
    def pending_cleanups(self) -> int:
        return len(self._pending)

    def _open(self, installer: AssetInstaller, locator: Locator) -> AssetSink:
        try:
            return installer.open(locator)
        except AssetFetchError:
            raise
        except Exception as e:
            error_msg = f"{type(installer).__name__} failed to open {locator}: {e}"
            logger.error(error_msg)
            raise InstallFailedError(error_msg, locator=str(locator)) from e

    def _track(self, task: asyncio.Task) -> asyncio.Task:
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _cleanup(self, installer: AssetInstaller, transfer: asyncio.Task, handle: FetchHandle) -> None:
        try:
            await asyncio.wait({transfer})
        finally:
            try:
                installer.close()
            except Exception:
                logger.exception(f"Closing {type(installer).__name__} for {handle.destination} failed")

        if transfer.cancelled():
            logger.info(f"Fetch {handle.source} cancelled")
        elif transfer.exception() is not None:
            logger.error(f"Fetch {handle.source} failed: {transfer.exception()}")
        else:
            logger.info(f"Fetch {handle.source} -> {handle.destination} completed ({transfer.result()} bytes)")


def _parse(value: Locator | str, name: str) -> Locator:
    if value is None:
        raise InvalidArgumentError(f"{name} locator is required")
    try:
        return Locator.coerce(value)
    except InvalidArgumentError as e:
        raise InvalidArgumentError(f"Invalid {name} locator: {e}") from e
