# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Bundled resource fetcher implementation."""

import asyncio
import logging
import os
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path

from .base import DEFAULT_CHUNK_SIZE, AssetFetcher, AssetSink
from .cancellation import CancellationToken
from .exceptions import InvalidArgumentError, TransferFault
from .locator import Locator
from .progress import (
    DEFAULT_PROGRESS_INTERVAL,
    INDETERMINATE,
    ProgressCallback,
    ProgressThrottle,
)

logger = logging.getLogger(__name__)

FETCH_SCHEME = "fetch"
STREAMING_ASSETS_HOST = "streamingassets"


class BundledResourceFetcher(AssetFetcher):
    """Fetcher for ``fetch://streamingassets/<path>`` sources.

    Resources are read from ``root``, which is either the name of an importable
    package (resolved with ``importlib.resources``) or a directory path. The
    total size is not known up front, so progress is always indeterminate.
    """

    def __init__(
        self,
        root: str | os.PathLike | Traversable,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        progress_interval: float = DEFAULT_PROGRESS_INTERVAL,
    ):
        """Initialize bundled resource fetcher.

        Args:
            root: Directory path, package name or Traversable holding the resources
            chunk_size: Size of chunks read from the resource
            progress_interval: Minimum seconds between progress events
        """
        if root is None:
            raise InvalidArgumentError("root is required")

        if isinstance(root, os.PathLike) or (isinstance(root, str) and os.path.isdir(root)):
            self.root: Traversable = Path(root)
        elif isinstance(root, str):
            self.root = resources.files(root)
        else:
            self.root = root
        self.chunk_size = chunk_size
        self.progress_interval = progress_interval

    def can_resolve(self, locator: Locator) -> bool:
        return locator.matches(FETCH_SCHEME, STREAMING_ASSETS_HOST)

    def locate(self, locator: Locator) -> Traversable:
        """Return the resource addressed by ``locator``.

        Raises:
            TransferFault: If the path is invalid or no such resource exists
        """
        parts = locator.relative_path.split("/")
        if not locator.relative_path or any(part in ("", ".", "..") for part in parts):
            raise TransferFault(f"Invalid resource path in {locator}", locator=str(locator))

        resource = self.root.joinpath(*parts)
        if not resource.is_file():
            raise TransferFault(f"Bundled resource not found: {locator.relative_path}", locator=str(locator))
        return resource

    async def fetch(
        self,
        locator: Locator,
        sink: AssetSink,
        progress: ProgressCallback,
        cancel_token: CancellationToken,
    ) -> int:
        throttle = ProgressThrottle(str(locator), progress, self.progress_interval, cancel_token)
        resource = self.locate(locator)

        logger.info(f"Reading bundled resource {locator.relative_path}")
        written = 0
        try:
            stream = await asyncio.to_thread(resource.open, "rb")
            try:
                while True:
                    chunk = await asyncio.to_thread(stream.read, self.chunk_size)
                    if not chunk:
                        break
                    cancel_token.raise_if_cancelled()
                    await sink.write(chunk)
                    written += len(chunk)
                    throttle.tick(INDETERMINATE)
            finally:
                stream.close()
        except OSError as e:
            error_msg = f"Reading bundled resource {locator.relative_path} failed: {e}"
            logger.error(error_msg)
            raise TransferFault(error_msg, locator=str(locator)) from e

        logger.info(f"Copied {written} bytes from bundled resource {locator.relative_path}")
        return written
