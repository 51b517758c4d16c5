# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Local filesystem installer implementation."""

import asyncio
import logging
from pathlib import Path
from typing import BinaryIO

from .base import AssetInstaller, AssetSink
from .exceptions import InstallFailedError, InvalidArgumentError
from .locator import Locator

logger = logging.getLogger(__name__)

INSTALL_SCHEME = "install"
FILESTREAM_HOST = "filestream"


class FileSink(AssetSink):
    """Sink that writes to an open binary file on a worker thread.

    Every chunk is flushed, so bytes are visible on disk as soon as the
    transfer completes, before the installer is closed.
    """

    def __init__(self, fp: BinaryIO, path: Path):
        self._fp = fp
        self.path = path
        self._bytes_written = 0

    async def write(self, data: bytes) -> None:
        if self._fp.closed:
            raise ValueError(f"write to closed sink {self.path}")
        await asyncio.to_thread(self._write, data)
        self._bytes_written += len(data)

    def _write(self, data: bytes) -> None:
        self._fp.write(data)
        self._fp.flush()

    def close(self) -> None:
        if not self._fp.closed:
            self._fp.close()
            logger.debug(f"Closed {self.path} after {self._bytes_written} bytes")

    @property
    def closed(self) -> bool:
        return self._fp.closed

    @property
    def bytes_written(self) -> int:
        return self._bytes_written


class FileSystemInstaller(AssetInstaller):
    """Installer for ``install://filestream/<path>`` destinations.

    The locator path is mapped onto ``base_dir``; missing intermediate
    directories are created on open. One instance holds one open file at a
    time, so concurrent operations need one installer each.
    """

    def __init__(self, base_dir: str | Path):
        """Initialize filesystem installer.

        Args:
            base_dir: Directory that install paths are resolved against
        """
        if base_dir is None:
            raise InvalidArgumentError("base_dir is required")

        self.base_dir = Path(base_dir)
        self._sink: FileSink | None = None

    @property
    def current_sink(self) -> FileSink | None:
        return self._sink

    def can_resolve(self, locator: Locator) -> bool:
        return locator.matches(INSTALL_SCHEME, FILESTREAM_HOST)

    def resolve_path(self, locator: Locator) -> Path:
        """Map a locator onto a file path under ``base_dir``.

        Raises:
            InstallFailedError: If the path is empty or escapes ``base_dir``
        """
        relative = locator.relative_path
        if not relative or relative.endswith("/"):
            raise InstallFailedError(f"Install locator {locator} does not name a file", locator=str(locator))

        base = self.base_dir.resolve()
        target = (base / relative).resolve()
        if not target.is_relative_to(base):
            raise InstallFailedError(
                f"Install locator {locator} escapes base directory {base}", locator=str(locator)
            )
        return target

    def open(self, locator: Locator) -> FileSink:
        """Create (or truncate) the destination file and return its sink."""
        if self._sink is not None and not self._sink.closed:
            raise InstallFailedError(
                f"Installer already has an open sink at {self._sink.path}", locator=str(locator)
            )

        target = self.resolve_path(locator)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fp = open(target, "wb")
        except OSError as e:
            error_msg = f"Failed to open install destination {target}: {e}"
            logger.error(error_msg)
            raise InstallFailedError(error_msg, locator=str(locator)) from e

        logger.info(f"Opened install destination {target}")
        self._sink = FileSink(fp, target)
        return self._sink

    def close(self) -> None:
        sink, self._sink = self._sink, None
        if sink is not None:
            sink.close()
