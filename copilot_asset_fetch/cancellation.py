# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Cooperative cancellation signal shared by a transfer and its caller."""

import asyncio


class CancellationToken:
    """Cancellation signal checked by fetchers at I/O suspension points.

    Cancelling the token does not interrupt an await on its own; the
    orchestrator pairs it with ``Task.cancel()`` so in-flight requests are
    aborted immediately while fetchers that poll the token unwind at the next
    chunk boundary.

    Example:
        >>> token = CancellationToken()
        >>> token.cancel()
        >>> token.is_cancelled()
        True
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        """Signal that cancellation has been requested."""
        self._event.set()

    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        """Raise ``asyncio.CancelledError`` if cancellation was requested."""
        if self._event.is_set():
            raise asyncio.CancelledError("fetch cancelled")

    async def wait(self) -> None:
        """Wait until cancellation is requested."""
        await self._event.wait()
