# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Tests for CancellationToken."""

import asyncio

import pytest
from copilot_asset_fetch import CancellationToken


class TestCancellationToken:
    """Tests for CancellationToken."""

    def test_initial_state(self):
        token = CancellationToken()

        assert not token.is_cancelled()
        token.raise_if_cancelled()

    def test_cancel_is_idempotent(self):
        token = CancellationToken()

        token.cancel()
        token.cancel()

        assert token.is_cancelled()

    def test_raise_if_cancelled(self):
        token = CancellationToken()
        token.cancel()

        with pytest.raises(asyncio.CancelledError):
            token.raise_if_cancelled()

    @pytest.mark.asyncio
    async def test_wait_returns_after_cancel(self):
        token = CancellationToken()
        waiter = asyncio.create_task(token.wait())
        await asyncio.sleep(0)

        assert not waiter.done()

        token.cancel()
        await asyncio.wait_for(waiter, timeout=1.0)

        assert waiter.done()
