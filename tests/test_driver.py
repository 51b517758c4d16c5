# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Tests for FetchDriver."""

import asyncio

import pytest
from copilot_asset_fetch import CancellationToken, FetchDriver, InvalidArgumentError, Locator

from fakes import MemorySink, StaticFetcher


class TestFetchDriver:
    """Tests for FetchDriver."""

    def test_requires_fetcher(self):
        with pytest.raises(InvalidArgumentError):
            FetchDriver(None, "src://cdn/a.bin")

    def test_source_is_parsed(self):
        driver = FetchDriver(StaticFetcher(), "SRC://CDN/a.bin")

        assert driver.source == Locator("src", "cdn", "/a.bin")

    @pytest.mark.asyncio
    async def test_fetch_into_caller_sinks(self):
        """Test the driver can fill several sinks and never closes them."""
        fetcher = StaticFetcher(payload=b"reusable")
        driver = FetchDriver(fetcher, "src://cdn/a.bin")
        first, second = MemorySink(), MemorySink()

        assert await driver.fetch(first) == 8
        assert await driver.fetch(second) == 8

        assert bytes(first.buffer) == bytes(second.buffer) == b"reusable"
        assert first.close_calls == second.close_calls == 0
        assert fetcher.calls == 2

    @pytest.mark.asyncio
    async def test_fetch_reports_progress(self, memory_sink):
        events = []
        driver = FetchDriver(StaticFetcher(payload=b"abcdefgh"), "src://cdn/a.bin")

        await driver.fetch(memory_sink, progress=events.append)

        assert [event.progress for event in events] == [0.5, 1.0]

    @pytest.mark.asyncio
    async def test_fetch_with_cancelled_token(self, memory_sink):
        token = CancellationToken()
        token.cancel()
        driver = FetchDriver(StaticFetcher(), "src://cdn/a.bin")

        with pytest.raises(asyncio.CancelledError):
            await driver.fetch(memory_sink, cancel_token=token)

    @pytest.mark.asyncio
    async def test_fetch_requires_sink(self):
        driver = FetchDriver(StaticFetcher(), "src://cdn/a.bin")

        with pytest.raises(InvalidArgumentError):
            await driver.fetch(None)

    @pytest.mark.asyncio
    async def test_closed_driver_rejects_fetch(self, memory_sink):
        async with FetchDriver(StaticFetcher(), "src://cdn/a.bin") as driver:
            assert not driver.closed

        assert driver.closed
        with pytest.raises(InvalidArgumentError):
            await driver.fetch(memory_sink)

        driver.close()
        assert driver.closed
