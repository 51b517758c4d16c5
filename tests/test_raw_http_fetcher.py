# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Tests for the aiohttp fetcher with its timeout race."""

import asyncio
from contextlib import asynccontextmanager

import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer
from copilot_asset_fetch import (
    CancellationToken,
    InvalidArgumentError,
    Locator,
    RawHTTPFetcher,
    TransferFault,
)

PAYLOAD = bytes(range(256)) * 64


async def payload_handler(request):
    return web.Response(body=PAYLOAD, content_type="application/octet-stream")


async def chunked_handler(request):
    response = web.StreamResponse()
    response.enable_chunked_encoding()
    await response.prepare(request)
    for index in range(4):
        await response.write(b"part-%d;" % index)
    await response.write_eof()
    return response


async def slow_handler(request):
    await asyncio.sleep(0.5)
    return web.Response(body=b"too late")


async def missing_handler(request):
    return web.Response(status=404, text="missing")


@asynccontextmanager
async def serve():
    """Run a local aiohttp server with the test routes."""
    app = web.Application()
    app.router.add_get("/payload.bin", payload_handler)
    app.router.add_get("/chunked.bin", chunked_handler)
    app.router.add_get("/slow.bin", slow_handler)
    app.router.add_get("/missing.bin", missing_handler)

    server = TestServer(app)
    await server.start_server()
    try:
        yield server
    finally:
        await server.close()


def locator_for(server: TestServer, path: str) -> Locator:
    return Locator.parse(str(server.make_url(path)))


class TestRawHTTPFetcher:
    """Tests for RawHTTPFetcher."""

    def test_negative_timeout_rejected(self):
        with pytest.raises(InvalidArgumentError):
            RawHTTPFetcher(timeout=-1)

    def test_defaults(self):
        fetcher = RawHTTPFetcher()

        assert fetcher.timeout == 5.0
        assert fetcher.strict is False

    def test_can_resolve_http_schemes(self):
        fetcher = RawHTTPFetcher()

        assert fetcher.can_resolve(Locator.parse("http://example.com/a"))
        assert not fetcher.can_resolve(Locator.parse("install://filestream/a"))

    @pytest.mark.asyncio
    async def test_fetch_with_progress(self, memory_sink):
        """Test a successful download writes every byte and reports progress."""
        events = []
        async with serve() as server:
            fetcher = RawHTTPFetcher(progress_interval=0.0, chunk_size=1024)
            written = await fetcher.fetch(
                locator_for(server, "/payload.bin"), memory_sink, events.append, CancellationToken()
            )

        assert written == len(PAYLOAD)
        assert bytes(memory_sink.buffer) == PAYLOAD

        values = [event.progress for event in events]
        assert values
        assert all(value is not None and 0.0 <= value <= 1.0 for value in values)
        assert values == sorted(values)

    @pytest.mark.asyncio
    async def test_chunked_response_is_indeterminate(self, memory_sink):
        events = []
        async with serve() as server:
            fetcher = RawHTTPFetcher(progress_interval=0.0)
            written = await fetcher.fetch(
                locator_for(server, "/chunked.bin"), memory_sink, events.append, CancellationToken()
            )

        assert bytes(memory_sink.buffer) == b"part-0;part-1;part-2;part-3;"
        assert written == memory_sink.bytes_written
        assert events
        assert all(event.is_indeterminate for event in events)

    @pytest.mark.asyncio
    async def test_timeout_completes_with_zero_bytes(self, memory_sink):
        """Test the legacy contract: a timeout is not an error."""
        async with serve() as server:
            fetcher = RawHTTPFetcher(timeout=0.05)
            written = await fetcher.fetch(locator_for(server, "/slow.bin"), memory_sink, None, CancellationToken())

        assert written == 0
        assert memory_sink.bytes_written == 0

    @pytest.mark.asyncio
    async def test_error_status_completes_with_zero_bytes(self, memory_sink):
        async with serve() as server:
            fetcher = RawHTTPFetcher()
            written = await fetcher.fetch(locator_for(server, "/missing.bin"), memory_sink, None, CancellationToken())

        assert written == 0
        assert memory_sink.bytes_written == 0

    @pytest.mark.asyncio
    async def test_strict_timeout_raises(self, memory_sink):
        async with serve() as server:
            fetcher = RawHTTPFetcher(timeout=0.05, strict=True)
            with pytest.raises(TransferFault, match="Timed out"):
                await fetcher.fetch(locator_for(server, "/slow.bin"), memory_sink, None, CancellationToken())

    @pytest.mark.asyncio
    async def test_strict_error_status_raises(self, memory_sink):
        async with serve() as server:
            fetcher = RawHTTPFetcher(strict=True)
            with pytest.raises(TransferFault) as exc_info:
                await fetcher.fetch(locator_for(server, "/missing.bin"), memory_sink, None, CancellationToken())

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_connection_error_raises_transfer_fault(self, memory_sink):
        async with serve() as server:
            locator = locator_for(server, "/payload.bin")

        fetcher = RawHTTPFetcher(timeout=2.0)
        with pytest.raises(TransferFault):
            await fetcher.fetch(locator, memory_sink, None, CancellationToken())

    @pytest.mark.asyncio
    async def test_injected_session_left_open(self, memory_sink):
        async with serve() as server:
            async with aiohttp.ClientSession() as session:
                fetcher = RawHTTPFetcher(session=session)
                written = await fetcher.fetch(
                    locator_for(server, "/payload.bin"), memory_sink, None, CancellationToken()
                )

                assert written == len(PAYLOAD)
                assert not session.closed

    @pytest.mark.asyncio
    async def test_task_cancel_during_wait(self, memory_sink):
        """Test cancelling the fetch task while waiting on the response."""
        async with serve() as server:
            fetcher = RawHTTPFetcher(timeout=5.0)
            task = asyncio.create_task(
                fetcher.fetch(locator_for(server, "/slow.bin"), memory_sink, None, CancellationToken())
            )
            await asyncio.sleep(0.05)
            task.cancel()

            with pytest.raises(asyncio.CancelledError):
                await task

        assert memory_sink.bytes_written == 0
