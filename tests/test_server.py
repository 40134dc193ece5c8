#!/usr/bin/env python3
"""
End-to-end tests for the listener over real TCP connections
"""
import asyncio
import time

import aiohttp
import pytest
import pytest_asyncio

from conftest import HELLO_TXT, INDEX_HTML
from staticserve.core.config import ServerConfig
from staticserve.core.errors import ServerConfigError
from staticserve.core.server_core import StaticFileServer


async def read_response(reader: asyncio.StreamReader) -> bytes:
    """Read one response, using Content-Length to find the body."""
    head = await reader.readuntil(b"\r\n\r\n")
    length = 0
    for line in head.split(b"\r\n"):
        if line.startswith(b"Content-Length: "):
            length = int(line.split(b": ", 1)[1])
    body = await reader.readexactly(length) if length else b""
    return head + body


@pytest_asyncio.fixture
async def server(doc_root):
    srv = StaticFileServer(ServerConfig(addr="127.0.0.1:0", doc_root=doc_root, read_timeout=0.5))
    await srv.start()
    yield srv
    await srv.shutdown(timeout=2.0)


async def connect(srv: StaticFileServer):
    host, port = srv.bound_address
    return await asyncio.open_connection(host, port)


@pytest.mark.asyncio
async def test_get_index_over_tcp(server):
    reader, writer = await connect(server)
    writer.write(b"GET / HTTP/1.1\r\nHost: x\r\n\r\n")
    await writer.drain()

    response = await read_response(reader)
    assert response.startswith(b"HTTP/1.1 200 OK\r\n")
    assert response.endswith(INDEX_HTML)
    writer.close()
    await writer.wait_closed()


@pytest.mark.asyncio
async def test_close_directive_closes_socket(server):
    reader, writer = await connect(server)
    writer.write(b"GET /a HTTP/1.1\r\nHost: x\r\nConnection: close\r\n\r\n")
    await writer.drain()

    response = await read_response(reader)
    assert b"Connection: close\r\n" in response
    assert await reader.read() == b""
    writer.close()


@pytest.mark.asyncio
async def test_post_gets_400_then_close(server):
    reader, writer = await connect(server)
    writer.write(b"POST / HTTP/1.1\r\nHost: x\r\n\r\n")
    await writer.drain()

    data = await reader.read()
    assert data.startswith(b"HTTP/1.1 400 Bad Request\r\n")
    assert b"Connection: close\r\n" in data
    writer.close()


@pytest.mark.asyncio
async def test_idle_connection_closed_silently(server):
    reader, writer = await connect(server)
    start = time.monotonic()

    data = await asyncio.wait_for(reader.read(), timeout=5.0)

    assert data == b""
    assert time.monotonic() - start >= 0.4
    writer.close()


@pytest.mark.asyncio
async def test_stalled_request_gets_400(server):
    reader, writer = await connect(server)
    writer.write(b"GET / HTTP/1.1\r\n")
    await writer.drain()

    data = await asyncio.wait_for(reader.read(), timeout=5.0)
    assert data.startswith(b"HTTP/1.1 400 Bad Request\r\n")
    writer.close()


@pytest.mark.asyncio
async def test_lines_sent_with_delays(server):
    reader, writer = await connect(server)
    for line in (b"GET /hello.txt HTTP/1.1\r\n", b"Host: x\r\n", b"\r\n"):
        writer.write(line)
        await writer.drain()
        await asyncio.sleep(0.05)

    response = await read_response(reader)
    assert response.endswith(HELLO_TXT)
    writer.close()


@pytest.mark.asyncio
async def test_slow_connection_does_not_block_others(server):
    slow_reader, slow_writer = await connect(server)
    slow_writer.write(b"GET / HTTP/1.1\r\n")
    await slow_writer.drain()

    reader, writer = await connect(server)
    writer.write(b"GET /hello.txt HTTP/1.1\r\nHost: x\r\nConnection: close\r\n\r\n")
    await writer.drain()
    response = await asyncio.wait_for(read_response(reader), timeout=0.4)
    assert response.endswith(HELLO_TXT)

    slow_writer.close()
    writer.close()


@pytest.mark.asyncio
async def test_keep_alive_with_aiohttp(server):
    host, port = server.bound_address
    connector = aiohttp.TCPConnector(limit=1)
    async with aiohttp.ClientSession(connector=connector) as session:
        for _ in range(3):
            async with session.get(f"http://{host}:{port}/hello.txt") as resp:
                assert resp.status == 200
                assert resp.headers["Content-Type"] == "text/plain; charset=utf-8"
                assert await resp.read() == HELLO_TXT

        async with session.get(f"http://{host}:{port}/missing.txt") as resp:
            assert resp.status == 404

        async with session.get(f"http://{host}:{port}/subdir/") as resp:
            assert resp.status == 200
            assert b"subdir" in await resp.read()


@pytest.mark.asyncio
async def test_missing_doc_root_fails_startup(tmp_path):
    srv = StaticFileServer(ServerConfig(addr="127.0.0.1:0", doc_root=tmp_path / "nope"))
    with pytest.raises(ServerConfigError):
        await srv.start()


@pytest.mark.asyncio
async def test_file_doc_root_fails_startup(tmp_path):
    path = tmp_path / "file.txt"
    path.write_text("not a directory")
    srv = StaticFileServer(ServerConfig(addr="127.0.0.1:0", doc_root=path))
    with pytest.raises(ServerConfigError):
        await srv.start()


@pytest.mark.asyncio
async def test_shutdown_drains_connections(server):
    reader, writer = await connect(server)
    writer.write(b"GET / HTTP/1.1\r\nHost: x\r\n\r\n")
    await writer.drain()
    await read_response(reader)

    await server.shutdown(timeout=2.0)
    assert server.active_connections == 0
    writer.close()
