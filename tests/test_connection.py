import asyncio

import pytest

from conftest import DummyWriter, make_connection, unused_port


@pytest.mark.asyncio
async def test_send_writes_exact_bytes():
    connection, _, writer = make_connection()

    await connection.send(b"LOGIN alice\n")
    await connection.send(b"hello\n")

    assert writer.sent == [b"LOGIN alice\n", b"hello\n"]


@pytest.mark.asyncio
async def test_send_failure_is_reported_as_send_error():
    from chat_client.connection import SendError

    connection, _, _ = make_connection(DummyWriter(fail_with=BrokenPipeError("pipe closed")))

    with pytest.raises(SendError):
        await connection.send(b"hello\n")


@pytest.mark.asyncio
async def test_send_after_close_fails():
    from chat_client.connection import SendError

    connection, _, writer = make_connection()
    await connection.close()

    with pytest.raises(SendError):
        await connection.send(b"late\n")
    assert writer.sent == []


@pytest.mark.asyncio
async def test_receive_chunk_is_bounded_and_reports_eof():
    connection, reader, _ = make_connection(chunk_size=4)
    reader.feed_data(b"abcdef")
    reader.feed_eof()

    assert await connection.receive_chunk() == b"abcd"
    assert await connection.receive_chunk() == b"ef"
    assert await connection.receive_chunk() == b""


@pytest.mark.asyncio
async def test_receive_error_is_wrapped():
    from chat_client.connection import ReceiveError

    connection, reader, _ = make_connection()
    reader.set_exception(ConnectionResetError("reset by peer"))

    with pytest.raises(ReceiveError):
        await connection.receive_chunk()


@pytest.mark.asyncio
async def test_close_unblocks_pending_receive():
    connection, _, writer = make_connection()

    pending = asyncio.create_task(connection.receive_chunk())
    await asyncio.sleep(0.01)
    assert not pending.done()

    await connection.close()

    assert await asyncio.wait_for(pending, timeout=1.0) == b""
    assert writer.closed is True


@pytest.mark.asyncio
async def test_close_is_idempotent():
    connection, _, _ = make_connection()

    await connection.close()
    await connection.close()

    assert connection.closed is True
    assert await connection.receive_chunk() == b""


@pytest.mark.asyncio
async def test_connect_refused_raises_connection_error():
    from chat_client.connection import ChatConnectionError, ConnectionHandle

    with pytest.raises(ChatConnectionError):
        await ConnectionHandle.connect("127.0.0.1", unused_port(), timeout=2.0)


@pytest.mark.asyncio
async def test_connect_timeout_raises_connection_error(monkeypatch):
    from chat_client.connection import ChatConnectionError, ConnectionHandle

    async def never_answers(host, port):
        await asyncio.sleep(60)

    monkeypatch.setattr(asyncio, "open_connection", never_answers)

    with pytest.raises(ChatConnectionError, match="timed out connecting to 127.0.0.1:4000"):
        await asyncio.wait_for(ConnectionHandle.connect("127.0.0.1", 4000, timeout=0.05), timeout=2.0)


@pytest.mark.asyncio
async def test_connect_round_trip_with_real_server():
    from chat_client.connection import ConnectionHandle

    received = []

    async def handle(reader, writer):
        received.append(await reader.readline())
        writer.write(b"welcome\n")
        await writer.drain()
        writer.close()

    server = await asyncio.start_server(handle, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    async with server:
        connection = await ConnectionHandle.connect("127.0.0.1", port)
        await connection.send(b"ping\n")
        assert await connection.receive_chunk() == b"welcome\n"
        assert await connection.receive_chunk() == b""
        await connection.close()

    assert received == [b"ping\n"]
