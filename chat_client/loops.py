from __future__ import annotations
import asyncio
from enum import Enum
from typing import Awaitable, Callable, Optional, Union

from rich.text import Text

from shared.log import get_logger
from .connection import ConnectionHandle, ReceiveError, SendError
from .framing import ChunkFramer
from .protocol import DEFAULT_TERMINATOR, QUIT_SENTINEL, encode_message
from .sink import OutputSink, format_inbound

logger = get_logger(__name__)

LineReader = Callable[[str], Awaitable[str]]
Renderer = Callable[[str], Union[str, Text]]


class SendLoopExit(Enum):
    QUIT = "quit"
    INPUT_CLOSED = "input_closed"
    SEND_FAILED = "send_failed"


async def receive_loop(
    connection: ConnectionHandle,
    sink: OutputSink,
    *,
    framer: Optional[ChunkFramer] = None,
    render: Renderer = format_inbound,
    terminated: Optional[asyncio.Event] = None,
) -> int:
    """
    Surface everything the server sends until the link closes or fails.

    Exactly one disconnect notice is written on the way out, after which the
    connection is closed so a later send fails instead of writing into a dead
    link. Returns the number of chunks received.
    """
    framer = framer or ChunkFramer()
    extra = {"peer": connection.peer, "loop": "recv"}
    chunks = 0
    logger.debug("Listening", extra=extra)
    try:
        while True:
            try:
                data = await connection.receive_chunk()
            except ReceiveError as e:
                logger.warning("Receive failed: %s", e, extra=extra)
                notice = f"Error receiving data: {e}"
                break
            if not data:
                notice = "Disconnected." if connection.closed else "Server disconnected."
                break
            chunks += 1
            for message in framer.feed(data):
                sink.write(render(message))

        for message in framer.flush():
            sink.write(render(message))
        sink.error(notice)
    finally:
        await connection.close()
        if terminated is not None:
            terminated.set()
        logger.debug("Terminated after %d chunks", chunks, extra=extra)
    return chunks


async def send_loop(
    connection: ConnectionHandle,
    sink: OutputSink,
    read_line: LineReader,
    *,
    prompt: str = "",
    quit_sentinel: str = QUIT_SENTINEL,
    terminator: str = DEFAULT_TERMINATOR,
) -> SendLoopExit:
    """
    Forward console lines to the server until quit, end of input, or a failed send.

    The quit sentinel is itself sent, best-effort, so the server can clean up.
    End of input counts as an implicit quit.
    """
    extra = {"peer": connection.peer, "loop": "send"}
    while True:
        try:
            line = await read_line(prompt)
        except EOFError:
            logger.info("Console input exhausted", extra=extra)
            await _send_quietly(connection, quit_sentinel, terminator)
            return SendLoopExit.INPUT_CLOSED

        if line == quit_sentinel:
            await _send_quietly(connection, quit_sentinel, terminator)
            return SendLoopExit.QUIT

        try:
            await connection.send(encode_message(line, terminator))
        except SendError as e:
            logger.warning("Send failed: %s", e, extra=extra)
            sink.error(f"Failed to send message: {e}")
            return SendLoopExit.SEND_FAILED


async def _send_quietly(connection: ConnectionHandle, text: str, terminator: str) -> None:
    # shutdown is already underway; a failure here changes nothing
    try:
        await connection.send(encode_message(text, terminator))
    except SendError as e:
        logger.debug("Quit not delivered: %s", e, extra={"peer": connection.peer, "loop": "send"})
