from __future__ import annotations
import asyncio
import functools
from typing import Optional

import aioconsole

from shared.config import ClientConfig
from shared.log import get_logger
from .connection import ChatConnectionError, ConnectionHandle, SendError
from .framing import make_framer
from .loops import LineReader, receive_loop, send_loop
from .protocol import encode_message, login_line
from .sink import OutputSink, format_inbound
from .state import Session

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


async def console_reader(prompt: str) -> str:
    return await aioconsole.ainput(prompt)


async def run_session(
    config: ClientConfig,
    *,
    read_line: Optional[LineReader] = None,
    sink: Optional[OutputSink] = None,
) -> int:
    """
    Run one chat session and return the process exit status.

    connect -> LOGIN -> receive task + send loop -> close -> join.
    Nothing is started when the connection cannot be established.
    """
    read_line = read_line or console_reader
    sink = sink or OutputSink.for_config(config)

    try:
        connection = await ConnectionHandle.connect(
            config.host,
            config.port,
            chunk_size=config.chunk_size,
            timeout=config.connect_timeout,
        )
    except ChatConnectionError as e:
        logger.error("%s", e)
        sink.error(f"Failed to connect to server: {e}")
        return EXIT_FAILURE

    session = Session(connection=connection, sink=sink, config=config)
    sink.status(f"Connected to the server at {config.address}.")

    if not await _login(session, read_line):
        await connection.close()
        return EXIT_FAILURE

    extra = {"user": session.username, "peer": connection.peer}
    render = functools.partial(format_inbound, timestamps=config.timestamps)
    receiver = asyncio.create_task(
        receive_loop(
            connection,
            sink,
            framer=make_framer(config.framing),
            render=render,
            terminated=session.terminated,
        )
    )

    try:
        outcome = await send_loop(
            connection,
            sink,
            read_line,
            quit_sentinel=config.quit_sentinel,
            terminator=config.line_terminator,
        )
        logger.info("Send loop finished: %s", outcome.value, extra=extra)
    finally:
        await connection.close()
        await receiver

    return EXIT_OK


async def _login(session: Session, read_line: LineReader) -> bool:
    config = session.config
    if config.username is not None:
        username = config.username
    else:
        try:
            username = await read_line("Username: ")
        except EOFError:
            session.sink.error("No username given.")
            return False

    session.bind_username(username)
    try:
        await session.connection.send(encode_message(login_line(username), config.line_terminator))
    except SendError as e:
        logger.error("Login failed: %s", e, extra={"user": username})
        session.sink.error(f"Login failed: {e}")
        return False
    logger.info("Logged in", extra={"user": username, "peer": session.connection.peer})
    return True
