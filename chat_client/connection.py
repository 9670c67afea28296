from __future__ import annotations
import asyncio
from typing import Optional

from shared.log import get_logger
from shared.utils import format_hostport

logger = get_logger(__name__)

DEFAULT_CHUNK_SIZE = 1024


class ChatLinkError(Exception):
    """Base class for failures of the chat server link."""
    pass


class ChatConnectionError(ChatLinkError):
    """Raised when the TCP connection cannot be established."""
    pass


class SendError(ChatLinkError):
    """Raised when outbound bytes could not be handed to the transport."""
    pass


class ReceiveError(ChatLinkError):
    """Raised when reading from the transport fails."""
    pass


class ConnectionHandle:
    """
    Owns the TCP stream to the chat server.

    Sends and receives are independent directions and may run concurrently
    from two different tasks. ``receive_chunk`` returns ``b""`` once the peer
    closed the stream or once ``close`` was called locally.
    """

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        peer: Optional[str] = None,
    ) -> None:
        self.reader = reader
        self.writer = writer
        self.chunk_size = chunk_size
        self.peer = peer
        self._closed = False
        self._shutdown = asyncio.Event()

    @classmethod
    async def connect(
        cls,
        host: str,
        port: int,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        timeout: Optional[float] = None,
    ) -> "ConnectionHandle":
        """Open a TCP connection. No retry: any failure raises ChatConnectionError."""
        peer = format_hostport(host, port)
        logger.debug("Connecting", extra={"peer": peer})
        try:
            reader, writer = await asyncio.wait_for(asyncio.open_connection(host, port), timeout)
        except asyncio.TimeoutError:
            raise ChatConnectionError(f"timed out connecting to {peer}") from None
        except OSError as e:
            raise ChatConnectionError(f"cannot connect to {peer}: {e.strerror or e}") from e
        logger.info("Connected", extra={"peer": peer})
        return cls(reader, writer, chunk_size=chunk_size, peer=peer)

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, data: bytes) -> None:
        """Write ``data`` and wait until the transport accepted all of it."""
        if self._closed:
            raise SendError("connection is closed")
        try:
            self.writer.write(data)
            await self.writer.drain()
        except OSError as e:
            raise SendError(str(e) or type(e).__name__) from e
        logger.debug("Sent %d bytes", len(data), extra={"peer": self.peer})

    async def receive_chunk(self) -> bytes:
        """
        Read up to ``chunk_size`` bytes.

        Returns b"" on orderly shutdown by either side. Raises ReceiveError on
        I/O failure. A pending read is released as soon as ``close`` runs,
        whether or not the platform wakes the underlying socket read.
        """
        if self._closed:
            return b""
        read = asyncio.ensure_future(self.reader.read(self.chunk_size))
        stop = asyncio.ensure_future(self._shutdown.wait())
        try:
            done, _ = await asyncio.wait({read, stop}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            stop.cancel()
            if not read.done():
                read.cancel()

        # a completed read wins over a simultaneous shutdown
        if read not in done:
            return b""
        try:
            data = read.result()
        except OSError as e:
            raise ReceiveError(str(e) or type(e).__name__) from e
        logger.debug("Received %d bytes", len(data), extra={"peer": self.peer})
        return data

    async def close(self) -> None:
        """Release the transport. Safe to call repeatedly and after errors."""
        if self._closed:
            return
        self._closed = True
        self._shutdown.set()
        self.writer.close()
        try:
            await self.writer.wait_closed()
        except OSError as e:
            logger.debug("Ignoring error while closing: %s", e, extra={"peer": self.peer})
        logger.info("Connection closed", extra={"peer": self.peer})
