from __future__ import annotations
import asyncio
from dataclasses import dataclass, field
from typing import Optional

from shared.config import ClientConfig
from .connection import ConnectionHandle
from .sink import OutputSink


@dataclass
class Session:
    """One connect-to-disconnect lifetime, owned by ``run_session``."""
    connection: ConnectionHandle
    sink: OutputSink
    config: ClientConfig
    _username: Optional[str] = None
    terminated: asyncio.Event = field(default_factory=asyncio.Event)

    @property
    def username(self) -> Optional[str]:
        return self._username

    def bind_username(self, username: str) -> None:
        if self._username is not None:
            raise RuntimeError("username is already set for this session")
        self._username = username
