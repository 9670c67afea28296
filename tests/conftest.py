import asyncio
import io
import logging
import socket
import sys
from pathlib import Path
from typing import List, Optional

import pytest
from rich.console import Console

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from chat_client.connection import ConnectionHandle
from chat_client.sink import OutputSink


class DummyWriter:
    """In-memory stand-in for asyncio.StreamWriter."""

    def __init__(self, fail_with: Optional[BaseException] = None) -> None:
        self.sent: List[bytes] = []
        self.closed = False
        self.fail_with = fail_with

    def write(self, data: bytes) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(data)

    async def drain(self) -> None:
        pass

    def close(self) -> None:
        self.closed = True

    async def wait_closed(self) -> None:
        pass


class ScriptedInput:
    """Async line reader returning canned lines, then EOFError."""

    def __init__(self, lines, gate: Optional[asyncio.Event] = None) -> None:
        self.lines = list(lines)
        self.prompts: List[str] = []
        self.gate = gate

    async def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.gate is not None and prompt != "Username: ":
            await self.gate.wait()
        if not self.lines:
            raise EOFError
        return self.lines.pop(0)


def memory_sink() -> OutputSink:
    console = Console(file=io.StringIO(), color_system=None, highlight=False, width=200)
    return OutputSink(console)


def sink_output(sink: OutputSink) -> str:
    return sink.console.file.getvalue()


def make_connection(writer: Optional[DummyWriter] = None, chunk_size: int = 1024):
    reader = asyncio.StreamReader()
    writer = writer or DummyWriter()
    return ConnectionHandle(reader, writer, chunk_size=chunk_size, peer="test:0"), reader, writer


def unused_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@pytest.fixture
def sink() -> OutputSink:
    return memory_sink()


@pytest.fixture(autouse=True)
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    for name in ("CHAT_SERVER", "CHAT_LOG_LEVEL", "CHAT_LOG_FILE"):
        monkeypatch.delenv(name, raising=False)
