from __future__ import annotations
import codecs
from typing import List

FRAMING_CHUNK = "chunk"
FRAMING_LINE = "line"


class ChunkFramer:
    """
    Decodes each received chunk as one display unit.

    Decoding is incremental so a multi-byte character split across two reads
    is not mangled; undecodable bytes become U+FFFD instead of raising.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")

    def feed(self, data: bytes) -> List[str]:
        text = self._decoder.decode(data)
        return [text] if text else []

    def flush(self) -> List[str]:
        text = self._decoder.decode(b"", final=True)
        return [text] if text else []


class LineFramer(ChunkFramer):
    """Buffers received bytes and yields complete newline-terminated lines."""

    def __init__(self, encoding: str = "utf-8") -> None:
        super().__init__(encoding)
        self._pending = ""

    def feed(self, data: bytes) -> List[str]:
        self._pending += self._decoder.decode(data)
        *lines, self._pending = self._pending.split("\n")
        return [line[:-1] if line.endswith("\r") else line for line in lines]

    def flush(self) -> List[str]:
        rest = self._pending + self._decoder.decode(b"", final=True)
        self._pending = ""
        return [rest] if rest else []


def make_framer(mode: str) -> ChunkFramer:
    if mode == FRAMING_CHUNK:
        return ChunkFramer()
    if mode == FRAMING_LINE:
        return LineFramer()
    raise ValueError(f"unknown framing mode: {mode!r}")
