from __future__ import annotations
import threading
from datetime import datetime
from typing import Optional, Union

from rich.console import Console
from rich.text import Text

from shared.config import ClientConfig


def format_inbound(
    message: str,
    *,
    timestamps: bool = False,
    now: Optional[datetime] = None,
) -> Text:
    """Decorate one inbound message for display. Pure: no console state involved."""
    # print() supplies the line break
    if message.endswith("\n"):
        message = message[:-1]
        if message.endswith("\r"):
            message = message[:-1]
    text = Text(message)
    if timestamps:
        stamp = (now or datetime.now()).strftime("%H:%M:%S")
        text = Text.assemble((f"[{stamp}] ", "dim"), text)
    return text


class OutputSink:
    """
    Single serialization point for everything shown on the console.

    Each ``write`` renders exactly one message under the lock, so output from
    the receive task and the send loop never tears. A ``threading.Lock`` is
    used so writers on OS threads are serialized as well.
    """

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console(highlight=False)
        self._lock = threading.Lock()
        self.writes = 0

    @classmethod
    def for_config(cls, config: ClientConfig) -> "OutputSink":
        if config.color is None:
            console = Console(highlight=False)
        elif config.color:
            console = Console(highlight=False, force_terminal=True)
        else:
            console = Console(highlight=False, no_color=True)
        return cls(console)

    def write(self, message: Union[str, Text], *, style: Optional[str] = None) -> None:
        with self._lock:
            self.console.print(message, style=style, markup=False, highlight=False, soft_wrap=True)
            self.writes += 1

    def status(self, message: str) -> None:
        self.write(message, style="bold green")

    def error(self, message: str) -> None:
        self.write(message, style="bold red")
