"""
Wire format of the chat server

Plain UTF-8 text. The first message on a connection is ``LOGIN <username>``;
every later message is a line typed by the user, sent verbatim. ``/quit`` asks
the server to drop the connection.
"""

from __future__ import annotations

LOGIN_COMMAND = "LOGIN"
QUIT_SENTINEL = "/quit"
DEFAULT_TERMINATOR = ""


def login_line(username: str) -> str:
    return f"{LOGIN_COMMAND} {username}"


def encode_message(text: str, terminator: str = DEFAULT_TERMINATOR) -> bytes:
    return (text + terminator).encode("utf-8")
