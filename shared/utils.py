from __future__ import annotations
from typing import Tuple

# ========================================
#           ADDRESS HELPERS
# ========================================

def parse_hostport(s: str) -> Tuple[str, int]:
    """
    Split 'hostname:port' or 'A.B.C.D:port' into its parts.

    Raises ValueError unless the host is non-empty and the port is an
    integer between 1 and 65535.

    Examples: "localhost:4000", "192.168.1.5:8080", "chat.example.com:4000"
    """
    if ':' not in s:
        raise ValueError(f"expected host:port, got {s!r}")
    host, port_s = s.rsplit(':', 1)
    if not host:
        raise ValueError(f"missing host in {s!r}")
    try:
        port = int(port_s)
    except ValueError:
        raise ValueError(f"port must be an integer in {s!r}") from None
    if not 0 < port <= 65535:
        raise ValueError(f"port out of range in {s!r}")
    return host, port


def format_hostport(host: str, port: int) -> str:
    return f"{host}:{port}"
