from __future__ import annotations

from pathlib import Path

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 8888


def parse_int(value: object, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return default


def parse_address(value: str) -> tuple[str, int]:
    """Split ``host:port``; a bare ``:port`` binds to the default host."""
    value = value.strip()
    if not value:
        return DEFAULT_HOST, DEFAULT_PORT
    host, sep, port_text = value.rpartition(":")
    if not sep:
        return value, DEFAULT_PORT
    try:
        port = int(port_text)
    except ValueError:
        raise ValueError(f"invalid port in address: {value}") from None
    if not 0 <= port <= 65535:
        raise ValueError(f"port out of range in address: {value}")
    return host or DEFAULT_HOST, port


def read_source(path: Path) -> str:
    return path.read_bytes().decode("utf-8", errors="replace")


def write_text(path: Path, text: str) -> None:
    path.write_text(text, encoding="utf-8")


def is_within(path: Path, root: Path) -> bool:
    try:
        path.resolve().relative_to(root.resolve())
    except ValueError:
        return False
    return True
