from __future__ import annotations

import re
from typing import Tuple

from .errors import MalformedAddress

_FIELDS = re.compile(r"(\d+),(\d+),(\d+),(\d+),(\d+),(\d+)", re.ASCII)


def decode_address(text: str) -> str:
    """Decode a PORT argument ``h1,h2,h3,h4,p1,p2`` into ``"h1.h2.h3.h4:port"``."""
    m = _FIELDS.fullmatch(text.strip())
    if m is None:
        raise MalformedAddress(f"expected six comma-separated numbers, got {text!r}")

    fields = [int(x) for x in m.groups()]
    for value in fields:
        if value > 255:
            raise MalformedAddress(f"field out of range: {value}")

    a, b, c, d, p1, p2 = fields
    return f"{a}.{b}.{c}.{d}:{256 * p1 + p2}"


def split_host_port(address: str) -> Tuple[str, int]:
    host, sep, port = address.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise MalformedAddress(f"not a host:port address: {address!r}")
    return host, int(port)
