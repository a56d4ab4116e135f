from __future__ import annotations

import socket
from typing import BinaryIO

from .constants import CRLF, ENCODING


class ControlChannel:
    """Line-oriented command stream of one client.

    Reads are LF separated with a trailing CR tolerated; replies are written
    as ``<code> <message>\\r\\n``. I/O errors propagate as ``OSError``.
    """

    def __init__(self, rfile: BinaryIO, wfile: BinaryIO, peer: str = ""):
        self.rfile = rfile
        self.wfile = wfile
        self.peer = peer

    @classmethod
    def from_socket(cls, sock: socket.socket) -> "ControlChannel":
        try:
            host, port = sock.getpeername()[:2]
            peer = f"{host}:{port}"
        except OSError:
            peer = "?"
        return cls(sock.makefile("rb"), sock.makefile("wb"), peer)

    def read_line(self) -> str | None:
        raw = self.rfile.readline()
        if not raw:
            return None
        return raw.decode(ENCODING, errors="surrogateescape").rstrip("\r\n")

    def reply(self, code: int, message: str) -> None:
        line = f"{code} {message}".encode(ENCODING, errors="surrogateescape")
        self.wfile.write(line + CRLF)
        self.wfile.flush()

    def close(self) -> None:
        try:
            self.wfile.close()
        finally:
            self.rfile.close()
