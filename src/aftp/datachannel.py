from __future__ import annotations

import logging
import socket
from typing import BinaryIO

from .address import split_host_port
from .errors import DialFailure, NoPriorAddress
from .session import SessionState


class DataConnection:
    """One outbound TCP stream, used for a single LIST, RETR or STOR."""

    def __init__(self, sock: socket.socket):
        self.sock = sock
        self._reader: BinaryIO | None = None
        self._writer: BinaryIO | None = None

    @classmethod
    def dial(cls, address: str) -> "DataConnection":
        host, port = split_host_port(address)
        sock = socket.create_connection((host, port))
        return cls(sock)

    @property
    def reader(self) -> BinaryIO:
        if self._reader is None:
            self._reader = self.sock.makefile("rb")
        return self._reader

    @property
    def writer(self) -> BinaryIO:
        if self._writer is None:
            self._writer = self.sock.makefile("wb")
        return self._writer

    def close(self) -> None:
        try:
            if self._writer is not None:
                self._writer.close()
        finally:
            if self._reader is not None:
                self._reader.close()
            self.sock.close()

    def __enter__(self) -> "DataConnection":
        return self

    def __exit__(self, *exc_info: object) -> None:
        try:
            self.close()
        except OSError as e:
            # a failed final flush; the transfer outcome was already reported
            logging.warning("closing data connection: %s", e)


def open_data_connection(state: SessionState) -> DataConnection:
    if not state.port_pending:
        raise NoPriorAddress()

    address = state.pending_data_address
    try:
        return DataConnection.dial(address)
    except OSError as e:
        raise DialFailure(address, e) from e
