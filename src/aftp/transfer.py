from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from typing import BinaryIO, Callable, Iterator, Tuple

from .constants import (
    CANT_OPEN_DATA,
    COPY_BUFSIZE,
    CRLF,
    ENCODING,
    OPENING_DATA,
    SYNTAX_ERROR,
    TRANSFER_COMPLETE,
    TRANSFER_FAILED,
)
from .datachannel import DataConnection, open_data_connection
from .errors import DataChannelError, FileOpenError
from .listing import ListingProvider, ls_listing
from .session import SessionState, TransferMode

Reply = Callable[[int, str], None]


def iter_lines(stream: BinaryIO, size: int = COPY_BUFSIZE) -> Iterator[Tuple[bytes, bool]]:
    """Yield ``(piece, had_terminator)`` with the LF or CRLF stripped.

    Lines longer than ``size`` come out as several pieces; all but the one
    that ends the line have ``had_terminator`` False, as does an unterminated
    last line.
    """
    carry = b""
    while True:
        raw = stream.readline(size)
        if not raw:
            if carry:
                yield carry, False
            return
        raw = carry + raw
        carry = b""
        if raw.endswith(b"\n"):
            line = raw[:-1]
            if line.endswith(b"\r"):
                line = line[:-1]
            yield line, True
            continue
        # a CR at a piece boundary may be the first half of a CRLF
        if raw.endswith(b"\r"):
            carry = b"\r"
            raw = raw[:-1]
        if raw:
            yield raw, False


def copy_text(src: BinaryIO, dst: BinaryIO, size: int = COPY_BUFSIZE) -> None:
    open_line = False
    for piece, had_terminator in iter_lines(src, size):
        dst.write(piece)
        if had_terminator:
            dst.write(CRLF)
        open_line = not had_terminator
    # an unterminated last line still gets its CRLF
    if open_line:
        dst.write(CRLF)
    dst.flush()


def copy_binary(src: BinaryIO, dst: BinaryIO) -> None:
    shutil.copyfileobj(src, dst, COPY_BUFSIZE)
    dst.flush()


def open_file(path: str, mode: str) -> BinaryIO:
    # paths with an embedded NUL raise ValueError rather than OSError
    try:
        return open(path, mode)
    except (OSError, ValueError) as e:
        raise FileOpenError(path, e) from e


@dataclass(slots=True)
class TransferEngine:
    state: SessionState
    reply: Reply
    listing: ListingProvider = ls_listing

    def _copy(self, src: BinaryIO, dst: BinaryIO) -> None:
        if self.state.transfer_mode is TransferMode.BINARY:
            copy_binary(src, dst)
        else:
            copy_text(src, dst)

    def _open_data(self) -> DataConnection | None:
        try:
            return open_data_connection(self.state)
        except DataChannelError as e:
            logging.warning("data connection: %s", e)
            self.reply(CANT_OPEN_DATA, "Can't open data connection.")
            return None

    def list_directory(self, name: str | None = None) -> None:
        conn = self._open_data()
        if conn is None:
            return
        path = self.state.resolve(name)

        with conn:
            self.reply(OPENING_DATA, "Here comes the directory listing.")
            try:
                for line in self.listing(path):
                    conn.writer.write(line.encode(ENCODING, errors="surrogateescape") + CRLF)
                conn.writer.flush()
            except OSError as e:
                self.reply(TRANSFER_FAILED, str(e))
                return

        self.reply(TRANSFER_COMPLETE, "Closing data connection. List successful.")

    def retrieve(self, name: str) -> None:
        conn = self._open_data()
        if conn is None:
            return
        path = self.state.resolve(name)

        with conn:
            try:
                src = open_file(path, "rb")
            except FileOpenError as e:
                self.reply(SYNTAX_ERROR, str(e))
                return
            with src:
                self.reply(OPENING_DATA, "File ok. Sending.")
                try:
                    self._copy(src, conn.writer)
                except OSError as e:
                    logging.warning("RETR %s: %s", path, e)
                    self.reply(TRANSFER_FAILED, str(e))
                    return

        self.reply(TRANSFER_COMPLETE, "Transfer complete.")

    def store(self, name: str) -> None:
        conn = self._open_data()
        if conn is None:
            return
        path = self.state.resolve(name)

        with conn:
            try:
                dst = open_file(path, "wb")
            except FileOpenError as e:
                self.reply(SYNTAX_ERROR, str(e))
                return
            with dst:
                self.reply(OPENING_DATA, "Ok to send data.")
                try:
                    self._copy(conn.reader, dst)
                except OSError as e:
                    # whatever reached the file so far stays there
                    logging.warning("STOR %s: %s", path, e)
                    self.reply(TRANSFER_FAILED, str(e))
                    return

        self.reply(TRANSFER_COMPLETE, "Transfer complete.")
