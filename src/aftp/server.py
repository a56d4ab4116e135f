from __future__ import annotations

import enum
import logging
import os
import socket
import threading
from dataclasses import dataclass, field

from .constants import DEFAULT_HOST, DEFAULT_PORT, OK
from .dispatch import CommandDispatcher
from .listing import ListingProvider, ls_listing
from .net import ControlChannel
from .session import SessionState


class LoopState(enum.Enum):
    GREETING = "greeting"
    ACTIVE = "active"
    TERMINATED = "terminated"


@dataclass(frozen=True, slots=True)
class ServerConfig:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    root: str = field(default_factory=os.getcwd)
    listing: ListingProvider = ls_listing


class ControlLoop:
    """Drives one control connection from greeting to termination."""

    def __init__(self, channel: ControlChannel, root: str, listing: ListingProvider = ls_listing):
        self.channel = channel
        self.session = SessionState(working_directory=root)
        self.dispatcher = CommandDispatcher(channel, self.session, listing)
        self.state = LoopState.GREETING

    def run(self) -> None:
        logging.info("client connected: %s", self.channel.peer)
        try:
            self.channel.reply(OK, "Ready.")
            self.state = LoopState.ACTIVE
            while self.state is LoopState.ACTIVE:
                line = self.channel.read_line()
                if line is None:
                    break
                if not self.dispatcher.dispatch(line):
                    break
        except OSError as e:
            logging.warning("[%s] control connection: %s", self.channel.peer, e)
        finally:
            self.state = LoopState.TERMINATED
            logging.info("client closed: %s", self.channel.peer)


class FTPServer:
    def __init__(self, config: ServerConfig):
        self.config = config
        self.sock: socket.socket | None = None

    def bind(self) -> tuple[str, int]:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((self.config.host, self.config.port))
        sock.listen()
        self.sock = sock
        host, port = sock.getsockname()[:2]
        logging.info("listening at %s:%d; root=%s", host, port, self.config.root)
        return host, port

    def handle(self, conn: socket.socket) -> None:
        channel = ControlChannel.from_socket(conn)
        try:
            ControlLoop(channel, self.config.root, self.config.listing).run()
        finally:
            try:
                channel.close()
            except OSError as e:
                logging.debug("closing control channel: %s", e)
            conn.close()

    def serve_forever(self) -> None:
        if self.sock is None:
            self.bind()
        assert self.sock is not None
        while True:
            try:
                conn, _ = self.sock.accept()
            except OSError as e:
                if self.sock.fileno() == -1:
                    break
                logging.warning("accept: %s", e)
                continue
            t = threading.Thread(target=self.handle, args=(conn,), daemon=True)
            t.start()

    def close(self) -> None:
        if self.sock is not None:
            self.sock.close()
