from __future__ import annotations

import logging
from typing import Callable, Dict, List, Tuple

from .address import decode_address
from .constants import (
    DIRECTORY_CHANGED,
    GOODBYE,
    LOGGED_IN,
    NOT_IMPLEMENTED,
    OK,
    SYNTAX_ERROR,
    SYSTEM,
    SYSTEM_TYPE,
    UNSUPPORTED_TYPE,
)
from .errors import MalformedAddress
from .listing import ListingProvider, ls_listing
from .net import ControlChannel
from .session import SessionState, TransferMode
from .transfer import TransferEngine

_TYPES = {
    "A": TransferMode.TEXT,
    "A N": TransferMode.TEXT,
    "I": TransferMode.BINARY,
    "L 8": TransferMode.BINARY,
}


def parse_command(line: str) -> Tuple[str, List[str]] | None:
    fields = line.split()
    if not fields:
        return None
    return fields[0].upper(), fields[1:]


class CommandDispatcher:
    """Routes command lines of one session to per-verb handlers.

    Every handler writes its own reply. ``dispatch`` returns False once the
    session should end (QUIT).
    """

    def __init__(
        self,
        channel: ControlChannel,
        state: SessionState,
        listing: ListingProvider = ls_listing,
    ):
        self.channel = channel
        self.state = state
        self.engine = TransferEngine(state, channel.reply, listing)
        self.handlers: Dict[str, Callable[[List[str]], bool]] = {
            "QUIT": self.cmd_quit,
            "USER": self.cmd_user,
            "PORT": self.cmd_port,
            "TYPE": self.cmd_type,
            "CWD": self.cmd_cwd,
            "LIST": self.cmd_list,
            "RETR": self.cmd_retr,
            "STOR": self.cmd_stor,
            "SYST": self.cmd_syst,
            "NOOP": self.cmd_noop,
        }

    def reply(self, code: int, message: str) -> None:
        self.channel.reply(code, message)

    def dispatch(self, line: str) -> bool:
        parsed = parse_command(line)
        if parsed is None:
            return True
        verb, args = parsed
        logging.debug("[%s] %s", self.channel.peer, line)

        handler = self.handlers.get(verb)
        try:
            if handler is None:
                self.reply(NOT_IMPLEMENTED, f'Command "{verb}" not implemented.')
                return True
            return handler(args)
        finally:
            self.state.record(verb)

    def cmd_quit(self, args: List[str]) -> bool:
        self.reply(GOODBYE, "Goodbye.")
        return False

    def cmd_user(self, args: List[str]) -> bool:
        self.reply(LOGGED_IN, "Login successful.")
        return True

    def cmd_port(self, args: List[str]) -> bool:
        if len(args) != 1:
            self.reply(SYNTAX_ERROR, "Usage: PORT a,b,c,d,p1,p2")
            return True
        try:
            address = decode_address(args[0])
        except MalformedAddress as e:
            self.reply(SYNTAX_ERROR, str(e))
            return True
        self.state.pending_data_address = address
        self.reply(OK, "PORT command successful.")
        return True

    def cmd_type(self, args: List[str]) -> bool:
        if not 1 <= len(args) <= 2:
            self.reply(SYNTAX_ERROR, "Usage: TYPE takes 1 or 2 arguments.")
            return True
        mode = _TYPES.get(" ".join(args).upper())
        if mode is None:
            self.reply(UNSUPPORTED_TYPE, "Unsupported type. Supported types: A, A N, I, L 8.")
            return True
        self.state.transfer_mode = mode
        self.reply(OK, "TYPE set.")
        return True

    def cmd_cwd(self, args: List[str]) -> bool:
        if len(args) > 1:
            self.reply(SYNTAX_ERROR, "Usage: CWD [path]")
            return True
        if args:
            self.state.working_directory = self.state.resolve(args[0])
        self.reply(DIRECTORY_CHANGED, "Directory successfully changed.")
        return True

    def cmd_list(self, args: List[str]) -> bool:
        if len(args) > 1:
            self.reply(SYNTAX_ERROR, "Usage: LIST [path]")
            return True
        self.engine.list_directory(args[0] if args else None)
        return True

    def cmd_retr(self, args: List[str]) -> bool:
        if len(args) != 1:
            self.reply(SYNTAX_ERROR, "Usage: RETR filename")
            return True
        self.engine.retrieve(args[0])
        return True

    def cmd_stor(self, args: List[str]) -> bool:
        if len(args) != 1:
            self.reply(SYNTAX_ERROR, "Usage: STOR filename")
            return True
        self.engine.store(args[0])
        return True

    def cmd_syst(self, args: List[str]) -> bool:
        self.reply(SYSTEM, SYSTEM_TYPE)
        return True

    def cmd_noop(self, args: List[str]) -> bool:
        self.reply(OK, "Ready.")
        return True
