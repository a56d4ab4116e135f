from __future__ import annotations

import enum
import os
from dataclasses import dataclass

# commands that only set transfer parameters and leave a pending PORT usable
PARAMETER_COMMANDS = frozenset({"TYPE"})


class TransferMode(enum.Enum):
    BINARY = "binary"
    TEXT = "text"


@dataclass(slots=True)
class SessionState:
    working_directory: str
    transfer_mode: TransferMode = TransferMode.TEXT
    last_command: str | None = None
    last_setup_command: str | None = None
    pending_data_address: str | None = None

    def record(self, verb: str) -> None:
        self.last_command = verb
        if verb not in PARAMETER_COMMANDS:
            self.last_setup_command = verb

    @property
    def port_pending(self) -> bool:
        return self.last_setup_command == "PORT" and self.pending_data_address is not None

    def resolve(self, name: str | None = None) -> str:
        # plain string join: no normalization, ".." is kept as given
        if not name:
            return self.working_directory
        return os.path.join(self.working_directory, name.lstrip("/"))
