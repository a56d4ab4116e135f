from __future__ import annotations

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 20001

CRLF = b"\r\n"
ENCODING = "utf-8"
COPY_BUFSIZE = 64 * 1024

SYSTEM_TYPE = "UNIX Type: L8"

# reply codes
OPENING_DATA = 150
OK = 200
SYSTEM = 215
GOODBYE = 221
TRANSFER_COMPLETE = 226
LOGGED_IN = 230
DIRECTORY_CHANGED = 250
CANT_OPEN_DATA = 425
TRANSFER_FAILED = 450
SYNTAX_ERROR = 501
NOT_IMPLEMENTED = 502
UNSUPPORTED_TYPE = 504
