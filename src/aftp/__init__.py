"""aftp: a small active-mode FTP server.

The package keeps the pieces of the protocol apart:
- address decoding and session state are plain data
- the data channel and the control channel are thin socket wrappers
- command dispatch and transfers are testable without a listener

Only a fixed subset of commands is served; everything else gets a 502.
"""

__all__ = []
