from __future__ import annotations

import argparse
import logging
import os

from .constants import DEFAULT_HOST, DEFAULT_PORT
from .server import FTPServer, ServerConfig


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="aftp", description="Minimal active-mode FTP server.")
    p.add_argument("--host", default=DEFAULT_HOST)
    p.add_argument("--port", type=int, default=DEFAULT_PORT)
    p.add_argument("--root", default=None, help="initial working directory (default: cwd)")
    p.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(asctime)s [%(levelname)s] %(message)s")

    root = os.path.abspath(args.root) if args.root else os.getcwd()
    server = FTPServer(ServerConfig(host=args.host, port=args.port, root=root))
    try:
        server.bind()
    except OSError as e:
        logging.error("cannot listen on %s:%d: %s", args.host, args.port, e)
        return 1

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
