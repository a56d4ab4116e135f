from __future__ import annotations

import logging
import subprocess
from typing import Callable, Iterator

from .constants import ENCODING

ListingProvider = Callable[[str], Iterator[str]]


def ls_listing(path: str) -> Iterator[str]:
    """Yield the lines of ``ls -l <path>``.

    A failing ``ls`` is logged and whatever it wrote to stdout is still
    yielded, so a missing path gives an empty listing rather than an error.
    """
    try:
        proc = subprocess.run(["ls", "-l", path], capture_output=True)
    except (OSError, ValueError) as e:
        logging.warning("ls -l %s: %s", path, e)
        return

    if proc.returncode != 0:
        logging.warning(
            "ls -l %s exited with %d: %s",
            path,
            proc.returncode,
            proc.stderr.decode(ENCODING, errors="replace").strip(),
        )

    out = proc.stdout.decode(ENCODING, errors="surrogateescape").strip()
    if not out:
        return
    yield from out.split("\n")
