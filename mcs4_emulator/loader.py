"""
MCS-4 Emulator — Program Image Loader

A program image is a flat byte sequence copied to program memory from
offset 0: no header, no length prefix. Images longer than program memory
are truncated (with a warning); shorter ones leave the rest zeroed.
"""

import logging
from pathlib import Path
from typing import Union

log = logging.getLogger("mcs4.loader")


class LoaderError(Exception):
    """Raised when a program image cannot be read."""
    pass


def read_program_image(path: Union[str, Path], size: int) -> bytes:
    """Read an image file and return at most ``size`` bytes of it."""
    p = Path(path)
    try:
        data = p.read_bytes()
    except FileNotFoundError as e:
        raise LoaderError(f"program image not found: {p}") from e
    except OSError as e:
        raise LoaderError(f"cannot read program image {p}: {e}") from e

    if not data:
        raise LoaderError(f"program image is empty: {p}")

    if len(data) > size:
        log.warning("Image %s is %d bytes, truncating to %d", p, len(data), size)
        data = data[:size]

    log.debug("Read %d bytes from %s", len(data), p)
    return data
