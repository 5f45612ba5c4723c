"""Line-oriented text file access for the catalog, discount and cart files."""

import logging
import os
from pathlib import Path
from typing import Iterable, Union

from .errors import StorageError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def read_lines(path: PathLike) -> list[str]:
    """Read a UTF-8 text file and return its lines without line endings."""
    try:
        with open(path, encoding="utf-8") as f:
            return f.read().splitlines()
    except OSError as e:
        raise StorageError(f"Could not read {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise StorageError(f"{path} is not valid UTF-8 text: {e}") from e


def write_lines(path: PathLike, lines: Iterable[str]) -> None:
    """Overwrite ``path`` with one line per entry, atomically."""
    path = Path(path)
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(tmp, "w", encoding="utf-8") as f:
            for line in lines:
                f.write(f"{line}\n")
        os.replace(tmp, path)
    except OSError as e:
        if tmp.exists():
            tmp.unlink(missing_ok=True)
        raise StorageError(f"Could not write {path}: {e}") from e


def truncate(path: PathLike) -> None:
    """Empty ``path`` and check that it really is empty afterwards."""
    try:
        with open(path, "w", encoding="utf-8"):
            pass
        size = os.path.getsize(path)
    except OSError as e:
        raise StorageError(f"Could not truncate {path}: {e}") from e
    if size != 0:
        raise StorageError(f"{path} still holds {size} bytes after truncation")
