from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Iterable, Iterator


class DataAccessError(Exception):
    pass


def iter_source_files(paths: Iterable[Path], *, suffix: str = ".php") -> Iterator[Path]:
    """
    Expand CLI paths into source files.

    Files are yielded as given; directories are walked recursively and their
    `suffix` files yielded in sorted order so runs are reproducible.
    """

    for path in paths:
        if path.is_file():
            yield path
        elif path.is_dir():
            yield from sorted(p for p in path.rglob(f"*{suffix}") if p.is_file())
        else:
            raise DataAccessError(f"No such file or directory: {str(path)!r}")


def read_source(path: Path) -> str:
    # newline="" keeps CRLF/LF exactly as stored.
    try:
        with path.open("r", encoding="utf-8", newline="") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise DataAccessError(f"Cannot read {str(path)!r}: {e}") from e


def write_source(path: Path, code: str) -> None:
    try:
        with path.open("w", encoding="utf-8", newline="") as f:
            f.write(code)
    except OSError as e:
        raise DataAccessError(f"Cannot write {str(path)!r}: {e}") from e


def sha256_text(code: str) -> str:
    """
    SHA-256 of the UTF-8 bytes of `code`, for before/after audit metadata.
    """

    return hashlib.sha256(code.encode("utf-8")).hexdigest()
