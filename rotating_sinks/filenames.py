"""Filename template resolver: base/extension split plus indexed and dated names."""

import os
from dataclasses import dataclass
from datetime import datetime

_SEPARATORS = tuple(sep for sep in (os.sep, os.altsep) if sep)


@dataclass(frozen=True)
class FilenameParts:
    base: str
    extension: str


def _join(stem: str, extension: str) -> str:
    return f"{stem}.{extension}"


def split(path: str, default_extension: str) -> FilenameParts:
    """Split *path* at the last dot of its filename component.

    A dot inside a directory segment, or a leading dot of a dotfile, is not an
    extension delimiter; the whole path is then the base and
    *default_extension* is used. A trailing dot means an empty extension, and
    the dot is kept in every name built from the parts.
    """
    last_sep = max(path.rfind(sep) for sep in _SEPARATORS)
    dot = path.rfind(".")
    if dot <= last_sep + 1:
        return FilenameParts(path, default_extension)
    return FilenameParts(path[:dot], path[dot + 1:])


def indexed(parts: FilenameParts, index: int) -> str:
    """``base.ext`` for index 0, ``base.<index>.ext`` otherwise."""
    if index == 0:
        return _join(parts.base, parts.extension)
    return _join(f"{parts.base}.{index}", parts.extension)


def indexed_filename(filename: str, index: int) -> str:
    """Indexed variant of a full filename, e.g. ("logs/mylog.txt", 3) -> "logs/mylog.3.txt"."""
    if index == 0:
        return filename
    parts = split(filename, "")
    if indexed(parts, 0) != filename:
        # no extension at all: the index becomes the suffix
        return f"{filename}.{index}"
    return indexed(parts, index)


def backup_index(parts: FilenameParts, filename: str) -> int | None:
    """Recover the index encoded in *filename*, or None if it is not in the chain."""
    if filename == indexed(parts, 0):
        return 0
    suffix = "." + parts.extension
    prefix = parts.base + "."
    if not filename.endswith(suffix):
        return None
    stem = filename[:-len(suffix)]
    if not stem.startswith(prefix):
        return None
    number = stem[len(prefix):]
    if not number.isdigit() or number.startswith("0"):
        return None
    return int(number)


def dated(parts: FilenameParts, when: datetime) -> str:
    """Minute resolution name: ``base_YYYY-MM-DD_hh-mm.ext``."""
    stem = (
        f"{parts.base}_{when.year:04d}-{when.month:02d}-{when.day:02d}"
        f"_{when.hour:02d}-{when.minute:02d}"
    )
    return _join(stem, parts.extension)


def dated_date_only(parts: FilenameParts, when: datetime) -> str:
    """Date only name: ``base_YYYY-MM-DD.ext``."""
    stem = f"{parts.base}_{when.year:04d}-{when.month:02d}-{when.day:02d}"
    return _join(stem, parts.extension)
