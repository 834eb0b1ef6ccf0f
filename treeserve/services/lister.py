"""Single-level directory listing with derived browse/download links."""

from __future__ import annotations

import logging
import os
import posixpath
import stat
from dataclasses import dataclass, field
from datetime import datetime
from urllib.parse import quote

from treeserve.services.path_resolver import normalize, resolve

logger = logging.getLogger(__name__)

BROWSE_PREFIX = "/browse/"
FILES_PREFIX = "/files/"


@dataclass(frozen=True)
class Entry:
    name: str
    size: int
    mode: str
    modified_at: datetime
    is_dir: bool
    link_path: str


@dataclass
class Listing:
    current_path: str
    entries: list[Entry] = field(default_factory=list)
    parent_path: str = ""
    has_parent: bool = False


def escape_segments(relative_path: str) -> str:
    """Percent-encode each segment on its own so ``/`` inside a name stays data."""
    if not relative_path:
        return ""
    return "/".join(quote(segment, safe="") for segment in relative_path.split("/"))


def build_link(relative_dir: str, name: str, is_dir: bool) -> str:
    prefix = BROWSE_PREFIX if is_dir else FILES_PREFIX
    segments = [quote(name, safe="")]
    if relative_dir:
        segments.insert(0, escape_segments(relative_dir))
    return prefix + "/".join(segments)


def parent_link(relative_path: str) -> tuple[str, bool]:
    """Logical parent of ``relative_path`` as ``(browse link, has_parent)``."""
    if not relative_path:
        return "", False
    parent = posixpath.dirname(relative_path)
    return BROWSE_PREFIX + escape_segments(parent), True


def _entry_from(dir_entry: os.DirEntry, relative_dir: str) -> Entry:
    info = dir_entry.stat()
    is_dir = stat.S_ISDIR(info.st_mode)
    return Entry(
        name=dir_entry.name,
        size=info.st_size,
        mode=stat.filemode(info.st_mode),
        modified_at=datetime.fromtimestamp(info.st_mtime).astimezone(),
        is_dir=is_dir,
        link_path=build_link(relative_dir, dir_entry.name, is_dir),
    )


def list_directory(root: str, relative_path: str | None) -> Listing:
    """List the direct children of ``relative_path`` under ``root``.

    Raises ``PathError`` for rejected paths and ``OSError`` when the directory
    itself cannot be read. Children whose metadata cannot be read are skipped.
    """
    current = normalize(relative_path)
    full_path = resolve(root, current)

    entries: list[Entry] = []
    with os.scandir(full_path) as it:
        for dir_entry in it:
            try:
                entries.append(_entry_from(dir_entry, current))
            except OSError as e:
                logger.debug("Skipping unreadable entry %s: %s", dir_entry.path, e)

    parent_path, has_parent = parent_link(current)
    return Listing(
        current_path=current,
        entries=entries,
        parent_path=parent_path,
        has_parent=has_parent,
    )
