"""Listing order and random media selection."""

from __future__ import annotations

import os
import secrets
from typing import Callable, Iterable

from treeserve.services.lister import Entry, list_directory

AUDIO_EXTENSIONS = frozenset({".mp3", ".wav", ".flac", ".aac", ".ogg", ".m4a", ".wma"})
VIDEO_EXTENSIONS = frozenset({".mp4", ".avi", ".mkv", ".mov", ".wmv", ".flv", ".webm", ".m4v"})
IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg", ".bmp", ".tiff"})
MEDIA_EXTENSIONS = AUDIO_EXTENSIONS | VIDEO_EXTENSIONS | IMAGE_EXTENSIONS

SORT_KEYS: dict[str, Callable[[Entry], object]] = {
    "name": lambda e: e.name,
    "size": lambda e: e.size,
    "date": lambda e: e.modified_at,
}


class NoMediaFoundError(LookupError):
    """The directory holds no file with a media extension."""


def sort_entries(entries: Iterable[Entry], field: str | None, order: str | None = None) -> list[Entry]:
    """Return ``entries`` ordered by ``field``.

    Unknown fields leave the order untouched; any ``order`` other than
    ``"desc"`` sorts ascending.
    """
    items = list(entries)
    key = SORT_KEYS.get(field or "")
    if key is None:
        return items
    items.sort(key=key, reverse=(order == "desc"))
    return items


def is_media_file(name: str) -> bool:
    return os.path.splitext(name)[1].lower() in MEDIA_EXTENSIONS


def pick_random_media(root: str, relative_path: str | None) -> str:
    """Link path of one media file in the directory, chosen uniformly at random."""
    listing = list_directory(root, relative_path)
    candidates = [e.link_path for e in listing.entries if not e.is_dir and is_media_file(e.name)]
    if not candidates:
        raise NoMediaFoundError("no media files found")
    return secrets.choice(candidates)
