"""Sandboxed path resolution for the served root.

Every user-supplied relative path goes through :func:`resolve` before it is
used to touch the filesystem. Two independent checks apply:

1. the normalized path must not contain a ``..`` segment, and
2. the joined absolute path must lie inside the root (boundary-aware, so a
   sibling such as ``/data-other`` never passes for root ``/data``).

Resolution works on path strings only; the root itself is expected to be
canonical already (see ``Settings.root_dir``).
"""

from __future__ import annotations

import os
import posixpath
import re
from urllib.parse import unquote_to_bytes


class PathError(ValueError):
    """Base class for rejected client paths."""


class TraversalError(PathError):
    """The path contains a parent-directory segment."""


class OutsideRootError(PathError):
    """The path resolves outside the served root."""


class MalformedPathError(PathError):
    """The URL path carries an invalid percent-encoding."""


_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def normalize(user_path: str | None) -> str:
    """Return the cleaned relative form of ``user_path`` ("" means the root)."""
    if not user_path:
        return ""
    if "\x00" in user_path:
        raise PathError("invalid path")
    if os.sep != "/":
        user_path = user_path.replace(os.sep, "/")
    clean = posixpath.normpath(user_path)
    if clean in (".", "/", "//"):
        return ""
    if ".." in clean.split("/"):
        raise TraversalError("invalid path")
    return clean.lstrip("/")


def is_within(root: str, candidate: str) -> bool:
    """Boundary-aware containment: ``candidate`` is ``root`` or below it."""
    if candidate == root:
        return True
    prefix = root if root.endswith(os.sep) else root + os.sep
    return candidate.startswith(prefix)


def resolve(root: str, user_path: str | None) -> str:
    """Map ``user_path`` onto ``root`` and return the absolute filesystem path.

    Raises:
        TraversalError: the path contains ``..``.
        OutsideRootError: the joined path is not contained in ``root``.
    """
    clean = normalize(user_path)
    abs_root = os.path.abspath(root)
    candidate = os.path.abspath(os.path.join(abs_root, clean)) if clean else abs_root
    if not is_within(abs_root, candidate):
        raise OutsideRootError("path outside root directory")
    return candidate


def decode_link_path(raw: str) -> str:
    """Strictly percent-decode the tail of a ``/files/...`` URL.

    Unlike :func:`urllib.parse.unquote`, malformed escapes are rejected
    instead of being passed through literally.
    """
    if _BAD_ESCAPE.search(raw):
        raise MalformedPathError("invalid path")
    try:
        return unquote_to_bytes(raw).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedPathError("invalid path") from exc
