"""File API routes — listings, random media pick, raw downloads."""

import logging
import os

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import FileResponse, PlainTextResponse

from treeserve.api.deps import get_root_dir, path_error_to_http
from treeserve.schemas.files import DirectoryListing
from treeserve.services.lister import FILES_PREFIX, list_directory
from treeserve.services.path_resolver import PathError, decode_link_path, resolve
from treeserve.services.sorting import NoMediaFoundError, pick_random_media, sort_entries

logger = logging.getLogger(__name__)

router = APIRouter()
download_router = APIRouter()


@router.get("/files", response_model=DirectoryListing)
def list_files(
    path: str = "",
    sort: str = "",
    order: str = "",
    root: str = Depends(get_root_dir),
):
    """Directory listing of ``path``, optionally ordered by name, size or date."""
    try:
        listing = list_directory(root, path)
    except (PathError, OSError) as exc:
        logger.warning("Error getting directory listing for path '%s': %s", path, exc)
        raise path_error_to_http(exc)
    return DirectoryListing.from_listing(listing, sort_entries(listing.entries, sort, order))


@router.get("/random-media", response_class=PlainTextResponse)
def random_media(path: str = "", root: str = Depends(get_root_dir)):
    """Link to one media file in ``path``, picked uniformly at random."""
    try:
        return pick_random_media(root, path)
    except NoMediaFoundError as exc:
        raise HTTPException(status.HTTP_404_NOT_FOUND, str(exc))
    except (PathError, OSError) as exc:
        logger.warning("Error getting random media for path '%s': %s", path, exc)
        raise path_error_to_http(exc)


@download_router.get(FILES_PREFIX + "{file_path:path}", include_in_schema=False)
def download_file(file_path: str, request: Request, root: str = Depends(get_root_dir)):
    """Raw file bytes; content type, ETag and ranges are handled by Starlette."""
    # Decode from the raw request path so malformed escapes are caught
    raw_path = request.scope.get("raw_path", b"").decode("latin-1").split("?", 1)[0]
    raw_tail = raw_path[len(FILES_PREFIX):] if raw_path.startswith(FILES_PREFIX) else file_path
    try:
        full_path = resolve(root, decode_link_path(raw_tail))
    except PathError as exc:
        logger.warning("Rejected download path '%s': %s", raw_tail, exc)
        raise path_error_to_http(exc)

    if not os.path.isfile(full_path):
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Not found")
    return FileResponse(full_path)
