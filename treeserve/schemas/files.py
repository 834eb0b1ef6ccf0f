"""Listing schemas — JSON field names match the browser client."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from treeserve.services.lister import Entry, Listing


class FileItem(BaseModel):
    """One directory entry."""
    model_config = ConfigDict(populate_by_name=True)

    name: str
    size: int
    mode: str
    mod_time: datetime = Field(alias="modTime")
    is_dir: bool = Field(alias="isDir")
    path: str

    @classmethod
    def from_entry(cls, entry: Entry) -> "FileItem":
        return cls(
            name=entry.name,
            size=entry.size,
            mode=entry.mode,
            mod_time=entry.modified_at,
            is_dir=entry.is_dir,
            path=entry.link_path,
        )


class DirectoryListing(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    files: list[FileItem]
    current_path: str = Field(alias="currentPath")
    parent_path: str = Field(alias="parentPath")
    has_parent: bool = Field(alias="hasParent")

    @classmethod
    def from_listing(cls, listing: Listing, entries: list[Entry] | None = None) -> "DirectoryListing":
        return cls(
            files=[FileItem.from_entry(e) for e in (listing.entries if entries is None else entries)],
            current_path=listing.current_path,
            parent_path=listing.parent_path,
            has_parent=listing.has_parent,
        )
