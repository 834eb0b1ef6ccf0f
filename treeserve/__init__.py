"""treeserve: browse, download and live-watch a directory tree over HTTP."""

__version__ = "0.3.0"
