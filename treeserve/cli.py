"""Command-line entry point.

Usage:
    treeserve --dir /srv/media --port 8080
    TREESERVE_PASSWORD=secret treeserve --dir /srv/media --random-button

Flags override environment / .env settings; anything not given on the
command line keeps its configured value.
"""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from pydantic import ValidationError

from treeserve.config import Settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="treeserve",
        description="Serve a directory tree over HTTP with live refresh.",
    )
    parser.add_argument("--port", type=int, help="Port to listen on (default: 8080)")
    parser.add_argument("--host", help="Interface to bind (default: 0.0.0.0)")
    parser.add_argument("--dir", dest="root_dir", help="Directory to serve (default: current directory)")
    parser.add_argument(
        "--password",
        help="Password protecting the UI (default: $TREESERVE_PASSWORD, empty disables)",
    )
    parser.add_argument(
        "--random-button",
        dest="random_button",
        action="store_true",
        default=None,
        help="Show the random media button",
    )
    parser.add_argument("--log-level", dest="log_level", help="Logging level (default: INFO)")
    return parser


def settings_from_args(argv: Sequence[str] | None = None) -> Settings:
    args = build_parser().parse_args(argv)
    overrides = {k: v for k, v in vars(args).items() if v is not None}
    return Settings(**overrides)


def main(argv: Sequence[str] | None = None) -> int:
    try:
        settings = settings_from_args(argv)
    except ValidationError as exc:
        for err in exc.errors():
            print(f"treeserve: {err['msg']}", file=sys.stderr)
        return 2

    from treeserve.main import run

    print(f"Serving {settings.root_dir} at http://localhost:{settings.port}")
    run(settings)
    return 0


if __name__ == "__main__":
    sys.exit(main())
