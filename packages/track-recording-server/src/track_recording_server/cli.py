# SPDX-License-Identifier: MIT
"""Command-line interface for the Track Recording Server."""

from __future__ import annotations

import argparse
from pathlib import Path

from track_recording_server.server import run_server
from track_replay.parser.log_file import LOG_FILE_SUFFIX


def confirm_overwrite(path: Path) -> None:
    """Ask before replacing an existing log dump.

    Raises:
        ValueError: If the user keeps the existing file
    """
    if not path.exists():
        return
    response = input(
        f"Log dump path {path} already exists. Do you want to delete it? [y/N]: "
    )
    if response.lower() == "y":
        path.unlink()
    else:
        raise ValueError(
            f"Log dump path {path} already exists and user chose not to delete it."
        )


def main() -> None:
    """Run the Track Recording Server from the command line."""
    parser = argparse.ArgumentParser(
        description="Record simulation states as a replayable track log"
    )
    parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="URL to host on (default: %(default)s)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to host on (default: %(default)s)",
    )
    parser.add_argument(
        "--log_dump_path",
        required=True,
        type=Path,
        help=f"Path to dump the track log to disk ({LOG_FILE_SUFFIX})",
    )
    parser.add_argument(
        "--number_format",
        type=str,
        default=".4f",
        help="Python format spec for numbers in the log (default: %(default)s)",
    )
    args = parser.parse_args()

    if args.log_dump_path.suffix != LOG_FILE_SUFFIX:
        raise ValueError(
            f"Expected log_dump_path to have '{LOG_FILE_SUFFIX}' suffix, "
            f"got '{args.log_dump_path.suffix}'"
        )
    confirm_overwrite(args.log_dump_path)

    run_server(
        host=args.host,
        port=args.port,
        log_dump_path=args.log_dump_path,
        number_format=args.number_format,
    )


if __name__ == "__main__":
    main()
