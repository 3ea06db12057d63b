# SPDX-License-Identifier: MIT
"""Split a track log file into per-object, per-track text blocks.

A log file groups raw track blocks under object and track headers:

    #OBJECT~Robot
    #TRACK~Rotation
    0.0000~0.0000,0.0000,0.0000,1.0000
    #TRACK~Skeletal
    Root`-1,...~...~Controllers/Robot.controller
    \t\t0.0000~Idle~0.0000

Header lines start with ``#`` in column 0. Everything else belongs to the
current track block and is handed to the track codec untouched.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from track_replay.errors import (
    DuplicateTrackKindError,
    MalformedLogError,
    ReservedDelimiterError,
)

HEADER_PREFIX = "#"
OBJECT_KEYWORD = "OBJECT"
TRACK_KEYWORD = "TRACK"

# Pattern to match header lines: #KEYWORD~name
HEADER_PATTERN = re.compile(r"#(?P<keyword>[A-Z]+)~(?P<name>.*)")

LOG_FILE_SUFFIX = ".tracklog"


@dataclass
class ParsedObject:
    """Raw track blocks of one object, keyed by kind name in file order."""

    name: str
    tracks: dict[str, str] = field(default_factory=dict)


def parse_log_file(text: str) -> list[ParsedObject]:
    """Parse the outer grouping of a track log.

    Args:
        text: Full log file content

    Returns:
        Parsed objects in file order

    Raises:
        MalformedLogError: On content outside a track or a malformed header
        DuplicateTrackKindError: If an object lists the same kind twice
    """
    objects: list[ParsedObject] = []
    current: ParsedObject | None = None
    track_name: str | None = None
    track_lines: list[str] = []

    def flush() -> None:
        if current is not None and track_name is not None:
            while track_lines and not track_lines[-1].strip():
                track_lines.pop()
            current.tracks[track_name] = "".join(line + "\n" for line in track_lines)

    for number, raw_line in enumerate(text.split("\n"), start=1):
        line = raw_line.rstrip("\r")

        if not line.startswith(HEADER_PREFIX):
            if track_name is not None:
                track_lines.append(line)
            elif line.strip():
                raise MalformedLogError("Content outside of a track block", number)
            continue

        match = HEADER_PATTERN.fullmatch(line)
        if match is None:
            raise MalformedLogError(f"Invalid header: {line!r}", number)
        keyword = match.group("keyword")
        name = match.group("name").strip()
        if not name:
            raise MalformedLogError(f"Header {keyword} has an empty name", number)

        if keyword == OBJECT_KEYWORD:
            flush()
            current = ParsedObject(name=name)
            objects.append(current)
            track_name = None
            track_lines = []
        elif keyword == TRACK_KEYWORD:
            if current is None:
                raise MalformedLogError("Track header before any object", number)
            flush()
            if name in current.tracks:
                raise DuplicateTrackKindError(
                    f"line {number}: object {current.name!r} has two {name} tracks"
                )
            # Reserve the slot so a later duplicate is detected before flushing
            current.tracks[name] = ""
            track_name = name
            track_lines = []
        else:
            raise MalformedLogError(f"Unknown header keyword: {keyword}", number)

    flush()
    return objects


def format_log_file(objects: Iterable[ParsedObject]) -> str:
    """Group raw track blocks under object and track headers.

    Raises:
        ReservedDelimiterError: If a name would break the header grammar or a
            track line starts with the header prefix
    """
    parts = []
    for obj in objects:
        check_header_name(obj.name, "Object name")
        parts.append(f"{HEADER_PREFIX}{OBJECT_KEYWORD}~{obj.name}\n")
        for kind_name, block in obj.tracks.items():
            check_header_name(kind_name, "Track kind")
            for line in block.split("\n"):
                if line.startswith(HEADER_PREFIX):
                    raise ReservedDelimiterError(
                        f"Track line of {obj.name!r} starts with {HEADER_PREFIX!r}: "
                        f"{line!r}"
                    )
            parts.append(f"{HEADER_PREFIX}{TRACK_KEYWORD}~{kind_name}\n")
            if block:
                parts.append(block if block.endswith("\n") else block + "\n")
    return "".join(parts)


def check_header_name(name: str, what: str) -> None:
    """Reject names that would break a header line."""
    if not name.strip():
        raise ReservedDelimiterError(f"{what} must not be empty")
    if name != name.strip():
        raise ReservedDelimiterError(f"{what} {name!r} has surrounding whitespace")
    for ch in ("~", "\n", "\r"):
        if ch in name:
            raise ReservedDelimiterError(
                f"{what} {name!r} contains reserved character {ch!r}"
            )


def read_log_file(path: Path | str) -> str:
    """Read a log file as UTF-8 text.

    OSError propagates to the caller.

    Raises:
        MalformedLogError: If the file is not valid UTF-8
    """
    try:
        return Path(path).read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise MalformedLogError(f"{path} is not valid UTF-8 text: {e}") from e


def write_log_file(path: Path | str, text: str) -> None:
    """Write log text, creating parent directories as needed."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def load_log_file(path: Path | str) -> list[ParsedObject]:
    """Read and parse a log file."""
    return parse_log_file(read_log_file(path))
