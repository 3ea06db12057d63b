# SPDX-License-Identifier: MIT
"""Exceptions raised while decoding, loading and replaying track logs."""

from __future__ import annotations


class TrackLogError(Exception):
    """Base class for all track log errors."""


class MalformedPrimitiveError(TrackLogError, ValueError):
    """A numeric field (float, int, vector or quaternion) does not parse."""

    def __init__(self, message: str, line: int | None = None):
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class MalformedLineError(TrackLogError, ValueError):
    """A line has the wrong structure for its track kind."""

    def __init__(self, message: str, line: int | None = None):
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class EmptyTrackError(TrackLogError, ValueError):
    """A track holds zero samples."""


class NoTracksError(TrackLogError, ValueError):
    """An object owns no tracks."""


class DuplicateTrackKindError(TrackLogError, ValueError):
    """A track of the same kind is already registered on the object."""


class OutOfRangeError(TrackLogError, ValueError):
    """A seek target lies outside the timeline bounds."""


class UnknownTrackKindError(TrackLogError, LookupError):
    """A track kind name has no registered codec."""


class ReservedDelimiterError(TrackLogError, ValueError):
    """Text to be encoded contains one of the reserved delimiters."""


class MalformedLogError(TrackLogError, ValueError):
    """The outer object/track grouping of a log file is malformed."""

    def __init__(self, message: str, line: int | None = None):
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)
