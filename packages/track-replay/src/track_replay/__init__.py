# SPDX-License-Identifier: MIT
"""Track Replay - Record simulation tracks to text logs and play them back."""

from track_replay.errors import (
    DuplicateTrackKindError,
    EmptyTrackError,
    MalformedLineError,
    MalformedLogError,
    MalformedPrimitiveError,
    NoTracksError,
    OutOfRangeError,
    ReservedDelimiterError,
    TrackLogError,
    UnknownTrackKindError,
)
from track_replay.parser.log_file import ParsedObject, load_log_file, parse_log_file
from track_replay.playback.timeline import Playstate, TimelineController
from track_replay.recording.recorder import RecordingSession
from track_replay.recording.settings import RecordingMethod, RecordingSettings
from track_replay.scene.object_set import ObjectSetRegistry
from track_replay.scene.replay_object import ReplayObject
from track_replay.tracks.codec import TrackKind, get_codec
from track_replay.tracks.track import Track

__version__ = "0.1.0"
__all__ = [
    "TrackLogError",
    "MalformedPrimitiveError",
    "MalformedLineError",
    "EmptyTrackError",
    "NoTracksError",
    "DuplicateTrackKindError",
    "OutOfRangeError",
    "UnknownTrackKindError",
    "ReservedDelimiterError",
    "MalformedLogError",
    "ParsedObject",
    "parse_log_file",
    "load_log_file",
    "TrackKind",
    "get_codec",
    "Track",
    "ReplayObject",
    "ObjectSetRegistry",
    "Playstate",
    "TimelineController",
    "RecordingMethod",
    "RecordingSettings",
    "RecordingSession",
]
