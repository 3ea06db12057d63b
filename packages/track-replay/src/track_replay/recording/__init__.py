# SPDX-License-Identifier: MIT
"""Recording live values into track logs."""

from .recorder import (
    ObjectRecorder,
    PositionRecorder,
    RecordingSession,
    RotationRecorder,
    SkeletalRecorder,
    TrackRecorder,
    recorder_for_kind,
)
from .settings import RecordingMethod, RecordingSettings

__all__ = [
    "RecordingMethod",
    "RecordingSettings",
    "TrackRecorder",
    "RotationRecorder",
    "PositionRecorder",
    "SkeletalRecorder",
    "ObjectRecorder",
    "RecordingSession",
    "recorder_for_kind",
]
