# SPDX-License-Identifier: MIT
"""Settings controlling when recorders take samples."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from track_replay.parser.primitives import DEFAULT_NUMBER_FORMAT


class RecordingMethod(Enum):
    """When a recorder takes a sample during update_recording()."""

    EVERY_FRAME = "every_frame"
    EVERY_X_SECONDS = "every_x_seconds"
    ON_CHANGE = "on_change"


@dataclass
class RecordingSettings:
    """Parameters shared by the recorders of a session."""

    method: RecordingMethod = RecordingMethod.EVERY_FRAME
    """How samples are selected while recording."""

    sample_time: float = 0.1
    """Seconds between samples for EVERY_X_SECONDS."""

    change_min_threshold: float = 0.01
    """Smallest change that triggers a sample for ON_CHANGE."""

    number_format: str = DEFAULT_NUMBER_FORMAT
    """Python format spec used for every number in the log."""

    def __post_init__(self):
        if not isinstance(self.method, RecordingMethod):
            self.method = RecordingMethod(self.method)
        if self.sample_time <= 0:
            raise ValueError(f"sample_time must be positive, got {self.sample_time}")
        if self.change_min_threshold < 0:
            raise ValueError(
                f"change_min_threshold must not be negative, "
                f"got {self.change_min_threshold}"
            )
        # Fail early on a bad format spec instead of on the first encode
        format(0.0, self.number_format)
