# SPDX-License-Identifier: MIT
"""Playback clock for replaying track logs."""

from .timeline import Playstate, TimelineController

__all__ = ["Playstate", "TimelineController"]
