# SPDX-License-Identifier: MIT
"""Replay object: one logical entity and its tracks."""

from __future__ import annotations

from track_replay.errors import DuplicateTrackKindError, NoTracksError
from track_replay.tracks.codec import TrackKind
from track_replay.tracks.track import Track


class ReplayObject:
    """A named entity owning at most one track per kind.

    The object forwards every time update to all of its tracks. A track whose
    own range does not cover the time simply holds its boundary sample.
    """

    def __init__(self, name: str):
        self._name = name
        self._tracks: dict[TrackKind, Track] = {}

    @property
    def name(self) -> str:
        return self._name

    @property
    def tracks(self) -> list[Track]:
        return list(self._tracks.values())

    @property
    def kinds(self) -> list[TrackKind]:
        return list(self._tracks)

    def add_track(self, track: Track) -> None:
        """Register a track under its kind.

        Raises:
            DuplicateTrackKindError: If a track of this kind already exists
        """
        if track.kind in self._tracks:
            raise DuplicateTrackKindError(
                f"Object {self._name!r} already has a {track.kind.value} track"
            )
        self._tracks[track.kind] = track

    def get_track(self, kind: TrackKind) -> Track | None:
        """Get track by kind."""
        return self._tracks.get(kind)

    def earliest_time(self) -> float:
        """Earliest first timestamp over all tracks."""
        if not self._tracks:
            raise NoTracksError(f"Object {self._name!r} has no tracks")
        return min(track.first_timestamp() for track in self._tracks.values())

    def latest_time(self) -> float:
        """Latest last timestamp over all tracks."""
        if not self._tracks:
            raise NoTracksError(f"Object {self._name!r} has no tracks")
        return max(track.last_timestamp() for track in self._tracks.values())

    def start_visualization(self, start_time: float) -> None:
        for track in self._tracks.values():
            track.start_visualization(start_time)

    def dispatch(self, time: float) -> None:
        """Forward a time update to every track."""
        for track in self._tracks.values():
            track.update_visualization(time)

    def __repr__(self) -> str:
        kinds = ", ".join(kind.value for kind in self._tracks)
        return f"<ReplayObject '{self._name}' tracks=[{kinds}]>"
