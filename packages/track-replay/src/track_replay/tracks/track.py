# SPDX-License-Identifier: MIT
"""A single recorded track: ordered samples of one kind for one object."""

from __future__ import annotations

from typing import Any, Protocol, Sequence

import numpy as np

from track_replay.errors import EmptyTrackError, MalformedLineError
from track_replay.parser.primitives import DEFAULT_NUMBER_FORMAT
from track_replay.tracks.codec import TrackData, TrackKind, get_codec
from track_replay.tracks.samples import SkeletonSetup


class VisualTarget(Protocol):
    """Whatever shows a track's samples (a mesh, a bone rig, a console line).

    A rotation track hands over RotationSample, a skeletal track AnimationSample.
    """

    def apply_sample(self, sample: Any) -> None: ...


class Track:
    """Ordered, immutable samples of one kind.

    Tracks are built once from decoded data and only read during playback.
    Lookups use a binary search over the timestamps.
    """

    def __init__(
        self,
        kind: TrackKind,
        samples: Sequence[Any],
        setup: SkeletonSetup | None = None,
        target: VisualTarget | None = None,
    ):
        if len(samples) == 0:
            raise EmptyTrackError(f"{kind.value} track has no samples")

        times = np.array([s.timestamp for s in samples], dtype=np.float64)
        if np.any(np.diff(times) < 0):
            raise MalformedLineError(
                f"{kind.value} track samples must be ordered by timestamp"
            )

        self._kind = kind
        self._samples = tuple(samples)
        self._times = times
        self._setup = setup
        self.target = target

    @classmethod
    def from_data(cls, data: TrackData, target: VisualTarget | None = None) -> Track:
        """Create a track from decoded TrackData."""
        return cls(data.kind, data.samples, setup=data.setup, target=target)

    @classmethod
    def from_text(cls, kind: TrackKind | str, text: str) -> Track:
        """Decode a track block with the kind's codec and build the track."""
        return cls.from_data(get_codec(kind).decode(text))

    def to_text(self, number_format: str = DEFAULT_NUMBER_FORMAT) -> str:
        """Encode the track back into a text block."""
        return get_codec(self._kind).encode(
            self._samples, number_format, setup=self._setup
        )

    @property
    def kind(self) -> TrackKind:
        return self._kind

    @property
    def samples(self) -> tuple[Any, ...]:
        return self._samples

    @property
    def setup(self) -> SkeletonSetup | None:
        """Setup record for kinds that have one (skeletal), else None."""
        return self._setup

    def __len__(self) -> int:
        """Return number of samples."""
        return len(self._samples)

    def first_timestamp(self) -> float:
        return float(self._times[0])

    def last_timestamp(self) -> float:
        return float(self._times[-1])

    def nearest_sample_index_for_time(self, time: float) -> int:
        """Find the last sample at or before the given time.

        Times before the first sample resolve to index 0, times after the last
        sample to the last index. Among equal timestamps the last one wins.

        Args:
            time: Query time in seconds

        Returns:
            Sample index
        """
        if len(self._times) == 0:
            raise EmptyTrackError(f"{self._kind.value} track has no samples")
        index = int(np.searchsorted(self._times, time, side="right")) - 1
        return max(index, 0)

    def sample_at(self, time: float) -> Any:
        """Get the sample selected for the given time."""
        return self._samples[self.nearest_sample_index_for_time(time)]

    def start_visualization(self, start_time: float) -> Any:
        """Show the state at the start of playback."""
        return self.update_visualization(start_time)

    def update_visualization(self, time: float) -> Any:
        """Select the sample for the given time and apply it to the target.

        Returns:
            The selected sample
        """
        sample = self.sample_at(time)
        if self.target is not None:
            self.target.apply_sample(sample)
        return sample

    def __repr__(self) -> str:
        return (
            f"<Track {self._kind.value} samples={len(self._samples)} "
            f"[{self.first_timestamp():.3f}, {self.last_timestamp():.3f}]>"
        )
