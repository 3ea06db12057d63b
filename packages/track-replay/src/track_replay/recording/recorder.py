# SPDX-License-Identifier: MIT
"""Recorders that sample live values into tracks and produce log text."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable

import numpy as np

from track_replay.errors import DuplicateTrackKindError
from track_replay.parser.log_file import ParsedObject, format_log_file, write_log_file
from track_replay.parser.primitives import Quaternion, Vector3
from track_replay.recording.settings import RecordingMethod, RecordingSettings
from track_replay.tracks.codec import TrackData, TrackKind, get_codec
from track_replay.tracks.samples import (
    AnimationSample,
    PositionSample,
    RotationSample,
    SkeletonSetup,
)


class TrackRecorder(ABC):
    """Collects the samples of one track kind for one object.

    Values come either from a source callable polled by record_data(), or are
    pushed ready-made through record_sample().
    """

    kind: TrackKind

    def __init__(
        self,
        settings: RecordingSettings | None = None,
        source: Callable[[], Any] | None = None,
        setup: SkeletonSetup | None = None,
    ):
        self.settings = settings or RecordingSettings()
        self._source = source
        self._setup = setup
        self._samples: list[Any] = []
        self._next_sample_time = -math.inf

    @property
    def samples(self) -> list[Any]:
        return list(self._samples)

    @property
    def setup(self) -> SkeletonSetup | None:
        return self._setup

    @setup.setter
    def setup(self, value: SkeletonSetup | None) -> None:
        self._setup = value

    def __len__(self) -> int:
        """Return number of recorded samples."""
        return len(self._samples)

    def start_recording(self, start_time: float) -> None:
        """Discard earlier samples and record the first one."""
        self._samples = []
        self._next_sample_time = -math.inf
        self.record_data(start_time)

    def update_recording(self, current_time: float) -> None:
        """Record a sample if the recording method asks for one."""
        method = self.settings.method
        if method == RecordingMethod.EVERY_FRAME:
            self.record_data(current_time)
        elif method == RecordingMethod.EVERY_X_SECONDS:
            if current_time >= self._next_sample_time:
                self.record_data(current_time)
        else:
            sample = self.capture(current_time)
            if not self._samples or self.has_changed(self._samples[-1], sample):
                self.record_sample(sample)

    def end_recording(self, end_time: float) -> None:
        """Record the final sample."""
        self.record_data(end_time)

    def record_data(self, current_time: float) -> None:
        """Capture the source's current value and record it."""
        self.record_sample(self.capture(current_time))

    def record_sample(self, sample: Any) -> None:
        """Append a sample.

        Raises:
            ValueError: If the sample is earlier than the last recorded one
        """
        if self._samples and sample.timestamp < self._samples[-1].timestamp:
            raise ValueError(
                f"{self.kind.value} sample at {sample.timestamp} is earlier than "
                f"the last recorded sample at {self._samples[-1].timestamp}"
            )
        self._samples.append(sample)
        self._next_sample_time = sample.timestamp + self.settings.sample_time

    def capture(self, current_time: float) -> Any:
        """Build a sample from the source's current value."""
        if self._source is None:
            raise RuntimeError(
                f"{self.kind.value} recorder has no source; use record_sample()"
            )
        return self.build_sample(current_time, self._source())

    @abstractmethod
    def build_sample(self, timestamp: float, value: Any) -> Any:
        """Turn a raw source value into a sample."""

    @abstractmethod
    def has_changed(self, previous: Any, current: Any) -> bool:
        """Whether current differs enough from previous for ON_CHANGE."""

    def to_track_data(self) -> TrackData:
        return TrackData(kind=self.kind, samples=list(self._samples), setup=self._setup)

    def get_data(self) -> str:
        """Encode the recorded samples with the kind's codec."""
        return get_codec(self.kind).encode(
            self._samples, self.settings.number_format, setup=self._setup
        )


class RotationRecorder(TrackRecorder):
    """Records an orientation quaternion (x, y, z, w)."""

    kind = TrackKind.ROTATION

    def build_sample(self, timestamp: float, value: Quaternion) -> RotationSample:
        return RotationSample(timestamp=timestamp, rotation=tuple(value))

    def has_changed(self, previous: RotationSample, current: RotationSample) -> bool:
        delta = np.abs(np.subtract(current.rotation, previous.rotation))
        return float(delta.max()) >= self.settings.change_min_threshold


class PositionRecorder(TrackRecorder):
    """Records a location (x, y, z)."""

    kind = TrackKind.POSITION

    def build_sample(self, timestamp: float, value: Vector3) -> PositionSample:
        return PositionSample(timestamp=timestamp, position=tuple(value))

    def has_changed(self, previous: PositionSample, current: PositionSample) -> bool:
        distance = np.linalg.norm(np.subtract(current.position, previous.position))
        return float(distance) >= self.settings.change_min_threshold


class SkeletalRecorder(TrackRecorder):
    """Records the playing clip and its normalized time on top of a rig setup.

    The source returns a (clip_name, normalized_time) pair.
    """

    kind = TrackKind.SKELETAL

    def __init__(
        self,
        setup: SkeletonSetup,
        source: Callable[[], tuple[str, float]] | None = None,
        settings: RecordingSettings | None = None,
    ):
        super().__init__(settings=settings, source=source, setup=setup)

    def build_sample(self, timestamp: float, value: tuple[str, float]) -> AnimationSample:
        clip_name, normalized_time = value
        return AnimationSample(
            timestamp=timestamp, clip_name=clip_name, normalized_time=normalized_time
        )

    def has_changed(self, previous: AnimationSample, current: AnimationSample) -> bool:
        if current.clip_name != previous.clip_name:
            return True
        delta = abs(current.normalized_time - previous.normalized_time)
        return delta >= self.settings.change_min_threshold


_RECORDER_TYPES: dict[TrackKind, type[TrackRecorder]] = {
    TrackKind.ROTATION: RotationRecorder,
    TrackKind.POSITION: PositionRecorder,
    TrackKind.SKELETAL: SkeletalRecorder,
}


def recorder_for_kind(
    kind: TrackKind,
    settings: RecordingSettings | None = None,
    setup: SkeletonSetup | None = None,
) -> TrackRecorder:
    """Create a push-only recorder (no source) for a track kind.

    Raises:
        ValueError: For a skeletal recorder without a setup record
    """
    recorder_type = _RECORDER_TYPES[kind]
    if recorder_type is SkeletalRecorder:
        if setup is None:
            raise ValueError("Skeletal recorder requires a setup record")
        return SkeletalRecorder(setup, settings=settings)
    return recorder_type(settings=settings)


class ObjectRecorder:
    """Recorders of all tracks of one object."""

    def __init__(self, name: str):
        self._name = name
        self._tracks: dict[TrackKind, TrackRecorder] = {}

    @property
    def name(self) -> str:
        return self._name

    @property
    def tracks(self) -> list[TrackRecorder]:
        return list(self._tracks.values())

    def add_track(self, recorder: TrackRecorder) -> TrackRecorder:
        """Register a recorder under its kind.

        Raises:
            DuplicateTrackKindError: If a recorder of this kind already exists
        """
        if recorder.kind in self._tracks:
            raise DuplicateTrackKindError(
                f"Object {self._name!r} already records a {recorder.kind.value} track"
            )
        self._tracks[recorder.kind] = recorder
        return recorder

    def get_track(self, kind: TrackKind) -> TrackRecorder | None:
        return self._tracks.get(kind)

    def start_recording(self, start_time: float) -> None:
        for recorder in self._tracks.values():
            recorder.start_recording(start_time)

    def update_recording(self, current_time: float) -> None:
        for recorder in self._tracks.values():
            recorder.update_recording(current_time)

    def end_recording(self, end_time: float) -> None:
        for recorder in self._tracks.values():
            recorder.end_recording(end_time)

    def to_parsed_object(self) -> ParsedObject:
        """Encode every recorder that holds samples. Empty recorders are left out."""
        return ParsedObject(
            name=self._name,
            tracks={
                kind.value: recorder.get_data()
                for kind, recorder in self._tracks.items()
                if len(recorder) > 0
            },
        )


class RecordingSession:
    """All objects recorded from one simulation run."""

    def __init__(self, settings: RecordingSettings | None = None):
        self.settings = settings or RecordingSettings()
        self._objects: dict[str, ObjectRecorder] = {}

    @property
    def objects(self) -> list[ObjectRecorder]:
        return list(self._objects.values())

    def add_object(self, obj: ObjectRecorder) -> ObjectRecorder:
        """Add an object recorder.

        Raises:
            ValueError: If another object with the same name exists
        """
        existing = self._objects.get(obj.name)
        if existing is obj:
            return obj
        if existing is not None:
            raise ValueError(f"Object with name '{obj.name}' already exists")
        self._objects[obj.name] = obj
        return obj

    def get_object(self, name: str) -> ObjectRecorder | None:
        return self._objects.get(name)

    def track(
        self, object_name: str, kind: TrackKind, setup: SkeletonSetup | None = None
    ) -> TrackRecorder:
        """Get or create the push-only recorder for an object's track."""
        obj = self._objects.get(object_name)
        if obj is None:
            obj = self.add_object(ObjectRecorder(object_name))
        recorder = obj.get_track(kind)
        if recorder is None:
            recorder = obj.add_track(recorder_for_kind(kind, self.settings, setup))
        elif setup is not None:
            recorder.setup = setup
        return recorder

    def sample_count(self) -> int:
        return sum(len(rec) for obj in self._objects.values() for rec in obj.tracks)

    def start(self, start_time: float) -> None:
        for obj in self._objects.values():
            obj.start_recording(start_time)

    def update(self, current_time: float) -> None:
        for obj in self._objects.values():
            obj.update_recording(current_time)

    def end(self, end_time: float) -> None:
        for obj in self._objects.values():
            obj.end_recording(end_time)

    def to_parsed_objects(self) -> list[ParsedObject]:
        """Objects with at least one recorded sample, in insertion order."""
        parsed = [obj.to_parsed_object() for obj in self._objects.values()]
        return [p for p in parsed if p.tracks]

    def to_log_text(self) -> str:
        return format_log_file(self.to_parsed_objects())

    def dump(self, path: Path | str) -> None:
        """Write the log to disk."""
        write_log_file(path, self.to_log_text())
