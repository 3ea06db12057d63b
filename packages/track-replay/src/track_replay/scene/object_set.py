# SPDX-License-Identifier: MIT
"""Registry of replay objects, loaded in static and dynamic batches."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable, Iterable, Iterator

from track_replay.errors import NoTracksError
from track_replay.parser.log_file import ParsedObject
from track_replay.scene.replay_object import ReplayObject
from track_replay.tracks.codec import TrackKind, get_codec, kind_from_name
from track_replay.tracks.track import Track, VisualTarget

# Builds the visual target for a track, given the object name and track kind
TargetFactory = Callable[[str, TrackKind], "VisualTarget | None"]


@dataclass
class ObjectBatch:
    """Objects loaded together as one unit."""

    name: str
    objects: list[ReplayObject] = field(default_factory=list)
    static: bool = False

    def earliest_time(self) -> float:
        return min((obj.earliest_time() for obj in self.objects), default=math.inf)

    def latest_time(self) -> float:
        return max((obj.latest_time() for obj in self.objects), default=0.0)

    def __len__(self) -> int:
        """Return number of objects."""
        return len(self.objects)


def generate_objects(
    parsed_objects: Iterable[ParsedObject],
    target_factory: TargetFactory | None = None,
) -> list[ReplayObject]:
    """Build replay objects from parsed log entries.

    Every track block is decoded with the codec registered for its kind. Any
    failure propagates and no objects are returned.

    Args:
        parsed_objects: Entries from parse_log_file
        target_factory: Optional callable creating a visual target per track

    Returns:
        One ReplayObject per parsed entry, in order

    Raises:
        UnknownTrackKindError: If a kind name has no codec
        MalformedLineError, MalformedPrimitiveError: On undecodable track text
        EmptyTrackError: If a track block holds no samples
        DuplicateTrackKindError: If two blocks resolve to the same kind
    """
    objects = []
    for parsed in parsed_objects:
        obj = ReplayObject(parsed.name)
        for kind_name, text in parsed.tracks.items():
            kind = kind_from_name(kind_name)
            data = get_codec(kind).decode(text)
            target = target_factory(parsed.name, kind) if target_factory else None
            obj.add_track(Track.from_data(data, target=target))
        objects.append(obj)
    return objects


class ObjectSetRegistry:
    """Owns the static batch and any number of dynamic batches.

    Batches are added atomically: a batch is validated completely before it
    becomes visible, so a failed load never leaves a partial object set.
    """

    def __init__(self):
        self._static: ObjectBatch | None = None
        self._dynamic: list[ObjectBatch] = []

    @property
    def static_batch(self) -> ObjectBatch | None:
        return self._static

    @property
    def dynamic_batches(self) -> list[ObjectBatch]:
        return list(self._dynamic)

    def batches(self) -> Iterator[ObjectBatch]:
        """Iterate all batches, static first."""
        if self._static is not None:
            yield self._static
        yield from self._dynamic

    def objects(self) -> Iterator[ReplayObject]:
        """Iterate every object of every batch."""
        for batch in self.batches():
            yield from batch.objects

    @property
    def object_count(self) -> int:
        return sum(len(batch) for batch in self.batches())

    def __len__(self) -> int:
        """Return total number of objects."""
        return self.object_count

    def add_batch(
        self,
        objects: Iterable[ReplayObject],
        *,
        static: bool = False,
        name: str | None = None,
    ) -> ObjectBatch:
        """Add a batch of objects.

        A static batch replaces the previous static batch. A dynamic batch is
        appended to the dynamic batches.

        Raises:
            NoTracksError: If any object owns no tracks (nothing is added)
        """
        objects = list(objects)
        for obj in objects:
            if not obj.tracks:
                raise NoTracksError(f"Object {obj.name!r} has no tracks")

        if name is None:
            name = "Static Objects" if static else f"Dynamic Objects {len(self._dynamic)}"
        batch = ObjectBatch(name=name, objects=objects, static=static)

        if static:
            self._static = batch
        else:
            self._dynamic.append(batch)
        return batch

    def load_batch(
        self,
        parsed_objects: Iterable[ParsedObject],
        *,
        static: bool = False,
        name: str | None = None,
        target_factory: TargetFactory | None = None,
    ) -> ObjectBatch:
        """Generate objects from parsed log entries and add them as one batch."""
        objects = generate_objects(parsed_objects, target_factory=target_factory)
        return self.add_batch(objects, static=static, name=name)

    def global_earliest(self) -> float:
        """Earliest time over all batches (positive infinity when empty)."""
        return min((batch.earliest_time() for batch in self.batches()), default=math.inf)

    def global_latest(self) -> float:
        """Latest time over all batches (0.0 when empty)."""
        times = [obj.latest_time() for obj in self.objects()]
        return max(times) if times else 0.0

    def dispatch(self, time: float) -> None:
        """Forward a time update to every object of every batch."""
        for obj in self.objects():
            obj.dispatch(time)

    def start_visualization(self, start_time: float) -> None:
        for obj in self.objects():
            obj.start_visualization(start_time)
