# SPDX-License-Identifier: MIT
"""Timeline controller: playback clock over all loaded objects.

The controller owns the current time, the play direction and the speed. It is
driven by an external scheduler calling tick(delta_time); nothing here runs on
its own. Every time change is published to listeners and dispatched to the
registry, which fans out to objects and their tracks.
"""

from __future__ import annotations

import math
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable

from track_replay.errors import OutOfRangeError
from track_replay.parser.log_file import ParsedObject, parse_log_file, read_log_file
from track_replay.scene.object_set import ObjectBatch, ObjectSetRegistry, TargetFactory
from track_replay.scene.replay_object import ReplayObject


class Playstate(Enum):
    """Playback direction."""

    PAUSED = "paused"
    FORWARD = "forward"
    REVERSE = "reverse"


TimeListener = Callable[[float], None]
PlaystateListener = Callable[[Playstate], None]


class TimelineController:
    """Scrubbable, bidirectional playback over an ObjectSetRegistry.

    Invariant: start_time <= current_time <= end_time after every call.
    While no data is loaded the bounds collapse to [0.0, 0.0].
    """

    def __init__(self, registry: ObjectSetRegistry | None = None):
        self._registry = registry if registry is not None else ObjectSetRegistry()
        self._playstate = Playstate.PAUSED
        self._speed: float = 1.0
        self._time_listeners: list[TimeListener] = []
        self._playstate_listeners: list[PlaystateListener] = []

        self._start_time, self._end_time = self._compute_bounds()
        self._current_time: float = self._start_time

    # --- State ---

    @property
    def registry(self) -> ObjectSetRegistry:
        return self._registry

    @property
    def current_time(self) -> float:
        return self._current_time

    @property
    def start_time(self) -> float:
        return self._start_time

    @property
    def end_time(self) -> float:
        return self._end_time

    @property
    def duration(self) -> float:
        return self._end_time - self._start_time

    @property
    def playstate(self) -> Playstate:
        return self._playstate

    @property
    def speed(self) -> float:
        return self._speed

    @property
    def is_playing(self) -> bool:
        return self._playstate != Playstate.PAUSED

    # --- Listeners ---

    def add_time_listener(self, listener: TimeListener) -> None:
        """Subscribe to time changes (called with the new current time)."""
        self._time_listeners.append(listener)

    def remove_time_listener(self, listener: TimeListener) -> None:
        if listener in self._time_listeners:
            self._time_listeners.remove(listener)

    def add_playstate_listener(self, listener: PlaystateListener) -> None:
        """Subscribe to playstate changes."""
        self._playstate_listeners.append(listener)

    def remove_playstate_listener(self, listener: PlaystateListener) -> None:
        if listener in self._playstate_listeners:
            self._playstate_listeners.remove(listener)

    def _notify_time(self) -> None:
        for listener in list(self._time_listeners):
            listener(self._current_time)

    def _set_playstate(self, playstate: Playstate) -> None:
        if playstate == self._playstate:
            return
        self._playstate = playstate
        for listener in list(self._playstate_listeners):
            listener(playstate)

    # --- Playback commands ---

    def play(self) -> None:
        self._set_playstate(Playstate.FORWARD)

    def reverse(self) -> None:
        self._set_playstate(Playstate.REVERSE)

    def pause(self) -> None:
        self._set_playstate(Playstate.PAUSED)

    def set_speed(self, speed: float) -> None:
        """Set the playback speed multiplier.

        Negative values are accepted and invert the effective direction; the
        bounds still clamp and pause playback.

        Raises:
            ValueError: If speed is NaN or infinite
        """
        speed = float(speed)
        if not math.isfinite(speed):
            raise ValueError(f"Playback speed must be finite, got {speed}")
        self._speed = speed

    def tick(self, delta_time: float) -> None:
        """Advance the clock by delta_time seconds (scaled by speed).

        Reaching end_time while playing forward, or start_time while playing in
        reverse, clamps the time to that bound and pauses playback.

        Raises:
            ValueError: If the scaled step is NaN or infinite; the state is
                left unchanged
        """
        if self._playstate == Playstate.PAUSED:
            return

        step = delta_time * self._speed
        if not math.isfinite(step):
            raise ValueError(
                f"Tick step must be finite, got delta_time={delta_time} "
                f"at speed {self._speed}"
            )
        if self._playstate == Playstate.FORWARD:
            time = self._current_time + step
            reached_bound = time >= self._end_time
        else:
            time = self._current_time - step
            reached_bound = time <= self._start_time

        # A negative speed or delta can move past the opposite bound
        if reached_bound or time > self._end_time or time < self._start_time:
            if self._playstate == Playstate.FORWARD:
                time = self._end_time if time >= self._end_time else self._start_time
            else:
                time = self._start_time if time <= self._start_time else self._end_time
            self._current_time = time
            self._set_playstate(Playstate.PAUSED)
        else:
            self._current_time = time

        self._notify_time()
        self._registry.dispatch(self._current_time)

    def seek_to(self, time: float) -> None:
        """Jump to a point in time without changing the playstate.

        Raises:
            OutOfRangeError: If time lies outside [start_time, end_time]; the
                controller state is left unchanged
        """
        time = float(time)
        if not math.isfinite(time) or time < self._start_time or time > self._end_time:
            raise OutOfRangeError(
                f"Time {time} is outside [{self._start_time}, {self._end_time}]"
            )
        self._current_time = time
        self._notify_time()
        self._registry.dispatch(self._current_time)

    # --- Loading ---

    def add_batch(
        self,
        objects: Iterable[ReplayObject],
        *,
        static: bool = False,
        name: str | None = None,
    ) -> ObjectBatch:
        """Add a batch of objects and reset playback to the new start time.

        If the registry rejects the batch the error propagates and the timeline
        keeps its previous state.
        """
        batch = self._registry.add_batch(objects, static=static, name=name)
        self._reset_to_start()
        return batch

    def load_batch(
        self,
        parsed_objects: Iterable[ParsedObject],
        *,
        static: bool = False,
        name: str | None = None,
        target_factory: TargetFactory | None = None,
    ) -> ObjectBatch:
        """Generate objects from parsed log entries and add them as a batch."""
        batch = self._registry.load_batch(
            parsed_objects, static=static, name=name, target_factory=target_factory
        )
        self._reset_to_start()
        return batch

    def load_text(
        self,
        text: str,
        *,
        static: bool = False,
        name: str | None = None,
        target_factory: TargetFactory | None = None,
    ) -> ObjectBatch:
        """Parse log file text and load it as a batch."""
        return self.load_batch(
            parse_log_file(text), static=static, name=name, target_factory=target_factory
        )

    def load_static_data(
        self, path: Path | str, target_factory: TargetFactory | None = None
    ) -> ObjectBatch:
        """Load a log file as the static batch, replacing any previous one."""
        return self.load_text(
            read_log_file(path), static=True, target_factory=target_factory
        )

    def load_dynamic_data(
        self, path: Path | str, target_factory: TargetFactory | None = None
    ) -> ObjectBatch:
        """Load a log file as an additional dynamic batch."""
        return self.load_text(
            read_log_file(path),
            static=False,
            name=Path(path).stem,
            target_factory=target_factory,
        )

    def _compute_bounds(self) -> tuple[float, float]:
        if self._registry.object_count == 0:
            return 0.0, 0.0
        return self._registry.global_earliest(), self._registry.global_latest()

    def _reset_to_start(self) -> None:
        self._set_playstate(Playstate.PAUSED)
        self._start_time, self._end_time = self._compute_bounds()
        self._current_time = self._start_time
        self._notify_time()
        self._registry.start_visualization(self._current_time)

    def info(self) -> str:
        """Return debug info about timeline state."""
        lines = [
            "Timeline",
            f"  Current time: {self._current_time:.3f}s",
            f"  Range: [{self._start_time:.3f}s, {self._end_time:.3f}s]",
            f"  Playstate: {self._playstate.value}",
            f"  Speed: {self._speed}",
            f"  Objects: {self._registry.object_count}",
        ]
        return "\n".join(lines)
