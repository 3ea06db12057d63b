# SPDX-License-Identifier: MIT
"""Command-line interface for headless track log playback."""

from __future__ import annotations

import argparse
import math
import sys
from pathlib import Path
from typing import Any

from tqdm import tqdm

from track_replay.errors import TrackLogError
from track_replay.playback.timeline import TimelineController
from track_replay.tracks.codec import TrackKind
from track_replay.tracks.samples import AnimationSample, PositionSample, RotationSample


def describe_sample(sample: Any) -> str:
    """Short human readable form of a sample."""
    if isinstance(sample, RotationSample):
        return "rotation=(" + ", ".join(f"{c:.4f}" for c in sample.rotation) + ")"
    if isinstance(sample, PositionSample):
        return "position=(" + ", ".join(f"{c:.4f}" for c in sample.position) + ")"
    if isinstance(sample, AnimationSample):
        return f"clip={sample.clip_name} t={sample.normalized_time:.4f}"
    return repr(sample)


class ConsoleTarget:
    """Visual target that remembers the applied sample and optionally prints changes."""

    def __init__(self, object_name: str, kind: TrackKind, verbose: bool = False):
        self.object_name = object_name
        self.kind = kind
        self.verbose = verbose
        self.sample: Any = None

    def apply_sample(self, sample: Any) -> None:
        if sample == self.sample:
            return
        self.sample = sample
        if self.verbose:
            tqdm.write(
                f"  [{sample.timestamp:.3f}s] {self.object_name}/{self.kind.value}: "
                f"{describe_sample(sample)}"
            )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="track-replay",
        description="Replay recorded track logs headlessly",
    )
    parser.add_argument(
        "static_log",
        type=Path,
        metavar="STATIC_LOG",
        help="Path to the static track log (.tracklog)",
    )
    parser.add_argument(
        "--dynamic",
        type=Path,
        action="append",
        default=[],
        metavar="LOG",
        help="Additional dynamic track log (may be repeated)",
    )
    parser.add_argument(
        "--speed",
        type=float,
        default=1.0,
        help="Playback speed multiplier (default: %(default)s)",
    )
    parser.add_argument(
        "--fps",
        type=float,
        default=30.0,
        help="Ticks per simulated second (default: %(default)s)",
    )
    parser.add_argument(
        "--reverse",
        action="store_true",
        help="Start at the end and play in reverse",
    )
    parser.add_argument(
        "--start",
        type=float,
        metavar="T",
        help="Seek to this time before playing",
    )
    parser.add_argument(
        "--info",
        action="store_true",
        help="Print the summary only, do not play",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Print every sample change",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run headless playback from the command line."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not math.isfinite(args.fps) or args.fps <= 0:
        parser.error("--fps must be a positive finite number")
    if not math.isfinite(args.speed) or args.speed == 0:
        parser.error("--speed must be a finite non-zero number")

    targets: list[ConsoleTarget] = []

    def target_factory(object_name: str, kind: TrackKind) -> ConsoleTarget:
        target = ConsoleTarget(object_name, kind, verbose=args.verbose)
        targets.append(target)
        return target

    timeline = TimelineController()
    try:
        print(f"Loading {args.static_log}...")
        timeline.load_static_data(args.static_log, target_factory=target_factory)
        for path in args.dynamic:
            print(f"Loading {path}...")
            timeline.load_dynamic_data(path, target_factory=target_factory)
    except (TrackLogError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    registry = timeline.registry
    track_count = sum(len(obj.tracks) for obj in registry.objects())
    print(f"  Objects: {registry.object_count}")
    print(f"  Tracks: {track_count}")
    print(f"  Time range: [{timeline.start_time:.3f}s, {timeline.end_time:.3f}s]")

    if args.verbose:
        for batch in registry.batches():
            print(f"  {batch.name}:")
            for obj in batch.objects:
                print(f"    {obj!r}")

    if args.info:
        return 0

    try:
        if args.reverse:
            timeline.seek_to(timeline.end_time)
        if args.start is not None:
            timeline.seek_to(args.start)
    except TrackLogError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    timeline.set_speed(args.speed)
    if args.reverse:
        timeline.reverse()
    else:
        timeline.play()

    delta_time = 1.0 / args.fps
    total_ticks = math.ceil(timeline.duration * args.fps / abs(args.speed)) + 1
    with tqdm(total=total_ticks, desc="Replaying", unit="tick") as progress:
        while timeline.is_playing:
            timeline.tick(delta_time)
            progress.update(1)
            progress.set_postfix(time=f"{timeline.current_time:.3f}")

    print(f"Stopped at {timeline.current_time:.3f}s")
    for target in targets:
        if target.sample is not None:
            print(
                f"  {target.object_name}/{target.kind.value}: "
                f"{describe_sample(target.sample)}"
            )
    print("Done!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
