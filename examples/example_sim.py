# SPDX-License-Identifier: MIT-0

import argparse
from pathlib import Path

import numpy as np
from tqdm import tqdm

from track_replay.playback.timeline import TimelineController
from track_replay.recording.recorder import (
    ObjectRecorder,
    PositionRecorder,
    RecordingSession,
    RotationRecorder,
    SkeletalRecorder,
)
from track_replay.recording.settings import RecordingMethod, RecordingSettings
from track_replay.tracks.samples import Bone, SkeletonSetup, Skin

SIMULATION_DURATION = 10.0
TIME_STEP = 1.0 / 60.0
WALK_CYCLE = 1.2


class _Scene:
    """A toy simulation: a spinning box, a bouncing ball and a walking robot."""

    def __init__(self):
        self.time = 0.0

    def step(self, dt: float) -> None:
        self.time += dt

    def box_rotation(self):
        # Spin around z, quaternion in (x, y, z, w) order
        half_angle = 0.5 * self.time
        return (0.0, 0.0, np.sin(half_angle), np.cos(half_angle))

    def ball_position(self):
        height = abs(np.sin(2.0 * self.time)) * 1.5
        return (0.5 * self.time, 0.0, height)

    def robot_animation(self):
        clip = "Idle" if self.time < 3.0 else "Walk"
        return clip, (self.time % WALK_CYCLE) / WALK_CYCLE


class _ProgressBar:
    def __init__(self, simulation_duration: float):
        self._tqdm = tqdm(total=simulation_duration, unit="s")
        self._current_time = 0.0

    def __call__(self, time: float):
        old_time = self._current_time
        self._current_time = time
        self._tqdm.update(self._current_time - old_time)

    def close(self):
        self._tqdm.close()


def main():
    parser = argparse.ArgumentParser(description="Record a toy simulation")
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("example_sim.tracklog"),
        help="Path of the track log to write (default: %(default)s)",
    )
    args = parser.parse_args()

    scene = _Scene()
    settings = RecordingSettings(method=RecordingMethod.ON_CHANGE)
    session = RecordingSession(settings)

    box = session.add_object(ObjectRecorder("Box"))
    box.add_track(RotationRecorder(settings=settings, source=scene.box_rotation))

    ball = session.add_object(ObjectRecorder("Ball"))
    ball.add_track(PositionRecorder(settings=settings, source=scene.ball_position))

    robot_setup = SkeletonSetup(
        bones=(Bone("Hips"), Bone("Spine", 0), Bone("LeftLeg", 0), Bone("RightLeg", 0)),
        skins=(
            Skin(
                mesh_path="Meshes/Robot.fbx",
                material_paths=("Materials/Robot.mat",),
                joint_indices=(0, 1, 2, 3),
            ),
        ),
        controller_path="Controllers/Robot.controller",
    )
    robot = session.add_object(ObjectRecorder("Robot"))
    robot.add_track(
        SkeletalRecorder(robot_setup, source=scene.robot_animation, settings=settings)
    )

    # Simulate.
    progress = _ProgressBar(SIMULATION_DURATION)
    session.start(scene.time)
    while scene.time < SIMULATION_DURATION:
        scene.step(TIME_STEP)
        session.update(scene.time)
        progress(scene.time)
    session.end(scene.time)
    progress.close()

    session.dump(args.output)
    print(f"Recorded {session.sample_count()} samples to {args.output}")

    # Replay what was written.
    timeline = TimelineController()
    timeline.load_static_data(args.output)
    print(timeline.info())


if __name__ == "__main__":
    main()
