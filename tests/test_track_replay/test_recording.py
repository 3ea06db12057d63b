# SPDX-License-Identifier: MIT
"""Tests for track_replay.recording modules."""

import pytest


class ValueSource:
    """Source callable returning scripted values one after another."""

    def __init__(self, values):
        self._values = list(values)
        self._index = 0

    def __call__(self):
        value = self._values[min(self._index, len(self._values) - 1)]
        self._index += 1
        return value


IDENTITY = (0.0, 0.0, 0.0, 1.0)


class TestRecordingSettings:
    """Tests for RecordingSettings."""

    def test_defaults(self):
        """Test default settings."""
        from track_replay.recording.settings import RecordingMethod, RecordingSettings

        settings = RecordingSettings()

        assert settings.method == RecordingMethod.EVERY_FRAME
        assert settings.number_format == ".4f"

    def test_method_from_string(self):
        """Test that the method may be given by value."""
        from track_replay.recording.settings import RecordingMethod, RecordingSettings

        assert RecordingSettings(method="on_change").method == RecordingMethod.ON_CHANGE

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"sample_time": 0.0},
            {"change_min_threshold": -1.0},
            {"number_format": "q"},
            {"method": "sometimes"},
        ],
    )
    def test_invalid_settings(self, kwargs):
        """Test that invalid settings are rejected up front."""
        from track_replay.recording.settings import RecordingSettings

        with pytest.raises(ValueError):
            RecordingSettings(**kwargs)


class TestRecordingMethods:
    """Tests for the sample selection of each recording method."""

    def test_every_frame(self):
        """Test that every update records a sample."""
        from track_replay.recording.recorder import RotationRecorder

        recorder = RotationRecorder(source=ValueSource([IDENTITY]))
        recorder.start_recording(0.0)
        recorder.update_recording(0.1)
        recorder.update_recording(0.2)
        recorder.end_recording(0.3)

        assert [s.timestamp for s in recorder.samples] == [0.0, 0.1, 0.2, 0.3]

    def test_every_x_seconds(self):
        """Test that samples are spaced by the sample time."""
        from track_replay.recording.recorder import PositionRecorder
        from track_replay.recording.settings import RecordingMethod, RecordingSettings

        settings = RecordingSettings(
            method=RecordingMethod.EVERY_X_SECONDS, sample_time=0.5
        )
        recorder = PositionRecorder(settings=settings, source=ValueSource([(0, 0, 0)]))
        recorder.start_recording(0.0)
        for time in [0.25, 0.5, 0.75, 1.0]:
            recorder.update_recording(time)
        recorder.end_recording(1.25)

        assert [s.timestamp for s in recorder.samples] == [0.0, 0.5, 1.0, 1.25]

    def test_on_change_rotation(self):
        """Test that rotation changes below the threshold are skipped."""
        from track_replay.recording.recorder import RotationRecorder
        from track_replay.recording.settings import RecordingMethod, RecordingSettings

        settings = RecordingSettings(
            method=RecordingMethod.ON_CHANGE, change_min_threshold=0.01
        )
        source = ValueSource(
            [IDENTITY, (0.0, 0.0, 0.005, 1.0), (0.0, 0.0, 0.02, 1.0), (0.0, 0.0, 0.02, 1.0)]
        )
        recorder = RotationRecorder(settings=settings, source=source)
        recorder.start_recording(0.0)
        for time in [0.1, 0.2, 0.3]:
            recorder.update_recording(time)

        assert [s.timestamp for s in recorder.samples] == [0.0, 0.2]

    def test_on_change_position_uses_distance(self):
        """Test that position changes are measured as a distance."""
        from track_replay.recording.recorder import PositionRecorder
        from track_replay.recording.settings import RecordingMethod, RecordingSettings

        settings = RecordingSettings(
            method=RecordingMethod.ON_CHANGE, change_min_threshold=0.01
        )
        source = ValueSource([(0.0, 0.0, 0.0), (0.006, 0.006, 0.006)])
        recorder = PositionRecorder(settings=settings, source=source)
        recorder.start_recording(0.0)
        recorder.update_recording(0.1)

        assert len(recorder) == 2

    def test_on_change_skeletal_clip_switch(self):
        """Test that a clip switch is recorded even without time progress."""
        from track_replay.recording.recorder import SkeletalRecorder
        from track_replay.recording.settings import RecordingMethod, RecordingSettings
        from track_replay.tracks.samples import Bone, SkeletonSetup

        settings = RecordingSettings(method=RecordingMethod.ON_CHANGE)
        source = ValueSource([("Idle", 0.0), ("Idle", 0.0), ("Walk", 0.0)])
        recorder = SkeletalRecorder(
            SkeletonSetup(bones=(Bone("Root"),)), source=source, settings=settings
        )
        recorder.start_recording(0.0)
        recorder.update_recording(0.1)
        recorder.update_recording(0.2)

        assert [s.clip_name for s in recorder.samples] == ["Idle", "Walk"]


class TestTrackRecorder:
    """Tests for pushing samples and encoding recorders."""

    def test_decreasing_timestamp_rejected(self):
        """Test that pushed samples must not go back in time."""
        from track_replay.recording.recorder import RotationRecorder
        from track_replay.tracks.samples import RotationSample

        recorder = RotationRecorder()
        recorder.record_sample(RotationSample(1.0, IDENTITY))
        with pytest.raises(ValueError):
            recorder.record_sample(RotationSample(0.5, IDENTITY))
        assert len(recorder) == 1

    def test_capture_without_source(self):
        """Test that polling a push-only recorder fails."""
        from track_replay.recording.recorder import RotationRecorder

        with pytest.raises(RuntimeError):
            RotationRecorder().record_data(0.0)

    def test_get_data_decodes(self):
        """Test that the encoded track decodes to the recorded samples."""
        from track_replay.recording.recorder import SkeletalRecorder
        from track_replay.tracks.codec import SkeletalCodec
        from track_replay.tracks.samples import Bone, SkeletonSetup

        setup = SkeletonSetup(bones=(Bone("Root"), Bone("Arm", 0)), controller_path="R")
        recorder = SkeletalRecorder(setup, source=ValueSource([("Idle", 0.25)]))
        recorder.start_recording(0.0)
        recorder.end_recording(1.0)

        data = SkeletalCodec().decode(recorder.get_data())

        assert data.setup == setup
        assert data.samples == recorder.to_track_data().samples

    def test_recorder_for_kind(self):
        """Test building push-only recorders by kind."""
        from track_replay.recording.recorder import (
            PositionRecorder,
            SkeletalRecorder,
            recorder_for_kind,
        )
        from track_replay.tracks.codec import TrackKind
        from track_replay.tracks.samples import SkeletonSetup

        assert isinstance(recorder_for_kind(TrackKind.POSITION), PositionRecorder)
        assert isinstance(
            recorder_for_kind(TrackKind.SKELETAL, setup=SkeletonSetup()),
            SkeletalRecorder,
        )
        with pytest.raises(ValueError):
            recorder_for_kind(TrackKind.SKELETAL)


class TestObjectRecorder:
    """Tests for ObjectRecorder."""

    def test_duplicate_kind(self):
        """Test that an object records at most one track per kind."""
        from track_replay.errors import DuplicateTrackKindError
        from track_replay.recording.recorder import ObjectRecorder, RotationRecorder

        obj = ObjectRecorder("Robot")
        obj.add_track(RotationRecorder())
        with pytest.raises(DuplicateTrackKindError):
            obj.add_track(RotationRecorder())

    def test_empty_recorders_left_out(self):
        """Test that recorders without samples are not written."""
        from track_replay.recording.recorder import (
            ObjectRecorder,
            PositionRecorder,
            RotationRecorder,
        )
        from track_replay.tracks.samples import RotationSample

        obj = ObjectRecorder("Robot")
        obj.add_track(RotationRecorder()).record_sample(RotationSample(0.0, IDENTITY))
        obj.add_track(PositionRecorder())

        assert list(obj.to_parsed_object().tracks) == ["Rotation"]


class TestRecordingSession:
    """Tests for RecordingSession."""

    def make_session(self):
        from track_replay.recording.recorder import (
            ObjectRecorder,
            PositionRecorder,
            RecordingSession,
            RotationRecorder,
        )

        session = RecordingSession()
        robot = session.add_object(ObjectRecorder("Robot"))
        robot.add_track(RotationRecorder(source=ValueSource([IDENTITY])))
        robot.add_track(
            PositionRecorder(source=ValueSource([(0, 0, 0), (0.5, 0, 0), (1, 0, 0)]))
        )
        session.start(0.0)
        session.update(0.5)
        session.end(1.0)
        return session

    def test_duplicate_object_name(self):
        """Test that object names are unique within a session."""
        from track_replay.recording.recorder import ObjectRecorder, RecordingSession

        session = RecordingSession()
        session.add_object(ObjectRecorder("A"))
        with pytest.raises(ValueError):
            session.add_object(ObjectRecorder("A"))

    def test_log_replays(self):
        """Test that a recorded log loads into a timeline."""
        from track_replay.playback.timeline import TimelineController

        session = self.make_session()
        timeline = TimelineController()
        timeline.load_text(session.to_log_text(), static=True)

        assert session.sample_count() == 6
        assert (timeline.start_time, timeline.end_time) == (0.0, 1.0)
        position = timeline.registry.static_batch.objects[0].tracks[1]
        assert position.sample_at(0.75).position == (0.5, 0.0, 0.0)

    def test_push_only_tracks(self):
        """Test get-or-create of push-only recorders."""
        from track_replay.recording.recorder import RecordingSession
        from track_replay.tracks.codec import TrackKind
        from track_replay.tracks.samples import PositionSample

        session = RecordingSession()
        recorder = session.track("Drone", TrackKind.POSITION)
        recorder.record_sample(PositionSample(0.0, (0, 0, 1)))

        assert session.track("Drone", TrackKind.POSITION) is recorder
        assert session.to_log_text() == (
            "#OBJECT~Drone\n#TRACK~Position\n0.0000~0.0000,0.0000,1.0000\n"
        )

    def test_dump(self, tmp_path):
        """Test writing the session log to disk."""
        from track_replay.parser.log_file import load_log_file

        path = tmp_path / "out" / "session.tracklog"
        self.make_session().dump(path)

        assert [obj.name for obj in load_log_file(path)] == ["Robot"]
