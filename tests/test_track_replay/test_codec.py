# SPDX-License-Identifier: MIT
"""Tests for track_replay.tracks.codec module."""

import pytest

ROTATION_TEXT = (
    "0.0000~0.0000,0.0000,0.0000,1.0000\n"
    "1.0000~0.0000,0.7071,0.0000,0.7071\n"
)

SKELETAL_TEXT = (
    "Root`-1,Spine`0,Head`1,~Meshes/Body.fbx`-1;Materials/Skin.mat`;0`1`2`,"
    "~Controllers/Robot.controller\n"
    "\t\t0.0000~Idle~0.0000\n"
    "\t\t1.5000~Walk~0.2500\n"
)


class TestRotationCodec:
    """Tests for the rotation codec."""

    def test_decode(self):
        """Test decoding samples in file order."""
        from track_replay.tracks.codec import TrackKind, get_codec

        data = get_codec(TrackKind.ROTATION).decode(ROTATION_TEXT)

        assert data.kind == TrackKind.ROTATION
        assert len(data) == 2
        assert data.samples[0].timestamp == 0.0
        assert data.samples[0].rotation == (0.0, 0.0, 0.0, 1.0)
        assert data.samples[1].rotation == (0.0, 0.7071, 0.0, 0.7071)
        assert data.setup is None

    def test_encode_matches_text(self):
        """Test that decoding then encoding reproduces the block."""
        from track_replay.tracks.codec import get_codec

        codec = get_codec("Rotation")
        assert codec.encode(codec.decode(ROTATION_TEXT).samples) == ROTATION_TEXT

    def test_round_trip_samples(self):
        """Test that encoded samples decode to the same values."""
        from track_replay.tracks.codec import RotationCodec
        from track_replay.tracks.samples import RotationSample

        samples = [
            RotationSample(0.0, (0.0, 0.0, 0.0, 1.0)),
            RotationSample(0.5, (0.5, -0.5, 0.5, -0.5)),
            RotationSample(0.5, (0.25, 0.0, 0.0, 0.75)),
        ]
        codec = RotationCodec()

        assert codec.decode(codec.encode(samples)).samples == samples

    def test_blank_lines_ignored(self):
        """Test that blank and whitespace-only lines are skipped."""
        from track_replay.tracks.codec import RotationCodec

        text = "\n0.0~0,0,0,1\n   \n1.0~0,0,0,1\n\n"
        assert len(RotationCodec().decode(text)) == 2

    def test_crlf_line_endings(self):
        """Test that carriage returns are stripped."""
        from track_replay.tracks.codec import RotationCodec

        data = RotationCodec().decode("0.0~0,0,0,1\r\n1.0~0,0,0,1\r\n")
        assert data.samples[1].rotation == (0.0, 0.0, 0.0, 1.0)

    def test_wrong_field_count_reports_line(self):
        """Test that a short line aborts decoding with its line number."""
        from track_replay.errors import MalformedLineError
        from track_replay.tracks.codec import RotationCodec

        with pytest.raises(MalformedLineError) as exc_info:
            RotationCodec().decode("0.0~0,0,0,1\n1.0\n")
        assert exc_info.value.line == 2
        assert "line 2" in str(exc_info.value)

    def test_bad_number_reports_line(self):
        """Test that a bad quaternion component carries its line number."""
        from track_replay.errors import MalformedPrimitiveError
        from track_replay.tracks.codec import RotationCodec

        with pytest.raises(MalformedPrimitiveError) as exc_info:
            RotationCodec().decode("0.0~0,0,0,1\n\n2.0~0,x,0,1\n")
        assert exc_info.value.line == 3

    def test_decreasing_timestamps_rejected(self):
        """Test that samples must not go back in time."""
        from track_replay.errors import MalformedLineError
        from track_replay.tracks.codec import RotationCodec

        with pytest.raises(MalformedLineError):
            RotationCodec().decode("1.0~0,0,0,1\n0.5~0,0,0,1\n")

    def test_equal_timestamps_allowed(self):
        """Test that repeated timestamps are kept in order."""
        from track_replay.tracks.codec import RotationCodec

        data = RotationCodec().decode("1.0~0,0,0,1\n1.0~1,0,0,0\n")
        assert [s.rotation[0] for s in data.samples] == [0.0, 1.0]

    def test_empty_block(self):
        """Test that an empty block decodes to no samples."""
        from track_replay.tracks.codec import RotationCodec

        assert len(RotationCodec().decode("")) == 0


class TestPositionCodec:
    """Tests for the position codec."""

    def test_round_trip_text(self):
        """Test decoding and encoding a position block."""
        from track_replay.tracks.codec import PositionCodec

        text = "0.0000~1.0000,2.0000,-3.0000\n0.5000~0.0000,0.0000,0.2500\n"
        codec = PositionCodec()
        data = codec.decode(text)

        assert data.samples[0].position == (1.0, 2.0, -3.0)
        assert codec.encode(data.samples) == text

    def test_custom_number_format(self):
        """Test encoding with a caller supplied format spec."""
        from track_replay.tracks.codec import PositionCodec
        from track_replay.tracks.samples import PositionSample

        text = PositionCodec().encode([PositionSample(0.5, (1, 2, 3))], ".2f")
        assert text == "0.50~1.00,2.00,3.00\n"


class TestSkeletalCodec:
    """Tests for the skeletal codec."""

    def test_decode_setup(self):
        """Test decoding the rig, skins and controller of the setup line."""
        from track_replay.tracks.codec import SkeletalCodec

        setup = SkeletalCodec().decode(SKELETAL_TEXT).setup

        assert [b.name for b in setup.bones] == ["Root", "Spine", "Head"]
        assert [b.parent_index for b in setup.bones] == [-1, 0, 1]
        assert setup.root_bone_indices == [0]
        assert setup.children_of(0) == [1]
        assert len(setup.skins) == 1
        skin = setup.skins[0]
        assert skin.mesh_path == "Meshes/Body.fbx"
        assert skin.sub_asset_index == -1
        assert skin.material_paths == ("Materials/Skin.mat",)
        assert skin.joint_indices == (0, 1, 2)
        assert setup.controller_path == "Controllers/Robot.controller"

    def test_decode_samples(self):
        """Test decoding tab-prefixed animation samples."""
        from track_replay.tracks.codec import SkeletalCodec

        samples = SkeletalCodec().decode(SKELETAL_TEXT).samples

        assert [s.clip_name for s in samples] == ["Idle", "Walk"]
        assert samples[1].timestamp == 1.5
        assert samples[1].normalized_time == 0.25

    def test_encode_matches_text(self):
        """Test that decode then encode reproduces the block exactly."""
        from track_replay.tracks.codec import SkeletalCodec

        codec = SkeletalCodec()
        assert codec.encode_data(codec.decode(SKELETAL_TEXT)) == SKELETAL_TEXT

    def test_missing_trailing_separator_tolerated(self):
        """Test a rig list without its final separator."""
        from track_replay.tracks.codec import SkeletalCodec

        setup = SkeletalCodec().decode("Root`-1,Arm`0~~\n\t\t0.0~Idle~0.0\n").setup
        assert [b.name for b in setup.bones] == ["Root", "Arm"]
        assert setup.skins == ()

    def test_missing_setup_line(self):
        """Test that a skeletal block without any line is rejected."""
        from track_replay.errors import MalformedLineError
        from track_replay.tracks.codec import SkeletalCodec

        with pytest.raises(MalformedLineError):
            SkeletalCodec().decode("\n")

    def test_parent_index_out_of_range(self):
        """Test that a parent index past the rig is rejected."""
        from track_replay.errors import MalformedLineError
        from track_replay.tracks.codec import SkeletalCodec

        with pytest.raises(MalformedLineError) as exc_info:
            SkeletalCodec().decode("Root`-1,Arm`5,~~\n")
        assert exc_info.value.line == 1

    def test_joint_index_out_of_range(self):
        """Test that a joint index past the rig is rejected."""
        from track_replay.errors import MalformedLineError
        from track_replay.tracks.codec import SkeletalCodec

        with pytest.raises(MalformedLineError):
            SkeletalCodec().decode("Root`-1,~Body.fbx`-1;;3`,~\n")

    def test_reserved_delimiter_in_clip_name(self):
        """Test that encoding refuses a clip name containing a delimiter."""
        from track_replay.errors import ReservedDelimiterError
        from track_replay.tracks.codec import SkeletalCodec
        from track_replay.tracks.samples import AnimationSample, Bone, SkeletonSetup

        setup = SkeletonSetup(bones=(Bone("Root"),))
        with pytest.raises(ReservedDelimiterError):
            SkeletalCodec().encode([AnimationSample(0.0, "Walk~Fast", 0.0)], setup=setup)

    def test_reserved_delimiter_in_bone_name(self):
        """Test that encoding refuses a bone name containing a delimiter."""
        from track_replay.errors import ReservedDelimiterError
        from track_replay.tracks.codec import SkeletalCodec
        from track_replay.tracks.samples import AnimationSample, Bone, SkeletonSetup

        setup = SkeletonSetup(bones=(Bone("Left,Arm"),))
        with pytest.raises(ReservedDelimiterError):
            SkeletalCodec().encode([AnimationSample(0.0, "Idle", 0.0)], setup=setup)

    def test_encode_requires_setup(self):
        """Test that skeletal encoding needs a setup record."""
        from track_replay.tracks.codec import SkeletalCodec
        from track_replay.tracks.samples import AnimationSample

        with pytest.raises(ValueError):
            SkeletalCodec().encode([AnimationSample(0.0, "Idle", 0.0)])


class TestCodecRegistry:
    """Tests for codec lookup."""

    def test_lookup_by_name(self):
        """Test resolving kind names used in log files."""
        from track_replay.tracks.codec import TrackKind, get_codec, kind_from_name

        assert kind_from_name("Skeletal") == TrackKind.SKELETAL
        assert kind_from_name("position") == TrackKind.POSITION
        assert get_codec("Rotation").kind == TrackKind.ROTATION

    def test_unknown_kind(self):
        """Test that unknown names raise UnknownTrackKindError."""
        from track_replay.errors import UnknownTrackKindError
        from track_replay.tracks.codec import get_codec

        with pytest.raises(UnknownTrackKindError):
            get_codec("Scale")
        with pytest.raises(LookupError):
            get_codec("Scale")

    def test_duplicate_registration(self):
        """Test that a kind cannot silently get a second codec."""
        from track_replay.tracks.codec import RotationCodec, register_codec

        with pytest.raises(ValueError):
            register_codec(RotationCodec())

    @pytest.mark.parametrize("kind_name", ["Rotation", "Position"])
    def test_setup_record_unsupported(self, kind_name):
        """Test that kinds without a setup line refuse setup records."""
        from track_replay.tracks.codec import get_codec
        from track_replay.tracks.samples import SkeletonSetup

        codec = get_codec(kind_name)

        assert not codec.has_setup
        with pytest.raises(TypeError):
            codec.parse_setup("Root`-1")
        with pytest.raises(TypeError):
            codec.format_setup(SkeletonSetup())


class TestSubAssetIndex:
    """Tests for sub_asset_index."""

    def test_single_mesh_is_unambiguous(self):
        """Test that a lone mesh resolves to -1."""
        from track_replay.tracks.samples import sub_asset_index

        container = ["material", "mesh_a"]
        assert sub_asset_index(container, "mesh_a", lambda x: x.startswith("mesh")) == -1

    def test_multiple_meshes(self):
        """Test that the container position is returned for several meshes."""
        from track_replay.tracks.samples import sub_asset_index

        container = ["mesh_a", "material", "mesh_b"]
        assert sub_asset_index(container, "mesh_b", lambda x: x.startswith("mesh")) == 2


class TestDocumentedCases:
    """Tests for the documented rig and malformed line cases."""

    def test_rig_round_trip(self):
        """Test that a three bone rig encodes and decodes in order."""
        from track_replay.tracks.codec import SkeletalCodec
        from track_replay.tracks.samples import Bone

        bones = (Bone("Root", -1), Bone("Hip", 0), Bone("Spine", 1))
        codec = SkeletalCodec()

        text = codec.format_rig(bones)

        assert text == "Root`-1,Hip`0,Spine`1,"
        assert codec.parse_rig(text) == bones

    def test_missing_quaternion_component(self):
        """Test that a three component rotation fails without partial samples."""
        from track_replay.errors import MalformedLineError, MalformedPrimitiveError
        from track_replay.tracks.codec import RotationCodec

        with pytest.raises((MalformedPrimitiveError, MalformedLineError)):
            RotationCodec().decode("0.0~0,0,0,1\n1.0~0.1,0.2,0.3\n")
