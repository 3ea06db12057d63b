# SPDX-License-Identifier: MIT
"""Text codecs for track blocks.

Every track kind has one codec that turns a block of text into an ordered list
of samples and back. Delimiters form three tiers:

- ``~`` separates the top-level fields of a line (timestamp vs. payload)
- a backtick separates a value from its auxiliary index
- ``,`` and ``;`` separate repeated groups

Names and asset paths are not escaped. Encoding text that contains a reserved
delimiter raises ReservedDelimiterError instead of producing an ambiguous log.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Sequence

from track_replay.errors import (
    MalformedLineError,
    MalformedPrimitiveError,
    ReservedDelimiterError,
    UnknownTrackKindError,
)
from track_replay.parser.primitives import (
    DEFAULT_NUMBER_FORMAT,
    format_number,
    format_quaternion,
    format_vector3,
    parse_float,
    parse_int,
    parse_quaternion,
    parse_vector3,
)
from track_replay.tracks.samples import (
    AnimationSample,
    Bone,
    PositionSample,
    RotationSample,
    SkeletonSetup,
    Skin,
)

FIELD_SEPARATOR = "~"
INDEX_SEPARATOR = "`"
GROUP_SEPARATOR = ","
SKIN_PART_SEPARATOR = ";"

# Skeletal sample lines carry this prefix for compatibility with older logs
SKELETAL_SAMPLE_PREFIX = "\t\t"

RESERVED_CHARACTERS = (
    FIELD_SEPARATOR,
    INDEX_SEPARATOR,
    GROUP_SEPARATOR,
    SKIN_PART_SEPARATOR,
    "\n",
    "\r",
)


class TrackKind(Enum):
    """Types of recorded tracks. Values are the names used in log files."""

    ROTATION = "Rotation"
    POSITION = "Position"
    SKELETAL = "Skeletal"


@dataclass
class TrackData:
    """Decoded content of one track block."""

    kind: TrackKind
    samples: list[Any] = field(default_factory=list)
    setup: SkeletonSetup | None = None

    def __len__(self) -> int:
        """Return number of samples."""
        return len(self.samples)


def check_reserved(text: str, what: str) -> str:
    """Reject text that would break the delimiter grammar.

    Args:
        text: Name, clip name or asset path about to be encoded
        what: Description used in the error message

    Returns:
        The unchanged text

    Raises:
        ReservedDelimiterError: If text contains a reserved delimiter
    """
    for ch in RESERVED_CHARACTERS:
        if ch in text:
            raise ReservedDelimiterError(
                f"{what} {text!r} contains reserved delimiter {ch!r}"
            )
    return text


def iter_content_lines(text: str) -> Iterator[tuple[int, str]]:
    """Yield (1-based line number, line) for every non-blank line."""
    for number, line in enumerate(text.split("\n"), start=1):
        line = line.rstrip("\r")
        if not line.strip():
            continue
        yield number, line


def split_group(text: str, separator: str) -> list[str]:
    """Split a separator-terminated list, tolerating a missing final separator."""
    if not text:
        return []
    items = text.split(separator)
    if items[-1] == "":
        items.pop()
    return items


class TrackCodec(ABC):
    """Encode and decode the samples of one track kind.

    Subclasses describe a sample line by its field count and implement the
    payload parsing/formatting. Kinds with a setup record (a non-timestamped
    first line) set ``has_setup``.
    """

    kind: TrackKind
    field_count: int = 2
    has_setup: bool = False
    sample_prefix: str = ""

    def decode(self, text: str) -> TrackData:
        """Decode a track block into ordered samples.

        Decoding is fail-fast: the first malformed line aborts the whole block
        and no partial track is returned.

        Args:
            text: The isolated text block of one track

        Returns:
            TrackData with samples in file order

        Raises:
            MalformedLineError: On a wrong field count or decreasing timestamps
            MalformedPrimitiveError: On a number that does not parse
        """
        samples: list[Any] = []
        setup: SkeletonSetup | None = None
        setup_seen = False

        for number, line in iter_content_lines(text):
            try:
                if self.has_setup and not setup_seen:
                    setup = self.parse_setup(line)
                    setup_seen = True
                    continue

                fields = line.strip().split(FIELD_SEPARATOR)
                if len(fields) != self.field_count:
                    raise MalformedLineError(
                        f"{self.kind.value} line needs {self.field_count} fields, "
                        f"got {len(fields)}"
                    )
                timestamp = parse_float(fields[0])
                if samples and timestamp < samples[-1].timestamp:
                    raise MalformedLineError(
                        f"timestamp {timestamp} is earlier than the previous sample"
                    )
                samples.append(self.parse_sample(timestamp, fields[1:]))
            except MalformedPrimitiveError as e:
                if e.line is not None:
                    raise
                raise MalformedPrimitiveError(str(e), number) from e
            except MalformedLineError as e:
                if e.line is not None:
                    raise
                raise MalformedLineError(str(e), number) from e

        if self.has_setup and not setup_seen:
            raise MalformedLineError(f"{self.kind.value} track is missing its setup line")

        return TrackData(kind=self.kind, samples=samples, setup=setup)

    def encode(
        self,
        samples: Sequence[Any],
        number_format: str = DEFAULT_NUMBER_FORMAT,
        *,
        setup: SkeletonSetup | None = None,
    ) -> str:
        """Encode samples into a track block.

        Args:
            samples: Samples ordered by timestamp
            number_format: Python format spec for every number (e.g. ".4f")
            setup: Setup record, required by kinds that have one

        Returns:
            Text block with one newline-terminated line per sample
        """
        lines = []
        if self.has_setup:
            if setup is None:
                raise ValueError(f"{self.kind.value} track requires a setup record")
            lines.append(self.format_setup(setup) + "\n")
        for sample in samples:
            fields = [format_number(sample.timestamp, number_format)]
            fields.extend(self.format_sample(sample, number_format))
            lines.append(self.sample_prefix + FIELD_SEPARATOR.join(fields) + "\n")
        return "".join(lines)

    def encode_data(
        self, data: TrackData, number_format: str = DEFAULT_NUMBER_FORMAT
    ) -> str:
        """Encode a TrackData (samples plus optional setup)."""
        return self.encode(data.samples, number_format, setup=data.setup)

    @abstractmethod
    def parse_sample(self, timestamp: float, fields: list[str]) -> Any:
        """Build a sample from the timestamp and the remaining fields."""

    @abstractmethod
    def format_sample(self, sample: Any, number_format: str) -> list[str]:
        """Format the payload fields of a sample (without the timestamp)."""

    def parse_setup(self, line: str) -> SkeletonSetup:
        raise TypeError(f"{self.kind.value} tracks have no setup record")

    def format_setup(self, setup: SkeletonSetup) -> str:
        raise TypeError(f"{self.kind.value} tracks have no setup record")


class RotationCodec(TrackCodec):
    """``<timestamp>~<qx>,<qy>,<qz>,<qw>``"""

    kind = TrackKind.ROTATION

    def parse_sample(self, timestamp: float, fields: list[str]) -> RotationSample:
        return RotationSample(timestamp=timestamp, rotation=parse_quaternion(fields[0]))

    def format_sample(self, sample: RotationSample, number_format: str) -> list[str]:
        return [format_quaternion(sample.rotation, number_format)]


class PositionCodec(TrackCodec):
    """``<timestamp>~<x>,<y>,<z>``"""

    kind = TrackKind.POSITION

    def parse_sample(self, timestamp: float, fields: list[str]) -> PositionSample:
        return PositionSample(timestamp=timestamp, position=parse_vector3(fields[0]))

    def format_sample(self, sample: PositionSample, number_format: str) -> list[str]:
        return [format_vector3(sample.position, number_format)]


class SkeletalCodec(TrackCodec):
    """Skeleton setup line followed by animation state samples.

    Setup line: ``<rig>~<skins>~<controllerPath>`` where the rig is a list of
    ``name`parentIndex,`` entries and each skin is
    ``meshPath`subIndex;material`...;joint`...,``.

    Sample lines: ``\\t\\t<timestamp>~<clipName>~<normalizedTime>``.
    """

    kind = TrackKind.SKELETAL
    field_count = 3
    has_setup = True
    sample_prefix = SKELETAL_SAMPLE_PREFIX

    def parse_sample(self, timestamp: float, fields: list[str]) -> AnimationSample:
        return AnimationSample(
            timestamp=timestamp,
            clip_name=fields[0],
            normalized_time=parse_float(fields[1]),
        )

    def format_sample(self, sample: AnimationSample, number_format: str) -> list[str]:
        return [
            check_reserved(sample.clip_name, "Clip name"),
            format_number(sample.normalized_time, number_format),
        ]

    # --- Setup record ---

    def parse_setup(self, line: str) -> SkeletonSetup:
        fields = line.split(FIELD_SEPARATOR)
        if len(fields) != 3:
            raise MalformedLineError(
                f"Skeletal setup line needs 3 fields, got {len(fields)}"
            )
        rig_text, skins_text, controller_path = fields
        bones = self.parse_rig(rig_text)
        skins = self.parse_skins(skins_text, len(bones))
        return SkeletonSetup(bones=bones, skins=skins, controller_path=controller_path)

    def parse_rig(self, text: str) -> tuple[Bone, ...]:
        """Parse ``name`parentIndex,...`` into bones, preserving order."""
        bones = []
        for item in split_group(text, GROUP_SEPARATOR):
            parts = item.split(INDEX_SEPARATOR)
            if len(parts) != 2:
                raise MalformedLineError(f"Invalid bone entry: {item!r}")
            bones.append(Bone(name=parts[0], parent_index=parse_int(parts[1])))

        for bone in bones:
            if not -1 <= bone.parent_index < len(bones):
                raise MalformedLineError(
                    f"Bone {bone.name!r} has parent index {bone.parent_index} "
                    f"outside a rig of {len(bones)} bones"
                )
        return tuple(bones)

    def parse_skins(self, text: str, bone_count: int) -> tuple[Skin, ...]:
        """Parse the skin list of a setup line."""
        skins = []
        for item in split_group(text, GROUP_SEPARATOR):
            parts = item.split(SKIN_PART_SEPARATOR)
            if len(parts) != 3:
                raise MalformedLineError(f"Invalid skin entry: {item!r}")
            mesh_text, materials_text, joints_text = parts

            mesh_parts = mesh_text.split(INDEX_SEPARATOR)
            if len(mesh_parts) != 2:
                raise MalformedLineError(f"Invalid skin mesh reference: {mesh_text!r}")

            joints = [parse_int(j) for j in split_group(joints_text, INDEX_SEPARATOR)]
            for joint in joints:
                if not -1 <= joint < bone_count:
                    raise MalformedLineError(
                        f"Joint index {joint} outside a rig of {bone_count} bones"
                    )

            skins.append(
                Skin(
                    mesh_path=mesh_parts[0],
                    sub_asset_index=parse_int(mesh_parts[1]),
                    material_paths=tuple(split_group(materials_text, INDEX_SEPARATOR)),
                    joint_indices=tuple(joints),
                )
            )
        return tuple(skins)

    def format_setup(self, setup: SkeletonSetup) -> str:
        return FIELD_SEPARATOR.join(
            [
                self.format_rig(setup.bones),
                self.format_skins(setup.skins),
                check_reserved(setup.controller_path, "Controller path"),
            ]
        )

    def format_rig(self, bones: Sequence[Bone]) -> str:
        """Format bones as ``name`parentIndex,`` entries."""
        return "".join(
            f"{check_reserved(bone.name, 'Bone name')}{INDEX_SEPARATOR}"
            f"{bone.parent_index}{GROUP_SEPARATOR}"
            for bone in bones
        )

    def format_skins(self, skins: Sequence[Skin]) -> str:
        parts = []
        for skin in skins:
            mesh = check_reserved(skin.mesh_path, "Mesh path")
            materials = "".join(
                check_reserved(path, "Material path") + INDEX_SEPARATOR
                for path in skin.material_paths
            )
            joints = "".join(f"{j}{INDEX_SEPARATOR}" for j in skin.joint_indices)
            parts.append(
                f"{mesh}{INDEX_SEPARATOR}{skin.sub_asset_index}{SKIN_PART_SEPARATOR}"
                f"{materials}{SKIN_PART_SEPARATOR}{joints}{GROUP_SEPARATOR}"
            )
        return "".join(parts)


# --- Codec registry ---

_CODECS: dict[TrackKind, TrackCodec] = {}


def register_codec(codec: TrackCodec, *, replace: bool = False) -> None:
    """Register the codec for its track kind.

    Raises:
        ValueError: If the kind already has a codec and replace is False
    """
    if codec.kind in _CODECS and not replace:
        raise ValueError(f"Codec for {codec.kind.value} is already registered")
    _CODECS[codec.kind] = codec


def kind_from_name(name: str) -> TrackKind:
    """Map a kind name from a log file (e.g. "Rotation") to a TrackKind."""
    try:
        return TrackKind(name)
    except ValueError:
        pass
    try:
        return TrackKind[name.upper()]
    except KeyError:
        raise UnknownTrackKindError(f"Unknown track kind: {name!r}") from None


def get_codec(kind: TrackKind | str) -> TrackCodec:
    """Get the codec registered for a track kind (enum member or name)."""
    if not isinstance(kind, TrackKind):
        kind = kind_from_name(kind)
    codec = _CODECS.get(kind)
    if codec is None:
        raise UnknownTrackKindError(f"No codec registered for {kind.value}")
    return codec


register_codec(RotationCodec())
register_codec(PositionCodec())
register_codec(SkeletalCodec())
