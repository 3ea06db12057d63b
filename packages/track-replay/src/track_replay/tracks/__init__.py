# SPDX-License-Identifier: MIT
"""Track kinds, their text codecs and the Track container."""

from .codec import (
    PositionCodec,
    RotationCodec,
    SkeletalCodec,
    TrackCodec,
    TrackData,
    TrackKind,
    get_codec,
    kind_from_name,
    register_codec,
)
from .samples import (
    AnimationSample,
    Bone,
    PositionSample,
    RotationSample,
    SkeletonSetup,
    Skin,
    sub_asset_index,
)
from .track import Track, VisualTarget

__all__ = [
    "TrackKind",
    "TrackData",
    "TrackCodec",
    "RotationCodec",
    "PositionCodec",
    "SkeletalCodec",
    "get_codec",
    "kind_from_name",
    "register_codec",
    "RotationSample",
    "PositionSample",
    "AnimationSample",
    "Bone",
    "Skin",
    "SkeletonSetup",
    "sub_asset_index",
    "Track",
    "VisualTarget",
]
