# SPDX-License-Identifier: MIT
"""Sample and setup data structures for track kinds."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Sequence

from track_replay.parser.primitives import Quaternion, Vector3


@dataclass(frozen=True)
class RotationSample:
    """Orientation of an object at a point in time."""

    timestamp: float  # Time in seconds
    rotation: Quaternion  # (x, y, z, w), stored as recorded

    def __post_init__(self):
        object.__setattr__(self, "timestamp", float(self.timestamp))
        object.__setattr__(self, "rotation", tuple(float(c) for c in self.rotation))
        if len(self.rotation) != 4:
            raise ValueError("rotation (quaternion) must have 4 components")


@dataclass(frozen=True)
class PositionSample:
    """Location of an object at a point in time."""

    timestamp: float
    position: Vector3

    def __post_init__(self):
        object.__setattr__(self, "timestamp", float(self.timestamp))
        object.__setattr__(self, "position", tuple(float(c) for c in self.position))
        if len(self.position) != 3:
            raise ValueError("position must have 3 components")


@dataclass(frozen=True)
class AnimationSample:
    """Animation state of a skeletal object: which clip plays and how far in."""

    timestamp: float
    clip_name: str
    normalized_time: float

    def __post_init__(self):
        object.__setattr__(self, "timestamp", float(self.timestamp))
        object.__setattr__(self, "normalized_time", float(self.normalized_time))


@dataclass(frozen=True)
class Bone:
    """Single bone of a rig.

    Attributes:
        name: Bone name as it appears in the scene hierarchy
        parent_index: Index of the parent bone in the rig (-1 for root bones)
    """

    name: str
    parent_index: int = -1

    @property
    def is_root(self) -> bool:
        """True if this bone has no parent."""
        return self.parent_index < 0


@dataclass(frozen=True)
class Skin:
    """A skinned mesh bound to the rig.

    Attributes:
        mesh_path: Asset path of the mesh
        sub_asset_index: Index of the mesh inside its container asset, or -1
            when the container holds a single mesh
        material_paths: Asset paths of the materials, in slot order
        joint_indices: Rig bone index for each joint of the mesh
    """

    mesh_path: str
    sub_asset_index: int = -1
    material_paths: tuple[str, ...] = ()
    joint_indices: tuple[int, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "material_paths", tuple(self.material_paths))
        object.__setattr__(self, "joint_indices", tuple(int(j) for j in self.joint_indices))


@dataclass(frozen=True)
class SkeletonSetup:
    """One-time structural data of a skeletal track (not time-sampled)."""

    bones: tuple[Bone, ...] = field(default_factory=tuple)
    skins: tuple[Skin, ...] = field(default_factory=tuple)
    controller_path: str = ""

    def __post_init__(self):
        object.__setattr__(self, "bones", tuple(self.bones))
        object.__setattr__(self, "skins", tuple(self.skins))

    @property
    def root_bone_indices(self) -> list[int]:
        """Indices of all bones without a parent."""
        return [i for i, bone in enumerate(self.bones) if bone.is_root]

    def children_of(self, index: int) -> list[int]:
        """Get the indices of the direct children of a bone."""
        return [i for i, bone in enumerate(self.bones) if bone.parent_index == index]


def sub_asset_index(
    container: Sequence[Any],
    target: Any,
    is_mesh: Callable[[Any], bool],
) -> int:
    """Resolve the sub-asset index recorded for a skin's mesh.

    If the container asset holds more than one mesh, the position of the target
    inside the container is returned. If it holds only one mesh the reference is
    unambiguous and -1 is returned.

    Args:
        container: All sub-objects loaded from the mesh's asset
        target: The mesh being recorded
        is_mesh: Predicate telling which sub-objects are meshes

    Returns:
        Index of target in container, or -1
    """
    mesh_count = 0
    target_index = -1
    for i, item in enumerate(container):
        if is_mesh(item):
            mesh_count += 1
            if item is target or item == target:
                target_index = i
    return target_index if mesh_count > 1 else -1
