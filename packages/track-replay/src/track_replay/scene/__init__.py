# SPDX-License-Identifier: MIT
"""Replay objects and the batch registry."""

from .object_set import ObjectBatch, ObjectSetRegistry, generate_objects
from .replay_object import ReplayObject

__all__ = [
    "ReplayObject",
    "ObjectBatch",
    "ObjectSetRegistry",
    "generate_objects",
]
