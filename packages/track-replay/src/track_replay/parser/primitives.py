# SPDX-License-Identifier: MIT
"""Parse and format the primitive values used inside track lines."""

from __future__ import annotations

import math
import re

from track_replay.errors import MalformedPrimitiveError

# Separator between the components of a vector or quaternion
COMPONENT_SEPARATOR = ","

# Default Python format spec applied to every encoded number
DEFAULT_NUMBER_FORMAT = ".4f"

INT_PATTERN = re.compile(r"-?\d+")

Quaternion = tuple[float, float, float, float]
Vector3 = tuple[float, float, float]


def parse_float(text: str) -> float:
    """Parse a locale-invariant decimal number.

    Args:
        text: The field text, e.g. "0.25" or "-1.5e-3"

    Returns:
        The parsed float

    Raises:
        MalformedPrimitiveError: If the text is not a finite decimal number
    """
    stripped = text.strip()
    if not stripped or "_" in stripped:
        raise MalformedPrimitiveError(f"Invalid number: {text!r}")
    try:
        value = float(stripped)
    except ValueError:
        raise MalformedPrimitiveError(f"Invalid number: {text!r}") from None
    if not math.isfinite(value):
        raise MalformedPrimitiveError(f"Number must be finite: {text!r}")
    return value


def parse_int(text: str) -> int:
    """Parse a signed decimal integer such as a bone or joint index."""
    stripped = text.strip()
    if not INT_PATTERN.fullmatch(stripped):
        raise MalformedPrimitiveError(f"Invalid integer: {text!r}")
    return int(stripped)


def _parse_components(text: str, count: int, what: str) -> tuple[float, ...]:
    parts = text.split(COMPONENT_SEPARATOR)
    if len(parts) != count:
        raise MalformedPrimitiveError(
            f"Expected {count} {what} components, got {len(parts)}: {text!r}"
        )
    return tuple(parse_float(part) for part in parts)


def parse_quaternion(text: str) -> Quaternion:
    """Parse a quaternion stored as "x,y,z,w".

    The value is returned exactly as stored. No normalization is applied, so a
    corrupted quaternion stays visible to the caller.

    Args:
        text: Four comma separated numbers in (x, y, z, w) order

    Returns:
        Quaternion as (x, y, z, w)

    Raises:
        MalformedPrimitiveError: On a wrong component count or a bad number
    """
    return _parse_components(text, 4, "quaternion")  # type: ignore[return-value]


def parse_vector3(text: str) -> Vector3:
    """Parse a vector stored as "x,y,z"."""
    return _parse_components(text, 3, "vector")  # type: ignore[return-value]


def format_number(value: float, number_format: str = DEFAULT_NUMBER_FORMAT) -> str:
    """Format a number with a Python format spec (e.g. ".4f" or ".6g")."""
    return format(float(value), number_format)


def format_quaternion(
    quat: Quaternion, number_format: str = DEFAULT_NUMBER_FORMAT
) -> str:
    """Format a quaternion (x, y, z, w) as "x,y,z,w"."""
    if len(quat) != 4:
        raise ValueError(f"Expected 4 quaternion components, got {len(quat)}")
    return COMPONENT_SEPARATOR.join(format_number(c, number_format) for c in quat)


def format_vector3(vec: Vector3, number_format: str = DEFAULT_NUMBER_FORMAT) -> str:
    """Format a vector (x, y, z) as "x,y,z"."""
    if len(vec) != 3:
        raise ValueError(f"Expected 3 vector components, got {len(vec)}")
    return COMPONENT_SEPARATOR.join(format_number(c, number_format) for c in vec)
