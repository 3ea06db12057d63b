# SPDX-License-Identifier: MIT
"""Parser module for track log files."""

from .log_file import (
    ParsedObject,
    format_log_file,
    load_log_file,
    parse_log_file,
    read_log_file,
    write_log_file,
)
from .primitives import (
    DEFAULT_NUMBER_FORMAT,
    format_number,
    parse_float,
    parse_quaternion,
    parse_vector3,
)

__all__ = [
    "ParsedObject",
    "parse_log_file",
    "format_log_file",
    "read_log_file",
    "write_log_file",
    "load_log_file",
    "DEFAULT_NUMBER_FORMAT",
    "format_number",
    "parse_float",
    "parse_quaternion",
    "parse_vector3",
]
