# SPDX-License-Identifier: MIT
"""Track Recording Server - Record simulation states as replayable track logs."""

from track_recording_server.server import RecorderApp, RequestError, run_server

__version__ = "0.1.0"
__all__ = ["RecorderApp", "RequestError", "run_server"]
