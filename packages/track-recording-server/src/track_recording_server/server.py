# SPDX-License-Identifier: MIT
"""Flask server for recording simulation states into a track log."""

from __future__ import annotations

from pathlib import Path

import flask

from track_replay.errors import TrackLogError
from track_replay.parser.log_file import check_header_name
from track_replay.parser.primitives import parse_float, parse_quaternion, parse_vector3
from track_replay.recording.recorder import RecordingSession
from track_replay.recording.settings import RecordingSettings
from track_replay.tracks.codec import (
    SkeletalCodec,
    TrackKind,
    check_reserved,
    kind_from_name,
)
from track_replay.tracks.samples import (
    AnimationSample,
    PositionSample,
    RotationSample,
    SkeletonSetup,
)


class RequestError(TrackLogError):
    """A request is missing a field or arrives out of order."""


class RecorderApp(flask.Flask):
    """Flask server application for recording simulation states.

    A running simulation posts one sample per object and track. Every accepted
    sample is appended to the session and the whole log is written to disk, so
    the file on disk is always a loadable log.
    """

    def __init__(
        self,
        *,
        log_dump_path: Path | None = None,
        settings: RecordingSettings | None = None,
    ):
        super().__init__("track_recording_server")

        self._log_dump_path = log_dump_path
        self._session = RecordingSession(settings)
        self._setups: dict[str, SkeletonSetup] = {}

        self.add_url_rule("/", view_func=self._root_endpoint)
        self.add_url_rule(
            rule="/setup",
            endpoint="/setup",
            methods=["POST"],
            view_func=self._setup_endpoint,
        )
        self.add_url_rule(
            rule="/record",
            endpoint="/record",
            methods=["POST"],
            view_func=self._record_endpoint,
        )
        self.add_url_rule(rule="/log", endpoint="/log", view_func=self._log_endpoint)

    @property
    def session(self) -> RecordingSession:
        return self._session

    def _root_endpoint(self) -> str:
        """Display a banner page at the server root."""
        return """\
        <!doctype html>
        <html><body><h1>Track Recording Server</h1></body></html>
        """

    def _setup_endpoint(self):
        """Store the skeleton setup of an object before its skeletal samples."""
        try:
            form = flask.request.form
            name = self._object_name(form)
            codec = SkeletalCodec()
            bones = codec.parse_rig(self._require(form, "rig"))
            skins = codec.parse_skins(form.get("skins", ""), len(bones))
            controller = check_reserved(form.get("controller", ""), "Controller path")
            setup = SkeletonSetup(bones=bones, skins=skins, controller_path=controller)

            self._setups[name] = setup
            obj = self._session.get_object(name)
            recorder = obj.get_track(TrackKind.SKELETAL) if obj is not None else None
            if recorder is not None:
                recorder.setup = setup
            print(f"Stored setup for {name} ({len(bones)} bones, {len(skins)} skins)")
            return {"object": name, "bones": len(bones), "skins": len(skins)}
        except Exception as e:
            return self._error_response(e)

    def _record_endpoint(self):
        """Append one sample to an object's track and dump the log to disk."""
        try:
            form = flask.request.form
            name = self._object_name(form)
            kind = kind_from_name(self._require(form, "track"))
            timestamp = parse_float(self._require(form, "time"))

            setup = None
            if kind == TrackKind.ROTATION:
                sample = RotationSample(
                    timestamp=timestamp,
                    rotation=parse_quaternion(self._require(form, "value")),
                )
            elif kind == TrackKind.POSITION:
                sample = PositionSample(
                    timestamp=timestamp,
                    position=parse_vector3(self._require(form, "value")),
                )
            else:
                setup = self._setups.get(name)
                if setup is None:
                    raise RequestError(
                        f"Skeletal samples for {name!r} require a prior /setup"
                    )
                sample = AnimationSample(
                    timestamp=timestamp,
                    clip_name=check_reserved(self._require(form, "clip"), "Clip name"),
                    normalized_time=parse_float(self._require(form, "normalized_time")),
                )

            self._session.track(name, kind, setup).record_sample(sample)
            count = self._session.sample_count()
            print(f"Recorded sample {count} ({name}/{kind.value} at {timestamp})")
            self._dump_log()
            return {"recorded": count}
        except Exception as e:
            return self._error_response(e)

    def _log_endpoint(self) -> flask.Response:
        """Return the current log text."""
        return flask.Response(self._session.to_log_text(), mimetype="text/plain")

    def _object_name(self, form) -> str:
        name = self._require(form, "object")
        check_header_name(name, "Object name")
        return name

    def _require(self, form, name: str) -> str:
        value = form.get(name)
        if value is None:
            raise RequestError(f"Missing form field: {name}")
        return value

    def _dump_log(self) -> None:
        """Write the accumulated log to disk."""
        if self._log_dump_path:
            self._session.dump(self._log_dump_path)

    def _error_response(self, e: Exception):
        if isinstance(e, (TrackLogError, ValueError)):
            code = 400
            message = str(e)
            print(f"Warning: rejected request: {message}")
        else:
            code = 500
            message = f"Internal server error: {repr(e)}"
        return (
            {
                "error": True,
                "message": message,
                "code": code,
            },
            code,
        )


def run_server(
    *,
    host: str = "127.0.0.1",
    port: int = 8000,
    log_dump_path: Path,
    number_format: str | None = None,
) -> None:
    """Run the recording server."""
    settings = RecordingSettings()
    if number_format is not None:
        settings = RecordingSettings(number_format=number_format)
    app = RecorderApp(log_dump_path=log_dump_path, settings=settings)
    app.run(host=host, port=port, threaded=False)
