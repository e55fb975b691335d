"""Flask application factory for the vterm web UI.

The ``create_app`` function returns a Flask app serving one terminal
per browser:

- ``GET /`` — render the terminal page with a fresh boot log.
- ``POST /api/execute`` — dispatch a line and return the output events.
- ``POST /api/complete`` — return completion candidates.
- ``GET /api/status`` — return the session's cwd, addon and history size.

Sessions live in memory, keyed by an id stored in Flask's signed
session cookie.  When more than ``MAX_SESSIONS`` exist the least
recently used one is closed.

Configuration comes from, in increasing priority: the defaults below,
the ``config`` mapping passed to ``create_app``, and ``VTERM_*``
environment variables (``VTERM_MAX_SESSIONS=8``).
"""

from __future__ import annotations

import secrets
import threading
import uuid
from collections import OrderedDict
from typing import Any

from flask import Flask, Response, jsonify, render_template, request, session

from vterm.completer import Completer
from vterm.output import BufferedOutput
from vterm.session import SessionState, TerminalSession
from vterm.shell import Shell

_HTTP_BAD_REQUEST = 400

_SESSION_KEY = "vterm_sid"

DEFAULT_MAX_SESSIONS = 64

SESSION_EXPIRED = "Session expired; started a new one."


class _Terminal:
    """A session, its shell, and the buffer its output lands in.

    Requests for the same browser can arrive on different threads, so
    every use of the session goes through ``_lock``.
    """

    def __init__(self) -> None:
        """Start a session that writes into a fresh buffer."""
        self._lock = threading.Lock()
        self.output = BufferedOutput()
        self.session = TerminalSession(output=self.output)
        self.session.start()
        self.shell = Shell(session=self.session)
        self.completer = Completer(self.shell)

    def page(self) -> tuple[list[str], str]:
        """Return the boot log and prompt for the terminal page."""
        with self._lock:
            self._ensure_running()
            return self.session.boot_log, self.shell.prompt

    def execute(self, line: str) -> dict[str, Any]:
        """Dispatch *line* and return its output events with the state."""
        with self._lock:
            self._ensure_running()
            self.shell.dispatch(line)
            events = [event.to_dict() for event in self.output.drain()]
            return {"output": events, **self._state()}

    def complete(self, line: str) -> list[str]:
        """Return completion candidates for the last word of *line*."""
        text = "" if line.endswith(" ") else (line.split() or [""])[-1]
        with self._lock:
            self._ensure_running()
            return self.completer.completions(text, line)

    def status(self) -> dict[str, Any]:
        """Return the state plus the history size."""
        with self._lock:
            self._ensure_running()
            return {**self._state(), "history": len(self.session.history)}

    def close(self) -> None:
        """Close the session once no request is using it."""
        with self._lock:
            self.session.close()

    def _ensure_running(self) -> None:
        """Start a new session if this one was evicted mid-request."""
        if self.session.state is not SessionState.RUNNING:
            self.output.drain()
            self.session.start()
            self.output.write_line(SESSION_EXPIRED)

    def _state(self) -> dict[str, Any]:
        """Return the fields every JSON response carries."""
        fs = self.session.filesystem
        addon = self.session.addons.active
        return {
            "cwd": fs.full_path(fs.cwd),
            "addon": addon.name if addon is not None else None,
            "prompt": self.shell.prompt,
        }


class TerminalStore:
    """Per-browser terminals, evicting the least recently used."""

    def __init__(self, *, max_sessions: int) -> None:
        """Create an empty store holding at most *max_sessions*."""
        self._terminals: OrderedDict[str, _Terminal] = OrderedDict()
        self._max_sessions = max_sessions
        self._lock = threading.Lock()

    def get(self, sid: str) -> _Terminal:
        """Return the terminal for *sid*, creating it if needed."""
        evicted: list[_Terminal] = []
        with self._lock:
            terminal = self._terminals.get(sid)
            if terminal is None:
                terminal = _Terminal()
                self._terminals[sid] = terminal
                while len(self._terminals) > self._max_sessions:
                    evicted.append(self._terminals.popitem(last=False)[1])
            else:
                self._terminals.move_to_end(sid)
        # Closing waits on the evicted terminal's lock; never hold ours meanwhile.
        for old in evicted:
            old.close()
        return terminal

    def __len__(self) -> int:
        """Return the number of live terminals."""
        return len(self._terminals)


def _current_sid() -> str:
    """Return the caller's session id, issuing one if needed."""
    sid = session.get(_SESSION_KEY)
    if not isinstance(sid, str):
        sid = uuid.uuid4().hex
        session[_SESSION_KEY] = sid
    return sid


def create_app(config: dict[str, Any] | None = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        config: Settings applied over the defaults, before ``VTERM_*``
            environment variables.

    Returns:
        A configured Flask application ready to serve.

    """
    app = Flask(__name__)
    app.config.from_mapping(
        SECRET_KEY=secrets.token_hex(32),
        MAX_SESSIONS=DEFAULT_MAX_SESSIONS,
    )
    if config is not None:
        app.config.from_mapping(config)
    app.config.from_prefixed_env("VTERM")

    store = TerminalStore(max_sessions=int(app.config["MAX_SESSIONS"]))
    app.extensions["vterm"] = store

    @app.route("/")
    def index() -> str:  # pyright: ignore[reportUnusedFunction]
        """Render the terminal page."""
        boot_log, prompt = store.get(_current_sid()).page()
        return render_template("index.html", boot_log="\n".join(boot_log), prompt=prompt)

    @app.route("/api/execute", methods=["POST"])
    def execute() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Dispatch one input line and return its output.

        Expects JSON body: ``{"command": "..."}``

        Returns:
            JSON with ``output`` (list of events), ``cwd``, ``addon``
            and ``prompt`` fields.

        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict) or not isinstance(data.get("command"), str):
            return jsonify({"error": "Missing 'command' field"}), _HTTP_BAD_REQUEST

        return jsonify(store.get(_current_sid()).execute(data["command"]))

    @app.route("/api/complete", methods=["POST"])
    def complete() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Return completion candidates for the last word of ``line``.

        Expects JSON body: ``{"line": "..."}``

        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict) or not isinstance(data.get("line"), str):
            return jsonify({"error": "Missing 'line' field"}), _HTTP_BAD_REQUEST

        candidates = store.get(_current_sid()).complete(data["line"])
        return jsonify({"candidates": candidates})

    @app.route("/api/status")
    def status() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return the caller's session status.

        Returns:
            JSON with ``cwd``, ``addon``, ``prompt`` and ``history`` fields.

        """
        return jsonify(store.get(_current_sid()).status())

    return app


def main() -> None:
    """Run the web UI development server.

    This is the ``vterm-web`` console entry point.
    """
    app = create_app()
    app.run(debug=True, port=8080)
