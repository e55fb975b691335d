"""Tests for the browser-based web UI.

The Flask app serves the terminal page and a small JSON API.  Each
browser (cookie) gets its own terminal session.  Tests use
``pytest.importorskip`` so they are skipped gracefully when Flask is
not installed.
"""

from __future__ import annotations

import threading
from typing import Any

import pytest

flask = pytest.importorskip("flask")

from vterm.session import SessionState  # noqa: E402
from vterm.web.app import SESSION_EXPIRED, TerminalStore, create_app  # noqa: E402

HTTP_OK = 200
HTTP_BAD_REQUEST = 400


def _create_client(config: dict[str, Any] | None = None) -> Any:
    """Create a test client from a fresh app."""
    app = create_app({"TESTING": True, **(config or {})})
    return app.test_client()


def _execute(client: Any, command: str) -> dict[str, Any]:
    """POST a command and return the decoded JSON."""
    response = client.post("/api/execute", json={"command": command})
    assert response.status_code == HTTP_OK
    return response.get_json()


# -- Cycle 1: App creation and index page -----------------------------------


class TestAppCreation:
    """Verify app factory and landing page."""

    def test_create_app_returns_flask(self) -> None:
        """create_app should return a Flask application."""
        assert isinstance(create_app(), flask.Flask)

    def test_index_returns_html(self) -> None:
        """GET / should return the terminal page with the boot log."""
        client = _create_client()
        response = client.get("/")
        assert response.status_code == HTTP_OK
        assert "text/html" in response.content_type
        assert b"vterm" in response.data
        assert b"[OK] File system" in response.data

    def test_config_override(self) -> None:
        """Settings passed to create_app should win over defaults."""
        app = create_app({"MAX_SESSIONS": 3})
        assert app.config["MAX_SESSIONS"] == 3

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """VTERM_* environment variables should win over everything."""
        monkeypatch.setenv("VTERM_MAX_SESSIONS", "5")
        app = create_app({"MAX_SESSIONS": 3})
        assert app.config["MAX_SESSIONS"] == 5


# -- Cycle 2: Execute endpoint ----------------------------------------------


class TestExecuteEndpoint:
    """Verify the /api/execute POST endpoint."""

    def test_ls_returns_line_events(self) -> None:
        """ls / should return one line event per entry."""
        data = _execute(_create_client(), "ls /")
        assert data["output"] == [
            {"kind": "line", "text": "C/"},
            {"kind": "line", "text": "D/"},
            {"kind": "line", "text": "readme.txt"},
        ]
        assert data["cwd"] == "/"
        assert data["addon"] is None

    def test_state_persists_between_requests(self) -> None:
        """The same client keeps its cwd across requests."""
        client = _create_client()
        data = _execute(client, "cd C")
        assert data["output"] == []
        assert data["cwd"] == "/C"
        assert data["prompt"] == "/C $ "
        assert _execute(client, "pwd")["output"] == [{"kind": "line", "text": "/C"}]

    def test_clear_event(self) -> None:
        """clear should come back as a clear event."""
        data = _execute(_create_client(), "clear")
        assert data["output"] == [{"kind": "clear", "text": ""}]

    def test_unknown_command(self) -> None:
        """Unknown commands are reported in the output."""
        data = _execute(_create_client(), "nonexistent_cmd")
        assert data["output"][0]["text"] == "Command not recognized: nonexistent_cmd."

    def test_addon_reported(self) -> None:
        """While an addon runs, the response names it."""
        client = _create_client()
        assert _execute(client, "run echo")["addon"] == "echo"
        data = _execute(client, "hello")
        assert data["output"] == [{"kind": "line", "text": "[echo]> hello"}]
        assert _execute(client, "exit")["addon"] is None


# -- Cycle 3: Sessions ------------------------------------------------------


class TestSessions:
    """Verify per-browser isolation and eviction."""

    def test_clients_are_isolated(self) -> None:
        """Two browsers should not see each other's files."""
        app = create_app({"TESTING": True})
        alice, bob = app.test_client(), app.test_client()
        _execute(alice, "touch alice.txt")
        listing = [e["text"] for e in _execute(bob, "ls /")["output"]]
        assert "alice.txt" not in listing

    def test_store_evicts_least_recently_used(self) -> None:
        """The store should never hold more than its limit."""
        store = TerminalStore(max_sessions=2)
        first = store.get("a")
        store.get("b")
        store.get("a")
        store.get("c")
        assert len(store) == 2
        assert store.get("a") is first

    def test_evicted_terminal_still_answers(self) -> None:
        """A terminal evicted while a request holds it starts over instead of failing."""
        store = TerminalStore(max_sessions=1)
        stale = store.get("a")
        store.get("b")
        assert stale.session.state is SessionState.CLOSED
        data = stale.execute("pwd")
        assert data["output"] == [
            {"kind": "line", "text": SESSION_EXPIRED},
            {"kind": "line", "text": "/"},
        ]
        assert data["cwd"] == "/"

    def test_execute_returns_only_its_own_events(self) -> None:
        """Each execute drains exactly the events its command produced."""
        store = TerminalStore(max_sessions=1)
        terminal = store.get("a")
        first = terminal.execute("echo one")
        second = terminal.execute("echo two")
        assert first["output"] == [{"kind": "line", "text": "one"}]
        assert second["output"] == [{"kind": "line", "text": "two"}]

    def test_eviction_waits_for_request_in_progress(self) -> None:
        """Closing an evicted terminal blocks until its current request ends."""
        store = TerminalStore(max_sessions=1)
        busy = store.get("a")
        with busy._lock:
            evictor = threading.Thread(target=store.get, args=("b",))
            evictor.start()
            evictor.join(timeout=0.2)
            assert evictor.is_alive()
            assert busy.session.state is SessionState.RUNNING
        evictor.join(timeout=5)
        assert not evictor.is_alive()
        assert busy.session.state is SessionState.CLOSED


# -- Cycle 4: Completion and status ------------------------------------------


class TestCompleteAndStatus:
    """Verify /api/complete and /api/status."""

    def test_complete_command(self) -> None:
        """A partial command name completes."""
        client = _create_client()
        response = client.post("/api/complete", json={"line": "hel"})
        assert response.get_json()["candidates"] == ["help"]

    def test_complete_path(self) -> None:
        """A path argument completes against the tree."""
        client = _create_client()
        response = client.post("/api/complete", json={"line": "cd /C/P"})
        assert response.get_json()["candidates"] == ["/C/Program Files/"]

    def test_status(self) -> None:
        """Status reports cwd, addon and history size."""
        client = _create_client()
        _execute(client, "cd D")
        data = client.get("/api/status").get_json()
        assert data["cwd"] == "/D"
        assert data["addon"] is None
        assert data["history"] == 1


# -- Cycle 5: Error handling ------------------------------------------------


class TestErrorHandling:
    """Verify error responses for malformed requests."""

    def test_missing_command_field(self) -> None:
        """POST /api/execute without 'command' should return 400."""
        client = _create_client()
        response = client.post("/api/execute", json={"wrong_field": "help"})
        assert response.status_code == HTTP_BAD_REQUEST

    def test_no_json_body(self) -> None:
        """POST /api/execute with no JSON should return 400."""
        client = _create_client()
        response = client.post("/api/execute", data="not json")
        assert response.status_code == HTTP_BAD_REQUEST

    def test_complete_missing_line(self) -> None:
        """POST /api/complete without 'line' should return 400."""
        client = _create_client()
        response = client.post("/api/complete", json={})
        assert response.status_code == HTTP_BAD_REQUEST
