"""Browser-based host for vterm.

This package provides a Flask application that serves the terminal to
a web page.  The ``create_app`` factory in ``app.py`` returns an app
with four endpoints:

- ``GET /`` — HTML terminal page.
- ``POST /api/execute`` — run one input line, return the output events.
- ``POST /api/complete`` — tab-completion candidates for a partial line.
- ``GET /api/status`` — the caller's cwd, active addon and history size.

Each browser gets its own terminal session, keyed by a cookie.
"""
