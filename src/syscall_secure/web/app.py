"""Flask application factory for the SysCall Secure web console.

``create_app`` wraps one kernel in a small JSON API plus a single HTML
page that drives it:

- ``GET /`` — the console page.
- ``POST /api/login`` / ``POST /api/logout`` / ``GET /api/session``.
- ``GET /api/syscalls`` — the syscall catalogue used to build forms.
- ``POST /api/syscall`` — ``{"name": ..., "args": [...]}`` → result.
- ``GET /api/logs`` / ``DELETE /api/logs`` — read or clear the audit log.
- ``GET /api/stats`` — dashboard counters.
- ``GET /api/fs`` — the file tree for the browser view.

Every syscall goes through ``Kernel.invoke``; this module only maps
results and errors onto HTTP.
"""

from __future__ import annotations

from typing import Any

from flask import Flask, Response, jsonify, render_template, request

from syscall_secure.config import config_from_env
from syscall_secure.errors import (
    AlreadyExists,
    NotAuthenticated,
    NotFound,
    PermissionDenied,
    SyscallError,
)
from syscall_secure.kernel import Kernel
from syscall_secure.syscalls import syscall_catalogue

_HTTP_BAD_REQUEST = 400
_HTTP_UNAUTHORIZED = 401
_HTTP_FORBIDDEN = 403
_HTTP_NOT_FOUND = 404
_HTTP_CONFLICT = 409

# First match wins, so subclasses must come before their bases.
_ERROR_STATUS: tuple[tuple[type[SyscallError], int], ...] = (
    (NotAuthenticated, _HTTP_UNAUTHORIZED),
    (PermissionDenied, _HTTP_FORBIDDEN),
    (NotFound, _HTTP_NOT_FOUND),
    (AlreadyExists, _HTTP_CONFLICT),
)


def status_for(error: SyscallError) -> int:
    """Return the HTTP status code for a syscall error."""
    for error_type, status in _ERROR_STATUS:
        if isinstance(error, error_type):
            return status
    return _HTTP_BAD_REQUEST


def _session_json(kernel: Kernel) -> dict[str, Any] | None:
    session = kernel.session
    return session.to_dict() if session is not None else None


def create_app(kernel: Kernel | None = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        kernel: The kernel to serve; a fresh one is built from the
            environment's configuration when omitted.

    Returns:
        A configured Flask application ready to serve.

    """
    if kernel is None:
        kernel = Kernel.from_config(config_from_env())

    app = Flask(__name__)
    app.extensions["syscall_secure.kernel"] = kernel

    @app.route("/")
    def index() -> str:  # pyright: ignore[reportUnusedFunction]
        """Render the console page."""
        return render_template("index.html", os_name=kernel.config.os_name)

    @app.route("/api/login", methods=["POST"])
    def login() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Log in with ``{"username": ..., "password": ...}``."""
        data = request.get_json(silent=True)
        if not isinstance(data, dict) or "username" not in data or "password" not in data:
            return jsonify({"error": "Missing 'username' or 'password' field"}), _HTTP_BAD_REQUEST

        if not kernel.login(str(data["username"]), str(data["password"])):
            return jsonify({"ok": False, "error": "Invalid credentials"}), _HTTP_UNAUTHORIZED
        return jsonify({"ok": True, "session": _session_json(kernel)})

    @app.route("/api/logout", methods=["POST"])
    def logout() -> Response:  # pyright: ignore[reportUnusedFunction]
        """End the current session."""
        kernel.logout()
        return jsonify({"ok": True})

    @app.route("/api/session")
    def session() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return the current session, or null."""
        return jsonify({"session": _session_json(kernel)})

    @app.route("/api/syscalls")
    def syscalls() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return the syscall catalogue."""
        return jsonify({"syscalls": syscall_catalogue()})

    @app.route("/api/syscall", methods=["POST"])
    def syscall() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Invoke ``{"name": ..., "args": [...]}`` and return its result.

        Returns:
            JSON with ``result`` on success, or ``error`` with a status
            code chosen from the error's kind.

        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict) or not isinstance(data.get("name"), str):
            return jsonify({"error": "Missing 'name' field"}), _HTTP_BAD_REQUEST
        args = data.get("args", [])
        if not isinstance(args, list):
            return jsonify({"error": "'args' must be a list"}), _HTTP_BAD_REQUEST

        try:
            result = kernel.invoke(data["name"], args)
        except SyscallError as e:
            return jsonify({"error": str(e)}), status_for(e)
        return jsonify({"result": result})

    @app.route("/api/logs", methods=["GET"])
    def logs() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return the audit log, newest first."""
        return jsonify({"logs": [entry.to_dict() for entry in kernel.logs()]})

    @app.route("/api/logs", methods=["DELETE"])
    def clear_logs() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Clear the audit log."""
        kernel.clear_logs()
        return jsonify({"ok": True})

    @app.route("/api/stats")
    def stats() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return syscall, violation, and process counters."""
        return jsonify(kernel.stats())

    @app.route("/api/fs")
    def filesystem() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return the file tree."""
        return jsonify({"tree": kernel.filesystem_tree()})

    return app


def main() -> None:
    """Run the web console development server.

    This is the ``syscall-secure-web`` console entry point.
    """
    app = create_app()
    app.run(debug=True, port=8080)
