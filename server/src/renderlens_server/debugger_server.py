"""Web server hosting an instrumented page and the debugger assets.

Every request to ``/`` renders the host page through a fresh ``Debugger`` so
one trace covers exactly one rendering pass.
"""

from __future__ import annotations

import errno
import logging
from collections.abc import Callable
from pathlib import Path

from flask import Flask, Response, jsonify, request
from werkzeug.serving import BaseWSGIServer, make_server

from .config import DebuggerConfig
from .debugger import Debugger, RenderHooks
from .debugger_page import render_debugger_js, render_debugger_page
from .expression import ExpressionEvaluator
from .output_formatter import format_output_html, output_css
from .port_discovery import clear_port_file, get_discovery_file_path, write_port_file
from .snippet_js import render_snippet_js

# Configure Flask's logging to suppress request spam by default
logging.getLogger('werkzeug').setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

ROUTE_PREFIX = "/_renderlens"

PageRenderer = Callable[[RenderHooks], str]


class DebuggerServer:
    """Web server for one instrumented page.

    Attributes:
        page_renderer: Host renderer; renders the page through the hooks it is given.
        config: Debugger configuration used for every request.
        app: Flask application instance.
    """

    def __init__(
        self,
        page_renderer: PageRenderer,
        config: DebuggerConfig | None = None,
        port: int = 5175,
        host: str = "127.0.0.1",
        port_file: Path | None = None,
        evaluator: ExpressionEvaluator | None = None,
    ) -> None:
        self.page_renderer = page_renderer
        self.config = config or DebuggerConfig()
        self.evaluator = evaluator
        self.requested_port = port
        self.actual_port = port
        self.host = host
        self.app = Flask(__name__)
        self._running = False
        self._server: BaseWSGIServer | None = None
        self.port_file = port_file or get_discovery_file_path()
        self._setup_routes()

    def _setup_routes(self) -> None:
        """Set up Flask routes."""

        @self.app.route("/", methods=["GET", "POST"])
        def index():
            debugger = Debugger(self.config, self.evaluator)
            output = self.page_renderer(debugger)
            values = request.values.to_dict()
            body = debugger.post_process(output, values)
            if values.get(self.config.expression_parameter):
                return Response(body, mimetype="application/json")
            return Response(body, mimetype="text/html")

        @self.app.route(f"{ROUTE_PREFIX}/snippet.js")
        def snippet_js():
            return Response(render_snippet_js(self.config), mimetype="application/javascript")

        @self.app.route(f"{ROUTE_PREFIX}/debugger.js")
        def debugger_js():
            return Response(render_debugger_js(self.config), mimetype="application/javascript")

        @self.app.route(f"{ROUTE_PREFIX}/debugger")
        def debugger_page():
            return Response(render_debugger_page(self.config), mimetype="text/html")

        @self.app.route(f"{ROUTE_PREFIX}/api/format-output", methods=["POST"])
        def format_output():
            payload = request.get_json(silent=True)
            if not isinstance(payload, dict) or not isinstance(payload.get("output", ""), str):
                return jsonify({"error": "invalid_request", "message": "expected {\"output\": string}"}), 400
            return jsonify({
                "html": format_output_html(payload.get("output", "")),
                "css": output_css(),
            })

    def start(self) -> None:
        """Serve the instrumented page until ``stop`` is called (blocking)."""
        self._running = True
        self._server = self._create_server()
        self.actual_port = self._server.server_port
        self._write_port_file()
        logger.info("Instrumented page at %s", self.page_url())
        logger.info("Observer view at %s", self.observer_url())
        try:
            self._server.serve_forever()
        finally:
            self._running = False

    def stop(self) -> None:
        """Stop serving and release the port file if it still names this server."""
        self._running = False
        if self._server is not None:
            self._server.shutdown()
            clear_port_file(self.actual_port, self.port_file)

    def is_running(self) -> bool:
        return self._running

    def test_client(self):
        return self.app.test_client()

    def page_url(self) -> str:
        return f"http://{self.host}:{self.actual_port}/"

    def observer_url(self) -> str:
        return f"http://{self.host}:{self.actual_port}{ROUTE_PREFIX}/debugger"

    def _create_server(self) -> BaseWSGIServer:
        try:
            return make_server(self.host, self.requested_port, self.app, threaded=True)
        except (SystemExit, OSError) as exc:
            if isinstance(exc, OSError) and not _is_address_in_use(exc):
                raise
        logger.warning("Port %s is taken; serving renderlens on a free port", self.requested_port)
        return make_server(self.host, 0, self.app, threaded=True)

    def _write_port_file(self) -> None:
        try:
            write_port_file(self.actual_port, self.port_file)
        except OSError as exc:
            logger.warning("Could not record port in %s: %s", self.port_file, exc)
        else:
            logger.debug("Port %s recorded in %s", self.actual_port, self.port_file)


def _is_address_in_use(exc: OSError) -> bool:
    return exc.errno in {errno.EADDRINUSE, 48} or "Address already in use" in str(exc)
