"""Command-line entry point: runs the HTTP API and the MCP stdio server together."""

from __future__ import annotations

import logging
import os
import sys
import threading
from collections.abc import Sequence
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from .config import ConfigError, load
from .http_api import create_app
from .mcp_server import MCPHandler
from .repository import RepositoryError, SqliteTodoRepository
from .usecase import TodolistUseCase

logger = logging.getLogger(__name__)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000
HOST_VAR = "TODO_HTTP_ADDRESS"
PORT_VAR = "TODO_HTTP_PORT"


class _LoggingRequestHandler(WSGIRequestHandler):
    def log_message(self, format: str, *args: object) -> None:
        logger.info("%s - %s", self.address_string(), format % args)


def build_use_case(database_url: str) -> TodolistUseCase:
    """Open the todo database and wrap it in the application use case."""
    return TodolistUseCase(SqliteTodoRepository(database_url))


def _http_server(use_case: TodolistUseCase, host: str, port: int) -> WSGIServer:
    return make_server(host, port, create_app(use_case), handler_class=_LoggingRequestHandler)


def run_http(use_case: TodolistUseCase, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> None:
    """Serve the HTTP API until interrupted."""
    with _http_server(use_case, host, port) as server:
        logger.info("HTTP server listening on %s:%s", host, server.server_port)
        server.serve_forever()


def main(argv: Sequence[str] | None = None) -> int:
    """Run the HTTP API and the MCP server on stdio; stop when either ends or on Ctrl+C."""
    logging.basicConfig(
        level=logging.INFO,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        config = load(argv)
    except ConfigError as exc:
        logger.error("%s", exc)
        return 1

    logger.info("Start the application")
    try:
        use_case = build_use_case(config.database_url)
    except RepositoryError as exc:
        logger.error("%s", exc)
        return 1

    host = os.environ.get(HOST_VAR, DEFAULT_HOST)
    try:
        port = int(os.environ.get(PORT_VAR, DEFAULT_PORT))
        server = _http_server(use_case, host, port)
    except (ValueError, OSError) as exc:
        logger.error("Failed to start the HTTP server: %s", exc)
        return 1
    logger.info("HTTP server listening on %s:%s", host, server.server_port)

    finished = threading.Event()

    def serve_http() -> None:
        try:
            server.serve_forever()
        finally:
            logger.info("HTTP server exited")
            finished.set()

    def serve_mcp() -> None:
        try:
            MCPHandler(use_case).serve(sys.stdin, sys.stdout)
        finally:
            logger.info("MCP service exited")
            finished.set()

    for target in (serve_http, serve_mcp):
        threading.Thread(target=target, daemon=True).start()

    try:
        while not finished.wait(0.5):
            pass
    except KeyboardInterrupt:
        logger.info("Ctrl+C received. Shutting down...")
    finally:
        server.shutdown()
        server.server_close()
    return 0


if __name__ == "__main__":
    sys.exit(main())