"""Local preview server for the compiled output tree."""

from __future__ import annotations

import errno
import logging
import socket
from pathlib import Path
from urllib.parse import unquote, urlsplit

import uvicorn
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import FileResponse, PlainTextResponse, Response
from starlette.routing import Route

from sitesmith.errors import PortInUseError
from sitesmith.pipeline.models import OUTPUT_EXTENSION

logger = logging.getLogger(__name__)

INDEX_FILE = "index" + OUTPUT_EXTENSION
NOT_FOUND_BODY = b"404, Page not found...."


def _inside(path: Path, root: Path) -> bool:
    return path.resolve().is_relative_to(root.resolve())


def resolve_request_path(out_dir: Path, url_path: str) -> Path | None:
    """Map a request path to a file in ``out_dir``, or None for a 404.

    ``/`` is the root index. Other paths try the exact file, then a
    directory's index, then the path with ``.html`` appended.
    """
    out_dir = Path(out_dir)
    path = unquote(urlsplit(url_path).path)

    if path == "/":
        candidate = out_dir / INDEX_FILE
        return candidate if candidate.is_file() else None

    relative = path.lstrip("/")
    candidate = out_dir / relative
    if not _inside(candidate, out_dir):
        return None

    if candidate.exists():
        if candidate.is_dir():
            index = candidate / INDEX_FILE
            return index if index.is_file() else None
        return candidate

    if not relative.endswith(OUTPUT_EXTENSION):
        relative += OUTPUT_EXTENSION
    fallback = out_dir / relative
    if fallback.is_file() and _inside(fallback, out_dir):
        return fallback
    return None


def create_app(out_dir: Path) -> Starlette:
    """ASGI app serving files resolved by :func:`resolve_request_path`."""
    out_dir = Path(out_dir)

    async def serve_file(request: Request) -> Response:
        file = resolve_request_path(out_dir, request.url.path)
        if file is None:
            return PlainTextResponse(NOT_FOUND_BODY, status_code=404)
        return FileResponse(file)

    return Starlette(routes=[Route("/{path:path}", serve_file, methods=["GET", "HEAD"])])


def bind_socket(port: int, host: str = "") -> socket.socket:
    """Bind the listening socket. Raises PortInUseError if ``port`` is taken."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host, port))
    except OSError as e:
        sock.close()
        if e.errno == errno.EADDRINUSE:
            raise PortInUseError(port) from e
        raise
    return sock


def run_server(out_dir: Path, port: int) -> None:
    """Serve ``out_dir`` until interrupted."""
    # uvicorn exits the process on bind errors, so the socket is bound here.
    sock = bind_socket(port)
    logger.info("serving %s on :%d", out_dir, sock.getsockname()[1])
    config = uvicorn.Config(create_app(out_dir), log_config=None)
    try:
        uvicorn.Server(config).run(sockets=[sock])
    finally:
        sock.close()
    logger.info("preview server stopped")
