"""Preview server that renders blog pages on request.

The listing and detail views are rendered from the configured source for every
request; all other paths are served as static files from the site directory.
"""

from __future__ import annotations

import contextlib
import logging
import threading
from dataclasses import dataclass
from http import HTTPStatus
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Iterator
from urllib.parse import urlsplit

from .config import Config
from .listing import build_listing_view
from .markdown import highlight_stylesheet
from .pages import HIGHLIGHT_CSS, PageRenderer
from .posts import PostFailure, PostPipeline, slug_from_query
from .sources import ResourceSource

logger = logging.getLogger(__name__)

POST_PAGE = "blog-post.html"


class _ThreadingHTTPServer(ThreadingHTTPServer):
    daemon_threads = True
    allow_reuse_address = True


def make_request_handler(config: Config, source: ResourceSource) -> type[SimpleHTTPRequestHandler]:
    """Create a request handler rendering blog pages from ``source``."""
    directory_path = str(config.site_dir)
    renderer = PageRenderer(config)
    listing_route = "/" + config.listing_href.lstrip("/")
    post_route = "/" + POST_PAGE
    stylesheet = highlight_stylesheet(config.highlight_style)

    class PreviewRequestHandler(SimpleHTTPRequestHandler):
        def __init__(self, *args: Any, **kwargs: Any) -> None:
            super().__init__(*args, directory=directory_path, **kwargs)

        extensions_map = dict(SimpleHTTPRequestHandler.extensions_map)
        extensions_map.update(
            {
                ".json": "application/json; charset=utf-8",
                ".md": "text/markdown; charset=utf-8",
                ".css": "text/css; charset=utf-8",
                ".js": "application/javascript; charset=utf-8",
                ".svg": "image/svg+xml",
                ".webp": "image/webp",
            }
        )

        def do_GET(self) -> None:  # noqa: N802 - http.server naming
            parts = urlsplit(self.path)
            if parts.path in {"/", listing_route}:
                view = build_listing_view(source, config)
                status = HTTPStatus.INTERNAL_SERVER_ERROR if view.is_error else HTTPStatus.OK
                self._send(status, renderer.render_listing(view), "text/html; charset=utf-8")
                return
            if parts.path == post_route:
                result = PostPipeline(source, config).run(slug_from_query(parts.query))
                status = HTTPStatus.OK
                if result.error is not None:
                    status = (
                        HTTPStatus.NOT_FOUND
                        if result.error.failure is PostFailure.NOT_FOUND
                        else HTTPStatus.BAD_GATEWAY
                    )
                self._send(status, renderer.render_post(result), "text/html; charset=utf-8")
                return
            if parts.path == "/" + HIGHLIGHT_CSS:
                self._send(HTTPStatus.OK, stylesheet, "text/css; charset=utf-8")
                return
            super().do_GET()

        def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
            logger.info("%s - %s", self.address_string(), format % args)

        def _send(self, status: HTTPStatus, body: str, content_type: str) -> None:
            payload = body.encode("utf-8")
            self.send_response(status)
            self.send_header("Content-Type", content_type)
            self.send_header("Content-Length", str(len(payload)))
            self.end_headers()
            self.wfile.write(payload)

    return PreviewRequestHandler


@contextlib.contextmanager
def serve(
    host: str,
    port: int,
    handler: type[SimpleHTTPRequestHandler],
) -> Iterator[ThreadingHTTPServer]:
    """Context manager that creates and cleans up the HTTP server."""
    server = _ThreadingHTTPServer((host, port), handler)
    try:
        yield server
    finally:
        server.server_close()


@dataclass(slots=True)
class PreviewServerHandle:
    server: ThreadingHTTPServer
    thread: threading.Thread
    host: str
    port: int

    @property
    def url(self) -> str:
        host = "127.0.0.1" if self.host in {"0.0.0.0", ""} else self.host
        return f"http://{host}:{self.port}/"


def bound_address(server: ThreadingHTTPServer) -> tuple[str, int]:
    raw_host = server.server_address[0]
    host = raw_host.decode("utf-8", "ignore") if isinstance(raw_host, bytes) else str(raw_host)
    return host, int(server.server_address[1])


def start_preview(
    config: Config,
    source: ResourceSource,
    *,
    host: str = "127.0.0.1",
    port: int = 8000,
) -> PreviewServerHandle:
    """Start the preview server in a background thread; ``port=0`` picks a free port."""
    handler = make_request_handler(config, source)
    server = _ThreadingHTTPServer((host, port), handler)
    bound_host, bound_port = bound_address(server)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    return PreviewServerHandle(server=server, thread=thread, host=bound_host, port=bound_port)


def stop_preview(handle: PreviewServerHandle | None) -> None:
    """Stop a running preview server started by ``start_preview``."""
    if handle is None:
        return
    try:
        handle.server.shutdown()
    finally:
        handle.server.server_close()
    if handle.thread.is_alive():
        handle.thread.join(timeout=2.0)
