import json
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union
from urllib.parse import urlparse, parse_qs

from .runtime import GreetingHandler
from .utils import write_log


GREETING_PATH = "/greeting"


class GreeterServer(ThreadingHTTPServer):
    """Threaded HTTP server that owns the greeting handler and its counter."""

    def __init__(
        self,
        server_address,
        handler: Optional[GreetingHandler] = None,
        quiet: bool = False,
        log_file: Optional[Union[str, Path]] = None,
    ):
        super().__init__(server_address, GreeterRequestHandler)
        self.greeting_handler = handler if handler is not None else GreetingHandler()
        self.quiet = bool(quiet)
        self.log_file = Path(log_file) if log_file else None


class GreeterRequestHandler(BaseHTTPRequestHandler):
    server_version = "greeter/0.1"

    def __getattr__(self, name: str):
        # OPTIONS, TRACE and any other verb route through _handle too
        if name.startswith("do_"):
            return self._handle
        raise AttributeError(name)

    def log_message(self, format: str, *args) -> None:
        if self.server.quiet:
            return
        super().log_message(format, *args)

    def _send(self, status: int, headers: Dict[str, str], body: bytes):
        self.send_response(status)
        headers = {**headers, "Content-Length": str(len(body))}
        for key, value in headers.items():
            self.send_header(key, value)
        self.end_headers()
        # HEAD carries the length of the body it would have sent, not the body
        if self.command != "HEAD":
            self.wfile.write(body)

    @staticmethod
    def _error_payload(status: HTTPStatus, path: str) -> Dict[str, Any]:
        return {"status": int(status), "error": status.phrase, "path": path}

    def _dispatch(self, path: str, query: Dict[str, list]) -> Tuple[HTTPStatus, Dict[str, str], Any]:
        if path.rstrip("/") != GREETING_PATH:
            return HTTPStatus.NOT_FOUND, {}, self._error_payload(HTTPStatus.NOT_FOUND, path)
        if self.command != "GET":
            status = HTTPStatus.METHOD_NOT_ALLOWED
            return status, {"Allow": "GET"}, self._error_payload(status, path)
        # repeated values bind as one comma-joined string
        values = query.get("name")
        name = ",".join(values) if values is not None else None
        try:
            greeting = self.server.greeting_handler.handle(name)
        except Exception as e:
            self.log_error("greeting failed: %r", e)
            status = HTTPStatus.INTERNAL_SERVER_ERROR
            return status, {}, self._error_payload(status, path)
        return HTTPStatus.OK, {}, greeting.to_dict()

    def _handle(self):
        parsed = urlparse(self.path)
        query = parse_qs(parsed.query, keep_blank_values=True)
        status, headers, payload = self._dispatch(parsed.path, query)
        body = json.dumps(payload).encode("utf-8")
        self._record(parsed.path, query, int(status), body)
        self._send(int(status), {"Content-Type": "application/json", **headers}, body)

    def _record(self, path: str, query: Dict[str, list], status: int, body: bytes) -> None:
        log_file = getattr(self.server, "log_file", None)
        if log_file is None:
            return
        try:
            write_log(log_file, {
                "request": {
                    "method": self.command,
                    "path": path,
                    "query": {k: v if len(v) > 1 else v[0] for k, v in query.items()},
                },
                "response": {
                    "status": status,
                    "bodyPreview": body[:256].decode(errors="ignore"),
                },
            })
        except OSError as e:
            self.log_error("could not write request log %s: %s", log_file, e)

    def do_GET(self):
        self._handle()

    def do_HEAD(self):
        self._handle()

    def do_POST(self):
        self._handle()

    def do_PUT(self):
        self._handle()

    def do_PATCH(self):
        self._handle()

    def do_DELETE(self):
        self._handle()


def make_server(
    host: str = "127.0.0.1",
    port: int = 8080,
    quiet: bool = False,
    log_file: Optional[Union[str, Path]] = None,
    handler: Optional[GreetingHandler] = None,
) -> GreeterServer:
    return GreeterServer((host, port), handler=handler, quiet=quiet, log_file=log_file)


def serve(host: str = "127.0.0.1", port: int = 8080, quiet: bool = False, log_file: Optional[Union[str, Path]] = None):
    httpd = make_server(host, port, quiet=quiet, log_file=log_file)
    print(f"greeter server listening on http://{host}:{port}", flush=True)
    try:
        httpd.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        httpd.server_close()
