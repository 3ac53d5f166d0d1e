from __future__ import annotations

import queue
import socket
import threading
from functools import partial
from http import HTTPStatus
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from urllib.parse import urlsplit

from .broadcast import Broadcaster
from .render import inject_reload_script

SSE_PATH = "/_sse"
POLL_INTERVAL = 0.5


class ReloadRequestHandler(SimpleHTTPRequestHandler):
    """Serve the output directory with live reload.

    HTML pages get the reload script injected, ``/_sse`` holds an event
    stream open, anything else falls through to the static file handler.
    """

    def __init__(self, *args, broadcaster: Broadcaster, **kwargs) -> None:
        self.broadcaster = broadcaster
        super().__init__(*args, **kwargs)

    def do_GET(self) -> None:
        path = urlsplit(self.path).path
        if path == SSE_PATH:
            self.stream_events()
            return
        if path == "/" or path.endswith(".html"):
            self.send_page(path)
            return
        super().do_GET()

    def do_HEAD(self) -> None:
        path = urlsplit(self.path).path
        if path == "/" or path.endswith(".html"):
            self.send_page(path, include_body=False)
            return
        super().do_HEAD()

    def send_page(self, path: str, include_body: bool = True) -> None:
        file_path = Path(self.translate_path(path))
        if path == "/":
            file_path = file_path / "index.html"
        try:
            data = file_path.read_bytes()
        except OSError:
            self.send_error(HTTPStatus.NOT_FOUND, "File not found")
            return
        body = inject_reload_script(data)
        self.send_response(HTTPStatus.OK)
        self.send_header("Content-Type", "text/html; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.send_header("Cache-Control", "no-cache")
        self.end_headers()
        if include_body:
            self.wfile.write(body)

    def stream_events(self) -> None:
        self.send_response(HTTPStatus.OK)
        self.send_header("Content-Type", "text/event-stream")
        self.send_header("Cache-Control", "no-cache")
        self.end_headers()
        self.wfile.flush()
        self.close_connection = True

        channel = self.broadcaster.subscribe()
        closed = threading.Event()
        threading.Thread(
            target=self.wait_for_disconnect, args=(channel, closed), daemon=True
        ).start()
        try:
            while not closed.is_set():
                try:
                    message = channel.get(timeout=POLL_INTERVAL)
                except queue.Empty:
                    continue
                self.wfile.write(f"data: {message}\n\n".encode("utf-8"))
                self.wfile.flush()
        except (BrokenPipeError, ConnectionResetError):
            pass
        finally:
            closed.set()
            self.broadcaster.unsubscribe(channel)
            try:
                self.connection.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass

    def wait_for_disconnect(self, channel: queue.Queue[str], closed: threading.Event) -> None:
        # an event stream client never sends a body, so any read returning
        # nothing means the peer hung up
        try:
            while not closed.is_set():
                if not self.connection.recv(1024):
                    break
        except OSError:
            pass
        finally:
            closed.set()
            self.broadcaster.unsubscribe(channel)

    def log_message(self, format: str, *args) -> None:
        if urlsplit(getattr(self, "path", "")).path == SSE_PATH:
            return
        super().log_message(format, *args)


def make_server(host: str, port: int, directory: Path, broadcaster: Broadcaster) -> ThreadingHTTPServer:
    handler = partial(ReloadRequestHandler, directory=str(directory), broadcaster=broadcaster)
    return ThreadingHTTPServer((host, port), handler)


def start_server(
    host: str, port: int, directory: Path, broadcaster: Broadcaster
) -> tuple[ThreadingHTTPServer, threading.Thread]:
    server = make_server(host, port, directory, broadcaster)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    print(f"serving on {host}:{server.server_address[1]}...")
    return server, thread
