"""
Shared fixtures: a raw socket HTTP server whose timing each test controls.
"""

import json
import socket
import threading
from typing import Callable, List

import pytest


PREDICT_PAYLOAD = {
    "success": True,
    "data": {
        "category": "Hardware",
        "category_label": "Hardware",
        "confidence": 0.83,
        "threshold_used": 0.6,
        "top3": [["Hardware", 0.83], ["Purchase", 0.1], ["Access", 0.04]],
    },
}


def read_request(conn: socket.socket) -> bytes:
    """Reads one HTTP request (headers plus Content-Length body)."""
    data = b""
    while b"\r\n\r\n" not in data:
        chunk = conn.recv(4096)
        if not chunk:
            return data
        data += chunk

    head, _, body = data.partition(b"\r\n\r\n")
    length = 0
    for line in head.split(b"\r\n")[1:]:
        name, _, value = line.partition(b":")
        if name.strip().lower() == b"content-length":
            length = int(value.strip())
    while len(body) < length:
        chunk = conn.recv(4096)
        if not chunk:
            break
        body += chunk
    return data


def build_response_head(body_length: int, status: str = "200 OK") -> bytes:
    return (
        f"HTTP/1.1 {status}\r\n"
        "Content-Type: application/json\r\n"
        f"Content-Length: {body_length}\r\n"
        "Connection: close\r\n"
        "\r\n"
    ).encode()


@pytest.fixture
def predict_body() -> bytes:
    return json.dumps(PREDICT_PAYLOAD).encode()


@pytest.fixture
def socket_server(monkeypatch):
    """
    Starts a one-connection-at-a-time server on localhost.

    Usage: `base_url = socket_server(behaviour)` where `behaviour(conn, stop)`
    writes the response. `stop` is set at teardown so sleeping behaviours exit.
    """
    # Never route localhost traffic through a proxy from the environment
    monkeypatch.setenv("NO_PROXY", "127.0.0.1,localhost")
    monkeypatch.setenv("no_proxy", "127.0.0.1,localhost")

    stop = threading.Event()
    listeners: List[socket.socket] = []

    def _start(behaviour: Callable[[socket.socket, threading.Event], None]) -> str:
        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        listener.bind(("127.0.0.1", 0))
        listener.listen(5)
        listener.settimeout(0.2)
        listeners.append(listener)

        def serve() -> None:
            while not stop.is_set():
                try:
                    conn, _ = listener.accept()
                except socket.timeout:
                    continue
                except OSError:
                    return
                with conn:
                    try:
                        read_request(conn)
                        behaviour(conn, stop)
                    except OSError:
                        # Client went away (expected once it gives up)
                        pass

        threading.Thread(target=serve, daemon=True).start()
        host, port = listener.getsockname()
        return f"http://{host}:{port}"

    yield _start

    stop.set()
    for listener in listeners:
        listener.close()


@pytest.fixture
def response_head() -> Callable[..., bytes]:
    return build_response_head
