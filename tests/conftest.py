"""Shared fixtures: a local ingestion server and a client factory."""

from __future__ import annotations

import json
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from sequence_client import Client
from sequence_client.meta import get_user_agent


class IngestHandler(BaseHTTPRequestHandler):
    """Mimics the batch endpoint. The first event's name or message picks the outcome."""

    def do_POST(self):
        length = int(self.headers.get("Content-Length", 0))
        body = json.loads(self.rfile.read(length) or b"{}")
        headers = {key.lower(): value for key, value in self.headers.items()}
        self.server.requests.append({"path": self.path, "headers": headers, "body": body})

        if self.path != "/event/batch/":
            return self._respond(404, {"error": {"message": "not found"}})

        if not self.headers.get("Authorization"):
            return self._respond(400, {"error": {"message": "missing api key"}})

        if self.headers.get("User-Agent") != get_user_agent():
            return self._respond(400, {"error": {"message": "invalid user-agent"}})

        first = body["batch"][0]
        outcome = first.get("message") or first.get("event")

        if outcome == "Error":
            return self._respond(400, {"error": {"message": "error"}})

        if outcome == "ServerError":
            return self._respond(500, {"error": {"message": "boom"}})

        if outcome == "RateLimited":
            return self._respond(429, {"error": {"message": "slow down"}})

        if outcome == "Timeout":
            time.sleep(2)

        self._respond(200, {})

    def _respond(self, status, payload):
        data = json.dumps(payload).encode("utf-8")
        try:
            self.send_response(status)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(data)))
            self.end_headers()
            self.wfile.write(data)
        except OSError:
            # Client gave up (timeout tests).
            pass

    def log_message(self, format, *args):
        pass


@pytest.fixture
def ingest_server():
    """Run the fake ingestion API on a free local port."""
    server = ThreadingHTTPServer(("127.0.0.1", 0), IngestHandler)
    server.daemon_threads = True
    server.requests = []
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()

    yield server

    server.shutdown()
    server.server_close()


@pytest.fixture
def host(ingest_server):
    return f"http://127.0.0.1:{ingest_server.server_address[1]}"


@pytest.fixture
def make_client(host):
    """Create clients pointed at the fake server with the first-flush latch already set."""
    clients = []

    def _make(**options):
        options.setdefault("host", host)
        options.setdefault("retry_backoff_base", 0.001)
        client = Client("key", **options)
        client.scheduler.flushed = True
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.scheduler.cancel()
        client.shutdown(timeout=3)
