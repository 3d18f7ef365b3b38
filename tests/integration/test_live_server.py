"""
Integration tests: a real server on a real socket.
"""

import errno
import json
import logging
import socket
import threading
import time
from pathlib import Path

import pytest

from tinyhttpd import HTTPServer, ServerConfig
from tinyhttpd.handlers.builtin import HOME_PAGE


class TestLiveServer:
    """Requests over TCP against a running server."""

    def test_home_page(self, live_server, parse_response):
        status, headers, body = parse_response(live_server.request(b"GET / HTTP/1.1\r\n\r\n"))

        assert status == "HTTP/1.1 200 OK"
        assert headers["Content-Type"] == "text/html"
        assert headers["Connection"] == "close"
        assert body == HOME_PAGE.encode()

    def test_health(self, live_server, parse_response):
        status, headers, body = parse_response(
            live_server.request(b"GET /health HTTP/1.1\r\nHost: localhost\r\n\r\n")
        )

        assert status == "HTTP/1.1 200 OK"
        assert json.loads(body)["status"] == "ok"

    def test_static_file(self, live_server, docroot: Path, parse_response):
        status, headers, body = parse_response(live_server.request(b"GET /css/site.css HTTP/1.1\r\n\r\n"))

        assert status == "HTTP/1.1 200 OK"
        assert headers["Content-Type"] == "text/css"
        assert body == (docroot / "css" / "site.css").read_bytes()

    def test_large_static_file(self, live_server, docroot: Path, parse_response):
        data = bytes(range(256)) * 4096  # 1 MiB
        (docroot / "big.bin").write_bytes(data)

        _, headers, body = parse_response(live_server.request(b"GET /big.bin HTTP/1.1\r\n\r\n"))

        assert int(headers["Content-Length"]) == len(data)
        assert body == data

    def test_post_is_405(self, live_server):
        raw = live_server.request(b"POST / HTTP/1.1\r\nContent-Length: 2\r\n\r\n{}")
        assert raw.startswith(b"HTTP/1.1 405 Method Not Allowed\r\n")

    def test_traversal_is_400(self, live_server):
        raw = live_server.request(b"GET /../etc/passwd HTTP/1.1\r\n\r\n")
        assert raw.startswith(b"HTTP/1.1 400 Bad Request\r\n")

    def test_missing_is_404(self, live_server):
        raw = live_server.request(b"GET /nope.html HTTP/1.1\r\n\r\n")
        assert raw.startswith(b"HTTP/1.1 404 Not Found\r\n")

    def test_malformed_is_400(self, live_server):
        raw = live_server.request(b"GET /index.html\r\n\r\n")
        assert raw.startswith(b"HTTP/1.1 400 ")

    def test_empty_connection_gets_no_response(self, live_server):
        """Test that a client that sends nothing and hangs up gets no bytes."""
        assert live_server.request(b"") == b""

    def test_one_request_per_connection(self, live_server):
        """Test that a second pipelined request is never answered."""
        raw = live_server.request(
            b"GET /health HTTP/1.1\r\n\r\n"
            b"GET /about HTTP/1.1\r\n\r\n"
        )
        assert raw.count(b"HTTP/1.1 200 OK") == 1

    def test_concurrent_clients(self, live_server):
        """Test that clients are served independently and in parallel."""
        results = []
        lock = threading.Lock()

        def client(i: int):
            raw = live_server.request(f"GET /hello?name=c{i} HTTP/1.1\r\n\r\n".encode())
            with lock:
                results.append(raw)

        threads = [threading.Thread(target=client, args=(i,)) for i in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10.0)

        assert len(results) == 20
        bodies = sorted(r.partition(b"\r\n\r\n")[2] for r in results)
        assert bodies == sorted(f"Hello, c{i}!".encode() for i in range(20))

    def test_slow_client_does_not_block_others(self, live_server):
        """Test that a silent connection does not delay a second client."""
        with socket.create_connection(("127.0.0.1", live_server.port)) as idle:
            started = time.monotonic()
            raw = live_server.request(b"GET /health HTTP/1.1\r\n\r\n")
            elapsed = time.monotonic() - started

            assert raw.startswith(b"HTTP/1.1 200 OK")
            assert elapsed < 2.0
            idle.sendall(b"GET /about HTTP/1.1\r\n\r\n")

    def test_accept_error_is_survived(self, live_server, monkeypatch, caplog):
        """Test that a failed accept() is logged and the next client is served."""
        real_accept = socket.socket.accept
        failures = []

        def flaky_accept(sock):
            if not failures:
                failures.append(sock)
                raise OSError(errno.EMFILE, "Too many open files")
            return real_accept(sock)

        with caplog.at_level(logging.ERROR, logger="tinyhttpd.core.socket_server"):
            monkeypatch.setattr(socket.socket, "accept", flaky_accept)

            deadline = time.monotonic() + 2.0
            while not failures and time.monotonic() < deadline:
                time.sleep(0.01)

            raw = live_server.request(b"GET /health HTTP/1.1\r\n\r\n")

        assert failures
        assert raw.startswith(b"HTTP/1.1 200 OK")
        assert any("Accept error" in r.getMessage() for r in caplog.records)


class TestAccessLog:
    """One access record per response written."""

    def test_record_per_response(self, live_server, caplog):
        with caplog.at_level("INFO", logger="tinyhttpd.access"):
            live_server.request(b"GET /health HTTP/1.1\r\n\r\n")

            deadline = time.monotonic() + 2.0
            while time.monotonic() < deadline:
                if any("/health" in r.getMessage() for r in caplog.records if r.name == "tinyhttpd.access"):
                    break
                time.sleep(0.01)

        records = [
            r.getMessage() for r in caplog.records
            if r.name == "tinyhttpd.access" and "/health" in r.getMessage()
        ]
        assert len(records) == 1
        assert '"GET /health" 200' in records[0]


class TestShutdown:
    """Tests for token-driven shutdown."""

    def test_shutdown_stops_accept_loop(self, live_server):
        port = live_server.port

        live_server.stop()

        assert live_server.stopped
        assert live_server.server.token.cancelled
        assert live_server.server.socket_server.bound_address is None
        with pytest.raises(OSError):
            socket.create_connection(("127.0.0.1", port), timeout=1.0)

    def test_bind_conflict_raises(self, config: ServerConfig, free_port: int):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as holder:
            holder.bind(("127.0.0.1", free_port))
            holder.listen(1)

            config.port = free_port
            server = HTTPServer(config)

            with pytest.raises(OSError):
                server.run()
