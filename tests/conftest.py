"""Pytest configuration and a local echo server for requestkit tests."""

import email.parser
import gzip
import json
import threading
import time
import zlib
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import parse_qs, urlencode, urlsplit

import pytest


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "integration: test talks to the local echo server"
    )


def _flatten(query):
    return {key: values[0] if len(values) == 1 else values for key, values in query.items()}


def _parse_cookies(header):
    cookies = {}
    for pair in (header or "").split(";"):
        name, sep, value = pair.strip().partition("=")
        if sep:
            cookies[name] = value
    return cookies


class _EchoHandler(BaseHTTPRequestHandler):
    """Serves a small subset of httpbin's endpoints."""

    protocol_version = "HTTP/1.1"

    def log_message(self, format, *args):
        return

    def _read_body(self):
        if self.headers.get("Transfer-Encoding", "").lower() == "chunked":
            chunks = []
            while True:
                size = int(self.rfile.readline().split(b";")[0].strip(), 16)
                if size == 0:
                    while self.rfile.readline() not in (b"\r\n", b"\n", b""):
                        pass
                    break
                chunks.append(self.rfile.read(size))
                self.rfile.readline()
            return b"".join(chunks)
        length = int(self.headers.get("Content-Length") or 0)
        return self.rfile.read(length) if length else b""

    def _send(self, status, body=b"", headers=None, content_type="application/json"):
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.send_response(status)
        if content_type:
            self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        for key, value in headers or []:
            self.send_header(key, value)
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(body)

    def _send_json(self, payload, status=200, headers=None):
        self._send(status, json.dumps(payload), headers)

    def _echo(self, body):
        split = urlsplit(self.path)
        content_type = self.headers.get("Content-Type", "")
        payload = {
            "method": self.command,
            "url": f"http://{self.headers.get('Host')}{self.path}",
            "args": _flatten(parse_qs(split.query, keep_blank_values=True)),
            "headers": {key.title(): value for key, value in self.headers.items()},
            "cookies": _parse_cookies(self.headers.get("Cookie")),
            "data": "",
            "form": {},
            "files": {},
            "filenames": {},
            "json": None,
        }
        if content_type.startswith("application/x-www-form-urlencoded"):
            payload["form"] = _flatten(parse_qs(body.decode("utf-8"), keep_blank_values=True))
        elif content_type.startswith("multipart/form-data"):
            message = email.parser.BytesParser().parsebytes(
                b"Content-Type: " + content_type.encode("latin-1") + b"\r\n\r\n" + body
            )
            for part in message.get_payload():
                name = part.get_param("name", header="content-disposition")
                filename = part.get_filename()
                value = part.get_payload(decode=True)
                if filename is None:
                    payload["form"][name] = value.decode("utf-8")
                else:
                    payload["files"][name] = value.decode("latin-1")
                    payload["filenames"][name] = filename
        else:
            payload["data"] = body.decode("utf-8", errors="replace")
            try:
                payload["json"] = json.loads(payload["data"])
            except ValueError:
                pass
        return payload

    def _handle(self):
        body = self._read_body()
        split = urlsplit(self.path)
        parts = [part for part in split.path.split("/") if part]
        route = parts[0] if parts else ""
        query = parse_qs(split.query, keep_blank_values=True)

        if route in ("get", "post", "put", "patch", "delete", "anything", "options"):
            self._send_json(self._echo(body))
        elif route == "headers":
            self._send_json({"headers": {key.title(): value for key, value in self.headers.items()}})
        elif route == "status":
            status = int(parts[1])
            self._send(status, "I'm a teapot" if status == 418 else b"", content_type="text/plain")
        elif route == "redirect-to":
            status = int(query.get("status_code", ["302"])[0])
            self._send(status, headers=[("Location", query["url"][0])])
        elif route == "redirect":
            remaining = int(parts[1])
            location = f"/redirect/{remaining - 1}" if remaining > 1 else "/get"
            self._send(302, headers=[("Location", location)])
        elif route == "cookies" and len(parts) == 1:
            self._send_json({"cookies": _parse_cookies(self.headers.get("Cookie"))})
        elif route == "cookies" and parts[1] == "set":
            headers = [("Set-Cookie", f"{name}={values[0]}; Path=/") for name, values in query.items()]
            headers.append(("Location", "/cookies"))
            self._send(302, headers=headers)
        elif route == "gzip":
            payload = json.dumps({"gzipped": True, "method": self.command}).encode("utf-8")
            self._send(200, gzip.compress(payload), headers=[("Content-Encoding", "gzip")])
        elif route == "deflate":
            payload = json.dumps({"deflated": True, "method": self.command}).encode("utf-8")
            self._send(200, zlib.compress(payload), headers=[("Content-Encoding", "deflate")])
        elif route == "delay":
            time.sleep(float(parts[1]))
            self._send_json(self._echo(body))
        elif route == "stream":
            lines = [json.dumps({"id": i, "url": self.path}) + "\n" for i in range(int(parts[1]))]
            self._send(200, "".join(lines))
        elif route == "bytes":
            self._send(200, bytes(i % 256 for i in range(int(parts[1]))), content_type="application/octet-stream")
        elif route == "encoding":
            self._send(200, "<p>∀x ∈ ℝ: x² ≥ 0</p>", content_type="text/html; charset=utf-8")
        elif route == "latin1":
            self._send(200, "café".encode("latin-1"), content_type="text/plain; charset=ISO-8859-1")
        elif route == "basic-auth":
            import base64

            expected = "Basic " + base64.b64encode(f"{parts[1]}:{parts[2]}".encode()).decode()
            if self.headers.get("Authorization") == expected:
                self._send_json({"authenticated": True, "user": parts[1]})
            else:
                self._send(401, headers=[("WWW-Authenticate", 'Basic realm="Fake Realm"')])
        else:
            self._send_json({"error": "not found"}, status=404)

    do_GET = _handle
    do_POST = _handle
    do_PUT = _handle
    do_PATCH = _handle
    do_DELETE = _handle
    do_HEAD = _handle
    do_OPTIONS = _handle


class _QuietServer(ThreadingHTTPServer):
    daemon_threads = True

    def handle_error(self, request, client_address):
        # Clients that time out close their sockets mid-response
        return


@pytest.fixture(scope="session")
def httpbin():
    """Base URL of a live echo server for the test session."""
    server = _QuietServer(("127.0.0.1", 0), _EchoHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{server.server_address[1]}"
    finally:
        server.shutdown()
        server.server_close()
        thread.join(timeout=5)


@pytest.fixture
def redirect_to(httpbin):
    """Build a /redirect-to URL on the echo server."""

    def build(target, status_code=302):
        return f"{httpbin}/redirect-to?" + urlencode({"url": target, "status_code": status_code})

    return build
