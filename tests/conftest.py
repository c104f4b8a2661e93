"""Shared fixtures for bundlestrap tests."""

import io
import struct
import threading
import zipfile
from collections.abc import Callable, Iterator
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

import pytest

from bundlestrap.models import BootstrapConfig

BUNDLE_DIR = "app-main"


def build_zip(files: dict[str, bytes | str]) -> bytes:
    """Return the bytes of a ZIP archive holding ``files`` (path -> content).

    Paths ending in "/" become directory entries.
    """
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, content in files.items():
            if name.endswith("/"):
                zf.writestr(zipfile.ZipInfo(name), b"")
            else:
                zf.writestr(name, content)
    return buf.getvalue()


def bundle_zip(entry_point: str = "index.js", plugins: bool = True) -> bytes:
    files: dict[str, bytes | str] = {
        f"{BUNDLE_DIR}/": b"",
        f"{BUNDLE_DIR}/{entry_point}": "console.log('hello')\n",
        f"{BUNDLE_DIR}/settings.js": "module.exports = {default: true}\n",
    }
    if plugins:
        files[f"{BUNDLE_DIR}/plugins/"] = b""
        files[f"{BUNDLE_DIR}/plugins/ping.js"] = "module.exports = {}\n"
    return build_zip(files)


def mark_encrypted(archive: bytes) -> bytes:
    """Set the "encrypted" flag bit on every entry of ``archive``.

    The payload stays readable plain data; only readers that honor the flag
    refuse to extract it without a password.
    """
    data = bytearray(archive)
    with zipfile.ZipFile(io.BytesIO(archive)) as zf:
        infos = zf.infolist()
        offset = zf.start_dir
    for info in infos:
        # Local header: signature(4) version(2) flags(2)
        data[info.header_offset + 6] |= 0x01
    for _ in infos:
        # Central header: flags at +8, name/extra/comment lengths at +28.
        assert data[offset : offset + 4] == b"PK\x01\x02"
        data[offset + 8] |= 0x01
        name_len, extra_len, comment_len = struct.unpack_from("<HHH", data, offset + 28)
        offset += 46 + name_len + extra_len + comment_len
    return bytes(data)


class _Routes:
    def __init__(self) -> None:
        self.responses: dict[str, tuple[int, bytes]] = {}
        self.hits: list[str] = []


class BundleServer:
    """Tiny HTTP server serving canned responses on localhost."""

    def __init__(self) -> None:
        routes = _Routes()
        self.routes = routes

        class Handler(BaseHTTPRequestHandler):
            def do_GET(self) -> None:
                routes.hits.append(self.path)
                status, body = routes.responses.get(self.path, (404, b"not found"))
                self.send_response(status)
                self.send_header("Content-Type", "application/zip")
                self.send_header("Content-Length", str(len(body)))
                self.end_headers()
                self.wfile.write(body)

            def log_message(self, format, *args) -> None:
                pass

        self._server = ThreadingHTTPServer(("127.0.0.1", 0), Handler)
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)

    @property
    def hits(self) -> list[str]:
        return self.routes.hits

    def url(self, path: str) -> str:
        host, port = self._server.server_address[:2]
        return f"http://{host}:{port}{path}"

    def serve(self, path: str, body: bytes, status: int = 200) -> str:
        self.routes.responses[path] = (status, body)
        return self.url(path)

    def start(self) -> None:
        self._thread.start()

    def stop(self) -> None:
        self._server.shutdown()
        self._server.server_close()
        self._thread.join(timeout=5)


@pytest.fixture
def bundle_server() -> Iterator[BundleServer]:
    server = BundleServer()
    server.start()
    try:
        yield server
    finally:
        server.stop()


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., BootstrapConfig]:
    """Factory for configs rooted in the test's tmp_path."""

    def _make(url: str = "https://example.invalid/org/app/archive/main.zip", **overrides):
        values = {
            "download_url": url,
            "staging_root": tmp_path / "staging",
            "local_settings": tmp_path / "settings.js",
            "bundle_dir_name": BUNDLE_DIR,
        }
        values.update(overrides)
        return BootstrapConfig(**values)

    return _make
