"""
Unit tests for the static asset server.

Path resolution is tested directly; the HTTP behaviour is tested against a
real server on an ephemeral port.
"""

from pathlib import Path
from unittest.mock import Mock

import aiohttp
import pytest
from yarl import URL

from fmg_exporter.adapters.static_server import (
    StaticAssetServer,
    content_type_for,
    resolve_request_path,
)
from fmg_exporter.core.exceptions import StaticServerError


class TestResolveRequestPath:
    def test_root_maps_to_index(self, generator_root):
        root = generator_root.resolve()
        assert resolve_request_path(root, "/") == root / "index.html"

    def test_nested_path(self, generator_root):
        root = generator_root.resolve()
        assert resolve_request_path(root, "/libs/lib.mjs") == root / "libs" / "lib.mjs"

    def test_percent_encoded_path_is_decoded(self, generator_root):
        root = generator_root.resolve()
        assert resolve_request_path(root, "/my%20file.txt") == root / "my file.txt"

    @pytest.mark.parametrize("raw_path", [
        "/../../etc/passwd",
        "/%2e%2e/%2e%2e/etc/passwd",
        "/..%2F..%2Fetc%2Fpasswd",
        "/libs/../../outside.txt",
    ])
    def test_traversal_is_forbidden(self, generator_root, raw_path):
        with pytest.raises(StaticServerError) as exc_info:
            resolve_request_path(generator_root.resolve(), raw_path)

        assert exc_info.value.status == 403

    def test_dot_segments_inside_root_are_allowed(self, generator_root):
        root = generator_root.resolve()
        assert resolve_request_path(root, "/libs/../main.js") == root / "main.js"

    def test_nul_byte_is_404(self, generator_root):
        with pytest.raises(StaticServerError) as exc_info:
            resolve_request_path(generator_root.resolve(), "/index%00.html")

        assert exc_info.value.status == 404


class TestContentTypes:
    @pytest.mark.parametrize("name,expected", [
        ("index.html", "text/html; charset=utf-8"),
        ("main.js", "text/javascript; charset=utf-8"),
        ("style.CSS", "text/css; charset=utf-8"),
        ("icons.svg", "image/svg+xml"),
        ("manifest.webmanifest", "application/manifest+json; charset=utf-8"),
        ("photo.jpg", "image/jpeg"),
        ("font.woff2", "font/woff2"),
        ("data.bin", "application/octet-stream"),
        ("README", "application/octet-stream"),
    ])
    def test_content_type_by_extension(self, name, expected):
        assert content_type_for(name) == expected


class TestReadFile:
    def test_missing_file_is_404(self, tmp_path):
        with pytest.raises(StaticServerError) as exc_info:
            StaticAssetServer._read_file(tmp_path / "missing.js")
        assert exc_info.value.status == 404

    def test_directory_is_404(self, tmp_path):
        with pytest.raises(StaticServerError) as exc_info:
            StaticAssetServer._read_file(tmp_path)
        assert exc_info.value.status == 404

    def test_read_failure_is_500(self):
        path = Mock(spec=Path)
        path.is_file.return_value = True
        path.read_bytes.side_effect = PermissionError("denied")

        with pytest.raises(StaticServerError) as exc_info:
            StaticAssetServer._read_file(path)
        assert exc_info.value.status == 500


class TestStaticAssetServerHttp:
    """Requests against a live server bound to an ephemeral port."""

    @pytest.mark.asyncio
    async def test_serves_index_with_headers(self, generator_root):
        server = StaticAssetServer(generator_root)
        base_url = await server.start()
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(base_url + "/") as response:
                    body = await response.text()
                    assert response.status == 200
                    assert response.headers["Content-Type"] == "text/html; charset=utf-8"
                    assert response.headers["Cache-Control"] == "no-store"
                    assert "<title>FMG</title>" in body
        finally:
            await server.close()

    @pytest.mark.asyncio
    async def test_serves_binary_files_verbatim(self, generator_root):
        server = StaticAssetServer(generator_root)
        base_url = await server.start()
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(base_url + "/data.bin") as response:
                    assert response.status == 200
                    assert response.headers["Content-Type"] == "application/octet-stream"
                    assert await response.read() == b"\x00\x01\x02"
        finally:
            await server.close()

    @pytest.mark.asyncio
    async def test_missing_file_is_404(self, generator_root):
        server = StaticAssetServer(generator_root)
        base_url = await server.start()
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(base_url + "/nope.js") as response:
                    assert response.status == 404
                    assert await response.text() == "Not found"
                    assert response.headers["Cache-Control"] == "no-store"
        finally:
            await server.close()

    @pytest.mark.asyncio
    async def test_nul_byte_path_is_404(self, generator_root):
        server = StaticAssetServer(generator_root)
        base_url = await server.start()
        try:
            async with aiohttp.ClientSession() as session:
                url = URL(base_url + "/index%00.html", encoded=True)
                async with session.get(url) as response:
                    assert response.status == 404
                    assert await response.text() == "Not found"
                    assert response.headers["Cache-Control"] == "no-store"
        finally:
            await server.close()

    @pytest.mark.asyncio
    async def test_encoded_traversal_is_403(self, generator_root):
        (generator_root.parent / "secret.txt").write_text("secret", encoding="utf-8")
        server = StaticAssetServer(generator_root)
        base_url = await server.start()
        try:
            async with aiohttp.ClientSession() as session:
                url = URL(base_url + "/..%2Fsecret.txt", encoded=True)
                async with session.get(url) as response:
                    assert response.status == 403
                    assert await response.text() == "Forbidden"
        finally:
            await server.close()

    @pytest.mark.asyncio
    async def test_start_is_idempotent_and_close_releases(self, generator_root):
        server = StaticAssetServer(generator_root)
        first = await server.start()
        second = await server.start()

        assert first == second
        assert server.is_running

        await server.close()
        assert not server.is_running
        assert server.base_url is None

        # Closing twice is harmless
        await server.close()
