"""
Unit tests for the MCP tool server.

The exporter is a fake; tool wiring is checked through the server's tool
listing and the content helpers the tools return.
"""

import base64
import json

import pytest
from mcp.server.fastmcp import Image

from fmg_exporter.adapters.mcp.server import (
    MESSAGE_PATH,
    SSE_PATH,
    build_formats_payload,
    create_mcp_server,
    export_tool_content,
    run_server,
)
from fmg_exporter.core.domain import ResultEnvelope
from fmg_exporter.core.formats import FORMAT_IDS

PNG_BYTES = b"\x89PNG\r\n\x1a\nrest"


def envelope(filename, mime_type, raw):
    encoded = base64.b64encode(raw).decode("ascii")
    return ResultEnvelope(filename=filename, mime_type=mime_type, base64=encoded, size_bytes=len(raw))


class FakeExporter:
    def __init__(self):
        self.calls = []

    async def export(self, seed=None, format="png", options=None):
        self.calls.append((seed, format, options))
        return envelope("map.png", "image/png", PNG_BYTES)


class TestToolContent:
    def test_formats_payload(self):
        payload = json.loads(build_formats_payload())

        assert [entry["id"] for entry in payload["formats"]] == list(FORMAT_IDS)
        assert set(payload["formats"][0]) == {"id", "ext", "mimeType", "description"}

    @pytest.mark.parametrize("mime_type,expected", [("image/png", "image/png"), ("image/jpeg", "image/jpeg")])
    def test_raster_returns_image_then_metadata(self, mime_type, expected):
        content = export_tool_content(envelope("map.img", mime_type, PNG_BYTES))

        image, metadata = content
        assert isinstance(image, Image)
        assert image.data == PNG_BYTES
        assert image.to_image_content().mimeType == expected
        assert json.loads(metadata) == {"filename": "map.img", "mimeType": mime_type, "sizeBytes": len(PNG_BYTES)}

    def test_heightmap_is_an_image(self):
        content = export_tool_content(envelope("map.heightmap.png", "image/png", PNG_BYTES))
        assert isinstance(content[0], Image)

    def test_other_formats_return_one_json_block(self):
        content = export_tool_content(envelope("map.minimal.json", "application/json", b'{"a":1}'))

        payload = json.loads(content)
        assert payload == {
            "filename": "map.minimal.json",
            "mimeType": "application/json",
            "sizeBytes": 7,
            "encoding": "base64",
            "data": base64.b64encode(b'{"a":1}').decode("ascii"),
        }


class TestCreateMcpServer:
    @pytest.mark.asyncio
    async def test_lists_both_tools(self):
        server = create_mcp_server(FakeExporter())

        tools = {tool.name: tool for tool in await server.list_tools()}

        assert set(tools) == {"fmg_formats", "fmg_export"}
        schema = tools["fmg_export"].inputSchema
        assert schema["required"] == ["format"]
        assert set(schema["properties"]) == {"format", "seed", "options"}
        assert json.dumps(schema["properties"]["format"]).count('"tiles_zip"') == 1

    def test_http_settings(self):
        server = create_mcp_server(FakeExporter(), host="0.0.0.0", port=4444)

        assert server.settings.host == "0.0.0.0"
        assert server.settings.port == 4444
        assert server.settings.sse_path == SSE_PATH == "/mcp/sse"
        assert server.settings.message_path == MESSAGE_PATH == "/mcp/message/"

    @pytest.mark.asyncio
    async def test_unknown_transport(self):
        with pytest.raises(ValueError, match="Unknown transport"):
            await run_server(create_mcp_server(FakeExporter()), "carrier-pigeon")
