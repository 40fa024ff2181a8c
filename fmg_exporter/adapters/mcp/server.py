"""
MCP tool server.

Exposes two tools over the Model Context Protocol:

    fmg_formats   the export catalog
    fmg_export    generate a map from a seed and export it

PNG/JPEG artifacts (including the heightmap) come back as an image block
followed by a JSON metadata block; every other artifact is one JSON block
carrying the base64 payload.
"""

import base64
import json
import logging
from typing import Any, Dict, List, Literal, Optional, Union

from mcp.server.fastmcp import FastMCP, Image

from ...core.domain import ResultEnvelope
from ...core.formats import FORMAT_IDS, list_formats

logger = logging.getLogger(__name__)

SERVER_NAME = "fantasy-map-generator"

SSE_PATH = "/mcp/sse"
MESSAGE_PATH = "/mcp/message/"

IMAGE_MIME_TYPES = {"image/png": "png", "image/jpeg": "jpeg"}

INSTRUCTIONS = (
    "Exports maps from Azgaar's Fantasy Map Generator. "
    "Call fmg_formats to list the supported formats, then fmg_export with a "
    "format id and an optional seed to generate a map and receive the file."
)

FormatId = Literal[FORMAT_IDS]


def build_formats_payload() -> str:
    return json.dumps({"formats": list_formats()}, indent=2)


def export_tool_content(envelope: ResultEnvelope) -> Union[str, List[Union[Image, str]]]:
    """Tool result blocks for an exported artifact"""
    image_format = IMAGE_MIME_TYPES.get(envelope.mime_type)
    if image_format is not None:
        return [
            Image(data=base64.b64decode(envelope.base64), format=image_format),
            json.dumps(envelope.to_metadata(), indent=2),
        ]
    return json.dumps(envelope.to_payload(), indent=2)


def create_mcp_server(exporter, host: str = "127.0.0.1", port: int = 3333) -> FastMCP:
    """
    Build the tool server around a shared exporter.

    Args:
        exporter: FmgExporter (or anything with the same ``export`` coroutine)
        host: Interface for the HTTP transport
        port: Port for the HTTP transport
    """
    server = FastMCP(
        name=SERVER_NAME,
        instructions=INSTRUCTIONS,
        host=host,
        port=port,
        sse_path=SSE_PATH,
        message_path=MESSAGE_PATH,
    )

    @server.tool(name="fmg_formats", description="List the export formats supported by the server")
    async def fmg_formats() -> str:
        return build_formats_payload()

    @server.tool(name="fmg_export", description="Generate a map from a seed and export it in one format")
    async def fmg_export(
        format: FormatId,
        seed: Optional[str] = None,
        options: Optional[Dict[str, Any]] = None,
    ):
        """
        Args:
            format: Export format id (see fmg_formats)
            seed: Generator seed; a random map is generated when omitted
            options: Format options: debug, noLabels, noWater, noScaleBar,
                noIce, noVignette (booleans); resolution (png/jpeg scale,
                0.1-20); quality (jpeg, 0-1); tilesX, tilesY (1-50) and
                tileScale (0.1-10) for tiles_zip
        """
        try:
            envelope = await exporter.export(seed=seed, format=format, options=options)
        except Exception as e:
            logger.warning("fmg_export failed (format=%s seed=%s): %s", format, seed, e)
            raise
        return export_tool_content(envelope)

    return server


async def run_server(server: FastMCP, transport: str) -> None:
    """
    Serve until the transport closes.

    Raises:
        ValueError: Unknown transport
    """
    if transport == "stdio":
        logger.info("Serving MCP over stdio")
        await server.run_stdio_async()
    elif transport == "http":
        logger.info(
            "Serving MCP over HTTP at http://%s:%s%s",
            server.settings.host, server.settings.port, SSE_PATH,
        )
        await server.run_sse_async()
    else:
        raise ValueError(f"Unknown transport: {transport}")
