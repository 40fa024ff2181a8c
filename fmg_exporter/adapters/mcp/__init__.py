"""
Model Context Protocol tool server.
"""

from .server import build_formats_payload, create_mcp_server, export_tool_content, run_server

__all__ = ["build_formats_payload", "create_mcp_server", "export_tool_content", "run_server"]
