"""
FMG Export Engine

Drives Azgaar's Fantasy Map Generator inside a headless browser and turns
the generated map into downloadable artifacts (images, save files, JSON,
GeoJSON, tile archives).
"""

__version__ = "0.1.0"
__description__ = "Seeded Fantasy Map Generator export engine with an MCP tool surface"
