#!/usr/bin/env python3
"""
Fantasy Map Generator Exporter CLI

Command-line interface for serving the MCP tool server and for running
single exports from the shell.
"""

import argparse
import asyncio
import base64
import json
import logging
import signal
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from .. import __version__
from ..adapters.config import CLIConfigAdapter, EnvironmentConfigAdapter, ExporterConfig
from ..adapters.mcp.server import create_mcp_server, run_server
from ..adapters.progress.cli import create_cli_progress_adapter
from ..core.domain import ResultEnvelope
from ..core.exceptions import ConfigurationError, FMGExportError
from ..core.formats import FORMAT_IDS, FORMATS
from ..exporter import FmgExporter
from ..logging_config import configure_logging

logger = logging.getLogger(__name__)

# Diagnostics go to stderr; stdout belongs to the stdio transport
console = Console(stderr=True)


def parse_option(raw: str) -> Tuple[str, Any]:
    """
    Parse a ``key=value`` export option.

    Values are read as JSON when possible (``true``, ``2``, ``0.5``) and kept
    as text otherwise.

    Raises:
        argparse.ArgumentTypeError: If there is no ``=`` or the key is empty
    """
    key, sep, value = raw.partition("=")
    key = key.strip()
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"Expected key=value, got {raw!r}")
    try:
        parsed = json.loads(value)
    except ValueError:
        parsed = value
    return key, parsed


def collect_options(pairs: Optional[List[Tuple[str, Any]]]) -> Dict[str, Any]:
    return dict(pairs or [])


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser"""
    parser = argparse.ArgumentParser(
        prog="fmg-export",
        description="Fantasy Map Generator exporter - generate maps from a seed and export them",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  # Serve the MCP tools over stdio (for desktop clients)
  fmg-export serve

  # Serve the MCP tools over HTTP (SSE at /mcp/sse)
  fmg-export serve --transport http --port 3333

  # Export a map as minimal JSON
  fmg-export --repo-root ./Fantasy-Map-Generator export --format json_minimal --seed 123

  # Export 4x3 tiles at half size
  fmg-export export --format tiles_zip --seed 42 --option tilesX=4 --option tilesY=3 --option tileScale=0.5

  # List the supported formats
  fmg-export formats
        '''
    )

    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument(
        '--repo-root',
        default=None,
        help='Generator directory to serve (default: FMG_REPO_ROOT or the current directory)'
    )
    parser.add_argument(
        '--headless',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='Run Chromium headless (default: FMG_HEADLESS or true)'
    )
    parser.add_argument(
        '--timeout-ms',
        type=int,
        default=None,
        help='Navigation and generation budget per export (default: FMG_MCP_TIMEOUT_MS or 180000)'
    )
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        type=str.upper,
        default=None,
        help='Logging level (default: FMG_LOG_LEVEL or INFO)'
    )

    subparsers = parser.add_subparsers(dest='command', required=True)

    serve = subparsers.add_parser('serve', help='Run the MCP tool server')
    serve.add_argument(
        '--transport',
        choices=['stdio', 'http'],
        default='stdio',
        help='MCP transport (default: stdio)'
    )
    serve.add_argument('--host', default=None, help='HTTP interface (default: HOST or 127.0.0.1)')
    serve.add_argument('--port', type=int, default=None, help='HTTP port (default: PORT or 3333)')

    export = subparsers.add_parser('export', help='Export one map to a file')
    export.add_argument('--format', required=True, choices=FORMAT_IDS, help='Export format id')
    export.add_argument('--seed', default=None, help='Generator seed (default: random)')
    export.add_argument(
        '--option',
        dest='options',
        action='append',
        type=parse_option,
        metavar='KEY=VALUE',
        help='Format option, repeatable (e.g. resolution=2, noLabels=true)'
    )
    export.add_argument(
        '-o', '--output',
        default=None,
        help='Output file or directory (default: the export filename in the current directory)'
    )
    export.add_argument('-q', '--quiet', action='store_true', help='No progress bar or summary')

    subparsers.add_parser('formats', help='List the supported export formats')

    return parser


def build_config(args: argparse.Namespace) -> ExporterConfig:
    """Environment configuration with command-line overrides applied"""
    overrides = {
        'repo_root': args.repo_root,
        'headless': args.headless,
        'timeout_ms': args.timeout_ms,
        'log_level': args.log_level,
        'host': getattr(args, 'host', None),
        'port': getattr(args, 'port', None),
    }
    adapter = CLIConfigAdapter(overrides, EnvironmentConfigAdapter())
    adapter.validate_config()
    return adapter.get_exporter_config()


def resolve_output_path(output: Optional[str], filename: str) -> Path:
    """Where to write an artifact: the given file, inside the given directory, or the cwd"""
    if not output:
        return Path.cwd() / filename
    path = Path(output).expanduser()
    if path.is_dir():
        return path / filename
    return path


def write_artifact(envelope: ResultEnvelope, output: Optional[str]) -> Path:
    path = resolve_output_path(output, envelope.filename)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(base64.b64decode(envelope.base64))
    return path


def print_formats() -> None:
    """Print the format catalog as a table"""
    table = Table(title="Supported formats")
    table.add_column("Format", style="bold cyan")
    table.add_column("Extension")
    table.add_column("MIME type")
    table.add_column("Description")
    for spec in FORMATS:
        table.add_row(spec.id, spec.ext, spec.mime_type, spec.description)
    Console().print(table)


def print_export_summary(envelope: ResultEnvelope, path: Path) -> None:
    table = Table(show_header=False, box=None)
    table.add_row("File", str(path))
    table.add_row("MIME type", envelope.mime_type)
    table.add_row("Size", f"{envelope.size_bytes:,} bytes")
    console.print(f"✅ Exported {envelope.filename}")
    console.print(table)


def _cancel_on_sigterm() -> None:
    loop = asyncio.get_running_loop()
    task = asyncio.current_task()
    try:
        loop.add_signal_handler(signal.SIGTERM, task.cancel)
    except NotImplementedError:
        # Windows event loops have no signal handlers; Ctrl+C still works
        logger.debug("SIGTERM handler not supported on this platform")


async def serve_mode(config: ExporterConfig, transport: str) -> None:
    """Run the tool server until the transport ends, then close the exporter"""
    _cancel_on_sigterm()
    exporter = FmgExporter(config)
    server = create_mcp_server(exporter, host=config.host, port=config.port)
    logger.info("Generator root: %s", config.repo_root)
    try:
        await run_server(server, transport)
    finally:
        await exporter.close()
        logger.info("Exporter closed")


async def export_mode(config: ExporterConfig, args: argparse.Namespace) -> Path:
    """Run one export and write the artifact"""
    _cancel_on_sigterm()
    options = collect_options(args.options)
    progress = create_cli_progress_adapter("silent" if args.quiet else "auto", console=console)

    async with FmgExporter(config, progress=progress) as exporter:
        if progress.is_progress_enabled():
            with progress:
                envelope = await exporter.export(seed=args.seed, format=args.format, options=options)
        else:
            envelope = await exporter.export(seed=args.seed, format=args.format, options=options)

    path = write_artifact(envelope, args.output)
    if not args.quiet:
        print_export_summary(envelope, path)
    return path


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point"""
    # Load environment variables at the entry point
    load_dotenv()

    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if args.command == 'formats':
        print_formats()
        return 0

    try:
        config = build_config(args)
    except ConfigurationError as e:
        console.print("❌ Invalid configuration:")
        for problem in e.problems:
            console.print(f"   • {problem}")
        console.print("💡 Set FMG_REPO_ROOT or pass --repo-root pointing at a generator checkout")
        return 1

    configure_logging(config.log_level, console=console)

    try:
        if args.command == 'serve':
            asyncio.run(serve_mode(config, args.transport))
        else:
            asyncio.run(export_mode(config, args))
    except (KeyboardInterrupt, asyncio.CancelledError):
        console.print("🛑 Stopped")
        return 130 if args.command == 'export' else 0
    except FMGExportError as e:
        console.print(f"❌ {e}")
        logger.debug("Export failed", exc_info=True)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
