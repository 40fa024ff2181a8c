"""
Unit tests for the fmg-export command line.

Exports run against a fake exporter; nothing launches a browser.
"""

import argparse
import base64

import pytest

from fmg_exporter.cli import main as cli
from fmg_exporter.core.domain import ResultEnvelope
from fmg_exporter.core.exceptions import ReadinessTimeoutError


class FakeExporter:
    instances = []
    error = None

    def __init__(self, config, progress=None):
        self.config = config
        self.progress = progress
        self.requests = []
        self.closed = False
        FakeExporter.instances.append(self)

    async def export(self, seed=None, format="png", options=None):
        self.requests.append((seed, format, options))
        if FakeExporter.error is not None:
            raise FakeExporter.error
        data = base64.b64encode(b'{"ok":true}').decode("ascii")
        return ResultEnvelope(filename="Testland.minimal.json", mime_type="application/json",
                              base64=data, size_bytes=11)

    async def close(self):
        self.closed = True

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.close()


@pytest.fixture
def fake_exporter(monkeypatch, tmp_path):
    FakeExporter.instances = []
    FakeExporter.error = None
    monkeypatch.setattr(cli, "FmgExporter", FakeExporter)
    monkeypatch.setattr(cli, "configure_logging", lambda *args, **kwargs: None)
    monkeypatch.chdir(tmp_path)
    for name in ("FMG_REPO_ROOT", "FMG_HEADLESS", "FMG_MCP_TIMEOUT_MS", "HOST", "PORT", "FMG_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    return FakeExporter


class TestParseOption:
    @pytest.mark.parametrize("raw,expected", [
        ("resolution=2", ("resolution", 2)),
        ("quality=0.5", ("quality", 0.5)),
        ("noLabels=true", ("noLabels", True)),
        ("label=hello", ("label", "hello")),
        ("empty=", ("empty", "")),
    ])
    def test_values(self, raw, expected):
        assert cli.parse_option(raw) == expected

    @pytest.mark.parametrize("raw", ["resolution", "=2"])
    def test_rejects_malformed(self, raw):
        with pytest.raises(argparse.ArgumentTypeError):
            cli.parse_option(raw)


class TestArgumentParser:
    def test_serve_defaults(self):
        args = cli.create_argument_parser().parse_args(["serve"])

        assert args.command == "serve"
        assert args.transport == "stdio"
        assert args.headless is None

    def test_export_arguments(self):
        args = cli.create_argument_parser().parse_args([
            "--no-headless", "--timeout-ms", "5000", "--log-level", "debug",
            "export", "--format", "tiles_zip", "--seed", "42",
            "--option", "tilesX=3", "--option", "tileScale=0.5",
        ])

        assert args.headless is False
        assert args.timeout_ms == 5000
        assert args.log_level == "DEBUG"
        assert args.format == "tiles_zip"
        assert cli.collect_options(args.options) == {"tilesX": 3, "tileScale": 0.5}

    def test_unknown_format_is_rejected(self):
        with pytest.raises(SystemExit):
            cli.create_argument_parser().parse_args(["export", "--format", "bmp"])


class TestOutputPath:
    def test_defaults_to_cwd(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert cli.resolve_output_path(None, "map.svg") == tmp_path / "map.svg"

    def test_directory_output(self, tmp_path):
        assert cli.resolve_output_path(str(tmp_path), "map.svg") == tmp_path / "map.svg"

    def test_file_output(self, tmp_path):
        assert cli.resolve_output_path(str(tmp_path / "x.svg"), "map.svg") == tmp_path / "x.svg"


class TestMain:
    def test_formats(self, capsys):
        assert cli.main(["formats"]) == 0
        assert "image/svg+xml" in capsys.readouterr().out

    def test_export_writes_decoded_artifact(self, fake_exporter, generator_root, tmp_path):
        output = tmp_path / "out"
        output.mkdir()

        code = cli.main([
            "--repo-root", str(generator_root),
            "export", "--format", "json_minimal", "--seed", "7", "-q", "-o", str(output),
        ])

        assert code == 0
        assert (output / "Testland.minimal.json").read_bytes() == b'{"ok":true}'
        exporter = fake_exporter.instances[0]
        assert exporter.requests == [("7", "json_minimal", {})]
        assert exporter.closed
        assert exporter.config.repo_root == generator_root.resolve()

    def test_invalid_configuration(self, fake_exporter, tmp_path):
        code = cli.main(["--repo-root", str(tmp_path), "export", "--format", "svg", "-q"])

        assert code == 1
        assert fake_exporter.instances == []

    def test_export_failure(self, fake_exporter, generator_root):
        fake_exporter.error = ReadinessTimeoutError(100, missing_fields=["pack"])

        code = cli.main(["--repo-root", str(generator_root), "export", "--format", "svg", "-q"])

        assert code == 1
        assert fake_exporter.instances[0].closed
