"""
Unit tests for the configuration adapters.
"""

from pathlib import Path

import pytest

from fmg_exporter.adapters.config import (
    DEFAULT_PORT,
    DEFAULT_TIMEOUT_MS,
    CLIConfigAdapter,
    EnvironmentConfigAdapter,
    ExporterConfig,
    parse_headless,
    parse_repo_root,
)
from fmg_exporter.core.exceptions import ConfigurationError


class TestParsing:
    @pytest.mark.parametrize("value,expected", [
        (None, True),
        ("", True),
        ("true", True),
        ("1", True),
        ("false", False),
        ("FALSE", False),
        (" false ", False),
    ])
    def test_headless(self, value, expected):
        assert parse_headless(value) is expected

    def test_repo_root_defaults_to_cwd(self):
        assert parse_repo_root(None) == Path.cwd()

    def test_repo_root_accepts_file_url(self, tmp_path):
        assert parse_repo_root(tmp_path.resolve().as_uri()) == tmp_path.resolve()

    def test_repo_root_plain_path(self, tmp_path):
        assert parse_repo_root(str(tmp_path)) == tmp_path.resolve()


class TestEnvironmentConfigAdapter:
    def test_defaults(self):
        config = EnvironmentConfigAdapter({}).get_exporter_config()

        assert config.repo_root == Path.cwd()
        assert config.headless is True
        assert config.timeout_ms == DEFAULT_TIMEOUT_MS
        assert config.host == "127.0.0.1"
        assert config.port == DEFAULT_PORT
        assert config.log_level == "INFO"

    def test_reads_environment(self, generator_root):
        adapter = EnvironmentConfigAdapter({
            "FMG_REPO_ROOT": str(generator_root),
            "FMG_HEADLESS": "false",
            "FMG_MCP_TIMEOUT_MS": "5000",
            "HOST": "0.0.0.0",
            "PORT": "8080",
            "FMG_LOG_LEVEL": "debug",
        })

        config = adapter.get_exporter_config()

        assert config.repo_root == generator_root.resolve()
        assert config.headless is False
        assert config.timeout_ms == 5000
        assert config.host == "0.0.0.0"
        assert config.port == 8080
        assert config.log_level == "DEBUG"
        assert adapter.validate_config() is True

    def test_unparseable_numbers_are_reported_together(self):
        adapter = EnvironmentConfigAdapter({"FMG_MCP_TIMEOUT_MS": "soon", "PORT": "http"})

        with pytest.raises(ConfigurationError) as exc_info:
            adapter.get_exporter_config()

        assert len(exc_info.value.problems) == 2

    def test_validate_lists_every_problem(self, tmp_path):
        adapter = EnvironmentConfigAdapter({
            "FMG_REPO_ROOT": str(tmp_path),
            "FMG_MCP_TIMEOUT_MS": "0",
            "PORT": "70000",
        })

        with pytest.raises(ConfigurationError) as exc_info:
            adapter.validate_config()

        problems = exc_info.value.problems
        assert any("index.html" in problem for problem in problems)
        assert any("timeout" in problem for problem in problems)
        assert any("port" in problem for problem in problems)

    def test_missing_root_is_a_problem(self, tmp_path):
        config = ExporterConfig(repo_root=tmp_path / "missing")
        assert config.problems() == [f"repository root {tmp_path / 'missing'} is not a directory"]


class TestCLIConfigAdapter:
    def test_flags_override_environment(self, generator_root):
        base = EnvironmentConfigAdapter({"PORT": "9000", "FMG_HEADLESS": "true"})
        adapter = CLIConfigAdapter(
            {"repo_root": str(generator_root), "headless": False, "port": None, "log_level": "warning"},
            base,
        )

        config = adapter.get_exporter_config()

        assert config.repo_root == generator_root.resolve()
        assert config.headless is False
        assert config.port == 9000
        assert config.log_level == "WARNING"

    def test_validate_uses_overridden_values(self, generator_root):
        adapter = CLIConfigAdapter({"repo_root": str(generator_root), "timeout_ms": -1},
                                   EnvironmentConfigAdapter({}))

        with pytest.raises(ConfigurationError, match="timeout"):
            adapter.validate_config()
