"""
Configuration adapters for the exporter.

Settings come from environment variables (a ``.env`` file is loaded by the
CLI entry point through python-dotenv); CLI flags may override them.
"""

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import urlparse
from urllib.request import url2pathname

from ..core.exceptions import ConfigurationError

DEFAULT_TIMEOUT_MS = 180_000
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3333
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class ExporterConfig:
    """Resolved exporter settings"""
    repo_root: Path
    headless: bool = True
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = DEFAULT_LOG_LEVEL

    def problems(self) -> List[str]:
        """Everything wrong with these settings, empty when valid"""
        problems = []
        if not self.repo_root.is_dir():
            problems.append(f"repository root {self.repo_root} is not a directory")
        elif not (self.repo_root / "index.html").is_file():
            problems.append(f"repository root {self.repo_root} has no index.html")
        if self.timeout_ms <= 0:
            problems.append(f"timeout must be positive, got {self.timeout_ms} ms")
        if not 0 <= self.port <= 65535:
            problems.append(f"port must be between 0 and 65535, got {self.port}")
        return problems


def parse_repo_root(value: Optional[str]) -> Path:
    """Repository root from a path or a ``file://`` URL; cwd when unset"""
    if not value:
        return Path.cwd()
    if value.startswith("file:"):
        value = url2pathname(urlparse(value).path)
    return Path(value).expanduser().resolve()


def parse_headless(value: Optional[str]) -> bool:
    """Headless unless explicitly set to ``false``"""
    if value is None or value == "":
        return True
    return value.strip().lower() != "false"


def _parse_int(name: str, value: Optional[str], default: int, problems: List[str]) -> int:
    if value is None or value.strip() == "":
        return default
    try:
        return int(float(value))
    except (ValueError, OverflowError):
        problems.append(f"{name} must be a number, got {value!r}")
        return default


class EnvironmentConfigAdapter:
    """Configuration adapter that reads from environment variables"""

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self.environ = os.environ if environ is None else environ

    def get_exporter_config(self) -> ExporterConfig:
        """
        Build the exporter configuration.

        Raises:
            ConfigurationError: If a numeric setting cannot be parsed
        """
        problems: List[str] = []
        config = ExporterConfig(
            repo_root=parse_repo_root(self.environ.get("FMG_REPO_ROOT")),
            headless=parse_headless(self.environ.get("FMG_HEADLESS")),
            timeout_ms=_parse_int("FMG_MCP_TIMEOUT_MS", self.environ.get("FMG_MCP_TIMEOUT_MS"),
                                  DEFAULT_TIMEOUT_MS, problems),
            host=self.environ.get("HOST") or DEFAULT_HOST,
            port=_parse_int("PORT", self.environ.get("PORT"), DEFAULT_PORT, problems),
            log_level=(self.environ.get("FMG_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
        )
        if problems:
            raise ConfigurationError("Invalid environment configuration", problems)
        return config

    def validate_config(self) -> bool:
        """
        Validate the configuration.

        Raises:
            ConfigurationError: Listing every problem found
        """
        problems = self.get_exporter_config().problems()
        if problems:
            raise ConfigurationError("Invalid configuration", problems)
        return True


class CLIConfigAdapter:
    """Configuration adapter overlaying command-line flags on the environment"""

    def __init__(self, overrides: Dict[str, Any], base: Optional[EnvironmentConfigAdapter] = None):
        """
        Args:
            overrides: Flag values keyed by ExporterConfig field; None means not given
            base: Adapter supplying the values that were not overridden
        """
        self.overrides = {key: value for key, value in overrides.items() if value is not None}
        self.base = base or EnvironmentConfigAdapter()

    def get_exporter_config(self) -> ExporterConfig:
        config = self.base.get_exporter_config()
        overrides = dict(self.overrides)
        if "repo_root" in overrides:
            overrides["repo_root"] = parse_repo_root(str(overrides["repo_root"]))
        if "log_level" in overrides:
            overrides["log_level"] = str(overrides["log_level"]).upper()
        return replace(config, **overrides)

    def validate_config(self) -> bool:
        problems = self.get_exporter_config().problems()
        if problems:
            raise ConfigurationError("Invalid configuration", problems)
        return True
