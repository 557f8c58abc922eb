"""Configuration management for portal-a11y.

Supports loading configuration from YAML files, environment variables,
and command-line arguments with proper precedence.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml


@dataclass
class CrawlConfig:
    """Configuration for crawl scope and fetching."""

    max_depth: int = 2
    namespace_marker: str = "portal"  # path token preceding the portal name
    excluded_paths: List[str] = field(default_factory=lambda: ["/servicio/"])
    timeout: float = 10.0
    user_agent: str = "portal-a11y-Scanner/1.0"


@dataclass
class AuditConfig:
    """Configuration for the accessibility rules."""

    exclude: List[str] = field(default_factory=list)


@dataclass
class OutputConfig:
    """Configuration for output."""

    format: str = "pretty"  # pretty, json
    path: Optional[str] = None


@dataclass
class DatabaseConfig:
    """Configuration for the result store."""

    path: Optional[str] = None


@dataclass
class Config:
    """Main configuration container."""

    crawl: CrawlConfig = field(default_factory=CrawlConfig)
    audit: AuditConfig = field(default_factory=AuditConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Create Config from dictionary."""
        config = cls()

        if "crawl" in data:
            crawl = data["crawl"]
            defaults = CrawlConfig()
            config.crawl = CrawlConfig(
                max_depth=crawl.get("max_depth", defaults.max_depth),
                namespace_marker=crawl.get("namespace_marker", defaults.namespace_marker),
                excluded_paths=list(crawl.get("excluded_paths", defaults.excluded_paths)),
                timeout=crawl.get("timeout", defaults.timeout),
                user_agent=crawl.get("user_agent", defaults.user_agent),
            )

        if "audit" in data:
            config.audit = AuditConfig(exclude=list(data["audit"].get("exclude", [])))

        if "output" in data:
            output = data["output"]
            config.output = OutputConfig(
                format=output.get("format", "pretty"),
                path=output.get("path"),
            )

        if "database" in data:
            config.database = DatabaseConfig(path=data["database"].get("path"))

        return config


def load_config(config_path: Optional[str] = None) -> Config:
    """Load configuration from file.

    Searches for configuration in the following order:
    1. Specified config_path
    2. ./portal-a11y.yaml or ./portal-a11y.yml (or the dotted variants)
    3. ~/.portal-a11y/config.yaml

    Args:
        config_path: Optional path to configuration file

    Returns:
        Config object with loaded settings
    """
    paths_to_try = []

    if config_path:
        paths_to_try.append(Path(config_path))
    else:
        paths_to_try.append(Path("portal-a11y.yaml"))
        paths_to_try.append(Path("portal-a11y.yml"))
        paths_to_try.append(Path(".portal-a11y.yaml"))
        paths_to_try.append(Path(".portal-a11y.yml"))

        home = Path.home()
        paths_to_try.append(home / ".portal-a11y" / "config.yaml")
        paths_to_try.append(home / ".portal-a11y" / "config.yml")

    for path in paths_to_try:
        if path.exists():
            return load_config_from_file(path)

    if config_path:
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    return Config()


def load_config_from_file(path: Path) -> Config:
    """Load configuration from a specific file.

    Args:
        path: Path to configuration file

    Returns:
        Config object

    Raises:
        ValueError: If file format is not supported
    """
    suffix = path.suffix.lower()

    if suffix in (".yaml", ".yml"):
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    elif suffix == ".json":
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    else:
        raise ValueError(f"Unsupported configuration file format: {suffix}")

    return Config.from_dict(data)


def merge_env_config(config: Config) -> Config:
    """Merge environment variables into configuration.

    Environment variables take precedence over file configuration.
    """
    if os.environ.get("A11Y_MAX_DEPTH"):
        config.crawl.max_depth = int(os.environ["A11Y_MAX_DEPTH"])
    if os.environ.get("A11Y_NAMESPACE_MARKER"):
        config.crawl.namespace_marker = os.environ["A11Y_NAMESPACE_MARKER"]
    if os.environ.get("A11Y_EXCLUDED_PATHS"):
        config.crawl.excluded_paths = [
            p.strip() for p in os.environ["A11Y_EXCLUDED_PATHS"].split(",") if p.strip()
        ]
    if os.environ.get("A11Y_TIMEOUT"):
        config.crawl.timeout = float(os.environ["A11Y_TIMEOUT"])

    if os.environ.get("A11Y_DB_PATH"):
        config.database.path = os.environ["A11Y_DB_PATH"]

    return config
