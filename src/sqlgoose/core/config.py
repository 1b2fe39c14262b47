"""Configuration management for sqlgoose."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigError


def _default_migrations_dir() -> Path:
    """Get default migrations directory."""
    return Path("db") / "migrations"


@dataclass
class DBConf:
    """Database and migration configuration for one environment."""

    url: str = ""
    migrations_dir: Path = field(default_factory=_default_migrations_dir)
    env: str = "development"
    dialect: str | None = None  # Inferred from the URL when unset
    validate_checksums: bool = True

    @classmethod
    def from_file(cls, path: Path, env: str = "development") -> "DBConf":
        """Load one environment from a dbconf.yml file.

        The file maps environment names to settings:

            development:
                url: sqlite:///dev.db
                dialect: sqlite3
                migrations_dir: db/migrations

        ``open`` is accepted as an alias of ``url``. Values of the form
        ``$VAR`` are expanded from the environment.

        Args:
            path: Path to the YAML file.
            env: Environment section to load.

        Raises:
            ConfigError: If the file or environment section is missing.
        """
        try:
            data = yaml.safe_load(Path(path).read_text()) or {}
        except FileNotFoundError as e:
            raise ConfigError(f"Config file not found: {path}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid config file {path}: {e}") from e

        section = data.get(env)
        if not isinstance(section, dict):
            raise ConfigError(f"Environment {env!r} not found in {path}")

        url = _expand(section.get("url") or section.get("open") or "")
        if not url:
            raise ConfigError(f"No database url for environment {env!r} in {path}")

        config = cls(url=url, env=env)
        if dialect := section.get("dialect"):
            config.dialect = _expand(dialect)
        if migrations_dir := section.get("migrations_dir"):
            # Relative to the config file, like the default layout db/dbconf.yml
            config.migrations_dir = Path(path).parent / _expand(migrations_dir)
        else:
            config.migrations_dir = Path(path).parent / "migrations"
        if "validate_checksums" in section:
            config.validate_checksums = bool(section["validate_checksums"])
        return config

    @classmethod
    def from_env(cls, base: "DBConf | None" = None) -> "DBConf":
        """Load configuration from environment variables.

        Args:
            base: Configuration to override; a default one when omitted.
        """
        config = base or cls()

        if env := os.environ.get("GOOSE_ENV"):
            config.env = env

        if url := os.environ.get("GOOSE_DB_URL"):
            config.url = url

        if dialect := os.environ.get("GOOSE_DIALECT"):
            config.dialect = dialect

        if path := os.environ.get("GOOSE_MIGRATIONS_DIR"):
            config.migrations_dir = Path(path)

        if flag := os.environ.get("GOOSE_VALIDATE_CHECKSUMS"):
            config.validate_checksums = flag.lower() not in ("0", "false", "no")

        return config


def _expand(value: Any) -> str:
    """Expand $VAR references in a config value."""
    return os.path.expandvars(str(value))
