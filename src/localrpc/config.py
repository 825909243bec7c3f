"""Configuration loader for localrpc."""

from __future__ import annotations

import logging
import os
import tempfile
import tomllib
from pathlib import Path
from typing import Literal

import tomlkit
from pydantic import BaseModel, Field, ValidationError, field_validator

from localrpc.paths import get_config_path

type DuplicatePolicyLiteral = Literal["replace", "error"]

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


class ConfigError(ValueError):
    """Raised when the configuration file cannot be read or validated."""


def atomic_write(path: Path, content: str) -> None:
    """Write file atomically to avoid partial/corrupt writes."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=".tmp_")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
        Path(tmp_path).replace(path)
    except Exception:
        Path(tmp_path).unlink(missing_ok=True)
        raise


class RegistryConfig(BaseModel):
    """Routing registry settings."""

    duplicate_policy: DuplicatePolicyLiteral = Field(
        default="replace",
        description=(
            "What to do when a session id is registered twice: replace the live "
            "entry with a warning, or raise"
        ),
    )


class RPCConfig(BaseModel):
    """Settings for the bundled JSON-RPC client."""

    request_timeout: float | None = Field(
        default=30.0,
        description="Seconds to wait for a response (None waits forever)",
    )

    @field_validator("request_timeout")
    @classmethod
    def _positive_timeout(cls, value: float | None) -> float | None:
        if value is not None and value <= 0:
            msg = "request_timeout must be positive"
            raise ValueError(msg)
        return value


class LoggingConfig(BaseModel):
    """Logging settings applied by the CLI."""

    level: str = Field(default="WARNING", description="Root log level")

    @field_validator("level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in _LOG_LEVELS:
            msg = f"Unknown log level {value!r}"
            raise ValueError(msg)
        return level

    def apply(self) -> None:
        logging.basicConfig(
            level=self.level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


class LocalRPCConfig(BaseModel):
    """Root configuration model."""

    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    rpc: RPCConfig = Field(default_factory=RPCConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, config_path: Path | None = None) -> LocalRPCConfig:
        """Load configuration from TOML file or use defaults.

        Raises:
            ConfigError: If the file is not valid TOML or fails validation.
        """
        if config_path is None:
            config_path = get_config_path()

        if not config_path.exists():
            return cls()

        try:
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as exc:
            msg = f"Invalid TOML in {config_path}: {exc}"
            raise ConfigError(msg) from exc

        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            msg = f"Invalid configuration in {config_path}: {exc}"
            raise ConfigError(msg) from exc

    def to_toml(self) -> str:
        """Render the configuration as a TOML document."""
        doc = tomlkit.document()
        for section, values in self.model_dump().items():
            table = tomlkit.table()
            for key, value in values.items():
                if value is not None:
                    table[key] = value
            doc[section] = table
        return tomlkit.dumps(doc)

    def save(self, path: Path | None = None) -> Path:
        """Serialize current config to TOML file and return the path written."""
        if path is None:
            path = get_config_path()
        atomic_write(path, self.to_toml())
        return path


__all__ = [
    "ConfigError",
    "LocalRPCConfig",
    "LoggingConfig",
    "RPCConfig",
    "RegistryConfig",
    "atomic_write",
]
