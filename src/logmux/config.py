"""
Logging configuration.

``LoggingConfig`` holds the ``log`` section and one raw section per mode
(``log.console``, ``log.file``, ...). Each sink validates its own section with
the model it declares, so unknown keys are ignored and missing keys fall back
to the defaults below.

``LoggingSettings`` is the environment-driven bootstrap used by
``configure_logging``.
"""

from __future__ import annotations

import configparser
from pathlib import Path
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .levels import split_filter_string

DEFAULT_LEVEL = "info"
DEFAULT_LOG_FILE_NAME = "grafana.log"


class _Section(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    filters: list[str] = Field(default_factory=list, description="name:level filter entries")

    @field_validator("filters", mode="before")
    @classmethod
    def _split_filters(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return split_filter_string(value)
        return value


class LogSection(_Section):
    """The top-level ``log`` section."""

    level: str = Field(default=DEFAULT_LEVEL, description="Default minimum level")

    @field_validator("level", mode="before")
    @classmethod
    def _default_when_blank(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_LEVEL
        return value


class ModeSection(_Section):
    """Keys shared by every ``log.<mode>`` section."""

    level: Optional[str] = Field(default=None, description="Minimum level; defaults to log.level")
    format: str = Field(default="", description="console, text or json")

    @field_validator("level", mode="before")
    @classmethod
    def _none_when_blank(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ConsoleSection(ModeSection):
    pass


class FileSection(ModeSection):
    file_name: Optional[str] = Field(default=None, description="Defaults to <logs_path>/grafana.log")
    log_rotate: bool = True
    max_lines: int = 1_000_000
    max_size_shift: int = Field(default=28, ge=0, le=62)
    daily_rotate: bool = True
    max_days: int = 7


class SyslogSection(ModeSection):
    network: str = Field(default="", description="'', unix, udp or tcp")
    address: str = Field(default="", description="host:port; empty means the local syslog socket")
    facility: str = "local7"
    tag: str = ""


class LoggingConfig(BaseModel):
    """The ``log`` section plus the raw per-mode sections keyed by mode name."""

    model_config = ConfigDict(frozen=True)

    log: LogSection = Field(default_factory=LogSection)
    modes: dict[str, dict[str, Any]] = Field(default_factory=dict)

    def section(self, mode: str) -> Optional[dict[str, Any]]:
        return self.modes.get(mode)

    @classmethod
    def from_sections(cls, sections: Mapping[str, Mapping[str, Any]]) -> "LoggingConfig":
        """Build from ``{"log": {...}, "log.file": {...}}`` style sections.

        Sections outside the ``log`` namespace are ignored.
        """
        modes: dict[str, dict[str, Any]] = {}
        for name, values in sections.items():
            if name.startswith("log."):
                modes[name[len("log.") :]] = dict(values)
        return cls(log=LogSection.model_validate(dict(sections.get("log", {}))), modes=modes)

    @classmethod
    def from_ini(cls, path: str | Path) -> "LoggingConfig":
        parser = configparser.ConfigParser(interpolation=None)
        with open(path, encoding="utf-8") as fh:
            parser.read_file(fh)
        return cls.from_sections({name: dict(parser.items(name)) for name in parser.sections()})


class LoggingSettings(BaseSettings):
    """Bootstrap settings for the process-wide logging system."""

    model_config = SettingsConfigDict(
        env_prefix="LOGMUX_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    modes: str = Field(default="console", description="Comma-separated modes (console, file, syslog)")
    logs_path: str = Field(default="data/log", description="Directory for the default log file")
    config_file: Optional[str] = Field(default=None, description="ini file with log / log.<mode> sections")
    level: str = Field(default=DEFAULT_LEVEL, description="Default level when no config file is given")
    format: str = Field(default="console", description="Format for every mode when no config file is given")

    @property
    def mode_list(self) -> list[str]:
        return [mode.strip() for mode in self.modes.split(",") if mode.strip()]

    def to_config(self) -> LoggingConfig:
        if self.config_file:
            return LoggingConfig.from_ini(self.config_file)
        return LoggingConfig(
            log=LogSection(level=self.level),
            modes={mode: {"format": self.format} for mode in self.mode_list},
        )
