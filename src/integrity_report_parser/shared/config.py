"""Configuration classes for Integrity report ingestion.

This module provides configuration objects for the streaming parser, the
parallel orchestrator and report discovery. Values can be given explicitly or
loaded from the process environment.
"""

import json
import math
import os
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional

# Environment variables consumed by IngestionConfig.from_env()
ENV_THREAD_COUNT = "INTEGRITY_PARSER_THREADS"
ENV_IGNORE_TIMESTAMPS = "INTEGRITY_PARSER_IGNORE_TIMESTAMPS"
ENV_DRAIN_TIMEOUT = "INTEGRITY_PARSER_DRAIN_TIMEOUT"

DEFAULT_THREAD_COUNT = 16
DEFAULT_DRAIN_TIMEOUT_SECONDS = 365 * 24 * 60 * 60.0  # effectively unbounded
DEFAULT_READ_CHUNK_SIZE = 16384

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}

_SECTIONS = ("parser", "concurrency", "discovery")


@dataclass
class StreamingParserConfig:
    """Settings handed to the streaming XML parser at construction time.

    Report files are parsed non-validating: external DTDs are never loaded and
    entities are never resolved, no matter what the embedded DOCTYPE says.
    """

    load_dtd: bool = False
    no_network: bool = True
    resolve_entities: bool = False
    huge_tree: bool = False
    read_chunk_size: int = DEFAULT_READ_CHUNK_SIZE

    def __post_init__(self) -> None:
        """Validate streaming parser configuration."""
        if self.read_chunk_size <= 0:
            raise ValueError("read_chunk_size must be > 0")

    def parser_options(self) -> Dict[str, Any]:
        """Keyword arguments for ``lxml.etree.XMLPullParser``."""
        return {
            "load_dtd": self.load_dtd,
            "no_network": self.no_network,
            "resolve_entities": self.resolve_entities,
            "huge_tree": self.huge_tree,
        }


@dataclass
class ConcurrencyConfig:
    """Configuration of the parallel ingestion worker pool."""

    thread_count: int = DEFAULT_THREAD_COUNT
    drain_timeout_seconds: float = DEFAULT_DRAIN_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        """Validate concurrency configuration."""
        if self.thread_count <= 0:
            raise ValueError("thread_count must be > 0")
        if not math.isfinite(self.drain_timeout_seconds):
            raise ValueError("drain_timeout_seconds must be finite")
        if self.drain_timeout_seconds <= 0:
            raise ValueError("drain_timeout_seconds must be > 0")


@dataclass
class DiscoveryConfig:
    """Configuration for locating report files on disk."""

    ignore_timestamps: bool = False


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigValidationError(
        f"{name} must be a boolean, got {raw!r}",
        field_name=name,
        suggestions=["Use one of: true, false, 1, 0, yes, no"],
    )


def _parse_number(name: str, raw: str, kind: type) -> Any:
    try:
        return kind(raw.strip())
    except ValueError as e:
        raise ConfigValidationError(
            f"{name} must be a {kind.__name__}, got {raw!r}", field_name=name
        ) from e


@dataclass(frozen=True)
class IngestionConfig:
    """Complete configuration for report ingestion.

    Immutable, so one instance can be shared freely between worker threads.
    """

    parser: StreamingParserConfig = field(default_factory=StreamingParserConfig)
    concurrency: ConcurrencyConfig = field(default_factory=ConcurrencyConfig)
    discovery: DiscoveryConfig = field(default_factory=DiscoveryConfig)

    def __post_init__(self) -> None:
        """Re-validate the component configurations."""
        try:
            self.parser.__post_init__()
            self.concurrency.__post_init__()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "IngestionConfig":
        """Create configuration from environment variables.

        Args:
            environ: Mapping to read from (defaults to ``os.environ``)

        Returns:
            IngestionConfig with every variable that is set applied over the
            defaults

        Raises:
            ConfigValidationError: If a variable holds an unusable value
        """
        env = os.environ if environ is None else environ
        concurrency = ConcurrencyConfig()
        discovery = DiscoveryConfig()

        try:
            if env.get(ENV_THREAD_COUNT):
                concurrency = replace(
                    concurrency,
                    thread_count=_parse_number(ENV_THREAD_COUNT, env[ENV_THREAD_COUNT], int),
                )
            if env.get(ENV_DRAIN_TIMEOUT):
                concurrency = replace(
                    concurrency,
                    drain_timeout_seconds=_parse_number(
                        ENV_DRAIN_TIMEOUT, env[ENV_DRAIN_TIMEOUT], float
                    ),
                )
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

        if ENV_IGNORE_TIMESTAMPS in env:
            discovery = DiscoveryConfig(
                ignore_timestamps=_parse_bool(ENV_IGNORE_TIMESTAMPS, env[ENV_IGNORE_TIMESTAMPS])
            )

        return cls(concurrency=concurrency, discovery=discovery)

    def override(self, **kwargs: Any) -> "IngestionConfig":
        """Create a new configuration with specific overrides.

        Example:
            >>> config = IngestionConfig()
            >>> config.override(concurrency__thread_count=4).concurrency.thread_count
            4
        """
        nested_overrides: Dict[str, Dict[str, Any]] = {}
        for key, value in kwargs.items():
            if "__" not in key:
                raise ConfigValidationError(
                    f"Override {key!r} must use section__field notation",
                    field_name=key,
                    suggestions=[f"{section}__<field>" for section in _SECTIONS],
                )
            section, field_name = key.split("__", 1)
            if section not in _SECTIONS:
                raise ConfigValidationError(f"Unknown section: {section}", field_name=key)
            nested_overrides.setdefault(section, {})[field_name] = value

        new_fields = {}
        for section, values in nested_overrides.items():
            try:
                new_fields[section] = replace(getattr(self, section), **values)
            except (TypeError, ValueError) as e:
                raise ConfigValidationError(str(e), field_name=section) from e
        return replace(self, **new_fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        return {
            section: dict(vars(getattr(self, section))) for section in _SECTIONS
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IngestionConfig":
        """Create configuration from dictionary.

        Unknown sections are rejected; missing sections keep their defaults.
        """
        unknown = set(data) - set(_SECTIONS)
        if unknown:
            raise ConfigValidationError(f"Unknown configuration sections: {sorted(unknown)}")
        try:
            return cls(
                parser=StreamingParserConfig(**data.get("parser", {})),
                concurrency=ConcurrencyConfig(**data.get("concurrency", {})),
                discovery=DiscoveryConfig(**data.get("discovery", {})),
            )
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(str(e)) from e

    @classmethod
    def from_json(cls, json_str: str) -> "IngestionConfig":
        """Create configuration from JSON string."""
        return cls.from_dict(json.loads(json_str))

    # Preset factory methods
    @classmethod
    def single_threaded(cls) -> "IngestionConfig":
        """Preset that parses one file at a time, in submission order."""
        return cls(concurrency=ConcurrencyConfig(thread_count=1))

    @classmethod
    def strict_fresh_only(cls) -> "IngestionConfig":
        """Preset that never accepts stale report files during discovery."""
        return cls(discovery=DiscoveryConfig(ignore_timestamps=False))
