"""Tests for the ingestion configuration system."""

import json
from dataclasses import FrozenInstanceError

import pytest

from integrity_report_parser.shared.config import (
    DEFAULT_DRAIN_TIMEOUT_SECONDS,
    DEFAULT_READ_CHUNK_SIZE,
    DEFAULT_THREAD_COUNT,
    ENV_DRAIN_TIMEOUT,
    ENV_IGNORE_TIMESTAMPS,
    ENV_THREAD_COUNT,
    ConcurrencyConfig,
    ConfigError,
    ConfigValidationError,
    DiscoveryConfig,
    IngestionConfig,
    StreamingParserConfig,
)


class TestStreamingParserConfig:
    """Test suite for StreamingParserConfig."""

    def test_default_configuration_is_non_validating(self):
        """Test that DTD loading and entity resolution are off by default."""
        config = StreamingParserConfig()

        assert config.load_dtd is False
        assert config.no_network is True
        assert config.resolve_entities is False
        assert config.huge_tree is False
        assert config.read_chunk_size == DEFAULT_READ_CHUNK_SIZE

    def test_parser_options_exclude_chunk_size(self):
        """Test that only lxml keyword arguments are handed to the parser."""
        options = StreamingParserConfig(huge_tree=True).parser_options()

        assert options == {
            "load_dtd": False,
            "no_network": True,
            "resolve_entities": False,
            "huge_tree": True,
        }

    def test_invalid_chunk_size(self):
        """Test that a non-positive chunk size is rejected."""
        with pytest.raises(ValueError, match="read_chunk_size must be > 0"):
            StreamingParserConfig(read_chunk_size=0)


class TestConcurrencyConfig:
    """Test suite for ConcurrencyConfig."""

    def test_defaults(self):
        """Test default worker pool settings."""
        config = ConcurrencyConfig()

        assert config.thread_count == DEFAULT_THREAD_COUNT == 16
        assert config.drain_timeout_seconds == DEFAULT_DRAIN_TIMEOUT_SECONDS

    def test_validation_failures(self):
        """Test that non-positive values are rejected."""
        with pytest.raises(ValueError, match="thread_count must be > 0"):
            ConcurrencyConfig(thread_count=0)

        with pytest.raises(ValueError, match="drain_timeout_seconds must be > 0"):
            ConcurrencyConfig(drain_timeout_seconds=-1)

    @pytest.mark.parametrize("timeout", [float("inf"), float("nan")])
    def test_non_finite_drain_timeout(self, timeout):
        """Test that infinite and NaN timeouts are rejected."""
        with pytest.raises(ValueError, match="drain_timeout_seconds must be finite"):
            ConcurrencyConfig(drain_timeout_seconds=timeout)


class TestIngestionConfigFromEnv:
    """Test loading IngestionConfig from environment variables."""

    def test_empty_environment_gives_defaults(self):
        """Test that no variables means default configuration."""
        # Act
        config = IngestionConfig.from_env({})

        # Assert
        assert config == IngestionConfig()

    def test_all_variables_applied(self):
        """Test that every supported variable is honoured."""
        # Arrange
        environ = {
            ENV_THREAD_COUNT: "4",
            ENV_DRAIN_TIMEOUT: "2.5",
            ENV_IGNORE_TIMESTAMPS: "yes",
        }

        # Act
        config = IngestionConfig.from_env(environ)

        # Assert
        assert config.concurrency.thread_count == 4
        assert config.concurrency.drain_timeout_seconds == 2.5
        assert config.discovery.ignore_timestamps is True

    def test_blank_thread_count_keeps_default(self):
        """Test that an empty variable is treated as unset."""
        config = IngestionConfig.from_env({ENV_THREAD_COUNT: ""})

        assert config.concurrency.thread_count == DEFAULT_THREAD_COUNT

    def test_reads_process_environment_by_default(self, monkeypatch):
        """Test that os.environ is consulted when no mapping is given."""
        # Arrange
        monkeypatch.setenv(ENV_THREAD_COUNT, "3")

        # Act
        config = IngestionConfig.from_env()

        # Assert
        assert config.concurrency.thread_count == 3

    def test_non_numeric_thread_count(self):
        """Test that a malformed number names the offending variable."""
        with pytest.raises(ConfigValidationError, match=f"{ENV_THREAD_COUNT} must be a int") as exc:
            IngestionConfig.from_env({ENV_THREAD_COUNT: "many"})

        assert exc.value.field_name == ENV_THREAD_COUNT

    def test_zero_thread_count(self):
        """Test that range validation also applies to environment values."""
        with pytest.raises(ConfigValidationError, match="thread_count must be > 0"):
            IngestionConfig.from_env({ENV_THREAD_COUNT: "0"})

    @pytest.mark.parametrize("raw", ["inf", "nan"])
    def test_non_finite_drain_timeout(self, raw):
        """Test that non-finite timeouts from the environment are rejected."""
        with pytest.raises(ConfigValidationError, match="drain_timeout_seconds must be finite"):
            IngestionConfig.from_env({ENV_DRAIN_TIMEOUT: raw})

    def test_invalid_boolean(self):
        """Test that unknown boolean spellings are rejected with suggestions."""
        with pytest.raises(ConfigValidationError, match="must be a boolean") as exc:
            IngestionConfig.from_env({ENV_IGNORE_TIMESTAMPS: "maybe"})

        assert exc.value.suggestions

    @pytest.mark.parametrize("raw", ["0", "false", "No", "off", ""])
    def test_false_boolean_spellings(self, raw):
        """Test the accepted spellings of false."""
        config = IngestionConfig.from_env({ENV_IGNORE_TIMESTAMPS: raw})

        assert config.discovery.ignore_timestamps is False


class TestIngestionConfig:
    """Test suite for the umbrella IngestionConfig."""

    def test_is_immutable(self):
        """Test that the configuration cannot be modified in place."""
        config = IngestionConfig()

        with pytest.raises(FrozenInstanceError):
            config.parser = StreamingParserConfig()  # type: ignore[misc]

    def test_override_nested_field(self):
        """Test section__field overrides."""
        # Arrange
        config = IngestionConfig()

        # Act
        updated = config.override(
            concurrency__thread_count=2, discovery__ignore_timestamps=True
        )

        # Assert
        assert updated.concurrency.thread_count == 2
        assert updated.discovery.ignore_timestamps is True
        assert config.concurrency.thread_count == DEFAULT_THREAD_COUNT

    def test_override_requires_section(self):
        """Test that plain field names are rejected."""
        with pytest.raises(ConfigValidationError, match="section__field"):
            IngestionConfig().override(thread_count=2)

    def test_override_unknown_section(self):
        """Test that unknown sections are rejected."""
        with pytest.raises(ConfigValidationError, match="Unknown section: bogus"):
            IngestionConfig().override(bogus__value=1)

    def test_override_unknown_field(self):
        """Test that unknown fields surface as validation errors."""
        with pytest.raises(ConfigValidationError):
            IngestionConfig().override(parser__no_such_field=1)

    def test_override_invalid_value(self):
        """Test that overrides are validated."""
        with pytest.raises(ConfigValidationError, match="thread_count must be > 0"):
            IngestionConfig().override(concurrency__thread_count=-2)

    def test_json_round_trip(self):
        """Test serialization to JSON and back."""
        # Arrange
        config = IngestionConfig().override(
            parser__read_chunk_size=512, concurrency__thread_count=3
        )

        # Act
        restored = IngestionConfig.from_json(config.to_json())

        # Assert
        assert restored == config
        assert json.loads(config.to_json())["parser"]["read_chunk_size"] == 512

    def test_from_dict_rejects_unknown_section(self):
        """Test that unknown sections in a dictionary are rejected."""
        with pytest.raises(ConfigValidationError, match="Unknown configuration sections"):
            IngestionConfig.from_dict({"tokenizer": {}})

    def test_from_dict_missing_sections_keep_defaults(self):
        """Test that partial dictionaries are accepted."""
        config = IngestionConfig.from_dict({"discovery": {"ignore_timestamps": True}})

        assert config.discovery == DiscoveryConfig(ignore_timestamps=True)
        assert config.concurrency == ConcurrencyConfig()

    def test_validation_error_is_config_error(self):
        """Test the exception hierarchy."""
        assert issubclass(ConfigValidationError, ConfigError)

    def test_presets(self):
        """Test preset factory methods."""
        assert IngestionConfig.single_threaded().concurrency.thread_count == 1
        assert IngestionConfig.strict_fresh_only().discovery.ignore_timestamps is False
