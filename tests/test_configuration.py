"""Tests for cache configuration validation."""

import logging
import math

import pytest
from pydantic import ValidationError

from sqlcache.cache.sqlite_cache import SQLiteCache
from sqlcache.consts import MEMORY_DATABASE, SWEEP_INTERVAL_MS
from sqlcache.exceptions import InvalidConfigurationError
from sqlcache.models.model_configuration import CacheConfiguration


class TestDefaults:
    """Tests for default values."""

    def test_no_options(self) -> None:
        """Test that missing options fall back to defaults."""
        config = CacheConfiguration.from_options(None)
        assert config.database == MEMORY_DATABASE
        assert config.default_ttl_ms is None
        assert config.max_items is None
        assert config.compress is False
        assert config.sweep_interval_ms == SWEEP_INTERVAL_MS

    def test_empty_mapping(self) -> None:
        """Test that an empty mapping equals the defaults."""
        assert CacheConfiguration.from_options({}) == CacheConfiguration()

    def test_valid_options(self) -> None:
        """Test that valid options are kept as given."""
        config = CacheConfiguration.from_options(
            {"database": "cache.db", "default_ttl_ms": 1500.5, "max_items": 10, "compress": True}
        )
        assert config.database == "cache.db"
        assert config.default_ttl_ms == 1500.5
        assert config.max_items == 10
        assert config.compress is True

    def test_existing_configuration_passes_through(self) -> None:
        """Test that a ready configuration is returned unchanged."""
        config = CacheConfiguration(max_items=5)
        assert CacheConfiguration.from_options(config) is config

    def test_configuration_is_immutable(self) -> None:
        """Test that the effective configuration cannot be changed."""
        config = CacheConfiguration()
        with pytest.raises(ValidationError):
            config.max_items = 3

    def test_non_mapping_options(self) -> None:
        """Test that options must be a mapping."""
        with pytest.raises(TypeError):
            CacheConfiguration.from_options(["database"])


class TestInvalidOptions:
    """Tests for rejected options."""

    @pytest.mark.parametrize(
        ("options", "field"),
        [
            ({"database": 4}, "database"),
            ({"default_ttl_ms": "4"}, "default_ttl_ms"),
            ({"compress": "false"}, "compress"),
            ({"max_items": "7"}, "max_items"),
            ({"max_items": 0}, "max_items"),
            ({"max_items": -3}, "max_items"),
            ({"max_items": math.nan}, "max_items"),
            ({"default_ttl_ms": True}, "default_ttl_ms"),
            ({"compress": 1}, "compress"),
            ({"sweep_interval_ms": 0}, "sweep_interval_ms"),
            ({"default_ttl_ms": math.inf}, "default_ttl_ms"),
            ({"default_ttl_ms": -math.inf}, "default_ttl_ms"),
            ({"default_ttl_ms": math.nan}, "default_ttl_ms"),
            ({"max_items": math.inf}, "max_items"),
            ({"sweep_interval_ms": math.inf}, "sweep_interval_ms"),
        ],
    )
    def test_single_invalid_field(self, options: dict, field: str) -> None:
        """Test that each invalid field is named in the error."""
        with pytest.raises(InvalidConfigurationError) as exc_info:
            CacheConfiguration.from_options(options)

        assert exc_info.value.fields == [field]
        assert str(exc_info.value) == f"Invalid '{field}' configuration"

    def test_two_invalid_fields(self) -> None:
        """Test that every offending field is reported, not just the first."""
        with pytest.raises(InvalidConfigurationError) as exc_info:
            CacheConfiguration.from_options({"compress": "yes", "database": 4})

        assert exc_info.value.fields == ["database", "compress"]
        assert str(exc_info.value) == "Invalid 'database', 'compress' configuration"

    def test_all_invalid_fields(self) -> None:
        """Test aggregation across all four core fields."""
        with pytest.raises(InvalidConfigurationError) as exc_info:
            CacheConfiguration.from_options(
                {"database": 1, "default_ttl_ms": "1", "max_items": "1", "compress": "1"}
            )

        assert exc_info.value.fields == ["database", "default_ttl_ms", "max_items", "compress"]

    def test_unknown_option(self, caplog) -> None:
        """Test that misspelled options are dropped with a warning."""
        with caplog.at_level(logging.WARNING, logger="sqlcache.models.model_configuration"):
            config = CacheConfiguration.from_options({"maxItems": 5, "compress": True})

        assert config.max_items is None
        assert config.compress is True
        assert "maxItems" in caplog.text

    def test_validation_error_is_chained(self) -> None:
        """Test that the underlying validation error is kept as the cause."""
        with pytest.raises(InvalidConfigurationError) as exc_info:
            CacheConfiguration.from_options({"database": 4})

        assert isinstance(exc_info.value.__cause__, ValidationError)


class TestCacheConstruction:
    """Tests for validation at cache construction."""

    def test_invalid_configuration_raises(self) -> None:
        """Test that the cache constructor surfaces configuration errors."""
        with pytest.raises(InvalidConfigurationError, match="Invalid 'database' configuration"):
            SQLiteCache({"database": 4})

    def test_invalid_configuration_opens_nothing(self, temp_dir) -> None:
        """Test that no database file is created when validation fails."""
        path = temp_dir / "cache.db"
        with pytest.raises(InvalidConfigurationError):
            SQLiteCache({"database": str(path), "compress": "no"})

        assert not path.exists()
