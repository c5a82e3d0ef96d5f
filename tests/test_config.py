"""Unit tests for configuration management."""

import os
from unittest.mock import patch

import pytest
import yaml

from nomadwatch.config import LogLevel, NomadConfig, NomadWatchConfig
from nomadwatch.exceptions import ConfigurationError
from nomadwatch.options import ConsistencyMode, QueryOptions


@pytest.mark.unit
class TestNomadWatchConfig:
    """Configuration loading and validation."""

    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            config = NomadWatchConfig()
        assert config.nomad.address == "http://127.0.0.1:4646"
        assert config.nomad.token is None
        assert config.logging.level == LogLevel.INFO

    def test_from_env(self):
        with patch.dict(
            os.environ,
            {
                "NOMADWATCH_NOMAD__ADDRESS": "https://nomad.internal:4646",
                "NOMADWATCH_NOMAD__REGION": "eu",
                "NOMADWATCH_LOGGING__LEVEL": "DEBUG",
            },
            clear=True,
        ):
            config = NomadWatchConfig.from_env()

        assert config.nomad.address == "https://nomad.internal:4646"
        assert config.nomad.region == "eu"
        assert config.logging.level == LogLevel.DEBUG

    def test_from_env_invalid(self):
        with patch.dict(
            os.environ, {"NOMADWATCH_NOMAD__TIMEOUT_SECONDS": "-1"}, clear=True
        ):
            with pytest.raises(ConfigurationError):
                NomadWatchConfig.from_env()

    def test_from_yaml(self, tmp_path):
        config_file = tmp_path / "nomadwatch.yaml"
        config_file.write_text(
            yaml.dump(
                {
                    "nomad": {"address": "http://10.0.0.1:4646/", "namespace": "ops"},
                    "logging": {"format": "console"},
                }
            )
        )

        with patch.dict(os.environ, {}, clear=True):
            config = NomadWatchConfig.from_yaml(config_file)

        assert config.nomad.address == "http://10.0.0.1:4646"
        assert config.nomad.namespace == "ops"
        assert config.logging.format == "console"

    def test_from_yaml_missing(self, tmp_path):
        with pytest.raises(ConfigurationError):
            NomadWatchConfig.from_yaml(tmp_path / "absent.yaml")

    def test_from_yaml_invalid(self, tmp_path):
        config_file = tmp_path / "bad.yaml"
        config_file.write_text("nomad:\n  address: ftp://nope\n")
        with pytest.raises(ConfigurationError):
            NomadWatchConfig.from_yaml(config_file)

    def test_with_overrides(self):
        with patch.dict(os.environ, {}, clear=True):
            config = NomadWatchConfig()

        updated = config.with_overrides(region="west", token=None)

        assert updated.nomad.region == "west"
        assert config.nomad.region == ""
        assert config.with_overrides(token=None) is config

    def test_invalid_log_format(self):
        with pytest.raises(ValueError):
            NomadWatchConfig(logging={"format": "xml"})


@pytest.mark.unit
class TestNomadConfig:
    """Nomad connection settings."""

    def test_default_options(self):
        config = NomadConfig(
            region="eu", namespace="ops", consistency=ConsistencyMode.STALE
        )
        assert config.default_options() == QueryOptions(
            region="eu", namespace="ops", consistency=ConsistencyMode.STALE
        )

    def test_address_scheme_required(self):
        with pytest.raises(ValueError):
            NomadConfig(address="nomad.internal:4646")
