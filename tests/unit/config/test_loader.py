"""Unit tests for configuration loader functionality.

This module tests the ConfigurationLoader class, file loading, validation
and the load_config helper.
"""

from pathlib import Path

import pytest
import yaml

from syncdiff.config.loader import ConfigurationLoader, load_config
from syncdiff.config.models import Config
from syncdiff.exceptions import (
    ConfigurationFileError,
    ConfigurationValidationError,
    EnvironmentVariableError,
    SyncDiffError,
)


class TestConfigurationLoader:
    """Tests for ConfigurationLoader class methods."""

    def test_load_from_file_with_valid_yaml(self, tmp_path):
        """
        Why: Report runs are usually configured through a YAML file
        What: Tests that a valid YAML file is loaded into Config
        How: Writes a configuration file and loads it
        """
        config_path = tmp_path / "syncdiff.yaml"
        config_path.write_text(
            yaml.dump(
                {
                    "system": {"log_level": "WARNING"},
                    "output": {"directory": str(tmp_path / "report"), "title": "Pilot review"},
                    "report": {"changes_only": True, "exclude_connectors": ["HR"]},
                }
            )
        )
        loader = ConfigurationLoader()

        config = loader.load_from_file(config_path)

        assert isinstance(config, Config)
        assert config.output.title == "Pilot review"
        assert config.report.changes_only is True
        assert config.report.exclude_connectors == ["HR"]
        assert loader.config_file_path == config_path.resolve()

    def test_empty_file_uses_defaults(self, tmp_path):
        """
        Why: An empty file is a valid, if pointless, configuration
        What: Tests that an empty YAML document yields default values
        How: Loads an empty file
        """
        config_path = tmp_path / "empty.yaml"
        config_path.write_text("")

        config = ConfigurationLoader().load_from_file(config_path)

        assert config == Config()

    def test_missing_file_raises(self, tmp_path):
        """
        Why: A mistyped --config path must be reported clearly
        What: Tests ConfigurationFileError for a non-existent file
        How: Loads a path that does not exist
        """
        with pytest.raises(ConfigurationFileError, match="not found") as exc_info:
            ConfigurationLoader().load_from_file(tmp_path / "missing.yaml")

        assert exc_info.value.file_path.endswith("missing.yaml")

    def test_directory_path_raises(self, tmp_path):
        """
        Why: Only files can hold configuration
        What: Tests ConfigurationFileError for a directory path
        How: Loads the temporary directory itself
        """
        with pytest.raises(ConfigurationFileError, match="not a file"):
            ConfigurationLoader().load_from_file(tmp_path)

    def test_invalid_yaml_raises(self, tmp_path):
        """
        Why: YAML syntax errors must not surface as raw parser exceptions
        What: Tests ConfigurationFileError for malformed YAML
        How: Loads a file with unbalanced brackets
        """
        config_path = tmp_path / "broken.yaml"
        config_path.write_text("report: [unclosed")

        with pytest.raises(ConfigurationFileError, match="Failed to parse"):
            ConfigurationLoader().load_from_file(config_path)

    def test_non_mapping_document_raises(self, tmp_path):
        """
        Why: The configuration root must be a mapping of sections
        What: Tests ConfigurationFileError for a top-level list
        How: Loads a YAML list
        """
        config_path = tmp_path / "list.yaml"
        config_path.write_text("- a\n- b\n")

        with pytest.raises(ConfigurationFileError, match="mapping"):
            ConfigurationLoader().load_from_file(config_path)

    def test_load_from_dict_with_invalid_data(self):
        """
        Why: Invalid values must be reported with pydantic's details
        What: Tests ConfigurationValidationError with validation errors attached
        How: Loads a dictionary with an invalid log level
        """
        with pytest.raises(ConfigurationValidationError) as exc_info:
            ConfigurationLoader().load_from_dict({"system": {"log_level": "LOUD"}})

        assert exc_info.value.validation_errors
        assert exc_info.value.settings == ["system.log_level"]

    def test_output_directory_must_not_be_a_file(self, tmp_path):
        """
        Why: The report cannot be written below a regular file
        What: Tests the runtime check on the output directory
        How: Points output.directory at an existing file
        """
        blocker = tmp_path / "report"
        blocker.write_text("not a directory")

        with pytest.raises(ConfigurationValidationError, match="not a directory") as exc_info:
            ConfigurationLoader().load_from_dict({"output": {"directory": str(blocker)}})

        assert exc_info.value.settings == ["output.directory"]

    def test_configuration_errors_are_report_errors(self, tmp_path):
        """
        Why: Callers of the library handle every failure of a run in one place
        What: Tests that configuration errors derive from SyncDiffError
        How: Catches a missing-file error as SyncDiffError
        """
        with pytest.raises(SyncDiffError):
            ConfigurationLoader().load_from_file(tmp_path / "missing.yaml")

    def test_missing_environment_variable_propagates(self, monkeypatch):
        """
        Why: Unset variables are a distinct, actionable configuration error
        What: Tests that EnvironmentVariableError reaches the caller
        How: Loads a dictionary referencing an unset variable
        """
        monkeypatch.delenv("SYNCDIFF_TEST_UNSET", raising=False)

        with pytest.raises(EnvironmentVariableError):
            ConfigurationLoader().load_from_dict(
                {"output": {"title": "${SYNCDIFF_TEST_UNSET}"}}
            )


class TestFindConfigFile:
    """Tests for configuration file discovery."""

    def test_environment_variable_location(self, tmp_path, monkeypatch):
        """
        Why: Scheduled runs point at a shared configuration through the environment
        What: Tests that SYNCDIFF_CONFIG_PATH is searched first
        How: Sets the variable to a directory containing syncdiff.yaml
        """
        (tmp_path / "syncdiff.yaml").write_text("{}")
        monkeypatch.setenv("SYNCDIFF_CONFIG_PATH", str(tmp_path))

        assert ConfigurationLoader().find_config_file() == tmp_path / "syncdiff.yaml"

    def test_nothing_found(self, tmp_path, monkeypatch):
        """
        Why: Running without a configuration file is supported
        What: Tests that discovery returns None and load_config uses defaults
        How: Searches from an empty working directory
        """
        monkeypatch.delenv("SYNCDIFF_CONFIG_PATH", raising=False)
        monkeypatch.chdir(tmp_path)

        assert ConfigurationLoader().find_config_file() is None
        assert load_config() == Config()

    def test_load_config_with_explicit_path(self, tmp_path):
        """
        Why: --config names the file explicitly
        What: Tests that load_config reads the given file
        How: Writes a file and passes its path
        """
        config_path = tmp_path / "custom.yaml"
        config_path.write_text("output:\n  file_name: review.html\n")

        config = load_config(Path(config_path))

        assert config.output.file_name == "review.html"
