"""
Configuration tests for generate-license-file.
"""

import json

from generate_license_file.cli_config import (
    ComprehensiveConfig,
    apply_config_data,
    create_sample_config,
    get_config,
    load_config_file,
    reset_config,
    validate_config_values,
)
from generate_license_file.scanner import LicenseCheckerScanner


class TestConfigLoading:
    def test_defaults(self):
        config = get_config()

        assert config.scan.scanner == "node_modules"
        assert config.output.output_json is False
        assert validate_config_values(config) == []

    def test_project_json_file(self, temp_dir):
        (temp_dir / ".generate-license-file.json").write_text(
            json.dumps({"scan": {"scanner": "license-checker", "timeout_seconds": 30}})
        )

        config = get_config()

        assert config.scan.scanner == "license-checker"
        assert config.scan.timeout_seconds == 30

    def test_project_toml_file(self, temp_dir):
        (temp_dir / ".generate-license-file.toml").write_text(
            '[output]\noutput_file = "NOTICE.txt"\noverwrite = true\n'
        )

        config = get_config()

        assert config.output.output_file == "NOTICE.txt"
        assert config.output.overwrite is True

    def test_environment_overrides_file(self, temp_dir, monkeypatch):
        (temp_dir / ".generate-license-file.json").write_text(
            json.dumps({"output": {"output_json": False}})
        )
        monkeypatch.setenv("GENERATE_LICENSE_FILE_JSON", "true")
        monkeypatch.setenv("GENERATE_LICENSE_FILE_LOG_LEVEL", "debug")

        config = get_config()

        assert config.output.output_json is True
        assert config.logging.log_level == "DEBUG"

    def test_invalid_values_fall_back_to_defaults(self, monkeypatch):
        monkeypatch.setenv("GENERATE_LICENSE_FILE_SCANNER", "yarn-magic")

        config = get_config()

        assert config.scan.scanner == "node_modules"

    def test_config_is_cached_until_reset(self, monkeypatch):
        first = get_config()
        assert get_config() is first

        reset_config()
        assert get_config() is not first

    def test_unparseable_file_is_ignored(self, temp_dir):
        broken = temp_dir / "broken.toml"
        broken.write_text("this is = = not toml")

        assert load_config_file(broken) is None


class TestValidation:
    def test_reports_every_problem(self):
        config = ComprehensiveConfig()
        config.scan.scanner = "nope"
        config.scan.timeout_seconds = 0
        config.logging.log_level = "LOUD"

        errors = validate_config_values(config)

        assert len(errors) == 3

    def test_sample_config_round_trips(self):
        data = json.loads(create_sample_config())

        assert set(data) == {"scan", "output", "logging"}
        assert data["scan"]["license_checker_command"][0] == "npx"

    def test_sample_config_has_no_production_toggle(self):
        data = json.loads(create_sample_config())

        assert "production" not in data["scan"]


class TestValueTypes:
    """Config file values of the wrong type are reported and replaced by defaults."""

    def _write(self, temp_dir, data):
        (temp_dir / ".generate-license-file.json").write_text(json.dumps(data))

    def test_string_timeout_keeps_default(self, temp_dir):
        self._write(temp_dir, {"scan": {"timeout_seconds": "30"}})

        config = get_config()

        assert config.scan.timeout_seconds == 120

    def test_numeric_log_level_keeps_default(self, temp_dir):
        self._write(temp_dir, {"logging": {"log_level": 10}})

        config = get_config()

        assert config.logging.log_level == "WARNING"

    def test_command_as_single_string_keeps_default(self, temp_dir):
        self._write(
            temp_dir, {"scan": {"license_checker_command": "npx license-checker"}}
        )

        assert LicenseCheckerScanner().command == ["npx", "--yes", "license-checker"]

    def test_bool_is_not_an_integer(self, temp_dir):
        self._write(temp_dir, {"scan": {"timeout_seconds": True}})

        assert get_config().scan.timeout_seconds == 120

    def test_valid_values_next_to_bad_ones_still_apply(self, temp_dir):
        self._write(
            temp_dir,
            {"scan": {"scanner": "license-checker", "timeout_seconds": "30"}},
        )

        config = get_config()

        assert config.scan.scanner == "license-checker"
        assert config.scan.timeout_seconds == 120

    def test_section_that_is_not_a_table(self, temp_dir):
        self._write(temp_dir, {"output": "third-party.txt"})

        config = get_config()

        assert config.output.output_file is None

    def test_apply_config_data_reports_type_errors(self):
        config = ComprehensiveConfig()

        errors = apply_config_data(
            config,
            {"scan": {"timeout_seconds": "30"}, "logging": {"enable_json": "yes"}},
        )

        assert len(errors) == 2
        assert "scan.timeout_seconds must be an integer" in errors[0]
        assert config.scan.timeout_seconds == 120
        assert config.logging.enable_json is True

    def test_validate_reports_wrong_types_without_raising(self):
        config = ComprehensiveConfig()
        config.scan.timeout_seconds = "30"
        config.logging.log_level = 10
        config.scan.license_checker_command = "npx license-checker"

        errors = validate_config_values(config)

        assert len(errors) == 3
        assert any("scan.timeout_seconds" in error for error in errors)
        assert any("logging.log_level" in error for error in errors)
        assert any("scan.license_checker_command" in error for error in errors)
