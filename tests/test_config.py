"""Tests for HealthCheckConfig defaults, validation and loaders."""

import pytest

from backup_sentinel.config import MIB, HealthCheckConfig
from backup_sentinel.errors import ConfigurationError


class TestDefaults:

    def test_default_values(self):
        config = HealthCheckConfig()

        assert config.backup_path == "./backups"
        assert config.test_directory == "./backup-tests"
        assert config.max_test_file_size == 100 * MIB
        assert config.checksum_algorithm == "sha256"
        assert config.artifact_cap == 5
        assert config.coverage_sample_size == 10
        assert config.backup_suffixes == (".db", ".backup", ".sql")

    def test_to_dict_round_trips_through_from_dict(self):
        config = HealthCheckConfig(backup_path="/srv/backups", artifact_cap=3)
        assert HealthCheckConfig.from_dict(config.to_dict()) == config


class TestValidation:

    @pytest.mark.parametrize("algorithm", ["crc-not-a-hash", "shake_128", "shake_256"])
    def test_unknown_algorithm_rejected(self, algorithm):
        with pytest.raises(ConfigurationError, match="Unsupported checksum algorithm"):
            HealthCheckConfig(checksum_algorithm=algorithm)

    def test_algorithm_is_normalized(self):
        assert HealthCheckConfig(checksum_algorithm="SHA512").checksum_algorithm == "sha512"

    @pytest.mark.parametrize("field, value", [
        ("max_test_file_size", 0),
        ("artifact_cap", 0),
        ("max_concurrency", 0),
        ("coverage_sample_size", -1),
        ("chunk_size", 0),
        ("io_timeout_seconds", 0),
        ("coverage_min_percent", 150),
        ("backup_suffixes", ()),
    ])
    def test_invalid_values_rejected(self, field, value):
        with pytest.raises(ConfigurationError):
            HealthCheckConfig(**{field: value})

    @pytest.mark.parametrize("field, value", [
        ("max_test_file_size", "100"),
        ("chunk_size", 1.5),
        ("artifact_cap", True),
        ("retention_days", "30"),
        ("io_timeout_seconds", "fast"),
        ("checksum_algorithm", 256),
        ("backup_suffixes", ".db"),
    ])
    def test_wrong_types_rejected(self, field, value):
        with pytest.raises(ConfigurationError):
            HealthCheckConfig(**{field: value})

    def test_age_thresholds_must_be_ordered(self):
        with pytest.raises(ConfigurationError):
            HealthCheckConfig(age_warning_hours=200, age_failure_hours=100)

    def test_configuration_error_is_value_error(self):
        assert issubclass(ConfigurationError, ValueError)

    def test_timeout_can_be_disabled(self):
        assert HealthCheckConfig(io_timeout_seconds=None).io_timeout_seconds is None


class TestLoaders:

    def test_from_dict_ignores_unknown_keys(self, caplog):
        config = HealthCheckConfig.from_dict({"backup_path": "/data", "bogus": 1})

        assert config.backup_path == "/data"
        assert "bogus" in caplog.text

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("BACKUP_HEALTH_PATH", "/env/backups")
        monkeypatch.setenv("BACKUP_HEALTH_TEST_DIR", "/env/scratch")
        monkeypatch.setenv("BACKUP_HEALTH_MAX_TEST_SIZE", "2048")
        monkeypatch.setenv("BACKUP_HEALTH_CHECKSUM_ALGORITHM", "sha1")
        monkeypatch.setenv("BACKUP_HEALTH_IO_TIMEOUT", "2.5")

        config = HealthCheckConfig.from_env()

        assert config.backup_path == "/env/backups"
        assert config.test_directory == "/env/scratch"
        assert config.max_test_file_size == 2048
        assert config.checksum_algorithm == "sha1"
        assert config.io_timeout_seconds == 2.5

    def test_from_env_without_variables_uses_defaults(self, monkeypatch):
        for name in ("BACKUP_HEALTH_PATH", "BACKUP_HEALTH_TEST_DIR", "BACKUP_HEALTH_MAX_TEST_SIZE",
                     "BACKUP_HEALTH_CHECKSUM_ALGORITHM", "BACKUP_HEALTH_IO_TIMEOUT"):
            monkeypatch.delenv(name, raising=False)
        assert HealthCheckConfig.from_env() == HealthCheckConfig()

    def test_from_yaml_nested_section(self, tmp_path):
        path = tmp_path / "health.yaml"
        path.write_text(
            "backup_health:\n"
            "  backup_path: /srv/backups\n"
            "  retention_days: 14\n"
            "  backup_suffixes: ['.db', '.dump']\n"
        )
        config = HealthCheckConfig.from_yaml(path)

        assert config.backup_path == "/srv/backups"
        assert config.retention_days == 14
        assert config.backup_suffixes == (".db", ".dump")

    def test_from_yaml_top_level(self, tmp_path):
        path = tmp_path / "health.yaml"
        path.write_text("artifact_cap: 2\n")
        assert HealthCheckConfig.from_yaml(path).artifact_cap == 2

    def test_from_yaml_missing_file_uses_defaults(self, tmp_path):
        assert HealthCheckConfig.from_yaml(tmp_path / "absent.yaml") == HealthCheckConfig()

    def test_from_yaml_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert HealthCheckConfig.from_yaml(path) == HealthCheckConfig()

    def test_from_yaml_rejects_non_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError):
            HealthCheckConfig.from_yaml(path)

    def test_from_dict_rejects_quoted_number(self):
        with pytest.raises(ConfigurationError, match="max_test_file_size"):
            HealthCheckConfig.from_dict({"max_test_file_size": "100"})

    @pytest.mark.parametrize("name, value", [
        ("BACKUP_HEALTH_IO_TIMEOUT", "soon"),
        ("BACKUP_HEALTH_MAX_TEST_SIZE", "1.5"),
    ])
    def test_from_env_rejects_non_numeric(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)
        with pytest.raises(ConfigurationError, match=name):
            HealthCheckConfig.from_env()

    def test_from_yaml_rejects_quoted_number(self, tmp_path):
        path = tmp_path / "health.yaml"
        path.write_text("backup_health:\n  max_test_file_size: '100'\n")
        with pytest.raises(ConfigurationError):
            HealthCheckConfig.from_yaml(path)

    def test_from_yaml_rejects_malformed_document(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("backup_health: [1, 2\n")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            HealthCheckConfig.from_yaml(path)

    def test_from_yaml_rejects_non_mapping_section(self, tmp_path):
        path = tmp_path / "health.yaml"
        path.write_text("backup_health:\n  - /srv/backups\n")
        with pytest.raises(ConfigurationError):
            HealthCheckConfig.from_yaml(path)
