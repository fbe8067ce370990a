"""
Tests for configuration loading.
"""

import logging

import pytest

from amibackup.config import BackupConfig, configure_logging, load_config


class TestLoadConfig:
    """Test environment-based configuration."""

    def test_load_lowercase_names(self):
        config = load_config({"backup_tag": "Backup", "backup_retention": "30"})

        assert config.backup_tag == "Backup"
        assert config.backup_retention == 30
        assert config.function_name == "ami-backup-rotation"
        assert config.metrics_namespace == "AMIBackupRotation"
        assert config.region is None

    def test_load_uppercase_aliases(self):
        config = load_config({"BACKUP_TAG": "Backup", "BACKUP_RETENTION": "7"})
        assert config.backup_retention == 7

    def test_function_name_and_region_from_lambda_env(self):
        config = load_config({
            "backup_tag": "Backup",
            "backup_retention": "30",
            "AWS_LAMBDA_FUNCTION_NAME": "nightly-ami",
            "AWS_REGION": "eu-west-1",
        })

        assert config.function_name == "nightly-ami"
        assert config.region == "eu-west-1"

    def test_overrides_take_precedence(self):
        config = load_config({"backup_tag": "Backup", "backup_retention": "30"},
                             backup_retention=5, region=None)

        assert config.backup_retention == 5
        assert config.region is None

    def test_missing_tag(self):
        with pytest.raises(ValueError, match="backup_tag"):
            load_config({"backup_retention": "30"})

    def test_missing_retention(self):
        with pytest.raises(ValueError, match="backup_retention"):
            load_config({"backup_tag": "Backup", "backup_retention": ""})

    def test_non_numeric_retention(self):
        with pytest.raises(ValueError, match="backup_retention"):
            load_config({"backup_tag": "Backup", "backup_retention": "thirty"})

    def test_negative_retention(self):
        with pytest.raises(ValueError, match="backup_retention"):
            load_config({"backup_tag": "Backup", "backup_retention": "-1"})

    def test_blank_tag(self):
        with pytest.raises(ValueError):
            BackupConfig(backup_tag="   ", backup_retention=1)


def test_configure_logging_sets_level(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    configure_logging()
    assert logging.getLogger().level == logging.DEBUG

    configure_logging("warning")
    assert logging.getLogger().level == logging.WARNING
