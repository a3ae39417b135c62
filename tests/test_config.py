"""Tests for configuration system."""

from pathlib import Path

import pytest

from hostprobe.config import DEFAULT_PATH_CAPACITY, Config, LoggingConfig, ProbeConfig


def test_probe_config_defaults():
    """ProbeConfig has correct defaults."""
    config = ProbeConfig()
    assert config.proc_root == "/proc"
    assert config.sys_root == "/sys"
    assert config.executable_path_capacity == DEFAULT_PATH_CAPACITY
    assert config.proc_path == Path("/proc")
    assert config.sys_path == Path("/sys")


def test_logging_config_defaults():
    """LoggingConfig has correct defaults."""
    config = LoggingConfig()
    assert config.level == "WARNING"
    assert config.log_path == ""
    assert config.log_max_bytes == 5 * 1024 * 1024
    assert config.log_backup_count == 3


def test_config_paths():
    """Config provides correct config path."""
    config = Config()
    assert "hostprobe" in str(config.config_dir)
    assert config.config_path.name == "config.toml"


def test_config_save_creates_file(tmp_path):
    """Config.save() creates config file."""
    config_path = tmp_path / "nested" / "config.toml"
    Config().save(config_path)
    assert config_path.exists()


def test_config_save_preserves_values(tmp_path):
    """Config.save() writes correct TOML values."""
    config_path = tmp_path / "config.toml"
    config = Config()
    config.probe.proc_root = "/host/proc"
    config.logging.level = "DEBUG"
    config.save(config_path)

    content = config_path.read_text()
    assert 'proc_root = "/host/proc"' in content
    assert 'level = "DEBUG"' in content


def test_config_load_reads_values(tmp_path):
    """Config.load() reads values from file."""
    config_path = tmp_path / "config.toml"
    config_path.write_text("""
[probe]
proc_root = "/host/proc"
executable_path_capacity = 256

[logging]
level = "info"
log_path = "/tmp/hostprobe.log"
""")

    config = Config.load(config_path)
    assert config.probe.proc_root == "/host/proc"
    assert config.probe.sys_root == "/sys"  # Default preserved
    assert config.probe.executable_path_capacity == 256
    assert config.logging.level == "INFO"
    assert config.logging.log_path == "/tmp/hostprobe.log"
    assert config.logging.log_backup_count == 3


def test_config_load_missing_file_returns_defaults(tmp_path):
    """Config.load() returns defaults when file doesn't exist."""
    config = Config.load(tmp_path / "nonexistent.toml")
    assert config == Config()


def test_config_round_trip(tmp_path):
    """Saved config loads back identical."""
    config_path = tmp_path / "config.toml"
    config = Config()
    config.probe.sys_root = "/host/sys"
    config.logging.log_max_bytes = 1024
    config.save(config_path)

    assert Config.load(config_path) == config


def test_config_load_invalid_toml(tmp_path):
    """Invalid TOML raises ValueError."""
    config_path = tmp_path / "config.toml"
    config_path.write_text("[probe\nproc_root = ")
    with pytest.raises(ValueError, match="Failed to parse"):
        Config.load(config_path)


def test_config_load_invalid_capacity(tmp_path):
    config_path = tmp_path / "config.toml"
    config_path.write_text("[probe]\nexecutable_path_capacity = 1\n")
    with pytest.raises(ValueError, match="executable_path_capacity"):
        Config.load(config_path)


def test_config_load_invalid_level(tmp_path):
    config_path = tmp_path / "config.toml"
    config_path.write_text('[logging]\nlevel = "LOUD"\n')
    with pytest.raises(ValueError, match="logging level"):
        Config.load(config_path)


def test_config_load_negative_backup_count(tmp_path):
    config_path = tmp_path / "config.toml"
    config_path.write_text("[logging]\nlog_backup_count = -1\n")
    with pytest.raises(ValueError, match="log_backup_count"):
        Config.load(config_path)


def test_config_load_string_capacity(tmp_path):
    """A wrong-typed value is a ValueError, not a TypeError."""
    config_path = tmp_path / "config.toml"
    config_path.write_text('[probe]\nexecutable_path_capacity = "big"\n')
    with pytest.raises(ValueError, match="executable_path_capacity must be an integer"):
        Config.load(config_path)


@pytest.mark.parametrize(
    "line,key",
    [
        ('log_max_bytes = "lots"', "log_max_bytes"),
        ('log_backup_count = "few"', "log_backup_count"),
        ("log_backup_count = 2.5", "log_backup_count"),
        ("log_max_bytes = true", "log_max_bytes"),
    ],
)
def test_config_load_wrong_typed_logging_values(tmp_path, line, key):
    config_path = tmp_path / "config.toml"
    config_path.write_text(f"[logging]\n{line}\n")
    with pytest.raises(ValueError, match=key):
        Config.load(config_path)


def test_config_load_integer_string(tmp_path):
    config_path = tmp_path / "config.toml"
    config_path.write_text('[probe]\nexecutable_path_capacity = "256"\n')
    assert Config.load(config_path).probe.executable_path_capacity == 256
