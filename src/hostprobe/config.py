"""Configuration system for hostprobe."""

import logging
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path

import tomlkit

# Room for PATH_MAX (4096) plus the terminator reserved by readlink()
DEFAULT_PATH_CAPACITY = 4097


@dataclass
class ProbeConfig:
    """Where kernel data is read from."""

    proc_root: str = "/proc"  # procfs mount point
    sys_root: str = "/sys"  # sysfs mount point
    executable_path_capacity: int = DEFAULT_PATH_CAPACITY  # Bytes, including terminator

    @property
    def proc_path(self) -> Path:
        return Path(self.proc_root)

    @property
    def sys_path(self) -> Path:
        return Path(self.sys_root)


@dataclass
class LoggingConfig:
    """Logging configuration.

    hostprobe never configures logging on import; these values are only
    used by hostprobe.logging.configure().
    """

    level: str = "WARNING"
    log_path: str = ""  # JSON Lines file; empty disables file output
    # Log file rotation
    log_max_bytes: int = 5 * 1024 * 1024  # Max log file size (5MB)
    log_backup_count: int = 3  # Number of backup log files to keep


def _dataclass_to_table(obj: object) -> tomlkit.items.Table:
    """Convert a dataclass instance to a tomlkit Table recursively."""
    table = tomlkit.table()
    for f in fields(obj):  # type: ignore[arg-type]
        value = getattr(obj, f.name)
        if is_dataclass(value) and not isinstance(value, type):
            table.add(f.name, _dataclass_to_table(value))
        else:
            table.add(f.name, value)
    return table


@dataclass
class Config:
    """Main configuration container."""

    probe: ProbeConfig = field(default_factory=ProbeConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def config_dir(self) -> Path:
        """Configuration directory."""
        return Path.home() / ".config" / "hostprobe"

    @property
    def config_path(self) -> Path:
        """Path to config file."""
        return self.config_dir / "config.toml"

    def save(self, path: Path | None = None) -> None:
        """Save config to TOML file."""
        path = path or self.config_path
        path.parent.mkdir(parents=True, exist_ok=True)

        doc = tomlkit.document()
        for name in ("probe", "logging"):
            doc.add(name, _dataclass_to_table(getattr(self, name)))
            doc.add(tomlkit.nl())

        path.write_text(tomlkit.dumps(doc))

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """Load config from TOML file, returning defaults for missing values.

        All defaults come from the dataclass definitions.
        """
        defaults = cls()
        path = path or defaults.config_path
        if not path.exists():
            return defaults

        try:
            with open(path) as f:
                data = tomlkit.load(f)
        except tomlkit.exceptions.TOMLKitError as e:
            raise ValueError(f"Failed to parse config file {path}: {e}") from e

        return cls(
            probe=_load_probe_config(data.get("probe", {})),
            logging=_load_logging_config(data.get("logging", {})),
        )


def _int_setting(data: dict, key: str, default: int) -> int:
    """Read an integer setting, accepting ints and integer strings only."""
    value = data.get(key, default)
    if isinstance(value, (bool, float)):
        raise ValueError(f"{key} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{key} must be an integer, got {value!r}") from e


def _load_probe_config(data: dict) -> ProbeConfig:
    """Load probe config from TOML data, using dataclass defaults for missing fields."""
    defaults = ProbeConfig()

    capacity = _int_setting(
        data, "executable_path_capacity", defaults.executable_path_capacity
    )
    if capacity < 2:
        raise ValueError(f"executable_path_capacity must be >= 2, got {capacity}")

    return ProbeConfig(
        proc_root=str(data.get("proc_root", defaults.proc_root)),
        sys_root=str(data.get("sys_root", defaults.sys_root)),
        executable_path_capacity=capacity,
    )


def _load_logging_config(data: dict) -> LoggingConfig:
    """Load logging config from TOML data."""
    d = LoggingConfig()

    level = str(data.get("level", d.level)).upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"Invalid logging level: {level!r}")

    log_max_bytes = _int_setting(data, "log_max_bytes", d.log_max_bytes)
    log_backup_count = _int_setting(data, "log_backup_count", d.log_backup_count)
    if log_max_bytes < 0:
        raise ValueError(f"log_max_bytes must be >= 0, got {log_max_bytes}")
    if log_backup_count < 0:
        raise ValueError(f"log_backup_count must be >= 0, got {log_backup_count}")

    return LoggingConfig(
        level=level,
        log_path=str(data.get("log_path", d.log_path)),
        log_max_bytes=log_max_bytes,
        log_backup_count=log_backup_count,
    )
