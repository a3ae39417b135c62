"""Shared test fixtures for hostprobe."""

from pathlib import Path

import pytest

from hostprobe.config import Config, ProbeConfig

CPUINFO_TWO_CORES = """\
processor	: 0
vendor_id	: GenuineIntel
model name	: Intel(R) Xeon(R) CPU @ 2.20GHz
cpu MHz		: 2200.148
cache size	: 56320 KB

processor	: 1
vendor_id	: GenuineIntel
model name	: Intel(R) Xeon(R) Other Model
cpu MHz		: 1800.000
cache size	: 56320 KB

"""

PROC_STAT_TWO_CORES = """\
cpu  300 20 200 9000 50 7 3 0 0 0
cpu0 100 10 100 4000 25 4 2 0 0 0
cpu1 200 10 100 5000 25 3 1 0 0 0
intr 123456 0 0 0
ctxt 987654
btime 1700000000
"""


def make_stat_record(
    pid: int = 1234,
    comm: str = "my(app)",
    state: str = "S",
    vsize: int = 123_456_789,
    rss: int = 2048,
    trailing: int = 20,
) -> str:
    """Build a /proc/<pid>/stat line with the given fields.

    ``trailing`` extra zero fields follow startstack, as on newer kernels.
    """
    # ppid .. starttime
    head = [1, pid, pid, 34816, pid, 4194560, 100, 0, 2, 0, 12, 3, 0, 0, 20, 0, 1, 0, 55555]
    # vsize, rss, rsslim, startcode, endcode, startstack
    tail = [vsize, rss, 18446744073709551615, 4194304, 4238788, 140736466511168]
    fields = " ".join(str(v) for v in head + tail + [0] * trailing)
    return f"{pid} ({comm}) {state} {fields}\n"


def write_file(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


@pytest.fixture
def proc_root(tmp_path: Path) -> Path:
    """Empty synthetic procfs root."""
    root = tmp_path / "proc"
    (root / "self").mkdir(parents=True)
    return root


@pytest.fixture
def sys_root(tmp_path: Path) -> Path:
    """Empty synthetic sysfs root."""
    root = tmp_path / "sys"
    root.mkdir()
    return root


@pytest.fixture
def probe_config(proc_root: Path, sys_root: Path) -> Config:
    """Config pointing at the synthetic roots."""
    return Config(probe=ProbeConfig(proc_root=str(proc_root), sys_root=str(sys_root)))


@pytest.fixture
def two_core_proc(proc_root: Path) -> Path:
    """Synthetic procfs with cpuinfo and stat for two cores."""
    write_file(proc_root / "cpuinfo", CPUINFO_TWO_CORES)
    write_file(proc_root / "stat", PROC_STAT_TWO_CORES)
    return proc_root
