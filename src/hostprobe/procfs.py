"""Parsers for the kernel's procfs and sysfs text formats.

This module provides:
- scan_stat_record: positional scanner for /proc/<pid>/stat
- read_memory_usage: resident/virtual size of the current process
- parse_cpuinfo / parse_cpu_counters: the two CPU sources
- read_max_frequency: per-core cpufreq maximum
- read_cpu_info: positional correlation of the above

File handles are always opened in ``with`` blocks so repeated polling
cannot leak descriptors.
"""

from dataclasses import dataclass
from pathlib import Path

import structlog

from hostprobe.errors import ParseError
from hostprobe.models import CpuCore, CpuTimes, MemoryUsage, ProcStatRecord
from hostprobe.units import khz_to_mhz, mhz_from_cpuinfo, pages_to_bytes, ticks_to_ms

log = structlog.get_logger()

# ─────────────────────────────────────────────────────────────────────────────
# /proc/<pid>/stat
# ─────────────────────────────────────────────────────────────────────────────

# Fields following the parenthesized executable name, in kernel order.
# Each entry is (name, kind); "char" is a single status letter.
STAT_FIELDS: tuple[tuple[str, str], ...] = (
    ("state", "char"),
    ("ppid", "int"),
    ("pgrp", "int"),
    ("session", "int"),
    ("tty_nr", "int"),
    ("tpgid", "int"),
    ("flags", "int"),
    ("minflt", "int"),
    ("cminflt", "int"),
    ("majflt", "int"),
    ("cmajflt", "int"),
    ("utime", "int"),
    ("stime", "int"),
    ("cutime", "int"),
    ("cstime", "int"),
    ("priority", "int"),
    ("nice", "int"),
    ("num_threads", "int"),
    ("itrealvalue", "int"),
    ("starttime", "int"),
    ("vsize", "int"),
    ("rss", "int"),
    ("rsslim", "int"),
    ("startcode", "int"),
    ("endcode", "int"),
    ("startstack", "int"),
)


def _consume(name: str, kind: str, token: str) -> int | str:
    if kind == "char":
        if len(token) != 1:
            raise ParseError(f"stat field {name!r}: expected one character, got {token!r}")
        return token
    try:
        return int(token)
    except ValueError:
        raise ParseError(f"stat field {name!r}: expected integer, got {token!r}") from None


def scan_stat_record(text: str) -> ProcStatRecord:
    """Scan a ``/proc/<pid>/stat`` record field by field.

    The executable name may itself contain spaces and parentheses, so it
    runs from the first ``(`` to the rightmost ``)``.

    Raises:
        ParseError: If the record is short or a field has the wrong type.
    """
    open_paren = text.find("(")
    close_paren = text.rfind(")")
    if open_paren < 0 or close_paren < open_paren:
        raise ParseError("stat record has no parenthesized executable name")

    pid_text = text[:open_paren].strip()
    try:
        pid = int(pid_text)
    except ValueError:
        raise ParseError(f"stat field 'pid': expected integer, got {pid_text!r}") from None

    comm = text[open_paren + 1 : close_paren]
    tokens = text[close_paren + 1 :].split()
    if len(tokens) < len(STAT_FIELDS):
        raise ParseError(
            f"stat record too short: {len(tokens)} fields after name, need {len(STAT_FIELDS)}"
        )

    values = {
        name: _consume(name, kind, token)
        for (name, kind), token in zip(STAT_FIELDS, tokens)
    }
    return ProcStatRecord(pid=pid, comm=comm, **values)


def read_memory_usage(proc_root: Path, page_size: int) -> MemoryUsage:
    """Read resident and virtual size of the current process.

    Args:
        proc_root: Mount point of procfs (normally /proc)
        page_size: OS page size in bytes

    Raises:
        ParseError: If the record can't be read or doesn't match the schema.
    """
    path = proc_root / "self" / "stat"
    try:
        with open(path, encoding="utf-8", errors="surrogateescape") as f:
            text = f.read()
    except OSError as e:
        raise ParseError(f"cannot read {path}: {e}") from e

    record = scan_stat_record(text)
    return MemoryUsage(rss=pages_to_bytes(record.rss, page_size), vsize=record.vsize)


# ─────────────────────────────────────────────────────────────────────────────
# CPU sources
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(slots=True, frozen=True)
class CpuDescriptor:
    """Fallback model/speed taken from the first CPU in /proc/cpuinfo."""

    model: str
    speed: int  # MHz
    count: int  # Number of "model name" lines seen


def parse_cpuinfo(text: str) -> CpuDescriptor:
    """Extract the shared fallback model and speed from /proc/cpuinfo.

    Only the first "model name" is kept, and "cpu MHz" is only taken while
    the first processor block is being read.
    """
    model = ""
    speed = 0
    count = 0
    for line in text.splitlines():
        if line.startswith("model name"):
            count += 1
            if count == 1:
                _, _, value = line.partition(":")
                model = value.strip()
        elif line.startswith("cpu MHz"):
            if count == 1:
                _, _, value = line.partition(":")
                mhz = mhz_from_cpuinfo(value)
                if mhz is not None:
                    speed = mhz
    return CpuDescriptor(model=model, speed=speed, count=count)


def parse_cpu_counters(text: str, clk_tck: int) -> list[CpuTimes]:
    """Parse the per-core ``cpuN`` lines of /proc/stat.

    Columns used: user, nice, system, idle, (iowait skipped), irq. The
    aggregate ``cpu `` line is skipped and parsing stops at the first line
    that isn't a cpu line. A garbled core line yields zeroed times so that
    core indexes stay aligned with sysfs.
    """
    cores: list[CpuTimes] = []
    for line in text.splitlines():
        if line.startswith("cpu "):
            continue
        if not line.startswith("cpu"):
            break

        parts = line.split()
        try:
            user, nice, system, idle, _iowait, irq = (int(v) for v in parts[1:7])
        except ValueError:
            log.debug("cpu_counters_malformed", line=line)
            cores.append(CpuTimes(user=0, nice=0, sys=0, idle=0, irq=0))
            continue

        cores.append(
            CpuTimes(
                user=ticks_to_ms(user, clk_tck),
                nice=ticks_to_ms(nice, clk_tck),
                sys=ticks_to_ms(system, clk_tck),
                idle=ticks_to_ms(idle, clk_tck),
                irq=ticks_to_ms(irq, clk_tck),
            )
        )
    return cores


def max_frequency_path(sys_root: Path, index: int) -> Path:
    """Return the cpufreq maximum-frequency file for a core."""
    return sys_root / "devices" / "system" / "cpu" / f"cpu{index}" / "cpufreq" / "cpuinfo_max_freq"


def read_max_frequency(sys_root: Path, index: int) -> int | None:
    """Read a core's maximum frequency in MHz.

    Returns:
        MHz, or None if the file is absent, unreadable or not an integer.
    """
    try:
        with open(
            max_frequency_path(sys_root, index), encoding="utf-8", errors="surrogateescape"
        ) as f:
            first = f.readline()
    except (OSError, ValueError):
        return None
    try:
        return khz_to_mhz(int(first.strip()))
    except ValueError:
        return None


def read_cpu_info(proc_root: Path, sys_root: Path, clk_tck: int) -> list[CpuCore]:
    """Correlate /proc/cpuinfo, /proc/stat and sysfs by core position.

    Best effort: if either procfs source can't be read, returns [].
    """
    try:
        with open(proc_root / "cpuinfo", encoding="utf-8", errors="surrogateescape") as f:
            descriptor = parse_cpuinfo(f.read())
        with open(proc_root / "stat", encoding="utf-8", errors="surrogateescape") as f:
            counters = parse_cpu_counters(f.read(), clk_tck)
    except OSError as e:
        log.debug("cpu_source_unavailable", path=e.filename, error=e.strerror)
        return []
    except ValueError as e:
        log.debug("cpu_source_malformed", error=str(e))
        return []

    cores: list[CpuCore] = []
    for index, times in enumerate(counters):
        speed = read_max_frequency(sys_root, index)
        cores.append(
            CpuCore(
                model=descriptor.model,
                speed=descriptor.speed if speed is None else speed,
                times=times,
            )
        )
    return cores
