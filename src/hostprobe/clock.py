"""Uptime, load average and memory totals for Linux.

Uses the monotonic clock where available and sysinfo(2) via ctypes
otherwise.
"""

import time

from hostprobe.errors import ProbeIOError, UnavailableError
from hostprobe.libc import read_sysinfo
from hostprobe.models import LoadAverage
from hostprobe.units import (
    available_pages,
    fixed_point_load,
    page_size,
    pages_to_bytes,
    physical_pages,
)


def monotonic_uptime() -> float:
    """Return seconds since boot.

    Reads CLOCK_MONOTONIC (seconds plus nanoseconds). Falls back to the
    whole-second uptime counter from sysinfo(2) if the monotonic clock is
    missing.

    Raises:
        UnavailableError: If neither clock can be read.
    """
    clock_id = getattr(time, "CLOCK_MONOTONIC", None)
    if clock_id is not None:
        try:
            sec, nsec = divmod(time.clock_gettime_ns(clock_id), 1_000_000_000)
            return sec + nsec / 1_000_000_000.0
        except OSError:
            pass

    try:
        return float(read_sysinfo().uptime)
    except ProbeIOError as e:
        raise UnavailableError("no monotonic clock and sysinfo() failed") from e


def _start_time() -> float | None:
    try:
        return monotonic_uptime()
    except UnavailableError:
        return None


# Captured once at import; read-only afterwards.
PROGRAM_START_TIME: float | None = _start_time()


def elapsed_since_start() -> float:
    """Return seconds since hostprobe was first imported.

    Raises:
        UnavailableError: If no clock was available at startup or now.
    """
    if PROGRAM_START_TIME is None:
        raise UnavailableError("start time was not captured")
    return monotonic_uptime() - PROGRAM_START_TIME


def load_average() -> LoadAverage:
    """Return the 1, 5 and 15 minute load averages.

    Raises:
        ProbeIOError: If sysinfo(2) fails.
    """
    loads = read_sysinfo().loads
    return LoadAverage(
        load1=fixed_point_load(loads[0]),
        load5=fixed_point_load(loads[1]),
        load15=fixed_point_load(loads[2]),
    )


def free_memory() -> float:
    """Return available physical memory in bytes."""
    return float(pages_to_bytes(available_pages(), page_size()))


def total_memory() -> float:
    """Return total physical memory in bytes."""
    return float(pages_to_bytes(physical_pages(), page_size()))
