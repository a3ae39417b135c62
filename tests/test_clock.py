"""Tests for uptime, load average and memory totals."""

import time
from unittest.mock import patch

import pytest

from hostprobe import clock
from hostprobe.errors import ProbeIOError, UnavailableError
from hostprobe.libc import Sysinfo
from hostprobe.models import LoadAverage


def make_sysinfo(uptime: int = 0, loads: tuple[int, int, int] = (0, 0, 0)) -> Sysinfo:
    info = Sysinfo()
    info.uptime = uptime
    for i, raw in enumerate(loads):
        info.loads[i] = raw
    return info


class TestMonotonicUptime:
    """Test uptime reading and fallback."""

    def test_returns_positive_float(self):
        uptime = clock.monotonic_uptime()
        assert isinstance(uptime, float)
        assert uptime > 0

    def test_non_decreasing(self):
        t1 = clock.monotonic_uptime()
        t2 = clock.monotonic_uptime()
        assert t2 >= t1

    def test_matches_monotonic_clock(self):
        expected = time.clock_gettime(time.CLOCK_MONOTONIC)
        assert abs(clock.monotonic_uptime() - expected) < 1.0

    def test_falls_back_to_sysinfo(self):
        """Without CLOCK_MONOTONIC, whole seconds come from sysinfo."""
        with (
            patch.object(clock.time, "clock_gettime_ns", side_effect=OSError("no clock")),
            patch("hostprobe.clock.read_sysinfo", return_value=make_sysinfo(uptime=4242)),
        ):
            assert clock.monotonic_uptime() == 4242.0

    def test_unavailable_when_both_fail(self):
        with (
            patch.object(clock.time, "clock_gettime_ns", side_effect=OSError("no clock")),
            patch(
                "hostprobe.clock.read_sysinfo",
                side_effect=ProbeIOError("sysinfo failed", errno=38, syscall="sysinfo"),
            ),
        ):
            with pytest.raises(UnavailableError):
                clock.monotonic_uptime()


class TestStartTime:
    """Test the one-time startup timestamp."""

    def test_captured_at_import(self):
        assert clock.PROGRAM_START_TIME is not None
        assert clock.PROGRAM_START_TIME <= clock.monotonic_uptime()

    def test_elapsed_since_start(self):
        assert clock.elapsed_since_start() >= 0.0

    def test_elapsed_without_start_time(self):
        with patch.object(clock, "PROGRAM_START_TIME", None):
            with pytest.raises(UnavailableError):
                clock.elapsed_since_start()


class TestLoadAverage:
    """Test fixed-point load conversion."""

    def test_fixed_point_conversion(self):
        info = make_sysinfo(loads=(65536, 32768, 0))
        with patch("hostprobe.clock.read_sysinfo", return_value=info):
            loads = clock.load_average()
        assert loads == LoadAverage(load1=1.0, load5=0.5, load15=0.0)
        assert tuple(loads) == (1.0, 0.5, 0.0)

    def test_sysinfo_failure_propagates(self):
        err = ProbeIOError("sysinfo failed", errno=14, syscall="sysinfo")
        with patch("hostprobe.clock.read_sysinfo", side_effect=err):
            with pytest.raises(ProbeIOError):
                clock.load_average()

    def test_live_values_non_negative(self):
        loads = clock.load_average()
        assert all(value >= 0.0 for value in loads)


class TestMemoryTotals:
    """Test free/total memory."""

    def test_total_is_positive_float(self):
        total = clock.total_memory()
        assert isinstance(total, float)
        assert total > 0

    def test_free_not_above_total(self):
        assert 0 <= clock.free_memory() <= clock.total_memory()

    def test_product_of_page_size_and_pages(self):
        values = {"SC_PAGE_SIZE": 4096, "SC_PHYS_PAGES": 1000, "SC_AVPHYS_PAGES": 250}
        with patch("hostprobe.units.os.sysconf", side_effect=values.__getitem__):
            assert clock.total_memory() == 4096.0 * 1000
            assert clock.free_memory() == 4096.0 * 250
