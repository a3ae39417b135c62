"""Numeric and unit conversion helpers.

Kernel sources report ticks, pages, kHz and 1/65536 fixed-point loads.
Everything leaving hostprobe is milliseconds, bytes, MHz and floats.
"""

import os

# Kernel load averages are stored as fixed-point with 16 fractional bits
LOAD_SCALE = 65536.0

# str.isdigit() also accepts superscripts and other Unicode digits
ASCII_DIGITS = "0123456789"


def page_size() -> int:
    """Return the OS page size in bytes."""
    return os.sysconf("SC_PAGE_SIZE")


def clock_ticks() -> int:
    """Return the kernel clock-tick frequency (USER_HZ)."""
    return os.sysconf("SC_CLK_TCK")


def physical_pages() -> int:
    """Return the number of physical memory pages."""
    return os.sysconf("SC_PHYS_PAGES")


def available_pages() -> int:
    """Return the number of currently available physical pages."""
    return os.sysconf("SC_AVPHYS_PAGES")


def ticks_to_ms(ticks: int, clk_tck: int) -> int:
    """Convert cumulative clock ticks to milliseconds.

    Multiplies before dividing so non-divisor tick rates stay exact.
    """
    return ticks * 1000 // clk_tck


def pages_to_bytes(pages: int, size: int) -> int:
    """Convert a page count to bytes."""
    return pages * size


def fixed_point_load(raw: int) -> float:
    """Convert a kernel fixed-point load value to a float."""
    return raw / LOAD_SCALE


def khz_to_mhz(khz: int) -> int:
    """Convert a cpufreq kHz value to MHz (truncating)."""
    return khz // 1000


def mhz_from_cpuinfo(value: str) -> int | None:
    """Parse the integer part of a ``cpu MHz`` value such as ``"2400.000"``.

    Returns:
        Whole MHz, or None if the value does not start with a digit.
    """
    digits = ""
    for ch in value.strip():
        if ch not in ASCII_DIGITS:
            break
        digits += ch
    return int(digits) if digits else None
