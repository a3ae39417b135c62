"""hostprobe - process and machine metrics from the Linux kernel."""

from hostprobe.errors import (
    ParseError,
    ProbeError,
    ProbeIOError,
    UnavailableError,
    UnsupportedError,
)
from hostprobe.models import (
    AddressEntry,
    AddressFamily,
    CpuCore,
    CpuTimes,
    ExecutablePath,
    LoadAverage,
    MemoryUsage,
)
from hostprobe.platform import PlatformInfo, default_platform_info, process_title_slot

__version__ = "0.1.0"

__all__ = [
    "AddressEntry",
    "AddressFamily",
    "CpuCore",
    "CpuTimes",
    "ExecutablePath",
    "LoadAverage",
    "MemoryUsage",
    "ParseError",
    "PlatformInfo",
    "ProbeError",
    "ProbeIOError",
    "UnavailableError",
    "UnsupportedError",
    "default_platform_info",
    "get_cpu_info",
    "get_executable_path",
    "get_free_memory",
    "get_interface_addresses",
    "get_load_average",
    "get_memory_usage",
    "get_process_title",
    "get_total_memory",
    "get_uptime",
    "process_title_slot",
    "set_process_title",
]


def get_memory_usage() -> MemoryUsage:
    return default_platform_info().get_memory_usage()


def get_executable_path(capacity: int | None = None) -> ExecutablePath:
    return default_platform_info().get_executable_path(capacity)


def get_cpu_info() -> list[CpuCore]:
    return default_platform_info().get_cpu_info()


def get_free_memory() -> float:
    return default_platform_info().get_free_memory()


def get_total_memory() -> float:
    return default_platform_info().get_total_memory()


def get_load_average() -> LoadAverage:
    return default_platform_info().get_load_average()


def get_uptime() -> float:
    return default_platform_info().get_uptime()


def get_interface_addresses() -> dict[str, list[AddressEntry]]:
    return default_platform_info().get_interface_addresses()


def set_process_title(title: str) -> None:
    default_platform_info().set_process_title(title)


def get_process_title() -> str:
    return default_platform_info().get_process_title()
