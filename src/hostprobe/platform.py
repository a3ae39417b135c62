"""Platform capability variants and the PlatformInfo query facade."""

import os
import threading

import structlog

from hostprobe import clock, libc, netif, procfs
from hostprobe.config import Config
from hostprobe.errors import ProbeIOError, UnsupportedError
from hostprobe.models import AddressEntry, CpuCore, ExecutablePath, LoadAverage, MemoryUsage
from hostprobe.title import ProcessTitleSlot
from hostprobe.units import clock_ticks, page_size

log = structlog.get_logger()


# ─────────────────────────────────────────────────────────────────────────────
# Capability variants
# ─────────────────────────────────────────────────────────────────────────────


class Platform:
    """Capability flags for the running OS variant."""

    name = "generic"

    def supports_interface_enumeration(self) -> bool:
        return False

    def supports_title_mutation(self) -> bool:
        return False

    def apply_title(self, title: bytes) -> None:
        raise UnsupportedError("title mutation is not supported")


class LinuxPlatform(Platform):
    """Full Linux: getifaddrs and prctl(PR_SET_NAME)."""

    name = "linux"

    def supports_interface_enumeration(self) -> bool:
        return libc.has_getifaddrs()

    def supports_title_mutation(self) -> bool:
        return libc.has_prctl()

    def apply_title(self, title: bytes) -> None:
        libc.set_kernel_name(title)


class RestrictedPlatform(LinuxPlatform):
    """Linux variant without getifaddrs (e.g. Android's bionic)."""

    name = "restricted"

    def supports_interface_enumeration(self) -> bool:
        return False


def detect_platform() -> Platform:
    """Pick the platform variant for the running libc."""
    if libc.has_getifaddrs():
        return LinuxPlatform()
    return RestrictedPlatform()


def title_slot_for(platform: Platform, initial: str | None = None) -> ProcessTitleSlot:
    """Build a title slot that pushes changes through ``platform``."""
    apply = platform.apply_title if platform.supports_title_mutation() else None
    return ProcessTitleSlot(initial=initial, apply=apply)


_process_title: ProcessTitleSlot | None = None
_process_title_lock = threading.Lock()


def process_title_slot() -> ProcessTitleSlot:
    """Return the one title slot shared by the whole process."""
    global _process_title
    with _process_title_lock:
        if _process_title is None:
            _process_title = title_slot_for(detect_platform())
        return _process_title


# ─────────────────────────────────────────────────────────────────────────────
# Facade
# ─────────────────────────────────────────────────────────────────────────────


class PlatformInfo:
    """Machine and process metrics, read fresh on every call.

    Title queries go through the process-wide slot unless one is passed in;
    every other query is stateless.

    Args:
        config: Where to read kernel data from. Defaults to Config().
        platform: Capability variant. Defaults to detect_platform().
        title_slot: Title slot to use. Defaults to process_title_slot().
    """

    def __init__(
        self,
        config: Config | None = None,
        platform: Platform | None = None,
        title_slot: ProcessTitleSlot | None = None,
    ) -> None:
        self.config = config or Config()
        self.platform = platform or detect_platform()
        self._title = title_slot if title_slot is not None else process_title_slot()

    def get_memory_usage(self) -> MemoryUsage:
        """Resident and virtual size of this process.

        Raises:
            ParseError: If the status record can't be read or parsed.
        """
        return procfs.read_memory_usage(self.config.probe.proc_path, page_size())

    def get_executable_path(self, capacity: int | None = None) -> ExecutablePath:
        """Resolve the running binary.

        Args:
            capacity: Buffer size in bytes including the terminator; the
                target is truncated to ``capacity - 1`` bytes.

        Raises:
            ProbeIOError: If the link can't be resolved or is empty.
        """
        if capacity is None:
            capacity = self.config.probe.executable_path_capacity
        if capacity < 2:
            raise ProbeIOError(f"capacity {capacity} leaves no room for a path", syscall="readlink")

        link = self.config.probe.proc_path / "self" / "exe"
        try:
            target = os.readlink(os.fsencode(link))
        except OSError as e:
            raise ProbeIOError(
                f"readlink {link}: {e.strerror}", errno=e.errno, syscall="readlink"
            ) from e

        target = target[: capacity - 1]
        if not target:
            raise ProbeIOError(f"readlink {link}: empty target", syscall="readlink")
        return ExecutablePath(path=os.fsdecode(target), length=len(target))

    def get_cpu_info(self) -> list[CpuCore]:
        """Per-core model, speed and times. Never raises; [] if unavailable."""
        try:
            clk_tck = clock_ticks()
        except (OSError, ValueError) as e:
            log.debug("clock_ticks_unavailable", error=str(e))
            return []
        probe = self.config.probe
        return procfs.read_cpu_info(probe.proc_path, probe.sys_path, clk_tck)

    def get_free_memory(self) -> float:
        """Available physical memory in bytes."""
        return clock.free_memory()

    def get_total_memory(self) -> float:
        """Total physical memory in bytes."""
        return clock.total_memory()

    def get_load_average(self) -> LoadAverage:
        """1, 5 and 15 minute load averages.

        Raises:
            ProbeIOError: If sysinfo(2) fails.
        """
        return clock.load_average()

    def get_uptime(self) -> float:
        """Seconds since boot.

        Raises:
            UnavailableError: If no clock can be read.
        """
        return clock.monotonic_uptime()

    def get_interface_addresses(self) -> dict[str, list[AddressEntry]]:
        """Map of interface name to its addresses.

        Raises:
            UnsupportedError: If the platform can't enumerate interfaces.
            ProbeIOError: If enumeration fails.
        """
        if not self.platform.supports_interface_enumeration():
            raise UnsupportedError(
                f"interface enumeration is not supported on {self.platform.name}"
            )
        return netif.interface_addresses()

    def set_process_title(self, title: str) -> None:
        """Replace the process title.

        Raises:
            UnsupportedError: If the title can't be changed here.
        """
        self._title.set(title)

    def get_process_title(self) -> str:
        """Current process title (possibly empty)."""
        return self._title.get()


_default: PlatformInfo | None = None
_default_lock = threading.Lock()


def default_platform_info() -> PlatformInfo:
    """Return the process-wide PlatformInfo, creating it on first use."""
    global _default
    with _default_lock:
        if _default is None:
            _default = PlatformInfo()
        return _default
