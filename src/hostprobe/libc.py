"""Low-level libc interface for Linux system metrics.

Uses ctypes to call libc directly - no subprocess overhead.

This module provides access to:
- sysinfo: uptime, fixed-point load averages, memory counters
- prctl: PR_SET_NAME / PR_GET_NAME for the kernel process name
- getifaddrs / freeifaddrs: network interface address list

Symbols missing from the running libc (e.g. getifaddrs on old Android
builds) are reported through has_getifaddrs() / has_prctl() instead of
failing at import.
"""

import ctypes
import errno as errno_mod
from ctypes import POINTER, Structure, byref, c_char, c_char_p, c_int, c_long, c_uint
from ctypes import c_uint8, c_uint16, c_uint32, c_ulong, c_ushort, c_void_p

from hostprobe.errors import ProbeIOError

# ─────────────────────────────────────────────────────────────────────────────
# Library loading
# ─────────────────────────────────────────────────────────────────────────────

libc = ctypes.CDLL(None, use_errno=True)

# ─────────────────────────────────────────────────────────────────────────────
# Constants
# ─────────────────────────────────────────────────────────────────────────────

# prctl options (linux/prctl.h)
PR_SET_NAME = 15
PR_GET_NAME = 16
TASK_COMM_LEN = 16  # Kernel name buffer, including the terminator

# Interface flags (net/if.h)
IFF_UP = 0x1
IFF_LOOPBACK = 0x8
IFF_RUNNING = 0x40

# Address families (sys/socket.h, Linux values)
AF_INET = 2
AF_INET6 = 10
AF_PACKET = 17

# ─────────────────────────────────────────────────────────────────────────────
# Structures
# ─────────────────────────────────────────────────────────────────────────────


class Sysinfo(Structure):
    """struct sysinfo from sys/sysinfo.h."""

    _fields_ = [
        ("uptime", c_long),  # Seconds since boot
        ("loads", c_ulong * 3),  # 1, 5, 15 minute loads, scaled by 65536
        ("totalram", c_ulong),
        ("freeram", c_ulong),
        ("sharedram", c_ulong),
        ("bufferram", c_ulong),
        ("totalswap", c_ulong),
        ("freeswap", c_ulong),
        ("procs", c_ushort),
        ("pad", c_ushort),
        ("totalhigh", c_ulong),
        ("freehigh", c_ulong),
        ("mem_unit", c_uint),
        # Padding only exists on 32-bit; zero-length on 64-bit
        ("_f", c_char * max(0, 20 - 2 * ctypes.sizeof(c_long) - ctypes.sizeof(c_int))),
    ]


class Sockaddr(Structure):
    """struct sockaddr from sys/socket.h."""

    _fields_ = [
        ("sa_family", c_ushort),
        ("sa_data", c_char * 14),
    ]


class SockaddrIn(Structure):
    """struct sockaddr_in from netinet/in.h."""

    _fields_ = [
        ("sin_family", c_ushort),
        ("sin_port", c_uint16),
        ("sin_addr", c_uint8 * 4),
        ("sin_zero", c_uint8 * 8),
    ]


class SockaddrIn6(Structure):
    """struct sockaddr_in6 from netinet/in.h."""

    _fields_ = [
        ("sin6_family", c_ushort),
        ("sin6_port", c_uint16),
        ("sin6_flowinfo", c_uint32),
        ("sin6_addr", c_uint8 * 16),
        ("sin6_scope_id", c_uint32),
    ]


class Ifaddrs(Structure):
    """struct ifaddrs from ifaddrs.h."""


Ifaddrs._fields_ = [
    ("ifa_next", POINTER(Ifaddrs)),
    ("ifa_name", c_char_p),
    ("ifa_flags", c_uint),
    ("ifa_addr", POINTER(Sockaddr)),
    ("ifa_netmask", POINTER(Sockaddr)),
    ("ifa_ifu", POINTER(Sockaddr)),  # Broadcast or point-to-point destination
    ("ifa_data", c_void_p),
]

# ─────────────────────────────────────────────────────────────────────────────
# Function signatures
# ─────────────────────────────────────────────────────────────────────────────

# int sysinfo(struct sysinfo *info)
libc.sysinfo.argtypes = [POINTER(Sysinfo)]
libc.sysinfo.restype = c_int


def has_prctl() -> bool:
    """Return True if libc exports prctl()."""
    return hasattr(libc, "prctl")


def has_getifaddrs() -> bool:
    """Return True if libc exports getifaddrs() and freeifaddrs()."""
    return hasattr(libc, "getifaddrs") and hasattr(libc, "freeifaddrs")


if has_prctl():
    # int prctl(int option, unsigned long arg2, ...)
    libc.prctl.argtypes = [c_int, c_void_p, c_ulong, c_ulong, c_ulong]
    libc.prctl.restype = c_int

if has_getifaddrs():
    # int getifaddrs(struct ifaddrs **ifap)
    libc.getifaddrs.argtypes = [POINTER(POINTER(Ifaddrs))]
    libc.getifaddrs.restype = c_int
    # void freeifaddrs(struct ifaddrs *ifa)
    libc.freeifaddrs.argtypes = [POINTER(Ifaddrs)]
    libc.freeifaddrs.restype = None

# ─────────────────────────────────────────────────────────────────────────────
# Public API
# ─────────────────────────────────────────────────────────────────────────────


def _oserror(syscall: str) -> ProbeIOError:
    err = ctypes.get_errno()
    reason = errno_mod.errorcode.get(err, str(err))
    return ProbeIOError(f"{syscall} failed: {reason}", errno=err, syscall=syscall)


def read_sysinfo() -> Sysinfo:
    """Call sysinfo(2).

    Raises:
        ProbeIOError: If the syscall fails.
    """
    info = Sysinfo()
    if libc.sysinfo(byref(info)) < 0:
        raise _oserror("sysinfo")
    return info


def set_kernel_name(name: bytes) -> None:
    """Set the kernel's name for the calling thread via PR_SET_NAME.

    The kernel truncates to TASK_COMM_LEN - 1 bytes.

    Raises:
        ProbeIOError: If prctl fails.
    """
    buffer = ctypes.create_string_buffer(name)
    if libc.prctl(PR_SET_NAME, buffer, 0, 0, 0) != 0:
        raise _oserror("prctl")


def get_kernel_name() -> str:
    """Return the kernel's name for the calling thread via PR_GET_NAME.

    Raises:
        ProbeIOError: If prctl fails.
    """
    buffer = ctypes.create_string_buffer(TASK_COMM_LEN)
    if libc.prctl(PR_GET_NAME, buffer, 0, 0, 0) != 0:
        raise _oserror("prctl")
    return buffer.value.decode("utf-8", errors="replace")


def getifaddrs():
    """Call getifaddrs(3) and return the head of the list.

    The caller must pass the result to freeifaddrs().

    Raises:
        ProbeIOError: If the call fails.
    """
    head = POINTER(Ifaddrs)()
    if libc.getifaddrs(byref(head)) != 0:
        raise _oserror("getifaddrs")
    return head


def freeifaddrs(head) -> None:
    """Release a list returned by getifaddrs()."""
    libc.freeifaddrs(head)
