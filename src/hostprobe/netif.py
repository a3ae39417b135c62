"""Network interface address enumeration.

The getifaddrs(3) list is copied into plain RawInterfaceEntry values and
released before any filtering happens, so callers get either a complete
mapping or an error.
"""

import ctypes
import socket
from dataclasses import dataclass

from hostprobe import libc
from hostprobe.libc import AF_INET, AF_INET6, AF_PACKET, IFF_LOOPBACK, IFF_RUNNING, IFF_UP
from hostprobe.models import UNKNOWN_ADDRESS, AddressEntry, AddressFamily


@dataclass(slots=True, frozen=True)
class RawInterfaceEntry:
    """One getifaddrs record, detached from C memory.

    ``address`` holds the packed address bytes for IPv4/IPv6 (4 or 16
    bytes), ``b""`` for other families, and None when the record has no
    address at all.
    """

    name: str
    flags: int
    family: int | None
    address: bytes | None


def _copy_entry(ent: libc.Ifaddrs) -> RawInterfaceEntry:
    name = ent.ifa_name.decode("utf-8", errors="replace") if ent.ifa_name else ""
    if not ent.ifa_addr:
        return RawInterfaceEntry(name=name, flags=ent.ifa_flags, family=None, address=None)

    family = ent.ifa_addr.contents.sa_family
    if family == AF_INET:
        sin = ctypes.cast(ent.ifa_addr, ctypes.POINTER(libc.SockaddrIn)).contents
        address = bytes(sin.sin_addr)
    elif family == AF_INET6:
        sin6 = ctypes.cast(ent.ifa_addr, ctypes.POINTER(libc.SockaddrIn6)).contents
        address = bytes(sin6.sin6_addr)
    else:
        address = b""
    return RawInterfaceEntry(name=name, flags=ent.ifa_flags, family=family, address=address)


def walk_ifaddrs() -> list[RawInterfaceEntry]:
    """Copy every record from getifaddrs(3).

    Raises:
        ProbeIOError: If getifaddrs fails.
    """
    head = libc.getifaddrs()
    entries: list[RawInterfaceEntry] = []
    try:
        node = head
        while node:
            ent = node.contents
            entries.append(_copy_entry(ent))
            node = ent.ifa_next
    finally:
        libc.freeifaddrs(head)
    return entries


def is_up_and_running(flags: int) -> bool:
    """Return True if both IFF_UP and IFF_RUNNING are set."""
    return bool(flags & IFF_UP) and bool(flags & IFF_RUNNING)


def format_address(family: int, address: bytes) -> tuple[str, AddressFamily]:
    """Return presentation text and family label for a packed address."""
    if family == AF_INET6:
        return socket.inet_ntop(socket.AF_INET6, address), AddressFamily.IPV6
    if family == AF_INET:
        return socket.inet_ntop(socket.AF_INET, address), AddressFamily.IPV4
    return UNKNOWN_ADDRESS, AddressFamily.UNKNOWN


def build_interface_map(entries) -> dict[str, list[AddressEntry]]:
    """Filter and group raw entries by interface name.

    Skips entries whose interface isn't up and running, entries without an
    address, and raw link-layer (AF_PACKET) entries. Addresses keep
    discovery order; ``internal`` reflects each entry's own loopback flag.
    """
    result: dict[str, list[AddressEntry]] = {}
    for entry in entries:
        if not is_up_and_running(entry.flags):
            continue
        if entry.address is None:
            continue
        if entry.family == AF_PACKET:
            continue

        text, family = format_address(entry.family, entry.address)
        result.setdefault(entry.name, []).append(
            AddressEntry(address=text, family=family, internal=bool(entry.flags & IFF_LOOPBACK))
        )
    return result


def interface_addresses() -> dict[str, list[AddressEntry]]:
    """Enumerate up-and-running interfaces and their IPv4/IPv6 addresses.

    Raises:
        ProbeIOError: If enumeration fails.
    """
    return build_interface_map(walk_ifaddrs())
