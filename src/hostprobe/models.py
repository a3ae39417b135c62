"""Snapshot types returned by hostprobe queries.

Every value is built fresh per call and never cached.
"""

from dataclasses import asdict, dataclass
from enum import Enum


@dataclass(slots=True, frozen=True)
class MemoryUsage:
    """Memory footprint of the current process."""

    rss: int  # Bytes
    vsize: int  # Bytes

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(slots=True, frozen=True)
class CpuTimes:
    """Cumulative per-CPU time since boot, in milliseconds."""

    user: int
    nice: int
    sys: int
    idle: int
    irq: int

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(slots=True, frozen=True)
class CpuCore:
    """One logical CPU."""

    model: str
    speed: int  # MHz
    times: CpuTimes

    def as_dict(self) -> dict:
        return {"model": self.model, "speed": self.speed, "times": self.times.as_dict()}


@dataclass(slots=True, frozen=True)
class LoadAverage:
    """System load averages over 1, 5 and 15 minutes."""

    load1: float
    load5: float
    load15: float

    def __iter__(self):
        return iter((self.load1, self.load5, self.load15))

    def as_dict(self) -> dict:
        return asdict(self)


class AddressFamily(Enum):
    """Address family label as exposed to callers."""

    IPV4 = "IPv4"
    IPV6 = "IPv6"
    UNKNOWN = "<unknown>"


# Address text reported for families other than IPv4/IPv6
UNKNOWN_ADDRESS = "<unknown sa family>"


@dataclass(slots=True, frozen=True)
class AddressEntry:
    """One address bound to a network interface."""

    address: str
    family: AddressFamily
    internal: bool  # Owning interface has the loopback flag

    def as_dict(self) -> dict:
        return {"address": self.address, "family": self.family.value, "internal": self.internal}


@dataclass(slots=True, frozen=True)
class ExecutablePath:
    """Resolved path of the running binary."""

    path: str
    length: int  # Byte length of the resolved target

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(slots=True, frozen=True)
class ProcStatRecord:
    """Fields of ``/proc/<pid>/stat`` up to and including ``startstack``.

    See proc(5) for the meaning of each field.
    """

    pid: int
    comm: str
    state: str
    ppid: int
    pgrp: int
    session: int
    tty_nr: int
    tpgid: int
    flags: int
    minflt: int
    cminflt: int
    majflt: int
    cmajflt: int
    utime: int
    stime: int
    cutime: int
    cstime: int
    priority: int
    nice: int
    num_threads: int
    itrealvalue: int
    starttime: int
    vsize: int  # Bytes
    rss: int  # Pages
    rsslim: int
    startcode: int
    endcode: int
    startstack: int
