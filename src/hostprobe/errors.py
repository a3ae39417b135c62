"""Exception taxonomy for hostprobe queries."""


class ProbeError(Exception):
    """Base class for every hostprobe failure."""


class ProbeIOError(ProbeError):
    """A file or syscall was unavailable or failed."""

    def __init__(self, message: str, errno: int | None = None, syscall: str | None = None):
        super().__init__(message)
        self.errno = errno
        self.syscall = syscall


class ParseError(ProbeError):
    """Data was present but did not match the expected schema."""


class UnsupportedError(ProbeError):
    """The platform lacks the facility (e.g. no title mutation)."""


class UnavailableError(ProbeError):
    """An optional subsystem is absent (e.g. no monotonic clock)."""
