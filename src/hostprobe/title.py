"""Process-wide title slot.

Readers may call get() from any thread. set() is single-writer: it must run
on the main thread and holds the slot lock while the value is replaced, so
a reader never sees a half-applied title.
"""

import sys
import threading
from collections.abc import Callable

from hostprobe.errors import UnsupportedError

NOT_WRITABLE = "'process.title' is not writable on your system, sorry."


class ProcessTitleSlot:
    """Owns the current process title.

    Args:
        initial: Starting title. Defaults to sys.argv[0] (or "" if absent).
        apply: Called with the encoded title to push it to the kernel. None
            means the platform has no title-mutation facility.
    """

    def __init__(
        self,
        initial: str | None = None,
        apply: Callable[[bytes], None] | None = None,
    ) -> None:
        if initial is None:
            initial = sys.argv[0] if sys.argv and sys.argv[0] else ""
        self._title = initial
        self._apply = apply
        self._lock = threading.Lock()

    @property
    def writable(self) -> bool:
        """Whether set() can succeed on this platform."""
        return self._apply is not None

    def get(self) -> str:
        """Return the current title (possibly empty)."""
        with self._lock:
            return self._title

    def set(self, title: str) -> None:
        """Replace the title.

        Raises:
            UnsupportedError: If the platform can't change the title, or
                when called off the main thread.
            ValueError: If the title contains a NUL character.
            ProbeIOError: If the kernel rejects the new name.
        """
        if self._apply is None:
            raise UnsupportedError(NOT_WRITABLE)
        if threading.current_thread() is not threading.main_thread():
            raise UnsupportedError("process title can only be changed from the main thread")
        if "\x00" in title:
            raise ValueError("process title must not contain NUL characters")

        encoded = title.encode("utf-8", errors="surrogateescape")
        with self._lock:
            self._apply(encoded)
            self._title = title
