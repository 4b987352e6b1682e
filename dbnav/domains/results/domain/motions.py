"""Count-prefixed vim motions for the result grid."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass

DEFAULT_TIMEOUT_S = 1.5


@dataclass(frozen=True)
class Jump:
    """A completed motion: ``gg``, ``G``, ``j`` or ``k`` with its count (0 = none)."""

    motion: str
    count: int = 0

    def target_row(self, current: int, row_count: int) -> int:
        """Row the cursor lands on, clamped to the loaded rows."""
        last = row_count - 1
        if self.motion == "gg":
            target = self.count - 1 if self.count > 0 else 0
        elif self.motion == "G":
            target = self.count - 1 if self.count > 0 else last
        elif self.motion == "j":
            target = current + max(self.count, 1)
        elif self.motion == "k":
            target = current - max(self.count, 1)
        else:
            target = current
        return max(0, min(target, last))


class MotionBuffer:
    """Accumulates a numeric prefix and a pending ``g`` between key presses.

    Pending input expires after ``timeout`` seconds of inactivity. Keys that
    are not part of a motion discard whatever is pending.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT_S, clock: Callable[[], float] = time.monotonic) -> None:
        self.timeout = timeout
        self._clock = clock
        self.pending_count = ""
        self.pending_g = False
        self._last_input = 0.0

    @property
    def has_pending(self) -> bool:
        return bool(self.pending_count) or self.pending_g

    def clear(self) -> None:
        self.pending_count = ""
        self.pending_g = False

    def _take_count(self) -> int:
        count = int(self.pending_count) if self.pending_count else 0
        self.clear()
        return count

    def feed(self, key: str, now: float | None = None) -> tuple[bool, Jump | None]:
        """Process one key.

        Returns:
            (handled, jump). ``handled`` is False when the key is not a
            motion key and should be processed normally; ``jump`` is set
            when the key completed a motion.
        """
        if now is None:
            now = self._clock()
        if self.has_pending and now - self._last_input > self.timeout:
            self.clear()

        if len(key) == 1 and "0" <= key <= "9":
            # A bare "0" is left to the caller (start of line in vim).
            if key == "0" and not self.has_pending:
                return False, None
            self.pending_count += key
            self.pending_g = False
            self._last_input = now
            return True, None

        if key == "g":
            if self.pending_g:
                return True, Jump("gg", self._take_count())
            self.pending_g = True
            self._last_input = now
            return True, None

        if key in ("G", "j", "k"):
            return True, Jump(key, self._take_count())

        if self.has_pending:
            self.clear()
        return False, None

    def status(self) -> str:
        """Pending input as shown in the status line: ``42g_``, ``g_``, ``42_``."""
        if self.pending_g:
            return f"{self.pending_count}g_"
        if self.pending_count:
            return f"{self.pending_count}_"
        return ""
