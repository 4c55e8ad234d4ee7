"""
Time sources for the staking ledger.

The ledger never reads wall-clock time directly; it asks a clock for the
current instant. ManualClock is used by tests and simulations, SystemClock
tracks real time.
"""

import time


class ManualClock:
    """
    A clock that only moves when told to.

    Time is an integer number of seconds and never goes backwards.
    """

    def __init__(self, start=0):
        if start < 0:
            raise ValueError("Clock cannot start before zero")
        self.current_time = int(start)

    def now(self):
        """Returns the current instant in seconds."""
        return self.current_time

    def advance(self, seconds):
        """
        Moves the clock forward.

        Args:
            seconds: Number of seconds to move forward

        Returns:
            The new current instant
        """
        if seconds < 0:
            raise ValueError("Clock cannot move backwards")
        self.current_time += int(seconds)
        return self.current_time

    def set_time(self, timestamp):
        """Jumps to an absolute instant that is not earlier than now."""
        if timestamp < self.current_time:
            raise ValueError(f"Cannot rewind clock from {self.current_time} to {timestamp}")
        self.current_time = int(timestamp)
        return self.current_time


class SystemClock:
    """Whole seconds since the epoch, clamped so it never decreases."""

    def __init__(self):
        self._last = 0

    def now(self):
        self._last = max(self._last, int(time.time()))
        return self._last
