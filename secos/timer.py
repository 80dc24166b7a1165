"""Programmable interval timer: tick counting, callbacks and sleeping."""

from __future__ import annotations

import threading
from typing import Callable, List, Optional, Tuple

PIT_CHANNEL0 = 0x40
PIT_COMMAND = 0x43
PIT_BASE_FREQUENCY = 1193182
PIT_MODE_SQUARE_WAVE = 0x36
MAX_TICK_CBS = 8

TickCallback = Callable[[], None]


def pit_divisor(frequency: int) -> int:
    """Return the PIT reload value for ``frequency`` Hz, clamped to 1..65535."""
    if frequency <= 0:
        raise ValueError("timer frequency must be positive")
    divisor = PIT_BASE_FREQUENCY // frequency
    return max(1, min(divisor, 65535))


class Timer:
    """Counts timer interrupts and runs registered callbacks on each one.

    ``on_tick`` is called first on every tick, before the registered
    callbacks; a scheduler hooks in there.
    """

    def __init__(self, on_tick: Optional[TickCallback] = None) -> None:
        self._cond = threading.Condition()
        self._ticks = 0
        self._frequency = 0
        self._callbacks: List[TickCallback] = []
        self._on_tick = on_tick

    @property
    def ticks(self) -> int:
        with self._cond:
            return self._ticks

    @property
    def frequency(self) -> int:
        return self._frequency

    def init(self, frequency: int) -> List[Tuple[int, int]]:
        """Program the timer for ``frequency`` Hz and reset state.

        Returns the (port, byte) writes that program the PIT.
        """
        divisor = pit_divisor(frequency)
        with self._cond:
            self._frequency = frequency
            self._ticks = 0
            self._callbacks.clear()
            self._cond.notify_all()
        return [
            (PIT_COMMAND, PIT_MODE_SQUARE_WAVE),
            (PIT_CHANNEL0, divisor & 0xFF),
            (PIT_CHANNEL0, (divisor >> 8) & 0xFF),
        ]

    def handle_tick(self) -> None:
        """Account for one timer interrupt."""
        with self._cond:
            self._ticks += 1
            callbacks = list(self._callbacks)
            self._cond.notify_all()
        if self._on_tick is not None:
            self._on_tick()
        for callback in callbacks:
            callback()

    def register_tick_callback(self, callback: TickCallback) -> None:
        """Run ``callback`` on every tick; at most ``MAX_TICK_CBS`` are kept."""
        with self._cond:
            if len(self._callbacks) >= MAX_TICK_CBS:
                raise RuntimeError("tick callback table is full")
            self._callbacks.append(callback)

    def uptime_seconds(self) -> int:
        """Whole seconds since ``init``; fails before a frequency is set."""
        with self._cond:
            return self._ticks // self._frequency

    def sleep(self, ticks: int, timeout: Optional[float] = None) -> None:
        """Block until ``ticks`` more ticks have happened.

        Raises TimeoutError if that takes longer than ``timeout`` seconds.
        """
        with self._cond:
            target = self._ticks + ticks
            if not self._cond.wait_for(lambda: self._ticks >= target, timeout):
                raise TimeoutError(f"timer did not reach tick {target}")

    def sleep_ms(self, ms: int, timeout: Optional[float] = None) -> None:
        """Block for about ``ms`` milliseconds of timer ticks."""
        ticks = ((ms * self._frequency) & 0xFFFFFFFF) // 1000
        self.sleep(ticks, timeout)