"""CMOS real-time clock register decoding and date formatting."""

from __future__ import annotations

from dataclasses import dataclass

STATUS_B_BINARY = 0x04
STATUS_B_24H = 0x02
HOUR_PM_BIT = 0x80
CENTURY_BASE = 2000


@dataclass(frozen=True)
class RtcDateTime:
    """A calendar date and time as kept by the RTC."""

    second: int
    minute: int
    hour: int
    day: int
    month: int
    year: int


def bcd_to_bin(value: int) -> int:
    """Convert a packed BCD byte to its binary value."""
    value &= 0xFF
    return ((value & 0x0F) + (value >> 4) * 10) & 0xFF


def decode_registers(
    second: int,
    minute: int,
    hour: int,
    day: int,
    month: int,
    year: int,
    status_b: int,
) -> RtcDateTime:
    """Turn raw CMOS register values into a date and time.

    ``status_b`` selects BCD or binary encoding and 12- or 24-hour mode.
    The two-digit year is taken to be in the 2000s.
    """
    raw = [v & 0xFF for v in (second, minute, hour, day, month, year)]
    if not status_b & STATUS_B_BINARY:
        raw = [bcd_to_bin(v) for v in raw]
    second, minute, hour, day, month, year = raw

    if not status_b & STATUS_B_24H:
        pm = bool(hour & HOUR_PM_BIT)
        hour &= 0x7F
        if pm and hour < 12:
            hour += 12
        if not pm and hour == 12:
            hour = 0

    return RtcDateTime(
        second=second,
        minute=minute,
        hour=hour,
        day=day,
        month=month,
        year=(CENTURY_BASE + year) & 0xFFFF,
    )


def _digit(value: int) -> str:
    return chr(ord("0") + value)


def _two_digits(value: int) -> str:
    return _digit(value // 10) + _digit(value % 10)


def format_datetime(dt: RtcDateTime) -> str:
    """Render ``dt`` as ``YYYY-MM-DD HH:MM:SS``."""
    year = "".join(_digit((dt.year // div) % 10) for div in (1000, 100, 10, 1))
    return (
        f"{year}-{_two_digits(dt.month)}-{_two_digits(dt.day)} "
        f"{_two_digits(dt.hour)}:{_two_digits(dt.minute)}:{_two_digits(dt.second)}"
    )