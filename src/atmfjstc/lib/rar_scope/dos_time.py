"""
Conversion of packed MS-DOS date/time values, as used by RAR 1.5-4.x file headers.

The packed format is a 32-bit value::

    bits 25-31: year - 1980
    bits 21-24: month (1-12)
    bits 16-20: day (1-31)
    bits 11-15: hours
    bits  5-10: minutes
    bits  0-4:  seconds / 2

The format carries no timezone. Timestamps are returned as naive `datetime` objects, which by convention represent
local time.
"""

from datetime import datetime, timedelta


DOS_EPOCH_YEAR = 1980


def datetime_from_dos_timestamp(dos_time: int) -> datetime:
    """
    Converts a packed DOS timestamp to a naive (local time) `datetime`.

    Out-of-range components are not rejected. Instead they roll over into the neighboring unit, e.g. day 0 of March
    becomes the last day of February, and month 0 becomes December of the previous year. Timestamps stored by
    buggy archivers thus still produce a usable value.
    """
    year = ((dos_time >> 25) & 0x7f) + DOS_EPOCH_YEAR
    month = (dos_time >> 21) & 0x0f
    day = (dos_time >> 16) & 0x1f
    hours = (dos_time >> 11) & 0x1f
    minutes = (dos_time >> 5) & 0x3f
    seconds = (dos_time << 1) & 0x3e

    extra_years, month_index = divmod(month - 1, 12)

    return datetime(year + extra_years, month_index + 1, 1) + \
        timedelta(days=day - 1, hours=hours, minutes=minutes, seconds=seconds)


def dos_timestamp_from_datetime(value: datetime) -> int:
    """
    Packs a `datetime` into the DOS timestamp format. Seconds are rounded down to an even number.

    Raises:
        ValueError: If the year cannot be represented (the format covers 1980 to 2107).
    """
    if not (DOS_EPOCH_YEAR <= value.year <= DOS_EPOCH_YEAR + 0x7f):
        raise ValueError(f"Year {value.year} cannot be represented as a DOS timestamp")

    return (
        ((value.year - DOS_EPOCH_YEAR) << 25) |
        (value.month << 21) |
        (value.day << 16) |
        (value.hour << 11) |
        (value.minute << 5) |
        (value.second >> 1)
    )
