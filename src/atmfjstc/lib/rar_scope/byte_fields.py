"""
Decoding of little-endian integer fields from raw header buffers.

All multi-byte integers in RAR headers are stored least significant byte first. Fields are addressed by an
inclusive ``[start, end]`` byte range, which is the way the header layouts are usually documented.
"""

from typing import Optional


def decode_le(data: bytes, start: Optional[int] = None, end: Optional[int] = None) -> int:
    """
    Decodes an unsigned little-endian integer from an inclusive range of bytes in a buffer.

    Byte ``start + j`` is placed at bit ``8 * j`` of the result, and the result is masked to exactly
    ``8 * (end - start + 1)`` bits.

    Args:
        data: The buffer to decode from.
        start: Index of the least significant byte. If both `start` and `end` are omitted, the whole buffer is
            decoded.
        end: Index of the most significant byte (inclusive).

    Returns:
        The decoded value. If the range falls outside the buffer (negative `start`, or `end` past the last byte),
        0 is returned instead of raising. This allows trailing fields of a short read to decode as zero.
    """
    if (start is None) and (end is None):
        start, end = 0, len(data) - 1
    elif (start is None) or (end is None):
        raise ValueError("Either specify both start and end, or neither")

    if (start < 0) or (end >= len(data)):
        return 0

    value = 0
    mask = 0

    for j, byte in enumerate(data[start:end + 1]):
        value |= byte << (8 * j)
        mask = (mask << 8) | 0xff

    return value & mask
