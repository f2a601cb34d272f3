"""Internet checksum helpers (RFC 1071)."""

from __future__ import annotations

import struct

_UINT64 = 0xFFFFFFFFFFFFFFFF


def checksum_sum(data: bytes) -> int:
    """Sum the data as big-endian 16-bit words without folding carries."""
    data = bytes(data)
    words = len(data) // 2
    total = sum(struct.unpack_from(f">{words}H", data)) if words else 0
    if len(data) % 2:
        total += data[-1] << 8
    return total & 0xFFFFFFFF


def checksum_no_fold(data: bytes, initial: int) -> int:
    """Add the word sum of data to initial."""
    return (initial + checksum_sum(data)) & _UINT64


def checksum_fold(data: bytes, initial: int) -> int:
    """Sum data onto initial and fold the result to 16 bits."""
    acc = checksum_no_fold(data, initial)
    for _ in range(4):
        acc = (acc >> 16) + (acc & 0xFFFF)
    return acc & 0xFFFF


def pseudo_header_checksum_no_fold(protocol: int, src_addr: bytes, dst_addr: bytes, total_len: int) -> int:
    """Return the unfolded sum of a TCP/UDP pseudo header."""
    acc = checksum_no_fold(src_addr, 0)
    acc = checksum_no_fold(dst_addr, acc)
    acc = checksum_no_fold(bytes((0, protocol & 0xFF)), acc)
    return checksum_no_fold(struct.pack(">H", total_len & 0xFFFF), acc)