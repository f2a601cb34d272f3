"""Inclusive ranges of user ids and set operations on them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List


@dataclass(frozen=True, order=True)
class UIDRange:
    """An inclusive range of user ids."""

    start: int
    end: int

    @classmethod
    def single(cls, uid: int) -> "UIDRange":
        return cls(uid, uid)

    def __contains__(self, uid: int) -> bool:
        return self.start <= uid <= self.end


def merge_ranges(ranges: Iterable[UIDRange]) -> List[UIDRange]:
    """Sort ranges and join those that overlap or touch."""
    merged: List[UIDRange] = []
    for current in sorted(ranges, key=lambda r: r.start):
        if merged and current.start <= merged[-1].end + 1:
            if current.end > merged[-1].end:
                merged[-1] = UIDRange(merged[-1].start, current.end)
        else:
            merged.append(current)
    return merged


def revert_ranges(start: int, end: int, ranges: Iterable[UIDRange]) -> List[UIDRange]:
    """Return the parts of [start, end] not covered by ranges."""
    merged = merge_ranges(ranges)
    if not merged:
        return [UIDRange(start, end)]
    reverted: List[UIDRange] = []
    if merged[0].start > start:
        reverted.append(UIDRange(start, merged[0].start - 1))
    range_end = merged[0].end
    for current in merged[1:]:
        if current.start > range_end + 1:
            reverted.append(UIDRange(range_end + 1, current.start - 1))
        range_end = current.end
    if end > range_end:
        reverted.append(UIDRange(range_end + 1, end))
    return reverted


def exclude_ranges(ranges: Iterable[UIDRange], targets: Iterable[UIDRange]) -> List[UIDRange]:
    """Remove every id in targets from ranges."""
    result = merge_ranges(ranges)
    for target in merge_ranges(targets):
        remaining: List[UIDRange] = []
        for current in result:
            if target.end < current.start or target.start > current.end:
                remaining.append(current)
                continue
            if current.start < target.start:
                remaining.append(UIDRange(current.start, target.start - 1))
            if current.end > target.end:
                remaining.append(UIDRange(target.end + 1, current.end))
        result = remaining
    return result