from singtun.uidrange import UIDRange, exclude_ranges, merge_ranges, revert_ranges


def covered(ranges, upto):
    return {uid for uid in range(upto) if any(uid in r for r in ranges)}


def test_single():
    assert UIDRange.single(42) == UIDRange(42, 42)
    assert 42 in UIDRange.single(42)
    assert 43 not in UIDRange.single(42)


def test_merge_overlapping_and_adjacent():
    ranges = [UIDRange(5, 9), UIDRange(1, 3), UIDRange(4, 4), UIDRange(20, 30), UIDRange(25, 26)]
    assert merge_ranges(ranges) == [UIDRange(1, 9), UIDRange(20, 30)]


def test_merge_empty():
    assert merge_ranges([]) == []


def test_merge_preserves_coverage():
    ranges = [UIDRange(3, 7), UIDRange(10, 12), UIDRange(6, 8), UIDRange(40, 41)]
    assert covered(merge_ranges(ranges), 60) == covered(ranges, 60)


def test_revert_empty_is_full():
    assert revert_ranges(0, 100, []) == [UIDRange(0, 100)]


def test_revert_complements():
    ranges = [UIDRange(10, 20), UIDRange(50, 50)]
    reverted = revert_ranges(0, 99, ranges)
    assert covered(reverted, 100) == set(range(100)) - covered(ranges, 100)


def test_revert_twice_is_merge():
    ranges = [UIDRange(10, 20), UIDRange(15, 30), UIDRange(60, 70)]
    assert revert_ranges(0, 99, revert_ranges(0, 99, ranges)) == merge_ranges(ranges)


def test_revert_at_bounds():
    assert revert_ranges(0, 99, [UIDRange(0, 99)]) == []


def test_exclude_middle():
    result = exclude_ranges([UIDRange(0, 100)], [UIDRange(40, 60)])
    assert covered(result, 120) == set(range(101)) - set(range(40, 61))
    assert len(result) == 2


def test_exclude_no_targets():
    assert exclude_ranges([UIDRange(5, 6), UIDRange(1, 2)], []) == [UIDRange(1, 2), UIDRange(5, 6)]


def test_exclude_all():
    assert exclude_ranges([UIDRange(5, 10)], [UIDRange(0, 20)]) == []