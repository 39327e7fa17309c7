import difflib
import random

import pytest

from simple_seqmatch.opcodes import group_opcodes, opcodes_from_blocks
from simple_seqmatch.sequence_matcher import SequenceMatcher


@pytest.fixture
def two_changes():
    # 20 lines, lines 2 and 15 modified
    a = [f"Line {i}\n" for i in range(20)]
    b = list(a)
    b[2] = "Line 2 modified\n"
    b[15] = "Line 15 modified\n"
    return a, b

def test_opcodes_from_blocks():
    blocks = [(0, 0, 2), (2, 3, 1), (3, 4, 0)]
    assert opcodes_from_blocks(blocks) == [
        ('equal', 0, 2, 0, 2),
        ('insert', 2, 2, 2, 3),
        ('equal', 2, 3, 3, 4),
    ]

def test_opcodes_from_sentinel_only():
    assert opcodes_from_blocks([(2, 0, 0)]) == [('delete', 0, 2, 0, 0)]
    assert opcodes_from_blocks([(0, 0, 0)]) == []

def test_single_change_with_context(two_changes):
    a, _ = two_changes
    b = list(a)
    b[10] = "changed\n"
    matcher = SequenceMatcher(None, a, b)

    assert matcher.get_grouped_opcodes(3) == [[
        ('equal', 7, 10, 7, 10),
        ('replace', 10, 11, 10, 11),
        ('equal', 11, 14, 11, 14),
    ]]

def test_distant_changes_split_into_groups(two_changes):
    a, b = two_changes
    matcher = SequenceMatcher(None, a, b)

    assert matcher.get_grouped_opcodes(2) == [
        [('equal', 0, 2, 0, 2), ('replace', 2, 3, 2, 3), ('equal', 3, 5, 3, 5)],
        [('equal', 13, 15, 13, 15), ('replace', 15, 16, 15, 16), ('equal', 16, 18, 16, 18)],
    ]

def test_close_changes_share_a_group(two_changes):
    a, b = two_changes
    matcher = SequenceMatcher(None, a, b)

    # the equal run between the changes is 12 lines, not more than 2 * 6
    groups = matcher.get_grouped_opcodes(6)
    assert len(groups) == 1
    assert groups[0][0] == ('equal', 0, 2, 0, 2)
    assert groups[0][-1] == ('equal', 16, 20, 16, 20)

def test_zero_context_shows_no_equal_lines(two_changes):
    a, b = two_changes
    groups = SequenceMatcher(None, a, b).get_grouped_opcodes(0)

    assert groups == [[('replace', 2, 3, 2, 3)], [('replace', 15, 16, 15, 16)]]
    for group in groups:
        assert all(tag != 'equal' for tag, *_ in group)

def test_all_equal_input():
    lines = [f"Line {i}\n" for i in range(10)]
    matcher = SequenceMatcher(None, lines, lines)

    assert matcher.get_grouped_opcodes(3) == [[('equal', 7, 10, 7, 10)]]
    assert matcher.get_grouped_opcodes(0) == []

def test_no_opcodes():
    assert group_opcodes([], 3) == []

@pytest.mark.parametrize("context", [-1, 1.5, "3", True])
def test_invalid_context(context):
    matcher = SequenceMatcher(None, "abc", "abd")
    with pytest.raises(ValueError):
        matcher.get_grouped_opcodes(context)

def test_grouped_opcodes_cached_per_context(two_changes):
    a, b = two_changes
    matcher = SequenceMatcher(None, a, b)

    wide = matcher.get_grouped_opcodes(6)
    narrow = matcher.get_grouped_opcodes(2)
    assert wide != narrow
    assert matcher.get_grouped_opcodes(6) == wide
    assert matcher.get_grouped_opcodes(2) == narrow

    # mutating a returned group must not leak into the cache
    narrow[0].clear()
    assert matcher.get_grouped_opcodes(2)[0] != []

@pytest.mark.parametrize("seed", range(20))
@pytest.mark.parametrize("context", [1, 2, 3])
def test_matches_difflib_grouping(seed, context):
    rng = random.Random(seed)
    a = [rng.choice("abcdefghij") for _ in range(rng.randint(1, 50))]
    b = list(a)
    for _ in range(rng.randint(1, 4)):
        b[rng.randrange(len(b))] = "changed"

    # "changed" is outside the alphabet, so every case has a change
    std = difflib.SequenceMatcher(None, a, b)
    ours = SequenceMatcher(None, a, b)
    assert ours.get_grouped_opcodes(context) == list(std.get_grouped_opcodes(context))

@pytest.mark.parametrize("cached, context", [(1, True), (1, 1.0), (0, False), (0, 0.0)])
def test_invalid_context_rejected_after_equal_key_is_cached(cached, context):
    # True == 1 == 1.0 as dict keys; a cached int must not answer for them
    matcher = SequenceMatcher(None, "abc", "abd")
    matcher.get_grouped_opcodes(cached)

    with pytest.raises(ValueError):
        matcher.get_grouped_opcodes(context)

def test_group_opcodes_validates_context():
    with pytest.raises(ValueError):
        group_opcodes([], -1)
