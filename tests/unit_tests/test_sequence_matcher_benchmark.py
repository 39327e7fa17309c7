import difflib
import time

import pytest

from simple_seqmatch.sequence_matcher import SequenceMatcher


def create_large_content(num_lines=20000, modification_rate=100):
    """
    Creates two large lists of lines.
    modification_rate: modifying 1 line every N lines.
    """
    lines_a = [f"This is line number {i} with some static content.\n" for i in range(num_lines)]
    lines_b = list(lines_a)

    # Modify some lines
    for i in range(0, num_lines, modification_rate):
        lines_b[i] = f"This is line number {i} MODIFIED content.\n"

    # Add some insertions
    for i in range(0, num_lines, modification_rate * 2): # Less frequent insertions
        if i < len(lines_b):
            lines_b.insert(i, f"Inserted line at {i}\n")

    return lines_a, lines_b

@pytest.mark.benchmark
def test_benchmark_and_correctness():
    print("\n\n=== simple_seqmatch vs difflib Benchmark ===")

    num_lines = 20000
    lines_a, lines_b = create_large_content(num_lines)

    start_time = time.perf_counter()
    std_opcodes = difflib.SequenceMatcher(None, lines_a, lines_b).get_opcodes()
    difflib_time = time.perf_counter() - start_time
    print(f"Standard difflib time: {difflib_time:.4f}s")

    start_time = time.perf_counter()
    matcher = SequenceMatcher(None, lines_a, lines_b)
    opcodes = matcher.get_opcodes()
    ours_time = time.perf_counter() - start_time
    print(f"simple_seqmatch time: {ours_time:.4f}s")

    assert opcodes == std_opcodes

    # cached results come back without recomputation
    start_time = time.perf_counter()
    assert matcher.get_opcodes() == opcodes
    cached_time = time.perf_counter() - start_time
    print(f"simple_seqmatch cached time: {cached_time:.4f}s")
    assert cached_time < ours_time

@pytest.mark.benchmark
def test_no_common_elements_does_not_recurse():
    # Worst case for the block assembler: nothing matches, so every
    # rectangle is examined once and the work queue never grows.
    lines_a = [f"a{i}" for i in range(5000)]
    lines_b = [f"b{i}" for i in range(5000)]
    matcher = SequenceMatcher(None, lines_a, lines_b)

    assert matcher.get_opcodes() == [('replace', 0, 5000, 0, 5000)]

@pytest.mark.benchmark
def test_many_small_blocks_do_not_hit_recursion_limit():
    # alternating matches produce thousands of blocks
    lines_a = [f"{i}" if i % 2 else "x" for i in range(3000)]
    lines_b = [f"{i}" if i % 2 else "y" for i in range(3000)]
    matcher = SequenceMatcher(None, lines_a, lines_b, autojunk=False)

    blocks = matcher.get_matching_blocks()
    assert len(blocks) == 1501
    assert matcher.ratio() == 0.5
