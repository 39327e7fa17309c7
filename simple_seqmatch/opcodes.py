from collections.abc import Iterable

from simple_seqmatch.matcher import DELETE, EQUAL, INSERT, REPLACE, Match, Opcode


def opcodes_from_blocks(matching_blocks: Iterable[Match]) -> list[Opcode]:
    """
    Turn a list of matching blocks (ending with the (len(a), len(b), 0)
    sentinel) into opcodes partitioning both sequences.
    """
    i = j = 0
    opcodes = []
    for ai, bj, size in matching_blocks:
        # invariant:  we've pumped out correct diffs to change
        # a[:i] into b[:j], and the next matching block is
        # a[ai:ai+size] == b[bj:bj+size].  So we need to pump
        # out a diff to change a[i:ai] into b[j:bj], pump out
        # the matching block, and move (i,j) beyond the match
        tag = ''
        if i < ai and j < bj:
            tag = REPLACE
        elif i < ai:
            tag = DELETE
        elif j < bj:
            tag = INSERT
        if tag:
            opcodes.append(Opcode(tag, i, ai, j, bj))
        i, j = ai+size, bj+size
        # the list of matching blocks is terminated by a
        # sentinel with size 0
        if size:
            opcodes.append(Opcode(EQUAL, ai, i, bj, j))
    return opcodes


def check_context(context) -> None:
    if isinstance(context, bool) or not isinstance(context, int) or context < 0:
        raise ValueError(f"context must be a non-negative int, got {context!r}")


def group_opcodes(opcodes: Iterable[Opcode], context: int = 3) -> list[list[Opcode]]:
    """
    Isolate change clusters by eliminating ranges with no changes.

    Return a list of groups with up to `context` elements of equal content
    around each change. Equal runs longer than 2 * context are cut, the
    head closing one group and the tail opening the next.
    Zero-width equal opcodes are dropped, so context=0 never shows
    unchanged elements. If nothing survives, the result is empty.
    """
    check_context(context)

    codes = [Opcode(*code) for code in opcodes]
    if not codes:
        return []

    # Fixup leading and trailing groups if they show no changes.
    tag, i1, i2, j1, j2 = codes[0]
    if tag == EQUAL:
        codes[0] = Opcode(tag, max(i1, i2-context), i2, max(j1, j2-context), j2)
    tag, i1, i2, j1, j2 = codes[-1]
    if tag == EQUAL:
        codes[-1] = Opcode(tag, i1, min(i2, i1+context), j1, min(j2, j1+context))

    nn = context + context
    groups = []
    group = []
    for tag, i1, i2, j1, j2 in codes:
        # End the current group and start a new one whenever
        # there is a large range with no changes.
        if tag == EQUAL and i2-i1 > nn:
            group.append(Opcode(tag, i1, min(i2, i1+context), j1, min(j2, j1+context)))
            _flush(groups, group)
            group = []
            i1, j1 = max(i1, i2-context), max(j1, j2-context)
        group.append(Opcode(tag, i1, i2, j1, j2))
    _flush(groups, group)
    return groups


def _flush(groups: list, group: list) -> None:
    group = [code for code in group if code.tag != EQUAL or code.i2 > code.i1]
    if group:
        groups.append(group)


def calculate_ratio(matches: int, length: int) -> float:
    if length:
        return 2.0 * matches / length
    return 1.0
