from collections.abc import Iterable

from simple_seqmatch.matcher import EQUAL, TAGS, Match, Matcher, Opcode
from simple_seqmatch.opcodes import calculate_ratio, group_opcodes
from simple_seqmatch.options import MatcherOptions


class StaticMatcher(Matcher):
    """
    A Matcher that replays canned opcodes instead of comparing anything.

    Useful as a test double for consumers (renderers, patchers) that only
    need opcodes. Matching blocks, groups and the ratio are derived from
    the canned opcodes; sequences passed to set_seq* are stored but never
    compared.
    """

    def __init__(self, opcodes: Iterable[tuple] = (), **options) -> None:
        self._options = MatcherOptions.validated(**options)
        self.a: tuple = ()
        self.b: tuple = ()
        self.opcodes = self._check_opcodes(opcodes)
        # names of the methods consumers called, in order
        self.calls: list[str] = []

    @staticmethod
    def _check_opcodes(opcodes: Iterable[tuple]) -> list[Opcode]:
        """Make sure the opcodes partition a[0:i2] and b[0:j2] without gaps.

        Consecutive equal opcodes are rejected: they would describe
        mergeable matching blocks.
        """
        checked = []
        i = j = 0
        prev_tag = None
        for code in opcodes:
            tag, i1, i2, j1, j2 = code = Opcode(*code)
            if tag not in TAGS:
                raise ValueError(f"Unknown opcode tag {tag!r}")
            if (i1, j1) != (i, j) or i2 < i1 or j2 < j1:
                raise ValueError(f"Opcode {tuple(code)} does not continue from ({i}, {j})")
            if tag == EQUAL and i2 - i1 != j2 - j1:
                raise ValueError(f"Equal opcode {tuple(code)} spans ranges of different sizes")
            if tag == EQUAL and prev_tag == EQUAL:
                raise ValueError(f"Equal opcode {tuple(code)} follows another equal opcode")
            checked.append(code)
            i, j = i2, j2
            prev_tag = tag
        return checked

    def set_options(self, **options) -> 'StaticMatcher':
        self._options = MatcherOptions.validated(self._options, **options)
        self.calls.append('set_options')
        return self

    def get_options(self) -> MatcherOptions:
        self.calls.append('get_options')
        return self._options

    def reset_cached_results(self) -> 'StaticMatcher':
        self.calls.append('reset_cached_results')
        return self

    def set_seqs(self, a: Iterable, b: Iterable) -> 'StaticMatcher':
        self.a, self.b = tuple(a), tuple(b)
        return self

    def set_seq1(self, a: Iterable) -> 'StaticMatcher':
        self.a = tuple(a)
        return self

    def set_seq2(self, b: Iterable) -> 'StaticMatcher':
        self.b = tuple(b)
        return self

    def _sizes(self) -> tuple[int, int]:
        if not self.opcodes:
            return 0, 0
        return self.opcodes[-1].i2, self.opcodes[-1].j2

    def find_longest_match(self, alo: int = 0, ahi: int | None = None,
                           blo: int = 0, bhi: int | None = None) -> Match:
        """Return the longest canned equal run clipped to the given ranges."""
        la, lb = self._sizes()
        ahi = la if ahi is None else ahi
        bhi = lb if bhi is None else bhi
        best = Match(alo, blo, 0)
        if alo > ahi or blo > bhi:
            return best
        for i, j, size in self.get_matching_blocks():
            # clip the diagonal run to the query rectangle
            lo = max(alo - i, blo - j, 0)
            hi = min(ahi - i, bhi - j, size)
            if hi - lo > best.size:
                best = Match(i + lo, j + lo, hi - lo)
        return best

    def get_matching_blocks(self) -> list[Match]:
        blocks = [Match(i1, j1, i2 - i1) for tag, i1, i2, j1, j2 in self.opcodes if tag == EQUAL and i2 > i1]
        blocks.append(Match(*self._sizes(), 0))
        return blocks

    def get_opcodes(self) -> list[Opcode]:
        self.calls.append('get_opcodes')
        return list(self.opcodes)

    def get_grouped_opcodes(self, context: int = 3) -> list[list[Opcode]]:
        return group_opcodes(self.opcodes, context)

    def ratio(self) -> float:
        matches = sum(block.size for block in self.get_matching_blocks())
        return calculate_ratio(matches, sum(self._sizes()))
