from abc import ABC, abstractmethod
from collections import namedtuple
from collections.abc import Iterable


EQUAL = 'equal'
REPLACE = 'replace'
DELETE = 'delete'
INSERT = 'insert'

TAGS = (EQUAL, REPLACE, DELETE, INSERT)

Match = namedtuple('Match', 'a b size')

Opcode = namedtuple('Opcode', 'tag i1 i2 j1 j2')


class Matcher(ABC):
    """
    A matcher interface, primarily for substitutability and mocking.

    Consumers such as diff renderers only rely on the methods below.
    SequenceMatcher is the real engine; StaticMatcher replays canned opcodes.
    All mutators return the matcher itself so calls can be chained.
    """

    @abstractmethod
    def set_options(self, **options) -> 'Matcher':
        """Merge the given options into the current configuration."""

    @abstractmethod
    def get_options(self):
        """Return the current configuration."""

    @abstractmethod
    def reset_cached_results(self) -> 'Matcher':
        """Drop every cached result."""

    @abstractmethod
    def set_seqs(self, a: Iterable, b: Iterable) -> 'Matcher':
        """
        Set both sequences at once.

        Cheaper than set_seq1(a).set_seq2(b) on implementations that
        index the second sequence.
        """

    @abstractmethod
    def set_seq1(self, a: Iterable) -> 'Matcher':
        """Set the first sequence and invalidate cached results."""

    @abstractmethod
    def set_seq2(self, b: Iterable) -> 'Matcher':
        """Set the second sequence and invalidate cached results."""

    @abstractmethod
    def find_longest_match(self, alo: int = 0, ahi: int | None = None,
                           blo: int = 0, bhi: int | None = None) -> Match:
        """
        Find the longest matching block in a[alo:ahi] and b[blo:bhi].

        Of all maximal matching blocks, return the one that starts earliest
        in a, and of those, the one that starts earliest in b.
        """

    @abstractmethod
    def get_matching_blocks(self) -> list[Match]:
        """Return the sorted list of matching blocks, ending with a sentinel."""

    @abstractmethod
    def get_opcodes(self) -> list[Opcode]:
        """
        Return list of 5-tuples describing how to turn a into b.
        Each tuple is of the form (tag, i1, i2, j1, j2).

        replace - a[i1:i2] should be replaced by b[j1:j2]
        delete  - a[i1:i2] should be deleted
        insert  - b[j1:j2] should be inserted at a[i1:i1]
        equal   - a[i1:i2] == b[j1:j2]
        """

    @abstractmethod
    def get_grouped_opcodes(self, context: int = 3) -> list[list[Opcode]]:
        """Return opcode groups with up to `context` elements of surrounding equal content."""

    @abstractmethod
    def ratio(self) -> float:
        """Return a measure of the similarity of the sequences, in [0, 1]."""
