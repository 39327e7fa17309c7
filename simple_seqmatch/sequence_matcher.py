import logging
from collections.abc import Callable, Iterable

from simple_seqmatch.cache import ResultCache
from simple_seqmatch.matcher import Match, Matcher, Opcode
from simple_seqmatch.opcodes import calculate_ratio, check_context, group_opcodes, opcodes_from_blocks
from simple_seqmatch.options import JunkClassifier, MatcherOptions


logger = logging.getLogger(__name__)


class SequenceMatcher(Matcher):
    """
    An in-memory sequence matcher for sequences of hashable elements.

    It implements the core logic of difflib.SequenceMatcher (Ratcliff and
    Obershelp "gestalt pattern matching" with junk handling), with
    comparison options and an explicit result cache on top.

    Please see https://github.com/python/cpython/blob/3.14/Lib/difflib.py

    Architecture:
    -------------
    1.  **Index (b2j):** built once per second sequence / configuration.
        Maps every element of b to the ascending list of its indices, minus
        junk and popular elements, which may not seed a match.
    2.  **Longest match:** a rolling dynamic programme over b2j, extended
        afterwards through popular and then junk elements on both ends.
    3.  **Matching blocks:** the full rectangle is split around each longest
        match with an explicit work queue, never with recursion.
    4.  **Opcodes / groups / ratios:** derived from the matching blocks and
        memoised in a ResultCache that every mutator invalidates.

    Elements are compared through keys (see MatcherOptions.make_key), so
    case, whitespace and line endings can be ignored.
    The matcher is not thread-safe; use one instance per comparison.
    """

    def __init__(self,
        isjunk: Callable[[object], bool] | None = None,
        a: Iterable = (),
        b: Iterable = (),
        autojunk: bool = True,
        **options,
    ) -> None:
        """
        Initializes the matcher.

        Args:
            isjunk: None, or a one-argument function that takes an element
                    key and returns true if it is junk.
            a: the first sequence to compare.
            b: the second sequence to compare. b is indexed, so if you want
               to compare one sequence against many, set it with set_seq2()
               once and vary a with set_seq1().
            autojunk: enable the popular-element heuristic.
            **options: ignore_case, ignore_whitespace, ignore_line_ending.

        Raises:
            MatcherConfigError: if the configuration is malformed.
        """
        self._options = MatcherOptions.validated(isjunk=isjunk, autojunk=autojunk, **options)
        self._cache = ResultCache()

        # a/b hold the caller's elements, a_keys/b_keys what is compared
        self.a: tuple = ()
        self.b: tuple = ()
        self.a_keys: tuple = ()
        self.b_keys: tuple = ()

        self.b2j: dict = {}
        self.bjunk: set = set()
        self.bpopular: set = set()

        self.set_seqs(a, b)

    # --- Configuration ---

    def set_options(self, **options) -> 'SequenceMatcher':
        """
        Merge options into the current configuration.

        Keys are recomputed and b is re-indexed, since both depend on the
        options.
        """
        self._options = MatcherOptions.validated(self._options, **options)
        self.a_keys = self._options.make_keys(self.a)
        self.b_keys = self._options.make_keys(self.b)
        self._chain_b()
        self._cache.invalidate()
        return self

    def get_options(self) -> MatcherOptions:
        return self._options

    @property
    def isjunk(self):
        return self._options.isjunk

    @property
    def autojunk(self) -> bool:
        return self._options.autojunk

    def reset_cached_results(self) -> 'SequenceMatcher':
        self._cache.invalidate()
        return self

    # --- Sequences ---

    def set_seqs(self, a: Iterable, b: Iterable) -> 'SequenceMatcher':
        self._set_a(a)
        self._set_b(b)
        self._cache.invalidate()
        return self

    def set_seq1(self, a: Iterable) -> 'SequenceMatcher':
        """Set the first sequence. The index of b is kept."""
        self._set_a(a)
        self._cache.invalidate()
        return self

    def set_seq2(self, b: Iterable) -> 'SequenceMatcher':
        """Set the second sequence and re-index it."""
        self._set_b(b)
        self._cache.invalidate()
        return self

    def _set_a(self, a: Iterable) -> None:
        self.a = tuple(a)
        self.a_keys = self._options.make_keys(self.a)

    def _set_b(self, b: Iterable) -> None:
        self.b = tuple(b)
        self.b_keys = self._options.make_keys(self.b)
        self._chain_b()

    # --- Core Algorithm from difflib ---

    def _chain_b(self) -> None:
        # Index every element first; junk and popular keys are purged
        # afterwards so isjunk runs once per distinct key.
        b = self.b_keys
        self.b2j = b2j = {}

        for i, elt in enumerate(b):
            indices = b2j.setdefault(elt, [])
            indices.append(i)

        # Purge junk elements, then popular elements that are not junk
        classifier = JunkClassifier(self._options.isjunk, self._options.autojunk, len(b))
        self.bjunk, self.bpopular = classifier.classify(b2j)

        logger.debug(f"Indexed b: {len(b)} elements, {len(b2j)} distinct seeds,"
                     f" {len(self.bjunk)} junk, {len(self.bpopular)} popular")

    def find_longest_match(self, alo: int = 0, ahi: int | None = None,  # noqa: C901
                           blo: int = 0, bhi: int | None = None) -> Match:
        """
        Find longest matching block in a[alo:ahi] and b[blo:bhi].

        If isjunk is not defined, return (i, j, k) such that
        a[i:i+k] is equal to b[j:j+k], where
            alo <= i <= i+k <= ahi
            blo <= j <= j+k <= bhi
        and for all (i',j',k') meeting those conditions,
            k >= k'
            i <= i'
            and if i == i', j <= j'

        In other words, of all maximal matching blocks, return one that
        starts earliest in a, and of all those maximal matching blocks that
        start earliest in a, return the one that starts earliest in b.

        If junk elements are defined, first the longest matching block is
        determined as above, but with the additional restriction that no
        junk element appears in the block.  Then that block is extended as
        far as possible by matching (only) junk elements on both sides.  So
        the resulting block never matches on junk except as identical junk
        happens to be adjacent to an "interesting" match.

        If no blocks match, return (alo, blo, 0). Inverted ranges
        (alo > ahi or blo > bhi) are empty, not an error.
        """
        a, b, b2j, isbjunk = self.a_keys, self.b_keys, self.b2j, self.bjunk.__contains__
        if ahi is None:
            ahi = len(a)
        if bhi is None:
            bhi = len(b)
        if alo > ahi or blo > bhi:
            return Match(alo, blo, 0)
        alo, ahi = max(alo, 0), min(ahi, len(a))
        blo, bhi = max(blo, 0), min(bhi, len(b))

        besti, bestj, bestsize = alo, blo, 0
        # find longest junk-free match
        # during an iteration of the loop, j2len[j] = length of longest
        # junk-free match ending with a[i-1] and b[j]
        j2len = {}
        nothing = []
        for i in range(alo, ahi):
            # look at all instances of a[i] in b; note that because
            # b2j has no junk keys, the loop is skipped if a[i] is junk
            j2lenget = j2len.get
            newj2len = {}
            for j in b2j.get(a[i], nothing):
                # a[i] matches b[j]
                if j < blo:
                    continue
                if j >= bhi:
                    break
                k = newj2len[j] = j2lenget(j-1, 0) + 1
                if k > bestsize:
                    besti, bestj, bestsize = i-k+1, j-k+1, k
            j2len = newj2len

        # Popular elements are not in b2j, so they could not seed the match;
        # extend through them (and ordinary elements) on each end first.
        while besti > alo and bestj > blo and \
              not isbjunk(b[bestj-1]) and \
              a[besti-1] == b[bestj-1]:
            besti, bestj, bestsize = besti-1, bestj-1, bestsize+1
        while besti+bestsize < ahi and bestj+bestsize < bhi and \
              not isbjunk(b[bestj+bestsize]) and \
              a[besti+bestsize] == b[bestj+bestsize]:
            bestsize += 1

        # Then absorb equal junk on both sides. For an empty match this is
        # the only kind of match possible in the region.
        while besti > alo and bestj > blo and \
              isbjunk(b[bestj-1]) and \
              a[besti-1] == b[bestj-1]:
            besti, bestj, bestsize = besti-1, bestj-1, bestsize+1
        while besti+bestsize < ahi and bestj+bestsize < bhi and \
              isbjunk(b[bestj+bestsize]) and \
              a[besti+bestsize] == b[bestj+bestsize]:
            bestsize = bestsize + 1

        return Match(besti, bestj, bestsize)

    def get_matching_blocks(self) -> list[Match]:
        """Return list of triples describing matching subsequences.

        Each triple is of the form (i, j, n), and means that
        a[i:i+n] == b[j:j+n].  The triples are monotonically increasing in
        i and in j.  It's also guaranteed that if (i, j, n) and (i', j', n')
        are adjacent triples in the list, and the second is not the last
        triple in the list, then i+n != i' or j+n != j'.  IOW, adjacent
        triples never describe adjacent equal blocks.

        The last triple is a dummy, (len(a), len(b), 0), and is the only
        triple with n==0.

        >>> s = SequenceMatcher(None, "abxcd", "abcd")
        >>> s.get_matching_blocks()
        [Match(a=0, b=0, size=2), Match(a=3, b=2, size=2), Match(a=5, b=4, size=0)]
        """
        return list(self._cache.get_or_compute('matching_blocks', self._compute_matching_blocks))

    def _compute_matching_blocks(self) -> tuple[Match, ...]:
        la, lb = len(self.a_keys), len(self.b_keys)

        # Rectangles still to search are kept on an explicit stack; matches
        # are collected in any order and sorted at the end.
        queue = [(0, la, 0, lb)]
        matching_blocks = []
        while queue:
            alo, ahi, blo, bhi = queue.pop()
            i, j, k = x = self.find_longest_match(alo, ahi, blo, bhi)
            # a[alo:i] vs b[blo:j] unknown
            # a[i:i+k] same as b[j:j+k]
            # a[i+k:ahi] vs b[j+k:bhi] unknown
            if k:   # if k is 0, there was no matching block
                matching_blocks.append(x)
                if alo < i and blo < j:
                    queue.append((alo, i, blo, j))
                if i+k < ahi and j+k < bhi:
                    queue.append((i+k, ahi, j+k, bhi))
        matching_blocks.sort()

        # Collapse blocks that are adjacent in both sequences.
        i1 = j1 = k1 = 0
        non_adjacent = []
        for i2, j2, k2 in matching_blocks:
            # Is this block adjacent to i1, j1, k1?
            if i1 + k1 == i2 and j1 + k1 == j2:
                k1 += k2
            else:
                # k1 == 0 is the starting dummy
                if k1:
                    non_adjacent.append((i1, j1, k1))
                i1, j1, k1 = i2, j2, k2
        if k1:
            non_adjacent.append((i1, j1, k1))

        non_adjacent.append((la, lb, 0))
        logger.debug(f"Found {len(non_adjacent) - 1} matching blocks between {la} and {lb} elements")
        return tuple(map(Match._make, non_adjacent))

    def get_opcodes(self) -> list[Opcode]:
        """
        Return list of 5-tuples describing how to turn a into b.
        Each tuple is of the form (tag, i1, i2, j1, j2).  The first tuple
        has i1 == j1 == 0, and remaining tuples have i1 == the i2 from the
        tuple preceding it, and likewise for j1 == the previous j2.

        >>> s = SequenceMatcher(None, "qabxcd", "abycdf")
        >>> for tag, i1, i2, j1, j2 in s.get_opcodes():
        ...     print(f"{tag:7} a[{i1}:{i2}] b[{j1}:{j2}]")
        delete  a[0:1] b[0:0]
        equal   a[1:3] b[0:2]
        replace a[3:4] b[2:3]
        equal   a[4:6] b[3:5]
        insert  a[6:6] b[5:6]
        """
        return list(self._cache.get_or_compute(
            'opcodes', lambda: tuple(opcodes_from_blocks(self.get_matching_blocks()))))

    def get_grouped_opcodes(self, context: int = 3) -> list[list[Opcode]]:
        """
        Isolate change clusters by eliminating ranges with no changes.

        Return a list of groups with up to `context` elements of context.
        Each group is in the same format as returned by get_opcodes().
        """
        check_context(context)
        groups = self._cache.get_or_compute(
            ('grouped_opcodes', context),
            lambda: tuple(tuple(group) for group in group_opcodes(self.get_opcodes(), context)))
        return [list(group) for group in groups]

    # --- Ratios ---

    def ratio(self) -> float:
        """
        Return a measure of the sequences' similarity (float in [0,1]).

        Where T is the total number of elements in both sequences, and
        M is the number of matches, this is 2.0*M / T.
        Expensive to compute if get_matching_blocks() or get_opcodes()
        hasn't already been called; see quick_ratio() and
        real_quick_ratio() for cheaper upper bounds.
        """
        def compute() -> float:
            matches = sum(triple.size for triple in self.get_matching_blocks())
            return calculate_ratio(matches, len(self.a_keys) + len(self.b_keys))
        return self._cache.get_or_compute('ratio', compute)

    def quick_ratio(self) -> float:
        """Return an upper bound on ratio() relatively quickly. Junk is not considered."""
        # viewing a and b as multisets, set matches to the cardinality
        # of their intersection; this counts the number of matches
        # without regard to order, so is clearly an upper bound
        fullbcount = self._cache.get_or_compute('fullbcount', self._count_b)

        # avail[x] is the count of x in b not yet consumed by a
        avail = {}
        availhas, matches = avail.__contains__, 0
        for elt in self.a_keys:
            if availhas(elt):
                numb = avail[elt]
            else:
                numb = fullbcount.get(elt, 0)
            avail[elt] = numb - 1
            if numb > 0:
                matches = matches + 1
        return calculate_ratio(matches, len(self.a_keys) + len(self.b_keys))

    def _count_b(self) -> dict:
        fullbcount = {}
        for elt in self.b_keys:
            fullbcount[elt] = fullbcount.get(elt, 0) + 1
        return fullbcount

    def real_quick_ratio(self) -> float:
        """Return an upper bound on ratio() very quickly."""
        la, lb = len(self.a_keys), len(self.b_keys)
        # can't have more matches than the number of elements in the
        # shorter sequence
        return calculate_ratio(min(la, lb), la + lb)
