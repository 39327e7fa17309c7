import dataclasses
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass


logger = logging.getLogger(__name__)

_WHITESPACE_STR = re.compile(r'\s+')
_WHITESPACE_BYTES = re.compile(rb'\s+')


class MatcherConfigError(ValueError):
    """Raised when a matcher is given a malformed configuration."""


@dataclass(frozen=True)
class MatcherOptions:
    """
    Configuration of a SequenceMatcher.

    isjunk: optional predicate; elements (keys) for which it returns true
        never seed a match, but may be absorbed at the edges of one.
    autojunk: treat elements occurring in more than 1% of b as junk when
        b has at least 200 elements.
    ignore_case, ignore_whitespace, ignore_line_ending: normalise str/bytes
        elements before comparing them.
    """
    isjunk: Callable[[object], bool] | None = None
    autojunk: bool = True
    ignore_case: bool = False
    ignore_whitespace: bool = False
    ignore_line_ending: bool = False

    @classmethod
    def validated(cls, base: 'MatcherOptions | None' = None, **values) -> 'MatcherOptions':
        """
        Build options from `base` with `values` applied, failing fast on bad input.
        """
        base = base if base is not None else cls()
        try:
            options = dataclasses.replace(base, **values)
        except TypeError as e:
            known = ', '.join(f.name for f in dataclasses.fields(cls))
            raise MatcherConfigError(f"Unknown matcher option in {sorted(values)}; expected one of: {known}") from e

        if options.isjunk is not None and not callable(options.isjunk):
            raise MatcherConfigError(f"isjunk must be callable or None, got {type(options.isjunk).__name__}")
        for name in ('autojunk', 'ignore_case', 'ignore_whitespace', 'ignore_line_ending'):
            value = getattr(options, name)
            if not isinstance(value, bool):
                raise MatcherConfigError(f"{name} must be a bool, got {type(value).__name__}")
        return options

    @property
    def normalizes(self) -> bool:
        return self.ignore_case or self.ignore_whitespace or self.ignore_line_ending

    def make_key(self, elt):
        """Return the comparison key of an element."""
        if isinstance(elt, str):
            if self.ignore_line_ending:
                elt = elt.rstrip('\r\n')
            if self.ignore_whitespace:
                elt = _WHITESPACE_STR.sub('', elt)
            if self.ignore_case:
                elt = elt.casefold()
        elif isinstance(elt, bytes):
            if self.ignore_line_ending:
                elt = elt.rstrip(b'\r\n')
            if self.ignore_whitespace:
                elt = _WHITESPACE_BYTES.sub(b'', elt)
            if self.ignore_case:
                elt = elt.lower()
        return elt

    def make_keys(self, seq) -> tuple:
        if not self.normalizes:
            return tuple(seq)
        return tuple(self.make_key(elt) for elt in seq)


class JunkClassifier:
    """
    Decides which elements of b may not seed a match.

    An element is excluded if the user predicate says it is junk, or if
    autojunk is on and it is popular. The two reasons are kept apart:
    junk is only ever absorbed after popular and ordinary elements when a
    match is extended.
    """

    def __init__(self, isjunk: Callable[[object], bool] | None, autojunk: bool, b_len: int) -> None:
        self.isjunk = isjunk
        # Popular elements are those appearing in more than ~1% of b.
        self.popular_limit = b_len // 100 + 1 if autojunk and b_len >= 200 else None

    def is_junk(self, elt) -> bool:
        return bool(self.isjunk) and bool(self.isjunk(elt))

    def is_popular(self, count: int) -> bool:
        return self.popular_limit is not None and count > self.popular_limit

    def classify(self, b2j: dict) -> tuple[set, set]:
        """
        Purge junk and popular elements from b2j in place.
        Returns the (junk, popular) sets.
        """
        junk = set()
        if self.isjunk:
            for elt in b2j.keys():
                if self.is_junk(elt):
                    junk.add(elt)
            for elt in junk: # separate loop avoids separate list of keys
                del b2j[elt]

        popular = set()
        if self.popular_limit is not None:
            for elt, idxs in b2j.items():
                if self.is_popular(len(idxs)):
                    popular.add(elt)
            for elt in popular:
                del b2j[elt]

        if junk or popular:
            logger.debug(f"Purged {len(junk)} junk and {len(popular)} popular elements from b index")
        return junk, popular
