import logging
from collections.abc import Callable, Hashable


logger = logging.getLogger(__name__)


class ResultCache:
    """
    Memoizes derived results of a matcher.

    Each entry is tagged with the generation it was computed in. Bumping the
    generation (invalidate) makes every older entry stale, so mutators only
    have to call invalidate() and getters only have to go through
    get_or_compute().
    """

    def __init__(self) -> None:
        self.generation = 0
        self._entries: dict[Hashable, tuple[int, object]] = {}

    def invalidate(self) -> None:
        self.generation += 1
        if self._entries:
            logger.debug(f"Dropping {len(self._entries)} cached results (generation {self.generation})")
        self._entries.clear()

    def get_or_compute(self, key: Hashable, factory: Callable[[], object]):
        entry = self._entries.get(key)
        if entry is not None and entry[0] == self.generation:
            return entry[1]
        generation = self.generation
        value = factory()
        # skip storing if the factory invalidated the cache
        if generation == self.generation:
            self._entries[key] = (generation, value)
        return value
