"""
Runtime cache for reusable data that generators pick from at random
(term ids, product ids, ...). Items live in named groups; reads come off the
top of a group, so shuffle() first to get a random pick.
"""
import random
from typing import Any, Dict, List, Optional


class RandomRuntimeCache:
    def __init__(self, rng: Optional[random.Random] = None):
        self._cache: Dict[str, List[Any]] = {}
        self._rng = rng or random.Random()

    def exists(self, group: str) -> bool:
        return group in self._cache

    def get(self, group: str, limit: int = 0) -> List[Any]:
        """Up to `limit` items from the top of the group; 0 means all of them."""
        items = self._cache.get(group, [])
        if limit <= 0 or len(items) <= limit:
            return list(items)
        return items[:limit]

    def extract(self, group: str, limit: int = 0) -> List[Any]:
        """
        Like get(), but removes what it returns. Taking everything (limit 0,
        or a limit at least the group size) deletes the group.
        """
        items = self._cache.get(group, [])
        if limit <= 0 or len(items) <= limit:
            self.clear(group)
            return list(items)
        self._cache[group] = items[limit:]
        return items[:limit]

    def add(self, group: str, items: List[Any]) -> None:
        self._cache[group] = self._cache.get(group, []) + list(items)

    def set(self, group: str, items: List[Any]) -> None:
        self._cache[group] = list(items)

    def count(self, group: str) -> int:
        return len(self._cache.get(group, []))

    def shuffle(self, group: str) -> None:
        if group in self._cache:
            self._rng.shuffle(self._cache[group])

    def clear(self, group: str) -> None:
        self._cache.pop(group, None)

    def reset(self) -> None:
        self._cache = {}
