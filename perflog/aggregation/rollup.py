"""Hierarchical tag expansion for rollup statistics."""

from __future__ import annotations

from typing import Dict, Tuple

TAG_DELIMITER = "."


class TagHierarchy:
    """Caches the rollup targets of each distinct tag.

    ``"db.query.select"`` expands to ``("db.query.select", "db.query", "db")``.
    Tags are split once; later lookups hit the cache.
    """

    def __init__(self, delimiter: str = TAG_DELIMITER):
        self.delimiter = delimiter
        self._cache: Dict[str, Tuple[str, ...]] = {}

    def ancestors(self, tag: str) -> Tuple[str, ...]:
        """Proper ancestor prefixes, nearest first."""
        return self.expand(tag)[1:]

    def expand(self, tag: str) -> Tuple[str, ...]:
        """The tag itself followed by its ancestor prefixes."""
        cached = self._cache.get(tag)
        if cached is not None:
            return cached

        targets = [tag]
        end = tag.rfind(self.delimiter)
        while end > 0:
            prefix = tag[:end]
            # "a..b" or a leading delimiter would otherwise yield empty parts
            if prefix and not prefix.endswith(self.delimiter):
                targets.append(prefix)
            end = tag.rfind(self.delimiter, 0, end)

        expanded = tuple(targets)
        self._cache[tag] = expanded
        return expanded

    def __len__(self) -> int:
        return len(self._cache)
