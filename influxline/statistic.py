"""Monitoring statistics and mergeable tag maps."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass
class Statistic:
    """A named statistic with tags and values."""

    name: str
    tags: dict[str, str] = field(default_factory=dict)
    values: dict[str, Any] = field(default_factory=dict)


class StatisticTags(dict):
    """A tag map that merges with others without changing either."""

    def merge(self, tags: Mapping[str, str] | None) -> dict[str, str]:
        """Return a new map of ``tags`` plus entries of self not in ``tags``."""
        tags = tags or {}
        out = dict(tags)
        for key, value in self.items():
            if key not in tags:
                out[key] = value
        return out