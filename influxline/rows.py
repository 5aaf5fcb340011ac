"""Result rows returned from executing a statement."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from influxline.fnv import InlineFNV64a


@dataclass
class Row:
    """A single row of a statement result."""

    name: str = ""
    tags: dict[str, str] = field(default_factory=dict)
    columns: list[str] = field(default_factory=list)
    values: list[list[Any]] = field(default_factory=list)
    partial: bool = False

    def tags_hash(self) -> int:
        """Return a hash of the tag keys and values in key order."""
        h = InlineFNV64a()
        tags = self.tags or {}
        for key in sorted(tags):
            h.write(key.encode())
            h.write(tags[key].encode())
        return h.sum64()

    def same_series(self, other: "Row") -> bool:
        """Return True if ``other`` holds values for the same series."""
        return self.tags_hash() == other.tags_hash() and self.name == other.name


def sort_rows(rows: Iterable[Row]) -> list[Row]:
    """Return the rows ordered by name, then by tag set hash."""
    return sorted(rows, key=lambda row: (row.name, row.tags_hash()))