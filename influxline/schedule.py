"""Base class for scheduled tasks."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any, Mapping

_FIRST_SCHEDULE_ID = 10000
_ids = itertools.count(_FIRST_SCHEDULE_ID + 1)


@dataclass
class Schedule:
    """A task with an identifier, a name and a run specification."""

    id: int = 0
    name: str = ""
    spec: str = ""
    options: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)
    run_count: int = field(default=0, repr=False, compare=False)
    released: bool = field(default=False, repr=False, compare=False)

    def initialize(self, data: Mapping[str, Any] | None = None) -> None:
        """Give the task the next free identifier."""
        self.id = next(_ids)

    def update(self, data: Mapping[str, Any] | None = None) -> None:
        """Remember the settings passed in; the base task does not act on them."""
        if data:
            self.options.update(data)

    def is_active(self) -> bool:
        """Return True while the task should stay scheduled."""
        return True

    def run(self) -> None:
        """Count one run; the base task has no other work."""
        self.run_count += 1

    def release(self) -> None:
        """Drop the remembered settings and mark the task as released."""
        self.options.clear()
        self.released = True