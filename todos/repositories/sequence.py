from __future__ import annotations

from typing import Any, Iterable, Mapping


def highest_id(todo_lists: Iterable[Mapping[str, Any]]) -> int:
    highest = 0
    for todo_list in todo_lists:
        highest = max(highest, todo_list["id"])
        for todo in todo_list.get("todos", []):
            highest = max(highest, todo["id"])
    return highest


class IdSequence:
    """Monotonically increasing id generator for the session store."""

    def __init__(self, start: int = 1) -> None:
        self._next = start

    def next_id(self) -> int:
        value = self._next
        self._next += 1
        return value

    def advance_past(self, value: int) -> None:
        """Never hand out ``value`` or anything below it."""
        self._next = max(self._next, value + 1)

    @classmethod
    def above(cls, todo_lists: Iterable[Mapping[str, Any]]) -> "IdSequence":
        """Start above every list and todo id already present in ``todo_lists``."""
        return cls(highest_id(todo_lists) + 1)
