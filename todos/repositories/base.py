"""Persistence contract shared by the session and Postgres repositories."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Iterable, List, Optional, TypeVar

from todos.models import Todo, TodoList

T = TypeVar("T", Todo, TodoList)


def is_done_todo_list(todo_list: TodoList) -> bool:
    return len(todo_list.todos) > 0 and all(todo.done for todo in todo_list.todos)


def has_undone_todos(todo_list: TodoList) -> bool:
    return any(not todo.done for todo in todo_list.todos)


def partition_sorted(items: Iterable[T], is_done: Callable[[T], bool]) -> List[T]:
    """Put not-done items before done items, each group by case-insensitive title."""
    undone: List[T] = []
    done: List[T] = []
    for item in items:
        (done if is_done(item) else undone).append(item)

    def by_title(item: T) -> str:
        return item.title.lower()

    return sorted(undone, key=by_title) + sorted(done, key=by_title)


def sort_todo_lists(todo_lists: Iterable[TodoList]) -> List[TodoList]:
    return partition_sorted(todo_lists, is_done_todo_list)


def sort_todo_items(todos: Iterable[Todo]) -> List[Todo]:
    return partition_sorted(todos, lambda todo: todo.done)


def validate_title(title: str) -> str:
    if not title or not title.strip():
        raise ValueError("Todo list title cannot be empty")
    return title


class TodoPersistence(ABC):
    """Operations every todo storage backend provides for the acting user."""

    username: Optional[str]

    def is_done_todo_list(self, todo_list: TodoList) -> bool:
        return is_done_todo_list(todo_list)

    def has_undone_todos(self, todo_list: TodoList) -> bool:
        return has_undone_todos(todo_list)

    @abstractmethod
    def is_unique_constraint_violation(self, error: BaseException) -> bool:
        ...

    @abstractmethod
    async def authenticate(self, username: str, password: str) -> bool:
        ...

    @abstractmethod
    async def load_todo_list(self, todo_list_id: int) -> Optional[TodoList]:
        ...

    @abstractmethod
    async def load_todo(self, todo_list_id: int, todo_id: int) -> Optional[Todo]:
        ...

    @abstractmethod
    async def sorted_todo_lists(self) -> List[TodoList]:
        ...

    @abstractmethod
    async def sort_todos(self, todo_list: TodoList) -> List[Todo]:
        ...

    @abstractmethod
    async def create_todo_list(self, title: str) -> bool:
        ...

    @abstractmethod
    async def set_todo_list_title(self, todo_list_id: int, title: str) -> bool:
        ...

    @abstractmethod
    async def delete_todo_list(self, todo_list_id: int) -> bool:
        ...

    @abstractmethod
    async def exists_todo_list_title(self, title: str) -> bool:
        ...

    @abstractmethod
    async def create_todo(self, todo_list_id: int, title: str) -> bool:
        ...

    @abstractmethod
    async def toggle_done_todo(self, todo_list_id: int, todo_id: int) -> bool:
        ...

    @abstractmethod
    async def delete_todo(self, todo_list_id: int, todo_id: int) -> bool:
        ...

    @abstractmethod
    async def complete_all_todos(self, todo_list_id: int) -> bool:
        ...
