"""Todo list repositories."""

from .base import TodoPersistence, has_undone_todos, is_done_todo_list
from .pg_repository import PgTodoRepository
from .sequence import IdSequence
from .session_repository import SessionTodoRepository

__all__ = [
    "IdSequence",
    "PgTodoRepository",
    "SessionTodoRepository",
    "TodoPersistence",
    "has_undone_todos",
    "is_done_todo_list",
]
