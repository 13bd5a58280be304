"""Postgres-backed todo repository.

Every operation is scoped to ``username`` in its WHERE clause, so ids owned
by other users look exactly like missing ids. Statements run in autocommit
mode one at a time; nothing here opens a transaction.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

import asyncpg

from todos import db
from todos.db import QueryResult
from todos.models import Todo, TodoList
from todos.repositories.base import TodoPersistence, sort_todo_items, sort_todo_lists, validate_title
from todos.security import verify_password

logger = logging.getLogger(__name__)

QueryExecutor = Callable[..., Awaitable[QueryResult]]

UNIQUE_VIOLATION_SQLSTATE = "23505"
_UNIQUE_VIOLATION_MESSAGE = re.compile(r"duplicate key value violates unique constraint")

FIND_HASHED_PASSWORD = "SELECT password FROM users WHERE username = $1"

FIND_TODOLIST = "SELECT id, title FROM todolists WHERE id = $1 AND username = $2"
FIND_TODOLIST_TODOS = (
    "SELECT id, title, done, todolist_id FROM todos "
    "WHERE todolist_id = $1 AND username = $2"
)
FIND_TODOLISTS = "SELECT id, title FROM todolists WHERE username = $1"
FIND_USER_TODOS = "SELECT id, title, done, todolist_id FROM todos WHERE username = $1"
FIND_TODO = (
    "SELECT id, title, done, todolist_id FROM todos "
    "WHERE todolist_id = $1 AND id = $2 AND username = $3"
)
TODOLIST_TITLE_EXISTS = "SELECT null FROM todolists WHERE title = $1 AND username = $2"

CREATE_TODOLIST = "INSERT INTO todolists (title, username) VALUES ($1, $2)"
UPDATE_TODOLIST_TITLE = "UPDATE todolists SET title = $1 WHERE id = $2 AND username = $3"
DELETE_TODOLIST = "DELETE FROM todolists WHERE id = $1 AND username = $2"

CREATE_TODO = (
    "INSERT INTO todos (todolist_id, title, username) "
    "SELECT id, $2, username FROM todolists WHERE id = $1 AND username = $3"
)
TOGGLE_DONE = (
    "UPDATE todos SET done = NOT done "
    "WHERE todolist_id = $1 AND id = $2 AND username = $3"
)
DELETE_TODO = "DELETE FROM todos WHERE todolist_id = $1 AND id = $2 AND username = $3"
COMPLETE_ALL_TODOS = (
    "UPDATE todos SET done = TRUE "
    "WHERE todolist_id = $1 AND NOT done AND username = $2"
)


class PgTodoRepository(TodoPersistence):
    """Repository issuing parameterized SQL for one user's todo lists."""

    def __init__(self, username: Optional[str], *, query: Optional[QueryExecutor] = None) -> None:
        self.username = username
        self._query = query or db.db_query

    def is_unique_constraint_violation(self, error: BaseException) -> bool:
        """Check whether a failed write was a duplicate-title conflict."""
        if isinstance(error, asyncpg.UniqueViolationError):
            return True
        if getattr(error, "sqlstate", None) == UNIQUE_VIOLATION_SQLSTATE:
            return True
        return bool(_UNIQUE_VIOLATION_MESSAGE.search(str(error)))

    async def authenticate(self, username: str, password: str) -> bool:
        """Check a username and password against stored credentials."""
        try:
            result = await self._query(FIND_HASHED_PASSWORD, username)
            if result.row_count == 0 or not result.rows:
                return False
            return verify_password(password, result.rows[0]["password"])
        except Exception:
            logger.exception("Credential lookup failed")
            return False

    async def load_todo_list(self, todo_list_id: int) -> Optional[TodoList]:
        """Get a todo list with its unsorted todos."""
        # Two independent statements; a delete landing between them is not guarded against.
        result_list, result_todos = await self._query_both(
            self._query(FIND_TODOLIST, todo_list_id, self.username),
            self._query(FIND_TODOLIST_TODOS, todo_list_id, self.username),
        )
        if not result_list.rows:
            return None

        row = result_list.rows[0]
        return TodoList(
            id=row["id"],
            title=row["title"],
            todos=[Todo.model_validate(todo) for todo in result_todos.rows],
        )

    async def load_todo(self, todo_list_id: int, todo_id: int) -> Optional[Todo]:
        """Get a single todo from a todo list."""
        result = await self._query(FIND_TODO, todo_list_id, todo_id, self.username)
        if not result.rows:
            return None
        return Todo.model_validate(result.rows[0])

    async def sorted_todo_lists(self) -> List[TodoList]:
        """Get all todo lists, incomplete ones first."""
        result_lists, result_todos = await self._query_both(
            self._query(FIND_TODOLISTS, self.username),
            self._query(FIND_USER_TODOS, self.username),
        )

        todos_by_list: Dict[Any, List[Todo]] = {}
        for row in result_todos.rows:
            todos_by_list.setdefault(row["todolist_id"], []).append(Todo.model_validate(row))

        todo_lists = [
            TodoList(id=row["id"], title=row["title"], todos=todos_by_list.get(row["id"], []))
            for row in result_lists.rows
        ]
        return sort_todo_lists(todo_lists)

    async def sort_todos(self, todo_list: TodoList) -> List[Todo]:
        """Get the todos of a list, undone ones first."""
        result = await self._query(FIND_TODOLIST_TODOS, todo_list.id, self.username)
        return sort_todo_items(Todo.model_validate(row) for row in result.rows)

    async def create_todo_list(self, title: str) -> bool:
        """Create a todo list unless the title is taken."""
        validate_title(title)
        try:
            result = await self._query(CREATE_TODOLIST, title, self.username)
        except Exception as exc:
            if self.is_unique_constraint_violation(exc):
                logger.debug("Todo list title already exists")
                return False
            raise
        return result.row_count > 0

    async def set_todo_list_title(self, todo_list_id: int, title: str) -> bool:
        """Rename a todo list."""
        validate_title(title)
        try:
            result = await self._query(UPDATE_TODOLIST_TITLE, title, todo_list_id, self.username)
        except Exception as exc:
            if self.is_unique_constraint_violation(exc):
                return False
            raise
        return result.row_count > 0

    async def delete_todo_list(self, todo_list_id: int) -> bool:
        """Delete a todo list and its todos."""
        result = await self._query(DELETE_TODOLIST, todo_list_id, self.username)
        if result.row_count:
            logger.debug("Deleted todo list %s", todo_list_id)
        return result.row_count > 0

    async def exists_todo_list_title(self, title: str) -> bool:
        """Check whether a todo list with this title exists."""
        result = await self._query(TODOLIST_TITLE_EXISTS, title, self.username)
        return result.row_count > 0

    async def create_todo(self, todo_list_id: int, title: str) -> bool:
        """Append a new undone todo to a todo list."""
        result = await self._query(CREATE_TODO, todo_list_id, title, self.username)
        return result.row_count > 0

    async def toggle_done_todo(self, todo_list_id: int, todo_id: int) -> bool:
        """Flip the done flag of a todo."""
        result = await self._query(TOGGLE_DONE, todo_list_id, todo_id, self.username)
        return result.row_count > 0

    async def delete_todo(self, todo_list_id: int, todo_id: int) -> bool:
        """Delete a todo from a todo list."""
        result = await self._query(DELETE_TODO, todo_list_id, todo_id, self.username)
        return result.row_count > 0

    async def complete_all_todos(self, todo_list_id: int) -> bool:
        """Mark every todo in a todo list as done."""
        result = await self._query(COMPLETE_ALL_TODOS, todo_list_id, self.username)
        if result.row_count > 0:
            return True
        # Nothing left to complete; still report whether the list exists.
        existing = await self._query(FIND_TODOLIST, todo_list_id, self.username)
        return existing.row_count > 0

    async def _query_both(
        self, first: Awaitable[QueryResult], second: Awaitable[QueryResult]
    ) -> Tuple[QueryResult, QueryResult]:
        # Both queries always finish; the first failure is re-raised once both are collected.
        results = await asyncio.gather(first, second, return_exceptions=True)
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return results[0], results[1]
