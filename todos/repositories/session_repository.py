"""Session-backed todo repository.

Todo lists live as plain dicts inside the caller's session mapping so the
session transport can serialize them. Reads hand out freshly built models.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Dict, List, Mapping, MutableMapping, Optional

from todos.models import Todo, TodoList
from todos.repositories.base import TodoPersistence, sort_todo_items, sort_todo_lists, validate_title
from todos.repositories.seed_data import SEED_TODO_LISTS
from todos.repositories.sequence import IdSequence, highest_id
from todos.security import verify_password

logger = logging.getLogger(__name__)

SESSION_KEY = "todo_lists"
ANONYMOUS = ""


class SessionTodoRepository(TodoPersistence):
    """Repository keeping one user's todo lists in their session."""

    def __init__(
        self,
        session: MutableMapping[str, Any],
        *,
        sequence: Optional[IdSequence] = None,
        users: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.username = session.get("username")
        # Lists are keyed by username within the session.
        per_user = session.get(SESSION_KEY)
        if per_user is None:
            per_user = session[SESSION_KEY] = {}
        owner = self.username or ANONYMOUS
        if per_user.get(owner) is None:
            per_user[owner] = copy.deepcopy(SEED_TODO_LISTS)
        self._todo_lists: List[Dict[str, Any]] = per_user[owner]
        session_highest = max((highest_id(todo_lists) for todo_lists in per_user.values()), default=0)
        if sequence is None:
            sequence = IdSequence(session_highest + 1)
        else:
            sequence.advance_past(session_highest)
        self._sequence = sequence
        self._users: Mapping[str, str] = users or {}

    def is_unique_constraint_violation(self, error: BaseException) -> bool:
        """Check whether a failed write was a duplicate-title conflict."""
        return False

    async def authenticate(self, username: str, password: str) -> bool:
        """Check a username and password against stored credentials."""
        password_hash = self._users.get(username)
        if not password_hash:
            return False
        try:
            return verify_password(password, password_hash)
        except Exception:
            logger.exception("Password check failed for session user")
            return False

    async def load_todo_list(self, todo_list_id: int) -> Optional[TodoList]:
        """Get a todo list with its unsorted todos."""
        todo_list = self._find_todo_list(todo_list_id)
        if todo_list is None:
            return None
        return TodoList.model_validate(copy.deepcopy(todo_list))

    async def load_todo(self, todo_list_id: int, todo_id: int) -> Optional[Todo]:
        """Get a single todo from a todo list."""
        todo = self._find_todo(todo_list_id, todo_id)
        if todo is None:
            return None
        return Todo.model_validate(copy.deepcopy(todo))

    async def sorted_todo_lists(self) -> List[TodoList]:
        """Get all todo lists, incomplete ones first."""
        todo_lists = [TodoList.model_validate(item) for item in copy.deepcopy(self._todo_lists)]
        return sort_todo_lists(todo_lists)

    async def sort_todos(self, todo_list: TodoList) -> List[Todo]:
        """Get the todos of a list, undone ones first."""
        return [todo.model_copy(deep=True) for todo in sort_todo_items(todo_list.todos)]

    async def create_todo_list(self, title: str) -> bool:
        """Create a todo list unless the title is taken."""
        validate_title(title)
        if await self.exists_todo_list_title(title):
            logger.debug("Todo list title already exists in session")
            return False

        self._todo_lists.append({
            "id": self._sequence.next_id(),
            "title": title,
            "todos": [],
        })
        return True

    async def set_todo_list_title(self, todo_list_id: int, title: str) -> bool:
        """Rename a todo list."""
        validate_title(title)
        todo_list = self._find_todo_list(todo_list_id)
        if todo_list is None:
            return False
        if any(other["title"] == title for other in self._todo_lists if other is not todo_list):
            return False

        todo_list["title"] = title
        return True

    async def delete_todo_list(self, todo_list_id: int) -> bool:
        """Delete a todo list and its todos."""
        for index, todo_list in enumerate(self._todo_lists):
            if todo_list["id"] == todo_list_id:
                del self._todo_lists[index]
                logger.debug("Deleted todo list %s from session", todo_list_id)
                return True
        return False

    async def exists_todo_list_title(self, title: str) -> bool:
        """Check whether a todo list with this title exists."""
        return any(todo_list["title"] == title for todo_list in self._todo_lists)

    async def create_todo(self, todo_list_id: int, title: str) -> bool:
        """Append a new undone todo to a todo list."""
        todo_list = self._find_todo_list(todo_list_id)
        if todo_list is None:
            return False

        todo_list["todos"].append({
            "id": self._sequence.next_id(),
            "title": title,
            "done": False,
        })
        return True

    async def toggle_done_todo(self, todo_list_id: int, todo_id: int) -> bool:
        """Flip the done flag of a todo."""
        todo = self._find_todo(todo_list_id, todo_id)
        if todo is None:
            return False

        todo["done"] = not todo["done"]
        return True

    async def delete_todo(self, todo_list_id: int, todo_id: int) -> bool:
        """Delete a todo from a todo list."""
        todo_list = self._find_todo_list(todo_list_id)
        if todo_list is None:
            return False

        todos = todo_list["todos"]
        for index, todo in enumerate(todos):
            if todo["id"] == todo_id:
                del todos[index]
                return True
        return False

    async def complete_all_todos(self, todo_list_id: int) -> bool:
        """Mark every todo in a todo list as done."""
        todo_list = self._find_todo_list(todo_list_id)
        if todo_list is None:
            return False

        for todo in todo_list["todos"]:
            if not todo["done"]:
                todo["done"] = True
        return True

    # Lookups below return references into session state, never hand them out.
    def _find_todo_list(self, todo_list_id: int) -> Optional[Dict[str, Any]]:
        return next(
            (todo_list for todo_list in self._todo_lists if todo_list["id"] == todo_list_id),
            None,
        )

    def _find_todo(self, todo_list_id: int, todo_id: int) -> Optional[Dict[str, Any]]:
        todo_list = self._find_todo_list(todo_list_id)
        if todo_list is None:
            return None
        return next((todo for todo in todo_list["todos"] if todo["id"] == todo_id), None)
