"""FastAPI dependencies for todo persistence."""

from fastapi import Request

from todos import db
from todos.repositories import IdSequence, PgTodoRepository, SessionTodoRepository, TodoPersistence
from todos.settings import get_settings


def get_id_sequence(request: Request) -> IdSequence:
    """Process-wide sequence stored on the application state."""
    sequence = getattr(request.app.state, "id_sequence", None)
    if sequence is None:
        sequence = IdSequence()
        request.app.state.id_sequence = sequence
    return sequence


def get_persistence(request: Request) -> TodoPersistence:
    """Pick the Postgres repository when the pool is up, else the session store."""
    username = request.session.get("username")
    if db.is_enabled():
        return PgTodoRepository(username)
    return SessionTodoRepository(
        request.session,
        sequence=get_id_sequence(request),
        users=get_settings().users,
    )
