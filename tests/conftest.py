"""Shared fixtures for todo persistence tests."""

from typing import Any, Dict, List, Optional, Tuple

import pytest

from todos.db import QueryResult
from todos.settings import get_settings


class ScriptedQuery:
    """Stand-in for ``db_query`` returning canned results per statement."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, tuple]] = []
        self._responses: Dict[str, Any] = {}

    def respond(
        self,
        statement: str,
        *,
        rows: Optional[List[Dict[str, Any]]] = None,
        row_count: Optional[int] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        if error is not None:
            self._responses[statement] = error
            return
        rows = rows or []
        self._responses[statement] = QueryResult(
            rows=rows,
            row_count=len(rows) if row_count is None else row_count,
        )

    async def __call__(self, statement: str, *args: Any) -> QueryResult:
        self.calls.append((statement, args))
        response = self._responses.get(statement)
        if isinstance(response, BaseException):
            raise response
        if response is None:
            return QueryResult()
        return response

    def statements(self) -> List[str]:
        return [statement for statement, _ in self.calls]


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached per process; tests change the environment freely."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def scripted_query() -> ScriptedQuery:
    return ScriptedQuery()
