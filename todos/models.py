"""Todo list data models using Pydantic."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class Todo(BaseModel):
    """A titled task with a completion flag."""

    id: int
    title: str
    done: bool = False

    model_config = ConfigDict(from_attributes=True)


class TodoList(BaseModel):
    """Named, ordered collection of todos owned by one user."""

    id: int
    title: str
    todos: List[Todo] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)
