"""Lists every brand-new session starts with."""

from __future__ import annotations

from typing import Any, Dict, List

SEED_TODO_LISTS: List[Dict[str, Any]] = [
    {
        "id": 1,
        "title": "Work Todos",
        "todos": [
            {"id": 1, "title": "Get coffee", "done": True},
            {"id": 2, "title": "Chat with co-workers", "done": True},
            {"id": 3, "title": "Duck out of meeting", "done": False},
        ],
    },
    {
        "id": 2,
        "title": "Home Todos",
        "todos": [
            {"id": 4, "title": "Feed the cats", "done": True},
            {"id": 5, "title": "Go to bed", "done": True},
            {"id": 6, "title": "Buy milk", "done": True},
            {"id": 7, "title": "Water the plants", "done": True},
        ],
    },
    {
        "id": 3,
        "title": "Additional Todos",
        "todos": [],
    },
    {
        "id": 4,
        "title": "social todos",
        "todos": [
            {"id": 8, "title": "Go to Libby's birthday party", "done": False},
        ],
    },
]
