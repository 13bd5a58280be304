from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Optional
import logging
import os

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    database_url: Optional[str]
    session_secret: str
    users: Dict[str, str]
    db_pool_min_size: int
    db_pool_max_size: int
    log_level: str


def parse_users(raw: str) -> Dict[str, str]:
    """Parse ``username:hash`` pairs separated by commas."""
    users: Dict[str, str] = {}
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        username, sep, password_hash = item.partition(":")
        if not sep or not username.strip() or not password_hash.strip():
            logger.warning("Ignoring malformed TODO_USERS entry")
            continue
        users[username.strip()] = password_hash.strip()
    return users


@lru_cache
def get_settings() -> Settings:
    database_url = os.getenv("DATABASE_URL") or None
    session_secret = os.getenv("SESSION_SECRET", "dev-session-secret")
    users = parse_users(os.getenv("TODO_USERS", ""))
    db_pool_min_size = int(os.getenv("DB_POOL_MIN_SIZE", "1"))
    db_pool_max_size = int(os.getenv("DB_POOL_MAX_SIZE", "5"))
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    return Settings(
        database_url=database_url,
        session_secret=session_secret,
        users=users,
        db_pool_min_size=db_pool_min_size,
        db_pool_max_size=max(db_pool_min_size, db_pool_max_size),
        log_level=log_level,
    )
