"""Todo list persistence with session-store and Postgres backends."""
