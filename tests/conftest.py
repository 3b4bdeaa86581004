"""Pytest configuration and shared fixtures."""

import pytest

from minidb.core.database import MiniDB

MINIDB_ENV_VARS = ("MINIDB_PROJECT_DIR", "MINIDB_SNAPSHOT_KEY", "MINIDB_LOG_LEVEL")


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep MiniDB environment overrides from leaking into tests."""
    for name in MINIDB_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def db():
    """Empty in-memory database."""
    return MiniDB()


@pytest.fixture
def blog_db(db):
    """Database with users, posts and comments linked by foreign keys.

    posts.author_id -> users (cascade), comments.post_id -> posts (cascade),
    comments.user_id -> users (set-null).
    """
    db.create_table("users", {"name": "string", "age": "number"})
    db.create_table(
        "posts",
        {"title": "string", "author_id": "uuid"},
        {"author_id": {"references": "users", "onDelete": "cascade"}},
    )
    db.create_table(
        "comments",
        {"body": "string", "post_id": "uuid", "user_id": "uuid"},
        {
            "post_id": {"references": "posts.id", "onDelete": "cascade"},
            "user_id": {"references": "users", "onDelete": "set-null"},
        },
    )
    return db
