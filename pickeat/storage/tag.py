"""Storage of recipe tags."""

from __future__ import annotations

from typing import Any

from ..models import InvalidityKind, InvalidTag, NewTag, Tag
from .core import OtherStorageError, transaction

__all__ = [
    "invalid_from_constraint",
    "get_all_tags",
    "add_tag",
    "get_tag_by_id",
    "replace_tag",
    "delete_tag",
]


def invalid_from_constraint(constraint: str) -> InvalidTag:
    """Tell which field a violated database constraint is about."""
    if constraint == "tags_uq_name":
        return InvalidTag(name=InvalidityKind.ALREADY_USED)
    raise ValueError(f"Unknown DB constraint {constraint}")


def get_all_tags(conn: Any) -> list[Tag]:
    """Return every tag, sorted by name."""
    with transaction(conn) as cur:
        cur.execute("SELECT id, name FROM tags ORDER BY name")
        return [Tag(*row) for row in cur.fetchall()]


def add_tag(conn: Any, new_tag: NewTag) -> int:
    """Insert a tag and return its id."""
    with transaction(conn) as cur:
        cur.execute("INSERT INTO tags (name) VALUES (%s) RETURNING id;", (new_tag.name,))
        row = cur.fetchone()
        if row is None:
            raise OtherStorageError("no rows returned by a query expecting one")
        return row[0]


def get_tag_by_id(conn: Any, tag_id: int) -> Tag | None:
    """Return the tag with that id, or None."""
    with transaction(conn) as cur:
        cur.execute("SELECT id, name FROM tags WHERE id = %s", (tag_id,))
        row = cur.fetchone()
    return Tag(*row) if row is not None else None


def replace_tag(conn: Any, tag_id: int, new_tag: NewTag) -> bool:
    """Overwrite a tag; return False if it does not exist."""
    with transaction(conn) as cur:
        cur.execute("UPDATE tags SET name = %s WHERE id = %s", (new_tag.name, tag_id))
        return cur.rowcount > 0


def delete_tag(conn: Any, tag_id: int) -> bool:
    """Delete a tag; return False if it does not exist."""
    with transaction(conn) as cur:
        cur.execute("DELETE FROM tags WHERE id = %s", (tag_id,))
        return cur.rowcount > 0