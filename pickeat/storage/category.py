"""Storage of recipe categories."""

from __future__ import annotations

from typing import Any

from ..models import Category, InvalidCategory, InvalidityKind, NewCategory
from .core import OtherStorageError, transaction

__all__ = [
    "invalid_from_constraint",
    "get_all_categories",
    "add_category",
    "get_category_by_id",
    "replace_category",
    "delete_category",
]


def invalid_from_constraint(constraint: str) -> InvalidCategory:
    """Tell which field a violated database constraint is about."""
    if constraint == "categories_uq_name":
        return InvalidCategory(name=InvalidityKind.ALREADY_USED)
    raise ValueError(f"Unknown DB constraint {constraint}")


def get_all_categories(conn: Any) -> list[Category]:
    """Return every category, sorted by name."""
    with transaction(conn) as cur:
        cur.execute("SELECT id, name FROM categories ORDER BY name")
        return [Category(*row) for row in cur.fetchall()]


def add_category(conn: Any, new_category: NewCategory) -> int:
    """Insert a category and return its id."""
    with transaction(conn) as cur:
        cur.execute(
            "INSERT INTO categories (name) VALUES (%s) RETURNING id;",
            (new_category.name,),
        )
        row = cur.fetchone()
        if row is None:
            raise OtherStorageError("no rows returned by a query expecting one")
        return row[0]


def get_category_by_id(conn: Any, category_id: int) -> Category | None:
    """Return the category with that id, or None."""
    with transaction(conn) as cur:
        cur.execute("SELECT id, name FROM categories WHERE id = %s", (category_id,))
        row = cur.fetchone()
    return Category(*row) if row is not None else None


def replace_category(conn: Any, category_id: int, new_category: NewCategory) -> bool:
    """Overwrite a category; return False if it does not exist."""
    with transaction(conn) as cur:
        cur.execute(
            "UPDATE categories SET name = %s WHERE id = %s",
            (new_category.name, category_id),
        )
        return cur.rowcount > 0


def delete_category(conn: Any, category_id: int) -> bool:
    """Delete a category; return False if it does not exist."""
    with transaction(conn) as cur:
        cur.execute("DELETE FROM categories WHERE id = %s", (category_id,))
        return cur.rowcount > 0