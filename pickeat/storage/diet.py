"""Storage of diets."""

from __future__ import annotations

from typing import Any

from ..models import Diet, InvalidDiet, InvalidityKind, NewDiet
from .core import OtherStorageError, transaction

__all__ = [
    "invalid_from_constraint",
    "get_all_diets",
    "add_diet",
    "get_diet_by_id",
    "replace_diet",
    "delete_diet",
]


def invalid_from_constraint(constraint: str) -> InvalidDiet:
    """Tell which field a violated database constraint is about."""
    if constraint == "diets_uq_name":
        return InvalidDiet(name=InvalidityKind.ALREADY_USED)
    if constraint == "diets_uq_label":
        return InvalidDiet(label=InvalidityKind.ALREADY_USED)
    raise ValueError(f"Unknown DB constraint {constraint}")


def get_all_diets(conn: Any) -> list[Diet]:
    """Return every diet, sorted by name."""
    with transaction(conn) as cur:
        cur.execute("SELECT id, name, label FROM diets ORDER BY name")
        return [Diet(*row) for row in cur.fetchall()]


def add_diet(conn: Any, new_diet: NewDiet) -> int:
    """Insert a diet and return its id."""
    with transaction(conn) as cur:
        cur.execute(
            "INSERT INTO diets (name, label) VALUES (%s, %s) RETURNING id;",
            (new_diet.name, new_diet.label),
        )
        row = cur.fetchone()
        if row is None:
            raise OtherStorageError("no rows returned by a query expecting one")
        return row[0]


def get_diet_by_id(conn: Any, diet_id: int) -> Diet | None:
    """Return the diet with that id, or None."""
    with transaction(conn) as cur:
        cur.execute("SELECT id, name, label FROM diets WHERE id = %s", (diet_id,))
        row = cur.fetchone()
    return Diet(*row) if row is not None else None


def replace_diet(conn: Any, diet_id: int, new_diet: NewDiet) -> bool:
    """Overwrite a diet; return False if it does not exist."""
    with transaction(conn) as cur:
        cur.execute(
            "UPDATE diets SET name = %s, label = %s WHERE id = %s",
            (new_diet.name, new_diet.label, diet_id),
        )
        return cur.rowcount > 0


def delete_diet(conn: Any, diet_id: int) -> bool:
    """Delete a diet; return False if it does not exist."""
    with transaction(conn) as cur:
        cur.execute("DELETE FROM diets WHERE id = %s", (diet_id,))
        return cur.rowcount > 0