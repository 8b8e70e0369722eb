"""Storage of ingredients."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from ..models import Ingredient, InvalidIngredient, InvalidityKind, NewIngredient, Unit
from .core import OtherStorageError, transaction

__all__ = [
    "invalid_from_constraint",
    "get_all_ingredients",
    "add_ingredient",
    "get_ingredient_by_id",
    "replace_ingredient",
    "delete_ingredient",
]

_SELECT = (
    "SELECT id, name, (default_unit).id, (default_unit).full_name, "
    "(default_unit).short_name FROM ingredients_full"
)


def _to_ingredient(row: Sequence[Any]) -> Ingredient:
    ingredient_id, name, unit_id, full_name, short_name = row
    unit = Unit(unit_id, full_name, short_name) if unit_id is not None else None
    return Ingredient(ingredient_id, name, unit)


def invalid_from_constraint(constraint: str) -> InvalidIngredient:
    """Tell which field a violated database constraint is about."""
    if constraint == "ingredients_uq_name":
        return InvalidIngredient(name=InvalidityKind.ALREADY_USED)
    if constraint == "ingredients_fk_default_unit":
        return InvalidIngredient(default_unit_id=InvalidityKind.INVALID_REF)
    raise ValueError(f"Unknown DB constraint {constraint}")


def get_all_ingredients(conn: Any) -> list[Ingredient]:
    """Return every ingredient with its default unit, sorted by name."""
    with transaction(conn) as cur:
        cur.execute(f"{_SELECT} ORDER BY name")
        return [_to_ingredient(row) for row in cur.fetchall()]


def add_ingredient(conn: Any, new_ingredient: NewIngredient) -> int:
    """Insert an ingredient and return its id."""
    with transaction(conn) as cur:
        cur.execute(
            "INSERT INTO ingredients (name, default_unit_id) VALUES (%s, %s) RETURNING id;",
            (new_ingredient.name, new_ingredient.default_unit_id),
        )
        row = cur.fetchone()
        if row is None:
            raise OtherStorageError("no rows returned by a query expecting one")
        return row[0]


def get_ingredient_by_id(conn: Any, ingredient_id: int) -> Ingredient | None:
    """Return the ingredient with that id, or None."""
    with transaction(conn) as cur:
        cur.execute(f"{_SELECT} WHERE id = %s", (ingredient_id,))
        row = cur.fetchone()
    return _to_ingredient(row) if row is not None else None


def replace_ingredient(conn: Any, ingredient_id: int, new_ingredient: NewIngredient) -> bool:
    """Overwrite an ingredient; return False if it does not exist."""
    with transaction(conn) as cur:
        cur.execute(
            "UPDATE ingredients SET name = %s, default_unit_id = %s WHERE id = %s",
            (new_ingredient.name, new_ingredient.default_unit_id, ingredient_id),
        )
        return cur.rowcount > 0


def delete_ingredient(conn: Any, ingredient_id: int) -> bool:
    """Delete an ingredient; return False if it does not exist."""
    with transaction(conn) as cur:
        cur.execute("DELETE FROM ingredients WHERE id = %s", (ingredient_id,))
        return cur.rowcount > 0