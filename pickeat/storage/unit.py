"""Storage of measurement units."""

from __future__ import annotations

from typing import Any

from ..models import InvalidityKind, InvalidUnit, NewUnit, Unit
from .core import OtherStorageError, transaction

__all__ = [
    "invalid_from_constraint",
    "get_all_units",
    "add_unit",
    "get_unit_by_id",
    "replace_unit",
    "delete_unit",
]


def invalid_from_constraint(constraint: str) -> InvalidUnit:
    """Tell which field a violated database constraint is about."""
    if constraint == "units_uq_full_name":
        return InvalidUnit(full_name=InvalidityKind.ALREADY_USED)
    if constraint == "units_uq_short_name":
        return InvalidUnit(short_name=InvalidityKind.ALREADY_USED)
    raise ValueError(f"Unknown DB constraint {constraint}")


def get_all_units(conn: Any) -> list[Unit]:
    """Return every unit, sorted by full name."""
    with transaction(conn) as cur:
        cur.execute("SELECT id, full_name, short_name FROM units ORDER BY full_name")
        return [Unit(*row) for row in cur.fetchall()]


def add_unit(conn: Any, new_unit: NewUnit) -> int:
    """Insert a unit and return its id."""
    with transaction(conn) as cur:
        cur.execute(
            "INSERT INTO units (full_name, short_name) VALUES (%s, %s) RETURNING id;",
            (new_unit.full_name, new_unit.short_name),
        )
        row = cur.fetchone()
        if row is None:
            raise OtherStorageError("no rows returned by a query expecting one")
        return row[0]


def get_unit_by_id(conn: Any, unit_id: int) -> Unit | None:
    """Return the unit with that id, or None."""
    with transaction(conn) as cur:
        cur.execute(
            "SELECT id, full_name, short_name FROM units WHERE id = %s", (unit_id,)
        )
        row = cur.fetchone()
    return Unit(*row) if row is not None else None


def replace_unit(conn: Any, unit_id: int, new_unit: NewUnit) -> bool:
    """Overwrite a unit; return False if it does not exist."""
    with transaction(conn) as cur:
        cur.execute(
            "UPDATE units SET full_name = %s, short_name = %s WHERE id = %s",
            (new_unit.full_name, new_unit.short_name, unit_id),
        )
        return cur.rowcount > 0


def delete_unit(conn: Any, unit_id: int) -> bool:
    """Delete a unit; return False if it does not exist."""
    with transaction(conn) as cur:
        cur.execute("DELETE FROM units WHERE id = %s", (unit_id,))
        return cur.rowcount > 0