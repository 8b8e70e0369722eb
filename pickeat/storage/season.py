"""Read access to the seasons."""

from __future__ import annotations

from typing import Any

from ..models import Season
from .core import transaction

__all__ = ["get_all_seasons", "get_season_by_id"]


def get_all_seasons(conn: Any) -> list[Season]:
    """Return every season in id order."""
    with transaction(conn) as cur:
        cur.execute("SELECT id, name, label FROM seasons ORDER BY id")
        return [Season(*row) for row in cur.fetchall()]


def get_season_by_id(conn: Any, season_id: int) -> Season | None:
    """Return the season with that id, or None."""
    with transaction(conn) as cur:
        cur.execute("SELECT id, name, label FROM seasons WHERE id = %s", (season_id,))
        row = cur.fetchone()
    return Season(*row) if row is not None else None