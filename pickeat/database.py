"""Connection settings and initial content of the database."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from .conf import DBConf
from .storage.core import transaction

__all__ = ["connection_string", "add_default_data"]

DEFAULT_PORT = 5432

SEASONS = (
    ("spring", "Printemps"),
    ("summer", "Été"),
    ("fall", "Automne"),
    ("winter", "Hiver"),
)

DIETS = (
    ("vegetarian", "Végétarien"),
    ("vegan", "Vegan"),
)

UNITS = (
    ("Grammes", "g"),
    ("Kilogrammes", "kg"),
    ("Litres", "L"),
    ("Centilitres", "cL"),
    ("Millilitres", "mL"),
    ("Cuillères à soupe", "cas"),
    ("Cuillères à café", "cac"),
    ("Poignées", "poignées"),
    ("Pincées", "pincées"),
    ("Boules", "boules"),
    ("Pots", "pots"),
)

CATEGORIES = ("Petit dej", "Repas", "Gouter", "Dessert", "Pâte")

TAGS = ("Rapide", "Réconfortant", "Grosse faim")


def connection_string(db_conf: DBConf) -> str:
    """Build the PostgreSQL connection URL described by ``db_conf``."""
    port = db_conf.port if db_conf.port is not None else DEFAULT_PORT
    password = db_conf.password or ""
    return (
        f"postgres:///{db_conf.dbname}?host={db_conf.host}&port={port}"
        f"&user={db_conf.user}&password={password}"
    )


def _insert_ignoring_conflicts(
    cursor: Any, table: str, columns: Sequence[str], rows: Sequence[Sequence[Any]]
) -> None:
    row_marks = "(" + ", ".join(["%s"] * len(columns)) + ")"
    values = ", ".join([row_marks] * len(rows))
    params = tuple(value for row in rows for value in row)
    cursor.execute(
        f"INSERT INTO {table} ({', '.join(columns)}) VALUES {values} "
        "ON CONFLICT DO NOTHING;",
        params,
    )


def add_default_data(conn: Any) -> None:
    """Insert the built-in seasons, diets, units, categories and tags."""
    with transaction(conn) as cur:
        _insert_ignoring_conflicts(cur, "seasons", ("label", "name"), SEASONS)
        _insert_ignoring_conflicts(cur, "diets", ("label", "name"), DIETS)
        _insert_ignoring_conflicts(cur, "units", ("full_name", "short_name"), UNITS)
        _insert_ignoring_conflicts(
            cur, "categories", ("name",), [(name,) for name in CATEGORIES]
        )
        _insert_ignoring_conflicts(cur, "tags", ("name",), [(name,) for name in TAGS])