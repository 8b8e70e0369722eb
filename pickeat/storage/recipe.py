"""Storage of recipes and of their links to tags, seasons, diets and ingredients."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any

from ..models import (
    Category,
    Diet,
    InvalidityKind,
    InvalidRecipe,
    NewQIngredient,
    NewRecipe,
    QIngredient,
    Recipe,
    RecipeFilters,
    RecipeSummary,
    Season,
    SortMethod,
    Tag,
    Unit,
)
from ..range import Range
from .core import IsolationLevel, OtherStorageError, transaction

__all__ = [
    "invalid_from_constraint",
    "build_many_recipes_query",
    "get_many_recipes",
    "add_recipe",
    "get_recipes_count",
    "get_recipe_author",
    "get_recipe_by_id",
    "replace_recipe",
    "delete_recipe",
]

log = logging.getLogger(__name__)

_NO_ROW = "no rows returned by a query that expected to return at least one row"

_BASE_ORDER = {
    SortMethod.RANDOM: (
        "(extract(epoch from publication_date)+id)::bigint %% get_weekly_seed()"
    ),
    SortMethod.NAME: "r.name",
    SortMethod.PUB_DATE_ASC: "r.publication_date asc",
    SortMethod.PUB_DATE_DESC: "r.publication_date desc",
    SortMethod.INGR_COUNT: "array_length(r.ingredients, 1)",
    SortMethod.TOTAL_TIME: "r.preparation_time_min + r.cooking_time_min",
}

# Tables linking a recipe to a list of ids: (table, id column, NewRecipe field).
_LINKS = (
    ("recipes_tags", "tag_id", "tags"),
    ("recipes_seasons", "season_id", "seasons"),
    ("recipes_categories", "category_id", "categories"),
    ("recipes_diets", "diet_id", "diets"),
)

_RECIPE_VALUES = (
    "name",
    "notes",
    "preparation_time_min",
    "cooking_time_min",
    "image",
    "instructions",
    "n_shares",
    "shares_unit",
    "is_private",
)


def invalid_from_constraint(constraint: str) -> InvalidRecipe:
    """Tell which fields a violated database constraint is about."""
    if constraint == "recipes_ck_times":
        return InvalidRecipe(
            cooking_time_min=InvalidityKind.BAD_VALUE,
            preparation_time_min=InvalidityKind.BAD_VALUE,
        )
    if constraint == "recipes_fk_author_id":
        return InvalidRecipe(author_id=InvalidityKind.INVALID_REF)
    raise ValueError(f"Unknown DB constraint {constraint}")


def _id_filter(name: str, select: str, table: str, column: str) -> str:
    return (
        f", {name} as (SELECT distinct({select}) as id FROM {table} "
        f"WHERE {column} = any(%s))"
    )


def build_many_recipes_query(
    recipe_range: Range,
    filters: RecipeFilters,
    sort_method: SortMethod,
    account_id: int | None,
) -> tuple[str, list[Any]]:
    """Build the SQL text and parameters of a recipe search."""
    parts = ["WITH dummy as (SELECT 1)"]
    params: list[Any] = []
    joins: list[str] = []
    sorting: list[str] = []

    simple = (
        (filters.categories, "categ_filter", "recipe_id", "recipes_categories", "category_id"),
        (filters.seasons, "season_filter", "recipe_id", "recipes_seasons", "season_id"),
        (filters.diets, "diet_filter", "recipe_id", "recipes_diets", "diet_id"),
    )
    for ids, name, select, table, column in simple:
        if ids is not None:
            parts.append(_id_filter(name, select, table, column))
            params.append(list(ids))
            joins.append(f"INNER JOIN {name} USING (id)")

    if filters.account is not None:
        parts.append(
            ", account_filter as (SELECT distinct(id) as id FROM recipes "
            "WHERE author_id = %s)"
        )
        params.append(filters.account)
        joins.append("INNER JOIN account_filter USING (id)")

    if filters.ids is not None:
        parts.append(_id_filter("ids_filter", "id", "recipes", "id"))
        params.append(list(filters.ids))
        joins.append("INNER JOIN ids_filter USING (id)")

    if filters.only_favs and account_id is not None:
        parts.append(
            ", only_favs_filter as (SELECT distinct(recipe_id) as id "
            "FROM accounts_fav_recipes WHERE account_id = %s)"
        )
        params.append(account_id)
        joins.append("INNER JOIN only_favs_filter USING (id)")

    if filters.only_private and account_id is not None:
        parts.append(
            ", only_private_filter as (SELECT distinct(id) as id FROM recipes "
            "WHERE is_private = 't' AND author_id = %s)"
        )
        params.append(account_id)
        joins.append("INNER JOIN only_private_filter USING (id)")

    # The order of the ranked filters sets the order of the sort fields.
    if filters.search is not None:
        parts.append(
            ", search_filter as (SELECT r.id, AVG(w.word <<-> unaccent(r.name)) AS rank "
            "FROM (SELECT UNNEST(STRING_TO_ARRAY(unaccent(%s), ' ')) as word) as w "
            "CROSS JOIN recipes as r GROUP BY r.id "
            "HAVING MAX(w.word <<-> unaccent(r.name)) <= 0.7)"
        )
        params.append(filters.search)
        joins.append("INNER JOIN search_filter as sf USING (id)")
        sorting.append("sf.rank")

    if filters.ingredients is not None:
        parts.append(
            ", ingredient_filter as (SELECT recipe_id as id, count(*) as rank "
            "FROM recipes_ingredients WHERE ingredient_id = any(%s) GROUP BY id)"
        )
        params.append(list(filters.ingredients))
        joins.append("INNER JOIN ingredient_filter as if USING (id)")
        sorting.append("if.rank DESC")

    if filters.tags is not None:
        parts.append(
            ", tag_filter as (SELECT recipe_id as id, count(*) as rank "
            "FROM recipes_tags WHERE tag_id = any(%s) GROUP BY id)"
        )
        params.append(list(filters.tags))
        joins.append("INNER JOIN tag_filter tf USING (id)")
        sorting.append("tf.rank DESC")

    sorting.append(_BASE_ORDER[sort_method])

    parts.append(
        " SELECT r.id, r.name, r.image, is_recipe_in_account_favs(r.id, %s) as is_favorite, "
        "to_json(r.ingredients), to_json(r.diets), n_shares, shares_unit, is_private, "
        "count(*) OVER() AS total_count FROM recipes_full AS r"
    )
    params.append(account_id)
    if joins:
        parts.append(" " + " ".join(joins))
    parts.append(" WHERE is_private = 'f' OR author_id = %s")
    params.append(account_id)
    parts.append(" ORDER BY " + ", ".join(sorting))
    parts.append(" OFFSET %s LIMIT %s")
    params.append(recipe_range.start - 1)
    params.append(recipe_range.end - recipe_range.start + 1)
    return "".join(parts), params


def _json_list(value: Any) -> list[dict[str, Any]]:
    if value is None:
        return []
    if isinstance(value, (str, bytes, bytearray)):
        value = json.loads(value)
    return list(value) if value is not None else []


def _unit(value: dict[str, Any] | None) -> Unit | None:
    if value is None:
        return None
    return Unit(value["id"], value["full_name"], value["short_name"])


def _ingredients(value: Any) -> list[QIngredient]:
    return [
        QIngredient(item["id"], item["name"], item.get("quantity"), _unit(item.get("unit")))
        for item in _json_list(value)
    ]


def _diets(value: Any) -> list[Diet]:
    return [Diet(item["id"], item["name"], item.get("label")) for item in _json_list(value)]


def _summary(row: Sequence[Any]) -> RecipeSummary:
    (
        recipe_id,
        name,
        image,
        is_favorite,
        ingredients,
        diets,
        n_shares,
        shares_unit,
        is_private,
        total_count,
    ) = row
    return RecipeSummary(
        id=recipe_id,
        name=name,
        image=image,
        n_shares=n_shares,
        shares_unit=shares_unit,
        is_favorite=bool(is_favorite),
        is_private=bool(is_private),
        diets=_diets(diets),
        ingredients=_ingredients(ingredients),
        total_count=total_count,
    )


def get_many_recipes(
    conn: Any,
    recipe_range: Range,
    filters: RecipeFilters,
    sort_method: SortMethod,
    account_id: int | None,
) -> list[RecipeSummary]:
    """Return the recipes matching ``filters`` within ``recipe_range``."""
    sql, params = build_many_recipes_query(recipe_range, filters, sort_method, account_id)
    log.debug("%s", sql)
    with transaction(conn) as cur:
        cur.execute(sql, params)
        return [_summary(row) for row in cur.fetchall()]


def _ingredient_arrays(
    ingredients: Sequence[NewQIngredient],
) -> tuple[list[int], list[float | None], list[int | None]]:
    return (
        [item.id for item in ingredients],
        [item.quantity for item in ingredients],
        [item.unit_id for item in ingredients],
    )


def _recipe_values(new_recipe: NewRecipe) -> list[Any]:
    values = [getattr(new_recipe, name) for name in _RECIPE_VALUES]
    values[_RECIPE_VALUES.index("instructions")] = list(new_recipe.instructions)
    return values


def add_recipe(conn: Any, new_recipe: NewRecipe, user_id: int) -> int:
    """Insert a recipe with its links and return its id."""
    with transaction(conn, IsolationLevel.DEFAULT) as cur:
        cur.execute(
            "INSERT INTO recipes (name, notes, preparation_time_min, cooking_time_min, "
            "image, instructions, n_shares, shares_unit, is_private, author_id) "
            "VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s) RETURNING id;",
            (*_recipe_values(new_recipe), user_id),
        )
        row = cur.fetchone()
        if row is None:
            raise OtherStorageError(_NO_ROW)
        new_id = row[0]

        for table, column, attr in (
            ("recipes_tags", "tag_id", "tags"),
            ("recipes_categories", "category_id", "categories"),
            ("recipes_seasons", "season_id", "seasons"),
            ("recipes_diets", "diet_id", "diets"),
        ):
            ids = list(getattr(new_recipe, attr))
            if ids:
                cur.execute(
                    f"INSERT INTO {table} ({column}, recipe_id) "
                    f"SELECT {column}, %s FROM UNNEST(%s::int[]) as {column};",
                    (new_id, ids),
                )

        if new_recipe.ingredients:
            ingr_ids, qtys, unit_ids = _ingredient_arrays(new_recipe.ingredients)
            cur.execute(
                "INSERT INTO recipes_ingredients "
                "(recipe_id, ingredient_id, quantity, unit_id, ingredient_index) "
                "SELECT %s, ingredient_id, quantity, unit_id, row_number() over() "
                "FROM UNNEST(%s::int[], %s::real[], %s::int[]) "
                "AS x(ingredient_id, quantity, unit_id)",
                (new_id, ingr_ids, qtys, unit_ids),
            )
    return new_id


def get_recipes_count(conn: Any) -> int:
    """Return the number of stored recipes."""
    with transaction(conn) as cur:
        cur.execute("SELECT count(*) FROM recipes")
        row = cur.fetchone()
    if row is None:
        raise OtherStorageError(_NO_ROW)
    return row[0]


def get_recipe_author(conn: Any, recipe_id: int) -> int:
    """Return the id of the account that wrote the recipe."""
    with transaction(conn) as cur:
        cur.execute("SELECT author_id FROM recipes WHERE id = %s", (recipe_id,))
        row = cur.fetchone()
    if row is None:
        raise OtherStorageError(_NO_ROW)
    return row[0]


def get_recipe_by_id(conn: Any, recipe_id: int, account_id: int | None) -> Recipe | None:
    """Return the full recipe with that id, or None."""
    with transaction(conn) as cur:
        cur.execute(
            "SELECT r.id, r.name, r.notes, r.preparation_time_min, r.cooking_time_min, "
            "r.image, r.publication_date, r.update_date, r.instructions, r.n_shares, "
            "r.shares_unit, r.is_private, r.author_id, "
            "is_recipe_in_account_favs(r.id, %s), a.display_name, "
            "to_json(r.tags), to_json(r.categories), to_json(r.diets), "
            "to_json(r.seasons), to_json(r.ingredients) "
            "FROM recipes_full r INNER JOIN accounts a ON a.id = r.author_id "
            "WHERE r.id = %s",
            (account_id, recipe_id),
        )
        row = cur.fetchone()
    if row is None:
        return None
    (
        rid,
        name,
        notes,
        preparation_time_min,
        cooking_time_min,
        image,
        publication_date,
        update_date,
        instructions,
        n_shares,
        shares_unit,
        is_private,
        author_id,
        is_favorite,
        author_name,
        tags,
        categories,
        diets,
        seasons,
        ingredients,
    ) = row
    return Recipe(
        id=rid,
        name=name,
        notes=notes,
        preparation_time_min=preparation_time_min,
        cooking_time_min=cooking_time_min,
        image=image,
        publication_date=publication_date,
        update_date=update_date,
        instructions=list(instructions or []),
        n_shares=n_shares,
        shares_unit=shares_unit,
        is_favorite=bool(is_favorite),
        is_private=bool(is_private),
        ingredients=_ingredients(ingredients),
        categories=[Category(c["id"], c["name"]) for c in _json_list(categories)],
        tags=[Tag(t["id"], t["name"]) for t in _json_list(tags)],
        seasons=[Season(s["id"], s["name"], s["label"]) for s in _json_list(seasons)],
        author_id=author_id,
        author_name=author_name,
        diets=_diets(diets),
    )


def replace_recipe(conn: Any, recipe_id: int, new_recipe: NewRecipe) -> bool:
    """Overwrite a recipe and its links; return False if it does not exist."""
    with transaction(conn) as cur:
        cur.execute(
            "UPDATE recipes SET name = %s, notes = %s, preparation_time_min = %s, "
            "cooking_time_min = %s, image = %s, instructions = %s, n_shares = %s, "
            "shares_unit = %s, is_private = %s, update_date = CURRENT_DATE "
            "WHERE id = %s",
            (*_recipe_values(new_recipe), recipe_id),
        )
        if cur.rowcount <= 0:
            return False

        for table, column, attr in _LINKS:
            ids = list(getattr(new_recipe, attr))
            if ids:
                cur.execute(
                    f"INSERT INTO {table} ({column}, recipe_id) "
                    f"SELECT {column}, %s FROM UNNEST(%s::int[]) as {column} "
                    "ON CONFLICT DO NOTHING;",
                    (recipe_id, ids),
                )
            cur.execute(
                f"DELETE FROM {table} WHERE recipe_id = %s "
                f"AND {column} <> ALL(%s::int[]);",
                (recipe_id, ids),
            )

        ingr_ids, qtys, unit_ids = _ingredient_arrays(new_recipe.ingredients)
        if new_recipe.ingredients:
            cur.execute(
                "WITH input AS (SELECT i_id, q, u_id FROM "
                "UNNEST(%s::int[], %s::real[], %s::int[]) AS x(i_id, q, u_id)) "
                "INSERT INTO recipes_ingredients as ri "
                "(recipe_id, ingredient_id, quantity, unit_id, ingredient_index) "
                "SELECT %s, i_id, q, u_id, row_number() over() FROM input "
                "ON CONFLICT(recipe_id, ingredient_id) DO UPDATE "
                "SET quantity = EXCLUDED.quantity, unit_id = EXCLUDED.unit_id, "
                "ingredient_index = EXCLUDED.ingredient_index "
                "WHERE ri.recipe_id = %s AND ri.ingredient_id = EXCLUDED.ingredient_id;",
                (ingr_ids, qtys, unit_ids, recipe_id, recipe_id),
            )
        cur.execute(
            "DELETE FROM recipes_ingredients WHERE recipe_id = %s "
            "AND ingredient_id <> ALL(%s::int[]);",
            (recipe_id, ingr_ids),
        )
    return True


def delete_recipe(conn: Any, recipe_id: int) -> bool:
    """Delete a recipe; return False if it does not exist."""
    with transaction(conn) as cur:
        cur.execute("DELETE FROM recipes WHERE id = %s", (recipe_id,))
        return cur.rowcount > 0