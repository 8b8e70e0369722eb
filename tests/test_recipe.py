import datetime
import json

import pytest

from pickeat.models import (
    InvalidityKind,
    InvalidRecipe,
    NewQIngredient,
    NewRecipe,
    RecipeFilters,
    SortMethod,
)
from pickeat.range import Range
from pickeat.storage.core import DatabaseError, OtherStorageError
from pickeat.storage.recipe import (
    add_recipe,
    build_many_recipes_query,
    delete_recipe,
    get_many_recipes,
    get_recipe_author,
    get_recipe_by_id,
    get_recipes_count,
    invalid_from_constraint,
    replace_recipe,
)


class FakeCursor:
    def __init__(self, results, fail_on=None):
        self.results = list(results)
        self.executed = []
        self.rows = []
        self.rowcount = -1
        self.fail_on = fail_on

    def execute(self, sql, params=None):
        self.executed.append((sql, params))
        if self.fail_on is not None and self.fail_on in sql:
            raise self.fail_exc
        result = self.results.pop(0) if self.results else {}
        self.rows = list(result.get("rows", []))
        self.rowcount = result.get("rowcount", len(self.rows))

    def fetchone(self):
        return self.rows.pop(0) if self.rows else None

    def fetchall(self):
        rows, self.rows = self.rows, []
        return rows

    def close(self):
        pass


class FakeConn:
    def __init__(self, results=(), fail_on=None, fail_exc=None):
        self.cur = FakeCursor(results, fail_on)
        self.cur.fail_exc = fail_exc
        self.commits = 0
        self.rollbacks = 0

    def cursor(self):
        return self.cur

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1


def make_recipe(**kwargs):
    base = dict(
        name="Soupe",
        notes="",
        preparation_time_min=10,
        cooking_time_min=20,
        image="",
        instructions=["Couper", "Cuire"],
        n_shares=4,
        shares_unit="parts",
        is_private=False,
    )
    base.update(kwargs)
    return NewRecipe(**base)


def test_invalid_from_constraint_times():
    assert invalid_from_constraint("recipes_ck_times") == InvalidRecipe(
        cooking_time_min=InvalidityKind.BAD_VALUE,
        preparation_time_min=InvalidityKind.BAD_VALUE,
    )


def test_invalid_from_constraint_author():
    assert invalid_from_constraint("recipes_fk_author_id") == InvalidRecipe(
        author_id=InvalidityKind.INVALID_REF
    )


def test_invalid_from_constraint_unknown():
    with pytest.raises(ValueError, match="Unknown DB constraint foo"):
        invalid_from_constraint("foo")


def test_query_without_filters():
    sql, params = build_many_recipes_query(Range(1, 10), RecipeFilters(), SortMethod.NAME, None)
    assert sql.startswith("WITH dummy as (SELECT 1)")
    assert "ORDER BY r.name OFFSET %s LIMIT %s" in sql
    assert params == [None, None, 0, 10]
    assert "INNER JOIN" not in sql


def test_query_placeholders_match_params():
    filters = RecipeFilters(
        search="tarte",
        categories=[1],
        seasons=[2],
        ingredients=[3, 4],
        tags=[5],
        account=6,
        diets=[7],
        only_favs=True,
        only_private=True,
        ids=[8],
    )
    sql, params = build_many_recipes_query(Range(3, 7), filters, SortMethod.RANDOM, 9)
    assert sql.replace("%%", "").count("%s") == len(params)
    assert params[:7] == [[1], [2], [7], 6, [8], 9, 9]
    assert params[7] == "tarte"


def test_query_sort_fields_order():
    filters = RecipeFilters(search="pain", ingredients=[1], tags=[2])
    sql, _ = build_many_recipes_query(Range(1, 5), filters, SortMethod.PUB_DATE_DESC, None)
    assert "ORDER BY sf.rank, if.rank DESC, tf.rank DESC, r.publication_date desc" in sql


def test_query_ignores_favs_without_account():
    filters = RecipeFilters(only_favs=True, only_private=True)
    sql, params = build_many_recipes_query(Range(1, 5), filters, SortMethod.NAME, None)
    assert "only_favs_filter" not in sql
    assert "only_private_filter" not in sql
    assert len(params) == 4


def test_query_random_sort_escapes_modulo():
    sql, _ = build_many_recipes_query(Range(1, 5), RecipeFilters(), SortMethod.RANDOM, None)
    assert "%% get_weekly_seed()" in sql


def test_query_category_join():
    sql, params = build_many_recipes_query(
        Range(1, 5), RecipeFilters(categories=[4, 2]), SortMethod.NAME, 1
    )
    assert "INNER JOIN categ_filter USING (id)" in sql
    assert params[0] == [4, 2]


def test_get_many_recipes_maps_rows():
    ingredients = json.dumps(
        [
            {"id": 3, "name": "Sel", "quantity": 1.5,
             "unit": {"id": 1, "full_name": "Grammes", "short_name": "g"}},
            {"id": 4, "name": "Eau", "quantity": None, "unit": None},
        ]
    )
    diets = json.dumps([{"id": 2, "name": "Vegan", "label": "vegan"}])
    row = (1, "Soupe", "img", True, ingredients, diets, 4, "parts", False, 12)
    conn = FakeConn([{"rows": [row]}])
    result = get_many_recipes(conn, Range(1, 10), RecipeFilters(), SortMethod.NAME, None)
    assert len(result) == 1
    summary = result[0]
    assert summary.name == "Soupe"
    assert summary.total_count == 12
    assert summary.ingredients[0].unit.short_name == "g"
    assert summary.ingredients[1].unit is None
    assert summary.diets[0].label == "vegan"
    assert conn.commits == 1


def test_add_recipe_without_links():
    conn = FakeConn([{"rows": [(42,)]}])
    assert add_recipe(conn, make_recipe(), 7) == 42
    assert len(conn.cur.executed) == 1
    assert conn.cur.executed[0][1][-1] == 7
    assert conn.commits == 1


def test_add_recipe_with_links():
    recipe = make_recipe(
        tags=[1, 2],
        ingredients=[NewQIngredient(5, 2.0, 1), NewQIngredient(6)],
    )
    conn = FakeConn([{"rows": [(42,)]}])
    assert add_recipe(conn, recipe, 7) == 42
    executed = conn.cur.executed
    assert len(executed) == 3
    assert "recipes_tags" in executed[1][0]
    assert executed[1][1] == (42, [1, 2])
    assert executed[2][1] == (42, [5, 6], [2.0, None], [1, None])


def test_add_recipe_constraint_error_rolls_back():
    class Diag:
        sqlstate = "23503"
        message_primary = "violation"
        message_detail = "detail"
        constraint_name = "recipes_fk_author_id"

    class DriverError(Exception):
        diag = Diag()

    conn = FakeConn(fail_on="INSERT INTO recipes", fail_exc=DriverError("boom"))
    with pytest.raises(DatabaseError) as info:
        add_recipe(conn, make_recipe(), 99)
    assert info.value.constraint == "recipes_fk_author_id"
    assert conn.rollbacks == 1
    assert conn.commits == 0


def test_get_recipes_count():
    conn = FakeConn([{"rows": [(17,)]}])
    assert get_recipes_count(conn) == 17


def test_get_recipe_author():
    conn = FakeConn([{"rows": [(3,)]}])
    assert get_recipe_author(conn, 1) == 3


def test_get_recipe_author_missing():
    conn = FakeConn([{"rows": []}])
    with pytest.raises(OtherStorageError):
        get_recipe_author(conn, 1)


def test_get_recipe_by_id_missing():
    conn = FakeConn([{"rows": []}])
    assert get_recipe_by_id(conn, 1, None) is None


def test_get_recipe_by_id_maps_row():
    row = (
        1, "Soupe", "notes", 10, 20, "img", datetime.date(2024, 1, 2), None,
        ["Couper"], 4, "parts", False, 7, True, "Alice",
        [{"id": 1, "name": "Rapide"}],
        [{"id": 2, "name": "Repas"}],
        None,
        [{"id": 3, "name": "Hiver", "label": "winter"}],
        [],
    )
    conn = FakeConn([{"rows": [row]}])
    recipe = get_recipe_by_id(conn, 1, 7)
    assert conn.cur.executed[0][1] == (7, 1)
    assert recipe.author_name == "Alice"
    assert recipe.is_favorite is True
    assert recipe.tags[0].name == "Rapide"
    assert recipe.categories[0].name == "Repas"
    assert recipe.seasons[0].label == "winter"
    assert recipe.diets == []
    assert recipe.instructions == ["Couper"]


def test_replace_recipe_missing():
    conn = FakeConn([{"rowcount": 0}])
    assert replace_recipe(conn, 1, make_recipe()) is False
    assert len(conn.cur.executed) == 1


def test_replace_recipe_empty_links_deletes_all():
    conn = FakeConn([{"rowcount": 1}])
    assert replace_recipe(conn, 1, make_recipe()) is True
    statements = [sql for sql, _ in conn.cur.executed[1:]]
    assert all(sql.startswith("DELETE") for sql in statements)
    assert len(statements) == 5
    assert conn.cur.executed[-1][1] == (1, [])


def test_replace_recipe_with_ingredients():
    recipe = make_recipe(seasons=[2], ingredients=[NewQIngredient(5, 1.0, None)])
    conn = FakeConn([{"rowcount": 1}])
    assert replace_recipe(conn, 1, recipe) is True
    sqls = [sql for sql, _ in conn.cur.executed]
    assert any("INSERT INTO recipes_seasons" in sql for sql in sqls)
    assert any("INSERT INTO recipes_ingredients" in sql for sql in sqls)
    assert conn.cur.executed[-1][1] == (1, [5])


@pytest.mark.parametrize("rowcount,expected", [(1, True), (0, False)])
def test_delete_recipe(rowcount, expected):
    conn = FakeConn([{"rowcount": rowcount}])
    assert delete_recipe(conn, 1) is expected