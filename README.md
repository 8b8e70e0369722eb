# pickeat

The backend core of a recipe catalogue. It holds recipes together with their
ingredients, units, categories, tags, seasons and diets. The package covers:

- **Configuration.** `pickeat.conf.parse_conf` loads a TOML file into typed,
  frozen sections.
- **Domain models.** `pickeat.models` holds recipes, ingredients with
  quantities, units, diets, seasons, tags, categories, search filters, sort
  methods, and the `Invalid*` records that tell which field of an input was
  rejected and why.
- **Pagination ranges.** `pickeat.range.Range` is a 1-based range, inclusive
  on both ends, that raises a specific `RangeError` subclass when a rule is
  broken.
- **PostgreSQL storage.** The functions in `pickeat.storage.*` take an open
  database connection and run the listing, lookup, insert, replace and delete
  queries for each kind of record.
- **E-mail.** `pickeat.email.EmailSender` sends account-validation and
  password-reset messages through an HTTP e-mail API.

## Configuration

The configuration file is TOML with four sections: `[database]`, `[redis]`,
`[sessions]` and `[email]`. All four are required. Unknown keys in a section
are rejected. `port` and `password` may be left out of `[database]` and
`[redis]`.

```toml
[database]
user = "pickeat"
dbname = "pickeat"
host = "localhost"
port = 5432
password = "password"

[redis]
host = "localhost"
port = 6379

[sessions]
cookie_secret = "secret"
cookie_secure = true

[email]
api_key = "placeholder"
```

```python
from pickeat.conf import parse_conf, ConfError

try:
    conf = parse_conf("pickeat.toml")
except ConfError as err:
    raise SystemExit(f"bad configuration: {err}")

print(conf.database.host, conf.database.port)
```

`parse_conf` raises `ConfError` when the file cannot be opened, is not valid
TOML, lacks a section or a required field, has an unknown field, or holds a
value of the wrong kind.

## Database

`pickeat.database.connection_string` builds a PostgreSQL connection URL from a
`DBConf`. When no port is set, it uses 5432; a missing password becomes an
empty string.

`pickeat.database.add_default_data(conn)` seeds the reference tables with the
built-in seasons, diets, units, categories and tags. Rows that conflict with
existing ones are left unchanged.

The storage functions accept any DB-API connection to PostgreSQL that uses the
`%s` parameter style: they call `conn.cursor()`, then `commit()` on success or
`rollback()` on failure. Each module follows the same pattern:

```python
from pickeat.models import NewTag
from pickeat.storage import tag

new_id = tag.add_tag(conn, NewTag(name="Rapide"))
print(tag.get_tag_by_id(conn, new_id))      # Tag(...) or None
tag.replace_tag(conn, new_id, NewTag(name="Très rapide"))  # True if found
tag.delete_tag(conn, new_id)                # True if found
```

The modules are `category`, `diet`, `ingredient`, `season` (read only),
`tag`, `unit` and `recipe`. `pickeat.storage.core.transaction(conn,
isolation_level)` is the context manager they share; it yields a cursor and
can run the transaction at `IsolationLevel.REPEATABLE_READ`.

### Errors

Database failures are raised as subclasses of
`pickeat.storage.core.StorageError`:

- `UnreachableError` means the database cannot be reached. This is the only
  case where `is_retryable()` is true.
- `DatabaseError` carries the server's `code`, `message`, `detail` and the
  violated `constraint`.
- `OtherStorageError` covers everything else.

`pickeat.storage.core.to_storage_error` does this mapping for any exception.

Each storage module except `season` has an `invalid_from_constraint` function.
It turns a violated constraint name into the matching `Invalid*` model, whose
fields hold an `InvalidityKind`, and raises `ValueError` for a constraint it
does not know.

## Recipes

`pickeat.storage.recipe.get_many_recipes` returns one page of
`RecipeSummary` objects. It takes:

- a `Range`;
- `RecipeFilters` for search text, categories, seasons, diets, ingredients,
  tags, author, explicit ids, favourites only and private only;
- a `SortMethod`;
- the id of the current account, or `None`.

Recipes ranked by search text, ingredients or tags are ordered by that rank
first, then by the sort method. The query itself comes from
`build_many_recipes_query`, which returns the SQL text and its parameters, so
it can be inspected without a database.

```python
from pickeat.models import RecipeFilters, SortMethod
from pickeat.range import Range, RangeError
from pickeat.storage import recipe

page = Range(1, 20)
try:
    page.validate(50, recipe.get_recipes_count(conn))
except RangeError as err:
    print(err)
else:
    summaries = recipe.get_many_recipes(
        conn, page, RecipeFilters(), SortMethod.NAME, None
    )
```

The module also has `add_recipe`, `get_recipe_by_id`, `get_recipe_author`,
`replace_recipe` (which also brings the recipe's tags, seasons, categories,
diets and ingredients in line with the new recipe) and `delete_recipe`.

## E-mail

```python
from pickeat.email import EmailSender, EmailError

sender = EmailSender(conf.email.api_key)
try:
    sender.send_account_validation_email(
        "someone@example.com", "token", "https://pickeat.example.com"
    )
except EmailError as err:
    print(f"could not send: {err}")
```

`EmailError` is raised when the request cannot be made. The HTTP status of the
API's answer is not checked.

## What the package does not do

- It has no command and no web server: there are no HTTP endpoints, and
  nothing serves the recipes to clients.
- The `[redis]` and `[sessions]` sections are read and validated, but nothing
  in the package uses them; there is no session store or cookie handling.
- It does not create the database schema. The tables, the `recipes_full` and
  `ingredients_full` views and the SQL functions the queries call
  (`is_recipe_in_account_favs`, `get_weekly_seed`, `unaccent`) must already
  exist.
- It does not ship a database driver; the caller opens the connection.
- There is no storage of accounts or tokens.

## Tests

The test suite uses pytest and responses. Both are listed in the `test` extra.