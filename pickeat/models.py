"""Domain objects of the recipe application."""

from __future__ import annotations

import datetime
import enum
from dataclasses import dataclass, field

__all__ = [
    "InvalidityKind",
    "Password",
    "Credentials",
    "Category",
    "NewCategory",
    "InvalidCategory",
    "Diet",
    "NewDiet",
    "InvalidDiet",
    "Unit",
    "NewUnit",
    "InvalidUnit",
    "Ingredient",
    "NewIngredient",
    "InvalidIngredient",
    "Season",
    "Tag",
    "NewTag",
    "InvalidTag",
    "QIngredient",
    "NewQIngredient",
    "Recipe",
    "NewRecipe",
    "InvalidRecipe",
    "RecipeSummary",
    "RecipeFilters",
    "SortMethod",
]


class InvalidityKind(enum.Enum):
    """Why a field of some input was rejected."""

    ALREADY_USED = enum.auto()
    EMPTY = enum.auto()
    INVALID_REF = enum.auto()
    TOO_SHORT = enum.auto()
    TOO_LONG = enum.auto()
    BAD_FORMAT = enum.auto()
    MISMATCH = enum.auto()
    EXPIRED = enum.auto()
    NOT_FOUND = enum.auto()
    BAD_VALUE = enum.auto()


@dataclass(frozen=True)
class Password:
    """A password, either as typed by the user or already hashed."""

    value: str
    is_hashed: bool = False

    @classmethod
    def clear_text(cls, value: str) -> Password:
        return cls(value, is_hashed=False)

    @classmethod
    def hashed(cls, value: str) -> Password:
        return cls(value, is_hashed=True)


@dataclass
class Credentials:
    email: str
    password: Password


# Categories


@dataclass
class Category:
    id: int
    name: str


@dataclass
class NewCategory:
    name: str


@dataclass
class InvalidCategory:
    name: InvalidityKind | None = None


# Diets


@dataclass
class Diet:
    id: int
    name: str
    label: str | None = None


@dataclass
class NewDiet:
    name: str
    label: str | None = None


@dataclass
class InvalidDiet:
    name: InvalidityKind | None = None
    label: InvalidityKind | None = None


# Units


@dataclass
class Unit:
    id: int
    full_name: str
    short_name: str


@dataclass
class NewUnit:
    full_name: str
    short_name: str | None = None


@dataclass
class InvalidUnit:
    full_name: InvalidityKind | None = None
    short_name: InvalidityKind | None = None


# Ingredients


@dataclass
class Ingredient:
    id: int
    name: str
    default_unit: Unit | None = None


@dataclass
class NewIngredient:
    name: str
    default_unit_id: int | None = None


@dataclass
class InvalidIngredient:
    name: InvalidityKind | None = None
    default_unit_id: InvalidityKind | None = None


# Seasons and tags


@dataclass
class Season:
    id: int
    name: str
    label: str


@dataclass
class Tag:
    id: int
    name: str


@dataclass
class NewTag:
    name: str


@dataclass
class InvalidTag:
    name: InvalidityKind | None = None


# Recipes


@dataclass
class QIngredient:
    """An ingredient of a recipe with its quantity."""

    id: int
    name: str
    quantity: float | None = None
    unit: Unit | None = None


@dataclass
class NewQIngredient:
    id: int
    quantity: float | None = None
    unit_id: int | None = None


@dataclass
class Recipe:
    id: int
    name: str
    notes: str
    preparation_time_min: int
    cooking_time_min: int
    image: str
    publication_date: datetime.date
    update_date: datetime.date | None
    instructions: list[str]
    n_shares: int
    shares_unit: str
    is_favorite: bool
    is_private: bool
    ingredients: list[QIngredient]
    categories: list[Category]
    tags: list[Tag]
    seasons: list[Season]
    author_id: int
    author_name: str
    diets: list[Diet]


@dataclass
class NewRecipe:
    name: str
    notes: str
    preparation_time_min: int
    cooking_time_min: int
    image: str
    instructions: list[str]
    n_shares: int
    shares_unit: str
    is_private: bool
    ingredients: list[NewQIngredient] = field(default_factory=list)
    categories: list[int] = field(default_factory=list)
    tags: list[int] = field(default_factory=list)
    seasons: list[int] = field(default_factory=list)
    diets: list[int] = field(default_factory=list)


@dataclass
class InvalidRecipe:
    name: InvalidityKind | None = None
    notes: InvalidityKind | None = None
    preparation_time_min: InvalidityKind | None = None
    cooking_time_min: InvalidityKind | None = None
    image: InvalidityKind | None = None
    instructions: InvalidityKind | None = None
    n_shares: InvalidityKind | None = None
    shares_unit: InvalidityKind | None = None
    is_private: InvalidityKind | None = None
    ingredients: InvalidityKind | None = None
    categories: InvalidityKind | None = None
    tags: InvalidityKind | None = None
    seasons: InvalidityKind | None = None
    author_id: InvalidityKind | None = None
    author_name: InvalidityKind | None = None
    diets: InvalidityKind | None = None


@dataclass
class RecipeSummary:
    """Short form of a recipe, as listed in search results."""

    id: int
    name: str
    image: str
    n_shares: int
    shares_unit: str
    is_favorite: bool
    is_private: bool
    diets: list[Diet]
    ingredients: list[QIngredient]
    total_count: int


@dataclass
class RecipeFilters:
    """Criteria restricting a recipe search; unset criteria match everything."""

    search: str | None = None
    categories: list[int] | None = None
    seasons: list[int] | None = None
    ingredients: list[int] | None = None
    tags: list[int] | None = None
    account: int | None = None
    diets: list[int] | None = None
    only_favs: bool = False
    only_private: bool = False
    ids: list[int] | None = None


class SortMethod(enum.Enum):
    """Order in which searched recipes are returned."""

    RANDOM = enum.auto()
    NAME = enum.auto()
    PUB_DATE_ASC = enum.auto()
    PUB_DATE_DESC = enum.auto()
    INGR_COUNT = enum.auto()
    TOTAL_TIME = enum.auto()