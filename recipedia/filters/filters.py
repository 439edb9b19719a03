"""Apply a FilterState to recipe and shopping list collections.

AND across categories, OR within a category. Categories with an empty value
list are treated as absent. Results keep the order of the input collection.
"""

import math
from datetime import datetime
from typing import List, Optional, Tuple, Union

from recipedia.models.models import (
    FilterState,
    Ingredient,
    IngredientType,
    ListFilter,
    NonIngredientFilter,
    Recipe,
    ShoppingListItem,
    Tag,
    array_of_type,
    as_list_filter,
    is_ingredient_equal,
)
from recipedia.utils.logger import filter_logger

PREP_TIME_VALUES = [
    "0-10 min",
    "10-15 min",
    "15-20 min",
    "20-25 min",
    "25-30 min",
    "30-40 min",
    "40-50 min",
    "+60 min",
]

# Season token meaning "all year"
SEASON_WILDCARD = "*"

_INGREDIENT_CATEGORIES = [category for category in IngredientType if category != IngredientType.UNDEFINED]

FILTERS_CATEGORIES: List[ListFilter] = [
    NonIngredientFilter.IN_SEASON,
    NonIngredientFilter.PREP_TIME,
    NonIngredientFilter.TAGS,
    *_INGREDIENT_CATEGORIES,
]

SHOPPING_CATEGORIES: List[ListFilter] = [*_INGREDIENT_CATEGORIES, NonIngredientFilter.PURCHASED]


def prep_time_range(bucket: str) -> Optional[Tuple[float, float]]:
    """Inclusive (low, high) minutes of a bucket label. "+60 min" has no upper bound."""
    label = bucket.replace("min", "").strip()
    try:
        if label.startswith("+"):
            return float(label[1:]), math.inf
        low, high = label.split("-")
        return float(low), float(high)
    except ValueError:
        filter_logger.warning(f"Unknown preparation time bucket '{bucket}'")
        return None


def _matches_prep_time(time: int, buckets: List[str]) -> bool:
    for bucket in buckets:
        bounds = prep_time_range(bucket)
        if bounds is not None and bounds[0] <= time <= bounds[1]:
            return True
    return False


def _is_in_season(recipe: Recipe, month_token: str) -> bool:
    return any(
        month_token in ingredient.season or SEASON_WILDCARD in ingredient.season
        for ingredient in recipe.ingredients
    )


def _recipe_satisfies(recipe: Recipe, category: ListFilter, values: List[str], month_token: str) -> bool:
    if isinstance(category, IngredientType):
        return any(ingredient.name in values for ingredient in array_of_type(recipe.ingredients, category))
    if category == NonIngredientFilter.TAGS:
        return any(tag.name in values for tag in recipe.tags)
    if category == NonIngredientFilter.RECIPE_TITLE_INCLUDE:
        return any(value in recipe.title for value in values)
    if category == NonIngredientFilter.PREP_TIME:
        return _matches_prep_time(recipe.time, values)
    if category == NonIngredientFilter.IN_SEASON:
        return _is_in_season(recipe, month_token)
    # Purchased only applies to shopping list items
    return True


def filter_from_recipe(
    recipes: List[Recipe],
    filters: FilterState,
    month: Optional[int] = None,
) -> List[Recipe]:
    """Recipes satisfying every active category of `filters`.

    Args:
        recipes: Collection to filter.
        filters: Category -> selected values.
        month: Month (1-12) used by the in-season category. Defaults to the
            current month.
    """
    month_token = str(month if month is not None else datetime.now().month)

    active = []
    for key, values in filters.items():
        if not values:
            continue
        category = as_list_filter(key)
        if category is None:
            filter_logger.warning(f"Ignoring unknown filter category '{key}'")
            continue
        active.append((category, values))

    filtered = [
        recipe
        for recipe in recipes
        if all(_recipe_satisfies(recipe, category, values, month_token) for category, values in active)
    ]
    filter_logger.debug(f"{len(filtered)}/{len(recipes)} recipes kept by {len(active)} filter(s)")
    return filtered


def _item_satisfies(item: ShoppingListItem, category: ListFilter, values: List[str]) -> bool:
    if category == NonIngredientFilter.PURCHASED:
        return str(item.purchased).lower() in values
    if isinstance(category, IngredientType):
        return item.type == category and item.name in values
    return True


def filter_shopping_list(items: List[ShoppingListItem], filters: FilterState) -> List[ShoppingListItem]:
    """Shopping list items satisfying every active category.

    The purchased category takes "true" / "false".
    """
    active = [
        (as_list_filter(key), values) for key, values in filters.items() if values and as_list_filter(key) is not None
    ]
    return [item for item in items if all(_item_satisfies(item, category, values) for category, values in active)]


def extract_filtered_recipe_datas(recipes: List[Recipe]) -> Tuple[List[str], List[Ingredient], List[str]]:
    """Titles, distinct ingredients and distinct tag names of `recipes`, in first-seen order."""
    titles = [recipe.title for recipe in recipes]
    ingredients: List[Ingredient] = []
    tags: List[str] = []

    for recipe in recipes:
        for ingredient in recipe.ingredients:
            if not any(is_ingredient_equal(ingredient, seen) for seen in ingredients):
                ingredients.append(ingredient)
        for tag in recipe.tags:
            if tag.name not in tags:
                tags.append(tag.name)

    return titles, ingredients, tags


def select_filter_values_to_display(
    category: Union[ListFilter, str],
    tags: List[Tag],
    ingredients: List[Ingredient],
) -> List[str]:
    """Values a user can pick for `category` given the current collections."""
    category = as_list_filter(category)
    if category == NonIngredientFilter.IN_SEASON:
        return [NonIngredientFilter.IN_SEASON.value]
    if category == NonIngredientFilter.TAGS:
        return [tag.name for tag in tags]
    if category == NonIngredientFilter.PREP_TIME:
        return list(PREP_TIME_VALUES)
    if isinstance(category, IngredientType):
        return [ingredient.name for ingredient in array_of_type(ingredients, category)]
    return []
