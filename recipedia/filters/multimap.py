"""Edits of the FilterState multimap (category -> selected values).

Every function returns a new FilterState; the one passed in is left as is so
callers can keep it as previous UI state.
"""

from typing import List, Union

from recipedia.models.models import FilterState, IngredientType, ListFilter, NonIngredientFilter, as_list_filter
from recipedia.utils.logger import filter_logger


def _copy(filters: FilterState) -> FilterState:
    return {key: list(values) for key, values in filters.items()}


def _resolve_key(key: Union[ListFilter, str]) -> Union[ListFilter, str]:
    category = as_list_filter(key)
    return category if category is not None else key


def add_value_to_multimap(filters: FilterState, key: Union[ListFilter, str], value: str) -> FilterState:
    """Select `value` under `key`. Selecting it twice is a no-op."""
    key = _resolve_key(key)
    updated = _copy(filters)
    values = updated.setdefault(key, [])
    if value not in values:
        values.append(value)
    return updated


def remove_value_from_multimap(filters: FilterState, key: Union[ListFilter, str], value: str) -> FilterState:
    """Unselect `value` under `key`, dropping the key once it has no value left."""
    key = _resolve_key(key)
    category_name = key.value if isinstance(key, (IngredientType, NonIngredientFilter)) else str(key)
    updated = _copy(filters)
    if key not in updated:
        filter_logger.warning(
            f"Trying to remove value {value} at key {category_name} from multimap but key finding fails",
            extra={"category": category_name},
        )
        return updated

    values = updated[key]
    if value not in values:
        filter_logger.warning(
            f"Trying to remove value {value} at key {category_name} from multimap but value finding fails",
            extra={"category": category_name},
        )
        return updated

    values.remove(value)
    if not values:
        del updated[key]
    return updated


def edit_title_in_multimap(filters: FilterState, title: str) -> FilterState:
    """Replace the recipe title search with `title`; an empty title clears it.

    The search holds a single value. When several are somehow present the
    state is left unchanged and a warning is logged.
    """
    key = NonIngredientFilter.RECIPE_TITLE_INCLUDE
    updated = _copy(filters)

    if len(updated.get(key, [])) > 1:
        filter_logger.warning(
            f"Cannot edit title search: {len(updated[key])} values are set",
            extra={"category": key.value},
        )
        return updated

    if title:
        updated[key] = [title]
    else:
        updated.pop(key, None)
    return updated


def retrieve_all_filters(filters: FilterState) -> List[str]:
    """Every selected value, in category order."""
    return [value for values in filters.values() for value in values]
