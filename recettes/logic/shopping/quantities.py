"""Ingredient quantity resolution for a requested number of servings."""
from typing import Optional, Union

from recettes.domain.Ingredient import IngredientLine

Number = Union[int, float]

__all__ = ["resolve_quantity"]


def resolve_quantity(line: IngredientLine, requested_servings: Number,
                     servings_base: Optional[Number]) -> Optional[Number]:
    """Effective quantity of one ingredient line for ``requested_servings``.

    Per-person quantities scale with the requested servings. Absolute
    quantities are written for the recipe's base servings and scale by
    requested / base (ratio 1 when the base is missing or not positive).
    Lines listed by name only ("sel") resolve to None.
    """
    if line.per_person_quantity is not None:
        return line.per_person_quantity * requested_servings
    if line.absolute_quantity is not None:
        ratio = requested_servings / servings_base if servings_base and servings_base > 0 else 1
        return line.absolute_quantity * ratio
    return None
