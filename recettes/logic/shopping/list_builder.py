"""Shopping list builder.

Provides build_shopping_list(plan, catalog): folds every plan entry's
ingredients (and its enabled optional groups) into one ledger keyed by
(name, unit).
"""
import logging
from typing import List

from recettes.domain.Catalog import RecipeCatalog
from recettes.domain.Plan import Plan
from recettes.domain.ShoppingList import ShoppingLedgerLine, ShoppingList
from recettes.logic.shopping.quantities import resolve_quantity

logger = logging.getLogger(__name__)


def build_shopping_list(plan: Plan, catalog: RecipeCatalog) -> List[ShoppingLedgerLine]:
    """Compute the consolidated shopping list for a plan.

    Args:
        plan: Plan whose entries reference recipes by id.
        catalog: RecipeCatalog used to resolve the references.

    Returns:
        Ledger lines sorted by name. Names are compared exactly, so
        "Carotte" and "carotte" stay separate lines. Lines whose quantity
        could not be computed are kept with quantity None.
    """
    ledger = ShoppingList()
    if not plan:
        return []

    for entry in plan:
        recipe = catalog.get(entry.recipe_id)
        if recipe is None:
            # Dangling reference: recipe removed from the catalog
            logger.debug("Skipping plan entry for unknown recipe %s", entry.recipe_id)
            continue
        servings = entry.servings_requested
        if servings is None:
            servings = recipe.servings_base or 1
        for lines in recipe.ingredient_groups.values():
            for line in lines:
                ledger.add_item(line.name, line.unit, resolve_quantity(line, servings, recipe.servings_base))
        for label, lines in recipe.optional_groups.items():
            if not entry.is_group_enabled(label):
                continue
            for line in lines:
                ledger.add_item(line.name, line.unit, resolve_quantity(line, servings, recipe.servings_base))

    return ledger.get_items()

__all__ = ['build_shopping_list']
