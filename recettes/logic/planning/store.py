"""Plan state store: owns the mutable meal plan and publishes every change."""
import logging
from typing import Any, Optional

from recettes.domain.Catalog import RecipeCatalog
from recettes.domain.Plan import Plan, PlanEntry, coerce_servings
from recettes.events.Event_Bus import EventBus, GLOBAL_EVENT_BUS
from recettes.events.event_helpers import publish_plan_changed, publish_plan_replaced
from recettes.utilities.constants import DEFAULT_SERVINGS_INCREMENT

logger = logging.getLogger(__name__)


class PlanStore:
    def __init__(self, catalog: RecipeCatalog, plan: Optional[Plan] = None, bus: Optional[EventBus] = None):
        self.catalog = catalog
        self.plan = plan if plan is not None else Plan()
        self._event_bus = bus or GLOBAL_EVENT_BUS

    # --- Observer helpers -------------------------------------------------
    def set_event_bus(self, bus: EventBus):
        self._event_bus = bus
        return self

    def _notify_changed(self, reason: str, recipe_id: str):
        publish_plan_changed(self.plan, reason, recipe_id, bus=self._event_bus)

    # --- Mutations ----------------------------------------------------------
    def add(self, recipe_id: str) -> bool:
        '''
        Adds a recipe to the plan. A recipe already planned gets its base
        servings added instead of a second entry. Unknown recipes are ignored.
        '''
        recipe = self.catalog.get(recipe_id)
        if recipe is None:
            logger.debug("add: recipe %s not in catalog", recipe_id)
            return False
        existing = self.plan.get(recipe_id)
        if existing is not None:
            current = existing.servings_requested
            if current is None:
                # Same fallback the shopping list uses for an entry without servings
                current = recipe.servings_base or 1
            existing.servings_requested = current + (recipe.servings_base or DEFAULT_SERVINGS_INCREMENT)
        else:
            self.plan.items.append(PlanEntry.for_recipe(recipe))
        self._notify_changed("add", recipe_id)
        return True

    def remove(self, recipe_id: str) -> bool:
        '''Removes the entry for the recipe, if any.'''
        if self.plan.get(recipe_id) is None:
            return False
        self.plan.items = [entry for entry in self.plan.items if entry.recipe_id != recipe_id]
        self._notify_changed("remove", recipe_id)
        return True

    def set_servings(self, recipe_id: str, raw_value: Any) -> bool:
        '''Sets servings from raw user input; invalid or non-positive values become 1.'''
        entry = self.plan.get(recipe_id)
        if entry is None:
            return False
        entry.servings_requested = coerce_servings(raw_value)
        self._notify_changed("servings", recipe_id)
        return True

    def toggle_optional_group(self, recipe_id: str, group_label: str, enabled: bool) -> bool:
        '''
        Enables or disables an optional ingredient group. Labels the recipe
        does not define are stored anyway.
        '''
        entry = self.plan.get(recipe_id)
        if entry is None:
            return False
        entry.enabled_optional_groups[group_label] = bool(enabled)
        self._notify_changed("option", recipe_id)
        return True

    def replace(self, plan: Plan, source: str):
        '''Adopts a whole plan (from the local cache or the remote store).'''
        self.plan = plan
        publish_plan_replaced(self.plan, source, bus=self._event_bus)

    def __str__(self) -> str:
        return f"PlanStore({self.plan})"

    __repr__ = __str__
