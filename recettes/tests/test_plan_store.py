import unittest

from recettes.domain.Catalog import RecipeCatalog
from recettes.domain.Plan import Plan, coerce_servings
from recettes.domain.Recipe import Recipe
from recettes.events.Event_Bus import EventBus, PLAN_CHANGED, PLAN_REPLACED
from recettes.logic.planning.store import PlanStore
from recettes.logic.shopping.list_builder import build_shopping_list


def _catalog():
    return RecipeCatalog([
        Recipe.from_dict({"id": "gratin", "titre": "Gratin", "portions": 3,
                          "ingredients": {"base": [{"nom": "pomme de terre", "quantite": 600, "unite": "g"}]},
                          "options": {"fromage": [{"nom": "comte", "quantite": 100, "unite": "g"}]}}),
        Recipe.from_dict({"id": "omelette", "titre": "Omelette",
                          "ingredients": {"base": [{"nom": "oeuf", "quantite_par_personne": 2}]}}),
    ])


class TestPlanStore(unittest.TestCase):

    def setUp(self):
        self.bus = EventBus()
        self.events = []
        self.bus.subscribe(PLAN_CHANGED, lambda name, payload: self.events.append((name, payload)))
        self.bus.subscribe(PLAN_REPLACED, lambda name, payload: self.events.append((name, payload)))
        self.store = PlanStore(_catalog(), bus=self.bus)

    def test_add_new_recipe_uses_base_servings(self):
        self.assertTrue(self.store.add("gratin"))
        entry = self.store.plan.get("gratin")
        self.assertEqual(entry.servings_requested, 3)
        self.assertEqual(entry.enabled_optional_groups, {"fromage": False})

    def test_add_without_base_servings_defaults_to_two(self):
        self.store.add("omelette")
        self.assertEqual(self.store.plan.get("omelette").servings_requested, 2)

    def test_add_twice_increments_instead_of_duplicating(self):
        self.store.add("gratin")
        self.store.add("gratin")
        self.assertEqual(len(self.store.plan), 1)
        self.assertEqual(self.store.plan.get("gratin").servings_requested, 6)

    def test_add_twice_without_base_increments_by_one(self):
        self.store.add("omelette")
        self.store.add("omelette")
        self.assertEqual(self.store.plan.get("omelette").servings_requested, 3)

    def test_add_to_entry_without_servings_starts_from_base(self):
        store = PlanStore(_catalog(), plan=Plan.from_document({"items": [{"recipe_id": "gratin"}]}), bus=self.bus)
        before = build_shopping_list(store.plan, store.catalog)[0].quantity
        store.add("gratin")
        self.assertEqual(store.plan.get("gratin").servings_requested, 6)
        after = build_shopping_list(store.plan, store.catalog)[0].quantity
        self.assertEqual((before, after), (600, 1200))

    def test_add_to_entry_without_servings_or_base(self):
        store = PlanStore(_catalog(), plan=Plan.from_document({"items": [{"id": "omelette"}]}), bus=self.bus)
        store.add("omelette")
        self.assertEqual(store.plan.get("omelette").servings_requested, 2)

    def test_remove_then_add_starts_over(self):
        self.store.add("gratin")
        self.store.set_servings("gratin", 10)
        self.assertTrue(self.store.remove("gratin"))
        self.assertIsNone(self.store.plan.get("gratin"))
        self.store.add("gratin")
        self.assertEqual(self.store.plan.get("gratin").servings_requested, 3)

    def test_set_servings_clamps_invalid_input(self):
        self.store.add("gratin")
        for raw in ("abc", 0, -1, float("inf"), "", None, "0"):
            self.store.set_servings("gratin", raw)
            self.assertEqual(self.store.plan.get("gratin").servings_requested, 1, raw)

    def test_set_servings_keeps_fractions(self):
        self.store.add("gratin")
        self.store.set_servings("gratin", "2.5")
        self.assertEqual(self.store.plan.get("gratin").servings_requested, 2.5)
        self.store.set_servings("gratin", "4")
        self.assertEqual(self.store.plan.get("gratin").servings_requested, 4)

    def test_toggle_optional_group(self):
        self.store.add("gratin")
        self.assertTrue(self.store.toggle_optional_group("gratin", "fromage", True))
        self.assertTrue(self.store.plan.get("gratin").is_group_enabled("fromage"))
        # Labels the recipe does not define are still stored
        self.store.toggle_optional_group("gratin", "dessert", True)
        self.assertEqual(self.store.plan.get("gratin").enabled_optional_groups,
                         {"fromage": True, "dessert": True})

    def test_operations_on_absent_entries_are_noops(self):
        self.assertFalse(self.store.add("unknown"))
        self.assertFalse(self.store.remove("gratin"))
        self.assertFalse(self.store.set_servings("gratin", 4))
        self.assertFalse(self.store.toggle_optional_group("gratin", "fromage", True))
        self.assertEqual(len(self.store.plan), 0)
        self.assertEqual(self.events, [])

    def test_each_mutation_publishes_plan_changed(self):
        self.store.add("gratin")
        self.store.set_servings("gratin", 4)
        self.store.toggle_optional_group("gratin", "fromage", True)
        self.store.remove("gratin")
        reasons = [payload["reason"] for name, payload in self.events if name == PLAN_CHANGED]
        self.assertEqual(reasons, ["add", "servings", "option", "remove"])
        self.assertIs(self.events[0][1]["plan"], self.store.plan)

    def test_replace_publishes_plan_replaced(self):
        other = PlanStore(_catalog(), bus=EventBus())
        other.add("omelette")
        self.store.replace(other.plan.copy(), "remote")
        self.assertEqual(self.events[-1][0], PLAN_REPLACED)
        self.assertEqual(self.events[-1][1]["source"], "remote")
        self.assertEqual(self.store.plan, other.plan)


class TestCoerceServings(unittest.TestCase):

    def test_values(self):
        self.assertEqual(coerce_servings("3"), 3)
        self.assertIsInstance(coerce_servings("3"), int)
        self.assertEqual(coerce_servings(1.5), 1.5)
        self.assertEqual(coerce_servings(float("nan")), 1)
        self.assertEqual(coerce_servings([2]), 1)
