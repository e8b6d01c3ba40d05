"""Plan domain entity: ordered meal-plan entries (recipe reference, servings, optional groups)."""
import math
from typing import Any, Dict, Iterator, List, Optional, Union

from pydantic import ValidationError

from recettes.utilities.constants import DEFAULT_SERVINGS, MIN_SERVINGS

Number = Union[int, float]


class PlanDocumentError(ValueError):
    """Raised when a stored or remote plan document is not a well-formed plan."""


def coerce_servings(raw: Any) -> Number:
    '''
    Parses a servings value. Anything that is not a finite number above zero
    becomes 1. Fractional values are kept as-is, integral ones become int.
    '''
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return MIN_SERVINGS
    if not math.isfinite(value) or value <= 0:
        return MIN_SERVINGS
    return int(value) if value.is_integer() else value


class PlanEntry:
    def __init__(self, recipe_id: str, servings_requested: Optional[Number] = None,
                 enabled_optional_groups: Optional[Dict[str, bool]] = None):
        self.recipe_id = recipe_id
        self.servings_requested = servings_requested
        self.enabled_optional_groups = dict(enabled_optional_groups) if enabled_optional_groups else {}

    @classmethod
    def for_recipe(cls, recipe):
        '''New entry at the recipe's base servings with every optional group disabled.'''
        return cls(
            recipe.id,
            servings_requested=recipe.servings_base or DEFAULT_SERVINGS,
            enabled_optional_groups={label: False for label in recipe.optional_group_labels()},
        )

    def is_group_enabled(self, label: str) -> bool:
        return self.enabled_optional_groups.get(label) is True

    def to_dict(self):
        data = {"recipe_id": self.recipe_id}
        if self.servings_requested is not None:
            data["servings_requested"] = self.servings_requested
        data["enabled_optional_groups"] = dict(self.enabled_optional_groups)
        return data

    def __eq__(self, other) -> bool:
        if not isinstance(other, PlanEntry):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __str__(self) -> str:
        return f"{self.recipe_id} x{self.servings_requested}"

    __repr__ = __str__


class Plan:
    def __init__(self, items: Optional[List[PlanEntry]] = None):
        self.items: List[PlanEntry] = list(items) if items else []

    def get(self, recipe_id: str) -> Optional[PlanEntry]:
        for entry in self.items:
            if entry.recipe_id == recipe_id:
                return entry
        return None

    def __iter__(self) -> Iterator[PlanEntry]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Plan):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __str__(self) -> str:
        return f"Plan({', '.join(str(entry) for entry in self.items)})"

    __repr__ = __str__

    def copy(self) -> "Plan":
        return Plan.from_document(self.to_dict())

    def to_dict(self):
        '''Serializable {"items": [...]} document, the shape stored locally and remotely.'''
        return {"items": [entry.to_dict() for entry in self.items]}

    @staticmethod
    def from_document(data) -> "Plan":
        '''
        Validated decode of a stored plan document.
        Raises PlanDocumentError when the document is rejected.
        '''
        # Imported here: validators imports coerce_servings from this module
        from recettes.utilities.validators import PlanDocument
        if not isinstance(data, dict):
            raise PlanDocumentError(f"Plan document must be a mapping, got {type(data).__name__}")
        try:
            document = PlanDocument.model_validate(data)
        except ValidationError as e:
            raise PlanDocumentError(str(e)) from e
        return Plan([
            PlanEntry(item.recipe_id, item.servings_requested, item.enabled_optional_groups)
            for item in document.items
        ])
