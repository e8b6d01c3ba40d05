"""Ingredient line of a recipe: name, unit, per-person or absolute quantity."""
from typing import Any, Optional, Union

Number = Union[int, float]


def _first_present(data: dict, *keys: str) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


def _as_number(value: Any) -> Optional[Number]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    return None


class IngredientLine:
    def __init__(self, name: str = "", unit: str = "", per_person_quantity: Optional[Number] = None,
                 absolute_quantity: Optional[Number] = None, kind: str = "",
                 calories_display: Any = None):
        self.name = name
        # Absent unit is the empty string so (name, unit) keys stay comparable
        self.unit = unit or ""
        # At most one quantity mode; per-person wins when both are authored
        self.per_person_quantity = per_person_quantity
        self.absolute_quantity = None if per_person_quantity is not None else absolute_quantity
        self.kind = kind or ""
        self.calories_display = calories_display

    @property
    def display_quantity(self) -> Optional[Number]:
        '''Quantity as authored in the recipe (not scaled).'''
        if self.absolute_quantity is not None:
            return self.absolute_quantity
        return self.per_person_quantity

    def __str__(self) -> str:
        qty = self.display_quantity
        if qty is None:
            return self.name
        kind = f" ({self.kind})" if self.kind else ""
        return f"{self.name}{kind} - {qty} {self.unit}".strip()

    __repr__ = __str__

    def __eq__(self, other) -> bool:
        if not isinstance(other, IngredientLine):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    @staticmethod
    def from_dict(data):
        '''Creates an IngredientLine from a recipe-file entry. Accepts French and English keys.'''
        d = dict(data) if isinstance(data, dict) else {}
        name = _first_present(d, "nom", "name")
        return IngredientLine(
            name=name if isinstance(name, str) else "",
            unit=_first_present(d, "unite", "unit") or "",
            per_person_quantity=_as_number(_first_present(d, "quantite_par_personne", "per_person_quantity")),
            absolute_quantity=_as_number(_first_present(d, "quantite", "absolute_quantity")),
            kind=_first_present(d, "type", "kind") or "",
            calories_display=_first_present(d, "calories", "calories_total", "calories_par_personne",
                                             "calories_display"),
        )

    def to_dict(self):
        data = {"name": self.name, "unit": self.unit}
        if self.per_person_quantity is not None:
            data["per_person_quantity"] = self.per_person_quantity
        if self.absolute_quantity is not None:
            data["absolute_quantity"] = self.absolute_quantity
        if self.kind:
            data["kind"] = self.kind
        if self.calories_display is not None:
            data["calories_display"] = self.calories_display
        return data
