"""ShoppingList aggregate: consolidated ledger of ingredients keyed by (name, unit)."""
from typing import Dict, List, Optional, Tuple, Union

Number = Union[int, float]


def format_amount(value: Number) -> str:
    '''
    Integral values render without decimals, others with one decimal.
    A ".0" left over by rounding is dropped as well (2.04 -> "2").
    '''
    if float(value).is_integer():
        return str(int(value))
    text = f"{value:.1f}"
    return text[:-2] if text.endswith(".0") else text


class ShoppingLedgerLine:
    def __init__(self, name: str, unit: str = "", quantity: Optional[Number] = None):
        self.name = name
        self.unit = unit or ""
        self.quantity = quantity

    @property
    def key(self) -> Tuple[str, str]:
        return (self.name, self.unit)

    def display(self) -> str:
        if self.quantity is None:
            return self.name
        return f"{self.name} - {format_amount(self.quantity)} {self.unit}".strip()

    __str__ = display

    def __repr__(self) -> str:
        return f"ShoppingLedgerLine({self.name!r}, {self.unit!r}, {self.quantity!r})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, ShoppingLedgerLine):
            return NotImplemented
        return (self.name, self.unit, self.quantity) == (other.name, other.unit, other.quantity)

    def to_dict(self):
        return {"name": self.name, "unit": self.unit, "quantity": self.quantity, "display": self.display()}


class ShoppingList:
    def __init__(self):
        self._lines: Dict[Tuple[str, str], ShoppingLedgerLine] = {}

    def add_item(self, name: str, unit: str, quantity: Optional[Number]):
        '''
        Merges one resolved ingredient quantity into the ledger.
        A null quantity never overwrites a numeric one; numeric quantities add up.
        '''
        key = (name, unit or "")
        existing = self._lines.get(key)
        if existing is None:
            self._lines[key] = ShoppingLedgerLine(name, unit, quantity)
            return
        if quantity is None:
            return
        if existing.quantity is None:
            existing.quantity = quantity
            return
        existing.quantity += quantity

    def get_item(self, name: str, unit: str = "") -> Optional[ShoppingLedgerLine]:
        return self._lines.get((name, unit or ""))

    def get_items(self) -> List[ShoppingLedgerLine]:
        '''Returns the ledger lines sorted by name (plain code-point order).'''
        return sorted(self._lines.values(), key=lambda line: line.name)

    def __len__(self) -> int:
        return len(self._lines)

    def __str__(self) -> str:
        items_str = ",\n\t".join(str(item) for item in self.get_items())
        return f"Shopping List Items:\n\t{items_str}"

    def __repr__(self) -> str:
        return self.__str__()

    def to_dict(self):
        return [line.to_dict() for line in self.get_items()]
