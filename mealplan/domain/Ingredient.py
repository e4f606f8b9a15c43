"""Ingredient domain entity: name, quantity, unit and an optional product link."""
from typing import Optional
from uuid import uuid4


class Ingredient:
    def __init__(self, name: str = "", quantity: float = 0, unit: str = "g",
                 product_url: Optional[str] = None, id: Optional[str] = None):
        self.id = id or uuid4().hex
        self.name = name
        self.quantity = quantity
        self.unit = unit
        self.product_url = product_url or ""

    @property
    def key(self) -> tuple:
        '''Shopping list merge key: lower-cased name plus the exact unit.'''
        return (self.name.lower(), self.unit)

    def __str__(self) -> str:
        return f"{self.name} - {self.quantity} {self.unit}"

    __repr__ = __str__

    def __eq__(self, other):
        if not isinstance(other, Ingredient):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    @staticmethod
    def from_dict(data):
        '''Creates an Ingredient from its stored form. Ignores unknown keys.'''
        d = dict(data) if isinstance(data, dict) else {}
        quantity = d.get("quantity", 0)
        if quantity is None or isinstance(quantity, bool):
            quantity = 0
        return Ingredient(
            name=d.get("name", "") or "",
            quantity=quantity,
            unit=d.get("unit", "g") or "g",
            product_url=d.get("productUrl") or "",
            id=d.get("id"),
        )

    def to_dict(self):
        '''Converts the Ingredient to its stored (camelCase) form.'''
        return {
            "id": self.id,
            "name": self.name,
            "quantity": self.quantity,
            "unit": self.unit,
            "productUrl": self.product_url,
        }
