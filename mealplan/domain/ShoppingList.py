"""Shopping list entry: one merged (name, unit) line of the weekly shopping list."""
from typing import List


class ShoppingListEntry:
    def __init__(self, ingredient_name: str, unit: str):
        self.ingredient_name = ingredient_name
        self.unit = unit
        self.total_quantity = 0
        self.source_recipe_names: List[str] = []
        self.representative_product_url = ""

    @property
    def key(self) -> tuple:
        return (self.ingredient_name.lower(), self.unit)

    def add(self, quantity, recipe_name: str, product_url: str = ""):
        '''Adds one ingredient occurrence coming from ``recipe_name``.'''
        self.total_quantity += quantity
        if recipe_name not in self.source_recipe_names:
            self.source_recipe_names.append(recipe_name)
        if not self.representative_product_url and product_url:
            self.representative_product_url = product_url

    def to_dict(self):
        return {
            "ingredientName": self.ingredient_name,
            "totalQuantity": self.total_quantity,
            "unit": self.unit,
            "fromRecipes": list(self.source_recipe_names),
            "productUrl": self.representative_product_url,
        }

    def __eq__(self, other):
        if not isinstance(other, ShoppingListEntry):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __str__(self) -> str:
        return f"{self.ingredient_name} - {self.total_quantity} {self.unit}"

    __repr__ = __str__
