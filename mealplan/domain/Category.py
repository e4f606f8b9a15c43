"""Recipe categories: built-in defaults plus user-defined ones.

``CategoryRegistry`` is an immutable value. Every update returns a new
registry, so a renderer holding an older registry keeps a consistent view.
"""
from typing import Iterable, List, Optional

from mealplan.domain.errors import InvalidReference
from mealplan.utilities.constants import DEFAULT_CATEGORY_EMOJI


class Category:
    __slots__ = ("value", "label", "emoji", "custom")

    def __init__(self, value: str, label: str, emoji: str, custom: bool = False):
        self.value = value
        self.label = label
        self.emoji = emoji
        self.custom = custom

    def __eq__(self, other):
        if not isinstance(other, Category):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"Category({self.value!r})"

    def to_dict(self):
        data = {"value": self.value, "label": self.label, "emoji": self.emoji}
        if self.custom:
            data["custom"] = True
        return data

    @staticmethod
    def from_dict(data):
        emoji = data.get("emoji") or DEFAULT_CATEGORY_EMOJI
        value = data["value"]
        return Category(value, data.get("label") or f"{emoji} {value}", emoji, bool(data.get("custom", False)))


DEFAULT_CATEGORIES = (
    Category("zupa", "🍲 Zupa", "🍲"),
    Category("makaron", "🍝 Makaron", "🍝"),
    Category("mięso", "🥩 Mięso", "🥩"),
    Category("ryba", "🐟 Ryba", "🐟"),
    Category("sałatka", "🥗 Sałatka", "🥗"),
    Category("zapiekanka", "🫕 Zapiekanka", "🫕"),
    Category("jednogarnkowe", "🥘 Jednogarnkowe", "🥘"),
    Category("wegetariańskie", "🥦 Wegetariańskie", "🥦"),
    Category("inne", "🍽️ Inne", "🍽️"),
)


class CategoryRegistry:
    def __init__(self, custom: Iterable[Category] = ()):
        self._custom = tuple(custom)
        self._all = DEFAULT_CATEGORIES + self._custom

    @property
    def categories(self) -> List[Category]:
        return list(self._all)

    @property
    def custom(self) -> List[Category]:
        return list(self._custom)

    def get(self, value: str) -> Optional[Category]:
        for cat in self._all:
            if cat.value == value:
                return cat
        return None

    def emoji_for(self, value: str) -> str:
        cat = self.get(value)
        return cat.emoji if cat else DEFAULT_CATEGORY_EMOJI

    def label_for(self, value: str) -> str:
        cat = self.get(value)
        return cat.label if cat else value

    def with_category(self, name: str, emoji: Optional[str] = None) -> "CategoryRegistry":
        """Return a registry with a new custom category named ``name``."""
        value = (name or "").strip().lower()
        if not value:
            raise InvalidReference("Category name cannot be empty")
        if self.get(value):
            raise InvalidReference(f"Category already exists: {value}")
        em = emoji or DEFAULT_CATEGORY_EMOJI
        new_cat = Category(value, f"{em} {name.strip()}", em, custom=True)
        return CategoryRegistry(self._custom + (new_cat,))

    def without_category(self, value: str) -> "CategoryRegistry":
        """Return a registry without custom category ``value`` (defaults stay)."""
        return CategoryRegistry(c for c in self._custom if c.value != value)

    def __eq__(self, other):
        if not isinstance(other, CategoryRegistry):
            return NotImplemented
        return self._custom == other._custom

    def __len__(self) -> int:
        return len(self._all)
