"""Recipe domain entity as read by the planner: id, name, category, ingredients, tags."""
from mealplan.domain.Ingredient import Ingredient
from typing import List, Optional, Dict, Any
from uuid import uuid4

_KNOWN_KEYS = {"id", "name", "category", "ingredients", "prepTime", "imageUrl", "tags", "isFavorite"}


class Recipe:
    def __init__(self, name: str = "", category: str = "inne", ingredients: Optional[List[Ingredient]] = None,
                 prep_time: int = 0, image_url: Optional[str] = None, tags: Optional[List[str]] = None,
                 is_favorite: bool = False, id: Optional[str] = None, extra: Optional[Dict[str, Any]] = None):
        self.id = id or uuid4().hex
        self.name = name
        self.category = category
        self.ingredients = ingredients[:] if ingredients else []
        self.prep_time = prep_time
        self.image_url = image_url
        self.tags = tags[:] if tags else []
        self.is_favorite = is_favorite
        # Fields owned by the surrounding app (description, steps, createdAt, ...)
        self.extra = dict(extra) if extra else {}

    def __str__(self) -> str:
        return f"{self.name} ({self.category}) - {self.prep_time} min - {len(self.ingredients)} ingredients"

    __repr__ = __str__

    def __eq__(self, other):
        if not isinstance(other, Recipe):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    @staticmethod
    def from_dict(data):
        d = dict(data)
        return Recipe(
            name=d.get("name", ""),
            category=d.get("category", "inne"),
            ingredients=[Ingredient.from_dict(ing) for ing in d.get("ingredients", []) or []],
            prep_time=d.get("prepTime", 0) or 0,
            image_url=d.get("imageUrl"),
            tags=list(d.get("tags", []) or []),
            is_favorite=bool(d.get("isFavorite", False)),
            id=d.get("id"),
            extra={k: v for k, v in d.items() if k not in _KNOWN_KEYS},
        )

    def to_dict(self):
        data = dict(self.extra)
        data.update({
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "ingredients": [ing.to_dict() for ing in self.ingredients],
            "prepTime": self.prep_time,
            "tags": list(self.tags),
            "isFavorite": self.is_favorite,
        })
        if self.image_url is not None:
            data["imageUrl"] = self.image_url
        return data
