"""Recipe catalog: id -> Recipe lookups backed by a JSON file.

The planner only reads from the catalog. ``get_by_id`` never raises for a
missing id; it returns None so callers treat the plan entry as a dangling
reference (the recipe was deleted after being planned).
"""
import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from mealplan.domain.Recipe import Recipe
from mealplan.domain.errors import StorageError
from mealplan.infra.paths import RECIPES_FILE

logger = logging.getLogger(__name__)


def reading_from_recipes(path=None) -> List[Recipe]:
    """Read recipes from JSON file with proper error handling."""
    recipes_file = Path(path) if path is not None else RECIPES_FILE
    try:
        with open(recipes_file, 'r', encoding='utf-8') as f:
            recipes_data = json.load(f) or []
        return [Recipe.from_dict(entry) for entry in recipes_data]
    except FileNotFoundError:
        logger.warning("Recipes file not found: %s. Returning empty list.", recipes_file)
        return []
    except json.JSONDecodeError as e:
        logger.error("Invalid JSON in recipes file: %s", e)
        return []


class RecipeCatalog:
    def __init__(self, recipes: Iterable[Recipe] = (), path=None):
        self.path = Path(path) if path is not None else None
        self._recipes: Dict[str, Recipe] = {r.id: r for r in recipes}

    @classmethod
    def load(cls, path=None) -> "RecipeCatalog":
        path = Path(path) if path is not None else RECIPES_FILE
        return cls(reading_from_recipes(path), path=path)

    def get_by_id(self, recipe_id: Optional[str]) -> Optional[Recipe]:
        if not recipe_id:
            return None
        return self._recipes.get(recipe_id)

    def get_all(self) -> List[Recipe]:
        return list(self._recipes.values())

    def __len__(self) -> int:
        return len(self._recipes)

    def __contains__(self, recipe_id) -> bool:
        return recipe_id in self._recipes

    def put(self, recipe: Recipe) -> None:
        self._recipes[recipe.id] = recipe
        self._save()

    def delete(self, recipe_id: str) -> bool:
        """Remove a recipe. Week plans referencing it are left untouched."""
        removed = self._recipes.pop(recipe_id, None) is not None
        if removed:
            self._save()
        return removed

    def toggle_favorite(self, recipe_id: str) -> Optional[Recipe]:
        recipe = self.get_by_id(recipe_id)
        if recipe is None:
            return None
        recipe.is_favorite = not recipe.is_favorite
        self._save()
        return recipe

    def replace_all(self, recipes: Iterable[Recipe]) -> None:
        self._recipes = {r.id: r for r in recipes}
        self._save()

    def known_ingredients(self) -> List[str]:
        """Distinct lower-cased ingredient names used across all recipes."""
        names = set()
        for recipe in self._recipes.values():
            for ing in recipe.ingredients:
                name = ing.name.strip().lower()
                if name:
                    names.add(name)
        return sorted(names)

    def _save(self) -> None:
        if self.path is None:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump([r.to_dict() for r in self._recipes.values()], f, indent=2, ensure_ascii=False)
        except OSError as e:
            logger.error("Failed to save recipes to %s: %s", self.path, e)
            raise StorageError(f"Could not write recipes: {e}") from e
