"""Custom category persistence (JSON file)."""
import json
import logging
from pathlib import Path

from mealplan.domain.Category import Category, CategoryRegistry
from mealplan.domain.errors import StorageError
from mealplan.infra.paths import CATEGORIES_FILE

logger = logging.getLogger(__name__)


class CategoryRepository:
    def __init__(self, path=None):
        self.path = Path(path) if path is not None else CATEGORIES_FILE

    def load(self) -> CategoryRegistry:
        """Registry with defaults plus stored custom categories (empty on a bad file)."""
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f) or []
            return CategoryRegistry(Category.from_dict(d) for d in data)
        except FileNotFoundError:
            return CategoryRegistry()
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            logger.error("Invalid custom categories file %s: %s", self.path, e)
            return CategoryRegistry()

    def save(self, registry: CategoryRegistry) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump([c.to_dict() for c in registry.custom], f, indent=2, ensure_ascii=False)
        except OSError as e:
            logger.error("Failed to save categories: %s", e)
            raise StorageError(f"Could not write categories: {e}") from e
