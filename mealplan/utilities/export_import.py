"""
Export and Import of recipes, week plans and custom categories as one JSON backup.
"""
import json
import logging
from datetime import datetime, date
from pathlib import Path
from typing import Any, Dict, Optional

from mealplan.domain.Category import Category, CategoryRegistry
from mealplan.domain.Recipe import Recipe
from mealplan.domain.WeekPlan import WeekPlan
from mealplan.domain.errors import InvalidReference
from mealplan.utilities.constants import EXPORT_VERSION

logger = logging.getLogger(__name__)


class DataExporter:
    """Build the backup document from the plan store, the catalog and the categories."""

    def __init__(self, store, catalog, categories=None):
        self.store = store
        self.catalog = catalog
        self.categories = categories

    async def export_all(self) -> Dict[str, Any]:
        plans = await self.store.get_all()
        registry = self.categories.load() if self.categories is not None else CategoryRegistry()
        data = {
            "version": EXPORT_VERSION,
            "exportedAt": datetime.now().isoformat(),
            "recipes": [r.to_dict() for r in self.catalog.get_all()],
            "weekPlans": [p.to_dict() for p in plans],
            "knownIngredients": [{"name": n} for n in self.catalog.known_ingredients()],
            "customCategories": [c.to_dict() for c in registry.custom],
        }
        logger.info("Exported %d recipes and %d week plans", len(data["recipes"]), len(data["weekPlans"]))
        return data

    async def write_backup(self, output_path: Optional[Path] = None) -> Path:
        """Write the backup document to ``meal-planner-backup-<date>.json``."""
        if output_path is None:
            output_path = Path(f"meal-planner-backup-{date.today().isoformat()}.json")
        data = await self.export_all()
        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        logger.info("Backup written to %s", output_path)
        return Path(output_path)


class DataImporter:
    """Replace all recipes and week plans with the content of a backup document."""

    def __init__(self, store, catalog, categories=None):
        self.store = store
        self.catalog = catalog
        self.categories = categories

    async def import_all(self, data: Dict[str, Any]) -> Dict[str, int]:
        if not isinstance(data, dict) or "recipes" not in data or "weekPlans" not in data:
            raise InvalidReference("Invalid backup format: 'recipes' and 'weekPlans' are required")
        # Parse everything first so a bad record leaves existing data untouched
        try:
            recipes = [Recipe.from_dict(r) for r in data.get("recipes") or []]
            plans = [WeekPlan.from_dict(p) for p in data.get("weekPlans") or []]
            custom = [Category.from_dict(c) for c in data.get("customCategories") or []]
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidReference(f"Invalid backup record: {e}") from e
        seen_weeks = set()
        seen_ids = set()
        for plan in plans:
            if plan.week_start in seen_weeks:
                raise InvalidReference(f"Backup holds more than one plan for week {plan.week_start}")
            if plan.id in seen_ids:
                raise InvalidReference(f"Backup holds more than one plan with id {plan.id}")
            seen_weeks.add(plan.week_start)
            seen_ids.add(plan.id)

        await self.store.clear()
        for plan in plans:
            await self.store.put(plan)
        self.catalog.replace_all(recipes)
        if custom and self.categories is not None:
            self.categories.save(CategoryRegistry(custom))

        logger.info("Imported %d recipes and %d week plans", len(recipes), len(plans))
        return {"recipes": len(recipes), "weekPlans": len(plans), "customCategories": len(custom)}

    async def import_file(self, path: Path) -> Dict[str, int]:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise InvalidReference(f"Backup file is not valid JSON: {e}") from e
        return await self.import_all(data)
