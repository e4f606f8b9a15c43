from pathlib import Path

from mealplan.utilities.config import DATA_DIR as _CONFIG_DATA_DIR

# Centralized paths for data files (single source of truth)
DATA_DIR = Path(_CONFIG_DATA_DIR).resolve()
RECIPES_FILE = DATA_DIR / 'recipes.json'
PLANS_FILE = DATA_DIR / 'week_plans.json'
CATEGORIES_FILE = DATA_DIR / 'custom_categories.json'

__all__ = ['DATA_DIR', 'RECIPES_FILE', 'PLANS_FILE', 'CATEGORIES_FILE']
