"""Shopping list builder.

Provides aggregate(week_plan, catalog) -> merged ShoppingListEntry list and
format_shopping_list(...) for the plain-text (clipboard) form.
"""
import unicodedata
from typing import Any, Dict, Iterable, List, Optional, Tuple

from mealplan.domain.ShoppingList import ShoppingListEntry
from mealplan.domain.WeekPlan import WeekPlan

# Letters NFKD does not decompose into base letter + accent
_FOLD = str.maketrans({"ł": "l", "Ł": "L", "ø": "o", "Ø": "O", "đ": "d", "Đ": "D", "ß": "ss"})


def collation_key(name: str) -> Tuple[str, str, str]:
    """Locale-style ordering: accents and case only break ties."""
    decomposed = unicodedata.normalize("NFKD", (name or "").translate(_FOLD))
    base = "".join(c for c in decomposed if not unicodedata.combining(c))
    return (base.casefold(), (name or "").casefold(), name or "")


def aggregate(week_plan: WeekPlan, catalog) -> List[ShoppingListEntry]:
    """Merge the ingredients of every recipe planned in ``week_plan``.

    Args:
        week_plan: plan whose seven days are scanned in order.
        catalog: anything with ``get_by_id(recipe_id) -> Recipe | None``.

    Returns:
        Entries keyed by (lower-cased name, unit), sorted by ingredient name.
        Quantities are summed as-is (no unit conversion). Recipe ids that
        no longer resolve are skipped.
    """
    entries: Dict[Tuple[str, str], ShoppingListEntry] = {}
    for day in week_plan.days:
        if not day.recipe_id:
            continue
        recipe = catalog.get_by_id(day.recipe_id)
        if recipe is None:
            continue
        for ing in recipe.ingredients:
            key = (ing.name.lower(), ing.unit)
            entry = entries.get(key)
            if entry is None:
                entry = entries[key] = ShoppingListEntry(ing.name, ing.unit)
            entry.add(ing.quantity, recipe.name, ing.product_url)
    return sorted(entries.values(), key=lambda e: collation_key(e.ingredient_name))


def _format_quantity(quantity: Any) -> str:
    if isinstance(quantity, float):
        return f"{quantity:g}"
    return str(quantity)


def format_shopping_list(entries: Iterable[ShoppingListEntry], *, week_label: Optional[str] = None,
                         checked: Optional[Iterable[Tuple[str, str]]] = None,
                         custom_items: Optional[Iterable[Dict[str, Any]]] = None) -> str:
    """Plain-text list: one "☐ name — qty unit" line per entry, ✓ for checked keys.

    ``custom_items`` are free-text extras ({"name": str, "checked": bool})
    appended after the aggregated entries.
    """
    done = set(checked or ())
    lines: List[str] = []
    if week_label:
        lines.append(f"Lista zakupów — {week_label}")
    for entry in entries:
        mark = "✓" if entry.key in done else "☐"
        lines.append(f"{mark} {entry.ingredient_name} — {_format_quantity(entry.total_quantity)} {entry.unit}")
    for item in custom_items or ():
        name = (item.get("name") or "").strip()
        if not name:
            continue
        lines.append(f"{'✓' if item.get('checked') else '☐'} {name}")
    return "\n".join(lines)


__all__ = ['aggregate', 'format_shopping_list', 'collation_key']
