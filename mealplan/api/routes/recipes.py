from fastapi import APIRouter, HTTPException, Request, Body

from mealplan.domain.Recipe import Recipe
from mealplan.utilities.constants import UNITS

router = APIRouter(prefix="/api/recipes")


def _catalog(request: Request):
    return request.app.state.catalog


@router.get("")
def list_recipes(request: Request, category: str = "", favorites: bool = False):
    """Return all recipes, optionally filtered by category or favourite flag."""
    recipes = _catalog(request).get_all()
    if category:
        recipes = [r for r in recipes if r.category == category]
    if favorites:
        recipes = [r for r in recipes if r.is_favorite]
    recipes.sort(key=lambda r: r.name.lower())
    return {"count": len(recipes), "recipes": [r.to_dict() for r in recipes]}


@router.get("/known-ingredients")
def known_ingredients(request: Request):
    """Autocomplete data for the recipe form."""
    return {"ingredients": _catalog(request).known_ingredients(), "units": list(UNITS)}


@router.get("/{recipe_id}")
def get_recipe(request: Request, recipe_id: str):
    recipe = _catalog(request).get_by_id(recipe_id)
    if recipe is None:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return recipe.to_dict()


@router.put("")
def put_recipe(request: Request, data: dict = Body(...)):
    """Insert or replace a recipe record as given (content is not validated here)."""
    if not data.get("name"):
        raise HTTPException(status_code=400, detail="Recipe needs a name")
    recipe = Recipe.from_dict(data)
    _catalog(request).put(recipe)
    return recipe.to_dict()


@router.post("/{recipe_id}/favorite")
def toggle_favorite(request: Request, recipe_id: str):
    recipe = _catalog(request).toggle_favorite(recipe_id)
    if recipe is None:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return {"id": recipe.id, "isFavorite": recipe.is_favorite}


@router.delete("/{recipe_id}")
def delete_recipe(request: Request, recipe_id: str):
    if not _catalog(request).delete(recipe_id):
        raise HTTPException(status_code=404, detail="Recipe not found")
    return {"success": True}
