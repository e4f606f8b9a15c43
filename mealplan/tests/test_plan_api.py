import pytest
from fastapi.testclient import TestClient

from mealplan.api.api_run import create_app
from mealplan.domain.Ingredient import Ingredient
from mealplan.domain.Recipe import Recipe
from mealplan.infra.Category_Repository import CategoryRepository
from mealplan.infra.Recipe_Repository import RecipeCatalog


@pytest.fixture
def client(tmp_path, store):
    catalog = RecipeCatalog([
        Recipe("Zupa", category="zupa", ingredients=[Ingredient("marchew", 2, "szt.")], id="zupa"),
        Recipe("Ciasto", category="inne", ingredients=[Ingredient("mąka", 250, "g")], id="cake"),
    ], path=tmp_path / "recipes.json")
    app = create_app(store, catalog, CategoryRepository(tmp_path / "custom_categories.json"))
    return TestClient(app)


def _open_week(client, start="2024-01-01"):
    r = client.get("/api/week", params={"start": start})
    assert r.status_code == 200
    return r.json()


def test_load_week_payload(client):
    data = _open_week(client, "2024-01-03")
    assert data["plan"]["weekStart"] == "2024-01-01"
    assert len(data["plan"]["days"]) == 7
    assert data["label"] == "1 sty — 7 sty"
    assert data["recipes"] == {}
    assert data["dirty"] is False


def test_assign_and_clear_days(client):
    _open_week(client)
    r = client.post("/api/week/assign", json={"recipe_id": "zupa", "indices": [0, 2]})
    assert r.status_code == 200
    data = r.json()
    assert [d["recipeId"] for d in data["plan"]["days"]][:3] == ["zupa", None, "zupa"]
    assert data["recipes"]["zupa"]["emoji"] == "🍲"

    r = client.post("/api/week/clear", json={"index": 0})
    assert r.json()["plan"]["days"][0]["recipeId"] is None


def test_bad_input_is_rejected(client):
    _open_week(client)
    assert client.post("/api/week/assign", json={"recipe_id": "zupa", "indices": [7]}).status_code == 422
    assert client.get("/api/week", params={"start": "2024-02-30"}).status_code == 400
    r = client.post("/api/date/assign", json={"recipe_id": "zupa", "dates": ["2024-01-10", "10.01.2024"]})
    assert r.status_code == 400
    assert client.get("/api/month", params={"year": 2024, "month": 1}).json()["cells"][9]["recipeId"] is None


def test_month_view_and_date_removal(client):
    _open_week(client)
    r = client.post("/api/date/assign", json={"recipe_id": "cake", "dates": ["2024-01-10", "2024-02-02"]})
    assert r.status_code == 200

    month = client.get("/api/month", params={"year": 2024, "month": 1}).json()
    assert month["label"] == "Styczeń 2024"
    assert len(month["cells"]) == 35
    by_date = {c["date"]: c for c in month["cells"]}
    assert by_date["2024-01-10"]["recipeId"] == "cake"
    assert by_date["2024-02-02"] == {"date": "2024-02-02", "inCurrentMonth": False, "recipeId": "cake"}

    r = client.delete("/api/date/2024-01-10")
    assert r.json() == {"success": True, "week_start": "2024-01-08"}
    month = client.get("/api/month", params={"year": 2024, "month": 1}).json()
    assert {c["date"]: c["recipeId"] for c in month["cells"]}["2024-01-10"] is None

    assert client.delete("/api/date/2030-06-05").json() == {"success": True, "week_start": None}


def test_move_between_weeks(client):
    _open_week(client)
    client.post("/api/week/assign", json={"recipe_id": "zupa", "indices": [0]})
    r = client.post("/api/move", json={"source": {"index": 0}, "dest": {"date": "2024-01-10"}})
    assert r.status_code == 200
    assert r.json() == {"written": ["2024-01-08", "2024-01-01"]}

    week = client.get("/api/week/current").json()
    assert week["plan"]["days"][0]["recipeId"] is None


def test_move_needs_one_address_per_slot(client):
    _open_week(client)
    r = client.post("/api/move", json={"source": {"index": 0, "date": "2024-01-02"}, "dest": {"index": 1}})
    assert r.status_code == 422


def test_partial_move_is_a_conflict(client, store):
    _open_week(client)
    client.post("/api/week/assign", json={"recipe_id": "zupa", "indices": [0]})
    store.fail_weeks.add("2024-01-01")

    r = client.post("/api/move", json={"source": {"index": 0}, "dest": {"date": "2024-01-10"}})
    assert r.status_code == 409
    assert r.json()["committed"] == ["2024-01-08"]
    assert r.json()["pending"] == ["2024-01-01"]
    assert client.get("/api/week/current").json()["dirty"] is True

    store.fail_weeks.clear()
    assert client.post("/api/week/flush").json()["dirty"] is False


def test_storage_failure_is_reported(client, store):
    _open_week(client)
    store.fail_weeks.add("2024-01-01")
    r = client.post("/api/week/assign", json={"recipe_id": "zupa", "indices": [1]})
    assert r.status_code == 500
    assert "Storage error" in r.json()["detail"]


def test_copy_weeks_and_history(client):
    _open_week(client, "2023-12-25")
    client.post("/api/week/assign", json={"recipe_id": "cake", "indices": [4]})
    _open_week(client)
    assert client.post("/api/week/copy-previous").status_code == 200

    r = client.post("/api/week/copy", json={"source": "2023-12-25", "dest": "2024-01-15"})
    assert r.json()["plan"]["days"][4]["recipeId"] == "cake"

    history = client.get("/api/history").json()
    assert [p["weekStart"] for p in history["plans"]] == ["2024-01-15", "2024-01-01", "2023-12-25"]

    assert client.post("/api/week/copy", json={"source": "2020-01-06"}).status_code == 404


def test_copy_previous_without_plan(client):
    _open_week(client)
    assert client.post("/api/week/copy-previous").status_code == 404


def test_shopping_list(client):
    _open_week(client)
    client.post("/api/week/assign", json={"recipe_id": "zupa", "indices": [0, 1]})
    client.post("/api/week/assign", json={"recipe_id": "cake", "indices": [2]})

    data = client.get("/api/shopping-list").json()
    assert data["week_start"] == "2024-01-01"
    assert [(i["ingredientName"], i["totalQuantity"]) for i in data["items"]] == [("mąka", 250), ("marchew", 4)]

    text = client.get("/api/shopping-list/text",
                      params={"checked": ["marchew|szt."], "extra": ["papier"]}).text
    assert text.splitlines() == [
        "Lista zakupów — 1 sty — 7 sty",
        "☐ mąka — 250 g",
        "✓ marchew — 4 szt.",
        "☐ papier",
    ]

    assert client.get("/api/shopping-list", params={"start": "2030-01-07"}).status_code == 404


def test_plan_events_are_polled(client):
    cursor = client.get("/api/plan/events").json()["next_cursor"]
    _open_week(client)
    client.post("/api/week/assign", json={"recipe_id": "zupa", "indices": [3]})
    events = client.get("/api/plan/events", params={"since": cursor}).json()["events"]
    saved = [e for e in events if e["type"] == "plan.saved"]
    assert saved[-1]["week_start"] == "2024-01-01"
    assert saved[-1]["dates"] == ["2024-01-04"]


def test_categories(client):
    r = client.post("/api/categories", json={"name": "Desery", "emoji": "🍰"})
    assert r.status_code == 200
    assert r.json()["categories"][-1]["value"] == "desery"
    assert client.post("/api/categories", json={"name": "desery"}).status_code == 400
    assert client.delete("/api/categories/zupa").status_code == 404
    r = client.delete("/api/categories/desery")
    assert all(c["value"] != "desery" for c in r.json()["categories"])


def test_recipes_router(client):
    recipes = client.get("/api/recipes").json()
    assert [r["name"] for r in recipes["recipes"]] == ["Ciasto", "Zupa"]
    assert client.get("/api/recipes/missing").status_code == 404
    assert client.post("/api/recipes/zupa/favorite").json() == {"id": "zupa", "isFavorite": True}
    assert client.get("/api/recipes", params={"favorites": True}).json()["count"] == 1
    assert client.get("/api/recipes/known-ingredients").json() == {
        "ingredients": ["marchew", "mąka"],
        "units": ["g", "kg", "ml", "l", "szt.", "łyżka", "łyżeczka", "szklanka", "opakowanie"],
    }

    r = client.put("/api/recipes", json={"id": "salad", "name": "Sałatka", "category": "sałatka"})
    assert r.status_code == 200
    assert client.delete("/api/recipes/salad").json() == {"success": True}
    assert client.put("/api/recipes", json={"id": "x"}).status_code == 400


def test_export_then_import(client):
    _open_week(client)
    client.post("/api/week/assign", json={"recipe_id": "zupa", "indices": [6]})
    backup = client.get("/api/export").json()
    assert backup["version"] == 1
    assert len(backup["weekPlans"]) == 1

    client.post("/api/week/clear", json={"index": 6})
    r = client.post("/api/import", json=backup)
    assert r.json() == {"success": True, "recipes": 2, "weekPlans": 1, "customCategories": 0}
    assert client.get("/api/week/current").json()["plan"]["days"][6]["recipeId"] == "zupa"

    assert client.post("/api/import", json={"recipes": []}).status_code == 422
