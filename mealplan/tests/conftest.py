"""Shared fixtures: a file-backed plan store under tmp_path and a coordinator wired to it."""
import pytest

from mealplan.domain.Ingredient import Ingredient
from mealplan.domain.Recipe import Recipe
from mealplan.domain.WeekPlan import WeekPlan
from mealplan.domain.errors import StorageError
from mealplan.events.Event_Bus import EventBus, PLAN_MOVED, PLAN_SAVED, PLAN_WEEK_LOADED
from mealplan.infra.Plan_Repository import PlanRepository
from mealplan.infra.Recipe_Repository import RecipeCatalog
from mealplan.logic.planning.coordinator import PlanCoordinator


class CountingStore(PlanRepository):
    """Plan store that counts calls and can fail writes for chosen weeks."""

    def __init__(self, path):
        super().__init__(path)
        self.calls = 0
        self.fail_weeks = set()

    async def get(self, week_start):
        self.calls += 1
        return await super().get(week_start)

    async def get_all(self):
        self.calls += 1
        return await super().get_all()

    async def put(self, plan):
        self.calls += 1
        if plan.week_start in self.fail_weeks:
            raise StorageError(f"disk full while saving {plan.week_start}")
        await super().put(plan)


@pytest.fixture
def store(tmp_path):
    return CountingStore(tmp_path / "week_plans.json")


@pytest.fixture
def events():
    return []


@pytest.fixture
def coordinator(store, events):
    bus = EventBus()
    for name in (PLAN_SAVED, PLAN_WEEK_LOADED, PLAN_MOVED):
        bus.subscribe(name, lambda n, p: events.append((n, p)))
    catalog = RecipeCatalog([Recipe("Zupa", ingredients=[Ingredient("marchew", 2, "szt.")], id="zupa")])
    return PlanCoordinator(store, catalog, bus=bus)


@pytest.fixture
def seed(store):
    """Async helper storing a plan for the week of ``monday`` with ``recipe_ids`` from Monday on."""
    async def _seed(monday, recipe_ids):
        plan = WeekPlan.create_empty(monday)
        for i, rid in enumerate(recipe_ids):
            plan.set_recipe(i, rid)
        await store.put(plan)
        return plan
    return _seed
