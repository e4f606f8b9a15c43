from fastapi import (
    FastAPI,
    Request,
    Query,
    HTTPException,
)
from fastapi.responses import JSONResponse, PlainTextResponse

from datetime import date as _date
from typing import Optional, List
import logging

from mealplan.domain.Slot import DaySlot, DateSlot
from mealplan.domain.errors import InvalidReference, NotFound, PartialMoveError, StorageError
from mealplan.events.web_observers import start as start_event_observers, get_events as get_web_events
from mealplan.infra.Category_Repository import CategoryRepository
from mealplan.infra.Plan_Repository import PlanRepository
from mealplan.infra.Recipe_Repository import RecipeCatalog
from mealplan.logic.dates.weeks import month_grid, parse_key, week_label
from mealplan.logic.planning.coordinator import PlanCoordinator
from mealplan.logic.shopping.list_builder import aggregate, format_shopping_list
from mealplan.utilities.constants import MONTHS_PL
from mealplan.utilities.export_import import DataExporter, DataImporter
from mealplan.utilities.validators import (
    AssignDaysInput,
    AssignDateInput,
    CategoryInput,
    ClearDayInput,
    CopyWeekInput,
    ImportPayload,
    MoveInput,
    SlotInput,
)
from mealplan.api.routes import recipes

# Logging
logger = logging.getLogger("mealplan_app")


# -------------------- Helpers --------------------
def _parse_start(start: Optional[str]):
    return parse_key(start) if start else _date.today()


def _plan_payload(request: Request, plan):
    """Week plan plus the recipes it references (dangling ids are left out)."""
    coordinator: PlanCoordinator = request.app.state.coordinator
    registry = request.app.state.categories.load()
    resolved = {}
    for day in plan.days:
        recipe = coordinator.recipe_for(day.recipe_id)
        if recipe is not None:
            resolved[recipe.id] = {
                "name": recipe.name,
                "category": recipe.category,
                "emoji": registry.emoji_for(recipe.category),
                "prepTime": recipe.prep_time,
            }
    return {
        "plan": plan.to_dict(),
        "label": week_label(plan.monday),
        "recipes": resolved,
        "dirty": coordinator.dirty and plan is coordinator.current,
    }


def _to_slot(slot: SlotInput):
    if slot.date is not None:
        return DateSlot(slot.date)
    return DaySlot(slot.index, slot.week_start)


async def _week_for(request: Request, start: Optional[str]):
    coordinator: PlanCoordinator = request.app.state.coordinator
    if start is None:
        if coordinator.current is None:
            return await coordinator.load_week(_date.today())
        return coordinator.current
    plan = await coordinator.peek_week(parse_key(start))
    if plan is None:
        raise NotFound(f"No plan for week {start}")
    return plan


def _register_error_handlers(app: FastAPI):
    @app.exception_handler(InvalidReference)
    async def _invalid_reference(request: Request, exc: InvalidReference):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(NotFound)
    async def _not_found(request: Request, exc: NotFound):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(PartialMoveError)
    async def _partial_move(request: Request, exc: PartialMoveError):
        logger.error("Partial move: committed=%s pending=%s", exc.committed, exc.pending)
        return JSONResponse(status_code=409, content={
            "detail": str(exc), "committed": exc.committed, "pending": exc.pending,
        })

    @app.exception_handler(StorageError)
    async def _storage_error(request: Request, exc: StorageError):
        logger.error("Storage failure: %s", exc)
        return JSONResponse(status_code=500, content={"detail": f"Storage error: {exc}"})


def create_app(store=None, catalog=None, categories=None) -> FastAPI:
    """Build the API around one coordinator (single logical client)."""
    app = FastAPI(title="Meal Plan API")
    app.state.store = store if store is not None else PlanRepository()
    app.state.catalog = catalog if catalog is not None else RecipeCatalog.load()
    app.state.categories = categories if categories is not None else CategoryRepository()
    app.state.coordinator = PlanCoordinator(app.state.store, app.state.catalog)

    app.include_router(recipes.router)
    _register_error_handlers(app)
    start_event_observers()

    # -------------------- API: Week view --------------------
    @app.get("/api/week")
    async def api_load_week(request: Request, start: Optional[str] = Query(default=None, description="Any date of the week (YYYY-MM-DD)")):
        plan = await request.app.state.coordinator.load_week(_parse_start(start))
        return _plan_payload(request, plan)

    @app.get("/api/week/current")
    async def api_current_week(request: Request):
        plan = await _week_for(request, None)
        return _plan_payload(request, plan)

    @app.post("/api/week/navigate")
    async def api_navigate_week(request: Request, direction: int = Query(..., ge=-1, le=1)):
        coordinator: PlanCoordinator = request.app.state.coordinator
        if direction == 0:
            plan = await coordinator.go_to_today()
        else:
            plan = await coordinator.navigate_week(direction)
        return _plan_payload(request, plan)

    @app.post("/api/week/assign")
    async def api_assign_days(request: Request, payload: AssignDaysInput):
        coordinator: PlanCoordinator = request.app.state.coordinator
        await _week_for(request, None)
        plan = await coordinator.assign_to_day_indices(payload.recipe_id, payload.indices)
        return _plan_payload(request, plan)

    @app.post("/api/week/clear")
    async def api_clear_day(request: Request, payload: ClearDayInput):
        coordinator: PlanCoordinator = request.app.state.coordinator
        await _week_for(request, None)
        plan = await coordinator.clear_day(payload.index)
        return _plan_payload(request, plan)

    @app.post("/api/week/copy")
    async def api_copy_week(request: Request, payload: CopyWeekInput):
        coordinator: PlanCoordinator = request.app.state.coordinator
        current = await _week_for(request, None)
        dest = parse_key(payload.dest) if payload.dest else current.monday
        plan = await coordinator.copy_week(parse_key(payload.source), dest)
        return _plan_payload(request, plan)

    @app.post("/api/week/copy-previous")
    async def api_copy_previous_week(request: Request):
        coordinator: PlanCoordinator = request.app.state.coordinator
        await _week_for(request, None)
        try:
            plan = await coordinator.copy_previous_week()
        except NotFound:
            raise HTTPException(status_code=404, detail="No plan for the previous week")
        return _plan_payload(request, plan)

    @app.post("/api/week/flush")
    async def api_flush_week(request: Request):
        coordinator: PlanCoordinator = request.app.state.coordinator
        await _week_for(request, None)
        plan = await coordinator.flush()
        return _plan_payload(request, plan)

    @app.get("/api/history")
    async def api_history(request: Request):
        plans = await request.app.state.coordinator.list_history()
        return {
            "count": len(plans),
            "plans": [{**p.to_dict(), "label": week_label(p.monday)} for p in plans],
        }

    # -------------------- API: Month view --------------------
    @app.get("/api/month")
    async def api_month(request: Request,
                        year: Optional[int] = Query(default=None),
                        month: Optional[int] = Query(default=None, ge=1, le=12)):
        today = _date.today()
        year = year or today.year
        month = month or today.month
        projection = await request.app.state.coordinator.month_projection(year, month)
        cells = []
        for cell in month_grid(year, month):
            data = cell.to_dict()
            data["recipeId"] = projection.get(cell.key)
            cells.append(data)
        return {
            "year": year,
            "month": month,
            "label": f"{MONTHS_PL[month - 1]} {year}",
            "cells": cells,
        }

    @app.post("/api/date/assign")
    async def api_assign_dates(request: Request, payload: AssignDateInput):
        await request.app.state.coordinator.assign_to_dates(payload.recipe_id, payload.dates)
        return {"success": True, "dates": payload.dates}

    @app.delete("/api/date/{date_str}")
    async def api_remove_from_date(request: Request, date_str: str):
        plan = await request.app.state.coordinator.remove_from_date(date_str)
        return {"success": True, "week_start": plan.week_start if plan else None}

    # -------------------- API: Drag & drop --------------------
    @app.post("/api/move")
    async def api_move(request: Request, payload: MoveInput):
        coordinator: PlanCoordinator = request.app.state.coordinator
        written = await coordinator.move_assignment(_to_slot(payload.source), _to_slot(payload.dest))
        return {"written": [p.week_start for p in written]}

    # -------------------- API: Shopping list --------------------
    @app.get("/api/shopping-list")
    async def api_shopping_list(request: Request, start: Optional[str] = Query(default=None)):
        plan = await _week_for(request, start)
        entries = aggregate(plan, request.app.state.catalog)
        return {
            "week_start": plan.week_start,
            "label": week_label(plan.monday),
            "count": len(entries),
            "items": [e.to_dict() for e in entries],
        }

    @app.get("/api/shopping-list/text", response_class=PlainTextResponse)
    async def api_shopping_list_text(request: Request,
                                     start: Optional[str] = Query(default=None),
                                     checked: List[str] = Query(default=[]),
                                     extra: List[str] = Query(default=[])):
        """Clipboard text. ``checked`` items are "name|unit" keys, ``extra`` free-text lines."""
        plan = await _week_for(request, start)
        entries = aggregate(plan, request.app.state.catalog)
        done = set()
        for key in checked:
            name, _, unit = key.partition("|")
            done.add((name.lower(), unit))
        text = format_shopping_list(
            entries,
            week_label=week_label(plan.monday),
            checked=done,
            custom_items=[{"name": item} for item in extra],
        )
        return PlainTextResponse(text)

    # -------------------- API: Plan events (polled by frontend) --------------------
    @app.get("/api/plan/events")
    def api_plan_events(since: Optional[int] = Query(default=None, description="Return events with id greater than this value")):
        return get_web_events(since)

    # -------------------- API: Categories --------------------
    @app.get("/api/categories")
    def api_categories(request: Request):
        registry = request.app.state.categories.load()
        return {"categories": [c.to_dict() for c in registry.categories]}

    @app.post("/api/categories")
    def api_add_category(request: Request, payload: CategoryInput):
        repo: CategoryRepository = request.app.state.categories
        try:
            registry = repo.load().with_category(payload.name, payload.emoji)
        except InvalidReference as e:
            raise HTTPException(status_code=400, detail=str(e))
        repo.save(registry)
        return {"categories": [c.to_dict() for c in registry.categories]}

    @app.delete("/api/categories/{value}")
    def api_remove_category(request: Request, value: str):
        repo: CategoryRepository = request.app.state.categories
        registry = repo.load()
        if not any(c.value == value for c in registry.custom):
            raise HTTPException(status_code=404, detail="Custom category not found")
        registry = registry.without_category(value)
        repo.save(registry)
        return {"categories": [c.to_dict() for c in registry.categories]}

    # -------------------- API: Export / Import --------------------
    @app.get("/api/export")
    async def api_export(request: Request):
        exporter = DataExporter(request.app.state.store, request.app.state.catalog, request.app.state.categories)
        return await exporter.export_all()

    @app.post("/api/import")
    async def api_import(request: Request, payload: ImportPayload):
        state = request.app.state
        importer = DataImporter(state.store, state.catalog, state.categories)
        counts = await importer.import_all(payload.model_dump())
        coordinator: PlanCoordinator = state.coordinator
        await coordinator.load_week(coordinator.current.monday if coordinator.current else _date.today())
        return {"success": True, **counts}

    return app


app = create_app()
