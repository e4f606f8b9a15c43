"""Plan coordinator: the single entry point for reading and changing day assignments.

State:
  * ``current`` - the week plan shown in the week view (one at a time).
  * a month projection cache for the displayed month, rebuilt from the store
    plus ``current`` whenever a mutation touches one of its visible dates.

Rules:
  * Day indices outside 0..6 and malformed dates raise InvalidReference before
    the store is touched.
  * Mutations of ``current`` happen in place. When the write fails the
    attempted state stays in memory, the plan is marked dirty and ``flush()``
    retries the write. The month overlay always reflects ``current``.
  * Plans of other weeks are read fresh from the store for every operation
    and are created lazily (persisted only once something is assigned).
  * Storage failures propagate unchanged; nothing is retried automatically.
"""
from __future__ import annotations
import logging
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple, Union

from mealplan.domain.Slot import DateSlot, DaySlot
from mealplan.domain.WeekPlan import WeekPlan, check_index
from mealplan.domain.errors import InvalidReference, NotFound, PartialMoveError, StorageError
from mealplan.events.Event_Bus import GLOBAL_EVENT_BUS, PLAN_MOVED, PLAN_SAVED, PLAN_WEEK_LOADED
from mealplan.logic.dates.weeks import add_days, canonical_key, monday_of, month_grid, parse_key
from mealplan.logic.shopping.list_builder import aggregate

logger = logging.getLogger(__name__)

Slot = Union[DaySlot, DateSlot]


class PlanCoordinator:
    def __init__(self, store, catalog=None, bus=None):
        self.store = store
        self.catalog = catalog
        self.bus = bus if bus is not None else GLOBAL_EVENT_BUS
        self.current: Optional[WeekPlan] = None
        self._dirty = False
        self._month_key: Optional[Tuple[int, int]] = None
        self._month_dates: set = set()
        self._month_cache: Optional[Dict[str, str]] = None

    # -------------------- helpers --------------------
    @property
    def dirty(self) -> bool:
        """True when the current plan holds edits whose write failed."""
        return self._dirty

    def _require_current(self) -> WeekPlan:
        if self.current is None:
            raise NotFound("No week is loaded")
        return self.current

    def _invalidate(self, dates: Iterable[str]) -> None:
        if self._month_cache is not None and any(d in self._month_dates for d in dates):
            self._month_cache = None

    async def _persist(self, plan: WeekPlan, dates: Iterable[str] = ()) -> None:
        is_current = plan is self.current
        try:
            await self.store.put(plan)
        except StorageError:
            if is_current:
                self._dirty = True
            logger.error("Saving week %s failed", plan.week_start)
            raise
        if is_current:
            self._dirty = False
        self.bus.publish(PLAN_SAVED, {"week_start": plan.week_start, "plan": plan, "dates": list(dates)})

    def _needs_write(self, plan: WeekPlan, changed: bool, stored: bool) -> bool:
        if plan is self.current and self._dirty:
            return True
        return changed and (stored or plan.has_assignments())

    async def _stored_plan(self, week_start: str) -> Optional[WeekPlan]:
        """Existing plan for ``week_start`` (the in-memory one when it is current)."""
        if self.current is not None and self.current.week_start == week_start:
            return self.current
        return await self.store.get(week_start)

    async def _plan_for_week(self, monday: date) -> Tuple[WeekPlan, bool]:
        """(plan, stored) for the week of ``monday``; a new empty plan when none exists."""
        plan = await self._stored_plan(canonical_key(monday))
        if plan is not None:
            return plan, True
        return WeekPlan.create_empty(monday), False

    @staticmethod
    def _day_index(plan: WeekPlan, day: date) -> int:
        index = plan.index_of(canonical_key(day))
        if index is None:
            raise InvalidReference(f"{canonical_key(day)} is not part of week {plan.week_start}")
        return index

    # -------------------- week view --------------------
    async def load_week(self, monday) -> WeekPlan:
        """Fetch (or create and persist) the plan of the week containing ``monday``; it becomes current."""
        start = monday_of(monday)
        key = canonical_key(start)
        if self._dirty and self.current is not None:
            logger.warning("Discarding unsaved edits of week %s", self.current.week_start)
        plan = await self.store.get(key)
        created = plan is None
        if created:
            plan = WeekPlan.create_empty(start)
            await self.store.put(plan)
            logger.info("Created week plan %s", key)
        self.current = plan
        self._dirty = False
        self._month_cache = None
        self.bus.publish(PLAN_WEEK_LOADED, {"week_start": key, "created": created})
        return plan

    async def peek_week(self, monday) -> Optional[WeekPlan]:
        """Plan of the week containing ``monday`` without making it current or creating it."""
        return await self._stored_plan(canonical_key(monday_of(monday)))

    async def navigate_week(self, direction: int) -> WeekPlan:
        base = self.current.monday if self.current is not None else date.today()
        return await self.load_week(add_days(monday_of(base), 7 * direction))

    async def go_to_today(self, today: Optional[date] = None) -> WeekPlan:
        return await self.load_week(today or date.today())

    async def assign_to_day_indices(self, recipe_id: Optional[str], indices: Iterable[int]) -> WeekPlan:
        """Set ``recipe_id`` on each given day of the current week with a single write."""
        plan = self._require_current()
        targets = sorted({check_index(i) for i in indices})
        changed = False
        for i in targets:
            changed = plan.set_recipe(i, recipe_id) or changed
        dates = [plan.days[i].date for i in targets]
        self._invalidate(dates)
        if changed or self._dirty:
            await self._persist(plan, dates)
        return plan

    async def clear_day(self, index: int) -> WeekPlan:
        return await self.assign_to_day_indices(None, [index])

    async def flush(self) -> WeekPlan:
        """Write the current plan again (retry after a StorageError)."""
        plan = self._require_current()
        await self._persist(plan, [d.date for d in plan.days])
        return plan

    async def copy_week(self, source_monday, dest_monday) -> WeekPlan:
        """Overwrite the destination week day-by-day (Monday to Monday) with the source week."""
        src_key = canonical_key(monday_of(source_monday))
        dest_start = monday_of(dest_monday)
        source = await self._stored_plan(src_key)
        if source is None:
            raise NotFound(f"No plan for week {src_key}")
        dest, stored = await self._plan_for_week(dest_start)
        changed = False
        for i, recipe_id in enumerate(source.recipe_ids()):
            changed = dest.set_recipe(i, recipe_id) or changed
        dates = [d.date for d in dest.days]
        self._invalidate(dates)
        if self._needs_write(dest, changed, stored) or not stored:
            await self._persist(dest, dates)
        logger.info("Copied week %s into %s", src_key, dest.week_start)
        return dest

    async def copy_previous_week(self) -> WeekPlan:
        plan = self._require_current()
        return await self.copy_week(add_days(plan.monday, -7), plan.monday)

    async def copy_from_plan(self, week_start: str) -> WeekPlan:
        """Copy a (history) week into the current week."""
        plan = self._require_current()
        return await self.copy_week(parse_key(week_start), plan.monday)

    async def list_history(self) -> List[WeekPlan]:
        """Plans with at least one assignment, newest week first."""
        plans = await self.store.get_all()
        if self.current is not None:
            plans = [self.current if p.week_start == self.current.week_start else p for p in plans]
        history = [p for p in plans if p.has_assignments()]
        history.sort(key=lambda p: p.week_start, reverse=True)
        return history

    # -------------------- month view --------------------
    async def assign_to_date(self, recipe_id: Optional[str], date_str: str) -> WeekPlan:
        day = parse_key(date_str)
        plan, stored = await self._plan_for_week(monday_of(day))
        changed = plan.set_recipe(self._day_index(plan, day), recipe_id)
        self._invalidate([date_str])
        if self._needs_write(plan, changed, stored):
            await self._persist(plan, [date_str])
        return plan

    async def assign_to_dates(self, recipe_id: Optional[str], dates: Iterable[str]) -> None:
        """Month picker: assign one recipe to several dates, one after another."""
        dates = list(dates)
        for d in dates:
            parse_key(d)
        for d in dates:
            await self.assign_to_date(recipe_id, d)

    async def remove_from_date(self, date_str: str) -> Optional[WeekPlan]:
        """Clear the assignment on ``date_str``; a no-op when there is none."""
        day = parse_key(date_str)
        plan = await self._stored_plan(canonical_key(monday_of(day)))
        if plan is None:
            return None
        changed = plan.set_recipe(self._day_index(plan, day), None)
        self._invalidate([date_str])
        if self._needs_write(plan, changed, True):
            await self._persist(plan, [date_str])
        return plan

    async def build_month_projection(self, year: int, month: int) -> Dict[str, str]:
        """date -> recipe id for every visible cell of the month grid.

        Stored plans are merged first, then the current plan overrides them;
        an unassigned day in the current plan removes the stored entry.
        """
        visible = {cell.key for cell in month_grid(year, month)}
        projection: Dict[str, str] = {}
        for plan in await self.store.get_all():
            for day in plan.days:
                if day.recipe_id and day.date in visible:
                    projection[day.date] = day.recipe_id
        if self.current is not None:
            for day in self.current.days:
                if day.date not in visible:
                    continue
                if day.recipe_id:
                    projection[day.date] = day.recipe_id
                else:
                    projection.pop(day.date, None)
        return dict(sorted(projection.items()))

    async def month_projection(self, year: int, month: int) -> Dict[str, str]:
        """Projection of the displayed month, rebuilt after relevant mutations."""
        if self._month_cache is None or self._month_key != (year, month):
            self._month_cache = await self.build_month_projection(year, month)
            self._month_key = (year, month)
            self._month_dates = {cell.key for cell in month_grid(year, month)}
        return dict(self._month_cache)

    # -------------------- drag & drop --------------------
    def _slot_key(self, slot: Slot) -> Tuple[str, int, Optional[date]]:
        """Normalise a slot to (week key, day index, date) without touching the store."""
        if isinstance(slot, DateSlot):
            day = parse_key(slot.date)
            return canonical_key(monday_of(day)), day.weekday(), day
        if isinstance(slot, DaySlot):
            index = check_index(slot.index)
            if slot.week_start is None:
                return self._require_current().week_start, index, None
            return canonical_key(monday_of(slot.week_start)), index, None
        raise InvalidReference(f"Unknown slot descriptor: {slot!r}")

    async def move_assignment(self, source: Slot, dest: Slot) -> List[WeekPlan]:
        """Drag ``source`` onto ``dest``: the two slots swap their recipes.

        An empty destination makes this a plain move. Returns the plans
        that were written (empty for a no-op).
        """
        src_week, src_idx, src_day = self._slot_key(source)
        dst_week, dst_idx, dst_day = self._slot_key(dest)
        if (src_week, src_idx) == (dst_week, dst_idx):
            return []

        src_plan, src_stored = await self._plan_for_week(parse_key(src_week))
        if dst_week == src_week:
            dst_plan, dst_stored = src_plan, src_stored
        else:
            dst_plan, dst_stored = await self._plan_for_week(parse_key(dst_week))
        if src_day is not None:
            src_idx = self._day_index(src_plan, src_day)
        if dst_day is not None:
            dst_idx = self._day_index(dst_plan, dst_day)

        dragged = src_plan.days[src_idx].recipe_id
        displaced = dst_plan.days[dst_idx].recipe_id
        dst_plan.set_recipe(dst_idx, dragged)
        src_plan.set_recipe(src_idx, displaced)
        changed = dragged != displaced
        src_date = src_plan.days[src_idx].date
        dst_date = dst_plan.days[dst_idx].date
        self._invalidate([src_date, dst_date])

        was_dirty = self._dirty
        written: List[WeekPlan] = []
        if src_plan is dst_plan:
            if self._needs_write(src_plan, changed, src_stored):
                await self._persist(src_plan, [src_date, dst_date])
                written.append(src_plan)
        else:
            pending = [(dst_plan, dst_stored, dst_date), (src_plan, src_stored, src_date)]
            pending = [p for p in pending if self._needs_write(p[0], changed, p[1])]
            for n, (plan, _stored, day_str) in enumerate(pending):
                try:
                    await self._persist(plan, [day_str])
                except StorageError as e:
                    if n == 0:
                        # nothing reached the store: undo the swap in memory
                        dst_plan.set_recipe(dst_idx, displaced)
                        src_plan.set_recipe(src_idx, dragged)
                        self._dirty = was_dirty
                        raise
                    committed = [p.week_start for p in written]
                    raise PartialMoveError(
                        f"Move {src_date} -> {dst_date} saved only {', '.join(committed)}",
                        committed=committed, pending=[plan.week_start], cause=e,
                    ) from e
                written.append(plan)

        if written:
            logger.info("Moved %s from %s to %s (swapped with %s)", dragged, src_date, dst_date, displaced)
            self.bus.publish(PLAN_MOVED, {"source": src_date, "dest": dst_date, "recipe_id": dragged})
        return written

    # -------------------- read helpers --------------------
    def recipe_for(self, recipe_id: Optional[str]):
        """Catalog lookup; None for empty or dangling references."""
        if self.catalog is None or not recipe_id:
            return None
        return self.catalog.get_by_id(recipe_id)

    def current_recipe(self, index: int):
        plan = self._require_current()
        return self.recipe_for(plan.days[check_index(index)].recipe_id)

    def shopping_list(self):
        """Aggregated shopping list of the current week."""
        if self.catalog is None:
            return []
        return aggregate(self._require_current(), self.catalog)
