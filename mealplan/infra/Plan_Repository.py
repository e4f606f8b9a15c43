"""Week plan store: JSON file persistence for WeekPlan records.

Records are addressed by ``id`` (primary key) and by ``weekStart`` (unique
secondary index). Every call is a coroutine; file I/O runs in a worker thread.
"""
import asyncio
import json
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import List, Optional

from mealplan.domain.WeekPlan import WeekPlan
from mealplan.domain.errors import InvalidReference, StorageError
from mealplan.infra.paths import PLANS_FILE

logger = logging.getLogger(__name__)


class PlanRepository:
    def __init__(self, path=None):
        self.path = Path(path) if path is not None else PLANS_FILE

    # -------------------- file helpers (run in a thread) --------------------
    def _read_records(self) -> List[dict]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                records = json.load(f) or []
        except json.JSONDecodeError as e:
            logger.error("Invalid JSON in plans file %s: %s", self.path, e)
            raise StorageError(f"Plans file is corrupted: {e}") from e
        except OSError as e:
            logger.error("Failed to read plans file %s: %s", self.path, e)
            raise StorageError(f"Could not read plans: {e}") from e
        if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
            raise StorageError("Plans file must contain a list of week plans")
        return records

    def _write_records(self, records: List[dict]) -> None:
        records = sorted(records, key=lambda r: r.get("weekStart", ""))
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), prefix=".week_plans_", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                    json.dump(records, tmp, indent=2, ensure_ascii=False)
                shutil.move(tmp_path, self.path)
            finally:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)
        except OSError as e:
            logger.error("Failed to write plans file %s: %s", self.path, e)
            raise StorageError(f"Could not write plans: {e}") from e

    def _decode(self, record: dict) -> WeekPlan:
        try:
            return WeekPlan.from_dict(record)
        except (KeyError, TypeError, InvalidReference) as e:
            logger.error("Malformed week plan record in %s: %s", self.path, e)
            raise StorageError(f"Stored week plan is malformed: {e}") from e

    def _find(self, field: str, value: str) -> Optional[WeekPlan]:
        for record in self._read_records():
            if record.get(field) == value:
                return self._decode(record)
        return None

    def _put_sync(self, plan: WeekPlan) -> None:
        records = self._read_records()
        for record in records:
            if record.get("weekStart") == plan.week_start and record.get("id") != plan.id:
                raise StorageError(
                    f"Week {plan.week_start} is already stored under id {record.get('id')}"
                )
        records = [r for r in records if r.get("id") != plan.id]
        records.append(plan.to_dict())
        self._write_records(records)

    def _delete_sync(self, plan_id: str) -> None:
        records = self._read_records()
        remaining = [r for r in records if r.get("id") != plan_id]
        if len(remaining) != len(records):
            self._write_records(remaining)

    # -------------------- public API --------------------
    async def get(self, week_start: str) -> Optional[WeekPlan]:
        return await asyncio.to_thread(self._find, "weekStart", week_start)

    async def get_by_id(self, plan_id: str) -> Optional[WeekPlan]:
        return await asyncio.to_thread(self._find, "id", plan_id)

    async def get_all(self) -> List[WeekPlan]:
        records = await asyncio.to_thread(self._read_records)
        plans = [self._decode(r) for r in records]
        plans.sort(key=lambda p: p.week_start)
        return plans

    async def put(self, plan: WeekPlan) -> None:
        await asyncio.to_thread(self._put_sync, plan)
        logger.debug("Saved week plan %s (%s)", plan.week_start, plan.id)

    async def delete(self, plan_id: str) -> None:
        await asyncio.to_thread(self._delete_sync, plan_id)
        logger.info("Deleted week plan %s", plan_id)

    async def clear(self) -> None:
        await asyncio.to_thread(self._write_records, [])
        logger.info("Cleared all week plans")
