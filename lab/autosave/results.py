"""Result entry for one visit; only edited rows are sent, in one batch."""
from __future__ import annotations

import logging

from asgiref.sync import sync_to_async
from django.conf import settings

from lab.constants import URINE_FIELDS
from lab.repository.base import LabRepository
from .controller import DebouncedSaveController

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ('result', 'unit', 'normalRange')


class ResultEntryDraft:

    def __init__(self, repository: LabRepository, visit_id: str, *, delay: float | None = None,
                 on_saved=None, on_error=None):
        self.repository = repository
        self.visit_id = visit_id
        if delay is None:
            delay = settings.LAB_AUTOSAVE_DEBOUNCE_MS / 1000
        self.controller = DebouncedSaveController(
            self._persist,
            min_fields_present=lambda: bool(self._dirty),
            delay=delay,
            on_saved=on_saved,
            on_error=on_error,
            name=f'results of visit {visit_id}',
        )
        self.rows: dict[str, dict] = {}
        self._dirty: set[str] = set()

    async def load(self) -> None:
        results = await sync_to_async(self.repository.list_test_results)(visit_id=self.visit_id)
        self.rows = {r['id']: r for r in results}
        self._dirty = set()
        self.controller.mark_ready()

    def _row(self, result_id: str) -> dict:
        try:
            return self.rows[result_id]
        except KeyError:
            raise KeyError(f"result {result_id} is not part of visit {self.visit_id}") from None

    def set_field(self, result_id: str, field: str, value: str) -> None:
        if field not in EDITABLE_FIELDS:
            raise ValueError(f"field {field!r} is not editable")
        self._row(result_id)[field] = value
        self._dirty.add(result_id)
        self.controller.touch()

    def set_result(self, result_id: str, value: str) -> None:
        self.set_field(result_id, 'result', value)

    def set_urine_field(self, result_id: str, key: str, value: str) -> None:
        if key not in URINE_FIELDS:
            raise ValueError(f"unknown urine field {key!r}")
        row = self._row(result_id)
        row['urineData'] = {**(row.get('urineData') or {}), key: value}
        self._dirty.add(result_id)
        self.controller.touch()

    def _updates(self, result_ids) -> list[dict]:
        updates = []
        for result_id in result_ids:
            row = self.rows.get(result_id)
            if row is None:
                continue
            data = {f: row.get(f) or '' for f in EDITABLE_FIELDS}
            if row.get('testType') == 'urine' and row.get('urineData'):
                data['urineData'] = dict(row['urineData'])
            updates.append({'id': result_id, 'data': data})
        return updates

    async def _persist(self) -> None:
        dirty, self._dirty = self._dirty, set()
        try:
            saved = await sync_to_async(self.repository.update_test_results_batch)(self._updates(dirty))
        except Exception:
            self._dirty |= dirty
            raise
        logger.debug('Saved %d results for visit %s', len(saved), self.visit_id)

    async def save_now(self) -> None:
        await self.controller.save_now()
