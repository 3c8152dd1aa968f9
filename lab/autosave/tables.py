"""
Spreadsheet-style editors for expenses and the test catalog.

Rows added on the client carry ``new-…`` ids until their first save
creates them; incomplete rows are not sent.  After a save the
temporary id is replaced by the durable one, both in ``rows`` and in
``id_map`` so that callers holding the old id can still address it.
"""
from __future__ import annotations

import logging
import uuid
from datetime import date

from asgiref.sync import sync_to_async
from django.conf import settings

from lab.repository.base import LabRepository
from .controller import DebouncedSaveController

logger = logging.getLogger(__name__)

TEMP_PREFIX = 'new-'


def is_temp_id(row_id: str) -> bool:
    return row_id.startswith(TEMP_PREFIX)


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class TableDraft:
    """Row editor base; subclasses name the fields and repository calls."""

    fields: tuple[str, ...] = ()
    required_fields: tuple[str, ...] = ()
    label = 'table'

    def __init__(self, repository: LabRepository, *, delay: float | None = None, on_saved=None, on_error=None):
        self.repository = repository
        self.controller = DebouncedSaveController(
            self._persist,
            delay=self.default_delay() if delay is None else delay,
            on_saved=on_saved,
            on_error=on_error,
            name=self.label,
        )
        self.rows: dict[str, dict] = {}
        self.id_map: dict[str, str] = {}
        self._saved: dict[str, dict] = {}
        self._deleted: set[str] = set()

    def default_delay(self) -> float:
        return settings.LAB_AUTOSAVE_DEBOUNCE_MS / 1000

    # repository hooks ---------------------------------------------------
    def fetch(self) -> list[dict]:
        raise NotImplementedError

    def create(self, fields: dict) -> dict:
        raise NotImplementedError

    def update(self, row_id: str, fields: dict) -> dict | None:
        raise NotImplementedError

    def delete(self, row_id: str) -> bool:
        raise NotImplementedError

    def new_row_defaults(self) -> dict:
        return {}

    # editing ------------------------------------------------------------
    def resolve(self, row_id: str) -> str:
        return self.id_map.get(row_id, row_id)

    def is_complete(self, fields: dict) -> bool:
        return not any(_blank(fields.get(f)) for f in self.required_fields)

    async def load(self) -> None:
        records = await sync_to_async(self.fetch)()
        self.rows = {r['id']: {f: r.get(f) for f in self.fields} for r in records}
        self._saved = {row_id: dict(fields) for row_id, fields in self.rows.items()}
        self._deleted = set()
        self.controller.mark_ready()

    def add_row(self, **fields) -> str:
        row_id = f'{TEMP_PREFIX}{uuid.uuid4().hex[:12]}'
        self.rows[row_id] = {**{f: None for f in self.fields}, **self.new_row_defaults(), **fields}
        self.controller.touch()
        return row_id

    def edit_row(self, row_id: str, **changes) -> None:
        row = self.rows[self.resolve(row_id)]
        unknown = set(changes) - set(self.fields)
        if unknown:
            raise ValueError(f"unknown fields: {', '.join(sorted(unknown))}")
        row.update(changes)
        self.controller.touch()

    def remove_row(self, row_id: str) -> None:
        row_id = self.resolve(row_id)
        del self.rows[row_id]
        if not is_temp_id(row_id):
            self._deleted.add(row_id)
        self.controller.touch()

    # persistence --------------------------------------------------------
    async def _persist(self) -> None:
        work = {
            'rows': {row_id: dict(fields) for row_id, fields in self.rows.items()},
            'saved': {row_id: dict(fields) for row_id, fields in self._saved.items()},
            'deleted': set(self._deleted),
            'created': {},
            'updated': {},
            'removed': set(),
        }
        try:
            await sync_to_async(self._write)(work)
        finally:
            self._merge(work)

    def _write(self, work: dict) -> None:
        for row_id in work['deleted']:
            self.delete(row_id)
            work['removed'].add(row_id)
        for row_id, fields in work['rows'].items():
            if not self.is_complete(fields):
                continue
            if is_temp_id(row_id):
                work['created'][row_id] = self.create(fields)
            elif fields != work['saved'].get(row_id):
                if self.update(row_id, fields) is not None:
                    work['updated'][row_id] = fields

    def _merge(self, work: dict) -> None:
        self._deleted -= work['removed']
        for row_id in work['removed']:
            self._saved.pop(row_id, None)
        self._saved.update(work['updated'])
        for temp_id, record in work['created'].items():
            durable = record['id']
            self.id_map[temp_id] = durable
            self._saved[durable] = work['rows'][temp_id]
            if temp_id in self.rows:
                self.rows = {durable if k == temp_id else k: v for k, v in self.rows.items()}
            else:
                # removed while its create was in flight
                self._deleted.add(durable)
                self.controller.touch()
        if work['created']:
            logger.debug('%s: created %d rows', self.label, len(work['created']))


class ExpenseSheetDraft(TableDraft):
    fields = ('name', 'amount', 'date')
    required_fields = ('name', 'amount')
    label = 'expense sheet'

    def __init__(self, repository: LabRepository, day: date, **kwargs):
        self.day = day
        super().__init__(repository, **kwargs)

    def default_delay(self) -> float:
        return settings.LAB_EXPENSE_AUTOSAVE_DEBOUNCE_MS / 1000

    def new_row_defaults(self) -> dict:
        return {'date': self.day.isoformat()}

    def fetch(self):
        return self.repository.list_expenses(self.day)

    def create(self, fields):
        return self.repository.create_expense(fields)

    def update(self, row_id, fields):
        return self.repository.update_expense(row_id, fields)

    def delete(self, row_id):
        return self.repository.delete_expense(row_id)


class CatalogDraft(TableDraft):
    fields = ('name', 'unit', 'normalRange', 'price', 'testType')
    required_fields = ('name',)
    label = 'test catalog'

    def new_row_defaults(self) -> dict:
        return {'unit': '', 'normalRange': '', 'testType': 'standard'}

    def fetch(self):
        return self.repository.list_tests()

    def create(self, fields):
        return self.repository.create_test(fields)

    def update(self, row_id, fields):
        return self.repository.update_test(row_id, fields)

    def delete(self, row_id):
        return self.repository.delete_test(row_id)
