"""
Patient registration form with auto-save.

The form holds the patient fields, the selected tests, an optional
manual total and the visit date.  The first save creates the patient,
the visit and one result per selected test; later saves update the
patient and visit in place and reconcile results against the
selection: newly selected tests get a result, deselected tests lose
theirs, everything else is left alone.
"""
from __future__ import annotations

import logging
from datetime import date

from asgiref.sync import sync_to_async
from django.conf import settings
from django.utils import timezone

from lab.exceptions import DraftValidationError
from lab.repository.base import LabRepository
from .controller import DebouncedSaveController

logger = logging.getLogger(__name__)

PATIENT_FIELDS = ('name', 'age', 'gender', 'phone', 'source')


def _empty_patient() -> dict:
    return {'name': '', 'age': None, 'gender': '', 'phone': '', 'source': ''}


class PatientRegistrationDraft:

    def __init__(self, repository: LabRepository, *, delay: float | None = None, on_saved=None, on_error=None):
        self.repository = repository
        if delay is None:
            delay = settings.LAB_AUTOSAVE_DEBOUNCE_MS / 1000
        self.controller = DebouncedSaveController(
            self._persist,
            validate=self._validate,
            min_fields_present=self.has_required_fields,
            delay=delay,
            on_saved=on_saved,
            on_error=on_error,
            name='patient registration',
        )
        self._form = 0
        self._clear()
        self.controller.mark_ready()

    def _clear(self) -> None:
        self.patient = _empty_patient()
        # test id -> catalog record, in selection order
        self.selected: dict[str, dict] = {}
        self.manual_total: float | None = None
        self.visit_date: date = timezone.localdate()
        self.patient_id: str | None = None
        self.visit_id: str | None = None
        # test id -> durable result id
        self.result_ids: dict[str, str] = {}

    # form edits ---------------------------------------------------------
    def set_field(self, field: str, value) -> None:
        if field not in PATIENT_FIELDS:
            raise ValueError(f"unknown patient field {field!r}")
        self.patient[field] = value
        self.controller.touch()

    def select_test(self, test: dict) -> None:
        if test['id'] in self.selected:
            return
        self.selected[test['id']] = dict(test)
        self.controller.touch()

    def deselect_test(self, test_id: str) -> None:
        if self.selected.pop(test_id, None) is not None:
            self.controller.touch()

    def set_manual_total(self, value: float | None) -> None:
        self.manual_total = value
        self.controller.touch()

    def set_visit_date(self, value: date) -> None:
        self.visit_date = value
        self.controller.touch()

    @property
    def suggested_total(self) -> float:
        return float(sum(t.get('price') or 0 for t in self.selected.values()))

    @property
    def total(self) -> float:
        return self.suggested_total if self.manual_total is None else float(self.manual_total)

    def has_required_fields(self) -> bool:
        return bool((self.patient.get('name') or '').strip()) and bool(self.selected)

    def _validate(self) -> None:
        missing = []
        if not (self.patient.get('name') or '').strip():
            missing.append('name')
        if not self.selected:
            missing.append('tests')
        if missing:
            raise DraftValidationError(missing)

    # persistence --------------------------------------------------------
    def _snapshot(self) -> dict:
        return {
            'form': self._form,
            'patient': dict(self.patient),
            'tests': [dict(t) for t in self.selected.values()],
            'total': self.total,
            'visit_date': self.visit_date,
            'patient_id': self.patient_id,
            'visit_id': self.visit_id,
            'result_ids': dict(self.result_ids),
        }

    async def _persist(self) -> None:
        snapshot = self._snapshot()
        try:
            await sync_to_async(self._write)(snapshot)
        finally:
            # ids created before a failure are kept so the retry updates them
            if snapshot['form'] == self._form:
                self.patient_id = snapshot['patient_id']
                self.visit_id = snapshot['visit_id']
                self.result_ids = snapshot['result_ids']

    def _write(self, snapshot: dict) -> None:
        repo = self.repository
        patient = snapshot['patient']
        if snapshot['patient_id'] is None or repo.update_patient(snapshot['patient_id'], patient) is None:
            snapshot['patient_id'] = repo.create_patient(patient)['id']

        tests = snapshot['tests']
        visit = {
            'patientId': snapshot['patient_id'],
            'patientName': patient['name'],
            'visitDate': snapshot['visit_date'].isoformat(),
            'totalCost': snapshot['total'],
            'testIds': [t['id'] for t in tests],
        }
        if snapshot['visit_id'] is None or repo.update_visit(snapshot['visit_id'], visit) is None:
            snapshot['visit_id'] = repo.create_visit(visit)['id']
            snapshot['result_ids'] = {}

        result_ids = snapshot['result_ids']
        wanted = {t['id'] for t in tests}
        for test_id in [t for t in result_ids if t not in wanted]:
            repo.delete_test_result(result_ids.pop(test_id))
        for test in tests:
            if test['id'] in result_ids:
                continue
            result = repo.create_test_result({
                'visitId': snapshot['visit_id'],
                'testId': test['id'],
                'testName': test['name'],
                'unit': test.get('unit') or '',
                'normalRange': test.get('normalRange') or '',
                'price': test.get('price'),
                'testType': test.get('testType') or 'standard',
            })
            result_ids[test['id']] = result['id']
        logger.debug('Saved registration draft for visit %s (%d tests)', snapshot['visit_id'], len(tests))

    # lifecycle ----------------------------------------------------------
    async def finalize(self) -> dict | None:
        """Save explicitly and start a fresh form; returns the saved visit."""
        await self.controller.save_now()
        visit_id = self.visit_id
        visit = await sync_to_async(self.repository.get_visit)(visit_id)
        self.reset()
        return visit

    def reset(self) -> None:
        self.controller.reset()
        self._form += 1
        self._clear()

    async def load(self, visit_id: str) -> None:
        """Hydrate the form from an existing visit for further editing."""
        self.controller.ready = False
        self.reset()
        state = await sync_to_async(self._read)(visit_id)
        self.patient = state['patient']
        self.selected = state['selected']
        self.visit_date = state['visit_date']
        self.patient_id = state['patient_id']
        self.visit_id = visit_id
        self.result_ids = state['result_ids']
        self.manual_total = None if state['total'] == self.suggested_total else state['total']
        self.controller.mark_ready()

    def _read(self, visit_id: str) -> dict:
        repo = self.repository
        visit = repo.get_visit(visit_id)
        if visit is None:
            raise LookupError(f"visit {visit_id} not found")
        patient = repo.get_patient(visit['patientId']) or {'name': visit['patientName']}
        catalog = {t['id']: t for t in repo.list_tests()}
        results = repo.list_test_results(visit_id=visit_id)
        selected = {}
        for r in results:
            selected[r['testId']] = catalog.get(r['testId']) or {
                'id': r['testId'],
                'name': r['testName'],
                'unit': r['unit'],
                'normalRange': r['normalRange'],
                'price': r['price'],
                'testType': r['testType'],
            }
        return {
            'patient': {f: patient.get(f, _empty_patient()[f]) for f in PATIENT_FIELDS},
            'selected': selected,
            'visit_date': date.fromisoformat(visit['visitDate']),
            'patient_id': visit['patientId'],
            'result_ids': {r['testId']: r['id'] for r in results},
            'total': float(visit['totalCost'] or 0),
        }
