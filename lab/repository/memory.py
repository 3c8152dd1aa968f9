"""
Embedded adapter: an in-process store with hand-coded cascades.

Rows are kept as unsaved model instances so that validation, record
formatting and backup (de)serialization are shared with the relational
adapter; nothing here touches the database.  The store is guarded by a
lock because the auto-save drafts call it from worker threads.
"""
from __future__ import annotations

import logging
import threading
from datetime import date

from django.utils import timezone
from rest_framework.exceptions import ValidationError

from lab.constants import BACKUP_VERSION, DEFAULT_TESTS, URINE_TEST, default_urine_data
from lab.models import (
    DashboardLayout, Expense, LabTest, Patient, Setting, TestResult, Visit,
    TEST_TYPE_STANDARD, TEST_TYPE_URINE,
)
from lab.serializers.catalog import LabTestSerializer
from lab.serializers.finance import ExpenseSerializer
from lab.serializers.layouts import LayoutSerializer
from lab.serializers.patients import PatientSerializer, VisitSerializer
from lab.serializers.results import TestResultSerializer, TestResultUpdateSerializer
from lab.services import data
from lab.services.catalog import SYNCED_FIELDS, format_test, normalized_name
from lab.services.finance import format_expense
from lab.services.layouts import DEFAULTS_BY_SECTION, default_layout_fields, format_layout
from lab.services.patients import format_patient, format_visit
from lab.services.preferences import clean_setting_value, format_setting
from lab.services.results import format_result
from .base import LabRepository, validated

logger = logging.getLogger(__name__)


def _apply(obj, fields: dict):
    for field, value in fields.items():
        setattr(obj, field, value)
    return obj


class MemoryRepository(LabRepository):

    def __init__(self):
        self._lock = threading.RLock()
        self._tests: dict[str, LabTest] = {}
        self._patients: dict[str, Patient] = {}
        self._visits: dict[str, Visit] = {}
        self._results: dict[str, TestResult] = {}
        self._expenses: dict[str, Expense] = {}
        self._settings: dict[str, Setting] = {}
        self._layouts: dict[str, DashboardLayout] = {}

    @staticmethod
    def _stamped(obj):
        obj.created_at = timezone.now()
        return obj

    # tests ---------------------------------------------------------------
    def list_tests(self):
        with self._lock:
            return [format_test(t) for t in sorted(self._tests.values(), key=lambda t: t.name)]

    def get_test(self, test_id):
        with self._lock:
            t = self._tests.get(test_id)
            return format_test(t) if t else None

    def create_test(self, payload):
        fields = validated(LabTestSerializer, payload)
        with self._lock:
            t = self._stamped(LabTest(**fields))
            self._tests[t.id] = t
            return format_test(t)

    def _update_test(self, t: LabTest, fields: dict) -> None:
        _apply(t, fields)
        synced = {f: fields[f] for f in SYNCED_FIELDS if f in fields}
        if synced:
            for r in self._results.values():
                if r.test_id == t.id:
                    _apply(r, synced)

    def update_test(self, test_id, payload):
        fields = validated(LabTestSerializer, payload, partial=True)
        with self._lock:
            t = self._tests.get(test_id)
            if t is None:
                return None
            self._update_test(t, fields)
            return format_test(t)

    def delete_test(self, test_id):
        with self._lock:
            return self._tests.pop(test_id, None) is not None

    def ensure_urine_test(self):
        with self._lock:
            for t in self._tests.values():
                if t.test_type == TEST_TYPE_URINE or normalized_name(t.name) == 'urine':
                    return format_test(t), False
            t = self._stamped(LabTest(
                name=URINE_TEST['name'], unit=URINE_TEST['unit'], normal_range=URINE_TEST['normalRange'],
                price=URINE_TEST['price'], test_type=TEST_TYPE_URINE,
            ))
            self._tests[t.id] = t
            return format_test(t), True

    def initialize_default_tests(self):
        with self._lock:
            existing = {normalized_name(t.name) for t in self._tests.values()}
            created = []
            for name, unit, normal_range, price in DEFAULT_TESTS:
                if normalized_name(name) in existing:
                    continue
                t = self._stamped(LabTest(name=name, unit=unit, normal_range=normal_range, price=price,
                                          test_type=TEST_TYPE_STANDARD))
                self._tests[t.id] = t
                existing.add(normalized_name(name))
                created.append(format_test(t))
            urine, urine_created = self.ensure_urine_test()
            if urine_created:
                created.append(urine)
            return created

    # patients ------------------------------------------------------------
    def list_patients(self):
        with self._lock:
            rows = sorted(self._patients.values(), key=lambda p: p.created_at, reverse=True)
            return [format_patient(p) for p in rows]

    def get_patient(self, patient_id):
        with self._lock:
            p = self._patients.get(patient_id)
            return format_patient(p) if p else None

    def create_patient(self, payload):
        fields = validated(PatientSerializer, payload)
        with self._lock:
            p = self._stamped(Patient(**fields))
            self._patients[p.id] = p
            return format_patient(p)

    def update_patient(self, patient_id, payload):
        fields = validated(PatientSerializer, payload, partial=True)
        with self._lock:
            p = self._patients.get(patient_id)
            if p is None:
                return None
            _apply(p, fields)
            if 'name' in fields:
                for v in self._visits.values():
                    if v.patient_id == patient_id:
                        v.patient_name = p.name
            return format_patient(p)

    def delete_patient(self, patient_id):
        with self._lock:
            if self._patients.pop(patient_id, None) is None:
                return False
            visit_ids = {vid for vid, v in self._visits.items() if v.patient_id == patient_id}
            result_ids = [rid for rid, r in self._results.items() if r.visit_id in visit_ids]
            for vid in visit_ids:
                del self._visits[vid]
            for rid in result_ids:
                del self._results[rid]
            logger.info('Deleted patient %s with %d visits and %d results', patient_id, len(visit_ids), len(result_ids))
            return True

    # visits --------------------------------------------------------------
    def list_visits(self, visit_date: date | None = None, patient_id: str | None = None):
        with self._lock:
            rows = [
                v for v in self._visits.values()
                if (visit_date is None or v.visit_date == visit_date)
                and (patient_id is None or v.patient_id == patient_id)
            ]
            rows.sort(key=lambda v: (v.visit_date, v.created_at), reverse=True)
            return [format_visit(v) for v in rows]

    def get_visit(self, visit_id):
        with self._lock:
            v = self._visits.get(visit_id)
            return format_visit(v) if v else None

    def _patient_or_error(self, patient_id) -> Patient:
        p = self._patients.get(patient_id)
        if p is None:
            raise ValidationError({'patientId': 'Unknown patient'})
        return p

    def create_visit(self, payload):
        fields = validated(VisitSerializer, payload)
        with self._lock:
            patient = self._patient_or_error(fields['patient_id'])
            fields.setdefault('test_ids', [])
            if not fields.get('patient_name'):
                fields['patient_name'] = patient.name
            v = self._stamped(Visit(**fields))
            self._visits[v.id] = v
            return format_visit(v)

    def update_visit(self, visit_id, payload):
        fields = validated(VisitSerializer, payload, partial=True)
        with self._lock:
            v = self._visits.get(visit_id)
            if v is None:
                return None
            if 'patient_id' in fields and fields['patient_id'] != v.patient_id:
                fields.setdefault('patient_name', self._patient_or_error(fields['patient_id']).name)
            _apply(v, fields)
            if not v.patient_name and v.patient_id in self._patients:
                v.patient_name = self._patients[v.patient_id].name
            return format_visit(v)

    def delete_visit(self, visit_id):
        with self._lock:
            if self._visits.pop(visit_id, None) is None:
                return False
            for rid in [rid for rid, r in self._results.items() if r.visit_id == visit_id]:
                del self._results[rid]
            return True

    def register_patient(self, payload):
        with self._lock:
            return super().register_patient(payload)

    # test results --------------------------------------------------------
    def list_test_results(self, visit_id=None):
        with self._lock:
            rows = [r for r in self._results.values() if visit_id is None or r.visit_id == visit_id]
            rows.sort(key=lambda r: r.created_at)
            return [format_result(r) for r in rows]

    def create_test_result(self, payload):
        fields = validated(TestResultSerializer, payload)
        with self._lock:
            if fields['visit_id'] not in self._visits:
                raise ValidationError({'visitId': 'Unknown visit'})
            if any(r.visit_id == fields['visit_id'] and r.test_id == fields['test_id'] for r in self._results.values()):
                raise ValidationError({'testId': 'This test already has a result on the visit'})
            if fields.get('test_type') == TEST_TYPE_URINE:
                fields['urine_data'] = {**default_urine_data(), **(fields.get('urine_data') or {})}
            else:
                fields['urine_data'] = None
            r = self._stamped(TestResult(**fields))
            self._results[r.id] = r
            return format_result(r)

    def _apply_result(self, r: TestResult, fields: dict) -> dict:
        urine = fields.pop('urine_data', None)
        _apply(r, fields)
        if urine is not None and r.test_type == TEST_TYPE_URINE:
            r.urine_data = {**default_urine_data(), **(r.urine_data or {}), **urine}
        return {f: fields[f] for f in SYNCED_FIELDS if f in fields}

    def _write_back(self, test_id: str, synced: dict) -> None:
        t = self._tests.get(test_id)
        if t is None:
            logger.warning('Result edit for removed test %s not written back', test_id)
            return
        self._update_test(t, synced)

    def update_test_result(self, result_id, payload):
        fields = validated(TestResultUpdateSerializer, payload, partial=True)
        with self._lock:
            r = self._results.get(result_id)
            if r is None:
                return None
            synced = self._apply_result(r, fields)
            if synced:
                self._write_back(r.test_id, synced)
            return format_result(r)

    def update_test_results_batch(self, updates):
        items = [(u['id'], validated(TestResultUpdateSerializer, u.get('data') or {}, partial=True)) for u in updates]
        with self._lock:
            pending: dict[str, dict] = {}
            touched = []
            for result_id, fields in items:
                r = self._results.get(result_id)
                if r is None:
                    continue
                synced = self._apply_result(r, fields)
                if synced:
                    pending.setdefault(r.test_id, {}).update(synced)
                touched.append(r)
            for test_id, synced in pending.items():
                self._write_back(test_id, synced)
            return [format_result(r) for r in touched]

    def delete_test_result(self, result_id):
        with self._lock:
            return self._results.pop(result_id, None) is not None

    # expenses ------------------------------------------------------------
    def list_expenses(self, day=None):
        with self._lock:
            rows = [e for e in self._expenses.values() if day is None or e.date == day]
            rows.sort(key=lambda e: (e.date, e.created_at))
            return [format_expense(e) for e in rows]

    def create_expense(self, payload):
        fields = validated(ExpenseSerializer, payload)
        with self._lock:
            e = self._stamped(Expense(**fields))
            self._expenses[e.id] = e
            return format_expense(e)

    def update_expense(self, expense_id, payload):
        fields = validated(ExpenseSerializer, payload, partial=True)
        with self._lock:
            e = self._expenses.get(expense_id)
            if e is None:
                return None
            return format_expense(_apply(e, fields))

    def delete_expense(self, expense_id):
        with self._lock:
            return self._expenses.pop(expense_id, None) is not None

    # settings & layouts --------------------------------------------------
    def list_settings(self):
        with self._lock:
            return [format_setting(s) for s in self._settings.values()]

    def get_setting(self, key):
        with self._lock:
            s = self._settings.get(key)
            return format_setting(s) if s else None

    def set_setting(self, key, value):
        value = clean_setting_value(key, value)
        with self._lock:
            s = self._settings.get(key)
            if s is None:
                s = self._settings[key] = Setting(key=key, value=value)
            else:
                s.value = value
            return format_setting(s)

    def _ordered_layouts(self):
        return sorted(self._layouts.values(), key=lambda d: (d.position_y, d.position_x))

    def _new_layout(self, section_name: str, fields: dict) -> DashboardLayout:
        base = default_layout_fields(section_name) if section_name in DEFAULTS_BY_SECTION else {}
        base.update(fields)
        if not base.get('display_name') or not base.get('route'):
            raise ValidationError({'sectionName': f'Unknown section {section_name!r} needs displayName and route'})
        layout = DashboardLayout(section_name=section_name, **base)
        self._layouts[section_name] = layout
        return layout

    def list_layouts(self):
        with self._lock:
            if not self._layouts:
                for section_name in DEFAULTS_BY_SECTION:
                    self._new_layout(section_name, {})
            return [format_layout(layout) for layout in self._ordered_layouts()]

    def initialize_default_layouts(self):
        with self._lock:
            created = [
                self._new_layout(section_name, {})
                for section_name in DEFAULTS_BY_SECTION
                if section_name not in self._layouts
            ]
            return [format_layout(layout) for layout in created]

    def upsert_layout(self, section_name, payload):
        fields = validated(LayoutSerializer, payload, partial=True)
        with self._lock:
            layout = self._layouts.get(section_name)
            if layout is None:
                layout = self._new_layout(section_name, fields)
            else:
                _apply(layout, fields)
            return format_layout(layout)

    # bulk ----------------------------------------------------------------
    def delete_all_data(self):
        with self._lock:
            counts = {
                'testResults': len(self._results),
                'visits': len(self._visits),
                'patients': len(self._patients),
                'expenses': len(self._expenses),
            }
            for store in (self._results, self._visits, self._patients, self._expenses):
                store.clear()
            return counts

    def export_all_data(self):
        with self._lock:
            return {
                'version': BACKUP_VERSION,
                'generatedAt': timezone.now().isoformat(),
                'tests': self.list_tests(),
                'patients': self.list_patients(),
                'visits': self.list_visits(),
                'testResults': self.list_test_results(),
                'expenses': self.list_expenses(),
                'settings': self.list_settings(),
                'layouts': [format_layout(layout) for layout in self._ordered_layouts()],
            }

    def import_all_data(self, payload):
        built = data.build_backup(payload)
        now = timezone.now()
        fresh = {}
        for key, objs in built.items():
            for obj in objs:
                if hasattr(obj, 'created_at') and obj.created_at is None:
                    obj.created_at = now
            if key == 'settings':
                fresh[key] = {obj.key: obj for obj in objs}
            elif key == 'layouts':
                fresh[key] = {obj.section_name: obj for obj in objs}
            else:
                fresh[key] = {obj.pk: obj for obj in objs}
        with self._lock:
            self._tests = fresh['tests']
            self._patients = fresh['patients']
            self._visits = fresh['visits']
            self._results = fresh['testResults']
            self._expenses = fresh['expenses']
            self._settings = fresh['settings']
            self._layouts = fresh['layouts']
            counts = {key: len(store) for key, store in fresh.items()}
        logger.info('Backup imported: %s', counts)
        return counts
