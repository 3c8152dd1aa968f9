"""
Bulk data operations: clearing day-to-day records and the JSON backup
format shared with the embedded storage adapter.
"""
from __future__ import annotations

import logging
from datetime import date

from django.db import transaction
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from lab.constants import BACKUP_VERSION
from lab.exceptions import UnsupportedBackupError
from lab.models import DashboardLayout, Expense, LabTest, Patient, Setting, TestResult, Visit, TEST_TYPE_STANDARD
from .catalog import format_test
from .finance import format_expense
from .layouts import format_layout
from .patients import format_patient, format_visit
from .preferences import format_setting
from .results import format_result

logger = logging.getLogger(__name__)


@transaction.atomic
def delete_all_data() -> dict[str, int]:
    """Remove patients, visits, results and expenses; keep the catalog and settings."""
    counts = {
        'testResults': TestResult.objects.all().delete()[0],
        'visits': Visit.objects.all().delete()[0],
        'patients': Patient.objects.all().delete()[0],
        'expenses': Expense.objects.all().delete()[0],
    }
    logger.warning('All patient data cleared: %s', counts)
    return counts


def export_all_data() -> dict:
    return {
        'version': BACKUP_VERSION,
        'generatedAt': timezone.now().isoformat(),
        'tests': [format_test(t) for t in LabTest.objects.all()],
        'patients': [format_patient(p) for p in Patient.objects.all()],
        'visits': [format_visit(v) for v in Visit.objects.all()],
        'testResults': [format_result(r) for r in TestResult.objects.all()],
        'expenses': [format_expense(e) for e in Expense.objects.all()],
        'settings': [format_setting(s) for s in Setting.objects.all()],
        'layouts': [format_layout(layout) for layout in DashboardLayout.objects.all()],
    }


def check_backup_version(payload) -> None:
    if not isinstance(payload, dict) or payload.get('version') != BACKUP_VERSION:
        raise UnsupportedBackupError()


def _date(value) -> date | None:
    if isinstance(value, date):
        return value
    return parse_date(value) if value else None


def _required_date(value) -> date:
    d = _date(value)
    if d is None:
        raise ValueError(f"invalid date {value!r}")
    return d


def _number(value) -> float | None:
    return None if value is None or value == '' else float(value)


def _text(record: dict, key: str) -> str:
    value = record[key]
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"'{key}' must be a non-empty string")
    return value


def _age(value) -> int | None:
    if value is None or value == '':
        return None
    age = int(value)
    if age < 0:
        raise ValueError(f"invalid age {value!r}")
    return age


def _stamp(record: dict):
    value = record.get('createdAt')
    return parse_datetime(value) if value else None


# Record -> unsaved instance builders, shared with the embedded adapter

def lab_test_from_record(t: dict) -> LabTest:
    return LabTest(id=_text(t, 'id'), name=_text(t, 'name'), unit=t.get('unit') or '',
                   normal_range=t.get('normalRange') or '', price=_number(t.get('price')),
                   test_type=t.get('testType') or TEST_TYPE_STANDARD, created_at=_stamp(t))


def patient_from_record(p: dict) -> Patient:
    return Patient(id=_text(p, 'id'), name=_text(p, 'name'), age=_age(p.get('age')), gender=p.get('gender') or '',
                   phone=p.get('phone') or '', source=p.get('source') or '', created_at=_stamp(p))


def visit_from_record(v: dict) -> Visit:
    return Visit(id=_text(v, 'id'), patient_id=_text(v, 'patientId'), patient_name=v.get('patientName') or '',
                 visit_date=_required_date(v['visitDate']), total_cost=_number(v.get('totalCost')) or 0,
                 test_ids=list(v.get('testIds') or []), created_at=_stamp(v))


def result_from_record(r: dict) -> TestResult:
    return TestResult(id=_text(r, 'id'), visit_id=_text(r, 'visitId'), test_id=_text(r, 'testId'),
                      test_name=_text(r, 'testName'), result=r.get('result') or '', unit=r.get('unit') or '',
                      normal_range=r.get('normalRange') or '', price=_number(r.get('price')),
                      test_type=r.get('testType') or TEST_TYPE_STANDARD, urine_data=r.get('urineData'),
                      created_at=_stamp(r))


def expense_from_record(e: dict) -> Expense:
    return Expense(id=_text(e, 'id'), name=_text(e, 'name'), amount=float(e['amount']),
                   date=_required_date(e['date']), created_at=_stamp(e))


def setting_from_record(s: dict) -> Setting:
    return Setting(id=_text(s, 'id'), key=_text(s, 'key'), value=s.get('value') or '')


def layout_from_record(d: dict) -> DashboardLayout:
    return DashboardLayout(id=_text(d, 'id'), section_name=_text(d, 'sectionName'),
                           display_name=_text(d, 'displayName'),
                           position_x=int(d.get('positionX', 0)), position_y=int(d.get('positionY', 0)),
                           width=int(d.get('width', 1)), height=int(d.get('height', 1)), color=d.get('color') or '',
                           route=_text(d, 'route'))


# Dependency order: parents before children.  The last item names the
# attribute that must be unique within the section.
BACKUP_SECTIONS = (
    ('tests', LabTest, lab_test_from_record, 'pk'),
    ('patients', Patient, patient_from_record, 'pk'),
    ('visits', Visit, visit_from_record, 'pk'),
    ('testResults', TestResult, result_from_record, 'pk'),
    ('expenses', Expense, expense_from_record, 'pk'),
    ('settings', Setting, setting_from_record, 'key'),
    ('layouts', DashboardLayout, layout_from_record, 'section_name'),
)

# child section, parent id attribute, parent section
BACKUP_REFERENCES = (
    ('visits', 'patient_id', 'patients'),
    ('testResults', 'visit_id', 'visits'),
)


def build_backup(payload) -> dict[str, list]:
    """Check a backup and turn every record into an unsaved instance.

    Nothing is written.  A missing section counts as empty; a malformed
    record, a duplicate key or a dangling parent id raises
    ``UnsupportedBackupError`` naming the section and the record index.
    """
    check_backup_version(payload)
    built = {}
    for key, _, build, unique in BACKUP_SECTIONS:
        records = payload.get(key) or []
        if not isinstance(records, list):
            raise UnsupportedBackupError(f"Backup section '{key}' must be a list.")
        objs, seen = [], set()
        for i, record in enumerate(records):
            try:
                obj = build(record)
            except KeyError as e:
                raise UnsupportedBackupError(f"Record {i} in '{key}' is missing {e}.")
            except (TypeError, ValueError, AttributeError) as e:
                raise UnsupportedBackupError(f"Record {i} in '{key}' is malformed: {e}")
            marker = getattr(obj, unique)
            if marker in seen:
                raise UnsupportedBackupError(f"Record {i} in '{key}' repeats {marker!r}.")
            seen.add(marker)
            objs.append(obj)
        built[key] = objs
    for child, attr, parent in BACKUP_REFERENCES:
        known = {obj.pk for obj in built[parent]}
        for i, obj in enumerate(built[child]):
            if getattr(obj, attr) not in known:
                raise UnsupportedBackupError(f"Record {i} in '{child}' points at a missing {parent[:-1]}.")
    return built


@transaction.atomic
def import_all_data(payload: dict) -> dict[str, int]:
    """Replace every laboratory table with the backup contents.

    Sections absent from the backup leave their table empty.
    """
    built = build_backup(payload)
    for _, model, _, _ in reversed(BACKUP_SECTIONS):
        model.objects.all().delete()
    counts = {}
    for key, model, _, _ in BACKUP_SECTIONS:
        objs = built[key]
        stamps = {obj.pk: getattr(obj, 'created_at', None) for obj in objs}
        model.objects.bulk_create(objs)
        # auto_now_add replaced the stamps on insert
        for pk, stamp in stamps.items():
            if stamp is not None:
                model.objects.filter(pk=pk).update(created_at=stamp)
        counts[key] = len(objs)
    logger.info('Backup imported: %s', counts)
    return counts
