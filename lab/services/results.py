"""
Test result services.

Results snapshot the catalog entry (name, unit, normal range, price,
type) when created.  Urine results carry the structured sub-form,
pre-filled with normal findings.  Editing ``unit`` or ``normal_range``
on a result writes the value back to the catalog test, which in turn
copies it onto every other result of that test.
"""
from __future__ import annotations

import logging

from django.db import transaction
from rest_framework.exceptions import ValidationError

from lab.constants import default_urine_data
from lab.models import LabTest, TestResult, Visit, TEST_TYPE_URINE
from . import catalog

logger = logging.getLogger(__name__)


def format_result(r: TestResult) -> dict:
    return {
        'id': r.id,
        'visitId': r.visit_id,
        'testId': r.test_id,
        'testName': r.test_name,
        'result': r.result,
        'unit': r.unit,
        'normalRange': r.normal_range,
        'price': r.price,
        'testType': r.test_type,
        'urineData': r.urine_data,
        'createdAt': r.created_at.isoformat() if r.created_at else None,
    }


def list_results(visit_id: str | None = None):
    qs = TestResult.objects.all()
    if visit_id:
        qs = qs.filter(visit_id=visit_id)
    return qs


def create_result(visit: Visit, **fields) -> TestResult:
    fields.pop('visit_id', None)
    if TestResult.objects.filter(visit=visit, test_id=fields['test_id']).exists():
        raise ValidationError({'testId': 'This test already has a result on the visit'})
    if fields.get('test_type') == TEST_TYPE_URINE:
        fields['urine_data'] = {**default_urine_data(), **(fields.get('urine_data') or {})}
    else:
        fields['urine_data'] = None
    return TestResult.objects.create(visit=visit, **fields)


def create_result_for_test(visit: Visit, test: LabTest) -> TestResult:
    return create_result(
        visit,
        test_id=test.id,
        test_name=test.name,
        unit=test.unit,
        normal_range=test.normal_range,
        price=test.price,
        test_type=test.test_type,
    )


def _apply(result: TestResult, changes: dict) -> dict:
    urine = changes.pop('urine_data', None)
    for field, value in changes.items():
        setattr(result, field, value)
    if urine is not None and result.test_type == TEST_TYPE_URINE:
        result.urine_data = {**default_urine_data(), **(result.urine_data or {}), **urine}
    result.save()
    return {f: changes[f] for f in catalog.SYNCED_FIELDS if f in changes}


def _write_back(test_id: str, synced: dict) -> None:
    if not synced:
        return
    test = LabTest.objects.filter(pk=test_id).first()
    if test is None:
        logger.warning('Result edit for removed test %s not written back', test_id)
        return
    catalog.update_test(test, **synced)


@transaction.atomic
def update_result(result: TestResult, /, **changes) -> TestResult:
    _write_back(result.test_id, _apply(result, changes))
    result.refresh_from_db()
    return result


@transaction.atomic
def batch_update(items: list[tuple[TestResult, dict]]) -> list[TestResult]:
    """Apply several result edits, writing back to each test once."""
    pending: dict[str, dict] = {}
    for result, changes in items:
        synced = _apply(result, dict(changes))
        if synced:
            pending.setdefault(result.test_id, {}).update(synced)
    for test_id, synced in pending.items():
        _write_back(test_id, synced)
    for result, _ in items:
        result.refresh_from_db()
    return [r for r, _ in items]


def delete_result(result: TestResult) -> None:
    result.delete()
