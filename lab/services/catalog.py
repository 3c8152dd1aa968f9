"""
Test catalog services.

``unit`` and ``normal_range`` are cached on every TestResult when it is
created; editing them on the catalog entry copies the new values onto
all results that reference the test.
"""
from __future__ import annotations

import logging

from django.db import transaction

from lab.constants import DEFAULT_TESTS, URINE_TEST
from lab.models import LabTest, TestResult, TEST_TYPE_STANDARD, TEST_TYPE_URINE

logger = logging.getLogger(__name__)

SYNCED_FIELDS = ('unit', 'normal_range')


def format_test(t: LabTest) -> dict:
    return {
        'id': t.id,
        'name': t.name,
        'unit': t.unit,
        'normalRange': t.normal_range,
        'price': t.price,
        'testType': t.test_type,
        'createdAt': t.created_at.isoformat() if t.created_at else None,
    }


def normalized_name(name: str | None) -> str:
    return (name or '').strip().lower()


def create_test(**fields) -> LabTest:
    return LabTest.objects.create(**fields)


@transaction.atomic
def update_test(test: LabTest, **changes) -> LabTest:
    for field, value in changes.items():
        setattr(test, field, value)
    test.save()
    synced = {f: changes[f] for f in SYNCED_FIELDS if f in changes}
    if synced:
        count = TestResult.objects.filter(test_id=test.id).update(**synced)
        logger.info('Copied %s of test %s onto %d results', '/'.join(synced), test.id, count)
    return test


def delete_test(test: LabTest) -> None:
    # Results keep their snapshot of the test
    test.delete()


def ensure_urine_test() -> tuple[LabTest, bool]:
    existing = (
        LabTest.objects.filter(test_type=TEST_TYPE_URINE).first()
        or LabTest.objects.filter(name__iexact=URINE_TEST['name']).first()
    )
    if existing:
        return existing, False
    test = LabTest.objects.create(
        name=URINE_TEST['name'],
        unit=URINE_TEST['unit'],
        normal_range=URINE_TEST['normalRange'],
        price=URINE_TEST['price'],
        test_type=TEST_TYPE_URINE,
    )
    logger.info('Added urine analysis test %s', test.id)
    return test, True


@transaction.atomic
def initialize_default_tests() -> list[LabTest]:
    """Insert the default catalog, skipping names that already exist."""
    existing = {normalized_name(n) for n in LabTest.objects.values_list('name', flat=True)}
    created: list[LabTest] = []
    for name, unit, normal_range, price in DEFAULT_TESTS:
        key = normalized_name(name)
        if key in existing:
            continue
        created.append(LabTest.objects.create(
            name=name, unit=unit, normal_range=normal_range, price=price, test_type=TEST_TYPE_STANDARD,
        ))
        existing.add(key)
    urine, urine_created = ensure_urine_test()
    if urine_created:
        created.append(urine)
    logger.info('Default catalog seeded: %d tests created', len(created))
    return created
