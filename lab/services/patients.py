"""
Patient and visit services.

A visit stores a snapshot of the patient's name; renaming the patient
rewrites that snapshot on every visit.  Deleting a patient removes the
visits and their results through the foreign-key cascade.
"""
from __future__ import annotations

import logging
from datetime import date

from django.db import transaction
from django.utils import timezone

from lab.models import LabTest, Patient, TestResult, Visit
from . import results as result_services

logger = logging.getLogger(__name__)


def format_patient(p: Patient) -> dict:
    return {
        'id': p.id,
        'name': p.name,
        'age': p.age,
        'gender': p.gender,
        'phone': p.phone,
        'source': p.source,
        'createdAt': p.created_at.isoformat() if p.created_at else None,
    }


def format_visit(v: Visit) -> dict:
    return {
        'id': v.id,
        'patientId': v.patient_id,
        'patientName': v.patient_name,
        'visitDate': v.visit_date.isoformat() if v.visit_date else None,
        'totalCost': v.total_cost,
        'testIds': list(v.test_ids or []),
        'createdAt': v.created_at.isoformat() if v.created_at else None,
    }


def create_patient(**fields) -> Patient:
    return Patient.objects.create(**fields)


@transaction.atomic
def update_patient(patient: Patient, **changes) -> Patient:
    renamed = 'name' in changes and changes['name'] != patient.name
    for field, value in changes.items():
        setattr(patient, field, value)
    patient.save()
    if renamed:
        Visit.objects.filter(patient=patient).update(patient_name=patient.name)
    return patient


def delete_patient(patient: Patient) -> None:
    visits = Visit.objects.filter(patient=patient).count()
    results = TestResult.objects.filter(visit__patient=patient).count()
    patient.delete()
    logger.info('Deleted patient %s with %d visits and %d results', patient.pk, visits, results)


def list_visits(visit_date: date | None = None, patient_id: str | None = None):
    qs = Visit.objects.all()
    if visit_date:
        qs = qs.filter(visit_date=visit_date)
    if patient_id:
        qs = qs.filter(patient_id=patient_id)
    return qs


def create_visit(patient: Patient, **fields) -> Visit:
    fields.pop('patient_id', None)
    if not fields.get('patient_name'):
        fields['patient_name'] = patient.name
    return Visit.objects.create(patient=patient, **fields)


def update_visit(visit: Visit, **changes) -> Visit:
    patient = changes.pop('patient', None)
    changes.pop('patient_id', None)
    if patient is not None:
        visit.patient = patient
        changes.setdefault('patient_name', patient.name)
    for field, value in changes.items():
        setattr(visit, field, value)
    if not visit.patient_name:
        visit.patient_name = visit.patient.name
    visit.save()
    return visit


def suggested_total(tests: list[LabTest]) -> float:
    return float(sum(t.price or 0 for t in tests))


@transaction.atomic
def register_patient(patient_fields: dict, tests: list[LabTest], *, visit_date: date | None = None,
                     total_cost: float | None = None) -> tuple[Patient, Visit, list[TestResult]]:
    """Create a patient, the first visit and one result per ordered test.

    ``total_cost`` defaults to the sum of the test prices; when given it
    is stored as entered.
    """
    patient = Patient.objects.create(**patient_fields)
    visit = Visit.objects.create(
        patient=patient,
        patient_name=patient.name,
        visit_date=visit_date or timezone.localdate(),
        total_cost=suggested_total(tests) if total_cost is None else total_cost,
        test_ids=[t.id for t in tests],
    )
    results = [result_services.create_result_for_test(visit, t) for t in tests]
    logger.info('Registered patient %s with %d tests', patient.id, len(results))
    return patient, visit, results
