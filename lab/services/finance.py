"""Expenses and the daily financial summary."""
from __future__ import annotations

from datetime import date

from lab.models import Expense, Visit
from .patients import format_patient, format_visit

UNKNOWN_SOURCE = 'Unknown'


def format_expense(e: Expense) -> dict:
    return {
        'id': e.id,
        'name': e.name,
        'amount': e.amount,
        'date': e.date.isoformat() if e.date else None,
        'createdAt': e.created_at.isoformat() if e.created_at else None,
    }


def list_expenses(day: date | None = None):
    qs = Expense.objects.all()
    if day:
        qs = qs.filter(date=day)
    return qs


def create_expense(**fields) -> Expense:
    return Expense.objects.create(**fields)


def update_expense(expense: Expense, **changes) -> Expense:
    for field, value in changes.items():
        setattr(expense, field, value)
    expense.save()
    return expense


def build_daily_summary(day: date, visits: list[dict], patients: dict[str, dict], expenses: list[dict]) -> dict:
    """Group one day's income by patient source and total the expenses.

    Works on API-shaped records so both storage adapters can share it.
    """
    sources: dict[str, dict] = {}
    for visit in visits:
        patient = patients.get(visit['patientId']) or {}
        source = (patient.get('source') or '').strip() or UNKNOWN_SOURCE
        row = sources.setdefault(source, {'source': source, 'patientCount': 0, 'income': 0.0})
        row['patientCount'] += 1
        row['income'] += float(visit.get('totalCost') or 0)
    rows = [
        {'name': e['name'], 'amount': float(e['amount'])}
        for e in expenses
        if (e.get('name') or '').strip() and e.get('amount')
    ]
    total_income = sum(s['income'] for s in sources.values())
    total_expenses = sum(e['amount'] for e in rows)
    return {
        'date': day.isoformat(),
        'sources': sorted(sources.values(), key=lambda s: s['source'].lower()),
        'expenses': rows,
        'totalIncome': total_income,
        'totalExpenses': total_expenses,
        'net': total_income - total_expenses,
    }


def daily_summary(day: date) -> dict:
    visits = list(Visit.objects.filter(visit_date=day).select_related('patient'))
    patients = {v.patient_id: format_patient(v.patient) for v in visits}
    return build_daily_summary(
        day,
        [format_visit(v) for v in visits],
        patients,
        [format_expense(e) for e in list_expenses(day)],
    )
