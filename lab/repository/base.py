"""
Storage-agnostic repository interface.

Both adapters exchange API-shaped records (plain dicts with camelCase
keys) so that callers such as the auto-save drafts, the backup commands
and the print pipeline can run unchanged against either store.

Conventions shared by every adapter:

* ``get_*`` and ``update_*`` return ``None`` when the id is unknown.
* ``delete_*`` returns ``False`` when nothing was deleted.
* Input dicts are validated with the same DRF serializers the HTTP
  views use; invalid input raises ``rest_framework.exceptions.ValidationError``.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from django.utils import timezone
from rest_framework.exceptions import ValidationError

from lab.serializers.patients import PatientRegistrationSerializer
from lab.services.finance import build_daily_summary


def validated(serializer_cls, payload: dict, *, partial: bool = False) -> dict:
    s = serializer_cls(data=payload, partial=partial)
    s.is_valid(raise_exception=True)
    return dict(s.validated_data)


class LabRepository(ABC):

    # tests ---------------------------------------------------------------
    @abstractmethod
    def list_tests(self) -> list[dict]: ...

    @abstractmethod
    def get_test(self, test_id: str) -> dict | None: ...

    @abstractmethod
    def create_test(self, data: dict) -> dict: ...

    @abstractmethod
    def update_test(self, test_id: str, data: dict) -> dict | None: ...

    @abstractmethod
    def delete_test(self, test_id: str) -> bool: ...

    @abstractmethod
    def initialize_default_tests(self) -> list[dict]: ...

    @abstractmethod
    def ensure_urine_test(self) -> tuple[dict, bool]: ...

    # patients ------------------------------------------------------------
    @abstractmethod
    def list_patients(self) -> list[dict]: ...

    @abstractmethod
    def get_patient(self, patient_id: str) -> dict | None: ...

    @abstractmethod
    def create_patient(self, data: dict) -> dict: ...

    @abstractmethod
    def update_patient(self, patient_id: str, data: dict) -> dict | None: ...

    @abstractmethod
    def delete_patient(self, patient_id: str) -> bool: ...

    # visits --------------------------------------------------------------
    @abstractmethod
    def list_visits(self, visit_date: date | None = None, patient_id: str | None = None) -> list[dict]: ...

    @abstractmethod
    def get_visit(self, visit_id: str) -> dict | None: ...

    @abstractmethod
    def create_visit(self, data: dict) -> dict: ...

    @abstractmethod
    def update_visit(self, visit_id: str, data: dict) -> dict | None: ...

    @abstractmethod
    def delete_visit(self, visit_id: str) -> bool: ...

    # test results --------------------------------------------------------
    @abstractmethod
    def list_test_results(self, visit_id: str | None = None) -> list[dict]: ...

    @abstractmethod
    def create_test_result(self, data: dict) -> dict: ...

    @abstractmethod
    def update_test_result(self, result_id: str, data: dict) -> dict | None: ...

    @abstractmethod
    def update_test_results_batch(self, updates: list[dict]) -> list[dict]:
        """Apply ``[{"id": ..., "data": {...}}, ...]``; unknown ids are skipped."""

    @abstractmethod
    def delete_test_result(self, result_id: str) -> bool: ...

    # expenses ------------------------------------------------------------
    @abstractmethod
    def list_expenses(self, day: date | None = None) -> list[dict]: ...

    @abstractmethod
    def create_expense(self, data: dict) -> dict: ...

    @abstractmethod
    def update_expense(self, expense_id: str, data: dict) -> dict | None: ...

    @abstractmethod
    def delete_expense(self, expense_id: str) -> bool: ...

    # settings & layouts --------------------------------------------------
    @abstractmethod
    def list_settings(self) -> list[dict]: ...

    @abstractmethod
    def get_setting(self, key: str) -> dict | None: ...

    @abstractmethod
    def set_setting(self, key: str, value: str) -> dict: ...

    @abstractmethod
    def list_layouts(self) -> list[dict]:
        """All tiles; the defaults are created first when there are none."""

    @abstractmethod
    def initialize_default_layouts(self) -> list[dict]:
        """Create the default tile of every section that has none; returns the new tiles."""

    @abstractmethod
    def upsert_layout(self, section_name: str, data: dict) -> dict: ...

    def commit_layout_change(self, section_name: str, x: int, y: int, w: int, h: int) -> dict:
        """Store a drag/resize result; repeating the same commit changes nothing."""
        return self.upsert_layout(section_name, {'positionX': x, 'positionY': y, 'width': w, 'height': h})

    def rename_section(self, section_name: str, display_name: str) -> dict:
        return self.upsert_layout(section_name, {'displayName': display_name})

    def recolor_section(self, section_name: str, color: str) -> dict:
        return self.upsert_layout(section_name, {'color': color})

    # bulk ----------------------------------------------------------------
    @abstractmethod
    def delete_all_data(self) -> dict[str, int]: ...

    @abstractmethod
    def export_all_data(self) -> dict: ...

    @abstractmethod
    def import_all_data(self, payload: dict) -> dict[str, int]: ...

    # registration --------------------------------------------------------
    def register_patient(self, payload: dict) -> dict:
        """Create a patient, the first visit and one result per ordered test.

        ``totalCost`` defaults to the sum of the ordered tests' prices.
        Returns ``{"patient", "visit", "results"}``.
        """
        fields = validated(PatientRegistrationSerializer, payload)
        test_ids = fields.pop('test_ids')
        visit_date = fields.pop('visit_date', None) or timezone.localdate()
        total_cost = fields.pop('total_cost', None)
        tests = {i: self.get_test(i) for i in test_ids}
        missing = [i for i, t in tests.items() if t is None]
        if missing:
            raise ValidationError({'testIds': f"Unknown tests: {', '.join(missing)}"})
        if total_cost is None:
            total_cost = float(sum(t['price'] or 0 for t in tests.values()))
        patient = self.create_patient(fields)
        visit = self.create_visit({
            'patientId': patient['id'],
            'patientName': patient['name'],
            'visitDate': visit_date.isoformat(),
            'totalCost': total_cost,
            'testIds': test_ids,
        })
        results = [
            self.create_test_result({
                'visitId': visit['id'],
                'testId': t['id'],
                'testName': t['name'],
                'unit': t['unit'],
                'normalRange': t['normalRange'],
                'price': t['price'],
                'testType': t['testType'],
            })
            for t in tests.values()
        ]
        return {'patient': patient, 'visit': visit, 'results': results}

    # derived -------------------------------------------------------------
    def daily_summary(self, day: date) -> dict:
        visits = self.list_visits(visit_date=day)
        patients = {}
        for visit in visits:
            if visit['patientId'] not in patients:
                patients[visit['patientId']] = self.get_patient(visit['patientId']) or {}
        return build_daily_summary(day, visits, patients, self.list_expenses(day))
