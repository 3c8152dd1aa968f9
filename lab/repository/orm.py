"""Relational adapter: the Django ORM through the service layer."""
from __future__ import annotations

from datetime import date

from rest_framework.exceptions import ValidationError

from lab.models import Expense, LabTest, Patient, Setting, TestResult, Visit
from lab.serializers.catalog import LabTestSerializer
from lab.serializers.finance import ExpenseSerializer
from lab.serializers.layouts import LayoutSerializer
from lab.serializers.patients import PatientRegistrationSerializer, PatientSerializer, VisitSerializer
from lab.serializers.results import TestResultSerializer, TestResultUpdateSerializer
from lab.services import catalog, data, finance, layouts, patients, preferences, results
from .base import LabRepository, validated


class OrmRepository(LabRepository):

    # tests ---------------------------------------------------------------
    def list_tests(self):
        return [catalog.format_test(t) for t in LabTest.objects.all()]

    def get_test(self, test_id):
        t = LabTest.objects.filter(pk=test_id).first()
        return catalog.format_test(t) if t else None

    def create_test(self, payload):
        return catalog.format_test(catalog.create_test(**validated(LabTestSerializer, payload)))

    def update_test(self, test_id, payload):
        t = LabTest.objects.filter(pk=test_id).first()
        if t is None:
            return None
        return catalog.format_test(catalog.update_test(t, **validated(LabTestSerializer, payload, partial=True)))

    def delete_test(self, test_id):
        return LabTest.objects.filter(pk=test_id).delete()[0] > 0

    def initialize_default_tests(self):
        return [catalog.format_test(t) for t in catalog.initialize_default_tests()]

    def ensure_urine_test(self):
        t, created = catalog.ensure_urine_test()
        return catalog.format_test(t), created

    # patients ------------------------------------------------------------
    def list_patients(self):
        return [patients.format_patient(p) for p in Patient.objects.all()]

    def get_patient(self, patient_id):
        p = Patient.objects.filter(pk=patient_id).first()
        return patients.format_patient(p) if p else None

    def create_patient(self, payload):
        return patients.format_patient(patients.create_patient(**validated(PatientSerializer, payload)))

    def update_patient(self, patient_id, payload):
        p = Patient.objects.filter(pk=patient_id).first()
        if p is None:
            return None
        return patients.format_patient(patients.update_patient(p, **validated(PatientSerializer, payload, partial=True)))

    def delete_patient(self, patient_id):
        p = Patient.objects.filter(pk=patient_id).first()
        if p is None:
            return False
        patients.delete_patient(p)
        return True

    # visits --------------------------------------------------------------
    def list_visits(self, visit_date: date | None = None, patient_id: str | None = None):
        return [patients.format_visit(v) for v in patients.list_visits(visit_date, patient_id)]

    def get_visit(self, visit_id):
        v = Visit.objects.filter(pk=visit_id).first()
        return patients.format_visit(v) if v else None

    @staticmethod
    def _patient_or_error(patient_id) -> Patient:
        p = Patient.objects.filter(pk=patient_id).first()
        if p is None:
            raise ValidationError({'patientId': 'Unknown patient'})
        return p

    def create_visit(self, payload):
        fields = validated(VisitSerializer, payload)
        patient = self._patient_or_error(fields['patient_id'])
        return patients.format_visit(patients.create_visit(patient, **fields))

    def update_visit(self, visit_id, payload):
        v = Visit.objects.filter(pk=visit_id).first()
        if v is None:
            return None
        fields = validated(VisitSerializer, payload, partial=True)
        if 'patient_id' in fields and fields['patient_id'] != v.patient_id:
            fields['patient'] = self._patient_or_error(fields['patient_id'])
        return patients.format_visit(patients.update_visit(v, **fields))

    def delete_visit(self, visit_id):
        return Visit.objects.filter(pk=visit_id).delete()[0] > 0

    def register_patient(self, payload):
        fields = validated(PatientRegistrationSerializer, payload)
        test_ids = fields.pop('test_ids')
        visit_date = fields.pop('visit_date', None)
        total_cost = fields.pop('total_cost', None)
        tests = LabTest.objects.in_bulk(test_ids)
        missing = [i for i in test_ids if i not in tests]
        if missing:
            raise ValidationError({'testIds': f"Unknown tests: {', '.join(missing)}"})
        patient, visit, created = patients.register_patient(
            fields, [tests[i] for i in test_ids], visit_date=visit_date, total_cost=total_cost,
        )
        return {
            'patient': patients.format_patient(patient),
            'visit': patients.format_visit(visit),
            'results': [results.format_result(r) for r in created],
        }

    # test results --------------------------------------------------------
    def list_test_results(self, visit_id=None):
        return [results.format_result(r) for r in results.list_results(visit_id)]

    def create_test_result(self, payload):
        fields = validated(TestResultSerializer, payload)
        visit = Visit.objects.filter(pk=fields['visit_id']).first()
        if visit is None:
            raise ValidationError({'visitId': 'Unknown visit'})
        return results.format_result(results.create_result(visit, **fields))

    def update_test_result(self, result_id, payload):
        r = TestResult.objects.filter(pk=result_id).first()
        if r is None:
            return None
        fields = validated(TestResultUpdateSerializer, payload, partial=True)
        return results.format_result(results.update_result(r, **fields))

    def update_test_results_batch(self, updates):
        items = []
        for update in updates:
            r = TestResult.objects.filter(pk=update['id']).first()
            if r is not None:
                items.append((r, validated(TestResultUpdateSerializer, update.get('data') or {}, partial=True)))
        return [results.format_result(r) for r in results.batch_update(items)]

    def delete_test_result(self, result_id):
        return TestResult.objects.filter(pk=result_id).delete()[0] > 0

    # expenses ------------------------------------------------------------
    def list_expenses(self, day=None):
        return [finance.format_expense(e) for e in finance.list_expenses(day)]

    def create_expense(self, payload):
        return finance.format_expense(finance.create_expense(**validated(ExpenseSerializer, payload)))

    def update_expense(self, expense_id, payload):
        e = Expense.objects.filter(pk=expense_id).first()
        if e is None:
            return None
        return finance.format_expense(finance.update_expense(e, **validated(ExpenseSerializer, payload, partial=True)))

    def delete_expense(self, expense_id):
        return Expense.objects.filter(pk=expense_id).delete()[0] > 0

    # settings & layouts --------------------------------------------------
    def list_settings(self):
        return [preferences.format_setting(s) for s in Setting.objects.all()]

    def get_setting(self, key):
        s = preferences.get_setting(key)
        return preferences.format_setting(s) if s else None

    def set_setting(self, key, value):
        return preferences.format_setting(preferences.set_setting(key, preferences.clean_setting_value(key, value)))

    def list_layouts(self):
        return [layouts.format_layout(layout) for layout in layouts.list_layouts()]

    def initialize_default_layouts(self):
        return [layouts.format_layout(layout) for layout in layouts.initialize_default_layouts()]

    def upsert_layout(self, section_name, payload):
        fields = validated(LayoutSerializer, payload, partial=True)
        return layouts.format_layout(layouts.upsert_layout(section_name, **fields))

    # bulk ----------------------------------------------------------------
    def delete_all_data(self):
        return data.delete_all_data()

    def export_all_data(self):
        return data.export_all_data()

    def import_all_data(self, payload):
        return data.import_all_data(payload)

    def daily_summary(self, day):
        return finance.daily_summary(day)
