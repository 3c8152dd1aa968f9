"""
Database models for the laboratory backend.

The schema mirrors the records exchanged with the front-end: the test
catalog, patients and their visits, per-visit test results (with the
structured urine sub-form), daily expenses, key/value settings,
dashboard tile layouts and staff accounts carrying per-section
permission flags.  Every laboratory record uses a UUID string primary
key so that records keep their identity across export/import.
"""
from __future__ import annotations

import uuid

from django.contrib.auth.models import AbstractUser
from django.db import models


def new_id() -> str:
    return str(uuid.uuid4())


TEST_TYPE_STANDARD = 'standard'
TEST_TYPE_URINE = 'urine'
TEST_TYPE_CHOICES = [
    (TEST_TYPE_STANDARD, 'Standard'),
    (TEST_TYPE_URINE, 'Urine analysis'),
]


class User(AbstractUser):
    """Staff account.

    ``section_permissions`` holds the per-section flags, e.g.
    ``{"patients": {"view": true, "edit": false}, "tests": {"access": true}}``.
    Superusers bypass the flags entirely.
    """
    display_name = models.CharField(max_length=255, blank=True)
    section_permissions = models.JSONField(null=True, blank=True)

    def __str__(self) -> str:
        return self.display_name or self.username


class LabTest(models.Model):
    """A catalog entry that can be ordered for a visit."""
    id = models.CharField(max_length=36, primary_key=True, default=new_id, editable=False)
    name = models.CharField(max_length=255)
    unit = models.CharField(max_length=64, blank=True, default='')
    # May span several lines (e.g. ranges per sex or age band)
    normal_range = models.TextField(blank=True, default='')
    price = models.FloatField(null=True, blank=True)
    test_type = models.CharField(max_length=16, choices=TEST_TYPE_CHOICES, default=TEST_TYPE_STANDARD)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['name']

    def __str__(self) -> str:
        return self.name


class Patient(models.Model):
    id = models.CharField(max_length=36, primary_key=True, default=new_id, editable=False)
    name = models.CharField(max_length=255)
    age = models.PositiveIntegerField(null=True, blank=True)
    gender = models.CharField(max_length=32, blank=True, default='')
    phone = models.CharField(max_length=32, blank=True, default='')
    # Referral source (doctor, clinic, walk-in); grouped on the daily report
    source = models.CharField(max_length=255, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self) -> str:
        return self.name


class Visit(models.Model):
    """One encounter: a date, the ordered tests and one bill."""
    id = models.CharField(max_length=36, primary_key=True, default=new_id, editable=False)
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='visits')
    patient_name = models.CharField(max_length=255)
    visit_date = models.DateField(db_index=True)
    # Entered by staff; never recomputed from test prices
    total_cost = models.FloatField(default=0)
    test_ids = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-visit_date', '-created_at']

    def __str__(self) -> str:
        return f"{self.patient_name} @ {self.visit_date}"


class TestResult(models.Model):
    """Outcome of one catalog test within one visit.

    ``test_id`` is a plain column rather than a foreign key: removing a
    test from the catalog must leave historical results intact.
    """
    __test__ = False  # keep pytest from collecting the model

    id = models.CharField(max_length=36, primary_key=True, default=new_id, editable=False)
    visit = models.ForeignKey(Visit, on_delete=models.CASCADE, related_name='results')
    test_id = models.CharField(max_length=36, db_index=True)
    test_name = models.CharField(max_length=255)
    result = models.TextField(blank=True, default='')
    unit = models.CharField(max_length=64, blank=True, default='')
    normal_range = models.TextField(blank=True, default='')
    price = models.FloatField(null=True, blank=True)
    test_type = models.CharField(max_length=16, choices=TEST_TYPE_CHOICES, default=TEST_TYPE_STANDARD)
    urine_data = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['created_at']
        constraints = [
            models.UniqueConstraint(fields=['visit', 'test_id'], name='uniq_result_per_visit_test'),
        ]

    def __str__(self) -> str:
        return f"{self.test_name} ({self.visit_id})"


class Expense(models.Model):
    id = models.CharField(max_length=36, primary_key=True, default=new_id, editable=False)
    name = models.CharField(max_length=255)
    amount = models.FloatField()
    date = models.DateField(db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['date', 'created_at']

    def __str__(self) -> str:
        return f"{self.name}: {self.amount}"


class Setting(models.Model):
    id = models.CharField(max_length=36, primary_key=True, default=new_id, editable=False)
    key = models.CharField(max_length=128, unique=True)
    value = models.TextField(blank=True, default='')

    def __str__(self) -> str:
        return self.key


class DashboardLayout(models.Model):
    """Position, size and styling of one dashboard tile."""
    id = models.CharField(max_length=36, primary_key=True, default=new_id, editable=False)
    section_name = models.CharField(max_length=64, unique=True)
    display_name = models.CharField(max_length=255)
    position_x = models.IntegerField(default=0)
    position_y = models.IntegerField(default=0)
    width = models.PositiveIntegerField(default=1)
    height = models.PositiveIntegerField(default=1)
    color = models.CharField(max_length=128, blank=True, default='')
    route = models.CharField(max_length=255)

    class Meta:
        ordering = ['position_y', 'position_x']

    def __str__(self) -> str:
        return self.section_name
