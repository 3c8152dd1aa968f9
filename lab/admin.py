"""
Django admin registrations for the laboratory models.

Superusers can inspect and correct records at ``/admin/``.  Results are
shown inline on their visit; everything else is a plain changelist.
"""

from django.contrib import admin

from .models import (
    DashboardLayout,
    Expense,
    LabTest,
    Patient,
    Setting,
    TestResult,
    User,
    Visit,
)


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'display_name', 'is_superuser', 'is_active', 'date_joined')
    list_filter = ('is_superuser', 'is_active')
    search_fields = ('username', 'display_name')
    exclude = ('password',)


@admin.register(LabTest)
class LabTestAdmin(admin.ModelAdmin):
    list_display = ('name', 'unit', 'price', 'test_type', 'created_at')
    list_filter = ('test_type',)
    search_fields = ('name',)


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('name', 'age', 'gender', 'phone', 'source', 'created_at')
    list_filter = ('gender', 'source')
    search_fields = ('name', 'phone')


class TestResultInline(admin.TabularInline):
    model = TestResult
    extra = 0
    fields = ('test_name', 'result', 'unit', 'normal_range', 'price', 'test_type')


@admin.register(Visit)
class VisitAdmin(admin.ModelAdmin):
    list_display = ('patient_name', 'visit_date', 'total_cost', 'created_at')
    list_filter = ('visit_date',)
    search_fields = ('patient_name', 'patient__phone')
    inlines = [TestResultInline]


@admin.register(TestResult)
class TestResultAdmin(admin.ModelAdmin):
    list_display = ('test_name', 'visit', 'result', 'unit', 'test_type')
    list_filter = ('test_type',)
    search_fields = ('test_name', 'visit__patient_name')


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ('name', 'amount', 'date')
    list_filter = ('date',)
    search_fields = ('name',)


@admin.register(Setting)
class SettingAdmin(admin.ModelAdmin):
    list_display = ('key', 'value')
    search_fields = ('key',)


@admin.register(DashboardLayout)
class DashboardLayoutAdmin(admin.ModelAdmin):
    list_display = ('section_name', 'display_name', 'position_x', 'position_y', 'width', 'height', 'route')
