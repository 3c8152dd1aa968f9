"""
URL mappings for the laboratory API.

Paths carry no trailing slash.  Fixed sub-paths (``register``,
``batch``, ``initialize-defaults``...) are listed before the
``<str:pk>`` routes they would otherwise be captured by.
"""
from django.urls import include, path

from .auth_views import login_view, logout_view, session_view
from .views import accounts, catalog, data, expenses, health, layouts, patients, preferences, reports, results


urlpatterns = [
    path('metrics', include('django_prometheus.urls')),
    path('healthz', health.healthz),

    # Authentication
    path('api/login', login_view, name='login_view'),
    path('api/session', session_view, name='session_view'),
    path('api/logout', logout_view, name='logout_view'),

    # Test catalog
    path('api/tests', catalog.tests, name='tests'),
    path('api/tests/initialize-defaults', catalog.initialize_defaults, name='tests_initialize_defaults'),
    path('api/tests/add-urine-test', catalog.add_urine_test, name='tests_add_urine'),
    path('api/tests/<str:pk>', catalog.test_detail, name='test_detail'),

    # Patients and visits
    path('api/patients', patients.patients, name='patients'),
    path('api/patients/register', patients.register_patient, name='patient_register'),
    path('api/patients/<str:pk>', patients.patient_detail, name='patient_detail'),
    path('api/visits', patients.visits, name='visits'),
    path('api/visits/<str:pk>/print', reports.print_visit, name='visit_print'),
    path('api/visits/<str:pk>', patients.visit_detail, name='visit_detail'),

    # Results
    path('api/test-results', results.test_results, name='test_results'),
    path('api/test-results/batch', results.batch_update, name='test_results_batch'),
    path('api/test-results/<str:pk>', results.test_result_detail, name='test_result_detail'),

    # Finance
    path('api/expenses', expenses.expenses, name='expenses'),
    path('api/expenses/<str:pk>', expenses.expense_detail, name='expense_detail'),
    path('api/reports/daily', reports.daily_report, name='daily_report'),
    path('api/reports/daily/print', reports.print_daily_report, name='daily_report_print'),

    # Settings and dashboard
    path('api/settings', preferences.settings_view, name='settings'),
    path('api/dashboard-layouts', layouts.dashboard_layouts, name='dashboard_layouts'),
    path('api/dashboard-layouts/init', layouts.init_layouts, name='dashboard_layouts_init'),
    path('api/dashboard-layouts/<str:section_name>/position', layouts.layout_position, name='dashboard_layout_position'),
    path('api/dashboard-layouts/<str:section_name>/name', layouts.layout_name, name='dashboard_layout_name'),
    path('api/dashboard-layouts/<str:section_name>/color', layouts.layout_color, name='dashboard_layout_color'),
    path('api/dashboard-layouts/<str:section_name>', layouts.layout_detail, name='dashboard_layout_detail'),

    # Accounts
    path('api/users', accounts.users, name='users'),
    path('api/users/<int:pk>', accounts.user_detail, name='user_detail'),

    # Data management
    path('api/data', data.delete_all, name='data_delete'),
    path('api/data/export', data.export_data, name='data_export'),
    path('api/data/import', data.import_data, name='data_import'),
]
