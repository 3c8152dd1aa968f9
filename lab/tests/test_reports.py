import json

import pytest

from lab.constants import CUSTOM_PRINT_SECTIONS_KEY

pytestmark = pytest.mark.django_db


@pytest.fixture
def day_of_work(api):
    a = api.post('/api/tests', {'name': 'Lipid Panel', 'price': 20}, format='json').data
    b = api.post('/api/tests', {'name': 'HbA1c', 'normalRange': '4.0-5.6\n(%)', 'price': 10}, format='json').data
    for name, source, tests in (('Ann', 'Dr. Kim', [a]), ('Bob', 'Dr. Kim', [b]), ('Cy', '', [a, b])):
        api.post('/api/patients/register', {
            'name': name, 'source': source, 'testIds': [t['id'] for t in tests], 'visitDate': '2024-03-05',
        }, format='json')
    api.post('/api/expenses', {'name': 'Reagents', 'amount': 12.5, 'date': '2024-03-05'}, format='json')
    api.post('/api/expenses', {'name': 'Rent', 'amount': 100, 'date': '2024-03-06'}, format='json')


def test_daily_summary_groups_by_source(api, day_of_work):
    r = api.get('/api/reports/daily', {'date': '2024-03-05'})
    assert r.status_code == 200
    assert r.data['sources'] == [
        {'source': 'Dr. Kim', 'patientCount': 2, 'income': 30.0},
        {'source': 'Unknown', 'patientCount': 1, 'income': 30.0},
    ]
    assert r.data['expenses'] == [{'name': 'Reagents', 'amount': 12.5}]
    assert r.data['totalIncome'] == 60.0
    assert r.data['net'] == 47.5


def test_expense_crud(api):
    e = api.post('/api/expenses', {'name': 'Gloves', 'amount': 3, 'date': '2024-03-05'}, format='json').data
    assert api.put(f"/api/expenses/{e['id']}", {'amount': 4}, format='json').data['amount'] == 4
    assert [x['name'] for x in api.get('/api/expenses', {'date': '2024-03-05'}).data] == ['Gloves']
    assert api.delete(f"/api/expenses/{e['id']}").status_code == 204
    assert api.post('/api/expenses', {'name': 'Bad', 'amount': -1, 'date': '2024-03-05'},
                    format='json').status_code == 400


def test_print_daily_report_html(api, day_of_work):
    r = api.post('/api/reports/daily/print', {
        'date': '2024-03-05', 'notes': [{'name': 'Cash counted', 'value': '47.50'}, {'name': '', 'value': ''}],
    }, format='json')
    assert r.status_code == 200
    assert r['Content-Type'].startswith('text/html')
    html = r.content.decode()
    assert 'Dr. Kim' in html and 'Reagents' in html and 'Cash counted' in html
    assert 'scale(1.0000)' in html


def test_print_empty_day_is_rejected(api):
    r = api.post('/api/reports/daily/print', {'date': '2024-01-01'}, format='json')
    assert r.status_code == 400
    assert r.data['error']['code'] == 'no_data'


def test_zero_amount_expenses_are_left_out(api, day_of_work):
    api.post('/api/expenses', {'name': 'Spare row', 'amount': 0, 'date': '2024-03-05'}, format='json')
    r = api.get('/api/reports/daily', {'date': '2024-03-05'})
    assert r.data['expenses'] == [{'name': 'Reagents', 'amount': 12.5}]
    html = api.post('/api/reports/daily/print', {'date': '2024-03-05'}, format='json').content.decode()
    assert 'Spare row' not in html
    api.post('/api/expenses', {'name': 'Spare row', 'amount': 0, 'date': '2024-02-01'}, format='json')
    r = api.post('/api/reports/daily/print', {'date': '2024-02-01'}, format='json')
    assert r.data['error']['code'] == 'no_data'


def test_print_visit_sheet(api):
    tests = [api.post('/api/tests', {'name': f'Test {i}', 'normalRange': '1-2', 'price': 1}, format='json').data
             for i in range(3)]
    urine = api.post('/api/tests/add-urine-test').data['test']
    reg = api.post('/api/patients/register', {
        'name': '<b>Ann</b>', 'source': 'Walk-in', 'testIds': [urine['id']] + [t['id'] for t in tests],
    }, format='json').data
    api.post('/api/settings', {'key': CUSTOM_PRINT_SECTIONS_KEY, 'value': json.dumps([
        {'id': 'h1', 'text': 'City Lab', 'position': 'top'},
        {'id': 'f1', 'text': 'Signature', 'position': 'bottom', 'alignment': 'right', 'textColor': '#333'},
    ])}, format='json')
    r = api.get(f"/api/visits/{reg['visit']['id']}/print")
    assert r.status_code == 200
    html = r.content.decode()
    assert '(Page 1/2)' in html and '(Page 2/2)' in html
    assert 'Microscopical Examination' in html
    assert 'City Lab' in html and 'Signature' in html
    assert '<b>Ann' not in html


def test_print_visit_without_results(api):
    p = api.post('/api/patients', {'name': 'Ann'}, format='json').data
    v = api.post('/api/visits', {'patientId': p['id'], 'visitDate': '2024-03-05', 'totalCost': 0},
                 format='json').data
    assert api.get(f"/api/visits/{v['id']}/print").status_code == 400
    assert api.get('/api/visits/missing/print').status_code == 404


def test_custom_print_sections_are_validated(api):
    bad = api.post('/api/settings', {'key': CUSTOM_PRINT_SECTIONS_KEY, 'value': json.dumps([
        {'id': 'x', 'text': 'Hi', 'position': 'top', 'textColor': 'red;background:url(x)'},
    ])}, format='json')
    assert bad.status_code == 400
    assert api.post('/api/settings', {'key': CUSTOM_PRINT_SECTIONS_KEY, 'value': 'nope'},
                    format='json').status_code == 400
    ok = api.post('/api/settings', {'key': 'theme', 'value': 'dark'}, format='json')
    assert ok.status_code == 200
    assert api.get('/api/settings', {'key': 'theme'}).data['value'] == 'dark'
    assert api.get('/api/settings', {'key': 'missing'}).status_code == 404
