import pytest

from lab.models import LabTest, TestResult

pytestmark = pytest.mark.django_db


@pytest.fixture
def visit(api):
    tsh = api.post('/api/tests', {'name': 'TSH', 'unit': 'mIU/L', 'normalRange': '0.4-4.0', 'price': 7},
                   format='json').data
    ft4 = api.post('/api/tests', {'name': 'Free T4', 'unit': 'ng/dL', 'normalRange': '0.8-1.8', 'price': 7},
                   format='json').data
    urine = api.post('/api/tests/add-urine-test').data['test']
    reg = api.post('/api/patients/register', {'name': 'Ann', 'testIds': [tsh['id'], ft4['id'], urine['id']]},
                   format='json').data
    return {'id': reg['visit']['id'], 'results': {r['testName']: r for r in reg['results']}, 'tsh': tsh}


def test_duplicate_result_for_same_test_is_rejected(api, visit):
    tsh = visit['tsh']
    r = api.post('/api/test-results', {'visitId': visit['id'], 'testId': tsh['id'], 'testName': 'TSH'},
                 format='json')
    assert r.status_code == 400
    assert TestResult.objects.filter(visit_id=visit['id'], test_id=tsh['id']).count() == 1


def test_list_results_by_visit(api, visit):
    r = api.get('/api/test-results', {'visitId': visit['id']})
    assert {x['testName'] for x in r.data} == {'TSH', 'Free T4', 'Urine'}


def test_result_edit_writes_back_to_test_and_siblings(api, visit):
    other = api.post('/api/patients/register', {'name': 'Bob', 'testIds': [visit['tsh']['id']]},
                     format='json').data['results'][0]
    rid = visit['results']['TSH']['id']
    r = api.put(f'/api/test-results/{rid}', {'result': '2.1', 'normalRange': '0.5-5.0'}, format='json')
    assert r.status_code == 200
    assert r.data['result'] == '2.1'
    assert LabTest.objects.get(pk=visit['tsh']['id']).normal_range == '0.5-5.0'
    assert TestResult.objects.get(pk=other['id']).normal_range == '0.5-5.0'


def test_result_value_alone_does_not_touch_test(api, visit):
    rid = visit['results']['TSH']['id']
    api.put(f'/api/test-results/{rid}', {'result': '3.0'}, format='json')
    assert LabTest.objects.get(pk=visit['tsh']['id']).normal_range == '0.4-4.0'


def test_batch_update_skips_unknown_ids(api, visit):
    tsh, ft4 = visit['results']['TSH'], visit['results']['Free T4']
    r = api.put('/api/test-results/batch', {'updates': [
        {'id': tsh['id'], 'data': {'result': '1.9'}},
        {'id': ft4['id'], 'data': {'result': '1.1', 'unit': 'pmol/L'}},
        {'id': 'missing', 'data': {'result': 'x'}},
    ]}, format='json')
    assert r.status_code == 200
    assert {x['id'] for x in r.data} == {tsh['id'], ft4['id']}
    assert TestResult.objects.get(pk=ft4['id']).unit == 'pmol/L'
    assert LabTest.objects.get(name='Free T4').unit == 'pmol/L'


def test_urine_sub_form_merges_fields(api, visit):
    rid = visit['results']['Urine']['id']
    r = api.put(f'/api/test-results/{rid}', {'urineData': {'pusCells': '2-4 /HPF'}}, format='json')
    assert r.data['urineData']['pusCells'] == '2-4 /HPF'
    assert r.data['urineData']['colour'] == 'Amber Yellow'


def test_unknown_urine_field_is_rejected(api, visit):
    rid = visit['results']['Urine']['id']
    r = api.put(f'/api/test-results/{rid}', {'urineData': {'smell': 'odd'}}, format='json')
    assert r.status_code == 400


def test_delete_result(api, visit):
    rid = visit['results']['TSH']['id']
    assert api.delete(f'/api/test-results/{rid}').status_code == 204
    assert api.delete(f'/api/test-results/{rid}').status_code == 404


def test_clinical_text_is_stored_verbatim_and_escaped_in_print(api, visit):
    tsh_id = visit['results']['TSH']['id']
    r = api.put(f'/api/test-results/{tsh_id}', {'result': '<neg / >pos', 'normalRange': '<0.5'}, format='json')
    assert (r.data['result'], r.data['normalRange']) == ('<neg / >pos', '<0.5')
    assert LabTest.objects.get(pk=visit['tsh']['id']).normal_range == '<0.5'
    urine_id = visit['results']['Urine']['id']
    r = api.put(f'/api/test-results/{urine_id}', {'urineData': {'protein': '<trace>'}}, format='json')
    assert r.data['urineData']['protein'] == '<trace>'
    html = api.get(f"/api/visits/{visit['id']}/print").content.decode()
    assert '&lt;neg / &gt;pos' in html
    assert '<neg' not in html
