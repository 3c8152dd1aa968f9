import asyncio
from datetime import date

import pytest

from lab.autosave import (
    CatalogDraft,
    DebouncedSaveController,
    DraftValidationError,
    ExpenseSheetDraft,
    PatientRegistrationDraft,
    ResultEntryDraft,
    SaveState,
)
from lab.repository.memory import MemoryRepository

DELAY = 0.05


class FlakyRepository(MemoryRepository):
    """Fails the first ``failures`` visit creations."""

    def __init__(self, failures=1):
        super().__init__()
        self.failures = failures

    def create_visit(self, payload):
        if self.failures:
            self.failures -= 1
            raise RuntimeError('database unavailable')
        return super().create_visit(payload)


@pytest.fixture
def catalog(memory_repo):
    cbc = memory_repo.create_test({'name': 'CBC Blood Count', 'unit': 'cells/μL', 'normalRange': '4500-11000',
                                   'price': 8})
    glucose = memory_repo.create_test({'name': 'Glucose (Fasting)', 'unit': 'mg/dL', 'normalRange': '70-100',
                                       'price': 3})
    urine, _ = memory_repo.ensure_urine_test()
    return {'cbc': cbc, 'glucose': glucose, 'urine': urine}


# controller -------------------------------------------------------------

@pytest.mark.asyncio
async def test_rapid_edits_coalesce_into_one_save():
    calls = []

    async def persist():
        calls.append(1)

    c = DebouncedSaveController(persist, delay=DELAY)
    c.mark_ready()
    for _ in range(5):
        c.touch()
        await asyncio.sleep(DELAY / 5)
    await c.wait_idle()
    assert calls == [1]
    assert c.state is SaveState.CLEAN
    assert c.last_saved_at is not None


@pytest.mark.asyncio
async def test_no_background_save_before_ready_or_when_incomplete():
    calls = []

    async def persist():
        calls.append(1)

    complete = False
    c = DebouncedSaveController(persist, min_fields_present=lambda: complete, delay=DELAY)
    c.touch()
    await c.wait_idle()
    c.mark_ready()
    c.touch()
    await c.wait_idle()
    assert calls == []
    assert c.state is SaveState.DIRTY
    complete = True
    c.touch()
    await c.wait_idle()
    assert calls == [1]


@pytest.mark.asyncio
async def test_edit_during_save_triggers_another_save():
    gate = asyncio.Event()
    calls = []

    async def persist():
        calls.append(1)
        await gate.wait()

    c = DebouncedSaveController(persist, delay=DELAY)
    c.mark_ready()
    c.touch()
    await asyncio.sleep(DELAY * 3)
    assert c.state is SaveState.SAVING
    c.touch()
    assert c.state is SaveState.DIRTY
    gate.set()
    await c.wait_idle()
    assert len(calls) == 2
    assert c.state is SaveState.CLEAN


@pytest.mark.asyncio
async def test_background_failure_is_soft():
    errors, saved = [], []

    async def persist():
        raise RuntimeError('boom')

    c = DebouncedSaveController(persist, delay=DELAY, on_error=errors.append, on_saved=lambda: saved.append(1))
    c.mark_ready()
    c.touch()
    await c.wait_idle()
    assert c.state is SaveState.ERROR
    assert str(c.last_error) == 'boom'
    assert len(errors) == 1 and saved == []


@pytest.mark.asyncio
async def test_explicit_save_validates_and_raises():
    calls = []

    async def persist():
        calls.append(1)
        raise RuntimeError('boom')

    def validate():
        raise DraftValidationError(['name'])

    c = DebouncedSaveController(persist, validate=validate, delay=DELAY)
    with pytest.raises(DraftValidationError):
        await c.save_now()
    assert calls == []

    c = DebouncedSaveController(persist, delay=DELAY)
    with pytest.raises(RuntimeError):
        await c.save_now()
    assert c.state is SaveState.ERROR


# registration -----------------------------------------------------------

@pytest.mark.asyncio
async def test_registration_saves_once_name_and_tests_are_present(memory_repo, catalog):
    draft = PatientRegistrationDraft(memory_repo, delay=DELAY)
    draft.set_field('name', 'Ann Lee')
    await draft.controller.wait_idle()
    assert memory_repo.list_patients() == []

    draft.select_test(catalog['cbc'])
    draft.select_test(catalog['glucose'])
    await draft.controller.wait_idle()
    visits = memory_repo.list_visits()
    assert len(visits) == 1
    assert visits[0]['totalCost'] == 11
    results = memory_repo.list_test_results(visit_id=draft.visit_id)
    assert {r['testName'] for r in results} == {'CBC Blood Count', 'Glucose (Fasting)'}
    assert {r['normalRange'] for r in results} == {'4500-11000', '70-100'}


@pytest.mark.asyncio
async def test_test_removed_before_debounce_is_never_created(memory_repo, catalog):
    saves = []
    draft = PatientRegistrationDraft(memory_repo, delay=DELAY, on_saved=lambda: saves.append(1))
    draft.set_field('name', 'Ann')
    draft.select_test(catalog['cbc'])
    draft.select_test(catalog['glucose'])
    draft.deselect_test(catalog['glucose']['id'])
    await draft.controller.wait_idle()
    assert saves == [1]
    results = memory_repo.list_test_results()
    assert [r['testId'] for r in results] == [catalog['cbc']['id']]
    assert memory_repo.list_visits()[0]['totalCost'] == 8


@pytest.mark.asyncio
async def test_later_saves_update_in_place_and_diff_tests(memory_repo, catalog):
    draft = PatientRegistrationDraft(memory_repo, delay=DELAY)
    draft.set_field('name', 'Ann')
    draft.select_test(catalog['cbc'])
    await draft.controller.wait_idle()
    cbc_result = draft.result_ids[catalog['cbc']['id']]

    draft.set_field('phone', '555-0101')
    draft.select_test(catalog['urine'])
    draft.set_manual_total(10)
    await draft.controller.wait_idle()
    assert len(memory_repo.list_patients()) == 1
    assert memory_repo.list_patients()[0]['phone'] == '555-0101'
    assert len(memory_repo.list_visits()) == 1
    assert memory_repo.list_visits()[0]['totalCost'] == 10
    # untouched tests keep their result
    assert draft.result_ids[catalog['cbc']['id']] == cbc_result
    urine = [r for r in memory_repo.list_test_results() if r['testType'] == 'urine'][0]
    assert urine['urineData']['colour'] == 'Amber Yellow'

    draft.deselect_test(catalog['cbc']['id'])
    await draft.controller.wait_idle()
    assert [r['testType'] for r in memory_repo.list_test_results()] == ['urine']


@pytest.mark.asyncio
async def test_failed_save_keeps_created_ids_and_retries_on_next_edit(catalog):
    repo = FlakyRepository()
    for test in catalog.values():
        repo.create_test({k: test[k] for k in ('name', 'unit', 'normalRange', 'price', 'testType')})
    cbc = repo.list_tests()[0]
    errors = []
    draft = PatientRegistrationDraft(repo, delay=DELAY, on_error=errors.append)
    draft.set_field('name', 'Ann')
    draft.select_test(cbc)
    await draft.controller.wait_idle()
    assert draft.controller.state is SaveState.ERROR
    assert len(errors) == 1
    assert draft.patient_id is not None and draft.visit_id is None
    assert draft.patient['name'] == 'Ann'

    draft.set_field('gender', 'Female')
    await draft.controller.wait_idle()
    assert draft.controller.state is SaveState.CLEAN
    assert len(repo.list_patients()) == 1
    assert len(repo.list_test_results()) == 1


@pytest.mark.asyncio
async def test_finalize_validates_then_resets(memory_repo, catalog):
    draft = PatientRegistrationDraft(memory_repo, delay=DELAY)
    draft.set_field('name', 'Ann')
    with pytest.raises(DraftValidationError) as exc:
        await draft.finalize()
    assert exc.value.missing == ['tests']

    draft.select_test(catalog['glucose'])
    visit = await draft.finalize()
    assert visit['totalCost'] == 3
    assert draft.visit_id is None and draft.patient['name'] == '' and draft.selected == {}
    assert draft.controller.state is SaveState.CLEAN


@pytest.mark.asyncio
async def test_load_hydrates_existing_visit(memory_repo, catalog):
    reg = memory_repo.register_patient({'name': 'Ann', 'testIds': [catalog['cbc']['id']], 'totalCost': 20})
    draft = PatientRegistrationDraft(memory_repo, delay=DELAY)
    await draft.load(reg['visit']['id'])
    assert draft.patient_id == reg['patient']['id']
    assert draft.manual_total == 20
    draft.select_test(catalog['glucose'])
    await draft.controller.wait_idle()
    assert len(memory_repo.list_visits()) == 1
    assert len(memory_repo.list_test_results(visit_id=reg['visit']['id'])) == 2


# result entry -----------------------------------------------------------

@pytest.mark.asyncio
async def test_result_entry_sends_only_changed_rows(memory_repo, catalog):
    reg = memory_repo.register_patient({
        'name': 'Ann', 'testIds': [catalog['cbc']['id'], catalog['glucose']['id'], catalog['urine']['id']],
    })
    by_name = {r['testName']: r['id'] for r in reg['results']}
    batches = []
    original = memory_repo.update_test_results_batch

    def spy(updates):
        batches.append([u['id'] for u in updates])
        return original(updates)

    memory_repo.update_test_results_batch = spy
    draft = ResultEntryDraft(memory_repo, reg['visit']['id'], delay=DELAY)
    await draft.load()
    draft.set_result(by_name['Glucose (Fasting)'], '92')
    draft.set_urine_field(by_name['Urine'], 'pusCells', '1-2')
    await draft.controller.wait_idle()
    assert len(batches) == 1
    assert sorted(batches[0]) == sorted([by_name['Glucose (Fasting)'], by_name['Urine']])
    saved = {r['id']: r for r in memory_repo.list_test_results()}
    assert saved[by_name['Glucose (Fasting)']]['result'] == '92'
    assert saved[by_name['Urine']]['urineData']['pusCells'] == '1-2'
    assert saved[by_name['Urine']]['urineData']['colour'] == 'Amber Yellow'
    with pytest.raises(ValueError):
        draft.set_urine_field(by_name['Urine'], 'smell', 'odd')


# tables -----------------------------------------------------------------

@pytest.mark.asyncio
async def test_expense_sheet_creates_complete_rows_only(memory_repo):
    day = date(2024, 3, 5)
    draft = ExpenseSheetDraft(memory_repo, day, delay=DELAY)
    await draft.load()
    temp = draft.add_row(name='Gloves')
    await draft.controller.wait_idle()
    assert memory_repo.list_expenses(day) == []

    draft.edit_row(temp, amount=3)
    await draft.controller.wait_idle()
    saved = memory_repo.list_expenses(day)
    assert [(e['name'], e['amount']) for e in saved] == [('Gloves', 3.0)]
    durable = draft.resolve(temp)
    assert durable == saved[0]['id'] and temp not in draft.rows

    # the temporary id still addresses the row
    draft.edit_row(temp, amount=4.5)
    await draft.controller.wait_idle()
    assert memory_repo.list_expenses(day)[0]['amount'] == 4.5

    draft.remove_row(temp)
    await draft.controller.wait_idle()
    assert memory_repo.list_expenses(day) == []


@pytest.mark.asyncio
async def test_catalog_draft_edits_existing_tests(memory_repo, catalog):
    draft = CatalogDraft(memory_repo, delay=DELAY)
    await draft.load()
    draft.edit_row(catalog['glucose']['id'], price=4)
    temp = draft.add_row(name='Ferritin', unit='ng/mL', price=12)
    await draft.controller.wait_idle()
    assert memory_repo.get_test(catalog['glucose']['id'])['price'] == 4
    assert memory_repo.get_test(draft.resolve(temp))['name'] == 'Ferritin'
    assert len(memory_repo.list_tests()) == 4
