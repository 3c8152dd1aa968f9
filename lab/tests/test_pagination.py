import pytest

from lab.printing.pagination import (
    PrintOptions,
    build_print_document,
    is_long_test,
    paginate_results,
    report_row_count,
    report_scale_factor,
    result_weight,
)


def short(name, normal_range='1-2'):
    return {'testName': name, 'normalRange': normal_range, 'testType': 'standard'}


@pytest.mark.parametrize('name,test_type,expected', [
    ('Urine', 'urine', True),
    ('Stool Analysis', 'standard', True),
    ('Blood Culture & Sensitivity', 'standard', True),
    ('Glucose', 'standard', False),
    ('', 'urine', True),
])
def test_long_test_detection(name, test_type, expected):
    assert is_long_test(name, test_type) is expected


def test_weight_counts_extra_range_lines():
    assert result_weight(short('A', '')) == 1
    assert result_weight(short('A', 'M: 13-17\nF: 12-15\n\nchildren: 11-14')) == 2.0


def test_long_tests_get_own_pages_first():
    pages = paginate_results([short('A'), {'testName': 'Urine', 'testType': 'urine'}, short('B')])
    assert [p.long_form for p in pages] == [True, False]
    assert pages[0].items[0]['testName'] == 'Urine'
    assert [i['testName'] for i in pages[1].items] == ['A', 'B']
    assert pages[0].label == '(Page 1/2)'


def test_single_page_has_no_label():
    pages = paginate_results([short('A')])
    assert len(pages) == 1
    assert pages[0].label == ''


def test_weighted_budget_boundary_is_inclusive():
    # 16 single-line items plus one 3-line item (weight 2) land exactly on 18
    items = [short(str(i)) for i in range(16)] + [short('wide', 'a\nb\nc')]
    assert len(paginate_results(items, PrintOptions(budget=18))) == 1
    pages = paginate_results(items + [short('next')], PrintOptions(budget=18))
    assert [len(p.items) for p in pages] == [17, 1]


def test_fixed_strategy_chunks_by_count():
    items = [short(str(i)) for i in range(17)]
    pages = paginate_results(items, PrintOptions(strategy='fixed', per_page=8))
    assert [len(p.items) for p in pages] == [8, 8, 1]
    assert pages[-1].label == '(Page 3/3)'


def test_build_print_document_uses_results_key():
    assert build_print_document({'patient': {}, 'results': []}) == []


def test_invalid_options_are_rejected():
    with pytest.raises(ValueError):
        PrintOptions(strategy='greedy')
    with pytest.raises(ValueError):
        PrintOptions(per_page=0)


def test_report_scale_clamps():
    assert report_row_count(2, 3, 1) == 3 + 4 + 1 + 3
    assert report_scale_factor(12) == 1.0
    assert report_scale_factor(13) == pytest.approx(0.97)
    assert report_scale_factor(200) == 0.45
