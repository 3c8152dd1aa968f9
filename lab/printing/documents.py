"""
Standalone printable HTML for result sheets and the daily report.

The documents are plain A4 HTML with inline print CSS; the browser's
print dialog turns them into paper or PDF.  Data is read through the
storage repository, laid out by :mod:`lab.printing.pagination` and
rendered with Django templates (autoescaped).
"""
from __future__ import annotations

import logging
from datetime import date

from django.conf import settings
from django.template.loader import render_to_string
from rest_framework.exceptions import NotFound

from lab.constants import CUSTOM_PRINT_SECTIONS_KEY
from lab.exceptions import NothingToPrint
from lab.repository.base import LabRepository
from lab.services.preferences import parse_custom_print_sections
from .pagination import PrintOptions, build_print_document, report_row_count, report_scale_factor

logger = logging.getLogger(__name__)

URINE_PHYSICAL = (
    ('Colour', 'colour'),
    ('Aspect', 'aspect'),
    ('Reaction', 'reaction'),
    ('Specific Gravity', 'specificGravity'),
)
URINE_CHEMICAL = (
    ('Glucose', 'glucose'),
    ('Protein', 'protein'),
    ('Bilirubin', 'bilirubin'),
    ('Ketones', 'ketones'),
    ('Nitrite', 'nitrite'),
    ('Leukocyte', 'leukocyte'),
    ('Blood', 'blood'),
)
URINE_MICROSCOPY = (
    ('Pus Cells', 'pusCells'),
    ('Red Cells', 'redCells'),
    ('Epithelial Cells', 'epithelialCell'),
    ('Bacteria', 'bacteria'),
    ('Crystals', 'crystals'),
    ('Amorphous', 'amorphous'),
    ('Mucus', 'mucus'),
    ('Other', 'other'),
)


def default_print_options() -> PrintOptions:
    return PrintOptions(
        strategy=settings.LAB_PRINT_STRATEGY,
        per_page=settings.LAB_PRINT_SHORT_TESTS_PER_PAGE,
        budget=settings.LAB_PRINT_PAGE_BUDGET,
    )


def _urine_sections(item: dict) -> list[tuple[str, list[tuple[str, str]]]]:
    urine = item.get('urineData') or {}
    return [
        (title, [(label, urine.get(key) or '') for label, key in fields])
        for title, fields in (
            ('Physical Examination', URINE_PHYSICAL),
            ('Chemical Examination', URINE_CHEMICAL),
            ('Microscopical Examination', URINE_MICROSCOPY),
        )
    ]


def _print_sections(repository: LabRepository) -> tuple[list[dict], list[dict]]:
    setting = repository.get_setting(CUSTOM_PRINT_SECTIONS_KEY)
    sections = [s for s in parse_custom_print_sections(setting['value'] if setting else None) if s['text'].strip()]
    return [s for s in sections if s['position'] == 'top'], [s for s in sections if s['position'] == 'bottom']


def render_result_sheet(repository: LabRepository, visit_id: str, options: PrintOptions | None = None) -> str:
    visit = repository.get_visit(visit_id)
    if visit is None:
        raise NotFound('Visit not found')
    results = repository.list_test_results(visit_id=visit_id)
    if not results:
        raise NothingToPrint('This visit has no test results to print.')
    patient = repository.get_patient(visit['patientId']) or {'name': visit['patientName']}
    top, bottom = _print_sections(repository)
    pages = build_print_document({'visit': visit, 'patient': patient, 'results': results},
                                 options or default_print_options())
    context = {
        'laboratory': settings.LAB_LABORATORY_NAME,
        'visit': visit,
        'patient': patient,
        'top_sections': top,
        'bottom_sections': bottom,
        'pages': [
            {
                'label': page.label,
                'long_form': page.long_form,
                'items': page.items,
                'urine': _urine_sections(page.items[0]) if page.long_form and page.items[0].get('testType') == 'urine' else None,
            }
            for page in pages
        ],
    }
    logger.info('Rendering result sheet for visit %s: %d results on %d pages', visit_id, len(results), len(pages))
    return render_to_string('lab/print/result_sheet.html', context)


def render_daily_report(repository: LabRepository, day: date, notes: list[dict] | None = None) -> str:
    summary = repository.daily_summary(day)
    notes = [n for n in (notes or []) if (n.get('name') or '').strip() or (n.get('value') or '').strip()]
    if not summary['sources'] and not summary['expenses'] and not notes:
        raise NothingToPrint(f'No visits or expenses recorded on {day.isoformat()}.')
    rows = report_row_count(len(summary['sources']), len(summary['expenses']), len(notes))
    scale = report_scale_factor(rows)
    context = {
        'laboratory': settings.LAB_LABORATORY_NAME,
        'summary': summary,
        'notes': notes,
        # rendered into CSS; keep a dot decimal separator
        'scale': f'{scale:.4f}',
    }
    return render_to_string('lab/print/daily_report.html', context)
