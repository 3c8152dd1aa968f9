"""
Page layout for printed result sheets and the daily financial report.

Everything here is pure: results go in as API-shaped dicts, page
descriptors come out, and rendering happens elsewhere.

Result sheets
    "Long" results (urine analysis, or names matching one of
    ``LONG_TEST_KEYWORDS``) print as multi-table blocks and each gets a
    page of its own, ahead of everything else.  The remaining short
    results share pages, either a fixed number per page or by weight:
    a result costs ``1 + 0.5`` per extra line of its normal range and a
    page holds ``budget`` units.  A result that would push the page past
    the budget starts a new page; landing exactly on it still fits.

Financial report
    Always a single page.  Past ``REPORT_BASE_ROWS`` rows the content is
    scaled down by ``REPORT_SCALE_STEP`` per extra row, never below
    ``REPORT_MIN_SCALE``.
"""
from __future__ import annotations

from dataclasses import dataclass, field

LONG_TEST_KEYWORDS = (
    'urine',
    'stool',
    'culture',
    'blood culture',
    'urine analysis',
    'stool analysis',
    'sensitivity',
)

STRATEGY_FIXED = 'fixed'
STRATEGY_WEIGHTED = 'weighted'

DEFAULT_PER_PAGE = 8
DEFAULT_BUDGET = 18.0
EXTRA_LINE_WEIGHT = 0.5

REPORT_BASE_ROWS = 12
REPORT_SCALE_STEP = 0.03
REPORT_MIN_SCALE = 0.45
# title, totals block and net line
REPORT_FIXED_ROWS = 3


@dataclass
class PrintOptions:
    strategy: str = STRATEGY_WEIGHTED
    per_page: int = DEFAULT_PER_PAGE
    budget: float = DEFAULT_BUDGET

    def __post_init__(self):
        if self.strategy not in (STRATEGY_FIXED, STRATEGY_WEIGHTED):
            raise ValueError(f"unknown pagination strategy {self.strategy!r}")
        if self.per_page < 1:
            raise ValueError("per_page must be at least 1")
        if self.budget <= 0:
            raise ValueError("budget must be positive")


@dataclass
class PageDescriptor:
    number: int
    total: int
    items: list[dict] = field(default_factory=list)
    long_form: bool = False

    @property
    def label(self) -> str:
        return f"(Page {self.number}/{self.total})" if self.total > 1 else ''


def is_long_test(test_name: str | None, test_type: str | None = None) -> bool:
    if test_type == 'urine':
        return True
    name = (test_name or '').lower()
    return any(keyword in name for keyword in LONG_TEST_KEYWORDS)


def normal_range_lines(normal_range: str | None) -> int:
    lines = [line for line in (normal_range or '').splitlines() if line.strip()]
    return max(1, len(lines))


def result_weight(item: dict) -> float:
    return 1 + EXTRA_LINE_WEIGHT * (normal_range_lines(item.get('normalRange')) - 1)


def _split(items: list[dict]) -> tuple[list[dict], list[dict]]:
    long_items, short_items = [], []
    for item in items:
        if is_long_test(item.get('testName'), item.get('testType')):
            long_items.append(item)
        else:
            short_items.append(item)
    return long_items, short_items


def _chunk_fixed(items: list[dict], per_page: int) -> list[list[dict]]:
    return [items[i:i + per_page] for i in range(0, len(items), per_page)]


def _chunk_weighted(items: list[dict], budget: float) -> list[list[dict]]:
    pages: list[list[dict]] = []
    current: list[dict] = []
    used = 0.0
    for item in items:
        weight = result_weight(item)
        if current and used + weight > budget:
            pages.append(current)
            current, used = [], 0.0
        current.append(item)
        used += weight
    if current:
        pages.append(current)
    return pages


def paginate_results(items: list[dict], options: PrintOptions | None = None) -> list[PageDescriptor]:
    options = options or PrintOptions()
    long_items, short_items = _split(list(items))
    if options.strategy == STRATEGY_FIXED:
        short_pages = _chunk_fixed(short_items, options.per_page)
    else:
        short_pages = _chunk_weighted(short_items, options.budget)
    groups = [([item], True) for item in long_items] + [(page, False) for page in short_pages]
    total = len(groups)
    return [
        PageDescriptor(number=i, total=total, items=page, long_form=long_form)
        for i, (page, long_form) in enumerate(groups, start=1)
    ]


def build_print_document(data: dict, options: PrintOptions | None = None) -> list[PageDescriptor]:
    """Page descriptors for a visit's result sheet.

    ``data`` carries ``results`` (API-shaped result records); other keys
    (patient, visit, sections) are passed through to rendering untouched.
    """
    return paginate_results(data.get('results') or [], options)


def report_row_count(sources: int, expenses: int, notes: int) -> int:
    # each table carries its own header row
    return (sources + 1) + (expenses + 1) + notes + REPORT_FIXED_ROWS


def report_scale_factor(total_rows: int) -> float:
    if total_rows <= REPORT_BASE_ROWS:
        return 1.0
    return max(REPORT_MIN_SCALE, 1 - REPORT_SCALE_STEP * (total_rows - REPORT_BASE_ROWS))
