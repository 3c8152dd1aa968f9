"""
Domain constants shared by the services, both repository adapters and
the auto-save drafts: the seed catalog, urine sub-form defaults, default
dashboard tiles and the permission schema.
"""
from __future__ import annotations

BACKUP_VERSION = '1.0.0'

CUSTOM_PRINT_SECTIONS_KEY = 'customPrintSections'
THEME_KEY = 'theme'

# (name, unit, normal range, price)
DEFAULT_TESTS: list[tuple[str, str, str, float]] = [
    ("CBC Blood Count", "cells/μL", "4500-11000", 8),
    ("Glucose (Fasting)", "mg/dL", "70-100", 3),
    ("BUN", "mg/dL", "7-20", 4),
    ("Creatinine", "mg/dL", "0.6-1.2", 4),
    ("Uric Acid", "mg/dL", "3.5-7.2", 5),
    ("Total Cholesterol", "mg/dL", "<200", 5),
    ("Triglycerides", "mg/dL", "<150", 5),
    ("HDL Cholesterol", "mg/dL", ">40", 6),
    ("LDL Cholesterol", "mg/dL", "<100", 6),
    ("VLDL Cholesterol", "mg/dL", "<30", 6),
    ("AST (SGOT)", "U/L", "10-40", 5),
    ("ALT (SGPT)", "U/L", "7-56", 5),
    ("ALP", "U/L", "44-147", 5),
    ("Total Bilirubin", "mg/dL", "0.1-1.2", 5),
    ("Direct Bilirubin", "mg/dL", "0.0-0.3", 5),
    ("Indirect Bilirubin", "mg/dL", "0.1-1.0", 5),
    ("Total Protein", "g/dL", "6.0-8.3", 4),
    ("Albumin", "g/dL", "3.5-5.5", 4),
    ("Globulin", "g/dL", "2.0-3.5", 4),
    ("A/G Ratio", "ratio", "1.0-2.5", 4),
    ("TSH", "μIU/mL", "0.4-4.0", 15),
    ("T3", "ng/dL", "80-200", 15),
    ("T4", "μg/dL", "5.0-12.0", 15),
    ("Free T3", "pg/mL", "2.3-4.2", 18),
    ("Free T4", "ng/dL", "0.8-1.8", 18),
    ("FSH", "mIU/mL", "Varies", 20),
    ("LH", "mIU/mL", "Varies", 20),
    ("Testosterone", "ng/dL", "Varies", 25),
    ("Estradiol", "pg/mL", "Varies", 25),
    ("Progesterone", "ng/mL", "Varies", 20),
    ("Prolactin", "ng/mL", "2-18", 20),
    ("Cortisol", "μg/dL", "5-25", 20),
    ("Vitamin D", "ng/mL", "30-100", 30),
    ("Vitamin B12", "pg/mL", "200-900", 25),
    ("Folate", "ng/mL", "2.7-17.0", 20),
    ("Iron", "μg/dL", "60-170", 8),
    ("TIBC", "μg/dL", "250-450", 8),
    ("Ferritin", "ng/mL", "12-300", 15),
    ("Transferrin", "mg/dL", "200-360", 10),
    ("Calcium", "mg/dL", "8.5-10.5", 5),
    ("Phosphorus", "mg/dL", "2.5-4.5", 5),
    ("Magnesium", "mg/dL", "1.7-2.2", 6),
    ("Sodium", "mEq/L", "136-145", 5),
    ("Potassium", "mEq/L", "3.5-5.0", 5),
    ("Chloride", "mEq/L", "98-107", 5),
    ("HbA1c", "%", "<5.7", 15),
    ("CRP", "mg/L", "<3.0", 10),
    ("ESR", "mm/hr", "<20", 6),
    ("PSA", "ng/mL", "<4.0", 20),
    ("CEA", "ng/mL", "<3.0", 25),
    ("CA 19-9", "U/mL", "<37", 30),
    ("CA 125", "U/mL", "<35", 30),
    ("AFP", "ng/mL", "<10", 25),
    ("HBsAg", "", "Negative", 10),
    ("Anti-HCV", "", "Negative", 12),
    ("HIV", "", "Negative", 15),
    ("VDRL", "", "Non-Reactive", 8),
    ("Widal Test", "", "Negative", 10),
    ("CK", "U/L", "30-200", 10),
    ("CK-MB", "U/L", "<25", 15),
    ("Troponin I", "ng/mL", "<0.04", 25),
    ("LDH", "U/L", "140-280", 8),
    ("Amylase", "U/L", "30-110", 8),
    ("Lipase", "U/L", "0-160", 10),
    ("PTH", "pg/mL", "10-65", 20),
    ("PT Urine", "", "Positive/Negative", 5),
    ("PT Serum", "", "Positive/Negative", 5),
]

URINE_TEST = {'name': 'Urine', 'unit': '', 'normalRange': '', 'price': 4, 'testType': 'urine'}

# Field order follows the printed sheet: physical, chemical, microscopical
URINE_FIELDS: tuple[str, ...] = (
    'colour', 'aspect', 'reaction', 'specificGravity',
    'glucose', 'protein', 'bilirubin', 'ketones', 'nitrite', 'leukocyte', 'blood',
    'pusCells', 'redCells', 'epithelialCell', 'bacteria', 'crystals', 'amorphous', 'mucus', 'other',
)

URINE_DEFAULTS: dict[str, str] = {field: 'Nil' for field in URINE_FIELDS}
URINE_DEFAULTS.update({
    'colour': 'Amber Yellow',
    'aspect': 'Clear',
    'reaction': 'Acidic',
    'specificGravity': '1015-1025',
})


def default_urine_data() -> dict[str, str]:
    return dict(URINE_DEFAULTS)


DEFAULT_LAYOUTS: list[dict] = [
    {'sectionName': 'tests', 'displayName': 'Tests & Prices', 'positionX': 0, 'positionY': 0,
     'color': 'from-blue-500/10 to-blue-500/5', 'route': '/tests'},
    {'sectionName': 'patients', 'displayName': 'Patients', 'positionX': 1, 'positionY': 0,
     'color': 'from-green-500/10 to-green-500/5', 'route': '/patients'},
    {'sectionName': 'results', 'displayName': 'Results', 'positionX': 2, 'positionY': 0,
     'color': 'from-purple-500/10 to-purple-500/5', 'route': '/results'},
    {'sectionName': 'reports', 'displayName': 'Reports', 'positionX': 0, 'positionY': 1,
     'color': 'from-amber-500/10 to-amber-500/5', 'route': '/reports'},
    {'sectionName': 'settings', 'displayName': 'Settings', 'positionX': 1, 'positionY': 1,
     'color': 'from-gray-500/10 to-gray-500/5', 'route': '/settings'},
    {'sectionName': 'accounts', 'displayName': 'Accounts', 'positionX': 2, 'positionY': 1,
     'color': 'from-red-500/10 to-red-500/5', 'route': '/accounts'},
]
for _layout in DEFAULT_LAYOUTS:
    _layout.setdefault('width', 1)
    _layout.setdefault('height', 1)

# Flags each section's permission object may carry
PERMISSION_SCHEMA: dict[str, tuple[str, ...]] = {
    'patients': ('view', 'edit'),
    'results': ('view', 'edit', 'print'),
    'reports': ('view', 'print'),
    'settings': ('access',),
    'accounts': ('access',),
    'tests': ('access',),
}

# Flag that makes a dashboard tile visible
SECTION_VISIBILITY_FLAGS: dict[str, tuple[str, str]] = {
    'tests': ('tests', 'access'),
    'patients': ('patients', 'view'),
    'results': ('results', 'view'),
    'reports': ('reports', 'view'),
    'settings': ('settings', 'access'),
    'accounts': ('accounts', 'access'),
}
