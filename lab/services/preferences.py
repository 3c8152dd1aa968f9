"""
Key/value settings.

Custom print sections (letterhead lines, signatures, disclaimers) are
stored as a JSON list under the ``customPrintSections`` key and are
validated on write.
"""
from __future__ import annotations

import json
import logging

from rest_framework.exceptions import ValidationError

from lab.constants import CUSTOM_PRINT_SECTIONS_KEY
from lab.models import Setting
from lab.serializers.preferences import CustomPrintSectionSerializer

logger = logging.getLogger(__name__)


def format_setting(s: Setting) -> dict:
    return {'id': s.id, 'key': s.key, 'value': s.value}


def get_setting(key: str) -> Setting | None:
    return Setting.objects.filter(key=key).first()


def set_setting(key: str, value: str) -> Setting:
    setting, _ = Setting.objects.update_or_create(key=key, defaults={'value': value})
    return setting


def clean_setting_value(key: str, value: str) -> str:
    """Validate values with a known structure; other keys pass through."""
    if key != CUSTOM_PRINT_SECTIONS_KEY:
        return value
    try:
        sections = json.loads(value or '[]')
    except ValueError:
        raise ValidationError({'value': 'Custom print sections must be a JSON list'})
    if not isinstance(sections, list):
        raise ValidationError({'value': 'Custom print sections must be a JSON list'})
    s = CustomPrintSectionSerializer(data=sections, many=True)
    s.is_valid(raise_exception=True)
    return json.dumps(s.validated_data)


def parse_custom_print_sections(raw: str | None) -> list[dict]:
    """Decode stored sections, skipping anything malformed."""
    try:
        sections = json.loads(raw or '[]')
    except ValueError:
        logger.warning('Ignoring unreadable custom print sections')
        return []
    if not isinstance(sections, list):
        return []
    out = []
    for item in sections:
        s = CustomPrintSectionSerializer(data=item)
        if s.is_valid():
            out.append(dict(s.validated_data))
    return out
