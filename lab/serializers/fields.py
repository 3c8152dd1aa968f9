import html

import bleach
from rest_framework import serializers


def clean_text(value: str) -> str:
    """Strip markup from free text; printing escapes it again on output."""
    return html.unescape(bleach.clean(value or '', tags=[], strip=True)).strip()


class CleanCharField(serializers.CharField):
    """CharField that drops HTML tags before validation."""

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        return clean_text(value)
