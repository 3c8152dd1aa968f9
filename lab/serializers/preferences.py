from rest_framework import serializers

from .fields import CleanCharField

# hex, a colour keyword or rgb()/rgba(); values end up in inline styles
COLOR_PATTERN = r'^(#[0-9a-fA-F]{3,8}|[a-zA-Z]{3,20}|rgba?\(\s*[\d.]+%?(\s*,\s*[\d.]+%?){2,3}\s*\))$'


class SettingSerializer(serializers.Serializer):
    key = serializers.CharField(max_length=128)
    value = serializers.CharField(allow_blank=True, trim_whitespace=False)


class CustomPrintSectionSerializer(serializers.Serializer):
    id = serializers.CharField(max_length=64)
    text = CleanCharField(allow_blank=True, trim_whitespace=False)
    position = serializers.ChoiceField(choices=['top', 'bottom'])
    alignment = serializers.ChoiceField(choices=['left', 'center', 'right'], default='center')
    textColor = serializers.RegexField(COLOR_PATTERN, max_length=32, default='#000000')
    backgroundColor = serializers.RegexField(COLOR_PATTERN, max_length=32, default='transparent')
    fontSize = serializers.IntegerField(min_value=8, max_value=72, default=16)
