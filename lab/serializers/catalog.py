from rest_framework import serializers

from lab.models import TEST_TYPE_CHOICES
from .fields import CleanCharField


class LabTestSerializer(serializers.Serializer):
    name = CleanCharField(max_length=255)
    unit = serializers.CharField(max_length=64, required=False, allow_blank=True)
    normalRange = serializers.CharField(source='normal_range', required=False, allow_blank=True, trim_whitespace=False)
    price = serializers.FloatField(required=False, allow_null=True, min_value=0)
    testType = serializers.ChoiceField(source='test_type', choices=[c for c, _ in TEST_TYPE_CHOICES], required=False)

    def validate_name(self, v):
        if not v:
            raise serializers.ValidationError('Test name is required')
        return v
