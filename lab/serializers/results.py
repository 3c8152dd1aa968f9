from rest_framework import serializers

from lab.constants import URINE_FIELDS
from lab.models import TEST_TYPE_CHOICES
from .fields import CleanCharField


class UrineDataField(serializers.DictField):
    """The fixed-shape urine sub-form; unknown keys are rejected."""

    def __init__(self, **kwargs):
        super().__init__(child=serializers.CharField(allow_blank=True), **kwargs)

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        unknown = sorted(set(value) - set(URINE_FIELDS))
        if unknown:
            raise serializers.ValidationError(f"Unknown urine fields: {', '.join(unknown)}")
        return value


class TestResultSerializer(serializers.Serializer):
    __test__ = False

    visitId = serializers.CharField(source='visit_id', max_length=36)
    testId = serializers.CharField(source='test_id', max_length=36)
    testName = CleanCharField(source='test_name', max_length=255)
    # clinical values are stored verbatim; printing escapes them
    result = serializers.CharField(required=False, allow_blank=True)
    unit = serializers.CharField(max_length=64, required=False, allow_blank=True)
    normalRange = serializers.CharField(source='normal_range', required=False, allow_blank=True, trim_whitespace=False)
    price = serializers.FloatField(required=False, allow_null=True, min_value=0)
    testType = serializers.ChoiceField(source='test_type', choices=[c for c, _ in TEST_TYPE_CHOICES], required=False)
    urineData = UrineDataField(source='urine_data', required=False, allow_null=True)


class TestResultUpdateSerializer(TestResultSerializer):
    """Fields editable after creation; the owning visit and test are fixed."""
    __test__ = False

    def get_fields(self):
        fields = super().get_fields()
        fields.pop('visitId')
        fields.pop('testId')
        return fields


class BatchItemSerializer(serializers.Serializer):
    id = serializers.CharField(max_length=36)
    data = serializers.DictField()


class ResultListQuerySerializer(serializers.Serializer):
    visitId = serializers.CharField(source='visit_id', required=False, max_length=36)
