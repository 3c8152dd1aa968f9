from rest_framework import serializers

from .fields import CleanCharField


class PatientSerializer(serializers.Serializer):
    name = CleanCharField(max_length=255)
    age = serializers.IntegerField(required=False, allow_null=True, min_value=0, max_value=150)
    gender = CleanCharField(max_length=32, required=False, allow_blank=True)
    phone = CleanCharField(max_length=32, required=False, allow_blank=True)
    source = CleanCharField(max_length=255, required=False, allow_blank=True)

    def validate_name(self, v):
        if not v:
            raise serializers.ValidationError('Patient name is required')
        return v


class VisitSerializer(serializers.Serializer):
    patientId = serializers.CharField(source='patient_id', max_length=36)
    patientName = CleanCharField(source='patient_name', max_length=255, required=False, allow_blank=True)
    visitDate = serializers.DateField(source='visit_date')
    totalCost = serializers.FloatField(source='total_cost', min_value=0)
    testIds = serializers.ListField(source='test_ids', child=serializers.CharField(max_length=36), required=False)


class VisitListQuerySerializer(serializers.Serializer):
    date = serializers.DateField(required=False)
    patientId = serializers.CharField(source='patient_id', required=False, max_length=36)


class PatientRegistrationSerializer(PatientSerializer):
    """Patient fields plus the tests ordered for the first visit."""
    testIds = serializers.ListField(source='test_ids', child=serializers.CharField(max_length=36), min_length=1)
    totalCost = serializers.FloatField(source='total_cost', required=False, allow_null=True, min_value=0)
    visitDate = serializers.DateField(source='visit_date', required=False)

    def validate_testIds(self, v):
        # keep selection order, drop repeats
        return list(dict.fromkeys(v))
