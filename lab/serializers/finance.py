from rest_framework import serializers

from .fields import CleanCharField


class ExpenseSerializer(serializers.Serializer):
    name = CleanCharField(max_length=255)
    amount = serializers.FloatField(min_value=0)
    date = serializers.DateField()


class DateQuerySerializer(serializers.Serializer):
    date = serializers.DateField(required=False)


class ReportNoteSerializer(serializers.Serializer):
    name = CleanCharField(max_length=255, allow_blank=True)
    value = CleanCharField(max_length=255, allow_blank=True)


class ReportPrintSerializer(serializers.Serializer):
    date = serializers.DateField()
    notes = ReportNoteSerializer(many=True, required=False)
