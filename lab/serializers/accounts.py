from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from lab.models import User
from .fields import CleanCharField


class UserSerializer(serializers.Serializer):
    displayName = CleanCharField(source='display_name', max_length=255, required=False, allow_blank=True)
    username = serializers.RegexField(r'^[\w.@+-]+$', max_length=150)
    password = serializers.CharField(write_only=True, trim_whitespace=False)
    permissions = serializers.JSONField(source='section_permissions', required=False, allow_null=True)

    def validate_username(self, v):
        qs = User.objects.filter(username__iexact=v)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError('Username already taken')
        return v

    def validate_password(self, v):
        try:
            validate_password(v, user=self.instance)
        except DjangoValidationError as e:
            raise serializers.ValidationError(e.messages)
        return v
