"""
Key/value settings.

``GET /api/settings`` lists every setting, or one with ``?key=``;
``POST`` upserts ``{key, value}``.  The ``customPrintSections`` value is
validated before it is stored.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..permissions import CanChangeSettings
from ..repository import get_repository
from ..serializers.preferences import SettingSerializer


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanChangeSettings])
def settings_view(request):
    repo = get_repository()
    if request.method == 'GET':
        key = request.query_params.get('key')
        if not key:
            return Response(repo.list_settings())
        record = repo.get_setting(key)
        if record is None:
            raise NotFound('Setting not found')
        return Response(record)
    s = SettingSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    return Response(repo.set_setting(s.validated_data['key'], s.validated_data['value']))
