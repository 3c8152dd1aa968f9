"""
Bulk data operations: wipe, backup export and restore.

Wiping keeps the test catalog, settings and dashboard layout.  A restore
replaces every table with the backup's records, ids included; a backup
that fails its checks answers 400 and leaves the data as it was.
"""
from __future__ import annotations

import logging

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..permissions import CanManageData
from ..repository import get_repository

logger = logging.getLogger(__name__)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, CanManageData])
def delete_all(request):
    counts = get_repository().delete_all_data()
    logger.warning('All patient data deleted by %s', request.user.username)
    return Response({'success': True, 'deleted': counts})


@api_view(['GET'])
@permission_classes([IsAuthenticated, CanManageData])
def export_data(request):
    return Response(get_repository().export_all_data())


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanManageData])
def import_data(request):
    counts = get_repository().import_all_data(request.data)
    logger.info('Backup restored by %s: %s', request.user.username, counts)
    return Response({'success': True, 'imported': counts})
