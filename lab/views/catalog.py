"""
Test catalog views.

Everyone signed in can read the catalog (registration needs it);
changing it requires ``tests.access``.  Editing a test's unit or normal
range is copied onto every recorded result of that test.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..permissions import CanEditTests
from ..repository import get_repository


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanEditTests])
def tests(request):
    repo = get_repository()
    if request.method == 'GET':
        return Response(repo.list_tests())
    return Response(repo.create_test(request.data), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, CanEditTests])
def test_detail(request, pk: str):
    repo = get_repository()
    if request.method == 'GET':
        record = repo.get_test(pk)
    elif request.method == 'PUT':
        record = repo.update_test(pk, request.data)
    else:
        if not repo.delete_test(pk):
            raise NotFound('Test not found')
        return Response(status=status.HTTP_204_NO_CONTENT)
    if record is None:
        raise NotFound('Test not found')
    return Response(record)


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEditTests])
def initialize_defaults(request):
    created = get_repository().initialize_default_tests()
    if created:
        message = f'Added {len(created)} default tests'
    else:
        message = 'All default tests already exist'
    return Response({'success': True, 'message': message, 'count': len(created)})


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEditTests])
def add_urine_test(request):
    record, created = get_repository().ensure_urine_test()
    return Response(
        {'success': True, 'created': created, 'test': record,
         'message': 'Urine test added' if created else 'Urine test already exists'},
        status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
    )
