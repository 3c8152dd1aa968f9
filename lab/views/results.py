"""Test result views: entry, batch auto-save and per-row edits."""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..permissions import CanEditResults
from ..repository import get_repository
from ..serializers.results import BatchItemSerializer, ResultListQuerySerializer


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanEditResults])
def test_results(request):
    repo = get_repository()
    if request.method == 'GET':
        q = ResultListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        return Response(repo.list_test_results(visit_id=q.validated_data.get('visit_id')))
    return Response(repo.create_test_result(request.data), status=status.HTTP_201_CREATED)


@api_view(['PUT'])
@permission_classes([IsAuthenticated, CanEditResults])
def batch_update(request):
    """Apply ``{"updates": [{"id", "data"}]}``; a bare list is accepted too.

    Unknown ids are skipped; the response lists the updated records.
    """
    payload = request.data.get('updates') if isinstance(request.data, dict) else request.data
    s = BatchItemSerializer(data=payload, many=True)
    s.is_valid(raise_exception=True)
    updated = get_repository().update_test_results_batch([dict(item) for item in s.validated_data])
    return Response(updated)


@api_view(['PUT', 'DELETE'])
@permission_classes([IsAuthenticated, CanEditResults])
def test_result_detail(request, pk: str):
    repo = get_repository()
    if request.method == 'DELETE':
        if not repo.delete_test_result(pk):
            raise NotFound('Test result not found')
        return Response(status=status.HTTP_204_NO_CONTENT)
    record = repo.update_test_result(pk, request.data)
    if record is None:
        raise NotFound('Test result not found')
    return Response(record)
