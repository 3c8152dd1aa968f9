from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..permissions import CanViewReports
from ..repository import get_repository
from ..serializers.finance import DateQuerySerializer


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanViewReports])
def expenses(request):
    repo = get_repository()
    if request.method == 'GET':
        q = DateQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        return Response(repo.list_expenses(q.validated_data.get('date')))
    return Response(repo.create_expense(request.data), status=status.HTTP_201_CREATED)


@api_view(['PUT', 'DELETE'])
@permission_classes([IsAuthenticated, CanViewReports])
def expense_detail(request, pk: str):
    repo = get_repository()
    if request.method == 'DELETE':
        if not repo.delete_expense(pk):
            raise NotFound('Expense not found')
        return Response(status=status.HTTP_204_NO_CONTENT)
    record = repo.update_expense(pk, request.data)
    if record is None:
        raise NotFound('Expense not found')
    return Response(record)
