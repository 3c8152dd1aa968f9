"""
Patient and visit views.

Reads need ``patients.view`` and writes ``patients.edit``.  Deleting a
patient removes the patient's visits and their results.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..permissions import CanEditPatients
from ..repository import get_repository
from ..serializers.patients import VisitListQuerySerializer


def _not_found(kind: str):
    return NotFound(f'{kind} not found')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanEditPatients])
def patients(request):
    repo = get_repository()
    if request.method == 'GET':
        return Response(repo.list_patients())
    return Response(repo.create_patient(request.data), status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEditPatients])
def register_patient(request):
    """Create the patient, the visit and the ordered tests' results at once.

    ``totalCost`` defaults to the sum of the test prices when omitted.
    """
    return Response(get_repository().register_patient(request.data), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, CanEditPatients])
def patient_detail(request, pk: str):
    repo = get_repository()
    if request.method == 'GET':
        record = repo.get_patient(pk)
    elif request.method == 'PUT':
        record = repo.update_patient(pk, request.data)
    else:
        if not repo.delete_patient(pk):
            raise _not_found('Patient')
        return Response(status=status.HTTP_204_NO_CONTENT)
    if record is None:
        raise _not_found('Patient')
    return Response(record)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanEditPatients])
def visits(request):
    repo = get_repository()
    if request.method == 'GET':
        q = VisitListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        return Response(repo.list_visits(
            visit_date=q.validated_data.get('date'),
            patient_id=q.validated_data.get('patient_id'),
        ))
    return Response(repo.create_visit(request.data), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, CanEditPatients])
def visit_detail(request, pk: str):
    repo = get_repository()
    if request.method == 'GET':
        record = repo.get_visit(pk)
    elif request.method == 'PUT':
        record = repo.update_visit(pk, request.data)
    else:
        if not repo.delete_visit(pk):
            raise _not_found('Visit')
        return Response(status=status.HTTP_204_NO_CONTENT)
    if record is None:
        raise _not_found('Visit')
    return Response(record)
