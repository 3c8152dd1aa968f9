"""
Daily financial report and printable documents.

Printed documents are standalone HTML pages; asking to print something
empty answers 400 "No data to print." and changes nothing.
"""
from __future__ import annotations

from django.http import HttpResponse
from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..permissions import CanPrintReports, CanPrintResults, CanViewReports
from ..printing.documents import render_daily_report, render_result_sheet
from ..repository import get_repository
from ..serializers.finance import DateQuerySerializer, ReportPrintSerializer


def _html(document: str) -> HttpResponse:
    return HttpResponse(document, content_type='text/html; charset=utf-8')


@api_view(['GET'])
@permission_classes([IsAuthenticated, CanViewReports])
def daily_report(request):
    q = DateQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    day = q.validated_data.get('date') or timezone.localdate()
    return Response(get_repository().daily_summary(day))


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanPrintReports])
def print_daily_report(request):
    s = ReportPrintSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    notes = [dict(n) for n in s.validated_data.get('notes', [])]
    return _html(render_daily_report(get_repository(), s.validated_data['date'], notes))


@api_view(['GET'])
@permission_classes([IsAuthenticated, CanPrintResults])
def print_visit(request, pk: str):
    return _html(render_result_sheet(get_repository(), pk))
