"""
Dashboard tile layout.

The list is filtered to the tiles the caller may open; superusers can
ask for every tile with ``?all=1``.  Drag and resize commits, renames
and recolours have their own endpoints; all of them end in the
per-section upsert.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..permissions import CanChangeSettings, section_visible
from ..repository import get_repository
from ..serializers.layouts import LayoutColorSerializer, LayoutNameSerializer, LayoutPositionSerializer


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_layouts(request):
    layouts = get_repository().list_layouts()
    if request.user.is_superuser and request.query_params.get('all') in ('1', 'true'):
        return Response(layouts)
    return Response([l for l in layouts if section_visible(request.user, l['sectionName'])])


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanChangeSettings])
def init_layouts(request):
    created = get_repository().initialize_default_layouts()
    return Response({'success': True, 'count': len(created), 'layouts': created})


@api_view(['PUT'])
@permission_classes([IsAuthenticated, CanChangeSettings])
def layout_detail(request, section_name: str):
    return Response(get_repository().upsert_layout(section_name, request.data))


@api_view(['PUT'])
@permission_classes([IsAuthenticated, CanChangeSettings])
def layout_position(request, section_name: str):
    s = LayoutPositionSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    return Response(get_repository().commit_layout_change(section_name, **s.validated_data))


@api_view(['PUT'])
@permission_classes([IsAuthenticated, CanChangeSettings])
def layout_name(request, section_name: str):
    s = LayoutNameSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    return Response(get_repository().rename_section(section_name, s.validated_data['displayName']))


@api_view(['PUT'])
@permission_classes([IsAuthenticated, CanChangeSettings])
def layout_color(request, section_name: str):
    s = LayoutColorSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    return Response(get_repository().recolor_section(section_name, s.validated_data['color']))
