"""
Dashboard layout services.

One row per tile, keyed by section name.  The default tiles are written
the first time the layouts are read; drag/resize commits, renames and
recolours are upserts touching only their own fields.
"""
from __future__ import annotations

import logging

from django.db import transaction
from rest_framework.exceptions import ValidationError

from lab.constants import DEFAULT_LAYOUTS
from lab.models import DashboardLayout

logger = logging.getLogger(__name__)

DEFAULTS_BY_SECTION = {d['sectionName']: d for d in DEFAULT_LAYOUTS}


def format_layout(layout: DashboardLayout) -> dict:
    return {
        'id': layout.id,
        'sectionName': layout.section_name,
        'displayName': layout.display_name,
        'positionX': layout.position_x,
        'positionY': layout.position_y,
        'width': layout.width,
        'height': layout.height,
        'color': layout.color,
        'route': layout.route,
    }


def default_layout_fields(section_name: str) -> dict:
    d = DEFAULTS_BY_SECTION[section_name]
    return {
        'display_name': d['displayName'],
        'position_x': d['positionX'],
        'position_y': d['positionY'],
        'width': d['width'],
        'height': d['height'],
        'color': d['color'],
        'route': d['route'],
    }


@transaction.atomic
def initialize_default_layouts() -> list[DashboardLayout]:
    """Create the default tile for every section that has no row yet."""
    created = []
    for section_name in DEFAULTS_BY_SECTION:
        layout, was_created = DashboardLayout.objects.get_or_create(
            section_name=section_name, defaults=default_layout_fields(section_name),
        )
        if was_created:
            created.append(layout)
    if created:
        logger.info('Initialized %d dashboard tiles', len(created))
    return created


def list_layouts():
    if not DashboardLayout.objects.exists():
        initialize_default_layouts()
    return DashboardLayout.objects.all()


@transaction.atomic
def upsert_layout(section_name: str, **fields) -> DashboardLayout:
    layout = DashboardLayout.objects.select_for_update().filter(section_name=section_name).first()
    if layout is None:
        base = default_layout_fields(section_name) if section_name in DEFAULTS_BY_SECTION else {}
        base.update(fields)
        if not base.get('display_name') or not base.get('route'):
            raise ValidationError({'sectionName': f'Unknown section {section_name!r} needs displayName and route'})
        return DashboardLayout.objects.create(section_name=section_name, **base)
    for field, value in fields.items():
        setattr(layout, field, value)
    layout.save(update_fields=list(fields) or None)
    return layout


def commit_layout_change(section_name: str, x: int, y: int, w: int, h: int) -> DashboardLayout:
    return upsert_layout(section_name, position_x=x, position_y=y, width=w, height=h)


def rename_section(section_name: str, display_name: str) -> DashboardLayout:
    return upsert_layout(section_name, display_name=display_name)


def recolor_section(section_name: str, color: str) -> DashboardLayout:
    return upsert_layout(section_name, color=color)
