"""
Per-section permission checks.

Staff accounts carry a JSON permission object keyed by section
(``patients``, ``results``, ``reports``, ``settings``, ``accounts``,
``tests``).  Superusers are allowed everything.  For everyone else the
check is fail-closed: a missing, empty or malformed permission object
grants nothing, and a flag must be literally ``True``.
"""
from __future__ import annotations

import json

from rest_framework.permissions import SAFE_METHODS, BasePermission

from .constants import PERMISSION_SCHEMA, SECTION_VISIBILITY_FLAGS


def normalize_permissions(raw) -> dict[str, dict[str, bool]]:
    """Return a complete permission object with every known flag.

    Accepts a dict or its JSON text; unknown sections and flags are
    dropped, anything that is not exactly ``True`` becomes ``False``.
    """
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            raw = None
    if not isinstance(raw, dict):
        raw = {}
    out: dict[str, dict[str, bool]] = {}
    for section, flags in PERMISSION_SCHEMA.items():
        given = raw.get(section)
        given = given if isinstance(given, dict) else {}
        out[section] = {flag: given.get(flag) is True for flag in flags}
    return out


def has_section_flag(user, section: str, flag: str) -> bool:
    if not (user and user.is_authenticated):
        return False
    if user.is_superuser:
        return True
    perms = getattr(user, 'section_permissions', None)
    if not isinstance(perms, dict) or not perms:
        return False
    section_perms = perms.get(section)
    return isinstance(section_perms, dict) and section_perms.get(flag) is True


def section_visible(user, section_name: str) -> bool:
    """Whether the dashboard tile for ``section_name`` is shown to ``user``."""
    if user and user.is_authenticated and user.is_superuser:
        return True
    flag = SECTION_VISIBILITY_FLAGS.get(section_name)
    if flag is None:
        return False
    return has_section_flag(user, *flag)


class CanManageAccounts(BasePermission):
    """Superusers, or users granted ``accounts.access``."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return has_section_flag(getattr(request, 'user', None), 'accounts', 'access')


def section_permission(section: str, read_flag: str | None, write_flag: str):
    """Permission class gating safe methods on ``read_flag`` and writes on ``write_flag``.

    ``read_flag=None`` leaves reads open to any authenticated user.
    """

    class SectionPermission(BasePermission):
        def has_permission(self, request, view) -> bool:  # type: ignore[override]
            user = getattr(request, 'user', None)
            if request.method in SAFE_METHODS:
                if read_flag is None:
                    return bool(user and user.is_authenticated)
                return has_section_flag(user, section, read_flag)
            return has_section_flag(user, section, write_flag)

    SectionPermission.__name__ = f'{section.title()}Permission'
    return SectionPermission


CanEditTests = section_permission('tests', None, 'access')
CanEditPatients = section_permission('patients', 'view', 'edit')
CanEditResults = section_permission('results', 'view', 'edit')
CanPrintResults = section_permission('results', 'print', 'print')
CanViewReports = section_permission('reports', 'view', 'view')
CanPrintReports = section_permission('reports', 'print', 'print')
CanChangeSettings = section_permission('settings', None, 'access')
CanManageData = section_permission('settings', 'access', 'access')
