"""Staff account management."""
from __future__ import annotations

import logging

from lab.models import User
from lab.permissions import normalize_permissions

logger = logging.getLogger(__name__)


def format_user(u: User) -> dict:
    return {
        'id': u.id,
        'displayName': u.display_name or u.username,
        'username': u.username,
        'isSuperuser': u.is_superuser,
        'permissions': normalize_permissions(u.section_permissions),
        'createdAt': u.date_joined.isoformat() if u.date_joined else None,
    }


def create_user(*, username: str, password: str, display_name: str = '', section_permissions=None) -> User:
    user = User.objects.create_user(
        username=username,
        password=password,
        display_name=display_name,
        section_permissions=normalize_permissions(section_permissions),
    )
    logger.info('Created account %s', username)
    return user


def update_user(user: User, **changes) -> User:
    password = changes.pop('password', None)
    if 'section_permissions' in changes:
        changes['section_permissions'] = normalize_permissions(changes['section_permissions'])
    for field, value in changes.items():
        setattr(user, field, value)
    if password:
        user.set_password(password)
    user.save()
    return user
