"""
Staff accounts.

Only superusers and accounts holding ``accounts.access`` may list or
change accounts.  Passwords are write-only; the response never echoes
them.  Superusers are managed with ``manage.py ensure_admin`` and cannot
be deleted here.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound, PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..models import User
from ..permissions import CanManageAccounts
from ..serializers.accounts import UserSerializer
from ..services.accounts import create_user, format_user, update_user


def _get_user(pk: int) -> User:
    user = User.objects.filter(pk=pk).first()
    if user is None:
        raise NotFound('User not found')
    return user


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanManageAccounts])
def users(request):
    if request.method == 'GET':
        return Response([format_user(u) for u in User.objects.order_by('username')])
    s = UserSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user = create_user(**s.validated_data)
    return Response(format_user(user), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, CanManageAccounts])
def user_detail(request, pk: int):
    user = _get_user(pk)
    if request.method == 'GET':
        return Response(format_user(user))
    if user.is_superuser and not request.user.is_superuser:
        raise PermissionDenied('Only a superuser may change a superuser account')
    if request.method == 'PUT':
        s = UserSerializer(user, data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        return Response(format_user(update_user(user, **s.validated_data)))
    if user.is_superuser or user.pk == request.user.pk:
        raise PermissionDenied('This account cannot be deleted')
    user.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)
