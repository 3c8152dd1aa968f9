"""
Session login, session probe and logout.

The login gate is a Django session: ``POST /api/login`` checks the
credentials with Django's authentication backends and starts a session,
``GET /api/session`` tells the front-end whether one is active.  Failed
attempts are logged with the username only and throttled under the
``login`` scope.
"""
from __future__ import annotations

import logging

from django.contrib.auth import authenticate, login, logout
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from .serializers.auth import LoginSerializer
from .services.accounts import format_user

logger = logging.getLogger(__name__)


@api_view(['POST'])
@permission_classes([AllowAny])
def login_view(request):
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    username = s.validated_data['username']
    user = authenticate(request, username=username, password=s.validated_data['password'])
    if user is None:
        logger.warning('Failed login for %s from %s', username, request.META.get('REMOTE_ADDR'))
        return Response({'success': False, 'message': 'Invalid username or password'}, status=400)
    login(request, user)
    logger.info('User %s logged in', user.username)
    return Response({'success': True, 'message': 'Logged in', 'user': format_user(user)})

# ScopedRateThrottle reads throttle_scope from the wrapped APIView class
login_view.cls.throttle_scope = 'login'


@api_view(['GET'])
@permission_classes([AllowAny])
def session_view(request):
    user = request.user
    if not user.is_authenticated:
        return Response({'authenticated': False})
    return Response({'authenticated': True, 'username': user.username, 'user': format_user(user)})


@api_view(['POST'])
@permission_classes([AllowAny])
def logout_view(request):
    if request.user.is_authenticated:
        logger.info('User %s logged out', request.user.username)
    logout(request)
    return Response({'success': True, 'message': 'Logged out'})
