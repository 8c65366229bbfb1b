"""
Authentication views.

Patients and hospital admins sign in with their ABHA ID or mobile number;
government officers have a separate username login.  Every account
receives a simplejwt access/refresh pair.  These views are kept apart from
the authentication class (see ``portal.authentication``) to avoid circular
imports when Django REST framework initialises authentication classes.
"""
from __future__ import annotations

import logging

from django.db import DatabaseError, transaction
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework_simplejwt.tokens import RefreshToken

from portal.models import GovernmentUser, User
from portal.serializers.auth import GovernmentLoginSerializer, LoginSerializer, RegisterSerializer
from portal.services.audit import log_action
from portal.services.users import find_login_user, issue_tokens, register_patient, serialize_user

logger = logging.getLogger(__name__)


def _client_ip(request):
    return request.META.get('REMOTE_ADDR')


def _audit(user, action, **detail):
    try:
        with transaction.atomic():
            log_action(user=user, action=action, object_type='user',
                       object_id=getattr(user, 'id', None), detail=detail)
    except DatabaseError:
        logger.warning('audit write failed for %s', action, exc_info=True)


# ---------------------------------------------------------------------
# Patient / hospital admin accounts
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
def register_view(request):
    s = RegisterSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    try:
        user = register_patient(s.validated_data)
    except ValueError as e:
        return Response({'success': False, 'message': str(e)}, status=400)

    _audit(user, 'register', ip=_client_ip(request))
    data = {
        'id': user.id,
        'abhaId': user.abha_id,
        'name': user.name,
        'mobile': user.mobile,
        'email': user.email or None,
        'role': user.role,
        **issue_tokens(user),
    }
    return Response({'success': True, 'message': 'User registered successfully', 'data': data},
                    status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([AllowAny])
def login_view(request):
    """
    Login with ``abhaId`` or ``mobile`` plus ``password``.
    """
    s = LoginSerializer(data=request.data)
    if not s.is_valid():
        return Response({'success': False, 'message': 'Please provide ABHA ID or mobile and password'}, status=400)
    vd = s.validated_data

    user = find_login_user(vd['abhaId'], vd['mobile'])
    if user is None:
        _audit(None, 'login', result='fail', reason='not_found', ip=_client_ip(request))
        return Response({'success': False, 'message': 'User not found'}, status=401)
    if not user.is_active or not user.check_password(vd['password']):
        _audit(user, 'login', result='fail', reason='password', ip=_client_ip(request))
        return Response({'success': False, 'message': 'Invalid password'}, status=401)

    _audit(user, 'login', result='ok', ip=_client_ip(request))
    data = {
        'id': user.id,
        'abhaId': user.abha_id,
        'name': user.name,
        'mobile': user.mobile,
        'email': user.email or None,
        'age': user.age,
        'gender': user.gender or None,
        'role': user.role,
        'hospitalId': user.hospital_id,
        **issue_tokens(user),
    }
    return Response({'success': True, 'message': 'Login successful', 'data': data})


# ---------------------------------------------------------------------
# Government officers
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
def government_login_view(request):
    s = GovernmentLoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    username = s.validated_data['username']

    user = User.objects.filter(username=username, role=User.ROLE_GOVERNMENT).first()
    if user is None or not user.is_active or not user.check_password(s.validated_data['password']):
        _audit(user, 'government_login', result='fail', username=username, ip=_client_ip(request))
        return Response({'success': False, 'message': 'Invalid credentials'}, status=401)

    profile = GovernmentUser.objects.filter(user=user).first()
    _audit(user, 'government_login', result='ok', ip=_client_ip(request))
    data = {
        'id': user.id,
        'username': user.username,
        'department': profile.department if profile else None,
        'role': user.role,
        **issue_tokens(user),
    }
    return Response({'success': True, 'message': 'Login successful', 'data': data})


# ---------------------------------------------------------------------
# Token lifecycle
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
def refresh_view(request):
    raw = request.data.get('refresh')
    if not raw:
        return Response({'success': False, 'message': 'refresh token is required'}, status=400)
    try:
        refresh = RefreshToken(raw)
        refresh.check_blacklist()
    except TokenError as e:
        return Response({'success': False, 'message': str(e)}, status=401)
    return Response({'success': True, 'data': {'token': str(refresh.access_token)}})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout_view(request):
    """
    Blacklist the posted refresh token, or every outstanding refresh
    token of the caller when none is given.
    """
    raw = request.data.get('refresh')
    if raw:
        try:
            RefreshToken(raw).blacklist()
        except TokenError as e:
            return Response({'success': False, 'message': str(e)}, status=400)
    else:
        for t in OutstandingToken.objects.filter(user=request.user):
            BlacklistedToken.objects.get_or_create(token=t)
    _audit(request.user, 'logout', ip=_client_ip(request))
    return Response({'success': True, 'message': 'Logged out'})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def me_view(request):
    return Response({'success': True, 'data': serialize_user(request.user)})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def verify_view(request):
    u = request.user
    return Response({
        'success': True,
        'message': 'Token is valid',
        'data': {'id': u.id, 'abhaId': u.abha_id, 'name': u.name, 'role': u.role},
    })
