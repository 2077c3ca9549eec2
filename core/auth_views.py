"""
Authentication views.

Login hands out both the legacy DRF ``Token`` and a JWT pair so that
either ``Authorization: Token <key>`` or ``Authorization: Bearer <jwt>``
works against the API.  These views live apart from the authentication
class (see ``core.authentication``) so that DRF can import the class
during settings initialisation without pulling in the view layer.
"""
from __future__ import annotations

import logging

from django.contrib.auth import authenticate
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle, SimpleRateThrottle
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.serializers import TokenRefreshSerializer
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework_simplejwt.tokens import RefreshToken

from core.authentication import is_expired
from core.exceptions import BadRequest
from core.serializers.auth import LoginSerializer, LogoutSerializer
from core.services.audit import log_action

logger = logging.getLogger(__name__)


def _client_ip(request):
    return request.META.get('REMOTE_ADDR')


class LoginRateThrottle(SimpleRateThrottle):
    """Per-client limit on login attempts (the ``login`` rate)."""
    scope = 'login'

    def get_cache_key(self, request, view):
        return self.cache_format % {'scope': self.scope, 'ident': self.get_ident(request)}


def format_user(user) -> dict:
    return {
        'id': user.id,
        'username': user.username,
        'name': user.get_full_name() or user.username,
        'email': user.email,
        'phone': user.phone,
        'role': user.role,
        'hospitalId': user.hospital_id,
    }


# ---------------------------------------------------------------------
# Username/password login
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([AnonRateThrottle, LoginRateThrottle])
def login_view(request):
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    username = s.validated_data['username']
    password = s.validated_data['password']

    user = authenticate(request, username=username, password=password)
    if not user:
        # only the attempted username is recorded
        log_action(user=None, action='login', object_type='user', object_id=None,
                   detail={'result': 'fail', 'username': username, 'ip': _client_ip(request)})
        logger.warning('login failed for %s', username)
        raise BadRequest('아이디 또는 비밀번호가 올바르지 않습니다')

    log_action(user=user, action='login', object_type='user', object_id=user.id,
               detail={'result': 'ok', 'ip': _client_ip(request)})

    token_obj, _ = Token.objects.get_or_create(user=user)
    if is_expired(token_obj):
        token_obj.delete()
        token_obj = Token.objects.create(user=user)
    refresh = RefreshToken.for_user(user)
    return Response({
        'ok': True,
        'token': token_obj.key,
        'jwt_access': str(refresh.access_token),
        'jwt_refresh': str(refresh),
        'role': user.role,
        'user': format_user(user),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def me_view(request):
    user = request.user
    data = format_user(user)
    data['hospital'] = {'id': user.hospital.id, 'name': user.hospital.name} if user.hospital_id else None
    data['memberships'] = [
        {'hospitalId': m.hospital_id, 'hospitalName': m.hospital.name, 'position': m.position}
        for m in user.staff_memberships.select_related('hospital').filter(is_active=True)
    ]
    return Response({'ok': True, 'data': data})


# ---------------------------------------------------------------------
# JWT: refresh & logout
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
def jwt_refresh_view(request):
    """Return a new access token from a refresh token."""
    s = TokenRefreshSerializer(data=request.data)
    try:
        s.is_valid(raise_exception=True)
    except TokenError as e:
        raise InvalidToken(e.args[0])
    data = {'ok': True, 'jwt_access': s.validated_data['access']}
    if 'refresh' in s.validated_data:
        data['jwt_refresh'] = s.validated_data['refresh']
    return Response(data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def jwt_logout_view(request):
    """Blacklist the given refresh token, or every outstanding one of the user.

    The legacy token is revoked as well.
    """
    s = LogoutSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    refresh = s.validated_data.get('refresh')
    count = 0
    if refresh:
        try:
            RefreshToken(refresh).blacklist()
        except TokenError:
            raise BadRequest('유효하지 않은 토큰입니다')
        count = 1
    else:
        for token in OutstandingToken.objects.filter(user=request.user):
            _, created = BlacklistedToken.objects.get_or_create(token=token)
            count += int(created)
    Token.objects.filter(user=request.user).delete()
    log_action(user=request.user, action='logout', object_type='user', object_id=request.user.id,
               detail={'blacklisted': count})
    return Response({'ok': True, 'blacklisted': count})
