"""
Legacy token authentication with a lifetime.

``Authorization: Token <key>`` keys are issued at login next to the JWT
pair.  A key older than ``AUTH_TOKEN_TTL_HOURS`` is deleted on first use
and the client has to log in again.  Kept free of view imports because
DRF loads this class while reading settings.
"""
from __future__ import annotations

import datetime as dt
import logging

from django.conf import settings
from django.utils import timezone
from rest_framework import authentication
from rest_framework.exceptions import AuthenticationFailed

logger = logging.getLogger(__name__)


def token_ttl() -> dt.timedelta:
    return dt.timedelta(hours=int(getattr(settings, 'AUTH_TOKEN_TTL_HOURS', 72)))


def is_expired(token) -> bool:
    return token.created < timezone.now() - token_ttl()


class TokenAuthentication(authentication.TokenAuthentication):
    keyword = 'Token'

    def authenticate_credentials(self, key):
        user, token = super().authenticate_credentials(key)
        if is_expired(token):
            logger.info('expired token rejected for user=%s', user.id)
            token.delete()
            raise AuthenticationFailed('토큰이 만료되었습니다. 다시 로그인해 주세요')
        return user, token
