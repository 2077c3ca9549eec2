import logging

from django.conf import settings
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.response import Response

logger = logging.getLogger(__name__)


class BadRequest(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = '잘못된 요청입니다'
    default_code = 'bad_request'


class Conflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = '이미 존재하는 데이터입니다'
    default_code = 'conflict'


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        view = context.get('view')
        logger.error('unhandled error in %s', getattr(view, '__name__', view), exc_info=exc)
        message = str(exc) if settings.DEBUG else '서버 오류가 발생했습니다'
        return Response({'ok': False, 'error': {'code': 'server_error', 'message': message}}, status=500)
    # normalize response
    code = 'api_error'
    if isinstance(exc, APIException):
        codes = exc.get_codes()
        code = codes if isinstance(codes, str) else ('invalid' if resp.status_code == 400 else code)
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = resp.data if isinstance(resp.data, list) else str(resp.data)
    return Response({'ok': False, 'error': {'code': code, 'message': detail}}, status=resp.status_code,
                    headers={k: resp[k] for k in ('WWW-Authenticate', 'Retry-After') if k in resp})
