import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)

PASSTHROUGH_HEADERS = ('WWW-Authenticate', 'Retry-After')


class UnsupportedBackupError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Unsupported backup format.'
    default_code = 'unsupported_backup'


class NothingToPrint(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'No data to print.'
    default_code = 'no_data'


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception('Unhandled API error: %s', exc)
        return Response({'ok': False, 'error': {'code': 'server_error', 'message': str(exc)}}, status=500)
    # normalize response
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = resp.data
    code = getattr(exc, 'default_code', None) or 'api_error'
    headers = {h: resp[h] for h in PASSTHROUGH_HEADERS if resp.has_header(h)}
    return Response({'ok': False, 'error': {'code': code, 'message': detail}}, status=resp.status_code, headers=headers)


class DraftValidationError(Exception):
    """An explicit save was requested while required fields are missing."""

    def __init__(self, missing):
        self.missing = list(missing)
        super().__init__(f"Missing required fields: {', '.join(self.missing)}")
