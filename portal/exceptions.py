import logging

from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)

THROTTLED_MESSAGE = 'Too many requests from this IP, please try again later.'


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        view = context.get('view')
        logger.exception('Unhandled error in %s', view.__class__.__name__ if view else 'view', exc_info=exc)
        return Response({'success': False, 'message': 'Server Error'}, status=500)
    # normalize response
    if isinstance(exc, ValidationError):
        errors = resp.data if isinstance(resp.data, dict) else {'non_field_errors': resp.data}
        return Response({'success': False, 'message': 'Validation failed', 'errors': errors},
                        status=resp.status_code, headers=_passthrough_headers(resp))
    if resp.status_code == status.HTTP_429_TOO_MANY_REQUESTS:
        message = THROTTLED_MESSAGE
    elif isinstance(resp.data, dict):
        message = resp.data.get('detail') or resp.data
    else:
        message = str(resp.data)
    return Response({'success': False, 'message': message},
                    status=resp.status_code, headers=_passthrough_headers(resp))


def _passthrough_headers(resp):
    # keep WWW-Authenticate / Retry-After set by DRF
    return {k: v for k, v in resp.items() if k in ('WWW-Authenticate', 'Retry-After')}
