import logging
import re

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from algorithms.exceptions import BloodBridgeError, PoolFetchFailed

logger = logging.getLogger(__name__)


def error_code(exc):
    """InvalidBloodType -> 'invalid_blood_type'"""
    return re.sub(r'(?<!^)(?=[A-Z])', '_', type(exc).__name__).lower()


def bloodbridge_exception_handler(exc, context):
    """
    Turn domain errors into JSON responses; everything else goes to DRF.

    PoolFetchFailed is a 503 so clients can tell it apart from a search
    that legitimately found nobody.
    """
    if isinstance(exc, BloodBridgeError):
        if isinstance(exc, PoolFetchFailed):
            status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        else:
            status_code = status.HTTP_400_BAD_REQUEST
        logger.warning(f"{type(exc).__name__} in {context.get('view').__class__.__name__}: {exc}")
        return Response({'error': str(exc), 'code': error_code(exc)}, status=status_code)

    return exception_handler(exc, context)
