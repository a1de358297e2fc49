import logging

from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

from apps.offline.errors import NotFound, OfflineStorageError, PartitionNotFound, SerializationFailure, StorageUnavailable

logger = logging.getLogger(__name__)


OFFLINE_ERROR_STATUS = {
    StorageUnavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
    NotFound: status.HTTP_404_NOT_FOUND,
    SerializationFailure: status.HTTP_400_BAD_REQUEST,
    PartitionNotFound: status.HTTP_400_BAD_REQUEST,
}


def _first_error(detail):
    """
    Walk DRF error detail down to the first (field, message) pair
    """
    if isinstance(detail, dict):
        for field, value in detail.items():
            _, message = _first_error(value)
            return (None if field == "non_field_errors" else field), message
        return None, ""
    if isinstance(detail, list):
        return _first_error(detail[0]) if detail else (None, "")
    return None, str(detail)


def api_exception_handler(exc, context):
    """
    Render every API error as {"success": false, "error": ..., "field": ...}
    """
    if isinstance(exc, OfflineStorageError):
        status_code = next(
            (code for error_class, code in OFFLINE_ERROR_STATUS.items() if isinstance(exc, error_class)),
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
        logger.warning(f"Offline storage error in {context.get('view').__class__.__name__}: {exc}")
        return Response({"success": False, "error": str(exc), "field": None}, status=status_code)

    response = exception_handler(exc, context)
    if response is None:
        return None

    field, message = _first_error(response.data)
    payload = {"success": False, "error": message, "field": field}

    if isinstance(exc, ValidationError):
        payload["details"] = response.data

    response.data = payload
    return response
