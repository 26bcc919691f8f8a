# rx_core/common/api/exceptions.py
from __future__ import annotations

import logging
import uuid
from typing import Any

from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException, NotAuthenticated, PermissionDenied, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from rx_core.common.errors import DomainError

logger = logging.getLogger(__name__)

# First match wins
_DRF_ERROR_CODES = (
    (ValidationError, "validation_error"),
    (NotAuthenticated, "not_authenticated"),
    (PermissionDenied, "permission_denied"),
    (Http404, "not_found"),
)


def get_request_id(request) -> str:
    """
    Return request.request_id, assigning a fresh one if the request has none.
    Works with Django and DRF requests (and with None).
    """
    rid = getattr(request, "request_id", None) if request is not None else None
    if rid:
        return rid
    rid = uuid.uuid4().hex
    if request is not None:
        request.request_id = rid
    return rid


def build_error_envelope(*, request=None, code: str, message: str, details: Any = None) -> dict[str, Any]:
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details,
            "request_id": get_request_id(request),
        }
    }


def _error_code(exc: Exception, http_status: int) -> str:
    for exc_type, code in _DRF_ERROR_CODES:
        if isinstance(exc, exc_type):
            return code
    if isinstance(exc, APIException):
        return exc.default_code or "api_error"
    return "server_error" if http_status >= 500 else "error"


def _split_detail(data: Any) -> tuple[str, Any]:
    """
    DRF payload -> (message, details).
    {"detail": m, **rest} gives (m, rest or None); anything else is field errors.
    """
    if isinstance(data, dict) and "detail" in data:
        rest = {k: v for k, v in data.items() if k != "detail"}
        return str(data["detail"]), rest or None
    return "Request failed.", data


def api_exception_handler(exc: Exception, context: dict[str, Any]):
    request = context.get("request")

    if isinstance(exc, DomainError):
        if exc.http_status >= 500:
            logger.error("Domain error %s: %s", exc.code, exc.message, exc_info=exc)
        body = build_error_envelope(
            request=request,
            code=exc.code,
            message=exc.message,
            details=exc.as_details(),
        )
        return Response(body, status=exc.http_status)

    response = drf_exception_handler(exc, context)
    if response is None:
        logger.exception("Unhandled API error", exc_info=exc)
        body = build_error_envelope(request=request, code="server_error", message="Unexpected server error.")
        return Response(body, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    message, details = _split_detail(response.data)
    body = build_error_envelope(
        request=request,
        code=_error_code(exc, response.status_code),
        message=message,
        details=details,
    )
    return Response(body, status=response.status_code, headers=response.headers)
