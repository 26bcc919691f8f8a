# rx_core/common/errors.py
from __future__ import annotations

from typing import Any


class DomainError(Exception):
    """
    Base class for errors raised by domain services.

    Services never import DRF; the API exception handler maps these
    onto the standard error envelope using `code` and `http_status`.
    """
    code = "domain_error"
    http_status = 400
    default_message = "Request could not be processed."

    def __init__(self, message: str | None = None, *, field: str | None = None, details: Any = None):
        self.message = message or self.default_message
        self.field = field
        self.details = details
        super().__init__(self.message)

    def as_details(self) -> Any:
        if self.details is not None:
            return self.details
        if self.field:
            return {self.field: [self.message]}
        return None


class NotFoundError(DomainError):
    code = "not_found"
    http_status = 404
    default_message = "Not found."
