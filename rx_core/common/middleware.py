# rx_core/common/middleware.py
from __future__ import annotations

from django.utils.deprecation import MiddlewareMixin

from rx_core.common.api.exceptions import get_request_id


class RequestIdMiddleware(MiddlewareMixin):
    """
    Attaches request.request_id (honouring an inbound X-Request-Id) and
    echoes it on the response so error envelopes and logs can be correlated.
    """

    META_KEY = "HTTP_X_REQUEST_ID"
    RESPONSE_HEADER = "X-Request-Id"

    def process_request(self, request):
        inbound = (request.META.get(self.META_KEY) or "").strip()
        if inbound:
            request.request_id = inbound[:64]
        get_request_id(request)

    def process_response(self, request, response):
        rid = getattr(request, "request_id", None)
        if rid:
            response[self.RESPONSE_HEADER] = rid
        return response
