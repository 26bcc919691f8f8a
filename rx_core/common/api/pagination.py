# rx_core/common/api/pagination.py
from __future__ import annotations

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class DefaultPagination(PageNumberPagination):
    page_size = 50
    page_size_query_param = "page_size"
    max_page_size = 500


def paginate(request, items, serializer_class, *, paginator: PageNumberPagination | None = None) -> Response:
    """
    Page a queryset or a list of domain records into
    {count, next, previous, results}.
    """
    paginator = paginator or DefaultPagination()
    page = paginator.paginate_queryset(items, request)
    if page is None:
        return Response(serializer_class(items, many=True).data)
    return paginator.get_paginated_response(serializer_class(page, many=True).data)
