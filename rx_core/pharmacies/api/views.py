# rx_core/pharmacies/api/views.py
from __future__ import annotations

from uuid import UUID

from drf_spectacular.utils import extend_schema
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from rx_core.common.api.pagination import paginate
from rx_core.common.permissions import PharmacistPermission
from rx_core.pharmacies.api.serializers import PharmacistSerializer
from rx_core.pharmacies.filters import PharmacistFilter
from rx_core.pharmacies.models import Pharmacist
from rx_core.pharmacies.selectors import PharmacistSelector
from rx_core.schedules.api.serializers import ShiftStatsSerializer, StatsQuerySerializer
from rx_core.schedules.exceptions import PharmacistNotFound
from rx_core.schedules.stats import ScheduleStatistics


class PharmacistViewSet(viewsets.ViewSet):
    """
    Read-only pharmacist directory plus per-pharmacist shift statistics.
    """

    permission_classes = [PharmacistPermission]

    serializer_class = PharmacistSerializer
    queryset = Pharmacist.objects.none()

    def _get_object(self, pk) -> Pharmacist:
        try:
            return PharmacistSelector.get_pharmacist(pharmacist_id=UUID(str(pk)))
        except (ValueError, PharmacistSelector.NotFound):
            raise PharmacistNotFound()

    def list(self, request):
        include_inactive = request.query_params.get("include_inactive", "").lower() in ("1", "true", "yes")
        qs = PharmacistSelector.list_pharmacists(include_inactive=include_inactive)
        qs = PharmacistFilter(request.query_params, queryset=qs).qs
        return paginate(request, qs, PharmacistSerializer)

    def retrieve(self, request, pk=None):
        return Response(PharmacistSerializer(self._get_object(pk)).data)

    @extend_schema(parameters=[StatsQuerySerializer], responses=ShiftStatsSerializer)
    @action(detail=True, methods=["get"])
    def stats(self, request, pk=None):
        pharmacist = self._get_object(pk)

        params = StatsQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)

        result = ScheduleStatistics().stats(
            pharmacist.id,
            params.validated_data["start_date"],
            params.validated_data["end_date"],
        )
        return Response(ShiftStatsSerializer(result).data)
