# rx_core/schedules/api/views.py
from __future__ import annotations

from uuid import UUID

from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from rx_core.common.api.pagination import paginate
from rx_core.common.permissions import ShiftPermission
from rx_core.schedules.api.serializers import (
    AvailabilityQuerySerializer,
    CancelShiftSerializer,
    PharmacistProfileSerializer,
    RescheduleShiftSerializer,
    ShiftChangeEventSerializer,
    ShiftChangeResultSerializer,
    ShiftCreateSerializer,
    ShiftListQuerySerializer,
    ShiftSerializer,
    ShiftUpdateSerializer,
    SubstituteCandidateSerializer,
    SubstituteShiftSerializer,
)
from rx_core.schedules.availability import AvailabilityFinder
from rx_core.schedules.exceptions import ShiftNotFound
from rx_core.schedules.models import Shift
from rx_core.schedules.periods import view_range
from rx_core.schedules.services import ScheduleService
from rx_core.schedules.substitutes import SubstituteMatcher


def _shift_id(pk) -> UUID:
    try:
        return UUID(str(pk))
    except ValueError:
        raise ShiftNotFound()


def _actor_id(request):
    user = request.user
    return user.id if user and user.is_authenticated else None


class ShiftViewSet(viewsets.ViewSet):
    """
    Thin API layer:
    - input validation via serializers
    - reads and writes go through ScheduleService
    - domain errors are rendered by the shared exception handler
    """

    permission_classes = [ShiftPermission]

    serializer_class = ShiftSerializer
    queryset = Shift.objects.none()

    def _service(self) -> ScheduleService:
        return ScheduleService()

    def _change_response(self, change) -> Response:
        return Response(ShiftChangeResultSerializer(change).data, status=status.HTTP_200_OK)

    # ----------------------------
    # Reads
    # ----------------------------
    @extend_schema(parameters=[ShiftListQuerySerializer])
    def list(self, request):
        params = ShiftListQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        q = params.validated_data

        if "view" in q and "date" in q:
            start_date, end_date = view_range(q["view"], q["date"])
        else:
            start_date, end_date = q["start_date"], q["end_date"]

        shifts = self._service().list_shifts(
            start_date=start_date,
            end_date=end_date,
            pharmacist_id=q.get("pharmacist_id"),
            pharmacy_id=q.get("pharmacy_id"),
        )
        return paginate(request, shifts, ShiftSerializer)

    def retrieve(self, request, pk=None):
        shift = self._service().get_shift(_shift_id(pk))
        return Response(ShiftSerializer(shift).data)

    @action(detail=True, methods=["get"])
    def history(self, request, pk=None):
        events = self._service().history(_shift_id(pk))
        return paginate(request, events, ShiftChangeEventSerializer)

    @extend_schema(responses=SubstituteCandidateSerializer(many=True))
    @action(detail=True, methods=["get"])
    def substitutes(self, request, pk=None):
        candidates = SubstituteMatcher().suggest_substitutes(_shift_id(pk))
        return Response(SubstituteCandidateSerializer(candidates, many=True).data)

    @extend_schema(
        parameters=[AvailabilityQuerySerializer],
        responses=PharmacistProfileSerializer(many=True),
    )
    @action(detail=False, methods=["get"])
    def availability(self, request):
        params = AvailabilityQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        q = params.validated_data

        available = AvailabilityFinder().find_available(
            q.get("pharmacy_id"),
            q["date"],
            q["start_time"],
            q["end_time"],
        )
        return Response(PharmacistProfileSerializer(available, many=True).data)

    # ----------------------------
    # Writes
    # ----------------------------
    @extend_schema(request=ShiftCreateSerializer, responses=ShiftSerializer)
    def create(self, request):
        ser = ShiftCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        shift = self._service().create_shift(created_by_id=_actor_id(request), **ser.validated_data)
        return Response(ShiftSerializer(shift).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=ShiftUpdateSerializer, responses=ShiftChangeResultSerializer)
    def partial_update(self, request, pk=None):
        ser = ShiftUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        changes = dict(ser.validated_data)
        reason = changes.pop("reason", None)

        change = self._service().update_shift(
            _shift_id(pk),
            changes=changes,
            actor_id=_actor_id(request),
            reason=reason,
        )
        return self._change_response(change)

    def destroy(self, request, pk=None):
        self._service().delete_shift(_shift_id(pk))
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=CancelShiftSerializer, responses=ShiftChangeResultSerializer)
    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        ser = CancelShiftSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        change = self._service().cancel_shift(
            _shift_id(pk),
            actor_id=_actor_id(request),
            reason=ser.validated_data.get("reason"),
            suggest_substitute=ser.validated_data["suggest_substitute"],
        )
        return self._change_response(change)

    @extend_schema(request=RescheduleShiftSerializer, responses=ShiftChangeResultSerializer)
    @action(detail=True, methods=["post"])
    def reschedule(self, request, pk=None):
        ser = RescheduleShiftSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        change = self._service().reschedule_shift(
            _shift_id(pk),
            schedule_date=data["new_schedule_date"],
            start_time=data["new_start_time"],
            end_time=data["new_end_time"],
            actor_id=_actor_id(request),
            reason=data.get("reason"),
        )
        return self._change_response(change)

    @extend_schema(request=SubstituteShiftSerializer, responses=ShiftChangeResultSerializer)
    @action(detail=True, methods=["post"])
    def substitute(self, request, pk=None):
        ser = SubstituteShiftSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        change = self._service().substitute_pharmacist(
            _shift_id(pk),
            new_pharmacist_id=data["new_pharmacist_id"],
            actor_id=_actor_id(request),
            reason=data.get("reason"),
            suggested_pharmacist_id=data.get("suggested_pharmacist_id"),
        )
        return self._change_response(change)
