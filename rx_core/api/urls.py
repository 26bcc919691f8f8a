# rx_core/api/urls.py
from __future__ import annotations

from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from django.urls import path

from rx_core.pharmacies.api.views import PharmacistViewSet
from rx_core.schedules.api.views import ShiftViewSet

router = DefaultRouter()

router.register(r"shifts", ShiftViewSet, basename="shifts")
router.register(r"pharmacists", PharmacistViewSet, basename="pharmacists")

urlpatterns = [
    # Auth (JWT)
    path("auth/token/", TokenObtainPairView.as_view(), name="token-obtain"),
    path("auth/token/refresh/", TokenRefreshView.as_view(), name="token-refresh"),

    # Router URLs last (so explicit paths win if ever overlapping)
    *router.urls,
]
