"""Main API URL router for /api/v1/."""
from django.urls import include, path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from api.v1 import views as v1_views

router = DefaultRouter()
router.register(r"delegates", v1_views.DelegateViewSet, basename="delegate")
router.register(r"visit-assignments", v1_views.VisitAssignmentViewSet, basename="visit-assignment")
router.register(r"sales-assignments", v1_views.SalesAssignmentViewSet, basename="sales-assignment")

urlpatterns = [
    path("auth/token/", TokenObtainPairView.as_view(), name="token-obtain-pair"),
    path("auth/token/refresh/", TokenRefreshView.as_view(), name="token-refresh"),
    path(
        "performance/nodes/<uuid:node_id>/",
        v1_views.NodeReportAPIView.as_view(),
        name="performance-node-report",
    ),
    path(
        "performance/nodes/<uuid:node_id>/overview/",
        v1_views.NodeOverviewAPIView.as_view(),
        name="performance-node-overview",
    ),
    path("", include(router.urls)),
]
