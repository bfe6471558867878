"""ViewSets and endpoints for visits, sales targets and performance indicators."""
from __future__ import annotations

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound as DRFNotFound
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from api.v1.pagination import StandardResultsSetPagination
from api.v1.permissions import CanRecordVisit, IsFieldForceMember, acting_delegate
from api.v1.serializers import (
    AssignmentQuerySerializer,
    DelegateSerializer,
    NodeQuerySerializer,
    PerformanceQuerySerializer,
    RecordVisitSerializer,
    VisitEventSerializer,
)
from organization.models import Delegate
from performance import services as performance_services
from performance.exceptions import (
    DuplicateVisit,
    InvalidInput,
    NotFound,
    PerformanceError,
    QuotaExceeded,
)
from performance.status import get_policy
from visits import services as visit_services
from visits.models import VisitAssignment

ERROR_STATUS = {
    InvalidInput: status.HTTP_400_BAD_REQUEST,
    DuplicateVisit: status.HTTP_409_CONFLICT,
    QuotaExceeded: status.HTTP_409_CONFLICT,
    NotFound: status.HTTP_404_NOT_FOUND,
}


def performance_error_response(exc: PerformanceError) -> Response:
    http_status = next(
        (code for exc_class, code in ERROR_STATUS.items() if isinstance(exc, exc_class)),
        status.HTTP_400_BAD_REQUEST,
    )
    return Response({"detail": str(exc), "code": exc.code}, status=http_status)


def _parse_query(serializer_class, request) -> dict:
    serializer = serializer_class(data=request.query_params)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


def _window(params: dict):
    return performance_services.build_window(params.get("year"), params.get("month"))


def _ensure_visible(user, node_id) -> None:
    """Raise 404 for nodes outside the user's subtree, without leaking existence."""
    visible = performance_services.visible_node_ids(user)
    if visible is not None and node_id not in visible:
        raise DRFNotFound("Noeud introuvable.")


def _resolve_delegate(request, delegate_id=None) -> Delegate:
    """Acting delegate, or a visible subordinate when ``delegate_id`` is given."""
    if delegate_id is None:
        delegate = acting_delegate(request.user)
        if delegate is None:
            raise PermissionDenied("Precisez le delegue a consulter.")
        return delegate
    _ensure_visible(request.user, delegate_id)
    delegate = Delegate.objects.filter(pk=delegate_id).first()
    if delegate is None:
        raise DRFNotFound("Delegue introuvable.")
    return delegate


# ───────────────────────────────────────────────────────────────────────────
# Organization
# ───────────────────────────────────────────────────────────────────────────

class DelegateViewSet(viewsets.ReadOnlyModelViewSet):
    """Hierarchy members visible to the acting user."""

    serializer_class = DelegateSerializer
    queryset = Delegate.objects.select_related("supervisor")
    permission_classes = [IsAuthenticated, IsFieldForceMember]
    filterset_fields = ["role", "supervisor", "is_active"]
    ordering_fields = ["last_name", "first_name", "role"]
    pagination_class = StandardResultsSetPagination

    def get_queryset(self):
        qs = super().get_queryset()
        visible = performance_services.visible_node_ids(self.request.user)
        if visible is None:
            return qs
        return qs.filter(pk__in=visible)


# ───────────────────────────────────────────────────────────────────────────
# Visits
# ───────────────────────────────────────────────────────────────────────────

class VisitAssignmentViewSet(viewsets.GenericViewSet):
    """Doctor portfolio of a delegate with Return Index metrics, and visit recording."""

    queryset = VisitAssignment.objects.select_related("delegate", "doctor", "doctor__brick")
    permission_classes = [IsAuthenticated, IsFieldForceMember]
    pagination_class = StandardResultsSetPagination

    def get_permissions(self):
        base = [IsAuthenticated(), IsFieldForceMember()]
        if self.action == "record_visit":
            return base + [CanRecordVisit()]
        return base

    def get_queryset(self):
        qs = super().get_queryset()
        visible = performance_services.visible_node_ids(self.request.user)
        if visible is None:
            return qs
        return qs.filter(delegate_id__in=visible)

    def list(self, request):
        params = _parse_query(AssignmentQuerySerializer, request)
        delegate = _resolve_delegate(request, params.get("delegate"))
        try:
            window = _window(params)
            policy = get_policy(
                params["status_policy"],
                params.get("threshold_set"),
                attribute="return_index",
            )
            entries = performance_services.delegate_visit_assignments(
                delegate,
                window,
                include_current_month=params.get("include_current_month"),
                policy=policy,
            )
        except PerformanceError as exc:
            return performance_error_response(exc)

        page = self.paginate_queryset(entries)
        if page is not None:
            return self.get_paginated_response(page)
        return Response(entries)

    def retrieve(self, request, pk=None):
        assignment = self.get_object()
        params = _parse_query(PerformanceQuerySerializer, request)
        try:
            metrics = performance_services.visit_assignment_metrics(
                assignment,
                _window(params),
                include_current_month=params.get("include_current_month"),
            )
        except PerformanceError as exc:
            return performance_error_response(exc)
        return Response({
            "id": assignment.pk,
            "delegate": assignment.delegate_id,
            "doctor": assignment.doctor_id,
            "monthly_frequency": assignment.monthly_frequency,
            "metrics": metrics,
        })

    @action(detail=True, methods=["post"], url_path="record-visit")
    def record_visit(self, request, pk=None):
        assignment = self.get_object()
        serializer = RecordVisitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            event = visit_services.record_visit(
                assignment,
                serializer.validated_data.get("visit_date"),
                recorded_by=request.user,
            )
        except PerformanceError as exc:
            return performance_error_response(exc)
        return Response(VisitEventSerializer(event).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["get"], url_path="needs-attention")
    def needs_attention(self, request):
        params = _parse_query(AssignmentQuerySerializer, request)
        delegate = _resolve_delegate(request, params.get("delegate"))
        try:
            entries = performance_services.needs_attention(
                delegate,
                _window(params),
                include_current_month=params.get("include_current_month"),
            )
        except PerformanceError as exc:
            return performance_error_response(exc)
        return Response(entries)

    @action(detail=False, methods=["get"], url_path="daily-summary")
    def daily_summary(self, request):
        params = _parse_query(AssignmentQuerySerializer, request)
        delegate = _resolve_delegate(request, params.get("delegate"))
        try:
            summary = performance_services.daily_summary(delegate, _window(params))
        except PerformanceError as exc:
            return performance_error_response(exc)
        return Response(summary)


# ───────────────────────────────────────────────────────────────────────────
# Sales
# ───────────────────────────────────────────────────────────────────────────

class SalesAssignmentViewSet(viewsets.ViewSet):
    """Sales targets of a delegate with achievement and Recruitment Rhythm."""

    permission_classes = [IsAuthenticated, IsFieldForceMember]

    def list(self, request):
        params = _parse_query(AssignmentQuerySerializer, request)
        delegate = _resolve_delegate(request, params.get("delegate"))
        try:
            entries = performance_services.delegate_sales_assignments(delegate, _window(params))
        except PerformanceError as exc:
            return performance_error_response(exc)
        return Response(entries)


# ───────────────────────────────────────────────────────────────────────────
# Hierarchy rollups
# ───────────────────────────────────────────────────────────────────────────

class NodeReportAPIView(APIView):
    """GET performance/nodes/<id>/: pooled indicators of a node and its subtree."""

    permission_classes = [IsAuthenticated, IsFieldForceMember]

    def get(self, request, node_id):
        _ensure_visible(request.user, node_id)
        params = _parse_query(NodeQuerySerializer, request)
        try:
            report = performance_services.node_report(
                node_id,
                _window(params),
                include_current_month=params.get("include_current_month"),
                by_product=params["by_product"],
            )
        except PerformanceError as exc:
            return performance_error_response(exc)
        return Response(report)


class NodeOverviewAPIView(APIView):
    """GET performance/nodes/<id>/overview/: team counts and rankings."""

    permission_classes = [IsAuthenticated, IsFieldForceMember]

    def get(self, request, node_id):
        _ensure_visible(request.user, node_id)
        params = _parse_query(PerformanceQuerySerializer, request)
        try:
            overview = performance_services.node_overview(
                node_id,
                _window(params),
                include_current_month=params.get("include_current_month"),
            )
        except PerformanceError as exc:
            return performance_error_response(exc)
        return Response(overview)
