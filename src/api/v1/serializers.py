"""Serializers for the field force API."""
from __future__ import annotations

from rest_framework import serializers

from organization.models import Delegate
from performance.status import THRESHOLD_SETS, RecencyPolicy, ThresholdPolicy
from visits.models import VisitEvent


# ───────────────────────────────────────────────────────────────────────────
# Organization
# ───────────────────────────────────────────────────────────────────────────

class DelegateSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(read_only=True)
    role_display = serializers.CharField(source="get_role_display", read_only=True)

    class Meta:
        model = Delegate
        fields = [
            "id",
            "first_name",
            "last_name",
            "full_name",
            "role",
            "role_display",
            "supervisor",
            "is_active",
        ]
        read_only_fields = fields


# ───────────────────────────────────────────────────────────────────────────
# Visits
# ───────────────────────────────────────────────────────────────────────────

class RecordVisitSerializer(serializers.Serializer):
    visit_date = serializers.DateField(required=False, allow_null=True, default=None)


class VisitEventSerializer(serializers.ModelSerializer):
    assignment = serializers.UUIDField(source="assignment_id", read_only=True)
    date = serializers.DateField(source="visit_date", read_only=True)

    class Meta:
        model = VisitEvent
        fields = ["id", "assignment", "date", "recorded_by", "created_at"]
        read_only_fields = fields


# ───────────────────────────────────────────────────────────────────────────
# Query parameters
# ───────────────────────────────────────────────────────────────────────────

class PerformanceQuerySerializer(serializers.Serializer):
    """As-of period and elapsed-month option shared by every indicator endpoint."""

    year = serializers.IntegerField(required=False, min_value=2000, max_value=2100)
    month = serializers.IntegerField(required=False, min_value=1, max_value=12)
    include_current_month = serializers.BooleanField(required=False, allow_null=True, default=None)


class NodeQuerySerializer(PerformanceQuerySerializer):
    by_product = serializers.BooleanField(required=False, default=False)


class AssignmentQuerySerializer(PerformanceQuerySerializer):
    delegate = serializers.UUIDField(required=False)
    status_policy = serializers.ChoiceField(
        choices=[ThresholdPolicy.name, RecencyPolicy.name],
        required=False,
        default=ThresholdPolicy.name,
    )
    threshold_set = serializers.ChoiceField(choices=sorted(THRESHOLD_SETS), required=False)
