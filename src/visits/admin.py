"""Admin registrations for visit assignments and recorded visits."""
from django.contrib import admin

from visits.models import VisitAssignment, VisitEvent


class VisitEventInline(admin.TabularInline):
    model = VisitEvent
    extra = 0
    fields = ("visit_date", "recorded_by", "created_at")
    readonly_fields = ("visit_date", "recorded_by", "created_at")
    can_delete = False

    def has_add_permission(self, request, obj=None):
        # Visits go through the recording service so quotas are enforced.
        return False


@admin.register(VisitAssignment)
class VisitAssignmentAdmin(admin.ModelAdmin):
    list_display = ("delegate", "doctor", "monthly_frequency", "created_at")
    list_filter = ("monthly_frequency", "delegate__supervisor")
    search_fields = ("delegate__last_name", "doctor__last_name")
    raw_id_fields = ("delegate", "doctor")
    inlines = [VisitEventInline]


@admin.register(VisitEvent)
class VisitEventAdmin(admin.ModelAdmin):
    list_display = ("assignment", "visit_date", "recorded_by", "created_at")
    list_filter = ("visit_date",)
    date_hierarchy = "visit_date"
    search_fields = ("assignment__delegate__last_name", "assignment__doctor__last_name")
    readonly_fields = ("assignment", "visit_date", "recorded_by", "created_at", "updated_at")

    def has_add_permission(self, request):
        return False
