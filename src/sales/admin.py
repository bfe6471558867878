"""Admin registrations for sales assignments."""
from django.contrib import admin

from sales.models import SalesAssignment


@admin.register(SalesAssignment)
class SalesAssignmentAdmin(admin.ModelAdmin):
    list_display = ("delegate", "product", "year", "updated_at")
    list_filter = ("year", "product")
    search_fields = ("delegate__last_name", "product__name")
    raw_id_fields = ("delegate", "product")
