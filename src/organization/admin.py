"""Admin registrations for the field force organization."""
from django.contrib import admin

from organization.models import Delegate


@admin.register(Delegate)
class DelegateAdmin(admin.ModelAdmin):
    list_display = ("last_name", "first_name", "role", "supervisor", "is_active")
    list_filter = ("role", "is_active")
    search_fields = ("first_name", "last_name", "user__username")
    raw_id_fields = ("user", "supervisor")
