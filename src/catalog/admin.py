"""Admin registrations for the catalog."""
from django.contrib import admin

from catalog.models import Brick, Doctor, Product


@admin.register(Brick)
class BrickAdmin(admin.ModelAdmin):
    list_display = ("name", "region")
    list_filter = ("region",)
    search_fields = ("name", "region")


@admin.register(Doctor)
class DoctorAdmin(admin.ModelAdmin):
    list_display = ("last_name", "first_name", "specialty", "brick", "is_active")
    list_filter = ("specialty", "is_active", "brick__region")
    search_fields = ("first_name", "last_name")
    raw_id_fields = ("brick",)


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "is_active")
    list_filter = ("is_active",)
    search_fields = ("name",)
