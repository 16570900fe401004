from django.contrib import admin
from .models import CompanyUser, ChangeLog

@admin.register(CompanyUser)
class CompanyUserAdmin(admin.ModelAdmin):
    list_display = ("full_name", "email", "role", "is_active", "user", "created_at")
    list_filter = ("role", "is_active")
    search_fields = ("full_name", "email")

@admin.register(ChangeLog)
class ChangeLogAdmin(admin.ModelAdmin):
    list_display = ("created_at", "action", "entity_type", "entity_id", "actor")
    list_filter = ("action", "entity_type")
    search_fields = ("entity_id",)
    ordering = ("-created_at",)

    # rastro inmutable: solo lectura
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
