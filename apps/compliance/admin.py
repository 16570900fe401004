from django.contrib import admin, messages
from .models import (
    ComplianceTemplate, ComplianceTemplateItem,
    ComplianceRun, ComplianceResponse, ComplianceAction,
)
from apps.compliance.services import lock_run
from apps.core.errors import WorkflowError
from apps.core.services import actor_for_user

class ComplianceTemplateItemInline(admin.TabularInline):
    model = ComplianceTemplateItem
    extra = 0

@admin.register(ComplianceTemplate)
class ComplianceTemplateAdmin(admin.ModelAdmin):
    list_display = ("name", "scope_type", "frequency", "is_active")
    list_filter = ("scope_type", "frequency", "is_active")
    inlines = [ComplianceTemplateItemInline]

class ComplianceResponseInline(admin.TabularInline):
    model = ComplianceResponse
    extra = 0
    can_delete = False

@admin.register(ComplianceRun)
class ComplianceRunAdmin(admin.ModelAdmin):
    list_display = ("template", "scope_type", "scope_entity_id", "period_start", "period_end", "status", "status_color")
    list_filter = ("status", "status_color", "scope_type", "frequency")
    readonly_fields = ("status", "status_color", "submitted_by", "submitted_at", "locked_at")
    inlines = [ComplianceResponseInline]
    actions = ["lock_selected"]

    @admin.action(description="Lock selected submitted runs")
    def lock_selected(self, request, queryset):
        try:
            actor = actor_for_user(request.user)
        except WorkflowError as exc:
            self.message_user(request, str(exc.detail), level=messages.ERROR)
            return
        locked = 0
        for run in queryset:
            try:
                lock_run(actor, run.pk)
                locked += 1
            except WorkflowError as exc:
                self.message_user(request, f"{run}: {exc.detail}", level=messages.WARNING)
        self.message_user(request, f"{locked} run(s) locked.", level=messages.SUCCESS)

@admin.register(ComplianceAction)
class ComplianceActionAdmin(admin.ModelAdmin):
    list_display = ("title", "severity", "status", "scope_type", "due_at", "assigned_to")
    list_filter = ("severity", "status", "scope_type")
    search_fields = ("title",)
