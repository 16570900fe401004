from django.contrib import admin
from .models import (
    AuditTemplate, TemplateIndicator,
    Audit, IndicatorResponse, Finding,
    EvidenceRequest, EvidenceItem,
    DocumentChecklistTemplate, DocumentChecklistItem, DocumentReview,
)

class TemplateIndicatorInline(admin.TabularInline):
    model = TemplateIndicator
    extra = 0

@admin.register(AuditTemplate)
class AuditTemplateAdmin(admin.ModelAdmin):
    list_display = ("name", "created_at")
    search_fields = ("name",)
    inlines = [TemplateIndicatorInline]

@admin.register(TemplateIndicator)
class TemplateIndicatorAdmin(admin.ModelAdmin):
    list_display = ("template", "sort_order", "indicator_text")
    list_filter = ("template",)
    search_fields = ("indicator_text",)
    ordering = ("template", "sort_order")

@admin.register(Audit)
class AuditAdmin(admin.ModelAdmin):
    list_display = ("title", "audit_type", "status", "template", "scope_time_from", "scope_time_to", "scope_locked")
    list_filter = ("audit_type", "status", "scope_locked")
    search_fields = ("title", "external_auditor_org")
    # las transiciones pasan por los servicios, no por el admin
    readonly_fields = ("status", "scope_locked", "started_at", "submitted_at", "closed_at", "close_reason")

@admin.register(IndicatorResponse)
class IndicatorResponseAdmin(admin.ModelAdmin):
    list_display = ("audit", "indicator", "rating", "score_points", "updated_at")
    list_filter = ("rating",)

@admin.register(Finding)
class FindingAdmin(admin.ModelAdmin):
    list_display = ("audit", "severity", "status", "owner", "due_date", "created_at")
    list_filter = ("severity", "status")
    search_fields = ("finding_text",)

class EvidenceItemInline(admin.TabularInline):
    model = EvidenceItem
    extra = 0
    can_delete = False

@admin.register(EvidenceRequest)
class EvidenceRequestAdmin(admin.ModelAdmin):
    list_display = ("evidence_type", "status", "audit", "finding", "due_date", "updated_at")
    list_filter = ("status", "evidence_type")
    readonly_fields = ("status", "reviewed_by", "reviewed_at")
    inlines = [EvidenceItemInline]

@admin.register(EvidenceItem)
class EvidenceItemAdmin(admin.ModelAdmin):
    list_display = ("document_name", "storage_kind", "document_type", "request", "created_at")
    list_filter = ("storage_kind", "document_type")
    search_fields = ("document_name",)

class DocumentChecklistItemInline(admin.TabularInline):
    model = DocumentChecklistItem
    extra = 0

@admin.register(DocumentChecklistTemplate)
class DocumentChecklistTemplateAdmin(admin.ModelAdmin):
    list_display = ("document_type", "name", "version")
    inlines = [DocumentChecklistItemInline]

@admin.register(DocumentReview)
class DocumentReviewAdmin(admin.ModelAdmin):
    list_display = ("evidence_item", "decision", "dqs_percent", "critical_failures_count", "reviewer", "created_at")
    list_filter = ("decision",)
