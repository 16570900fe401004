# apps/audits/serializers.py
from rest_framework import serializers

from apps.audits.models import (
    EVIDENCE_TYPES, RATINGS, Audit, DocumentChecklistItem, DocumentChecklistTemplate, DocumentReview,
    EvidenceItem, EvidenceRequest, Finding, IndicatorResponse,
)
from apps.core import scoring

# ==== Entrada ====


class AuditCreateSerializer(serializers.Serializer):
    audit_type = serializers.ChoiceField(choices=Audit.TYPES)
    title = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    scope_time_from = serializers.DateTimeField()
    scope_time_to = serializers.DateTimeField()
    external_auditor_name = serializers.CharField(required=False, allow_blank=True, default="")
    external_auditor_org = serializers.CharField(required=False, allow_blank=True, default="")
    external_auditor_email = serializers.EmailField(required=False, allow_blank=True, default="")


class ScopeSerializer(serializers.Serializer):
    scope_time_from = serializers.DateTimeField()
    scope_time_to = serializers.DateTimeField()


class TemplateSelectSerializer(serializers.Serializer):
    template_id = serializers.UUIDField()


class RatingSerializer(serializers.Serializer):
    rating = serializers.ChoiceField(choices=RATINGS)
    comment = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)


class InReviewRatingSerializer(RatingSerializer):
    indicator_id = serializers.UUIDField()


class CloseAuditSerializer(serializers.Serializer):
    close_reason = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)


class FindingUpdateSerializer(serializers.Serializer):
    owner_id = serializers.UUIDField(required=False, allow_null=True)
    due_date = serializers.DateField(required=False, allow_null=True)
    status = serializers.ChoiceField(choices=Finding.STATUSES, required=False)
    closure_note = serializers.CharField(required=False, allow_blank=True, default="")


class FindingEvidenceRequestSerializer(serializers.Serializer):
    evidence_type = serializers.ChoiceField(choices=EVIDENCE_TYPES)
    request_note = serializers.CharField()
    due_date = serializers.DateField(required=False, allow_null=True, default=None)


class EvidenceRequestCreateSerializer(FindingEvidenceRequestSerializer):
    audit_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    indicator_id = serializers.UUIDField(required=False, allow_null=True, default=None)


class EvidenceSubmitSerializer(serializers.Serializer):
    storage_kind = serializers.ChoiceField(choices=EvidenceItem.STORAGE_KINDS)
    document_name = serializers.CharField(max_length=255)
    file_path = serializers.CharField(required=False, allow_null=True, default=None)
    mime_type = serializers.CharField(required=False, allow_null=True, default=None)
    file_size_bytes = serializers.IntegerField(required=False, allow_null=True, min_value=0, default=None)
    external_url = serializers.URLField(required=False, allow_null=True, max_length=1000, default=None)
    document_type = serializers.ChoiceField(choices=EVIDENCE_TYPES, required=False, allow_null=True, default=None)
    note = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)

    def validate(self, attrs):
        if attrs["storage_kind"] == EvidenceItem.KIND_LINK and not attrs.get("external_url"):
            raise serializers.ValidationError({"external_url": "A valid URL is required for link evidence."})
        if attrs["storage_kind"] == EvidenceItem.KIND_UPLOAD and not (attrs.get("file_path") and attrs.get("mime_type")):
            raise serializers.ValidationError("File path and mime type are required for uploaded evidence.")
        return attrs


class EvidenceReviewSerializer(serializers.Serializer):
    decision = serializers.ChoiceField(choices=(EvidenceRequest.STATUS_ACCEPTED, EvidenceRequest.STATUS_REJECTED))
    review_note = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)


class DocumentReviewInputSerializer(serializers.Serializer):
    evidence_item_id = serializers.UUIDField()
    responses = serializers.DictField(child=serializers.ChoiceField(choices=scoring.CHECKLIST_VALUES))
    decision = serializers.ChoiceField(choices=DocumentReview.DECISIONS)
    comments = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)
    audit_id = serializers.UUIDField(required=False, allow_null=True, default=None)


class FindingFilterSerializer(serializers.Serializer):
    audit_id = serializers.UUIDField(required=False)
    status = serializers.ChoiceField(choices=Finding.STATUSES, required=False)
    severity = serializers.ChoiceField(choices=Finding.SEVERITIES, required=False)


class EvidenceRequestFilterSerializer(serializers.Serializer):
    audit_id = serializers.UUIDField(required=False)
    status = serializers.ChoiceField(choices=EvidenceRequest.STATUSES, required=False)


# ==== Salida ====

class IndicatorResponseSerializer(serializers.ModelSerializer):
    class Meta:
        model = IndicatorResponse
        fields = ("id", "audit", "indicator", "rating", "comment", "score_points", "recorded_by",
                  "created_at", "updated_at")


class FindingSerializer(serializers.ModelSerializer):
    evidence_request_id = serializers.SerializerMethodField()

    class Meta:
        model = Finding
        fields = ("id", "audit", "indicator", "severity", "status", "finding_text", "owner", "due_date",
                  "closure_note", "closed_at", "closed_by", "created_at", "evidence_request_id")

    def get_evidence_request_id(self, obj):
        request = getattr(obj, "evidence_request", None)
        return str(request.pk) if request else None


class AuditSerializer(serializers.ModelSerializer):
    class Meta:
        model = Audit
        fields = ("id", "audit_type", "title", "description", "status", "template", "scope_time_from",
                  "scope_time_to", "scope_locked", "close_reason", "external_auditor_name",
                  "external_auditor_org", "external_auditor_email", "created_by", "created_at",
                  "started_at", "submitted_at", "closed_at")


class AuditDetailSerializer(AuditSerializer):
    responses = IndicatorResponseSerializer(many=True, read_only=True)

    class Meta(AuditSerializer.Meta):
        fields = AuditSerializer.Meta.fields + ("responses",)


class EvidenceItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = EvidenceItem
        fields = ("id", "request", "storage_kind", "document_name", "file_path", "mime_type",
                  "file_size_bytes", "external_url", "document_type", "note", "uploaded_by", "created_at")


class EvidenceRequestSerializer(serializers.ModelSerializer):
    items = EvidenceItemSerializer(many=True, read_only=True)

    class Meta:
        model = EvidenceRequest
        fields = ("id", "finding", "audit", "indicator", "evidence_type", "request_note", "status",
                  "due_date", "requested_by", "reviewed_by", "reviewed_at", "review_note",
                  "created_at", "updated_at", "items")


class DocumentChecklistItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = DocumentChecklistItem
        fields = ("item_key", "item_text", "section", "is_critical", "sort_order")


class DocumentChecklistTemplateSerializer(serializers.ModelSerializer):
    items = DocumentChecklistItemSerializer(many=True, read_only=True)

    class Meta:
        model = DocumentChecklistTemplate
        fields = ("document_type", "name", "description", "version", "items")


class DocumentReviewSerializer(serializers.ModelSerializer):
    class Meta:
        model = DocumentReview
        fields = ("id", "evidence_item", "evidence_request", "template", "audit", "reviewer", "responses",
                  "decision", "dqs_percent", "critical_failures_count", "comments", "created_at")
