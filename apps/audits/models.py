import uuid

from django.db import models

from apps.core.models import CompanyUser
from apps.core import scoring


RATINGS = (
    (scoring.CONFORMANCE, scoring.CONFORMANCE),
    (scoring.OBSERVATION, scoring.OBSERVATION),
    (scoring.MINOR_NC, scoring.MINOR_NC),
    (scoring.MAJOR_NC, scoring.MAJOR_NC),
)


# ==== Catálogo de plantillas (solo lectura para el flujo) ====
class AuditTemplate(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200, unique=True)
    description = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name


class TemplateIndicator(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    template = models.ForeignKey(AuditTemplate, on_delete=models.CASCADE, related_name="indicators")
    indicator_text = models.CharField(max_length=500)
    guidance_text = models.TextField(blank=True, default="")
    sort_order = models.IntegerField(default=0)

    class Meta:
        ordering = ("sort_order", "indicator_text")
        unique_together = ("template", "indicator_text")

    def __str__(self):
        return self.indicator_text


# ==== Auditoría ====
class Audit(models.Model):
    TYPE_INTERNAL = "INTERNAL"
    TYPE_EXTERNAL = "EXTERNAL"
    TYPES = ((TYPE_INTERNAL, TYPE_INTERNAL), (TYPE_EXTERNAL, TYPE_EXTERNAL))

    STATUS_DRAFT = "DRAFT"
    STATUS_IN_PROGRESS = "IN_PROGRESS"
    STATUS_IN_REVIEW = "IN_REVIEW"
    STATUS_CLOSED = "CLOSED"
    STATUSES = (
        (STATUS_DRAFT, STATUS_DRAFT),
        (STATUS_IN_PROGRESS, STATUS_IN_PROGRESS),
        (STATUS_IN_REVIEW, STATUS_IN_REVIEW),
        (STATUS_CLOSED, STATUS_CLOSED),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    audit_type = models.CharField(max_length=16, choices=TYPES)
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True, default="")
    status = models.CharField(max_length=16, choices=STATUSES, default=STATUS_DRAFT)
    template = models.ForeignKey(AuditTemplate, on_delete=models.PROTECT, null=True, blank=True, related_name="audits")

    scope_time_from = models.DateTimeField()
    scope_time_to = models.DateTimeField()
    scope_locked = models.BooleanField(default=False)
    close_reason = models.TextField(null=True, blank=True)

    external_auditor_name = models.CharField(max_length=120, blank=True, default="")
    external_auditor_org = models.CharField(max_length=120, blank=True, default="")
    external_auditor_email = models.EmailField(blank=True, default="")

    created_by = models.ForeignKey(CompanyUser, on_delete=models.SET_NULL, null=True, related_name="+")
    created_at = models.DateTimeField(auto_now_add=True)
    started_at = models.DateTimeField(null=True, blank=True)
    submitted_at = models.DateTimeField(null=True, blank=True)
    closed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        indexes = [models.Index(fields=["status"], name="audits_audit_status_idx")]

    def __str__(self):
        return f"{self.title} [{self.status}]"


class IndicatorResponse(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    audit = models.ForeignKey(Audit, on_delete=models.CASCADE, related_name="responses")
    indicator = models.ForeignKey(TemplateIndicator, on_delete=models.PROTECT, related_name="responses")
    rating = models.CharField(max_length=16, choices=RATINGS)
    comment = models.TextField(null=True, blank=True)
    score_points = models.IntegerField()
    recorded_by = models.ForeignKey(CompanyUser, on_delete=models.SET_NULL, null=True, related_name="+")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["audit", "indicator"], name="uniq_response_audit_indicator"),
        ]

    def __str__(self):
        return f"{self.audit_id} / {self.indicator_id} = {self.rating}"


class Finding(models.Model):
    SEVERITIES = (
        (scoring.MINOR_NC, scoring.MINOR_NC),
        (scoring.MAJOR_NC, scoring.MAJOR_NC),
    )
    STATUS_OPEN = "OPEN"
    STATUS_UNDER_REVIEW = "UNDER_REVIEW"
    STATUS_CLOSED = "CLOSED"
    STATUSES = (
        (STATUS_OPEN, STATUS_OPEN),
        (STATUS_UNDER_REVIEW, STATUS_UNDER_REVIEW),
        (STATUS_CLOSED, STATUS_CLOSED),
    )
    ACTIVE_STATUSES = (STATUS_OPEN, STATUS_UNDER_REVIEW)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    audit = models.ForeignKey(Audit, on_delete=models.PROTECT, null=True, blank=True, related_name="findings")
    indicator = models.ForeignKey(TemplateIndicator, on_delete=models.PROTECT, null=True, blank=True, related_name="findings")
    severity = models.CharField(max_length=16, choices=SEVERITIES)
    status = models.CharField(max_length=16, choices=STATUSES, default=STATUS_OPEN)
    finding_text = models.TextField()
    owner = models.ForeignKey(CompanyUser, on_delete=models.SET_NULL, null=True, blank=True, related_name="owned_findings")
    due_date = models.DateField(null=True, blank=True)
    closure_note = models.TextField(blank=True, default="")
    closed_at = models.DateTimeField(null=True, blank=True)
    closed_by = models.ForeignKey(CompanyUser, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("-created_at",)
        indexes = [models.Index(fields=["audit", "severity", "status"], name="audits_finding_gate_idx")]

    def __str__(self):
        return f"{self.severity} {self.status}: {self.finding_text[:40]}"


# ==== Evidencia ====
EVIDENCE_TYPES = tuple((t, t) for t in (
    "CLIENT_PROFILE", "NDIS_PLAN", "SERVICE_AGREEMENT", "CONSENT_FORM", "GUARDIAN_DOCUMENTATION",
    "CARE_PLAN", "BSP", "MMP", "HEALTH_PLAN", "COMMUNICATION_PLAN", "RISK_ASSESSMENT",
    "EMERGENCY_PLAN", "ROSTER", "SHIFT_NOTES", "DAILY_LOG", "PROGRESS_NOTES", "ACTIVITY_RECORD",
    "QUALIFICATION", "WWCC", "TRAINING_RECORD", "SUPERVISION_RECORD", "MEDICATION_PLAN", "MAR",
    "PRN_LOG", "INCIDENT_REPORT", "COMPLAINT_RECORD", "RP_RECORD", "SERVICE_BOOKING",
    "INVOICE_CLAIM", "POLICY", "PROCEDURE", "REVIEW_RECORD", "OTHER",
))


class EvidenceRequest(models.Model):
    STATUS_REQUESTED = "REQUESTED"
    STATUS_SUBMITTED = "SUBMITTED"
    STATUS_UNDER_REVIEW = "UNDER_REVIEW"
    STATUS_ACCEPTED = "ACCEPTED"
    STATUS_REJECTED = "REJECTED"
    STATUSES = (
        (STATUS_REQUESTED, STATUS_REQUESTED),
        (STATUS_SUBMITTED, STATUS_SUBMITTED),
        (STATUS_UNDER_REVIEW, STATUS_UNDER_REVIEW),
        (STATUS_ACCEPTED, STATUS_ACCEPTED),
        (STATUS_REJECTED, STATUS_REJECTED),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    finding = models.OneToOneField(
        Finding, on_delete=models.PROTECT, null=True, blank=True, related_name="evidence_request",
    )
    audit = models.ForeignKey(Audit, on_delete=models.PROTECT, null=True, blank=True, related_name="evidence_requests")
    indicator = models.ForeignKey(TemplateIndicator, on_delete=models.PROTECT, null=True, blank=True, related_name="+")
    evidence_type = models.CharField(max_length=32, choices=EVIDENCE_TYPES)
    request_note = models.TextField()
    status = models.CharField(max_length=16, choices=STATUSES, default=STATUS_REQUESTED)
    due_date = models.DateField(null=True, blank=True)
    requested_by = models.ForeignKey(CompanyUser, on_delete=models.SET_NULL, null=True, related_name="+")
    reviewed_by = models.ForeignKey(CompanyUser, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")
    reviewed_at = models.DateTimeField(null=True, blank=True)
    review_note = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.evidence_type} [{self.status}]"


class EvidenceItem(models.Model):
    KIND_UPLOAD = "UPLOAD"
    KIND_LINK = "LINK"
    STORAGE_KINDS = ((KIND_UPLOAD, KIND_UPLOAD), (KIND_LINK, KIND_LINK))

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    request = models.ForeignKey(EvidenceRequest, on_delete=models.PROTECT, related_name="items")
    storage_kind = models.CharField(max_length=8, choices=STORAGE_KINDS)
    document_name = models.CharField(max_length=255)
    file_path = models.CharField(max_length=500, null=True, blank=True)
    mime_type = models.CharField(max_length=128, null=True, blank=True)
    file_size_bytes = models.PositiveIntegerField(null=True, blank=True)
    external_url = models.URLField(max_length=1000, null=True, blank=True)
    document_type = models.CharField(max_length=32, choices=EVIDENCE_TYPES, null=True, blank=True)
    note = models.TextField(null=True, blank=True)
    uploaded_by = models.ForeignKey(CompanyUser, on_delete=models.SET_NULL, null=True, related_name="+")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("created_at",)

    def __str__(self):
        return self.document_name


# ==== Checklist de calidad documental ====
class DocumentChecklistTemplate(models.Model):
    document_type = models.CharField(max_length=32, unique=True)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True, default="")
    version = models.IntegerField(default=1)

    def __str__(self):
        return f"{self.name} ({self.document_type})"


class DocumentChecklistItem(models.Model):
    SECTION_HYGIENE = "HYGIENE"
    SECTION_IMPLEMENTATION = "IMPLEMENTATION"
    SECTION_CRITICAL = "CRITICAL"
    SECTIONS = (
        (SECTION_HYGIENE, SECTION_HYGIENE),
        (SECTION_IMPLEMENTATION, SECTION_IMPLEMENTATION),
        (SECTION_CRITICAL, SECTION_CRITICAL),
    )

    template = models.ForeignKey(DocumentChecklistTemplate, on_delete=models.CASCADE, related_name="items")
    item_key = models.CharField(max_length=32)
    item_text = models.CharField(max_length=300)
    section = models.CharField(max_length=16, choices=SECTIONS)
    is_critical = models.BooleanField(default=False)
    sort_order = models.IntegerField(default=0)

    class Meta:
        ordering = ("sort_order", "item_key")
        unique_together = ("template", "item_key")

    def __str__(self):
        return f"{self.item_key} - {self.item_text}"


class DocumentReview(models.Model):
    DECISION_ACCEPT = "ACCEPT"
    DECISION_REJECT = "REJECT"
    DECISIONS = ((DECISION_ACCEPT, DECISION_ACCEPT), (DECISION_REJECT, DECISION_REJECT))

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    evidence_item = models.OneToOneField(EvidenceItem, on_delete=models.PROTECT, related_name="document_review")
    evidence_request = models.ForeignKey(EvidenceRequest, on_delete=models.PROTECT, related_name="document_reviews")
    template = models.ForeignKey(DocumentChecklistTemplate, on_delete=models.PROTECT, related_name="+")
    audit = models.ForeignKey(Audit, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")
    reviewer = models.ForeignKey(CompanyUser, on_delete=models.SET_NULL, null=True, related_name="+")
    responses = models.JSONField(default=dict)
    decision = models.CharField(max_length=8, choices=DECISIONS)
    dqs_percent = models.IntegerField()
    critical_failures_count = models.IntegerField()
    comments = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.evidence_item_id} {self.decision} DQS={self.dqs_percent}"
