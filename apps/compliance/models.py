import uuid

from django.db import models

from apps.core.models import CompanyUser

SCOPE_SITE = "SITE"
SCOPE_PARTICIPANT = "PARTICIPANT"
SCOPES = ((SCOPE_SITE, SCOPE_SITE), (SCOPE_PARTICIPANT, SCOPE_PARTICIPANT))

DAILY = "DAILY"
WEEKLY = "WEEKLY"
FREQUENCIES = ((DAILY, DAILY), (WEEKLY, WEEKLY))


class ComplianceTemplate(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True, default="")
    scope_type = models.CharField(max_length=16, choices=SCOPES)
    frequency = models.CharField(max_length=8, choices=FREQUENCIES)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ("name", "scope_type", "frequency")

    def __str__(self):
        return f"{self.name} ({self.scope_type}/{self.frequency})"


class ComplianceTemplateItem(models.Model):
    TYPE_YES_NO_NA = "YES_NO_NA"
    TYPE_NUMBER = "NUMBER"
    TYPE_TEXT = "TEXT"
    TYPE_PHOTO_REQUIRED = "PHOTO_REQUIRED"
    RESPONSE_TYPES = (
        (TYPE_YES_NO_NA, TYPE_YES_NO_NA),
        (TYPE_NUMBER, TYPE_NUMBER),
        (TYPE_TEXT, TYPE_TEXT),
        (TYPE_PHOTO_REQUIRED, TYPE_PHOTO_REQUIRED),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    template = models.ForeignKey(ComplianceTemplate, on_delete=models.CASCADE, related_name="items")
    title = models.CharField(max_length=300)
    guidance_text = models.TextField(blank=True, default="")
    response_type = models.CharField(max_length=16, choices=RESPONSE_TYPES, default=TYPE_YES_NO_NA)
    is_critical = models.BooleanField(default=False)
    sort_order = models.IntegerField(default=0)

    class Meta:
        ordering = ("sort_order", "title")
        unique_together = ("template", "title")

    def __str__(self):
        return self.title


class ComplianceRun(models.Model):
    STATUS_OPEN = "OPEN"
    STATUS_SUBMITTED = "SUBMITTED"
    STATUS_LOCKED = "LOCKED"
    STATUSES = (
        (STATUS_OPEN, STATUS_OPEN),
        (STATUS_SUBMITTED, STATUS_SUBMITTED),
        (STATUS_LOCKED, STATUS_LOCKED),
    )

    GREEN = "green"
    AMBER = "amber"
    RED = "red"
    COLORS = ((GREEN, GREEN), (AMBER, AMBER), (RED, RED))

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    template = models.ForeignKey(ComplianceTemplate, on_delete=models.PROTECT, related_name="runs")
    scope_type = models.CharField(max_length=16, choices=SCOPES)
    scope_entity_id = models.UUIDField()
    frequency = models.CharField(max_length=8, choices=FREQUENCIES)
    period_start = models.DateField()
    period_end = models.DateField()
    status = models.CharField(max_length=16, choices=STATUSES, default=STATUS_OPEN)
    status_color = models.CharField(max_length=8, choices=COLORS, null=True, blank=True)
    created_by = models.ForeignKey(CompanyUser, on_delete=models.SET_NULL, null=True, related_name="+")
    submitted_by = models.ForeignKey(CompanyUser, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")
    submitted_at = models.DateTimeField(null=True, blank=True)
    locked_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["template", "scope_type", "scope_entity_id", "frequency", "period_start"],
                name="uniq_compliance_run_period",
            ),
        ]
        indexes = [models.Index(fields=["scope_type", "scope_entity_id", "period_start"], name="compliance_run_scope_idx")]

    def __str__(self):
        return f"{self.template_id} {self.scope_type}:{self.scope_entity_id} {self.period_start} [{self.status}]"


class ComplianceResponse(models.Model):
    run = models.ForeignKey(ComplianceRun, on_delete=models.CASCADE, related_name="responses")
    template_item = models.ForeignKey(ComplianceTemplateItem, on_delete=models.PROTECT, related_name="+")
    response_value = models.CharField(max_length=500, null=True, blank=True)
    notes = models.TextField(null=True, blank=True)
    attachment_path = models.CharField(max_length=500, null=True, blank=True)
    responded_by = models.ForeignKey(CompanyUser, on_delete=models.SET_NULL, null=True, related_name="+")
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["run", "template_item"], name="uniq_compliance_response_item"),
        ]

    def __str__(self):
        return f"{self.run_id} / {self.template_item_id} = {self.response_value}"


class ComplianceAction(models.Model):
    SEVERITY_LOW = "LOW"
    SEVERITY_MEDIUM = "MEDIUM"
    SEVERITY_HIGH = "HIGH"
    SEVERITIES = (
        (SEVERITY_LOW, SEVERITY_LOW),
        (SEVERITY_MEDIUM, SEVERITY_MEDIUM),
        (SEVERITY_HIGH, SEVERITY_HIGH),
    )

    STATUS_OPEN = "OPEN"
    STATUS_IN_PROGRESS = "IN_PROGRESS"
    STATUS_CLOSED = "CLOSED"
    STATUSES = (
        (STATUS_OPEN, STATUS_OPEN),
        (STATUS_IN_PROGRESS, STATUS_IN_PROGRESS),
        (STATUS_CLOSED, STATUS_CLOSED),
    )
    STATUS_ORDER = (STATUS_OPEN, STATUS_IN_PROGRESS, STATUS_CLOSED)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    run = models.ForeignKey(ComplianceRun, on_delete=models.PROTECT, related_name="actions")
    template_item = models.ForeignKey(
        ComplianceTemplateItem, on_delete=models.SET_NULL, null=True, blank=True, related_name="+",
    )
    scope_type = models.CharField(max_length=16, choices=SCOPES)
    scope_entity_id = models.UUIDField()
    severity = models.CharField(max_length=8, choices=SEVERITIES, default=SEVERITY_HIGH)
    status = models.CharField(max_length=16, choices=STATUSES, default=STATUS_OPEN)
    title = models.CharField(max_length=300)
    description = models.TextField(blank=True, default="")
    due_at = models.DateTimeField(null=True, blank=True)
    assigned_to = models.ForeignKey(
        CompanyUser, on_delete=models.SET_NULL, null=True, blank=True, related_name="compliance_actions",
    )
    closed_at = models.DateTimeField(null=True, blank=True)
    closure_notes = models.TextField(null=True, blank=True)
    closed_by = models.ForeignKey(CompanyUser, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("due_at", "created_at")
        indexes = [models.Index(fields=["status", "due_at"], name="compliance_action_due_idx")]

    def __str__(self):
        return f"{self.severity} {self.status}: {self.title}"
