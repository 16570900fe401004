import uuid

import django.db.models.deletion
from django.db import migrations, models

RATINGS = [
    ("CONFORMANCE", "CONFORMANCE"),
    ("OBSERVATION", "OBSERVATION"),
    ("MINOR_NC", "MINOR_NC"),
    ("MAJOR_NC", "MAJOR_NC"),
]

EVIDENCE_TYPES = [(t, t) for t in (
    "CLIENT_PROFILE", "NDIS_PLAN", "SERVICE_AGREEMENT", "CONSENT_FORM", "GUARDIAN_DOCUMENTATION",
    "CARE_PLAN", "BSP", "MMP", "HEALTH_PLAN", "COMMUNICATION_PLAN", "RISK_ASSESSMENT",
    "EMERGENCY_PLAN", "ROSTER", "SHIFT_NOTES", "DAILY_LOG", "PROGRESS_NOTES", "ACTIVITY_RECORD",
    "QUALIFICATION", "WWCC", "TRAINING_RECORD", "SUPERVISION_RECORD", "MEDICATION_PLAN", "MAR",
    "PRN_LOG", "INCIDENT_REPORT", "COMPLAINT_RECORD", "RP_RECORD", "SERVICE_BOOKING",
    "INVOICE_CLAIM", "POLICY", "PROCEDURE", "REVIEW_RECORD", "OTHER",
)]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("core", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="AuditTemplate",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=200, unique=True)),
                ("description", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
        ),
        migrations.CreateModel(
            name="TemplateIndicator",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("indicator_text", models.CharField(max_length=500)),
                ("guidance_text", models.TextField(blank=True, default="")),
                ("sort_order", models.IntegerField(default=0)),
                ("template", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name="indicators", to="audits.audittemplate",
                )),
            ],
            options={
                "ordering": ("sort_order", "indicator_text"),
                "unique_together": {("template", "indicator_text")},
            },
        ),
        migrations.CreateModel(
            name="Audit",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("audit_type", models.CharField(
                    choices=[("INTERNAL", "INTERNAL"), ("EXTERNAL", "EXTERNAL")], max_length=16,
                )),
                ("title", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True, default="")),
                ("status", models.CharField(
                    choices=[
                        ("DRAFT", "DRAFT"),
                        ("IN_PROGRESS", "IN_PROGRESS"),
                        ("IN_REVIEW", "IN_REVIEW"),
                        ("CLOSED", "CLOSED"),
                    ],
                    default="DRAFT",
                    max_length=16,
                )),
                ("scope_time_from", models.DateTimeField()),
                ("scope_time_to", models.DateTimeField()),
                ("scope_locked", models.BooleanField(default=False)),
                ("close_reason", models.TextField(blank=True, null=True)),
                ("external_auditor_name", models.CharField(blank=True, default="", max_length=120)),
                ("external_auditor_org", models.CharField(blank=True, default="", max_length=120)),
                ("external_auditor_email", models.EmailField(blank=True, default="", max_length=254)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("started_at", models.DateTimeField(blank=True, null=True)),
                ("submitted_at", models.DateTimeField(blank=True, null=True)),
                ("closed_at", models.DateTimeField(blank=True, null=True)),
                ("created_by", models.ForeignKey(
                    null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="core.companyuser",
                )),
                ("template", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.PROTECT,
                    related_name="audits", to="audits.audittemplate",
                )),
            ],
            options={
                "indexes": [models.Index(fields=["status"], name="audits_audit_status_idx")],
            },
        ),
        migrations.CreateModel(
            name="IndicatorResponse",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("rating", models.CharField(choices=RATINGS, max_length=16)),
                ("comment", models.TextField(blank=True, null=True)),
                ("score_points", models.IntegerField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("audit", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name="responses", to="audits.audit",
                )),
                ("indicator", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT, related_name="responses",
                    to="audits.templateindicator",
                )),
                ("recorded_by", models.ForeignKey(
                    null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="core.companyuser",
                )),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(fields=("audit", "indicator"), name="uniq_response_audit_indicator"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Finding",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("severity", models.CharField(
                    choices=[("MINOR_NC", "MINOR_NC"), ("MAJOR_NC", "MAJOR_NC")], max_length=16,
                )),
                ("status", models.CharField(
                    choices=[("OPEN", "OPEN"), ("UNDER_REVIEW", "UNDER_REVIEW"), ("CLOSED", "CLOSED")],
                    default="OPEN",
                    max_length=16,
                )),
                ("finding_text", models.TextField()),
                ("due_date", models.DateField(blank=True, null=True)),
                ("closure_note", models.TextField(blank=True, default="")),
                ("closed_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("audit", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.PROTECT,
                    related_name="findings", to="audits.audit",
                )),
                ("closed_by", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    related_name="+", to="core.companyuser",
                )),
                ("indicator", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.PROTECT,
                    related_name="findings", to="audits.templateindicator",
                )),
                ("owner", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    related_name="owned_findings", to="core.companyuser",
                )),
            ],
            options={
                "ordering": ("-created_at",),
                "indexes": [models.Index(fields=["audit", "severity", "status"], name="audits_finding_gate_idx")],
            },
        ),
        migrations.CreateModel(
            name="EvidenceRequest",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("evidence_type", models.CharField(choices=EVIDENCE_TYPES, max_length=32)),
                ("request_note", models.TextField()),
                ("status", models.CharField(
                    choices=[
                        ("REQUESTED", "REQUESTED"),
                        ("SUBMITTED", "SUBMITTED"),
                        ("UNDER_REVIEW", "UNDER_REVIEW"),
                        ("ACCEPTED", "ACCEPTED"),
                        ("REJECTED", "REJECTED"),
                    ],
                    default="REQUESTED",
                    max_length=16,
                )),
                ("due_date", models.DateField(blank=True, null=True)),
                ("reviewed_at", models.DateTimeField(blank=True, null=True)),
                ("review_note", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("audit", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.PROTECT,
                    related_name="evidence_requests", to="audits.audit",
                )),
                ("finding", models.OneToOneField(
                    blank=True, null=True, on_delete=django.db.models.deletion.PROTECT,
                    related_name="evidence_request", to="audits.finding",
                )),
                ("indicator", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.PROTECT,
                    related_name="+", to="audits.templateindicator",
                )),
                ("requested_by", models.ForeignKey(
                    null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="core.companyuser",
                )),
                ("reviewed_by", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    related_name="+", to="core.companyuser",
                )),
            ],
        ),
        migrations.CreateModel(
            name="EvidenceItem",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("storage_kind", models.CharField(choices=[("UPLOAD", "UPLOAD"), ("LINK", "LINK")], max_length=8)),
                ("document_name", models.CharField(max_length=255)),
                ("file_path", models.CharField(blank=True, max_length=500, null=True)),
                ("mime_type", models.CharField(blank=True, max_length=128, null=True)),
                ("file_size_bytes", models.PositiveIntegerField(blank=True, null=True)),
                ("external_url", models.URLField(blank=True, max_length=1000, null=True)),
                ("document_type", models.CharField(blank=True, choices=EVIDENCE_TYPES, max_length=32, null=True)),
                ("note", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("request", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT, related_name="items", to="audits.evidencerequest",
                )),
                ("uploaded_by", models.ForeignKey(
                    null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="core.companyuser",
                )),
            ],
            options={
                "ordering": ("created_at",),
            },
        ),
        migrations.CreateModel(
            name="DocumentChecklistTemplate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("document_type", models.CharField(max_length=32, unique=True)),
                ("name", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True, default="")),
                ("version", models.IntegerField(default=1)),
            ],
        ),
        migrations.CreateModel(
            name="DocumentChecklistItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("item_key", models.CharField(max_length=32)),
                ("item_text", models.CharField(max_length=300)),
                ("section", models.CharField(
                    choices=[("HYGIENE", "HYGIENE"), ("IMPLEMENTATION", "IMPLEMENTATION"), ("CRITICAL", "CRITICAL")],
                    max_length=16,
                )),
                ("is_critical", models.BooleanField(default=False)),
                ("sort_order", models.IntegerField(default=0)),
                ("template", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name="items",
                    to="audits.documentchecklisttemplate",
                )),
            ],
            options={
                "ordering": ("sort_order", "item_key"),
                "unique_together": {("template", "item_key")},
            },
        ),
        migrations.CreateModel(
            name="DocumentReview",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("responses", models.JSONField(default=dict)),
                ("decision", models.CharField(choices=[("ACCEPT", "ACCEPT"), ("REJECT", "REJECT")], max_length=8)),
                ("dqs_percent", models.IntegerField()),
                ("critical_failures_count", models.IntegerField()),
                ("comments", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("audit", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    related_name="+", to="audits.audit",
                )),
                ("evidence_item", models.OneToOneField(
                    on_delete=django.db.models.deletion.PROTECT, related_name="document_review",
                    to="audits.evidenceitem",
                )),
                ("evidence_request", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT, related_name="document_reviews",
                    to="audits.evidencerequest",
                )),
                ("reviewer", models.ForeignKey(
                    null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="core.companyuser",
                )),
                ("template", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT, related_name="+",
                    to="audits.documentchecklisttemplate",
                )),
            ],
        ),
    ]
