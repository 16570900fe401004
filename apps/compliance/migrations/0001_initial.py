import uuid

import django.db.models.deletion
from django.db import migrations, models

SCOPES = [("SITE", "SITE"), ("PARTICIPANT", "PARTICIPANT")]
FREQUENCIES = [("DAILY", "DAILY"), ("WEEKLY", "WEEKLY")]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("core", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="ComplianceTemplate",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True, default="")),
                ("scope_type", models.CharField(choices=SCOPES, max_length=16)),
                ("frequency", models.CharField(choices=FREQUENCIES, max_length=8)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "unique_together": {("name", "scope_type", "frequency")},
            },
        ),
        migrations.CreateModel(
            name="ComplianceTemplateItem",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("title", models.CharField(max_length=300)),
                ("guidance_text", models.TextField(blank=True, default="")),
                ("response_type", models.CharField(
                    choices=[
                        ("YES_NO_NA", "YES_NO_NA"),
                        ("NUMBER", "NUMBER"),
                        ("TEXT", "TEXT"),
                        ("PHOTO_REQUIRED", "PHOTO_REQUIRED"),
                    ],
                    default="YES_NO_NA",
                    max_length=16,
                )),
                ("is_critical", models.BooleanField(default=False)),
                ("sort_order", models.IntegerField(default=0)),
                ("template", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name="items",
                    to="compliance.compliancetemplate",
                )),
            ],
            options={
                "ordering": ("sort_order", "title"),
                "unique_together": {("template", "title")},
            },
        ),
        migrations.CreateModel(
            name="ComplianceRun",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("scope_type", models.CharField(choices=SCOPES, max_length=16)),
                ("scope_entity_id", models.UUIDField()),
                ("frequency", models.CharField(choices=FREQUENCIES, max_length=8)),
                ("period_start", models.DateField()),
                ("period_end", models.DateField()),
                ("status", models.CharField(
                    choices=[("OPEN", "OPEN"), ("SUBMITTED", "SUBMITTED"), ("LOCKED", "LOCKED")],
                    default="OPEN",
                    max_length=16,
                )),
                ("status_color", models.CharField(
                    blank=True, choices=[("green", "green"), ("amber", "amber"), ("red", "red")],
                    max_length=8, null=True,
                )),
                ("submitted_at", models.DateTimeField(blank=True, null=True)),
                ("locked_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("created_by", models.ForeignKey(
                    null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="core.companyuser",
                )),
                ("submitted_by", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    related_name="+", to="core.companyuser",
                )),
                ("template", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT, related_name="runs",
                    to="compliance.compliancetemplate",
                )),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(
                        fields=("template", "scope_type", "scope_entity_id", "frequency", "period_start"),
                        name="uniq_compliance_run_period",
                    ),
                ],
                "indexes": [
                    models.Index(fields=["scope_type", "scope_entity_id", "period_start"], name="compliance_run_scope_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ComplianceResponse",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("response_value", models.CharField(blank=True, max_length=500, null=True)),
                ("notes", models.TextField(blank=True, null=True)),
                ("attachment_path", models.CharField(blank=True, max_length=500, null=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("responded_by", models.ForeignKey(
                    null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="core.companyuser",
                )),
                ("run", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name="responses",
                    to="compliance.compliancerun",
                )),
                ("template_item", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT, related_name="+",
                    to="compliance.compliancetemplateitem",
                )),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(fields=("run", "template_item"), name="uniq_compliance_response_item"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ComplianceAction",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("scope_type", models.CharField(choices=SCOPES, max_length=16)),
                ("scope_entity_id", models.UUIDField()),
                ("severity", models.CharField(
                    choices=[("LOW", "LOW"), ("MEDIUM", "MEDIUM"), ("HIGH", "HIGH")], default="HIGH", max_length=8,
                )),
                ("status", models.CharField(
                    choices=[("OPEN", "OPEN"), ("IN_PROGRESS", "IN_PROGRESS"), ("CLOSED", "CLOSED")],
                    default="OPEN",
                    max_length=16,
                )),
                ("title", models.CharField(max_length=300)),
                ("description", models.TextField(blank=True, default="")),
                ("due_at", models.DateTimeField(blank=True, null=True)),
                ("closed_at", models.DateTimeField(blank=True, null=True)),
                ("closure_notes", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("assigned_to", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    related_name="compliance_actions", to="core.companyuser",
                )),
                ("closed_by", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    related_name="+", to="core.companyuser",
                )),
                ("run", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT, related_name="actions",
                    to="compliance.compliancerun",
                )),
                ("template_item", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    related_name="+", to="compliance.compliancetemplateitem",
                )),
            ],
            options={
                "ordering": ("due_at", "created_at"),
                "indexes": [models.Index(fields=["status", "due_at"], name="compliance_action_due_idx")],
            },
        ),
    ]
