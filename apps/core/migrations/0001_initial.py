import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="CompanyUser",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("email", models.EmailField(max_length=254)),
                ("full_name", models.CharField(max_length=120)),
                ("role", models.CharField(
                    choices=[
                        ("CompanyAdmin", "CompanyAdmin"),
                        ("Auditor", "Auditor"),
                        ("Reviewer", "Reviewer"),
                        ("StaffReadOnly", "StaffReadOnly"),
                    ],
                    max_length=16,
                )),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("user", models.OneToOneField(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    related_name="company_user", to=settings.AUTH_USER_MODEL,
                )),
            ],
        ),
        migrations.CreateModel(
            name="ChangeLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("action", models.CharField(max_length=48)),
                ("entity_type", models.CharField(max_length=48)),
                ("entity_id", models.CharField(max_length=64)),
                ("before_json", models.JSONField(blank=True, null=True)),
                ("after_json", models.JSONField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("actor", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to="core.companyuser",
                )),
            ],
            options={
                "indexes": [
                    models.Index(fields=["entity_type", "entity_id"], name="core_changelog_entity_idx"),
                    models.Index(fields=["action"], name="core_changelog_action_idx"),
                ],
            },
        ),
    ]
