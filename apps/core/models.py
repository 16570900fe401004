import uuid

from django.conf import settings
from django.db import models


class CompanyUser(models.Model):
    ROLE_COMPANY_ADMIN = "CompanyAdmin"
    ROLE_AUDITOR = "Auditor"
    ROLE_REVIEWER = "Reviewer"
    ROLE_STAFF_READ_ONLY = "StaffReadOnly"
    ROLES = (
        (ROLE_COMPANY_ADMIN, ROLE_COMPANY_ADMIN),
        (ROLE_AUDITOR, ROLE_AUDITOR),
        (ROLE_REVIEWER, ROLE_REVIEWER),
        (ROLE_STAFF_READ_ONLY, ROLE_STAFF_READ_ONLY),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL,
        null=True, blank=True, related_name="company_user",
    )
    email = models.EmailField()
    full_name = models.CharField(max_length=120)
    role = models.CharField(max_length=16, choices=ROLES)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.full_name} ({self.role})"


class ChangeLog(models.Model):
    """Rastro inmutable: se escribe en la misma transacción que el cambio."""
    actor = models.ForeignKey(CompanyUser, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=48)
    entity_type = models.CharField(max_length=48)
    entity_id = models.CharField(max_length=64)
    before_json = models.JSONField(null=True, blank=True)
    after_json = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=["entity_type", "entity_id"], name="core_changelog_entity_idx"),
            models.Index(fields=["action"], name="core_changelog_action_idx"),
        ]

    def __str__(self):
        return f"{self.action} {self.entity_type}:{self.entity_id}"
