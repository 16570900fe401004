"""Shared fixtures: company users per role, an audit template, and audits in each phase."""

from datetime import datetime, timezone as dt_timezone

import pytest
from django.contrib.auth import get_user_model
from django.core.management import call_command

from apps.audits import services
from apps.audits.models import Audit, AuditTemplate, TemplateIndicator
from apps.compliance.models import ComplianceTemplate
from apps.core.models import CompanyUser

SCOPE_FROM = datetime(2024, 1, 1, tzinfo=dt_timezone.utc)
SCOPE_TO = datetime(2024, 3, 31, tzinfo=dt_timezone.utc)

NC_COMMENT = "Records were missing for two participants"


@pytest.fixture
def make_actor(db):
    counter = {"n": 0}

    def _make(role, is_active=True):
        counter["n"] += 1
        username = f"{role.lower()}-{counter['n']}"
        user = get_user_model().objects.create_user(username=username, password="pw")
        return CompanyUser.objects.create(
            user=user,
            email=f"{username}@example.com",
            full_name=username.title(),
            role=role,
            is_active=is_active,
        )

    return _make


@pytest.fixture
def admin(make_actor):
    return make_actor(CompanyUser.ROLE_COMPANY_ADMIN)


@pytest.fixture
def auditor(make_actor):
    return make_actor(CompanyUser.ROLE_AUDITOR)


@pytest.fixture
def reviewer(make_actor):
    return make_actor(CompanyUser.ROLE_REVIEWER)


@pytest.fixture
def staff(make_actor):
    return make_actor(CompanyUser.ROLE_STAFF_READ_ONLY)


@pytest.fixture
def template(db):
    tpl = AuditTemplate.objects.create(name="Core Module", description="Rights and responsibilities")
    for order, text in enumerate(
        ("Person-centred supports", "Privacy and dignity", "Independence and informed choice"), start=1
    ):
        TemplateIndicator.objects.create(template=tpl, indicator_text=text, sort_order=order)
    return tpl


@pytest.fixture
def indicators(template):
    return list(template.indicators.all())


@pytest.fixture
def draft_audit(auditor, template):
    audit = services.create_audit(auditor, Audit.TYPE_INTERNAL, "Q1 internal audit", SCOPE_FROM, SCOPE_TO)
    return services.select_template(auditor, audit.pk, template.pk)


@pytest.fixture
def in_progress_audit(auditor, draft_audit):
    return services.start_audit(auditor, draft_audit.pk)


@pytest.fixture
def in_review_audit(auditor, in_progress_audit, indicators):
    services.record_response(auditor, in_progress_audit.pk, indicators[0].pk, "CONFORMANCE")
    return services.submit_for_review(auditor, in_progress_audit.pk)


@pytest.fixture
def compliance_templates(db):
    call_command("seed_compliance_templates")
    return {t.name: t for t in ComplianceTemplate.objects.all()}


@pytest.fixture
def site_daily(compliance_templates):
    return compliance_templates["Site Daily Compliance Check"]


@pytest.fixture
def participant_weekly(compliance_templates):
    return compliance_templates["Participant Weekly Compliance Check"]
