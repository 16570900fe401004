"""Checklist seeding and document quality reviews."""

import pytest
from django.core.management import call_command

from apps.audits import evidence, reviews
from apps.audits.models import DocumentChecklistItem, DocumentChecklistTemplate, DocumentReview, EvidenceItem
from apps.core.errors import AuthorizationError, NotFound, StateConflict, ValidationError

pytestmark = pytest.mark.django_db

POLICY_KEYS = [
    "POL_H1", "POL_H2", "POL_H3", "POL_H4",
    "POL_I1", "POL_I2", "POL_I3", "POL_I4",
    "POL_C1", "POL_C2",
]


@pytest.fixture
def checklists(db):
    call_command("seed_checklists")


@pytest.fixture
def policy_item(checklists, auditor, staff):
    request = evidence.request_evidence(auditor, "POLICY", "Current privacy policy")
    return evidence.submit_evidence(
        staff, request.pk, EvidenceItem.KIND_UPLOAD, "privacy-policy.pdf",
        file_path="evidence/privacy-policy.pdf", mime_type="application/pdf",
        document_type="POLICY",
    )


def all_yes(**overrides):
    answers = {key: "YES" for key in POLICY_KEYS}
    answers.update(overrides)
    return answers


class TestSeed:

    def test_seed_is_idempotent(self, checklists):
        templates = DocumentChecklistTemplate.objects.count()
        items = DocumentChecklistItem.objects.count()
        call_command("seed_checklists")
        assert DocumentChecklistTemplate.objects.count() == templates == 11
        assert DocumentChecklistItem.objects.count() == items

    def test_policy_checklist(self, checklists):
        template = reviews.get_checklist("POLICY")
        keys = [item.item_key for item in template.items.all()]
        assert keys == POLICY_KEYS
        critical = [item.item_key for item in template.items.all() if item.is_critical]
        assert critical == ["POL_C1", "POL_C2"]

    def test_sections_follow_key_suffix(self, checklists):
        item = DocumentChecklistItem.objects.get(template__document_type="POLICY", item_key="POL_I3")
        assert item.section == DocumentChecklistItem.SECTION_IMPLEMENTATION
        assert item.is_critical is False

    def test_unknown_document_type(self, checklists):
        with pytest.raises(NotFound):
            reviews.get_checklist("DAILY_LOG")


class TestSubmitReview:

    def test_dqs_with_partly_and_na(self, auditor, policy_item):
        outcome = reviews.submit_document_review(
            auditor, policy_item.pk, all_yes(POL_H1="PARTLY", POL_H2="NA"), DocumentReview.DECISION_ACCEPT
        )
        # (8 + 0.5) / 9 aplicables
        assert outcome.review.dqs_percent == 94
        assert outcome.review.critical_failures_count == 0
        assert outcome.warnings == []

    def test_missing_items(self, auditor, policy_item):
        answers = all_yes()
        del answers["POL_C2"]
        with pytest.raises(ValidationError) as exc:
            reviews.submit_document_review(auditor, policy_item.pk, answers, DocumentReview.DECISION_ACCEPT)
        assert exc.value.detail["items"] == ["POL_C2"]

    def test_invalid_value(self, auditor, policy_item):
        with pytest.raises(ValidationError) as exc:
            reviews.submit_document_review(
                auditor, policy_item.pk, all_yes(POL_I1="MAYBE"), DocumentReview.DECISION_ACCEPT
            )
        assert exc.value.detail["items"] == ["POL_I1"]

    def test_unknown_key(self, auditor, policy_item):
        with pytest.raises(ValidationError) as exc:
            reviews.submit_document_review(
                auditor, policy_item.pk, all_yes(PROC_H1="YES"), DocumentReview.DECISION_ACCEPT
            )
        assert exc.value.detail["items"] == ["PROC_H1"]

    def test_reject_requires_comments(self, auditor, policy_item):
        with pytest.raises(ValidationError):
            reviews.submit_document_review(
                auditor, policy_item.pk, all_yes(POL_C1="NO"), DocumentReview.DECISION_REJECT, "Outdated"
            )
        outcome = reviews.submit_document_review(
            auditor, policy_item.pk, all_yes(POL_C1="NO"), DocumentReview.DECISION_REJECT,
            "References the superseded 2018 standards",
        )
        assert outcome.review.decision == DocumentReview.DECISION_REJECT
        assert outcome.warnings == []

    def test_accept_with_critical_failure_warns(self, auditor, policy_item):
        outcome = reviews.submit_document_review(
            auditor, policy_item.pk, all_yes(POL_C1="NO"), DocumentReview.DECISION_ACCEPT
        )
        assert outcome.review.critical_failures_count == 1
        assert outcome.review.dqs_percent == 90
        assert outcome.warnings == ["Document accepted with 1 critical checklist failure(s)"]

    def test_one_review_per_item(self, auditor, reviewer, policy_item):
        reviews.submit_document_review(auditor, policy_item.pk, all_yes(), DocumentReview.DECISION_ACCEPT)
        with pytest.raises(StateConflict):
            reviews.submit_document_review(reviewer, policy_item.pk, all_yes(), DocumentReview.DECISION_ACCEPT)

    def test_item_without_document_type(self, checklists, auditor, staff):
        request = evidence.request_evidence(auditor, "OTHER", "Anything relevant")
        item = evidence.submit_evidence(
            staff, request.pk, EvidenceItem.KIND_LINK, "Shared folder",
            external_url="https://files.example.com/folder",
        )
        with pytest.raises(ValidationError):
            reviews.submit_document_review(auditor, item.pk, {}, DocumentReview.DECISION_ACCEPT)

    def test_staff_cannot_review(self, staff, policy_item):
        with pytest.raises(AuthorizationError):
            reviews.submit_document_review(staff, policy_item.pk, all_yes(), DocumentReview.DECISION_ACCEPT)

    def test_review_links_request_and_audit(self, auditor, in_progress_audit, policy_item):
        outcome = reviews.submit_document_review(
            auditor, policy_item.pk, all_yes(), DocumentReview.DECISION_ACCEPT, audit_id=in_progress_audit.pk
        )
        assert outcome.review.evidence_request_id == policy_item.request_id
        assert outcome.review.audit_id == in_progress_audit.pk
        assert outcome.review.dqs_percent == 100


class TestReadReview:

    def test_review_by_evidence_item(self, auditor, policy_item):
        outcome = reviews.submit_document_review(auditor, policy_item.pk, all_yes(), DocumentReview.DECISION_ACCEPT)
        assert reviews.get_document_review(policy_item.pk).pk == outcome.review.pk

    def test_item_without_review(self, policy_item):
        with pytest.raises(NotFound):
            reviews.get_document_review(policy_item.pk)
