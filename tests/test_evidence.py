"""Evidence request lifecycle and the finding closure it drives."""

import pytest

from apps.audits import evidence, services
from apps.audits.models import EvidenceItem, EvidenceRequest, Finding
from apps.core.errors import AuthorizationError, NotFound, StateConflict, ValidationError
from apps.core.services import history

from .conftest import NC_COMMENT

pytestmark = pytest.mark.django_db


@pytest.fixture
def finding(auditor, in_progress_audit, indicators):
    return services.record_response(
        auditor, in_progress_audit.pk, indicators[0].pk, "MAJOR_NC", NC_COMMENT
    ).finding


@pytest.fixture
def evidence_request(auditor, finding):
    return evidence.request_evidence_for_finding(
        auditor, finding.pk, "TRAINING_RECORD", "Upload the completed training register"
    )


def upload(actor, request_id, **extra):
    fields = {
        "storage_kind": EvidenceItem.KIND_UPLOAD,
        "document_name": "training-register.pdf",
        "file_path": "evidence/training-register.pdf",
        "mime_type": "application/pdf",
        "file_size_bytes": 20480,
    }
    fields.update(extra)
    return evidence.submit_evidence(actor, request_id, **fields)


def under_review(auditor, staff, request_id):
    upload(staff, request_id)
    return evidence.start_review(auditor, request_id)


class TestRequest:

    def test_request_for_finding(self, evidence_request, finding):
        assert evidence_request.status == EvidenceRequest.STATUS_REQUESTED
        assert evidence_request.audit_id == finding.audit_id
        assert evidence_request.indicator_id == finding.indicator_id

    def test_one_request_per_finding(self, auditor, evidence_request, finding):
        with pytest.raises(StateConflict):
            evidence.request_evidence_for_finding(auditor, finding.pk, "POLICY", "Another upload please")

    def test_closed_finding_refused(self, reviewer, finding):
        services.update_finding(reviewer, finding.pk, status=Finding.STATUS_CLOSED)
        with pytest.raises(StateConflict):
            evidence.request_evidence_for_finding(reviewer, finding.pk, "POLICY", "Upload the policy")

    def test_unknown_finding(self, auditor):
        with pytest.raises(NotFound):
            evidence.request_evidence_for_finding(
                auditor, "00000000-0000-0000-0000-000000000000", "POLICY", "Upload the policy"
            )

    def test_unknown_evidence_type(self, auditor, finding):
        with pytest.raises(ValidationError):
            evidence.request_evidence_for_finding(auditor, finding.pk, "SELFIE", "Upload it")

    def test_staff_cannot_request(self, staff, finding):
        with pytest.raises(AuthorizationError):
            evidence.request_evidence_for_finding(staff, finding.pk, "POLICY", "Upload the policy")

    def test_standalone_request(self, auditor, in_progress_audit, indicators):
        request = evidence.request_evidence(
            auditor, "ROSTER", "Current roster", audit_id=in_progress_audit.pk, indicator_id=indicators[2].pk
        )
        assert request.finding_id is None
        assert request.audit_id == in_progress_audit.pk


class TestSubmit:

    def test_upload_moves_to_submitted(self, staff, evidence_request):
        item = upload(staff, evidence_request.pk, document_type="TRAINING_RECORD")
        evidence_request.refresh_from_db()
        assert evidence_request.status == EvidenceRequest.STATUS_SUBMITTED
        assert item.request_id == evidence_request.pk
        assert item.uploaded_by == staff
        assert item.document_type == "TRAINING_RECORD"

    def test_link_evidence(self, staff, evidence_request):
        item = evidence.submit_evidence(
            staff, evidence_request.pk, EvidenceItem.KIND_LINK, "Register in SharePoint",
            external_url="https://docs.example.com/register",
        )
        assert item.external_url == "https://docs.example.com/register"
        assert item.file_path is None

    def test_link_requires_valid_url(self, staff, evidence_request):
        with pytest.raises(ValidationError):
            evidence.submit_evidence(
                staff, evidence_request.pk, EvidenceItem.KIND_LINK, "Register", external_url="not a url"
            )
        evidence_request.refresh_from_db()
        assert evidence_request.status == EvidenceRequest.STATUS_REQUESTED

    def test_upload_requires_mime_type(self, staff, evidence_request):
        with pytest.raises(ValidationError):
            upload(staff, evidence_request.pk, mime_type=None)

    def test_cannot_submit_twice(self, staff, evidence_request):
        upload(staff, evidence_request.pk)
        with pytest.raises(StateConflict):
            upload(staff, evidence_request.pk)


class TestReview:

    def test_start_review_requires_submission(self, auditor, evidence_request):
        with pytest.raises(StateConflict):
            evidence.start_review(auditor, evidence_request.pk)

    def test_staff_cannot_review(self, staff, auditor, evidence_request):
        under_review(auditor, staff, evidence_request.pk)
        with pytest.raises(AuthorizationError):
            evidence.review_evidence(staff, evidence_request.pk, EvidenceRequest.STATUS_ACCEPTED)

    def test_decision_requires_under_review(self, auditor, staff, evidence_request):
        upload(staff, evidence_request.pk)
        with pytest.raises(StateConflict):
            evidence.review_evidence(auditor, evidence_request.pk, EvidenceRequest.STATUS_ACCEPTED)

    def test_unknown_decision(self, auditor, staff, evidence_request):
        under_review(auditor, staff, evidence_request.pk)
        with pytest.raises(ValidationError):
            evidence.review_evidence(auditor, evidence_request.pk, "MAYBE")

    def test_accept_closes_finding_with_note(self, auditor, staff, evidence_request, finding):
        under_review(auditor, staff, evidence_request.pk)
        request = evidence.review_evidence(
            auditor, evidence_request.pk, EvidenceRequest.STATUS_ACCEPTED, "Register is complete"
        )
        assert request.status == EvidenceRequest.STATUS_ACCEPTED
        assert request.reviewed_by == auditor
        assert request.reviewed_at is not None

        finding.refresh_from_db()
        assert finding.status == Finding.STATUS_CLOSED
        assert finding.closure_note == "Register is complete"
        assert finding.closed_by == auditor

    def test_accept_without_note_uses_default(self, auditor, staff, evidence_request, finding):
        under_review(auditor, staff, evidence_request.pk)
        evidence.review_evidence(auditor, evidence_request.pk, EvidenceRequest.STATUS_ACCEPTED)
        finding.refresh_from_db()
        assert finding.closure_note == evidence.ACCEPTED_NOTE

    def test_reject_then_resubmit(self, auditor, staff, evidence_request, finding):
        under_review(auditor, staff, evidence_request.pk)
        evidence.review_evidence(auditor, evidence_request.pk, EvidenceRequest.STATUS_REJECTED, "Unsigned copy")

        finding.refresh_from_db()
        assert finding.status == Finding.STATUS_OPEN

        upload(staff, evidence_request.pk, document_name="training-register-signed.pdf")
        evidence_request.refresh_from_db()
        assert evidence_request.status == EvidenceRequest.STATUS_SUBMITTED
        assert evidence_request.items.count() == 2

    def test_accepted_is_terminal(self, auditor, staff, evidence_request):
        under_review(auditor, staff, evidence_request.pk)
        evidence.review_evidence(auditor, evidence_request.pk, EvidenceRequest.STATUS_ACCEPTED)
        with pytest.raises(StateConflict):
            upload(staff, evidence_request.pk)

    def test_history_records_each_step(self, auditor, staff, evidence_request):
        under_review(auditor, staff, evidence_request.pk)
        evidence.review_evidence(auditor, evidence_request.pk, EvidenceRequest.STATUS_ACCEPTED)
        assert [e.action for e in history(evidence_request)] == [
            "EVIDENCE_REQUESTED",
            "EVIDENCE_SUBMITTED",
            "EVIDENCE_REVIEW_STARTED",
            "EVIDENCE_ACCEPTED",
        ]


def test_stale_transition_is_refused(auditor, evidence_request):
    stale = EvidenceRequest.objects.get(pk=evidence_request.pk)
    EvidenceRequest.objects.filter(pk=evidence_request.pk).update(status=EvidenceRequest.STATUS_SUBMITTED)

    with pytest.raises(StateConflict):
        evidence._advance(
            auditor, stale, evidence.SUBMITTABLE, EvidenceRequest.STATUS_SUBMITTED, "EVIDENCE_SUBMITTED"
        )


class TestQueries:

    def test_evidence_for_finding(self, evidence_request, finding):
        assert evidence.evidence_for_finding(finding.pk).pk == evidence_request.pk

    def test_finding_without_request(self, finding):
        assert evidence.evidence_for_finding(finding.pk) is None

    def test_unknown_finding(self):
        with pytest.raises(NotFound):
            evidence.evidence_for_finding("00000000-0000-4000-8000-000000000000")

    def test_list_filters(self, auditor, staff, evidence_request, in_progress_audit):
        other = evidence.request_evidence(auditor, "POLICY", "Latest privacy policy")
        upload(staff, other.pk)

        by_audit = evidence.list_evidence_requests(audit_id=in_progress_audit.pk)
        assert [r.pk for r in by_audit] == [evidence_request.pk]
        submitted = evidence.list_evidence_requests(status=EvidenceRequest.STATUS_SUBMITTED)
        assert [r.pk for r in submitted] == [other.pk]
