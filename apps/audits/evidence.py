# apps/audits/evidence.py
import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import URLValidator
from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.audits.models import EVIDENCE_TYPES, Audit, EvidenceItem, EvidenceRequest, Finding, TemplateIndicator
from apps.audits.services import close_finding
from apps.core.errors import StateConflict, ValidationError, get_or_404
from apps.core.services import log_change
from apps.policy.engine import authorize

logger = logging.getLogger(__name__)

ACCEPTED_NOTE = "Evidence accepted"

SUBMITTABLE = (EvidenceRequest.STATUS_REQUESTED, EvidenceRequest.STATUS_REJECTED)
DECISIONS = (EvidenceRequest.STATUS_ACCEPTED, EvidenceRequest.STATUS_REJECTED)
_EVIDENCE_TYPE_VALUES = {value for value, _ in EVIDENCE_TYPES}


def _check_request_fields(evidence_type, request_note):
    if evidence_type not in _EVIDENCE_TYPE_VALUES:
        raise ValidationError(f"Unknown evidence type: {evidence_type}")
    if not (request_note or "").strip():
        raise ValidationError("Request note is required")


def _get_request(request_id) -> EvidenceRequest:
    return get_or_404(EvidenceRequest.objects.all(), "Evidence request not found", pk=request_id)


def _refuse(request: EvidenceRequest, message: str):
    logger.warning("evidence request %s: %s (status=%s)", request.pk, message, request.status)
    return StateConflict(message)


def _advance(actor, request: EvidenceRequest, expected, new_status, action, **fields) -> EvidenceRequest:
    """
    Transición condicionada al estado leído: UPDATE ... WHERE status IN expected.
    Si otro proceso avanzó la solicitud antes, no se actualiza ninguna fila.
    """
    rows = EvidenceRequest.objects.filter(pk=request.pk, status__in=expected).update(
        status=new_status, updated_at=timezone.now(), **fields
    )
    if rows == 0:
        raise _refuse(request, "Evidence request was modified concurrently; refresh and retry")
    previous = request.status
    request.refresh_from_db()
    log_change(actor, action, request, before={"status": previous}, after={"status": new_status})
    return request


# ==== Solicitudes ====
@transaction.atomic
def request_evidence_for_finding(actor, finding_id, evidence_type, request_note, due_date=None):
    authorize(actor, "evidence.request")
    finding = get_or_404(Finding.objects.select_for_update(), "Finding not found", pk=finding_id)
    if finding.status == Finding.STATUS_CLOSED:
        logger.warning("finding %s: evidence requested on closed finding", finding.pk)
        raise StateConflict("Cannot request evidence for a closed finding")
    if EvidenceRequest.objects.filter(finding=finding).exists():
        logger.warning("finding %s: evidence request already exists", finding.pk)
        raise StateConflict("Evidence request already exists for this finding")
    _check_request_fields(evidence_type, request_note)

    try:
        with transaction.atomic():
            request = EvidenceRequest.objects.create(
                finding=finding,
                audit_id=finding.audit_id,
                indicator_id=finding.indicator_id,
                evidence_type=evidence_type,
                request_note=request_note.strip(),
                due_date=due_date,
                requested_by=actor,
            )
    except IntegrityError:
        raise StateConflict("Evidence request already exists for this finding")
    log_change(actor, "EVIDENCE_REQUESTED", request, after={
        "status": request.status, "finding_id": str(finding.pk), "evidence_type": evidence_type,
    })
    return request


@transaction.atomic
def request_evidence(actor, evidence_type, request_note, due_date=None, audit_id=None, indicator_id=None):
    authorize(actor, "evidence.request")
    _check_request_fields(evidence_type, request_note)
    audit = get_or_404(Audit.objects.all(), "Audit not found", pk=audit_id) if audit_id else None
    indicator = None
    if indicator_id:
        indicator = get_or_404(TemplateIndicator.objects.all(), "Indicator not found", pk=indicator_id)
        if audit is not None and indicator.template_id != audit.template_id:
            raise ValidationError("Indicator does not belong to the audit's template")

    request = EvidenceRequest.objects.create(
        audit=audit,
        indicator=indicator,
        evidence_type=evidence_type,
        request_note=request_note.strip(),
        due_date=due_date,
        requested_by=actor,
    )
    log_change(actor, "EVIDENCE_REQUESTED", request, after={
        "status": request.status,
        "audit_id": str(audit.pk) if audit else None,
        "evidence_type": evidence_type,
    })
    return request


# ==== Entrega y revisión ====
@transaction.atomic
def submit_evidence(actor, request_id, storage_kind, document_name, file_path=None, mime_type=None,
                    file_size_bytes=None, external_url=None, document_type=None, note=None):
    authorize(actor, "evidence.submit")
    request = _get_request(request_id)
    if request.status not in SUBMITTABLE:
        raise _refuse(request, f"Evidence cannot be submitted while the request is {request.status}")

    if not (document_name or "").strip():
        raise ValidationError("Document name is required")
    if storage_kind == EvidenceItem.KIND_LINK:
        try:
            URLValidator()(external_url or "")
        except DjangoValidationError:
            raise ValidationError("A valid URL is required for link evidence")
    elif storage_kind == EvidenceItem.KIND_UPLOAD:
        if not file_path or not mime_type:
            raise ValidationError("File path and mime type are required for uploaded evidence")
    else:
        raise ValidationError(f"Unknown storage kind: {storage_kind}")
    if document_type and document_type not in _EVIDENCE_TYPE_VALUES:
        raise ValidationError(f"Unknown document type: {document_type}")

    _advance(actor, request, SUBMITTABLE, EvidenceRequest.STATUS_SUBMITTED, "EVIDENCE_SUBMITTED")
    is_link = storage_kind == EvidenceItem.KIND_LINK
    item = EvidenceItem.objects.create(
        request=request,
        storage_kind=storage_kind,
        document_name=document_name.strip(),
        file_path=None if is_link else file_path,
        mime_type=None if is_link else mime_type,
        file_size_bytes=None if is_link else file_size_bytes,
        external_url=external_url if is_link else None,
        document_type=document_type or None,
        note=note,
        uploaded_by=actor,
    )
    return item


@transaction.atomic
def start_review(actor, request_id):
    authorize(actor, "evidence.start_review")
    request = _get_request(request_id)
    if request.status != EvidenceRequest.STATUS_SUBMITTED:
        raise _refuse(request, "Only submitted evidence can be put under review")
    return _advance(
        actor, request, (EvidenceRequest.STATUS_SUBMITTED,), EvidenceRequest.STATUS_UNDER_REVIEW,
        "EVIDENCE_REVIEW_STARTED", reviewed_by=actor,
    )


@transaction.atomic
def review_evidence(actor, request_id, decision, review_note=None):
    authorize(actor, "evidence.review")
    if decision not in DECISIONS:
        raise ValidationError(f"Decision must be one of {', '.join(DECISIONS)}")
    request = _get_request(request_id)
    if request.status != EvidenceRequest.STATUS_UNDER_REVIEW:
        raise _refuse(request, "Evidence must be under review before a decision is recorded")

    note = (review_note or "").strip() or None
    action = "EVIDENCE_ACCEPTED" if decision == EvidenceRequest.STATUS_ACCEPTED else "EVIDENCE_REJECTED"
    _advance(
        actor, request, (EvidenceRequest.STATUS_UNDER_REVIEW,), decision, action,
        reviewed_by=actor, reviewed_at=timezone.now(), review_note=note,
    )

    # aceptar cierra el hallazgo en la misma transacción; rechazar no lo toca
    if decision == EvidenceRequest.STATUS_ACCEPTED and request.finding_id:
        finding = Finding.objects.select_for_update().get(pk=request.finding_id)
        close_finding(actor, finding, note or ACCEPTED_NOTE)
    return request


# ==== Consultas ====
def list_evidence_requests(audit_id=None, status=None):
    qs = EvidenceRequest.objects.prefetch_related("items").order_by("-created_at")
    if audit_id:
        qs = qs.filter(audit_id=audit_id)
    if status:
        qs = qs.filter(status=status)
    return qs


def evidence_for_finding(finding_id):
    """Solicitud vinculada al hallazgo, o None si todavía no se pidió evidencia."""
    finding = get_or_404(Finding.objects.all(), "Finding not found", pk=finding_id)
    return EvidenceRequest.objects.prefetch_related("items").filter(finding=finding).first()
