# apps/audits/services.py
import logging
from collections import Counter
from dataclasses import dataclass
from typing import Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.audits.models import Audit, AuditTemplate, Finding, IndicatorResponse, TemplateIndicator
from apps.core import scoring
from apps.core.errors import StateConflict, ValidationError, get_or_404
from apps.core.services import log_change
from apps.policy.engine import authorize

logger = logging.getLogger(__name__)

SUPERSEDED_NOTE = "Superseded by re-rating"

# marca "no enviado" para distinguirlo de un None explícito
_UNSET = object()


@dataclass
class ResponseOutcome:
    response: IndicatorResponse
    finding: Optional[Finding]


def min_comment_length() -> int:
    return getattr(settings, "MIN_COMMENT_LENGTH", 10)


def validate_rating(rating: str, comment: Optional[str]):
    if rating not in scoring.RATING_POINTS:
        raise ValidationError(f"Unknown rating: {rating}")
    if rating != scoring.CONFORMANCE and len((comment or "").strip()) < min_comment_length():
        raise ValidationError(
            f"Comment is required (minimum {min_comment_length()} characters) "
            "for Observation, Minor NC and Major NC ratings"
        )


def _lock_audit(audit_id) -> Audit:
    return get_or_404(Audit.objects.select_for_update(), "Audit not found", pk=audit_id)


def _conflict(audit: Audit, message: str):
    logger.warning("audit %s: %s (status=%s)", audit.pk, message, audit.status)
    return StateConflict(message)


def _scope_snapshot(audit: Audit) -> dict:
    return {
        "scope_time_from": audit.scope_time_from.isoformat(),
        "scope_time_to": audit.scope_time_to.isoformat(),
    }


def _check_scope(scope_from, scope_to):
    if scope_from is None or scope_to is None:
        raise ValidationError("Scope time range is required")
    if scope_from > scope_to:
        raise ValidationError("scope_time_from must not be after scope_time_to")


# ==== Ciclo de vida de la auditoría ====
@transaction.atomic
def create_audit(actor, audit_type, title, scope_from, scope_to, description="",
                 external_auditor_name="", external_auditor_org="", external_auditor_email=""):
    authorize(actor, "audit.create")
    if audit_type not in (Audit.TYPE_INTERNAL, Audit.TYPE_EXTERNAL):
        raise ValidationError(f"Unknown audit type: {audit_type}")
    if not (title or "").strip():
        raise ValidationError("Title is required")
    _check_scope(scope_from, scope_to)

    is_external = audit_type == Audit.TYPE_EXTERNAL
    if is_external and not all(
        (v or "").strip() for v in (external_auditor_name, external_auditor_org, external_auditor_email)
    ):
        raise ValidationError("External auditor name, organisation and email are required for external audits")

    audit = Audit.objects.create(
        audit_type=audit_type,
        title=title.strip(),
        description=description or "",
        scope_time_from=scope_from,
        scope_time_to=scope_to,
        # externas: el alcance lo fija el auditor externo
        scope_locked=is_external,
        external_auditor_name=external_auditor_name or "",
        external_auditor_org=external_auditor_org or "",
        external_auditor_email=external_auditor_email or "",
        created_by=actor,
    )
    log_change(actor, "AUDIT_CREATED", audit, after={
        "status": audit.status, "audit_type": audit.audit_type, **_scope_snapshot(audit),
    })
    return audit


@transaction.atomic
def update_scope(actor, audit_id, scope_from, scope_to):
    authorize(actor, "audit.update_scope")
    audit = _lock_audit(audit_id)
    if audit.status != Audit.STATUS_DRAFT or audit.scope_locked:
        raise _conflict(audit, "Audit scope is locked and cannot be modified")
    _check_scope(scope_from, scope_to)

    before = _scope_snapshot(audit)
    audit.scope_time_from = scope_from
    audit.scope_time_to = scope_to
    audit.save(update_fields=["scope_time_from", "scope_time_to"])
    log_change(actor, "AUDIT_SCOPE_UPDATED", audit, before=before, after=_scope_snapshot(audit))
    return audit


@transaction.atomic
def select_template(actor, audit_id, template_id):
    authorize(actor, "audit.select_template")
    audit = _lock_audit(audit_id)
    if audit.status != Audit.STATUS_DRAFT:
        raise _conflict(audit, "Template can only be selected while the audit is in draft")
    template = get_or_404(AuditTemplate.objects.all(), "Template not found", pk=template_id)

    before = {"template_id": str(audit.template_id) if audit.template_id else None}
    audit.template = template
    audit.save(update_fields=["template"])
    log_change(actor, "AUDIT_TEMPLATE_SELECTED", audit, before=before, after={"template_id": str(template.pk)})
    return audit


def _start(actor, audit: Audit):
    if audit.template_id is None:
        raise ValidationError("Please select an audit template before starting the audit")
    audit.status = Audit.STATUS_IN_PROGRESS
    audit.scope_locked = True
    audit.started_at = timezone.now()
    audit.save(update_fields=["status", "scope_locked", "started_at"])
    log_change(actor, "AUDIT_STARTED", audit,
               before={"status": Audit.STATUS_DRAFT}, after={"status": audit.status})


@transaction.atomic
def start_audit(actor, audit_id):
    authorize(actor, "audit.start")
    audit = _lock_audit(audit_id)
    if audit.status != Audit.STATUS_DRAFT:
        raise _conflict(audit, "Audit has already been started")
    _start(actor, audit)
    return audit


@transaction.atomic
def submit_for_review(actor, audit_id):
    authorize(actor, "audit.submit")
    audit = _lock_audit(audit_id)
    if audit.status != Audit.STATUS_IN_PROGRESS:
        raise _conflict(audit, "Only an audit in progress can be submitted for review")

    audit.status = Audit.STATUS_IN_REVIEW
    audit.submitted_at = timezone.now()
    audit.save(update_fields=["status", "submitted_at"])
    log_change(actor, "AUDIT_SUBMITTED_FOR_REVIEW", audit,
               before={"status": Audit.STATUS_IN_PROGRESS}, after={"status": audit.status})
    return audit


@transaction.atomic
def close_audit(actor, audit_id, close_reason=None):
    authorize(actor, "audit.close")
    audit = _lock_audit(audit_id)
    if audit.status == Audit.STATUS_CLOSED:
        raise _conflict(audit, "Audit is already closed")
    if audit.status != Audit.STATUS_IN_REVIEW:
        raise _conflict(audit, "Audit must be in review before it can be closed")

    reason = (close_reason or "").strip()
    open_major = audit.findings.filter(severity=scoring.MAJOR_NC, status=Finding.STATUS_OPEN).count()
    if open_major and not reason:
        raise ValidationError({
            "error": "A close reason is required while major non-conformities remain open",
            "open_major_findings": open_major,
        })

    audit.status = Audit.STATUS_CLOSED
    audit.close_reason = reason or None
    audit.closed_at = timezone.now()
    audit.save(update_fields=["status", "close_reason", "closed_at"])
    log_change(actor, "AUDIT_CLOSED", audit,
               before={"status": Audit.STATUS_IN_REVIEW},
               after={"status": audit.status, "close_reason": audit.close_reason, "open_major_findings": open_major})
    return audit


# ==== Respuestas por indicador ====
def _indicator_for(audit: Audit, indicator_id) -> TemplateIndicator:
    indicator = get_or_404(TemplateIndicator.objects.all(), "Indicator not found", pk=indicator_id)
    if audit.template_id is None:
        raise ValidationError("Please select an audit template before recording responses")
    if indicator.template_id != audit.template_id:
        raise ValidationError("Indicator does not belong to the audit's template")
    return indicator


def generate_finding(actor, audit: Audit, indicator: TemplateIndicator, rating: str, comment) -> Optional[Finding]:
    """
    Efecto directo de guardar una calificación, dentro de la misma transacción.
    Cierra los hallazgos activos del mismo indicador y crea uno nuevo si la
    calificación es no conforme.
    """
    now = timezone.now()
    stale = Finding.objects.select_for_update().filter(
        audit=audit, indicator=indicator, status__in=Finding.ACTIVE_STATUSES,
    )
    for old in stale:
        previous = old.status
        old.status = Finding.STATUS_CLOSED
        old.closure_note = SUPERSEDED_NOTE
        old.closed_at = now
        old.closed_by = actor
        old.save(update_fields=["status", "closure_note", "closed_at", "closed_by"])
        log_change(actor, "FINDING_SUPERSEDED", old,
                   before={"status": previous}, after={"status": old.status, "rating": rating})

    if not scoring.is_nonconforming(rating):
        return None

    finding = Finding.objects.create(
        audit=audit,
        indicator=indicator,
        severity=rating,
        status=Finding.STATUS_OPEN,
        finding_text=(comment or "").strip(),
    )
    log_change(actor, "FINDING_CREATED", finding, after={
        "severity": finding.severity, "status": finding.status, "indicator_id": str(indicator.pk),
    })
    return finding


def _upsert_response(actor, audit, indicator, rating, comment, action) -> ResponseOutcome:
    previous = IndicatorResponse.objects.filter(audit=audit, indicator=indicator).values("rating").first()
    response, _ = IndicatorResponse.objects.update_or_create(
        audit=audit,
        indicator=indicator,
        defaults={
            "rating": rating,
            "comment": (comment or "").strip() or None,
            "score_points": scoring.score_for_rating(rating),
            "recorded_by": actor,
        },
    )
    log_change(actor, action, response,
               before=previous,
               after={"rating": rating, "indicator_id": str(indicator.pk)})
    finding = generate_finding(actor, audit, indicator, rating, comment)
    return ResponseOutcome(response=response, finding=finding)


@transaction.atomic
def record_response(actor, audit_id, indicator_id, rating, comment=None) -> ResponseOutcome:
    authorize(actor, "audit.record_response")
    audit = _lock_audit(audit_id)
    if audit.status not in (Audit.STATUS_DRAFT, Audit.STATUS_IN_PROGRESS):
        raise _conflict(audit, "Responses can only be saved while the audit is in progress")
    validate_rating(rating, comment)
    indicator = _indicator_for(audit, indicator_id)

    if audit.status == Audit.STATUS_DRAFT:
        _start(actor, audit)
    return _upsert_response(actor, audit, indicator, rating, comment, "AUDIT_RESPONSE_SAVED")


@transaction.atomic
def add_response_in_review(actor, audit_id, indicator_id, rating, comment=None) -> ResponseOutcome:
    authorize(actor, "audit.add_response_in_review")
    audit = _lock_audit(audit_id)
    if audit.status != Audit.STATUS_IN_REVIEW:
        raise _conflict(audit, "Responses can only be added while the audit is in review")
    validate_rating(rating, comment)
    indicator = _indicator_for(audit, indicator_id)

    if IndicatorResponse.objects.filter(audit=audit, indicator=indicator).exists():
        raise _conflict(audit, "This indicator already has a response")
    return _upsert_response(actor, audit, indicator, rating, comment, "AUDIT_RESPONSE_ADDED_IN_REVIEW")


def audit_summary(audit_id) -> dict:
    audit = get_or_404(Audit.objects.all(), "Audit not found", pk=audit_id)
    ratings = list(audit.responses.values_list("rating", flat=True))
    total = audit.template.indicators.count() if audit.template_id else 0
    result = scoring.compute_audit_score(ratings, total_count=total)
    counts = Counter(ratings)
    return {
        "audit_id": str(audit.pk),
        "status": audit.status,
        "counts": {rating: counts.get(rating, 0) for rating in scoring.RATING_POINTS},
        "rated_count": result.rated_count,
        "total_count": result.total_count,
        "points": result.points,
        "score": result.score,
        "open_findings": audit.findings.filter(status__in=Finding.ACTIVE_STATUSES).count(),
    }


# ==== Hallazgos ====
def list_findings(audit_id=None, status=None, severity=None):
    qs = Finding.objects.select_related("audit", "indicator", "owner")
    if audit_id:
        qs = qs.filter(audit_id=audit_id)
    if status:
        qs = qs.filter(status=status)
    if severity:
        qs = qs.filter(severity=severity)
    return qs


def close_finding(actor, finding: Finding, note: str):
    """Cierre sin chequeo de rol; lo usan la aceptación de evidencia y update_finding."""
    if finding.status == Finding.STATUS_CLOSED:
        return finding
    previous = finding.status
    finding.status = Finding.STATUS_CLOSED
    finding.closure_note = note
    finding.closed_at = timezone.now()
    finding.closed_by = actor
    finding.save(update_fields=["status", "closure_note", "closed_at", "closed_by"])
    log_change(actor, "FINDING_CLOSED", finding,
               before={"status": previous}, after={"status": finding.status, "closure_note": note})
    return finding


_FINDING_ORDER = (Finding.STATUS_OPEN, Finding.STATUS_UNDER_REVIEW, Finding.STATUS_CLOSED)


@transaction.atomic
def update_finding(actor, finding_id, owner=_UNSET, due_date=_UNSET, status=None, closure_note=""):
    authorize(actor, "finding.update")
    finding = get_or_404(Finding.objects.select_for_update(), "Finding not found", pk=finding_id)

    if status is not None:
        if status not in _FINDING_ORDER:
            raise ValidationError(f"Unknown finding status: {status}")
        if status == Finding.STATUS_CLOSED:
            authorize(actor, "finding.close")
        if finding.status == Finding.STATUS_CLOSED:
            logger.warning("finding %s: closed findings cannot change status", finding.pk)
            raise StateConflict("Finding is closed and its status cannot change")
        if _FINDING_ORDER.index(status) < _FINDING_ORDER.index(finding.status):
            logger.warning("finding %s: regression %s -> %s", finding.pk, finding.status, status)
            raise StateConflict(f"Finding cannot move from {finding.status} to {status}")

    before = {
        "owner_id": str(finding.owner_id) if finding.owner_id else None,
        "due_date": finding.due_date.isoformat() if finding.due_date else None,
        "status": finding.status,
    }
    fields = []
    if owner is not _UNSET:
        finding.owner = owner
        fields.append("owner")
    if due_date is not _UNSET:
        finding.due_date = due_date
        fields.append("due_date")
    if status is not None and status != Finding.STATUS_CLOSED:
        finding.status = status
        fields.append("status")
    if fields:
        finding.save(update_fields=fields)
        log_change(actor, "FINDING_UPDATED", finding, before=before, after={
            "owner_id": str(finding.owner_id) if finding.owner_id else None,
            "due_date": finding.due_date.isoformat() if finding.due_date else None,
            "status": finding.status,
        })

    if status == Finding.STATUS_CLOSED:
        close_finding(actor, finding, (closure_note or "").strip() or "Closed manually")
    return finding
