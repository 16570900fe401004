# apps/audits/reviews.py
import logging
from dataclasses import dataclass, field
from typing import List

from django.db import IntegrityError, transaction

from apps.audits.models import Audit, DocumentChecklistTemplate, DocumentReview, EvidenceItem
from apps.audits.services import min_comment_length
from apps.core import scoring
from apps.core.errors import StateConflict, ValidationError, get_or_404
from apps.core.services import log_change
from apps.policy.engine import authorize

logger = logging.getLogger(__name__)


@dataclass
class ReviewOutcome:
    review: DocumentReview
    warnings: List[str] = field(default_factory=list)


def get_checklist(document_type: str) -> DocumentChecklistTemplate:
    return get_or_404(
        DocumentChecklistTemplate.objects.prefetch_related("items"),
        f"No checklist template for document type {document_type}",
        document_type=document_type,
    )


def _validate_responses(items, responses):
    keys = {item.item_key for item in items}
    unknown = sorted(set(responses) - keys)
    if unknown:
        raise ValidationError({"error": "Unknown checklist items", "items": unknown})
    invalid = sorted(key for key, value in responses.items() if value not in scoring.CHECKLIST_VALUES)
    if invalid:
        raise ValidationError({
            "error": f"Checklist answers must be one of {', '.join(scoring.CHECKLIST_VALUES)}",
            "items": invalid,
        })
    missing = [item.item_key for item in items if item.item_key not in responses]
    if missing:
        raise ValidationError({"error": "Every checklist item needs an answer", "items": missing})


@transaction.atomic
def submit_document_review(actor, evidence_item_id, responses, decision, comments=None, audit_id=None) -> ReviewOutcome:
    authorize(actor, "document.review")
    item = get_or_404(
        EvidenceItem.objects.select_related("request"), "Evidence item not found", pk=evidence_item_id
    )
    if DocumentReview.objects.filter(evidence_item=item).exists():
        logger.warning("evidence item %s: already reviewed", item.pk)
        raise StateConflict("This evidence item has already been reviewed")

    if decision not in (DocumentReview.DECISION_ACCEPT, DocumentReview.DECISION_REJECT):
        raise ValidationError(f"Unknown decision: {decision}")
    if not item.document_type:
        raise ValidationError("Evidence item has no document type; a checklist cannot be applied")
    template = DocumentChecklistTemplate.objects.filter(document_type=item.document_type).first()
    if template is None:
        raise ValidationError(f"No checklist template for document type {item.document_type}")

    responses = dict(responses or {})
    items = list(template.items.all())
    _validate_responses(items, responses)
    if decision == DocumentReview.DECISION_REJECT and len((comments or "").strip()) < min_comment_length():
        raise ValidationError(
            f"Comments are required (minimum {min_comment_length()} characters) when rejecting a document"
        )

    result = scoring.compute_dqs(items, responses)
    if audit_id:
        audit = get_or_404(Audit.objects.all(), "Audit not found", pk=audit_id)
    else:
        audit = item.request.audit

    try:
        with transaction.atomic():
            review = DocumentReview.objects.create(
                evidence_item=item,
                evidence_request=item.request,
                template=template,
                audit=audit,
                reviewer=actor,
                responses=responses,
                decision=decision,
                dqs_percent=result.score,
                critical_failures_count=result.critical_failures,
                comments=(comments or "").strip() or None,
            )
    except IntegrityError:
        # otro revisor llegó primero (uno a uno sobre el ítem)
        raise StateConflict("This evidence item has already been reviewed")

    log_change(actor, "DOCUMENT_REVIEWED", review, after={
        "evidence_item_id": str(item.pk),
        "decision": decision,
        "dqs_percent": result.score,
        "critical_failures": result.critical_failures,
    })

    warnings = []
    if decision == DocumentReview.DECISION_ACCEPT and result.critical_failures:
        warnings.append(
            f"Document accepted with {result.critical_failures} critical checklist failure(s)"
        )
        logger.warning("evidence item %s accepted with %d critical failures", item.pk, result.critical_failures)
    return ReviewOutcome(review=review, warnings=warnings)


def get_document_review(evidence_item_id) -> DocumentReview:
    return get_or_404(
        DocumentReview.objects.select_related("template"),
        "No review found for this evidence item",
        evidence_item_id=evidence_item_id,
    )
