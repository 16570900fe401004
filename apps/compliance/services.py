# apps/compliance/services.py
import logging
import uuid
from dataclasses import dataclass, field
from datetime import timedelta
from typing import List

from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.compliance import engine
from apps.compliance.models import (
    ComplianceAction, ComplianceResponse, ComplianceRun, ComplianceTemplate, ComplianceTemplateItem,
)
from apps.core.errors import StateConflict, ValidationError, get_or_404
from apps.core.services import log_change
from apps.policy.engine import authorize

logger = logging.getLogger(__name__)

_UNSET = object()


@dataclass
class RunSubmission:
    run: ComplianceRun
    status_color: str
    actions_created: int
    actions: List[ComplianceAction] = field(default_factory=list)


def _lock_run(run_id) -> ComplianceRun:
    return get_or_404(
        ComplianceRun.objects.select_for_update().select_related("template"), "Run not found", pk=run_id
    )


def _refuse(entity, message: str):
    logger.warning("%s %s: %s (status=%s)", entity._meta.model_name, entity.pk, message, entity.status)
    return StateConflict(message)


# ==== Corridas ====
def find_or_create_run(actor, template_id, scope_entity_id, on_date=None):
    """Devuelve (run, created). Un solo run por plantilla, entidad y período, aun con pedidos simultáneos."""
    authorize(actor, "compliance.run_create")
    template = get_or_404(
        ComplianceTemplate.objects.filter(is_active=True), "Compliance template not found", pk=template_id
    )
    if not scope_entity_id:
        raise ValidationError(f"A {template.scope_type.lower()} id is required for this template")
    try:
        entity_id = uuid.UUID(str(scope_entity_id))
    except ValueError:
        raise ValidationError("Scope entity id must be a UUID")

    period_start, period_end = engine.compute_period(template.frequency, on_date or timezone.localdate())
    key = {
        "template": template,
        "scope_type": template.scope_type,
        "scope_entity_id": entity_id,
        "frequency": template.frequency,
        "period_start": period_start,
    }
    try:
        with transaction.atomic():
            run, created = ComplianceRun.objects.get_or_create(
                **key, defaults={"period_end": period_end, "created_by": actor},
            )
            if created:
                log_change(actor, "COMPLIANCE_RUN_CREATED", run, after={
                    "status": run.status,
                    "scope": f"{run.scope_type}:{run.scope_entity_id}",
                    "period_start": period_start.isoformat(),
                    "period_end": period_end.isoformat(),
                })
    except IntegrityError:
        # otro pedido insertó la corrida del período entre el SELECT y el INSERT
        logger.info("compliance run for %s:%s %s created concurrently", template.scope_type, entity_id, period_start)
        return ComplianceRun.objects.get(**key), False
    return run, created


def _validate_answer(item: ComplianceTemplateItem, value, attachment_path):
    # guardado parcial: sin valor solo se actualizan las notas
    if item.response_type == ComplianceTemplateItem.TYPE_YES_NO_NA:
        if value and value not in engine.YES_NO_NA_VALUES:
            raise ValidationError(f"Response must be one of {', '.join(engine.YES_NO_NA_VALUES)}")
    elif item.response_type == ComplianceTemplateItem.TYPE_NUMBER:
        if value and engine.parse_number(value) is None:
            raise ValidationError("Response must be a number")
    elif item.response_type == ComplianceTemplateItem.TYPE_PHOTO_REQUIRED:
        if not attachment_path:
            raise ValidationError("A photo attachment is required for this item")


@transaction.atomic
def respond(actor, run_id, item_id, response_value=None, notes=None, attachment_path=None) -> ComplianceResponse:
    authorize(actor, "compliance.run_respond")
    run = _lock_run(run_id)
    if run.status != ComplianceRun.STATUS_OPEN:
        raise _refuse(run, "Run is no longer open for responses")

    item = get_or_404(ComplianceTemplateItem.objects.all(), "Template item not found", pk=item_id)
    if item.template_id != run.template_id:
        raise ValidationError("Template item does not belong to this run's template")
    value = response_value.strip() if isinstance(response_value, str) else response_value
    if value is not None and not isinstance(value, str):
        value = str(value)
    _validate_answer(item, value, attachment_path)

    defaults = {"notes": notes, "responded_by": actor}
    # None conserva lo ya guardado
    if value is not None:
        defaults["response_value"] = value or None
    if attachment_path is not None:
        defaults["attachment_path"] = attachment_path or None
    response, _ = ComplianceResponse.objects.update_or_create(run=run, template_item=item, defaults=defaults)
    return response


def list_runs(template_id=None, scope_entity_id=None, status=None):
    qs = ComplianceRun.objects.select_related("template").order_by("-period_start", "-created_at")
    if template_id:
        qs = qs.filter(template_id=template_id)
    if scope_entity_id:
        qs = qs.filter(scope_entity_id=scope_entity_id)
    if status:
        qs = qs.filter(status=status)
    return qs


def list_actions(run_id=None, scope_entity_id=None, status=None, assigned_to_id=None):
    qs = ComplianceAction.objects.select_related("run", "assigned_to")
    if run_id:
        qs = qs.filter(run_id=run_id)
    if scope_entity_id:
        qs = qs.filter(scope_entity_id=scope_entity_id)
    if status:
        qs = qs.filter(status=status)
    if assigned_to_id:
        qs = qs.filter(assigned_to_id=assigned_to_id)
    return qs


@transaction.atomic
def submit_run(actor, run_id, now=None) -> RunSubmission:
    authorize(actor, "compliance.run_submit")
    run = _lock_run(run_id)
    if run.status != ComplianceRun.STATUS_OPEN:
        raise _refuse(run, "Run has already been submitted")

    items = list(run.template.items.all())
    responses = {r.template_item_id: r for r in run.responses.all()}
    unanswered = [i.title for i in items if i.is_critical and not engine.is_answered(i, responses.get(i.pk))]
    if unanswered:
        raise ValidationError({"error": "Critical items require a response before submitting", "items": unanswered})

    evaluation = engine.evaluate_run(items, responses)
    now = now or timezone.now()
    due_at = now + timedelta(hours=engine.action_sla_hours())

    # solo las fallas críticas generan acciones correctivas
    actions = []
    for item in evaluation.critical_failures:
        response = responses.get(item.pk)
        action = ComplianceAction.objects.create(
            run=run,
            template_item=item,
            scope_type=run.scope_type,
            scope_entity_id=run.scope_entity_id,
            severity=ComplianceAction.SEVERITY_HIGH,
            status=ComplianceAction.STATUS_OPEN,
            title=f"Non-compliance: {item.title}",
            description=(response.notes if response and response.notes else f"Critical item failed: {item.title}"),
            due_at=due_at,
        )
        actions.append(action)

    run.status = ComplianceRun.STATUS_SUBMITTED
    run.status_color = evaluation.status_color
    run.submitted_by = actor
    run.submitted_at = now
    run.save(update_fields=["status", "status_color", "submitted_by", "submitted_at"])
    log_change(actor, "COMPLIANCE_RUN_SUBMITTED", run,
               before={"status": ComplianceRun.STATUS_OPEN},
               after={"status": run.status, "status_color": run.status_color, "actions_created": len(actions)})
    for action in actions:
        log_change(actor, "COMPLIANCE_ACTION_CREATED", action, after={
            "severity": action.severity, "status": action.status, "due_at": action.due_at.isoformat(),
        })
    return RunSubmission(run=run, status_color=run.status_color, actions_created=len(actions), actions=actions)


@transaction.atomic
def lock_run(actor, run_id) -> ComplianceRun:
    authorize(actor, "compliance.run_lock")
    run = _lock_run(run_id)
    if run.status != ComplianceRun.STATUS_SUBMITTED:
        raise _refuse(run, "Only submitted runs can be locked")
    run.status = ComplianceRun.STATUS_LOCKED
    run.locked_at = timezone.now()
    run.save(update_fields=["status", "locked_at"])
    log_change(actor, "COMPLIANCE_RUN_LOCKED", run,
               before={"status": ComplianceRun.STATUS_SUBMITTED}, after={"status": run.status})
    return run


# ==== Acciones correctivas ====
def _lock_action(action_id) -> ComplianceAction:
    return get_or_404(ComplianceAction.objects.select_for_update(), "Action not found", pk=action_id)


def _action_snapshot(action: ComplianceAction) -> dict:
    return {
        "status": action.status,
        "assigned_to_id": str(action.assigned_to_id) if action.assigned_to_id else None,
        "due_at": action.due_at.isoformat() if action.due_at else None,
    }


@transaction.atomic
def update_action(actor, action_id, status=None, assigned_to=_UNSET, due_at=_UNSET) -> ComplianceAction:
    authorize(actor, "compliance.action_update")
    action = _lock_action(action_id)
    if action.status == ComplianceAction.STATUS_CLOSED:
        raise _refuse(action, "Action is closed")

    if status is not None:
        if status not in ComplianceAction.STATUS_ORDER:
            raise ValidationError(f"Unknown action status: {status}")
        if status == ComplianceAction.STATUS_CLOSED:
            raise ValidationError("Use the close operation with closure notes to close an action")
        order = ComplianceAction.STATUS_ORDER
        if order.index(status) < order.index(action.status):
            raise _refuse(action, f"Action cannot move from {action.status} to {status}")

    before = _action_snapshot(action)
    fields = []
    if status is not None and status != action.status:
        action.status = status
        fields.append("status")
    if assigned_to is not _UNSET:
        action.assigned_to = assigned_to
        fields.append("assigned_to")
    if due_at is not _UNSET:
        action.due_at = due_at
        fields.append("due_at")
    if fields:
        action.save(update_fields=fields)
        log_change(actor, "COMPLIANCE_ACTION_UPDATED", action, before=before, after=_action_snapshot(action))
    return action


@transaction.atomic
def close_action(actor, action_id, closure_notes) -> ComplianceAction:
    authorize(actor, "compliance.action_close")
    notes = (closure_notes or "").strip()
    if not notes:
        raise ValidationError("Closure notes are required")
    action = _lock_action(action_id)
    if action.status == ComplianceAction.STATUS_CLOSED:
        raise _refuse(action, "Action is already closed")

    before = action.status
    action.status = ComplianceAction.STATUS_CLOSED
    action.closure_notes = notes
    action.closed_at = timezone.now()
    action.closed_by = actor
    action.save(update_fields=["status", "closure_notes", "closed_at", "closed_by"])
    log_change(actor, "COMPLIANCE_ACTION_CLOSED", action,
               before={"status": before}, after={"status": action.status})
    return action
