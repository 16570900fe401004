from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from typing import Mapping, Optional, Tuple

from django.conf import settings

from apps.compliance.models import DAILY, WEEKLY, ComplianceRun, ComplianceTemplateItem

YES, NO, NA = "YES", "NO", "NA"
YES_NO_NA_VALUES = (YES, NO, NA)


def _fail_values():
    return getattr(settings, "COMPLIANCE_FAIL_VALUES", None) or {ComplianceTemplateItem.TYPE_YES_NO_NA: [NO]}


def _number_threshold():
    return getattr(settings, "COMPLIANCE_NUMBER_FAIL_THRESHOLD", None)


def action_sla_hours() -> int:
    return int(getattr(settings, "COMPLIANCE_ACTION_SLA_HOURS", 48))


def compute_period(frequency: str, on_date: date) -> Tuple[date, date]:
    """DAILY: el propio día. WEEKLY: lunes a domingo de la semana que contiene la fecha."""
    if frequency == DAILY:
        return on_date, on_date
    if frequency == WEEKLY:
        start = on_date - timedelta(days=on_date.weekday())
        return start, start + timedelta(days=6)
    raise ValueError(f"Unknown frequency: {frequency!r}")


def parse_number(value) -> Optional[Decimal]:
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    return number if number.is_finite() else None


# ==== Reglas por tipo de respuesta ====
def rule_yes_no_na(item, response) -> bool:
    value = (response.response_value or "").strip().upper()
    return value in _fail_values().get(item.response_type, ())


def rule_number(item, response) -> bool:
    threshold = _number_threshold()
    if threshold is None:
        return False
    number = parse_number(response.response_value)
    return number is not None and number > Decimal(str(threshold))


def rule_text(item, response) -> bool:
    value = (response.response_value or "").strip()
    return value in _fail_values().get(item.response_type, ())


def rule_photo_required(item, response) -> bool:
    return not response.attachment_path


RULES = {
    ComplianceTemplateItem.TYPE_YES_NO_NA: rule_yes_no_na,
    ComplianceTemplateItem.TYPE_NUMBER: rule_number,
    ComplianceTemplateItem.TYPE_TEXT: rule_text,
    ComplianceTemplateItem.TYPE_PHOTO_REQUIRED: rule_photo_required,
}


def is_answered(item, response) -> bool:
    if response is None:
        return False
    if item.response_type == ComplianceTemplateItem.TYPE_PHOTO_REQUIRED:
        return bool(response.attachment_path)
    return bool((response.response_value or "").strip())


def is_failure(item, response) -> bool:
    """Un ítem sin respuesta no es falla; eso lo controla el envío para los críticos."""
    if response is None:
        return False
    rule = RULES.get(item.response_type)
    if rule is None:
        raise ValueError(f"Unknown response type: {item.response_type!r}")
    return rule(item, response)


@dataclass(frozen=True)
class RunEvaluation:
    status_color: str
    critical_failures: tuple
    minor_failures: tuple


def evaluate_run(items, responses: Mapping) -> RunEvaluation:
    """
    Devuelve el peor estado de la corrida: red si falla algún crítico,
    amber si falla algún no crítico, green en otro caso.
    `responses` va indexado por la pk del ítem.
    """
    critical, minor = [], []
    for item in items:
        if is_failure(item, responses.get(item.pk)):
            (critical if item.is_critical else minor).append(item)

    if critical:
        color = ComplianceRun.RED
    elif minor:
        color = ComplianceRun.AMBER
    else:
        color = ComplianceRun.GREEN
    return RunEvaluation(status_color=color, critical_failures=tuple(critical), minor_failures=tuple(minor))
