import logging

from django.conf import settings

from apps.core.errors import AuthorizationError

logger = logging.getLogger(__name__)

ADMIN = "CompanyAdmin"
AUDITOR = "Auditor"
REVIEWER = "Reviewer"
STAFF = "StaffReadOnly"
ALL_ROLES = frozenset({ADMIN, AUDITOR, REVIEWER, STAFF})

# operación -> roles permitidos; se consulta una sola vez en el borde de cada transición
CAPABILITIES = {
    # auditoría
    "audit.create": {ADMIN, AUDITOR},
    "audit.update_scope": {ADMIN, AUDITOR},
    "audit.select_template": {ADMIN, AUDITOR},
    "audit.start": {ADMIN, AUDITOR},
    "audit.record_response": {ADMIN, AUDITOR},
    "audit.submit": {ADMIN, AUDITOR},
    "audit.add_response_in_review": {ADMIN, REVIEWER},
    "audit.close": {ADMIN, REVIEWER},
    # hallazgos
    "finding.update": {ADMIN, AUDITOR, REVIEWER},
    "finding.close": {ADMIN, REVIEWER},
    # evidencia
    "evidence.request": {ADMIN, AUDITOR, REVIEWER},
    "evidence.submit": ALL_ROLES,
    "evidence.start_review": {ADMIN, AUDITOR, REVIEWER},
    "evidence.review": {ADMIN, AUDITOR, REVIEWER},
    "document.review": {ADMIN, AUDITOR, REVIEWER},
    # cumplimiento recurrente
    "compliance.run_create": ALL_ROLES,
    "compliance.run_respond": ALL_ROLES,
    "compliance.run_submit": ALL_ROLES,
    "compliance.run_lock": {ADMIN},
    "compliance.action_update": {ADMIN, AUDITOR, REVIEWER},
    "compliance.action_close": ALL_ROLES,
}


def _overrides():
    return getattr(settings, "ACCESS_POLICY_OVERRIDES", None) or {}


def allowed_roles(operation: str) -> frozenset:
    if operation not in CAPABILITIES:
        raise KeyError(f"Unknown operation: {operation}")
    roles = _overrides().get(operation, CAPABILITIES[operation])
    return frozenset(roles)


def authorize(actor, operation: str):
    """Lanza AuthorizationError si el actor no puede ejecutar la operación."""
    roles = allowed_roles(operation)
    if actor is None or not getattr(actor, "is_active", False) or actor.role not in roles:
        logger.warning("denied %s for %s", operation, getattr(actor, "pk", None))
        raise AuthorizationError(f"Role is not permitted to perform {operation}.")
    return actor
