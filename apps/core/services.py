# apps/core/services.py
import logging

from apps.core.errors import AuthorizationError
from apps.core.models import ChangeLog

logger = logging.getLogger(__name__)


def log_change(actor, action: str, entity, before=None, after=None) -> ChangeLog:
    """Registra la transición; llamar dentro de la transacción del cambio."""
    entry = ChangeLog.objects.create(
        actor=actor,
        action=action,
        entity_type=entity._meta.model_name,
        entity_id=str(entity.pk),
        before_json=before,
        after_json=after,
    )
    logger.info("%s %s:%s by %s", action, entry.entity_type, entry.entity_id, getattr(actor, "pk", None))
    return entry


def actor_for_user(user):
    """Devuelve el CompanyUser ligado al usuario autenticado."""
    company_user = getattr(user, "company_user", None) if user is not None else None
    if company_user is None or not company_user.is_active:
        raise AuthorizationError("No active company user for this account.")
    return company_user


def history(entity):
    return ChangeLog.objects.filter(
        entity_type=entity._meta.model_name, entity_id=str(entity.pk)
    ).order_by("created_at", "id")
