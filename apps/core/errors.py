# apps/core/errors.py
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status
from rest_framework.exceptions import APIException


class WorkflowError(APIException):
    """Base de los errores que la capa de servicios entrega al llamador."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Workflow error."
    default_code = "workflow_error"


class ValidationError(WorkflowError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input."
    default_code = "validation_error"


class AuthorizationError(WorkflowError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Access denied."
    default_code = "authorization_error"


class NotFound(WorkflowError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    default_code = "not_found"


class StateConflict(WorkflowError):
    """Operación ilegal en el estado actual; el llamador debe refrescar antes de reintentar."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Operation not allowed in the current state."
    default_code = "state_conflict"


def get_or_404(queryset, message: str, **lookup):
    try:
        return queryset.get(**lookup)
    except (queryset.model.DoesNotExist, ValueError, DjangoValidationError):
        raise NotFound(message)
