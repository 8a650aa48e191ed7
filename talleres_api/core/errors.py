# talleres_api/core/errors.py
"""
Errores de dominio.

Los servicios lanzan estas excepciones directamente; el manejador registrado
en ``main.py`` las traduce a HTTP usando ``ErrorKind``. Nunca se decide el
status a partir del texto del mensaje.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"
    VALIDATION = "validation"
    UNAUTHORIZED = "unauthorized"
    INTERNAL = "internal"


HTTP_STATUS = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.CONFLICT: 409,
    ErrorKind.VALIDATION: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.INTERNAL: 500,
}


class AppError(Exception):
    kind: ErrorKind = ErrorKind.INTERNAL
    code: str = "INTERNAL_ERROR"
    error: str = "Error interno del servidor"

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        error: Optional[str] = None,
        details: Any = None,
    ):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        if error:
            self.error = error
        self.details = details

    @property
    def status_code(self) -> int:
        return HTTP_STATUS[self.kind]

    def to_body(self) -> dict:
        body = {"error": self.error, "code": self.code, "message": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class NotFound(AppError):
    kind = ErrorKind.NOT_FOUND
    code = "NOT_FOUND"
    error = "No encontrado"


class Forbidden(AppError):
    kind = ErrorKind.FORBIDDEN
    code = "FORBIDDEN"
    error = "Acceso denegado"


class Conflict(AppError):
    kind = ErrorKind.CONFLICT
    code = "CONFLICT"
    error = "Conflicto"


class ValidationFailed(AppError):
    kind = ErrorKind.VALIDATION
    code = "VALIDATION_ERROR"
    error = "Datos inválidos"


class Unauthorized(AppError):
    kind = ErrorKind.UNAUTHORIZED
    code = "UNAUTHORIZED"
    error = "No autenticado"


class ProfileNotFound(NotFound):
    code = "PROFILE_NOT_FOUND"
    error = "Perfil no encontrado"


# --------------------------------------------------------------------------- #
# Inscripciones
# --------------------------------------------------------------------------- #

class EligibilityReason(str, Enum):
    WORKSHOP_NOT_FOUND = "WORKSHOP_NOT_FOUND"
    WORKSHOP_INACTIVE = "WORKSHOP_INACTIVE"
    ALREADY_ENROLLED = "ALREADY_ENROLLED"
    NO_CAPACITY = "NO_CAPACITY"


REASON_MESSAGES = {
    EligibilityReason.WORKSHOP_NOT_FOUND: "El taller no existe",
    EligibilityReason.WORKSHOP_INACTIVE: "El taller no está activo",
    EligibilityReason.ALREADY_ENROLLED: "El alumno ya está inscrito en este taller",
    EligibilityReason.NO_CAPACITY: "El taller no tiene cupos disponibles",
}

_REASON_KIND = {
    EligibilityReason.WORKSHOP_NOT_FOUND: (ErrorKind.NOT_FOUND, "Taller no encontrado"),
    EligibilityReason.WORKSHOP_INACTIVE: (ErrorKind.VALIDATION, "No se puede inscribir"),
    EligibilityReason.ALREADY_ENROLLED: (ErrorKind.CONFLICT, "Ya inscrito"),
    EligibilityReason.NO_CAPACITY: (ErrorKind.CONFLICT, "Sin cupos"),
}


class EnrollmentRejected(AppError):
    """El alumno no puede inscribirse; ``reason`` indica por qué."""

    def __init__(self, reason: EligibilityReason, details: Any = None):
        self.reason = reason
        self.kind, error = _REASON_KIND[reason]
        super().__init__(REASON_MESSAGES[reason], code=reason.value, error=error, details=details)


# --------------------------------------------------------------------------- #
# Persistencia
# --------------------------------------------------------------------------- #

class QueryError(AppError):
    code = "QUERY_ERROR"

    def __init__(self, message: str, *, db_code: Optional[str] = None):
        super().__init__(message)
        self.db_code = db_code


class QueryTimeout(QueryError):
    code = "QUERY_TIMEOUT"
