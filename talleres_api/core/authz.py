# talleres_api/core/authz.py
"""
Autorización por rol y propiedad del recurso.

``Caller`` es la identidad ya autenticada (rol + perfil resuelto). Todas las
comprobaciones de "el instructor es dueño del taller/aviso/fecha" o "el alumno
es dueño de su inscripción" pasan por ``authorize``.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from talleres_api.core.errors import Forbidden, ProfileNotFound
from talleres_api.models import (
    Aviso,
    FechaImportante,
    InformacionEmergencia,
    Inscripcion,
    PerfilAlumno,
    PerfilInstructor,
    Taller,
    TipoUsuario,
)


class Action(str, Enum):
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    MANAGE = "manage"  # p.ej. ver alumnos inscritos, publicar en el taller


@dataclass(frozen=True)
class Caller:
    user_id: int
    email: str
    role: TipoUsuario
    # perfiles_instructor.id o perfiles_alumno.id según el rol
    profile_id: Optional[int] = None

    @property
    def is_admin(self) -> bool:
        return self.role == TipoUsuario.admin

    @property
    def is_instructor(self) -> bool:
        return self.role == TipoUsuario.instructor

    @property
    def is_alumno(self) -> bool:
        return self.role == TipoUsuario.alumno

    def require_profile(self) -> int:
        if self.profile_id is None:
            raise ProfileNotFound(f"No se encontró el perfil de {TipoUsuario(self.role).value}")
        return self.profile_id


# --------------------------------------------------------------------------- #
# Resolución de perfiles
# --------------------------------------------------------------------------- #

def find_instructor_profile(db: Session, user_id: int) -> Optional[int]:
    return db.execute(
        select(PerfilInstructor.id).where(PerfilInstructor.usuario_id == user_id)
    ).scalar_one_or_none()


def find_student_profile(db: Session, user_id: int) -> Optional[int]:
    return db.execute(
        select(PerfilAlumno.id).where(PerfilAlumno.usuario_id == user_id)
    ).scalar_one_or_none()


# --------------------------------------------------------------------------- #
# Propiedad
# --------------------------------------------------------------------------- #

def authorize_ownership(role: TipoUsuario, resource_owner_id: Optional[int], caller_profile_id: Optional[int]) -> bool:
    if role == TipoUsuario.admin:
        return True
    if resource_owner_id is None or caller_profile_id is None:
        return False
    return resource_owner_id == caller_profile_id


_OWNERS = {
    Taller: (TipoUsuario.instructor, "instructor_id"),
    Aviso: (TipoUsuario.instructor, "instructor_id"),
    FechaImportante: (TipoUsuario.instructor, "instructor_id"),
    Inscripcion: (TipoUsuario.alumno, "alumno_id"),
    InformacionEmergencia: (TipoUsuario.alumno, "alumno_id"),
}


def _owner_of(resource) -> Tuple[TipoUsuario, Optional[int]]:
    try:
        owner_role, field = _OWNERS[type(resource)]
    except KeyError:
        raise TypeError(f"Recurso sin regla de propiedad: {type(resource).__name__}") from None
    return owner_role, getattr(resource, field)


def can(action: Action, resource, caller: Caller) -> bool:
    if caller.is_admin:
        return True
    owner_role, owner_id = _owner_of(resource)
    # el contenido publicado de un taller es visible para los alumnos
    if action is Action.READ and owner_role is TipoUsuario.instructor and caller.is_alumno:
        return True
    if caller.role != owner_role:
        return False
    return authorize_ownership(caller.role, owner_id, caller.profile_id)


def authorize(action: Action, resource, caller: Caller, message: Optional[str] = None) -> None:
    if not can(action, resource, caller):
        raise Forbidden(message or "No tienes permiso sobre este recurso")
