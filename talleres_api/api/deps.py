from typing import Generator, Optional

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from talleres_api.core.authz import Caller, find_instructor_profile, find_student_profile
from talleres_api.core.errors import Forbidden, Unauthorized
from talleres_api.core.tokens import decode_access
from talleres_api.db.session import Database
from talleres_api.models import TipoUsuario, Usuario
from talleres_api.services.admission import AdmissionController


def get_database(request: Request) -> Database:
    return request.app.state.db


def get_db(database: Database = Depends(get_database)) -> Generator[Session, None, None]:
    yield from database.session()


def get_admission(database: Database = Depends(get_database)) -> AdmissionController:
    return AdmissionController(database)


# ----------------------------------------------------------------------
# Lee el Bearer del header Authorization (sin OAuth2PasswordBearer)
# ----------------------------------------------------------------------
def get_bearer_token(authorization: Optional[str] = Header(None, alias="Authorization")) -> str:
    if not authorization:
        raise Unauthorized("Se requiere el header Authorization", error="Token requerido")
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise Unauthorized("Formato de Authorization inválido", error="Token inválido")
    return parts[1]


def get_current_user(token: str = Depends(get_bearer_token), db: Session = Depends(get_db)) -> Usuario:
    payload = decode_access(token)
    if payload is None:
        raise Unauthorized("El token es inválido o ha expirado", error="Token inválido")
    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise Unauthorized("El token es inválido o ha expirado", error="Token inválido") from None

    user = db.get(Usuario, user_id)
    if user is None:
        raise Unauthorized("El usuario asociado al token no existe", error="Usuario no encontrado")
    if not user.activo:
        raise Unauthorized("Tu cuenta ha sido desactivada. Contacta al administrador", error="Cuenta desactivada")
    return user


# ----------------------------------------------------------------------
# Identidad + perfil resuelto; el perfil puede faltar (404 al usarlo)
# ----------------------------------------------------------------------
def get_caller(user: Usuario = Depends(get_current_user), db: Session = Depends(get_db)) -> Caller:
    role = TipoUsuario(user.tipo_usuario)
    profile_id = None
    if role == TipoUsuario.instructor:
        profile_id = find_instructor_profile(db, user.id)
    elif role == TipoUsuario.alumno:
        profile_id = find_student_profile(db, user.id)
    return Caller(user_id=user.id, email=user.email, role=role, profile_id=profile_id)


_ROLE_MESSAGES = {
    (TipoUsuario.alumno,): "Esta funcionalidad es solo para alumnos",
    (TipoUsuario.instructor,): "Esta funcionalidad es solo para instructores",
    (TipoUsuario.admin,): "Esta funcionalidad es solo para administradores",
}


def require_roles(*roles: TipoUsuario):
    allowed = set(roles)
    message = _ROLE_MESSAGES.get(tuple(roles), "No tienes permiso para realizar esta acción")

    def dep(caller: Caller = Depends(get_caller)) -> Caller:
        if caller.role not in allowed:
            raise Forbidden(message)
        return caller
    return dep
