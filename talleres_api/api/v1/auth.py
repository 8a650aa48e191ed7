# talleres_api/api/v1/auth.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from talleres_api.api.deps import get_current_user, get_db
from talleres_api.api.responses import ok, perfil_para, usuario_basico
from talleres_api.core.errors import Conflict, Forbidden, ProfileNotFound, Unauthorized
from talleres_api.core.security_password import verify_and_maybe_upgrade
from talleres_api.core.tokens import create_access_token
from talleres_api.crud.usuario import usuario_crud
from talleres_api.models import TipoUsuario, Usuario
from talleres_api.schemas.auth import (
    ChangePasswordIn,
    CompleteProfileIn,
    LoginIn,
    RegisterIn,
    UpdateProfileIn,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _token_for(user: Usuario) -> str:
    return create_access_token(
        user_id=user.id, email=user.email, tipo_usuario=TipoUsuario(user.tipo_usuario).value
    )


@router.post("/login")
def login(body: LoginIn, db: Session = Depends(get_db)):
    user = usuario_crud.get_by_email(db, body.email)
    if user is None:
        raise Unauthorized("Email o contraseña incorrectos", error="Credenciales inválidas")
    if not user.activo:
        raise Unauthorized("Tu cuenta ha sido desactivada. Contacta al administrador", error="Cuenta desactivada")

    valid, new_hash = verify_and_maybe_upgrade(body.password, user.password_hash)
    if not valid:
        raise Unauthorized("Email o contraseña incorrectos", error="Credenciales inválidas")
    if new_hash:
        user.password_hash = new_hash
        db.add(user); db.commit()

    logger.info("Login exitoso: %s (%s)", user.email, TipoUsuario(user.tipo_usuario).value)
    return ok("Inicio de sesión exitoso", {"token": _token_for(user), "token_type": "bearer", "user": usuario_basico(user)})


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(body: RegisterIn, db: Session = Depends(get_db)):
    """Auto-registro de alumnos; el perfil queda pendiente de completar."""
    if usuario_crud.get_by_email(db, body.email) is not None:
        raise Conflict("Ya existe una cuenta con este email", code="EMAIL_IN_USE", error="Email ya registrado")

    user = usuario_crud.create_with_profile(
        db, email=body.email, password=body.password, tipo_usuario=TipoUsuario.alumno
    )
    logger.info("Registro de alumno: %s", user.email)
    return ok(
        "Registro exitoso. Completa tu perfil desde el dashboard.",
        {
            "token": _token_for(user),
            "token_type": "bearer",
            "user": {**usuario_basico(user), "perfilCompleto": False},
            "profile": {"id": user.perfil_alumno.id, "perfilCompleto": False},
        },
    )


@router.get("/verify")
def verify(user: Usuario = Depends(get_current_user)):
    return ok("Token válido", usuario_basico(user))


@router.post("/refresh")
def refresh(user: Usuario = Depends(get_current_user)):
    return ok("Token renovado exitosamente", {"token": _token_for(user), "token_type": "bearer", "user": usuario_basico(user)})


@router.put("/change-password")
def change_password(body: ChangePasswordIn, user: Usuario = Depends(get_current_user), db: Session = Depends(get_db)):
    valid, _ = verify_and_maybe_upgrade(body.currentPassword, user.password_hash)
    if not valid:
        raise Unauthorized("La contraseña actual no es correcta", error="Contraseña incorrecta")
    usuario_crud.set_password(db, user, body.newPassword)
    logger.info("Contraseña actualizada: %s", user.email)
    return ok("Contraseña actualizada exitosamente")


@router.post("/logout")
def logout(user: Usuario = Depends(get_current_user)):
    # el token es stateless; el cliente lo descarta
    logger.info("Logout: %s", user.email)
    return ok("Sesión cerrada exitosamente", note="Por favor, elimina el token del almacenamiento local")


@router.get("/profile")
def get_profile(user: Usuario = Depends(get_current_user)):
    return ok("Perfil obtenido exitosamente", perfil_para(user))


@router.put("/complete-profile")
def complete_profile(body: CompleteProfileIn, user: Usuario = Depends(get_current_user), db: Session = Depends(get_db)):
    if user.tipo_usuario != TipoUsuario.alumno:
        raise Forbidden("Esta funcionalidad es solo para alumnos")
    perfil = user.perfil_alumno
    if perfil is None:
        raise ProfileNotFound("No se encontró el perfil de alumno")
    if usuario_crud.numero_control_en_uso(db, body.numero_control, user.id):
        raise Conflict(
            "Ya existe otro estudiante con este número de control",
            code="NUMERO_CONTROL_IN_USE",
            error="Número de control en uso",
        )

    paterno, materno = body.split_apellidos()
    perfil.nombre = body.nombre
    perfil.apellido_paterno = paterno
    perfil.apellido_materno = materno
    perfil.numero_control = body.numero_control
    perfil.grupo = body.grupo
    perfil.semestre = body.semestre
    perfil.telefono = body.telefono
    perfil.fecha_nacimiento = body.fecha_nacimiento
    db.add(perfil); db.commit(); db.refresh(user)

    logger.info("Perfil completado: %s (%s)", user.email, perfil.numero_control)
    return ok("Perfil completado exitosamente", perfil_para(user))


_CAMPOS_ALUMNO = ("nombre", "apellido_paterno", "apellido_materno", "telefono",
                  "contacto_emergencia", "telefono_emergencia", "direccion")
_CAMPOS_INSTRUCTOR = _CAMPOS_ALUMNO + ("especialidad", "descripcion")


@router.put("/profile")
def update_profile(body: UpdateProfileIn, user: Usuario = Depends(get_current_user), db: Session = Depends(get_db)):
    role = TipoUsuario(user.tipo_usuario)
    if role == TipoUsuario.admin:
        raise Forbidden("Los administradores no pueden actualizar su perfil desde aquí")
    if role == TipoUsuario.instructor:
        perfil, campos = user.perfil_instructor, _CAMPOS_INSTRUCTOR
    else:
        perfil, campos = user.perfil_alumno, _CAMPOS_ALUMNO
    if perfil is None:
        raise ProfileNotFound("No se encontró el perfil del usuario")

    for campo in campos:
        setattr(perfil, campo, getattr(body, campo))
    db.add(perfil); db.commit(); db.refresh(user)

    logger.info("Perfil actualizado: %s", user.email)
    return ok("Perfil actualizado exitosamente", perfil_para(user))
