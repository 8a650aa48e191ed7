# talleres_api/api/responses.py
"""
Forma de las respuestas.

Éxito: ``{message, data, pagination?}``; ``pagination.total`` es el tamaño de
la página devuelta, no el total de registros. Los campos que dependen del rol
del usuario se deciden aquí y no en cada router.
"""
from typing import Any, Dict, List

from talleres_api.core.authz import Caller
from talleres_api.models import TipoUsuario, Usuario
from talleres_api.schemas.common import Pagination


def ok(message: str, data: Any = None, **extra: Any) -> Dict[str, Any]:
    body: Dict[str, Any] = {"message": message, "data": data}
    body.update(extra)
    return body


def page(message: str, rows: List[Any], *, limit: int, offset: int, **extra: Any) -> Dict[str, Any]:
    body = ok(message, rows, **extra)
    body["pagination"] = Pagination(limit=limit, offset=offset, total=len(rows)).model_dump()
    return body


# --------------------------------------------------------------------------- #
# Talleres
# --------------------------------------------------------------------------- #

_TALLER_PUBLICO = (
    "id", "nombre", "descripcion", "categoria", "cupo_maximo", "horario", "ubicacion",
    "activo", "instructor_nombre", "fecha_inicio", "fecha_fin", "cupos_disponibles",
)
_TALLER_GESTION = ("inscritos", "instructor_id", "created_at", "updated_at")


def taller_para(caller: Caller, row: Dict[str, Any]) -> Dict[str, Any]:
    """Admin y el instructor dueño ven también ocupación y metadatos."""
    out = {k: row[k] for k in _TALLER_PUBLICO}
    if caller.is_admin or (caller.is_instructor and caller.profile_id is not None
                           and row["instructor_id"] == caller.profile_id):
        out.update({k: row[k] for k in _TALLER_GESTION})
    return out


def talleres_para(caller: Caller, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [taller_para(caller, r) for r in rows]


# --------------------------------------------------------------------------- #
# Usuarios / perfiles
# --------------------------------------------------------------------------- #

def usuario_basico(user: Usuario) -> Dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "tipo_usuario": TipoUsuario(user.tipo_usuario).value,
        "activo": user.activo,
        "fecha_registro": user.fecha_registro,
    }


def perfil_completo(user: Usuario) -> bool:
    perfil = user.perfil_alumno
    return perfil is not None and not perfil.numero_control.startswith("TEMP_")


def perfil_para(user: Usuario) -> Dict[str, Any]:
    data = usuario_basico(user)
    role = TipoUsuario(user.tipo_usuario)
    if role == TipoUsuario.alumno and user.perfil_alumno is not None:
        p = user.perfil_alumno
        data["perfil"] = {
            "id": p.id,
            "nombre": p.nombre,
            "apellido_paterno": p.apellido_paterno,
            "apellido_materno": p.apellido_materno,
            "numero_control": p.numero_control,
            "grupo": p.grupo,
            "semestre": p.semestre,
            "telefono": p.telefono,
            "fecha_nacimiento": p.fecha_nacimiento,
            "contacto_emergencia": p.contacto_emergencia,
            "telefono_emergencia": p.telefono_emergencia,
            "direccion": p.direccion,
        }
        data["perfilCompleto"] = perfil_completo(user)
    elif role == TipoUsuario.instructor and user.perfil_instructor is not None:
        p = user.perfil_instructor
        data["perfil"] = {
            "id": p.id,
            "nombre": p.nombre,
            "apellido_paterno": p.apellido_paterno,
            "apellido_materno": p.apellido_materno,
            "especialidad": p.especialidad,
            "telefono": p.telefono,
            "descripcion": p.descripcion,
            "contacto_emergencia": p.contacto_emergencia,
            "telefono_emergencia": p.telefono_emergencia,
            "direccion": p.direccion,
        }
    return data

