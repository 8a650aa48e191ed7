# talleres_api/api/v1/talleres.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from talleres_api.api.deps import get_admission, get_caller, get_database, get_db, require_roles
from talleres_api.api.responses import ok, page, taller_para, talleres_para
from talleres_api.core.authz import Action, Caller, authorize
from talleres_api.core.errors import Conflict, NotFound, ValidationFailed
from talleres_api.crud.inscripcion import inscripcion_crud
from talleres_api.crud.taller import taller_crud
from talleres_api.db.session import Database
from talleres_api.models import EstadoInscripcion, PerfilInstructor, TipoUsuario
from talleres_api.schemas.taller import (
    CAMPOS_RESTRINGIDOS_INSTRUCTOR,
    InscripcionIn,
    TallerCreate,
    TallerUpdate,
)
from talleres_api.services.admission import AdmissionController

logger = logging.getLogger(__name__)

router = APIRouter()


def _taller_no_encontrado() -> NotFound:
    return NotFound("No se encontró el taller especificado", code="WORKSHOP_NOT_FOUND", error="Taller no encontrado")


def _check_instructor(db: Session, instructor_id: Optional[int]) -> None:
    if instructor_id is not None and db.get(PerfilInstructor, instructor_id) is None:
        raise ValidationFailed("El instructor especificado no existe", code="INSTRUCTOR_NOT_FOUND")


# ---------------------------------------------------------------------------
# Listados
# ---------------------------------------------------------------------------
@router.get("/")
def list_talleres(
    categoria: Optional[str] = None,
    activo: Optional[bool] = True,
    search: Optional[str] = None,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    # solo el administrador puede listar talleres inactivos
    if not caller.is_admin:
        activo = True
    rows = taller_crud.find_all(db, categoria=categoria, activo=activo, search=search, limit=limit, offset=offset)
    return page("Talleres obtenidos exitosamente", talleres_para(caller, rows), limit=limit, offset=offset)


@router.get("/estadisticas")
def estadisticas(db: Session = Depends(get_db), _=Depends(require_roles(TipoUsuario.admin))):
    return ok("Estadísticas obtenidas exitosamente", taller_crud.stats(db))


@router.get("/mis-talleres")
def mis_talleres(db: Session = Depends(get_db), caller: Caller = Depends(require_roles(TipoUsuario.instructor))):
    rows = taller_crud.find_by_instructor(db, caller.require_profile())
    return ok("Talleres del instructor obtenidos exitosamente", talleres_para(caller, rows))


@router.get("/disponibles")
def disponibles(db: Session = Depends(get_db), caller: Caller = Depends(require_roles(TipoUsuario.alumno))):
    rows = taller_crud.disponibles_para_alumno(db, caller.require_profile())
    return ok("Talleres disponibles obtenidos exitosamente", talleres_para(caller, rows))


@router.get("/mis-inscripciones")
def mis_inscripciones(
    estado: Optional[EstadoInscripcion] = None,
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_roles(TipoUsuario.alumno)),
):
    rows = inscripcion_crud.find_by_alumno(db, caller.require_profile(), estado=estado, limit=limit, offset=offset)
    return page("Inscripciones obtenidas exitosamente", rows, limit=limit, offset=offset)


@router.get("/categoria/{categoria}")
def por_categoria(categoria: str, db: Session = Depends(get_db), caller: Caller = Depends(get_caller)):
    rows = taller_crud.find_by_categoria(db, categoria)
    return ok(f"Talleres de la categoría {categoria} obtenidos exitosamente", talleres_para(caller, rows))


@router.post("/inscripciones/{inscripcion_id}/cancelar")
def cancelar_inscripcion(
    inscripcion_id: int,
    admission: AdmissionController = Depends(get_admission),
    caller: Caller = Depends(require_roles(TipoUsuario.alumno, TipoUsuario.admin)),
):
    if caller.is_alumno:
        caller.require_profile()
    return ok("Inscripción cancelada exitosamente", admission.cancel(inscripcion_id, caller))


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------
@router.get("/{taller_id}")
def get_taller(taller_id: int, db: Session = Depends(get_db), caller: Caller = Depends(get_caller)):
    row = taller_crud.get_detalle(db, taller_id)
    if row is None:
        raise _taller_no_encontrado()
    return ok("Taller obtenido exitosamente", taller_para(caller, row))


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_taller(
    body: TallerCreate,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_roles(TipoUsuario.admin)),
):
    _check_instructor(db, body.instructor_id)
    taller = taller_crud.create(db, body)
    logger.info("Taller creado: %s (id=%s) por %s", taller.nombre, taller.id, caller.email)
    return ok("Taller creado exitosamente", taller_para(caller, taller_crud.get_detalle(db, taller.id)))


@router.put("/{taller_id}")
def update_taller(
    taller_id: int,
    body: TallerUpdate,
    database: Database = Depends(get_database),
    caller: Caller = Depends(require_roles(TipoUsuario.admin, TipoUsuario.instructor)),
):
    data = body.model_dump(exclude_unset=True)
    if caller.is_instructor:
        caller.require_profile()

    def work(session: Session):
        # misma fila que bloquea la inscripción: el cupo no cambia a mitad de una admisión
        taller = taller_crud.get_for_update(session, taller_id)
        if taller is None:
            raise _taller_no_encontrado()
        authorize(Action.UPDATE, taller, caller, "Solo puedes editar tus propios talleres")
        if caller.is_instructor:
            # solo el administrador cambia estos campos; al instructor se le ignoran
            ignorados = [k for k in CAMPOS_RESTRINGIDOS_INSTRUCTOR if k in data]
            for k in ignorados:
                del data[k]
            if ignorados:
                logger.info("Campos ignorados para %s en taller %s: %s", caller.email, taller_id, ", ".join(ignorados))

        if "cupo_maximo" in data:
            activos = inscripcion_crud.count_active(session, taller.id)
            if data["cupo_maximo"] < activos:
                raise Conflict(
                    f"El cupo no puede ser menor a las {activos} inscripciones activas",
                    code="CAPACITY_BELOW_ENROLLED",
                    details={"inscritos": activos},
                )
        if "instructor_id" in data:
            _check_instructor(session, data["instructor_id"])

        inicio = data.get("fecha_inicio", taller.fecha_inicio)
        fin = data.get("fecha_fin", taller.fecha_fin)
        if inicio and fin and fin < inicio:
            raise ValidationFailed("fecha_fin no puede ser anterior a fecha_inicio")

        taller_crud.update(session, taller, data, commit=False)
        return taller_crud.get_detalle(session, taller.id)

    row = database.run_in_transaction(work)
    logger.info("Taller actualizado: %s por %s", taller_id, caller.email)
    return ok("Taller actualizado exitosamente", taller_para(caller, row))


@router.delete("/{taller_id}")
def delete_taller(
    taller_id: int,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_roles(TipoUsuario.admin)),
):
    if taller_crud.remove(db, taller_id) is None:
        raise _taller_no_encontrado()
    logger.info("Taller eliminado: %s por %s", taller_id, caller.email)
    return ok("Taller eliminado exitosamente")


@router.get("/{taller_id}/alumnos")
def alumnos_inscritos(
    taller_id: int,
    search: Optional[str] = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_roles(TipoUsuario.admin, TipoUsuario.instructor)),
):
    taller = taller_crud.get(db, taller_id)
    if taller is None:
        raise _taller_no_encontrado()
    if caller.is_instructor:
        caller.require_profile()
    authorize(Action.MANAGE, taller, caller, "Solo puedes ver los alumnos de tus talleres")

    rows = inscripcion_crud.alumnos_inscritos(db, taller_id, search=search, limit=limit, offset=offset)
    return page(
        "Alumnos inscritos obtenidos exitosamente",
        rows,
        limit=limit,
        offset=offset,
        taller={"id": taller.id, "nombre": taller.nombre, "categoria": taller.categoria},
    )


# ---------------------------------------------------------------------------
# Inscripción
# ---------------------------------------------------------------------------
@router.get("/{taller_id}/puede-inscribirse")
def puede_inscribirse(
    taller_id: int,
    db: Session = Depends(get_db),
    admission: AdmissionController = Depends(get_admission),
    caller: Caller = Depends(require_roles(TipoUsuario.alumno)),
):
    verdict = admission.can_enroll(db, caller.require_profile(), taller_id)
    return ok("Elegibilidad verificada", verdict.to_dict())


@router.post("/{taller_id}/inscribirse", status_code=status.HTTP_201_CREATED)
def inscribirse(
    taller_id: int,
    body: Optional[InscripcionIn] = None,
    admission: AdmissionController = Depends(get_admission),
    caller: Caller = Depends(require_roles(TipoUsuario.alumno)),
):
    comentarios = body.comentarios if body else None
    inscripcion = admission.enroll(caller.require_profile(), taller_id, comentarios)
    return ok("Inscripción realizada exitosamente", inscripcion)


@router.get("/{taller_id}/cupo")
def verificar_cupo(taller_id: int, db: Session = Depends(get_db), _: Caller = Depends(get_caller)):
    libres = taller_crud.cupo_disponible(db, taller_id)
    data = {"taller_id": taller_id, "cupos_disponibles": libres, "tiene_cupo": libres > 0}
    if libres == -1:
        raise NotFound("El taller no existe o está inactivo", code="WORKSHOP_NOT_FOUND",
                       error="Taller no encontrado", details=data)
    return ok("Cupo verificado exitosamente", data)
