# talleres_api/api/v1/avisos.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from talleres_api.api.deps import get_caller, get_db, require_roles
from talleres_api.api.responses import ok, page
from talleres_api.core.authz import Action, Caller, authorize
from talleres_api.core.errors import NotFound
from talleres_api.crud.aviso import aviso_crud
from talleres_api.crud.taller import taller_crud
from talleres_api.models import TipoUsuario
from talleres_api.schemas.aviso import AvisoCreate, AvisoUpdate

logger = logging.getLogger(__name__)

router = APIRouter()

_gestores = require_roles(TipoUsuario.admin, TipoUsuario.instructor)


def _aviso_no_encontrado() -> NotFound:
    return NotFound("No se encontró el aviso especificado", error="Aviso no encontrado")


def _propios(caller: Caller) -> Optional[int]:
    """Los instructores solo ven lo suyo; el admin todo."""
    return caller.require_profile() if caller.is_instructor else None


@router.get("/taller/{taller_id}")
def avisos_por_taller(
    taller_id: int,
    include_expired: bool = Query(False, alias="includeExpired"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    _: Caller = Depends(get_caller),
):
    rows = aviso_crud.find_by_taller(db, taller_id, include_expired=include_expired, limit=limit, offset=offset)
    return page("Avisos obtenidos exitosamente", rows, limit=limit, offset=offset)


@router.get("/alumno")
def avisos_para_alumno(
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_roles(TipoUsuario.alumno)),
):
    rows = aviso_crud.para_alumno(db, caller.require_profile(), limit=limit, offset=offset)
    return page("Avisos obtenidos exitosamente", rows, limit=limit, offset=offset)


@router.get("/mis-avisos")
def mis_avisos(
    activo: Optional[bool] = None,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_roles(TipoUsuario.instructor)),
):
    rows = aviso_crud.find_by_instructor(db, caller.require_profile(), activo=activo, limit=limit, offset=offset)
    return page("Avisos obtenidos exitosamente", rows, limit=limit, offset=offset)


@router.get("/importantes")
def avisos_importantes(
    taller_id: Optional[int] = Query(None, alias="tallerId"),
    db: Session = Depends(get_db),
    _: Caller = Depends(get_caller),
):
    return ok("Avisos importantes obtenidos exitosamente", aviso_crud.importantes(db, taller_id))


@router.get("/buscar")
def buscar_avisos(
    q: str = Query(..., min_length=1),
    taller_id: Optional[int] = Query(None, alias="tallerId"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    instructor_id = caller.profile_id if caller.is_instructor else None
    rows = aviso_crud.search(db, q, taller_id=taller_id, instructor_id=instructor_id, limit=limit, offset=offset)
    return page("Búsqueda de avisos completada", rows, limit=limit, offset=offset, searchTerm=q)


@router.get("/estadisticas")
def estadisticas(db: Session = Depends(get_db), caller: Caller = Depends(_gestores)):
    return ok("Estadísticas de avisos obtenidas exitosamente", aviso_crud.stats(db, _propios(caller)))


@router.get("/proximos-a-expirar")
def proximos_a_expirar(
    days: int = Query(3, ge=1, le=365),
    db: Session = Depends(get_db),
    caller: Caller = Depends(_gestores),
):
    rows = aviso_crud.proximos_a_expirar(db, days, _propios(caller))
    return ok("Avisos próximos a expirar obtenidos exitosamente", rows, days=days)


@router.get("/{aviso_id}")
def get_aviso(aviso_id: int, db: Session = Depends(get_db), caller: Caller = Depends(get_caller)):
    aviso = aviso_crud.get(db, aviso_id)
    if aviso is None:
        raise _aviso_no_encontrado()
    authorize(Action.READ, aviso, caller, "Solo puedes ver tus propios avisos")
    return ok("Aviso obtenido exitosamente", aviso_crud.get_detalle(db, aviso_id))


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_aviso(
    body: AvisoCreate,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_roles(TipoUsuario.instructor)),
):
    instructor_id = caller.require_profile()
    taller = taller_crud.get(db, body.taller_id)
    if taller is None:
        raise NotFound("No se encontró el taller especificado", error="Taller no encontrado")
    authorize(Action.MANAGE, taller, caller, "Solo puedes crear avisos en tus talleres asignados")

    aviso = aviso_crud.create(db, body, extra={"instructor_id": instructor_id})
    logger.info('Aviso creado: "%s" por %s en taller %s', aviso.titulo, caller.email, taller.id)
    return ok("Aviso creado exitosamente", aviso_crud.get_detalle(db, aviso.id))


@router.put("/{aviso_id}")
def update_aviso(
    aviso_id: int,
    body: AvisoUpdate,
    db: Session = Depends(get_db),
    caller: Caller = Depends(_gestores),
):
    aviso = aviso_crud.get(db, aviso_id)
    if aviso is None:
        raise _aviso_no_encontrado()
    if caller.is_instructor:
        caller.require_profile()
    authorize(Action.UPDATE, aviso, caller, "Solo puedes editar tus propios avisos")

    aviso_crud.update(db, aviso, body)
    logger.info("Aviso actualizado: %s por %s", aviso_id, caller.email)
    return ok("Aviso actualizado exitosamente", aviso_crud.get_detalle(db, aviso_id))


@router.delete("/{aviso_id}")
def delete_aviso(aviso_id: int, db: Session = Depends(get_db), caller: Caller = Depends(_gestores)):
    aviso = aviso_crud.get(db, aviso_id)
    if aviso is None:
        raise _aviso_no_encontrado()
    if caller.is_instructor:
        caller.require_profile()
    authorize(Action.DELETE, aviso, caller, "Solo puedes eliminar tus propios avisos")

    aviso_crud.remove(db, aviso_id)
    logger.info("Aviso eliminado: %s por %s", aviso_id, caller.email)
    return ok("Aviso eliminado exitosamente")
