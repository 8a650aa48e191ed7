# talleres_api/api/v1/calendario.py
from __future__ import annotations

import logging
from datetime import date, datetime, time, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from talleres_api.api.deps import get_caller, get_db, require_roles
from talleres_api.api.responses import ok, page
from talleres_api.core.authz import Action, Caller, authorize
from talleres_api.core.errors import NotFound, ValidationFailed
from talleres_api.crud.calendario import calendario_crud
from talleres_api.crud.taller import taller_crud
from talleres_api.models import TipoEvento, TipoUsuario
from talleres_api.schemas.calendario import FechaCreate, FechaUpdate

logger = logging.getLogger(__name__)

router = APIRouter()

_gestores = require_roles(TipoUsuario.admin, TipoUsuario.instructor)


def _inicio(d: Optional[date]) -> Optional[datetime]:
    return datetime.combine(d, time.min, tzinfo=timezone.utc) if d else None


def _fin(d: Optional[date]) -> Optional[datetime]:
    return datetime.combine(d, time.max, tzinfo=timezone.utc) if d else None


def _fecha_no_encontrada() -> NotFound:
    return NotFound("No se encontró la fecha importante especificada", error="Fecha no encontrada")


@router.get("/taller/{taller_id}")
def fechas_por_taller(
    taller_id: int,
    fecha_inicio: Optional[date] = Query(None, alias="fechaInicio"),
    fecha_fin: Optional[date] = Query(None, alias="fechaFin"),
    tipo_evento: Optional[TipoEvento] = Query(None, alias="tipoEvento"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    _: Caller = Depends(get_caller),
):
    rows = calendario_crud.find_by_taller(
        db, taller_id, desde=_inicio(fecha_inicio), hasta=_fin(fecha_fin),
        tipo_evento=tipo_evento, limit=limit, offset=offset,
    )
    return page("Fechas importantes obtenidas exitosamente", rows, limit=limit, offset=offset)


@router.get("/mis-fechas")
def mis_fechas(
    fecha_inicio: Optional[date] = Query(None, alias="fechaInicio"),
    fecha_fin: Optional[date] = Query(None, alias="fechaFin"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_roles(TipoUsuario.instructor)),
):
    rows = calendario_crud.find_by_instructor(
        db, caller.require_profile(), desde=_inicio(fecha_inicio), hasta=_fin(fecha_fin), limit=limit, offset=offset
    )
    return page("Fechas importantes obtenidas exitosamente", rows, limit=limit, offset=offset)


@router.get("/proximos")
def proximos(
    dias: int = Query(30, ge=1, le=365),
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_roles(TipoUsuario.alumno)),
):
    rows = calendario_crud.proximos_para_alumno(db, caller.require_profile(), dias)
    return ok("Eventos próximos obtenidos exitosamente", rows, dias=dias)


@router.get("/mensual")
def calendario_mensual(
    taller_id: int = Query(..., alias="tallerId"),
    year: int = Query(..., ge=2000, le=2100),
    month: int = Query(..., ge=1, le=12),
    db: Session = Depends(get_db),
    _: Caller = Depends(get_caller),
):
    rows = calendario_crud.mensual(db, taller_id, year, month)
    return ok("Calendario mensual obtenido exitosamente", rows, year=year, month=month, tallerId=taller_id)


@router.get("/hoy")
def eventos_hoy(
    taller_id: Optional[int] = Query(None, alias="tallerId"),
    db: Session = Depends(get_db),
    _: Caller = Depends(get_caller),
):
    return ok("Eventos de hoy obtenidos exitosamente", calendario_crud.hoy(db, taller_id))


@router.get("/tipo/{tipo}")
def eventos_por_tipo(
    tipo: TipoEvento,
    taller_id: Optional[int] = Query(None, alias="tallerId"),
    fecha_inicio: Optional[date] = Query(None, alias="fechaInicio"),
    fecha_fin: Optional[date] = Query(None, alias="fechaFin"),
    limit: int = Query(20, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    _: Caller = Depends(get_caller),
):
    rows = calendario_crud.por_tipo(
        db, tipo, taller_id=taller_id, desde=_inicio(fecha_inicio), hasta=_fin(fecha_fin), limit=limit, offset=offset
    )
    return page(f'Eventos de tipo "{tipo.value}" obtenidos exitosamente', rows, limit=limit, offset=offset, tipo=tipo.value)


@router.get("/buscar")
def buscar_eventos(
    q: str = Query(..., min_length=1),
    taller_id: Optional[int] = Query(None, alias="tallerId"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    instructor_id = caller.profile_id if caller.is_instructor else None
    rows = calendario_crud.search(db, q, taller_id=taller_id, instructor_id=instructor_id, limit=limit, offset=offset)
    return page("Búsqueda de eventos completada", rows, limit=limit, offset=offset, searchTerm=q)


@router.get("/estadisticas")
def estadisticas(db: Session = Depends(get_db), caller: Caller = Depends(_gestores)):
    instructor_id = caller.require_profile() if caller.is_instructor else None
    return ok("Estadísticas de eventos obtenidas exitosamente", calendario_crud.stats(db, instructor_id))


@router.get("/rango")
def calendario_rango(
    fecha_inicio: date = Query(..., alias="fechaInicio"),
    fecha_fin: date = Query(..., alias="fechaFin"),
    taller_id: Optional[int] = Query(None, alias="tallerId"),
    db: Session = Depends(get_db),
    _: Caller = Depends(get_caller),
):
    if fecha_fin < fecha_inicio:
        raise ValidationFailed("fechaFin no puede ser anterior a fechaInicio")
    dias = calendario_crud.rango(db, _inicio(fecha_inicio), _fin(fecha_fin), taller_id)
    return ok(
        "Calendario de rango obtenido exitosamente",
        dias,
        fechaInicio=fecha_inicio,
        fechaFin=fecha_fin,
        tallerId=taller_id,
    )


@router.get("/{fecha_id}")
def get_fecha(fecha_id: int, db: Session = Depends(get_db), caller: Caller = Depends(get_caller)):
    fecha = calendario_crud.get(db, fecha_id)
    if fecha is None:
        raise _fecha_no_encontrada()
    authorize(Action.READ, fecha, caller, "Solo puedes ver tus propias fechas importantes")
    return ok("Fecha importante obtenida exitosamente", calendario_crud.get_detalle(db, fecha_id))


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_fecha(
    body: FechaCreate,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_roles(TipoUsuario.instructor)),
):
    instructor_id = caller.require_profile()
    taller = taller_crud.get(db, body.taller_id)
    if taller is None:
        raise NotFound("No se encontró el taller especificado", error="Taller no encontrado")
    authorize(Action.MANAGE, taller, caller, "Solo puedes crear fechas importantes en tus talleres asignados")

    fecha = calendario_crud.create(db, body, extra={"instructor_id": instructor_id})
    logger.info('Fecha importante creada: "%s" por %s en taller %s', fecha.titulo, caller.email, taller.id)
    return ok("Fecha importante creada exitosamente", calendario_crud.get_detalle(db, fecha.id))


@router.put("/{fecha_id}")
def update_fecha(
    fecha_id: int,
    body: FechaUpdate,
    db: Session = Depends(get_db),
    caller: Caller = Depends(_gestores),
):
    fecha = calendario_crud.get(db, fecha_id)
    if fecha is None:
        raise _fecha_no_encontrada()
    if caller.is_instructor:
        caller.require_profile()
    authorize(Action.UPDATE, fecha, caller, "Solo puedes editar tus propias fechas importantes")

    calendario_crud.update(db, fecha, body)
    logger.info("Fecha importante actualizada: %s por %s", fecha_id, caller.email)
    return ok("Fecha importante actualizada exitosamente", calendario_crud.get_detalle(db, fecha_id))


@router.delete("/{fecha_id}")
def delete_fecha(fecha_id: int, db: Session = Depends(get_db), caller: Caller = Depends(_gestores)):
    fecha = calendario_crud.get(db, fecha_id)
    if fecha is None:
        raise _fecha_no_encontrada()
    if caller.is_instructor:
        caller.require_profile()
    authorize(Action.DELETE, fecha, caller, "Solo puedes eliminar tus propias fechas importantes")

    calendario_crud.remove(db, fecha_id)
    logger.info("Fecha importante eliminada: %s por %s", fecha_id, caller.email)
    return ok("Fecha importante eliminada exitosamente")
