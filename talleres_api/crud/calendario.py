# talleres_api/crud/calendario.py
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import select, func, case
from sqlalchemy.orm import Session

from talleres_api.crud.base import CRUDBase
from talleres_api.models import EstadoInscripcion, FechaImportante, Inscripcion, Taller, TipoEvento
from talleres_api.schemas.calendario import FechaCreate, FechaOut, FechaUpdate
from talleres_api.schemas.common import to_utc, utcnow


def _listado_stmt():
    return select(FechaImportante, Taller.nombre).join(Taller, Taller.id == FechaImportante.taller_id)


def _to_out(fecha: FechaImportante, taller_nombre: Optional[str]) -> Dict[str, Any]:
    out = FechaOut.model_validate(fecha)
    out.taller_nombre = taller_nombre
    return out.model_dump()


def _en_rango(stmt, desde: Optional[datetime], hasta: Optional[datetime]):
    if desde is not None:
        stmt = stmt.where(FechaImportante.fecha_evento >= to_utc(desde))
    if hasta is not None:
        stmt = stmt.where(FechaImportante.fecha_evento <= to_utc(hasta))
    return stmt


def _cronologico(stmt):
    return stmt.order_by(FechaImportante.fecha_evento, FechaImportante.id)


class CRUDCalendario(CRUDBase[FechaImportante, FechaCreate, FechaUpdate]):
    def get_detalle(self, db: Session, fecha_id: int) -> Optional[Dict[str, Any]]:
        row = db.execute(_listado_stmt().where(FechaImportante.id == fecha_id)).first()
        return _to_out(*row) if row else None

    def find_by_taller(
        self,
        db: Session,
        taller_id: int,
        *,
        desde: Optional[datetime] = None,
        hasta: Optional[datetime] = None,
        tipo_evento: Optional[TipoEvento] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        stmt = _en_rango(_listado_stmt().where(FechaImportante.taller_id == taller_id), desde, hasta)
        if tipo_evento is not None:
            stmt = stmt.where(FechaImportante.tipo_evento == tipo_evento)
        stmt = _cronologico(stmt).offset(offset).limit(limit)
        return [_to_out(*r) for r in db.execute(stmt).all()]

    def find_by_instructor(
        self,
        db: Session,
        instructor_id: int,
        *,
        desde: Optional[datetime] = None,
        hasta: Optional[datetime] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        stmt = _en_rango(_listado_stmt().where(FechaImportante.instructor_id == instructor_id), desde, hasta)
        stmt = _cronologico(stmt).offset(offset).limit(limit)
        return [_to_out(*r) for r in db.execute(stmt).all()]

    def proximos_para_alumno(self, db: Session, alumno_id: int, dias: int = 30) -> List[Dict[str, Any]]:
        """Eventos de los próximos ``dias`` en los talleres donde el alumno está inscrito."""
        now = utcnow()
        inscritos = select(Inscripcion.taller_id).where(
            Inscripcion.alumno_id == alumno_id, Inscripcion.estado == EstadoInscripcion.activa
        )
        stmt = _en_rango(
            _listado_stmt().where(FechaImportante.taller_id.in_(inscritos)), now, now + timedelta(days=dias)
        )
        return [_to_out(*r) for r in db.execute(_cronologico(stmt)).all()]

    def mensual(self, db: Session, taller_id: int, year: int, month: int) -> List[Dict[str, Any]]:
        inicio = datetime(year, month, 1, tzinfo=timezone.utc)
        fin = datetime(year + 1, 1, 1, tzinfo=timezone.utc) if month == 12 else datetime(year, month + 1, 1, tzinfo=timezone.utc)
        stmt = _listado_stmt().where(
            FechaImportante.taller_id == taller_id,
            FechaImportante.fecha_evento >= inicio,
            FechaImportante.fecha_evento < fin,
        )
        return [_to_out(*r) for r in db.execute(_cronologico(stmt)).all()]

    def hoy(self, db: Session, taller_id: Optional[int] = None) -> List[Dict[str, Any]]:
        inicio = utcnow().replace(hour=0, minute=0, second=0, microsecond=0)
        stmt = _listado_stmt().where(
            FechaImportante.fecha_evento >= inicio,
            FechaImportante.fecha_evento < inicio + timedelta(days=1),
        )
        if taller_id is not None:
            stmt = stmt.where(FechaImportante.taller_id == taller_id)
        return [_to_out(*r) for r in db.execute(_cronologico(stmt)).all()]

    def por_tipo(
        self,
        db: Session,
        tipo: TipoEvento,
        *,
        taller_id: Optional[int] = None,
        desde: Optional[datetime] = None,
        hasta: Optional[datetime] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        stmt = _en_rango(_listado_stmt().where(FechaImportante.tipo_evento == tipo), desde, hasta)
        if taller_id is not None:
            stmt = stmt.where(FechaImportante.taller_id == taller_id)
        stmt = _cronologico(stmt).offset(offset).limit(limit)
        return [_to_out(*r) for r in db.execute(stmt).all()]

    def search(
        self,
        db: Session,
        term: str,
        *,
        taller_id: Optional[int] = None,
        instructor_id: Optional[int] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        like = f"%{term.strip()}%"
        stmt = _listado_stmt().where(
            FechaImportante.titulo.ilike(like) | FechaImportante.descripcion.ilike(like)
        )
        if taller_id is not None:
            stmt = stmt.where(FechaImportante.taller_id == taller_id)
        if instructor_id is not None:
            stmt = stmt.where(FechaImportante.instructor_id == instructor_id)
        stmt = _cronologico(stmt).offset(offset).limit(limit)
        return [_to_out(*r) for r in db.execute(stmt).all()]

    def stats(self, db: Session, instructor_id: Optional[int] = None) -> Dict[str, Any]:
        now = utcnow()
        totales = select(
            func.count(FechaImportante.id),
            func.sum(case((FechaImportante.fecha_evento >= now, 1), else_=0)),
        )
        por_tipo = select(FechaImportante.tipo_evento, func.count(FechaImportante.id)).group_by(
            FechaImportante.tipo_evento
        )
        if instructor_id is not None:
            totales = totales.where(FechaImportante.instructor_id == instructor_id)
            por_tipo = por_tipo.where(FechaImportante.instructor_id == instructor_id)
        total, proximos = db.execute(totales).one()
        total = total or 0
        return {
            "total_eventos": total,
            "eventos_proximos": int(proximos or 0),
            "eventos_pasados": total - int(proximos or 0),
            "por_tipo": {TipoEvento(t).value: n for t, n in db.execute(por_tipo).all()},
        }

    def rango(
        self, db: Session, desde: datetime, hasta: datetime, taller_id: Optional[int] = None
    ) -> Dict[str, List[Dict[str, Any]]]:
        """Eventos entre ``desde`` y ``hasta`` agrupados por día (YYYY-MM-DD)."""
        stmt = _en_rango(_listado_stmt(), desde, hasta)
        if taller_id is not None:
            stmt = stmt.where(FechaImportante.taller_id == taller_id)
        dias: Dict[str, List[Dict[str, Any]]] = {}
        for row in db.execute(_cronologico(stmt)).all():
            evento = _to_out(*row)
            dias.setdefault(evento["fecha_evento"].date().isoformat(), []).append(evento)
        return dias


calendario_crud = CRUDCalendario(FechaImportante)
