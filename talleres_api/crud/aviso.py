# talleres_api/crud/aviso.py
from datetime import timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import select, func, case, or_
from sqlalchemy.orm import Session

from talleres_api.crud.base import CRUDBase
from talleres_api.models import Aviso, EstadoInscripcion, Inscripcion, Taller
from talleres_api.schemas.aviso import AvisoCreate, AvisoOut, AvisoUpdate
from talleres_api.schemas.common import utcnow


def _vigente(now):
    return or_(Aviso.fecha_expiracion.is_(None), Aviso.fecha_expiracion > now)


def _listado_stmt():
    return select(Aviso, Taller.nombre).join(Taller, Taller.id == Aviso.taller_id)


def _orden(stmt):
    return stmt.order_by(Aviso.importante.desc(), Aviso.created_at.desc(), Aviso.id.desc())


def _to_out(aviso: Aviso, taller_nombre: Optional[str]) -> Dict[str, Any]:
    out = AvisoOut.model_validate(aviso)
    out.taller_nombre = taller_nombre
    return out.model_dump()


class CRUDAviso(CRUDBase[Aviso, AvisoCreate, AvisoUpdate]):
    def get_detalle(self, db: Session, aviso_id: int) -> Optional[Dict[str, Any]]:
        row = db.execute(_listado_stmt().where(Aviso.id == aviso_id)).first()
        return _to_out(*row) if row else None

    def find_by_taller(
        self, db: Session, taller_id: int, *, include_expired: bool = False, limit: int = 20, offset: int = 0
    ) -> List[Dict[str, Any]]:
        stmt = _listado_stmt().where(Aviso.taller_id == taller_id, Aviso.activo.is_(True))
        if not include_expired:
            stmt = stmt.where(_vigente(utcnow()))
        stmt = _orden(stmt).offset(offset).limit(limit)
        return [_to_out(*r) for r in db.execute(stmt).all()]

    def para_alumno(self, db: Session, alumno_id: int, *, limit: int = 10, offset: int = 0) -> List[Dict[str, Any]]:
        """Avisos vigentes de los talleres donde el alumno tiene inscripción activa."""
        inscritos = select(Inscripcion.taller_id).where(
            Inscripcion.alumno_id == alumno_id, Inscripcion.estado == EstadoInscripcion.activa
        )
        stmt = _listado_stmt().where(
            Aviso.taller_id.in_(inscritos), Aviso.activo.is_(True), _vigente(utcnow())
        )
        stmt = _orden(stmt).offset(offset).limit(limit)
        return [_to_out(*r) for r in db.execute(stmt).all()]

    def find_by_instructor(
        self, db: Session, instructor_id: int, *, activo: Optional[bool] = None, limit: int = 20, offset: int = 0
    ) -> List[Dict[str, Any]]:
        stmt = _listado_stmt().where(Aviso.instructor_id == instructor_id)
        if activo is not None:
            stmt = stmt.where(Aviso.activo == activo)
        stmt = stmt.order_by(Aviso.created_at.desc(), Aviso.id.desc()).offset(offset).limit(limit)
        return [_to_out(*r) for r in db.execute(stmt).all()]

    def importantes(self, db: Session, taller_id: Optional[int] = None) -> List[Dict[str, Any]]:
        stmt = _listado_stmt().where(Aviso.importante.is_(True), Aviso.activo.is_(True), _vigente(utcnow()))
        if taller_id is not None:
            stmt = stmt.where(Aviso.taller_id == taller_id)
        stmt = stmt.order_by(Aviso.created_at.desc(), Aviso.id.desc())
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
            Aviso.activo.is_(True), Aviso.titulo.ilike(like) | Aviso.contenido.ilike(like)
        )
        if taller_id is not None:
            stmt = stmt.where(Aviso.taller_id == taller_id)
        if instructor_id is not None:
            stmt = stmt.where(Aviso.instructor_id == instructor_id)
        stmt = _orden(stmt).offset(offset).limit(limit)
        return [_to_out(*r) for r in db.execute(stmt).all()]

    def stats(self, db: Session, instructor_id: Optional[int] = None) -> Dict[str, int]:
        now = utcnow()
        stmt = select(
            func.count(Aviso.id),
            func.sum(case((Aviso.activo.is_(True), 1), else_=0)),
            func.sum(case((Aviso.importante.is_(True), 1), else_=0)),
            func.sum(case((Aviso.fecha_expiracion <= now, 1), else_=0)),
        )
        if instructor_id is not None:
            stmt = stmt.where(Aviso.instructor_id == instructor_id)
        total, activos, importantes, expirados = db.execute(stmt).one()
        return {
            "total_avisos": total or 0,
            "avisos_activos": int(activos or 0),
            "avisos_importantes": int(importantes or 0),
            "avisos_expirados": int(expirados or 0),
        }

    def proximos_a_expirar(self, db: Session, days: int = 3, instructor_id: Optional[int] = None) -> List[Dict[str, Any]]:
        now = utcnow()
        stmt = _listado_stmt().where(
            Aviso.activo.is_(True),
            Aviso.fecha_expiracion.is_not(None),
            Aviso.fecha_expiracion > now,
            Aviso.fecha_expiracion <= now + timedelta(days=days),
        )
        if instructor_id is not None:
            stmt = stmt.where(Aviso.instructor_id == instructor_id)
        stmt = stmt.order_by(Aviso.fecha_expiracion, Aviso.id)
        return [_to_out(*r) for r in db.execute(stmt).all()]


aviso_crud = CRUDAviso(Aviso)
