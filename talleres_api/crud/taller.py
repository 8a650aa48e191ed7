# talleres_api/crud/taller.py
from typing import Any, Dict, List, Optional

from sqlalchemy import select, func, case
from sqlalchemy.orm import Session

from talleres_api.crud.base import CRUDBase
from talleres_api.crud.inscripcion import inscripcion_crud
from talleres_api.models import EstadoInscripcion, Inscripcion, PerfilInstructor, Taller
from talleres_api.schemas.taller import TallerCreate, TallerUpdate

# inscripciones activas por taller (subconsulta correlacionada)
_inscritos = (
    select(func.count(Inscripcion.id))
    .where(Inscripcion.taller_id == Taller.id, Inscripcion.estado == EstadoInscripcion.activa)
    .correlate(Taller)
    .scalar_subquery()
    .label("inscritos")
)


def _listado_stmt():
    return (
        select(Taller, PerfilInstructor.nombre, PerfilInstructor.apellido_paterno, _inscritos)
        .outerjoin(PerfilInstructor, PerfilInstructor.id == Taller.instructor_id)
    )


def _to_row(t: Taller, instr_nombre: Optional[str], instr_apellido: Optional[str], inscritos: int) -> Dict[str, Any]:
    inscritos = int(inscritos or 0)
    nombre_instructor = " ".join(p for p in (instr_nombre, instr_apellido) if p) or None
    return {
        "id": t.id,
        "nombre": t.nombre,
        "descripcion": t.descripcion,
        "categoria": t.categoria,
        "cupo_maximo": t.cupo_maximo,
        "horario": t.horario,
        "ubicacion": t.ubicacion,
        "activo": t.activo,
        "instructor_id": t.instructor_id,
        "instructor_nombre": nombre_instructor,
        "fecha_inicio": t.fecha_inicio,
        "fecha_fin": t.fecha_fin,
        "created_at": t.created_at,
        "updated_at": t.updated_at,
        "inscritos": inscritos,
        "cupos_disponibles": max(t.cupo_maximo - inscritos, 0),
    }


class CRUDTaller(CRUDBase[Taller, TallerCreate, TallerUpdate]):
    def find_all(
        self,
        db: Session,
        *,
        categoria: Optional[str] = None,
        activo: Optional[bool] = True,
        search: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        stmt = _listado_stmt()
        if categoria:
            stmt = stmt.where(Taller.categoria == categoria)
        if activo is not None:
            stmt = stmt.where(Taller.activo == activo)
        if search:
            like = f"%{search.strip()}%"
            stmt = stmt.where(Taller.nombre.ilike(like) | Taller.descripcion.ilike(like))
        stmt = stmt.order_by(Taller.nombre, Taller.id).offset(offset).limit(limit)
        return [_to_row(*r) for r in db.execute(stmt).all()]

    def get_detalle(self, db: Session, taller_id: int) -> Optional[Dict[str, Any]]:
        row = db.execute(_listado_stmt().where(Taller.id == taller_id)).first()
        return _to_row(*row) if row else None

    def find_by_categoria(self, db: Session, categoria: str) -> List[Dict[str, Any]]:
        stmt = _listado_stmt().where(Taller.categoria == categoria, Taller.activo.is_(True)).order_by(Taller.nombre)
        return [_to_row(*r) for r in db.execute(stmt).all()]

    def find_by_instructor(self, db: Session, instructor_id: int) -> List[Dict[str, Any]]:
        stmt = _listado_stmt().where(Taller.instructor_id == instructor_id).order_by(Taller.nombre)
        return [_to_row(*r) for r in db.execute(stmt).all()]

    def disponibles_para_alumno(self, db: Session, alumno_id: int) -> List[Dict[str, Any]]:
        """Talleres activos con cupo en los que el alumno no está inscrito."""
        ya_inscrito = (
            select(Inscripcion.taller_id)
            .where(Inscripcion.alumno_id == alumno_id, Inscripcion.estado == EstadoInscripcion.activa)
        )
        stmt = (
            _listado_stmt()
            .where(Taller.activo.is_(True), Taller.id.not_in(ya_inscrito))
            .order_by(Taller.nombre)
        )
        rows = [_to_row(*r) for r in db.execute(stmt).all()]
        return [r for r in rows if r["cupos_disponibles"] > 0]

    def cupo_disponible(self, db: Session, taller_id: int) -> int:
        """Cupos libres, o -1 si el taller no existe o está inactivo."""
        taller = db.get(Taller, taller_id)
        if taller is None or not taller.activo:
            return -1
        return max(taller.cupo_maximo - inscripcion_crud.count_active(db, taller_id), 0)

    def stats(self, db: Session) -> Dict[str, Any]:
        totales = db.execute(
            select(
                func.count(Taller.id),
                func.sum(case((Taller.activo.is_(True), 1), else_=0)),
                func.sum(Taller.cupo_maximo),
            )
        ).one()
        activas = db.scalar(
            select(func.count(Inscripcion.id)).where(Inscripcion.estado == EstadoInscripcion.activa)
        ) or 0
        por_categoria = db.execute(
            select(Taller.categoria, func.count(Taller.id))
            .group_by(Taller.categoria)
            .order_by(Taller.categoria)
        ).all()
        return {
            "total_talleres": totales[0] or 0,
            "talleres_activos": int(totales[1] or 0),
            "cupo_total": int(totales[2] or 0),
            "inscripciones_activas": activas,
            "por_categoria": [{"categoria": c, "total": n} for c, n in por_categoria],
        }


taller_crud = CRUDTaller(Taller)
