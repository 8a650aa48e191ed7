# talleres_api/crud/inscripcion.py
from typing import Any, Dict, List, Optional

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from talleres_api.crud.base import CRUDBase
from talleres_api.models import (
    EstadoInscripcion,
    Inscripcion,
    PerfilAlumno,
    PerfilInstructor,
    Taller,
    Usuario,
)


def _detalle_stmt():
    return (
        select(
            Inscripcion,
            Taller.nombre.label("taller_nombre"),
            Taller.categoria.label("taller_categoria"),
            Taller.horario.label("taller_horario"),
            Taller.ubicacion.label("taller_ubicacion"),
            PerfilAlumno.nombre.label("alumno_nombre"),
            PerfilAlumno.apellido_paterno.label("alumno_apellido_paterno"),
            PerfilAlumno.numero_control.label("numero_control"),
            PerfilInstructor.nombre.label("instructor_nombre"),
            PerfilInstructor.apellido_paterno.label("instructor_apellido_paterno"),
        )
        .join(Taller, Taller.id == Inscripcion.taller_id)
        .join(PerfilAlumno, PerfilAlumno.id == Inscripcion.alumno_id)
        .outerjoin(PerfilInstructor, PerfilInstructor.id == Taller.instructor_id)
    )


def _join_name(*parts: Optional[str]) -> Optional[str]:
    name = " ".join(p for p in parts if p)
    return name or None


def _to_detalle(row) -> Dict[str, Any]:
    ins: Inscripcion = row[0]
    m = row._mapping
    return {
        "id": ins.id,
        "alumno_id": ins.alumno_id,
        "taller_id": ins.taller_id,
        "estado": EstadoInscripcion(ins.estado).value,
        "comentarios": ins.comentarios,
        "fecha_inscripcion": ins.fecha_inscripcion,
        "taller_nombre": m["taller_nombre"],
        "taller_categoria": m["taller_categoria"],
        "taller_horario": m["taller_horario"],
        "taller_ubicacion": m["taller_ubicacion"],
        "alumno_nombre": _join_name(m["alumno_nombre"], m["alumno_apellido_paterno"]),
        "numero_control": m["numero_control"],
        "instructor_nombre": _join_name(m["instructor_nombre"], m["instructor_apellido_paterno"]),
    }


class CRUDInscripcion(CRUDBase[Inscripcion, Any, Any]):
    def count_active(self, db: Session, taller_id: int) -> int:
        return db.scalar(
            select(func.count(Inscripcion.id)).where(
                Inscripcion.taller_id == taller_id,
                Inscripcion.estado == EstadoInscripcion.activa,
            )
        ) or 0

    def has_active(self, db: Session, alumno_id: int, taller_id: int) -> bool:
        found = db.execute(
            select(Inscripcion.id).where(
                Inscripcion.alumno_id == alumno_id,
                Inscripcion.taller_id == taller_id,
                Inscripcion.estado == EstadoInscripcion.activa,
            ).limit(1)
        ).first()
        return found is not None

    def get_detalle(self, db: Session, inscripcion_id: int) -> Optional[Dict[str, Any]]:
        row = db.execute(_detalle_stmt().where(Inscripcion.id == inscripcion_id)).first()
        return _to_detalle(row) if row else None

    def find_by_alumno(
        self,
        db: Session,
        alumno_id: int,
        *,
        estado: Optional[EstadoInscripcion] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        stmt = _detalle_stmt().where(Inscripcion.alumno_id == alumno_id)
        if estado is not None:
            stmt = stmt.where(Inscripcion.estado == estado)
        stmt = stmt.order_by(Inscripcion.fecha_inscripcion.desc(), Inscripcion.id.desc()).offset(offset).limit(limit)
        return [_to_detalle(r) for r in db.execute(stmt).all()]

    def alumnos_inscritos(
        self,
        db: Session,
        taller_id: int,
        *,
        search: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        stmt = (
            select(Inscripcion, PerfilAlumno, Usuario.email)
            .join(PerfilAlumno, PerfilAlumno.id == Inscripcion.alumno_id)
            .join(Usuario, Usuario.id == PerfilAlumno.usuario_id)
            .where(
                Inscripcion.taller_id == taller_id,
                Inscripcion.estado == EstadoInscripcion.activa,
            )
        )
        if search:
            like = f"%{search.strip()}%"
            stmt = stmt.where(
                PerfilAlumno.nombre.ilike(like)
                | PerfilAlumno.apellido_paterno.ilike(like)
                | PerfilAlumno.numero_control.ilike(like)
            )
        stmt = stmt.order_by(PerfilAlumno.apellido_paterno, PerfilAlumno.nombre).offset(offset).limit(limit)
        out = []
        for ins, alumno, email in db.execute(stmt).all():
            out.append({
                "inscripcion_id": ins.id,
                "alumno_id": alumno.id,
                "nombre": alumno.nombre_completo,
                "numero_control": alumno.numero_control,
                "grupo": alumno.grupo,
                "semestre": alumno.semestre,
                "telefono": alumno.telefono,
                "email": email,
                "fecha_inscripcion": ins.fecha_inscripcion,
                "comentarios": ins.comentarios,
            })
        return out


inscripcion_crud = CRUDInscripcion(Inscripcion)
