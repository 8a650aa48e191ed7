from enum import Enum
from typing import Optional
from datetime import datetime
from sqlalchemy import Text, DateTime, ForeignKey, Index, func, text, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from talleres_api.db.base import Base


class EstadoInscripcion(str, Enum):
    activa = "activa"
    cancelada = "cancelada"
    completada = "completada"


class Inscripcion(Base):
    __tablename__ = "inscripciones"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    alumno_id: Mapped[int] = mapped_column(ForeignKey("perfiles_alumno.id", ondelete="CASCADE"))
    taller_id: Mapped[int] = mapped_column(ForeignKey("talleres.id", ondelete="CASCADE"))
    estado: Mapped[EstadoInscripcion] = mapped_column(
        SAEnum(EstadoInscripcion, native_enum=False, length=20, values_callable=lambda e: [m.value for m in e]),
        default=EstadoInscripcion.activa,
    )
    comentarios: Mapped[Optional[str]] = mapped_column(Text(), nullable=True)
    fecha_inscripcion: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), onupdate=func.now(), nullable=True)

    alumno = relationship("PerfilAlumno")
    taller = relationship("Taller")

    __table_args__ = (
        # una sola inscripción activa por (alumno, taller)
        Index(
            "uq_inscripcion_activa",
            "alumno_id",
            "taller_id",
            unique=True,
            sqlite_where=text("estado = 'activa'"),
            postgresql_where=text("estado = 'activa'"),
        ),
        Index("ix_inscripciones_taller_estado", "taller_id", "estado"),
    )
