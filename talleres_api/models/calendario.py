from enum import Enum
from typing import Optional
from datetime import datetime
from sqlalchemy import String, Text, DateTime, ForeignKey, func, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from talleres_api.db.base import Base


class TipoEvento(str, Enum):
    evento = "evento"
    examen = "examen"
    entrega = "entrega"
    clase = "clase"
    suspension = "suspension"
    otro = "otro"


class FechaImportante(Base):
    __tablename__ = "calendario_fechas"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    taller_id: Mapped[int] = mapped_column(ForeignKey("talleres.id", ondelete="CASCADE"), index=True)
    instructor_id: Mapped[int] = mapped_column(ForeignKey("perfiles_instructor.id", ondelete="CASCADE"), index=True)
    titulo: Mapped[str] = mapped_column(String(200))
    descripcion: Mapped[Optional[str]] = mapped_column(Text(), nullable=True)
    fecha_evento: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    tipo_evento: Mapped[TipoEvento] = mapped_column(
        SAEnum(TipoEvento, native_enum=False, length=20, values_callable=lambda e: [m.value for m in e]),
        default=TipoEvento.evento,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), onupdate=func.now(), nullable=True)

    taller = relationship("Taller")
    instructor = relationship("PerfilInstructor")
