from typing import Optional
from datetime import datetime
from sqlalchemy import String, Text, DateTime, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from talleres_api.db.base import Base


class InformacionEmergencia(Base):
    __tablename__ = "informacion_emergencia"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    alumno_id: Mapped[int] = mapped_column(ForeignKey("perfiles_alumno.id", ondelete="CASCADE"), unique=True)
    contacto_emergencia_nombre: Mapped[str] = mapped_column(String(150))
    contacto_emergencia_telefono: Mapped[str] = mapped_column(String(30))
    contacto_emergencia_relacion: Mapped[str] = mapped_column(String(60))
    tipo_sangre: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)
    alergias: Mapped[Optional[str]] = mapped_column(Text(), nullable=True)
    medicamentos: Mapped[Optional[str]] = mapped_column(Text(), nullable=True)
    condiciones_medicas: Mapped[Optional[str]] = mapped_column(Text(), nullable=True)
    seguro_medico: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    numero_seguro: Mapped[Optional[str]] = mapped_column(String(60), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), onupdate=func.now(), nullable=True)

    alumno = relationship("PerfilAlumno", back_populates="informacion_emergencia")
