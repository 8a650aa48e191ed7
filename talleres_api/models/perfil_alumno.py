from typing import Optional
from datetime import date, datetime
from sqlalchemy import String, Date, DateTime, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from talleres_api.db.base import Base


class PerfilAlumno(Base):
    __tablename__ = "perfiles_alumno"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    usuario_id: Mapped[int] = mapped_column(ForeignKey("usuarios.id", ondelete="CASCADE"), unique=True)
    nombre: Mapped[str] = mapped_column(String(100))
    apellido_paterno: Mapped[str] = mapped_column(String(100))
    apellido_materno: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    numero_control: Mapped[str] = mapped_column(String(30), unique=True)
    grupo: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    semestre: Mapped[Optional[int]] = mapped_column(nullable=True)
    telefono: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    fecha_nacimiento: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    contacto_emergencia: Mapped[Optional[str]] = mapped_column(String(150), nullable=True)
    telefono_emergencia: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    direccion: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), onupdate=func.now(), nullable=True)

    usuario = relationship("Usuario", back_populates="perfil_alumno")
    informacion_emergencia = relationship(
        "InformacionEmergencia", back_populates="alumno", uselist=False, cascade="all, delete-orphan"
    )

    @property
    def nombre_completo(self) -> str:
        return " ".join(p for p in (self.nombre, self.apellido_paterno, self.apellido_materno) if p)
