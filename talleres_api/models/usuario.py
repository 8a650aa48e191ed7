from enum import Enum
from datetime import datetime
from sqlalchemy import String, Boolean, DateTime, func, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from talleres_api.db.base import Base


class TipoUsuario(str, Enum):
    admin = "admin"
    instructor = "instructor"
    alumno = "alumno"


class Usuario(Base):
    __tablename__ = "usuarios"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(160), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255))
    tipo_usuario: Mapped[TipoUsuario] = mapped_column(
        SAEnum(TipoUsuario, native_enum=False, length=20, values_callable=lambda e: [m.value for m in e]),
        default=TipoUsuario.alumno,
    )
    activo: Mapped[bool] = mapped_column(Boolean, default=True)
    fecha_registro: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    perfil_alumno = relationship("PerfilAlumno", back_populates="usuario", uselist=False, cascade="all, delete-orphan")
    perfil_instructor = relationship("PerfilInstructor", back_populates="usuario", uselist=False, cascade="all, delete-orphan")
