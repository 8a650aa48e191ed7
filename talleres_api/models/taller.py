from typing import Optional
from datetime import date, datetime
from sqlalchemy import String, Text, Integer, Boolean, Date, DateTime, ForeignKey, CheckConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from talleres_api.db.base import Base


class Taller(Base):
    __tablename__ = "talleres"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    nombre: Mapped[str] = mapped_column(String(150))
    descripcion: Mapped[Optional[str]] = mapped_column(Text(), nullable=True)
    categoria: Mapped[str] = mapped_column(String(80), index=True)
    cupo_maximo: Mapped[int] = mapped_column(Integer)
    horario: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    ubicacion: Mapped[Optional[str]] = mapped_column(String(150), nullable=True)
    activo: Mapped[bool] = mapped_column(Boolean, default=True)
    instructor_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("perfiles_instructor.id", ondelete="SET NULL"), nullable=True, index=True
    )
    fecha_inicio: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    fecha_fin: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), onupdate=func.now(), nullable=True)

    instructor = relationship("PerfilInstructor", back_populates="talleres")

    __table_args__ = (
        CheckConstraint("cupo_maximo > 0", name="cupo_positivo"),
    )
