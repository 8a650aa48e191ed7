# talleres_api/schemas/taller.py
from datetime import date
from typing import Optional
from pydantic import BaseModel, Field, field_validator, model_validator

from talleres_api.schemas.common import no_nulo


class TallerBase(BaseModel):
    nombre: str = Field(min_length=1, max_length=150)
    descripcion: Optional[str] = None
    categoria: str = Field(min_length=1, max_length=80)
    cupo_maximo: int = Field(gt=0)
    horario: Optional[str] = Field(default=None, max_length=200)
    ubicacion: Optional[str] = Field(default=None, max_length=150)
    activo: bool = True
    instructor_id: Optional[int] = None
    fecha_inicio: Optional[date] = None
    fecha_fin: Optional[date] = None

    @model_validator(mode="after")
    def _fechas_en_orden(self):
        if self.fecha_inicio and self.fecha_fin and self.fecha_fin < self.fecha_inicio:
            raise ValueError("fecha_fin no puede ser anterior a fecha_inicio")
        return self


class TallerCreate(TallerBase):
    pass


class TallerUpdate(BaseModel):
    nombre: Optional[str] = Field(default=None, min_length=1, max_length=150)
    descripcion: Optional[str] = None
    categoria: Optional[str] = Field(default=None, min_length=1, max_length=80)
    cupo_maximo: Optional[int] = Field(default=None, gt=0)
    horario: Optional[str] = Field(default=None, max_length=200)
    ubicacion: Optional[str] = Field(default=None, max_length=150)
    activo: Optional[bool] = None
    instructor_id: Optional[int] = None
    fecha_inicio: Optional[date] = None
    fecha_fin: Optional[date] = None

    @field_validator("nombre", "categoria", "cupo_maximo", "activo")
    @classmethod
    def _sin_nulos(cls, v):
        return no_nulo(v)


# campos que solo el administrador puede cambiar
CAMPOS_RESTRINGIDOS_INSTRUCTOR = ("categoria", "cupo_maximo", "instructor_id")


class InscripcionIn(BaseModel):
    comentarios: Optional[str] = Field(default=None, max_length=500)
