# talleres_api/schemas/aviso.py
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from talleres_api.schemas.common import UtcDatetime, no_nulo


class AvisoCreate(BaseModel):
    taller_id: int
    titulo: str = Field(min_length=1, max_length=200)
    contenido: str = Field(min_length=1)
    importante: bool = False
    fecha_expiracion: Optional[UtcDatetime] = None


class AvisoUpdate(BaseModel):
    titulo: Optional[str] = Field(default=None, min_length=1, max_length=200)
    contenido: Optional[str] = Field(default=None, min_length=1)
    importante: Optional[bool] = None
    activo: Optional[bool] = None
    fecha_expiracion: Optional[UtcDatetime] = None

    @field_validator("titulo", "contenido", "importante", "activo")
    @classmethod
    def _sin_nulos(cls, v):
        return no_nulo(v)


class AvisoOut(BaseModel):
    id: int
    taller_id: int
    instructor_id: int
    titulo: str
    contenido: str
    importante: bool
    activo: bool
    fecha_expiracion: Optional[UtcDatetime] = None
    created_at: Optional[UtcDatetime] = None
    updated_at: Optional[UtcDatetime] = None
    taller_nombre: Optional[str] = None

    model_config = {"from_attributes": True}
