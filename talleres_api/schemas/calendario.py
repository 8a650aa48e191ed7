# talleres_api/schemas/calendario.py
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from talleres_api.models.calendario import TipoEvento
from talleres_api.schemas.common import UtcDatetime, no_nulo


class FechaCreate(BaseModel):
    taller_id: int
    titulo: str = Field(min_length=1, max_length=200)
    descripcion: Optional[str] = None
    fecha_evento: UtcDatetime
    tipo_evento: TipoEvento = TipoEvento.evento


class FechaUpdate(BaseModel):
    titulo: Optional[str] = Field(default=None, min_length=1, max_length=200)
    descripcion: Optional[str] = None
    fecha_evento: Optional[UtcDatetime] = None
    tipo_evento: Optional[TipoEvento] = None

    @field_validator("titulo", "fecha_evento", "tipo_evento")
    @classmethod
    def _sin_nulos(cls, v):
        return no_nulo(v)


class FechaOut(BaseModel):
    id: int
    taller_id: int
    instructor_id: int
    titulo: str
    descripcion: Optional[str] = None
    fecha_evento: UtcDatetime
    tipo_evento: TipoEvento
    created_at: Optional[UtcDatetime] = None
    taller_nombre: Optional[str] = None

    model_config = {"from_attributes": True}
