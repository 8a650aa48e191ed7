# talleres_api/schemas/informacion_emergencia.py
from typing import Optional
from pydantic import BaseModel, Field

from talleres_api.schemas.common import UtcDatetime


class InformacionEmergenciaIn(BaseModel):
    contacto_emergencia_nombre: str = Field(min_length=1, max_length=150)
    contacto_emergencia_telefono: str = Field(min_length=1, max_length=30)
    contacto_emergencia_relacion: str = Field(min_length=1, max_length=60)
    tipo_sangre: Optional[str] = Field(default=None, max_length=5)
    alergias: Optional[str] = None
    medicamentos: Optional[str] = None
    condiciones_medicas: Optional[str] = None
    seguro_medico: Optional[str] = Field(default=None, max_length=120)
    numero_seguro: Optional[str] = Field(default=None, max_length=60)


class InformacionEmergenciaOut(InformacionEmergenciaIn):
    id: int
    alumno_id: int
    updated_at: Optional[UtcDatetime] = None

    model_config = {"from_attributes": True}
