# talleres_api/crud/informacion_emergencia.py
from typing import Optional, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from talleres_api.crud.base import CRUDBase
from talleres_api.models import InformacionEmergencia
from talleres_api.schemas.informacion_emergencia import InformacionEmergenciaIn


class CRUDInformacionEmergencia(CRUDBase[InformacionEmergencia, InformacionEmergenciaIn, InformacionEmergenciaIn]):
    def get_by_alumno(self, db: Session, alumno_id: int) -> Optional[InformacionEmergencia]:
        return db.execute(
            select(InformacionEmergencia).where(InformacionEmergencia.alumno_id == alumno_id)
        ).scalar_one_or_none()

    def upsert(self, db: Session, alumno_id: int, obj_in: InformacionEmergenciaIn) -> Tuple[InformacionEmergencia, bool]:
        """Crea o reemplaza el registro del alumno; devuelve ``(registro, creado)``."""
        existente = self.get_by_alumno(db, alumno_id)
        if existente is None:
            return self.create(db, obj_in, extra={"alumno_id": alumno_id}), True
        return self.update(db, existente, obj_in.model_dump()), False


informacion_emergencia_crud = CRUDInformacionEmergencia(InformacionEmergencia)
