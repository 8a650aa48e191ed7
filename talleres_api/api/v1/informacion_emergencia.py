# talleres_api/api/v1/informacion_emergencia.py
import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from talleres_api.api.deps import get_db, require_roles
from talleres_api.api.responses import ok
from talleres_api.core.authz import Action, Caller, authorize
from talleres_api.core.errors import NotFound
from talleres_api.crud.informacion_emergencia import informacion_emergencia_crud
from talleres_api.models import TipoUsuario
from talleres_api.schemas.informacion_emergencia import InformacionEmergenciaIn, InformacionEmergenciaOut

logger = logging.getLogger(__name__)

router = APIRouter()

_alumno = require_roles(TipoUsuario.alumno)


@router.get("/")
def mi_informacion(db: Session = Depends(get_db), caller: Caller = Depends(_alumno)):
    info = informacion_emergencia_crud.get_by_alumno(db, caller.require_profile())
    data = InformacionEmergenciaOut.model_validate(info).model_dump() if info else None
    return ok("Información de emergencia obtenida exitosamente", data)


@router.post("/", status_code=status.HTTP_201_CREATED)
def guardar_informacion(
    body: InformacionEmergenciaIn,
    response: Response,
    db: Session = Depends(get_db),
    caller: Caller = Depends(_alumno),
):
    info, creado = informacion_emergencia_crud.upsert(db, caller.require_profile(), body)
    if not creado:
        response.status_code = status.HTTP_200_OK
    logger.info("Información de emergencia %s: alumno %s", "creada" if creado else "actualizada", info.alumno_id)
    return ok(
        "Información creada correctamente" if creado else "Información actualizada correctamente",
        InformacionEmergenciaOut.model_validate(info).model_dump(),
    )


@router.delete("/{info_id}")
def eliminar_informacion(info_id: int, db: Session = Depends(get_db), caller: Caller = Depends(_alumno)):
    caller.require_profile()
    info = informacion_emergencia_crud.get(db, info_id)
    if info is None:
        raise NotFound("Información de emergencia no encontrada")
    authorize(Action.DELETE, info, caller, "Solo puedes eliminar tu propia información de emergencia")

    informacion_emergencia_crud.remove(db, info_id)
    logger.info("Información de emergencia eliminada: %s por %s", info_id, caller.email)
    return ok("Información de emergencia eliminada correctamente")
