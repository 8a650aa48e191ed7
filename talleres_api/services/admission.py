# talleres_api/services/admission.py
"""
Control de admisión de inscripciones.

``can_enroll`` es sólo una verificación previa para dar retroalimentación
temprana. La verificación que cuenta es la de ``enroll``: bloquea la fila del
taller (``SELECT ... FOR UPDATE``; en SQLite la transacción abre con
``BEGIN IMMEDIATE``), vuelve a validar las cuatro condiciones e inserta dentro
de la misma transacción. Así dos requests concurrentes para el mismo taller
quedan serializados y el cupo nunca se sobrepasa.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from talleres_api.core.authz import Action, Caller, authorize
from talleres_api.core.errors import (
    REASON_MESSAGES,
    Conflict,
    EligibilityReason,
    EnrollmentRejected,
    NotFound,
)
from talleres_api.crud.inscripcion import inscripcion_crud
from talleres_api.crud.taller import taller_crud
from talleres_api.db.session import Database, is_unique_violation
from talleres_api.models import EstadoInscripcion, Inscripcion, Taller

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Eligibility:
    allowed: bool
    reason: Optional[EligibilityReason] = None
    cupos_disponibles: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "puede": self.allowed,
            "razon": REASON_MESSAGES[self.reason] if self.reason else None,
            "codigo": self.reason.value if self.reason else None,
            "cupos_disponibles": self.cupos_disponibles,
        }


class AdmissionController:
    def __init__(self, database: Database):
        self.database = database

    def _evaluate(self, db: Session, taller: Optional[Taller], alumno_id: int) -> Eligibility:
        if taller is None:
            return Eligibility(False, EligibilityReason.WORKSHOP_NOT_FOUND)
        if not taller.activo:
            return Eligibility(False, EligibilityReason.WORKSHOP_INACTIVE)
        if inscripcion_crud.has_active(db, alumno_id, taller.id):
            return Eligibility(False, EligibilityReason.ALREADY_ENROLLED)
        libres = taller.cupo_maximo - inscripcion_crud.count_active(db, taller.id)
        if libres <= 0:
            return Eligibility(False, EligibilityReason.NO_CAPACITY, cupos_disponibles=0)
        return Eligibility(True, cupos_disponibles=libres)

    def can_enroll(self, db: Session, alumno_id: int, taller_id: int) -> Eligibility:
        return self._evaluate(db, taller_crud.get(db, taller_id), alumno_id)

    def enroll(self, alumno_id: int, taller_id: int, comentarios: Optional[str] = None) -> Dict[str, Any]:
        """Inscribe al alumno; devuelve la inscripción con datos del taller y del alumno."""

        def work(session: Session) -> Dict[str, Any]:
            taller = taller_crud.get_for_update(session, taller_id)

            verdict = self._evaluate(session, taller, alumno_id)
            if not verdict.allowed:
                raise EnrollmentRejected(verdict.reason, details=verdict.to_dict())

            inscripcion = Inscripcion(
                alumno_id=alumno_id,
                taller_id=taller_id,
                estado=EstadoInscripcion.activa,
                comentarios=comentarios,
            )
            session.add(inscripcion)
            try:
                session.flush()
            except IntegrityError as exc:
                if is_unique_violation(exc):
                    raise EnrollmentRejected(EligibilityReason.ALREADY_ENROLLED) from exc
                raise

            # re-chequeo después del insert; si sobra alguien, rollback
            if inscripcion_crud.count_active(session, taller_id) > taller.cupo_maximo:
                raise EnrollmentRejected(EligibilityReason.NO_CAPACITY)

            return inscripcion_crud.get_detalle(session, inscripcion.id)

        try:
            detalle = self.database.run_in_transaction(work)
        except EnrollmentRejected as exc:
            logger.info("Inscripción rechazada: alumno=%s taller=%s motivo=%s", alumno_id, taller_id, exc.reason.value)
            raise
        logger.info("Inscripción creada: id=%s alumno=%s taller=%s", detalle["id"], alumno_id, taller_id)
        return detalle

    def cancel(self, inscripcion_id: int, caller: Caller) -> Dict[str, Any]:
        """Pasa una inscripción activa a cancelada (alumno dueño o admin)."""

        def work(session: Session) -> Dict[str, Any]:
            inscripcion = inscripcion_crud.get_for_update(session, inscripcion_id)
            if inscripcion is None:
                raise NotFound("No se encontró la inscripción especificada", error="Inscripción no encontrada")
            authorize(Action.UPDATE, inscripcion, caller, "Solo puedes cancelar tus propias inscripciones")

            if inscripcion.estado == EstadoInscripcion.completada:
                raise Conflict("No se puede cancelar una inscripción completada", code="ENROLLMENT_COMPLETED")
            if inscripcion.estado == EstadoInscripcion.activa:
                inscripcion_crud.update(session, inscripcion, {"estado": EstadoInscripcion.cancelada}, commit=False)
            return inscripcion_crud.get_detalle(session, inscripcion.id)

        detalle = self.database.run_in_transaction(work)
        logger.info("Inscripción cancelada: id=%s por usuario %s", inscripcion_id, caller.email)
        return detalle
