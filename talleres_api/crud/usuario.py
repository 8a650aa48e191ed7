# talleres_api/crud/usuario.py
import uuid
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from talleres_api.core.security_password import hash_password
from talleres_api.crud.base import CRUDBase
from talleres_api.models import PerfilAlumno, PerfilInstructor, TipoUsuario, Usuario


def numero_control_temporal() -> str:
    return f"TEMP_{uuid.uuid4().hex[:12]}"


class CRUDUsuario(CRUDBase[Usuario, Any, Any]):
    def get_by_email(self, db: Session, email: str) -> Optional[Usuario]:
        return db.execute(
            select(Usuario).where(Usuario.email == (email or "").strip().lower())
        ).scalar_one_or_none()

    def create_with_profile(
        self,
        db: Session,
        *,
        email: str,
        password: str,
        tipo_usuario: TipoUsuario,
        perfil: Optional[Dict[str, Any]] = None,
    ) -> Usuario:
        """Crea el usuario y, para alumnos e instructores, su perfil en la misma transacción."""
        user = Usuario(
            email=email.strip().lower(),
            password_hash=hash_password(password),
            tipo_usuario=tipo_usuario,
            activo=True,
        )
        datos = dict(perfil or {})
        if tipo_usuario == TipoUsuario.alumno:
            datos.setdefault("nombre", "Pendiente")
            datos.setdefault("apellido_paterno", "de completar")
            datos.setdefault("numero_control", numero_control_temporal())
            user.perfil_alumno = PerfilAlumno(**datos)
        elif tipo_usuario == TipoUsuario.instructor:
            user.perfil_instructor = PerfilInstructor(**datos)
        db.add(user); db.commit(); db.refresh(user)
        return user

    def set_password(self, db: Session, user: Usuario, new_password: str) -> None:
        user.password_hash = hash_password(new_password)
        db.add(user); db.commit()

    def numero_control_en_uso(self, db: Session, numero_control: str, excluir_usuario_id: int) -> bool:
        found = db.execute(
            select(PerfilAlumno.id).where(
                PerfilAlumno.numero_control == numero_control,
                PerfilAlumno.usuario_id != excluir_usuario_id,
            ).limit(1)
        ).first()
        return found is not None


usuario_crud = CRUDUsuario(Usuario)
