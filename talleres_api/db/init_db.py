# talleres_api/db/init_db.py
import logging
from typing import Optional

from sqlalchemy.orm import Session

from talleres_api.crud.usuario import usuario_crud
from talleres_api.models import TipoUsuario

logger = logging.getLogger(__name__)


def init_db(db: Session, admin_email: Optional[str] = None, admin_password: Optional[str] = None) -> None:
    """Crea la cuenta de administrador inicial si está configurada y no existe."""
    if not admin_email or not admin_password:
        return
    if usuario_crud.get_by_email(db, admin_email) is not None:
        return
    usuario_crud.create_with_profile(
        db, email=admin_email, password=admin_password, tipo_usuario=TipoUsuario.admin
    )
    logger.info("Administrador inicial creado: %s", admin_email.strip().lower())
