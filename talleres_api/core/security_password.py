# talleres_api/core/security_password.py
from __future__ import annotations
import logging
from typing import Tuple
from passlib.context import CryptContext

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_LENGTH = 128

# solo argon2; parámetros nuevos => needs_update y rehash en el siguiente login
pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
    argon2__time_cost=2,
    argon2__memory_cost=19456,
    argon2__parallelism=1,
)

def hash_password(plain: str) -> str:
    return pwd_context.hash(plain)

def verify_and_maybe_upgrade(plain: str, stored_hash: str) -> Tuple[bool, str | None]:
    """Verifica y, si los parámetros del hash quedaron obsoletos, devuelve uno nuevo."""
    if not stored_hash:
        return False, None
    try:
        valid = pwd_context.verify(plain, stored_hash)
    except ValueError:
        # hash con formato desconocido (p.ej. importado de otro sistema)
        logger.warning("Hash de contraseña no reconocido; se rechaza el acceso")
        return False, None
    if not valid:
        return False, None
    if pwd_context.needs_update(stored_hash):
        return True, pwd_context.hash(plain)
    return True, None
