from typing import Dict, Optional

import pytest
from fastapi.testclient import TestClient

from talleres_api.core.config import Settings
from talleres_api.core.tokens import create_access_token
from talleres_api.crud.usuario import usuario_crud
from talleres_api.db.base import Base
from talleres_api.db.session import Database
from talleres_api.main import create_app
from talleres_api.models import Taller, TipoUsuario

PASSWORD = "secreto123"


class Actor:
    """Usuario de prueba con su token y perfil."""

    def __init__(self, user_id: int, email: str, tipo: TipoUsuario, profile_id: Optional[int]):
        self.user_id = user_id
        self.email = email
        self.tipo = tipo
        self.profile_id = profile_id
        self.token = create_access_token(user_id=user_id, email=email, tipo_usuario=tipo.value)

    @property
    def headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


class Factory:
    def __init__(self, database: Database):
        self.database = database
        self._seq = 0

    def _email(self, prefix: str) -> str:
        self._seq += 1
        return f"{prefix}{self._seq}@cbtis258.edu.mx"

    def usuario(self, tipo: TipoUsuario, email: Optional[str] = None, **perfil) -> Actor:
        email = email or self._email(tipo.value)
        if tipo == TipoUsuario.instructor:
            perfil.setdefault("nombre", "Laura")
            perfil.setdefault("apellido_paterno", "Méndez")
        with self.database.SessionLocal() as db:
            user = usuario_crud.create_with_profile(db, email=email, password=PASSWORD, tipo_usuario=tipo, perfil=perfil)
            profile = user.perfil_alumno or user.perfil_instructor
            return Actor(user.id, user.email, tipo, profile.id if profile else None)

    def admin(self) -> Actor:
        return self.usuario(TipoUsuario.admin)

    def instructor(self, **perfil) -> Actor:
        return self.usuario(TipoUsuario.instructor, **perfil)

    def alumno(self, **perfil) -> Actor:
        return self.usuario(TipoUsuario.alumno, **perfil)

    def taller(self, instructor: Optional[Actor] = None, *, cupo: int = 10, activo: bool = True, **campos) -> int:
        campos.setdefault("nombre", "Ajedrez")
        campos.setdefault("categoria", "deportes")
        with self.database.SessionLocal() as db:
            taller = Taller(
                cupo_maximo=cupo,
                activo=activo,
                instructor_id=instructor.profile_id if instructor else None,
                **campos,
            )
            db.add(taller); db.commit()
            return taller.id


@pytest.fixture
def database(tmp_path):
    # archivo real (no :memory:) para que los hilos compartan la base y sus bloqueos
    db = Database(f"sqlite:///{tmp_path / 'talleres.db'}", statement_timeout_ms=10000)
    Base.metadata.create_all(db.engine)
    yield db
    db.dispose()


@pytest.fixture
def app(database):
    settings = Settings(RUN_MIGRATIONS=False, ADMIN_EMAIL=None, ADMIN_PASSWORD=None, LOG_LEVEL="WARNING")
    return create_app(settings, database=database)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def factory(database):
    return Factory(database)
