# talleres_api/db/bootstrap.py
import logging
import os

from alembic import command
from alembic.config import Config

from talleres_api.core.config import Settings
from talleres_api.db.init_db import init_db
from talleres_api.db.session import Database

logger = logging.getLogger(__name__)

BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))


def run_migrations(database_url: str) -> None:
    # Apunta explícitamente a alembic.ini y migrations/
    cfg = Config(os.path.join(BASE_DIR, "alembic.ini"))
    cfg.set_main_option("script_location", os.path.join(BASE_DIR, "migrations"))
    cfg.set_main_option("sqlalchemy.url", database_url.replace("%", "%%"))
    command.upgrade(cfg, "head")


def run_migrations_and_seed(database: Database, settings: Settings) -> None:
    if settings.RUN_MIGRATIONS:
        logger.info("Aplicando migraciones")
        run_migrations(database.url)
    with database.SessionLocal() as db:
        init_db(db, settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD)
