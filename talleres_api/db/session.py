# talleres_api/db/session.py
"""
Gateway de persistencia.

Una instancia de ``Database`` se crea al arrancar la aplicación
(``create_app``), se guarda en ``app.state.db`` y se libera al apagar.
No hay engine global a nivel de módulo.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Generator, List, Mapping, Optional, TypeVar

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from talleres_api.core.errors import AppError, QueryError, QueryTimeout

logger = logging.getLogger(__name__)

T = TypeVar("T")

# SQLSTATE de postgres para statement_timeout / cancelación
_PG_QUERY_CANCELED = "57014"
_PG_UNIQUE_VIOLATION = "23505"
_SQLITE_BUSY = {"SQLITE_BUSY", "SQLITE_LOCKED"}


def normalize_url(url: str) -> str:
    if url and url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg://", 1)
    if url and url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


def is_unique_violation(exc: IntegrityError) -> bool:
    orig = getattr(exc, "orig", None)
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return code == _PG_UNIQUE_VIOLATION or getattr(orig, "sqlite_errorname", None) == "SQLITE_CONSTRAINT_UNIQUE"


def translate_db_error(exc: DBAPIError) -> QueryError:
    orig = getattr(exc, "orig", None)
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code == _PG_QUERY_CANCELED or getattr(orig, "sqlite_errorname", None) in _SQLITE_BUSY:
        return QueryTimeout("Tiempo de espera agotado en la base de datos", db_code=code)
    return QueryError("Error en la base de datos", db_code=code or getattr(orig, "sqlite_errorname", None))


class Database:
    def __init__(
        self,
        url: str,
        *,
        statement_timeout_ms: int = 30000,
        pool_size: int = 20,
        max_overflow: int = 0,
        pool_timeout: int = 60,
        slow_query_ms: int = 1000,
        echo: bool = False,
    ):
        self.url = normalize_url(url)
        self.statement_timeout_ms = statement_timeout_ms
        self.slow_query_ms = slow_query_ms
        self.is_sqlite = self.url.startswith("sqlite")

        if self.is_sqlite:
            self.engine: Engine = create_engine(
                self.url,
                echo=echo,
                connect_args={"check_same_thread": False, "timeout": statement_timeout_ms / 1000},
            )
            self._install_sqlite_hooks()
        else:
            self.engine = create_engine(
                self.url,
                echo=echo,
                pool_pre_ping=True,
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_timeout=pool_timeout,
                connect_args={
                    "options": f"-c statement_timeout={statement_timeout_ms}",
                    "application_name": "talleres_api",
                },
            )
        self._install_timing_hooks()

        self.SessionLocal = sessionmaker(bind=self.engine, autocommit=False, autoflush=False, expire_on_commit=False)
        # transacciones de escritura: en sqlite abren con BEGIN IMMEDIATE
        self._WriteSession = sessionmaker(
            bind=self.engine.execution_options(sqlite_begin="IMMEDIATE"),
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )

    # ------------------------------------------------------------------ #
    # hooks
    # ------------------------------------------------------------------ #
    def _install_sqlite_hooks(self) -> None:
        # pysqlite no emite BEGIN por su cuenta; lo controlamos aquí
        @event.listens_for(self.engine, "connect")
        def _on_connect(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            if ":memory:" not in self.url:
                cursor.execute("PRAGMA journal_mode=WAL")
            cursor.close()

        @event.listens_for(self.engine, "begin")
        def _on_begin(conn):
            mode = conn.get_execution_options().get("sqlite_begin")
            conn.exec_driver_sql(f"BEGIN {mode}" if mode else "BEGIN")

    def _install_timing_hooks(self) -> None:
        @event.listens_for(self.engine, "before_cursor_execute")
        def _before(conn, cursor, statement, parameters, context, executemany):
            conn.info.setdefault("query_start", []).append(time.perf_counter())

        @event.listens_for(self.engine, "after_cursor_execute")
        def _after(conn, cursor, statement, parameters, context, executemany):
            elapsed_ms = (time.perf_counter() - conn.info["query_start"].pop()) * 1000
            if elapsed_ms > self.slow_query_ms:
                logger.warning("Query lenta (%.0fms): %s", elapsed_ms, " ".join(statement.split())[:200])

    # ------------------------------------------------------------------ #
    # API
    # ------------------------------------------------------------------ #
    def session(self) -> Generator[Session, None, None]:
        """Sesión por request (dependencia de FastAPI)."""
        db = self.SessionLocal()
        try:
            yield db
        finally:
            db.close()

    def execute(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        """Ejecuta SQL parametrizado y devuelve las filas como dicts."""
        try:
            with self.engine.connect() as conn:
                result = conn.execute(text(sql), dict(params or {}))
                rows = [dict(r) for r in result.mappings()] if result.returns_rows else []
                conn.commit()
                return rows
        except IntegrityError:
            raise
        except DBAPIError as exc:
            logger.error("Error en query: %s | sql=%s", exc.orig, " ".join(sql.split())[:200])
            raise translate_db_error(exc) from exc

    def run_in_transaction(self, work: Callable[[Session], T]) -> T:
        """
        Ejecuta ``work(session)`` dentro de una transacción.

        Si ``work`` lanza una excepción se hace ROLLBACK y se propaga; si
        retorna normalmente se hace COMMIT. La conexión vuelve al pool en
        cualquier caso.
        """
        with self._WriteSession() as session:
            try:
                with session.begin():
                    return work(session)
            except (AppError, IntegrityError):
                logger.debug("Rollback de transacción", exc_info=True)
                raise
            except DBAPIError as exc:
                logger.error("Error en transacción, rollback: %s", exc.orig)
                raise translate_db_error(exc) from exc

    def ping(self) -> bool:
        try:
            self.execute("SELECT 1 AS ok")
            return True
        except QueryError:
            logger.exception("Sin conexión con la base de datos")
            return False

    def pool_stats(self) -> Dict[str, Any]:
        pool = self.engine.pool
        stats: Dict[str, Any] = {"status": pool.status()}
        for name in ("size", "checkedin", "checkedout", "overflow"):
            fn = getattr(pool, name, None)
            if callable(fn):
                stats[name] = fn()
        return stats

    def dispose(self) -> None:
        logger.info("Cerrando pool de conexiones")
        self.engine.dispose()
