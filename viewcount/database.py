# Configuración de base de datos usando SQLAlchemy.
#
# - DESARROLLO LOCAL: SQLite local (viewcount.db) por defecto
# - PRODUCCIÓN: cualquier URL soportada por SQLAlchemy vía DATABASE_URL
#
# No hay engine global: create_app() construye un único Database y lo
# comparte con CounterStore y los endpoints a través de app.state.

import logging
import os
import tempfile

from sqlalchemy import create_engine, inspect
from sqlalchemy.orm import sessionmaker, declarative_base, Session

logger = logging.getLogger(__name__)

Base = declarative_base()


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url


class Database:
    """Handle de persistencia: engine + fábrica de sesiones, seguro entre hilos."""

    def __init__(self, url: str):
        self.url = url
        self.temp_path = None
        engine_url = url
        engine_kwargs = {}
        if url.startswith("sqlite"):
            # FastAPI ejecuta endpoints sync en un threadpool
            engine_kwargs["connect_args"] = {"check_same_thread": False, "timeout": 30}
            if _is_memory_sqlite(url):
                # Una base en memoria vive en una sola conexión compartida por todos
                # los hilos: sus transacciones se pisan. Se usa un archivo temporal.
                fd, self.temp_path = tempfile.mkstemp(prefix="viewcount-", suffix=".db")
                os.close(fd)
                engine_url = f"sqlite:///{self.temp_path}"
                logger.warning(f"⚠️ {url} en memoria: usando base temporal {self.temp_path}")
        self.engine = create_engine(engine_url, **engine_kwargs)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    @property
    def backend_name(self) -> str:
        return self.engine.url.get_backend_name()

    def session(self) -> Session:
        return self.SessionLocal()

    def create_tables(self):
        """Crea las tablas del contador si no existen."""
        # Registrar los modelos antes de create_all()
        from . import models  # noqa: F401

        expected_tables = list(Base.metadata.tables.keys())
        logger.info(f"Tablas esperadas: {', '.join(expected_tables)}")
        Base.metadata.create_all(bind=self.engine)

        existing_tables = inspect(self.engine).get_table_names()
        missing_tables = [t for t in expected_tables if t not in existing_tables]
        if missing_tables:
            logger.warning(f"⚠️  Tablas faltantes: {', '.join(missing_tables)}")
        else:
            logger.info("✅ Todas las tablas fueron creadas/verificadas exitosamente")

    def dispose(self):
        self.engine.dispose()
        if self.temp_path and os.path.exists(self.temp_path):
            os.remove(self.temp_path)
            self.temp_path = None
