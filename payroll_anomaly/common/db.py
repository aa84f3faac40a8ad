from __future__ import annotations

import logging

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url

from .config import Settings, get_settings


logger = logging.getLogger(__name__)


def get_engine(settings: Settings | None = None, db_url: str | None = None) -> Engine:
    if settings is None:
        settings = get_settings()
    url = make_url(db_url or settings.db_url)

    # Log básico de parámetros de conexión (sin contraseña)
    logger.info(
        "[DB] Crear engine driver=%s host=%s db=%s",
        url.drivername,
        url.host,
        url.database,
    )

    engine = create_engine(url, pool_pre_ping=True, future=True)

    # Test de conexión: ayuda a ver en logs si el proceso realmente llega a la BD
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("[DB] Test de conexión OK")
    except Exception:
        logger.exception("[DB] Test de conexión FALLÓ")

    return engine
