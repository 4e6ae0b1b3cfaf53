"""
Contador transaccional de vistas y visitantes únicos por página.

Cada vista es un read-modify-write con control de concurrencia optimista:
- PageStats lleva version_id; un UPDATE sobre una versión vieja no afecta filas
  y SQLAlchemy lanza StaleDataError.
- Dos inserts concurrentes de la misma página o del mismo (página, visitante)
  chocan contra la primary key y lanzan IntegrityError.
En ambos casos el intento se descarta entero (rollback) y se repite desde la
lectura, así nunca se devuelve un resultado calculado sobre datos viejos.
"""
import logging
import random
import time
from datetime import datetime
from typing import NamedTuple, Optional

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from ..database import Database
from ..errors import StoreUnavailable
from ..models.page_stats import PageStats
from ..models.visitor_record import VisitorRecord

logger = logging.getLogger(__name__)

# Conflictos con otra transacción o base momentáneamente bloqueada/caída
RETRYABLE_ERRORS = (StaleDataError, IntegrityError, OperationalError)
MAX_BACKOFF_SECONDS = 1.0


class PageCounts(NamedTuple):
    views: int
    visitors: int


class CounterStore:
    def __init__(self, database: Database, max_attempts: int = 5, retry_backoff: float = 0.05):
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.database = database
        self.max_attempts = max_attempts
        self.retry_backoff = retry_backoff

    def _backoff_delay(self, attempt: int) -> float:
        # Exponencial con jitter para que los reintentos no vuelvan a chocar
        base = min(self.retry_backoff * (2 ** (attempt - 1)), MAX_BACKOFF_SECONDS)
        return base + random.uniform(0, base)

    def record_view(self, page_key: str, visitor_id: str, url: Optional[str] = None) -> PageCounts:
        """
        Registra una vista y devuelve los totales ya confirmados (views, visitors).

        Lanza StoreUnavailable si no se pudo confirmar tras `max_attempts`
        intentos; en ese caso no queda ningún cambio parcial.
        """
        last_error = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                return self._record_view_once(page_key, visitor_id, url)
            except RETRYABLE_ERRORS as e:
                last_error = e
                logger.warning(
                    f"[Counter] Conflicto en {page_key[:8]}... "
                    f"(intento {attempt}/{self.max_attempts}): {type(e).__name__}"
                )
                if attempt < self.max_attempts and self.retry_backoff > 0:
                    time.sleep(self._backoff_delay(attempt))
            except SQLAlchemyError as e:
                logger.error(f"[Counter] Error de base de datos en {page_key[:8]}...: {e}", exc_info=True)
                raise StoreUnavailable("record_view failed") from e

        logger.error(
            f"[Counter] No se pudo registrar la vista de {page_key[:8]}... "
            f"tras {self.max_attempts} intentos"
        )
        raise StoreUnavailable("record_view retries exhausted") from last_error

    def _record_view_once(self, page_key: str, visitor_id: str, url: Optional[str]) -> PageCounts:
        with self.database.session() as db:
            try:
                visitor = db.query(VisitorRecord).filter(
                    VisitorRecord.page_key == page_key,
                    VisitorRecord.visitor_id == visitor_id,
                ).first()
                stats = db.query(PageStats).filter(PageStats.page_key == page_key).first()

                is_new_visitor = visitor is None
                current_views = stats.views if stats else 0
                current_visitors = stats.visitors if stats else 0

                new_views = current_views + 1
                new_visitors = current_visitors + 1 if is_new_visitor else current_visitors

                now = datetime.utcnow()
                if stats is None:
                    # Primera vista de la página
                    stats = PageStats(
                        page_key=page_key,
                        url=url,
                        views=new_views,
                        visitors=new_visitors,
                        created_at=now,
                    )
                    db.add(stats)
                else:
                    stats.views = new_views
                    stats.visitors = new_visitors
                    stats.updated_at = now
                    if url and not stats.url:
                        stats.url = url

                # La página debe existir antes que sus visitantes (FK)
                db.flush()

                if is_new_visitor:
                    db.add(VisitorRecord(page_key=page_key, visitor_id=visitor_id, first_seen=now))

                db.commit()
            except Exception:
                db.rollback()
                raise

        if is_new_visitor:
            logger.info(f"[Counter] Nuevo visitante {visitor_id[:8]}... en {page_key[:8]}...")
        return PageCounts(views=new_views, visitors=new_visitors)

    def get_stats(self, page_key: str) -> PageCounts:
        """Totales actuales; (0, 0) si la página nunca fue vista."""
        try:
            with self.database.session() as db:
                stats = db.query(PageStats).filter(PageStats.page_key == page_key).first()
                if stats is None:
                    return PageCounts(views=0, visitors=0)
                return PageCounts(views=stats.views or 0, visitors=stats.visitors or 0)
        except SQLAlchemyError as e:
            logger.error(f"[Counter] Error al leer estadísticas de {page_key[:8]}...: {e}", exc_info=True)
            raise StoreUnavailable("get_stats failed") from e
