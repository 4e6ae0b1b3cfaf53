# Importar todos los modelos para que SQLAlchemy los registre
from .page_stats import PageStats
from .visitor_record import VisitorRecord

__all__ = [
    "PageStats",
    "VisitorRecord",
]
