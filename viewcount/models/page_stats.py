from sqlalchemy import Column, Integer, String, Text, DateTime, BigInteger
from datetime import datetime

from ..database import Base


class PageStats(Base):
    """
    Totales actuales de una página.
    La clave es el hash (40 caracteres hex) de la URL canónica o del fallback-id.
    """
    __tablename__ = "page_stats"

    page_key = Column(String(40), primary_key=True)
    # URL canónica (origen + path) o "fallback:<id>"
    url = Column(Text, nullable=True)
    views = Column(BigInteger, default=0, nullable=False)
    visitors = Column(BigInteger, default=0, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, nullable=True)

    # Control de concurrencia optimista: cada UPDATE exige la versión leída
    version_id = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version_id}
