from sqlalchemy import Column, String, DateTime, ForeignKey
from datetime import datetime

from ..database import Base


class VisitorRecord(Base):
    """
    Marca que un visitante ya fue contado para una página.
    Solo importa su existencia; se escribe una vez y nunca se actualiza.
    """
    __tablename__ = "page_visitors"

    page_key = Column(String(40), ForeignKey("page_stats.page_key"), primary_key=True)
    # Hash (32 caracteres hex) de IP + user-agent
    visitor_id = Column(String(32), primary_key=True)
    first_seen = Column(DateTime, default=datetime.utcnow, nullable=False)
