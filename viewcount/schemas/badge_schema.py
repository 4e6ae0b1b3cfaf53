from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class CounterMode(str, Enum):
    """Qué contador muestra el badge. El valor es también la etiqueta."""

    VIEWS = "Views"
    VISITORS = "Visitors"


class BadgeStyle(BaseModel):
    label_background_color: str = "#555"
    # Color del contador cuando no se pide uno (o el pedido no se reconoce)
    count_background_color: str = "#4c1"
    text_color: str = "#fff"
    font_family: str = "Verdana,Geneva,DejaVu Sans,sans-serif"
    font_size: int = Field(default=11, gt=0)
    label: str = CounterMode.VIEWS.value
    color: Optional[str] = None

    model_config = {"frozen": True}
