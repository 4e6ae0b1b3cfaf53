from enum import Enum
from typing import Optional


class BadgeColor(str, Enum):
    """Paleta cerrada de colores con nombre para el badge."""

    GREEN = "#4c1"
    BLUE = "#007ec6"
    RED = "#e05d44"
    ORANGE = "#fe7d37"
    YELLOW = "#dfb317"
    PURPLE = "#9f7be1"
    PINK = "#e85aad"
    GRAY = "#555"
    BLACK = "#1a1a1a"
    CYAN = "#24b9a7"


# nombre en minúsculas -> hex (ej: "blue" -> "#007ec6")
COLORS = {color.name.lower(): color.value for color in BadgeColor}

DEFAULT_COLOR = BadgeColor.GREEN.value


def resolve_color(name: Optional[str], default: str = DEFAULT_COLOR) -> str:
    """
    Resuelve el color pedido por el cliente. Función total: nunca falla.

    - vacío / None -> default
    - nombre de la paleta -> su hex
    - "#..." -> se usa tal cual
    - cualquier otra cosa -> default
    """
    if not name:
        return default
    if name in COLORS:
        return COLORS[name]
    if name.startswith("#"):
        return name
    return default
