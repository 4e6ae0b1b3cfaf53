"""
Render del badge SVG (estilo shields.io: etiqueta a la izquierda, número a la derecha).

El ancho del texto se estima como font_size * 0.65 por carácter en vez de
medir la fuente real. No es exacto al píxel pero es determinista: el mismo
(count, estilo) produce siempre el mismo SVG byte a byte.
"""
from typing import Optional
from xml.sax.saxutils import escape, quoteattr

from ..schemas.badge_schema import BadgeStyle
from .colors import resolve_color

CHAR_WIDTH_FACTOR = 0.65
PADDING = 6
HEIGHT = 20
RADIUS = 3

DEFAULT_STYLE = BadgeStyle()


def format_count(count: int) -> str:
    """1234567 -> "1,234,567"."""
    return f"{count:,}"


def _num(value: float) -> str:
    # 48.0 -> "48", 47.75 -> "47.75"
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def segment_widths(label: str, count_text: str, font_size: int) -> tuple[float, float]:
    """Anchos (etiqueta, contador) del badge."""
    char_width = font_size * CHAR_WIDTH_FACTOR
    label_width = len(label) * char_width + PADDING * 2
    count_width = len(count_text) * char_width + PADDING * 2
    return label_width, count_width


def render_badge(
    count: int,
    style: Optional[BadgeStyle] = None,
    *,
    label: Optional[str] = None,
    color: Optional[str] = None,
) -> str:
    if count < 0:
        raise ValueError("count must be >= 0")

    style = style or DEFAULT_STYLE
    if label is None:
        label = style.label
    count_color = resolve_color(color if color is not None else style.color,
                                default=style.count_background_color)
    count_text = format_count(count)

    label_width, count_width = segment_widths(label, count_text, style.font_size)
    total_width = label_width + count_width

    # Posición del texto (centrado en cada segmento)
    label_x = label_width / 2
    count_x = label_width + count_width / 2
    text_y = HEIGHT / 2 + 1

    width = _num(total_width)
    return f"""<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{HEIGHT}">
  <linearGradient id="smooth" x2="0" y2="100%">
    <stop offset="0" stop-color="#bbb" stop-opacity=".1"/>
    <stop offset="1" stop-opacity=".1"/>
  </linearGradient>
  <clipPath id="round">
    <rect width="{width}" height="{HEIGHT}" rx="{RADIUS}" fill="#fff"/>
  </clipPath>
  <g clip-path="url(#round)">
    <rect width="{_num(label_width)}" height="{HEIGHT}" fill={quoteattr(style.label_background_color)}/>
    <rect x="{_num(label_width)}" width="{_num(count_width)}" height="{HEIGHT}" fill={quoteattr(count_color)}/>
    <rect width="{width}" height="{HEIGHT}" fill="url(#smooth)"/>
  </g>
  <g fill={quoteattr(style.text_color)} text-anchor="middle" font-family={quoteattr(style.font_family)} font-size="{style.font_size}">
    <text x="{_num(label_x)}" y="{_num(text_y)}" dominant-baseline="middle">{escape(label)}</text>
    <text x="{_num(count_x)}" y="{_num(text_y)}" dominant-baseline="middle">{count_text}</text>
  </g>
</svg>"""
