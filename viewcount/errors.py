"""
Errores del contador que llegan al borde HTTP.

Las URLs mal formadas y los colores desconocidos no son errores: se resuelven
localmente (identificador opaco y color por defecto respectivamente).
"""


class CounterError(Exception):
    """Error base del contador. `status_code` es lo que ve el cliente."""

    status_code = 500
    public_message = "Internal server error"


class MissingPageIdentity(CounterError):
    """La petición no trae Referer ni ?fallback-id=."""

    status_code = 400
    public_message = (
        "Missing Referer header. Use ?fallback-id=your-id for environments "
        "that strip Referer (e.g., GitHub READMEs)."
    )


class StoreUnavailable(CounterError):
    """La transacción no pudo completarse; la base de datos quedó intacta."""

    status_code = 500
