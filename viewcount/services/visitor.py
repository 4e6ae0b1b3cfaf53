"""
Identidad pseudónima del visitante.

El id es sha256("<ip>:<user-agent>") truncado a 32 caracteres hex, sin sal ni
rotación: dos personas detrás de la misma IP con el mismo user-agent cuentan
como un solo visitante, y un visitante ya contado nunca se "olvida". Es una
limitación conocida del enfoque, no un bug.
"""
import hashlib
from typing import Optional, Protocol

UNKNOWN_IP = "unknown"
VISITOR_ID_LENGTH = 32


class HeaderSource(Protocol):
    def get_header(self, name: str) -> Optional[str]: ...

    def get_client_address(self) -> Optional[str]: ...


def identify_visitor(client_ip: Optional[str], user_agent: Optional[str]) -> str:
    ip = client_ip or UNKNOWN_IP
    digest = hashlib.sha256(f"{ip}:{user_agent or ''}".encode("utf-8")).hexdigest()
    return digest[:VISITOR_ID_LENGTH]


def _forwarded_ip(request: HeaderSource) -> Optional[str]:
    forwarded_for = request.get_header("x-forwarded-for")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first
    real_ip = request.get_header("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()
    return None


def client_address(request: HeaderSource, trust_proxy_headers: bool = False) -> Optional[str]:
    """
    IP del cliente.

    Por defecto manda la dirección del socket y los headers de proxy solo se
    usan si no hay dirección. Con `trust_proxy_headers` (detrás de un proxy
    o CDN propio) X-Forwarded-For / X-Real-IP tienen prioridad.
    """
    if trust_proxy_headers:
        return _forwarded_ip(request) or request.get_client_address()
    return request.get_client_address() or _forwarded_ip(request)
