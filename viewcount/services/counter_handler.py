"""
Handler del badge independiente del servidor HTTP.

Cada transporte (FastAPI, un servidor de desarrollo, una función serverless...)
implementa CounterRequest / CounterResponse y delega en CounterHandler.handle().
"""
import logging
from typing import Optional, Protocol

from ..errors import CounterError, MissingPageIdentity
from ..schemas.badge_schema import BadgeStyle, CounterMode
from .badge import render_badge
from .counter_store import CounterStore
from .page_key import canonicalize_page_url, derive_page_key, fallback_identifier
from .visitor import client_address, identify_visitor

logger = logging.getLogger(__name__)

SVG_CONTENT_TYPE = "image/svg+xml"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"


class CounterRequest(Protocol):
    def get_header(self, name: str) -> Optional[str]: ...

    def get_client_address(self) -> Optional[str]: ...

    def get_query_param(self, name: str) -> Optional[str]: ...


class CounterResponse(Protocol):
    def set_status(self, code: int) -> None: ...

    def set_header(self, name: str, value: str) -> None: ...

    def write_body(self, body: str) -> None: ...


def resolve_page_url(request: CounterRequest) -> str:
    """
    URL canónica de la página que pide el badge.

    Primero el Referer; si no viene (GitHub y otros lo eliminan) se usa
    ?fallback-id=. Sin ninguno de los dos lanza MissingPageIdentity.
    """
    referer = request.get_header("referer") or request.get_header("referrer")
    if referer:
        return canonicalize_page_url(referer)

    fallback_id = request.get_query_param("fallback-id")
    if fallback_id:
        return fallback_identifier(fallback_id)

    raise MissingPageIdentity()


def cache_control_header(ttl_seconds: int, cdn_cache: bool = False) -> str:
    # s-maxage=0: el CDN no cachea y cada petición llega al origen
    shared_ttl = ttl_seconds if cdn_cache else 0
    return f"public, max-age={ttl_seconds}, s-maxage={shared_ttl}"


class CounterHandler:
    def __init__(
        self,
        store: CounterStore,
        style: Optional[BadgeStyle] = None,
        cache_ttl_seconds: int = 1800,
        cdn_cache: bool = False,
        trust_proxy_headers: bool = False,
    ):
        self.store = store
        self.style = style or BadgeStyle()
        self.cache_control = cache_control_header(cache_ttl_seconds, cdn_cache)
        self.trust_proxy_headers = trust_proxy_headers

    def preview(self, count: int, mode: CounterMode = CounterMode.VIEWS, color: Optional[str] = None) -> str:
        """Badge con un número dado, sin registrar ninguna vista."""
        return render_badge(count, self.style, label=mode.value, color=color)

    def handle(self, request: CounterRequest, response: CounterResponse, mode: CounterMode) -> None:
        try:
            page_url = resolve_page_url(request)
            visitor_id = identify_visitor(
                client_address(request, self.trust_proxy_headers),
                request.get_header("user-agent"),
            )
            stats = self.store.record_view(derive_page_key(page_url), visitor_id, url=page_url)

            count = stats.visitors if mode == CounterMode.VISITORS else stats.views
            svg = self.preview(count, mode, request.get_query_param("color"))
        except CounterError as e:
            if e.status_code >= 500:
                logger.error(f"View counter error: {type(e).__name__}")
            self._write_error(response, e.status_code, e.public_message)
            return
        except Exception as e:
            logger.error(f"View counter error: {e}", exc_info=True)
            self._write_error(response, 500, CounterError.public_message)
            return

        response.set_status(200)
        response.set_header("Content-Type", SVG_CONTENT_TYPE)
        response.set_header("Cache-Control", self.cache_control)
        response.write_body(svg)

    def _write_error(self, response: CounterResponse, status_code: int, message: str) -> None:
        response.set_status(status_code)
        response.set_header("Content-Type", TEXT_CONTENT_TYPE)
        response.set_header("Cache-Control", "no-store")
        response.write_body(message)
