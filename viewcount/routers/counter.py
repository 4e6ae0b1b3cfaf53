from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import Response

from ..schemas.badge_schema import CounterMode
from ..services.counter_handler import CounterHandler, SVG_CONTENT_TYPE

router = APIRouter(tags=["counter"])


class StarletteCounterRequest:
    """Adapta un Request de FastAPI/Starlette a CounterRequest."""

    def __init__(self, request: Request):
        self.request = request

    def get_header(self, name: str) -> Optional[str]:
        return self.request.headers.get(name)

    def get_client_address(self) -> Optional[str]:
        client = self.request.client
        return client.host if client else None

    def get_query_param(self, name: str) -> Optional[str]:
        return self.request.query_params.get(name)


class BufferedCounterResponse:
    """Acumula status, headers y body para devolver un Response de FastAPI."""

    def __init__(self):
        self.status_code = 200
        self.headers: dict[str, str] = {}
        self.body = ""

    def set_status(self, code: int) -> None:
        self.status_code = code

    def set_header(self, name: str, value: str) -> None:
        self.headers[name] = value

    def write_body(self, body: str) -> None:
        self.body = body

    def to_response(self) -> Response:
        return Response(content=self.body, status_code=self.status_code, headers=self.headers)


def get_counter_handler(request: Request) -> CounterHandler:
    return request.app.state.counter_handler


def _badge(request: Request, handler: CounterHandler, mode: CounterMode) -> Response:
    response = BufferedCounterResponse()
    handler.handle(StarletteCounterRequest(request), response, mode)
    return response.to_response()


@router.get("/views")
def views_badge(request: Request, handler: CounterHandler = Depends(get_counter_handler)):
    """Badge con el total de vistas de la página que lo incrusta."""
    return _badge(request, handler, CounterMode.VIEWS)


@router.get("/visitors")
def visitors_badge(request: Request, handler: CounterHandler = Depends(get_counter_handler)):
    """Badge con el total de visitantes únicos de la página que lo incrusta."""
    return _badge(request, handler, CounterMode.VISITORS)


@router.get("/preview")
def preview_badge(
    count: int = Query(0, ge=0),
    mode: str = "views",
    color: Optional[str] = None,
    handler: CounterHandler = Depends(get_counter_handler),
):
    """Renderiza un badge con un número arbitrario sin registrar la vista."""
    if mode.lower() not in ("views", "visitors"):
        raise HTTPException(status_code=400, detail="mode debe ser 'views' o 'visitors'")
    counter_mode = CounterMode.VISITORS if mode.lower() == "visitors" else CounterMode.VIEWS
    svg = handler.preview(count, counter_mode, color)
    return Response(
        content=svg,
        media_type=SVG_CONTENT_TYPE,
        headers={"Cache-Control": handler.cache_control},
    )
