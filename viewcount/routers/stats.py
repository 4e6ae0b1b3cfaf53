import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from ..errors import StoreUnavailable
from ..schemas.stats_schema import PageStatsOut
from ..services.counter_store import CounterStore
from ..services.page_key import derive_page_key, fallback_identifier

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stats", tags=["stats"])


def get_store(request: Request) -> CounterStore:
    return request.app.state.counter_store


@router.get("", response_model=PageStatsOut)
def get_page_stats(
    url: Optional[str] = None,
    fallback_id: Optional[str] = Query(None, alias="fallback-id"),
    store: CounterStore = Depends(get_store),
):
    """
    Obtiene los totales actuales de una página sin registrar una vista.
    - url: URL de la página (se ignoran query string y fragmento)
    - fallback-id: el mismo id usado en ?fallback-id= del badge
    """
    if url:
        page_key = derive_page_key(url)
    elif fallback_id:
        page_key = derive_page_key(fallback_identifier(fallback_id))
    else:
        raise HTTPException(status_code=400, detail="Indicar ?url= o ?fallback-id=")

    try:
        stats = store.get_stats(page_key)
    except StoreUnavailable:
        raise HTTPException(status_code=500, detail="Internal server error")

    return PageStatsOut(page_key=page_key, views=stats.views, visitors=stats.visitors)
