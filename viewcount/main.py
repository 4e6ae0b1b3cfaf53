import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, get_settings, clear_settings_cache
from .database import Database
from .routers import counter, stats
from .schemas.badge_schema import BadgeStyle
from .services.colors import COLORS
from .services.counter_handler import CounterHandler
from .services.counter_store import CounterStore

# Configurar logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Cargar variables de entorno desde .env (solo en desarrollo local)
backend_dir = Path(__file__).parent.parent  # viewcount/main.py -> raíz del proyecto
env_path = backend_dir / ".env"
loaded = load_dotenv(dotenv_path=env_path)
if loaded:
    logger.info(f"Variables de entorno cargadas desde: {env_path}")

# Limpiar cache de settings para asegurar que se recarguen las variables
clear_settings_cache()


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """
    Construye la aplicación. El Database se crea una sola vez aquí (o lo pasa
    quien llama, ej: los tests) y se comparte con el store y los endpoints.
    """
    settings = settings or get_settings()
    database = database or Database(settings.database_url)
    logger.info(f"🗄️ Base de datos: {database.backend_name}")

    try:
        database.create_tables()
    except Exception as e:
        logger.error(f"❌ ERROR al crear tablas: {str(e)}", exc_info=True)
        logger.warning("⚠️ El servidor continuará iniciando, pero el contador puede no estar disponible")

    store = CounterStore(
        database,
        max_attempts=settings.counter_max_attempts,
        retry_backoff=settings.counter_retry_backoff,
    )
    style = BadgeStyle(**settings.badge_overrides)
    handler = CounterHandler(
        store,
        style=style,
        cache_ttl_seconds=settings.cache_ttl_seconds,
        cdn_cache=settings.cdn_cache,
        trust_proxy_headers=settings.trust_proxy_headers,
    )

    app = FastAPI(title="viewcount", version="0.1.0", redirect_slashes=False)
    app.state.settings = settings
    app.state.database = database
    app.state.counter_store = store
    app.state.counter_handler = handler

    allowed_origins = settings.cors_origins
    logger.info(f"🌐 Orígenes CORS permitidos: {allowed_origins}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.include_router(counter.router)
    app.include_router(stats.router, prefix="/api")

    @app.get("/", tags=["root"])
    async def root():
        return {
            "message": "viewcount: contador de vistas y visitantes",
            "endpoints": ["/views", "/visitors", "/preview", "/api/stats"],
            "colors": sorted(COLORS),
            "cache_ttl_seconds": settings.cache_ttl_seconds,
        }

    @app.get("/api/health", tags=["health"])
    async def health():
        return {"status": "ok", "server": "alive"}

    logger.info(
        f"🔧 Cache TTL: {settings.cache_ttl_seconds}s "
        f"(CDN {'habilitado' if settings.cdn_cache else 'deshabilitado'})"
    )
    return app


app = create_app()
