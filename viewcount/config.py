import os
import logging

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///./viewcount.db"
DEFAULT_CACHE_TTL_SECONDS = 30 * 60  # 30 minutos


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"⚠️ {name}={raw!r} no es un entero válido, usando {default}")
        return default


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"⚠️ {name}={raw!r} no es un número válido, usando {default}")
        return default


def _bool_env(name: str, default: bool = False) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


class Settings:
    """Configuración de la aplicación que lee variables de entorno dinámicamente."""

    @property
    def app_name(self) -> str:
        return "viewcount"

    @property
    def database_url(self) -> str:
        # Sin DATABASE_URL usamos SQLite local
        return os.getenv("DATABASE_URL", "").strip() or DEFAULT_DATABASE_URL

    @property
    def cors_origins(self) -> list[str]:
        raw = os.getenv("CORS_ORIGIN", "*")
        origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
        return origins or ["*"]

    @property
    def cache_ttl_seconds(self) -> int:
        ttl = _int_env("CACHE_TTL_SECONDS", DEFAULT_CACHE_TTL_SECONDS)
        return max(ttl, 0)

    @property
    def cdn_cache(self) -> bool:
        # False => s-maxage=0, cada petición del CDN llega al origen
        return _bool_env("CDN_CACHE")

    @property
    def trust_proxy_headers(self) -> bool:
        return _bool_env("TRUST_PROXY_HEADERS")

    @property
    def counter_max_attempts(self) -> int:
        return max(_int_env("COUNTER_MAX_ATTEMPTS", 5), 1)

    @property
    def counter_retry_backoff(self) -> float:
        return max(_float_env("COUNTER_RETRY_BACKOFF", 0.05), 0.0)

    @property
    def badge_overrides(self) -> dict:
        """Overrides de estilo del badge definidos por entorno (solo los presentes)."""
        overrides = {}
        env_map = {
            "BADGE_LABEL_COLOR": "label_background_color",
            "BADGE_COLOR": "count_background_color",
            "BADGE_TEXT_COLOR": "text_color",
            "BADGE_FONT_FAMILY": "font_family",
        }
        for env_name, field in env_map.items():
            value = os.getenv(env_name, "").strip()
            if value:
                overrides[field] = value
        if os.getenv("BADGE_FONT_SIZE", "").strip():
            font_size = _int_env("BADGE_FONT_SIZE", 11)
            if font_size > 0:
                overrides["font_size"] = font_size
        return overrides


# Instancia singleton de Settings (sin cache, lee valores dinámicamente)
_settings_instance = None


def get_settings() -> Settings:
    """Retorna la instancia de Settings. Lee variables de entorno dinámicamente."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance


def clear_settings_cache():
    """Limpia la instancia de settings (aunque no es necesario con propiedades dinámicas)."""
    global _settings_instance
    _settings_instance = None
