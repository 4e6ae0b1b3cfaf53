"""
Identidad de página: URL canónica y clave hasheada.

Dos referencias a la misma página con distinto query string o fragmento
(`?utm_source=...`, `#seccion`) cuentan como la misma página.
"""
import hashlib
from urllib.parse import quote, urlsplit

FALLBACK_PREFIX = "fallback:"
PAGE_KEY_LENGTH = 40

_DEFAULT_PORTS = {"http": 80, "https": 443}

# Caracteres que un navegador deja sin codificar en el path
_PATH_SAFE = "/%:@!$&'()*+,;=~[]|^"
_DOT_SEGMENTS = (".", "%2e")
_DOUBLE_DOT_SEGMENTS = ("..", ".%2e", "%2e.", "%2e%2e")


def fallback_identifier(fallback_id: str) -> str:
    """Identificador opaco para entornos que eliminan el Referer (ej: GitHub)."""
    return f"{FALLBACK_PREFIX}{fallback_id}"


def _normalize_path(path: str) -> str:
    """
    Path como lo deja un navegador: codificado y sin segmentos "." ni "..".

    "/a/../b" -> "/b", "/a b" -> "/a%20b", "/blog/" -> "/blog/"
    """
    segments = quote(path or "/", safe=_PATH_SAFE).split("/")[1:]
    output = []
    for i, segment in enumerate(segments):
        is_last = i == len(segments) - 1
        lowered = segment.lower()
        if lowered in _DOUBLE_DOT_SEGMENTS:
            if output:
                output.pop()
            if is_last:
                output.append("")
        elif lowered in _DOT_SEGMENTS:
            if is_last:
                output.append("")
        else:
            output.append(segment)
    return "/" + "/".join(output)


def canonicalize_page_url(raw: str) -> str:
    """
    Normaliza una URL a origen + path (sin query ni fragmento).

    Si el valor no es una URL absoluta válida se devuelve tal cual y se trata
    como identificador opaco. Nunca lanza excepciones.

    Ejemplos:
    - "https://Example.com:443/blog?utm=x#top" -> "https://example.com/blog"
    - "http://example.com" -> "http://example.com/"
    - "https://example.com/a/../b" -> "https://example.com/b"
    - "fallback:mi-repo" -> "fallback:mi-repo"
    """
    try:
        parts = urlsplit(raw.strip())
        scheme = parts.scheme.lower()
        host = parts.hostname
        # .port lanza ValueError si el puerto no es válido
        port = parts.port
    except ValueError:
        return raw

    if not scheme or not host:
        return raw

    if ":" in host:
        # IPv6 literal
        host = f"[{host}]"
    origin = f"{scheme}://{host}"
    if port is not None and port != _DEFAULT_PORTS.get(scheme):
        origin = f"{origin}:{port}"

    return f"{origin}{_normalize_path(parts.path)}"


def derive_page_key(raw: str) -> str:
    """Clave estable de 40 caracteres hex a partir de la URL o identificador."""
    canonical = canonicalize_page_url(raw)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:PAGE_KEY_LENGTH]
