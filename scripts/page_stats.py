#!/usr/bin/env python3
"""
Script para consultar los contadores de una página sin registrar una vista.
Ejecutar desde la raíz del proyecto con:

    python scripts/page_stats.py https://ejemplo.com/blog
    python scripts/page_stats.py --fallback-id mi-repo

Usa DATABASE_URL (o el .env del proyecto) igual que el servidor.
"""
import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv
from sqlalchemy.engine import make_url

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from viewcount.config import get_settings  # noqa: E402
from viewcount.database import Database  # noqa: E402
from viewcount.services.counter_store import CounterStore  # noqa: E402
from viewcount.services.page_key import (  # noqa: E402
    canonicalize_page_url,
    derive_page_key,
    fallback_identifier,
)


def show_page_stats(page: str, database_url: str) -> dict:
    """Imprime y devuelve los contadores actuales de `page` (URL o fallback:<id>)."""
    # SQLite crea el archivo al conectar: una URL mal escrita no debe crear una base vacía
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        if not Path(url.database).exists():
            raise FileNotFoundError(f"No existe la base de datos: {url.database}")

    database = Database(database_url)
    try:
        page_key = derive_page_key(page)
        stats = CounterStore(database).get_stats(page_key)
    finally:
        database.dispose()

    print(f"📄 Página:    {canonicalize_page_url(page)}")
    print(f"🔑 Clave:     {page_key}")
    print(f"👁️  Vistas:    {stats.views:,}")
    print(f"👤 Visitantes: {stats.visitors:,}")
    return {"page_key": page_key, "views": stats.views, "visitors": stats.visitors}


def main(argv=None):
    parser = argparse.ArgumentParser(description="Contadores actuales de una página")
    parser.add_argument("url", nargs="?", help="URL de la página")
    parser.add_argument("--fallback-id", help="id usado en ?fallback-id= del badge")
    parser.add_argument("--database-url", help="URL de SQLAlchemy (por defecto DATABASE_URL)")
    args = parser.parse_args(argv)

    if not args.url and not args.fallback_id:
        parser.error("indicar una URL o --fallback-id")

    load_dotenv(dotenv_path=ROOT / ".env")
    page = args.url or fallback_identifier(args.fallback_id)
    database_url = args.database_url or get_settings().database_url

    try:
        show_page_stats(page, database_url)
    except Exception as e:
        print(f"❌ Error al consultar estadísticas: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
