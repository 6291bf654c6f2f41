# alembic/env.py
from __future__ import annotations

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.ext.asyncio import create_async_engine

from clinica.core.config import get_settings
from clinica.core.db import Base
import clinica.models  # noqa: F401  (pobla Base.metadata)

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _url() -> str:
    # `alembic -x url=sqlite+aiosqlite:///dev.db upgrade head` pisa la configuración
    return context.get_x_argument(as_dictionary=True).get("url") or get_settings().async_database_url


def _opciones(url: str) -> dict:
    # SQLite no soporta ALTER completo: se migra copiando la tabla
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        "render_as_batch": url.startswith("sqlite"),
    }


def run_migrations_offline() -> None:
    url = _url()
    context.configure(
        url=url.replace("+aiomysql", "").replace("+aiosqlite", ""),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_opciones(url),
    )
    with context.begin_transaction():
        context.run_migrations()


def _migrar(connection, url: str) -> None:
    context.configure(connection=connection, **_opciones(url))
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    url = _url()
    engine = create_async_engine(url, poolclass=pool.NullPool)
    async with engine.connect() as connection:
        await connection.run_sync(_migrar, url)
    await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
