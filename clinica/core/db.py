# clinica/core/db.py
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from clinica.core.config import Settings


class Base(DeclarativeBase):
    pass


def _activar_foreign_keys(dbapi_conn, _record) -> None:
    # SQLite no valida FKs salvo que se pida en cada conexión
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine(settings: Settings) -> AsyncEngine:
    """Pool de conexiones único del proceso; se pasa por referencia a quien lo use."""
    url = settings.async_database_url
    engine = create_async_engine(url, echo=False, pool_pre_ping=True)
    if engine.dialect.name == "sqlite":
        event.listen(engine.sync_engine, "connect", _activar_foreign_keys)
    return engine


async def create_tables(engine: AsyncEngine) -> None:
    import clinica.models  # noqa: F401  (pobla Base.metadata)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
