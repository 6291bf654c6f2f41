from typing import Any

from clinica.api.deps import Contexto, parse_limit
from clinica.repositories.base import (
    BaseRepository, BuscablePorTermino, Condiciones, ConsultaJoin, EliminableLogicamente,
)

MIN_TERMINO = 2
FORMATO_FECHA = "%Y-%m-%d %H:%M:%S"


async def busqueda_rapida(ctx: Contexto, repo: BaseRepository, conditions: Condiciones | None = None) -> list[dict[str, Any]]:
    """
    Autocompletado de `/<recurso>/search?termino=..&limit=..`.
    Sin término y con limit devuelve los primeros `limit`; con un término
    de menos de 2 caracteres devuelve lista vacía. limit=0 no recorta.
    """
    termino = (ctx.query.get("termino") or "").strip()
    limit = parse_limit(ctx)

    if not termino and limit >= 1:
        return await repo.consulta_con_join(  # type: ignore[return-value]
            ConsultaJoin(conditions=conditions, order_by=repo.orden_por_defecto, limit=limit)
        )
    if len(termino) < MIN_TERMINO:
        return []

    if not isinstance(repo, BuscablePorTermino):
        raise TypeError(f"{type(repo).__name__} no soporta búsqueda por término")
    filas = await repo.buscar_por_datos(termino, conditions=conditions)
    return filas[:limit] if limit else filas


async def eliminar_registro(repo: BaseRepository, id: int) -> bool:
    if isinstance(repo, EliminableLogicamente):
        return await repo.eliminar_logico_por_id(id)
    return await repo.eliminar_por_id(id)
