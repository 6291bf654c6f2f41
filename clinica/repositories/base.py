"""
Constructor de consultas genérico sobre una tabla con lista blanca de campos.

Todo valor viaja como parámetro ligado (`text()` con `:nombre`); en el SQL
sólo se interpolan identificadores que vienen del código (tabla, columnas
de la lista blanca, joins y ordenamientos declarados por cada repositorio).
"""
import abc
import itertools
import logging
import math
import re
from dataclasses import dataclass
from typing import Any, ClassVar, Mapping, Sequence

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncConnection

from clinica.core.errors import ConflictError, QueryError, ValidationError

logger = logging.getLogger(__name__)

Fila = dict[str, Any]
Condiciones = Mapping[str, Any]

_NO_ALFANUM = re.compile(r"[^a-zA-Z0-9_]")


def escapar_like(termino: str) -> str:
    return termino.replace("!", "!!").replace("%", "!%").replace("_", "!_")


def paginacion(page: int, per_page: int, total: int) -> dict[str, Any]:
    total_pages = math.ceil(total / per_page)
    return {
        "current_page": page,
        "per_page": per_page,
        "total": total,
        "total_pages": total_pages,
        "has_next": page < total_pages,
        "has_prev": page > 1,
    }


@dataclass
class ConsultaJoin:
    """Configuración de `consulta_con_join`."""
    joins: Sequence[str] = ()
    select_fields: str = "*"
    conditions: Condiciones | None = None
    order_by: str = ""
    group_by: str = ""
    limit: int | None = None
    offset: int | None = None
    page: int | None = None
    per_page: int | None = None
    table_alias: str | None = None


# ---------- capacidades que declara cada repositorio ----------
class Paginable(abc.ABC):
    @abc.abstractmethod
    async def paginar(self, page: int, per_page: int, conditions: Condiciones | None = None,
                      order_by: str | None = None) -> dict[str, Any]: ...


class BuscablePorTermino(abc.ABC):
    @abc.abstractmethod
    async def buscar_por_datos(self, termino: str, page: int | None = None, per_page: int | None = None,
                               conditions: Condiciones | None = None) -> Any: ...


class EliminableLogicamente(abc.ABC):
    @abc.abstractmethod
    async def eliminar_logico_por_id(self, id: int) -> bool: ...


class BaseRepository:
    table: ClassVar[str]
    campos: ClassVar[tuple[str, ...]]
    orden_por_defecto: ClassVar[str] = ""

    def __init__(self, conn: AsyncConnection):
        self.conn = conn
        self._contador = itertools.count()

    # ---------- ejecución ----------
    async def _ejecutar(self, sql: str, params: Mapping[str, Any] | None = None):
        try:
            return await self.conn.execute(text(sql), dict(params or {}))
        except IntegrityError as e:
            logger.warning("Violación de integridad en %s: %s", self.table, e.orig)
            raise ConflictError(f"Conflicto de integridad: {e.orig}") from e
        except DBAPIError as e:
            raise QueryError(f"Error en query: {e.orig}") from e

    async def consultar(self, sql: str, params: Mapping[str, Any] | None = None) -> list[Fila]:
        result = await self._ejecutar(sql, params)
        return [dict(r) for r in result.mappings().all()]

    # ---------- armado de SQL ----------
    def _param(self, prefijo: str, columna: str) -> str:
        # nombre único aunque la misma columna aparezca en condiciones y búsqueda
        return f"{prefijo}_{_NO_ALFANUM.sub('_', columna)}_{next(self._contador)}"

    def _where(self, conditions: Condiciones | None) -> tuple[list[str], dict[str, Any]]:
        partes: list[str] = []
        params: dict[str, Any] = {}
        for columna, valor in (conditions or {}).items():
            if valor is None:
                partes.append(f"{columna} IS NULL")
                continue
            nombre = self._param("cond", columna)
            partes.append(f"{columna} = :{nombre}")
            params[nombre] = valor
        return partes, params

    def _desde(self, table_alias: str | None, joins: Sequence[str]) -> str:
        sql = f"{self.table} {table_alias}" if table_alias else self.table
        for join in joins:
            sql += f" {join}"
        return sql

    @staticmethod
    def _validar_pagina(page: int, per_page: int) -> None:
        if page < 1 or per_page < 1:
            raise ValidationError("page y per_page deben ser mayores o iguales a 1")

    async def _seleccionar(
        self,
        where: list[str],
        params: dict[str, Any],
        *,
        select_fields: str = "*",
        table_alias: str | None = None,
        joins: Sequence[str] = (),
        group_by: str = "",
        order_by: str = "",
        page: int | None = None,
        per_page: int | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[Fila] | dict[str, Any]:
        paginado = page is not None and per_page is not None
        if paginado:
            self._validar_pagina(page, per_page)  # type: ignore[arg-type]
            limit, offset = per_page, (page - 1) * per_page  # type: ignore[operator]

        desde = self._desde(table_alias, joins)
        filtro = f" WHERE {' AND '.join(where)}" if where else ""
        agrupado = f" GROUP BY {group_by}" if group_by else ""

        sql = f"SELECT {select_fields} FROM {desde}{filtro}{agrupado}"
        if order_by:
            sql += f" ORDER BY {order_by}"
        consulta = dict(params)
        if limit is not None:
            sql += " LIMIT :limit"
            consulta["limit"] = int(limit)
            if offset is not None:
                sql += " OFFSET :offset"
                consulta["offset"] = int(offset)

        data = await self.consultar(sql, consulta)
        if not paginado:
            return data

        if group_by:
            # agrupar cambia la cantidad de filas: se cuenta sobre la consulta agrupada
            count_sql = f"SELECT COUNT(*) AS total FROM (SELECT 1 AS uno FROM {desde}{filtro}{agrupado}) AS count_table"
        else:
            count_sql = f"SELECT COUNT(*) AS total FROM {desde}{filtro}"
        result = await self._ejecutar(count_sql, params)
        total = int(result.scalar_one() or 0)
        return {"data": data, "pagination": paginacion(page, per_page, total)}  # type: ignore[arg-type]

    # ---------- operaciones ----------
    async def listar(self, conditions: Condiciones | None = None, order_by: str = "") -> list[Fila]:
        where, params = self._where(conditions)
        return await self._seleccionar(where, params, order_by=order_by)  # type: ignore[return-value]

    async def paginar(self, page: int, per_page: int, conditions: Condiciones | None = None,
                      order_by: str | None = None) -> dict[str, Any]:
        where, params = self._where(conditions)
        order = self.orden_por_defecto if order_by is None else order_by
        return await self._seleccionar(  # type: ignore[return-value]
            where, params, order_by=order, page=page, per_page=per_page
        )

    async def obtener_por_id(self, id: int) -> Fila | None:
        filas = await self.listar({"id": id})
        return filas[0] if filas else None

    def filtrar_campos(self, data: Mapping[str, Any]) -> dict[str, Any]:
        return {k: v for k, v in data.items() if k in self.campos}

    async def insertar(self, data: Mapping[str, Any]) -> int:
        filtrados = self.filtrar_campos(data)
        if not filtrados:
            raise ValidationError("No hay datos válidos para insertar")

        columnas = ", ".join(filtrados)
        marcadores = ", ".join(f":{c}" for c in filtrados)
        result = await self._ejecutar(
            f"INSERT INTO {self.table} ({columnas}) VALUES ({marcadores})", filtrados
        )
        return int(result.lastrowid)

    async def actualizar_por_id(self, id: int, data: Mapping[str, Any]) -> bool:
        sets: list[str] = []
        params: dict[str, Any] = {"_id": id}
        for columna, valor in self.filtrar_campos(data).items():
            nombre = self._param("set", columna)
            sets.append(f"{columna} = :{nombre}")
            params[nombre] = valor

        if not sets:
            raise ValidationError("No hay campos válidos para actualizar")

        result = await self._ejecutar(
            f"UPDATE {self.table} SET {', '.join(sets)} WHERE id = :_id", params
        )
        return result.rowcount > 0

    async def eliminar_por_id(self, id: int) -> bool:
        result = await self._ejecutar(f"DELETE FROM {self.table} WHERE id = :id", {"id": id})
        return result.rowcount > 0

    async def contar(self, conditions: Condiciones | None = None) -> int:
        where, params = self._where(conditions)
        sql = f"SELECT COUNT(*) AS total FROM {self.table}"
        if where:
            sql += f" WHERE {' AND '.join(where)}"
        result = await self._ejecutar(sql, params)
        return int(result.scalar_one() or 0)

    async def existe(self, conditions: Condiciones) -> bool:
        return await self.contar(conditions) > 0

    async def consulta_con_join(self, config: ConsultaJoin) -> list[Fila] | dict[str, Any]:
        where, params = self._where(config.conditions)
        return await self._seleccionar(
            where,
            params,
            select_fields=config.select_fields,
            table_alias=config.table_alias,
            joins=config.joins,
            group_by=config.group_by,
            order_by=config.order_by,
            page=config.page,
            per_page=config.per_page,
            limit=config.limit,
            offset=config.offset,
        )

    async def buscar_por_termino(
        self,
        termino: str | None,
        campos_busqueda: Sequence[str] | None = None,
        exacto: bool = False,
        conditions: Condiciones | None = None,
        order_by: str = "",
        joins: Sequence[str] = (),
        select_fields: str = "*",
        page: int | None = None,
        per_page: int | None = None,
        table_alias: str | None = None,
    ) -> list[Fila] | dict[str, Any]:
        if not termino:
            if page is not None and per_page is not None:
                return await self.paginar(page, per_page, conditions, order_by)
            return await self.listar(conditions, order_by)

        campos = list(campos_busqueda or self.campos)
        if not joins:
            campos = [c for c in campos if c in self.campos]
            if not campos:
                raise ValidationError("No hay campos válidos para búsqueda")

        where, params = self._where(conditions)
        grupo: list[str] = []
        for campo in campos:
            nombre = self._param("busq", campo)
            if exacto:
                grupo.append(f"{campo} = :{nombre}")
                params[nombre] = termino
            else:
                grupo.append(f"LOWER({campo}) LIKE LOWER(:{nombre}) ESCAPE '!'")
                params[nombre] = f"%{escapar_like(termino)}%"
        where.append(f"({' OR '.join(grupo)})")

        return await self._seleccionar(
            where,
            params,
            select_fields=select_fields,
            table_alias=table_alias,
            joins=joins,
            order_by=order_by,
            page=page,
            per_page=per_page,
        )
