from typing import Any

from clinica.repositories.base import (
    BaseRepository, BuscablePorTermino, Condiciones, ConsultaJoin, Fila, Paginable,
)

JOINS = (
    "INNER JOIN pacientes p ON c.paciente_id = p.id",
    "INNER JOIN servicios s ON c.servicio_id = s.id",
    "INNER JOIN usuarios u ON c.medico_usuario_id = u.id",
)

SELECT_DETALLE = (
    "c.*, "
    "p.nombre AS paciente_nombre, "
    "u.nombre AS medico_nombre, "
    "s.nombre AS servicio_nombre"
)

CAMPOS_BUSQUEDA = (
    "c.notas",
    "c.id",
    "c.medico_usuario_id",
    "c.paciente_id",
    "c.estado",
    "p.nombre",
    "u.nombre",
    "s.nombre",
)


def orden_fecha(orden: str | None) -> str:
    # sólo ASC/DESC llegan al SQL
    direccion = "ASC" if (orden or "").strip().upper() == "ASC" else "DESC"
    return f"c.fecha_hora {direccion}"


class CitasRepository(BaseRepository, Paginable, BuscablePorTermino):
    table = "citas"
    campos = ("id", "paciente_id", "servicio_id", "medico_usuario_id", "fecha_hora", "estado", "notas")
    orden_por_defecto = "c.fecha_hora DESC"

    async def listar_con_detalle(self, conditions: Condiciones | None = None, order_by: str | None = None,
                                 page: int | None = None, per_page: int | None = None) -> list[Fila] | dict[str, Any]:
        """Citas con nombre de paciente, médico y servicio."""
        config = ConsultaJoin(
            joins=JOINS,
            select_fields=SELECT_DETALLE,
            conditions=conditions,
            order_by=order_by or self.orden_por_defecto,
            table_alias="c",
        )
        if page is not None and per_page is not None:
            config.page = page
            config.per_page = per_page
        return await self.consulta_con_join(config)

    async def obtener_detalle(self, id: int) -> Fila | None:
        filas = await self.listar_con_detalle({"c.id": id})
        return filas[0] if filas else None  # type: ignore[index]

    async def paginar(self, page: int, per_page: int, conditions: Condiciones | None = None,
                      order_by: str | None = None) -> dict[str, Any]:
        return await self.listar_con_detalle(conditions, order_by, page, per_page)  # type: ignore[return-value]

    async def buscar_con_detalle(self, termino: str | None, exacto: bool = False,
                                 conditions: Condiciones | None = None, order_by: str | None = None,
                                 page: int | None = None, per_page: int | None = None) -> Any:
        if not termino:
            return await self.listar_con_detalle(conditions, order_by, page, per_page)
        return await self.buscar_por_termino(
            termino,
            CAMPOS_BUSQUEDA,
            exacto,
            conditions,
            order_by or self.orden_por_defecto,
            JOINS,
            SELECT_DETALLE,
            page,
            per_page,
            "c",
        )

    async def buscar_por_datos(self, termino: str, page: int | None = None, per_page: int | None = None,
                               conditions: Condiciones | None = None) -> Any:
        return await self.buscar_con_detalle(termino, False, conditions, None, page, per_page)

    async def buscar_por_fecha_y_termino(self, termino: str | None, fecha: str | None = None,
                                         page: int | None = None, per_page: int | None = None,
                                         conditions: Condiciones | None = None) -> Any:
        condiciones = dict(conditions or {})
        if fecha:
            condiciones["DATE(c.fecha_hora)"] = fecha
        return await self.buscar_con_detalle(termino, False, condiciones, "c.fecha_hora ASC", page, per_page)

    async def filtrar(self, filtros: dict[str, Any]) -> list[Fila] | dict[str, Any]:
        conditions: dict[str, Any] = {}
        if filtros.get("medico_id"):
            conditions["c.medico_usuario_id"] = filtros["medico_id"]
        if filtros.get("estado"):
            conditions["c.estado"] = filtros["estado"]
        if filtros.get("fecha"):
            conditions["DATE(c.fecha_hora)"] = filtros["fecha"]
        if filtros.get("paciente_id"):
            conditions["c.paciente_id"] = filtros["paciente_id"]

        return await self.listar_con_detalle(
            conditions, orden_fecha(filtros.get("orden")), filtros.get("page"), filtros.get("per_page")
        )

    async def tiene_citas(self, columna: str, id: int) -> bool:
        if columna not in ("paciente_id", "servicio_id", "medico_usuario_id"):
            raise ValueError(columna)
        return await self.existe({columna: id})
