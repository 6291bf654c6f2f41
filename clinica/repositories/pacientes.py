from typing import Any

from clinica.repositories.base import BaseRepository, BuscablePorTermino, Condiciones, Paginable


class PacientesRepository(BaseRepository, Paginable, BuscablePorTermino):
    table = "pacientes"
    campos = ("id", "nombre", "telefono", "correo", "fecha_registro")
    orden_por_defecto = "nombre ASC"

    async def buscar_por_datos(self, termino: str, page: int | None = None, per_page: int | None = None,
                               conditions: Condiciones | None = None) -> Any:
        return await self.buscar_por_termino(
            termino, ["nombre", "telefono", "correo", "id"], False, conditions, self.orden_por_defecto,
            page=page, per_page=per_page,
        )
