from typing import Any

from clinica.repositories.base import BaseRepository, BuscablePorTermino, Condiciones, Fila, Paginable


class UsuariosRepository(BaseRepository, Paginable, BuscablePorTermino):
    table = "usuarios"
    campos = ("id", "nombre", "correo", "password", "rol")
    orden_por_defecto = "nombre ASC"

    async def obtener_por_nombre(self, nombre: str) -> Fila | None:
        filas = await self.consultar(f"SELECT * FROM {self.table} WHERE nombre = :nombre", {"nombre": nombre})
        return filas[0] if filas else None

    async def obtener_por_correo(self, correo: str) -> Fila | None:
        filas = await self.consultar(f"SELECT * FROM {self.table} WHERE correo = :correo", {"correo": correo})
        return filas[0] if filas else None

    async def buscar_por_datos(self, termino: str, page: int | None = None, per_page: int | None = None,
                               conditions: Condiciones | None = None) -> Any:
        return await self.buscar_por_termino(
            termino, ["nombre", "correo", "rol"], False, conditions, "nombre ASC", page=page, per_page=per_page
        )
