import json
from dataclasses import dataclass, field
from typing import Any, TypeVar

from fastapi import Request
from pydantic import BaseModel, ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncConnection

from clinica.core.config import Settings
from clinica.core.errors import Forbidden, Unauthorized, ValidationError
from clinica.core.session import Sesion
from clinica.models.usuario import RolEnum

M = TypeVar("M", bound=BaseModel)


@dataclass
class Contexto:
    """Todo lo que un handler necesita de la request en curso."""
    request: Request
    conn: AsyncConnection
    sesion: Sesion
    settings: Settings
    _body: Any = field(default=None, repr=False)

    @property
    def query(self):
        return self.request.query_params

    async def json(self) -> dict[str, Any]:
        if self._body is None:
            raw = await self.request.body()
            if not raw.strip():
                self._body = {}
            else:
                try:
                    self._body = json.loads(raw)
                except (UnicodeDecodeError, json.JSONDecodeError):
                    raise ValidationError("Error en el formato de datos") from None
            if not isinstance(self._body, dict):
                raise ValidationError("Error en el formato de datos")
        return dict(self._body)


# ---------- guardas ----------
def requiere_auth(ctx: Contexto) -> Sesion:
    if not ctx.sesion.logueado:
        raise Unauthorized("No autorizado. Inicie sesión.")
    return ctx.sesion


def requiere_admin(ctx: Contexto) -> Sesion:
    sesion = requiere_auth(ctx)
    if sesion.rol != RolEnum.admin.value:
        raise Forbidden("Acceso denegado. Se requieren privilegios de administrador.")
    return sesion


def requiere_roles(ctx: Contexto, *roles: RolEnum, mensaje: str = "Permiso denegado") -> Sesion:
    sesion = requiere_auth(ctx)
    if sesion.rol not in {r.value for r in roles}:
        raise Forbidden(mensaje)
    return sesion


# ---------- helpers de entrada ----------
def parse_id(id: str) -> int:
    try:
        return int(id)
    except (TypeError, ValueError):
        raise ValidationError("ID debe ser numérico") from None


def _entero(valor: str | None) -> int | None:
    if valor is None or valor == "":
        return None
    try:
        return int(valor)
    except ValueError:
        raise ValidationError(f"Parámetro numérico inválido: {valor}") from None


def parse_paginacion(ctx: Contexto) -> tuple[int | None, int | None]:
    """(page, per_page) acotados, o (None, None) si no vienen los dos."""
    page = _entero(ctx.query.get("page"))
    per_page = _entero(ctx.query.get("per_page"))
    if page is None or per_page is None:
        return None, None
    return max(page, 1), min(max(per_page, 1), ctx.settings.MAX_PER_PAGE)


def parse_limit(ctx: Contexto) -> int:
    return max(_entero(ctx.query.get("limit")) or 0, 0)


def validar(schema: type[M], data: dict[str, Any]) -> M:
    """Valida con pydantic y traduce el primer error a un mensaje legible."""
    try:
        return schema.model_validate(data)
    except PydanticValidationError as e:
        err = e.errors()[0]
        campo = str(err["loc"][0]) if err["loc"] else ""
        if err["type"] in ("missing", "string_too_short") or err.get("input") in ("", None):
            raise ValidationError(f"El campo '{campo}' es requerido") from None
        mensajes: dict[str, str] = getattr(schema, "mensajes", {})
        raise ValidationError(mensajes.get(campo, f"Valor inválido para '{campo}'")) from None
