import logging
from typing import Any

from clinica.api.deps import (
    Contexto, parse_id, parse_paginacion, requiere_admin, requiere_auth, validar,
)
from clinica.api.v1._helpers import eliminar_registro
from clinica.core.errors import ConflictError, Forbidden, NotFound, ValidationError
from clinica.core.responses import respuesta_json
from clinica.core.router import Router
from clinica.core.security import hash_password
from clinica.models.usuario import RolEnum
from clinica.repositories.citas import CitasRepository
from clinica.repositories.usuarios import UsuariosRepository
from clinica.schemas.usuario import UsuarioCreate, UsuarioOut, UsuarioUpdate

logger = logging.getLogger(__name__)

router = Router(prefix="/usuarios")


def sin_password(resultado: Any) -> Any:
    """Acepta fila, lista de filas o el sobre paginado."""
    if isinstance(resultado, dict) and "pagination" in resultado:
        return {**resultado, "data": sin_password(resultado["data"])}
    if isinstance(resultado, list):
        return [sin_password(f) for f in resultado]
    return UsuarioOut.model_validate(resultado).model_dump()


def _es_admin_o_propio(ctx: Contexto, id: int) -> bool:
    return ctx.sesion.rol == RolEnum.admin.value or ctx.sesion.usuario_id == id


@router.get("")
async def listar_usuarios(ctx: Contexto):
    requiere_admin(ctx)
    repo = UsuariosRepository(ctx.conn)
    page, per_page = parse_paginacion(ctx)
    search = ctx.query.get("search", "")
    rol = ctx.query.get("rol", "")

    conditions = {"rol": rol} if rol else {}
    if search:
        data = await repo.buscar_por_datos(search, page, per_page, conditions)
    elif page is not None:
        data = await repo.paginar(page, per_page, conditions)  # type: ignore[arg-type]
    else:
        data = await repo.listar(conditions, "nombre ASC")
    return respuesta_json(sin_password(data))


@router.get("/{id}")
async def obtener_usuario(ctx: Contexto, id: str):
    requiere_auth(ctx)
    usuario_id = parse_id(id)
    if not _es_admin_o_propio(ctx, usuario_id):
        raise Forbidden("No tienes permiso para ver este usuario")

    usuario = await UsuariosRepository(ctx.conn).obtener_por_id(usuario_id)
    if not usuario:
        raise NotFound("Usuario no encontrado")
    return respuesta_json(sin_password(usuario))


@router.post("")
async def crear_usuario(ctx: Contexto):
    requiere_admin(ctx)
    payload = validar(UsuarioCreate, await ctx.json())
    repo = UsuariosRepository(ctx.conn)

    if await repo.obtener_por_correo(payload.correo):
        raise ConflictError("El correo ya está registrado")
    if await repo.obtener_por_nombre(payload.nombre):
        raise ConflictError("El nombre de usuario ya existe")

    datos = payload.model_dump(mode="json")
    datos["password"] = hash_password(payload.password)
    id = await repo.insertar(datos)
    return respuesta_json({"id": id, "message": "Usuario creado exitosamente"}, 201)


@router.put("/{id}")
async def actualizar_usuario(ctx: Contexto, id: str):
    requiere_auth(ctx)
    usuario_id = parse_id(id)
    if not _es_admin_o_propio(ctx, usuario_id):
        raise Forbidden("No tienes permiso para actualizar este usuario")

    payload = validar(UsuarioUpdate, await ctx.json())
    datos = payload.model_dump(mode="json", exclude_unset=True, exclude_none=True)

    if "rol" in datos and ctx.sesion.rol != RolEnum.admin.value:
        raise Forbidden("Solo el administrador puede cambiar roles")

    repo = UsuariosRepository(ctx.conn)
    if "correo" in datos:
        existente = await repo.obtener_por_correo(datos["correo"])
        if existente and existente["id"] != usuario_id:
            raise ConflictError("El correo ya está registrado")
    if "nombre" in datos:
        existente = await repo.obtener_por_nombre(datos["nombre"])
        if existente and existente["id"] != usuario_id:
            raise ConflictError("El nombre de usuario ya existe")
    if "password" in datos:
        datos["password"] = hash_password(datos["password"])

    if not await repo.actualizar_por_id(usuario_id, datos):
        raise NotFound("Usuario no encontrado")
    return respuesta_json({"message": "Usuario actualizado exitosamente"})


@router.delete("/{id}")
async def eliminar_usuario(ctx: Contexto, id: str):
    sesion = requiere_admin(ctx)
    usuario_id = parse_id(id)
    if usuario_id == sesion.usuario_id:
        raise ValidationError("No puedes eliminar tu propio usuario")

    if await CitasRepository(ctx.conn).tiene_citas("medico_usuario_id", usuario_id):
        logger.info("Borrado de usuario %s rechazado: tiene citas", usuario_id)
        raise ConflictError("No se puede eliminar el usuario porque tiene citas asociadas")

    if not await eliminar_registro(UsuariosRepository(ctx.conn), usuario_id):
        raise NotFound("Usuario no encontrado")
    return respuesta_json({"message": "Usuario eliminado exitosamente"})
