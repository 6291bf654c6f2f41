import logging

from clinica.api.deps import (
    Contexto, parse_id, parse_paginacion, requiere_admin, requiere_auth, validar,
)
from clinica.api.v1._helpers import busqueda_rapida, eliminar_registro
from clinica.core.errors import ConflictError, NotFound
from clinica.core.responses import respuesta_json
from clinica.core.router import Router
from clinica.repositories.citas import CitasRepository
from clinica.repositories.servicios import ServiciosRepository
from clinica.schemas.servicio import ServicioCreate, ServicioUpdate

logger = logging.getLogger(__name__)

router = Router(prefix="/servicios")


@router.get("")
async def listar_servicios(ctx: Contexto):
    requiere_auth(ctx)
    repo = ServiciosRepository(ctx.conn)
    page, per_page = parse_paginacion(ctx)
    search = ctx.query.get("search", "")

    if search:
        data = await repo.buscar_por_datos(search, page, per_page)
    elif page is not None:
        data = await repo.paginar(page, per_page)  # type: ignore[arg-type]
    else:
        data = await repo.listar(order_by="nombre ASC")
    return respuesta_json(data)


@router.get("/search")
async def buscar_servicios(ctx: Contexto):
    requiere_auth(ctx)
    return respuesta_json(await busqueda_rapida(ctx, ServiciosRepository(ctx.conn)))


@router.get("/{id}")
async def obtener_servicio(ctx: Contexto, id: str):
    requiere_auth(ctx)
    servicio = await ServiciosRepository(ctx.conn).obtener_por_id(parse_id(id))
    if not servicio:
        raise NotFound("Servicio no encontrado")
    return respuesta_json(servicio)


@router.post("")
async def crear_servicio(ctx: Contexto):
    requiere_admin(ctx)
    payload = validar(ServicioCreate, await ctx.json())
    repo = ServiciosRepository(ctx.conn)

    if await repo.existe({"nombre": payload.nombre}):
        raise ConflictError("Ya existe un servicio con ese nombre")

    id = await repo.insertar(payload.model_dump(mode="json"))
    return respuesta_json({"id": id, "message": "Servicio creado exitosamente"}, 201)


@router.put("/{id}")
async def actualizar_servicio(ctx: Contexto, id: str):
    requiere_admin(ctx)
    servicio_id = parse_id(id)
    payload = validar(ServicioUpdate, await ctx.json())
    datos = payload.model_dump(mode="json", exclude_unset=True, exclude_none=True)
    repo = ServiciosRepository(ctx.conn)

    if "nombre" in datos:
        existentes = await repo.listar({"nombre": datos["nombre"]})
        if existentes and existentes[0]["id"] != servicio_id:
            raise ConflictError("Ya existe un servicio con ese nombre")

    if not await repo.actualizar_por_id(servicio_id, datos):
        raise NotFound("Servicio no encontrado")
    return respuesta_json({"message": "Servicio actualizado exitosamente"})


@router.delete("/{id}")
async def eliminar_servicio(ctx: Contexto, id: str):
    requiere_admin(ctx)
    servicio_id = parse_id(id)

    if await CitasRepository(ctx.conn).tiene_citas("servicio_id", servicio_id):
        logger.info("Borrado de servicio %s rechazado: tiene citas", servicio_id)
        raise ConflictError("No se puede eliminar el servicio porque tiene citas asociadas")

    if not await eliminar_registro(ServiciosRepository(ctx.conn), servicio_id):
        raise NotFound("Servicio no encontrado")
    return respuesta_json({"message": "Servicio eliminado exitosamente"})
