import logging
from datetime import datetime

from clinica.api.deps import (
    Contexto, parse_id, parse_paginacion, requiere_auth, requiere_roles, validar,
)
from clinica.api.v1._helpers import FORMATO_FECHA, busqueda_rapida, eliminar_registro
from clinica.core.errors import ConflictError, NotFound
from clinica.core.responses import respuesta_json
from clinica.core.router import Router
from clinica.models.usuario import RolEnum
from clinica.repositories.citas import CitasRepository
from clinica.repositories.pacientes import PacientesRepository
from clinica.schemas.paciente import PacienteCreate, PacienteUpdate

logger = logging.getLogger(__name__)

router = Router(prefix="/pacientes")


@router.get("")
async def listar_pacientes(ctx: Contexto):
    requiere_auth(ctx)
    repo = PacientesRepository(ctx.conn)
    page, per_page = parse_paginacion(ctx)
    search = ctx.query.get("search", "")

    if search:
        data = await repo.buscar_por_datos(search, page, per_page)
    elif page is not None:
        data = await repo.paginar(page, per_page)  # type: ignore[arg-type]
    else:
        data = await repo.listar()
    return respuesta_json(data)


@router.get("/search")
async def buscar_pacientes(ctx: Contexto):
    requiere_auth(ctx)
    return respuesta_json(await busqueda_rapida(ctx, PacientesRepository(ctx.conn)))


@router.get("/{id}")
async def obtener_paciente(ctx: Contexto, id: str):
    requiere_auth(ctx)
    paciente = await PacientesRepository(ctx.conn).obtener_por_id(parse_id(id))
    if not paciente:
        raise NotFound("Paciente no encontrado")
    return respuesta_json(paciente)


@router.post("")
async def crear_paciente(ctx: Contexto):
    requiere_roles(ctx, RolEnum.recepcion, RolEnum.admin, mensaje="No tienes permiso para crear pacientes")
    payload = validar(PacienteCreate, await ctx.json())
    repo = PacientesRepository(ctx.conn)

    if await repo.existe({"correo": payload.correo}):
        raise ConflictError("El correo ya está registrado")

    datos = payload.model_dump(mode="json")
    datos["fecha_registro"] = datetime.now().strftime(FORMATO_FECHA)
    id = await repo.insertar(datos)
    return respuesta_json({"id": id, "message": "Paciente creado exitosamente"}, 201)


@router.put("/{id}")
async def actualizar_paciente(ctx: Contexto, id: str):
    requiere_roles(ctx, RolEnum.recepcion, RolEnum.admin, mensaje="No tienes permiso para actualizar pacientes")
    paciente_id = parse_id(id)
    payload = validar(PacienteUpdate, await ctx.json())
    datos = payload.model_dump(mode="json", exclude_unset=True, exclude_none=True)
    repo = PacientesRepository(ctx.conn)

    if "correo" in datos:
        existentes = await repo.listar({"correo": datos["correo"]})
        if existentes and existentes[0]["id"] != paciente_id:
            raise ConflictError("El correo ya está registrado por otro paciente")

    if not await repo.actualizar_por_id(paciente_id, datos):
        raise NotFound("Paciente no encontrado")
    return respuesta_json({"message": "Paciente actualizado exitosamente"})


@router.delete("/{id}")
async def eliminar_paciente(ctx: Contexto, id: str):
    requiere_roles(ctx, RolEnum.recepcion, RolEnum.admin, mensaje="No tienes permiso para eliminar pacientes")
    paciente_id = parse_id(id)

    if await CitasRepository(ctx.conn).tiene_citas("paciente_id", paciente_id):
        logger.info("Borrado de paciente %s rechazado: tiene citas", paciente_id)
        raise ConflictError("No se puede eliminar el paciente porque tiene citas asociadas")

    if not await eliminar_registro(PacientesRepository(ctx.conn), paciente_id):
        raise NotFound("Paciente no encontrado")
    return respuesta_json({"message": "Paciente eliminado exitosamente"})
