from datetime import datetime
from typing import Any

from clinica.api.deps import (
    Contexto, parse_id, parse_paginacion, requiere_auth, requiere_roles, validar,
)
from clinica.api.v1._helpers import FORMATO_FECHA, eliminar_registro
from clinica.core.errors import Forbidden, NotFound, ValidationError
from clinica.core.responses import respuesta_json
from clinica.core.router import Router
from clinica.models.usuario import RolEnum
from clinica.repositories.citas import CitasRepository, orden_fecha
from clinica.repositories.pacientes import PacientesRepository
from clinica.repositories.servicios import ServiciosRepository
from clinica.repositories.usuarios import UsuariosRepository
from clinica.schemas.cita import FECHA_INVALIDA, CitaCreate, CitaUpdate

router = Router(prefix="/citas")

FILTROS = ("medico_id", "estado", "fecha", "paciente_id", "orden")


# ---------- helpers ----------
def _fecha_futura(fecha: datetime) -> str:
    if fecha.tzinfo is not None:
        fecha = fecha.astimezone().replace(tzinfo=None)
    if fecha < datetime.now():
        raise ValidationError(FECHA_INVALIDA)
    return fecha.strftime(FORMATO_FECHA)


def _es_medico(ctx: Contexto) -> bool:
    return ctx.sesion.rol == RolEnum.medico.value


def _filtro_id(valor: str | None) -> int | None:
    return parse_id(valor) if valor else None


async def _get_cita_or_404(ctx: Contexto, id: int) -> dict[str, Any]:
    cita = await CitasRepository(ctx.conn).obtener_por_id(id)
    if not cita:
        raise NotFound("Cita no encontrada")
    return cita


async def _exists_or_404(repo, conditions: dict[str, Any], what: str) -> None:
    if not await repo.existe(conditions):
        raise NotFound(f"{what} no encontrado")


async def _validar_referencias(ctx: Contexto, datos: dict[str, Any]) -> None:
    """404 por cada referencia presente que no exista; el médico debe tener rol medico."""
    if "paciente_id" in datos:
        await _exists_or_404(PacientesRepository(ctx.conn), {"id": datos["paciente_id"]}, "Paciente")
    if "servicio_id" in datos:
        await _exists_or_404(ServiciosRepository(ctx.conn), {"id": datos["servicio_id"]}, "Servicio")
    if "medico_usuario_id" in datos:
        await _exists_or_404(
            UsuariosRepository(ctx.conn),
            {"id": datos["medico_usuario_id"], "rol": RolEnum.medico.value},
            "Médico",
        )


# ---------- list ----------
@router.get("")
async def listar_citas(ctx: Contexto):
    """
    Filtros: estado, fecha (YYYY-MM-DD), medico_id, paciente_id, orden (ASC|DESC),
    q (término), page/per_page. Un médico sólo ve sus propias citas: su id
    reemplaza cualquier medico_id recibido.
    """
    sesion = requiere_auth(ctx)
    repo = CitasRepository(ctx.conn)
    page, per_page = parse_paginacion(ctx)

    filtros: dict[str, Any] = {k: ctx.query[k] for k in FILTROS if ctx.query.get(k)}
    for clave in ("medico_id", "paciente_id"):
        if clave in filtros:
            filtros[clave] = _filtro_id(filtros[clave])
    if _es_medico(ctx):
        filtros["medico_id"] = sesion.usuario_id

    termino = ctx.query.get("q", "")
    if termino:
        conditions: dict[str, Any] = {}
        if filtros.get("estado"):
            conditions["c.estado"] = filtros["estado"]
        if filtros.get("fecha"):
            conditions["DATE(c.fecha_hora)"] = filtros["fecha"]
        if filtros.get("medico_id"):
            conditions["c.medico_usuario_id"] = filtros["medico_id"]
        if filtros.get("paciente_id"):
            conditions["c.paciente_id"] = filtros["paciente_id"]
        data = await repo.buscar_con_detalle(
            termino, False, conditions, orden_fecha(filtros.get("orden")), page, per_page
        )
        return respuesta_json(data)

    if filtros or page is not None:
        if page is not None:
            filtros["page"] = page
            filtros["per_page"] = per_page
        data = await repo.filtrar(filtros)
    else:
        data = await repo.listar_con_detalle()
    return respuesta_json(data)


@router.get("/buscar")
async def buscar_citas(ctx: Contexto):
    sesion = requiere_auth(ctx)
    page, per_page = parse_paginacion(ctx)
    conditions = {"c.medico_usuario_id": sesion.usuario_id} if _es_medico(ctx) else {}

    data = await CitasRepository(ctx.conn).buscar_por_fecha_y_termino(
        ctx.query.get("q", ""), ctx.query.get("fecha") or None, page, per_page, conditions
    )
    return respuesta_json(data)


# ---------- read ----------
@router.get("/{id}")
async def obtener_cita(ctx: Contexto, id: str):
    sesion = requiere_auth(ctx)
    cita_id = parse_id(id)
    cita = await _get_cita_or_404(ctx, cita_id)
    if _es_medico(ctx) and cita["medico_usuario_id"] != sesion.usuario_id:
        raise Forbidden("No tienes permiso para ver esta cita")

    detalle = await CitasRepository(ctx.conn).obtener_detalle(cita_id)
    if not detalle:
        raise NotFound("Cita no encontrada")
    return respuesta_json(detalle)


# ---------- create ----------
@router.post("")
async def crear_cita(ctx: Contexto):
    requiere_roles(ctx, RolEnum.recepcion, RolEnum.admin, mensaje="No tienes permiso para crear citas")
    payload = validar(CitaCreate, await ctx.json())
    fecha_hora = _fecha_futura(payload.fecha_hora)

    datos = payload.model_dump(mode="json", exclude_none=True)
    await _validar_referencias(ctx, datos)
    datos["fecha_hora"] = fecha_hora
    id = await CitasRepository(ctx.conn).insertar(datos)
    return respuesta_json({"id": id, "message": "Cita creada exitosamente"}, 201)


# ---------- update ----------
@router.put("/{id}")
async def actualizar_cita(ctx: Contexto, id: str):
    sesion = requiere_auth(ctx)
    cita_id = parse_id(id)
    cita = await _get_cita_or_404(ctx, cita_id)
    if _es_medico(ctx) and cita["medico_usuario_id"] != sesion.usuario_id:
        raise Forbidden("No tienes permiso para actualizar esta cita")

    payload = validar(CitaUpdate, await ctx.json())
    datos = payload.model_dump(mode="json", exclude_unset=True, exclude_none=True)
    if payload.fecha_hora is not None:
        datos["fecha_hora"] = _fecha_futura(payload.fecha_hora)
    await _validar_referencias(ctx, datos)

    if not await CitasRepository(ctx.conn).actualizar_por_id(cita_id, datos):
        raise NotFound("Cita no encontrada")
    return respuesta_json({"message": "Cita actualizada exitosamente"})


# ---------- delete ----------
@router.delete("/{id}")
async def eliminar_cita(ctx: Contexto, id: str):
    requiere_roles(ctx, RolEnum.recepcion, RolEnum.admin, mensaje="No tienes permiso para eliminar citas")
    cita_id = parse_id(id)
    if not await eliminar_registro(CitasRepository(ctx.conn), cita_id):
        raise NotFound("Cita no encontrada")
    return respuesta_json({"message": "Cita eliminada exitosamente"})
