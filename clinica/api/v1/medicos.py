from clinica.api.deps import Contexto, parse_id, requiere_auth
from clinica.api.v1._helpers import busqueda_rapida
from clinica.api.v1.usuarios import sin_password
from clinica.core.errors import NotFound
from clinica.core.responses import respuesta_json
from clinica.core.router import Router
from clinica.models.usuario import RolEnum
from clinica.repositories.usuarios import UsuariosRepository

router = Router(prefix="/medicos")

SOLO_MEDICOS = {"rol": RolEnum.medico.value}


@router.get("/search")
async def buscar_medicos(ctx: Contexto):
    requiere_auth(ctx)
    medicos = await busqueda_rapida(ctx, UsuariosRepository(ctx.conn), SOLO_MEDICOS)
    return respuesta_json(sin_password(medicos))


@router.get("/{id}")
async def obtener_medico(ctx: Contexto, id: str):
    requiere_auth(ctx)
    medicos = await UsuariosRepository(ctx.conn).listar({"id": parse_id(id), **SOLO_MEDICOS})
    if not medicos:
        raise NotFound("Médico no encontrado")
    return respuesta_json(sin_password(medicos[0]))
