import logging

from clinica.api.deps import Contexto, requiere_admin, requiere_auth, validar
from clinica.core.errors import ConflictError, Unauthorized, ValidationError
from clinica.core.responses import respuesta_json
from clinica.core.router import Router
from clinica.core.security import hash_password, verify_password
from clinica.repositories.usuarios import UsuariosRepository
from clinica.schemas.auth import LoginIn, LoginOut, UsuarioSesion
from clinica.schemas.usuario import UsuarioCreate

logger = logging.getLogger(__name__)

router = Router(prefix="/auth")


@router.post("/login")
async def login(ctx: Contexto):
    payload = validar(LoginIn, await ctx.json())
    if not payload.correo.strip() or not payload.password:
        raise ValidationError("Correo y contraseña son requeridos")

    usuario = await UsuariosRepository(ctx.conn).obtener_por_correo(payload.correo.strip())
    if not usuario or not verify_password(payload.password, usuario["password"]):
        logger.info("Login fallido para %s", payload.correo)
        raise Unauthorized("Correo o contraseña incorrectos")

    ctx.sesion.iniciar(usuario)
    out = LoginOut(usuario=UsuarioSesion.model_validate(ctx.sesion.usuario()))
    return respuesta_json(out.model_dump())


@router.post("/logout")
async def logout(ctx: Contexto):
    requiere_auth(ctx)
    ctx.sesion.cerrar()
    return respuesta_json({"success": True, "message": "Sesión cerrada"})


@router.get("/verificar")
async def verificar_sesion(ctx: Contexto):
    if not ctx.sesion.logueado:
        return respuesta_json({"logueado": False})
    return respuesta_json({"logueado": True, "usuario": ctx.sesion.usuario()})


@router.post("/registrar")
async def registrar_usuario(ctx: Contexto):
    requiere_admin(ctx)
    data = await ctx.json()

    faltantes = [c for c in ("correo", "password", "nombre", "rol") if not str(data.get(c) or "").strip()]
    if faltantes:
        raise ValidationError(
            "Todos los campos son requeridos y no pueden estar vacíos. Problema con: " + ", ".join(faltantes)
        )

    payload = validar(UsuarioCreate, data)
    repo = UsuariosRepository(ctx.conn)
    if await repo.obtener_por_nombre(payload.nombre):
        raise ConflictError("El usuario ya existe")
    if await repo.obtener_por_correo(payload.correo):
        raise ConflictError("El correo ya está registrado")

    datos = payload.model_dump(mode="json")
    datos["password"] = hash_password(payload.password)
    id = await repo.insertar(datos)
    logger.info("Usuario %s registrado por %s", id, ctx.sesion.usuario_id)
    return respuesta_json({"success": True, "message": "Usuario registrado exitosamente", "id": id}, 201)
