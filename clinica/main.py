import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import AsyncEngine

from clinica.api.deps import Contexto
from clinica.api.v1.auth import router as auth_router
from clinica.api.v1.citas import router as citas_router
from clinica.api.v1.medicos import router as medicos_router
from clinica.api.v1.pacientes import router as pacientes_router
from clinica.api.v1.saludo import router as saludo_router
from clinica.api.v1.servicios import router as servicios_router
from clinica.api.v1.usuarios import router as usuarios_router
from clinica.core.config import Settings, get_settings
from clinica.core.db import create_engine, create_tables
from clinica.core.errors import ApiError
from clinica.core.responses import respuesta_error
from clinica.core.router import METODOS, Router
from clinica.core.session import Sesion, SessionStore, crear_session_store

logger = logging.getLogger("clinica")


def build_router() -> Router:
    raiz = Router()
    raiz.include_router(auth_router)
    raiz.include_router(usuarios_router)
    raiz.include_router(pacientes_router)
    raiz.include_router(citas_router)
    raiz.include_router(servicios_router)
    raiz.include_router(medicos_router)
    raiz.include_router(saludo_router)
    return raiz


async def _persistir_sesion(store: SessionStore, settings: Settings, sesion: Sesion, respuesta: Response) -> None:
    if sesion.destruida:
        if sesion.token_original:
            await store.eliminar(sesion.token_original)
        respuesta.delete_cookie(settings.SESSION_COOKIE, path="/")
    elif sesion.modificada and sesion.token:
        if sesion.token_original and sesion.token_original != sesion.token:
            await store.eliminar(sesion.token_original)
        await store.guardar(sesion.token, sesion.datos)
        respuesta.set_cookie(
            settings.SESSION_COOKIE,
            sesion.token,
            max_age=settings.SESSION_TTL_SECONDS or None,
            path="/",
            httponly=True,
            samesite="lax",
            secure=settings.SESSION_COOKIE_SECURE,
        )


async def despachar(request: Request) -> Response:
    """Único endpoint ASGI: resuelve la ruta y ejecuta el handler en una transacción."""
    if request.method == "OPTIONS":
        return Response(status_code=200)

    state = request.app.state
    settings: Settings = state.settings
    try:
        handler, params = state.router.resolver(request.method, request.url.path)
    except ApiError as e:
        return respuesta_error(e.message, e.status_code)

    token = request.cookies.get(settings.SESSION_COOKIE)
    datos = await state.sessions.cargar(token) if token else None
    sesion = Sesion(token if datos is not None else None, datos)

    async with state.engine.connect() as conn:
        ctx = Contexto(request=request, conn=conn, sesion=sesion, settings=settings)
        try:
            respuesta = await handler(ctx, **params)
            await conn.commit()
        except ApiError as e:
            await conn.rollback()
            if e.status_code >= 500:
                logger.error("%s %s -> %s: %s", request.method, request.url.path, e.status_code, e.message)
            else:
                logger.warning("%s %s -> %s: %s", request.method, request.url.path, e.status_code, e.message)
            return respuesta_error(e.message, e.status_code)
        except Exception as e:
            await conn.rollback()
            logger.exception("Error no controlado en %s %s", request.method, request.url.path)
            return respuesta_error(f"Error interno del servidor: {e}", 500)

    await _persistir_sesion(state.sessions, settings, sesion, respuesta)
    return respuesta


def create_app(
    settings: Settings | None = None,
    engine: AsyncEngine | None = None,
    sessions: SessionStore | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    engine = engine or create_engine(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.CREATE_TABLES:
            await create_tables(engine)
        yield
        await engine.dispose()

    app = FastAPI(title=settings.APP_NAME, version="0.1.0", lifespan=lifespan,
                  docs_url=None, redoc_url=None, openapi_url=None)
    app.state.settings = settings
    app.state.engine = engine
    app.state.sessions = sessions or crear_session_store(settings)
    app.state.router = build_router()

    # sólo los orígenes permitidos reciben cabeceras Access-Control-Allow-*
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=[*METODOS, "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
    )

    app.add_api_route("/{ruta:path}", despachar, methods=[*METODOS, "OPTIONS"], include_in_schema=False)
    return app


app = create_app()
