from clinica.api.deps import Contexto
from clinica.core.responses import respuesta_json
from clinica.core.router import Router

router = Router()


@router.get("/health")
async def health(ctx: Contexto):
    return respuesta_json({"status": "ok"})


@router.get("/")
@router.get("/{saludo}")
async def saludar(ctx: Contexto, saludo: str = "usuario"):
    return respuesta_json({"saludo": f"hola {saludo}"})
