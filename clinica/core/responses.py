from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

NO_CACHE = {"Cache-Control": "no-cache, no-store, must-revalidate"}


def respuesta_json(data: Any, status_code: int = 200) -> JSONResponse:
    # Decimal y datetime de la base pasan por jsonable_encoder
    return JSONResponse(jsonable_encoder(data), status_code=status_code, headers=NO_CACHE)


def respuesta_error(mensaje: str, status_code: int = 400) -> JSONResponse:
    return respuesta_json({"error": mensaje}, status_code)
