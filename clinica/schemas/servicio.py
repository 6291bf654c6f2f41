from typing import ClassVar, Optional
from pydantic import BaseModel, ConfigDict, Field

PRECIO_INVALIDO = "El precio debe ser un número positivo"


class ServicioCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)
    mensajes: ClassVar[dict[str, str]] = {"precio": PRECIO_INVALIDO}

    nombre: str = Field(..., min_length=1, max_length=150)
    precio: float = Field(..., ge=0)


class ServicioUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)
    mensajes: ClassVar[dict[str, str]] = {"precio": PRECIO_INVALIDO}

    nombre: Optional[str] = Field(None, min_length=1, max_length=150)
    precio: Optional[float] = Field(None, ge=0)
