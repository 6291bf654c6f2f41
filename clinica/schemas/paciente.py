from typing import ClassVar, Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field


class PacienteCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)
    mensajes: ClassVar[dict[str, str]] = {"correo": "Formato de correo inválido"}

    nombre: str = Field(..., min_length=1, max_length=150)
    telefono: str = Field(..., min_length=1, max_length=30)
    correo: EmailStr


class PacienteUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)
    mensajes: ClassVar[dict[str, str]] = {"correo": "Formato de correo inválido"}

    nombre: Optional[str] = Field(None, min_length=1, max_length=150)
    telefono: Optional[str] = Field(None, min_length=1, max_length=30)
    correo: Optional[EmailStr] = None
