from typing import ClassVar, Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from clinica.models.usuario import RolEnum


class UsuarioCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)
    mensajes: ClassVar[dict[str, str]] = {"correo": "Formato de correo inválido", "rol": "Rol inválido"}

    nombre: str = Field(..., min_length=1, max_length=100)
    correo: EmailStr
    password: str = Field(..., min_length=1)
    rol: RolEnum


class UsuarioUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)
    mensajes: ClassVar[dict[str, str]] = {"correo": "Formato de correo inválido", "rol": "Rol inválido"}

    nombre: Optional[str] = Field(None, min_length=1, max_length=100)
    correo: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=1)
    rol: Optional[RolEnum] = None


class UsuarioOut(BaseModel):
    """Sin password: es lo único que se devuelve de un usuario."""
    id: int
    nombre: str
    correo: str
    rol: str
