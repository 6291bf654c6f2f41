from pydantic import BaseModel


class LoginIn(BaseModel):
    correo: str = ""
    password: str = ""


class UsuarioSesion(BaseModel):
    id: int
    nombre: str
    correo: str
    rol: str


class LoginOut(BaseModel):
    success: bool = True
    message: str = "Login exitoso"
    usuario: UsuarioSesion
