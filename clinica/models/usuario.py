import enum
from sqlalchemy import Integer, String, Enum
from sqlalchemy.orm import Mapped, mapped_column

from clinica.core.db import Base


class RolEnum(str, enum.Enum):
    admin = "admin"
    medico = "medico"
    recepcion = "recepcion"


class Usuario(Base):
    __tablename__ = "usuarios"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    nombre: Mapped[str] = mapped_column(String(100), unique=True)
    correo: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    password: Mapped[str] = mapped_column(String(255))  # hash, nunca texto plano
    rol: Mapped[RolEnum] = mapped_column(Enum(RolEnum), default=RolEnum.recepcion)
