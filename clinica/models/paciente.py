from datetime import datetime
from sqlalchemy import Integer, String, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from clinica.core.db import Base


class Paciente(Base):
    __tablename__ = "pacientes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    nombre: Mapped[str] = mapped_column(String(150))
    telefono: Mapped[str] = mapped_column(String(30))
    correo: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    fecha_registro: Mapped[datetime] = mapped_column(DateTime(timezone=False), server_default=func.now())
