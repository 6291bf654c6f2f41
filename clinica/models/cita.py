import enum
from datetime import datetime
from sqlalchemy import Integer, Enum, ForeignKey, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column

from clinica.core.db import Base


class EstadoCita(str, enum.Enum):
    programada = "programada"
    confirmada = "confirmada"
    en_proceso = "en_proceso"
    completada = "completada"
    cancelada = "cancelada"
    no_asistio = "no_asistio"


class Cita(Base):
    __tablename__ = "citas"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # RESTRICT: la base rechaza borrar pacientes/servicios/usuarios con citas
    paciente_id: Mapped[int] = mapped_column(ForeignKey("pacientes.id", ondelete="RESTRICT"), index=True)
    servicio_id: Mapped[int] = mapped_column(ForeignKey("servicios.id", ondelete="RESTRICT"), index=True)
    medico_usuario_id: Mapped[int] = mapped_column(ForeignKey("usuarios.id", ondelete="RESTRICT"), index=True)

    fecha_hora: Mapped[datetime] = mapped_column(DateTime(timezone=False), index=True)
    estado: Mapped[EstadoCita] = mapped_column(
        Enum(EstadoCita), default=EstadoCita.programada, server_default=EstadoCita.programada.value
    )
    notas: Mapped[str | None] = mapped_column(Text, nullable=True)
