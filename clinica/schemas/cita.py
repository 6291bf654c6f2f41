from datetime import datetime
from typing import ClassVar, Optional
from pydantic import BaseModel, Field

from clinica.models.cita import EstadoCita

FECHA_INVALIDA = "La fecha y hora deben ser futuras"


class CitaCreate(BaseModel):
    # estado no se acepta al crear: toda cita nace "programada"
    mensajes: ClassVar[dict[str, str]] = {"fecha_hora": FECHA_INVALIDA}

    paciente_id: int = Field(..., gt=0)
    servicio_id: int = Field(..., gt=0)
    medico_usuario_id: int = Field(..., gt=0)
    fecha_hora: datetime
    notas: Optional[str] = None


class CitaUpdate(BaseModel):
    mensajes: ClassVar[dict[str, str]] = {"fecha_hora": FECHA_INVALIDA, "estado": "Estado inválido"}

    paciente_id: Optional[int] = Field(None, gt=0)
    servicio_id: Optional[int] = Field(None, gt=0)
    medico_usuario_id: Optional[int] = Field(None, gt=0)
    fecha_hora: Optional[datetime] = None
    estado: Optional[EstadoCita] = None
    notas: Optional[str] = None
