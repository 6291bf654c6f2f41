from clinica.models.usuario import Usuario, RolEnum
from clinica.models.paciente import Paciente
from clinica.models.servicio import Servicio
from clinica.models.cita import Cita, EstadoCita
