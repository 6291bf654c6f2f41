from clinica.repositories.base import (
    BaseRepository, BuscablePorTermino, ConsultaJoin, EliminableLogicamente, Paginable,
)
from clinica.repositories.usuarios import UsuariosRepository
from clinica.repositories.pacientes import PacientesRepository
from clinica.repositories.servicios import ServiciosRepository
from clinica.repositories.citas import CitasRepository
