from datetime import datetime, timedelta

import pytest
from httpx import ASGITransport, AsyncClient

from clinica.core.config import Settings
from clinica.core.db import create_engine, create_tables
from clinica.core.security import hash_password
from clinica.core.session import MemorySessionStore
from clinica.main import create_app
from clinica.repositories import (
    CitasRepository, PacientesRepository, ServiciosRepository, UsuariosRepository,
)

ORIGEN_PERMITIDO = "http://localhost:5173"
PASSWORD = "secreto123"


def fecha_futura(dias: int = 30) -> str:
    return (datetime.now() + timedelta(days=dias)).strftime("%Y-%m-%d %H:%M:%S")


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'clinica.db'}",
        LOG_LEVEL="WARNING",
        CORS_ORIGINS=[ORIGEN_PERMITIDO],
        MAX_PER_PAGE=50,
    )


@pytest.fixture
async def engine(settings):
    engine = create_engine(settings)
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
async def conn(engine):
    async with engine.connect() as conn:
        yield conn


@pytest.fixture
async def datos(engine):
    """Usuarios de cada rol, dos pacientes, dos servicios y una cita por médico."""
    async with engine.begin() as conn:
        usuarios = UsuariosRepository(conn)
        ids = {}
        for nombre, rol in (("admin", "admin"), ("dra_ruiz", "medico"), ("dr_soto", "medico"), ("recepcion", "recepcion")):
            ids[nombre] = await usuarios.insertar({
                "nombre": nombre,
                "correo": f"{nombre}@clinica.com",
                "password": hash_password(PASSWORD),
                "rol": rol,
            })

        pacientes = PacientesRepository(conn)
        ids["ana"] = await pacientes.insertar({
            "nombre": "Ana Pérez", "telefono": "555-0101", "correo": "ana@correo.com",
            "fecha_registro": "2026-01-10 09:00:00",
        })
        ids["luis"] = await pacientes.insertar({
            "nombre": "Luis Gómez", "telefono": "555-0102", "correo": "luis@correo.com",
            "fecha_registro": "2026-01-11 09:00:00",
        })

        servicios = ServiciosRepository(conn)
        ids["consulta"] = await servicios.insertar({"nombre": "Consulta general", "precio": 350})
        ids["limpieza"] = await servicios.insertar({"nombre": "Limpieza dental", "precio": 500})

        citas = CitasRepository(conn)
        ids["cita_ruiz"] = await citas.insertar({
            "paciente_id": ids["ana"], "servicio_id": ids["consulta"],
            "medico_usuario_id": ids["dra_ruiz"], "fecha_hora": fecha_futura(10),
            "estado": "programada", "notas": "control anual",
        })
        ids["cita_soto"] = await citas.insertar({
            "paciente_id": ids["ana"], "servicio_id": ids["consulta"],
            "medico_usuario_id": ids["dr_soto"], "fecha_hora": fecha_futura(12),
            "estado": "confirmada", "notas": "dolor de cabeza",
        })
    return ids


@pytest.fixture
def app(settings, engine):
    return create_app(settings, engine=engine, sessions=MemorySessionStore())


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as c:
        yield c


async def login(client: AsyncClient, nombre: str, password: str = PASSWORD):
    r = await client.post("/auth/login", json={"correo": f"{nombre}@clinica.com", "password": password})
    assert r.status_code == 200, r.text
    return r
