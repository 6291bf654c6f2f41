from clinica.core.errors import ValidationError
from clinica.repositories import ServiciosRepository
from tests.conftest import ORIGEN_PERMITIDO, login


async def test_health_y_saludo(client):
    assert (await client.get("/health")).json() == {"status": "ok"}
    assert (await client.get("/")).json() == {"saludo": "hola usuario"}
    assert (await client.get("/mundo")).json() == {"saludo": "hola mundo"}


async def test_endpoint_inexistente(client):
    r = await client.get("/no/existe")
    assert r.status_code == 404
    assert r.json() == {"error": "Endpoint no encontrado: /no/existe"}

    r = await client.patch("/pacientes/1")
    assert r.status_code == 404


async def test_options_sin_preflight(client):
    r = await client.options("/citas")
    assert r.status_code == 200
    assert r.content == b""


async def test_cors_origen_permitido(client):
    r = await client.options("/pacientes", headers={
        "Origin": ORIGEN_PERMITIDO,
        "Access-Control-Request-Method": "POST",
        "Access-Control-Request-Headers": "Content-Type",
    })
    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] == ORIGEN_PERMITIDO
    assert r.headers["access-control-allow-credentials"] == "true"

    r = await client.get("/health", headers={"Origin": ORIGEN_PERMITIDO})
    assert r.headers["access-control-allow-origin"] == ORIGEN_PERMITIDO


async def test_cors_origen_no_permitido(client):
    r = await client.get("/health", headers={"Origin": "https://otro-sitio.com"})
    assert r.status_code == 200
    assert "access-control-allow-origin" not in r.headers


async def test_error_revierte_la_transaccion(app, client, datos):
    async def crea_y_falla(ctx):
        await ServiciosRepository(ctx.conn).insertar({"nombre": "Fantasma", "precio": 1})
        raise ValidationError("falla a propósito")

    async def crea_y_revienta(ctx):
        await ServiciosRepository(ctx.conn).insertar({"nombre": "Fantasma 2", "precio": 1})
        raise RuntimeError("boom")

    app.state.router.agregar("POST", "/pruebas/falla", crea_y_falla)
    app.state.router.agregar("POST", "/pruebas/revienta", crea_y_revienta)

    r = await client.post("/pruebas/falla")
    assert r.status_code == 400
    assert r.json() == {"error": "falla a propósito"}

    r = await client.post("/pruebas/revienta")
    assert r.status_code == 500
    assert r.json() == {"error": "Error interno del servidor: boom"}

    await login(client, "admin")
    nombres = [s["nombre"] for s in (await client.get("/servicios")).json()]
    assert nombres == ["Consulta general", "Limpieza dental"]
