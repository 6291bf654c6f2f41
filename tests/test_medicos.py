from tests.conftest import login


async def test_busqueda_de_medicos(client, datos):
    assert (await client.get("/medicos/search")).status_code == 401
    await login(client, "recepcion")

    r = await client.get("/medicos/search", params={"limit": 10})
    assert [m["nombre"] for m in r.json()] == ["dr_soto", "dra_ruiz"]
    assert all("password" not in m for m in r.json())

    r = await client.get("/medicos/search", params={"termino": "ruiz"})
    assert [m["id"] for m in r.json()] == [datos["dra_ruiz"]]

    # recepcion coincide con el término pero no es médico
    r = await client.get("/medicos/search", params={"termino": "recep"})
    assert r.json() == []

    r = await client.get("/medicos/search", params={"termino": "clinica", "limit": 1})
    assert len(r.json()) == 1


async def test_obtener_medico(client, datos):
    await login(client, "recepcion")

    r = await client.get(f"/medicos/{datos['dr_soto']}")
    assert r.json() == {"id": datos["dr_soto"], "nombre": "dr_soto", "correo": "dr_soto@clinica.com", "rol": "medico"}

    r = await client.get(f"/medicos/{datos['recepcion']}")
    assert r.status_code == 404
    assert r.json() == {"error": "Médico no encontrado"}
