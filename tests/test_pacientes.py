from tests.conftest import login


async def test_requiere_sesion(client, datos):
    for ruta in ("/pacientes", "/pacientes/search", f"/pacientes/{datos['ana']}"):
        r = await client.get(ruta)
        assert r.status_code == 401


async def test_listar_buscar_y_paginar(client, datos):
    await login(client, "dra_ruiz")

    r = await client.get("/pacientes")
    assert r.status_code == 200
    assert r.headers["cache-control"] == "no-cache, no-store, must-revalidate"
    assert {p["nombre"] for p in r.json()} == {"Ana Pérez", "Luis Gómez"}

    r = await client.get("/pacientes", params={"page": 1, "per_page": 1})
    assert r.json()["pagination"] == {
        "current_page": 1, "per_page": 1, "total": 2, "total_pages": 2, "has_next": True, "has_prev": False,
    }
    assert r.json()["data"][0]["nombre"] == "Ana Pérez"

    r = await client.get("/pacientes", params={"search": "ANA"})
    assert [p["id"] for p in r.json()] == [datos["ana"]]


async def test_busqueda_rapida(client, datos):
    await login(client, "recepcion")

    r = await client.get("/pacientes/search", params={"termino": "lu"})
    assert [p["nombre"] for p in r.json()] == ["Luis Gómez"]

    r = await client.get("/pacientes/search", params={"termino": "l"})
    assert r.json() == []

    r = await client.get("/pacientes/search", params={"limit": 1})
    assert [p["nombre"] for p in r.json()] == ["Ana Pérez"]

    r = await client.get("/pacientes/search", params={"termino": "correo", "limit": 1})
    assert len(r.json()) == 1


async def test_obtener(client, datos):
    await login(client, "recepcion")

    r = await client.get(f"/pacientes/{datos['luis']}")
    assert r.json()["correo"] == "luis@correo.com"

    r = await client.get("/pacientes/abc")
    assert r.status_code == 400
    assert r.json() == {"error": "ID debe ser numérico"}

    r = await client.get("/pacientes/9999")
    assert r.status_code == 404
    assert r.json() == {"error": "Paciente no encontrado"}


async def test_crear(client, datos):
    nuevo = {"nombre": "Sofía Lara", "telefono": "555-0300", "correo": "sofia@correo.com"}

    await login(client, "dra_ruiz")
    r = await client.post("/pacientes", json=nuevo)
    assert r.status_code == 403
    assert r.json()["error"] == "No tienes permiso para crear pacientes"

    await login(client, "recepcion")
    r = await client.post("/pacientes", json=nuevo)
    assert r.status_code == 201
    id = r.json()["id"]

    creado = (await client.get(f"/pacientes/{id}")).json()
    assert creado["nombre"] == "Sofía Lara"
    assert creado["fecha_registro"]

    r = await client.post("/pacientes", json=nuevo)
    assert r.status_code == 400
    assert r.json()["error"] == "El correo ya está registrado"

    r = await client.post("/pacientes", json={**nuevo, "correo": "sin-arroba"})
    assert r.json()["error"] == "Formato de correo inválido"

    r = await client.post("/pacientes", json={"telefono": "1", "correo": "x@correo.com"})
    assert r.json()["error"] == "El campo 'nombre' es requerido"


async def test_actualizar(client, datos):
    await login(client, "recepcion")

    r = await client.put(f"/pacientes/{datos['ana']}", json={"telefono": "555-9999"})
    assert r.json() == {"message": "Paciente actualizado exitosamente"}
    assert (await client.get(f"/pacientes/{datos['ana']}")).json()["telefono"] == "555-9999"

    r = await client.put(f"/pacientes/{datos['ana']}", json={"correo": "luis@correo.com"})
    assert r.status_code == 400
    assert r.json()["error"] == "El correo ya está registrado por otro paciente"

    # su propio correo no choca
    r = await client.put(f"/pacientes/{datos['ana']}", json={"correo": "ana@correo.com"})
    assert r.status_code == 200

    r = await client.put("/pacientes/9999", json={"telefono": "1"})
    assert r.status_code == 404


async def test_eliminar(client, datos):
    await login(client, "dra_ruiz")
    r = await client.delete(f"/pacientes/{datos['luis']}")
    assert r.status_code == 403
    assert r.json()["error"] == "No tienes permiso para eliminar pacientes"

    await login(client, "admin")
    r = await client.delete(f"/pacientes/{datos['ana']}")
    assert r.status_code == 400
    assert r.json()["error"] == "No se puede eliminar el paciente porque tiene citas asociadas"


async def test_recepcion_elimina_paciente_sin_citas(client, datos):
    await login(client, "recepcion")

    r = await client.delete(f"/pacientes/{datos['luis']}")
    assert r.json() == {"message": "Paciente eliminado exitosamente"}
    assert (await client.get(f"/pacientes/{datos['luis']}")).status_code == 404
    assert (await client.delete(f"/pacientes/{datos['luis']}")).status_code == 404


async def test_busqueda_paginada_ordenada_por_nombre(client, datos):
    await login(client, "recepcion")
    for nombre in ("Zoe Correa", "Bruno Correa", "Marta Correa"):
        correo = nombre.split()[0].lower() + "@correo.com"
        await client.post("/pacientes", json={"nombre": nombre, "telefono": "555", "correo": correo})

    nombres = []
    for page in (1, 2, 3):
        r = await client.get("/pacientes", params={"search": "correa", "page": page, "per_page": 1})
        nombres += [p["nombre"] for p in r.json()["data"]]
    assert nombres == ["Bruno Correa", "Marta Correa", "Zoe Correa"]
