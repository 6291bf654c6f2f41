from datetime import datetime, timedelta

from tests.conftest import login


def iso(dias: int) -> str:
    return (datetime.now() + timedelta(days=dias)).replace(microsecond=0).isoformat()


def nueva_cita(datos, **extra):
    return {
        "paciente_id": datos["luis"],
        "servicio_id": datos["limpieza"],
        "medico_usuario_id": datos["dra_ruiz"],
        "fecha_hora": iso(3),
        "notas": "primera visita",
        **extra,
    }


async def test_crear_nace_programada(client, datos):
    await login(client, "recepcion")

    r = await client.post("/citas", json=nueva_cita(datos, estado="completada"))
    assert r.status_code == 201
    assert r.json()["message"] == "Cita creada exitosamente"

    cita = (await client.get(f"/citas/{r.json()['id']}")).json()
    assert cita["estado"] == "programada"
    assert cita["paciente_nombre"] == "Luis Gómez"
    assert cita["servicio_nombre"] == "Limpieza dental"
    assert cita["medico_nombre"] == "dra_ruiz"


async def test_crear_valida(client, datos):
    await login(client, "dra_ruiz")
    r = await client.post("/citas", json=nueva_cita(datos))
    assert r.status_code == 403
    assert r.json()["error"] == "No tienes permiso para crear citas"

    await login(client, "recepcion")
    r = await client.post("/citas", json=nueva_cita(datos, fecha_hora=iso(-1)))
    assert r.status_code == 400
    assert r.json()["error"] == "La fecha y hora deben ser futuras"

    r = await client.post("/citas", json=nueva_cita(datos, fecha_hora="mañana"))
    assert r.json()["error"] == "La fecha y hora deben ser futuras"

    r = await client.post("/citas", json=nueva_cita(datos, paciente_id=9999))
    assert r.status_code == 404
    assert r.json()["error"] == "Paciente no encontrado"

    sin_servicio = nueva_cita(datos)
    del sin_servicio["servicio_id"]
    r = await client.post("/citas", json=sin_servicio)
    assert r.json()["error"] == "El campo 'servicio_id' es requerido"


async def test_listado_admin_con_filtros(client, datos):
    await login(client, "admin")

    r = await client.get("/citas")
    assert [c["id"] for c in r.json()] == [datos["cita_soto"], datos["cita_ruiz"]]

    r = await client.get("/citas", params={"orden": "ASC"})
    assert [c["id"] for c in r.json()] == [datos["cita_ruiz"], datos["cita_soto"]]

    r = await client.get("/citas", params={"estado": "confirmada"})
    assert [c["id"] for c in r.json()] == [datos["cita_soto"]]

    r = await client.get("/citas", params={"medico_id": datos["dra_ruiz"]})
    assert [c["id"] for c in r.json()] == [datos["cita_ruiz"]]

    r = await client.get("/citas", params={"page": 1, "per_page": 1})
    assert r.json()["pagination"]["total"] == 2
    assert len(r.json()["data"]) == 1

    r = await client.get("/citas", params={"q": "cabeza"})
    assert [c["id"] for c in r.json()] == [datos["cita_soto"]]


async def test_medico_solo_ve_sus_citas(client, datos):
    await login(client, "dra_ruiz")

    r = await client.get("/citas", params={"medico_id": datos["dr_soto"]})
    assert [c["id"] for c in r.json()] == [datos["cita_ruiz"]]

    r = await client.get("/citas", params={"q": "soto"})
    assert r.json() == []

    r = await client.get("/citas/buscar", params={"q": "ana"})
    assert [c["id"] for c in r.json()] == [datos["cita_ruiz"]]

    r = await client.get(f"/citas/{datos['cita_soto']}")
    assert r.status_code == 403
    assert r.json()["error"] == "No tienes permiso para ver esta cita"

    r = await client.put(f"/citas/{datos['cita_soto']}", json={"estado": "cancelada"})
    assert r.status_code == 403


async def test_buscar_por_fecha(client, datos):
    await login(client, "admin")
    dia = (await client.get(f"/citas/{datos['cita_soto']}")).json()["fecha_hora"][:10]

    r = await client.get("/citas/buscar", params={"fecha": dia})
    assert [c["id"] for c in r.json()] == [datos["cita_soto"]]

    r = await client.get("/citas/buscar", params={"q": "ana", "page": 1, "per_page": 10})
    assert [c["id"] for c in r.json()["data"]] == [datos["cita_ruiz"], datos["cita_soto"]]


async def test_actualizar(client, datos):
    await login(client, "dra_ruiz")

    r = await client.put(f"/citas/{datos['cita_ruiz']}", json={"estado": "completada", "notas": "alta"})
    assert r.json() == {"message": "Cita actualizada exitosamente"}
    cita = (await client.get(f"/citas/{datos['cita_ruiz']}")).json()
    assert (cita["estado"], cita["notas"]) == ("completada", "alta")

    r = await client.put(f"/citas/{datos['cita_ruiz']}", json={"estado": "perdida"})
    assert r.status_code == 400
    assert r.json()["error"] == "Estado inválido"

    r = await client.put(f"/citas/{datos['cita_ruiz']}", json={"fecha_hora": iso(-2)})
    assert r.json()["error"] == "La fecha y hora deben ser futuras"

    r = await client.put("/citas/9999", json={"notas": "x"})
    assert r.status_code == 404


async def test_eliminar(client, datos):
    await login(client, "dra_ruiz")
    r = await client.delete(f"/citas/{datos['cita_ruiz']}")
    assert r.status_code == 403

    await login(client, "recepcion")
    r = await client.delete(f"/citas/{datos['cita_ruiz']}")
    assert r.json() == {"message": "Cita eliminada exitosamente"}

    r = await client.get(f"/citas/{datos['cita_ruiz']}")
    assert r.status_code == 404
    assert r.json() == {"error": "Cita no encontrada"}


async def test_medico_asignado_debe_tener_rol_medico(client, datos):
    await login(client, "recepcion")

    for usuario in ("recepcion", "admin"):
        r = await client.post("/citas", json=nueva_cita(datos, medico_usuario_id=datos[usuario]))
        assert r.status_code == 404
        assert r.json() == {"error": "Médico no encontrado"}

    r = await client.put(f"/citas/{datos['cita_ruiz']}", json={"medico_usuario_id": datos["admin"]})
    assert r.status_code == 404
    assert r.json() == {"error": "Médico no encontrado"}

    r = await client.put(f"/citas/{datos['cita_ruiz']}", json={"medico_usuario_id": datos["dr_soto"]})
    assert r.status_code == 200
    assert (await client.get(f"/citas/{datos['cita_ruiz']}")).json()["medico_nombre"] == "dr_soto"


async def test_actualizar_referencias_inexistentes(client, datos):
    await login(client, "recepcion")

    r = await client.put(f"/citas/{datos['cita_ruiz']}", json={"paciente_id": 9999})
    assert r.status_code == 404
    assert r.json() == {"error": "Paciente no encontrado"}

    r = await client.put(f"/citas/{datos['cita_ruiz']}", json={"servicio_id": 9999})
    assert r.status_code == 404
    assert r.json() == {"error": "Servicio no encontrado"}

    r = await client.put(f"/citas/{datos['cita_ruiz']}", json={"servicio_id": datos["limpieza"]})
    assert r.status_code == 200
    assert (await client.get(f"/citas/{datos['cita_ruiz']}")).json()["servicio_nombre"] == "Limpieza dental"
