URL = "/api/v1/informacion-emergencia/"

DATOS = {
    "contacto_emergencia_nombre": "Rosa Hernández",
    "contacto_emergencia_telefono": "6621234567",
    "contacto_emergencia_relacion": "Madre",
    "tipo_sangre": "O+",
    "alergias": "Penicilina",
}


def test_crear_y_actualizar(client, factory):
    alumno = factory.alumno()

    r = client.get(URL, headers=alumno.headers)
    assert r.status_code == 200
    assert r.json()["data"] is None

    r = client.post(URL, headers=alumno.headers, json=DATOS)
    assert r.status_code == 201, r.text
    creado = r.json()["data"]
    assert creado["alumno_id"] == alumno.profile_id
    assert creado["tipo_sangre"] == "O+"

    r = client.post(URL, headers=alumno.headers, json={**DATOS, "alergias": None, "tipo_sangre": "A-"})
    assert r.status_code == 200
    actualizado = r.json()["data"]
    assert actualizado["id"] == creado["id"]
    assert actualizado["alergias"] is None

    r = client.get(URL, headers=alumno.headers)
    assert r.json()["data"]["tipo_sangre"] == "A-"


def test_campos_obligatorios(client, factory):
    r = client.post(URL, headers=factory.alumno().headers, json={"tipo_sangre": "O+"})
    assert r.status_code == 400
    faltantes = {d["loc"][-1] for d in r.json()["details"]}
    assert faltantes == {
        "contacto_emergencia_nombre",
        "contacto_emergencia_telefono",
        "contacto_emergencia_relacion",
    }


def test_solo_alumnos(client, factory):
    for actor in (factory.instructor(), factory.admin()):
        assert client.get(URL, headers=actor.headers).status_code == 403
        assert client.post(URL, headers=actor.headers, json=DATOS).status_code == 403


def test_eliminar_solo_la_propia(client, factory):
    alumno, otro = factory.alumno(), factory.alumno()
    info_id = client.post(URL, headers=alumno.headers, json=DATOS).json()["data"]["id"]

    assert client.delete(f"{URL}{info_id}", headers=otro.headers).status_code == 403
    assert client.delete(f"{URL}{info_id}", headers=alumno.headers).status_code == 200
    assert client.delete(f"{URL}{info_id}", headers=alumno.headers).status_code == 404
    assert client.get(URL, headers=alumno.headers).json()["data"] is None
