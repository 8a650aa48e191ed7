from datetime import datetime, timedelta, timezone


def _crear(client, instructor, taller_id, **campos):
    payload = {"taller_id": taller_id, "titulo": "Aviso", "contenido": "Traer material"}
    payload.update(campos)
    return client.post("/api/v1/avisos/", headers=instructor.headers, json=payload)


def _iso(delta):
    return (datetime.now(timezone.utc) + delta).isoformat()


def test_instructor_publica_en_su_taller(client, factory):
    duena, ajena = factory.instructor(), factory.instructor()
    taller_id = factory.taller(duena, nombre="Cerámica")

    r = _crear(client, duena, taller_id, importante=True)
    assert r.status_code == 201, r.text
    data = r.json()["data"]
    assert data["instructor_id"] == duena.profile_id
    assert data["taller_nombre"] == "Cerámica"
    assert data["importante"] is True

    assert _crear(client, ajena, taller_id).status_code == 403
    assert _crear(client, duena, 9999).status_code == 404
    assert _crear(client, factory.alumno(), taller_id).status_code == 403


def test_listado_por_taller_y_expiracion(client, factory):
    duena = factory.instructor()
    taller_id = factory.taller(duena)
    _crear(client, duena, taller_id, titulo="Vigente", fecha_expiracion=_iso(timedelta(days=2)))
    _crear(client, duena, taller_id, titulo="Vencido", fecha_expiracion=_iso(-timedelta(days=1)))
    _crear(client, duena, taller_id, titulo="Sin fecha")

    alumno = factory.alumno()
    r = client.get(f"/api/v1/avisos/taller/{taller_id}", headers=alumno.headers)
    assert sorted(a["titulo"] for a in r.json()["data"]) == ["Sin fecha", "Vigente"]

    r = client.get(f"/api/v1/avisos/taller/{taller_id}", headers=alumno.headers, params={"includeExpired": "true"})
    assert len(r.json()["data"]) == 3


def test_avisos_del_alumno(client, factory):
    duena = factory.instructor()
    mio, ajeno = factory.taller(duena, nombre="Mío"), factory.taller(duena, nombre="Ajeno")
    _crear(client, duena, mio, titulo="Para mí")
    _crear(client, duena, ajeno, titulo="No es para mí")

    alumno = factory.alumno()
    client.post(f"/api/v1/talleres/{mio}/inscribirse", headers=alumno.headers)

    r = client.get("/api/v1/avisos/alumno", headers=alumno.headers)
    assert r.status_code == 200
    assert [a["titulo"] for a in r.json()["data"]] == ["Para mí"]
    assert r.json()["pagination"]["total"] == 1

    assert client.get("/api/v1/avisos/alumno", headers=duena.headers).status_code == 403


def test_editar_y_eliminar_solo_propios(client, factory):
    duena, ajena = factory.instructor(), factory.instructor()
    taller_id = factory.taller(duena)
    aviso_id = _crear(client, duena, taller_id).json()["data"]["id"]

    r = client.put(f"/api/v1/avisos/{aviso_id}", headers=ajena.headers, json={"titulo": "Hackeado"})
    assert r.status_code == 403

    r = client.put(f"/api/v1/avisos/{aviso_id}", headers=duena.headers, json={"titulo": "Cambio de salón"})
    assert r.status_code == 200
    assert r.json()["data"]["titulo"] == "Cambio de salón"

    assert client.delete(f"/api/v1/avisos/{aviso_id}", headers=ajena.headers).status_code == 403
    assert client.delete(f"/api/v1/avisos/{aviso_id}", headers=factory.alumno().headers).status_code == 403
    assert client.delete(f"/api/v1/avisos/{aviso_id}", headers=duena.headers).status_code == 200
    assert client.get(f"/api/v1/avisos/{aviso_id}", headers=duena.headers).status_code == 404


def test_admin_gestiona_cualquier_aviso(client, factory):
    duena, admin = factory.instructor(), factory.admin()
    aviso_id = _crear(client, duena, factory.taller(duena)).json()["data"]["id"]

    r = client.put(f"/api/v1/avisos/{aviso_id}", headers=admin.headers, json={"activo": False})
    assert r.status_code == 200
    assert r.json()["data"]["activo"] is False


def test_editar_con_null_es_invalido(client, factory):
    duena = factory.instructor()
    aviso_id = _crear(client, duena, factory.taller(duena), fecha_expiracion=_iso(timedelta(days=3))).json()["data"]["id"]

    for campo in ("titulo", "contenido", "importante", "activo"):
        r = client.put(f"/api/v1/avisos/{aviso_id}", headers=duena.headers, json={campo: None})
        assert r.status_code == 400, campo
        assert r.json()["code"] == "VALIDATION_ERROR"
    assert client.get(f"/api/v1/avisos/{aviso_id}", headers=duena.headers).json()["data"]["titulo"] == "Aviso"

    # quitar la expiración si está permitido
    r = client.put(f"/api/v1/avisos/{aviso_id}", headers=duena.headers, json={"fecha_expiracion": None})
    assert r.status_code == 200
    assert r.json()["data"]["fecha_expiracion"] is None


def test_lectura_de_avisos(client, factory):
    duena, ajena = factory.instructor(), factory.instructor()
    aviso_id = _crear(client, duena, factory.taller(duena)).json()["data"]["id"]

    assert client.get(f"/api/v1/avisos/{aviso_id}", headers=factory.alumno().headers).status_code == 200
    assert client.get(f"/api/v1/avisos/{aviso_id}", headers=ajena.headers).status_code == 403


def test_busqueda_importantes_y_mis_avisos(client, factory):
    duena = factory.instructor()
    taller_id = factory.taller(duena)
    _crear(client, duena, taller_id, titulo="Examen final", importante=True)
    _crear(client, duena, taller_id, titulo="Salida al museo")

    alumno = factory.alumno()
    r = client.get("/api/v1/avisos/buscar", headers=alumno.headers, params={"q": "museo"})
    assert [a["titulo"] for a in r.json()["data"]] == ["Salida al museo"]
    assert r.json()["searchTerm"] == "museo"

    assert client.get("/api/v1/avisos/buscar", headers=alumno.headers).status_code == 400

    r = client.get("/api/v1/avisos/importantes", headers=alumno.headers, params={"tallerId": taller_id})
    assert [a["titulo"] for a in r.json()["data"]] == ["Examen final"]

    r = client.get("/api/v1/avisos/mis-avisos", headers=duena.headers)
    assert len(r.json()["data"]) == 2


def test_estadisticas_y_proximos_a_expirar(client, factory):
    duena, otra = factory.instructor(), factory.instructor()
    taller_id = factory.taller(duena)
    _crear(client, duena, taller_id, importante=True, fecha_expiracion=_iso(timedelta(days=1)))
    _crear(client, duena, taller_id, fecha_expiracion=_iso(-timedelta(days=1)))
    _crear(client, otra, factory.taller(otra))

    stats = client.get("/api/v1/avisos/estadisticas", headers=duena.headers).json()["data"]
    assert stats == {"total_avisos": 2, "avisos_activos": 2, "avisos_importantes": 1, "avisos_expirados": 1}

    stats = client.get("/api/v1/avisos/estadisticas", headers=factory.admin().headers).json()["data"]
    assert stats["total_avisos"] == 3

    r = client.get("/api/v1/avisos/proximos-a-expirar", headers=duena.headers, params={"days": 3})
    assert len(r.json()["data"]) == 1
    assert r.json()["days"] == 3

    assert client.get("/api/v1/avisos/estadisticas", headers=factory.alumno().headers).status_code == 403
