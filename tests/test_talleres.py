def test_listado_paginado(client, factory):
    alumno = factory.alumno()
    for nombre in ("Ajedrez", "Basquetbol", "Coro"):
        factory.taller(nombre=nombre)

    r = client.get("/api/v1/talleres/", headers=alumno.headers, params={"limit": 2})
    assert r.status_code == 200
    body = r.json()
    assert [t["nombre"] for t in body["data"]] == ["Ajedrez", "Basquetbol"]
    # total es el tamaño de la página
    assert body["pagination"] == {"limit": 2, "offset": 0, "total": 2}

    r = client.get("/api/v1/talleres/", headers=alumno.headers, params={"limit": 2, "offset": 2})
    assert [t["nombre"] for t in r.json()["data"]] == ["Coro"]


def test_inactivos_solo_para_admin(client, factory):
    factory.taller(nombre="Activo")
    factory.taller(nombre="Oculto", activo=False)

    r = client.get("/api/v1/talleres/", headers=factory.alumno().headers, params={"activo": "false"})
    assert [t["nombre"] for t in r.json()["data"]] == ["Activo"]

    r = client.get("/api/v1/talleres/", headers=factory.admin().headers, params={"activo": "false"})
    assert [t["nombre"] for t in r.json()["data"]] == ["Oculto"]


def test_campos_segun_rol(client, factory):
    duena, ajena = factory.instructor(), factory.instructor()
    taller_id = factory.taller(duena)

    alumno_view = client.get(f"/api/v1/talleres/{taller_id}", headers=factory.alumno().headers).json()["data"]
    assert "inscritos" not in alumno_view
    assert "instructor_id" not in alumno_view
    assert alumno_view["instructor_nombre"] == "Laura Méndez"

    for actor in (duena, factory.admin()):
        data = client.get(f"/api/v1/talleres/{taller_id}", headers=actor.headers).json()["data"]
        assert data["inscritos"] == 0
        assert data["instructor_id"] == duena.profile_id

    ajena_view = client.get(f"/api/v1/talleres/{taller_id}", headers=ajena.headers).json()["data"]
    assert "inscritos" not in ajena_view


def test_taller_no_encontrado(client, factory):
    r = client.get("/api/v1/talleres/777", headers=factory.alumno().headers)
    assert r.status_code == 404
    assert set(r.json()) >= {"error", "code", "message"}


def test_crear_taller_admin(client, factory):
    admin, instructor = factory.admin(), factory.instructor()
    payload = {
        "nombre": "Fotografía",
        "categoria": "artes",
        "cupo_maximo": 15,
        "instructor_id": instructor.profile_id,
        "fecha_inicio": "2026-02-01",
        "fecha_fin": "2026-06-30",
    }
    r = client.post("/api/v1/talleres/", headers=admin.headers, json=payload)
    assert r.status_code == 201, r.text
    data = r.json()["data"]
    assert data["cupos_disponibles"] == 15
    assert data["instructor_id"] == instructor.profile_id

    r = client.post("/api/v1/talleres/", headers=instructor.headers, json=payload)
    assert r.status_code == 403


def test_crear_taller_validaciones(client, factory):
    admin = factory.admin()
    r = client.post("/api/v1/talleres/", headers=admin.headers, json={"nombre": "X", "categoria": "c", "cupo_maximo": 0})
    assert r.status_code == 400
    assert r.json()["code"] == "VALIDATION_ERROR"

    r = client.post(
        "/api/v1/talleres/",
        headers=admin.headers,
        json={"nombre": "X", "categoria": "c", "cupo_maximo": 5, "instructor_id": 999},
    )
    assert r.status_code == 400
    assert r.json()["code"] == "INSTRUCTOR_NOT_FOUND"


def test_instructor_edita_solo_sus_talleres(client, factory):
    duena, ajena = factory.instructor(), factory.instructor()
    taller_id = factory.taller(duena)

    r = client.put(f"/api/v1/talleres/{taller_id}", headers=ajena.headers, json={"horario": "Lunes 16:00"})
    assert r.status_code == 403

    r = client.put(f"/api/v1/talleres/{taller_id}", headers=duena.headers, json={"horario": "Lunes 16:00"})
    assert r.status_code == 200
    assert r.json()["data"]["horario"] == "Lunes 16:00"

    # inexistente: 404 antes que 403
    r = client.put("/api/v1/talleres/9999", headers=ajena.headers, json={"horario": "x"})
    assert r.status_code == 404


def test_instructor_no_cambia_campos_restringidos(client, factory):
    duena = factory.instructor()
    otro = factory.instructor()
    taller_id = factory.taller(duena, cupo=10)

    # el formulario completo se acepta; los campos del administrador se ignoran
    r = client.put(
        f"/api/v1/talleres/{taller_id}",
        headers=duena.headers,
        json={"nombre": "Ajedrez avanzado", "categoria": "ciencias", "cupo_maximo": 50, "instructor_id": otro.profile_id},
    )
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert data["nombre"] == "Ajedrez avanzado"
    assert data["categoria"] == "deportes"
    assert data["cupo_maximo"] == 10
    assert data["instructor_id"] == duena.profile_id


def test_instructor_restringidos_en_taller_inexistente(client, factory):
    r = client.put("/api/v1/talleres/9999", headers=factory.instructor().headers, json={"cupo_maximo": 50})
    assert r.status_code == 404


def test_actualizar_con_null_es_invalido(client, factory):
    admin = factory.admin()
    taller_id = factory.taller(cupo=10)
    for campo in ("cupo_maximo", "nombre", "categoria", "activo"):
        r = client.put(f"/api/v1/talleres/{taller_id}", headers=admin.headers, json={campo: None})
        assert r.status_code == 400, campo
        assert r.json()["code"] == "VALIDATION_ERROR"

    # los campos opcionales si se pueden limpiar
    r = client.put(f"/api/v1/talleres/{taller_id}", headers=admin.headers, json={"horario": None})
    assert r.status_code == 200
    assert r.json()["data"]["cupo_maximo"] == 10


def test_fechas_invertidas_al_actualizar(client, factory):
    admin = factory.admin()
    taller_id = factory.taller()
    client.put(f"/api/v1/talleres/{taller_id}", headers=admin.headers, json={"fecha_inicio": "2026-03-01"})
    r = client.put(f"/api/v1/talleres/{taller_id}", headers=admin.headers, json={"fecha_fin": "2026-01-01"})
    assert r.status_code == 400


def test_eliminar_taller(client, factory):
    admin, duena = factory.admin(), factory.instructor()
    taller_id = factory.taller(duena)

    assert client.delete(f"/api/v1/talleres/{taller_id}", headers=duena.headers).status_code == 403
    assert client.delete(f"/api/v1/talleres/{taller_id}", headers=admin.headers).status_code == 200
    assert client.delete(f"/api/v1/talleres/{taller_id}", headers=admin.headers).status_code == 404


def test_mis_talleres(client, factory):
    duena, otra = factory.instructor(), factory.instructor()
    factory.taller(duena, nombre="Guitarra")
    factory.taller(otra, nombre="Pintura")

    r = client.get("/api/v1/talleres/mis-talleres", headers=duena.headers)
    assert [t["nombre"] for t in r.json()["data"]] == ["Guitarra"]

    r = client.get("/api/v1/talleres/mis-talleres", headers=factory.alumno().headers)
    assert r.status_code == 403


def test_instructor_sin_perfil(client, factory, database):
    from talleres_api.models import PerfilInstructor

    instructor = factory.instructor()
    with database.SessionLocal() as db:
        db.delete(db.get(PerfilInstructor, instructor.profile_id))
        db.commit()

    r = client.get("/api/v1/talleres/mis-talleres", headers=instructor.headers)
    assert r.status_code == 404
    assert r.json()["code"] == "PROFILE_NOT_FOUND"


def test_disponibles_excluye_inscritos_y_llenos(client, factory):
    alumno, otro = factory.alumno(), factory.alumno()
    inscrito = factory.taller(nombre="Inscrito")
    lleno = factory.taller(nombre="Lleno", cupo=1)
    factory.taller(nombre="Libre")
    factory.taller(nombre="Cerrado", activo=False)

    client.post(f"/api/v1/talleres/{inscrito}/inscribirse", headers=alumno.headers)
    client.post(f"/api/v1/talleres/{lleno}/inscribirse", headers=otro.headers)

    r = client.get("/api/v1/talleres/disponibles", headers=alumno.headers)
    assert [t["nombre"] for t in r.json()["data"]] == ["Libre"]


def test_alumnos_inscritos(client, factory):
    duena, ajena = factory.instructor(), factory.instructor()
    taller_id = factory.taller(duena, nombre="Música")
    alumno = factory.alumno(nombre="Pedro", apellido_paterno="Ruiz", numero_control="21300001")
    client.post(f"/api/v1/talleres/{taller_id}/inscribirse", headers=alumno.headers)

    r = client.get(f"/api/v1/talleres/{taller_id}/alumnos", headers=duena.headers)
    assert r.status_code == 200
    body = r.json()
    assert body["taller"]["nombre"] == "Música"
    assert [a["numero_control"] for a in body["data"]] == ["21300001"]
    assert body["data"][0]["email"] == alumno.email

    r = client.get(f"/api/v1/talleres/{taller_id}/alumnos", headers=ajena.headers)
    assert r.status_code == 403


def test_por_categoria_y_estadisticas(client, factory):
    admin = factory.admin()
    factory.taller(nombre="Futbol", categoria="deportes", cupo=20)
    factory.taller(nombre="Oratoria", categoria="cultura", cupo=10)

    r = client.get("/api/v1/talleres/categoria/cultura", headers=admin.headers)
    assert [t["nombre"] for t in r.json()["data"]] == ["Oratoria"]

    stats = client.get("/api/v1/talleres/estadisticas", headers=admin.headers).json()["data"]
    assert stats["total_talleres"] == 2
    assert stats["cupo_total"] == 30
    assert stats["inscripciones_activas"] == 0

    assert client.get("/api/v1/talleres/estadisticas", headers=factory.alumno().headers).status_code == 403


def test_healthz(client):
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json()["database"] is True
