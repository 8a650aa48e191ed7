import threading
from concurrent.futures import ThreadPoolExecutor

from talleres_api.core.errors import EligibilityReason, EnrollmentRejected
from talleres_api.crud.inscripcion import inscripcion_crud
from talleres_api.models import EstadoInscripcion, Inscripcion
from talleres_api.services.admission import AdmissionController


def _inscribir(client, alumno, taller_id, **body):
    return client.post(f"/api/v1/talleres/{taller_id}/inscribirse", headers=alumno.headers, json=body or None)


def _activas(database, taller_id):
    with database.SessionLocal() as db:
        return inscripcion_crud.count_active(db, taller_id)


def test_inscripcion_exitosa(client, factory, database):
    alumno = factory.alumno()
    taller_id = factory.taller(cupo=5, nombre="Robótica")

    r = _inscribir(client, alumno, taller_id, comentarios="Primera vez")
    assert r.status_code == 201, r.text
    data = r.json()["data"]
    assert data["estado"] == "activa"
    assert data["taller_nombre"] == "Robótica"
    assert data["alumno_id"] == alumno.profile_id
    assert data["comentarios"] == "Primera vez"
    assert _activas(database, taller_id) == 1


def test_inscripcion_sin_cuerpo(client, factory):
    alumno = factory.alumno()
    taller_id = factory.taller()
    r = client.post(f"/api/v1/talleres/{taller_id}/inscribirse", headers=alumno.headers)
    assert r.status_code == 201
    assert r.json()["data"]["comentarios"] is None


def test_no_supera_el_cupo(client, factory, database):
    taller_id = factory.taller(cupo=2)
    alumnos = [factory.alumno() for _ in range(3)]

    assert _inscribir(client, alumnos[0], taller_id).status_code == 201
    assert _inscribir(client, alumnos[1], taller_id).status_code == 201
    r = _inscribir(client, alumnos[2], taller_id)

    assert r.status_code == 409
    body = r.json()
    assert body["code"] == "NO_CAPACITY"
    assert body["error"] == "Sin cupos"
    assert _activas(database, taller_id) == 2


def test_inscripcion_duplicada(client, factory, database):
    alumno = factory.alumno()
    taller_id = factory.taller()

    assert _inscribir(client, alumno, taller_id).status_code == 201
    r = _inscribir(client, alumno, taller_id)
    assert r.status_code == 409
    assert r.json()["code"] == "ALREADY_ENROLLED"
    assert r.json()["error"] == "Ya inscrito"
    assert _activas(database, taller_id) == 1


def test_taller_inactivo(client, factory, database):
    alumno = factory.alumno()
    taller_id = factory.taller(activo=False)

    r = _inscribir(client, alumno, taller_id)
    assert r.status_code == 400
    assert r.json()["code"] == "WORKSHOP_INACTIVE"
    assert r.json()["error"] == "No se puede inscribir"
    with database.SessionLocal() as db:
        assert db.query(Inscripcion).count() == 0


def test_taller_inexistente(client, factory):
    r = _inscribir(client, factory.alumno(), 9999)
    assert r.status_code == 404
    assert r.json()["code"] == "WORKSHOP_NOT_FOUND"


def test_solo_alumnos_se_inscriben(client, factory):
    taller_id = factory.taller()
    for actor in (factory.instructor(), factory.admin()):
        r = _inscribir(client, actor, taller_id)
        assert r.status_code == 403


def test_sin_token(client, factory):
    taller_id = factory.taller()
    r = client.post(f"/api/v1/talleres/{taller_id}/inscribirse")
    assert r.status_code == 401
    assert r.json()["code"] == "UNAUTHORIZED"


def test_cancelar_libera_cupo_y_permite_reinscribirse(client, factory, database):
    alumno, otro = factory.alumno(), factory.alumno()
    taller_id = factory.taller(cupo=1)

    inscripcion_id = _inscribir(client, alumno, taller_id).json()["data"]["id"]
    assert _inscribir(client, otro, taller_id).status_code == 409

    r = client.post(f"/api/v1/talleres/inscripciones/{inscripcion_id}/cancelar", headers=alumno.headers)
    assert r.status_code == 200
    assert r.json()["data"]["estado"] == "cancelada"
    assert _activas(database, taller_id) == 0

    # cancelar otra vez no cambia nada
    r = client.post(f"/api/v1/talleres/inscripciones/{inscripcion_id}/cancelar", headers=alumno.headers)
    assert r.status_code == 200
    assert r.json()["data"]["estado"] == "cancelada"

    assert _inscribir(client, alumno, taller_id).status_code == 201
    assert _activas(database, taller_id) == 1


def test_no_cancela_inscripcion_ajena(client, factory):
    alumno, otro = factory.alumno(), factory.alumno()
    taller_id = factory.taller()
    inscripcion_id = _inscribir(client, alumno, taller_id).json()["data"]["id"]

    r = client.post(f"/api/v1/talleres/inscripciones/{inscripcion_id}/cancelar", headers=otro.headers)
    assert r.status_code == 403

    r = client.post(f"/api/v1/talleres/inscripciones/{inscripcion_id}/cancelar", headers=factory.admin().headers)
    assert r.status_code == 200


def test_inscripcion_completada_no_se_cancela(client, factory, database):
    alumno = factory.alumno()
    taller_id = factory.taller()
    inscripcion_id = _inscribir(client, alumno, taller_id).json()["data"]["id"]
    with database.SessionLocal() as db:
        db.get(Inscripcion, inscripcion_id).estado = EstadoInscripcion.completada
        db.commit()

    r = client.post(f"/api/v1/talleres/inscripciones/{inscripcion_id}/cancelar", headers=alumno.headers)
    assert r.status_code == 409
    assert r.json()["code"] == "ENROLLMENT_COMPLETED"


def test_mis_inscripciones_filtra_por_estado(client, factory):
    alumno = factory.alumno()
    t1, t2 = factory.taller(nombre="Danza"), factory.taller(nombre="Teatro")
    primera = _inscribir(client, alumno, t1).json()["data"]["id"]
    _inscribir(client, alumno, t2)
    client.post(f"/api/v1/talleres/inscripciones/{primera}/cancelar", headers=alumno.headers)

    r = client.get("/api/v1/talleres/mis-inscripciones", headers=alumno.headers, params={"estado": "activa"})
    assert r.status_code == 200
    body = r.json()
    assert [i["taller_nombre"] for i in body["data"]] == ["Teatro"]
    assert body["pagination"] == {"limit": 10, "offset": 0, "total": 1}


# ---------------------------------------------------------------------------
# Cupo y elegibilidad
# ---------------------------------------------------------------------------
def test_cupo_disponible(client, factory):
    alumno = factory.alumno()
    taller_id = factory.taller(cupo=1)

    r = client.get(f"/api/v1/talleres/{taller_id}/cupo", headers=alumno.headers)
    assert r.json()["data"] == {"taller_id": taller_id, "cupos_disponibles": 1, "tiene_cupo": True}

    _inscribir(client, alumno, taller_id)
    r = client.get(f"/api/v1/talleres/{taller_id}/cupo", headers=alumno.headers)
    assert r.json()["data"]["cupos_disponibles"] == 0
    assert r.json()["data"]["tiene_cupo"] is False


def test_cupo_taller_inactivo_o_inexistente(client, factory):
    alumno = factory.alumno()
    inactivo = factory.taller(activo=False)
    for taller_id in (inactivo, 4242):
        r = client.get(f"/api/v1/talleres/{taller_id}/cupo", headers=alumno.headers)
        assert r.status_code == 404
        assert r.json()["details"]["cupos_disponibles"] == -1
        assert r.json()["details"]["tiene_cupo"] is False


def test_puede_inscribirse(client, factory):
    alumno = factory.alumno()
    taller_id = factory.taller(cupo=3)

    r = client.get(f"/api/v1/talleres/{taller_id}/puede-inscribirse", headers=alumno.headers)
    assert r.json()["data"] == {"puede": True, "razon": None, "codigo": None, "cupos_disponibles": 3}

    _inscribir(client, alumno, taller_id)
    r = client.get(f"/api/v1/talleres/{taller_id}/puede-inscribirse", headers=alumno.headers)
    assert r.json()["data"]["puede"] is False
    assert r.json()["data"]["codigo"] == "ALREADY_ENROLLED"


def test_bajar_cupo_por_debajo_de_inscritos(client, factory):
    admin = factory.admin()
    taller_id = factory.taller(cupo=3)
    for _ in range(2):
        _inscribir(client, factory.alumno(), taller_id)

    r = client.put(f"/api/v1/talleres/{taller_id}", headers=admin.headers, json={"cupo_maximo": 1})
    assert r.status_code == 409
    assert r.json()["code"] == "CAPACITY_BELOW_ENROLLED"

    r = client.put(f"/api/v1/talleres/{taller_id}", headers=admin.headers, json={"cupo_maximo": 2})
    assert r.status_code == 200
    assert r.json()["data"]["cupos_disponibles"] == 0


# ---------------------------------------------------------------------------
# Concurrencia
# ---------------------------------------------------------------------------
def _en_paralelo(funcs):
    barrera = threading.Barrier(len(funcs))

    def correr(fn):
        barrera.wait()
        try:
            return fn()
        except EnrollmentRejected as exc:
            return exc

    with ThreadPoolExecutor(max_workers=len(funcs)) as pool:
        return list(pool.map(correr, funcs))


def test_ultimo_cupo_concurrente(factory, database):
    admission = AdmissionController(database)
    taller_id = factory.taller(cupo=1)
    a, b = factory.alumno(), factory.alumno()

    resultados = _en_paralelo([
        lambda: admission.enroll(a.profile_id, taller_id),
        lambda: admission.enroll(b.profile_id, taller_id),
    ])

    exitos = [r for r in resultados if isinstance(r, dict)]
    rechazos = [r for r in resultados if isinstance(r, EnrollmentRejected)]
    assert len(exitos) == 1
    assert len(rechazos) == 1
    assert rechazos[0].reason == EligibilityReason.NO_CAPACITY
    assert _activas(database, taller_id) == 1


def test_muchos_alumnos_concurrentes(factory, database):
    cupo, alumnos = 3, 8
    admission = AdmissionController(database)
    taller_id = factory.taller(cupo=cupo)
    perfiles = [factory.alumno().profile_id for _ in range(alumnos)]

    resultados = _en_paralelo([
        (lambda p=p: admission.enroll(p, taller_id)) for p in perfiles
    ])

    assert sum(isinstance(r, dict) for r in resultados) == cupo
    assert _activas(database, taller_id) == cupo


def test_mismo_alumno_concurrente(factory, database):
    admission = AdmissionController(database)
    taller_id = factory.taller(cupo=5)
    alumno = factory.alumno()

    resultados = _en_paralelo([lambda: admission.enroll(alumno.profile_id, taller_id)] * 2)

    rechazos = [r for r in resultados if isinstance(r, EnrollmentRejected)]
    assert len(rechazos) == 1
    assert rechazos[0].reason == EligibilityReason.ALREADY_ENROLLED
    assert _activas(database, taller_id) == 1
