from fastapi.testclient import TestClient

from talleres_api.models import Usuario


def _ruta_que_inserta(app, database, **campos):
    def insertar():
        with database.SessionLocal() as db:
            db.add(Usuario(password_hash="x", **campos))
            db.commit()

    app.add_api_route("/_insertar", insertar, methods=["POST"])


def test_duplicado_es_409(app, database, factory):
    existente = factory.alumno()
    _ruta_que_inserta(app, database, email=existente.email)

    with TestClient(app) as client:
        r = client.post("/_insertar")
    assert r.status_code == 409
    assert r.json()["code"] == "UNIQUE_VIOLATION"


def test_not_null_no_se_reporta_como_duplicado(app, database):
    _ruta_que_inserta(app, database, email=None)

    with TestClient(app) as client:
        r = client.post("/_insertar")
    assert r.status_code == 400
    assert r.json()["code"] == "CONSTRAINT_VIOLATION"
    assert r.json()["error"] == "Datos inválidos"
