import pytest

from talleres_api.core.authz import (
    Action, Caller, authorize, authorize_ownership, can, find_instructor_profile, find_student_profile,
)
from talleres_api.core.errors import Forbidden, ProfileNotFound
from talleres_api.models import Aviso, Inscripcion, Taller, TipoUsuario


def _caller(role, profile_id=None):
    return Caller(user_id=1, email="x@cbtis258.edu.mx", role=role, profile_id=profile_id)


def test_authorize_ownership():
    assert authorize_ownership(TipoUsuario.admin, None, None) is True
    assert authorize_ownership(TipoUsuario.instructor, 3, 3) is True
    assert authorize_ownership(TipoUsuario.instructor, 3, 4) is False
    assert authorize_ownership(TipoUsuario.instructor, None, 4) is False
    assert authorize_ownership(TipoUsuario.alumno, 5, None) is False


def test_instructor_y_su_taller():
    taller = Taller(instructor_id=7)
    assert can(Action.UPDATE, taller, _caller(TipoUsuario.instructor, 7))
    assert not can(Action.UPDATE, taller, _caller(TipoUsuario.instructor, 8))
    assert not can(Action.UPDATE, Taller(instructor_id=None), _caller(TipoUsuario.instructor, 8))
    assert can(Action.DELETE, taller, _caller(TipoUsuario.admin))


def test_alumno_lee_contenido_del_taller_pero_no_lo_modifica():
    aviso = Aviso(instructor_id=7)
    alumno = _caller(TipoUsuario.alumno, 1)
    assert can(Action.READ, aviso, alumno)
    assert not can(Action.UPDATE, aviso, alumno)


def test_inscripcion_es_del_alumno():
    inscripcion = Inscripcion(alumno_id=2)
    assert can(Action.UPDATE, inscripcion, _caller(TipoUsuario.alumno, 2))
    assert not can(Action.UPDATE, inscripcion, _caller(TipoUsuario.alumno, 3))
    assert not can(Action.READ, inscripcion, _caller(TipoUsuario.instructor, 2))


def test_authorize_lanza_forbidden():
    with pytest.raises(Forbidden) as info:
        authorize(Action.UPDATE, Taller(instructor_id=1), _caller(TipoUsuario.instructor, 2), "No es tuyo")
    assert info.value.status_code == 403
    assert info.value.message == "No es tuyo"


def test_require_profile():
    assert _caller(TipoUsuario.alumno, 9).require_profile() == 9
    with pytest.raises(ProfileNotFound):
        _caller(TipoUsuario.instructor).require_profile()


def test_resolucion_de_perfiles(database, factory):
    instructor, alumno, admin = factory.instructor(), factory.alumno(), factory.admin()
    with database.SessionLocal() as db:
        assert find_instructor_profile(db, instructor.user_id) == instructor.profile_id
        assert find_student_profile(db, alumno.user_id) == alumno.profile_id
        assert find_instructor_profile(db, alumno.user_id) is None
        assert find_student_profile(db, admin.user_id) is None
