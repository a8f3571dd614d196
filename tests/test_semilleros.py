import pytest

from auth import SessionContext
from conftest import make_user
from semilleros import (
    InvalidCoordinator,
    create_semillero,
    create_student,
    delete_semillero,
    is_coordinator_capable,
    update_semillero,
    update_student_status,
)

NEW_GROUP = {
    "name": "Robótica Educativa",
    "description": "Robots para el aula",
    "coordinator_id": "6",
    "coordinator": "Ing. Pérez Ramírez",
    "members": 3,
}


def _ctx(role, semillero_id=None):
    return SessionContext(user=make_user(role, semillero_id, user_id="1" if role == "administrador" else "2"))


def test_coordinator_capability(seeded_store):
    assert is_coordinator_capable(seeded_store, "2")
    assert is_coordinator_capable(seeded_store, "1")
    assert not is_coordinator_capable(seeded_store, "3")
    assert not is_coordinator_capable(seeded_store, "404")


def test_coordinator_falls_back_to_credentials(store):
    assert is_coordinator_capable(store, "5")
    assert not is_coordinator_capable(store, "4")


def test_professor_creates_semillero(seeded_store):
    created = create_semillero(seeded_store, _ctx("profesor", "1"), NEW_GROUP)
    assert created.name == "Robótica Educativa"
    assert len(seeded_store.semilleros.list()) == 5


def test_student_cannot_create_semillero(seeded_store):
    assert create_semillero(seeded_store, _ctx("estudiante", "1"), NEW_GROUP) is None
    assert len(seeded_store.semilleros.list()) == 4


def test_semillero_needs_professor_coordinator(seeded_store):
    with pytest.raises(InvalidCoordinator):
        create_semillero(seeded_store, _ctx("administrador"), {**NEW_GROUP, "coordinator_id": "3"})
    with pytest.raises(InvalidCoordinator):
        update_semillero(seeded_store, _ctx("administrador"), "1", {"coordinator_id": "4"})
    assert seeded_store.semilleros.get("1").coordinator_id == "2"


def test_only_admin_updates_and_deletes(seeded_store):
    assert not update_semillero(seeded_store, _ctx("profesor", "1"), "1", {"members": 20})
    assert update_semillero(seeded_store, _ctx("administrador"), "1", {"members": 20})
    assert seeded_store.semilleros.get("1").members == 20
    assert not delete_semillero(seeded_store, _ctx("profesor", "1"), "4")
    assert delete_semillero(seeded_store, _ctx("administrador"), "4")
    assert not delete_semillero(seeded_store, _ctx("administrador"), "4")


def test_create_student(seeded_store):
    student = create_student(seeded_store, _ctx("profesor", "1"), {
        "name": "Julián Castro", "email": "julian@unilibre.edu.co", "semillero_id": "1", "status": "pendiente",
    })
    assert student.created_by == "2"
    assert student.semillero_name == "Inteligencia Artificial y Educación"
    assert create_student(seeded_store, _ctx("estudiante", "1"), {
        "name": "Otro", "email": "otro@unilibre.edu.co", "semillero_id": "1",
    }) is None


def test_update_student_status(seeded_store):
    assert update_student_status(seeded_store, _ctx("profesor", "2"), "4", "activo")
    assert seeded_store.students.get("4").status == "activo"
    assert not update_student_status(seeded_store, _ctx("estudiante", "1"), "4", "inactivo")
    assert not update_student_status(seeded_store, _ctx("administrador"), "404", "activo")
