from auth import SessionContext
from conftest import make_user
from schemas import Message
from scope import (
    can_see_broadcast,
    projects_in_scope,
    resources_in_scope,
    search_divulgation,
    search_projects,
    students_for_semillero,
    visible_broadcasts,
)


def _context(store, role, semillero_id=None, selected=None):
    selected_semillero = store.semilleros.get(selected) if selected else None
    return SessionContext(user=make_user(role, semillero_id), selected_semillero=selected_semillero)


def test_admin_sees_all_projects(seeded_store):
    context = _context(seeded_store, "administrador")
    assert len(projects_in_scope(context, seeded_store.projects.list())) == 3
    assert len(resources_in_scope(context, seeded_store.resources.list())) == 2


def test_member_sees_selected_semillero_only(seeded_store):
    context = _context(seeded_store, "profesor", "1", selected="1")
    assert {p.id for p in projects_in_scope(context, seeded_store.projects.list())} == {"1", "3"}
    assert [r.id for r in resources_in_scope(context, seeded_store.resources.list())] == ["1"]


def test_member_without_selection_sees_nothing(seeded_store):
    context = _context(seeded_store, "profesor", "1")
    assert projects_in_scope(context, seeded_store.projects.list()) == []
    assert projects_in_scope(SessionContext(), seeded_store.projects.list()) == []


def test_admin_sees_every_broadcast(seeded_store):
    context = _context(seeded_store, "administrador")
    assert {m.id for m in visible_broadcasts(context, seeded_store.messages.list())} == {"1", "2"}
    assert [m.id for m in visible_broadcasts(context, seeded_store.meetings.list())] == ["1"]
    assert can_see_broadcast(context, seeded_store.messages.get("1"))


def test_broadcasts_without_selection_are_general_only(seeded_store):
    context = _context(seeded_store, "profesor", "1")
    assert [m.id for m in visible_broadcasts(context, seeded_store.messages.list())] == ["2"]
    assert visible_broadcasts(context, seeded_store.meetings.list()) == []
    assert not can_see_broadcast(context, seeded_store.messages.get("1"))
    assert visible_broadcasts(SessionContext(), seeded_store.messages.list()) == []


def test_broadcasts_with_selection(seeded_store):
    context = _context(seeded_store, "estudiante", "1", selected="1")
    assert {m.id for m in visible_broadcasts(context, seeded_store.messages.list())} == {"1", "2"}
    assert [m.id for m in visible_broadcasts(context, seeded_store.meetings.list())] == ["1"]
    other = _context(seeded_store, "profesor", "2", selected="2")
    assert [m.id for m in visible_broadcasts(other, seeded_store.messages.list())] == ["2"]


def test_general_flag_wins_over_semillero_id(seeded_store):
    mixed = Message(id="x", title="Aviso", content="Para todos", author="Admin", author_id="1",
                    is_general=True, semillero_id="3", created_at="2024-01-01T00:00:00Z")
    context = _context(seeded_store, "profesor", "1", selected="1")
    assert visible_broadcasts(context, [mixed]) == [mixed]


def test_students_for_semillero(seeded_store):
    students = seeded_store.students.list()
    admin = _context(seeded_store, "administrador")
    assert len(students_for_semillero(admin, students, "1")) == 3
    prof = _context(seeded_store, "profesor", "1", selected="1")
    assert len(students_for_semillero(prof, students, "1")) == 3
    assert students_for_semillero(prof, students, "2") == []
    student = _context(seeded_store, "estudiante", "1", selected="1")
    assert students_for_semillero(student, students, "1") == []


def test_search_projects(seeded_store):
    projects = seeded_store.projects.list()
    assert [p.id for p in search_projects(projects, "carbono")] == ["2"]
    assert [p.id for p in search_projects(projects, "", ["completado"])] == ["3"]
    assert len(search_projects(projects)) == 3


def test_search_divulgation_matches_team_and_group(seeded_store):
    projects = seeded_store.projects.list()
    assert [p.id for p in search_divulgation(projects, "luis")] == ["2"]
    assert {p.id for p in search_divulgation(projects, "inteligencia artificial")} == {"1", "3"}
