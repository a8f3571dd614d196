import pytest

from conftest import make_user
from permissions import (
    SECTIONS,
    AdministradorPolicy,
    EstudiantePolicy,
    ProfesorPolicy,
    RolePolicy,
    VisitantePolicy,
    policy_for,
)
from schemas import Project

ALL_SECTIONS = SECTIONS + ("configuracion", "estudiantes", "unknown")


def _project(semillero_id="1", team=("María Estudiante",)):
    return Project(
        id="p1", title="Proyecto", start_date="2024-01-01", end_date="2024-02-01",
        semillero_id=semillero_id, team=list(team), created_by="3", created_at="2024-01-01T00:00:00Z",
    )


def test_policy_dispatch_by_role():
    assert isinstance(policy_for(make_user("administrador")), AdministradorPolicy)
    assert isinstance(policy_for(make_user("profesor", "1")), ProfesorPolicy)
    assert isinstance(policy_for(make_user("estudiante", "1")), EstudiantePolicy)
    assert isinstance(policy_for(make_user("visitante")), VisitantePolicy)
    assert type(policy_for(None)) is RolePolicy


def test_no_user_is_denied_everything():
    policy = policy_for(None)
    assert not any(policy.can_access(s) for s in ALL_SECTIONS)
    assert not policy.can_download()
    assert not policy.can_download("1")
    assert not policy.can_create_project()
    assert not policy.can_manage_resources("1")
    assert policy.visible_sections() == []


@pytest.mark.parametrize("section", ALL_SECTIONS)
@pytest.mark.parametrize("target", [None, "1", "2", "404"])
def test_admin_accesses_everything(section, target):
    assert policy_for(make_user("administrador")).can_access(section, target)


@pytest.mark.parametrize("section", ALL_SECTIONS)
def test_visitor_only_sees_divulgacion(section):
    policy = policy_for(make_user("visitante"))
    assert policy.can_access(section) == (section == "divulgacion")
    assert policy.can_access(section, "1") == (section == "divulgacion")


@pytest.mark.parametrize("role", ["profesor", "estudiante"])
def test_member_cross_group_access(role):
    policy = policy_for(make_user(role, "A"))
    assert policy.can_access("proyectos", "A")
    assert policy.can_access("comunicacion", "A")
    assert policy.can_access("seguimiento")
    assert not policy.can_access("comunicacion", "B")
    assert not policy.can_access("seguimiento", "B")
    assert not policy.can_access("semilleros", "B")
    assert policy.can_access("proyectos", "B")
    assert policy.can_access("recursos", "B")
    assert policy.can_access("divulgacion", "B")


def test_student_restricted_sections():
    policy = policy_for(make_user("estudiante", "1"))
    assert not policy.can_access("usuarios")
    assert not policy.can_access("usuarios", "1")
    assert not policy.can_access("configuracion")
    assert policy.can_access("proyectos", "1")


def test_professor_can_open_users_of_own_group():
    assert policy_for(make_user("profesor", "1")).can_access("usuarios")


@pytest.mark.parametrize("role,expected", [
    ("administrador", False),
    ("profesor", False),
    ("estudiante", True),
    ("visitante", False),
])
def test_only_students_create_projects(role, expected):
    assert policy_for(make_user(role, "1")).can_create_project() is expected


@pytest.mark.parametrize("role", ["profesor", "estudiante"])
def test_member_download(role):
    policy = policy_for(make_user(role, "1"))
    assert policy.can_download("1")
    assert not policy.can_download("2")
    assert policy.can_download()


def test_admin_and_visitor_download():
    assert policy_for(make_user("administrador")).can_download("7")
    assert not policy_for(make_user("visitante")).can_download()
    assert not policy_for(make_user("visitante")).can_download("1")


def test_manage_resources():
    admin = policy_for(make_user("administrador"))
    assert admin.can_manage_resources("1") and admin.can_manage_resources("2")
    assert admin.can_manage_resources()

    prof = policy_for(make_user("profesor", "1"))
    assert prof.can_manage_resources("1")
    assert not prof.can_manage_resources("2")
    assert prof.can_manage_resources()

    for role in ("estudiante", "visitante"):
        policy = policy_for(make_user(role, "1"))
        assert not policy.can_manage_resources("1")
        assert not policy.can_manage_resources("2")


def test_professor_resources_default_to_selected_semillero():
    assert not policy_for(make_user("profesor", "1"), selected_semillero_id="2").can_manage_resources()
    assert policy_for(make_user("profesor", "1"), selected_semillero_id="1").can_manage_resources()


def test_student_edits_only_team_projects_of_own_group():
    policy = policy_for(make_user("estudiante", "1", name="María Estudiante"))
    assert policy.can_edit_project(_project("1"))
    assert not policy.can_edit_project(_project("2"))
    assert not policy.can_edit_project(_project("1", team=["Carlos Rodríguez"]))
    assert not policy_for(make_user("profesor", "1")).can_edit_project(_project("1"))
    assert policy_for(make_user("administrador")).can_delete_project(_project("2"))


def test_content_and_directory_capabilities():
    admin = policy_for(make_user("administrador"))
    prof = policy_for(make_user("profesor", "1"))
    student = policy_for(make_user("estudiante", "1"))
    assert admin.can_manage_content() and prof.can_manage_content() and not student.can_manage_content()
    assert prof.can_create_semilleros() and not prof.can_edit_semilleros()
    assert admin.can_edit_semilleros() and admin.can_manage_users()
    assert prof.can_manage_users() and not prof.can_delete_users()
    assert not student.can_manage_users()
    assert not student.can_manage_students()


@pytest.mark.parametrize("role,admin_may,prof_may", [
    ("administrador", True, False),
    ("profesor", True, False),
    ("estudiante", True, True),
    ("visitante", True, True),
])
def test_user_roles_a_manager_may_assign(role, admin_may, prof_may):
    assert policy_for(make_user("administrador")).can_manage_user_role(role) is admin_may
    assert policy_for(make_user("profesor", "1")).can_manage_user_role(role) is prof_may
    assert not policy_for(make_user("estudiante", "1")).can_manage_user_role(role)


def test_visible_sections():
    assert policy_for(make_user("visitante")).visible_sections() == ["divulgacion"]
    assert policy_for(make_user("administrador")).visible_sections() == list(SECTIONS)
    student_sections = policy_for(make_user("estudiante", "1")).visible_sections()
    assert "usuarios" not in student_sections
    assert "semilleros" not in student_sections
    assert "proyectos" in student_sections
