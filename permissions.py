"""
Role policies for the semillero dashboard.

Each role gets its own policy class answering the same capability checks.
The base policy denies everything, so a role only grants what its class
overrides. A missing user or an unknown role maps to the base policy.
"""
from typing import Dict, List, Optional, Type

from schemas import Project, User

SECTIONS = (
    "dashboard",
    "proyectos",
    "recursos",
    "comunicacion",
    "seguimiento",
    "divulgacion",
    "semilleros",
    "usuarios",
    "ayuda",
)

# Sections a member may open for a semillero other than their own (read only)
CROSS_GROUP_SECTIONS = frozenset({"proyectos", "recursos", "divulgacion"})

STUDENT_RESTRICTED_SECTIONS = frozenset({"usuarios", "configuracion"})

# Roles a profesor may give to the accounts they create or edit
PROFESSOR_MANAGED_ROLES = frozenset({"estudiante", "visitante"})


class RolePolicy:
    """Deny-all policy. Also used when there is no authenticated user."""

    role: Optional[str] = None

    def __init__(self, user: Optional[User] = None, selected_semillero_id: Optional[str] = None):
        self.user = user
        self.selected_semillero_id = selected_semillero_id

    def can_access(self, section: str, semillero_id: Optional[str] = None) -> bool:
        return False

    def can_download(self, semillero_id: Optional[str] = None) -> bool:
        return False

    def can_create_project(self) -> bool:
        return False

    def can_manage_resources(self, semillero_id: Optional[str] = None) -> bool:
        return False

    def can_edit_project(self, project: Project) -> bool:
        return False

    def can_delete_project(self, project: Project) -> bool:
        return self.can_edit_project(project)

    def can_manage_content(self) -> bool:
        """Create and delete divulgation events and collaborations"""
        return False

    def can_manage_students(self) -> bool:
        return False

    def can_create_semilleros(self) -> bool:
        return False

    def can_edit_semilleros(self) -> bool:
        return False

    def can_manage_users(self) -> bool:
        return False

    def can_manage_user_role(self, role: str) -> bool:
        """Create or edit accounts holding the given role"""
        return False

    def can_delete_users(self) -> bool:
        return False

    def visible_sections(self) -> List[str]:
        return [s for s in SECTIONS if self.can_access(s)]

    def capabilities(self) -> Dict[str, bool]:
        return {
            "can_download": self.can_download(self.selected_semillero_id),
            "can_create_project": self.can_create_project(),
            "can_manage_resources": self.can_manage_resources(),
            "can_manage_content": self.can_manage_content(),
            "can_manage_students": self.can_manage_students(),
            "can_create_semilleros": self.can_create_semilleros(),
            "can_edit_semilleros": self.can_edit_semilleros(),
            "can_manage_users": self.can_manage_users(),
            "can_delete_users": self.can_delete_users(),
        }


class AdministradorPolicy(RolePolicy):
    role = "administrador"

    def can_access(self, section, semillero_id=None):
        return True

    def can_download(self, semillero_id=None):
        return True

    def can_manage_resources(self, semillero_id=None):
        return True

    def can_delete_project(self, project):
        return True

    def can_manage_content(self):
        return True

    def can_manage_students(self):
        return True

    def can_create_semilleros(self):
        return True

    def can_edit_semilleros(self):
        return True

    def can_manage_users(self):
        return True

    def can_manage_user_role(self, role):
        return True

    def can_delete_users(self):
        return True


class VisitantePolicy(RolePolicy):
    role = "visitante"

    def can_access(self, section, semillero_id=None):
        return section == "divulgacion"


class MemberPolicy(RolePolicy):
    """Rules shared by profesores and estudiantes: full access to their own semillero."""

    @property
    def own_semillero_id(self) -> Optional[str]:
        return self.user.semillero_id if self.user else None

    def can_access(self, section, semillero_id=None):
        target = semillero_id or self.own_semillero_id
        if target == self.own_semillero_id:
            return True
        return section in CROSS_GROUP_SECTIONS

    def can_download(self, semillero_id=None):
        # no semillero means the public divulgation context
        if not semillero_id:
            return True
        return semillero_id == self.own_semillero_id


class ProfesorPolicy(MemberPolicy):
    role = "profesor"

    def can_manage_resources(self, semillero_id=None):
        target = semillero_id or self.selected_semillero_id or self.own_semillero_id
        return target == self.own_semillero_id

    def can_manage_content(self):
        return True

    def can_manage_students(self):
        return True

    def can_create_semilleros(self):
        return True

    def can_manage_users(self):
        return True

    def can_manage_user_role(self, role):
        return role in PROFESSOR_MANAGED_ROLES


class EstudiantePolicy(MemberPolicy):
    role = "estudiante"

    def can_access(self, section, semillero_id=None):
        if section in STUDENT_RESTRICTED_SECTIONS:
            return False
        return super().can_access(section, semillero_id)

    # Only students create projects. Kept as the dashboard has always behaved.
    def can_create_project(self):
        return True

    def can_edit_project(self, project):
        """Team members of a project in their own semillero."""
        if project.semillero_id != self.own_semillero_id:
            return False
        name = self.user.name.lower()
        return any(name in member.lower() for member in project.team)

    def visible_sections(self):
        return [s for s in super().visible_sections() if s not in ("usuarios", "semilleros")]


POLICIES: Dict[str, Type[RolePolicy]] = {
    "administrador": AdministradorPolicy,
    "profesor": ProfesorPolicy,
    "estudiante": EstudiantePolicy,
    "visitante": VisitantePolicy,
}


def policy_for(user: Optional[User], selected_semillero_id: Optional[str] = None) -> RolePolicy:
    if user is None:
        return RolePolicy()
    policy_cls = POLICIES.get(user.role, RolePolicy)
    return policy_cls(user, selected_semillero_id)
