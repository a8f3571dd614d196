"""
Selected-semillero filters.

Every list the API returns goes through one of these so that a user only
sees records of the semillero they are working in (administradores see
everything for projects and resources).
"""
from typing import Iterable, List, Optional, Sequence, TypeVar, Union

from auth import SessionContext
from schemas import Meeting, Message, Project, Resource, Student

Scoped = TypeVar("Scoped", Project, Resource)
Broadcast = TypeVar("Broadcast", Message, Meeting)


def _by_selected_semillero(context: SessionContext, items: Iterable[Scoped]) -> List[Scoped]:
    if context.user is None:
        return []
    if context.user.role == "administrador":
        return list(items)
    if context.selected_semillero_id is None:
        return []
    return [x for x in items if x.semillero_id == context.selected_semillero_id]


def projects_in_scope(context: SessionContext, projects: Iterable[Project]) -> List[Project]:
    return _by_selected_semillero(context, projects)


def resources_in_scope(context: SessionContext, resources: Iterable[Resource]) -> List[Resource]:
    return _by_selected_semillero(context, resources)


def is_visible_in(item: Union[Message, Meeting], semillero_id: Optional[str]) -> bool:
    # is_general wins even when a semillero_id is also set
    if item.is_general:
        return True
    return semillero_id is not None and item.semillero_id == semillero_id


def can_see_broadcast(context: SessionContext, item: Union[Message, Meeting]) -> bool:
    if context.user is None:
        return False
    if context.user.role == "administrador":
        return True
    return is_visible_in(item, context.selected_semillero_id)


def visible_broadcasts(context: SessionContext, items: Iterable[Broadcast]) -> List[Broadcast]:
    """Messages or meetings: general ones, plus the selected semillero's. Administradores see all."""
    return [x for x in items if can_see_broadcast(context, x)]


def students_for_semillero(context: SessionContext, students: Iterable[Student], semillero_id: str) -> List[Student]:
    user = context.user
    if user is None:
        return []
    if user.role == "administrador" or (user.role == "profesor" and user.semillero_id == semillero_id):
        return [s for s in students if s.semillero_id == semillero_id]
    return []


def search_projects(projects: Iterable[Project], term: str = "", statuses: Sequence[str] = ()) -> List[Project]:
    term = term.lower()
    return [
        p for p in projects
        if (term in p.title.lower() or term in p.description.lower())
        and (not statuses or p.status in statuses)
    ]


def search_divulgation(projects: Iterable[Project], term: str = "") -> List[Project]:
    term = term.lower()
    return [
        p for p in projects
        if term in p.title.lower()
        or term in p.description.lower()
        or term in p.semillero_name.lower()
        or any(term in member.lower() for member in p.team)
    ]
