"""Semillero and student management, gated by the caller's role."""
import logging
from typing import Any, Dict, Optional

from auth import CREDENTIALS, SessionContext
from database import EntityStore
from schemas import MemberStatus, Semillero, Student

logger = logging.getLogger(__name__)

COORDINATOR_ROLES = ("profesor", "administrador")


class InvalidCoordinator(ValueError):
    pass


def is_coordinator_capable(store: EntityStore, user_id: str) -> bool:
    user = store.users.get(user_id)
    if user is not None:
        return user.role in COORDINATOR_ROLES
    return any(c.id == user_id and c.role in COORDINATOR_ROLES for c in CREDENTIALS)


def _check_coordinator(store: EntityStore, coordinator_id: Optional[str]) -> None:
    if coordinator_id is not None and not is_coordinator_capable(store, coordinator_id):
        raise InvalidCoordinator(f"User {coordinator_id} cannot coordinate a semillero")


def create_semillero(store: EntityStore, context: SessionContext, fields: Dict[str, Any]) -> Optional[Semillero]:
    if not context.policy.can_create_semilleros():
        return None
    _check_coordinator(store, fields.get("coordinator_id"))
    semillero = store.semilleros.create(fields)
    logger.info("Semillero %s created by %s", semillero.id, context.user.id)
    return semillero


def update_semillero(store: EntityStore, context: SessionContext, semillero_id: str,
                     changes: Dict[str, Any]) -> bool:
    if not context.policy.can_edit_semilleros():
        return False
    _check_coordinator(store, changes.get("coordinator_id"))
    return store.semilleros.update(semillero_id, changes)


def delete_semillero(store: EntityStore, context: SessionContext, semillero_id: str) -> bool:
    if not context.policy.can_edit_semilleros():
        return False
    return store.semilleros.delete(semillero_id)


def create_student(store: EntityStore, context: SessionContext, fields: Dict[str, Any]) -> Optional[Student]:
    if not context.policy.can_manage_students():
        return None
    fields = dict(fields)
    if not fields.get("semillero_name"):
        semillero = store.semilleros.get(fields.get("semillero_id", ""))
        fields["semillero_name"] = semillero.name if semillero else ""
    fields["created_by"] = context.user.id
    return store.students.create(fields)


def update_student_status(store: EntityStore, context: SessionContext, student_id: str,
                          status: MemberStatus) -> bool:
    if not context.policy.can_manage_students():
        return False
    return store.students.update(student_id, {"status": status})
