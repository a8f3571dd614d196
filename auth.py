"""
Login sessions and the current-user context.

Credentials are a fixed table compiled into the app; login only matches
against it. A successful login persists a session (user snapshot plus the
selected semillero) under a random bearer token.
"""
import hashlib
import logging
import os
import secrets
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from pydantic import BaseModel

from database import EntityStore
from permissions import RolePolicy, policy_for
from schemas import Semillero, User
from seed import initialize_mock_data

logger = logging.getLogger(__name__)

SESSION_TTL_DAYS = int(os.getenv("SESSION_TTL_DAYS", "7"))


def _hash_password(password: str) -> str:
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Credential(BaseModel):
    id: str
    name: str
    email: str
    password_hash: str
    role: str
    semillero_id: Optional[str] = None
    semillero_name: Optional[str] = None

    def to_user(self) -> User:
        return User(
            id=self.id,
            name=self.name,
            email=self.email,
            role=self.role,
            semillero_id=self.semillero_id,
            semillero_name=self.semillero_name,
        )


def _credential(id, name, email, password, role, semillero_id=None, semillero_name=None) -> Credential:
    return Credential(
        id=id,
        name=name,
        email=email,
        password_hash=_hash_password(password),
        role=role,
        semillero_id=semillero_id,
        semillero_name=semillero_name,
    )


CREDENTIALS: List[Credential] = [
    _credential("1", "Admin Sistema", "admin@unilibre.edu.co", "admin123", "administrador"),
    _credential("2", "Dr. García Martínez", "garcia@unilibre.edu.co", "prof123", "profesor",
                "1", "Inteligencia Artificial y Educación"),
    _credential("3", "María Estudiante", "maria@unilibre.edu.co", "est123", "estudiante",
                "1", "Inteligencia Artificial y Educación"),
    _credential("4", "Visitante Externo", "visitante@external.com", "visit123", "visitante"),
    _credential("5", "Dra. Martínez López", "martinez@unilibre.edu.co", "prof123", "profesor",
                "2", "Sostenibilidad y Medio Ambiente"),
    _credential("6", "Ing. Pérez Ramírez", "perez@unilibre.edu.co", "prof123", "profesor",
                "3", "Blockchain y Fintech"),
    _credential("7", "Dr. Silva Torres", "silva@unilibre.edu.co", "prof123", "profesor",
                "4", "Biotecnología Médica"),
]


def find_credential(email: str, password: str) -> Optional[Credential]:
    password_hash = _hash_password(password)
    for cred in CREDENTIALS:
        if cred.email == email and secrets.compare_digest(cred.password_hash, password_hash):
            return cred
    return None


def landing_path(user: User) -> str:
    """Where the client should go right after login"""
    return "/divulgacion" if user.role == "visitante" else "/"


class SessionContext(BaseModel):
    """Current user and selected semillero, passed explicitly to every check"""
    user: Optional[User] = None
    selected_semillero: Optional[Semillero] = None
    token: Optional[str] = None
    session_id: Optional[str] = None

    @property
    def selected_semillero_id(self) -> Optional[str]:
        return self.selected_semillero.id if self.selected_semillero else None

    @property
    def policy(self) -> RolePolicy:
        return policy_for(self.user, self.selected_semillero_id)

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None


def requires_semillero_selection(context: SessionContext, semilleros: List[Semillero]) -> bool:
    """
    Professors may coordinate several semilleros and must pick one before
    any protected content. Students are bound to theirs, so a missing
    selection only happens if their group no longer exists.
    """
    if context.user is None or context.selected_semillero is not None:
        return False
    if context.user.role == "profesor":
        return len(semilleros) > 1
    return context.user.role == "estudiante"


class SessionManager:
    def __init__(self, store: EntityStore, ttl_days: int = SESSION_TTL_DAYS):
        self.store = store
        self.ttl_days = ttl_days

    def login(self, email: str, password: str) -> Optional[SessionContext]:
        cred = find_credential(email.strip().lower(), password)
        if cred is None:
            logger.info("Failed login for %s", email)
            return None

        initialize_mock_data(self.store)

        user = cred.to_user()
        selected = None
        if user.role in ("profesor", "estudiante") and user.semillero_id:
            selected = self.store.semilleros.get(user.semillero_id)

        token = secrets.token_urlsafe(32)
        session = self.store.sessions.create({
            "token": token,
            "user": user.model_dump(mode="json"),
            "selected_semillero": selected.model_dump(mode="json") if selected else None,
            "expires_at": (_now() + timedelta(days=self.ttl_days)).isoformat(),
        })
        logger.info("User %s logged in as %s", user.id, user.role)
        return SessionContext(user=user, selected_semillero=selected, token=token, session_id=session.id)

    def resolve(self, token: Optional[str]) -> Optional[SessionContext]:
        if not token:
            return None
        matches = self.store.sessions.find(lambda s: s.token == token)
        if not matches:
            return None
        session = matches[0]
        if session.expires_at and datetime.fromisoformat(session.expires_at) < _now():
            self.store.sessions.delete(session.id)
            return None
        return SessionContext(
            user=session.user,
            selected_semillero=session.selected_semillero,
            token=session.token,
            session_id=session.id,
        )

    def select_semillero(self, context: SessionContext, semillero: Semillero) -> Optional[SessionContext]:
        """
        Make semillero the current scope. For a professor it also becomes
        their home group. Returns the new context, or None when the role may
        not switch to that semillero.
        """
        user = context.user
        if user is None or user.role == "visitante":
            return None
        if user.role == "estudiante" and semillero.id != user.semillero_id:
            logger.warning("Student %s tried to switch to semillero %s", user.id, semillero.id)
            return None

        if user.role == "profesor":
            user = user.model_copy(update={"semillero_id": semillero.id, "semillero_name": semillero.name})

        updated = context.model_copy(update={"user": user, "selected_semillero": semillero})
        if context.session_id:
            self.store.sessions.update(context.session_id, {
                "user": user.model_dump(mode="json"),
                "selected_semillero": semillero.model_dump(mode="json"),
            })
        return updated

    def logout(self, context: SessionContext) -> bool:
        if not context.session_id:
            return False
        return self.store.sessions.delete(context.session_id)
