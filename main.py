import logging
import os
from typing import Optional, List, Dict, Any

from fastapi import FastAPI, HTTPException, Depends, Header, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, EmailStr, Field, ValidationError

from auth import CREDENTIALS, SessionContext, SessionManager, landing_path, requires_semillero_selection
from database import DATABASE_URL, EntityStore, StorageError, get_storage
from schemas import (
    CollaborationStatus,
    EventType,
    Meeting,
    MemberStatus,
    ProjectStatus,
    ResourceStatus,
    ResourceType,
    Role,
)
from scope import (
    can_see_broadcast,
    projects_in_scope,
    resources_in_scope,
    search_divulgation,
    search_projects,
    students_for_semillero,
    visible_broadcasts,
)
from seed import initialize_mock_data
from semilleros import (
    InvalidCoordinator,
    create_semillero,
    create_student,
    delete_semillero,
    update_semillero,
    update_student_status,
)
from tracking import export_payload, semillero_kpis

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
logger = logging.getLogger(__name__)

app = FastAPI(title="Semillero Management API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

NO_PERMISSION = "No tienes permisos para realizar esta acción"

_store = EntityStore(get_storage())


# Dependencies
def get_store() -> EntityStore:
    return _store


def get_sessions(store: EntityStore = Depends(get_store)) -> SessionManager:
    return SessionManager(store)


def get_current_session(
    authorization: Optional[str] = Header(None),
    sessions: SessionManager = Depends(get_sessions),
) -> SessionContext:
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="Missing token")
    token = authorization.split(" ", 1)[1]
    context = sessions.resolve(token)
    if context is None:
        raise HTTPException(status_code=401, detail="Invalid session")
    return context


def require(allowed: bool, detail: str = NO_PERMISSION):
    if not allowed:
        raise HTTPException(status_code=403, detail=detail)


def require_selection(context: SessionContext, store: EntityStore):
    if requires_semillero_selection(context, store.semilleros.list()):
        raise HTTPException(status_code=409, detail="Selecciona un semillero para continuar")


def _found(item, what: str):
    if item is None:
        raise HTTPException(status_code=404, detail=f"{what} not found")
    return item


def _semillero_id(context: SessionContext) -> Optional[str]:
    return context.selected_semillero_id or context.user.semillero_id


def _dump(item) -> Dict[str, Any]:
    doc = item.model_dump(mode="json")
    if isinstance(item, Meeting):
        doc["is_virtual"] = item.is_virtual
    return doc


# Error mapping
@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    errors = [{"loc": list(e["loc"]), "msg": e["msg"], "type": e["type"]} for e in exc.errors()]
    return JSONResponse(status_code=422, content={"detail": errors})


@app.exception_handler(InvalidCoordinator)
async def invalid_coordinator_handler(request: Request, exc: InvalidCoordinator):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    return JSONResponse(status_code=503, content={"detail": "No se pudo guardar la información"})


# Models
class LoginBody(BaseModel):
    email: EmailStr
    password: str


class SelectSemilleroBody(BaseModel):
    semillero_id: str


class ProjectBody(BaseModel):
    title: str
    description: str = ""
    status: ProjectStatus = "planificacion"
    progress: int = Field(0, ge=0, le=100)
    budget: float = Field(0, ge=0)
    start_date: str
    end_date: str
    team: List[str] = []
    document_name: Optional[str] = None


class ProjectUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None
    progress: Optional[int] = Field(None, ge=0, le=100)
    budget: Optional[float] = Field(None, ge=0)
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    team: Optional[List[str]] = None
    document_name: Optional[str] = None


class ResourceBody(BaseModel):
    name: str
    type: ResourceType
    status: ResourceStatus = "disponible"
    project_id: Optional[str] = None
    assigned_to: Optional[str] = None
    description: str = ""


class ResourceUpdate(BaseModel):
    name: Optional[str] = None
    type: Optional[ResourceType] = None
    status: Optional[ResourceStatus] = None
    project_id: Optional[str] = None
    assigned_to: Optional[str] = None
    description: Optional[str] = None


class MessageBody(BaseModel):
    title: Optional[str] = None
    content: str = Field(..., min_length=1)
    is_general: bool = False
    semillero_id: Optional[str] = None


class ReplyBody(BaseModel):
    content: str = Field(..., min_length=1)


class MeetingBody(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = ""
    date: str = Field(..., min_length=1)
    time: str = Field(..., min_length=1)
    location: Optional[str] = None
    is_general: bool = False
    semillero_id: Optional[str] = None
    attendees: List[str] = []


class MeetingUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    location: Optional[str] = None
    attendees: Optional[List[str]] = None


class EventBody(BaseModel):
    title: str
    description: str = ""
    date: str
    location: str
    type: EventType
    organizer: Optional[str] = None


class EventUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    date: Optional[str] = None
    location: Optional[str] = None
    type: Optional[EventType] = None
    organizer: Optional[str] = None


class CollaborationBody(BaseModel):
    title: str
    institution: str
    description: str = ""
    status: CollaborationStatus = "pendiente"
    start_date: str
    end_date: Optional[str] = None
    contact: str
    email: EmailStr


class CollaborationUpdate(BaseModel):
    title: Optional[str] = None
    institution: Optional[str] = None
    description: Optional[str] = None
    status: Optional[CollaborationStatus] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    contact: Optional[str] = None
    email: Optional[EmailStr] = None


class SemilleroBody(BaseModel):
    name: str
    description: str = ""
    coordinator_id: str
    coordinator: str
    members: int = Field(0, ge=0)


class SemilleroUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    coordinator_id: Optional[str] = None
    coordinator: Optional[str] = None
    members: Optional[int] = Field(None, ge=0)


class StudentBody(BaseModel):
    name: str
    email: EmailStr
    semillero_id: Optional[str] = None
    status: MemberStatus = "pendiente"


class StudentStatusBody(BaseModel):
    status: MemberStatus


class UserBody(BaseModel):
    name: str
    email: EmailStr
    role: Role = "estudiante"
    semillero_id: Optional[str] = None
    status: MemberStatus = "activo"


class UserUpdate(BaseModel):
    # role has no change operation
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    semillero_id: Optional[str] = None
    status: Optional[MemberStatus] = None


def _changes(body: BaseModel) -> Dict[str, Any]:
    return body.model_dump(mode="json", exclude_unset=True)


@app.get("/")
def root():
    return {"message": "Semillero Management API is running"}


@app.get("/test")
def test_storage(store: EntityStore = Depends(get_store)):
    response = {
        "backend": "✅ Running",
        "storage": "MongoDB" if DATABASE_URL else "Memory",
        "database_url": "✅ Set" if DATABASE_URL else "❌ Not Set",
        "collections": {},
    }
    for name in ("semilleros", "users", "students", "projects", "resources",
                 "messages", "meetings", "events", "collaborations"):
        response["collections"][name] = len(getattr(store, name).list())
    return response


# Demo bootstrap for quick testing
@app.post("/demo/bootstrap")
def bootstrap_demo(store: EntityStore = Depends(get_store)):
    seeded = initialize_mock_data(store)
    accounts = [{"email": c.email, "role": c.role} for c in CREDENTIALS]
    return {"seeded": seeded, "message": "Demo data ready", "accounts": accounts}


# Auth routes
def _session_payload(context: SessionContext, store: EntityStore) -> Dict[str, Any]:
    policy = context.policy
    return {
        "user": context.user.model_dump(mode="json"),
        "selected_semillero": context.selected_semillero.model_dump(mode="json") if context.selected_semillero else None,
        "requires_semillero_selection": requires_semillero_selection(context, store.semilleros.list()),
        "sections": policy.visible_sections(),
        "capabilities": policy.capabilities(),
    }


@app.post("/auth/login")
def login(body: LoginBody, sessions: SessionManager = Depends(get_sessions)):
    context = sessions.login(str(body.email), body.password)
    if context is None:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    payload = _session_payload(context, sessions.store)
    payload.update({"token": context.token, "redirect": landing_path(context.user)})
    return payload


@app.post("/auth/logout")
def logout(current: SessionContext = Depends(get_current_session),
           sessions: SessionManager = Depends(get_sessions)):
    sessions.logout(current)
    return {"status": "logged out"}


@app.get("/auth/me")
def me(current: SessionContext = Depends(get_current_session), store: EntityStore = Depends(get_store)):
    return _session_payload(current, store)


@app.post("/auth/select-semillero")
def select_semillero(body: SelectSemilleroBody,
                     current: SessionContext = Depends(get_current_session),
                     sessions: SessionManager = Depends(get_sessions)):
    semillero = _found(sessions.store.semilleros.get(body.semillero_id), "Semillero")
    updated = sessions.select_semillero(current, semillero)
    require(updated is not None, "No puedes seleccionar este semillero")
    return _session_payload(updated, sessions.store)


# Projects
@app.get("/projects")
def list_projects(q: str = "", status: List[str] = Query([]), semillero_id: Optional[str] = None,
                  current: SessionContext = Depends(get_current_session),
                  store: EntityStore = Depends(get_store)):
    policy = current.policy
    if semillero_id:
        require(policy.can_access("proyectos", semillero_id))
        items = store.projects.find(lambda p: p.semillero_id == semillero_id)
    else:
        require(policy.can_access("proyectos"))
        require_selection(current, store)
        items = projects_in_scope(current, store.projects.list())
    items = search_projects(items, q, status)
    return {"items": [
        {**_dump(p), "can_download": bool(p.document_name) and policy.can_download(p.semillero_id)}
        for p in items
    ]}


@app.post("/projects", status_code=201)
def create_project(body: ProjectBody, current: SessionContext = Depends(get_current_session),
                   store: EntityStore = Depends(get_store)):
    require(current.policy.can_create_project())
    require_selection(current, store)
    semillero_id = _semillero_id(current)
    if not semillero_id:
        raise HTTPException(status_code=409, detail="Selecciona un semillero para continuar")
    semillero = store.semilleros.get(semillero_id)
    fields = body.model_dump(mode="json")
    fields.update({
        "team": body.team or [current.user.name],
        "semillero_id": semillero_id,
        "semillero_name": semillero.name if semillero else (current.user.semillero_name or ""),
        "created_by": current.user.id,
    })
    project = store.projects.create(fields)
    return _dump(project)


@app.get("/projects/{project_id}")
def get_project(project_id: str, current: SessionContext = Depends(get_current_session),
                store: EntityStore = Depends(get_store)):
    project = _found(store.projects.get(project_id), "Project")
    policy = current.policy
    require(policy.can_access("proyectos", project.semillero_id))
    return {
        **_dump(project),
        "can_download": bool(project.document_name) and policy.can_download(project.semillero_id),
        "can_edit": policy.can_edit_project(project),
    }


@app.patch("/projects/{project_id}")
def update_project(project_id: str, body: ProjectUpdate,
                   current: SessionContext = Depends(get_current_session),
                   store: EntityStore = Depends(get_store)):
    project = _found(store.projects.get(project_id), "Project")
    require(current.policy.can_edit_project(project))
    store.projects.update(project_id, _changes(body))
    return _dump(store.projects.get(project_id))


@app.delete("/projects/{project_id}")
def delete_project(project_id: str, current: SessionContext = Depends(get_current_session),
                   store: EntityStore = Depends(get_store)):
    project = _found(store.projects.get(project_id), "Project")
    require(current.policy.can_delete_project(project))
    if not store.projects.delete(project_id):
        raise HTTPException(status_code=404, detail="Project not found")
    logger.info("Project %s deleted by %s", project_id, current.user.id)
    return {"status": "deleted"}


@app.get("/projects/{project_id}/document")
def download_document(project_id: str, current: SessionContext = Depends(get_current_session),
                      store: EntityStore = Depends(get_store)):
    project = _found(store.projects.get(project_id), "Project")
    require(current.policy.can_download(project.semillero_id), "No puedes descargar documentos de este semillero")
    if not project.document_name:
        raise HTTPException(status_code=404, detail="Project has no document")
    return {"project_id": project.id, "document_name": project.document_name}


# Resources
@app.get("/resources")
def list_resources(q: str = "", semillero_id: Optional[str] = None,
                   current: SessionContext = Depends(get_current_session),
                   store: EntityStore = Depends(get_store)):
    policy = current.policy
    if semillero_id:
        require(policy.can_access("recursos", semillero_id))
        items = store.resources.find(lambda r: r.semillero_id == semillero_id)
    else:
        require(policy.can_access("recursos"))
        require_selection(current, store)
        items = resources_in_scope(current, store.resources.list())
    term = q.lower()
    items = [r for r in items if term in r.name.lower() or term in r.description.lower()]
    return {
        "items": [_dump(r) for r in items],
        "can_manage": policy.can_manage_resources(semillero_id or current.selected_semillero_id),
    }


@app.post("/resources", status_code=201)
def create_resource(body: ResourceBody, current: SessionContext = Depends(get_current_session),
                    store: EntityStore = Depends(get_store)):
    require_selection(current, store)
    semillero_id = _semillero_id(current)
    if not semillero_id:
        raise HTTPException(status_code=409, detail="Selecciona un semillero para continuar")
    require(current.policy.can_manage_resources(semillero_id))
    project = store.projects.get(body.project_id) if body.project_id else None
    fields = body.model_dump(mode="json")
    fields.update({
        "project_name": project.title if project else None,
        "semillero_id": semillero_id,
        "created_by": current.user.id,
    })
    if body.status == "en-uso" and not body.assigned_to:
        fields["assigned_to"] = current.user.name
    return _dump(store.resources.create(fields))


@app.patch("/resources/{resource_id}")
def update_resource(resource_id: str, body: ResourceUpdate,
                    current: SessionContext = Depends(get_current_session),
                    store: EntityStore = Depends(get_store)):
    resource = _found(store.resources.get(resource_id), "Resource")
    require(current.policy.can_manage_resources(resource.semillero_id))
    changes = _changes(body)
    if "project_id" in changes:
        project = store.projects.get(changes["project_id"]) if changes["project_id"] else None
        changes["project_id"] = project.id if project else None
        changes["project_name"] = project.title if project else None
    store.resources.update(resource_id, changes)
    return _dump(store.resources.get(resource_id))


@app.delete("/resources/{resource_id}")
def delete_resource(resource_id: str, current: SessionContext = Depends(get_current_session),
                    store: EntityStore = Depends(get_store)):
    resource = _found(store.resources.get(resource_id), "Resource")
    require(current.policy.can_manage_resources(resource.semillero_id))
    if not store.resources.delete(resource_id):
        raise HTTPException(status_code=404, detail="Resource not found")
    return {"status": "deleted"}


# Communication
def _broadcast_target(current: SessionContext, is_general: bool, semillero_id: Optional[str]) -> Optional[str]:
    if is_general:
        return None
    target = semillero_id or current.selected_semillero_id
    if not target:
        raise HTTPException(status_code=409, detail="Selecciona un semillero o marca el mensaje como general")
    require(current.policy.can_access("comunicacion", target))
    return target


@app.get("/messages")
def list_messages(current: SessionContext = Depends(get_current_session),
                  store: EntityStore = Depends(get_store)):
    require(current.policy.can_access("comunicacion"))
    items = visible_broadcasts(current, store.messages.list())
    items.sort(key=lambda m: m.created_at, reverse=True)
    return {"items": [_dump(m) for m in items]}


@app.post("/messages", status_code=201)
def create_message(body: MessageBody, current: SessionContext = Depends(get_current_session),
                   store: EntityStore = Depends(get_store)):
    require(current.policy.can_access("comunicacion"))
    message = store.messages.create({
        "title": body.title or f"Mensaje de {current.user.name}",
        "content": body.content,
        "author": current.user.name,
        "author_id": current.user.id,
        "is_general": body.is_general,
        "semillero_id": _broadcast_target(current, body.is_general, body.semillero_id),
        "replies": [],
    })
    return _dump(message)


@app.post("/messages/{message_id}/replies", status_code=201)
def reply_message(message_id: str, body: ReplyBody,
                  current: SessionContext = Depends(get_current_session),
                  store: EntityStore = Depends(get_store)):
    require(current.policy.can_access("comunicacion"))
    message = store.messages.get(message_id)
    if message is None or not can_see_broadcast(current, message):
        raise HTTPException(status_code=404, detail="Message not found")
    added = store.add_reply(message_id, {
        "content": body.content,
        "author": current.user.name,
        "author_id": current.user.id,
    })
    if not added:
        raise HTTPException(status_code=404, detail="Message not found")
    return _dump(store.messages.get(message_id))


@app.get("/meetings")
def list_meetings(current: SessionContext = Depends(get_current_session),
                  store: EntityStore = Depends(get_store)):
    require(current.policy.can_access("comunicacion"))
    items = visible_broadcasts(current, store.meetings.list())
    items.sort(key=lambda m: (m.date, m.time))
    return {"items": [_dump(m) for m in items]}


@app.post("/meetings", status_code=201)
def create_meeting(body: MeetingBody, current: SessionContext = Depends(get_current_session),
                   store: EntityStore = Depends(get_store)):
    require(current.policy.can_access("comunicacion"))
    meeting = store.meetings.create({
        "title": body.title,
        "description": body.description,
        "date": body.date,
        "time": body.time,
        "location": body.location or "Por definir",
        "is_general": body.is_general,
        "semillero_id": _broadcast_target(current, body.is_general, body.semillero_id),
        "organizer": current.user.name,
        "organizer_id": current.user.id,
        "attendees": body.attendees or [current.user.name],
    })
    return _dump(meeting)


def _can_change_meeting(current: SessionContext, meeting: Meeting) -> bool:
    return current.user.role == "administrador" or meeting.organizer_id == current.user.id


@app.patch("/meetings/{meeting_id}")
def update_meeting(meeting_id: str, body: MeetingUpdate,
                   current: SessionContext = Depends(get_current_session),
                   store: EntityStore = Depends(get_store)):
    meeting = _found(store.meetings.get(meeting_id), "Meeting")
    require(_can_change_meeting(current, meeting))
    store.meetings.update(meeting_id, _changes(body))
    return _dump(store.meetings.get(meeting_id))


@app.delete("/meetings/{meeting_id}")
def delete_meeting(meeting_id: str, current: SessionContext = Depends(get_current_session),
                   store: EntityStore = Depends(get_store)):
    meeting = _found(store.meetings.get(meeting_id), "Meeting")
    require(_can_change_meeting(current, meeting))
    if not store.meetings.delete(meeting_id):
        raise HTTPException(status_code=404, detail="Meeting not found")
    return {"status": "deleted"}


# Divulgation
@app.get("/divulgacion/projects")
def divulgation_projects(q: str = "", current: SessionContext = Depends(get_current_session),
                         store: EntityStore = Depends(get_store)):
    policy = current.policy
    require(policy.can_access("divulgacion"))
    items = search_divulgation(store.projects.list(), q)
    can_download = policy.can_download()
    return {"items": [
        {**_dump(p), "can_download": can_download and bool(p.document_name)} for p in items
    ]}


@app.get("/events")
def list_events(current: SessionContext = Depends(get_current_session),
                store: EntityStore = Depends(get_store)):
    require(current.policy.can_access("divulgacion"))
    items = sorted(store.events.list(), key=lambda e: e.date)
    return {"items": [_dump(e) for e in items]}


@app.post("/events", status_code=201)
def create_event(body: EventBody, current: SessionContext = Depends(get_current_session),
                 store: EntityStore = Depends(get_store)):
    require(current.policy.can_manage_content())
    fields = body.model_dump(mode="json")
    fields.update({"organizer": body.organizer or current.user.name, "created_by": current.user.id})
    return _dump(store.events.create(fields))


@app.patch("/events/{event_id}")
def update_event(event_id: str, body: EventUpdate, current: SessionContext = Depends(get_current_session),
                 store: EntityStore = Depends(get_store)):
    require(current.policy.can_manage_content())
    if not store.events.update(event_id, _changes(body)):
        raise HTTPException(status_code=404, detail="Event not found")
    return _dump(store.events.get(event_id))


@app.delete("/events/{event_id}")
def delete_event(event_id: str, current: SessionContext = Depends(get_current_session),
                 store: EntityStore = Depends(get_store)):
    require(current.policy.can_manage_content())
    if not store.events.delete(event_id):
        raise HTTPException(status_code=404, detail="Event not found")
    return {"status": "deleted"}


@app.get("/collaborations")
def list_collaborations(current: SessionContext = Depends(get_current_session),
                        store: EntityStore = Depends(get_store)):
    require(current.policy.can_access("divulgacion"))
    return {"items": [_dump(c) for c in store.collaborations.list()]}


@app.post("/collaborations", status_code=201)
def create_collaboration(body: CollaborationBody, current: SessionContext = Depends(get_current_session),
                         store: EntityStore = Depends(get_store)):
    require(current.policy.can_manage_content())
    fields = body.model_dump(mode="json")
    fields["created_by"] = current.user.id
    return _dump(store.collaborations.create(fields))


@app.patch("/collaborations/{collaboration_id}")
def update_collaboration(collaboration_id: str, body: CollaborationUpdate,
                         current: SessionContext = Depends(get_current_session),
                         store: EntityStore = Depends(get_store)):
    require(current.policy.can_manage_content())
    if not store.collaborations.update(collaboration_id, _changes(body)):
        raise HTTPException(status_code=404, detail="Collaboration not found")
    return _dump(store.collaborations.get(collaboration_id))


@app.delete("/collaborations/{collaboration_id}")
def delete_collaboration(collaboration_id: str, current: SessionContext = Depends(get_current_session),
                         store: EntityStore = Depends(get_store)):
    require(current.policy.can_manage_content())
    if not store.collaborations.delete(collaboration_id):
        raise HTTPException(status_code=404, detail="Collaboration not found")
    return {"status": "deleted"}


# Semilleros
@app.get("/semilleros")
def list_semilleros(q: str = "", current: SessionContext = Depends(get_current_session),
                    store: EntityStore = Depends(get_store)):
    # listed for everyone signed in: professors pick their working group from here
    term = q.lower()
    items = [s for s in store.semilleros.list()
             if term in s.name.lower() or term in s.description.lower() or term in s.coordinator.lower()]
    return {"items": [_dump(s) for s in items]}


@app.post("/semilleros", status_code=201)
def add_semillero(body: SemilleroBody, current: SessionContext = Depends(get_current_session),
                  store: EntityStore = Depends(get_store)):
    semillero = create_semillero(store, current, body.model_dump(mode="json"))
    require(semillero is not None)
    return _dump(semillero)


@app.patch("/semilleros/{semillero_id}")
def edit_semillero(semillero_id: str, body: SemilleroUpdate,
                   current: SessionContext = Depends(get_current_session),
                   store: EntityStore = Depends(get_store)):
    require(current.policy.can_edit_semilleros())
    if not update_semillero(store, current, semillero_id, _changes(body)):
        raise HTTPException(status_code=404, detail="Semillero not found")
    return _dump(store.semilleros.get(semillero_id))


@app.delete("/semilleros/{semillero_id}")
def remove_semillero(semillero_id: str, current: SessionContext = Depends(get_current_session),
                     store: EntityStore = Depends(get_store)):
    require(current.policy.can_edit_semilleros())
    if not delete_semillero(store, current, semillero_id):
        raise HTTPException(status_code=404, detail="Semillero not found")
    return {"status": "deleted"}


# Students
@app.get("/students")
def list_students(semillero_id: Optional[str] = None, status: Optional[MemberStatus] = None,
                  current: SessionContext = Depends(get_current_session),
                  store: EntityStore = Depends(get_store)):
    require(current.policy.can_manage_students())
    target = semillero_id or current.selected_semillero_id
    if not target:
        raise HTTPException(status_code=409, detail="Selecciona un semillero para continuar")
    items = students_for_semillero(current, store.students.list(), target)
    if status:
        items = [s for s in items if s.status == status]
    return {"items": [_dump(s) for s in items]}


@app.post("/students", status_code=201)
def add_student(body: StudentBody, current: SessionContext = Depends(get_current_session),
                store: EntityStore = Depends(get_store)):
    fields = body.model_dump(mode="json")
    fields["semillero_id"] = body.semillero_id or current.selected_semillero_id
    if not fields["semillero_id"]:
        raise HTTPException(status_code=409, detail="Selecciona un semillero para continuar")
    student = create_student(store, current, fields)
    require(student is not None)
    return _dump(student)


@app.patch("/students/{student_id}/status")
def change_student_status(student_id: str, body: StudentStatusBody,
                          current: SessionContext = Depends(get_current_session),
                          store: EntityStore = Depends(get_store)):
    require(current.policy.can_manage_students())
    if not update_student_status(store, current, student_id, body.status):
        raise HTTPException(status_code=404, detail="Student not found")
    return _dump(store.students.get(student_id))


# Users
@app.get("/users")
def list_users(role: Optional[Role] = None, q: str = "",
               current: SessionContext = Depends(get_current_session),
               store: EntityStore = Depends(get_store)):
    require(current.policy.can_access("usuarios"))
    term = q.lower()
    items = [u for u in store.users.list()
             if (role is None or u.role == role) and (term in u.name.lower() or term in u.email.lower())]
    return {"items": [_dump(u) for u in items]}


@app.post("/users", status_code=201)
def add_user(body: UserBody, current: SessionContext = Depends(get_current_session),
             store: EntityStore = Depends(get_store)):
    policy = current.policy
    require(policy.can_manage_users())
    require(policy.can_manage_user_role(body.role), "No puedes asignar este rol")
    if body.role == "estudiante" and not body.semillero_id:
        raise HTTPException(status_code=400, detail="Debe seleccionar un semillero para el estudiante")
    if store.users.find(lambda u: u.email == str(body.email).lower()):
        raise HTTPException(status_code=400, detail="Email already registered")
    semillero = _found(store.semilleros.get(body.semillero_id), "Semillero") if body.semillero_id else None
    fields = body.model_dump(mode="json")
    fields["email"] = fields["email"].lower()
    fields["semillero_name"] = semillero.name if semillero else None
    user = store.users.create(fields)
    if user.role == "estudiante":
        create_student(store, current, {
            "name": user.name,
            "email": user.email,
            "semillero_id": semillero.id,
            "semillero_name": semillero.name,
            "status": user.status,
        })
    return _dump(user)


@app.patch("/users/{user_id}")
def update_user(user_id: str, body: UserUpdate, current: SessionContext = Depends(get_current_session),
                store: EntityStore = Depends(get_store)):
    policy = current.policy
    require(policy.can_manage_users())
    user = _found(store.users.get(user_id), "User")
    require(policy.can_manage_user_role(user.role))
    changes = _changes(body)
    if changes.get("semillero_id"):
        semillero = store.semilleros.get(changes["semillero_id"])
        changes["semillero_name"] = semillero.name if semillero else None
    if not store.users.update(user_id, changes):
        raise HTTPException(status_code=404, detail="User not found")
    return _dump(store.users.get(user_id))


@app.delete("/users/{user_id}")
def delete_user(user_id: str, current: SessionContext = Depends(get_current_session),
                store: EntityStore = Depends(get_store)):
    require(current.policy.can_delete_users())
    if user_id == current.user.id:
        raise HTTPException(status_code=400, detail="No puedes eliminarte a ti mismo")
    if not store.users.delete(user_id):
        raise HTTPException(status_code=404, detail="User not found")
    logger.info("User %s deleted by %s", user_id, current.user.id)
    return {"status": "deleted"}


# Tracking
def _tracked_semillero(current: SessionContext, store: EntityStore):
    semillero = current.selected_semillero
    if semillero is None:
        raise HTTPException(status_code=409, detail="Selecciona un semillero para ver su seguimiento")
    require(current.policy.can_access("seguimiento", semillero.id))
    return semillero


@app.get("/tracking")
def tracking(current: SessionContext = Depends(get_current_session), store: EntityStore = Depends(get_store)):
    semillero = _tracked_semillero(current, store)
    projects = store.projects.find(lambda p: p.semillero_id == semillero.id)
    return {"semillero": _dump(semillero), "kpis": semillero_kpis(projects)}


@app.get("/tracking/export")
def tracking_export(current: SessionContext = Depends(get_current_session),
                    store: EntityStore = Depends(get_store)):
    semillero = _tracked_semillero(current, store)
    return export_payload(semillero, store.projects.list())


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
