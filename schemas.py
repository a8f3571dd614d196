"""
Database Schemas for the Semillero Management App

Each Pydantic model represents one stored collection.
The collection key is the storage prefix plus the plural type name
(e.g. Project -> "semillero_projects").

Collections:
- User (roles: administrador, profesor, estudiante, visitante)
- Semillero (research groups)
- Student (members bound to exactly one semillero)
- Project, Resource (semillero scoped)
- Message, Meeting (general or semillero scoped)
- Event, Collaboration (divulgation content, globally visible)
- Session (login sessions)
"""
from typing import Optional, List, Literal
from pydantic import BaseModel, Field, EmailStr

Role = Literal["administrador", "profesor", "estudiante", "visitante"]
MemberStatus = Literal["activo", "inactivo", "pendiente"]
ProjectStatus = Literal["planificacion", "en-progreso", "completado", "pausado"]
ResourceType = Literal["equipo", "presupuesto", "personal"]
ResourceStatus = Literal["disponible", "en-uso", "mantenimiento"]
EventType = Literal["conferencia", "taller", "seminario", "congreso"]
CollaborationStatus = Literal["activa", "finalizada", "pendiente"]


class User(BaseModel):
    """
    Users collection schema
    Roles:
    - administrador: Full control
    - profesor: Coordinates one or more semilleros
    - estudiante: Member of exactly one semillero
    - visitante: Divulgation content only
    """
    id: str
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    role: Role
    semillero_id: Optional[str] = None
    semillero_name: Optional[str] = None
    status: MemberStatus = "activo"
    created_at: Optional[str] = None


class Semillero(BaseModel):
    """Research group, the scoping unit for most records"""
    id: str
    name: str = Field(..., min_length=3, max_length=200)
    description: str = ""
    coordinator_id: str
    coordinator: str
    members: int = Field(0, ge=0)


class Student(BaseModel):
    id: str
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    semillero_id: str = Field(..., min_length=1)
    semillero_name: str = ""
    status: MemberStatus = "pendiente"
    created_by: str


class Project(BaseModel):
    id: str
    title: str = Field(..., min_length=3, max_length=200)
    description: str = ""
    status: ProjectStatus = "planificacion"
    progress: int = Field(0, ge=0, le=100)
    budget: float = Field(0, ge=0)
    start_date: str
    end_date: str
    semillero_id: str
    semillero_name: str = ""
    team: List[str] = Field(..., min_length=1)
    document_name: Optional[str] = None
    created_by: str
    created_at: str


class Resource(BaseModel):
    id: str
    name: str = Field(..., min_length=2, max_length=200)
    type: ResourceType
    status: ResourceStatus = "disponible"
    project_id: Optional[str] = None
    project_name: Optional[str] = None
    semillero_id: str
    assigned_to: Optional[str] = None
    description: str = ""
    created_by: str
    created_at: str


class Reply(BaseModel):
    id: str
    content: str = Field(..., min_length=1)
    author: str
    author_id: str
    created_at: str


class Message(BaseModel):
    """Communication board post. is_general wins over semillero_id."""
    id: str
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    author: str
    author_id: str
    is_general: bool = False
    semillero_id: Optional[str] = None
    created_at: str
    replies: List[Reply] = []


class Meeting(BaseModel):
    id: str
    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    date: str
    time: str
    location: str = "Por definir"
    is_general: bool = False
    semillero_id: Optional[str] = None
    organizer: str
    organizer_id: str
    attendees: List[str] = []
    created_at: str

    @property
    def is_virtual(self) -> bool:
        return self.location.startswith(("http://", "https://"))


class Event(BaseModel):
    """Divulgation events, visible to everyone"""
    id: str
    title: str = Field(..., min_length=3, max_length=200)
    description: str = ""
    date: str
    location: str
    type: EventType
    organizer: str
    created_by: str
    created_at: str


class Collaboration(BaseModel):
    """Institutional partnerships, visible to everyone"""
    id: str
    title: str = Field(..., min_length=3, max_length=200)
    institution: str
    description: str = ""
    status: CollaborationStatus = "pendiente"
    start_date: str
    end_date: Optional[str] = None
    contact: str
    email: EmailStr
    created_by: str
    created_at: str


class Session(BaseModel):
    """Login sessions bound to a user snapshot"""
    id: str
    token: str
    user: User
    selected_semillero: Optional[Semillero] = None
    expires_at: Optional[str] = None  # ISO datetime string
    created_at: str
