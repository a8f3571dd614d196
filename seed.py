"""Sample data for demos. initialize_mock_data only fills empty collections."""
import logging

from database import EntityStore

logger = logging.getLogger(__name__)

IA = "Inteligencia Artificial y Educación"
SOSTENIBILIDAD = "Sostenibilidad y Medio Ambiente"
BLOCKCHAIN = "Blockchain y Fintech"
BIOTEC = "Biotecnología Médica"

SEMILLEROS = [
    {"id": "1", "name": IA, "description": "Investigación en IA aplicada a procesos educativos",
     "coordinator_id": "2", "coordinator": "Dr. García Martínez", "members": 12},
    {"id": "2", "name": SOSTENIBILIDAD, "description": "Estudios de impacto ambiental y sostenibilidad urbana",
     "coordinator_id": "5", "coordinator": "Dra. Martínez López", "members": 8},
    {"id": "3", "name": BLOCKCHAIN, "description": "Tecnologías blockchain aplicadas a sistemas financieros",
     "coordinator_id": "6", "coordinator": "Ing. Pérez Ramírez", "members": 10},
    {"id": "4", "name": BIOTEC, "description": "Investigación en biotecnología aplicada a la medicina",
     "coordinator_id": "7", "coordinator": "Dr. Silva Torres", "members": 15},
]

USERS = [
    {"id": "1", "name": "Admin Sistema", "email": "admin@unilibre.edu.co", "role": "administrador",
     "status": "activo", "created_at": "2024-01-01T00:00:00Z"},
    {"id": "2", "name": "Dr. García Martínez", "email": "garcia@unilibre.edu.co", "role": "profesor",
     "semillero_id": "1", "semillero_name": IA, "status": "activo", "created_at": "2024-01-15T00:00:00Z"},
    {"id": "3", "name": "María Estudiante", "email": "maria@unilibre.edu.co", "role": "estudiante",
     "semillero_id": "1", "semillero_name": IA, "status": "activo", "created_at": "2024-01-16T00:00:00Z"},
    {"id": "4", "name": "Visitante Externo", "email": "visitante@external.com", "role": "visitante",
     "status": "activo", "created_at": "2024-03-15T00:00:00Z"},
    {"id": "5", "name": "Dra. Martínez López", "email": "martinez@unilibre.edu.co", "role": "profesor",
     "semillero_id": "2", "semillero_name": SOSTENIBILIDAD, "status": "activo", "created_at": "2024-01-20T00:00:00Z"},
    {"id": "6", "name": "Ing. Pérez Ramírez", "email": "perez@unilibre.edu.co", "role": "profesor",
     "semillero_id": "3", "semillero_name": BLOCKCHAIN, "status": "activo", "created_at": "2024-01-25T00:00:00Z"},
    {"id": "7", "name": "Dr. Silva Torres", "email": "silva@unilibre.edu.co", "role": "profesor",
     "semillero_id": "4", "semillero_name": BIOTEC, "status": "activo", "created_at": "2024-01-30T00:00:00Z"},
]

STUDENTS = [
    {"id": "1", "name": "Carlos Rodríguez", "email": "carlos@unilibre.edu.co", "semillero_id": "1",
     "semillero_name": IA, "status": "activo", "created_by": "2"},
    {"id": "2", "name": "Ana Martínez", "email": "ana@unilibre.edu.co", "semillero_id": "1",
     "semillero_name": IA, "status": "activo", "created_by": "2"},
    {"id": "3", "name": "María Estudiante", "email": "maria@unilibre.edu.co", "semillero_id": "1",
     "semillero_name": IA, "status": "activo", "created_by": "2"},
    {"id": "4", "name": "Luis Pérez", "email": "luis@unilibre.edu.co", "semillero_id": "2",
     "semillero_name": SOSTENIBILIDAD, "status": "pendiente", "created_by": "1"},
    {"id": "5", "name": "Sofía Gómez", "email": "sofia@unilibre.edu.co", "semillero_id": "3",
     "semillero_name": BLOCKCHAIN, "status": "inactivo", "created_by": "1"},
]

PROJECTS = [
    {
        "id": "1",
        "title": "Sistema de Recomendación Educativa",
        "description": "Desarrollo de un sistema de IA para recomendar contenido educativo personalizado",
        "status": "en-progreso",
        "progress": 65,
        "budget": 15000,
        "start_date": "2024-01-15",
        "end_date": "2024-06-30",
        "semillero_id": "1",
        "semillero_name": IA,
        "team": ["Dr. García Martínez", "María Estudiante", "Carlos Rodríguez"],
        "document_name": "propuesta_sistema_recomendacion.pdf",
        "created_by": "3",
        "created_at": "2024-01-15T10:00:00Z",
    },
    {
        "id": "2",
        "title": "Análisis de Huella de Carbono Universitaria",
        "description": "Estudio del impacto ambiental de las actividades universitarias",
        "status": "planificacion",
        "progress": 25,
        "budget": 8000,
        "start_date": "2024-03-01",
        "end_date": "2024-08-15",
        "semillero_id": "2",
        "semillero_name": SOSTENIBILIDAD,
        "team": ["Dra. Martínez López", "Luis Pérez"],
        "created_by": "3",
        "created_at": "2024-02-20T14:30:00Z",
    },
    {
        "id": "3",
        "title": "Plataforma de Aprendizaje Adaptativo",
        "description": "Desarrollo de una plataforma que se adapta al ritmo de aprendizaje del estudiante",
        "status": "completado",
        "progress": 100,
        "budget": 12000,
        "start_date": "2023-09-01",
        "end_date": "2024-01-30",
        "semillero_id": "1",
        "semillero_name": IA,
        "team": ["Dr. García Martínez", "María Estudiante", "Ana Torres"],
        "document_name": "plataforma_adaptativa_final.pdf",
        "created_by": "3",
        "created_at": "2023-09-01T08:00:00Z",
    },
]

RESOURCES = [
    {
        "id": "1",
        "name": "Servidor de Procesamiento",
        "type": "equipo",
        "status": "en-uso",
        "project_id": "1",
        "project_name": "Sistema de Recomendación Educativa",
        "semillero_id": "1",
        "assigned_to": "María Estudiante",
        "description": "Servidor dedicado para procesamiento de algoritmos de IA",
        "created_by": "2",
        "created_at": "2024-01-20T10:00:00Z",
    },
    {
        "id": "2",
        "name": "Presupuesto Investigación Q1",
        "type": "presupuesto",
        "status": "disponible",
        "project_id": "2",
        "project_name": "Análisis de Huella de Carbono",
        "semillero_id": "2",
        "description": "Presupuesto asignado para el primer trimestre de investigación",
        "created_by": "2",
        "created_at": "2024-02-01T14:00:00Z",
    },
]

MESSAGES = [
    {
        "id": "1",
        "title": "Reunión Semanal - Avances del Proyecto",
        "content": "Recordatorio de la reunión semanal para revisar avances del sistema de recomendación educativa.",
        "author": "Dr. García Martínez",
        "author_id": "2",
        "semillero_id": "1",
        "is_general": False,
        "created_at": "2024-01-22T09:00:00Z",
        "replies": [
            {
                "id": "1",
                "content": "Perfecto, estaré presente con el reporte de avances.",
                "author": "María Estudiante",
                "author_id": "3",
                "created_at": "2024-01-22T10:30:00Z",
            },
        ],
    },
    {
        "id": "2",
        "title": "Convocatoria General - Congreso de Investigación",
        "content": "Se abre la convocatoria para participar en el congreso anual de investigación universitaria.",
        "author": "Administrador Sistema",
        "author_id": "1",
        "is_general": True,
        "created_at": "2024-01-25T16:00:00Z",
        "replies": [],
    },
]

MEETINGS = [
    {
        "id": "1",
        "title": "Revisión de Avances - Sistema IA",
        "description": "Reunión para revisar el progreso del sistema de recomendación educativa",
        "date": "2024-02-15",
        "time": "14:00",
        "location": "Sala de Juntas 201",
        "semillero_id": "1",
        "is_general": False,
        "organizer": "Dr. García Martínez",
        "organizer_id": "2",
        "attendees": ["María Estudiante", "Carlos Rodríguez"],
        "created_at": "2024-01-30T11:00:00Z",
    },
]

EVENTS = [
    {
        "id": "1",
        "title": "Congreso Internacional de IA",
        "description": "Presentación de avances en inteligencia artificial aplicada a la educación",
        "date": "2024-05-15",
        "location": "Auditorio Principal",
        "type": "congreso",
        "organizer": "Semillero IA y Educación",
        "created_by": "2",
        "created_at": "2024-01-10T09:00:00Z",
    },
    {
        "id": "2",
        "title": "Taller de Sostenibilidad",
        "description": "Taller práctico sobre metodologías de investigación en sostenibilidad",
        "date": "2024-03-20",
        "location": "Laboratorio de Ciencias",
        "type": "taller",
        "organizer": "Semillero Sostenibilidad",
        "created_by": "2",
        "created_at": "2024-02-01T15:00:00Z",
    },
]

COLLABORATIONS = [
    {
        "id": "1",
        "title": "Proyecto Conjunto con Universidad Nacional",
        "institution": "Universidad Nacional de Colombia",
        "description": "Investigación colaborativa en sistemas inteligentes para educación",
        "status": "activa",
        "start_date": "2024-01-01",
        "contact": "Dr. Rodríguez",
        "email": "rodriguez@unal.edu.co",
        "created_by": "1",
        "created_at": "2023-12-15T16:00:00Z",
    },
    {
        "id": "2",
        "title": "Alianza con Ministerio de Ambiente",
        "institution": "Ministerio de Ambiente y Desarrollo Sostenible",
        "description": "Colaboración en proyectos de investigación ambiental universitaria",
        "status": "pendiente",
        "start_date": "2024-04-01",
        "contact": "Ing. Martínez",
        "email": "martinez@minambiente.gov.co",
        "created_by": "1",
        "created_at": "2024-01-15T12:00:00Z",
    },
]


def initialize_mock_data(store: EntityStore) -> list:
    """Seed every empty collection. Returns the names of the collections filled."""
    seeded = []
    for collection, records in (
        (store.semilleros, SEMILLEROS),
        (store.users, USERS),
        (store.students, STUDENTS),
        (store.projects, PROJECTS),
        (store.resources, RESOURCES),
        (store.messages, MESSAGES),
        (store.meetings, MEETINGS),
        (store.events, EVENTS),
        (store.collaborations, COLLABORATIONS),
    ):
        if collection.is_empty():
            collection.replace_all(records)
            seeded.append(collection.name)
    if seeded:
        logger.info("Seeded sample data: %s", ", ".join(seeded))
    return seeded
