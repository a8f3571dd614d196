"""Progress indicators ("seguimiento") for one semillero's projects."""
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List

from schemas import Project, Semillero


def semillero_kpis(projects: Iterable[Project]) -> Dict[str, Any]:
    projects = list(projects)
    total = len(projects)
    completed = sum(1 for p in projects if p.status == "completado")
    in_progress = sum(1 for p in projects if p.status == "en-progreso")
    avg_progress = sum(p.progress for p in projects) / total if total else 0
    return {
        "total_projects": total,
        "completed_projects": completed,
        "in_progress_projects": in_progress,
        "completion_rate": round(completed / total * 100) if total else 0,
        "in_progress_rate": round(in_progress / total * 100) if total else 0,
        "average_progress": round(avg_progress),
        "total_budget": sum(p.budget for p in projects),
    }


def export_payload(semillero: Semillero, projects: List[Project]) -> Dict[str, Any]:
    own = [p for p in projects if p.semillero_id == semillero.id]
    return {
        "semillero": semillero.name,
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "projects": [p.model_dump(mode="json") for p in own],
        "kpis": semillero_kpis(own),
    }
