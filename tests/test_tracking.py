from tracking import export_payload, semillero_kpis


def test_kpis_for_semillero(seeded_store):
    projects = seeded_store.projects.find(lambda p: p.semillero_id == "1")
    kpis = semillero_kpis(projects)
    assert kpis["total_projects"] == 2
    assert kpis["completed_projects"] == 1
    assert kpis["in_progress_projects"] == 1
    assert kpis["completion_rate"] == 50
    assert kpis["average_progress"] == 82
    assert kpis["total_budget"] == 27000


def test_kpis_without_projects():
    kpis = semillero_kpis([])
    assert kpis["total_projects"] == 0
    assert kpis["average_progress"] == 0
    assert kpis["completion_rate"] == 0


def test_export_payload_only_has_own_projects(seeded_store):
    payload = export_payload(seeded_store.semilleros.get("2"), seeded_store.projects.list())
    assert payload["semillero"] == "Sostenibilidad y Medio Ambiente"
    assert [p["id"] for p in payload["projects"]] == ["2"]
    assert payload["kpis"]["total_projects"] == 1
    assert payload["generated_at"]
