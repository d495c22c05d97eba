"""Professional administration and staff login."""
from agenda.domain.professionals.service import DEMO_PROFESSIONALS, ProfessionalService


def test_create_list_update(client):
    response = client.post(
        "/api/professionals",
        json={"name": "Dra. Ana Pérez", "duration_minutes": 50, "work_start": "09:00", "work_end": "17:00"},
    )
    assert response.status_code == 201
    ana = response.json()
    assert ana["duration_minutes"] == 50

    client.post("/api/professionals", json={"name": "Lic. Roberto Ruiz"})
    names = [p["name"] for p in client.get("/api/professionals").json()]
    assert names == ["Dra. Ana Pérez", "Lic. Roberto Ruiz"]

    updated = client.patch(f"/api/professionals/{ana['id']}", json={"duration_minutes": 30})
    assert updated.status_code == 200
    assert updated.json()["duration_minutes"] == 30
    assert updated.json()["work_start"] == "09:00"


def test_patch_with_null_clears_optional_fields(client):
    ana = client.post(
        "/api/professionals",
        json={"name": "Dra. Ana Pérez", "bio": "Psicóloga clínica", "work_start": "09:00", "work_end": "17:00"},
    ).json()

    response = client.patch(f"/api/professionals/{ana['id']}", json={"bio": None, "work_start": None})
    assert response.status_code == 200
    assert response.json()["bio"] is None
    assert response.json()["work_start"] is None
    assert response.json()["work_end"] == "17:00"

    fetched = client.get(f"/api/professionals/{ana['id']}").json()
    assert (fetched["bio"], fetched["work_start"], fetched["work_end"]) == (None, None, "17:00")


def test_patch_cannot_clear_required_fields(client):
    ana = client.post("/api/professionals", json={"name": "Dra. Ana Pérez", "duration_minutes": 50}).json()

    response = client.patch(f"/api/professionals/{ana['id']}", json={"name": None, "duration_minutes": None})
    assert response.status_code == 400
    assert response.json()["fields"] == ["name", "duration_minutes"]

    fetched = client.get(f"/api/professionals/{ana['id']}").json()
    assert (fetched["name"], fetched["duration_minutes"]) == ("Dra. Ana Pérez", 50)


def test_default_duration_applies(client):
    response = client.post("/api/professionals", json={"name": "Dra. María Gómez"})
    assert response.json()["duration_minutes"] == 30


def test_duplicate_name_is_conflict(client):
    client.post("/api/professionals", json={"name": "Dra. Ana Pérez"})
    response = client.post("/api/professionals", json={"name": "Dra. Ana Pérez"})
    assert response.status_code == 409


def test_invalid_fields_are_400(client):
    assert client.post("/api/professionals", json={"name": "  "}).status_code == 400
    assert client.post("/api/professionals", json={"name": "X", "duration_minutes": 0}).status_code == 400
    assert client.post("/api/professionals", json={"name": "X", "work_start": "nueve"}).status_code == 400


def test_unknown_professional_is_404(client):
    assert client.get("/api/professionals/123").status_code == 404
    assert client.delete("/api/professionals/123").status_code == 404


def test_delete_cascades_availability_and_bookings(client, make_professional, booking_payload):
    ana = make_professional("Dra. Ana Pérez")
    maria = make_professional("Dra. María Gómez")
    for professional in (ana, maria):
        client.post(
            "/api/availability",
            json={"professional": professional.id, "date": "2024-06-10", "hours": ["09:00", "09:30"]},
        )
        assert client.post("/api/bookings", json=booking_payload(professional.id)).status_code == 201

    response = client.delete(f"/api/professionals/{ana.id}")
    assert response.status_code == 200
    assert response.json()["success"] is True

    assert {e["professional_id"] for e in client.get("/api/availability").json()} == {maria.id}
    assert {b["professional_id"] for b in client.get("/api/bookings").json()} == {maria.id}
    assert client.get("/api/admin/outbound", params={"booking_id": 1}).json() == []


def test_seed_only_fills_an_empty_table(db):
    service = ProfessionalService(db)
    assert service.seed_if_empty() == len(DEMO_PROFESSIONALS)
    assert service.seed_if_empty() == 0
    assert [p.name for p in service.list_professionals()] == sorted(p["name"] for p in DEMO_PROFESSIONALS)


def test_admin_login(client):
    response = client.post("/api/login", json={"name": "admin", "password": "admin-test-pass"})
    assert response.status_code == 200
    assert response.json()["success"] is True
    assert response.json()["role"] == "admin"


def test_professional_login_returns_their_id(client, make_professional):
    ana = make_professional("Dra. Ana Pérez")
    response = client.post("/api/login", json={"name": "Dra. Ana Pérez", "password": "ana-pass"})
    assert response.status_code == 200
    assert response.json() == {"success": True, "role": "professional", "professional_id": ana.id}


def test_wrong_password_is_401(client):
    response = client.post("/api/login", json={"name": "admin", "password": "1234"})
    assert response.status_code == 401
    assert response.json()["success"] is False

    response = client.post("/api/login", json={"name": "Dra. Ana Pérez", "password": "admin-test-pass"})
    assert response.status_code == 401


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}
