import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from device_registry.core.config import settings
from device_registry.db.session import Base, get_db
from device_registry.main import app
from device_registry.routers import admin_ui, search_ui


@pytest.fixture()
def client():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    Base.metadata.create_all(bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def admin(client):
    response = client.post(
        "/admin/login",
        data={"password": "letmein", "next": "/admin"},
        follow_redirects=False,
    )
    assert response.status_code == 303
    return client


def _create(client, **overrides):
    payload = {
        "device_name": "PC-SALES-001",
        "serial_number": "DELL-XPS15-2024",
        "user_name": "Sales",
        "status": "active",
        "warranty_expiry": "2099-01-01",
    }
    payload.update(overrides)
    response = client.post("/api/v1/computers", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_search_page_starts_idle(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "ตัวอย่างการค้นหา" in response.text
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["Cache-Control"] == "no-store"
    assert response.headers.get("X-Request-ID")


def test_search_results_and_no_match(client):
    _create(client)
    _create(client, device_name="PC-SALES-002", serial_number="HP-840-7781", warranty_expiry="2000-01-01")

    response = client.get("/", params={"q": "pc-sales", "submitted": 1})
    assert "พบ 2 รายการ" in response.text
    assert "PC-SALES-002" in response.text

    response = client.get("/", params={"q": "zzz", "submitted": 1})
    assert "ไม่พบข้อมูล" in response.text


def test_typing_shows_suggestions_without_results(client):
    _create(client)
    response = client.get("/", params={"q": "PC-S"})
    assert 'class="suggestions"' in response.text
    assert 'class="results"' not in response.text

    partial = client.get("/ui/suggestions", params={"q": "pc"})
    assert partial.status_code == 200
    assert "PC-SALES-001" in partial.text
    assert client.get("/ui/suggestions", params={"q": ""}).text.strip() == ""


def test_admin_redirects_browsers_to_login(client):
    response = client.get("/admin", headers={"Accept": "text/html"}, follow_redirects=False)
    assert response.status_code == 302
    assert response.headers["location"] == "/admin/login?next=/admin"


def test_admin_without_session_is_401_for_non_browsers(client):
    response = client.get("/admin", headers={"Accept": "application/json"})
    assert response.status_code == 401
    assert response.json()["code"] == "http_error"


def test_wrong_password(client):
    response = client.post("/admin/login", data={"password": "nope"})
    assert response.status_code == 401
    assert "รหัสผ่านไม่ถูกต้อง" in response.text


def test_login_ignores_offsite_next(client):
    response = client.post(
        "/admin/login",
        data={"password": "letmein", "next": "//evil.example"},
        follow_redirects=False,
    )
    assert response.headers["location"] == "/admin"


def test_logout_closes_the_gate(admin):
    assert admin.get("/admin").status_code == 200
    admin.get("/admin/logout", follow_redirects=False)
    response = admin.get("/admin", headers={"Accept": "text/html"}, follow_redirects=False)
    assert response.status_code == 302


def test_dashboard_shows_stats_and_filters(admin):
    _create(admin)
    _create(admin, device_name="PC-IT-01", serial_number="LEN-1", user_name="IT", status="repair", warranty_expiry="2000-01-01")

    response = admin.get("/admin")
    assert response.status_code == 200
    assert "PC-SALES-001" in response.text
    assert "PC-IT-01" in response.text

    response = admin.get("/admin", params={"department": "IT"})
    assert "PC-IT-01" in response.text
    assert "PC-SALES-001" not in response.text


def test_create_through_form_redirects_with_notice(admin):
    response = admin.post(
        "/admin/computers/new",
        data={
            "device_name": "NB-HR-01",
            "serial_number": "APPLE-MBA-5555",
            "status": "active",
            "warranty_expiry": "2026-01-29",
        },
        follow_redirects=False,
    )
    assert response.status_code == 303
    assert response.headers["location"] == "/admin"

    page = admin.get("/admin")
    assert "เพิ่มคอมพิวเตอร์สำเร็จ" in page.text
    assert "NB-HR-01" in page.text
    assert "เพิ่มคอมพิวเตอร์สำเร็จ" not in admin.get("/admin").text


def test_invalid_form_is_redisplayed(admin):
    response = admin.post(
        "/admin/computers/new",
        data={"device_name": "", "serial_number": "SN-1", "status": "active", "warranty_expiry": ""},
    )
    assert response.status_code == 422
    assert "กรุณากรอกชื่ออุปกรณ์" in response.text
    assert "กรุณาเลือกวันหมดประกัน" in response.text
    assert admin.get("/api/v1/computers").json() == []


def test_edit_form(admin):
    created = _create(admin)
    form = admin.get(f"/admin/computers/{created['id']}/edit")
    assert form.status_code == 200
    assert "PC-SALES-001" in form.text
    assert "แก้ไขล่าสุด" in form.text

    response = admin.post(
        f"/admin/computers/{created['id']}/edit",
        data={
            "device_name": "PC-SALES-001",
            "serial_number": "DELL-XPS15-2024",
            "status": "retired",
            "warranty_expiry": "2099-01-01",
        },
        follow_redirects=False,
    )
    assert response.status_code == 303
    assert admin.get(f"/api/v1/computers/{created['id']}").json()["status"] == "retired"


def test_edit_unknown_computer_returns_to_dashboard(admin):
    response = admin.get("/admin/computers/999/edit", follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/admin"
    assert "ไม่พบคอมพิวเตอร์ที่ต้องการแก้ไข" in admin.get("/admin").text


def test_bulk_delete_form(admin):
    first = _create(admin)
    second = _create(admin, device_name="PC-2", serial_number="SN-2")
    third = _create(admin, device_name="PC-3", serial_number="SN-3")

    response = admin.post(
        "/admin/computers/delete",
        data={"ids": [str(first["id"]), str(third["id"])]},
        follow_redirects=False,
    )
    assert response.status_code == 303
    assert "ลบคอมพิวเตอร์ 2 รายการสำเร็จ" in admin.get("/admin").text
    assert [row["id"] for row in admin.get("/api/v1/computers").json()] == [second["id"]]


def test_bulk_delete_form_needs_a_selection(admin):
    admin.post("/admin/computers/delete", data={}, follow_redirects=False)
    assert "กรุณาเลือกรายการที่ต้องการลบ" in admin.get("/admin").text


def test_api_create_returns_enriched_record(client):
    body = _create(client, warranty_expiry="2000-01-01")
    assert body["warranty_status"] == "expired"
    assert body["days_until_expiry"] < 0
    assert body["expiry_date"] == "2000-01-01"


def test_api_create_validation(client):
    response = client.post(
        "/api/v1/computers",
        json={"device_name": "PC", "serial_number": "SN", "warranty_expiry": "someday"},
    )
    assert response.status_code == 422
    assert response.json()["code"] == "validation_error"


def test_api_filters(client):
    _create(client)
    _create(client, device_name="PC-IT-01", serial_number="LEN-1", user_name="IT", warranty_expiry="2000-01-01")

    names = [row["device_name"] for row in client.get("/api/v1/computers", params={"warranty": "expired"}).json()]
    assert names == ["PC-IT-01"]
    names = [row["device_name"] for row in client.get("/api/v1/computers", params={"q": "dell"}).json()]
    assert names == ["PC-SALES-001"]
    assert len(client.get("/api/v1/computers", params={"department": "all"}).json()) == 2


def test_api_patch_and_delete(client):
    created = _create(client)
    response = client.patch(
        f"/api/v1/computers/{created['id']}",
        json={"status": "repair", "device_name": None},
    )
    assert response.status_code == 200
    assert response.json()["status"] == "repair"
    assert response.json()["device_name"] == "PC-SALES-001"

    assert client.delete(f"/api/v1/computers/{created['id']}").json() == {"status": "deleted"}
    assert client.get(f"/api/v1/computers/{created['id']}").status_code == 404
    assert client.delete(f"/api/v1/computers/{created['id']}").status_code == 404


def test_api_bulk_delete_stats_and_suggestions(client):
    ids = [_create(client, device_name=f"PC-{n:02d}", serial_number=f"SN-{n}").get("id") for n in range(7)]

    stats = client.get("/api/v1/computers/stats").json()
    assert stats["total"] == 7
    assert stats["active"] == 7
    assert stats["valid"] == 7

    assert client.get("/api/v1/computers/suggestions", params={"q": "pc"}).json() == [
        "PC-00",
        "PC-01",
        "PC-02",
        "PC-03",
        "PC-04",
    ]

    response = client.post("/api/v1/computers/bulk-delete", json={"ids": ids[:3]})
    assert response.json() == {"deleted": 3}
    assert client.post("/api/v1/computers/bulk-delete", json={"ids": []}).status_code == 422


def test_api_key_is_enforced_when_configured(client, monkeypatch):
    monkeypatch.setattr(settings, "API_KEY", "s3cret")

    missing = client.get("/api/v1/computers")
    assert missing.status_code == 401
    assert missing.json()["message"] == "Authorization required"

    wrong = client.get("/api/v1/computers", headers={"X-API-Key": "nope"})
    assert wrong.json()["message"] == "Invalid API key"

    assert client.get("/api/v1/computers", headers={"X-API-Key": "s3cret"}).status_code == 200


def test_admin_session_passes_api_key_gate(admin, monkeypatch):
    monkeypatch.setattr(settings, "API_KEY", "s3cret")
    assert admin.get("/api/v1/computers").status_code == 200


@pytest.fixture()
def broken_admin():
    # No create_all: every query fails with "no such table".
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        with TestClient(app) as test_client:
            test_client.post("/admin/login", data={"password": "letmein"}, follow_redirects=False)
            yield test_client
    finally:
        app.dependency_overrides.clear()


def test_unavailable_backend_pages_still_render(broken_admin):
    dashboard = broken_admin.get("/admin")
    assert dashboard.status_code == 200
    assert admin_ui.LOAD_FAILED in dashboard.text

    search = broken_admin.get("/", params={"q": "pc", "submitted": 1})
    assert search.status_code == 200
    assert search_ui.LOAD_FAILED in search.text

    assert broken_admin.get("/ui/suggestions", params={"q": "pc"}).status_code == 200


def test_unavailable_backend_api_answers_503(broken_admin):
    response = broken_admin.get("/api/v1/computers")
    assert response.status_code == 503
    assert response.json()["code"] == "backend_unavailable"


def test_unavailable_backend_form_is_kept(broken_admin):
    response = broken_admin.post(
        "/admin/computers/new",
        data={
            "device_name": "PC-01",
            "serial_number": "SN-1",
            "status": "active",
            "warranty_expiry": "2027-01-01",
        },
    )
    assert response.status_code == 503
    assert admin_ui.SAVE_FAILED in response.text
    assert 'value="PC-01"' in response.text


def test_unavailable_backend_delete_and_edit_redirect_with_notice(broken_admin):
    response = broken_admin.post("/admin/computers/delete", data={"ids": ["1"]}, follow_redirects=False)
    assert response.status_code == 303
    assert admin_ui.DELETE_FAILED in broken_admin.get("/admin").text

    response = broken_admin.get("/admin/computers/1/edit", headers={"Accept": "text/html"}, follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/admin"
    assert admin_ui.LOAD_FAILED in broken_admin.get("/admin").text
