import json
from pathlib import Path

import pytest

from conftest import ADMIN_PASSWORD, FakeMailSender, png_upload

from purdetall.services.errors import MailDeliveryError
from purdetall.services.mail_sender import MailSender


def test_health_and_ready(client):
    assert client.get("/health").json() == {"status": "ok"}
    ready = client.get("/ready")
    assert ready.status_code == 200
    assert ready.json()["database"] is True


def test_unknown_route_returns_spanish_not_found(client):
    response = client.get("/api/does-not-exist")
    assert response.status_code == 404
    assert response.json() == {"error": "Página no encontrada"}


def test_login_returns_token_and_user(client, admin_headers):
    response = client.post("/api/auth/login", json={"username": "admin@purdetall.es", "password": ADMIN_PASSWORD})
    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    assert payload["user"] == {"id": 1, "username": "admin", "email": "admin@purdetall.es", "role": "admin"}

    verify = client.get("/api/auth/verify", headers={"Authorization": f"Bearer {payload['token']}"})
    assert verify.status_code == 200
    assert verify.json()["user"]["username"] == "admin"


def test_login_rejects_bad_credentials(client, admin_headers):
    wrong_password = client.post("/api/auth/login", json={"username": "admin", "password": "nope-nope"})
    assert wrong_password.status_code == 401
    assert wrong_password.json() == {"error": "Credenciales inválidas"}

    unknown_user = client.post("/api/auth/login", json={"username": "ghost", "password": "whatever"})
    assert unknown_user.status_code == 401

    missing = client.post("/api/auth/login", json={"username": "", "password": ""})
    assert missing.status_code == 400
    fields = {error["field"] for error in missing.json()["errors"]}
    assert fields == {"username", "password"}


def test_admin_routes_require_token_and_admin_role(app, client):
    missing = client.get("/api/services/admin")
    assert missing.status_code == 401
    assert missing.json() == {"error": "Token de acceso requerido"}

    garbage = client.get("/api/services/admin", headers={"Authorization": "Bearer not.a-token"})
    assert garbage.status_code == 401
    assert garbage.json() == {"error": "Token inválido o expirado"}

    app.state.user_store.create_user("editor", "editor@purdetall.es", "editor-pass", role="editor")
    login = client.post("/api/auth/login", json={"username": "editor", "password": "editor-pass"})
    headers = {"Authorization": f"Bearer {login.json()['token']}"}
    forbidden = client.get("/api/services/admin", headers=headers)
    assert forbidden.status_code == 403
    assert forbidden.json() == {"error": "Acceso denegado: se requieren permisos de administrador"}


def test_change_password_flow(client, admin_headers):
    wrong = client.post(
        "/api/auth/change-password",
        json={"currentPassword": "not-it", "newPassword": "brand-new-pass"},
        headers=admin_headers,
    )
    assert wrong.status_code == 401
    assert wrong.json() == {"error": "Contraseña actual incorrecta"}

    too_short = client.post(
        "/api/auth/change-password",
        json={"currentPassword": ADMIN_PASSWORD, "newPassword": "123"},
        headers=admin_headers,
    )
    assert too_short.status_code == 400
    assert too_short.json()["errors"][0]["field"] == "newPassword"

    changed = client.post(
        "/api/auth/change-password",
        json={"currentPassword": ADMIN_PASSWORD, "newPassword": "brand-new-pass"},
        headers=admin_headers,
    )
    assert changed.status_code == 200
    relogin = client.post("/api/auth/login", json={"username": "admin", "password": "brand-new-pass"})
    assert relogin.status_code == 200


def test_seeded_services_are_public(client):
    response = client.get("/api/services")
    assert response.status_code == 200
    titles = [service["title"] for service in response.json()]
    assert len(titles) == 4
    assert titles[0] == "Mejora"


def test_service_create_then_get_returns_supplied_fields(client, admin_headers):
    created = client.post(
        "/api/services",
        data={
            "title": "Pulido de faros",
            "description": "Restauración completa de faros opacos.",
            "short_description": "Faros como nuevos",
            "price_from": "45.5",
            "sort_order": "7",
            "is_active": "true",
        },
        headers=admin_headers,
    )
    assert created.status_code == 201
    service_id = created.json()["serviceId"]

    fetched = client.get(f"/api/services/{service_id}")
    assert fetched.status_code == 200
    payload = fetched.json()
    assert payload["title"] == "Pulido de faros"
    assert payload["description"] == "Restauración completa de faros opacos."
    assert payload["short_description"] == "Faros como nuevos"
    assert payload["price_from"] == 45.5
    assert payload["sort_order"] == 7
    assert payload["is_active"] is True


def test_service_validation_and_inactive_visibility(client, admin_headers):
    invalid = client.post("/api/services", data={"title": ""}, headers=admin_headers)
    assert invalid.status_code == 400
    assert {error["field"] for error in invalid.json()["errors"]} == {"title", "description"}

    hidden = client.post(
        "/api/services",
        data={"title": "Oculto", "description": "No visible", "is_active": "false"},
        headers=admin_headers,
    )
    service_id = hidden.json()["serviceId"]
    public_ids = {service["id"] for service in client.get("/api/services").json()}
    admin_ids = {service["id"] for service in client.get("/api/services/admin", headers=admin_headers).json()}
    assert service_id not in public_ids
    assert service_id in admin_ids


def test_service_image_replacement_removes_old_file(app, client, admin_headers):
    created = client.post(
        "/api/services",
        data={"title": "Cerámico", "description": "Protección cerámica"},
        files={"image": png_upload("first.png")},
        headers=admin_headers,
    )
    service_id = created.json()["serviceId"]
    first_url = client.get(f"/api/services/{service_id}").json()["image_url"]
    assert first_url.startswith("/uploads/services/service-")
    assert client.get(first_url).status_code == 200

    updated = client.put(
        f"/api/services/{service_id}",
        data={"title": "Cerámico", "description": "Protección cerámica"},
        files={"image": png_upload("second.png")},
        headers=admin_headers,
    )
    assert updated.status_code == 200
    second_url = client.get(f"/api/services/{service_id}").json()["image_url"]
    assert second_url != first_url

    upload_root = Path(app.state.settings.upload_dir)
    assert not (upload_root / first_url[len("/uploads/"):]).exists()
    assert (upload_root / second_url[len("/uploads/"):]).exists()


def test_service_rejects_non_image_upload(client, admin_headers):
    response = client.post(
        "/api/services",
        data={"title": "Texto", "description": "No es imagen"},
        files={"image": ("notes.txt", b"hello", "text/plain")},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.json()["errors"][0]["message"] == "Solo se permiten archivos de imagen"


def test_deleting_twice_returns_not_found(client, admin_headers):
    created = client.post(
        "/api/services",
        data={"title": "Temporal", "description": "Se borra"},
        headers=admin_headers,
    )
    service_id = created.json()["serviceId"]
    assert client.delete(f"/api/services/{service_id}", headers=admin_headers).status_code == 200
    again = client.delete(f"/api/services/{service_id}", headers=admin_headers)
    assert again.status_code == 404
    assert again.json() == {"error": "Servicio no encontrado"}


def test_gallery_requires_both_images_and_cleans_up_on_delete(app, client, admin_headers):
    missing = client.post(
        "/api/gallery",
        data={"title": "BMW Serie 3"},
        files={"before_image": png_upload("before.png")},
        headers=admin_headers,
    )
    assert missing.status_code == 400
    assert missing.json() == {"error": 'Se requieren tanto la imagen "antes" como "después"'}

    created = client.post(
        "/api/gallery",
        data={"title": "BMW Serie 3", "service_id": "1", "is_featured": "true"},
        files={"before_image": png_upload("before.png"), "after_image": png_upload("after.png")},
        headers=admin_headers,
    )
    assert created.status_code == 201
    entry_id = created.json()["galleryId"]

    featured = client.get("/api/gallery/featured").json()
    assert [entry["id"] for entry in featured] == [entry_id]
    assert featured[0]["service_title"] == "Mejora"

    entry = client.get(f"/api/gallery/{entry_id}").json()
    upload_root = Path(app.state.settings.upload_dir)
    before_path = upload_root / entry["before_image"][len("/uploads/"):]
    assert before_path.exists()

    assert client.delete(f"/api/gallery/{entry_id}", headers=admin_headers).status_code == 200
    assert not before_path.exists()
    assert client.delete(f"/api/gallery/{entry_id}", headers=admin_headers).status_code == 404



def test_gallery_update_replaces_only_the_uploaded_image(app, client, admin_headers):
    created = client.post(
        "/api/gallery",
        data={"title": "Audi A4"},
        files={"before_image": png_upload("before.png"), "after_image": png_upload("after.png")},
        headers=admin_headers,
    )
    entry_id = created.json()["galleryId"]
    original = client.get(f"/api/gallery/{entry_id}").json()
    upload_root = Path(app.state.settings.upload_dir)

    updated = client.put(
        f"/api/gallery/{entry_id}",
        data={"title": "Audi A4 Avant"},
        files={"after_image": png_upload("after-2.png")},
        headers=admin_headers,
    )
    assert updated.status_code == 200

    entry = client.get(f"/api/gallery/{entry_id}").json()
    assert entry["title"] == "Audi A4 Avant"
    assert entry["before_image"] == original["before_image"]
    assert entry["after_image"] != original["after_image"]
    assert (upload_root / entry["before_image"][len("/uploads/"):]).exists()
    assert (upload_root / entry["after_image"][len("/uploads/"):]).exists()
    assert not (upload_root / original["after_image"][len("/uploads/"):]).exists()


def test_gallery_update_of_missing_entry_leaves_no_upload(app, client, admin_headers):
    gallery_dir = Path(app.state.settings.upload_dir) / "gallery"
    before = set(gallery_dir.glob("*")) if gallery_dir.exists() else set()

    response = client.put(
        "/api/gallery/9999",
        data={"title": "No existe"},
        files={"before_image": png_upload("before.png"), "after_image": png_upload("after.png")},
        headers=admin_headers,
    )
    assert response.status_code == 404
    after = set(gallery_dir.glob("*")) if gallery_dir.exists() else set()
    assert after == before

def test_clients_crud_search_and_history(client, admin_headers):
    invalid = client.post("/api/clients", json={"name": "Luis", "email": "not-an-email"}, headers=admin_headers)
    assert invalid.status_code == 400
    assert invalid.json()["errors"][0] == {"field": "email", "message": "Email inválido"}

    created = client.post(
        "/api/clients",
        json={"name": "Lucía Pérez", "email": "lucia@gmail.com", "phone": "600222333"},
        headers=admin_headers,
    )
    assert created.status_code == 201
    client_id = created.json()["clientId"]

    found = client.get("/api/clients/search/Lucía", headers=admin_headers).json()
    assert [row["id"] for row in found] == [client_id]

    booking = client.post(
        "/api/appointments",
        json={
            "client_name": "Lucía Pérez",
            "client_phone": "600222333",
            "appointment_date": "2025-07-01",
            "appointment_time": "11:00",
        },
    )
    appointment_id = booking.json()["appointmentId"]
    linked = client.put(
        f"/api/appointments/{appointment_id}",
        json={
            "client_id": client_id,
            "client_name": "Lucía Pérez",
            "client_phone": "600222333",
            "appointment_date": "2025-07-01",
            "appointment_time": "11:00",
            "price": 120,
        },
        headers=admin_headers,
    )
    assert linked.status_code == 200

    details = client.get(f"/api/clients/{client_id}", headers=admin_headers).json()
    assert [row["id"] for row in details["appointments"]] == [appointment_id]

    assert client.delete(f"/api/clients/{client_id}", headers=admin_headers).status_code == 200
    missing = client.get(f"/api/clients/{client_id}", headers=admin_headers)
    assert missing.status_code == 404
    assert missing.json() == {"error": "Cliente no encontrado"}


def test_config_bulk_update_is_reflected_publicly(client, admin_headers):
    response = client.put(
        "/api/content/config",
        json=[{"key": "contact_phone", "value": "600000000"}],
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert client.get("/api/content/config").json()["contact_phone"] == "600000000"

    wrapped = client.put(
        "/api/content/config",
        json={"configs": [{"key": "site_name", "value": "PurDetall Pro"}, {"key": "no_such_key", "value": "x"}]},
        headers=admin_headers,
    )
    assert wrapped.status_code == 200
    public = client.get("/api/content/config").json()
    assert public["site_name"] == "PurDetall Pro"
    assert "no_such_key" not in public


def test_config_single_key_update(client, admin_headers):
    ok = client.put("/api/content/config/hero_title", json={"value": "BRILLO"}, headers=admin_headers)
    assert ok.status_code == 200

    unknown = client.put("/api/content/config/no_such_key", json={"value": "x"}, headers=admin_headers)
    assert unknown.status_code == 404
    assert unknown.json() == {"error": "Configuración no encontrada"}

    empty = client.put("/api/content/config/hero_title", json={"value": ""}, headers=admin_headers)
    assert empty.status_code == 400

    rows = client.get("/api/content/config/admin", headers=admin_headers).json()
    hero = next(row for row in rows if row["key"] == "hero_title")
    assert hero["value"] == "BRILLO"
    assert hero["description"] == "Título principal del hero"


def test_contact_sends_to_configured_address(app, client):
    fake = FakeMailSender()
    app.state.contact_notifier.mail_sender = fake

    response = client.post(
        "/api/contact",
        json={
            "name": "Marta",
            "email": "marta@gmail.com",
            "phone": "611000111",
            "message": "Quiero un presupuesto\npara mi coche",
        },
    )
    assert response.status_code == 200
    assert response.json()["success"] is True
    assert len(fake.sent) == 1
    sent = fake.sent[0]
    assert sent["to"] == "info@purdetall.es"
    assert sent["subject"] == "Nuevo mensaje de contacto: Sin asunto"
    assert "Teléfono: 611000111" in sent["text"]
    assert "Quiero un presupuesto<br>para mi coche" in sent["html"]


def test_contact_validation_and_delivery_failure(app, client):
    invalid = client.post("/api/contact", json={"name": "", "email": "bad", "message": ""})
    assert invalid.status_code == 400
    assert {error["field"] for error in invalid.json()["errors"]} == {"name", "email", "message"}

    app.state.contact_notifier.mail_sender = FakeMailSender(fail=True)
    failed = client.post("/api/contact", json={"name": "Marta", "email": "marta@gmail.com", "message": "Hola"})
    assert failed.status_code == 500
    assert failed.json() == {"error": "Error al enviar el mensaje"}


def test_contact_info_exposes_public_subset(client):
    info = client.get("/api/contact/info").json()
    assert info["contact_email"] == "info@purdetall.es"
    assert "site_name" not in info


def test_contact_rejects_multiline_subject(app, client):
    fake = FakeMailSender()
    app.state.contact_notifier.mail_sender = fake
    response = client.post(
        "/api/contact",
        json={"name": "Marta", "email": "marta@gmail.com", "subject": "Hola\nBcc: x@example.com", "message": "Hola"},
    )
    assert response.status_code == 400
    assert response.json()["errors"] == [
        {"field": "subject", "message": "El asunto no puede contener saltos de línea"}
    ]
    assert fake.sent == []


def test_mail_sender_reports_unencodable_headers_as_delivery_errors():
    sender = MailSender("127.0.0.1", port=1, from_address="web@purdetall.es")
    with pytest.raises(MailDeliveryError):
        sender.send("info@purdetall.es", "Hola\r\nBcc: x@example.com", "Texto")


def test_client_search_treats_wildcards_literally(client, admin_headers):
    client.post("/api/clients", json={"name": "Pedro Ruiz"}, headers=admin_headers)
    discount_id = client.post("/api/clients", json={"name": "Taller 50% Off"}, headers=admin_headers).json()["clientId"]

    percent = client.get("/api/clients/search/%25", headers=admin_headers).json()
    assert [row["id"] for row in percent] == [discount_id]
    assert client.get("/api/clients/search/_", headers=admin_headers).json() == []


def test_config_bulk_update_stores_structured_values_as_json(client, admin_headers):
    response = client.put(
        "/api/content/config",
        json=[{"key": "business_hours", "value": {"lunes": "9-19", "sabado": "cerrado"}}],
        headers=admin_headers,
    )
    assert response.status_code == 200
    stored = client.get("/api/content/config").json()["business_hours"]
    assert json.loads(stored) == {"lunes": "9-19", "sabado": "cerrado"}
