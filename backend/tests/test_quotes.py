QUOTE = {
    "client_name": "Jordi",
    "client_email": "jordi@gmail.com",
    "client_phone": "622333444",
    "vehicle_make": "Seat",
    "vehicle_model": "León",
    "vehicle_year": 2019,
    "services": ["Mejora", "Protección"],
    "message": "Coche con arañazos leves",
}


def test_public_quote_request_and_admin_review(client, admin_headers):
    created = client.post("/api/quotes", json=QUOTE)
    assert created.status_code == 201
    quote_id = created.json()["quoteId"]

    assert client.get(f"/api/quotes/{quote_id}").status_code == 401

    quote = client.get(f"/api/quotes/{quote_id}", headers=admin_headers).json()
    assert quote["services"] == ["Mejora", "Protección"]
    assert quote["status"] == "pending"

    updated = client.put(
        f"/api/quotes/{quote_id}",
        json={"status": "quoted", "quote_amount": 180.0, "admin_notes": "Incluye encerado", "valid_until": "2025-08-01"},
        headers=admin_headers,
    )
    assert updated.status_code == 200

    quoted = client.get("/api/quotes/status/quoted", headers=admin_headers).json()
    assert [row["id"] for row in quoted] == [quote_id]
    assert quoted[0]["quote_amount"] == 180.0
    assert quoted[0]["valid_until"] == "2025-08-01"
    assert client.get("/api/quotes/status/pending", headers=admin_headers).json() == []


def test_quote_request_validation(client):
    response = client.post("/api/quotes", json={**QUOTE, "client_email": "jordi", "services": []})
    assert response.status_code == 400
    fields = {error["field"] for error in response.json()["errors"]}
    assert fields == {"client_email", "services"}


def test_quote_update_rejects_unknown_status_and_bad_amount(client, admin_headers):
    quote_id = client.post("/api/quotes", json=QUOTE).json()["quoteId"]

    unknown = client.put(f"/api/quotes/{quote_id}", json={"status": "maybe"}, headers=admin_headers)
    assert unknown.status_code == 400

    negative = client.put(
        f"/api/quotes/{quote_id}",
        json={"status": "quoted", "quote_amount": -5},
        headers=admin_headers,
    )
    assert negative.status_code == 400
    assert negative.json()["errors"][0]["field"] == "quote_amount"


def test_quote_delete_and_missing(client, admin_headers):
    quote_id = client.post("/api/quotes", json=QUOTE).json()["quoteId"]
    assert client.delete(f"/api/quotes/{quote_id}", headers=admin_headers).status_code == 200
    missing = client.get(f"/api/quotes/{quote_id}", headers=admin_headers)
    assert missing.status_code == 404
    assert missing.json() == {"error": "Presupuesto no encontrado"}
    assert client.put(f"/api/quotes/{quote_id}", json={"status": "accepted"}, headers=admin_headers).status_code == 404
