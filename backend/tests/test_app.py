def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_security_headers(client):
    response = client.get("/api/brands")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"


def test_unknown_host_is_rejected(client):
    response = client.get("/health", headers={"Host": "evil.example.com"})
    assert response.status_code == 400


def test_http_errors_use_error_envelope(client):
    response = client.get("/api/orders")
    assert response.status_code == 401
    assert response.json() == {"error": "Authentication required"}
