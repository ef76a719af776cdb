from datetime import datetime, timedelta

from medora.core.security import decode_access_token
from medora.models import RefreshToken, User
from medora.models.enums import Role

PASSWORD = "Secret123"


def register(client, **overrides):
    body = {"name": "Rahim Uddin", "email": "rahim@example.com", "password": "Secret123"}
    body.update(overrides)
    return client.post("/api/auth/register", json=body)


def login(client, identifier, password=PASSWORD):
    return client.post("/api/auth/login", json={"emailOrPhone": identifier, "password": password})


def test_register_returns_user_without_password(client, db):
    response = register(client)
    assert response.status_code == 201
    body = response.json()
    assert body["user"]["email"] == "rahim@example.com"
    assert body["user"]["role"] == "CUSTOMER"
    assert "password" not in body["user"]
    assert "hashedPassword" not in body["user"]
    assert body["accessToken"] and body["refreshToken"]

    user = db.query(User).filter(User.email == "rahim@example.com").one()
    assert decode_access_token(body["accessToken"]).user_id == user.id
    assert db.query(RefreshToken).filter(RefreshToken.user_id == user.id).count() == 1


def test_register_with_phone_only(client):
    response = register(client, email=None, phone="01812345678")
    assert response.status_code == 201
    assert response.json()["user"]["phone"] == "01812345678"


def test_register_duplicate_email(client):
    assert register(client).status_code == 201
    response = register(client, name="Someone Else")
    assert response.status_code == 400
    assert response.json() == {"error": "User with this email or phone already exists"}


def test_register_requires_email_or_phone(client):
    response = register(client, email=None)
    assert response.status_code == 400
    assert response.json()["error"] == "Validation error"


def test_register_rejects_weak_password(client):
    response = register(client, password="alllowercase1")
    assert response.status_code == 400
    details = response.json()["details"]
    assert details[0]["field"] == "password"
    assert "uppercase" in details[0]["message"]


def test_register_rejects_bad_phone(client):
    response = register(client, phone="12-34")
    assert response.status_code == 400
    assert any(d["field"] == "phone" for d in response.json()["details"])


def test_login_by_email_and_phone(client, customer):
    by_email = login(client, "customer@test.com")
    assert by_email.status_code == 200
    assert decode_access_token(by_email.json()["accessToken"]).user_id == customer.id

    by_phone = login(client, "01712345678")
    assert by_phone.status_code == 200
    assert by_phone.json()["user"]["id"] == customer.id


def test_login_wrong_password_and_unknown_user(client, customer):
    wrong = login(client, "customer@test.com", "WrongPass1")
    assert wrong.status_code == 401
    assert wrong.json() == {"error": "Invalid credentials"}

    unknown = login(client, "nobody@test.com")
    assert unknown.status_code == 401
    assert unknown.json() == {"error": "Invalid credentials"}


def test_refresh_issues_new_access_token(client, customer):
    tokens = login(client, "customer@test.com").json()
    response = client.post("/api/auth/refresh", json={"refreshToken": tokens["refreshToken"]})
    assert response.status_code == 200
    claims = decode_access_token(response.json()["accessToken"])
    assert claims.user_id == customer.id
    assert claims.role == Role.CUSTOMER


def test_refresh_requires_token(client):
    response = client.post("/api/auth/refresh", json={})
    assert response.status_code == 400
    assert response.json() == {"error": "Refresh token is required"}


def test_refresh_rejects_access_token(client, customer):
    tokens = login(client, "customer@test.com").json()
    response = client.post("/api/auth/refresh", json={"refreshToken": tokens["accessToken"]})
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid refresh token"}


def test_refresh_expired_row_is_deleted(client, db, customer):
    tokens = login(client, "customer@test.com").json()
    row = db.query(RefreshToken).filter(RefreshToken.token == tokens["refreshToken"]).one()
    row.expires_at = datetime.utcnow() - timedelta(minutes=1)
    db.commit()

    response = client.post("/api/auth/refresh", json={"refreshToken": tokens["refreshToken"]})
    assert response.status_code == 401
    assert response.json() == {"error": "Refresh token expired"}

    db.expire_all()
    assert db.query(RefreshToken).filter(RefreshToken.token == tokens["refreshToken"]).first() is None


def test_logout_revokes_refresh_token(client, customer):
    tokens = login(client, "customer@test.com").json()
    assert client.post("/api/auth/logout", json={"refreshToken": tokens["refreshToken"]}).status_code == 200

    response = client.post("/api/auth/refresh", json={"refreshToken": tokens["refreshToken"]})
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid refresh token"}


def test_me(client, customer, customer_headers):
    assert client.get("/api/auth/me").status_code == 401

    response = client.get("/api/auth/me", headers=customer_headers)
    assert response.status_code == 200
    assert response.json()["user"]["email"] == "customer@test.com"


def test_me_for_deleted_user_is_404(client, db, customer, customer_headers):
    db.delete(customer)
    db.commit()
    assert client.get("/api/auth/me", headers=customer_headers).status_code == 404


def test_update_profile(client, customer_headers):
    response = client.put(
        "/api/auth/me",
        headers=customer_headers,
        json={"name": "New Name", "city": "Chattogram", "zipCode": "4000"},
    )
    assert response.status_code == 200
    user = response.json()["user"]
    assert user["name"] == "New Name"
    assert user["city"] == "Chattogram"
    assert user["zipCode"] == "4000"


def test_update_profile_email_conflict(client, customer_headers, admin):
    response = client.put("/api/auth/me", headers=customer_headers, json={"email": "admin@medora.com"})
    assert response.status_code == 409


def test_change_password_revokes_refresh_tokens(client, db, customer, customer_headers):
    tokens = login(client, "customer@test.com").json()

    response = client.post(
        "/api/auth/change-password",
        headers=customer_headers,
        json={"currentPassword": PASSWORD, "newPassword": "Changed123", "confirmPassword": "Changed123"},
    )
    assert response.status_code == 200

    db.expire_all()
    assert db.query(RefreshToken).filter(RefreshToken.user_id == customer.id).count() == 0
    assert client.post("/api/auth/refresh", json={"refreshToken": tokens["refreshToken"]}).status_code == 401
    assert login(client, "customer@test.com", "Changed123").status_code == 200


def test_change_password_wrong_current(client, customer_headers):
    response = client.post(
        "/api/auth/change-password",
        headers=customer_headers,
        json={"currentPassword": "Nope12345", "newPassword": "Changed123", "confirmPassword": "Changed123"},
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Current password is incorrect"}


def test_change_password_mismatch(client, customer_headers):
    response = client.post(
        "/api/auth/change-password",
        headers=customer_headers,
        json={"currentPassword": PASSWORD, "newPassword": "Changed123", "confirmPassword": "Changed124"},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Validation error"


def test_update_profile_rejects_null_name(client, customer_headers):
    response = client.put("/api/auth/me", headers=customer_headers, json={"name": None})
    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "name"


def test_update_profile_keeps_one_identifier(client, db, customer, customer_headers):
    response = client.put("/api/auth/me", headers=customer_headers, json={"email": None, "phone": None})
    assert response.status_code == 400
    assert response.json() == {"error": "Either email or phone is required"}

    db.expire_all()
    stored = db.query(User).filter(User.id == customer.id).one()
    assert stored.email == "customer@test.com"
    assert stored.phone == "01712345678"

    # dropping just one of them is fine
    only_phone = client.put("/api/auth/me", headers=customer_headers, json={"email": None})
    assert only_phone.status_code == 200
    assert only_phone.json()["user"]["email"] is None
    assert login(client, "01712345678").status_code == 200
