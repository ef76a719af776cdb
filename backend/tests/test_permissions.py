import pytest

from medora.core.exceptions import AuthError
from medora.core.permissions import ADMIN_ONLY, STAFF_ROLES, require_auth, require_role
from medora.core.security import TokenPayload
from medora.models.enums import Role


def claims(role: Role) -> TokenPayload:
    return TokenPayload(sub="1", role=role)


def test_require_role_rejects_customer_for_admin_route():
    with pytest.raises(AuthError) as exc:
        require_role(claims(Role.CUSTOMER), [Role.ADMIN])
    assert exc.value.status_code == 403
    assert exc.value.message == "Insufficient permissions"


def test_require_role_passes_allowed_role():
    admin = claims(Role.ADMIN)
    assert require_role(admin, [Role.ADMIN]) is admin
    assert require_role(claims(Role.PHARMACIST), STAFF_ROLES).role == Role.PHARMACIST


def test_pharmacist_is_not_admin():
    with pytest.raises(AuthError) as exc:
        require_role(claims(Role.PHARMACIST), ADMIN_ONLY)
    assert exc.value.status_code == 403


def test_require_role_without_identity_is_401():
    with pytest.raises(AuthError) as exc:
        require_role(None, [Role.ADMIN])
    assert exc.value.status_code == 401


def test_require_auth():
    with pytest.raises(AuthError) as exc:
        require_auth(None)
    assert exc.value.status_code == 401
    assert require_auth(claims(Role.CUSTOMER)).user_id == 1


def test_admin_route_through_http(client, customer_headers, admin_headers):
    assert client.get("/api/admin/users").status_code == 401
    forbidden = client.get("/api/admin/users", headers=customer_headers)
    assert forbidden.status_code == 403
    assert forbidden.json() == {"error": "Insufficient permissions"}
    assert client.get("/api/admin/users", headers=admin_headers).status_code == 200


def test_garbage_bearer_token_is_treated_as_anonymous(client):
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json() == {"error": "Authentication required"}
