"""
Role gate for privileged routes.
Trust: every admin / pharmacist handler calls require_role before touching the database.
"""
from typing import Iterable, Optional

from medora.core.exceptions import AuthError
from medora.core.security import TokenPayload
from medora.models.enums import Role

STAFF_ROLES = (Role.ADMIN, Role.PHARMACIST)
ADMIN_ONLY = (Role.ADMIN,)


def require_auth(claims: Optional[TokenPayload]) -> TokenPayload:
    """401 when there is no verified identity."""
    if claims is None:
        raise AuthError(401, "Authentication required")
    return claims


def require_role(claims: Optional[TokenPayload], allowed_roles: Iterable[Role]) -> TokenPayload:
    """401 without identity, 403 when the caller's role is not in allowed_roles."""
    user = require_auth(claims)
    if user.role not in tuple(allowed_roles):
        raise AuthError(403, "Insufficient permissions")
    return user
