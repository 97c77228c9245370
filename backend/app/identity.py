from dataclasses import dataclass
from enum import Enum

from app.errors import ForbiddenError


class Role(str, Enum):
    STUDENT = "STUDENT"
    ALUMNI = "ALUMNI"
    ADMIN = "ADMIN"


@dataclass(frozen=True)
class Identity:
    """Verified caller, as supplied by the upstream identity provider."""

    user_id: str
    role: Role


def require_role(role, allowed: tuple[Role, ...], message: str) -> Role:
    """Return the caller's role as a Role, or raise ForbiddenError."""
    try:
        role = Role(role)
    except ValueError:
        raise ForbiddenError(message) from None
    if role not in allowed:
        raise ForbiddenError(message)
    return role
