from dataclasses import dataclass

from flask import current_app
from flask_jwt_extended import get_jwt, get_jwt_identity

from virtual_museum.utils.exceptions import ForbiddenError, MissingScopeError


@dataclass(frozen=True)
class Caller:
    id: str
    role: str
    museum_id: str = None
    is_elevated: bool = False
    is_scoped: bool = False


def resolve_caller():
    """Build the caller from the verified JWT of the current request."""
    claims = get_jwt()
    role = claims.get("role") or ""
    return Caller(
        id=get_jwt_identity(),
        role=role,
        museum_id=claims.get("museum_id") or None,
        is_elevated=role in current_app.config["ELEVATED_ROLES"],
        is_scoped=role in current_app.config["SCOPED_ROLES"],
    )


class AccessScope:
    """Decides which museum's records a caller may read or change.

    Cross-museum lookups by id come back as "not found" rather than
    "forbidden" so record existence is not disclosed.
    """

    def __init__(self, caller):
        self.caller = caller

    @classmethod
    def current(cls):
        return cls(resolve_caller())

    @property
    def actor_id(self):
        return self.caller.id

    def require_museum(self):
        if not (self.caller.is_scoped or self.caller.is_elevated):
            raise ForbiddenError("Museum staff access required")
        if not self.caller.museum_id:
            raise MissingScopeError()
        return self.caller.museum_id

    def require_elevated(self):
        if not self.caller.is_elevated:
            raise ForbiddenError("Reviewer privileges required")
        return self.caller.id

    def read_filter(self):
        """Museum id to filter single-record reads by, or None for elevated callers."""
        if self.caller.is_elevated:
            return None
        return self.require_museum()
