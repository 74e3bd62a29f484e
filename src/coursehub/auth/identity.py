"""The authenticated caller."""

import uuid

from coursehub.db.models import Role


class CurrentIdentity:
    """Represents the authenticated identity making the request.

    Learn: Built only from a verified session token, so it is exactly
    what the token says: a user id and a role. Whether that user still
    exists is a storage question the services answer.
    """

    def __init__(self, user_id: uuid.UUID, role: Role):
        self.user_id = user_id
        self.role = role

    def __eq__(self, other) -> bool:
        if not isinstance(other, CurrentIdentity):
            return NotImplemented
        return self.user_id == other.user_id and self.role is other.role

    def __repr__(self) -> str:
        return f"CurrentIdentity(user_id={self.user_id!s}, role={self.role.value})"
