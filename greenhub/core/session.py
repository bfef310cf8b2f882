from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from greenhub.core.exceptions import CorruptPayloadError
from greenhub.core.roles import Role, role_display_name


def now_iso() -> str:
    """
    Return a current UTC timestamp in ISO-8601 format.
    """
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class Principal:
    """
    Authenticated identity. Never carries a secret.

    `role` is None when the stored role string is not one of the known roles;
    such a principal fails every role check.
    """

    id: str
    display_name: str
    role: Optional[Role]
    last_authenticated_at: str

    @property
    def role_display_name(self) -> str:
        return role_display_name(self.role)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "display_name": self.display_name,
            "role": self.role.value if self.role is not None else None,
            "last_authenticated_at": self.last_authenticated_at,
        }

    @classmethod
    def from_payload(cls, payload: Any) -> Principal:
        """
        Rebuild a Principal from its persisted JSON payload.

        :raises CorruptPayloadError: if the payload is not a principal object
        """
        if not isinstance(payload, Mapping):
            raise CorruptPayloadError("session payload must be an object")
        principal_id = payload.get("id")
        if not isinstance(principal_id, str) or not principal_id:
            raise CorruptPayloadError("session payload has no principal id")
        authenticated_at = payload.get("last_authenticated_at")
        if not isinstance(authenticated_at, str):
            raise CorruptPayloadError("session payload has no authentication time")
        display_name = payload.get("display_name")
        return cls(
            id=principal_id,
            display_name=display_name if isinstance(display_name, str) and display_name else principal_id,
            role=Role.parse(payload.get("role")),
            last_authenticated_at=authenticated_at,
        )


@dataclass(frozen=True)
class Session:
    principal: Principal
    issued_at: str

    @property
    def role(self) -> Optional[Role]:
        return self.principal.role


def validate_session_payload(payload: Any) -> None:
    """Validator for PersistenceAdapter.get on the session key."""
    Principal.from_payload(payload)
