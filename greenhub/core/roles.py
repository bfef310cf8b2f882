from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, Optional


class Role(str, Enum):
    """
    Coarse permission class of a principal.

    Roles are not ordered: what a role may do is looked up in
    ROLE_CAPABILITIES, never derived from comparing roles.
    """

    PUBLIC = "public"
    RESEARCHER = "researcher"
    GOVERNMENT = "government"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value: object) -> Optional[Role]:
        """
        Return the Role for a raw value, or None for anything that is not
        exactly one of the four role strings.
        """
        if isinstance(value, Role):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value)
        except ValueError:
            return None


class Capability(str, Enum):
    BROWSE_RESOURCES = "browse_resources"
    FAVORITE_RESOURCES = "favorite_resources"
    BROWSE_CLIMATE_DATA = "browse_climate_data"
    VIEW_VULNERABILITY_MAPS = "view_vulnerability_maps"
    VIEW_ME_DASHBOARD = "view_me_dashboard"
    EXPORT_DATA = "export_data"


# Capabilities of a client without a session
ANONYMOUS_CAPABILITIES: FrozenSet[Capability] = frozenset({Capability.BROWSE_RESOURCES})

_PUBLIC = frozenset({Capability.BROWSE_RESOURCES, Capability.FAVORITE_RESOURCES})
_RESEARCHER = _PUBLIC | {
    Capability.BROWSE_CLIMATE_DATA,
    Capability.VIEW_VULNERABILITY_MAPS,
    Capability.EXPORT_DATA,
}
_GOVERNMENT = _RESEARCHER | {Capability.VIEW_ME_DASHBOARD}

ROLE_CAPABILITIES: Dict[Role, FrozenSet[Capability]] = {
    Role.PUBLIC: _PUBLIC,
    Role.RESEARCHER: frozenset(_RESEARCHER),
    Role.GOVERNMENT: frozenset(_GOVERNMENT),
    Role.ADMIN: frozenset(Capability),
}

ROLE_DISPLAY_NAMES: Dict[Role, str] = {
    Role.ADMIN: "Administrator",
    Role.GOVERNMENT: "Government Official",
    Role.RESEARCHER: "Researcher",
    Role.PUBLIC: "Public User",
}


def role_display_name(role: Optional[Role]) -> str:
    return ROLE_DISPLAY_NAMES.get(role, "User") if role is not None else "User"
