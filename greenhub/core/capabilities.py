"""
Authorization decisions derived from a session.

Everything here is a pure function of its arguments: no state is read or
written, and a denial is always a plain False, never an exception. Routing
and visibility code asks these functions and decides what to show.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Optional, Tuple

from greenhub.core.roles import ANONYMOUS_CAPABILITIES, ROLE_CAPABILITIES, Capability, Role
from greenhub.core.session import Session


def is_allowed(
    session: Optional[Session],
    required_roles: Iterable[Role | str],
    *,
    public: bool = False,
) -> bool:
    """
    - public=True: allowed for everyone, with or without a session
    - empty required_roles: any authenticated session
    - otherwise: the session's role must be one of required_roles
    """
    if public:
        return True
    if session is None:
        return False
    roles = list(required_roles)
    if not roles:
        return True
    return session.role is not None and session.role in {Role.parse(r) for r in roles}


def capabilities_for(session: Optional[Session]) -> FrozenSet[Capability]:
    if session is None or session.role is None:
        return ANONYMOUS_CAPABILITIES
    return ROLE_CAPABILITIES.get(session.role, frozenset())


def can(session: Optional[Session], capability: Capability) -> bool:
    return capability in capabilities_for(session)


def can_access_dataset(session: Optional[Session], dataset_config) -> bool:
    """Gate a configured dataset using its declared roles and public flag."""
    return is_allowed(
        session,
        getattr(dataset_config, "required_roles", ()),
        public=bool(getattr(dataset_config, "public", False)),
    )


@dataclass(frozen=True)
class PlatformTool:
    path: str
    label: str
    description: str
    capability: Capability


PLATFORM_TOOLS: Tuple[PlatformTool, ...] = (
    PlatformTool("/climate-database", "Climate Database", "Access climate data and analytics",
                 Capability.BROWSE_CLIMATE_DATA),
    PlatformTool("/vulnerability-maps", "Vulnerability Maps", "View climate risk assessments",
                 Capability.VIEW_VULNERABILITY_MAPS),
    PlatformTool("/me-dashboard", "M&E Dashboard", "Monitor adaptation progress",
                 Capability.VIEW_ME_DASHBOARD),
)


def platform_tools(session: Optional[Session]) -> List[PlatformTool]:
    """Platform tools the session may open, in menu order."""
    granted = capabilities_for(session)
    return [tool for tool in PLATFORM_TOOLS if tool.capability in granted]
