from __future__ import annotations

import asyncio
import hmac
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Mapping, Optional, Sequence

from greenhub.core.cancellation import CancellationToken, SleepFn, simulated_latency
from greenhub.core.exceptions import InvalidCredentialsError, OperationCancelledError
from greenhub.core.roles import Role, role_display_name
from greenhub.core.session import Principal, Session, now_iso, validate_session_payload
from greenhub.services.storage import PersistenceAdapter

logger = logging.getLogger(__name__)

SESSION_KEY = "session"
DEFAULT_AUTH_LATENCY = 1.0


@dataclass(frozen=True)
class DirectoryEntry:
    identifier: str
    secret: str
    role: str
    display_name: str = ""

    def __repr__(self) -> str:
        return f"DirectoryEntry(identifier={self.identifier!r}, role={self.role!r})"


class PrincipalDirectory:
    """
    Fixed lookup table of principals, consulted only by SessionStore.authenticate.
    """

    def __init__(self, entries: Iterable[DirectoryEntry]):
        self._entries: List[DirectoryEntry] = list(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def match(self, identifier: str, secret: str) -> Optional[DirectoryEntry]:
        """
        Entry whose identifier AND secret both match, else None.

        Every entry is compared so the lookup does not exit early on the
        identifier alone.
        """
        found: Optional[DirectoryEntry] = None
        for entry in self._entries:
            id_ok = hmac.compare_digest(entry.identifier.encode("utf-8"), identifier.encode("utf-8"))
            secret_ok = hmac.compare_digest(entry.secret.encode("utf-8"), secret.encode("utf-8"))
            if id_ok and secret_ok and found is None:
                found = entry
        return found

    @classmethod
    def from_records(cls, raw: Sequence[Mapping[str, str]]) -> PrincipalDirectory:
        return cls(
            DirectoryEntry(
                identifier=str(r["identifier"]),
                secret=str(r["secret"]),
                role=str(r.get("role", "")),
                display_name=str(r.get("display_name") or ""),
            )
            for r in raw
        )


class AuthState(str, Enum):
    ANONYMOUS = "anonymous"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


class SessionStore:
    """
    Authentication state machine for one execution context.

        anonymous -> authenticating -> authenticated
        authenticating -> anonymous   (bad credentials / cancelled)
        authenticated -> anonymous    (logout)

    Lifecycle: init() restores the persisted session; teardown() cancels any
    in-flight authentication and leaves storage untouched. Only
    authenticate() and logout() write to storage.
    """

    def __init__(
        self,
        persistence: PersistenceAdapter,
        directory: PrincipalDirectory,
        *,
        latency: float = DEFAULT_AUTH_LATENCY,
        sleep: SleepFn = asyncio.sleep,
        clock: Callable[[], str] = now_iso,
    ):
        self._persistence = persistence
        self._directory = directory
        self._latency = latency
        self._sleep = sleep
        self._clock = clock

        self._state = AuthState.ANONYMOUS
        self._session: Optional[Session] = None
        self._pending: Optional[CancellationToken] = None
        self.last_error: Optional[str] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def init(self) -> Optional[Session]:
        return self.restore()

    def teardown(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        if self._state == AuthState.AUTHENTICATING:
            self._state = AuthState.ANONYMOUS

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    @property
    def display_name(self) -> str:
        if self._session is None:
            return "User"
        return self._session.principal.display_name or self._session.principal.id or "User"

    @property
    def role_display_name(self) -> str:
        return role_display_name(self._session.role if self._session else None)

    def has_role(self, role: Role | str) -> bool:
        if self._session is None or self._session.role is None:
            return False
        return self._session.role == Role.parse(role)

    def has_any_role(self, roles: Iterable[Role | str]) -> bool:
        return any(self.has_role(r) for r in roles)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    async def authenticate(
        self,
        identifier: str,
        secret: str,
        *,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Session:
        """
        Verify identifier + secret against the directory and open a session.

        :raises InvalidCredentialsError: no entry matches identifier and secret
            jointly (same message for either part being wrong)
        :raises OperationCancelledError: the token was cancelled, teardown()
            ran, or a newer authenticate() superseded this one before the
            result was applied; nothing is applied or persisted
        """
        token = cancel_token or CancellationToken()
        if self._pending is not None:
            self._pending.cancel()
        self._pending = token

        previous = self._session
        self._state = AuthState.AUTHENTICATING
        self.last_error = None

        try:
            await simulated_latency(self._latency, token, self._sleep)
        except (OperationCancelledError, asyncio.CancelledError):
            self._abandon(token, previous)
            logger.info("Authentication cancelled", extra={"identifier": identifier})
            raise

        entry = self._directory.match(identifier, secret)
        if entry is None:
            self._settle(token, previous)
            self.last_error = InvalidCredentialsError.MESSAGE
            logger.warning("Authentication failed", extra={"identifier": identifier})
            raise InvalidCredentialsError()

        stamp = self._clock()
        principal = Principal(
            id=entry.identifier,
            display_name=entry.display_name or entry.identifier,
            role=Role.parse(entry.role),
            last_authenticated_at=stamp,
        )
        session = Session(principal=principal, issued_at=stamp)

        self._pending = None
        self._session = session
        self._state = AuthState.AUTHENTICATED
        self._persistence.set(SESSION_KEY, principal.to_payload())

        logger.info(
            "Authenticated",
            extra={"principal": principal.id, "role": principal.role.value if principal.role else None},
        )
        return session

    def restore(self) -> Optional[Session]:
        payload = self._persistence.get(SESSION_KEY, validate=validate_session_payload)
        if payload is None:
            self._session = None
            self._state = AuthState.ANONYMOUS
            return None

        principal = Principal.from_payload(payload)
        self._session = Session(principal=principal, issued_at=principal.last_authenticated_at)
        self._state = AuthState.AUTHENTICATED
        return self._session

    def logout(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        if self._session is not None:
            logger.info("Logged out", extra={"principal": self._session.principal.id})
        self._session = None
        self._state = AuthState.ANONYMOUS
        self._persistence.remove(SESSION_KEY)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------
    def _settle(self, token: CancellationToken, previous: Optional[Session]) -> None:
        if self._pending is token:
            self._pending = None
        self._session = previous
        self._state = AuthState.AUTHENTICATED if previous is not None else AuthState.ANONYMOUS

    def _abandon(self, token: CancellationToken, previous: Optional[Session]) -> None:
        token.cancel()
        # a superseding call owns the state now
        if self._pending is token:
            self._settle(token, previous)
