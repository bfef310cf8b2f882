from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from greenhub.core.session import Session
from greenhub.services.favorites_service import FavoritesService
from greenhub.services.session_service import SessionStore
from greenhub.services.storage import InMemoryStorage, PersistenceAdapter
from greenhub.ui.context import AppContext


class ClientState:
    """
    Per-callback view of one browser's persisted state.

    The browser keeps the raw key-value pairs in a local dcc.Store; each
    callback opens a SessionStore and FavoritesService over a copy of them,
    acts, and writes snapshot() back. Used as a context manager so the
    SessionStore is always torn down when the callback returns.
    """

    def __init__(self, ctx: AppContext, data: Optional[Mapping[str, Any]]):
        self._received = dict(data or {})
        self.storage = InMemoryStorage(
            {k: v for k, v in self._received.items() if isinstance(v, str)}
        )
        persistence = PersistenceAdapter(self.storage)
        self.sessions = SessionStore(
            persistence,
            ctx.directory,
            latency=ctx.global_config.auth_latency_seconds,
        )
        self.favorites = FavoritesService(persistence)

    def __enter__(self) -> ClientState:
        self.sessions.init()
        self.favorites.restore()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.sessions.teardown()

    @property
    def session(self) -> Optional[Session]:
        return self.sessions.session

    def snapshot(self) -> Dict[str, str]:
        return self.storage.snapshot()

    @property
    def dirty(self) -> bool:
        """True when the browser store no longer matches snapshot(), e.g. after a corrupt key was dropped."""
        return self._received != self.snapshot()
