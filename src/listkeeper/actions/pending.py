"""Short-lived disambiguation state.

When a search returns several candidates the user is shown a numbered menu
and the candidates are parked here under their user id until a ``pick``
arrives. Entries expire after a TTL and are swept whenever the store is
touched.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from listkeeper.site.models import SearchResult

DEFAULT_TTL_SECONDS = 5 * 60


class SelectionSource(str, Enum):
    """Where the candidates came from, which decides how a pick is added."""

    MY_ITEMS = "my_items"
    CATALOG = "catalog"


@dataclass
class PendingSelection:
    """A numbered menu awaiting the user's pick.

    Attributes:
        session_key: User id the menu was shown to
        query: The search the candidate indices refer to
        candidates: Menu entries in display order
        source: Past purchases or catalog
        created_at: Clock reading when the menu was stored
    """

    session_key: str
    query: str
    candidates: list[SearchResult]
    source: SelectionSource
    created_at: float = field(default_factory=time.monotonic)


class PendingSelectionStore:
    """At most one pending selection per user, expiring after ``ttl_seconds``."""

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, PendingSelection] = {}

    def create(
        self,
        session_key: str,
        query: str,
        candidates: list[SearchResult],
        source: SelectionSource,
    ) -> PendingSelection:
        """Store a menu for ``session_key``, replacing any previous one."""
        self._purge_expired()
        selection = PendingSelection(
            session_key=session_key,
            query=query,
            candidates=list(candidates),
            source=source,
            created_at=self._clock(),
        )
        self._entries[session_key] = selection
        return selection

    def consume(self, session_key: str) -> Optional[PendingSelection]:
        """Remove and return the live selection for ``session_key``, if any."""
        self._purge_expired()
        return self._entries.pop(session_key, None)

    def peek(self, session_key: str) -> Optional[PendingSelection]:
        self._purge_expired()
        return self._entries.get(session_key)

    def __len__(self) -> int:
        self._purge_expired()
        return len(self._entries)

    def _purge_expired(self) -> None:
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if now - entry.created_at >= self.ttl_seconds]
        for key in expired:
            del self._entries[key]
        if expired:
            print(f"[Action] Expired {len(expired)} pending selection(s)")
