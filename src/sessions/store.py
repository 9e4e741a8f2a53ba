"""Per-user ingredient sessions held in process memory.

A session is created on a user's first scan or manual add and destroyed by
clear() or by the periodic sweep once it has been idle longer than the TTL.
Every mutation for one user runs under that user's asyncio.Lock, so two scans
(or a scan racing a manual add/remove) cannot overwrite each other. Different
users never share a lock.

Single-process only: sessions do not survive a restart and are not visible
to other instances. Multi-instance deployments need a shared store with
native TTL (for example a key/value store with per-key expiry) behind the
same interface.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional

from pydantic import ValidationError

from src.matching.text import display_name, normalize_name
from src.models.models import DetectedItem, ItemCategory
from src.utils.config import config
from src.utils.errors import DuplicateIngredient, IngredientNotFound, IngredientValidationError, SessionNotFound
from src.utils.logger import logger


@dataclass
class IngredientSession:
    """One user's ingredients, keyed by normalized name."""

    user_id: str
    created_at: datetime
    last_updated: datetime
    items: Dict[str, DetectedItem] = field(default_factory=dict)

    def touch(self, now: datetime) -> None:
        self.last_updated = now


class IngredientSessionStore:
    """Keyed by user id. All methods are coroutines and safe to call concurrently.

    Args:
        ttl_minutes: Idle time after which the sweep evicts a session.
        clock: Callable returning the current time. Injectable for tests.
    """

    def __init__(self, ttl_minutes: Optional[int] = None, clock: Optional[Callable[[], datetime]] = None) -> None:
        self.ttl = timedelta(minutes=ttl_minutes or config.SESSION_TTL_MINUTES)
        self._clock = clock or datetime.now
        self._sessions: Dict[str, IngredientSession] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def _lock_for(self, user_id: str) -> asyncio.Lock:
        return self._locks.setdefault(user_id, asyncio.Lock())

    def _get_or_create_locked(self, user_id: str) -> IngredientSession:
        session = self._sessions.get(user_id)
        if session is None:
            now = self._clock()
            session = IngredientSession(user_id=user_id, created_at=now, last_updated=now)
            self._sessions[user_id] = session
            logger.debug(f"Created ingredient session for {user_id}", extra={"user_id": user_id})
        return session

    @staticmethod
    def _merge_locked(session: IngredientSession, item: DetectedItem) -> bool:
        key = normalize_name(item.name)
        existing = session.items.get(key)
        if existing is None:
            session.items[key] = item
            return True
        if item.confidence > existing.confidence:
            session.items[key] = item
        return False

    async def add_detected(self, user_id: str, item: DetectedItem) -> bool:
        """Add a detected item, keeping the higher-confidence entry on a name clash.

        Returns:
            True if the name was not in the session before.
        """
        async with self._lock_for(user_id):
            session = self._get_or_create_locked(user_id)
            added = self._merge_locked(session, item)
            session.touch(self._clock())
        return added

    async def merge(self, user_id: str, items: Iterable[DetectedItem]) -> int:
        """Add every item from one scan under a single lock acquisition.

        Returns:
            Number of names that were new to the session.
        """
        items = list(items)
        async with self._lock_for(user_id):
            session = self._get_or_create_locked(user_id)
            added = sum(1 for item in items if self._merge_locked(session, item))
            session.touch(self._clock())
            total = len(session.items)

        logger.info(
            f"Merged {len(items)} detected item(s) for {user_id}: {added} new, {total} in session",
            extra={"user_id": user_id},
        )
        return added

    async def add_manual(self, user_id: str, name: str) -> DetectedItem:
        """Add a typed ingredient with confidence 1.0 and category MANUAL.

        Raises:
            IngredientValidationError: If `name` is empty or whitespace-only.
            DuplicateIngredient: If the normalized name is already present.
        """
        key = normalize_name(name)
        if not key:
            raise IngredientValidationError("Ingredient name is required")
        try:
            item = DetectedItem(name=display_name(name), confidence=1.0, category=ItemCategory.MANUAL)
        except ValidationError as e:
            raise IngredientValidationError(f"Invalid ingredient name: {e.errors()[0]['msg']}") from e

        async with self._lock_for(user_id):
            session = self._get_or_create_locked(user_id)
            if key in session.items:
                raise DuplicateIngredient(session.items[key].name)
            session.items[key] = item
            session.touch(self._clock())

        logger.info(f"Manually added '{item.name}' for {user_id}", extra={"user_id": user_id})
        return item

    async def remove(self, user_id: str, name: str) -> DetectedItem:
        """Remove an item by case-insensitive name.

        Raises:
            SessionNotFound: If the user has no active session.
            IngredientNotFound: If the name is not in the session.
        """
        key = normalize_name(name)
        async with self._lock_for(user_id):
            session = self._sessions.get(user_id)
            if session is None:
                raise SessionNotFound(name, user_id)
            removed = session.items.pop(key, None)
            if removed is None:
                raise IngredientNotFound(name, user_id)
            session.touch(self._clock())

        logger.info(f"Removed '{removed.name}' for {user_id}", extra={"user_id": user_id})
        return removed

    async def list(self, user_id: str) -> List[DetectedItem]:
        """Snapshot of the user's items. Empty when there is no session."""
        async with self._lock_for(user_id):
            session = self._sessions.get(user_id)
            return list(session.items.values()) if session else []

    async def names(self, user_id: str) -> List[str]:
        return [item.name for item in await self.list(user_id)]

    async def get(self, user_id: str) -> Optional[IngredientSession]:
        """Copy of the session record (items dict included), or None."""
        async with self._lock_for(user_id):
            session = self._sessions.get(user_id)
            if session is None:
                return None
            return IngredientSession(
                user_id=session.user_id,
                created_at=session.created_at,
                last_updated=session.last_updated,
                items=dict(session.items),
            )

    async def clear(self, user_id: str) -> bool:
        """Delete the session. Returns False if there was none."""
        async with self._lock_for(user_id):
            existed = self._sessions.pop(user_id, None) is not None
        if existed:
            logger.info(f"Cleared ingredient session for {user_id}", extra={"user_id": user_id})
        return existed

    async def sweep(self, now: Optional[datetime] = None) -> int:
        """Evict sessions idle for longer than the TTL.

        Each user's lock is held only for that user's eviction check, so a
        sweep never blocks requests for other users.

        Returns:
            Number of sessions evicted.
        """
        now = now or self._clock()
        evicted = 0
        for user_id in list(self._sessions):
            async with self._lock_for(user_id):
                session = self._sessions.get(user_id)
                if session is not None and now - session.last_updated > self.ttl:
                    del self._sessions[user_id]
                    evicted += 1
                    logger.debug(f"Evicted idle ingredient session for {user_id}", extra={"user_id": user_id})

        # Locks of users without a session are recreated on demand
        for user_id in [uid for uid, lock in self._locks.items() if uid not in self._sessions and not lock.locked()]:
            del self._locks[user_id]

        if evicted:
            logger.info(f"Session sweep evicted {evicted} idle session(s), {len(self._sessions)} active")
        return evicted
