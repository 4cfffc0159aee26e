"""Conversation persistence in Redis.

Each session id maps to a JSON list of turns. Every write carries a fixed
expiry, which is the only thing that ever removes a session.

Storage layout:
    {session_key_prefix}{session_id} -> [{"role": "user", "text": "..."}, ...]
"""

import json

from redis import asyncio as aioredis
from redis.exceptions import RedisError

from ..config import Settings, get_settings
from ..core import PersistenceError, get_logger
from ..models import ConversationTurn, SessionLookup

logger = get_logger(__name__)


class SessionStore:
    """Redis-backed conversation history with expiry.

    The store is the single source of truth for a session's history;
    nothing is cached in process memory between requests.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: aioredis.Redis | None = None,
    ):
        """Initialize the session store.

        Args:
            settings: Application settings. Defaults to the cached settings.
            client: Redis client. Created from settings if omitted.
        """
        self.settings = settings or get_settings()
        self.client = client or aioredis.from_url(
            self.settings.redis_url,
            decode_responses=True,
        )

    def _key(self, session_id: str) -> str:
        return f"{self.settings.session_key_prefix}{session_id}"

    async def get(self, session_id: str) -> SessionLookup:
        """Load the history for a session.

        Args:
            session_id: The session ID

        Returns:
            FOUND with the turns, NOT_FOUND for an unknown or expired
            session, or UNAVAILABLE if the store could not be read
        """
        try:
            raw = await self.client.get(self._key(session_id))
        except (RedisError, OSError) as e:
            logger.error(
                "Session store unreachable",
                session_id=session_id,
                error=str(e),
            )
            return SessionLookup.unavailable()

        if raw is None:
            logger.debug("Session not found", session_id=session_id)
            return SessionLookup.not_found()

        try:
            turns = [ConversationTurn.from_dict(item) for item in json.loads(raw)]
        except (ValueError, KeyError, TypeError) as e:
            logger.error(
                "Failed to decode session history",
                session_id=session_id,
                error=str(e),
            )
            return SessionLookup.unavailable()

        return SessionLookup.found(turns)

    async def save(
        self,
        session_id: str,
        turns: list[ConversationTurn],
        ttl_seconds: int | None = None,
    ) -> None:
        """Write the full history for a session, resetting its expiry.

        Args:
            session_id: The session ID
            turns: Complete ordered history to store
            ttl_seconds: Expiry in seconds. Defaults to settings value.

        Raises:
            PersistenceError: If the write fails
        """
        ttl_seconds = ttl_seconds or self.settings.session_ttl_seconds
        payload = json.dumps([turn.to_dict() for turn in turns])

        try:
            await self.client.set(self._key(session_id), payload, ex=ttl_seconds)
        except (RedisError, OSError) as e:
            logger.error(
                "Failed to save session",
                session_id=session_id,
                error=str(e),
            )
            raise PersistenceError(f"Failed to save session: {e}", session_id)

        logger.debug(
            "Saved session",
            session_id=session_id,
            turn_count=len(turns),
            ttl_seconds=ttl_seconds,
        )

    async def ping(self) -> bool:
        """Check whether Redis answers."""
        try:
            return bool(await self.client.ping())
        except (RedisError, OSError) as e:
            logger.warning("Session store ping failed", error=str(e))
            return False

    async def close(self) -> None:
        await self.client.aclose()


# Singleton instance
_session_store: SessionStore | None = None


def get_session_store() -> SessionStore:
    """Get the singleton session store instance."""
    global _session_store
    if _session_store is None:
        _session_store = SessionStore()
    return _session_store
