# interfaces/session_store.py
"""
Booking Session Store
Holds one in-progress BookingRecord per chat session.

The store itself only knows get/put/delete; where the records live is up to
the backend it is given (in-memory dict, or Redis with a TTL).
"""

import json
import time
from abc import ABC, abstractmethod
from typing import Optional, Dict, Any, Iterator, Tuple

import redis
from loguru import logger

from ..schemas import BookingRecord


class SessionBackend(ABC):
    """Raw key/value storage for serialized booking records"""

    name = "abstract"

    @abstractmethod
    def load(self, session_id: str) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    def save(self, session_id: str, data: Dict[str, Any]) -> None:
        ...

    @abstractmethod
    def remove(self, session_id: str) -> None:
        ...

    @abstractmethod
    def values(self) -> Iterator[Dict[str, Any]]:
        """Every stored record that has not expired"""
        ...


class InMemorySessionBackend(SessionBackend):
    """
    Dict keyed by session id.
    ttl_seconds=0 keeps sessions until they are deleted or the process exits.
    """

    name = "memory"

    def __init__(self, ttl_seconds: int = 0):
        self.ttl_seconds = ttl_seconds
        self._store: Dict[str, Tuple[float, Dict[str, Any]]] = {}

    def _expired(self, saved_at: float) -> bool:
        return self.ttl_seconds > 0 and time.monotonic() - saved_at > self.ttl_seconds

    def load(self, session_id: str) -> Optional[Dict[str, Any]]:
        entry = self._store.get(session_id)
        if entry is None:
            return None
        saved_at, data = entry
        if self._expired(saved_at):
            del self._store[session_id]
            logger.info(f"Session expired: {session_id}")
            return None
        return data

    def save(self, session_id: str, data: Dict[str, Any]) -> None:
        self._store[session_id] = (time.monotonic(), data)

    def remove(self, session_id: str) -> None:
        self._store.pop(session_id, None)

    def values(self) -> Iterator[Dict[str, Any]]:
        for session_id in [sid for sid, (saved_at, _) in self._store.items() if self._expired(saved_at)]:
            del self._store[session_id]
        return iter([data for _, data in self._store.values()])


class RedisSessionBackend(SessionBackend):
    """JSON values in Redis, refreshed TTL on every write"""

    name = "redis"

    def __init__(self, client: "redis.Redis", ttl_seconds: int = 24 * 3600):
        self.client = client
        self.ttl_seconds = ttl_seconds or 24 * 3600

    def _get_key(self, session_id: str) -> str:
        return f"booking_session:{session_id}"

    def load(self, session_id: str) -> Optional[Dict[str, Any]]:
        data = self.client.get(self._get_key(session_id))
        return json.loads(data) if data else None

    def save(self, session_id: str, data: Dict[str, Any]) -> None:
        self.client.setex(self._get_key(session_id), self.ttl_seconds, json.dumps(data))

    def remove(self, session_id: str) -> None:
        self.client.delete(self._get_key(session_id))

    def values(self) -> Iterator[Dict[str, Any]]:
        for key in self.client.scan_iter(match="booking_session:*"):
            data = self.client.get(key)
            # Expired between scan and get
            if data:
                yield json.loads(data)


class SessionStore:
    """
    Session repository used by the booking agent.
    get() never fails: an unknown or unreadable session yields a fresh record
    with no active step.
    """

    def __init__(self, backend: Optional[SessionBackend] = None):
        self.backend = backend or InMemorySessionBackend()

    @property
    def backend_name(self) -> str:
        return self.backend.name

    def get(self, session_id: str) -> BookingRecord:
        try:
            data = self.backend.load(session_id)
        except Exception as e:
            logger.error(f"Session load error for {session_id}: {e}")
            data = None

        if not data:
            return BookingRecord()

        try:
            return BookingRecord.from_storage(data)
        except ValueError as e:
            logger.warning(f"Discarding unreadable session {session_id}: {e}")
            return BookingRecord()

    def put(self, session_id: str, record: BookingRecord) -> None:
        try:
            self.backend.save(session_id, record.to_storage())
        except Exception as e:
            logger.error(f"Session save error for {session_id}: {e}")

    def delete(self, session_id: str) -> None:
        try:
            self.backend.remove(session_id)
        except Exception as e:
            logger.error(f"Session delete error for {session_id}: {e}")
        logger.info(f"Deleted session: {session_id}")

    def count(self) -> int:
        """Sessions with a booking in progress; reset records without a step are not counted"""
        try:
            return sum(1 for data in self.backend.values() if data.get("step"))
        except Exception as e:
            logger.error(f"Session count error: {e}")
            return 0


def create_session_store(settings) -> SessionStore:
    """Build the session store selected by SESSION_BACKEND"""
    if settings.SESSION_BACKEND == "redis":
        try:
            client = redis.Redis(
                host=settings.REDIS_HOST,
                port=settings.REDIS_PORT,
                db=settings.REDIS_DB,
                decode_responses=True
            )
            client.ping()
            logger.info(f"SessionStore connected to Redis at {settings.REDIS_HOST}:{settings.REDIS_PORT}")
            return SessionStore(RedisSessionBackend(client, settings.SESSION_TTL_SECONDS))
        except redis.RedisError as e:
            logger.warning(f"Redis connection failed, using in-memory store: {e}")

    return SessionStore(InMemorySessionBackend(settings.SESSION_TTL_SECONDS))
