"""
Session management: the single source of the current identity.

Sessions are opaque bearer tokens kept in Redis with a TTL. Anything that
needs to know who is signed in reads through ``SessionManager``, and
anything that needs to react to sign-in/sign-out subscribes to it with
``on_session_change``.
"""
import enum
import logging
import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import redis
from fastapi import Request

logger = logging.getLogger(__name__)

SESSION_KEY_PREFIX = "session:"


class SessionEvent(str, enum.Enum):
    SIGNED_IN = "SIGNED_IN"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    SIGNED_OUT = "SIGNED_OUT"


@dataclass(frozen=True)
class AuthSession:
    access_token: str
    user_id: int
    expires_at: datetime


SessionListener = Callable[[SessionEvent, Optional[AuthSession]], None]


class Subscription:
    def __init__(self, manager: "SessionManager", listener: SessionListener):
        self._manager = manager
        self._listener = listener
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self._manager._remove_listener(self._listener)
            self.active = False


class SessionManager:
    def __init__(self, redis_client: redis.Redis, ttl_seconds: int = 3600):
        self._redis = redis_client
        self.ttl_seconds = ttl_seconds
        self._listeners: list[SessionListener] = []
        self._listeners_lock = threading.Lock()

    @staticmethod
    def _key(token: str) -> str:
        return f"{SESSION_KEY_PREFIX}{token}"

    def _new_session(self, user_id: int) -> AuthSession:
        token = secrets.token_urlsafe(32)
        self._redis.set(self._key(token), user_id, ex=self.ttl_seconds)
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=self.ttl_seconds)
        return AuthSession(access_token=token, user_id=user_id, expires_at=expires_at)

    def sign_in(self, user_id: int) -> AuthSession:
        session = self._new_session(user_id)
        self._notify(SessionEvent.SIGNED_IN, session)
        return session

    def get_session(self, token: str) -> Optional[AuthSession]:
        if not token:
            return None
        key = self._key(token)
        user_id = self._redis.get(key)
        if user_id is None:
            return None
        ttl = self._redis.ttl(key)
        if ttl is None or ttl < 0:
            ttl = 0
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=ttl)
        return AuthSession(access_token=token, user_id=int(user_id), expires_at=expires_at)

    def refresh(self, token: str) -> Optional[AuthSession]:
        """Rotate the token of a live session and restart its TTL."""
        current = self.get_session(token)
        if current is None:
            return None
        session = self._new_session(current.user_id)
        self._redis.delete(self._key(token))
        self._notify(SessionEvent.TOKEN_REFRESHED, session)
        return session

    def sign_out(self, token: str) -> bool:
        removed = self._redis.delete(self._key(token))
        if removed:
            self._notify(SessionEvent.SIGNED_OUT, None)
        return bool(removed)

    def on_session_change(self, listener: SessionListener) -> Subscription:
        with self._listeners_lock:
            self._listeners.append(listener)
        return Subscription(self, listener)

    def _remove_listener(self, listener: SessionListener) -> None:
        with self._listeners_lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _notify(self, event: SessionEvent, session: Optional[AuthSession]) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(event, session)
            except Exception:
                logger.exception("Session listener %r failed on %s", listener, event.value)


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.session_manager
