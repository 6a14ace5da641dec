"""
Authentication state events.

Listeners subscribe explicitly and get back a handle; calling
``unsubscribe()`` on the handle detaches the listener exactly once.
"""
import logging
import threading
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

SIGNED_UP = "signed_up"
SIGNED_IN = "signed_in"

AuthListener = Callable[[str, Any], None]


class Subscription:
    """Handle returned by ``AuthEventBus.subscribe``."""

    def __init__(self, bus: "AuthEventBus", token: int):
        self._bus = bus
        self._token = token
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        self._bus._remove(self._token)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.unsubscribe()


class AuthEventBus:
    def __init__(self):
        self._listeners: Dict[int, AuthListener] = {}
        self._next_token = 0
        self._lock = threading.Lock()

    def subscribe(self, listener: AuthListener) -> Subscription:
        with self._lock:
            token = self._next_token
            self._next_token += 1
            self._listeners[token] = listener
        return Subscription(self, token)

    def _remove(self, token: int) -> None:
        with self._lock:
            self._listeners.pop(token, None)

    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def publish(self, event: str, user: Any) -> None:
        """Call every current listener; one failing listener does not stop the rest."""
        with self._lock:
            listeners: List[AuthListener] = list(self._listeners.values())
        for listener in listeners:
            try:
                listener(event, user)
            except Exception:
                logger.exception("Auth listener failed while handling %s", event)


def log_auth_event(event: str, user: Any) -> None:
    logger.info("Auth event %s for user %s", event, getattr(user, "id", None))
