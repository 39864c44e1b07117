"""Generic observer list manager."""

from __future__ import annotations

import logging
from threading import Lock
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)


T = TypeVar("T", bound=object)


class ObserverManager(Generic[T]):
    """
    Observer registration and notification.

    Exceptions raised by an observer are logged and never reach the
    notifier or the remaining observers.

    Example:
        ```python
        class SessionController:
            def __init__(self):
                self._observers = ObserverManager[SessionObserver](observer_type_name="session")

            def _notify(self, event, **kwargs):
                self._observers.notify("on_session_event", event, **kwargs)
        ```
    """

    def __init__(self, lock: Lock | None = None, observer_type_name: str = "observer"):
        """
        Initialize the observer manager.

        Args:
            lock: Optional threading lock to use. If None, creates a new lock.
            observer_type_name: Name of the observer type for logging (e.g., "session")
        """
        self._observers: list[T] = []
        self._lock = lock or Lock()
        self._observer_type_name = observer_type_name

    def register(self, observer: T) -> None:
        """Register an observer (idempotent - won't add duplicates)."""
        with self._lock:
            if observer not in self._observers:
                self._observers.append(observer)
                logger.info(f"Registered {self._observer_type_name} observer: {observer}")

    def unregister(self, observer: T) -> None:
        """Unregister an observer."""
        with self._lock:
            if observer in self._observers:
                self._observers.remove(observer)
                logger.debug(f"Unregistered {self._observer_type_name} observer: {observer}")
            else:
                logger.warning(
                    f"Attempted to unregister unknown {self._observer_type_name} observer: {observer}"
                )

    def clear(self) -> None:
        """Remove all observers."""
        with self._lock:
            self._observers.clear()

    def notify(self, callback_name: str, *args: Any, **kwargs: Any) -> None:
        """
        Call a callback on every observer.

        The observer list is copied under the lock and callbacks run without
        it, so observers may register or unregister while being notified.

        Args:
            callback_name: Name of the callback method to call (e.g., 'on_session_event')
            *args: Positional arguments to pass to the callback
            **kwargs: Keyword arguments to pass to the callback
        """
        with self._lock:
            observers = list(self._observers)

        for observer in observers:
            try:
                callback = getattr(observer, callback_name)
                callback(*args, **kwargs)
            except AttributeError:
                logger.error(
                    f"{self._observer_type_name} observer {observer} has no method '{callback_name}'",
                    exc_info=True,
                )
            except Exception as e:
                logger.error(
                    f"Error notifying {self._observer_type_name} observer {observer} via {callback_name}: {e}",
                    exc_info=True,
                )

    def __len__(self) -> int:
        """Number of registered observers."""
        with self._lock:
            return len(self._observers)
