"""
Observable state container shared by the stores.

A store owns one frozen snapshot at a time. Every change publishes a new
snapshot to the subscribed listeners, so views and memoized selectors can
compare snapshots by identity.
"""

from dataclasses import replace
from typing import Any, Callable, Generic, TypeVar

from quickpay_dashboard.lib import logs

LOG = logs.logger(__file__)

S = TypeVar("S")

Listener = Callable[[Any], None]


class ObservableStore(Generic[S]):
    """
    Minimal get/subscribe/dispatch state container.

    Subclasses list their public action names in ``ACTIONS``; ``dispatch``
    refuses anything else.
    """

    ACTIONS: frozenset[str] = frozenset()

    def __init__(self, initial: S) -> None:
        self._state = initial
        self._listeners: list[Listener] = []

    def get_state(self) -> S:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` and return a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, action: str, *args: Any, **kwargs: Any) -> Any:
        """
        Invoke a named action.

        Async actions return their coroutine for the caller to await.
        """
        if action not in self.ACTIONS:
            raise ValueError(f"Unknown action: {action}")
        return getattr(self, action)(*args, **kwargs)

    def _set(self, **changes: Any) -> None:
        if not changes:
            return
        self._state = replace(self._state, **changes)
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                LOG.error("Store listener %r failed", listener, exc_info=True)
