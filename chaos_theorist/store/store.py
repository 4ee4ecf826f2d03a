"""Single authoritative container for :class:`AppState`.

State changes only by dispatching transitions. Dispatch is serialized: a
transition dispatched while another is being applied (for example from a
subscriber) is queued and applied afterwards, in order, so no transition
ever sees a stale snapshot.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Any, Callable, Deque, List, Optional

from .reducer import reduce
from .state import AppState, initial_state

logger = logging.getLogger(__name__)

Listener = Callable[[AppState, Any], None]
Reducer = Callable[[AppState, Any], AppState]


class Store:
    def __init__(
        self,
        initial: Optional[AppState] = None,
        *,
        reducer: Reducer = reduce,
        history_size: int = 200,
    ) -> None:
        self._state = initial if initial is not None else initial_state()
        self._reducer = reducer
        self._listeners: List[Listener] = []
        self._pending: Deque[Any] = deque()
        self._dispatching = False
        self._lock = threading.RLock()
        self.history: Deque[str] = deque(maxlen=max(1, history_size))

    @property
    def state(self) -> AppState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener(state, action)``; returns a callable that removes it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, action: Any) -> AppState:
        with self._lock:
            self._pending.append(action)
            if self._dispatching:
                return self._state
            self._dispatching = True
            try:
                while self._pending:
                    self._apply(self._pending.popleft())
            except Exception:
                dropped = len(self._pending)
                self._pending.clear()
                logger.error("Reducer failed; dropped %d queued transition(s)", dropped)
                raise
            finally:
                self._dispatching = False
            return self._state

    def _apply(self, action: Any) -> None:
        previous = self._state
        self._state = self._reducer(previous, action)
        name = type(action).__name__
        self.history.append(name)
        if self._state is previous:
            logger.debug("Transition %s left state unchanged", name)
            return
        logger.debug("Applied transition %s", name)
        for listener in list(self._listeners):
            try:
                listener(self._state, action)
            except Exception as exc:
                logger.warning("Store listener %r failed on %s: %s", listener, name, exc)


__all__ = ["Store", "Listener"]
