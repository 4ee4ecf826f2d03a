from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from ..store.state import AppState
from ..store.store import Store


@dataclass(frozen=True)
class RequestContext:
    """The selection an asynchronous request was issued under."""

    system_id: str
    generation: int


class SelectionTracker:
    """Counts selection changes so late responses can be recognised as stale.

    The generation increments every time the store's selected system changes,
    including A -> B -> A, so a response is only current if nothing moved
    the selection while it was in flight.
    """

    def __init__(self, store: Store) -> None:
        self._store = store
        self._generation = 0
        self._last: Optional[str] = store.state.selected_system_id
        self._unsubscribe = store.subscribe(self._on_change)

    @property
    def generation(self) -> int:
        return self._generation

    def _on_change(self, state: AppState, action: Any) -> None:
        if state.selected_system_id != self._last:
            self._last = state.selected_system_id
            self._generation += 1

    def issue(self, system_id: str) -> RequestContext:
        return RequestContext(system_id=system_id, generation=self._generation)

    def is_current(self, ctx: RequestContext) -> bool:
        return ctx.generation == self._generation and self._store.state.selected_system_id == ctx.system_id

    def close(self) -> None:
        self._unsubscribe()


__all__ = ["RequestContext", "SelectionTracker"]
