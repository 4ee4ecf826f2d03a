"""Allow-list of system identities the current actor may see."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class AccessPolicy:
    """Ordered allow-list applied as a filter, never as a mutation."""

    allowed_systems: Tuple[str, ...] = ()

    @classmethod
    def from_ids(cls, ids: Iterable[str]) -> "AccessPolicy":
        return cls(tuple(dict.fromkeys(ids)))

    def allows(self, system_id: str) -> bool:
        return system_id in self.allowed_systems

    def filter(self, catalog: Sequence[T]) -> List[T]:
        """Entries of ``catalog`` whose ``id`` is allowed, in catalog order."""
        allowed = set(self.allowed_systems)
        visible = [entry for entry in catalog if getattr(entry, "id", None) in allowed]
        hidden = len(catalog) - len(visible)
        if hidden:
            logger.debug("Access policy hid %d of %d systems", hidden, len(catalog))
        return visible


__all__ = ["AccessPolicy"]
