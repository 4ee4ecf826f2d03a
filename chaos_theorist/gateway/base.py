"""Boundary contracts for everything the core fetches or mutates.

Implementations are stateless from the caller's point of view: every call
returns fresh immutable values and nothing handed out is retained or later
mutated. The core never retries; each call is individually retryable by
whoever invokes it.
"""

from __future__ import annotations

from typing import Optional, Protocol, Sequence, runtime_checkable

from ..domain.chat import ChatMessage
from ..domain.leverage import LeveragePoint
from ..domain.simulation import SimulationRun
from ..domain.systems import ChaoticSystemDefinition, ParameterValue, SystemParameter


@runtime_checkable
class ResourceGateway(Protocol):
    async def list_systems(self) -> Sequence[ChaoticSystemDefinition]:
        """Raises ``TransportError`` on network or server failure."""
        ...

    async def get_system(self, system_id: str) -> ChaoticSystemDefinition:
        """Raises ``NotFoundError`` for an unknown id."""
        ...

    async def identify_leverage_points(self, system_id: str) -> Sequence[LeveragePoint]:
        """Possibly slow and non-deterministic. Raises ``AnalysisError``."""
        ...

    async def update_parameter(
        self, system_id: str, parameter_id: str, value: ParameterValue
    ) -> SystemParameter:
        """Raises ``NotFoundError`` or ``ValidationError``."""
        ...

    async def start_simulation_run(
        self, system_id: str, scenario_id: Optional[str], initiated_by: str
    ) -> SimulationRun:
        ...


@runtime_checkable
class ChatProvider(Protocol):
    async def send_chat_turn(self, history: Sequence[ChatMessage], new_text: str) -> str:
        """Raises ``AIServiceError`` on network or provider fault."""
        ...


__all__ = ["ResourceGateway", "ChatProvider"]
