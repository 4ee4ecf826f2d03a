"""In-process implementation of :class:`ResourceGateway`.

Stands in for the HTTP backend: it serves the built-in catalog, simulates
network latency with ``asyncio.sleep`` and can be told to fail specific
operations so error paths can be exercised end to end.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Iterable, List, Optional, Sequence

from ..config.schema import GatewayConfig
from ..domain import lifecycle
from ..domain.leverage import LeveragePoint
from ..domain.simulation import ParameterSetting, SimulationRun
from ..domain.systems import ChaoticSystemDefinition, ParameterValue, SystemParameter
from ..errors import AnalysisError, NotFoundError, TransportError
from . import seed

logger = logging.getLogger(__name__)


class InMemoryGateway:
    def __init__(
        self,
        systems: Optional[Iterable[ChaoticSystemDefinition]] = None,
        leverage_points: Optional[Iterable[LeveragePoint]] = None,
        *,
        config: Optional[GatewayConfig] = None,
    ) -> None:
        self.config = config or GatewayConfig()
        self._systems: Dict[str, ChaoticSystemDefinition] = {
            system.id: system for system in (seed.build_systems() if systems is None else systems)
        }
        self._leverage_points: List[LeveragePoint] = list(
            seed.build_leverage_points() if leverage_points is None else leverage_points
        )
        self._runs: Dict[str, SimulationRun] = {}
        self.fail_on = set(self.config.fail_on)

    async def _delay(self, seconds: float) -> None:
        if seconds > 0:
            await asyncio.sleep(seconds)

    def _maybe_fail(self, operation: str, error_cls: type) -> None:
        if operation in self.fail_on:
            logger.debug("Injected failure for %s", operation)
            raise error_cls(f"{operation} failed: service unavailable")

    def _require_system(self, system_id: str) -> ChaoticSystemDefinition:
        system = self._systems.get(system_id)
        if system is None:
            raise NotFoundError("system", system_id)
        return system

    # ------------------------------------------------------------------
    async def list_systems(self) -> Sequence[ChaoticSystemDefinition]:
        await self._delay(self.config.list_latency_seconds)
        self._maybe_fail("list_systems", TransportError)
        return list(self._systems.values())

    async def get_system(self, system_id: str) -> ChaoticSystemDefinition:
        self._maybe_fail("get_system", TransportError)
        return self._require_system(system_id)

    async def identify_leverage_points(self, system_id: str) -> Sequence[LeveragePoint]:
        await self._delay(self.config.analysis_latency_seconds)
        self._maybe_fail("identify_leverage_points", AnalysisError)
        if system_id not in self._systems:
            raise AnalysisError(f"No model available for system {system_id}")
        return [point for point in self._leverage_points if point.system_id == system_id]

    async def update_parameter(
        self, system_id: str, parameter_id: str, value: ParameterValue
    ) -> SystemParameter:
        await self._delay(self.config.update_latency_seconds)
        self._maybe_fail("update_parameter", TransportError)
        system = self._require_system(system_id)
        parameter = system.parameter(parameter_id)
        if parameter is None:
            raise NotFoundError("parameter", parameter_id, parent=system_id)
        parameter.check_value(value)
        updated = system.with_parameter_value(parameter_id, value)
        self._systems[system_id] = updated
        logger.info("Parameter %s/%s set to %r", system_id, parameter_id, value)
        return updated.parameter(parameter_id)

    async def start_simulation_run(
        self, system_id: str, scenario_id: Optional[str], initiated_by: str
    ) -> SimulationRun:
        self._maybe_fail("start_simulation_run", TransportError)
        system = self._require_system(system_id)
        run = lifecycle.create_run(
            system_id,
            initiated_by,
            scenario_id=scenario_id,
            initial_state=[
                ParameterSetting(parameter_id=param.id, value=param.current_value) for param in system.parameters
            ],
            model_version=system.model_version,
            tags=("in-memory",),
        )
        self._runs[run.id] = run
        return run

    def simulation_run(self, run_id: str) -> SimulationRun:
        run = self._runs.get(run_id)
        if run is None:
            raise NotFoundError("simulation run", run_id)
        return run


__all__ = ["InMemoryGateway"]
