"""Simulation run records.

State changes go through :mod:`chaos_theorist.domain.lifecycle`; the models
here only describe shape.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Literal, Optional, Tuple

from pydantic import Field

from .leverage import RiskEntry
from .systems import DomainModel, ParameterValue


class RunStatus(str, Enum):
    PENDING = "Pending"
    RUNNING = "Running"
    COMPLETED = "Completed"
    FAILED = "Failed"
    CANCELLED = "Cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({RunStatus.COMPLETED, RunStatus.FAILED, RunStatus.CANCELLED})


class ApplicationStatus(str, Enum):
    PLANNED = "planned"
    EXECUTED = "executed"
    FAILED = "failed"


class ParameterSetting(DomainModel):
    parameter_id: str
    value: ParameterValue


class AppliedLeveragePoint(DomainModel):
    leverage_point_id: str
    application_time: datetime
    agent_id: Optional[str] = None
    status: ApplicationStatus = ApplicationStatus.PLANNED


class RunResults(DomainModel):
    overall_impact: str = "Processing..."
    risk_assessment: Tuple[RiskEntry, ...] = ()
    achieved_goals: Tuple[str, ...] = ()
    unintended_consequences: Tuple[str, ...] = ()


class SeriesPoint(DomainModel):
    timestamp: datetime
    value: ParameterValue


class Series(DomainModel):
    key: str
    data: Tuple[SeriesPoint, ...] = ()


class RunEvent(DomainModel):
    timestamp: datetime
    type: str
    description: str = ""
    data: Optional[Dict[str, Any]] = None


class ComputeResources(DomainModel):
    cpu_time_seconds: Optional[float] = None
    memory_gb: Optional[float] = None
    gpu_time_seconds: Optional[float] = None
    cloud_provider: Optional[str] = None
    instance_type: Optional[str] = None


class Cost(DomainModel):
    amount: float
    currency: str


class SimulationRun(DomainModel):
    id: str = Field(..., min_length=1)
    system_id: str
    initiated_by: str
    scenario_id: Optional[str] = None
    start_time: datetime
    end_time: Optional[datetime] = None
    duration_ms: Optional[int] = None
    status: RunStatus = RunStatus.PENDING
    initial_state: Tuple[ParameterSetting, ...] = ()
    applied_leverage_points: Tuple[AppliedLeveragePoint, ...] = ()
    results: RunResults = Field(default_factory=RunResults)
    metrics_history: Tuple[Series, ...] = ()
    parameters_history: Tuple[Series, ...] = ()
    events: Tuple[RunEvent, ...] = ()
    model_version: str = "1.0"
    compute_resources_used: Optional[ComputeResources] = None
    cost: Optional[Cost] = None
    audit_trail_hash: Optional[str] = None
    notes: Optional[str] = None
    tags: Tuple[str, ...] = ()
    output_log_url: Optional[str] = None

    @property
    def has_started(self) -> bool:
        return any(event.type == "start" for event in self.events)

    def series(self, kind: Literal["metric", "parameter"], key: str) -> Tuple[SeriesPoint, ...]:
        pool = self.metrics_history if kind == "metric" else self.parameters_history
        for entry in pool:
            if entry.key == key:
                return entry.data
        return ()


__all__ = [
    "RunStatus",
    "TERMINAL_STATUSES",
    "ApplicationStatus",
    "ParameterSetting",
    "AppliedLeveragePoint",
    "RunResults",
    "SeriesPoint",
    "Series",
    "RunEvent",
    "ComputeResources",
    "Cost",
    "SimulationRun",
]
