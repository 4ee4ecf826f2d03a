"""Records for the store's secondary resource kinds.

These are carried so the store can hold scenarios, agents, tasks, identities
and token definitions alongside systems; the fields are the ones the core
reads or displays.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional, Tuple

from pydantic import Field

from .systems import DomainModel
from .simulation import ParameterSetting


class PlannedIntervention(DomainModel):
    leverage_point_id: str
    timing: Literal["at_start", "after_delay", "on_condition"] = "at_start"
    delay_seconds: Optional[int] = Field(default=None, ge=0)
    condition_expression: Optional[str] = None
    agent_id: Optional[str] = None


class SimulationScenario(DomainModel):
    id: str
    name: str
    description: str = ""
    system_id: str
    created_by: str
    created_at: datetime
    initial_conditions: Tuple[ParameterSetting, ...] = ()
    planned_interventions: Tuple[PlannedIntervention, ...] = ()
    expected_outcomes: Tuple[str, ...] = ()
    key_metrics_to_monitor: Tuple[str, ...] = ()
    status: Literal["draft", "active", "archived"] = "draft"
    simulation_runs: Tuple[str, ...] = ()


class AgentProfile(DomainModel):
    id: str
    name: str
    description: str = ""
    digital_identity_id: str
    status: Literal["active", "paused", "offline", "learning"] = "active"
    primary_objective: str = ""
    risk_tolerance: Literal["low", "medium", "high"] = "medium"
    access_scope: Tuple[str, ...] = ()
    ai_model_ref: str = ""


class AgentTask(DomainModel):
    id: str
    name: str
    executor_agent_id: str
    target_system_id: str
    status: Literal["pending", "running", "completed", "failed", "paused"] = "pending"
    initiated_by: str
    created_at: datetime
    predicted_impact: Optional[str] = None
    actual_impact: Optional[str] = None


class DigitalIdentity(DomainModel):
    id: str
    name: str
    type: Literal["user", "agent", "contract", "organization"]
    public_key: str
    status: Literal["active", "suspended", "revoked"] = "active"
    roles: Tuple[str, ...] = ()
    created_at: datetime


class TokenDefinition(DomainModel):
    id: str
    name: str
    symbol: str
    type: Literal["fungible", "non-fungible", "hybrid"] = "fungible"
    underlying_asset: str = ""
    status: Literal["active", "retired", "pending"] = "pending"
    authorized_agents: Tuple[str, ...] = ()


__all__ = [
    "PlannedIntervention",
    "SimulationScenario",
    "AgentProfile",
    "AgentTask",
    "DigitalIdentity",
    "TokenDefinition",
]
