"""Leverage points returned by the external analysis service."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal, Optional, Tuple

from pydantic import Field

from .systems import DomainModel

Severity = Literal["Low", "Medium", "High"]


class ImplementationEffort(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    VERY_HIGH = "Very High"


class Reversibility(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    IRREVERSIBLE = "Irreversible"


class RiskEntry(DomainModel):
    category: str
    severity: Severity
    description: str = ""


class Stakeholder(DomainModel):
    name: str
    role: str = ""
    influence: Severity = "Medium"


class LeveragePoint(DomainModel):
    """A proposed intervention. Immutable once returned by the analysis."""

    id: str = Field(..., min_length=1)
    system_id: str
    action: str
    cost: str = ""
    outcome_probability: float = Field(..., ge=0.0, le=1.0)
    time_to_impact: str = ""
    description: str = ""
    positive_side_effects: Tuple[str, ...] = ()
    negative_side_effects: Tuple[str, ...] = ()
    impact_magnitude: str = ""
    prediction_confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    implementation_effort: ImplementationEffort = ImplementationEffort.MEDIUM
    reversibility: Reversibility = Reversibility.MEDIUM
    risks: Tuple[RiskEntry, ...] = ()
    required_resources: Tuple[str, ...] = ()
    stakeholders: Tuple[Stakeholder, ...] = ()
    historical_success_rate: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    last_updated: datetime
    proposed_by_agent_id: Optional[str] = None
    required_skill: Optional[str] = None
    estimated_kpi_impact: Tuple[str, ...] = ()
    required_policy: Optional[str] = None


__all__ = [
    "Severity",
    "ImplementationEffort",
    "Reversibility",
    "RiskEntry",
    "Stakeholder",
    "LeveragePoint",
]
