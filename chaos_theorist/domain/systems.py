"""Immutable value types describing a monitored chaotic system.

A system owns ordered parameters (tunable inputs), ordered metrics (observed
outputs) and feedback loops (causal edges used as analysis input). Parameter
values are a tagged union: ``data_type`` names the kind and every write is
checked against it.
"""

from __future__ import annotations

import hashlib
import json
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..errors import ValidationError

ParameterValue = Union[bool, int, float, str]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DomainModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", use_enum_values=False)


class SystemStatus(str, Enum):
    DRAFT = "Draft"
    ACTIVE = "Active"
    UNDER_REVIEW = "Under Review"
    ARCHIVED = "Archived"
    RETIRED = "Retired"


class DataType(str, Enum):
    NUMBER = "number"
    BOOLEAN = "boolean"
    STRING = "string"
    ENUM = "enum"


class SecurityLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class SecurityClassification(str, Enum):
    PUBLIC = "public"
    CONFIDENTIAL = "confidential"
    RESTRICTED = "restricted"


class LoopPolarity(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"


def describe_kind(value: object) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    return type(value).__name__


_TRUE_WORDS = frozenset({"true", "yes", "on", "1"})
_FALSE_WORDS = frozenset({"false", "no", "off", "0"})


def parse_flag(value: object) -> Optional[bool]:
    """Read a boolean from a bool or a yes/no style word; ``None`` when it is neither."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_WORDS:
            return True
        if lowered in _FALSE_WORDS:
            return False
    return None


def value_problem(
    data_type: DataType,
    value: object,
    *,
    min_value: Optional[float] = None,
    max_value: Optional[float] = None,
    enum_values: Iterable[str] = (),
) -> Optional[str]:
    """Return a human-readable reason ``value`` is not acceptable, or ``None``."""
    kind = describe_kind(value)
    if data_type is DataType.NUMBER:
        if kind != "number":
            return f"expected a number, got {kind}"
        if min_value is not None and max_value is not None and not (min_value <= value <= max_value):
            return f"{value} is outside the allowed range [{min_value}, {max_value}]"
        return None
    if data_type is DataType.BOOLEAN:
        return None if kind == "boolean" else f"expected a boolean, got {kind}"
    if data_type is DataType.STRING:
        return None if kind == "string" else f"expected a string, got {kind}"
    if kind != "string":
        return f"expected one of the enum values, got {kind}"
    allowed = list(enum_values)
    if value not in allowed:
        return f"{value!r} is not one of {', '.join(allowed)}"
    return None


class ParameterDependency(DomainModel):
    parameter_id: str
    type: Literal["influences", "is-influenced-by"]


class SystemParameter(DomainModel):
    id: str = Field(..., min_length=1)
    name: str
    description: str = ""
    current_value: ParameterValue
    unit: str = ""
    data_type: DataType
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    step: Optional[float] = None
    enum_values: Tuple[str, ...] = ()
    is_leverage_candidate: bool = False
    dependencies: Tuple[ParameterDependency, ...] = ()
    security_level: SecurityLevel = SecurityLevel.LOW
    governance_policy_id: Optional[str] = None

    @model_validator(mode="after")
    def validate_value(self) -> "SystemParameter":
        if self.data_type is not DataType.NUMBER and (
            self.min_value is not None or self.max_value is not None or self.step is not None
        ):
            raise ValueError(f"parameter {self.id}: min/max/step only apply to numeric parameters")
        if self.min_value is not None and self.max_value is not None and self.min_value > self.max_value:
            raise ValueError(f"parameter {self.id}: min_value exceeds max_value")
        problem = self.problem_with(self.current_value)
        if problem:
            raise ValueError(f"parameter {self.id}: {problem}")
        return self

    def problem_with(self, value: object) -> Optional[str]:
        return value_problem(
            self.data_type,
            value,
            min_value=self.min_value,
            max_value=self.max_value,
            enum_values=self.enum_values,
        )

    def check_value(self, value: object) -> None:
        """Raise :class:`ValidationError` when ``value`` cannot be written here."""
        problem = self.problem_with(value)
        if problem:
            raise ValidationError(f"Invalid value for parameter {self.id}: {problem}", parameter_id=self.id)

    def with_value(self, value: ParameterValue) -> "SystemParameter":
        self.check_value(value)
        return self.model_copy(update={"current_value": value})


class Observation(DomainModel):
    timestamp: datetime
    value: ParameterValue


class TargetBand(DomainModel):
    min: Optional[float] = None
    max: Optional[float] = None
    value: Optional[float] = None
    unit: str = ""


class AlertRule(DomainModel):
    operator: Literal[">", "<", "=", "!="]
    value: Union[float, str]


class AlertThresholds(DomainModel):
    warning: Optional[AlertRule] = None
    critical: Optional[AlertRule] = None


class SystemMetric(DomainModel):
    id: str = Field(..., min_length=1)
    name: str
    description: str = ""
    current_value: ParameterValue
    unit: str = ""
    target: Optional[TargetBand] = None
    history: Tuple[Observation, ...] = ()
    alert_thresholds: Optional[AlertThresholds] = None
    is_derived: bool = False
    derivation_method: Optional[str] = None
    data_quality_score: float = Field(default=1.0, ge=0.0, le=1.0)
    observation_frequency: str = ""

    @field_validator("history")
    @classmethod
    def validate_history_order(cls, value: Tuple[Observation, ...]) -> Tuple[Observation, ...]:
        for earlier, later in zip(value, value[1:]):
            if later.timestamp < earlier.timestamp:
                raise ValueError("metric history timestamps must be non-decreasing")
        return value

    def with_observation(self, timestamp: datetime, value: ParameterValue) -> "SystemMetric":
        if self.history and timestamp < self.history[-1].timestamp:
            raise ValidationError(f"Observation for metric {self.id} is older than the latest entry")
        entry = Observation(timestamp=timestamp, value=value)
        return self.model_copy(update={"history": self.history + (entry,), "current_value": value})


class FeedbackLoop(DomainModel):
    id: str
    name: str
    description: str = ""
    polarity: LoopPolarity
    source_id: str
    target_id: str
    strength: float
    delay: str = ""
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)
    is_dynamic: bool = False


class ExternalDataSource(DomainModel):
    name: str
    url: str
    last_sync: datetime
    status: Literal["active", "inactive", "error"] = "active"


class AccessControl(DomainModel):
    public: bool = False
    shared_with_users: Tuple[str, ...] = ()
    shared_with_groups: Tuple[str, ...] = ()
    rbac_policy_id: Optional[str] = None


class MonitoringConfig(DomainModel):
    interval_seconds: int = Field(default=60, ge=1)
    alert_on_anomaly: bool = True
    anomaly_detection_model: str = ""


def compute_content_hash(parameters: Iterable[SystemParameter]) -> str:
    """Digest of every parameter's identity, tag and current value."""
    payload: List[List[object]] = [
        [param.id, param.data_type.value, describe_kind(param.current_value), param.current_value]
        for param in parameters
    ]
    encoded = json.dumps(payload, separators=(",", ":"), sort_keys=True)
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()


class ChaoticSystemDefinition(DomainModel):
    id: str = Field(..., min_length=1)
    name: str
    description: str = ""
    created_at: datetime
    last_modified: datetime
    owner_id: str
    parameters: Tuple[SystemParameter, ...] = ()
    metrics: Tuple[SystemMetric, ...] = ()
    feedback_loops: Tuple[FeedbackLoop, ...] = ()
    status: SystemStatus = SystemStatus.DRAFT
    schema_version: str = "1.0"
    tags: Tuple[str, ...] = ()
    scope: str = ""
    external_data_sources: Tuple[ExternalDataSource, ...] = ()
    access_control: AccessControl = Field(default_factory=AccessControl)
    simulation_model_ref: str = ""
    model_version: str = "1.0"
    monitoring_agents: Tuple[str, ...] = ()
    monitoring_config: MonitoringConfig = Field(default_factory=MonitoringConfig)
    security_classification: SecurityClassification = SecurityClassification.CONFIDENTIAL
    compliance_standards: Tuple[str, ...] = ()
    content_hash: str = ""

    @model_validator(mode="after")
    def validate_identities(self) -> "ChaoticSystemDefinition":
        for label, items in (("parameter", self.parameters), ("metric", self.metrics)):
            ids = [item.id for item in items]
            duplicates = sorted({item for item in ids if ids.count(item) > 1})
            if duplicates:
                raise ValueError(f"system {self.id}: duplicate {label} ids {', '.join(duplicates)}")
        return self

    def parameter(self, parameter_id: str) -> Optional[SystemParameter]:
        return next((param for param in self.parameters if param.id == parameter_id), None)

    def metric(self, metric_id: str) -> Optional[SystemMetric]:
        return next((metric for metric in self.metrics if metric.id == metric_id), None)

    def with_content_hash(self) -> "ChaoticSystemDefinition":
        return self.model_copy(update={"content_hash": compute_content_hash(self.parameters)})

    def with_parameter_value(
        self,
        parameter_id: str,
        value: ParameterValue,
        *,
        modified_at: Optional[datetime] = None,
    ) -> "ChaoticSystemDefinition":
        """Return a copy with one parameter replaced and the content hash recomputed.

        The caller is expected to have looked the parameter up already; an
        unknown id raises ``KeyError``.
        """
        if self.parameter(parameter_id) is None:
            raise KeyError(parameter_id)
        parameters = tuple(
            param.with_value(value) if param.id == parameter_id else param for param in self.parameters
        )
        updated = self.model_copy(
            update={"parameters": parameters, "last_modified": modified_at or utcnow()}
        )
        return updated.with_content_hash()


__all__ = [
    "ParameterValue",
    "utcnow",
    "DomainModel",
    "SystemStatus",
    "DataType",
    "SecurityLevel",
    "SecurityClassification",
    "LoopPolarity",
    "describe_kind",
    "parse_flag",
    "value_problem",
    "ParameterDependency",
    "SystemParameter",
    "Observation",
    "TargetBand",
    "AlertRule",
    "AlertThresholds",
    "SystemMetric",
    "FeedbackLoop",
    "ExternalDataSource",
    "AccessControl",
    "MonitoringConfig",
    "compute_content_hash",
    "ChaoticSystemDefinition",
]
