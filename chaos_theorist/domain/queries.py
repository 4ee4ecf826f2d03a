from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from .systems import AlertRule, ChaoticSystemDefinition, SecurityLevel, SystemMetric, SystemParameter


def find_system(systems: Iterable[ChaoticSystemDefinition], system_id: Optional[str]) -> Optional[ChaoticSystemDefinition]:
    if system_id is None:
        return None
    return next((system for system in systems if system.id == system_id), None)


def key_parameters(system: ChaoticSystemDefinition, limit: int = 4) -> List[SystemParameter]:
    """High-security or leverage-candidate parameters, in declaration order."""
    picked = [
        param
        for param in system.parameters
        if param.security_level is SecurityLevel.HIGH or param.is_leverage_candidate
    ]
    return picked[: max(0, limit)]


def _rule_fires(rule: AlertRule, value: object) -> bool:
    if rule.operator in (">", "<"):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        if isinstance(rule.value, str):
            return False
        return value > rule.value if rule.operator == ">" else value < rule.value
    matches = value == rule.value
    return matches if rule.operator == "=" else not matches


def metric_alert_level(metric: SystemMetric) -> Optional[str]:
    """``"critical"``, ``"warning"`` or ``None`` for the metric's current value."""
    thresholds = metric.alert_thresholds
    if thresholds is None:
        return None
    if thresholds.critical and _rule_fires(thresholds.critical, metric.current_value):
        return "critical"
    if thresholds.warning and _rule_fires(thresholds.warning, metric.current_value):
        return "warning"
    return None


def within_target(metric: SystemMetric) -> Optional[bool]:
    """Whether the current value sits inside the target band; ``None`` when not applicable."""
    target = metric.target
    value = metric.current_value
    if target is None or isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if target.min is None and target.max is None:
        if target.value is None:
            return None
        return value == target.value
    if target.min is not None and value < target.min:
        return False
    if target.max is not None and value > target.max:
        return False
    return True


def alerting_metrics(system: ChaoticSystemDefinition) -> Sequence[SystemMetric]:
    return [metric for metric in system.metrics if metric_alert_level(metric) is not None]
