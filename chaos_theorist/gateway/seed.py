"""Built-in catalog served by :class:`InMemoryGateway`.

Two reference systems with their parameters, metrics, feedback loops and the
leverage points the analysis service proposes for them.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Tuple

from ..domain.leverage import LeveragePoint
from ..domain.systems import ChaoticSystemDefinition

_EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _history(values: List[float], *, step_hours: int = 24) -> List[Dict[str, Any]]:
    return [
        {"timestamp": _EPOCH + timedelta(hours=step_hours * index), "value": value}
        for index, value in enumerate(values)
    ]


SYSTEM_DEFINITIONS: Dict[str, Dict[str, Any]] = {
    "financial-market-stability-v1": {
        "id": "financial-market-stability-v1",
        "name": "Global Financial Market Stability",
        "description": "Interbank lending, leverage and liquidity dynamics across systemic institutions.",
        "created_at": _EPOCH,
        "last_modified": _EPOCH + timedelta(days=30),
        "owner_id": "sysadmin-001",
        "status": "Active",
        "schema_version": "2.1",
        "tags": ["finance", "systemic-risk"],
        "scope": "global",
        "simulation_model_ref": "models/fin-stability/agent-based",
        "model_version": "3.2.0",
        "monitoring_agents": ["agent-risk-sentinel"],
        "monitoring_config": {
            "interval_seconds": 300,
            "alert_on_anomaly": True,
            "anomaly_detection_model": "isolation-forest-v2",
        },
        "security_classification": "confidential",
        "compliance_standards": ["Basel III"],
        "access_control": {"public": False, "shared_with_groups": ["risk-office"]},
        "external_data_sources": [
            {
                "name": "Central bank feed",
                "url": "https://data.example.org/cb",
                "last_sync": _EPOCH + timedelta(days=30),
                "status": "active",
            }
        ],
        "parameters": [
            {
                "id": "interest-rate",
                "name": "Policy Interest Rate",
                "description": "Benchmark rate set by the central bank.",
                "current_value": 4.5,
                "unit": "%",
                "data_type": "number",
                "min_value": 0.0,
                "max_value": 20.0,
                "step": 0.25,
                "is_leverage_candidate": True,
                "security_level": "high",
                "dependencies": [{"parameter_id": "leverage-ratio", "type": "influences"}],
            },
            {
                "id": "leverage-ratio",
                "name": "Maximum Leverage Ratio",
                "current_value": 30,
                "unit": "x",
                "data_type": "number",
                "min_value": 1.0,
                "max_value": 100.0,
                "step": 1.0,
                "is_leverage_candidate": True,
                "security_level": "medium",
                "dependencies": [{"parameter_id": "interest-rate", "type": "is-influenced-by"}],
            },
            {
                "id": "circuit-breakers-enabled",
                "name": "Market Circuit Breakers",
                "current_value": True,
                "data_type": "boolean",
                "security_level": "high",
            },
            {
                "id": "regulatory-regime",
                "name": "Regulatory Regime",
                "current_value": "standard",
                "data_type": "enum",
                "enum_values": ["light", "standard", "strict"],
                "security_level": "medium",
            },
        ],
        "metrics": [
            {
                "id": "volatility-index",
                "name": "Volatility Index",
                "current_value": 27.0,
                "unit": "pts",
                "target": {"max": 20.0, "unit": "pts"},
                "history": _history([18.0, 21.5, 24.0, 27.0]),
                "alert_thresholds": {
                    "warning": {"operator": ">", "value": 25.0},
                    "critical": {"operator": ">", "value": 40.0},
                },
                "data_quality_score": 0.93,
                "observation_frequency": "daily",
            },
            {
                "id": "liquidity-coverage",
                "name": "Liquidity Coverage Ratio",
                "current_value": 118.0,
                "unit": "%",
                "target": {"min": 100.0, "unit": "%"},
                "history": _history([131.0, 127.0, 122.0, 118.0]),
                "alert_thresholds": {"warning": {"operator": "<", "value": 110.0}},
                "is_derived": True,
                "derivation_method": "HQLA / 30-day net outflows",
                "data_quality_score": 0.88,
                "observation_frequency": "daily",
            },
        ],
        "feedback_loops": [
            {
                "id": "fl-deleveraging-spiral",
                "name": "Deleveraging spiral",
                "description": "Falling asset prices force deleveraging, which depresses prices further.",
                "polarity": "positive",
                "source_id": "leverage-ratio",
                "target_id": "volatility-index",
                "strength": 0.8,
                "delay": "P2D",
                "confidence": 0.7,
                "is_dynamic": True,
            },
            {
                "id": "fl-rate-dampening",
                "name": "Rate dampening",
                "polarity": "negative",
                "source_id": "interest-rate",
                "target_id": "leverage-ratio",
                "strength": 0.5,
                "delay": "P30D",
                "confidence": 0.6,
            },
        ],
    },
    "supply-chain-resilience-v1": {
        "id": "supply-chain-resilience-v1",
        "name": "Supply Chain Resilience",
        "description": "Inventory buffers, supplier concentration and shipping delays in a multi-tier network.",
        "created_at": _EPOCH,
        "last_modified": _EPOCH + timedelta(days=12),
        "owner_id": "ops-lead-007",
        "status": "Under Review",
        "schema_version": "2.1",
        "tags": ["logistics"],
        "scope": "regional",
        "simulation_model_ref": "models/supply-chain/system-dynamics",
        "model_version": "1.4.1",
        "security_classification": "restricted",
        "parameters": [
            {
                "id": "safety-stock-days",
                "name": "Safety Stock",
                "current_value": 14,
                "unit": "days",
                "data_type": "number",
                "min_value": 0.0,
                "max_value": 90.0,
                "step": 1.0,
                "is_leverage_candidate": True,
                "security_level": "low",
            },
            {
                "id": "supplier-diversification",
                "name": "Supplier Diversification Index",
                "current_value": 0.35,
                "data_type": "number",
                "min_value": 0.0,
                "max_value": 1.0,
                "step": 0.05,
                "is_leverage_candidate": True,
                "security_level": "medium",
            },
            {
                "id": "routing-policy",
                "name": "Routing Policy",
                "current_value": "cost-optimized",
                "data_type": "string",
                "security_level": "low",
            },
        ],
        "metrics": [
            {
                "id": "fill-rate",
                "name": "Order Fill Rate",
                "current_value": 0.91,
                "unit": "ratio",
                "target": {"min": 0.95, "unit": "ratio"},
                "history": _history([0.97, 0.95, 0.93, 0.91], step_hours=168),
                "alert_thresholds": {
                    "warning": {"operator": "<", "value": 0.95},
                    "critical": {"operator": "<", "value": 0.85},
                },
                "data_quality_score": 0.97,
                "observation_frequency": "weekly",
            }
        ],
        "feedback_loops": [
            {
                "id": "fl-bullwhip",
                "name": "Bullwhip effect",
                "polarity": "positive",
                "source_id": "safety-stock-days",
                "target_id": "fill-rate",
                "strength": 0.6,
                "delay": "P14D",
            }
        ],
    },
}


LEVERAGE_POINT_DEFINITIONS: List[Dict[str, Any]] = [
    {
        "id": "lp-countercyclical-buffer",
        "system_id": "financial-market-stability-v1",
        "action": "Raise countercyclical capital buffer by 1%",
        "cost": "$2.1B in foregone lending",
        "outcome_probability": 0.72,
        "time_to_impact": "6-12 months",
        "description": "Builds loss-absorbing capacity ahead of a downturn.",
        "positive_side_effects": ["Lower systemic leverage"],
        "negative_side_effects": ["Tighter credit for SMEs"],
        "impact_magnitude": "High",
        "prediction_confidence": 0.8,
        "implementation_effort": "Medium",
        "reversibility": "High",
        "risks": [{"category": "Economic", "severity": "Medium", "description": "Credit contraction"}],
        "required_resources": ["Regulatory rulemaking"],
        "stakeholders": [{"name": "Central bank", "role": "Regulator", "influence": "High"}],
        "historical_success_rate": 0.65,
        "last_updated": _EPOCH + timedelta(days=29),
        "estimated_kpi_impact": ["volatility-index -15%"],
    },
    {
        "id": "lp-liquidity-backstop",
        "system_id": "financial-market-stability-v1",
        "action": "Open standing repo facility for primary dealers",
        "cost": "Contingent balance-sheet exposure",
        "outcome_probability": 0.58,
        "time_to_impact": "Immediate",
        "implementation_effort": "High",
        "reversibility": "Medium",
        "risks": [{"category": "Moral hazard", "severity": "High", "description": "Encourages risk taking"}],
        "last_updated": _EPOCH + timedelta(days=29),
        "proposed_by_agent_id": "agent-risk-sentinel",
    },
    {
        "id": "lp-dual-sourcing",
        "system_id": "supply-chain-resilience-v1",
        "action": "Dual-source the top five critical components",
        "cost": "+4% unit cost",
        "outcome_probability": 0.81,
        "time_to_impact": "3-6 months",
        "implementation_effort": "Very High",
        "reversibility": "Low",
        "required_resources": ["Procurement team", "Supplier audits"],
        "last_updated": _EPOCH + timedelta(days=10),
    },
]


def build_systems() -> Tuple[ChaoticSystemDefinition, ...]:
    return tuple(
        ChaoticSystemDefinition.model_validate(payload).with_content_hash()
        for payload in SYSTEM_DEFINITIONS.values()
    )


def build_leverage_points() -> Tuple[LeveragePoint, ...]:
    return tuple(LeveragePoint.model_validate(payload) for payload in LEVERAGE_POINT_DEFINITIONS)


__all__ = ["SYSTEM_DEFINITIONS", "LEVERAGE_POINT_DEFINITIONS", "build_systems", "build_leverage_points"]
