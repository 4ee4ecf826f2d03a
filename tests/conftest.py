from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

if sys.version_info < (3, 10):
    pytest.exit("Chaos Theorist requires Python 3.10+", returncode=0)

from chaos_theorist.config.schema import ChaosConfig
from chaos_theorist.domain.systems import ChaoticSystemDefinition

STAMP = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _system(system_id: str = "sys-1", **overrides) -> ChaoticSystemDefinition:
    payload = {
        "id": system_id,
        "name": f"System {system_id}",
        "created_at": STAMP,
        "last_modified": STAMP,
        "owner_id": "tester",
        "status": "Active",
        "parameters": [
            {
                "id": "p1",
                "name": "Gain",
                "current_value": 10,
                "data_type": "number",
                "min_value": 0,
                "max_value": 100,
            },
            {"id": "p2", "name": "Enabled", "current_value": True, "data_type": "boolean"},
            {
                "id": "p3",
                "name": "Mode",
                "current_value": "auto",
                "data_type": "enum",
                "enum_values": ["auto", "manual"],
            },
        ],
    }
    payload.update(overrides)
    return ChaoticSystemDefinition.model_validate(payload).with_content_hash()


@pytest.fixture
def make_system():
    """Factory for small systems: number p1 in [0, 100], boolean p2, enum p3."""
    return _system


@pytest.fixture
def fast_config(tmp_path) -> ChaosConfig:
    """Configuration with every simulated delay turned off."""
    return ChaosConfig.model_validate(
        {
            "gateway": {
                "list_latency_seconds": 0,
                "analysis_latency_seconds": 0,
                "update_latency_seconds": 0,
            },
            "llm": {"offline_delay_seconds": 0},
            "reporting": {"intervention_log": str(tmp_path / "interventions.jsonl")},
        }
    )
