import asyncio

import pydantic
import pytest

from chaos_theorist.config.schema import GatewayConfig
from chaos_theorist.domain.simulation import RunStatus
from chaos_theorist.errors import AnalysisError, NotFoundError, TransportError, ValidationError
from chaos_theorist.gateway.base import ResourceGateway
from chaos_theorist.gateway.memory import InMemoryGateway

NO_DELAY = GatewayConfig(list_latency_seconds=0, analysis_latency_seconds=0, update_latency_seconds=0)


def test_in_memory_gateway_satisfies_protocol():
    assert isinstance(InMemoryGateway(config=NO_DELAY), ResourceGateway)


def test_lists_seed_catalog():
    systems = asyncio.run(InMemoryGateway(config=NO_DELAY).list_systems())
    assert [s.id for s in systems] == ["financial-market-stability-v1", "supply-chain-resilience-v1"]


def test_update_rejects_out_of_range_and_accepts_valid(make_system):
    gateway = InMemoryGateway([make_system("sys-1")], [], config=NO_DELAY)
    before = asyncio.run(gateway.get_system("sys-1"))

    with pytest.raises(ValidationError):
        asyncio.run(gateway.update_parameter("sys-1", "p1", 150))
    assert asyncio.run(gateway.get_system("sys-1")) == before

    updated = asyncio.run(gateway.update_parameter("sys-1", "p1", 42))
    assert updated.current_value == 42
    after = asyncio.run(gateway.get_system("sys-1"))
    assert after.parameter("p1").current_value == 42
    assert after.content_hash != before.content_hash


def test_returned_systems_are_frozen_and_not_rewritten_by_updates(make_system):
    gateway = InMemoryGateway([make_system("sys-1")], [], config=NO_DELAY)
    before = asyncio.run(gateway.get_system("sys-1"))
    original = before.parameter("p1").current_value

    with pytest.raises(pydantic.ValidationError):
        before.name = "renamed"

    asyncio.run(gateway.update_parameter("sys-1", "p1", 42))
    assert before.parameter("p1").current_value == original
    assert asyncio.run(gateway.get_system("sys-1")) is not before


def test_update_rejects_wrong_kind(make_system):
    gateway = InMemoryGateway([make_system("sys-1")], [], config=NO_DELAY)
    with pytest.raises(ValidationError):
        asyncio.run(gateway.update_parameter("sys-1", "p2", "yes"))
    with pytest.raises(ValidationError):
        asyncio.run(gateway.update_parameter("sys-1", "p3", "turbo"))


def test_missing_system_or_parameter(make_system):
    gateway = InMemoryGateway([make_system("sys-1")], [], config=NO_DELAY)
    with pytest.raises(NotFoundError, match="System with ID ghost not found"):
        asyncio.run(gateway.get_system("ghost"))
    with pytest.raises(NotFoundError) as exc:
        asyncio.run(gateway.update_parameter("sys-1", "nope", 1))
    assert exc.value.parent == "sys-1"


def test_leverage_points_scoped_to_system():
    gateway = InMemoryGateway(config=NO_DELAY)
    points = asyncio.run(gateway.identify_leverage_points("supply-chain-resilience-v1"))
    assert [p.id for p in points] == ["lp-dual-sourcing"]
    with pytest.raises(AnalysisError):
        asyncio.run(gateway.identify_leverage_points("unknown-system"))


@pytest.mark.parametrize(
    "operation,call,error",
    [
        ("list_systems", lambda g: g.list_systems(), TransportError),
        ("identify_leverage_points", lambda g: g.identify_leverage_points("financial-market-stability-v1"), AnalysisError),
        ("update_parameter", lambda g: g.update_parameter("financial-market-stability-v1", "interest-rate", 5.0), TransportError),
        ("start_simulation_run", lambda g: g.start_simulation_run("financial-market-stability-v1", None, "op"), TransportError),
    ],
)
def test_failure_injection(operation, call, error):
    cfg = NO_DELAY.model_copy(update={"fail_on": [operation]})
    with pytest.raises(error):
        asyncio.run(call(InMemoryGateway(config=cfg)))


def test_fail_on_rejects_unknown_operation():
    with pytest.raises(ValueError):
        GatewayConfig(fail_on=["reboot"])


def test_start_simulation_snapshots_parameters():
    gateway = InMemoryGateway(config=NO_DELAY)
    run = asyncio.run(gateway.start_simulation_run("supply-chain-resilience-v1", "scn-1", "ops-lead-007"))
    assert run.status is RunStatus.RUNNING
    assert run.scenario_id == "scn-1"
    assert run.initiated_by == "ops-lead-007"
    assert {s.parameter_id for s in run.initial_state} == {
        "safety-stock-days",
        "supplier-diversification",
        "routing-policy",
    }
    assert gateway.simulation_run(run.id) == run
    with pytest.raises(NotFoundError):
        gateway.simulation_run("sim-missing")
