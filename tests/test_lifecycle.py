from datetime import timedelta

import pytest

from chaos_theorist.domain import lifecycle
from chaos_theorist.domain.simulation import ApplicationStatus, RunResults, RunStatus
from chaos_theorist.errors import InvalidTransitionError, ValidationError

from conftest import STAMP


def _running():
    return lifecycle.create_run("sys-1", "tester", now=STAMP)


def test_interactive_start_is_running_with_one_start_event():
    run = _running()
    assert run.status is RunStatus.RUNNING
    assert [e.type for e in run.events] == ["start"]
    assert run.id.startswith("sim-")
    assert run.end_time is None


def test_scheduled_run_waits_for_begin():
    run = lifecycle.create_run("sys-1", "tester", scheduled=True, now=STAMP)
    assert run.status is RunStatus.PENDING
    assert not run.has_started
    with pytest.raises(InvalidTransitionError):
        lifecycle.complete(run, RunResults())
    with pytest.raises(InvalidTransitionError):
        lifecycle.cancel(run)

    started = lifecycle.begin(run, now=STAMP + timedelta(seconds=5))
    assert started.status is RunStatus.RUNNING
    assert started.start_time == STAMP + timedelta(seconds=5)
    assert [e.type for e in started.events] == ["scheduled", "start"]


def test_complete_sets_end_time_and_duration():
    run = lifecycle.complete(
        _running(), RunResults(overall_impact="Stabilised"), now=STAMP + timedelta(seconds=2, milliseconds=500)
    )
    assert run.status is RunStatus.COMPLETED
    assert run.end_time == STAMP + timedelta(seconds=2, milliseconds=500)
    assert run.duration_ms == 2500
    assert run.results.overall_impact == "Stabilised"
    assert run.events[-1].type == "complete"


def test_sub_millisecond_start_rounds_duration_up_and_pins_end_time():
    scheduled = lifecycle.create_run("sys-1", "tester", scheduled=True, now=STAMP)
    started = lifecycle.begin(scheduled, now=STAMP + timedelta(microseconds=300))
    finished_at = STAMP + timedelta(microseconds=2100)

    run = lifecycle.complete(started, RunResults(), now=finished_at)

    assert run.duration_ms == 2
    assert run.end_time - run.start_time == timedelta(milliseconds=run.duration_ms)
    assert run.end_time >= finished_at
    assert run.events[-1].timestamp == run.end_time


@pytest.mark.parametrize(
    "finish",
    [
        lambda run: lifecycle.complete(run, RunResults()),
        lambda run: lifecycle.fail(run, "diverged"),
        lambda run: lifecycle.cancel(run),
    ],
)
def test_terminal_runs_reject_everything(finish):
    done = finish(_running())
    assert done.status.is_terminal
    with pytest.raises(InvalidTransitionError):
        lifecycle.complete(done, RunResults())
    with pytest.raises(InvalidTransitionError):
        lifecycle.cancel(done)
    with pytest.raises(InvalidTransitionError):
        lifecycle.record_event(done, "note", "too late")
    with pytest.raises(InvalidTransitionError):
        lifecycle.record_metric(done, "m", 1.0)
    with pytest.raises(InvalidTransitionError):
        lifecycle.plan_leverage_point(done, "lp-1")


def test_failure_keeps_reason():
    run = lifecycle.fail(_running(), "solver diverged", now=STAMP + timedelta(seconds=1))
    assert run.status is RunStatus.FAILED
    assert run.events[-1].description == "solver diverged"
    assert "solver diverged" in run.results.overall_impact


def test_history_is_append_only_per_id():
    run = _running()
    run = lifecycle.record_metric(run, "volatility", 1.0, now=STAMP + timedelta(seconds=1))
    run = lifecycle.record_metric(run, "volatility", 2.0, now=STAMP + timedelta(seconds=2))
    run = lifecycle.record_metric(run, "liquidity", 9.0, now=STAMP + timedelta(seconds=1))
    run = lifecycle.record_parameter(run, "rate", 4.5, now=STAMP + timedelta(seconds=1))

    assert [p.value for p in run.series("metric", "volatility")] == [1.0, 2.0]
    assert [p.value for p in run.series("metric", "liquidity")] == [9.0]
    assert [p.value for p in run.series("parameter", "rate")] == [4.5]
    assert run.series("metric", "unknown") == ()

    with pytest.raises(ValidationError):
        lifecycle.record_metric(run, "volatility", 3.0, now=STAMP)


def test_leverage_point_moves_from_planned_only():
    run = lifecycle.plan_leverage_point(_running(), "lp-1", agent_id="agent-7")
    assert run.applied_leverage_points[0].status is ApplicationStatus.PLANNED

    run = lifecycle.mark_leverage_point(run, "lp-1", ApplicationStatus.EXECUTED)
    assert run.applied_leverage_points[0].status is ApplicationStatus.EXECUTED
    assert run.events[-1].type == "intervention_executed"

    with pytest.raises(ValidationError):
        lifecycle.mark_leverage_point(run, "lp-1", ApplicationStatus.FAILED)
    with pytest.raises(ValidationError):
        lifecycle.mark_leverage_point(run, "lp-1", ApplicationStatus.PLANNED)


def test_events_accumulate_while_running():
    run = lifecycle.record_event(_running(), "checkpoint", "halfway", data={"step": 50})
    assert run.events[-1].data == {"step": 50}
    assert len(run.events) == 2
