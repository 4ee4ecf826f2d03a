"""State machine for a single simulation run.

``Pending -> Running -> {Completed, Failed, Cancelled}``. Every function here
is pure: it takes a frozen :class:`SimulationRun` and returns a new one.
Terminal runs reject every further transition with
:class:`InvalidTransitionError`; nothing is silently ignored.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, Optional, Tuple

from ..errors import InvalidTransitionError, ValidationError
from .simulation import (
    AppliedLeveragePoint,
    ApplicationStatus,
    ParameterSetting,
    RunEvent,
    RunResults,
    RunStatus,
    Series,
    SeriesPoint,
    SimulationRun,
)
from .systems import ParameterValue, utcnow


def new_run_id() -> str:
    return f"sim-{uuid.uuid4().hex[:12]}"


def _require(run: SimulationRun, attempted: str, *allowed: RunStatus) -> None:
    if run.status not in allowed:
        raise InvalidTransitionError(run.id, run.status.value, attempted)


def _with_event(
    run: SimulationRun,
    event_type: str,
    description: str,
    now: datetime,
    data: Optional[Dict[str, Any]] = None,
) -> Tuple[RunEvent, ...]:
    return run.events + (RunEvent(timestamp=now, type=event_type, description=description, data=data),)


def create_run(
    system_id: str,
    initiated_by: str,
    *,
    scenario_id: Optional[str] = None,
    run_id: Optional[str] = None,
    initial_state: Iterable[ParameterSetting] = (),
    model_version: str = "1.0",
    tags: Iterable[str] = (),
    scheduled: bool = False,
    now: Optional[datetime] = None,
) -> SimulationRun:
    """Create a run.

    Interactive starts go straight to ``Running`` with a single ``start``
    event. ``scheduled=True`` leaves the run ``Pending`` until :func:`begin`.
    """
    now = now or utcnow()
    if scheduled:
        status = RunStatus.PENDING
        event = RunEvent(timestamp=now, type="scheduled", description="Simulation scheduled")
    else:
        status = RunStatus.RUNNING
        event = RunEvent(timestamp=now, type="start", description="Simulation started")
    return SimulationRun(
        id=run_id or new_run_id(),
        system_id=system_id,
        initiated_by=initiated_by,
        scenario_id=scenario_id,
        start_time=now,
        status=status,
        initial_state=tuple(initial_state),
        events=(event,),
        model_version=model_version,
        tags=tuple(tags),
    )


def begin(run: SimulationRun, *, now: Optional[datetime] = None) -> SimulationRun:
    _require(run, "begin", RunStatus.PENDING)
    now = now or utcnow()
    return run.model_copy(
        update={
            "status": RunStatus.RUNNING,
            "start_time": now,
            "events": _with_event(run, "start", "Simulation started", now),
        }
    )


def record_event(
    run: SimulationRun,
    event_type: str,
    description: str,
    *,
    data: Optional[Dict[str, Any]] = None,
    now: Optional[datetime] = None,
) -> SimulationRun:
    _require(run, "record an event", RunStatus.PENDING, RunStatus.RUNNING)
    return run.model_copy(update={"events": _with_event(run, event_type, description, now or utcnow(), data)})


def _append_point(
    pool: Tuple[Series, ...], key: str, value: ParameterValue, now: datetime
) -> Tuple[Series, ...]:
    point = SeriesPoint(timestamp=now, value=value)
    for index, entry in enumerate(pool):
        if entry.key != key:
            continue
        if entry.data and now < entry.data[-1].timestamp:
            raise ValidationError(f"Observation for {key} is older than the latest entry")
        updated = entry.model_copy(update={"data": entry.data + (point,)})
        return pool[:index] + (updated,) + pool[index + 1 :]
    return pool + (Series(key=key, data=(point,)),)


def record_metric(
    run: SimulationRun, metric_id: str, value: ParameterValue, *, now: Optional[datetime] = None
) -> SimulationRun:
    _require(run, "record a metric", RunStatus.RUNNING)
    pool = _append_point(run.metrics_history, metric_id, value, now or utcnow())
    return run.model_copy(update={"metrics_history": pool})


def record_parameter(
    run: SimulationRun, parameter_id: str, value: ParameterValue, *, now: Optional[datetime] = None
) -> SimulationRun:
    _require(run, "record a parameter", RunStatus.RUNNING)
    pool = _append_point(run.parameters_history, parameter_id, value, now or utcnow())
    return run.model_copy(update={"parameters_history": pool})


def plan_leverage_point(
    run: SimulationRun,
    leverage_point_id: str,
    *,
    agent_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> SimulationRun:
    _require(run, "plan a leverage point", RunStatus.PENDING, RunStatus.RUNNING)
    now = now or utcnow()
    entry = AppliedLeveragePoint(leverage_point_id=leverage_point_id, application_time=now, agent_id=agent_id)
    return run.model_copy(
        update={
            "applied_leverage_points": run.applied_leverage_points + (entry,),
            "events": _with_event(
                run, "intervention_planned", f"Leverage point {leverage_point_id} planned", now
            ),
        }
    )


def mark_leverage_point(
    run: SimulationRun,
    leverage_point_id: str,
    status: ApplicationStatus,
    *,
    now: Optional[datetime] = None,
) -> SimulationRun:
    """Resolve the first still-planned application of ``leverage_point_id``."""
    _require(run, "apply a leverage point", RunStatus.RUNNING)
    if status is ApplicationStatus.PLANNED:
        raise ValidationError("A leverage point can only move from planned to executed or failed")
    now = now or utcnow()
    applied = list(run.applied_leverage_points)
    for index, entry in enumerate(applied):
        if entry.leverage_point_id == leverage_point_id and entry.status is ApplicationStatus.PLANNED:
            applied[index] = entry.model_copy(update={"status": status, "application_time": now})
            break
    else:
        raise ValidationError(f"No planned application of leverage point {leverage_point_id} in run {run.id}")
    return run.model_copy(
        update={
            "applied_leverage_points": tuple(applied),
            "events": _with_event(
                run, f"intervention_{status.value}", f"Leverage point {leverage_point_id} {status.value}", now
            ),
        }
    )


def _finish(
    run: SimulationRun,
    status: RunStatus,
    attempted: str,
    event_type: str,
    description: str,
    results: RunResults,
    now: Optional[datetime],
) -> SimulationRun:
    _require(run, attempted, RunStatus.RUNNING)
    if not run.has_started:
        raise InvalidTransitionError(run.id, run.status.value, f"{attempted} before a start event")
    observed = max(now or utcnow(), run.start_time)
    # whole milliseconds, rounded up; end_time is pinned so end - start == duration
    duration_ms = -(-(observed - run.start_time) // timedelta(milliseconds=1))
    end = run.start_time + timedelta(milliseconds=duration_ms)
    return run.model_copy(
        update={
            "status": status,
            "end_time": end,
            "duration_ms": duration_ms,
            "results": results,
            "events": _with_event(run, event_type, description, end),
        }
    )


def complete(run: SimulationRun, results: RunResults, *, now: Optional[datetime] = None) -> SimulationRun:
    return _finish(run, RunStatus.COMPLETED, "complete", "complete", "Simulation completed", results, now)


def fail(run: SimulationRun, reason: str, *, now: Optional[datetime] = None) -> SimulationRun:
    results = run.results.model_copy(update={"overall_impact": f"Failed: {reason}"})
    return _finish(run, RunStatus.FAILED, "fail", "failure", reason, results, now)


def cancel(run: SimulationRun, reason: str = "Cancelled by operator", *, now: Optional[datetime] = None) -> SimulationRun:
    results = run.results.model_copy(update={"overall_impact": "Cancelled"})
    return _finish(run, RunStatus.CANCELLED, "cancel", "cancel", reason, results, now)


__all__ = [
    "new_run_id",
    "create_run",
    "begin",
    "record_event",
    "record_metric",
    "record_parameter",
    "plan_leverage_point",
    "mark_leverage_point",
    "complete",
    "fail",
    "cancel",
]
