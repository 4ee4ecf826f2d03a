"""Coroutines that sequence gateway calls and fold the results into the store.

Every flow follows the same shape: mark the resource as loading and clear a
stale global error, await the gateway, dispatch the transitions that fold
the result in, report failures, and release the loading flag in ``finally``.
No gateway failure escapes a flow.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional

from ..access import AccessPolicy
from ..domain.chat import ChatMessage, Sender, new_message
from ..domain.leverage import LeveragePoint
from ..domain.simulation import SimulationRun
from ..domain.systems import ChaoticSystemDefinition, ParameterValue
from ..errors import NotFoundError, ValidationError
from ..gateway.base import ChatProvider, ResourceGateway
from ..llm.client import ChatClient
from ..reporting import ErrorReporter, EventLogReporter, InterventionReporter, LoggingErrorReporter
from ..store.actions import (
    AddChatMessage,
    MarkChatMessageFailed,
    ReplaceSystems,
    SelectSystem,
    SetChatThinking,
    SetGlobalError,
    SetLeverageIdle,
    SetLeverageLoading,
    SetLeveragePoints,
    SetLeverageUnavailable,
    SetLoading,
    SetParameterError,
    SetParameterPending,
    UpdateSystem,
    UpsertSimulation,
)
from ..store.state import LoadingKey
from ..store.store import Store
from .context import SelectionTracker

logger = logging.getLogger(__name__)


class Orchestrator:
    def __init__(
        self,
        store: Store,
        gateway: ResourceGateway,
        *,
        chat: Optional[ChatProvider] = None,
        access: Optional[AccessPolicy] = None,
        error_reporter: Optional[ErrorReporter] = None,
        intervention_reporter: Optional[InterventionReporter] = None,
        current_user: str = "operator",
    ) -> None:
        self.store = store
        self.gateway = gateway
        self.chat = chat or ChatClient()
        self.access = access or AccessPolicy()
        self.error_reporter = error_reporter or LoggingErrorReporter()
        self.intervention_reporter = intervention_reporter or EventLogReporter()
        self.current_user = current_user
        self.tracker = SelectionTracker(store)

    def close(self) -> None:
        self.tracker.close()

    # ------------------------------------------------------------------
    def _report(self, error: BaseException) -> None:
        try:
            self.error_reporter.report(error)
        except Exception as exc:
            logger.warning("Error reporter failed: %s", exc)

    def _fail(self, message: str, error: BaseException) -> None:
        logger.warning("%s", message)
        self.store.dispatch(SetGlobalError(message))
        self._report(error)

    def _begin(self, key: LoadingKey) -> None:
        self.store.dispatch(SetLoading(key, True))
        self.store.dispatch(SetGlobalError(None))

    # ------------------------------------------------------------------
    def select_system(self, system_id: Optional[str]) -> None:
        self.store.dispatch(SelectSystem(system_id))

    async def load_systems(self, preferred_id: Optional[str] = None) -> List[ChaoticSystemDefinition]:
        """Fetch the catalog, restrict it to the access policy and pick a selection.

        The preferred system wins if it is visible; otherwise the first visible
        system is selected when nothing is selected yet.
        """
        self._begin(LoadingKey.SYSTEMS)
        try:
            fetched = await self.gateway.list_systems()
            visible = self.access.filter(list(fetched))
            self.store.dispatch(ReplaceSystems(tuple(visible)))
            visible_ids = [system.id for system in visible]
            if preferred_id and preferred_id in visible_ids:
                self.store.dispatch(SelectSystem(preferred_id))
            elif visible and not self.store.state.selected_system_id:
                self.store.dispatch(SelectSystem(visible_ids[0]))
            return visible
        except Exception as exc:
            self._fail(f"Failed to load initial systems: {exc}", exc)
            return []
        finally:
            self.store.dispatch(SetLoading(LoadingKey.SYSTEMS, False))

    async def update_parameter(self, system_id: str, parameter_id: str, value: ParameterValue) -> bool:
        """Mutate one parameter, then replace the system with a fresh copy.

        Only the re-fetched system reaches the store, so the stored parameter
        values always agree with the stored content hash. Validation problems
        stay on the parameter's inline slot; everything else also raises the
        global banner.
        """
        store = self.store
        store.dispatch(SetParameterPending(system_id, parameter_id, True))
        store.dispatch(SetParameterError(system_id, parameter_id, None))
        store.dispatch(SetGlobalError(None))
        try:
            local = next((s for s in store.state.systems if s.id == system_id), None)
            parameter = local.parameter(parameter_id) if local else None
            if parameter is not None:
                parameter.check_value(value)
            await self.gateway.update_parameter(system_id, parameter_id, value)
            refreshed = await self.gateway.get_system(system_id)
            store.dispatch(UpdateSystem(refreshed))
            return True
        except ValidationError as exc:
            store.dispatch(SetParameterError(system_id, parameter_id, str(exc)))
            self._report(exc)
            return False
        except Exception as exc:
            store.dispatch(SetParameterError(system_id, parameter_id, str(exc)))
            self._fail(f"Failed to update parameter {parameter_id}: {exc}", exc)
            return False
        finally:
            store.dispatch(SetParameterPending(system_id, parameter_id, False))

    async def fetch_leverage_points(self, system_id: Optional[str] = None) -> Optional[List[LeveragePoint]]:
        """Request analysis for ``system_id``, or for the selected system when omitted.

        An explicit ``system_id`` always keeps its result. A request made for
        the implicit selection is tagged with that selection; if the selection
        moved while it was in flight the result is discarded.
        """
        explicit = system_id is not None
        target = system_id if explicit else self.store.state.selected_system_id
        if target is None:
            logger.debug("No system selected; skipping leverage analysis")
            return None
        ctx = self.tracker.issue(target)
        self.store.dispatch(SetLeverageLoading(target))
        try:
            points = await self.gateway.identify_leverage_points(target)
        except Exception as exc:
            if explicit or self.tracker.is_current(ctx):
                self.store.dispatch(SetLeverageUnavailable(target, f"Analysis unavailable: {exc}"))
            else:
                self.store.dispatch(SetLeverageIdle(target))
            logger.warning("Leverage analysis for %s failed: %s", target, exc)
            self._report(exc)
            return None
        if not explicit and not self.tracker.is_current(ctx):
            logger.debug("Discarding stale leverage analysis for %s", target)
            self.store.dispatch(SetLeverageIdle(target))
            return None
        self.store.dispatch(SetLeveragePoints(target, tuple(points)))
        return list(points)

    async def send_chat_message(self, text: str) -> Optional[ChatMessage]:
        """Append the user's turn immediately, then await the analyst's reply.

        On failure the user's message stays in the transcript and is marked
        failed; no AI message is appended and thinking is always cleared.
        """
        chat = self.store.state.chat
        if not text.strip() or chat.is_thinking:
            return None
        history = chat.messages
        model = chat.current_model
        user_message = new_message(text, Sender.USER)
        self.store.dispatch(AddChatMessage(user_message))
        self.store.dispatch(SetChatThinking(True))
        try:
            reply = await self.chat.send_chat_turn(history, text)
            ai_message = new_message(reply, Sender.AI, ai_model=model)
            self.store.dispatch(AddChatMessage(ai_message))
            return ai_message
        except Exception as exc:
            logger.warning("Chat turn failed: %s", exc)
            self.store.dispatch(MarkChatMessageFailed(user_message.id))
            self._report(exc)
            return None
        finally:
            self.store.dispatch(SetChatThinking(False))

    def propose_intervention(self, leverage_point_id: str, system_id: str) -> None:
        try:
            self.intervention_reporter.notify(leverage_point_id, system_id)
        except Exception as exc:
            logger.warning("Intervention reporter failed for %s: %s", leverage_point_id, exc)

    async def start_simulation(
        self,
        system_id: Optional[str] = None,
        scenario_id: Optional[str] = None,
        initiated_by: Optional[str] = None,
    ) -> Optional[SimulationRun]:
        target = system_id or self.store.state.selected_system_id
        if target is None:
            logger.debug("No system selected; not starting a simulation")
            return None
        self._begin(LoadingKey.SIMULATIONS)
        try:
            run = await self.gateway.start_simulation_run(target, scenario_id, initiated_by or self.current_user)
            self.store.dispatch(UpsertSimulation(run))
            return run
        except Exception as exc:
            self._fail(f"Failed to start simulation: {exc}", exc)
            return None
        finally:
            self.store.dispatch(SetLoading(LoadingKey.SIMULATIONS, False))

    def advance_simulation(
        self, run_id: str, step: Callable[..., SimulationRun], *args: Any, **kwargs: Any
    ) -> SimulationRun:
        """Apply a lifecycle function to a stored run and store the result.

        Lifecycle errors (``InvalidTransitionError``) propagate to the caller.
        """
        run = self.store.state.simulation(run_id)
        if run is None:
            raise NotFoundError("simulation run", run_id)
        updated = step(run, *args, **kwargs)
        self.store.dispatch(UpsertSimulation(updated))
        return updated


__all__ = ["Orchestrator"]
