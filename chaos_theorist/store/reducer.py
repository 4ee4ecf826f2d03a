from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import fields, replace
from typing import Any, Callable, Dict, Type

from ..domain.systems import parse_flag
from .actions import (
    AddChatMessage,
    MarkChatMessageFailed,
    ReplaceSystems,
    SelectSystem,
    SetChatModel,
    SetChatThinking,
    SetGlobalError,
    SetLeverageLoading,
    SetLeveragePoints,
    SetLeverageUnavailable,
    SetLeverageIdle,
    SetLoading,
    SetParameterError,
    SetParameterPending,
    SetPreference,
    ToggleChat,
    UpdateSystem,
    UpsertSimulation,
)
from .state import (
    AnalysisStatus,
    AppState,
    LeverageAnalysis,
    NotificationSettings,
    ParameterEdit,
    edit_key,
)

logger = logging.getLogger(__name__)

Handler = Callable[[AppState, Any], AppState]

_PREFERENCE_KEYS = {"dark_mode", "refresh_interval_seconds", "notification_settings"}


def _select_system(state: AppState, action: SelectSystem) -> AppState:
    return replace(state, selected_system_id=action.system_id)


def _replace_systems(state: AppState, action: ReplaceSystems) -> AppState:
    seen: set[str] = set()
    systems = []
    for system in action.systems:
        if system.id in seen:
            logger.debug("Dropping duplicate system %s from catalog replacement", system.id)
            continue
        seen.add(system.id)
        systems.append(system)
    return replace(state, systems=tuple(systems))


def _update_system(state: AppState, action: UpdateSystem) -> AppState:
    target = action.system
    if not any(system.id == target.id for system in state.systems):
        logger.debug("UpdateSystem for unknown system %s ignored", target.id)
        return state
    systems = tuple(target if system.id == target.id else system for system in state.systems)
    return replace(state, systems=systems)


def _set_loading(state: AppState, action: SetLoading) -> AppState:
    return replace(state, loading=state.loading.with_flag(action.key, action.value))


def _set_global_error(state: AppState, action: SetGlobalError) -> AppState:
    return replace(state, global_error=action.message)


def _set_preference(state: AppState, action: SetPreference) -> AppState:
    if action.key not in _PREFERENCE_KEYS:
        logger.debug("Unknown preference %r ignored", action.key)
        return state
    value = action.value
    if action.key == "notification_settings" and isinstance(value, Mapping):
        current = state.user_preferences.notification_settings
        known = {item.name for item in fields(NotificationSettings)}
        flags = {}
        for key, raw in value.items():
            flag = parse_flag(raw)
            if key not in known or flag is None:
                logger.debug("Notification setting %r=%r ignored", key, raw)
                continue
            flags[key] = flag
        value = replace(current, **flags)
    return replace(state, user_preferences=replace(state.user_preferences, **{action.key: value}))


def _toggle_chat(state: AppState, action: ToggleChat) -> AppState:
    return replace(state, chat=replace(state.chat, is_open=not state.chat.is_open))


def _add_chat_message(state: AppState, action: AddChatMessage) -> AppState:
    return replace(state, chat=replace(state.chat, messages=state.chat.messages + (action.message,)))


def _set_chat_thinking(state: AppState, action: SetChatThinking) -> AppState:
    return replace(state, chat=replace(state.chat, is_thinking=bool(action.thinking)))


def _set_chat_model(state: AppState, action: SetChatModel) -> AppState:
    return replace(state, chat=replace(state.chat, current_model=action.model))


def _mark_chat_message_failed(state: AppState, action: MarkChatMessageFailed) -> AppState:
    failed = state.chat.failed_message_ids | {action.message_id}
    return replace(state, chat=replace(state.chat, failed_message_ids=failed))


def _with_leverage(state: AppState, system_id: str, analysis: LeverageAnalysis) -> AppState:
    leverage: Dict[str, LeverageAnalysis] = dict(state.leverage)
    leverage[system_id] = analysis
    return replace(state, leverage=leverage)


def _set_leverage_loading(state: AppState, action: SetLeverageLoading) -> AppState:
    previous = state.leverage_for(action.system_id)
    return _with_leverage(
        state, action.system_id, LeverageAnalysis(status=AnalysisStatus.LOADING, points=previous.points)
    )


def _set_leverage_points(state: AppState, action: SetLeveragePoints) -> AppState:
    return _with_leverage(
        state, action.system_id, LeverageAnalysis(status=AnalysisStatus.READY, points=tuple(action.points))
    )


def _set_leverage_unavailable(state: AppState, action: SetLeverageUnavailable) -> AppState:
    return _with_leverage(
        state, action.system_id, LeverageAnalysis(status=AnalysisStatus.UNAVAILABLE, error=action.message)
    )


def _set_leverage_idle(state: AppState, action: SetLeverageIdle) -> AppState:
    previous = state.leverage_for(action.system_id)
    return _with_leverage(state, action.system_id, LeverageAnalysis(points=previous.points))


def _with_edit(state: AppState, system_id: str, parameter_id: str, **changes: Any) -> AppState:
    key = edit_key(system_id, parameter_id)
    edits: Dict[str, ParameterEdit] = dict(state.parameter_edits)
    edits[key] = replace(edits.get(key, ParameterEdit()), **changes)
    return replace(state, parameter_edits=edits)


def _set_parameter_pending(state: AppState, action: SetParameterPending) -> AppState:
    return _with_edit(state, action.system_id, action.parameter_id, pending=bool(action.pending))


def _set_parameter_error(state: AppState, action: SetParameterError) -> AppState:
    return _with_edit(state, action.system_id, action.parameter_id, error=action.message)


def _upsert_simulation(state: AppState, action: UpsertSimulation) -> AppState:
    run = action.run
    if any(existing.id == run.id for existing in state.active_simulations):
        runs = tuple(run if existing.id == run.id else existing for existing in state.active_simulations)
    else:
        runs = state.active_simulations + (run,)
    return replace(state, active_simulations=runs)


_HANDLERS: Dict[Type[Any], Handler] = {
    SelectSystem: _select_system,
    ReplaceSystems: _replace_systems,
    UpdateSystem: _update_system,
    SetLoading: _set_loading,
    SetGlobalError: _set_global_error,
    SetPreference: _set_preference,
    ToggleChat: _toggle_chat,
    AddChatMessage: _add_chat_message,
    SetChatThinking: _set_chat_thinking,
    SetChatModel: _set_chat_model,
    MarkChatMessageFailed: _mark_chat_message_failed,
    SetLeverageLoading: _set_leverage_loading,
    SetLeveragePoints: _set_leverage_points,
    SetLeverageUnavailable: _set_leverage_unavailable,
    SetLeverageIdle: _set_leverage_idle,
    SetParameterPending: _set_parameter_pending,
    SetParameterError: _set_parameter_error,
    UpsertSimulation: _upsert_simulation,
}


def reduce(state: AppState, action: Any) -> AppState:
    """Apply one transition. Pure; unrecognized transitions return ``state`` itself."""
    handler = _HANDLERS.get(type(action))
    if handler is None:
        return state
    return handler(state, action)


__all__ = ["reduce"]
