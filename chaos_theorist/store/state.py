"""Shape of the application state.

Every class here is a frozen dataclass; the reducer builds new instances and
never mutates the ones it is given. Mapping fields are replaced wholesale,
so consumers must treat them as read-only.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Mapping, Optional, Tuple

from ..domain.agents import AgentProfile, AgentTask, DigitalIdentity, SimulationScenario, TokenDefinition
from ..domain.chat import AIModel, ChatMessage
from ..domain.leverage import LeveragePoint
from ..domain.queries import find_system
from ..domain.simulation import SimulationRun
from ..domain.systems import ChaoticSystemDefinition


class LoadingKey(str, Enum):
    SYSTEMS = "systems"
    SIMULATIONS = "simulations"
    SCENARIOS = "scenarios"
    AGENTS = "agents"
    AGENT_TASKS = "agent_tasks"
    TOKEN_RAILS = "token_rails"
    IDENTITIES = "identities"


@dataclass(frozen=True)
class LoadingFlags:
    systems: bool = False
    simulations: bool = False
    scenarios: bool = False
    agents: bool = False
    agent_tasks: bool = False
    token_rails: bool = False
    identities: bool = False

    def get(self, key: LoadingKey) -> bool:
        return getattr(self, LoadingKey(key).value)

    def with_flag(self, key: LoadingKey, value: bool) -> "LoadingFlags":
        return replace(self, **{LoadingKey(key).value: bool(value)})


@dataclass(frozen=True)
class NotificationSettings:
    critical_alerts: bool = True
    simulation_updates: bool = True


@dataclass(frozen=True)
class UserPreferences:
    dark_mode: bool = False
    refresh_interval_seconds: int = 60
    notification_settings: NotificationSettings = field(default_factory=NotificationSettings)


@dataclass(frozen=True)
class ChatState:
    is_open: bool = False
    messages: Tuple[ChatMessage, ...] = ()
    is_thinking: bool = False
    current_model: AIModel = AIModel.GEMINI
    failed_message_ids: frozenset = frozenset()


class AnalysisStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class LeverageAnalysis:
    status: AnalysisStatus = AnalysisStatus.IDLE
    points: Tuple[LeveragePoint, ...] = ()
    error: Optional[str] = None


@dataclass(frozen=True)
class ParameterEdit:
    pending: bool = False
    error: Optional[str] = None


def edit_key(system_id: str, parameter_id: str) -> str:
    return f"{system_id}/{parameter_id}"


@dataclass(frozen=True)
class AppState:
    selected_system_id: Optional[str] = None
    systems: Tuple[ChaoticSystemDefinition, ...] = ()
    active_simulations: Tuple[SimulationRun, ...] = ()
    scenarios: Tuple[SimulationScenario, ...] = ()
    agents: Tuple[AgentProfile, ...] = ()
    agent_tasks: Tuple[AgentTask, ...] = ()
    token_definitions: Tuple[TokenDefinition, ...] = ()
    digital_identities: Tuple[DigitalIdentity, ...] = ()
    loading: LoadingFlags = field(default_factory=LoadingFlags)
    global_error: Optional[str] = None
    user_preferences: UserPreferences = field(default_factory=UserPreferences)
    chat: ChatState = field(default_factory=ChatState)
    leverage: Mapping[str, LeverageAnalysis] = field(default_factory=dict)
    parameter_edits: Mapping[str, ParameterEdit] = field(default_factory=dict)

    @property
    def selected_system(self) -> Optional[ChaoticSystemDefinition]:
        return find_system(self.systems, self.selected_system_id)

    def leverage_for(self, system_id: str) -> LeverageAnalysis:
        return self.leverage.get(system_id, LeverageAnalysis())

    def parameter_edit(self, system_id: str, parameter_id: str) -> ParameterEdit:
        return self.parameter_edits.get(edit_key(system_id, parameter_id), ParameterEdit())

    def simulation(self, run_id: str) -> Optional[SimulationRun]:
        return next((run for run in self.active_simulations if run.id == run_id), None)


def initial_state(
    preferences: Optional[UserPreferences] = None,
    *,
    current_model: AIModel = AIModel.GEMINI,
) -> AppState:
    return AppState(
        user_preferences=preferences or UserPreferences(),
        chat=ChatState(current_model=current_model),
    )


def preferences_from_config(cfg) -> UserPreferences:
    """Build preferences from a :class:`~chaos_theorist.config.PreferencesConfig`."""
    notifications = cfg.notification_settings
    return UserPreferences(
        dark_mode=cfg.dark_mode,
        refresh_interval_seconds=cfg.refresh_interval_seconds,
        notification_settings=NotificationSettings(
            critical_alerts=notifications.critical_alerts,
            simulation_updates=notifications.simulation_updates,
        ),
    )


__all__ = [
    "LoadingKey",
    "LoadingFlags",
    "NotificationSettings",
    "UserPreferences",
    "ChatState",
    "AnalysisStatus",
    "LeverageAnalysis",
    "ParameterEdit",
    "edit_key",
    "AppState",
    "initial_state",
    "preferences_from_config",
]
