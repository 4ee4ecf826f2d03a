"""The closed set of transitions the store understands.

Each transition is a frozen dataclass; :func:`chaos_theorist.store.reducer.reduce`
maps ``(state, transition)`` to the next state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Tuple, Union

from ..domain.chat import AIModel, ChatMessage
from ..domain.leverage import LeveragePoint
from ..domain.simulation import SimulationRun
from ..domain.systems import ChaoticSystemDefinition
from .state import LoadingKey


@dataclass(frozen=True)
class SelectSystem:
    system_id: Optional[str]


@dataclass(frozen=True)
class ReplaceSystems:
    systems: Tuple[ChaoticSystemDefinition, ...]


@dataclass(frozen=True)
class UpdateSystem:
    system: ChaoticSystemDefinition


@dataclass(frozen=True)
class SetLoading:
    key: LoadingKey
    value: bool


@dataclass(frozen=True)
class SetGlobalError:
    message: Optional[str]


@dataclass(frozen=True)
class SetPreference:
    key: str
    value: Any


@dataclass(frozen=True)
class ToggleChat:
    pass


@dataclass(frozen=True)
class AddChatMessage:
    message: ChatMessage


@dataclass(frozen=True)
class SetChatThinking:
    thinking: bool


@dataclass(frozen=True)
class SetChatModel:
    model: AIModel


@dataclass(frozen=True)
class MarkChatMessageFailed:
    message_id: str


@dataclass(frozen=True)
class SetLeverageLoading:
    system_id: str


@dataclass(frozen=True)
class SetLeveragePoints:
    system_id: str
    points: Tuple[LeveragePoint, ...]


@dataclass(frozen=True)
class SetLeverageUnavailable:
    system_id: str
    message: str


@dataclass(frozen=True)
class SetLeverageIdle:
    system_id: str


@dataclass(frozen=True)
class SetParameterPending:
    system_id: str
    parameter_id: str
    pending: bool


@dataclass(frozen=True)
class SetParameterError:
    system_id: str
    parameter_id: str
    message: Optional[str]


@dataclass(frozen=True)
class UpsertSimulation:
    run: SimulationRun


Action = Union[
    SelectSystem,
    ReplaceSystems,
    UpdateSystem,
    SetLoading,
    SetGlobalError,
    SetPreference,
    ToggleChat,
    AddChatMessage,
    SetChatThinking,
    SetChatModel,
    MarkChatMessageFailed,
    SetLeverageLoading,
    SetLeveragePoints,
    SetLeverageUnavailable,
    SetLeverageIdle,
    SetParameterPending,
    SetParameterError,
    UpsertSimulation,
]

__all__ = [
    "SelectSystem",
    "ReplaceSystems",
    "UpdateSystem",
    "SetLoading",
    "SetGlobalError",
    "SetPreference",
    "ToggleChat",
    "AddChatMessage",
    "SetChatThinking",
    "SetChatModel",
    "MarkChatMessageFailed",
    "SetLeverageLoading",
    "SetLeveragePoints",
    "SetLeverageUnavailable",
    "SetLeverageIdle",
    "SetParameterPending",
    "SetParameterError",
    "UpsertSimulation",
    "Action",
]
