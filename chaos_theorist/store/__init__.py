from .actions import (
    Action,
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
from .reducer import reduce
from .state import (
    AnalysisStatus,
    AppState,
    ChatState,
    LeverageAnalysis,
    LoadingKey,
    ParameterEdit,
    UserPreferences,
    initial_state,
    preferences_from_config,
)
from .store import Store

__all__ = [
    "Action",
    "AddChatMessage",
    "MarkChatMessageFailed",
    "ReplaceSystems",
    "SelectSystem",
    "SetChatModel",
    "SetChatThinking",
    "SetGlobalError",
    "SetLeverageLoading",
    "SetLeveragePoints",
    "SetLeverageUnavailable",
    "SetLeverageIdle",
    "SetLoading",
    "SetParameterError",
    "SetParameterPending",
    "SetPreference",
    "ToggleChat",
    "UpdateSystem",
    "UpsertSimulation",
    "reduce",
    "AnalysisStatus",
    "AppState",
    "ChatState",
    "LeverageAnalysis",
    "LoadingKey",
    "ParameterEdit",
    "UserPreferences",
    "initial_state",
    "preferences_from_config",
    "Store",
]
