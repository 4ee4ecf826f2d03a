from .systems import (
    ChaoticSystemDefinition,
    DataType,
    FeedbackLoop,
    LoopPolarity,
    ParameterValue,
    SecurityLevel,
    SystemMetric,
    SystemParameter,
    SystemStatus,
    compute_content_hash,
    utcnow,
)
from .leverage import ImplementationEffort, LeveragePoint, Reversibility, RiskEntry
from .simulation import ApplicationStatus, RunResults, RunStatus, SimulationRun
from .chat import AIModel, ChatMessage, Sender, new_message
from .agents import AgentProfile, AgentTask, DigitalIdentity, SimulationScenario, TokenDefinition

__all__ = [
    "ChaoticSystemDefinition",
    "DataType",
    "FeedbackLoop",
    "LoopPolarity",
    "ParameterValue",
    "SecurityLevel",
    "SystemMetric",
    "SystemParameter",
    "SystemStatus",
    "compute_content_hash",
    "utcnow",
    "ImplementationEffort",
    "LeveragePoint",
    "Reversibility",
    "RiskEntry",
    "ApplicationStatus",
    "RunResults",
    "RunStatus",
    "SimulationRun",
    "AIModel",
    "ChatMessage",
    "Sender",
    "new_message",
    "AgentProfile",
    "AgentTask",
    "DigitalIdentity",
    "SimulationScenario",
    "TokenDefinition",
]
