"""Wire a store, gateway and collaborators from configuration."""

from __future__ import annotations

from typing import Optional

from .access import AccessPolicy
from .config.schema import ChaosConfig
from .domain.chat import AIModel
from .gateway.base import ChatProvider, ResourceGateway
from .gateway.memory import InMemoryGateway
from .llm.client import ChatClient
from .orchestration.flows import Orchestrator
from .reporting import ErrorReporter, EventLogReporter, LoggingErrorReporter
from .store.state import initial_state, preferences_from_config
from .store.store import Store


def build_orchestrator(
    cfg: Optional[ChaosConfig] = None,
    *,
    gateway: Optional[ResourceGateway] = None,
    chat: Optional[ChatProvider] = None,
    error_reporter: Optional[ErrorReporter] = None,
) -> Orchestrator:
    cfg = cfg or ChaosConfig()
    store = Store(
        initial_state(
            preferences_from_config(cfg.preferences),
            current_model=AIModel(cfg.llm.display_model),
        )
    )
    return Orchestrator(
        store,
        gateway or InMemoryGateway(config=cfg.gateway),
        chat=chat or ChatClient(cfg.llm),
        access=AccessPolicy.from_ids(cfg.access.allowed_systems),
        error_reporter=error_reporter or LoggingErrorReporter(),
        intervention_reporter=EventLogReporter(
            cfg.reporting.intervention_log, retry_attempts=cfg.reporting.retry_attempts
        ),
        current_user=cfg.access.current_user,
    )


__all__ = ["build_orchestrator"]
