"""Error taxonomy shared by the gateway, orchestration and lifecycle layers."""

from __future__ import annotations

from typing import Optional


class ChaosTheoristError(RuntimeError):
    """Base class for every failure raised by this package."""


class NotFoundError(ChaosTheoristError):
    """A referenced system or parameter does not exist.

    Always recoverable by refreshing the catalog.
    """

    def __init__(self, kind: str, identifier: str, *, parent: Optional[str] = None):
        self.kind = kind
        self.identifier = identifier
        self.parent = parent
        if parent:
            message = f"{kind.capitalize()} with ID {identifier} not found in system {parent}."
        else:
            message = f"{kind.capitalize()} with ID {identifier} not found."
        super().__init__(message)


class ValidationError(ChaosTheoristError):
    """A value violates a parameter's declared type or range."""

    def __init__(self, message: str, *, parameter_id: Optional[str] = None):
        self.parameter_id = parameter_id
        super().__init__(message)


class TransportError(ChaosTheoristError):
    """Network or server failure while talking to the backend."""


class AnalysisError(ChaosTheoristError):
    """The leverage-point analysis service failed."""


class AIServiceError(ChaosTheoristError):
    """The chat completion provider failed."""


class InvalidTransitionError(ChaosTheoristError):
    """A simulation run was asked to leave a state it cannot leave."""

    def __init__(self, run_id: str, status: str, attempted: str):
        self.run_id = run_id
        self.status = status
        self.attempted = attempted
        super().__init__(f"Simulation run {run_id} is {status}; cannot {attempted}")


__all__ = [
    "ChaosTheoristError",
    "NotFoundError",
    "ValidationError",
    "TransportError",
    "AnalysisError",
    "AIServiceError",
    "InvalidTransitionError",
]
