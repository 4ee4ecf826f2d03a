from .context import RequestContext, SelectionTracker
from .flows import Orchestrator

__all__ = ["RequestContext", "SelectionTracker", "Orchestrator"]
