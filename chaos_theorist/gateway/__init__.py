from .base import ChatProvider, ResourceGateway
from .memory import InMemoryGateway

__all__ = ["ChatProvider", "ResourceGateway", "InMemoryGateway"]
