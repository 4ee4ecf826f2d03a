from .client import ChatClient, CloudChatBackend, build_prompt

__all__ = ["ChatClient", "CloudChatBackend", "build_prompt"]
