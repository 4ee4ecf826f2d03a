import asyncio

import pytest

from chaos_theorist.config.schema import LLMCloudConfig, LLMConfig
from chaos_theorist.domain.chat import AIModel, Sender, new_message
from chaos_theorist.errors import AIServiceError
from chaos_theorist.gateway.base import ChatProvider
from chaos_theorist.llm.client import ChatClient, CloudChatBackend, build_prompt


class StubBackend:
    def __init__(self, reply="", error=None):
        self.reply = reply
        self.error = error
        self.prompts = []

    def generate(self, prompt, *, system_instruction):
        self.prompts.append((prompt, system_instruction))
        if self.error:
            raise self.error
        return self.reply


def test_build_prompt_lists_turns():
    history = [
        new_message("How stable is the market?", Sender.USER),
        new_message("Volatility is rising.", Sender.AI, ai_model=AIModel.GEMINI),
    ]
    prompt = build_prompt(history, "What should we do?")
    assert "Current Conversation:" in prompt
    assert "User: How stable is the market?\nModel: Volatility is rising." in prompt
    assert prompt.endswith("User: What should we do?\nModel:")


def test_offline_reply_echoes_question():
    client = ChatClient(LLMConfig(offline_delay_seconds=0))
    assert isinstance(client, ChatProvider)
    reply = asyncio.run(client.send_chat_turn([], "Explain the spiral"))
    assert reply.startswith("I am running in a demo environment")
    assert reply.endswith("Explain the spiral")


def test_backend_receives_prompt_and_instruction():
    backend = StubBackend(reply="Raise buffers.")
    client = ChatClient(LLMConfig(mode="cloud", system_instruction="Be brief."), backend=backend)

    reply = asyncio.run(client.send_chat_turn([], "Advice?"))

    assert reply == "Raise buffers."
    prompt, instruction = backend.prompts[0]
    assert prompt.endswith("User: Advice?\nModel:")
    assert instruction == "Be brief."


def test_empty_reply_gets_placeholder():
    client = ChatClient(LLMConfig(mode="cloud"), backend=StubBackend(reply="   "))
    assert asyncio.run(client.send_chat_turn([], "hi")) == "No response generated."


def test_backend_failure_becomes_ai_service_error():
    client = ChatClient(LLMConfig(mode="cloud"), backend=StubBackend(error=ConnectionError("reset")))
    with pytest.raises(AIServiceError, match="reset"):
        asyncio.run(client.send_chat_turn([], "hi"))


def test_cloud_mode_without_section_fails():
    client = ChatClient(LLMConfig(mode="cloud"))
    with pytest.raises(AIServiceError):
        asyncio.run(client.send_chat_turn([], "hi"))


def test_cloud_backend_rejects_unknown_provider():
    with pytest.raises(AIServiceError, match="Unsupported cloud provider"):
        CloudChatBackend(LLMCloudConfig(provider="carrier-pigeon"))


def test_invalid_mode_rejected():
    with pytest.raises(ValueError):
        LLMConfig(mode="telepathy")
