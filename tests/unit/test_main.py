"""Tests for the console startup checks."""
import httpx
import pytest

from pdfchat.chatbot import RAGChatbot
from pdfchat.llm_client import OllamaClient
from pdfchat.main import warn_missing_model
from tests.conftest import BASE_URL, EMBED_MODEL


def chatbot_for(handler, store) -> RAGChatbot:
    client = OllamaClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))
    return RAGChatbot(store=store, client=client, embedding_model=EMBED_MODEL, request_delay=0)


@pytest.mark.asyncio
async def test_installed_model_prints_nothing(chatbot, capsys):
    await warn_missing_model(chatbot)

    assert capsys.readouterr().out == ""


@pytest.mark.asyncio
async def test_missing_model_prints_pull_hint(chatbot, fake_ollama, capsys):
    fake_ollama.models = [{"name": "fake-chat:latest"}]

    await warn_missing_model(chatbot)

    assert f"ollama pull {EMBED_MODEL}" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_non_json_tags_body_does_not_abort_startup(store, capsys):
    chatbot = chatbot_for(lambda request: httpx.Response(200, text="<html>proxy ok</html>"), store)

    await chatbot.check_backend()
    await warn_missing_model(chatbot)

    assert "Could not read the Ollama model list" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_nameless_model_entry_does_not_abort_startup(store, capsys):
    chatbot = chatbot_for(lambda request: httpx.Response(200, json={"models": [{"size": 1}]}), store)

    await warn_missing_model(chatbot)

    assert "Could not read the Ollama model list" in capsys.readouterr().out
