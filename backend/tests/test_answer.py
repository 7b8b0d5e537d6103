"""Tests for draining an answer stream into a result."""

import asyncio

import pytest

from answerstream.providers.openai import OpenAIProvider
from answerstream.services.answer import collect_answer
from answerstream.utils.exceptions import HttpError, StreamReadError


def provider_for(server):
    return OpenAIProvider("sk-test", "gpt-test", client=server.client())


@pytest.mark.asyncio
async def test_success_keeps_final_text(fake_server):
    server = fake_server(chunks=[
        'data: {"id":"m1","choices":[{"delta":{"content":"Hel"}}]}\n\n',
        'data: {"choices":[{"delta":{"content":"lo"}}]}\n\n',
        "data: [DONE]\n\n",
    ])
    seen = []
    result = await collect_answer(provider_for(server), "Hi", on_event=seen.append)

    assert result.status == "success"
    assert result.text == "Hello"
    assert result.message_id == "m1"
    assert result.error is None
    assert [e.type for e in seen] == ["answer", "answer", "done"]


@pytest.mark.asyncio
async def test_error_result(fake_server):
    server = fake_server(status=429, body=b"slow down")
    result = await collect_answer(provider_for(server), "Hi")

    assert result.status == "error"
    assert isinstance(result.error, HttpError)
    assert result.text == ""


@pytest.mark.asyncio
async def test_timeout_result(fake_server):
    server = fake_server(chunks=['data: {"choices":[{"delta":{"content":"x"}}]}\n\n'], stall=True)
    result = await collect_answer(provider_for(server), "Hi", timeout=0.1)

    assert result.status == "error"
    assert isinstance(result.error, StreamReadError)
    assert result.text == "x"


@pytest.mark.asyncio
async def test_cancelled_result(fake_server):
    server = fake_server(chunks=['data: {"choices":[{"delta":{"content":"x"}}]}\n\n'], stall=True)
    signal = asyncio.Event()
    result = await collect_answer(
        provider_for(server), "Hi", signal=signal, on_event=lambda event: signal.set()
    )

    assert result.status == "cancelled"
    assert result.text == "x"
    assert result.error is None
