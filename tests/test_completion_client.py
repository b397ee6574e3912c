from unittest.mock import Mock

import httpx
import pytest
from openai import APIConnectionError

from support_chat.core.exceptions import ProviderError
from support_chat.services.completion_client import (
    FALLBACK_REPLY,
    SYSTEM_PROMPT,
    CompletionClient,
)
from tests.conftest import make_completion


def test_generate_reply_sends_system_prompt_history_and_message(llm):
    completion = CompletionClient(client=llm, model="test-model", max_tokens=200, temperature=0.2)
    history = [
        {"role": "user", "content": "Hi"},
        {"role": "assistant", "content": "Hello! How can I help?"},
    ]

    reply = completion.generate_reply(history, "Where is my order?")

    assert reply == "Your order ships within 5-10 business days."
    llm.chat.completions.create.assert_called_once_with(
        model="test-model",
        messages=[
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": "Hi"},
            {"role": "assistant", "content": "Hello! How can I help?"},
            {"role": "user", "content": "Where is my order?"},
        ],
        max_tokens=200,
        temperature=0.2,
    )


def test_system_prompt_covers_support_policies():
    for fact in ["Shipping", "Orders", "Returns", "Support hours", "5-10 business days", "30-day"]:
        assert fact in SYSTEM_PROMPT
    assert "redirect" in SYSTEM_PROMPT


@pytest.mark.parametrize("content", [None, "", "   "])
def test_no_content_uses_fallback(content):
    llm = Mock()
    llm.chat.completions.create.return_value = make_completion(content)

    assert CompletionClient(client=llm).generate_reply([], "hello") == FALLBACK_REPLY


def test_api_error_raises_provider_error():
    llm = Mock()
    llm.chat.completions.create.side_effect = APIConnectionError(
        request=httpx.Request("POST", "https://llm.example/chat/completions")
    )

    with pytest.raises(ProviderError):
        CompletionClient(client=llm).generate_reply([], "hello")


def test_empty_choices_raises_provider_error():
    llm = Mock()
    llm.chat.completions.create.return_value = Mock(choices=[])

    with pytest.raises(ProviderError):
        CompletionClient(client=llm).generate_reply([], "hello")
