"""Chat completion client for the support assistant."""
import logging
from typing import Any, Dict, Optional

from openai import OpenAI, OpenAIError

from support_chat.config import settings
from support_chat.core.exceptions import ProviderError

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "Sorry, I couldn't answer that."

SYSTEM_PROMPT = """
You are a helpful customer support agent.

Only answer questions related to the product:
- Shipping
- Orders
- Returns & refunds
- Support hours

Policies:
- Shipping: Worldwide, 5-10 business days
- Returns: 30-day return policy
- Support hours: Mon-Fri, 9 AM - 6 PM IST

If a question is unrelated, politely redirect.
"""


class CompletionClient:
    """
    Wraps a remote chat completion call with the fixed support system prompt.

    The OpenAI SDK client is built on first use so the service can start
    without credentials. Any OpenAI-compatible endpoint works via base_url.
    """

    def __init__(
        self,
        client: Optional[Any] = None,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ):
        self._client = client
        self.model = model or settings.LLM_MODEL
        self.max_tokens = max_tokens if max_tokens is not None else settings.LLM_MAX_TOKENS
        self.temperature = temperature if temperature is not None else settings.LLM_TEMPERATURE

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            self._client = OpenAI(
                api_key=settings.LLM_API_KEY,
                base_url=settings.LLM_BASE_URL,
                timeout=settings.LLM_TIMEOUT,
                max_retries=settings.LLM_MAX_RETRIES,
            )
        return self._client

    def build_messages(
        self, history: list[Dict[str, str]], new_message: str
    ) -> list[Dict[str, str]]:
        """System prompt, then prior turns, then the latest user message."""
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            *history,
            {"role": "user", "content": new_message},
        ]

    def generate_reply(self, history: list[Dict[str, str]], new_message: str) -> str:
        """
        Ask the model for the next assistant turn.

        Args:
            history: Prior turns as {"role": "user"|"assistant", "content": ...}
            new_message: Latest user message

        Returns:
            Reply text, or FALLBACK_REPLY if the model returned no content

        Raises:
            ProviderError: If the API call fails or the response has no choices
        """
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=self.build_messages(history, new_message),
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except OpenAIError as e:
            logger.error(f"Completion API error: {str(e)}")
            raise ProviderError("Completion request failed") from e

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise ProviderError("Malformed completion response") from e

        if not content or not content.strip():
            logger.warning("Completion returned no content, using fallback reply")
            return FALLBACK_REPLY

        return content
