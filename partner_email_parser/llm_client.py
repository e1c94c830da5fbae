"""
Chat capability used by the AI enrichment adapter.

The adapter only needs ``chat(messages, system_prompt, params) ->
ChatResponse``.  OpenAIChatClient implements it with the ``openai`` SDK;
any OpenAI-compatible endpoint (e.g. DeepSeek) works by setting
LLM_BASE_URL.  Transport, authentication and rate limits stay in here.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from partner_email_parser.exceptions import ChatError
from partner_email_parser.settings import Settings, settings as default_settings

log = logging.getLogger(__name__)


@dataclass
class ChatResponse:
    content: str
    usage: dict[str, Any] = field(default_factory=dict)


class ChatClient(Protocol):
    def chat(
        self,
        messages: list[dict[str, str]],
        system_prompt: str = "",
        params: dict[str, Any] | None = None,
    ) -> ChatResponse:
        ...


class OpenAIChatClient:
    """OpenAI-SDK backed chat client (lazy client construction)."""

    def __init__(self, api_key: str, model: str, base_url: str | None = None,
                 temperature: float = 0.2, max_tokens: int = 400):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url or None
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client = None

    @classmethod
    def from_settings(cls, cfg: Settings | None = None) -> "OpenAIChatClient":
        cfg = cfg or default_settings
        return cls(
            api_key=cfg.LLM_API_KEY,
            model=cfg.LLM_MODEL,
            base_url=cfg.LLM_BASE_URL,
            temperature=cfg.LLM_TEMPERATURE,
            max_tokens=cfg.LLM_MAX_TOKENS,
        )

    def _get_client(self):
        if self._client is not None:
            return self._client
        if not self.api_key:
            raise ChatError("LLM_API_KEY is not set – cannot call the chat model")

        from openai import OpenAI

        self._client = OpenAI(api_key=self.api_key, base_url=self.base_url)
        log.info("OpenAI client initialised (model=%s base_url=%s)",
                 self.model, self.base_url or "default")
        return self._client

    def chat(
        self,
        messages: list[dict[str, str]],
        system_prompt: str = "",
        params: dict[str, Any] | None = None,
    ) -> ChatResponse:
        params = params or {}
        full_messages = []
        if system_prompt:
            full_messages.append({"role": "system", "content": system_prompt})
        full_messages.extend(messages)

        client = self._get_client()
        try:
            response = client.chat.completions.create(
                model=self.model,
                messages=full_messages,
                temperature=params.get("temperature", self.temperature),
                max_tokens=params.get("max_tokens", self.max_tokens),
            )
        except Exception as exc:
            raise ChatError(f"chat completion failed: {exc}") from exc

        content = response.choices[0].message.content or ""
        usage = {}
        if getattr(response, "usage", None):
            usage = {
                "prompt_tokens": getattr(response.usage, "prompt_tokens", None),
                "completion_tokens": getattr(response.usage, "completion_tokens", None),
                "total_tokens": getattr(response.usage, "total_tokens", None),
            }
            log.debug("LLM tokens: %s", usage)
        return ChatResponse(content=content, usage=usage)
