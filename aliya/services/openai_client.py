from __future__ import annotations

import random
import time
from dataclasses import dataclass


class OpenAIClientError(RuntimeError):
    pass


@dataclass(frozen=True)
class OpenAIChatResult:
    content_text: str
    model: str


class OpenAIChat:
    """
    Small wrapper around the official `openai` SDK.
    - Returns plain text completions.
    - Retries transient failures with capped exponential backoff.
    """

    def __init__(self, *, api_key: str, timeout_s: float = 60.0, max_retries: int = 2) -> None:
        self._api_key = api_key
        self._timeout_s = timeout_s
        self._max_retries = max_retries
        self._client_instance = None

    def _client(self):
        try:
            from openai import OpenAI  # type: ignore
        except ImportError as e:
            raise OpenAIClientError(
                "openai package is not installed. Add it to dependencies and reinstall."
            ) from e
        if self._client_instance is not None:
            return self._client_instance
        # Keep SDK retries off; we implement our own backoff.
        self._client_instance = OpenAI(api_key=self._api_key, timeout=self._timeout_s, max_retries=0)
        return self._client_instance

    @staticmethod
    def _is_retryable(e: Exception) -> bool:
        name = e.__class__.__name__.lower()
        if "timeout" in name:
            return True
        if "ratelimit" in name or "rate_limit" in name:
            return True
        if "apiconnection" in name or "connection" in name:
            return True
        if "serviceunavailable" in name or "internalservererror" in name:
            return True
        status = getattr(e, "status_code", None)
        if isinstance(status, int) and status in (408, 429, 500, 502, 503, 504):
            return True
        return False

    def chat_text(
        self,
        *,
        model: str,
        system: str,
        user: str,
        max_tokens: int = 400,
        temperature: float = 0.7,
    ) -> OpenAIChatResult:
        """Ask the model for a plain text answer. Raises OpenAIClientError on failure or empty output."""
        if not self._api_key:
            raise OpenAIClientError("OPENAI_API_KEY is missing")

        last_err: Exception | None = None
        for attempt in range(self._max_retries + 1):
            try:
                client = self._client()
                resp = client.chat.completions.create(
                    model=model,
                    messages=[
                        {"role": "system", "content": system},
                        {"role": "user", "content": user},
                    ],
                    temperature=temperature,
                    max_tokens=max_tokens,
                )
                text = (resp.choices[0].message.content or "").strip()
                if not text:
                    raise OpenAIClientError("LLM returned an empty response")
                return OpenAIChatResult(content_text=text, model=model)
            except OpenAIClientError as e:
                last_err = e
                break
            except Exception as e:  # noqa: BLE001
                last_err = e
                if attempt >= self._max_retries:
                    break
                if not self._is_retryable(e):
                    break
                # Exponential backoff + jitter
                base = 0.8 * (2**attempt)
                delay = min(12.0, base) * (0.7 + 0.6 * random.random())
                time.sleep(delay)

        raise OpenAIClientError(f"OpenAI request failed: {last_err}")
