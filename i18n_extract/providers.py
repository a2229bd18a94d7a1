"""Key-naming provider abstractions."""

from __future__ import annotations

import json
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

import requests

from .errors import KeyNamingError


class NamingFailure(Enum):
    """Why a naming request produced no suggestion."""

    TIMEOUT = "timeout"
    TRANSPORT = "transport error"
    HTTP_STATUS = "http status"
    MALFORMED = "malformed response"
    EMPTY = "empty suggestion"


@dataclass(frozen=True)
class NamingOutcome:
    """Either a raw suggestion from the service or the reason there is none."""

    suggestion: Optional[str] = None
    failure: Optional[NamingFailure] = None
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.failure is None and self.suggestion is not None

    @classmethod
    def success(cls, suggestion: str) -> "NamingOutcome":
        return cls(suggestion=suggestion)

    @classmethod
    def failed(cls, failure: NamingFailure, detail: str | None = None) -> "NamingOutcome":
        return cls(failure=failure, detail=detail)

    def describe(self) -> str:
        if self.failure is None:
            return "ok"
        if self.detail:
            return f"{self.failure.value}: {self.detail}"
        return self.failure.value


class KeyNamingProvider(ABC):
    """Abstract adapter for remote key-naming services."""

    def __init__(self, *, debug: bool = False) -> None:
        self.debug = debug

    @abstractmethod
    def suggest(self, text: str, *, instruction: str, max_length: int) -> NamingOutcome:
        """Ask the service for an identifier. Must not raise on service failure."""

    def close(self) -> None:
        """Release network resources held by the provider."""

    def _log_debug(self, label: str, payload: Any) -> None:
        """Emit structured debug information when enabled."""

        if not self.debug:
            return
        try:
            if isinstance(payload, (dict, list)):
                message = json.dumps(payload, ensure_ascii=False, indent=2)
            else:
                message = str(payload)
        except (TypeError, ValueError):
            message = repr(payload)
        print(f"[i18n-extract][provider-debug] {label}:\n{message}", file=sys.stderr)


def _suggestion_from_payload(payload: Any) -> NamingOutcome:
    if not isinstance(payload, dict):
        return NamingOutcome.failed(
            NamingFailure.MALFORMED, "expected a JSON object"
        )
    suggestion = payload.get("suggestion")
    if not isinstance(suggestion, str):
        return NamingOutcome.failed(
            NamingFailure.MALFORMED, "missing string field 'suggestion'"
        )
    return NamingOutcome.success(suggestion)


class HttpKeyNamingProvider(KeyNamingProvider):
    """Posts spans to a JSON endpoint that answers with ``{"suggestion": ...}``."""

    DEFAULT_TIMEOUT = 5.0

    def __init__(
        self,
        *,
        endpoint: str | None,
        api_key: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
        debug: bool = False,
    ) -> None:
        super().__init__(debug=debug)
        if not endpoint:
            raise KeyNamingError(
                "Key-naming endpoint missing. Set I18N_AI_ENDPOINT or use the local key namer."
            )
        self.endpoint = endpoint
        self.api_key = api_key
        self.timeout = timeout
        self._owns_session = session is None
        self.session = session or requests.Session()

    def close(self) -> None:
        # Sessions passed in by the caller are left open.
        if self._owns_session:
            self.session.close()

    def suggest(self, text: str, *, instruction: str, max_length: int) -> NamingOutcome:
        payload = {"text": text, "instruction": instruction, "maxLength": max_length}
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        self._log_debug("provider.request.payload", payload)

        try:
            response = self.session.post(
                self.endpoint,
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.Timeout as exc:
            return NamingOutcome.failed(NamingFailure.TIMEOUT, str(exc))
        except requests.RequestException as exc:
            return NamingOutcome.failed(NamingFailure.TRANSPORT, str(exc))

        if not 200 <= response.status_code < 300:
            return NamingOutcome.failed(
                NamingFailure.HTTP_STATUS, f"service answered {response.status_code}"
            )
        try:
            data = response.json()
        except ValueError as exc:
            return NamingOutcome.failed(NamingFailure.MALFORMED, f"invalid JSON: {exc}")

        self._log_debug("provider.response.payload", data)
        return _suggestion_from_payload(data)


class OpenAIKeyNamingProvider(KeyNamingProvider):
    """Key-naming provider that uses OpenAI chat models."""

    DEFAULT_MODEL = "gpt-4o-mini"

    def __init__(
        self,
        *,
        api_key: str | None,
        model: str | None = None,
        timeout: float = HttpKeyNamingProvider.DEFAULT_TIMEOUT,
        client: Any = None,
        debug: bool = False,
    ) -> None:
        super().__init__(debug=debug)
        self.model = model or self.DEFAULT_MODEL
        self.timeout = timeout
        self._owns_client = client is None
        self._client = client if client is not None else self._build_client(api_key)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def _build_client(self, api_key: str | None) -> Any:
        if not api_key:
            raise KeyNamingError(
                "OpenAI configuration missing. Set OPENAI_API_KEY or choose a "
                "different key namer."
            )
        from openai import OpenAI

        return OpenAI(api_key=api_key, timeout=self.timeout, max_retries=0)

    def suggest(self, text: str, *, instruction: str, max_length: int) -> NamingOutcome:
        system_prompt = (
            f"{instruction} The identifier must be at most {max_length} characters. "
            'Respond strictly with an object shaped as {"suggestion": "..."}. '
            "Do not add commentary. Do not wrap the JSON in markdown code fences."
        )
        user_payload = {"text": text, "maxLength": max_length}
        self._log_debug("provider.request.payload", user_payload)

        from openai import APIConnectionError, APIError, APITimeoutError

        try:
            response = self._client.chat.completions.create(
                model=self.model,
                temperature=0,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {
                        "role": "user",
                        "content": json.dumps(user_payload, ensure_ascii=False),
                    },
                ],
            )
        except APITimeoutError as exc:
            return NamingOutcome.failed(NamingFailure.TIMEOUT, str(exc))
        except APIConnectionError as exc:
            return NamingOutcome.failed(NamingFailure.TRANSPORT, str(exc))
        except APIError as exc:
            return NamingOutcome.failed(NamingFailure.HTTP_STATUS, str(exc))

        content = self._message_content(response)
        self._log_debug("provider.response.content", content)
        if content is None:
            return NamingOutcome.failed(
                NamingFailure.MALFORMED, "response empty or unrecognised"
            )
        try:
            data = json.loads(self._strip_code_fence(content))
        except json.JSONDecodeError as exc:
            return NamingOutcome.failed(NamingFailure.MALFORMED, f"invalid JSON: {exc}")
        return _suggestion_from_payload(data)

    def _message_content(self, response: Any) -> str | None:
        choices = getattr(response, "choices", None) or []
        for choice in choices:
            message = getattr(choice, "message", None)
            content = getattr(message, "content", None)
            if content:
                return str(content)
        return None

    def _strip_code_fence(self, text: str) -> str:
        """Remove leading/trailing markdown code fences if present."""

        stripped = text.strip()
        if not stripped.startswith("```"):
            return stripped

        first_newline = stripped.find("\n")
        if first_newline == -1:
            return stripped
        body = stripped[first_newline + 1 :]
        closing_index = body.rfind("```")
        if closing_index != -1:
            body = body[:closing_index]
        return body.strip()


def build_provider(
    name: str | None,
    *,
    endpoint: str | None = None,
    api_key: str | None = None,
    openai_api_key: str | None = None,
    timeout: float = HttpKeyNamingProvider.DEFAULT_TIMEOUT,
    debug: bool = False,
) -> KeyNamingProvider:
    """Factory to create providers by name."""

    normalized = (name or "http").strip().lower()
    if normalized in {"http", "remote", "endpoint"}:
        return HttpKeyNamingProvider(
            endpoint=endpoint, api_key=api_key, timeout=timeout, debug=debug
        )
    if normalized in {"openai", "gpt"}:
        return OpenAIKeyNamingProvider(
            api_key=openai_api_key, timeout=timeout, debug=debug
        )
    raise KeyNamingError(f"Unknown key-naming provider '{name}'.")
