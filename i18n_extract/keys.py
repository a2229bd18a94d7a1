"""Key generation for extracted spans."""

from __future__ import annotations

import re
import sys
from abc import ABC, abstractmethod
from typing import Pattern, Union

from .providers import KeyNamingProvider, NamingFailure, NamingOutcome
from .structures import DEFAULT_SCRIPT_PATTERN

KEY_PREFIX = "text_"
KEY_SOURCE_LENGTH = 10
SUGGESTION_MAX_LENGTH = 32
NAMING_INSTRUCTION = (
    "Suggest a short camelCase identifier in English for this UI text, to be "
    "used as a translation key. Use ASCII letters and digits only."
)

_WHITESPACE = re.compile(r"\s")
_UNSAFE_KEY_CHARS = re.compile(r"[^a-z0-9_]")
_UNSAFE_SUGGESTION_CHARS = re.compile(r"[^A-Za-z0-9]")


def generate_key(
    text: str,
    *,
    prefix: str = KEY_PREFIX,
    length: int = KEY_SOURCE_LENGTH,
    script_pattern: Union[str, Pattern[str]] = DEFAULT_SCRIPT_PATTERN,
) -> str:
    """Derive a key from the leading characters of a span.

    Every character matched by the script pattern becomes an underscore, as
    does whitespace. Whatever is left is lowercased and any character outside
    ``[a-z0-9_]`` is replaced too, so keys stay ASCII identifiers whatever
    pattern is configured. Different spans of the same length can share a
    key; the later span wins when that happens.
    """

    head = text[:length]
    script_regex = re.compile(script_pattern)
    replaced = script_regex.sub(lambda match: "_" * len(match.group(0)), head)
    replaced = _WHITESPACE.sub("_", replaced).lower()
    return f"{prefix}{_UNSAFE_KEY_CHARS.sub('_', replaced)}"


def sanitise_suggestion(suggestion: str) -> str:
    return _UNSAFE_SUGGESTION_CHARS.sub("", suggestion)


class KeyGenerator(ABC):
    """Assigns lookup keys to spans."""

    @abstractmethod
    def generate(self, text: str) -> str:
        """Return the key for the provided span."""

    def close(self) -> None:
        """Release resources held by the generator."""


class LocalKeyGenerator(KeyGenerator):
    """Deterministic key generator that never touches the network."""

    def __init__(
        self,
        *,
        prefix: str = KEY_PREFIX,
        script_pattern: Union[str, Pattern[str]] = DEFAULT_SCRIPT_PATTERN,
    ) -> None:
        self.prefix = prefix
        self.script_regex = re.compile(script_pattern)

    def generate(self, text: str) -> str:
        return generate_key(text, prefix=self.prefix, script_pattern=self.script_regex)


class RemoteKeyGenerator(KeyGenerator):
    """Asks a naming service for a key and falls back to local keys."""

    def __init__(
        self,
        provider: KeyNamingProvider,
        *,
        fallback: KeyGenerator | None = None,
        instruction: str = NAMING_INSTRUCTION,
        max_length: int = SUGGESTION_MAX_LENGTH,
    ) -> None:
        self.provider = provider
        self.fallback = fallback or LocalKeyGenerator()
        self.instruction = instruction
        self.max_length = max_length
        self.fallback_count = 0

    def generate(self, text: str) -> str:
        outcome = self.provider.suggest(
            text,
            instruction=self.instruction,
            max_length=self.max_length,
        )
        if outcome.ok:
            key = sanitise_suggestion(outcome.suggestion or "")
            if key:
                return key
            outcome = NamingOutcome.failed(
                NamingFailure.EMPTY,
                f"suggestion {outcome.suggestion!r} has no usable characters",
            )

        fallback_key = self.fallback.generate(text)
        self.fallback_count += 1
        print(
            f"[i18n-extract] warning: key naming failed for {text!r} "
            f"({outcome.describe()}); using {fallback_key!r}.",
            file=sys.stderr,
        )
        return fallback_key

    def close(self) -> None:
        self.provider.close()
        self.fallback.close()
