"""Rewrite documents so extracted text goes through the lookup function."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Mapping, Tuple


class DocumentRewriter(ABC):
    """Turns a document's text into its translated-call form."""

    @abstractmethod
    def rewrite(self, content: str, entries: Mapping[str, str]) -> str:
        """Return the rewritten content for the key -> text entries."""


class QuotedLiteralRewriter(DocumentRewriter):
    """Replaces quoted literals that equal an extracted text.

    ``"text"`` becomes ``"$t('key')"`` (a bound template attribute keeps its
    quotes) and ``'text'`` becomes ``this.$t('key')``. Matching is plain
    substring replacement over the whole document, so any identical quoted
    literal is rewritten, wherever it sits.
    """

    def __init__(self, *, call: str = "$t", receiver: str = "this") -> None:
        self.call = call
        self.receiver = receiver

    def ordered_entries(self, entries: Mapping[str, str]) -> List[Tuple[str, str]]:
        # Longest text first; sorted() is stable so equal lengths keep map order.
        return sorted(entries.items(), key=lambda item: len(item[1]), reverse=True)

    def rewrite(self, content: str, entries: Mapping[str, str]) -> str:
        rewritten = content
        for key, text in self.ordered_entries(entries):
            if not text:
                continue
            rewritten = rewritten.replace(f'"{text}"', f"\"{self.call}('{key}')\"")
            rewritten = rewritten.replace(
                f"'{text}'", f"{self.receiver}.{self.call}('{key}')"
            )
        return rewritten
