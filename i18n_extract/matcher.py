"""Locate translatable spans inside a block of source text."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Iterator

from .structures import (
    DEFAULT_MULTI_LINE_COMMENT,
    DEFAULT_SCRIPT_PATTERN,
    DEFAULT_SINGLE_LINE_COMMENT,
)


class SpanMatcher(ABC):
    """Finds candidate spans in a region of a document."""

    @abstractmethod
    def find_spans(self, text: str) -> Iterator[str]:
        """Yield candidate spans from left to right."""


class RegexSpanMatcher(SpanMatcher):
    """Flat regex scan for runs of characters in the target script.

    Comments are removed before scanning so commented-out text never
    becomes a span. Block comments go first so that a ``//`` inside a
    ``/* ... */`` block cannot truncate it.
    """

    def __init__(
        self,
        script_pattern: str = DEFAULT_SCRIPT_PATTERN,
        *,
        single_line_comment: str | None = DEFAULT_SINGLE_LINE_COMMENT,
        multi_line_comment: str | None = DEFAULT_MULTI_LINE_COMMENT,
    ) -> None:
        self.script_regex = re.compile(script_pattern)
        self.comment_regexes = [
            re.compile(pattern)
            for pattern in (multi_line_comment, single_line_comment)
            if pattern
        ]

    def strip_comments(self, text: str) -> str:
        for regex in self.comment_regexes:
            text = regex.sub("", text)
        return text

    def find_spans(self, text: str) -> Iterator[str]:
        cleaned = self.strip_comments(text)
        for match in self.script_regex.finditer(cleaned):
            if match.group(0):
                yield match.group(0)
