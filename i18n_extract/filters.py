"""Exclusion rules deciding which spans are worth translating."""

from __future__ import annotations

import re
from typing import Iterable, List, Sequence

from .structures import DEFAULT_EXCLUDE_PATTERNS


def compile_rules(patterns: Iterable[str]) -> List[re.Pattern[str]]:
    """Compile configured exclusion patterns."""

    return [re.compile(pattern) for pattern in patterns]


DEFAULT_EXCLUSION_RULES = compile_rules(DEFAULT_EXCLUDE_PATTERNS)


def should_translate(
    span: str,
    exclusion_rules: Sequence[re.Pattern[str]] = DEFAULT_EXCLUSION_RULES,
) -> bool:
    """Return False when the whole span matches any exclusion rule."""

    return not any(rule.fullmatch(span) for rule in exclusion_rules)
