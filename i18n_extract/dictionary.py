"""Load, merge and persist the key -> text dictionary file."""

from __future__ import annotations

import json
import pathlib
from typing import Dict, Mapping

from .errors import DictionaryFormatError
from .storage import write_text_atomic


def load_dictionary(path: pathlib.Path) -> Dict[str, str]:
    """Read an existing dictionary. A missing file is an empty dictionary."""

    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}

    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise DictionaryFormatError(
            f"Dictionary file {path} is not valid JSON: {exc}"
        ) from exc

    if not isinstance(data, dict):
        raise DictionaryFormatError(
            f"Dictionary file {path} must contain a JSON object at the root."
        )
    bad_keys = [key for key, value in data.items() if not isinstance(value, str)]
    if bad_keys:
        raise DictionaryFormatError(
            f"Dictionary file {path} has non-string values for: {', '.join(bad_keys)}."
        )
    return data


def merge_entries(
    existing: Mapping[str, str],
    new_entries: Mapping[str, str],
) -> Dict[str, str]:
    """Union of both mappings; new entries win on key collisions."""

    merged = dict(existing)
    merged.update(new_entries)
    return merged


def serialise_dictionary(entries: Mapping[str, str]) -> str:
    return json.dumps(dict(entries), ensure_ascii=False, indent=2) + "\n"


def merge_and_persist(
    path: pathlib.Path,
    run_entries: Mapping[str, str],
) -> Dict[str, str]:
    """Fold this run's entries into the dictionary file and rewrite it whole."""

    merged = merge_entries(load_dictionary(path), run_entries)
    write_text_atomic(path, serialise_dictionary(merged))
    return merged
