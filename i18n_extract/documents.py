"""Document reading, region splitting and write-back."""

from __future__ import annotations

import pathlib
import re
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from .errors import DocumentFormatError, UnsupportedFileTypeError
from .storage import read_text, write_text_atomic
from .structures import Document


TEMPLATE_OPEN_PATTERN = re.compile(r"<template(?:\s[^>]*)?>", re.IGNORECASE)
TEMPLATE_CLOSE_PATTERN = re.compile(r"</template\s*>", re.IGNORECASE)
SCRIPT_OPEN_PATTERN = re.compile(r"<script(?:\s[^>]*)?>", re.IGNORECASE)
SCRIPT_CLOSE_PATTERN = re.compile(r"</script\s*>", re.IGNORECASE)


def _template_bounds(text: str) -> Optional[Tuple[int, int]]:
    """Offsets of the content between the first ``<template>`` and the last ``</template>``.

    Nested ``<template v-if>`` blocks are kept inside the outer region.
    """

    opening = TEMPLATE_OPEN_PATTERN.search(text)
    if opening is None:
        return None
    closings = list(TEMPLATE_CLOSE_PATTERN.finditer(text, opening.end()))
    if not closings:
        raise DocumentFormatError("Element <template> is missing end tag.")
    return opening.end(), closings[-1].start()


def _script_regions(text: str) -> List[str]:
    blocks: List[str] = []
    cursor = 0
    while True:
        opening = SCRIPT_OPEN_PATTERN.search(text, cursor)
        if opening is None:
            return blocks
        closing = SCRIPT_CLOSE_PATTERN.search(text, opening.end())
        if closing is None:
            raise DocumentFormatError("Element <script> is missing end tag.")
        blocks.append(text[opening.end():closing.start()])
        cursor = closing.end()


class BaseDocumentHandler(ABC):
    """Common base class for document handlers."""

    def __init__(self, source_path: pathlib.Path):
        self.source_path = source_path

    def read(self) -> str:
        return read_text(self.source_path)

    @abstractmethod
    def split(self, text: str) -> Document:
        """Locate the template and script regions of the document."""

    def save(self, text: str) -> None:
        """Replace the document on disk with the rewritten text."""

        write_text_atomic(self.source_path, text)


class VueDocumentHandler(BaseDocumentHandler):
    """Splits single-file components into template and script regions.

    ``<script>`` and ``<script setup>`` blocks are both part of the script
    region. Scripts nested inside the template are not treated as blocks.
    """

    def split(self, text: str) -> Document:
        bounds = _template_bounds(text)
        template = None
        outside_template = text
        if bounds is not None:
            start, end = bounds
            template = text[start:end]
            outside_template = text[:start] + text[end:]
        scripts = _script_regions(outside_template)
        return Document(
            path=self.source_path,
            raw_text=text,
            template=template,
            script="\n".join(scripts) if scripts else None,
        )


class ScriptDocumentHandler(BaseDocumentHandler):
    """Plain JavaScript / TypeScript modules are one script region."""

    def split(self, text: str) -> Document:
        return Document(path=self.source_path, raw_text=text, script=text)


SCRIPT_SUFFIXES = {".js", ".ts", ".jsx", ".tsx", ".mjs"}


def detect_handler(path: pathlib.Path) -> Tuple[str, BaseDocumentHandler]:
    """Select an appropriate handler for the provided file."""

    suffix = path.suffix.lower()
    if suffix == ".vue":
        return "vue", VueDocumentHandler(path)
    if suffix in SCRIPT_SUFFIXES:
        return "script", ScriptDocumentHandler(path)
    raise UnsupportedFileTypeError(
        f"{path.name}: this file type isn't supported; use .vue, .js or .ts files."
    )
