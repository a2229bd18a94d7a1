"""Core data structures for the i18n extractor."""

from __future__ import annotations

import pathlib
from dataclasses import dataclass, field
from typing import List, Literal, Optional


Region = Literal["template", "script"]

DEFAULT_SCRIPT_PATTERN = r"[\u4e00-\u9fa5]+"
DEFAULT_SINGLE_LINE_COMMENT = r"//.*"
DEFAULT_MULTI_LINE_COMMENT = r"/\*[\s\S]*?\*/"
DEFAULT_EXCLUDE_PATTERNS = (
    r"^\d+$",
    r"^[a-zA-Z\s]+$",
    r"^[!@#$%^&*()]+$",
)


@dataclass
class Document:
    """A single source file and the regions the splitter found in it."""

    path: pathlib.Path
    raw_text: str
    template: Optional[str] = None
    script: Optional[str] = None

    def regions(self) -> List[tuple[Region, str]]:
        found: List[tuple[Region, str]] = []
        if self.template is not None:
            found.append(("template", self.template))
        if self.script is not None:
            found.append(("script", self.script))
        return found


@dataclass(frozen=True)
class TextSpan:
    """A run of target-script characters found inside a document region."""

    text: str
    region: Region


@dataclass
class ExtractionOptions:
    """Everything a run needs to know, resolved from settings and CLI flags."""

    scan_dirs: List[pathlib.Path]
    dictionary_path: pathlib.Path
    ignore: List[str] = field(default_factory=lambda: ["node_modules", "dist"])
    extensions: List[str] = field(default_factory=lambda: [".vue"])
    backup: bool = False
    backup_dir: pathlib.Path = pathlib.Path("i18n-backup")
    generate_log: bool = False
    log_path: pathlib.Path = pathlib.Path("i18n-extract.log")
    script_pattern: str = DEFAULT_SCRIPT_PATTERN
    single_line_comment: str = DEFAULT_SINGLE_LINE_COMMENT
    multi_line_comment: str = DEFAULT_MULTI_LINE_COMMENT
    exclude_patterns: List[str] = field(
        default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS)
    )
    key_namer: str = "local"
    ai_endpoint: Optional[str] = None
    ai_api_key: Optional[str] = None
    ai_timeout: float = 5.0
    openai_api_key: Optional[str] = None
    verbose: bool = False
    provider_debug: bool = False
