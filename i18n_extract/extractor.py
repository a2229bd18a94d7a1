"""High-level orchestration for an extraction run."""

from __future__ import annotations

import pathlib
import re
import sys
import time
from dataclasses import dataclass, field
from typing import Dict, List, Set

from .dictionary import merge_and_persist
from .documents import detect_handler
from .errors import (
    BackupError,
    ConfigurationError,
    DocumentFormatError,
    ErrorCategory,
    I18nExtractError,
)
from .filters import compile_rules, should_translate
from .keys import KeyGenerator, LocalKeyGenerator, RemoteKeyGenerator
from .matcher import RegexSpanMatcher, SpanMatcher
from .policy import ErrorPolicy
from .providers import build_provider
from .rewriter import DocumentRewriter, QuotedLiteralRewriter
from .storage import append_journal, backup_file, discover_documents
from .structures import Document, ExtractionOptions, TextSpan


@dataclass
class ExtractionSummary:
    """Report returned after a run."""

    dictionary_path: pathlib.Path
    scanned_files: int
    processed_files: int
    extracted_texts: int
    dictionary_size: int
    total_errors: int
    key_namer: str
    elapsed_seconds: float
    error_messages: List[str] = field(default_factory=list)


def build_key_generator(options: ExtractionOptions) -> KeyGenerator:
    """Pick the key generator named in the options."""

    local = LocalKeyGenerator(script_pattern=options.script_pattern)
    if options.key_namer == "local":
        return local
    provider = build_provider(
        options.key_namer,
        endpoint=options.ai_endpoint,
        api_key=options.ai_api_key,
        openai_api_key=options.openai_api_key,
        timeout=options.ai_timeout,
        debug=options.provider_debug,
    )
    return RemoteKeyGenerator(provider, fallback=local)


class ExtractionRunner:
    """Coordinates discovery, extraction, rewriting and the dictionary update.

    The key -> text map and the processed-file set live on the runner, so a
    fresh runner always starts from empty state.
    """

    def __init__(
        self,
        options: ExtractionOptions,
        *,
        key_generator: KeyGenerator | None = None,
        matcher: SpanMatcher | None = None,
        rewriter: DocumentRewriter | None = None,
    ) -> None:
        self.options = options
        self._owns_key_generator = key_generator is None
        try:
            self.matcher = matcher or RegexSpanMatcher(
                options.script_pattern,
                single_line_comment=options.single_line_comment,
                multi_line_comment=options.multi_line_comment,
            )
            self.exclusion_rules = compile_rules(options.exclude_patterns)
            self.key_generator = key_generator or build_key_generator(options)
        except re.error as exc:
            raise ConfigurationError(
                f"Invalid regular expression {exc.pattern!r}: {exc}"
            ) from exc
        self.rewriter = rewriter or QuotedLiteralRewriter()

        self.error_policy = ErrorPolicy(verbose=options.verbose)
        self.translations: Dict[str, str] = {}
        self.keys_by_text: Dict[str, str] = {}
        self.processed_files: Set[pathlib.Path] = set()
        self.scanned_files = 0

    def run(self) -> ExtractionSummary:
        start_time = time.time()
        print("Starting i18n extraction...")

        try:
            for scan_dir in self.options.scan_dirs:
                files = discover_documents(
                    scan_dir,
                    self.options.extensions,
                    self.options.ignore,
                )
                if self.options.verbose:
                    print(f"Found {len(files)} files under {scan_dir}.")
                for path in files:
                    self.scanned_files += 1
                    self.process_file(path)
        finally:
            if self._owns_key_generator:
                self.key_generator.close()

        merged = merge_and_persist(self.options.dictionary_path, self.translations)
        if self.options.verbose:
            print(f"Updated dictionary {self.options.dictionary_path}.")

        return ExtractionSummary(
            dictionary_path=self.options.dictionary_path,
            scanned_files=self.scanned_files,
            processed_files=len(self.processed_files),
            extracted_texts=len(self.translations),
            dictionary_size=len(merged),
            total_errors=self.error_policy.total,
            key_namer=self.options.key_namer,
            elapsed_seconds=time.time() - start_time,
            error_messages=self.error_policy.messages(),
        )

    def process_file(self, path: pathlib.Path) -> bool:
        """Extract, rewrite and save one document. Failures stay with the file."""

        try:
            _, handler = detect_handler(path)
            content = handler.read()
            if self.options.backup:
                self._backup(path)
            document = handler.split(content)

            file_entries = self.extract_document(document)
            current = dict(self.translations)
            current.update(file_entries)
            rewritten = self.rewriter.rewrite(content, current)
            if rewritten != content:
                handler.save(rewritten)
        except (OSError, UnicodeDecodeError, I18nExtractError) as exc:
            category = self._categorise(exc)
            self.error_policy.handle_error(
                category,
                f"Error processing {path}: {exc}",
                path=path,
            )
            self._journal(f"Error: {path} - {exc}")
            return False

        self.translations.update(file_entries)
        self.processed_files.add(path)
        self._journal(f"Processed: {path}")
        if self.options.verbose:
            print(f"Successfully processed: {path} ({len(file_entries)} texts)")
        return True

    def extract_document(self, document: Document) -> Dict[str, str]:
        """Key every translatable span in the document's regions."""

        entries: Dict[str, str] = {}
        for span in self.find_spans(document):
            key = self.keys_by_text.get(span.text)
            if key is None:
                key = self.key_generator.generate(span.text)
                self.keys_by_text[span.text] = key
            entries[key] = span.text
        return entries

    def find_spans(self, document: Document) -> List[TextSpan]:
        spans: List[TextSpan] = []
        for region, text in document.regions():
            for candidate in self.matcher.find_spans(text):
                if should_translate(candidate, self.exclusion_rules):
                    spans.append(TextSpan(text=candidate, region=region))
        return spans

    def _backup(self, path: pathlib.Path) -> None:
        try:
            backup_path = backup_file(path, self.options.backup_dir)
        except OSError as exc:
            raise BackupError(f"backup failed: {exc}") from exc
        if self.options.verbose:
            print(f"Backed up {path} to {backup_path}.")

    def _journal(self, event: str) -> None:
        if not self.options.generate_log:
            return
        try:
            append_journal(self.options.log_path, event)
        except OSError as exc:
            print(
                f"[i18n-extract] warning: could not write log {self.options.log_path}: {exc}",
                file=sys.stderr,
            )

    @staticmethod
    def _categorise(exc: Exception) -> ErrorCategory:
        if isinstance(exc, BackupError):
            return ErrorCategory.BACKUP
        if isinstance(exc, (DocumentFormatError, UnicodeDecodeError)):
            return ErrorCategory.FORMAT
        if isinstance(exc, OSError):
            return ErrorCategory.FILE_IO
        return ErrorCategory.OTHER
