"""Error handling policy for extraction runs."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from .errors import ErrorCategory, ErrorRecord


class ErrorPolicy:
    """Records file-level failures so the run can continue past them.

    Nothing here retries or aborts: a failed document is reported and the
    orchestrator moves on to the next one.
    """

    def __init__(self, *, verbose: bool = False) -> None:
        self.verbose = verbose
        self.records: List[ErrorRecord] = []

    def handle_error(
        self,
        category: ErrorCategory,
        message: str,
        *,
        path: Optional[Path] = None,
        details: Optional[str] = None,
    ) -> ErrorRecord:
        record = ErrorRecord(category=category, message=message, path=path, details=details)
        self.records.append(record)

        print(message)
        if self.verbose and details:
            print(f"    {details}")
        return record

    @property
    def total(self) -> int:
        return len(self.records)

    def messages(self) -> List[str]:
        return [record.message for record in self.records]
