"""
Result aggregation for manifest batches.

Documents are executed out of input order (see ``ordering``) but reported in
input order, one outcome per non-blank document.
"""

from typing import Optional

from ...schemas.kubernetes import ApplyOutcome
from .manifests import DocumentError


class IncompleteReportError(RuntimeError):
    """``build`` was called before every document had an outcome."""


class ReportBuilder:
    """Collects outcomes by input index and releases them only as a whole."""

    def __init__(self, size: int) -> None:
        self._slots: list[Optional[ApplyOutcome]] = [None] * size

    def __len__(self) -> int:
        return len(self._slots)

    @property
    def recorded(self) -> int:
        return sum(1 for slot in self._slots if slot is not None)

    def record(self, index: int, outcome: ApplyOutcome) -> None:
        if not 0 <= index < len(self._slots):
            raise IndexError(f"document index {index} outside batch of {len(self._slots)}")
        if self._slots[index] is not None:
            raise ValueError(f"outcome for document {index} already recorded")
        self._slots[index] = outcome

    def record_rejection(self, error: DocumentError) -> None:
        self.record(
            error.index,
            ApplyOutcome(kind=error.kind, status="error", detail=error.message),
        )

    def build(self) -> list[ApplyOutcome]:
        missing = [index for index, slot in enumerate(self._slots) if slot is None]
        if missing:
            raise IncompleteReportError(f"no outcome recorded for documents {missing}")
        return [slot for slot in self._slots if slot is not None]
