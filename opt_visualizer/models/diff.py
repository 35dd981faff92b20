"""Diff span models."""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable


class SpanKind(Enum):
    """Classification of a contiguous run of text in a diff."""

    ADDED = "added"
    REMOVED = "removed"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class DiffSpan:
    """A classified span of text."""

    kind: SpanKind
    value: str

    @property
    def is_change(self) -> bool:
        return self.kind != SpanKind.UNCHANGED


def reconstruct_before(spans: Iterable[DiffSpan]) -> str:
    """Concatenate removed and unchanged spans (the 'before' side)."""
    return "".join(s.value for s in spans if s.kind != SpanKind.ADDED)


def reconstruct_after(spans: Iterable[DiffSpan]) -> str:
    """Concatenate added and unchanged spans (the 'after' side)."""
    return "".join(s.value for s in spans if s.kind != SpanKind.REMOVED)
