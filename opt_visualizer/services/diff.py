"""Word-level diff between two text snapshots.

The unit of comparison is a word: a maximal run of non-whitespace plus its
trailing whitespace. Whitespace is kept inside the tokens so the spans
reconstruct both sides exactly.

Alignment is a shortest edit script over words (Myers), which keeps a
longest common subsequence unchanged. Inside a gap, removals are reported
before additions. Above MAX_EDIT_DISTANCE token edits the gap is reported
as one removal followed by one addition.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable

from ..models.diff import DiffSpan, SpanKind
from ..models.stage import StageResult


logger = logging.getLogger(__name__)

# Myers runs in O((N + M) * D) time and O(D^2) memory
MAX_EDIT_DISTANCE = 2000

_TOKEN_RE = re.compile(r"^\s+|\S+\s*")
_TRAILING_WS_RE = re.compile(r"\s*\Z")


@dataclass(frozen=True)
class DiffStats:
    """Word counts for a diff."""

    added: int = 0
    removed: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed)


def tokenize(text: str) -> list[str]:
    """Split text into word tokens. Joining the tokens gives back text."""
    return _TOKEN_RE.findall(text)


def diff_words(before: str, after: str) -> list[DiffSpan]:
    """Compute classified spans turning `before` into `after`.

    Returns:
        Spans with no two neighbours of the same kind
    """
    if before == after:
        return [DiffSpan(SpanKind.UNCHANGED, before)] if before else []

    a = tokenize(before)
    b = tokenize(after)

    # Common prefix and suffix never reach the edit search
    start = 0
    while start < len(a) and start < len(b) and a[start] == b[start]:
        start += 1
    end_a, end_b = len(a), len(b)
    while end_a > start and end_b > start and a[end_a - 1] == b[end_b - 1]:
        end_a -= 1
        end_b -= 1

    ops = [(SpanKind.UNCHANGED, tok) for tok in a[:start]]
    ops.extend(_edit_ops(a[start:end_a], b[start:end_b]))
    ops.extend((SpanKind.UNCHANGED, tok) for tok in a[end_a:])

    spans = _coalesce(ops)
    spans = _split_shared_whitespace(spans)
    return _coalesce((s.kind, s.value) for s in spans)


def _edit_ops(a: list[str], b: list[str]) -> list[tuple[SpanKind, str]]:
    """Shortest edit script over two token lists (Myers O(ND)).

    Within each run of changes between two unchanged tokens, removals are
    reported before additions.
    """
    n, m = len(a), len(b)
    offset = n + m + 1
    v = [0] * (2 * offset + 1)
    # trace[d] holds diagonals -(d+1)..d+1 as they were before step d
    trace: list[list[int]] = []
    found = False
    for d in range(min(n + m, MAX_EDIT_DISTANCE) + 1):
        trace.append(v[offset - d - 1:offset + d + 2])
        for k in range(-d, d + 1, 2):
            if k == -d or (k != d and v[offset + k - 1] < v[offset + k + 1]):
                x = v[offset + k + 1]
            else:
                x = v[offset + k - 1] + 1
            y = x - k
            while x < n and y < m and a[x] == b[y]:
                x += 1
                y += 1
            v[offset + k] = x
            if x >= n and y >= m:
                found = True
                break
        if found:
            break

    if not found:
        logger.debug(f"Edit distance above {MAX_EDIT_DISTANCE}, reporting a full rewrite")
        return [(SpanKind.REMOVED, tok) for tok in a] + [(SpanKind.ADDED, tok) for tok in b]

    backwards: list[tuple[SpanKind, str]] = []
    x, y = n, m
    for d in range(len(trace) - 1, -1, -1):
        snap = trace[d]
        k = x - y
        if k == -d or (k != d and snap[k - 1 + d + 1] < snap[k + 1 + d + 1]):
            prev_k = k + 1
        else:
            prev_k = k - 1
        prev_x = snap[prev_k + d + 1]
        prev_y = prev_x - prev_k
        while x > prev_x and y > prev_y:
            x -= 1
            y -= 1
            backwards.append((SpanKind.UNCHANGED, a[x]))
        if d > 0:
            if x == prev_x:
                backwards.append((SpanKind.ADDED, b[prev_y]))
            else:
                backwards.append((SpanKind.REMOVED, a[prev_x]))
        x, y = prev_x, prev_y

    return _removals_first(reversed(backwards))


def _removals_first(ops: Iterable[tuple[SpanKind, str]]) -> list[tuple[SpanKind, str]]:
    """Reorder each run of changes so its removals precede its additions."""
    result: list[tuple[SpanKind, str]] = []
    removed: list[tuple[SpanKind, str]] = []
    added: list[tuple[SpanKind, str]] = []
    for op in ops:
        if op[0] == SpanKind.REMOVED:
            removed.append(op)
        elif op[0] == SpanKind.ADDED:
            added.append(op)
        else:
            result.extend(removed)
            result.extend(added)
            removed.clear()
            added.clear()
            result.append(op)
    result.extend(removed)
    result.extend(added)
    return result


def _coalesce(ops: Iterable[tuple[SpanKind, str]]) -> list[DiffSpan]:
    """Merge neighbouring pieces of the same kind; drop empty pieces."""
    spans: list[DiffSpan] = []
    for kind, value in ops:
        if not value:
            continue
        if spans and spans[-1].kind == kind:
            spans[-1] = DiffSpan(kind, spans[-1].value + value)
        else:
            spans.append(DiffSpan(kind, value))
    return spans


def _split_shared_whitespace(spans: list[DiffSpan]) -> list[DiffSpan]:
    """Move whitespace shared by a removed/added pair out as unchanged.

    "1 " → "2 " becomes Removed("1"), Added("2"), Unchanged(" ").
    """
    result: list[DiffSpan] = []
    k = 0
    while k < len(spans):
        span = spans[k]
        nxt = spans[k + 1] if k + 1 < len(spans) else None
        if span.kind == SpanKind.REMOVED and nxt is not None and nxt.kind == SpanKind.ADDED:
            ws_removed = _TRAILING_WS_RE.search(span.value).group()
            ws_added = _TRAILING_WS_RE.search(nxt.value).group()
            if ws_removed and ws_removed == ws_added:
                cut = len(ws_removed)
                result.append(DiffSpan(SpanKind.REMOVED, span.value[:-cut]))
                result.append(DiffSpan(SpanKind.ADDED, nxt.value[:-cut]))
                result.append(DiffSpan(SpanKind.UNCHANGED, ws_removed))
                k += 2
                continue
        result.append(span)
        k += 1
    return result


def pairwise_diffs(history: list[StageResult]) -> list[list[DiffSpan]]:
    """Diff each history entry against the one before it."""
    return [diff_words(prev.text, cur.text) for prev, cur in zip(history, history[1:])]


def diff_stats(spans: Iterable[DiffSpan]) -> DiffStats:
    """Count words added and removed."""
    added = removed = 0
    for span in spans:
        if span.kind == SpanKind.ADDED:
            added += len(span.value.split())
        elif span.kind == SpanKind.REMOVED:
            removed += len(span.value.split())
    return DiffStats(added=added, removed=removed)
