from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple


@dataclass(frozen=True)
class HeaderMarkers:
    """Substrings that identify a header row once the row text is joined and lowercased.

    Every ``required`` marker must appear; when ``any_of`` is non-empty at least one
    of its markers must appear too.
    """

    required: Tuple[str, ...] = ()
    any_of: Tuple[str, ...] = ()

    def matches(self, row: Sequence[str]) -> bool:
        text = " ".join(str(x or "") for x in row).lower()
        if not all(m.lower() in text for m in self.required):
            return False
        if self.any_of and not any(m.lower() in text for m in self.any_of):
            return False
        return bool(self.required or self.any_of)


BUDGET_MARKERS = HeaderMarkers(required=("year",), any_of=("budget", "actual", "july"))
STATEMENT_MARKERS = HeaderMarkers(any_of=("fy", "year ended", "fiscal year"))


def find_header_row(
    rows: Sequence[Sequence[str]],
    markers: Optional[HeaderMarkers],
    search_rows: Optional[int] = None,
) -> int:
    if markers is None:
        return 0
    limit = len(rows) if search_rows is None else min(search_rows, len(rows))
    for idx in range(limit):
        if markers.matches(rows[idx]):
            return idx
    return 0


def find_label_column(rows: Sequence[Sequence[str]], header_row: int) -> int:
    body = rows[header_row + 1 :]
    width = max((len(r) for r in body), default=0)
    best_col, best_count = 0, 0
    for col in range(width):
        count = sum(1 for r in body if col < len(r) and len(str(r[col] or "").strip()) > 1)
        if count > best_count:
            best_col, best_count = col, count
    return best_col


def value_columns(header: Sequence[str], label_col: int) -> List[Tuple[int, str]]:
    return [(idx, str(name)) for idx, name in enumerate(header) if idx != label_col]
