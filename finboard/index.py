from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from finboard.locate import HeaderMarkers, find_header_row, find_label_column, value_columns
from finboard.values import coerce_number, normalize_label

Entry = Mapping[int, float]


@dataclass(frozen=True)
class LineItemIndex:
    """Normalized line-item label -> {column index -> value}, built once per document."""

    entries: Mapping[str, Entry] = field(default_factory=dict)

    def __contains__(self, label: object) -> bool:
        return normalize_label(label) in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, label: str) -> Optional[Entry]:
        return self.entries.get(normalize_label(label))

    def find_first(self, candidates: Iterable[str]) -> Optional[Entry]:
        for label in candidates:
            entry = self.get(label)
            if entry is not None:
                return entry
        return None

    def resolve(self, candidates: Iterable[str], column: int) -> Optional[float]:
        """Return the value at ``column`` for the first candidate spelling that has one."""
        for label in candidates:
            entry = self.get(label)
            if entry is not None and column in entry:
                return entry[column]
        return None


def build_index(
    rows: Sequence[Sequence[str]],
    header_row: int,
    label_col: int,
    columns: Sequence[Tuple[int, str]],
) -> LineItemIndex:
    entries: Dict[str, Entry] = {}
    for row in rows[header_row + 1 :]:
        label = row[label_col] if label_col < len(row) else ""
        key = normalize_label(label)
        if not key:
            continue
        values: Dict[int, float] = {}
        for col_idx, _ in columns:
            if col_idx >= len(row):
                continue
            val = coerce_number(row[col_idx])
            if val is not None:
                values[col_idx] = val
        if not values:
            continue
        entries[key] = MappingProxyType(values)
    return LineItemIndex(entries=MappingProxyType(entries))


@dataclass(frozen=True)
class Document:
    rows: Tuple[Tuple[str, ...], ...]
    header_row: int
    label_col: int
    columns: Tuple[Tuple[int, str], ...]
    index: LineItemIndex

    @property
    def header(self) -> Tuple[str, ...]:
        return self.rows[self.header_row] if self.rows else ()

    def column_name(self, column: int) -> Optional[str]:
        for idx, name in self.columns:
            if idx == column:
                return name
        return None


def build_document(
    rows: Sequence[Sequence[str]],
    markers: Optional[HeaderMarkers] = None,
    *,
    label_col: Optional[int] = None,
) -> Document:
    header_row = find_header_row(rows, markers)
    if label_col is None:
        label_col = find_label_column(rows, header_row)
    header: List[str] = list(rows[header_row]) if rows else []
    columns = value_columns(header, label_col)
    return Document(
        rows=tuple(tuple(r) for r in rows),
        header_row=header_row,
        label_col=label_col,
        columns=tuple(columns),
        index=build_index(rows, header_row, label_col, columns),
    )
