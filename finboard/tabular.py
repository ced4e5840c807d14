from __future__ import annotations

from typing import List, Sequence

Row = List[str]


def _is_blank(row: Sequence[str]) -> bool:
    return not any(str(x or "").strip() for x in row)


def parse_delimited(text: str) -> List[Row]:
    """Split comma-separated text into trimmed string rows.

    Double quotes toggle quoting, ``""`` inside a quoted field is a literal quote,
    and records end on ``\\n``, ``\\r\\n`` or a bare ``\\r``. Blank rows are dropped.
    An unterminated quote keeps the rest of the text in the current field.
    The delimiter is always a comma; other dialects are not supported.
    """
    rows: List[Row] = []
    row: Row = []
    field: List[str] = []
    in_quotes = False
    i = 0
    n = len(text)

    def end_record() -> None:
        row.append("".join(field))
        field.clear()
        if not _is_blank(row):
            rows.append([x.strip() for x in row])
        row.clear()

    while i < n:
        c = text[i]
        if c == '"':
            if in_quotes and i + 1 < n and text[i + 1] == '"':
                field.append('"')
                i += 2
                continue
            in_quotes = not in_quotes
            i += 1
            continue
        if not in_quotes and c == ",":
            row.append("".join(field))
            field.clear()
            i += 1
            continue
        if not in_quotes and c in "\r\n":
            if c == "\r" and i + 1 < n and text[i + 1] == "\n":
                i += 1
            end_record()
            i += 1
            continue
        field.append(c)
        i += 1

    end_record()
    return rows

