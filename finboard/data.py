from __future__ import annotations

import json
import logging
import re
import zipfile
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from finboard.filters import Thresholds
from finboard.index import Document, build_document
from finboard.locate import BUDGET_MARKERS, STATEMENT_MARKERS, HeaderMarkers
from finboard.metrics import RATIO_DEFINITIONS, compute_ratio
from finboard.tabular import parse_delimited
from finboard.values import coerce_number

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parents[1] / "data"
BUDGET_CSV_PATH = DATA_DIR / "Rise_East_Budget_Cleaned.csv"
CONSOLIDATED_JSON_PATH = DATA_DIR / "consolidated.json"
RATIO_WORKBOOK_PATH = DATA_DIR / "ratios.xlsx"
STATEMENTS_DIR = DATA_DIR / "statements"
STATEMENT_GLOB = "*.csv"

RATIO_COLUMNS = ["org", "year", "metric", "value"]

ORG_KEYS = ("org", "organization", "Org", "Organization")
YEAR_KEYS = ("year", "Year")
METRIC_KEYS = ("metric", "ratio", "Metric", "Ratio")
VALUE_KEYS = ("value", "Value")

STATEMENT_LABELS: Dict[str, List[str]] = {
    "cash": [
        "Total Cash and Cash Equivalents",
        "Cash and Cash Equivalents",
        "Cash and cash equivalents",
        "Total Cash",
        "Cash",
    ],
    "receivables": [
        "Total Receivables",
        "Accounts Receivable",
        "Grants and Contributions Receivable",
        "Grants Receivable",
        "Contributions Receivable",
    ],
    "current_assets": ["Total Current Assets", "Current Assets, Total", "Total current assets"],
    "current_liabilities": [
        "Total Current Liabilities",
        "Current Liabilities, Total",
        "Total current liabilities",
    ],
    "total_liabilities": ["Total Liabilities", "Liabilities, Total", "Total liabilities"],
    "net_assets": ["Total Net Assets", "Net Assets, Total", "Net Assets", "Total net assets"],
}

DEMO_RATIO_ROWS: List[Dict[str, Any]] = [
    {"org": "Roots", "year": 2020, "metric": "Quick Ratio", "value": 1.4},
    {"org": "Roots", "year": 2021, "metric": "Quick Ratio", "value": 3.7},
    {"org": "Roots", "year": 2022, "metric": "Quick Ratio", "value": 5.4},
    {"org": "Roots", "year": 2023, "metric": "Quick Ratio", "value": 3.3},
    {"org": "EOYDC", "year": 2021, "metric": "Quick Ratio", "value": 2.2},
    {"org": "EOYDC", "year": 2022, "metric": "Quick Ratio", "value": 2.9},
    {"org": "EOYDC", "year": 2023, "metric": "Quick Ratio", "value": 2.5},
    {"org": "Roots", "year": 2020, "metric": "Current Ratio", "value": 1.6},
    {"org": "Roots", "year": 2021, "metric": "Current Ratio", "value": 3.9},
    {"org": "Roots", "year": 2022, "metric": "Current Ratio", "value": 5.6},
    {"org": "EOYDC", "year": 2021, "metric": "Current Ratio", "value": 1.8},
    {"org": "EOYDC", "year": 2022, "metric": "Current Ratio", "value": 2.2},
    {"org": "EOYDC", "year": 2023, "metric": "Current Ratio", "value": 2.0},
    {"org": "Roots", "year": 2020, "metric": "Debt Ratio", "value": 1.7},
    {"org": "Roots", "year": 2021, "metric": "Debt Ratio", "value": 1.1},
    {"org": "Roots", "year": 2022, "metric": "Debt Ratio", "value": 0.9},
    {"org": "EOYDC", "year": 2021, "metric": "Debt Ratio", "value": 1.8},
    {"org": "EOYDC", "year": 2022, "metric": "Debt Ratio", "value": 2.1},
    {"org": "EOYDC", "year": 2023, "metric": "Debt Ratio", "value": 1.6},
]


class DocumentLoadError(Exception):
    """Raised when a source document is missing, unreadable or has no usable rows."""


# ---------------- Documents ----------------
def read_text(path: Path) -> str:
    try:
        return Path(path).read_text(encoding="utf-8-sig")
    except OSError as exc:
        raise DocumentLoadError(f"could not read {path}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise DocumentLoadError(f"{path} is not UTF-8 text: {exc}") from exc


def load_csv_rows(path: Path) -> List[List[str]]:
    return parse_delimited(read_text(path))


def document_from_text(text: str, markers: Optional[HeaderMarkers] = BUDGET_MARKERS) -> Document:
    rows = parse_delimited(text)
    if len(rows) < 2:
        raise DocumentLoadError("document appears empty or invalid")
    return build_document(rows, markers)


def load_document(path: Path, markers: Optional[HeaderMarkers] = BUDGET_MARKERS) -> Document:
    try:
        doc = document_from_text(read_text(path), markers)
    except DocumentLoadError as exc:
        raise DocumentLoadError(f"{path}: {exc}") from exc
    logger.info("Loaded %s: %d rows, %d line items", Path(path).name, len(doc.rows), len(doc.index))
    return doc


# ---------------- Ratio rows ----------------
def _first_present(record: Mapping[str, Any], keys: Sequence[str]) -> Any:
    for k in keys:
        val = record.get(k)
        if val is not None and not (isinstance(val, float) and pd.isna(val)):
            return val
    return None


def empty_ratio_frame() -> pd.DataFrame:
    return pd.DataFrame(columns=RATIO_COLUMNS)


def clean_ratio_records(records: Iterable[Mapping[str, Any]]) -> pd.DataFrame:
    cleaned: List[Dict[str, Any]] = []
    for r in records:
        if not isinstance(r, Mapping):
            continue
        org = _first_present(r, ORG_KEYS)
        metric = _first_present(r, METRIC_KEYS)
        year = coerce_number(_first_present(r, YEAR_KEYS))
        value = coerce_number(_first_present(r, VALUE_KEYS))
        org = str(org).strip() if org is not None else ""
        metric = str(metric).strip() if metric is not None else ""
        if not org or not metric or year is None or value is None:
            continue
        cleaned.append({"org": org, "year": int(year), "metric": metric, "value": value})
    if not cleaned:
        return empty_ratio_frame()
    return pd.DataFrame(cleaned, columns=RATIO_COLUMNS)


def _require_rows(df: pd.DataFrame, source: Path) -> pd.DataFrame:
    if df.empty:
        raise DocumentLoadError(f"no valid rows in {source}")
    return df


def load_consolidated_json(path: Path = CONSOLIDATED_JSON_PATH) -> pd.DataFrame:
    try:
        payload = json.loads(read_text(path))
    except json.JSONDecodeError as exc:
        raise DocumentLoadError(f"invalid JSON in {path}: {exc}") from exc
    records = payload if isinstance(payload, list) else []
    return _require_rows(clean_ratio_records(records), path)


def load_ratio_workbook(path: Path = RATIO_WORKBOOK_PATH, sheet_name: Any = 0) -> pd.DataFrame:
    if not Path(path).exists():
        raise DocumentLoadError(f"workbook not found: {path}")
    try:
        df = pd.read_excel(path, sheet_name=sheet_name)
    except (OSError, ValueError, zipfile.BadZipFile) as exc:
        raise DocumentLoadError(f"could not read workbook {path}: {exc}") from exc
    df.columns = [str(c).strip() for c in df.columns]
    return _require_rows(clean_ratio_records(df.to_dict(orient="records")), path)


_YEAR_RE = re.compile(r"(19|20)\d{2}")


def parse_year(name: object) -> Optional[int]:
    match = _YEAR_RE.search(str(name or ""))
    return int(match.group(0)) if match else None


def resolve_statement_fields(doc: Document, column: int) -> Dict[str, Optional[float]]:
    return {field: doc.index.resolve(labels, column) for field, labels in STATEMENT_LABELS.items()}


def derive_statement_ratios(org: str, doc: Document, thresholds: Optional[Thresholds] = None) -> pd.DataFrame:
    """Compute every known ratio for each year column of one organisation's statement."""
    thresholds = thresholds or Thresholds()
    rows: List[Dict[str, Any]] = []
    for col_idx, name in doc.columns:
        year = parse_year(name)
        if year is None:
            continue
        fields = resolve_statement_fields(doc, col_idx)
        for metric in RATIO_DEFINITIONS:
            value = compute_ratio(metric, fields, thresholds.min_liquidity_denominator)
            if value is None:
                continue
            rows.append({"org": org, "year": year, "metric": metric, "value": value})
    if not rows:
        return empty_ratio_frame()
    return pd.DataFrame(rows, columns=RATIO_COLUMNS)


def load_statement_ratios(directory: Path = STATEMENTS_DIR, thresholds: Optional[Thresholds] = None) -> pd.DataFrame:
    files = sorted(Path(directory).glob(STATEMENT_GLOB)) if Path(directory).is_dir() else []
    if not files:
        raise DocumentLoadError(f"no statement files in {directory}")
    frames: List[pd.DataFrame] = []
    for path in files:
        try:
            doc = load_document(path, STATEMENT_MARKERS)
        except DocumentLoadError as exc:
            logger.warning("Skipping statement %s: %s", path.name, exc)
            continue
        derived = derive_statement_ratios(path.stem, doc, thresholds)
        if not derived.empty:
            frames.append(derived)
    if not frames:
        raise DocumentLoadError(f"no ratios could be derived from {directory}")
    return pd.concat(frames, ignore_index=True)


def demo_ratio_rows() -> pd.DataFrame:
    return clean_ratio_records(DEMO_RATIO_ROWS)


RatioSource = Tuple[str, Callable[[], pd.DataFrame]]


def default_ratio_sources(thresholds: Optional[Thresholds] = None) -> List[RatioSource]:
    return [
        ("consolidated", lambda: load_consolidated_json(CONSOLIDATED_JSON_PATH)),
        ("workbook", lambda: load_ratio_workbook(RATIO_WORKBOOK_PATH)),
        ("statements", lambda: load_statement_ratios(STATEMENTS_DIR, thresholds)),
    ]


def load_ratio_rows(sources: Optional[Sequence[RatioSource]] = None) -> Tuple[pd.DataFrame, str]:
    """Return rows from the first source that yields any, falling back to the demo rows."""
    for name, loader in sources if sources is not None else default_ratio_sources():
        try:
            df = loader()
        except DocumentLoadError as exc:
            logger.warning("Ratio source '%s' unavailable: %s", name, exc)
            continue
        if df.empty:
            logger.warning("Ratio source '%s' returned no rows", name)
            continue
        logger.info("Loaded %d ratio rows from '%s'", len(df), name)
        return df, name
    logger.warning("Falling back to demo ratio rows")
    return demo_ratio_rows(), "demo"


# ---------------- Dashboard context ----------------
@dataclass(frozen=True)
class DashboardData:
    budget: Optional[Document]
    ratios: pd.DataFrame
    ratio_source: str


def get_source_files() -> List[Path]:
    files = [BUDGET_CSV_PATH, CONSOLIDATED_JSON_PATH, RATIO_WORKBOOK_PATH]
    if STATEMENTS_DIR.is_dir():
        files.extend(sorted(STATEMENTS_DIR.glob(STATEMENT_GLOB)))
    return [f for f in files if f.exists()]


def file_signature(files: List[Path]) -> Tuple[Tuple[str, float], ...]:
    return tuple((str(f), f.stat().st_mtime) for f in files)


def load_budget(path: Optional[Path] = None) -> Optional[Document]:
    try:
        return load_document(path or BUDGET_CSV_PATH, BUDGET_MARKERS)
    except DocumentLoadError as exc:
        logger.warning("Budget document unavailable: %s", exc)
        return None


@lru_cache(maxsize=4)
def _load_dashboard_data_cached(files_sig: Tuple[Tuple[str, float], ...]) -> DashboardData:
    ratios, source = load_ratio_rows()
    return DashboardData(budget=load_budget(), ratios=ratios, ratio_source=source)


def load_dashboard_data() -> DashboardData:
    """Load every dashboard document, rebuilding whenever a data file changes."""
    return _load_dashboard_data_cached(file_signature(get_source_files()))


def clear_cache() -> None:
    _load_dashboard_data_cached.cache_clear()
