from __future__ import annotations

from pathlib import Path

import pytest

from finboard import data


BUDGET_CSV = """Rise East Collaborative,,,
,,,
Line Item,Year 1 Budget,Year 2 Budget,Year 3 Budget
Total Revenue,"$1,000,000","$1,100,000",
1. Backbone and Gen Ops,"$100,000","$110,000",-
Live & Thrive,"$300,000","(20,000)",N/A
Total Expenses,"$800,000","$1,000,000",
"""

STATEMENT_CSV = """Statement of Financial Position,,
,FY2022,FY2023
Cash,"$5,000","$500"
Accounts Receivable,"$3,000","$100"
Total Current Assets,"$10,000","$900"
Total Current Liabilities,"$4,000","$400"
Total Liabilities,"$6,000","$7,000"
Total Net Assets,"$3,000",$0
"""


@pytest.fixture()
def data_dir(tmp_path: Path, monkeypatch) -> Path:
    """Point every loader at an empty data directory under tmp_path."""
    d = tmp_path / "data"
    (d / "statements").mkdir(parents=True)
    monkeypatch.setattr(data, "DATA_DIR", d)
    monkeypatch.setattr(data, "BUDGET_CSV_PATH", d / "budget.csv")
    monkeypatch.setattr(data, "CONSOLIDATED_JSON_PATH", d / "consolidated.json")
    monkeypatch.setattr(data, "RATIO_WORKBOOK_PATH", d / "ratios.xlsx")
    monkeypatch.setattr(data, "STATEMENTS_DIR", d / "statements")
    data.clear_cache()
    yield d
    data.clear_cache()


@pytest.fixture()
def budget_csv(data_dir: Path) -> Path:
    path = data_dir / "budget.csv"
    path.write_text(BUDGET_CSV, encoding="utf-8")
    return path


@pytest.fixture()
def statement_csv(data_dir: Path) -> Path:
    path = data_dir / "statements" / "Roots.csv"
    path.write_text(STATEMENT_CSV, encoding="utf-8")
    return path
