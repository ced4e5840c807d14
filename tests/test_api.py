import pytest
from fastapi.testclient import TestClient

from api import main
from api.main import app


@pytest.fixture()
def client():
    return TestClient(app)


def test_meta_columns(client, budget_csv):
    res = client.get("/meta/columns")
    assert res.status_code == 200
    body = res.json()
    assert body["loaded"] is True
    assert [c["name"] for c in body["columns"]] == ["Year 1 Budget", "Year 2 Budget", "Year 3 Budget"]


def test_meta_columns_without_budget(client, data_dir):
    assert client.get("/meta/columns").json() == {"loaded": False, "columns": []}


def test_ucoa(client, budget_csv):
    body = client.get("/ucoa", params={"column": 1}).json()
    assert body["kpis"]["surplus"] == 200000
    assert body["kpis_display"]["revenue"] == "$1,000,000"


def test_ucoa_placeholders_are_null(client, budget_csv):
    body = client.get("/ucoa").json()
    assert body["column"]["name"] == "Year 3 Budget"
    assert body["kpis"]["revenue"] is None


def test_meta_ratios_demo(client, data_dir):
    body = client.get("/meta/ratios").json()
    assert body["source"] == "demo"
    assert body["metrics"] == ["Current Ratio", "Debt Ratio", "Quick Ratio"]
    assert client.get("/meta/metrics").status_code == 404


def test_ratios_defaults_to_first_metric(client, data_dir):
    body = client.post("/ratios", json={}).json()
    assert body["filters"]["metric"] == "Current Ratio"
    assert body["result"]["chart_type"] == "bar"
    assert body["result"]["year"] == 2023


def test_ratios_line(client, statement_csv):
    body = client.post(
        "/ratios",
        json={"metric": "Quick Ratio", "chart_type": "line", "thresholds": {"quick_good": 2.5}},
    ).json()
    assert body["source"] == "statements"
    assert body["result"]["series"][0]["data"] == [2.0]
    assert body["result"]["series"][0]["last_status"] == "warn"


def test_ratios_rejects_bad_chart_type(client, data_dir):
    assert client.post("/ratios", json={"chart_type": "pie"}).status_code == 422


def test_export_summary(client, budget_csv):
    res = client.get("/export/summary", params={"column": 1})
    assert res.status_code == 200
    assert res.headers["content-type"].startswith("text/csv")
    assert "ucoa_summary_Year_1_Budget.csv" in res.headers["content-disposition"]
    assert res.text.startswith("Metric,Value\n")


def test_errors_are_reported_as_json(client, monkeypatch):
    def boom():
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(main, "load_dashboard_data", boom)
    res = client.get("/ucoa")
    assert res.status_code == 500
    assert res.json() == {"error": "disk on fire", "type": "RuntimeError"}


def test_export_errors_are_reported_as_json(client, monkeypatch):
    def boom():
        raise OSError("budget unreadable")

    monkeypatch.setattr(main, "load_dashboard_data", boom)
    res = client.get("/export/summary")
    assert res.status_code == 500
    assert res.json() == {"error": "budget unreadable", "type": "OSError"}
