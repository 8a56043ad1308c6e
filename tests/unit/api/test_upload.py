"""Tests for the HTTP upload adapter."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from loanflow.api.app import create_app
from loanflow.api.routes.upload import get_ingestion_service
from loanflow.core.config import AppSettings, DynamoDBConfig
from loanflow.ingest.session import IngestionService
from loanflow.models.schema_mapping import RecordType

CSV_TYPE = "text/csv"
XLSX_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@pytest.fixture
def app_settings():
    return AppSettings(log_json=False, dynamodb=DynamoDBConfig(backend="memory"))


@pytest.fixture
def client(app_settings, store):
    app = create_app(app_settings)
    app.dependency_overrides[get_ingestion_service] = lambda: IngestionService(store=store, settings=app_settings)
    with TestClient(app) as test_client:
        yield test_client


class TestHealth:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_ready_reports_backend(self, client):
        body = client.get("/ready").json()
        assert body["status"] == "ready"
        assert body["store"] == "memory"


class TestUpload:
    def test_daily_metrics_upload(self, client, store, daily_metrics_csv):
        resp = client.post(
            "/upload",
            files={"loanFile": ("daily_metrics_2024-01-15.csv", daily_metrics_csv, CSV_TYPE)},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "success"
        assert body["file_type"] == "daily_metrics"
        assert body["inserted_count"] == 2
        assert body["report_date"] == "2024-01-15"
        assert store.get_current(RecordType.DAILY_METRICS, "1002")["state"] == "FL"

    def test_foreclosure_upload(self, client, foreclosure_xlsx):
        resp = client.post(
            "/upload",
            files={"loanFile": ("foreclosure_data_20240115.xlsx", foreclosure_xlsx, XLSX_TYPE)},
        )
        assert resp.status_code == 200
        assert resp.json()["active_event_count"] == 1

    def test_missing_file(self, client):
        resp = client.post("/upload")
        assert resp.status_code == 400
        assert resp.json() == {"error": "No file uploaded"}

    def test_unrecognized_file(self, client, make_csv):
        data = make_csv(["Loan ID", "Prin Bal", "Favorite Color"], [["1", "2", "blue"]])
        resp = client.post("/upload", files={"loanFile": ("colors.csv", data, CSV_TYPE)})
        assert resp.status_code == 400
        body = resp.json()
        assert body["status"] == "failure"
        assert body["session_status"] == "failed"
        assert body["error"].startswith("Unable to identify file type")


def test_default_dependency_uses_configured_backend(app_settings, daily_metrics_csv):
    with TestClient(create_app(app_settings)) as client:
        resp = client.post(
            "/upload", files={"loanFile": ("daily.csv", daily_metrics_csv, CSV_TYPE)},
        )
    assert resp.status_code == 200
    assert resp.json()["inserted_count"] == 2
