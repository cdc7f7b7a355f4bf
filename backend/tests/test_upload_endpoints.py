import pytest

from backend.app.api.deps import get_csv_parser
from backend.app.belfius.csv_parser import NO_TRANSACTIONS_ERROR, BelfiusCsvParser
from backend.app.main import app

from csv_samples import BELFIUS_HEADER, belfius_csv, belfius_row


@pytest.fixture()
def upload_dir(tmp_path, monkeypatch):
    path = tmp_path / "uploads"
    monkeypatch.setenv("UPLOAD_DIR", str(path))
    return path


def _post(client, content, filename="statement.csv", content_type="text/csv"):
    return client.post("/api/upload", files={"csvFile": (filename, content, content_type)})


def _sample_rows():
    return [
        belfius_row(txn_number="2024-00001", amount="100,00", message=""),
        belfius_row(txn_number="2024-00002", amount="oops", message=""),
        belfius_row(txn_number="2024-00003", amount="-5,25", message=""),
    ]


def test_upload_imports_and_reports_counts(api_client, upload_dir):
    resp = _post(api_client, belfius_csv(*_sample_rows()))

    assert resp.status_code == 200
    assert resp.json() == {
        "success": True,
        "summary": {"totalRecords": 3, "imported": 2, "skipped": 0, "errors": 1},
        "errors": [{"row": 2, "error": "Invalid amount: oops"}],
    }
    assert list(upload_dir.iterdir()) == []


def test_upload_same_file_twice_conflicts(api_client, upload_dir):
    content = belfius_csv(*_sample_rows())

    assert _post(api_client, content).status_code == 200
    resp = _post(api_client, content, filename="renamed.csv")

    assert resp.status_code == 409
    body = resp.json()
    assert body["error"] == "File already processed"
    assert body["importDate"]


def test_upload_without_file(api_client):
    resp = api_client.post("/api/upload")

    assert resp.status_code == 400
    assert resp.json() == {"error": "No file uploaded"}


def test_upload_rejects_non_csv(api_client):
    resp = _post(api_client, b"hello", filename="notes.txt", content_type="text/plain")

    assert resp.status_code == 400
    assert resp.json() == {"error": "Only CSV files are allowed!"}


def test_upload_accepts_csv_extension_with_generic_type(api_client, upload_dir):
    resp = _post(api_client, belfius_csv(belfius_row()), content_type="application/octet-stream")
    assert resp.status_code == 200


def test_upload_unparsable_file(api_client, upload_dir):
    resp = _post(api_client, (BELFIUS_HEADER + "\n").encode("utf-8"))

    assert resp.status_code == 400
    assert resp.json() == {"error": NO_TRANSACTIONS_ERROR}
    assert list(upload_dir.iterdir()) == []


def test_upload_too_large(api_client, upload_dir, monkeypatch):
    monkeypatch.setenv("MAX_FILE_SIZE", "64")

    resp = _post(api_client, belfius_csv(*_sample_rows()))

    assert resp.status_code == 413
    assert "64 byte" in resp.json()["error"]
    assert list(upload_dir.iterdir()) == []


class _ExplodingParser(BelfiusCsvParser):
    def parse(self, content):
        raise RuntimeError("tokenizer crashed")


@pytest.mark.parametrize("expose, expected", [("0", None), ("1", "tokenizer crashed")])
def test_upload_unexpected_failure(api_client, upload_dir, monkeypatch, expose, expected):
    monkeypatch.setenv("EXPOSE_ERROR_DETAILS", expose)
    app.dependency_overrides[get_csv_parser] = lambda: _ExplodingParser()
    try:
        resp = _post(api_client, belfius_csv(belfius_row()))
    finally:
        app.dependency_overrides.pop(get_csv_parser, None)

    assert resp.status_code == 500
    body = resp.json()
    assert body["error"] == "Failed to process file"
    assert body.get("details") == expected
    assert list(upload_dir.iterdir()) == []


def test_upload_history_lists_recent_imports(api_client, upload_dir):
    _post(api_client, belfius_csv(*_sample_rows()), filename="maart.csv")
    _post(api_client, (BELFIUS_HEADER + "\n").encode("utf-8"), filename="leeg.csv")

    resp = api_client.get("/api/upload/history")

    assert resp.status_code == 200
    history = resp.json()
    by_name = {item["filename"]: item for item in history}
    assert set(by_name) == {"maart.csv", "leeg.csv"}

    completed = by_name["maart.csv"]
    assert completed["status"] == "completed"
    assert completed["imported_records"] == 2
    assert completed["error_records"] == 1
    assert completed["completed_at"] is not None

    failed = by_name["leeg.csv"]
    assert failed["status"] == "failed"
    assert failed["error_message"] == NO_TRANSACTIONS_ERROR
    assert failed["completed_at"] is None
