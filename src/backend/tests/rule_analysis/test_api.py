import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.rule_analysis import get_service, router


@pytest.fixture
def client(make_service, make_analysis, make_rule_book, make_entry):
    book = (
        make_rule_book(),
        [
            make_entry(entry_id="e1", outline="1.1", usage="Office"),
            make_entry(entry_id="e2", outline="", usage=""),
            make_entry(entry_id="e3", outline="2", usage="Office", column_type="Informational"),
        ],
    )
    service, _ = make_service(
        books=[book],
        analyses=[make_analysis(), make_analysis(analysis_id="pa-empty", new_use=[])],
    )
    app = FastAPI()
    app.include_router(router)
    app.dependency_overrides[get_service] = lambda: service
    return TestClient(app)


def test_segments_endpoint(client):
    resp = client.get("/analyses/pa-1/segments")
    assert resp.status_code == 200
    (book,) = resp.json()
    assert [s["key"] for s in book["segments"]] == ["1", "2"]
    assert book["total_parameters"] == 2
    assert book["total_completed"] == 0


def test_filtered_rule_books_with_override(client):
    resp = client.get("/analyses/pa-1/rule-books", params={"new_use": ["Garage"]})
    assert resp.status_code == 200
    assert [e["id"] for e in resp.json()[0]["entries"]] == ["e2"]


def test_next_segment_and_completion(client):
    resp = client.get("/analyses/pa-1/segments/next", params={"rule_book_id": "rb-1", "segment_key": "1"})
    assert resp.json() == {"next": {"rule_book_id": "rb-1", "segment_key": "2"}, "finished": False}

    resp = client.get("/analyses/pa-1/segments/next", params={"rule_book_id": "rb-1", "segment_key": "2"})
    assert resp.json() == {"next": None, "finished": True}

    assert client.get("/analyses/pa-1/completion").json() == {"analysis_id": "pa-1", "complete": False}


def test_save_result_and_read_segment(client):
    resp = client.put(
        "/analyses/pa-1/results",
        json={
            "rule_book_id": "rb-1",
            "entry_id": "e1",
            "segment_key": "1",
            "checklist_status": "Fulfilled",
            "revised_fulfillability": "Heavy",
        },
    )
    assert resp.status_code == 200
    assert resp.json()["revised_fulfillability"] is None

    details = client.get("/analyses/pa-1/rule-books/rb-1/segments/1").json()
    assert [e["id"] for e in details["entries"]] == ["e1", "e2"]
    assert details["entries"][0]["analysis"]["checklist_status"] == "Fulfilled"

    summary = client.get("/analyses/pa-1/results/summary").json()
    assert summary["checklist_data"] == [{"name": "fulfilled", "value": 1, "fill": "#4E79A7"}]


def test_invalid_status_is_rejected(client):
    resp = client.put(
        "/analyses/pa-1/results",
        json={"rule_book_id": "rb-1", "entry_id": "e1", "segment_key": "1", "checklist_status": "Maybe"},
    )
    assert resp.status_code == 422


def test_error_mapping(client):
    assert client.get("/analyses/missing/segments").status_code == 404
    assert client.get("/analyses/pa-1/rule-books/missing/segments/1").status_code == 404
    assert client.get("/analyses/pa-empty/rule-books/rb-1/segments/1").status_code == 409


def test_discard_results(client):
    client.put(
        "/analyses/pa-1/results",
        json={"rule_book_id": "rb-1", "entry_id": "e1", "segment_key": "1", "checklist_status": "Fulfilled"},
    )
    assert client.delete("/analyses/pa-1/results").status_code == 204
    assert client.get("/analyses/pa-1/results/summary").json()["checklist_data"] == []
