"""Tests for the HTTP API."""

import pytest

from autograder.api import create_app


@pytest.fixture
def client(store):
    app = create_app(store)
    app.config["TESTING"] = True
    return app.test_client()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json() == {"status": "ok"}


def test_auto_grade_student_view_hides_hidden_feedback(client, store):
    """Students get scores for every test but feedback only for visible ones."""
    response = client.post("/auto-grade", json={"submission_id": "s1"})

    assert response.status_code == 200
    data = response.get_json()
    assert data["success"] is True
    assert data["total_score"] == 9
    assert data["max_score"] == 10
    assert data["percentage"] == pytest.approx(90)
    assert len(data["feedback"]) == 3
    assert all(not entry["is_hidden"] for entry in data["feedback"])

    # The stored record keeps the hidden entry
    stored = store.get_submission("s1").auto_grade_feedback
    assert len(stored.feedback) == 4


def test_auto_grade_teacher_view_has_all_feedback(client):
    response = client.post("/auto-grade", json={"submission_id": "s1", "audience": "teacher"})

    assert response.status_code == 200
    feedback = response.get_json()["feedback"]
    assert len(feedback) == 4
    assert feedback[3]["is_hidden"] is True


def test_auto_grade_missing_submission(client):
    response = client.post("/auto-grade", json={"submission_id": "missing"})

    assert response.status_code == 500
    assert response.get_json() == {"success": False, "error": "Submission not found"}


def test_auto_grade_requires_submission_id(client):
    response = client.post("/auto-grade", json={})

    assert response.status_code == 500
    assert response.get_json()["success"] is False


def test_auto_grade_rejects_unknown_audience(client):
    response = client.post("/auto-grade", json={"submission_id": "s1", "audience": "parent"})
    assert response.status_code == 500


def test_cors_headers(client):
    response = client.post(
        "/auto-grade",
        json={"submission_id": "s1"},
        headers={"Origin": "http://classroom.example"},
    )
    assert response.headers.get("Access-Control-Allow-Origin") == "*"


def test_cors_preflight(client):
    response = client.options(
        "/auto-grade",
        headers={
            "Origin": "http://classroom.example",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "content-type, apikey",
        },
    )
    assert response.status_code == 200
    assert response.headers.get("Access-Control-Allow-Origin") == "*"
    allowed = response.headers.get("Access-Control-Allow-Headers", "").lower()
    assert "content-type" in allowed
    assert "apikey" in allowed


def test_list_test_cases(client):
    response = client.get("/notebooks/nb1/test-cases")

    assert response.status_code == 200
    assert [tc["id"] for tc in response.get_json()["test_cases"]] == ["t1", "t2", "t3", "t4"]


def test_add_test_case(client, store):
    response = client.post(
        "/notebooks/nb1/test-cases",
        json={"cell_index": 0, "test_type": "code_contains", "test_config": {"contains": "print"}, "points": 2},
    )

    assert response.status_code == 201
    created = response.get_json()["test_case"]
    assert created["notebook_id"] == "nb1"
    assert created["id"] in [tc.id for tc in store.list_test_cases("nb1")]


def test_add_test_case_unknown_type(client):
    response = client.post(
        "/notebooks/nb1/test-cases",
        json={"cell_index": 0, "test_type": "regex_match", "test_config": {}},
    )

    assert response.status_code == 400
    assert "regex_match" in response.get_json()["error"]


def test_add_test_case_invalid_body(client):
    response = client.post("/notebooks/nb1/test-cases", json={"cell_index": -1, "test_type": "code_contains"})
    assert response.status_code == 400


def test_delete_test_case(client, store):
    assert client.delete("/notebooks/nb1/test-cases/t2").status_code == 204
    assert client.delete("/notebooks/nb1/test-cases/t2").status_code == 404
    assert "t2" not in [tc.id for tc in store.list_test_cases("nb1")]


def test_auto_grade_rejects_non_object_body(client):
    response = client.post("/auto-grade", json=["s1"])
    assert response.status_code == 500
    assert response.get_json() == {"success": False, "error": "Expected a JSON object"}


def test_cors_specific_origin_is_echoed(store):
    app = create_app(store, cors_origins=["http://classroom.example"])
    response = app.test_client().get("/health", headers={"Origin": "http://classroom.example"})
    assert response.headers.get("Access-Control-Allow-Origin") == "http://classroom.example"


def test_manual_grade(client, store):
    response = client.post("/submissions/s1/manual-grade", json={"score": 85, "feedback": "Nice loops"})

    assert response.status_code == 200
    data = response.get_json()
    assert data["success"] is True
    assert data["submission"]["manual_grade_score"] == 85
    assert data["submission"]["status"] == "graded"

    stored = store.get_submission("s1")
    assert stored.manual_feedback == "Nice loops"
    assert stored.auto_grade_feedback is None


@pytest.mark.parametrize("body", [{"score": "85"}, {"score": True}, {}, {"score": 5, "feedback": 3}, [85]])
def test_manual_grade_rejects_bad_body(client, body):
    response = client.post("/submissions/s1/manual-grade", json=body)
    assert response.status_code == 400
    assert response.get_json()["success"] is False


def test_manual_grade_out_of_range(client):
    response = client.post("/submissions/s1/manual-grade", json={"score": 101})
    assert response.status_code == 400
    assert "between 0 and 100" in response.get_json()["error"]


def test_manual_grade_missing_submission(client):
    response = client.post("/submissions/missing/manual-grade", json={"score": 50})
    assert response.status_code == 404
