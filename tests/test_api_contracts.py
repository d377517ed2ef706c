import io

import pytest
from docx import Document

from study_companion import server as server_module
from study_companion.services import quiz_api_service, summaries_api_service


class _Clock:
    """Stands in for the runtime's time module; each call advances 100 seconds."""

    def __init__(self):
        self.now = 0.0

    def time(self):
        self.now += 100.0
        return self.now


def _register(client, email="ada@example.com", password="secret12"):
    return client.post("/api/auth/register", json={"name": "ada", "email": email, "password": password})


def test_health_reports_prompts(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    body = response.get_json()
    assert body["ok"] is True
    assert body["service"] == "backend"
    assert "summary" in body["prompts"]["ids"]
    assert response.headers.get("X-Request-ID")


def test_request_id_is_echoed(client):
    response = client.get("/api/health", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"


def test_db_status_without_database(client):
    body = client.get("/api/db").get_json()

    assert body["connected"] is False
    assert body["collections"] == []


def test_db_status_lists_collections(client, fake_db):
    fake_db.collection("users").document("a@example.com").set({"email": "a@example.com"})

    body = client.get("/api/db").get_json()

    assert body == {"connected": True, "collections": ["users"]}


def test_data_routes_answer_503_without_database(client):
    assert client.get("/api/summaries").status_code == 503
    assert client.get("/api/schedules").status_code == 503
    assert client.get("/api/quiz/history").status_code == 503


def test_register_login_and_me(client, fake_db):
    registered = _register(client)
    assert registered.status_code == 201
    assert registered.get_json()["user"]["email"] == "ada@example.com"
    assert "password_hash" not in registered.get_json()["user"]
    assert fake_db.data["users"]["ada@example.com"]["password_hash"] != "secret12"

    login = client.post("/api/auth/login", json={"email": "ADA@example.com", "password": "secret12"})
    assert login.status_code == 200
    token = login.get_json()["token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.get_json()["user"]["email"] == "ada@example.com"


def test_register_duplicate_returns_409(client, fake_db):
    _register(client)

    response = _register(client)

    assert response.status_code == 409
    assert response.get_json()["error"] == "Email already registered"


def test_register_does_not_overwrite_existing_user(client, fake_db):
    fake_db.collection("users").document("ada@example.com").set(
        {"name": "ada", "email": "ada@example.com", "password_hash": "original-hash"}
    )

    response = _register(client)

    assert response.status_code == 409
    stored = fake_db.collection("users").document("ada@example.com").get().to_dict()
    assert stored["password_hash"] == "original-hash"


@pytest.mark.parametrize(
    "body, message",
    [
        ({"email": "a@example.com", "password": "secret12"}, "name, email, password required"),
        ({"name": "a", "email": "not-an-email", "password": "secret12"}, "email is not valid"),
        ({"name": "a", "email": "a@example.com", "password": "123"}, "password must be at least 6 characters"),
    ],
)
def test_register_validation(client, fake_db, body, message):
    response = client.post("/api/auth/register", json=body)

    assert response.status_code == 400
    assert response.get_json()["error"] == message


def test_login_with_wrong_password_returns_401(client, fake_db):
    _register(client)

    response = client.post("/api/auth/login", json={"email": "ada@example.com", "password": "wrong-pass"})

    assert response.status_code == 401
    assert response.get_json()["error"] == "Invalid credentials"


def test_me_rejects_missing_or_forged_token(client):
    assert client.get("/api/auth/me").status_code == 401
    assert client.get("/api/auth/me", headers={"Authorization": "Bearer forged"}).status_code == 401


def test_auth_rate_limit_returns_429(client, fake_db, monkeypatch):
    monkeypatch.setattr(
        server_module,
        "CONFIG",
        server_module.CONFIG.__class__(auth_rate_limit_max_requests=2),
    )
    for _ in range(2):
        client.post("/api/auth/login", json={"email": "ada@example.com", "password": "secret12"})

    response = client.post("/api/auth/login", json={"email": "ada@example.com", "password": "secret12"})

    assert response.status_code == 429
    assert int(response.headers["Retry-After"]) >= 1


def test_summaries_are_partitioned_and_newest_first(client, fake_db, monkeypatch):
    monkeypatch.setattr(server_module, "time", _Clock())

    client.post("/api/summaries", json={"title": "First", "content": "one"}, headers={"x-user-id": "a@example.com"})
    client.post("/api/summaries", json={"title": "Second", "content": "two"}, headers={"x-user-id": "a@example.com"})
    client.post("/api/summaries", json={"title": "Other", "content": "x"}, headers={"x-user-id": "b@example.com"})

    items = client.get("/api/summaries?userId=a@example.com").get_json()["items"]

    assert [item["title"] for item in items] == ["Second", "First"]
    assert items[0]["summaryContent"] == "two"


def test_create_summary_requires_title_and_content(client, fake_db):
    response = client.post("/api/summaries", json={"title": "only title"})

    assert response.status_code == 400
    assert response.get_json()["error"] == "title and content are required"


def test_save_summary_artifact_joins_original_content(client, fake_db):
    response = client.post(
        "/api/summaries/save",
        json={
            "filename": "lecture.txt",
            "mimetype": "text/plain",
            "size": 11,
            "contentJson": {"text": "raw lecture"},
            "title": "Lecture 1",
            "sum_notes": "## Key points",
        },
        headers={"x-user-id": "a@example.com"},
    )

    assert response.status_code == 201
    body = response.get_json()
    assert body["doc"]["filename"] == "lecture.txt"
    assert body["note"]["summaryContent"] == "## Key points"

    items = client.get("/api/summaries", headers={"x-user-id": "a@example.com"}).get_json()["items"]
    assert items[0]["originalContent"] == "raw lecture"
    assert items[0]["title"] == "Lecture 1"


def test_save_summary_artifact_requires_notes(client, fake_db):
    response = client.post("/api/summaries/save", json={"title": "t"})

    assert response.status_code == 400
    assert response.get_json()["error"] == "sum_notes is required"


def test_save_summary_artifact_removes_document_when_note_fails(client, fake_db):
    fake_db.fail_writes_to = "summarised_notes"

    response = client.post("/api/summaries/save", json={"sum_notes": "notes", "contentJson": {"text": "raw"}})

    assert response.status_code == 500
    assert fake_db.data.get("doc_uploaded", {}) == {}


def test_export_docx_contains_formatted_summary(client, fake_db):
    created = client.post(
        "/api/summaries",
        json={"title": "Cells", "content": "## Parts\n* **Nucleus** holds DNA"},
        headers={"x-user-id": "a@example.com"},
    ).get_json()["item"]

    response = client.get(f"/api/summaries/{created['id']}/export-docx", headers={"x-user-id": "a@example.com"})

    assert response.status_code == 200
    document = Document(io.BytesIO(response.data))
    texts = [paragraph.text for paragraph in document.paragraphs]
    assert "Cells" in texts
    assert "Parts" in texts
    assert "Nucleus holds DNA" in texts


def test_export_docx_checks_owner(client, fake_db):
    created = client.post(
        "/api/summaries", json={"title": "Cells", "content": "text"}, headers={"x-user-id": "a@example.com"}
    ).get_json()["item"]

    assert client.get(f"/api/summaries/{created['id']}/export-docx", headers={"x-user-id": "b@example.com"}).status_code == 403
    assert client.get("/api/summaries/missing/export-docx").status_code == 404


def test_schedule_overwrites_previous_tasks(client, fake_db):
    headers = {"x-user-id": "a@example.com"}
    client.post("/api/schedules", json={"date": "2026-01-01", "tasks": [{"id": "1", "summaryId": "s1", "hours": 2}]}, headers=headers)

    response = client.post(
        "/api/schedules",
        json={"date": "2026-01-02", "tasks": [{"id": "2", "summaryId": "s2", "summaryTitle": "Cells", "hours": 1.5}]},
        headers=headers,
    )

    assert response.status_code == 201
    items = client.get("/api/schedules", headers=headers).get_json()["items"]
    assert [item["id"] for item in items] == ["2"]
    assert items[0]["hours"] == 1.5
    assert items[0]["isCompleted"] is False


def test_schedule_requires_date(client, fake_db):
    response = client.post("/api/schedules", json={"tasks": []})

    assert response.status_code == 400
    assert response.get_json()["error"] == "date is required"


@pytest.mark.parametrize(
    "task, message",
    [
        ({"id": "", "hours": 1}, "tasks[1]: id is required"),
        ({"id": "x", "hours": 0}, "tasks[1]: hours must be a positive number"),
        ({"id": "y", "hours": True}, "tasks[1]: hours must be a positive number"),
        ({"id": "z", "hours": "two"}, "tasks[1]: hours must be a positive number"),
    ],
)
def test_schedule_rejects_invalid_task_and_keeps_previous(client, fake_db, task, message):
    headers = {"x-user-id": "a@example.com"}
    client.post("/api/schedules", json={"date": "d1", "tasks": [{"id": "keep", "hours": 1}]}, headers=headers)

    response = client.post("/api/schedules", json={"date": "d2", "tasks": [{"id": "ok", "hours": 2}, task]}, headers=headers)

    assert response.status_code == 400
    assert response.get_json()["error"] == message
    items = client.get("/api/schedules", headers=headers).get_json()["items"]
    assert [item["id"] for item in items] == ["keep"]


def test_schedule_accepts_numeric_string_hours(client, fake_db):
    response = client.post("/api/schedules", json={"date": "d", "tasks": [{"id": "z", "hours": "2"}]})

    assert response.status_code == 201
    assert response.get_json()["item"]["tasks"][0]["hours"] == 2.0


def test_schedule_read_skips_stored_malformed_tasks(client, fake_db):
    fake_db.collection("schedules").document("anonymous").set(
        {"user_id": "anonymous", "date": "d", "tasks": [{"id": "", "hours": 1}, {"id": "ok", "hours": 1}]}
    )

    items = client.get("/api/schedules").get_json()["items"]

    assert [item["id"] for item in items] == ["ok"]


def test_quiz_history_keeps_newest_entries_past_the_cap(client, fake_db, monkeypatch):
    monkeypatch.setattr(server_module, "time", _Clock())
    monkeypatch.setattr(quiz_api_service, "MAX_HISTORY_PER_USER", 3)
    headers = {"x-user-id": "a@example.com"}
    for _ in range(3):
        client.post("/api/quiz/history", json={"score": 1, "total": 2, "topic": "old"}, headers=headers)
    client.post("/api/quiz/history", json={"score": 2, "total": 2, "topic": "new"}, headers=headers)

    items = client.get("/api/quiz/history", headers=headers).get_json()["items"]

    assert [item["summaryTitle"] for item in items] == ["old", "old", "new"]


def test_summaries_keep_newest_past_the_cap(client, fake_db, monkeypatch):
    monkeypatch.setattr(server_module, "time", _Clock())
    monkeypatch.setattr(summaries_api_service, "MAX_SUMMARIES_PER_USER", 2)
    for title in ["first", "second", "third"]:
        client.post("/api/summaries", json={"title": title, "content": "c"}, headers={"x-user-id": "a@example.com"})

    items = client.get("/api/summaries", headers={"x-user-id": "a@example.com"}).get_json()["items"]

    assert [item["title"] for item in items] == ["third", "second"]


def test_quiz_history_rounds_client_percentage_half_up(client, fake_db):
    response = client.post("/api/quiz/history", json={"score": 2, "totalQuestions": 3, "percentage": 66.67})

    assert response.get_json()["item"]["percentage"] == 67


def test_quiz_history_computes_percentage_and_orders_oldest_first(client, fake_db, monkeypatch):
    monkeypatch.setattr(server_module, "time", _Clock())
    headers = {"x-user-id": "a@example.com"}

    first = client.post("/api/quiz/history", json={"score": 7, "totalQuestions": 9, "summaryTitle": "Cells"}, headers=headers)
    client.post("/api/quiz/history", json={"score": 1, "total": 8, "topic": "Atoms"}, headers=headers)

    assert first.status_code == 201
    assert first.get_json()["item"]["percentage"] == 78
    items = client.get("/api/quiz/history", headers=headers).get_json()["items"]
    assert [item["summaryTitle"] for item in items] == ["Cells", "Atoms"]
    assert items[1]["percentage"] == 13
    assert items[1]["totalQuestions"] == 8


@pytest.mark.parametrize("body", [{"score": 1}, {"score": "1", "total": 5}, {"score": 1, "total": 0}])
def test_quiz_history_rejects_invalid_numbers(client, fake_db, body):
    response = client.post("/api/quiz/history", json=body)

    assert response.status_code == 400
    assert "must be valid numbers" in response.get_json()["error"]


def test_anonymous_partition_is_shared(client, fake_db):
    client.post("/api/quiz/history", json={"score": 1, "total": 2})

    items = client.get("/api/quiz/history?userId=anonymous").get_json()["items"]

    assert len(items) == 1


def test_ai_routes_answer_503_without_client(client, monkeypatch):
    monkeypatch.setattr(server_module, "client", None)

    response = client.post("/api/ai/summary", json={"text": "lecture"})

    assert response.status_code == 503
    assert response.get_json()["error"] == "AI service is not configured"


def test_document_extract_unsupported_returns_415(client):
    response = client.post(
        "/api/documents/extract",
        data={"file": (io.BytesIO(b"\x00\x01"), "image.png", "image/png")},
        content_type="multipart/form-data",
    )

    assert response.status_code == 415
    assert response.get_json()["error"] == "Unsupported file type."


def test_document_extract_plain_text(client):
    response = client.post(
        "/api/documents/extract",
        data={"file": (io.BytesIO(b"hello lecture"), "notes.txt", "text/plain")},
        content_type="multipart/form-data",
    )

    assert response.status_code == 200
    body = response.get_json()
    assert body["text"] == "hello lecture"
    assert body["filename"] == "notes.txt"
    assert body["size"] == 13


def test_document_extract_non_ascii_filename(client):
    response = client.post(
        "/api/documents/extract",
        data={"file": (io.BytesIO("光合作用".encode("utf-8")), "講義.txt", "application/octet-stream")},
        content_type="multipart/form-data",
    )

    assert response.status_code == 200
    body = response.get_json()
    assert body["text"] == "光合作用"
    assert body["kind"] == "txt"


def test_cors_allows_known_origin_only(client):
    allowed = client.get("/api/health", headers={"Origin": "http://localhost:5173"})
    blocked = client.get("/api/health", headers={"Origin": "https://evil.example"})

    assert allowed.headers["Access-Control-Allow-Origin"] == "http://localhost:5173"
    assert "Access-Control-Allow-Origin" not in blocked.headers
