import logging

from selfiq.main import app
from selfiq.models.access_grant import AccessGrant


def _answer(client, headers, qid, aid, test_id="two_step"):
    return client.post(f"/sessions/{test_id}/answers", json={"question_id": qid, "answer_id": aid}, headers=headers)


def test_full_flow(client, user_headers):
    r = client.post("/sessions/two_step/start", headers=user_headers)
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["state"] == "in_progress"
    assert body["current_question_id"] == "q1"
    assert body["current_question_label"] == 1
    assert body["progress_percentage"] == 0
    assert body["resumed"] is False

    r = _answer(client, user_headers, "q1", "a")
    assert r.status_code == 200, r.text
    assert r.json()["persisted"] is True
    assert r.json()["progress_percentage"] == 50
    assert r.json()["is_final"] is False

    r = client.post("/sessions/two_step/start", headers=user_headers)
    assert r.json()["resumed"] is True
    assert r.json()["current_question_label"] == 2
    assert r.json()["current_question_id"] == "q2"

    r = _answer(client, user_headers, "q2", "a")
    assert r.json()["is_final"] is True
    assert r.json()["progress_percentage"] == 100

    r = client.post("/sessions/two_step/finalize", headers=user_headers)
    assert r.status_code == 200, r.text
    result = r.json()
    assert result["scores"] == {"openness": 4, "conscientiousness": 4, "extraversion": 0}
    assert result["normalized_scores"]["openness"] == 90
    assert result["primary_profile"] == "conscientiousness"
    assert result["secondary_profile"] == "openness"
    assert result["profile"]["label"] == "The Structured Analyst"
    assert result["dimensions"][0]["category"] == "conscientiousness"
    assert result["answers"] == [{"questionId": "q1", "answerId": "a"}, {"questionId": "q2", "answerId": "a"}]

    # progress was cleared; a second finalize has nothing to finish
    r = client.post("/sessions/two_step/finalize", headers=user_headers)
    assert r.status_code == 409
    assert "correlation_id" in r.json()


def test_early_finalize_conflict(client, user_headers):
    client.post("/sessions/two_step/start", headers=user_headers)
    _answer(client, user_headers, "q1", "a")
    r = client.post("/sessions/two_step/finalize", headers=user_headers)
    assert r.status_code == 409
    r = client.get("/results/latest/two_step", headers=user_headers)
    assert r.status_code == 404


def test_unknown_answer_is_bad_request(client, user_headers):
    r = _answer(client, user_headers, "q1", "nope")
    assert r.status_code == 400
    r = _answer(client, user_headers, "q99", "a")
    assert r.status_code == 400


def test_duplicate_answer_conflict(client, user_headers):
    _answer(client, user_headers, "q1", "a")
    r = _answer(client, user_headers, "q1", "b")
    assert r.status_code == 409


def test_empty_ids_rejected(client, user_headers):
    r = client.post("/sessions/two_step/answers", json={"question_id": "", "answer_id": "a"}, headers=user_headers)
    assert r.status_code == 422


def test_unknown_assessment_not_found(client, user_headers):
    assert client.post("/sessions/missing/start", headers=user_headers).status_code == 404
    assert client.post("/sessions/missing/finalize", headers=user_headers).status_code == 404


def test_requires_authentication(client):
    r = client.post("/sessions/two_step/start")
    assert r.status_code in (401, 403)
    r = client.post("/sessions/two_step/start", headers={"Authorization": "Bearer not-a-real-token"})
    assert r.status_code == 401


def test_premium_assessment_gated(client, user_headers, premium_headers, db_session):
    r = client.post("/sessions/premium_deep/start", headers=user_headers)
    assert r.status_code == 403
    r = _answer(client, user_headers, "p1", "x", test_id="premium_deep")
    assert r.status_code == 403

    r = client.post("/sessions/premium_deep/start", headers=premium_headers)
    assert r.status_code == 200

    db_session.add(AccessGrant(user_id="user-1", test_id="premium_deep", source="promo"))
    db_session.commit()
    r = client.post("/sessions/premium_deep/start", headers=user_headers)
    assert r.status_code == 200


def test_restart_clears_progress(client, user_headers):
    _answer(client, user_headers, "q1", "a")
    r = client.delete("/sessions/two_step", headers=user_headers)
    assert r.status_code == 200
    assert r.json() == {"test_id": "two_step", "deleted": True, "state": "not_started"}
    r = client.post("/sessions/two_step/start", headers=user_headers)
    assert r.json()["resumed"] is False
    assert r.json()["current_question_index"] == 0


def test_list_in_flight_sessions(client, user_headers, premium_headers):
    assert client.get("/sessions", headers=user_headers).json() == []
    _answer(client, user_headers, "q1", "b")
    _answer(client, premium_headers, "q1", "a")
    r = client.get("/sessions", headers=user_headers)
    assert r.status_code == 200
    items = r.json()
    assert len(items) == 1
    assert items[0]["test_id"] == "two_step"
    assert items[0]["current_question_label"] == 2
    assert items[0]["progress_percentage"] == 50


def test_correlation_id_echoed(client, user_headers):
    r = client.post("/sessions/two_step/start", headers={**user_headers, "X-Correlation-ID": "abc-123"})
    assert r.headers["X-Correlation-ID"] == "abc-123"
    r = client.post("/sessions/missing/start", headers={**user_headers, "X-Correlation-ID": "def-456"})
    assert r.json()["correlation_id"] == "def-456"


def test_lifespan_manages_feedback_service(user_headers):
    from fastapi.testclient import TestClient

    seen = []
    with TestClient(app) as c:
        feedback = app.state.feedback
        assert feedback.initialized
        feedback.subscribe("answer_recorded", lambda name, data: seen.append(data["question_id"]))
        r = c.post("/sessions/two_step/answers", json={"question_id": "q1", "answer_id": "a"}, headers=user_headers)
        assert r.status_code == 200
    assert seen == ["q1"]
    assert not feedback.initialized


def test_finalize_requires_access(client, user_headers, db_session):
    grant = AccessGrant(user_id="user-1", test_id="premium_deep", source="promo")
    db_session.add(grant)
    db_session.commit()
    r = _answer(client, user_headers, "p1", "x", test_id="premium_deep")
    assert r.status_code == 200, r.text
    assert r.json()["is_final"] is True

    db_session.delete(grant)
    db_session.commit()
    r = client.post("/sessions/premium_deep/finalize", headers=user_headers)
    assert r.status_code == 403
    r = client.get("/results/latest/premium_deep", headers=user_headers)
    assert r.status_code == 404


def test_only_start_emits_start_audit(client, user_headers, caplog):
    caplog.set_level(logging.INFO, logger="selfiq.audit")

    def start_events():
        return [r for r in caplog.records if "session.start" in r.getMessage()]

    client.post("/sessions/two_step/start", headers=user_headers)
    assert len(start_events()) == 1
    _answer(client, user_headers, "q1", "a")
    _answer(client, user_headers, "q2", "a")
    assert client.post("/sessions/two_step/finalize", headers=user_headers).status_code == 200
    assert len(start_events()) == 1
