import pytest


@pytest.fixture
def complete_two_step(client):
    def _run(headers, first="a", second="a"):
        client.post("/sessions/two_step/answers", json={"question_id": "q1", "answer_id": first}, headers=headers)
        client.post("/sessions/two_step/answers", json={"question_id": "q2", "answer_id": second}, headers=headers)
        r = client.post("/sessions/two_step/finalize", headers=headers)
        assert r.status_code == 200, r.text
        return r.json()
    return _run


def test_latest_result(client, user_headers, complete_two_step):
    assert client.get("/results/latest/two_step", headers=user_headers).status_code == 404
    complete_two_step(user_headers)
    second = complete_two_step(user_headers, first="b", second="b")
    r = client.get("/results/latest/two_step", headers=user_headers)
    assert r.status_code == 200
    assert r.json()["id"] == second["id"]
    assert r.json()["scores"]["extraversion"] == 1
    assert r.json()["primary_profile"] == "extraversion"


def test_history_pagination(client, user_headers, complete_two_step):
    for _ in range(3):
        complete_two_step(user_headers)
    first = client.get("/results/history?limit=2", headers=user_headers)
    assert first.status_code == 200
    body1 = first.json()
    assert len(body1["results"]) == 2
    assert body1["next_cursor"]
    second = client.get(f"/results/history?limit=2&cursor={body1['next_cursor']}", headers=user_headers)
    body2 = second.json()
    assert len(body2["results"]) == 1
    assert body2["next_cursor"] is None
    assert {r["id"] for r in body1["results"]}.isdisjoint({r["id"] for r in body2["results"]})


def test_history_bad_input(client, user_headers):
    assert client.get("/results/history?cursor=garbage", headers=user_headers).status_code == 400
    assert client.get("/results/history?limit=0", headers=user_headers).status_code == 400
    assert client.get("/results/history?limit=500", headers=user_headers).status_code == 400


def test_statistics(client, user_headers, premium_headers, complete_two_step):
    assert client.get("/results/statistics", headers=user_headers).status_code == 404
    complete_two_step(user_headers)
    complete_two_step(user_headers)
    complete_two_step(premium_headers)
    r = client.get("/results/statistics", headers=user_headers)
    assert r.status_code == 200
    stats = r.json()
    assert stats["total_completed"] == 2
    assert stats["unique_tests_taken"] == 1
    assert stats["average_score"] == 100
    assert stats["last_test_date"] is not None


def test_popular(client, user_headers, premium_headers, complete_two_step):
    assert client.get("/results/popular").json() == []
    complete_two_step(user_headers)
    complete_two_step(premium_headers)
    r = client.get("/results/popular")
    assert r.status_code == 200
    assert r.json() == [
        {"test_id": "two_step", "test_name": "Two Step", "completion_count": 2, "average_score": 100.0}
    ]
