from fastapi.testclient import TestClient

from ielts_app.routers import vocabulary_game


def test_check_returns_verdict_with_normalized_answers(api):
    resp = api.post(
        "/api/vocabulary-game/check",
        json={"userAnswer": "  Contribute! ", "correctAnswer": "contribute", "question": "They ___ to charity."},
    )
    assert resp.status_code == 200
    assert resp.json() == {
        "isCorrect": True,
        "similarity": 100.0,
        "userAnswer": "contribute",
        "correctAnswer": "contribute",
    }


def test_check_reports_near_miss(api):
    resp = api.post("/api/vocabulary-game/check", json={"userAnswer": "contirbution", "correctAnswer": "contribution"})
    body = resp.json()
    assert body["isCorrect"] is False
    assert body["similarity"] == 83.33


def test_check_requires_both_answers(api):
    resp = api.post("/api/vocabulary-game/check", json={"userAnswer": "contribute"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Missing required fields: userAnswer and correctAnswer"

    resp = api.post("/api/vocabulary-game/check", json={"userAnswer": "", "correctAnswer": "x"})
    assert resp.status_code == 400


def test_check_rejects_punctuation_only_answers(api):
    resp = api.post("/api/vocabulary-game/check", json={"userAnswer": "!!!", "correctAnswer": "???"})
    assert resp.status_code == 400


def test_check_unexpected_failure_is_500_with_message(app, monkeypatch):
    def broken_judge(user_answer, correct_answer):
        raise RuntimeError("judge exploded")

    monkeypatch.setattr(vocabulary_game, "judge", broken_judge)
    with TestClient(app, raise_server_exceptions=False) as client:
        resp = client.post("/api/vocabulary-game/check", json={"userAnswer": "a", "correctAnswer": "a"})
    assert resp.status_code == 500
    assert resp.json() == {"detail": "judge exploded"}


def test_health(api):
    resp = api.get("/api/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
