"""Integration tests for the HTTP API on the in-memory backend."""

import pytest
from fastapi.testclient import TestClient

from tango.main import app


HEADERS = {"X-User-Id": "test-user-123", "X-Timezone": "Asia/Tokyo"}


@pytest.fixture
def client(memory_backend_env):
    """Create a test client backed by a fresh in-memory repository."""
    return TestClient(app)


def create_word(client, term="勉強", meaning="study", **extra):
    response = client.post("/words", json={"term": term, "meaning": meaning, **extra}, headers=HEADERS)
    assert response.status_code == 201
    return response.json()


class TestHealthEndpoint:
    def test_healthz(self, client):
        response = client.get("/healthz")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["name"] == "Tango SRS API"


class TestWordsApi:
    def test_requires_user_id_header(self, client):
        response = client.get("/words")
        assert response.status_code == 422

    def test_word_crud(self, client):
        word = create_word(client, jlptLevel=4, priority=1)
        assert word["priority"] == 1
        assert word["mastered"] is False

        response = client.get(f"/words/{word['id']}", headers=HEADERS)
        assert response.status_code == 200
        assert response.json()["term"] == "勉強"

        listing = client.get("/words", headers=HEADERS).json()
        assert listing["count"] == 1

        assert client.delete(f"/words/{word['id']}", headers=HEADERS).status_code == 204
        assert client.get(f"/words/{word['id']}", headers=HEADERS).status_code == 404
        assert client.delete(f"/words/{word['id']}", headers=HEADERS).status_code == 404

    def test_words_are_private(self, client):
        word = create_word(client)
        other = {"X-User-Id": "someone-else"}
        assert client.get(f"/words/{word['id']}", headers=other).status_code == 404

    def test_invalid_word_rejected(self, client):
        response = client.post("/words", json={"term": "", "meaning": "x"}, headers=HEADERS)
        assert response.status_code == 422

    def test_mastered_word_leaves_due_queue(self, client):
        word = create_word(client)

        response = client.put(f"/words/{word['id']}/mastered", json={"mastered": True}, headers=HEADERS)
        assert response.status_code == 200
        assert response.json()["mastered"] is True
        assert client.get("/study/due", headers=HEADERS).json()["count"] == 0

        listing = client.get("/words", params={"includeMastered": "false"}, headers=HEADERS).json()
        assert listing["count"] == 0

    def test_clear_leech(self, client):
        word = create_word(client)
        response = client.delete(f"/words/{word['id']}/leech", headers=HEADERS)
        assert response.status_code == 200
        assert response.json()["isLeech"] is False


class TestStudyApi:
    def test_review_flow(self, client):
        word = create_word(client)

        response = client.post("/study/review", json={"wordId": word["id"], "rating": "good"}, headers=HEADERS)
        assert response.status_code == 200
        body = response.json()
        assert body["wasNew"] is True
        assert body["becameLeech"] is False
        assert body["progress"]["cardState"] == 1
        assert body["progress"]["reviewCount"] == 1

        progress = client.get(f"/study/progress/{word['id']}", headers=HEADERS).json()
        assert progress["nextReview"] == body["progress"]["nextReview"]

        today = client.get("/stats/today", headers=HEADERS).json()
        assert today["reviewCount"] == 1
        assert today["newCount"] == 1
        assert today["goodCount"] == 1

    def test_review_reports_new_achievements(self, client):
        first = create_word(client, term="一")
        second = create_word(client, term="二")

        body = client.post("/study/review", json={"wordId": first["id"], "rating": "good"}, headers=HEADERS).json()
        assert body["newAchievements"] == ["first_quiz"]

        body = client.post("/study/review", json={"wordId": second["id"], "rating": "good"}, headers=HEADERS).json()
        assert body["newAchievements"] == []

    def test_review_with_quality(self, client):
        word = create_word(client)

        response = client.post("/study/review", json={"wordId": word["id"], "quality": 2}, headers=HEADERS)

        assert response.status_code == 200
        assert client.get("/stats/today", headers=HEADERS).json()["againCount"] == 1

    @pytest.mark.parametrize(
        "payload",
        [
            {"quality": 9},
            {"quality": -1},
            {"rating": "perfect"},
            {"rating": "good", "quality": 4},
            {},
        ],
    )
    def test_invalid_review_rejected(self, client, payload):
        word = create_word(client)

        response = client.post("/study/review", json={"wordId": word["id"], **payload}, headers=HEADERS)

        assert response.status_code == 422
        assert client.get(f"/study/progress/{word['id']}", headers=HEADERS).json() is None

    def test_review_unknown_word(self, client):
        response = client.post("/study/review", json={"wordId": "missing", "rating": "good"}, headers=HEADERS)
        assert response.status_code == 404

    def test_due_queue_and_count(self, client):
        create_word(client, term="一")
        create_word(client, term="二")

        due = client.get("/study/due", headers=HEADERS).json()
        assert due["count"] == 2
        assert all(item["progress"] is None for item in due["items"])
        assert client.get("/study/due/count", headers=HEADERS).json() == {"count": 2}
        assert client.get("/study/due", params={"limit": 1}, headers=HEADERS).json()["count"] == 1

    def test_preview(self, client):
        word = create_word(client)

        response = client.get(f"/study/preview/{word['id']}", headers=HEADERS)

        assert response.status_code == 200
        body = response.json()
        assert body["wordId"] == word["id"]
        assert (body["again"], body["hard"], body["good"]) == ("1m", "6m", "10m")
        assert body["easy"].endswith("d")

    def test_preview_unknown_word(self, client):
        assert client.get("/study/preview/missing", headers=HEADERS).status_code == 404

    def test_practice(self, client):
        word = create_word(client)

        practice = client.get("/study/practice", headers=HEADERS).json()
        assert [w["id"] for w in practice["words"]] == [word["id"]]

        response = client.post(f"/study/practice/{word['id']}", json={"known": True}, headers=HEADERS)
        assert response.status_code == 204

        today = client.get("/stats/today", headers=HEADERS).json()
        assert today["practiceCount"] == 1
        assert today["practiceKnownCount"] == 1
        assert today["reviewCount"] == 0


class TestSettingsAndStatsApi:
    def test_quiz_settings_defaults(self, client):
        settings = client.get("/settings/quiz", headers=HEADERS).json()
        assert settings["newPerDay"] == 20
        assert settings["maxReviewsPerDay"] == 100
        assert settings["leechThreshold"] == 8
        assert settings["jlptFilter"] is None

    def test_quiz_settings_update_and_clear_filter(self, client):
        response = client.put("/settings/quiz", json={"newPerDay": 1, "jlptFilter": 3}, headers=HEADERS)
        assert response.status_code == 200
        assert response.json()["newPerDay"] == 1
        assert response.json()["jlptFilter"] == 3

        cleared = client.put("/settings/quiz", json={"jlptFilter": None}, headers=HEADERS).json()
        assert cleared["jlptFilter"] is None
        assert cleared["newPerDay"] == 1

    def test_quiz_settings_validation(self, client):
        response = client.put("/settings/quiz", json={"leechThreshold": 0}, headers=HEADERS)
        assert response.status_code == 422

    def test_new_per_day_limits_queue(self, client):
        create_word(client, term="一")
        create_word(client, term="二")
        client.put("/settings/quiz", json={"newPerDay": 1}, headers=HEADERS)

        assert client.get("/study/due/count", headers=HEADERS).json() == {"count": 1}

    def test_summary(self, client):
        summary = client.get("/stats/summary", headers=HEADERS).json()
        assert summary["accuracy"] == 100
        assert summary["streakDays"] == 0

        word = create_word(client)
        client.post("/study/review", json={"wordId": word["id"], "rating": "easy"}, headers=HEADERS)

        summary = client.get("/stats/summary", headers=HEADERS).json()
        assert summary["accuracy"] == 80
        assert summary["streakDays"] == 1
        assert summary["today"]["easyCount"] == 1
        assert summary["dueCount"] == 0

    def test_achievements(self, client):
        assert client.get("/stats/achievements", headers=HEADERS).json() == {"achievements": [], "count": 0}

        word = create_word(client)
        client.post("/study/review", json={"wordId": word["id"], "rating": "good"}, headers=HEADERS)

        body = client.get("/stats/achievements", headers=HEADERS).json()
        assert body["count"] == 1
        assert body["achievements"][0]["type"] == "first_quiz"
        assert body["achievements"][0]["userId"] == HEADERS["X-User-Id"]
