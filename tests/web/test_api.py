import pytest
from fastapi.testclient import TestClient
from pydantic import TypeAdapter

from epic_allocator.domain.models import DeveloperProfile
from epic_allocator.web.api import app
from tests.application.fakes import FakeAIClassifier
from tests.builders import make_profile

_PROFILES = TypeAdapter(list[DeveloperProfile])

EPICS = [
    {
        "epic_id": "E1",
        "title": "Build the REST API backend with authentication",
        "user_stories": [{"title": "Login", "story_points": 8}],
    },
    {
        "epic_id": "E2",
        "title": "Responsive web app frontend",
        "user_stories": [{"title": "Layout", "story_points": 5}, {"title": "Theme"}],
    },
]


def _developers():
    return _PROFILES.dump_python([
        make_profile("be", ranked=[("Backend Development", 80)], level="Senior"),
        make_profile(
            "fe", primary="Frontend Development",
            ranked=[("Frontend Development", 80)], level="Senior",
        ),
    ], mode="json")


@pytest.fixture
def client(tmp_path):
    app.state.db_path = str(tmp_path / "runs.db")
    app.state.ai = FakeAIClassifier(answer="Frontend Development")
    with TestClient(app) as c:
        yield c
    del app.state.db_path
    del app.state.ai


class TestAnalyzeCommits:
    def test_profile_from_commits(self, client):
        resp = client.post("/api/analyze-commits", json={
            "username": "alice",
            "commits": [
                {
                    "sha": "a1", "author": "alice",
                    "timestamp": "2024-06-01T12:00:00+00:00",
                    "message": "feat: add login endpoint #12",
                    "files": [{"filename": "api/login.py", "additions": 30, "deletions": 2}],
                },
                {
                    "sha": "a2", "author": "alice",
                    "timestamp": "2024-06-02T00:30:00+00:00",
                    "message": "wip",
                },
            ],
        })
        assert resp.status_code == 200
        data = resp.json()
        assert data["avatar_url"] == "https://github.com/alice.png"
        analysis = data["analysis"]
        assert analysis["total_commits"] == 2
        assert analysis["late_count"] == 1
        assert analysis["average_commit_size"] == 32
        assert analysis["expertise"]["primary"] == "Backend Development"
        assert len(analysis["hourly_activity"]) == 24

    def test_no_commits(self, client):
        resp = client.post("/api/analyze-commits", json={"username": "ghost", "commits": []})
        assert resp.status_code == 200
        assert resp.json()["analysis"]["total_commits"] == 0

    def test_invalid_payload(self, client):
        resp = client.post("/api/analyze-commits", json={"commits": []})
        assert resp.status_code == 422


class TestClassifyEpics:
    def test_classifications(self, client):
        resp = client.post("/api/classify-epics", json={"epics": EPICS})
        assert resp.status_code == 200
        results = resp.json()["classifications"]
        assert [r["epic_id"] for r in results] == ["E1", "E2"]
        assert results[0]["classification"]["primary"] == "Backend Development"
        assert results[0]["classification"]["confidence"] == "high"

    def test_tie_uses_ai(self, client):
        resp = client.post("/api/classify-epics", json={
            "epics": [{"epic_id": "E3", "title": "Mobile dashboard"}],
        })
        c = resp.json()["classifications"][0]["classification"]
        assert c["primary"] == "Frontend Development"
        assert c["method"] == "ai-fallback"


class TestAutoAssign:
    def test_assigns_by_expertise(self, client):
        resp = client.post("/api/auto-assign", json={"epics": EPICS, "developers": _developers()})
        assert resp.status_code == 200
        data = resp.json()
        owners = {a["epic"]["epic_id"]: a["developer"]["username"] for a in data["assignments"]}
        assert owners == {"E1": "be", "E2": "fe"}
        assert data["workload_distribution"] == {"be": 8, "fe": 10}
        assert data["summary"]["total_story_points"] == 18
        assert data["run_id"] is None

    def test_empty_epics(self, client):
        resp = client.post("/api/auto-assign", json={"epics": [], "developers": _developers()})
        assert resp.status_code == 400

    def test_empty_developers(self, client):
        resp = client.post("/api/auto-assign", json={"epics": EPICS, "developers": []})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "No developers available"


class TestReassign:
    def _assigned(self, client):
        return client.post(
            "/api/auto-assign", json={"epics": EPICS, "developers": _developers()},
        ).json()

    def test_moves_epic(self, client):
        data = self._assigned(client)
        resp = client.post("/api/reassign", json={
            "assignments": data["assignments"],
            "epic_id": "E1",
            "new_developer": "fe",
            "workload_distribution": data["workload_distribution"],
            "developers": _developers(),
        })
        assert resp.status_code == 200
        body = resp.json()
        assert body["workload_distribution"] == {"be": 0, "fe": 18}
        moved = next(a for a in body["assignments"] if a["epic"]["epic_id"] == "E1")
        assert moved["confidence"] == "manual"
        assert moved["developer"]["expertise"] == "Frontend Development"
        assert body["summary"]["manual"] == 1

    def test_summary_average_over_supplied_roster(self, client):
        data = self._assigned(client)
        body = client.post("/api/reassign", json={
            "assignments": data["assignments"],
            "epic_id": "E1",
            "new_developer": "contractor",
            "workload_distribution": data["workload_distribution"],
            "developers": _developers(),
        }).json()
        assert set(body["workload_distribution"]) == {"be", "fe", "contractor"}
        assert body["summary"]["avg_story_points_per_dev"] == 9.0

    def test_unknown_epic(self, client):
        data = self._assigned(client)
        resp = client.post("/api/reassign", json={
            "assignments": data["assignments"],
            "epic_id": "E9",
            "new_developer": "fe",
            "workload_distribution": data["workload_distribution"],
        })
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Epic E9 not found in assignments"

    def test_missing_developer(self, client):
        data = self._assigned(client)
        resp = client.post("/api/reassign", json={
            "assignments": data["assignments"],
            "epic_id": "E1",
            "new_developer": "",
            "workload_distribution": data["workload_distribution"],
        })
        assert resp.status_code == 400


class TestRuns:
    def test_empty(self, client):
        assert client.get("/api/runs").json() == []

    def test_saved_run_round_trip(self, client):
        run_id = client.post("/api/auto-assign", json={
            "epics": EPICS, "developers": _developers(), "save": True,
        }).json()["run_id"]
        assert run_id

        runs = client.get("/api/runs").json()
        assert [r["run_id"] for r in runs] == [run_id]
        assert runs[0]["total_epics"] == 2

        detail = client.get(f"/api/runs/{run_id}/assignments").json()
        assert [r["epic_id"] for r in detail["rows"]] == ["E1", "E2"]
        assert detail["workload_distribution"] == {"be": 8, "fe": 10}

        csv_resp = client.get(f"/api/runs/{run_id}/export.csv")
        assert csv_resp.status_code == 200
        assert csv_resp.headers["content-type"].startswith("text/csv")
        assert "attachment" in csv_resp.headers["content-disposition"]
        assert csv_resp.text.startswith("Epic ID,Epic Title")

    def test_unknown_run(self, client):
        assert client.get("/api/runs/nope/assignments").status_code == 404
        assert client.get("/api/runs/nope/export.csv").status_code == 404


class TestLifespan:
    def test_configured_ai_client_closed_on_shutdown(self, tmp_path, monkeypatch):
        monkeypatch.setenv("EPIC_ALLOCATOR_AI_URL", "http://ai.local")
        app.state.db_path = str(tmp_path / "runs.db")
        with TestClient(app):
            classifier = app.state.classifier
            assert classifier._client.is_closed is False
        del app.state.db_path
        assert classifier._client.is_closed is True

    def test_supplied_classifier_left_open(self, tmp_path):
        fake = FakeAIClassifier()
        app.state.db_path = str(tmp_path / "runs.db")
        app.state.ai = fake
        with TestClient(app):
            pass
        del app.state.db_path
        del app.state.ai
        assert fake.closed is False
