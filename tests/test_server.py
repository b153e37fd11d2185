"""HTTP API tests — drive the quiz end-to-end through the FastAPI app.

The app is built against the production v1 catalog with a mocked lead sink
so submitted leads can be inspected.  Every session endpoint is scoped by
the ``X-Visitor-ID`` header.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from treatment_finder.errors import CatalogLoadFailure
from treatment_finder.interfaces import LeadSink
from treatment_finder.models.session import AnswerSession
from treatment_finder_server.app import create_app
from treatment_finder_server.config import ServerSettings, load_settings
from treatment_finder_server.registry import SessionRegistry

from helpers.catalogs import CATALOG_DIR

API = "/api/v1"
HEADERS = {"X-Visitor-ID": "visitor-1"}


@pytest.fixture
def sink():
    return AsyncMock(spec=LeadSink)


@pytest.fixture
def client(sink):
    settings = ServerSettings(catalog_dir=str(CATALOG_DIR), top_n=4)
    with TestClient(create_app(settings, lead_sink=sink)) as c:
        yield c


@pytest.fixture
def session_url(client):
    resp = client.post(f"{API}/sessions", json={"session_id": "s1"}, headers=HEADERS)
    assert resp.status_code == 201, resp.text
    return f"{API}/sessions/s1"


def _answer(client, url, question_id, answer_id, action="select"):
    return client.post(
        f"{url}/step",
        json={"questionId": question_id, "answerId": answer_id, "action": action},
        headers=HEADERS,
    )


def _finish(client, url):
    """Weight-loss profile: goal, 40s, stubborn weight, first timer, gradual, financing."""
    for qid, aid in [("goal", "weight-loss"), ("age", "40s"), ("concerns", "weight")]:
        assert _answer(client, url, qid, aid).status_code == 200
    assert client.post(f"{url}/advance", headers=HEADERS).status_code == 200
    for qid, aid in [("experience", "never"), ("timeline", "gradual")]:
        assert _answer(client, url, qid, aid).status_code == 200
    return _answer(client, url, "budget", "financing")


# =====================================================================
# Session lifecycle
# =====================================================================


class TestSessions:
    def test_create_returns_info(self, client):
        resp = client.post(f"{API}/sessions", json={"session_id": "abc"}, headers=HEADERS)
        assert resp.status_code == 201
        body = resp.json()
        assert body["session_id"] == "abc"
        assert body["status"] == "in_progress"
        assert body["cursor"] == 0
        assert body["completed_at"] is None

    def test_duplicate_create_conflicts(self, client, session_url):
        resp = client.post(f"{API}/sessions", json={"session_id": "s1"}, headers=HEADERS)
        assert resp.status_code == 409

    def test_same_id_for_another_visitor_is_separate(self, client, session_url):
        resp = client.post(
            f"{API}/sessions", json={"session_id": "s1"}, headers={"X-Visitor-ID": "visitor-2"}
        )
        assert resp.status_code == 201

    def test_missing_visitor_header(self, client):
        resp = client.post(f"{API}/sessions", json={"session_id": "abc"})
        assert resp.status_code == 401

    def test_unknown_session(self, client):
        resp = client.get(f"{API}/sessions/nope", headers=HEADERS)
        assert resp.status_code == 404
        assert resp.json() == {"detail": "Resource not found"}

    def test_other_visitor_cannot_see_session(self, client, session_url):
        resp = client.get(session_url, headers={"X-Visitor-ID": "visitor-2"})
        assert resp.status_code == 404

    def test_delete(self, client, session_url):
        assert client.delete(session_url, headers=HEADERS).status_code == 204
        assert client.get(session_url, headers=HEADERS).status_code == 404


# =====================================================================
# Steps
# =====================================================================


class TestSteps:
    def test_first_step_is_goal(self, client, session_url):
        step = client.get(f"{session_url}/step", headers=HEADERS).json()
        assert step["type"] == "question"
        assert step["index"] == 0
        assert step["total"] == 6
        assert step["question"]["question_id"] == "goal"
        assert step["can_retreat"] is False
        assert all("tags" not in o for o in step["question"]["options"])

    def test_single_select_advances(self, client, session_url):
        step = _answer(client, session_url, "goal", "energy").json()
        assert step["index"] == 1
        assert step["question"]["question_id"] == "age"

    def test_multi_select_collects_then_advances(self, client, session_url):
        _answer(client, session_url, "goal", "energy")
        _answer(client, session_url, "age", "30s")

        resp = client.post(f"{session_url}/advance", headers=HEADERS)
        assert resp.status_code == 409
        assert resp.json()["error"] == "invalid_transition"

        step = _answer(client, session_url, "concerns", "fatigue").json()
        step = _answer(client, session_url, "concerns", "wrinkles", action="toggle").json()
        assert step["index"] == 2
        assert step["selected"] == ["fatigue", "wrinkles"]
        assert step["can_advance"] is True

        step = _answer(client, session_url, "concerns", "fatigue").json()
        assert step["selected"] == ["wrinkles"]

        step = client.post(f"{session_url}/advance", headers=HEADERS).json()
        assert step["question"]["question_id"] == "experience"

    def test_answer_for_wrong_question_conflicts(self, client, session_url):
        resp = _answer(client, session_url, "budget", "premium")
        assert resp.status_code == 409
        step = client.get(f"{session_url}/step", headers=HEADERS).json()
        assert step["index"] == 0

    def test_unknown_answer_conflicts(self, client, session_url):
        assert _answer(client, session_url, "goal", "world-peace").status_code == 409

    def test_bad_action_is_a_validation_error(self, client, session_url):
        assert _answer(client, session_url, "goal", "energy", action="bogus").status_code == 422

    def test_retreat_at_first_question_conflicts(self, client, session_url):
        resp = client.post(f"{session_url}/retreat", headers=HEADERS)
        assert resp.status_code == 409

    def test_retreat_prefills_previous_answer(self, client, session_url):
        _answer(client, session_url, "goal", "skin-glow")
        step = client.post(f"{session_url}/retreat", headers=HEADERS).json()
        assert step["index"] == 0
        assert step["selected"] == ["skin-glow"]

    def test_reset(self, client, session_url):
        _answer(client, session_url, "goal", "skin-glow")
        step = client.post(f"{session_url}/reset", headers=HEADERS).json()
        assert step["index"] == 0
        assert step["selected"] == []


# =====================================================================
# Results
# =====================================================================


class TestResults:
    def test_completion_returns_results_step(self, client, session_url):
        step = _finish(client, session_url).json()
        assert step["type"] == "results"
        ids = [r["treatmentId"] for r in step["recommendations"]]
        assert ids == ["weight-loss", "peptides", "hormones", "fillers"]
        assert [r["rank"] for r in step["recommendations"]] == [1, 2, 3, 4]

    def test_session_info_marks_complete(self, client, session_url):
        _finish(client, session_url)
        info = client.get(session_url, headers=HEADERS).json()
        assert info["status"] == "complete"
        assert info["cursor"] == 6
        assert info["completed_at"] is not None

    def test_recommendations_endpoint(self, client, session_url):
        _finish(client, session_url)
        recs = client.get(f"{session_url}/recommendations", headers=HEADERS).json()
        assert recs[0] == {"treatmentId": "weight-loss", "score": 6.0, "rank": 1}

    def test_recommendations_before_completion_conflict(self, client, session_url):
        resp = client.get(f"{session_url}/recommendations", headers=HEADERS)
        assert resp.status_code == 409
        assert resp.json()["error"] == "session_incomplete"

    def test_snapshot(self, client, session_url):
        _finish(client, session_url)
        snap = client.get(f"{session_url}/snapshot", headers=HEADERS).json()
        assert set(snap) == {"answersGiven", "completedAt"}
        assert snap["answersGiven"]["concerns"] == ["weight"]
        assert len(snap["answersGiven"]) == 6

    def test_retreat_from_results_reopens(self, client, session_url):
        _finish(client, session_url)
        step = client.post(f"{session_url}/retreat", headers=HEADERS).json()
        assert step["type"] == "question"
        assert step["selected"] == ["financing"]
        info = client.get(session_url, headers=HEADERS).json()
        assert info["status"] == "in_progress"
        assert info["completed_at"] is None

    def test_lead_is_handed_to_sink(self, client, sink, session_url):
        _finish(client, session_url)
        resp = client.post(
            f"{session_url}/lead",
            json={"name": "Jane", "email": "jane@example.com", "phone": "555-0100"},
            headers=HEADERS,
        )
        assert resp.status_code == 202
        assert resp.json() == {"status": "accepted"}

        sink.submit.assert_awaited_once()
        lead = sink.submit.await_args.args[0]
        assert lead.email == "jane@example.com"
        assert lead.source == "treatment-quiz"
        assert lead.snapshot.answers_given["goal"] == ["weight-loss"]
        assert [r.treatment_id for r in lead.recommendations][:2] == ["weight-loss", "peptides"]

    def test_lead_before_completion_conflicts(self, client, sink, session_url):
        resp = client.post(
            f"{session_url}/lead", json={"name": "Jane", "email": "j@x.io"}, headers=HEADERS
        )
        assert resp.status_code == 409
        sink.submit.assert_not_awaited()


# =====================================================================
# Catalog & health
# =====================================================================


class TestCatalogEndpoints:
    def test_questions(self, client):
        questions = client.get(f"{API}/catalog/questions").json()
        assert len(questions) == 6
        assert questions[2]["selection_mode"] == "multiple"
        assert all("tags" not in o for q in questions for o in q["options"])

    def test_question_listing_matches_step_payload(self, client, session_url):
        first = client.get(f"{API}/catalog/questions").json()[0]
        step = client.get(f"{session_url}/step", headers=HEADERS).json()
        assert first == step["question"]
        assert set(first["options"][0]) == {"id", "label"}

    def test_treatments(self, client):
        treatments = client.get(f"{API}/catalog/treatments").json()
        assert len(treatments) == 12
        assert treatments[0]["id"] == "botox"
        assert "tags" not in treatments[0]
        assert "priority" not in treatments[0]

    def test_health(self, client):
        assert client.get("/health").json() == {
            "status": "ok",
            "catalog": "v1",
            "questions": 6,
            "treatments": 12,
        }


# =====================================================================
# Registry & settings
# =====================================================================


class TestSessionRegistry:
    def test_purge_drops_idle_sessions(self):
        registry = SessionRegistry(ttl_minutes=30)
        registry.create("v", "old", AnswerSession())
        later = datetime.now(timezone.utc) + timedelta(minutes=31)
        assert registry.purge_expired(now=later) == 1
        assert len(registry) == 0

    def test_purge_keeps_recent_sessions(self):
        registry = SessionRegistry(ttl_minutes=30)
        registry.create("v", "fresh", AnswerSession())
        assert registry.purge_expired() == 0
        assert len(registry) == 1

    def test_zero_ttl_never_expires(self):
        registry = SessionRegistry(ttl_minutes=0)
        registry.create("v", "s", AnswerSession())
        far = datetime.now(timezone.utc) + timedelta(days=365)
        assert registry.purge_expired(now=far) == 0

    def test_completion_time_recorded_once(self):
        registry = SessionRegistry()
        registry.create("v", "s", AnswerSession())
        done = AnswerSession(answers_given={"q": ("a",)}, cursor=1, is_complete=True)
        registry.save("v", "s", done)
        first = registry.completed_at("v", "s")
        registry.save("v", "s", done)
        assert first is not None
        assert registry.completed_at("v", "s") == first

    def test_missing_session_raises_value_error(self):
        with pytest.raises(ValueError, match="not found"):
            SessionRegistry().get("v", "missing")


def test_load_settings_reads_environment(monkeypatch):
    monkeypatch.setenv("SERVER_PORT", "9000")
    monkeypatch.setenv("SERVER_CORS_ORIGINS", "https://a.example, https://b.example")
    monkeypatch.setenv("SERVER_TOP_N", "3")
    monkeypatch.setenv("SERVER_LOG_LEVEL", "debug")
    settings = load_settings()
    assert settings.port == 9000
    assert settings.cors_origins == ["https://a.example", "https://b.example"]
    assert settings.top_n == 3
    assert settings.log_level == "DEBUG"


# =====================================================================
# Startup
# =====================================================================


class TestStartup:
    """The catalog is loaded before the app serves its first request."""

    def test_missing_catalog_refuses_to_start(self, tmp_path):
        app = create_app(ServerSettings(catalog_dir=str(tmp_path)))
        with pytest.raises(CatalogLoadFailure):
            with TestClient(app):
                pass

    def test_malformed_catalog_refuses_to_start(self, tmp_path):
        (tmp_path / "questions.yaml").write_text("- id: goal\n  prompt: Goal?\n  answers: []\n")
        (tmp_path / "treatments.yaml").write_text("- id: iv\n  tags: [energy]\n")
        app = create_app(ServerSettings(catalog_dir=str(tmp_path)))
        with pytest.raises(CatalogLoadFailure):
            with TestClient(app):
                pass

    def test_default_catalog_starts_from_any_cwd(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with TestClient(create_app(ServerSettings())) as c:
            assert c.get("/health").json()["questions"] == 6
