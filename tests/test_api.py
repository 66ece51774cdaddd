import httpx
import pytest
from fastapi.testclient import TestClient

from logicgate.analysis import AnalysisGateway
from logicgate.deps import get_analysis_gateway, get_passages
from logicgate.main import app
from logicgate.models import ReaderSessionRow
from logicgate.routers import session as session_router

GOOD_SUMMARY = "This paragraph introduces background context for the argument."


@pytest.fixture
def client(catalog):
    app.dependency_overrides[get_passages] = lambda: catalog
    session_router._runtimes.clear()
    yield TestClient(app)
    app.dependency_overrides.clear()
    session_router._runtimes.clear()


def _select(client, key="learner-1", **body):
    return client.post(f"/api/session/{key}/select", json=body or {"passageId": "m-9"})


def test_health_and_info(client) -> None:
    assert client.get("/health").json() == {"status": "ok"}
    info = client.get("/info").json()
    assert info == {"status": "ok", "analysis_configured": False, "evaluation_configured": False}


def test_analyze_endpoint_uses_fallback(client) -> None:
    r = client.post("/api/analyze", json={"fullText": "While A.\n\nB.\n\nC."})
    assert r.status_code == 200
    paragraphs = r.json()["paragraphs"]
    assert len(paragraphs) == 3
    assert paragraphs[0] == {
        "text": "While A.",
        "role": "Context",
        "summary": "Summary of paragraph 1: While A....",
        "pivots": ["While"],
    }


def test_analyze_endpoint_reports_service_failure(client) -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(503))
    app.dependency_overrides[get_analysis_gateway] = lambda: AnalysisGateway("http://automation.test", transport=transport)
    r = client.post("/api/analyze", json={"fullText": "text"})
    assert r.status_code == 500
    assert "error" in r.json()


def test_evaluate_endpoint_uses_fallback(client) -> None:
    body = {
        "user_summary": GOOD_SUMMARY,
        "expert_summary": "Sets the scene.",
        "role_selected": "Context",
        "expert_role": "Context",
    }
    assert client.post("/api/evaluate", json=body).json() == {"isValid": True, "hint": ""}
    body["user_summary"] = "Too short."
    assert client.post("/api/evaluate", json=body).json()["isValid"] is False


def test_catalog_endpoints(client) -> None:
    easy = client.get("/api/passages", params={"difficulty": "Easy"}).json()
    assert {p["id"] for p in easy} == {"e-1", "e-2"}
    assert len(client.get("/api/passages").json()) == 3
    assert client.get("/api/difficulties").json() == ["Very Easy", "Easy", "Medium", "Medium-Hard", "Hard"]
    roles = client.get("/api/roles").json()
    assert "Counter-point" in roles and "Unknown" not in roles


def test_select_by_difficulty(client) -> None:
    r = _select(client, difficulty="Easy")
    assert r.status_code == 200
    body = r.json()
    assert body["selected"] is True
    assert body["session"]["currentPassage"]["difficulty"] == "Easy"
    assert body["session"]["activeParagraphIndex"] == 0


def test_select_without_match_is_404(client) -> None:
    assert _select(client, difficulty="Hard").status_code == 404
    assert _select(client, passageId="missing").status_code == 404
    assert client.post("/api/session/learner-1/select", json={}).status_code == 400


def test_full_progression_over_http(client) -> None:
    _select(client)
    roles = ["Context", "Historical Viewpoint", "Counter-point"]
    for index, role in enumerate(roles):
        r = client.post(
            "/api/session/learner-1/submit",
            json={"paragraphIndex": index, "summary": GOOD_SUMMARY, "role": role, "pivots": []},
        )
        assert r.status_code == 200
        assert r.json()["isValid"] is True
    state = client.get("/api/session/learner-1").json()
    assert state["activeParagraphIndex"] == 3
    assert state["isComplete"] is True
    assert state["masteryStreak"] == 3
    assert len(state["completionStatus"]) == 3

    r = client.post("/api/session/learner-1/reveal", json={"paragraphIndex": 3})
    assert r.status_code == 409


def test_invalid_submit_returns_hint_and_keeps_state(client) -> None:
    _select(client)
    r = client.post(
        "/api/session/learner-1/submit",
        json={"paragraphIndex": 0, "summary": GOOD_SUMMARY, "role": "Conclusion"},
    )
    body = r.json()
    assert body["isValid"] is False
    assert body["hint"]
    assert body["session"]["hint"] == body["hint"]
    assert body["session"]["activeParagraphIndex"] == 0


def test_submit_preconditions(client) -> None:
    payload = {"paragraphIndex": 0, "summary": GOOD_SUMMARY, "role": "Context"}
    assert client.post("/api/session/learner-1/submit", json=payload).status_code == 409

    _select(client)
    assert client.post("/api/session/learner-1/submit", json={**payload, "summary": "   "}).status_code == 400
    assert client.post("/api/session/learner-1/submit", json={**payload, "role": ""}).status_code == 400
    assert client.post("/api/session/learner-1/submit", json={**payload, "paragraphIndex": 1}).status_code == 409


def test_reveal_and_reload(client) -> None:
    _select(client)
    r = client.post("/api/session/learner-1/reveal", json={"paragraphIndex": 0})
    assert r.status_code == 200
    assert r.json()["paragraphStates"] == ["completed", "active", "locked"]

    session_router._runtimes.clear()
    state = client.get("/api/session/learner-1").json()
    assert state["activeParagraphIndex"] == 1
    assert state["completionStatus"][0]["isRevealed"] is True


def test_reset_removes_persisted_session(client, db) -> None:
    _select(client)
    client.post("/api/session/learner-1/reveal", json={"paragraphIndex": 0})
    assert db.query(ReaderSessionRow).count() == 1
    db.rollback()

    r = client.delete("/api/session/learner-1")
    assert r.status_code == 200
    assert r.json()["currentPassage"] is None
    assert db.query(ReaderSessionRow).count() == 0
    assert client.get("/api/session/learner-1").json()["activeParagraphIndex"] == 0


def test_sessions_are_isolated_per_key(client) -> None:
    _select(client, key="a")
    client.post("/api/session/a/reveal", json={"paragraphIndex": 0})
    assert client.get("/api/session/b").json()["currentPassage"] is None


def test_failed_analysis_leaves_no_passage(client) -> None:
    _select(client)
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"output": "nope"}))
    app.dependency_overrides[get_analysis_gateway] = lambda: AnalysisGateway("http://automation.test", transport=transport)
    body = _select(client, passageId="e-1").json()
    assert body["selected"] is False
    assert body["session"]["currentPassage"] is None
    assert client.get("/api/session/learner-1").json()["currentPassage"] is None


def test_analyze_endpoint_keeps_service_role_labels(client) -> None:
    payload = [{"output": {"paragraphs": [{"text": "T", "role": "Main Idea", "summary": "S", "pivots": []}]}}]
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=payload))
    app.dependency_overrides[get_analysis_gateway] = lambda: AnalysisGateway("http://automation.test", transport=transport)
    r = client.post("/api/analyze", json={"fullText": "T"})
    assert r.json() == {"paragraphs": [{"text": "T", "role": "Main Idea", "summary": "S", "pivots": []}]}


def test_evaluate_endpoint_matches_off_list_roles(client) -> None:
    body = {
        "user_summary": GOOD_SUMMARY,
        "expert_summary": "Sets the scene.",
        "role_selected": "Main Idea",
        "expert_role": "Main Idea",
    }
    assert client.post("/api/evaluate", json=body).json() == {"isValid": True, "hint": ""}


def test_off_list_role_can_be_passed_by_submitting(client) -> None:
    payload = {"paragraphs": [{"text": "T", "role": "Main Idea", "summary": "S", "pivots": []}]}
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=payload))
    app.dependency_overrides[get_analysis_gateway] = lambda: AnalysisGateway("http://automation.test", transport=transport)
    _select(client)
    r = client.post(
        "/api/session/learner-1/submit",
        json={"paragraphIndex": 0, "summary": GOOD_SUMMARY, "role": "Main Idea"},
    )
    body = r.json()
    assert body["isValid"] is True
    assert body["session"]["currentPassage"]["paragraphs"][0]["role"] == "Main Idea"
    assert body["session"]["completionStatus"][0]["roleSelected"] == "Main Idea"


def test_runtime_registry_stays_empty_when_idle(client) -> None:
    for i in range(50):
        assert client.get(f"/api/session/visitor-{i}").status_code == 200
    assert session_router._runtimes == {}

    _select(client)
    client.post(
        "/api/session/learner-1/submit",
        json={"paragraphIndex": 0, "summary": "Too short.", "role": "Context"},
    )
    client.post("/api/session/learner-1/reveal", json={"paragraphIndex": 0})
    client.delete("/api/session/learner-1")
    assert session_router._runtimes == {}
