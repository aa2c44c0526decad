"""Idea, vote, comment and board tests."""

import pytest
from fastapi.testclient import TestClient

from ideaportal.main import app
from ideaportal.models.badge import UserBadge
from ideaportal.models.idea import Idea, IdeaComment, IdeaVote
from tests.utils import create_idea, login, signup

pytestmark = pytest.mark.usefixtures("defaults")


def _campaign_id(client, title):
    campaigns = client.get("/api/campaigns").json()["campaigns"]
    return next(c["id"] for c in campaigns if c["title"] == title)


@pytest.fixture
def other_client() -> TestClient:
    """A second signed-in user with its own cookie jar."""
    other = TestClient(app)
    signup(other, email="carlos@empresa.com", name="Carlos")
    login(other, email="carlos@empresa.com")
    return other


# ============================================================================
# CREATE / READ / UPDATE
# ============================================================================

def test_create_requires_session(client, db):
    body = create_idea(client)
    assert body == {"ok": False, "error": "not_authenticated"}
    assert db.query(Idea).count() == 0


def test_create_and_get(auth_client):
    created = create_idea(auth_client, description="x" * 200)
    assert created["ok"] is True
    assert created["score_ai"] == 40
    assert created["compat_ai"] == 80

    detail = auth_client.get(f"/api/ideas/{created['id']}").json()
    assert detail["idea"]["title"] == "Robô de relatórios"
    assert detail["idea"]["status"] == "EM_ELABORACAO"
    assert detail["idea"]["author_name"] == "Ana"
    assert detail["idea"]["votes"] == 0
    assert detail["comments"] == []


def test_create_under_campaign_scores_fit(auth_client):
    campaign_id = _campaign_id(auth_client, "Transformação Digital")
    body = create_idea(
        auth_client,
        title="Assinatura digital",
        description="Trocar contratos em papel por assinatura digital.",
        campaign_id=campaign_id,
    )
    assert body["compat_ai"] == 100

    idea = auth_client.get(f"/api/ideas/{body['id']}").json()["idea"]
    assert idea["campaign"] == "Transformação Digital"


def test_create_with_unknown_campaign(auth_client):
    assert create_idea(auth_client, campaign_id=999)["error"] == "not_found"


def test_create_requires_title_and_description(auth_client):
    assert create_idea(auth_client, title="  ")["error"] == "invalid_data"
    assert create_idea(auth_client, description="")["error"] == "invalid_data"


def test_get_missing_idea(client):
    assert client.get("/api/ideas/999").json() == {"ok": False, "error": "not_found"}


def test_update_idea(auth_client):
    idea_id = create_idea(auth_client)["id"]

    body = auth_client.patch(f"/api/ideas/{idea_id}", json={"title": "Novo título"}).json()
    assert body == {"ok": True}
    idea = auth_client.get(f"/api/ideas/{idea_id}").json()["idea"]
    assert idea["title"] == "Novo título"
    assert idea["description"] == "Gerar relatórios mensais sem trabalho manual."

    assert auth_client.patch(f"/api/ideas/{idea_id}", json={}).json()["error"] == "invalid_data"
    assert auth_client.patch("/api/ideas/999", json={"title": "x"}).json()["error"] == "not_found"


def test_list_filters(auth_client):
    digital = _campaign_id(auth_client, "Transformação Digital")
    first = create_idea(auth_client, title="Chatbot de RH", campaign_id=digital)["id"]
    second = create_idea(auth_client, title="Horta no terraço")["id"]
    auth_client.post(f"/api/ideas/{second}/status", json={"status": "APROVADA"})

    all_ids = [i["id"] for i in auth_client.get("/api/ideas").json()["ideas"]]
    assert all_ids == [second, first]

    by_campaign = auth_client.get("/api/ideas", params={"campaign_id": digital}).json()["ideas"]
    assert [i["id"] for i in by_campaign] == [first]

    by_status = auth_client.get("/api/ideas", params={"status": "aprovada"}).json()["ideas"]
    assert [i["id"] for i in by_status] == [second]

    by_text = auth_client.get("/api/ideas", params={"q": "chatbot"}).json()["ideas"]
    assert [i["id"] for i in by_text] == [first]

    assert auth_client.get("/api/ideas", params={"status": "PERDIDA"}).json()["error"] == "invalid_data"


# ============================================================================
# STATUS / BOARD
# ============================================================================

def test_status_change(auth_client):
    idea_id = create_idea(auth_client)["id"]

    body = auth_client.post(f"/api/ideas/{idea_id}/status", json={"status": "em_triagem"}).json()
    assert body == {"ok": True, "status": "EM_TRIAGEM"}

    bad = auth_client.post(f"/api/ideas/{idea_id}/status", json={"status": "ARQUIVADA"}).json()
    assert bad["error"] == "invalid_data"


def test_status_change_requires_session(auth_client):
    idea_id = create_idea(auth_client)["id"]
    anon = TestClient(app)
    body = anon.post(f"/api/ideas/{idea_id}/status", json={"status": "APROVADA"}).json()
    assert body["error"] == "not_authenticated"


def test_board_has_every_column_in_order(auth_client):
    first = create_idea(auth_client, title="A")["id"]
    create_idea(auth_client, title="B")
    auth_client.post(f"/api/ideas/{first}/status", json={"status": "REJEITADA"})

    columns = auth_client.get("/api/ideas/board").json()["columns"]
    assert [c["status"] for c in columns] == [
        "EM_ELABORACAO", "EM_TRIAGEM", "EM_AVALIACAO", "APROVADA", "REJEITADA",
    ]
    counts = {c["status"]: c["count"] for c in columns}
    assert counts["EM_ELABORACAO"] == 1
    assert counts["REJEITADA"] == 1
    assert columns[4]["ideas"][0]["id"] == first


# ============================================================================
# VOTES
# ============================================================================

def test_vote_twice_counts_once(auth_client, db):
    idea_id = create_idea(auth_client)["id"]

    assert auth_client.post(f"/api/ideas/{idea_id}/vote").json() == {"ok": True, "votes": 1}
    assert auth_client.post(f"/api/ideas/{idea_id}/vote").json() == {"ok": True, "votes": 1}
    assert db.query(IdeaVote).count() == 1


def test_votes_from_different_users(auth_client, other_client):
    idea_id = create_idea(auth_client)["id"]
    auth_client.post(f"/api/ideas/{idea_id}/vote")
    other_client.post(f"/api/ideas/{idea_id}/vote")

    assert auth_client.get(f"/api/ideas/{idea_id}/votes").json() == {"ok": True, "votes": 2}
    assert auth_client.get(f"/api/ideas/{idea_id}").json()["idea"]["votes"] == 2


def test_vote_requires_session_and_idea(auth_client):
    idea_id = create_idea(auth_client)["id"]
    anon = TestClient(app)

    assert anon.post(f"/api/ideas/{idea_id}/vote").json()["error"] == "not_authenticated"
    assert auth_client.post("/api/ideas/999/vote").json()["error"] == "not_found"


# ============================================================================
# COMMENTS
# ============================================================================

def test_comment_and_reply(auth_client, other_client):
    idea_id = create_idea(auth_client)["id"]

    detail = auth_client.post(f"/api/ideas/{idea_id}/comments", json={"text": "Boa ideia"}).json()
    assert detail["ok"] is True
    parent = detail["comments"][0]
    assert parent["author_name"] == "Ana"
    assert parent["parent_id"] is None

    reply = other_client.post(
        f"/api/ideas/{idea_id}/comments",
        json={"text": "Concordo", "parent_id": parent["id"]},
    ).json()
    assert [c["text"] for c in reply["comments"]] == ["Boa ideia", "Concordo"]
    assert reply["comments"][1]["parent_id"] == parent["id"]

    listed = auth_client.get(f"/api/ideas/{idea_id}/comments").json()["comments"]
    assert len(listed) == 2


def test_reply_must_target_same_idea(auth_client, db):
    first = create_idea(auth_client, title="A")["id"]
    second = create_idea(auth_client, title="B")["id"]
    parent_id = auth_client.post(f"/api/ideas/{first}/comments", json={"text": "oi"}).json()["comments"][0]["id"]

    body = auth_client.post(f"/api/ideas/{second}/comments", json={"text": "x", "parent_id": parent_id}).json()
    assert body["error"] == "not_found"
    assert db.query(IdeaComment).count() == 1


def test_comment_validation(auth_client):
    idea_id = create_idea(auth_client)["id"]
    assert auth_client.post(f"/api/ideas/{idea_id}/comments", json={"text": " "}).json()["error"] == "invalid_data"
    assert auth_client.post("/api/ideas/999/comments", json={"text": "oi"}).json()["error"] == "not_found"
    assert auth_client.get("/api/ideas/999/comments").json()["error"] == "not_found"


# ============================================================================
# BADGES
# ============================================================================

def test_first_idea_grants_badge_once(auth_client, db):
    assert auth_client.get("/api/badges").json() == {"ok": True, "badges": []}

    create_idea(auth_client, title="A")
    create_idea(auth_client, title="B")

    badges = auth_client.get("/api/badges").json()["badges"]
    assert [b["code"] for b in badges] == ["primeira_ideia"]
    assert badges[0]["label"] == "Primeira Ideia"
    assert db.query(UserBadge).count() == 1


def test_badges_require_session(client):
    assert client.get("/api/badges").json()["error"] == "not_authenticated"
