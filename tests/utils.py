"""Shared helpers for API tests."""

from urllib.parse import parse_qs, urlparse

from fastapi.testclient import TestClient

DEFAULT_EMAIL = "ana@empresa.com"
DEFAULT_PASSWORD = "segredo123"


def link_params(link: str) -> dict:
    """Pull uid and token out of a verification or reset link."""
    query = parse_qs(urlparse(link).query)
    return {"uid": int(query["uid"][0]), "token": query["token"][0]}


def signup(client: TestClient, email: str = DEFAULT_EMAIL, password: str = DEFAULT_PASSWORD, name: str = "Ana"):
    resp = client.post("/api/auth/signup", json={"email": email, "password": password, "name": name})
    assert resp.status_code == 200
    return resp.json()


def login(client: TestClient, email: str = DEFAULT_EMAIL, password: str = DEFAULT_PASSWORD):
    resp = client.post("/api/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200
    return resp.json()


def create_idea(client: TestClient, title: str = "Robô de relatórios", description: str = "Gerar relatórios mensais sem trabalho manual.", campaign_id=None):
    resp = client.post(
        "/api/ideas",
        json={"title": title, "description": description, "campaign_id": campaign_id},
    )
    assert resp.status_code == 200
    return resp.json()
