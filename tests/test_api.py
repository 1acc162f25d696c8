"""Tests for API functionality."""

import pytest

try:
    from fastapi.testclient import TestClient

    from symark.api.app import create_app, generate_token
    FASTAPI_AVAILABLE = True
except ImportError:
    FASTAPI_AVAILABLE = False
    TestClient = None  # type: ignore

from symark.adapters.resolver_index import NoteIndex
from symark.core.model import Note, Paragraph, Text, TextMark


class StubVault:
    failed: list[str] = []


class StubRuntime:
    def __init__(self, index):
        self.index = index
        self.vault = StubVault()


@pytest.fixture
def runtime():
    """Create a runtime with two linked notes."""
    alpha = Note(
        id="a",
        title="Alpha",
        tags="python",
        children=[Paragraph(id="p1", children=[Text(data="Alpha body")])],
    )
    beta = Note(
        id="b",
        title="Beta",
        children=[Paragraph(children=[TextMark(mark_type="block-ref", text="x", ref_id="p1")])],
    )
    return StubRuntime(NoteIndex([alpha, beta]))


@pytest.mark.skipif(not FASTAPI_AVAILABLE, reason="fastapi not installed")
def test_health_endpoint(runtime):
    """Test /health endpoint."""
    client = TestClient(create_app(runtime, token=None))

    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "notes": 2, "failed": 0}


@pytest.mark.skipif(not FASTAPI_AVAILABLE, reason="fastapi not installed")
def test_auth_required(runtime):
    """Test that endpoints require authentication when token is set."""
    token = generate_token()
    client = TestClient(create_app(runtime, token=token))

    # Without token should get 401
    assert client.get("/health").status_code == 401
    assert client.get("/health", headers={"Authorization": "Bearer wrong"}).status_code == 401

    # With token should work
    response = client.get("/health", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200


@pytest.mark.skipif(not FASTAPI_AVAILABLE, reason="fastapi not installed")
def test_list_and_get_notes(runtime):
    """Test /notes and /notes/{id}."""
    client = TestClient(create_app(runtime, token=None))

    response = client.get("/notes")
    assert [n["id"] for n in response.json()] == ["a", "b"]

    response = client.get("/notes/a")
    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Alpha"
    assert data["tags"] == ["python"]
    assert data["html"] == '<p id="p1">Alpha body</p>\n'
    assert "No headings found" in data["toc"]


@pytest.mark.skipif(not FASTAPI_AVAILABLE, reason="fastapi not installed")
def test_get_note_not_found(runtime):
    """Test /notes/{id} with nonexistent note."""
    client = TestClient(create_app(runtime, token=None))
    assert client.get("/notes/nonexistent").status_code == 404
    assert client.get("/notes/nonexistent/backlinks").status_code == 404


@pytest.mark.skipif(not FASTAPI_AVAILABLE, reason="fastapi not installed")
def test_backlinks_tags_and_graph(runtime):
    """Test backlinks, tag lookup and the graph endpoint."""
    client = TestClient(create_app(runtime, token=None))

    assert [n["id"] for n in client.get("/notes/a/backlinks").json()] == ["b"]

    data = client.get("/tags/python").json()
    assert data["tag"] == "python"
    assert [n["id"] for n in data["notes"]] == ["a"]
    assert client.get("/tags/none").status_code == 404

    graph = client.get("/graph").json()
    assert graph["edges"] == [{"source": "b", "target": "a"}]
