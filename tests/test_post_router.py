"""Tests for the /posts HTTP endpoints."""

from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

import pytest


async def create(client, title="T", content="C"):
    response = await client.post("/posts", json={"title": title, "content": content})
    assert response.status_code == 201
    return response.json()["id"]


class TestCreate:

    @pytest.mark.asyncio
    async def test_returns_201_with_id(self, client):
        response = await client.post("/posts", json={"title": "Hello", "content": "World"})

        assert response.status_code == 201
        body = response.json()
        assert set(body) == {"id"}
        UUID(body["id"])

    @pytest.mark.asyncio
    async def test_client_id_is_ignored(self, client):
        chosen = str(uuid4())
        response = await client.post(
            "/posts", json={"id": chosen, "title": "Hello", "content": "World"}
        )
        assert response.status_code == 201
        assert response.json()["id"] != chosen

    @pytest.mark.asyncio
    async def test_client_created_at_is_ignored(self, client):
        before = datetime.now(timezone.utc) - timedelta(seconds=1)
        response = await client.post(
            "/posts",
            json={"title": "Hello", "content": "World", "created_at": "2000-01-01T00:00:00Z"},
        )
        assert response.status_code == 201

        body = (await client.get(f"/posts/{response.json()['id']}")).json()
        created_at = datetime.fromisoformat(body["created_at"].replace("Z", "+00:00"))
        assert created_at.year != 2000
        assert created_at >= before

    @pytest.mark.asyncio
    async def test_missing_field_is_400(self, client):
        response = await client.post("/posts", json={"title": "only a title"})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error_code"] == "VALIDATION_ERROR"
        assert [d["field"] for d in body["error_details"]] == ["content"]

    @pytest.mark.asyncio
    async def test_blank_field_is_400(self, client):
        response = await client.post("/posts", json={"title": "", "content": "body"})

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"
        assert (await client.get("/posts")).json() == []

    @pytest.mark.asyncio
    async def test_malformed_json_is_400(self, client):
        response = await client.post(
            "/posts", content=b"{not json", headers={"content-type": "application/json"}
        )
        assert response.status_code == 400


class TestGet:

    @pytest.mark.asyncio
    async def test_returns_post(self, client):
        post_id = await create(client, "Title", "Content")

        response = await client.get(f"/posts/{post_id}")

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == post_id
        assert body["title"] == "Title"
        assert body["content"] == "Content"
        created_at = datetime.fromisoformat(body["created_at"].replace("Z", "+00:00"))
        assert created_at.utcoffset() is not None

    @pytest.mark.asyncio
    async def test_unknown_id_is_404(self, client):
        response = await client.get(f"/posts/{uuid4()}")

        assert response.status_code == 404
        assert response.json()["error_code"] == "NOT_FOUND"

    @pytest.mark.asyncio
    async def test_malformed_id_is_400(self, client):
        response = await client.get("/posts/not-a-uuid")

        assert response.status_code == 400
        assert response.json()["error_details"][0]["field"] == "id"


class TestList:

    @pytest.mark.asyncio
    async def test_empty(self, client):
        response = await client.get("/posts")
        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_newest_first(self, client):
        for title in ("P1", "P2", "P3"):
            await create(client, title=title)

        response = await client.get("/posts")

        assert response.status_code == 200
        assert [p["title"] for p in response.json()] == ["P3", "P2", "P1"]
        assert set(response.json()[0]) == {"id", "title", "content", "created_at"}

    @pytest.mark.asyncio
    async def test_homepage_caps_at_twenty(self, client):
        for i in range(25):
            await create(client, title=f"P{i}")

        home = await client.get("/")
        everything = await client.get("/posts")

        assert home.status_code == 200
        assert len(home.json()) == 20
        assert home.json()[0]["title"] == "P24"
        assert len(everything.json()) == 25


class TestUpdate:

    @pytest.mark.asyncio
    async def test_partial_update_returns_204(self, client):
        post_id = await create(client, "A", "B")

        response = await client.put(f"/posts/{post_id}", json={"title": "Z"})

        assert response.status_code == 204
        assert response.content == b""
        body = (await client.get(f"/posts/{post_id}")).json()
        assert body["title"] == "Z"
        assert body["content"] == "B"

    @pytest.mark.asyncio
    async def test_empty_body_changes_nothing(self, client):
        post_id = await create(client, "A", "B")
        before = (await client.get(f"/posts/{post_id}")).json()

        response = await client.put(f"/posts/{post_id}", json={})

        assert response.status_code == 204
        assert (await client.get(f"/posts/{post_id}")).json() == before

    @pytest.mark.asyncio
    async def test_unknown_id_is_404_and_creates_nothing(self, client):
        response = await client.put(f"/posts/{uuid4()}", json={"title": "Z"})

        assert response.status_code == 404
        assert (await client.get("/posts")).json() == []

    @pytest.mark.asyncio
    async def test_blank_title_is_400(self, client):
        post_id = await create(client, "A", "B")

        response = await client.put(f"/posts/{post_id}", json={"title": ""})

        assert response.status_code == 400
        assert (await client.get(f"/posts/{post_id}")).json()["title"] == "A"

    @pytest.mark.asyncio
    async def test_malformed_id_is_400(self, client):
        response = await client.put("/posts/42", json={"title": "Z"})
        assert response.status_code == 400


class TestStorageFailure:
    """Every endpoint against a store that cannot be opened."""

    @pytest.mark.asyncio
    async def test_list_degrades_to_empty(self, broken_client):
        response = await broken_client.get("/posts")
        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_homepage_degrades_to_empty(self, broken_client):
        response = await broken_client.get("/")
        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_get_is_500(self, broken_client):
        response = await broken_client.get(f"/posts/{uuid4()}")
        assert response.status_code == 500
        body = response.json()
        assert body["error_code"] == "STORAGE_ERROR"
        assert body["message"] == "Storage failure"

    @pytest.mark.asyncio
    async def test_create_is_500(self, broken_client):
        response = await broken_client.post("/posts", json={"title": "T", "content": "C"})
        assert response.status_code == 500

    @pytest.mark.asyncio
    async def test_update_is_500(self, broken_client):
        response = await broken_client.put(f"/posts/{uuid4()}", json={"title": "Z"})
        assert response.status_code == 500


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


class TestUnreachableStore:
    """A database server that refuses connections behaves like any storage failure."""

    @pytest.mark.asyncio
    async def test_list_degrades_to_empty(self, unreachable_client):
        response = await unreachable_client.get("/posts")
        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_homepage_degrades_to_empty(self, unreachable_client):
        response = await unreachable_client.get("/")
        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_get_is_500(self, unreachable_client):
        response = await unreachable_client.get(f"/posts/{uuid4()}")
        assert response.status_code == 500
        assert response.json()["error_code"] == "STORAGE_ERROR"

    @pytest.mark.asyncio
    async def test_create_is_500(self, unreachable_client):
        response = await unreachable_client.post("/posts", json={"title": "T", "content": "C"})
        assert response.status_code == 500
