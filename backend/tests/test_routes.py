"""
BottleNet Backend: HTTP Endpoint Tests
========================================

What:  End-to-end requests through create_app() with an SQLite-backed store.
Why:   Checks the transport contract: camelCase JSON, status codes, error
       mapping (400 / 404 / 500) and the keep confirmation text.
"""

from unittest.mock import AsyncMock, patch

import pytest

from bottlenet.exceptions import StoreTimeoutError
from bottlenet.identifiers import new_object_id
from bottlenet.models.thread import Thread
from bottlenet.models.user import User


class TestHelloAndHealth:

    @pytest.mark.asyncio
    async def test_hello(self, test_client):
        response = await test_client.get("/api/hello")
        assert response.status_code == 200
        assert response.json() == {"message": "Hello from BottleNet!"}

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"

    @pytest.mark.asyncio
    async def test_request_id_header(self, test_client):
        response = await test_client.get("/api/hello", headers={"X-Request-ID": "abc123"})
        assert response.headers["X-Request-ID"] == "abc123"

        generated = await test_client.get("/api/hello")
        assert generated.headers["X-Request-ID"]


class TestUserEndpoints:

    @pytest.mark.asyncio
    async def test_create_user(self, test_client):
        response = await test_client.post(
            "/api/users", json={"name": "RandomUser123", "email": "user@example.com"}
        )
        assert response.status_code == 201
        body = response.json()
        assert body["name"] == "RandomUser123"
        assert body["email"] == "user@example.com"
        assert body["keptMessages"] == []
        assert len(body["id"]) == 32

    @pytest.mark.asyncio
    async def test_create_user_missing_email(self, test_client):
        response = await test_client.post("/api/users", json={"name": "NoEmail"})
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_list_users(self, test_client, make_users):
        users = await make_users(2)
        response = await test_client.get("/api/users")
        assert response.status_code == 200
        assert sorted(u["id"] for u in response.json()) == sorted(u.id for u in users)


class TestCreateMessageEndpoint:

    @pytest.mark.asyncio
    async def test_create_message(self, test_client, make_users):
        a, b = await make_users(2)
        response = await test_client.post(
            "/api/messages/new",
            json={"senderId": a.id, "content": "Message in a bottle"},
        )
        assert response.status_code == 201
        body = response.json()
        assert body["senderId"] == a.id
        assert body["recipientId"] == b.id
        assert body["content"] == "Message in a bottle"
        assert body["timestamp"] > 0
        assert body["threadId"] is None

    @pytest.mark.asyncio
    async def test_client_supplied_routing_is_ignored(self, test_client, make_users):
        a, b = await make_users(2)
        response = await test_client.post(
            "/api/messages/new",
            json={"senderId": a.id, "content": "hi", "recipientId": a.id, "timestamp": 5},
        )
        assert response.status_code == 201
        assert response.json()["recipientId"] == b.id
        assert response.json()["timestamp"] != 5

    @pytest.mark.asyncio
    async def test_malformed_sender_id(self, test_client, make_users):
        await make_users(2)
        response = await test_client.post(
            "/api/messages/new", json={"senderId": "not-an-id", "content": "hi"}
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_missing_content(self, test_client, make_users):
        a, _ = await make_users(2)
        response = await test_client.post("/api/messages/new", json={"senderId": a.id})
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid request payload"

    @pytest.mark.asyncio
    async def test_non_json_body(self, test_client):
        response = await test_client.post(
            "/api/messages/new",
            content=b"not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_sender(self, test_client, make_users):
        await make_users(2)
        response = await test_client.post(
            "/api/messages/new", json={"senderId": new_object_id(), "content": "hi"}
        )
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_no_other_users(self, test_client, make_users):
        (a,) = await make_users(1)
        response = await test_client.post(
            "/api/messages/new", json={"senderId": a.id, "content": "anyone?"}
        )
        assert response.status_code == 500
        assert response.json()["error"] == "no_users_available"

    @pytest.mark.asyncio
    async def test_store_timeout(self, test_client, store, make_users):
        a, _ = await make_users(2)
        with patch.object(
            store.messages,
            "insert_one",
            AsyncMock(side_effect=StoreTimeoutError("messages.insert_one", 10)),
        ):
            response = await test_client.post(
                "/api/messages/new", json={"senderId": a.id, "content": "hi"}
            )
        assert response.status_code == 500
        assert response.json()["error"] == "server_error"


class TestRespondEndpoint:

    @pytest.mark.asyncio
    async def test_respond(self, test_client, store, make_users):
        a, b = await make_users(2)
        created = (await test_client.post(
            "/api/messages/new", json={"senderId": a.id, "content": "ping"}
        )).json()

        response = await test_client.post(
            f"/api/messages/{created['id']}/respond", json={"content": "pong"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["senderId"] == b.id
        assert body["recipientId"] == a.id
        assert body["content"] == "pong"
        assert body["threadId"] is None

        (thread,) = await store.threads.find()
        assert set(thread.participants) == {a.id, b.id}
        assert thread.messages == [created["id"], body["id"]]

    @pytest.mark.asyncio
    async def test_respond_unknown_message(self, test_client, make_users):
        await make_users(2)
        response = await test_client.post(
            f"/api/messages/{new_object_id()}/respond", json={"content": "pong"}
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_respond_malformed_id(self, test_client):
        response = await test_client.post("/api/messages/xyz/respond", json={"content": "pong"})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_respond_missing_body(self, test_client, make_users):
        await make_users(2)
        response = await test_client.post(f"/api/messages/{new_object_id()}/respond")
        assert response.status_code == 400


class TestDropEndpoint:

    @pytest.mark.asyncio
    async def test_drop(self, test_client, store, make_users):
        a, _, _ = await make_users(3)
        created = (await test_client.post(
            "/api/messages/new", json={"senderId": a.id, "content": "float"}
        )).json()

        response = await test_client.post(f"/api/messages/{created['id']}/drop")

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == created["id"]
        assert body["senderId"] == a.id
        assert body["recipientId"] != a.id
        assert body["content"] == "float"
        assert body["timestamp"] == created["timestamp"]

    @pytest.mark.asyncio
    async def test_drop_unknown_message(self, test_client, make_users):
        await make_users(2)
        response = await test_client.post(f"/api/messages/{new_object_id()}/drop")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_drop_malformed_id(self, test_client):
        response = await test_client.post("/api/messages/123/drop")
        assert response.status_code == 400


class TestKeepEndpoint:

    @pytest.mark.asyncio
    async def test_keep_twice(self, test_client, store, make_users):
        a, b = await make_users(2)
        created = (await test_client.post(
            "/api/messages/new", json={"senderId": a.id, "content": "keep me"}
        )).json()

        for _ in range(2):
            response = await test_client.get(
                f"/api/messages/{created['id']}/keep", params={"userId": b.id}
            )
            assert response.status_code == 200
            assert response.text == "Message successfully kept"

        user = await store.users.find_one(User.id == b.id)
        assert user.kept_messages == [created["id"]]

    @pytest.mark.asyncio
    async def test_keep_missing_user_id(self, test_client):
        response = await test_client.get(f"/api/messages/{new_object_id()}/keep")
        assert response.status_code == 400
        assert response.json()["details"]["field"] == "userId"

    @pytest.mark.asyncio
    async def test_keep_malformed_user_id(self, test_client):
        response = await test_client.get(
            f"/api/messages/{new_object_id()}/keep", params={"userId": "bad"}
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_keep_malformed_message_id(self, test_client):
        response = await test_client.get(
            "/api/messages/bad/keep", params={"userId": new_object_id()}
        )
        assert response.status_code == 400


class TestConversationScenario:

    @pytest.mark.asyncio
    async def test_two_user_round_trip(self, test_client, store, make_users):
        """A writes, B answers, A answers B's reply in the original thread."""
        a, b = await make_users(2)

        original = (await test_client.post(
            "/api/messages/new", json={"senderId": a.id, "content": "Is anyone out there?"}
        )).json()
        assert original["recipientId"] == b.id

        reply = (await test_client.post(
            f"/api/messages/{original['id']}/respond", json={"content": "Hello from B"}
        )).json()
        again = (await test_client.post(
            f"/api/messages/{original['id']}/respond", json={"content": "Still B"}
        )).json()

        threads = await store.threads.find()
        assert len(threads) == 1
        assert threads[0].messages == [original["id"], reply["id"], again["id"]]
        assert await store.threads.count_documents(Thread.id == threads[0].id) == 1
