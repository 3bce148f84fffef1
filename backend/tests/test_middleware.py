"""
BottleNet Backend: Middleware Tests
=====================================

What we test:
    ✅ well-formed client request IDs are echoed, malformed ones replaced
    ✅ message routes are tagged with the message id in the access log
    ✅ /health stays out of the access log
"""

import logging

import pytest

from bottlenet.identifiers import new_object_id
from bottlenet.middleware.logging import message_route_fields
from bottlenet.middleware.request_id import resolve_request_id


class TestRequestIdResolution:

    def test_well_formed_id_is_kept(self):
        assert resolve_request_id("client-req_42.a") == "client-req_42.a"

    @pytest.mark.parametrize("raw", [None, "", "has space", "line\nbreak", "x" * 65])
    def test_malformed_id_is_replaced(self, raw):
        rid = resolve_request_id(raw)
        assert rid != raw
        assert len(rid) == 8

    @pytest.mark.asyncio
    async def test_malformed_header_is_not_echoed(self, test_client):
        response = await test_client.get("/api/hello", headers={"X-Request-ID": "bad id!"})
        assert response.headers["X-Request-ID"] != "bad id!"
        assert len(response.headers["X-Request-ID"]) == 8


class TestAccessLog:

    def test_message_route_fields(self):
        message_id = new_object_id()
        assert message_route_fields(f"/api/messages/{message_id}/drop") == {
            "message_id": message_id,
            "action": "drop",
        }
        assert message_route_fields("/api/messages/new") == {}
        assert message_route_fields("/api/users") == {}

    @pytest.mark.asyncio
    async def test_message_request_is_tagged(self, test_client, caplog):
        message_id = new_object_id()
        caplog.set_level(logging.INFO, logger="bottlenet.access")

        await test_client.post(f"/api/messages/{message_id}/drop")

        records = [r for r in caplog.records if r.name == "bottlenet.access"]
        assert len(records) == 1
        assert records[0].message_id == message_id
        assert records[0].action == "drop"
        assert f"message={message_id}" in records[0].getMessage()
        # Unknown message → 404 → WARNING
        assert records[0].levelno == logging.WARNING

    @pytest.mark.asyncio
    async def test_health_is_not_logged(self, test_client, caplog):
        caplog.set_level(logging.INFO, logger="bottlenet.access")

        await test_client.get("/health")

        assert not [r for r in caplog.records if r.name == "bottlenet.access"]
