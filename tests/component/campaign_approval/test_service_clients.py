"""
Component Tests for Service-to-Service Clients

NotificationClient (outbound) and CampaignApprovalClient (the SDK other
services use), both over httpx.MockTransport.
"""

import json
import pytest

import httpx

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from core.config_manager import ConfigManager
from microservices.campaign_approval_service.client import CampaignApprovalClient
from microservices.campaign_approval_service.clients.notification_client import NotificationClient


class TestNotificationClient:

    @pytest.mark.asyncio
    async def test_owner_notified_on_each_channel(self, monkeypatch):
        # Given: notification_service discovered from the environment
        monkeypatch.setenv("NOTIFICATION_SERVICE_HOST", "notify.internal")
        monkeypatch.setenv("NOTIFICATION_SERVICE_PORT", "9000")
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"notification_id": f"ntf_{len(seen)}"})

        client = NotificationClient(ConfigManager("campaign_approval_service"), transport=httpx.MockTransport(handler))

        # When: a decision goes out in-app and by email
        ids = await client.notify_campaign_owner(
            "usr_1",
            "cmp_1",
            "Campaign approved",
            "Live now",
            action_url="https://app.example.com/campaigns/cmp_1",
            channels=("in_app", "email"),
            approval_id="apr_1",
        )

        # Then: one POST per channel with the campaign context merged in
        assert ids == ["ntf_1", "ntf_2"]
        assert str(seen[0].url) == "http://notify.internal:9000/api/v1/notifications"
        payloads = [json.loads(r.content) for r in seen]
        assert [p["channel_type"] for p in payloads] == ["in_app", "email"]
        assert payloads[0]["user_id"] == "usr_1"
        assert payloads[0]["campaign_id"] == "cmp_1"
        assert payloads[0]["approval_id"] == "apr_1"
        assert payloads[0]["content"]["action_url"] == "https://app.example.com/campaigns/cmp_1"

    @pytest.mark.asyncio
    async def test_one_failed_channel_does_not_stop_the_other(self):
        def handler(request):
            if json.loads(request.content)["channel_type"] == "email":
                return httpx.Response(503, text="smtp relay down")
            return httpx.Response(200, json={"notification_id": "ntf_1"})

        client = NotificationClient(transport=httpx.MockTransport(handler))

        ids = await client.notify_campaign_owner(
            "usr_1", "cmp_1", "Campaign rejected", "See feedback", channels=("email", "in_app")
        )

        assert ids == ["ntf_1"]

    @pytest.mark.asyncio
    async def test_error_raised_when_nothing_delivered(self):
        client = NotificationClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(500, text="boom"))
        )
        with pytest.raises(httpx.HTTPStatusError):
            await client.notify_campaign_owner("usr_1", "cmp_1", "t", "b")

    @pytest.mark.asyncio
    async def test_health_check(self):
        client = NotificationClient(transport=httpx.MockTransport(lambda request: httpx.Response(200, json={})))
        assert await client.health_check()


class TestCampaignApprovalClient:

    @pytest.mark.asyncio
    async def test_get_campaign_not_found(self):
        client = CampaignApprovalClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(404, json={"detail": "missing"}))
        )
        assert await client.get_campaign("cmp_1", "usr_1") is None

    @pytest.mark.asyncio
    async def test_approve_sends_reviewer_headers(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"approval_id": "apr_1"})

        client = CampaignApprovalClient(transport=httpx.MockTransport(handler))

        await client.approve_campaign("cmp_1", "usr_admin", use_lead_gen=False, notes="ok")

        request = seen[0]
        assert request.url.path == "/api/v1/campaigns/cmp_1/approve"
        assert request.headers["X-User-ID"] == "usr_admin"
        assert request.headers["X-User-Role"] == "admin"
        assert json.loads(request.content)["approval_data"]["use_lead_gen"] is False

    @pytest.mark.asyncio
    async def test_pending_reviews_query(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"items": []})

        client = CampaignApprovalClient(transport=httpx.MockTransport(handler))

        await client.get_pending_reviews("usr_admin", page=2, limit=10, ordering="oldest")

        assert dict(seen[0].url.params) == {"page": "2", "limit": "10", "ordering": "oldest"}

    @pytest.mark.asyncio
    async def test_partial_failure_raises(self):
        client = CampaignApprovalClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(502, json={"detail": "launch failed"}))
        )
        with pytest.raises(httpx.HTTPStatusError):
            await client.bulk_approve("usr_root", ["cmp_1"])
