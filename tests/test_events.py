"""
Tests for the API gateway custom authorizer adapter.
"""

from unittest.mock import AsyncMock

import pytest

from contentgate.errors import UnauthorizedError
from contentgate.gateway import Fault, handle_authorizer_event, request_from_event

ARN_PREFIX = "arn:aws:execute-api:us-east-1:123456789012:abcdef123/prod"


def token_event(token, verb, path):
    return {
        'type': "TOKEN",
        'authorizationToken': f"Bearer {token}",
        'methodArn': f"{ARN_PREFIX}/{verb}{path}",
    }


class TestRequestFromEvent:
    """Test event parsing."""

    def test_token_event(self):
        request = request_from_event(token_event("abc", "DELETE", "/comments/c1"))

        assert request.method == "DELETE"
        assert request.path == "/comments/c1"
        assert request.authorization_token == "Bearer abc"

    def test_request_event(self):
        event = {
            'type': "REQUEST",
            'methodArn': f"{ARN_PREFIX}/GET/articles/a1",
            'httpMethod': "GET",
            'path': "/articles/a1",
            'headers': {'authorization': "Bearer xyz"},
            'requestContext': {'requestId': "req-1"},
        }
        request = request_from_event(event)

        assert request.header("Authorization") == "Bearer xyz"
        assert request.request_id == "req-1"
        assert request.authorization_token is None


class TestHandleAuthorizerEvent:
    """Test policy responses and the 401 convention."""

    @pytest.mark.asyncio
    async def test_allow_policy(self, gateway, issuer, premium_viewer):
        event = token_event(issuer.issue(premium_viewer), "GET", "/articles/premium-pub")

        response = await handle_authorizer_event(gateway, event)

        assert response['principalId'] == "viewer-2"
        statement = response['policyDocument']['Statement'][0]
        assert statement['Effect'] == "Allow"
        assert statement['Resource'] == event['methodArn']
        assert response['context']['subscription_tier'] == "premium"
        assert response['context']['resourceId'] == "premium-pub"
        assert all(isinstance(value, str) for value in response['context'].values())

    @pytest.mark.asyncio
    async def test_deny_policy(self, gateway, issuer, free_viewer):
        event = token_event(issuer.issue(free_viewer), "GET", "/articles/premium-pub")

        response = await handle_authorizer_event(gateway, event)

        assert response['principalId'] == "viewer-1"
        assert response['policyDocument']['Statement'][0]['Effect'] == "Deny"
        assert response['context']['reason'] == "SubscriptionRequired"

    @pytest.mark.asyncio
    async def test_rate_limit_and_not_found_are_deny_policies(self, gateway, issuer, free_viewer):
        gateway.rate_limiter.tier_limits[free_viewer.subscription_tier] = 0
        token = issuer.issue(free_viewer)

        limited = await handle_authorizer_event(gateway, token_event(token, "GET", "/articles"))
        missing = await handle_authorizer_event(gateway, token_event(token, "GET", "/articles/ghost"))

        assert limited['policyDocument']['Statement'][0]['Effect'] == "Deny"
        assert limited['context']['reason'] == "RateLimitExceeded"
        assert limited['context']['error'] == "rate_limit_exceeded"
        assert missing['policyDocument']['Statement'][0]['Effect'] == "Deny"
        assert missing['context']['reason'] == "ResourceNotFound"

    @pytest.mark.asyncio
    async def test_invalid_token_raises_unauthorized(self, gateway):
        with pytest.raises(UnauthorizedError) as exc_info:
            await handle_authorizer_event(gateway, token_event("garbage", "GET", "/articles"))
        assert exc_info.value.message == "Unauthorized"

    @pytest.mark.asyncio
    async def test_fault_raises_unauthorized(self, gateway, issuer, editor):
        gateway.authorize = AsyncMock(return_value=Fault(cause=RuntimeError("boom")))

        with pytest.raises(UnauthorizedError):
            await handle_authorizer_event(gateway, token_event(issuer.issue(editor), "GET", "/articles"))
