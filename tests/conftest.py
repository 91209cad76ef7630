"""
Shared fixtures for contentgate tests.
"""

import pytest

from contentgate.audit import MemoryAuditLogger
from contentgate.auth import IdentityExtractor, TokenIssuer, TokenVerifier
from contentgate.core.config import TokenConfig
from contentgate.core.types import Principal, ResourceType, Role, SubscriptionTier
from contentgate.gateway import AuthorizationGateway
from contentgate.metrics import MetricsCollector
from contentgate.rate import MemoryCounterStore, TierRateLimiter
from contentgate.resources import MemoryAttributeProvider

TEST_SECRET = "contentgate-test-secret-0123456789abcdef"


@pytest.fixture
def now():
    # 2025-01-01T00:30:00Z, half way through an hourly window
    return 1735691400.0


@pytest.fixture
def token_config():
    return TokenConfig(secret_key=TEST_SECRET)


@pytest.fixture
def issuer(token_config):
    return TokenIssuer(token_config)


@pytest.fixture
def verifier(token_config):
    return TokenVerifier(token_config)


@pytest.fixture
def free_viewer():
    return Principal("viewer-1", "viewer@example.com", Role.VIEWER, SubscriptionTier.FREE)


@pytest.fixture
def premium_viewer():
    return Principal("viewer-2", "premium@example.com", Role.VIEWER, SubscriptionTier.PREMIUM)


@pytest.fixture
def author():
    return Principal("author-1", "author@example.com", Role.AUTHOR, SubscriptionTier.FREE)


@pytest.fixture
def other_author():
    return Principal("author-2", "other@example.com", Role.AUTHOR, SubscriptionTier.PREMIUM)


@pytest.fixture
def editor():
    return Principal("editor-1", "editor@example.com", Role.EDITOR, SubscriptionTier.FREE)


@pytest.fixture
def admin():
    return Principal("admin-1", "admin@example.com", Role.ADMIN, SubscriptionTier.ENTERPRISE)


@pytest.fixture
def provider():
    provider = MemoryAttributeProvider()
    provider.put(ResourceType.ARTICLE, "free-pub", category="free", status="published",
                 owner_id="author-1")
    provider.put(ResourceType.ARTICLE, "premium-pub", category="premium", status="published",
                 owner_id="author-1")
    provider.put(ResourceType.ARTICLE, "draft-1", category="free", status="draft",
                 owner_id="author-1")
    provider.put(ResourceType.ARTICLE, "other-pub", category="free", status="published",
                 owner_id="author-2")
    provider.put(ResourceType.COMMENT, "comment-1", status="published", owner_id="author-1")
    return provider


@pytest.fixture
def rate_limiter():
    return TierRateLimiter(MemoryCounterStore(), purge_probability=0.0)


@pytest.fixture
def audit_logger():
    return MemoryAuditLogger()


@pytest.fixture
def metrics():
    return MetricsCollector()


@pytest.fixture
def gateway(verifier, provider, rate_limiter, audit_logger, metrics):
    return AuthorizationGateway(
        extractor=IdentityExtractor(verifier),
        provider=provider,
        rate_limiter=rate_limiter,
        audit_logger=audit_logger,
        metrics=metrics,
        provider_timeout=0.5,
    )


@pytest.fixture
def auth_headers(issuer):
    """Build an Authorization header carrying a fresh token for a principal."""
    def build(principal):
        return {'Authorization': f"Bearer {issuer.issue(principal)}"}
    return build
