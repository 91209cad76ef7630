"""
contentgate Demo Application

Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

This demo walks a set of principals through the authorization pipeline:
- Token issuance for each role and subscription tier
- Role, subscription, draft and ownership checks
- Listing pre-filters
- Per-tier rate limiting
- Audit log retrieval and metrics export

It can also mint test tokens for use against a deployed gateway:

    contentgate-demo token --user-id u1 --role author --tier premium
"""

import argparse
import asyncio
import logging
import sys
from datetime import timedelta
from typing import List, Optional

from contentgate.audit import MemoryAuditLogger
from contentgate.auth import TokenIssuer
from contentgate.core.config import GatewayConfig, RateLimitConfig, TokenConfig
from contentgate.core.types import (
    InboundRequest,
    Principal,
    ResourceType,
    Role,
    SubscriptionTier,
)
from contentgate.gateway import Allowed, AuthorizationGateway
from contentgate.metrics import MetricsCollector
from contentgate.resources import MemoryAttributeProvider

DEMO_SECRET = "demo-secret-change-me-before-deploying"


def seed_provider() -> MemoryAttributeProvider:
    """Attribute provider with a handful of articles."""
    provider = MemoryAttributeProvider()
    provider.put(ResourceType.ARTICLE, "free-1", category="free", status="published",
                 owner_id="author-1", title="Getting started")
    provider.put(ResourceType.ARTICLE, "premium-1", category="premium", status="published",
                 owner_id="author-1", title="Advanced techniques")
    provider.put(ResourceType.ARTICLE, "draft-1", category="free", status="draft",
                 owner_id="author-1", title="Work in progress")
    provider.put(ResourceType.ARTICLE, "other-1", category="free", status="published",
                 owner_id="author-2", title="Someone else's article")
    return provider


async def run_demo(secret: str, list_calls: int) -> int:
    """Run the demo scenarios"""
    print("contentgate Demo Application")
    print("=" * 50)
    print()

    config = GatewayConfig(
        token=TokenConfig(secret_key=secret),
        rate_limit=RateLimitConfig(purge_probability=0.0),
    )
    audit_logger = MemoryAuditLogger()
    metrics = MetricsCollector()

    try:
        gateway = AuthorizationGateway.from_config(
            config, provider=seed_provider(), audit_logger=audit_logger, metrics=metrics)
        issuer = TokenIssuer(config.token)
        print("✓ Created authorization gateway")
        print(f"  - Rate limit window: {config.rate_limit.window}")
        print(f"  - Tier limits: {config.rate_limit.tier_limits}")
        print()
    except Exception as e:
        print(f"✗ Error creating gateway: {e}")
        return 1

    principals = {
        'viewer': Principal("viewer-1", "viewer@example.com", Role.VIEWER, SubscriptionTier.FREE),
        'premium': Principal("viewer-2", "premium@example.com", Role.VIEWER, SubscriptionTier.PREMIUM),
        'author': Principal("author-1", "author@example.com", Role.AUTHOR, SubscriptionTier.FREE),
        'editor': Principal("editor-1", "editor@example.com", Role.EDITOR, SubscriptionTier.ENTERPRISE),
    }
    tokens = {name: issuer.issue(principal) for name, principal in principals.items()}

    scenarios = [
        ("Viewer creates an article", 'viewer', "POST", "/articles"),
        ("Free viewer reads a premium article", 'viewer', "GET", "/articles/premium-1"),
        ("Premium viewer reads a premium article", 'premium', "GET", "/articles/premium-1"),
        ("Viewer reads someone's draft", 'viewer', "GET", "/articles/draft-1"),
        ("Author reads own draft", 'author', "GET", "/articles/draft-1"),
        ("Author updates someone else's article", 'author', "PUT", "/articles/other-1"),
        ("Author publishes own draft", 'author', "POST", "/articles/draft-1/publish"),
        ("Editor publishes an author's draft", 'editor', "POST", "/articles/draft-1/publish"),
        ("Viewer reads a missing article", 'viewer', "GET", "/articles/missing"),
        ("Viewer lists articles", 'viewer', "GET", "/articles"),
    ]

    print("Step 1: Authorization Scenarios")
    print("-" * 40)
    for title, who, method, path in scenarios:
        request = InboundRequest(
            method=method,
            path=path,
            headers={'Authorization': f"Bearer {tokens[who]}"},
        )
        result = await gateway.authorize(request)
        if isinstance(result, Allowed):
            extra = f" (filter: {result.listing_filter.scope})" if result.listing_filter else ""
            print(f"✓ {title}: allowed{extra}")
        else:
            print(f"✗ {title}: {result.status} {result.to_payload().get('reason', 'fault')}")
    print()

    print("Step 2: Invalid Credentials")
    print("-" * 40)
    result = await gateway.authorize(InboundRequest(method="GET", path="/articles",
                                                    headers={'Authorization': "Bearer nope"}))
    print(f"✗ Garbage token: {result.status} {result.to_payload()['message']}")
    print()

    print("Step 3: Rate Limiting")
    print("-" * 40)
    request = InboundRequest(method="GET", path="/articles",
                             headers={'Authorization': f"Bearer {tokens['premium']}"})
    last = None
    for _ in range(list_calls):
        last = await gateway.authorize(request)
        if not last.allowed:
            break
    if last is not None and last.allowed:
        print(f"✓ {list_calls} list calls admitted; remaining {last.quota.remaining}")
    elif last is not None:
        print(f"✗ Rejected: {last.message}")
    print()

    print("Step 4: Audit and Metrics")
    print("-" * 40)
    denials = await audit_logger.get_events(outcome="deny")
    print(f"✓ Audit log holds {len(audit_logger.events)} decisions ({len(denials)} denials)")
    for event in denials[:5]:
        print(f"  - {event.principal_id}: {event.method} {event.path} -> {event.reason}")
    allowed = metrics.sample('contentgate_authorization_decisions_total', outcome="allow", reason="")
    print(f"✓ Metrics recorded {int(allowed)} allowed decisions")
    print()

    await gateway.close()
    print("Demo completed successfully!")
    return 0


def issue_token(args: argparse.Namespace) -> int:
    config = TokenConfig(secret_key=args.secret)
    principal = Principal(
        id=args.user_id,
        email=args.email or f"{args.user_id}@example.com",
        role=Role(args.role),
        subscription_tier=SubscriptionTier(args.tier),
    )
    print(TokenIssuer(config).issue(principal, expires_in=timedelta(seconds=args.expires_in)))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="contentgate-demo",
                                     description="contentgate authorization demo")
    parser.add_argument("--log-level", default="WARNING", help="Logging level")
    parser.add_argument("--secret", default=DEMO_SECRET, help="JWT signing secret")
    subparsers = parser.add_subparsers(dest="command")

    demo = subparsers.add_parser("demo", help="Run the authorization scenarios")
    demo.add_argument("--list-calls", type=int, default=1001,
                      help="List calls to make as a premium viewer")

    token = subparsers.add_parser("token", help="Issue a signed test token")
    token.add_argument("--user-id", required=True)
    token.add_argument("--email")
    token.add_argument("--role", choices=[r.value for r in Role], default=Role.VIEWER.value)
    token.add_argument("--tier", choices=[t.value for t in SubscriptionTier],
                       default=SubscriptionTier.FREE.value)
    token.add_argument("--expires-in", type=int, default=3600, help="Lifetime in seconds")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "token":
        return issue_token(args)

    list_calls = getattr(args, 'list_calls', 1001)
    try:
        return asyncio.run(run_demo(args.secret, list_calls))
    except KeyboardInterrupt:
        print("\nDemo interrupted by user")
        return 1


if __name__ == "__main__":
    sys.exit(main())
