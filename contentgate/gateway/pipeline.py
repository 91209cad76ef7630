# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Authorization pipeline.

One inbound request flows through identity extraction, classification,
attribute lookup, policy evaluation, rate limiting and packaging, in that
order. The first stage that denies ends the pipeline with exactly one reason.
Unexpected failures are logged in full and surface as a generic fault.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..audit import AuditLogger, DecisionEvent
from ..auth import IdentityExtractor, TokenVerifier
from ..authz import (
    CapabilityTable,
    Classification,
    ListingFilter,
    PolicyEvaluator,
    RequestClassifier,
    Verdict,
    method_from_arn,
)
from ..core.config import GatewayConfig
from ..core.types import (
    Action,
    ActionRequest,
    InboundRequest,
    Principal,
    ResourceAttributes,
    ResourceDescriptor,
)
from ..errors import (
    INTERNAL_ERROR_CODE,
    INTERNAL_ERROR_MESSAGE,
    INTERNAL_ERROR_STATUS,
    AttributeProviderUnavailableError,
    DenialReason,
    DeniedError,
    RateLimitExceededError,
    ResourceNotFoundError,
)
from ..metrics import MetricsCollector
from ..rate import UNBOUNDED, CounterStore, RateLimitQuota, TierRateLimiter
from ..resources import AttributeProvider, MemoryAttributeProvider
from .packager import AuthorizationContext, DecisionPackager, DenialResponse

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER_TIMEOUT = 5.0


class GatewayResult:
    """Base for pipeline outcomes: ``Allowed``, ``Denied`` or ``Fault``."""

    outcome = ""
    allowed = False

    @property
    def status(self) -> int:
        raise NotImplementedError

    @property
    def headers(self) -> Dict[str, str]:
        return {}

    def to_payload(self) -> Dict[str, Any]:
        raise NotImplementedError


@dataclass(frozen=True)
class Allowed(GatewayResult):
    """The request may proceed with the forwarded context."""
    context: AuthorizationContext
    verdict: Verdict
    quota: RateLimitQuota = UNBOUNDED
    principal: Optional[Principal] = None

    outcome = "allow"
    allowed = True

    @property
    def status(self) -> int:
        return 200

    @property
    def headers(self) -> Dict[str, str]:
        return self.quota.to_headers()

    @property
    def listing_filter(self) -> Optional[ListingFilter]:
        return self.verdict.listing_filter

    def to_payload(self) -> Dict[str, Any]:
        return self.context.to_payload()


@dataclass(frozen=True)
class Denied(GatewayResult):
    """The request was refused for exactly one reason."""
    response: DenialResponse
    principal: Optional[Principal] = None

    outcome = "deny"

    @property
    def reason(self) -> DenialReason:
        return self.response.reason

    @property
    def message(self) -> str:
        return self.response.message

    @property
    def status(self) -> int:
        return self.response.status

    @property
    def headers(self) -> Dict[str, str]:
        return self.response.headers

    def to_payload(self) -> Dict[str, Any]:
        return self.response.to_payload()


@dataclass(frozen=True)
class Fault(GatewayResult):
    """An unexpected failure; callers only ever see a generic message."""
    cause: Optional[BaseException] = None
    principal: Optional[Principal] = None

    outcome = "fault"
    message = INTERNAL_ERROR_MESSAGE

    @property
    def status(self) -> int:
        return INTERNAL_ERROR_STATUS

    def to_payload(self) -> Dict[str, Any]:
        return {
            'allowed': False,
            'error': INTERNAL_ERROR_CODE,
            'message': INTERNAL_ERROR_MESSAGE,
        }


@dataclass
class _Trace:
    """What the pipeline learned before it stopped, for audit and metrics."""
    principal: Optional[Principal] = None
    classification: Optional[Classification] = None
    extra: Dict[str, Any] = field(default_factory=dict)


class AuthorizationGateway:
    """Runs the authorization pipeline for inbound requests."""

    def __init__(self,
                 extractor: IdentityExtractor,
                 provider: Optional[AttributeProvider] = None,
                 classifier: Optional[RequestClassifier] = None,
                 evaluator: Optional[PolicyEvaluator] = None,
                 rate_limiter: Optional[TierRateLimiter] = None,
                 packager: Optional[DecisionPackager] = None,
                 audit_logger: Optional[AuditLogger] = None,
                 metrics: Optional[MetricsCollector] = None,
                 provider_timeout: float = DEFAULT_PROVIDER_TIMEOUT):
        self.extractor = extractor
        self.provider = provider or MemoryAttributeProvider()
        self.classifier = classifier or RequestClassifier()
        self.evaluator = evaluator or PolicyEvaluator()
        self.rate_limiter = rate_limiter or TierRateLimiter()
        self.packager = packager or DecisionPackager()
        self.audit_logger = audit_logger
        self.metrics = metrics
        self.provider_timeout = provider_timeout

    @classmethod
    def from_config(cls,
                    config: Optional[GatewayConfig] = None,
                    provider: Optional[AttributeProvider] = None,
                    store: Optional[CounterStore] = None,
                    audit_logger: Optional[AuditLogger] = None,
                    metrics: Optional[MetricsCollector] = None,
                    capabilities: Optional[CapabilityTable] = None) -> 'AuthorizationGateway':
        """
        Build a gateway from configuration.

        Args:
            config: Gateway configuration; read from the environment if omitted
            provider: Resource attribute provider
            store: Counter store; built from ``config.rate_limit`` if omitted
            audit_logger: Optional decision audit logger
            metrics: Optional metrics collector
            capabilities: Role capability table; the default table if omitted

        Raises:
            ConfigurationError: if the configuration is invalid
        """
        config = config or GatewayConfig.from_env()
        config.validate()

        return cls(
            extractor=IdentityExtractor(TokenVerifier(config.token)),
            provider=provider,
            evaluator=PolicyEvaluator(capabilities),
            rate_limiter=TierRateLimiter.from_config(config.rate_limit, store),
            audit_logger=audit_logger,
            metrics=metrics,
            provider_timeout=config.provider_timeout.total_seconds(),
        )

    async def authorize(self, request: InboundRequest,
                        now: Optional[float] = None) -> GatewayResult:
        """
        Decide one inbound request.

        Args:
            request: The inbound request
            now: Clock override in epoch seconds, for the rate limiter

        Returns:
            ``Allowed``, ``Denied`` or ``Fault``; never raises
        """
        started = time.perf_counter()
        trace = _Trace()

        try:
            result = await self._run(request, now, trace)
        except Exception as e:
            logger.error(
                f"Authorization failed for {request.method} {request.path} "
                f"(request {request.request_id}): {e}",
                exc_info=True,
            )
            result = Fault(cause=e, principal=trace.principal)

        duration = time.perf_counter() - started
        try:
            await self._record(request, result, trace, duration)
        except Exception as e:
            logger.error(f"Failed to record authorization decision: {e}", exc_info=True)
            result = Fault(cause=e, principal=trace.principal)

        return result

    async def _run(self, request: InboundRequest, now: Optional[float],
                   trace: _Trace) -> GatewayResult:
        try:
            principal = self.extractor.extract(request)
        except DeniedError as e:
            logger.warning(f"Rejected credential for {request.method} {request.path}: {e.details}")
            return self._denied(e)
        trace.principal = principal

        method = method_from_arn(request.method_arn) or request.method
        classification = self.classifier.classify(method, request.path)
        trace.classification = classification

        try:
            attributes = await self._lookup(classification)
        except DeniedError as e:
            logger.warning(f"Denied {principal.id}: {e.message}")
            return self._denied(e, principal)

        action_request = ActionRequest(
            principal=principal,
            resource=ResourceDescriptor(
                type=classification.resource_type,
                id=classification.resource_id,
                attributes=attributes,
            ),
            action=classification.action,
        )

        verdict = self.evaluator.evaluate(action_request)
        if not verdict.allowed:
            logger.warning(
                f"Denied {principal.id} {classification.action} "
                f"{classification.resource_type}: {verdict.reason}"
            )
            return Denied(self.packager.deny(verdict.reason, verdict.message), principal)

        try:
            quota = await self.rate_limiter.admit(
                principal.id, principal.subscription_tier, now=now)
        except RateLimitExceededError as e:
            trace.extra['tier'] = principal.subscription_tier.value
            return self._denied(e, principal)

        context = self.packager.allow(verdict)
        logger.info(
            f"Allowed {principal.id} {classification.action} "
            f"{classification.resource_type} {classification.resource_id or ''}".rstrip()
        )
        return Allowed(context=context, verdict=verdict, quota=quota, principal=principal)

    async def _lookup(self, classification: Classification) -> ResourceAttributes:
        """Fetch resource attributes when the action targets an existing resource."""
        if classification.resource_id is None or classification.action == Action.CREATE:
            return ResourceAttributes()

        try:
            return await asyncio.wait_for(
                self.provider.lookup(classification.resource_type, classification.resource_id),
                timeout=self.provider_timeout,
            )
        except ResourceNotFoundError:
            raise
        except asyncio.TimeoutError as e:
            self._provider_failed()
            logger.error(
                f"Attribute lookup for {classification.resource_type} "
                f"{classification.resource_id} timed out after {self.provider_timeout}s"
            )
            raise AttributeProviderUnavailableError(cause=e) from e
        except Exception as e:
            self._provider_failed()
            logger.error(
                f"Attribute lookup for {classification.resource_type} "
                f"{classification.resource_id} failed: {e}",
                exc_info=True,
            )
            raise AttributeProviderUnavailableError(cause=e) from e

    def _provider_failed(self) -> None:
        if self.metrics:
            self.metrics.record_provider_failure()

    def _denied(self, error: DeniedError, principal: Optional[Principal] = None) -> Denied:
        retry_after = getattr(error, 'retry_after', None)
        response = self.packager.deny(error.reason, error.message, retry_after=retry_after)
        return Denied(response, principal)

    async def _record(self, request: InboundRequest, result: GatewayResult,
                      trace: _Trace, duration: float) -> None:
        reason = result.reason.value if isinstance(result, Denied) else None

        if self.metrics:
            self.metrics.record_decision(result.outcome, reason, duration)
            if reason == DenialReason.RATE_LIMIT_EXCEEDED.value:
                self.metrics.record_rate_limited(trace.extra.get('tier', ''))

        if self.audit_logger:
            classification = trace.classification
            event = DecisionEvent(
                outcome=result.outcome,
                principal_id=trace.principal.id if trace.principal else None,
                method=request.method,
                path=request.path,
                resource=classification.resource_type.value if classification else None,
                action=classification.action.value if classification else None,
                resource_id=classification.resource_id if classification else None,
                reason=reason,
                duration_ms=round(duration * 1000, 3),
                details={'request_id': request.request_id} if request.request_id else {},
            )
            await self.audit_logger.log(event)

    async def close(self) -> None:
        """Release the rate limiter, provider and audit logger."""
        await self.rate_limiter.close()
        await self.provider.close()
        if self.audit_logger:
            await self.audit_logger.close()
