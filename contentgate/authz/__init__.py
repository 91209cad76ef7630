# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Package authz classifies requests and evaluates the layered access policy
(role-based, attribute-based and ownership-based).
"""

from .classifier import (
    Classification,
    RequestClassifier,
    DEFAULT_ROUTES,
    DEFAULT_RESOURCE_TYPE,
    PUBLISH_SEGMENT,
    method_from_arn,
    path_from_arn,
    split_path,
)

from .policy import (
    CapabilityTable,
    default_capabilities,
)

from .types import (
    ListingFilter,
    Verdict,
)

from .evaluator import PolicyEvaluator

__all__ = [
    # Classification
    'Classification',
    'RequestClassifier',
    'DEFAULT_ROUTES',
    'DEFAULT_RESOURCE_TYPE',
    'PUBLISH_SEGMENT',
    'method_from_arn',
    'path_from_arn',
    'split_path',

    # Policy
    'CapabilityTable',
    'default_capabilities',
    'ListingFilter',
    'Verdict',
    'PolicyEvaluator',
]
