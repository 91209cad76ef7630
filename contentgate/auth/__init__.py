# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Package auth verifies bearer credentials and extracts the request principal.
"""

from .jwt import (
    TokenVerifier,
    TokenIssuer,
)

from .extractor import (
    IdentityExtractor,
    extract_token,
    strip_bearer,
    principal_from_claims,
)

__all__ = [
    'TokenVerifier',
    'TokenIssuer',
    'IdentityExtractor',
    'extract_token',
    'strip_bearer',
    'principal_from_claims',
]
