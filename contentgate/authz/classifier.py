# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Request classification: map an HTTP method and path to the resource type,
action and optional resource id being requested.

Two behaviours here are quirks kept on purpose:

* a path matching no entry in the route table is classified as an Article;
* an HTTP method outside GET/POST/PUT/DELETE is classified as a read.

Both are logged at WARNING so they show up when they are relied upon.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from ..core.types import Action, ResourceType

logger = logging.getLogger(__name__)

PUBLISH_SEGMENT = "publish"

# Ordered: the first entry whose segment occurs in the path wins
DEFAULT_ROUTES: Tuple[Tuple[str, ResourceType], ...] = (
    ("articles", ResourceType.ARTICLE),
    ("categories", ResourceType.CATEGORY),
    ("comments", ResourceType.COMMENT),
    ("media", ResourceType.MEDIA),
)

DEFAULT_RESOURCE_TYPE = ResourceType.ARTICLE

METHOD_ACTIONS = {
    "GET": Action.READ,
    "POST": Action.CREATE,
    "PUT": Action.UPDATE,
    "DELETE": Action.DELETE,
}


@dataclass(frozen=True)
class Classification:
    """Resolved (resource type, action, resource id) for a request."""
    resource_type: ResourceType
    action: Action
    resource_id: Optional[str] = None

    def as_tuple(self) -> Tuple[ResourceType, Action, Optional[str]]:
        return (self.resource_type, self.action, self.resource_id)


def split_path(path: str) -> Tuple[str, ...]:
    """Split a URL path into its non-empty segments, ignoring any query string."""
    path = (path or "").split("?", 1)[0]
    return tuple(segment for segment in path.split("/") if segment)


def method_from_arn(method_arn: Optional[str]) -> Optional[str]:
    """
    Extract the HTTP verb from an API gateway method ARN.

    ``arn:aws:execute-api:region:account:api-id/stage/VERB/resource/path``
    """
    if not method_arn:
        return None
    parts = method_arn.split("/")
    if len(parts) < 3 or not parts[2]:
        return None
    return parts[2].upper()


def path_from_arn(method_arn: Optional[str]) -> Optional[str]:
    """Extract the resource path from an API gateway method ARN."""
    if not method_arn:
        return None
    parts = method_arn.split("/")
    if len(parts) < 4:
        return None
    return "/" + "/".join(parts[3:])


class RequestClassifier:
    """Classifies requests against an ordered (segment -> resource type) table."""

    def __init__(self,
                 routes: Sequence[Tuple[str, ResourceType]] = DEFAULT_ROUTES,
                 default_type: ResourceType = DEFAULT_RESOURCE_TYPE):
        self.routes = tuple(routes)
        self.default_type = default_type

    def resolve_type(self, segments: Sequence[str]) -> Tuple[ResourceType, Optional[int]]:
        """Return the resource type and the index of its segment, if any matched."""
        for segment, resource_type in self.routes:
            if segment in segments:
                return resource_type, segments.index(segment)
        return self.default_type, None

    def classify(self, method: str, path: str) -> Classification:
        segments = split_path(path)
        resource_type, index = self.resolve_type(segments)
        if index is None:
            logger.warning(f"No route matches {path!r}; defaulting to {self.default_type}")

        resource_id = None
        if index is not None and index + 1 < len(segments):
            candidate = segments[index + 1]
            if candidate != PUBLISH_SEGMENT:
                resource_id = candidate

        verb = (method or "").upper()
        if verb == "POST" and PUBLISH_SEGMENT in segments:
            action = Action.PUBLISH
        elif verb in METHOD_ACTIONS:
            action = METHOD_ACTIONS[verb]
        else:
            logger.warning(f"Unmapped HTTP method {method!r}; treating as read")
            action = Action.READ

        return Classification(resource_type, action, resource_id)
