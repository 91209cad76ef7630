# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Static role capability table used by the role-based layer.
"""

from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional

from ..core.types import Action, ResourceType, Role

Capabilities = Dict[Role, Dict[ResourceType, FrozenSet[Action]]]

ALL_ACTIONS: FrozenSet[Action] = frozenset(Action)
READ_ONLY: FrozenSet[Action] = frozenset({Action.READ})
AUTHOR_ACTIONS: FrozenSet[Action] = frozenset({
    Action.READ, Action.CREATE, Action.UPDATE, Action.DELETE,
})

WILDCARD = "*"


def _uniform(actions: FrozenSet[Action]) -> Dict[ResourceType, FrozenSet[Action]]:
    return {resource_type: actions for resource_type in ResourceType}


def default_capabilities() -> Capabilities:
    """
    Built-in role table.

    Authors may update and delete (their own, enforced by the ownership
    layer) but never publish, and only read categories.
    """
    author = _uniform(AUTHOR_ACTIONS)
    author[ResourceType.CATEGORY] = READ_ONLY
    return {
        Role.VIEWER: _uniform(READ_ONLY),
        Role.AUTHOR: author,
        Role.EDITOR: _uniform(ALL_ACTIONS),
        Role.ADMIN: _uniform(ALL_ACTIONS),
    }


class CapabilityTable:
    """Maps role -> resource type -> allowed actions."""

    def __init__(self, capabilities: Optional[Capabilities] = None):
        self._capabilities = capabilities if capabilities is not None else default_capabilities()

    def allowed_actions(self, role: Role, resource_type: ResourceType) -> FrozenSet[Action]:
        return self._capabilities.get(role, {}).get(resource_type, frozenset())

    def permits(self, role: Role, resource_type: ResourceType, action: Action) -> bool:
        return action in self.allowed_actions(role, resource_type)

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        """Convert to dictionary representation."""
        return {
            role.value: {
                resource_type.value: sorted(action.value for action in actions)
                for resource_type, actions in per_type.items()
            }
            for role, per_type in self._capabilities.items()
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Mapping[str, Iterable[str]]]) -> 'CapabilityTable':
        """
        Create from ``{role: {resource_type | "*": [action, ...]}}``.

        A ``"*"`` entry applies to every resource type; explicit types
        override it. Unknown roles, types or actions raise ``ValueError``.
        """
        capabilities: Capabilities = {}
        for role_name, per_type in data.items():
            role = Role(role_name)
            table: Dict[ResourceType, FrozenSet[Action]] = {}
            if WILDCARD in per_type:
                table.update(_uniform(frozenset(Action(a) for a in per_type[WILDCARD])))
            for type_name, actions in per_type.items():
                if type_name == WILDCARD:
                    continue
                table[ResourceType(type_name)] = frozenset(Action(a) for a in actions)
            capabilities[role] = table
        return cls(capabilities)
