"""
Role hierarchy predicates.

Each predicate is a lookup in a table keyed by the closed ``Role`` enum,
and every table has an entry for every role. Callers may pass the raw
string stored on a membership row; unknown strings and ``None`` are denied.
"""

from __future__ import annotations

from typing import Optional, Union

from parley_shared.schemas.common import Role

RoleLike = Union[Role, str, None]

MANAGERS: dict[Role, bool] = {
    Role.OWNER: True,
    Role.ADMIN: True,
    Role.MEMBER: False,
}

# actor role -> roles it may act upon (impersonate, deactivate)
SUBORDINATES: dict[Role, frozenset[Role]] = {
    Role.OWNER: frozenset({Role.ADMIN, Role.MEMBER}),
    Role.ADMIN: frozenset({Role.MEMBER}),
    Role.MEMBER: frozenset(),
}

# actor role -> roles it may hand out through an invitation
INVITABLE: dict[Role, frozenset[Role]] = {
    Role.OWNER: frozenset({Role.OWNER, Role.ADMIN, Role.MEMBER}),
    Role.ADMIN: frozenset({Role.MEMBER}),
    Role.MEMBER: frozenset(),
}


def as_role(value: RoleLike) -> Optional[Role]:
    """Coerce a stored role string to ``Role``; None for missing or unknown values."""
    if value is None or isinstance(value, Role):
        return value
    try:
        return Role(value)
    except ValueError:
        return None


def can_manage_organization(role: RoleLike) -> bool:
    actor = as_role(role)
    return actor is not None and MANAGERS[actor]


def can_impersonate(actor_role: RoleLike, target_role: RoleLike) -> bool:
    """Owners may impersonate admins and members; admins only members."""
    actor, target = as_role(actor_role), as_role(target_role)
    if actor is None or target is None:
        return False
    return target in SUBORDINATES[actor]


def can_deactivate_member(actor_role: RoleLike, target_role: RoleLike) -> bool:
    actor, target = as_role(actor_role), as_role(target_role)
    if actor is None or target is None:
        return False
    return target in SUBORDINATES[actor]


def can_create_invitation_with_role(actor_role: RoleLike, invite_role: RoleLike) -> bool:
    actor, invited = as_role(actor_role), as_role(invite_role)
    if actor is None or invited is None:
        return False
    return invited in INVITABLE[actor]
