"""
Role-based permission matrix for elections, candidates and votes.

resolve_permissions is pure: it only looks at the role, the resource kind
and, for ownership or status dependent capabilities, the record and the
actor's id. Records may be ORM instances, pydantic schemas or plain dicts.
"""

from nexus.elections.model.enums import ElectionStatusEnum, ResourceKindEnum
from nexus.nexus_auth.model.enums import UserRole


CAPABILITIES = {
    ResourceKindEnum.election: ("create", "read", "update", "delete", "vote", "approve", "reject"),
    ResourceKindEnum.candidate: ("create", "read", "update", "delete", "approve", "reject"),
    ResourceKindEnum.vote: ("create", "read"),
}


def _get(record, field):
    if record is None:
        return None
    if isinstance(record, dict):
        return record.get(field)
    return getattr(record, field, None)


def _as_role(role):
    try:
        return UserRole(role)
    except ValueError:
        return None


def _as_kind(resource_kind):
    try:
        return ResourceKindEnum(resource_kind)
    except ValueError:
        return None


def _is_active(election) -> bool:
    return _get(election, "status") == ElectionStatusEnum.active


def _election_permissions(role: UserRole, election, actor_id):
    is_creator = actor_id is not None and _get(election, "created_by") == actor_id
    manages = role == UserRole.admin or (role == UserRole.faculty and is_creator)
    reviewer = role in (UserRole.admin, UserRole.faculty)
    return {
        "create": reviewer,
        "read": True,
        "update": manages,
        "delete": manages,
        "vote": role in (UserRole.student, UserRole.faculty) and _is_active(election),
        "approve": reviewer,
        "reject": reviewer,
    }


def _candidate_permissions(role: UserRole, candidate, actor_id):
    is_owner = actor_id is not None and _get(candidate, "applicant_id") == actor_id
    reviewer = role in (UserRole.admin, UserRole.faculty)
    return {
        "create": role == UserRole.student,
        "read": True,
        "update": role == UserRole.admin or is_owner,
        "delete": role == UserRole.admin or is_owner,
        "approve": reviewer,
        "reject": reviewer,
    }


def _vote_permissions(role: UserRole, election, actor_id):
    can_vote = role in (UserRole.student, UserRole.faculty)
    if election is not None:
        can_vote = can_vote and _is_active(election)
    return {
        "create": can_vote,
        "read": True,
    }


RESOLVERS = {
    ResourceKindEnum.election: _election_permissions,
    ResourceKindEnum.candidate: _candidate_permissions,
    ResourceKindEnum.vote: _vote_permissions,
}


def resolve_permissions(role, resource_kind, record=None, actor_id=None) -> dict:
    """
    Returns the capability set of `role` over `resource_kind`.

    For "vote" the record, when given, is the election being voted in.
    Unknown roles get every capability denied; unknown resource kinds get
    an empty mapping.
    """
    kind = _as_kind(resource_kind)
    if kind is None:
        return {}

    role = _as_role(role)
    if role is None:
        return {capability: False for capability in CAPABILITIES[kind]}

    return RESOLVERS[kind](role, record, actor_id)


def can(role, resource_kind, action, record=None, actor_id=None) -> bool:
    return resolve_permissions(role, resource_kind, record, actor_id).get(action, False)
