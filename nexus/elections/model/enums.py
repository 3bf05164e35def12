"""
Enums for the elections model.
"""

import enum


class ElectionStatusEnum(str, enum.Enum):
    upcoming = "upcoming"
    active = "active"
    completed = "completed"
    cancelled = "cancelled"


class CandidateStatusEnum(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class ResourceKindEnum(str, enum.Enum):
    election = "election"
    candidate = "candidate"
    vote = "vote"


class ElectionEventEnum(str, enum.Enum):
    pass


class ElectionPublicEventEnum(ElectionEventEnum):
    ELECTION_CREATED = "election_created"
    ELECTION_UPDATED = "election_updated"
    VOTING_STARTED = "voting_started"
    VOTING_STOPPED = "voting_stopped"
    CANDIDATE_APPLIED = "candidate_applied"
    CANDIDATE_UPDATED = "candidate_updated"
    CANDIDATE_WITHDRAWN = "candidate_withdrawn"
    CANDIDATE_APPROVED = "candidate_approved"
    CANDIDATE_REJECTED = "candidate_rejected"
    VOTE_CAST = "vote_cast"


class ElectionAdminEventEnum(ElectionEventEnum):
    DUPLICATE_VOTE_REJECTED = "duplicate_vote_rejected"
