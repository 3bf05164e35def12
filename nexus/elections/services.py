"""
Election workflows: election management, candidate applications and
reviews, vote recording and results.

Services take the request session plus the acting user (an auth User, or
None for anonymous callers), raise the exceptions from
nexus.elections.exceptions and hand back *Out schemas.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from nexus.elections import utils
from nexus.elections.exceptions import Conflict, InvalidState, NotFound, PermissionDenied, ValidationError
from nexus.elections.model import models
from nexus.elections.model.cruds import crud
from nexus.elections.model.enums import (
    CandidateStatusEnum,
    ElectionAdminEventEnum,
    ElectionPublicEventEnum,
    ElectionStatusEnum,
    ResourceKindEnum,
)
from nexus.elections.model.schemas import schemas
from nexus.elections.permissions import can
from nexus.logger import election_logger, logger
from nexus.nexus_auth.model.enums import UserRole


def _role(actor):
    return actor.role if actor is not None else None


def _actor_id(actor):
    return actor.id if actor is not None else None


def _check(actor, resource_kind: ResourceKindEnum, action: str, message: str, record=None):
    if not can(_role(actor), resource_kind, action, record=record, actor_id=_actor_id(actor)):
        raise PermissionDenied(message)


async def _get_election(session: Session | AsyncSession, election_id: str) -> models.Election:
    election = await crud.get_election_by_id(session=session, election_id=election_id)
    if not election:
        raise NotFound("Election", election_id)
    return election


async def _get_candidate(session: Session | AsyncSession, candidate_id: str) -> models.Candidate:
    candidate = await crud.get_candidate_by_id(session=session, candidate_id=candidate_id)
    if not candidate:
        raise NotFound("Candidate", candidate_id)
    return candidate


# ----- Elections -----


def _is_visible(election: models.Election, viewer) -> bool:
    if _role(viewer) == UserRole.admin:
        return True
    if viewer is not None and election.created_by == viewer.id:
        return True
    return election.is_public and election.status != ElectionStatusEnum.cancelled


async def list_elections(session: Session | AsyncSession, viewer=None, status: ElectionStatusEnum | None = None):
    only_public = _role(viewer) != UserRole.admin
    elections = await crud.get_elections(
        session=session, status=status, only_public=only_public, created_by=_actor_id(viewer),
    )
    return [schemas.ElectionOut.model_validate(e) for e in elections]


async def get_election(session: Session | AsyncSession, election_id: str, viewer=None):
    """
    Hidden elections (private or cancelled, not created by the viewer)
    are reported as missing to everyone but Admin.
    """
    election = await _get_election(session, election_id)
    if not _is_visible(election, viewer):
        raise NotFound("Election", election_id)
    return schemas.ElectionOut.model_validate(election)


async def create_election(session: Session | AsyncSession, data: schemas.ElectionIn, actor):
    _check(actor, ResourceKindEnum.election, "create", "Only administrators and faculty can create elections")

    if data.start_date < utils.tz_now():
        raise ValidationError("Start date cannot be in the past", errors=[
            {"field": "start_date", "message": "Start date cannot be in the past"},
        ])

    election = await crud.create_election(session=session, fields=data.model_dump(), created_by=actor.id)
    await election_logger.info(
        session, election.id, ElectionPublicEventEnum.ELECTION_CREATED,
        title=election.title, created_by=actor.id,
    )
    logger.info("Election %s created by %s" % (election.id, actor.username))
    return schemas.ElectionOut.model_validate(election)


async def update_election(session: Session | AsyncSession, election_id: str, data: schemas.ElectionUpdate, actor):
    election = await _get_election(session, election_id)
    _check(
        actor, ResourceKindEnum.election, "update",
        "You do not have permission to update this election", record=election,
    )

    fields = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
    if not fields:
        return schemas.ElectionOut.model_validate(election)

    current_start = utils.as_aware(election.start_date)
    current_end = utils.as_aware(election.end_date)

    if "start_date" in fields and fields["start_date"] != current_start and election.status != ElectionStatusEnum.upcoming:
        raise InvalidState("Start date can only be changed before the election starts")

    if "end_date" in fields and fields["end_date"] != current_end and election.is_completed():
        raise InvalidState("End date cannot be changed once the election is completed")

    if "status" in fields and election.is_completed() and fields["status"] != ElectionStatusEnum.completed:
        raise InvalidState("A completed election cannot change its status")

    if fields.get("end_date", current_end) <= fields.get("start_date", current_start):
        raise ValidationError("End date must be after start date", errors=[
            {"field": "end_date", "message": "End date must be after start date"},
        ])

    election = await crud.update_election(session=session, election_id=election_id, fields=fields)
    await election_logger.info(
        session, election_id, ElectionPublicEventEnum.ELECTION_UPDATED,
        fields=sorted(fields.keys()), updated_by=actor.id,
    )
    return schemas.ElectionOut.model_validate(election)


async def delete_election(session: Session | AsyncSession, election_id: str, actor):
    election = await _get_election(session, election_id)
    _check(
        actor, ResourceKindEnum.election, "delete",
        "You do not have permission to delete this election", record=election,
    )

    votes = await crud.count_votes_by_election_id(session=session, election_id=election_id)
    if votes:
        raise Conflict("Cannot delete an election that already has votes")

    await crud.delete_election(session=session, election_id=election_id)
    logger.info("Election %s deleted by %s" % (election_id, actor.username))


async def _change_status(session, election_id: str, actor, transition: str, event: ElectionPublicEventEnum):
    election = await _get_election(session, election_id)
    _check(
        actor, ResourceKindEnum.election, "update",
        "You do not have permission to manage this election", record=election,
    )

    fields = getattr(election, transition)()
    election = await crud.update_election(session=session, election_id=election_id, fields=fields)
    await election_logger.info(session, election_id, event, changed_by=actor.id)
    logger.log("NEXUS", "%s: election %s is now %s" % (event.value, election_id, election.status.value))
    return schemas.ElectionOut.model_validate(election)


async def start_election(session: Session | AsyncSession, election_id: str, actor):
    return await _change_status(session, election_id, actor, "start", ElectionPublicEventEnum.VOTING_STARTED)


async def end_election(session: Session | AsyncSession, election_id: str, actor):
    return await _change_status(session, election_id, actor, "end", ElectionPublicEventEnum.VOTING_STOPPED)


async def get_election_logs(session: Session | AsyncSession, election_id: str, actor):
    election = await _get_election(session, election_id)
    _check(
        actor, ResourceKindEnum.election, "update",
        "You do not have permission to read the logs of this election", record=election,
    )

    logs = await crud.get_logs_by_election_id(session=session, election_id=election_id)
    return [schemas.ElectionLogOut.model_validate(log) for log in logs]


# ----- Candidates -----


async def apply_candidate(session: Session | AsyncSession, election_id: str, applicant, data: schemas.CandidateIn):
    _check(applicant, ResourceKindEnum.candidate, "create", "Only students can apply as candidates")

    election = await _get_election(session, election_id)
    if not election.accepts_applications():
        raise InvalidState(
            f"Applications are closed, this election is {election.status.value}"
        )

    if data.position not in election.positions:
        message = "Invalid position. Valid positions are: %s" % ", ".join(election.positions)
        raise ValidationError(message, errors=[{"field": "position", "message": message}])

    existing = await crud.get_application(
        session=session, election_id=election_id, applicant_id=applicant.id, position=data.position
    )
    if existing:
        raise Conflict("You have already applied for this position in this election")

    fields = data.model_dump()
    fields["applicant_id"] = applicant.id
    fields["applicant_name"] = fields["applicant_name"] or applicant.name or applicant.username
    fields["department"] = fields["department"] or applicant.department

    candidate = await crud.create_candidate(session=session, election_id=election_id, fields=fields)
    await election_logger.info(
        session, election_id, ElectionPublicEventEnum.CANDIDATE_APPLIED,
        candidate_id=candidate.id, position=candidate.position,
    )
    return schemas.CandidateOut.model_validate(candidate)


async def get_candidate(session: Session | AsyncSession, candidate_id: str):
    candidate = await _get_candidate(session, candidate_id)
    return schemas.CandidateOut.model_validate(candidate)


async def list_candidates(session: Session | AsyncSession, election_id: str, viewer=None):
    await _get_election(session, election_id)

    role = _role(viewer)
    if role in (UserRole.admin, UserRole.faculty):
        candidates = await crud.get_candidates_by_election_id(session=session, election_id=election_id)
    elif role == UserRole.student:
        candidates = await crud.get_candidates_by_election_id(
            session=session,
            election_id=election_id,
            status=CandidateStatusEnum.approved,
            include_applicant=viewer.id,
        )
    else:
        candidates = await crud.get_candidates_by_election_id(
            session=session, election_id=election_id, status=CandidateStatusEnum.approved
        )
    return [schemas.CandidateOut.model_validate(c) for c in candidates]


async def update_candidate(session: Session | AsyncSession, candidate_id: str, data: schemas.CandidateUpdate, actor):
    candidate = await _get_candidate(session, candidate_id)
    _check(
        actor, ResourceKindEnum.candidate, "update",
        "You can only edit your own application", record=candidate,
    )
    if not candidate.is_pending():
        raise InvalidState(f"Only pending applications can be edited, this one is {candidate.status.value}")

    fields = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
    if not fields:
        return schemas.CandidateOut.model_validate(candidate)

    candidate = await crud.update_candidate(session=session, candidate_id=candidate_id, fields=fields)
    await election_logger.info(
        session, candidate.election_id, ElectionPublicEventEnum.CANDIDATE_UPDATED,
        candidate_id=candidate_id, fields=sorted(fields.keys()),
    )
    return schemas.CandidateOut.model_validate(candidate)


async def delete_candidate(session: Session | AsyncSession, candidate_id: str, actor):
    """
    Applicants may withdraw while their application is pending; an
    administrator may remove any candidate that has not received votes.
    """
    candidate = await _get_candidate(session, candidate_id)
    _check(
        actor, ResourceKindEnum.candidate, "delete",
        "You can only withdraw your own application", record=candidate,
    )
    if _role(actor) != UserRole.admin and not candidate.is_pending():
        raise InvalidState(f"Only pending applications can be withdrawn, this one is {candidate.status.value}")

    votes = await crud.count_votes_by_candidate_id(session=session, candidate_id=candidate_id)
    if votes:
        raise Conflict("Cannot delete a candidate that already has votes")

    election_id = candidate.election_id
    await crud.delete_candidate(session=session, candidate_id=candidate_id)
    await election_logger.info(
        session, election_id, ElectionPublicEventEnum.CANDIDATE_WITHDRAWN,
        candidate_id=candidate_id, removed_by=actor.id,
    )


async def _review_candidate(session, candidate_id: str, actor, action: str, fields_for, event: ElectionPublicEventEnum):
    candidate = await _get_candidate(session, candidate_id)
    _check(
        actor, ResourceKindEnum.candidate, action,
        "Only administrators and faculty can review applications", record=candidate,
    )

    fields = fields_for(candidate)
    reviewed = await crud.review_candidate(session=session, candidate_id=candidate_id, fields=fields)
    candidate = await _get_candidate(session, candidate_id)
    if not reviewed:
        # lost against a concurrent review
        raise Conflict(f"This application has already been {candidate.status.value}")

    await election_logger.info(
        session, candidate.election_id, event,
        candidate_id=candidate_id, reviewed_by=actor.id,
    )
    return schemas.CandidateOut.model_validate(candidate)


async def approve_candidate(session: Session | AsyncSession, candidate_id: str, actor):
    return await _review_candidate(
        session, candidate_id, actor, "approve",
        lambda candidate: candidate.approve(actor.id),
        ElectionPublicEventEnum.CANDIDATE_APPROVED,
    )


async def reject_candidate(session: Session | AsyncSession, candidate_id: str, actor, reason: str | None = None):
    return await _review_candidate(
        session, candidate_id, actor, "reject",
        lambda candidate: candidate.reject(actor.id, reason),
        ElectionPublicEventEnum.CANDIDATE_REJECTED,
    )


# ----- Votes -----


async def cast_vote(session: Session | AsyncSession, election_id: str, candidate_id: str, voter_id: str):
    """
    Records the vote of voter_id for candidate_id.

    Checks run in a fixed order and all of them happen before anything is
    written: election exists, election is active, candidate exists in the
    election, candidate is approved, voter has not voted yet.
    """
    election = await _get_election(session, election_id)
    if not election.is_active():
        raise InvalidState("Voting is closed for this election")

    candidate = await crud.get_candidate_by_id(session=session, candidate_id=candidate_id)
    if not candidate or candidate.election_id != election_id:
        raise NotFound("Candidate", candidate_id)

    if not candidate.is_approved():
        raise InvalidState("Candidate is not approved")

    try:
        previous = await crud.get_vote_by_election_and_voter(
            session=session, election_id=election_id, voter_id=voter_id
        )
        if previous:
            raise Conflict("You have already voted in this election")
        vote = await crud.create_vote(
            session=session, election_id=election_id, candidate_id=candidate_id, voter_id=voter_id
        )
    except Conflict:
        await election_logger.warning(
            session, election_id, ElectionAdminEventEnum.DUPLICATE_VOTE_REJECTED, voter_id=voter_id
        )
        logger.warning("Duplicate vote rejected: election %s, voter %s" % (election_id, voter_id))
        raise

    await election_logger.info(session, election_id, ElectionPublicEventEnum.VOTE_CAST)
    logger.log("NEXUS", "Vote cast in election %s" % election_id)
    return schemas.VoteOut.model_validate(vote)


async def has_voted(session: Session | AsyncSession, election_id: str, voter_id: str) -> bool:
    vote = await crud.get_vote_by_election_and_voter(session=session, election_id=election_id, voter_id=voter_id)
    return vote is not None


async def get_user_vote(session: Session | AsyncSession, election_id: str, voter_id: str) -> str | None:
    await _get_election(session, election_id)
    vote = await crud.get_vote_by_election_and_voter(session=session, election_id=election_id, voter_id=voter_id)
    return vote.candidate_id if vote else None


# ----- Results -----


async def get_results(session: Session | AsyncSession, election_id: str):
    """
    Tallies of a completed election, most voted first (ties by candidate id).
    """
    election = await _get_election(session, election_id)
    if not election.is_completed():
        raise InvalidState("Results are only available once the election is completed")

    candidates = await crud.get_candidates_by_election_id(
        session=session, election_id=election_id, status=CandidateStatusEnum.approved
    )
    total_votes = election.vote_count

    results = [
        schemas.CandidateResult(
            id=c.id,
            applicant_name=c.applicant_name,
            position=c.position,
            vote_count=c.vote_count,
            percentage=utils.percentage(c.vote_count, total_votes),
        )
        for c in candidates
    ]
    results.sort(key=lambda r: (-r.vote_count, r.id))

    return schemas.ElectionResults(
        election_id=election.id,
        title=election.title,
        status=election.status,
        total_votes=total_votes,
        candidates=results,
    )
