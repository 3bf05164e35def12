"""
CRUD utils for the elections module
(Create - Read - Update - delete)
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session
from sqlalchemy import select, update, delete, func, and_, or_
from sqlalchemy.exc import IntegrityError

from nexus.elections import utils
from nexus.elections.exceptions import Conflict
from nexus.elections.model import models
from nexus.elections.model.enums import CandidateStatusEnum, ElectionStatusEnum
from nexus.database import db_handler


# ----- Election CRUD Utils -----


async def get_election_by_id(session: Session | AsyncSession, election_id: str):
    query = select(models.Election).where(
        models.Election.id == election_id
    ).execution_options(populate_existing=True)
    result = await db_handler.execute(session, query)
    return result.scalars().first()


async def get_elections(
    session: Session | AsyncSession,
    status: ElectionStatusEnum | None = None,
    only_public: bool = False,
    created_by: str | None = None,
):
    query = select(models.Election)
    if status is not None:
        query = query.where(models.Election.status == status)
    if only_public:
        visible = and_(
            models.Election.is_public.is_(True),
            models.Election.status != ElectionStatusEnum.cancelled,
        )
        if created_by is not None:
            # creators always see their own elections
            visible = or_(visible, models.Election.created_by == created_by)
        query = query.where(visible)
    query = query.order_by(models.Election.start_date.asc(), models.Election.id.asc()).execution_options(populate_existing=True)
    result = await db_handler.execute(session, query)
    return result.scalars().all()


async def create_election(session: Session | AsyncSession, fields: dict, created_by: str):
    db_election = models.Election(
        **fields, created_by=created_by, status=ElectionStatusEnum.upcoming, vote_count=0
    )
    db_handler.add(session, db_election)
    await db_handler.commit(session)
    await db_handler.refresh(session, db_election)
    return db_election


async def update_election(session: Session | AsyncSession, election_id: str, fields: dict):
    fields = {**fields, "updated_at": utils.tz_now()}
    query = update(models.Election).where(
        models.Election.id == election_id
    ).values(fields)
    await db_handler.execute(session, query)
    await db_handler.commit(session)

    return await get_election_by_id(session=session, election_id=election_id)


async def delete_election(session: Session | AsyncSession, election_id: str):
    await db_handler.execute(session, delete(models.ElectionLog).where(models.ElectionLog.election_id == election_id))
    await db_handler.execute(session, delete(models.Vote).where(models.Vote.election_id == election_id))
    await db_handler.execute(session, delete(models.Candidate).where(models.Candidate.election_id == election_id))
    await db_handler.execute(session, delete(models.Election).where(models.Election.id == election_id))
    await db_handler.commit(session)


# ----- Candidate CRUD Utils -----


async def get_candidate_by_id(session: Session | AsyncSession, candidate_id: str):
    query = select(models.Candidate).where(
        models.Candidate.id == candidate_id
    ).execution_options(populate_existing=True)
    result = await db_handler.execute(session, query)
    return result.scalars().first()


async def get_candidates_by_election_id(
    session: Session | AsyncSession,
    election_id: str,
    status: CandidateStatusEnum | None = None,
    include_applicant: str | None = None,
):
    """
    Candidates of an election ordered by submission, optionally restricted
    to one status (plus, when include_applicant is given, that applicant's
    own applications whatever their status).
    """
    query = select(models.Candidate).where(models.Candidate.election_id == election_id)
    if status is not None and include_applicant is not None:
        query = query.where(or_(
            models.Candidate.status == status,
            models.Candidate.applicant_id == include_applicant,
        ))
    elif status is not None:
        query = query.where(models.Candidate.status == status)
    query = query.order_by(models.Candidate.submitted_at.asc(), models.Candidate.id.asc()).execution_options(populate_existing=True)
    result = await db_handler.execute(session, query)
    return result.scalars().all()


async def get_application(session: Session | AsyncSession, election_id: str, applicant_id: str, position: str):
    query = select(models.Candidate).where(
        models.Candidate.election_id == election_id,
        models.Candidate.applicant_id == applicant_id,
        models.Candidate.position == position,
    )
    result = await db_handler.execute(session, query)
    return result.scalars().first()


async def create_candidate(session: Session | AsyncSession, election_id: str, fields: dict):
    db_candidate = models.Candidate(
        election_id=election_id,
        status=CandidateStatusEnum.pending,
        vote_count=0,
        **fields,
    )
    db_handler.add(session, db_candidate)
    try:
        await db_handler.commit(session)
    except IntegrityError as e:
        await db_handler.rollback(session)
        raise Conflict("You have already applied for this position in this election") from e
    await db_handler.refresh(session, db_candidate)
    return db_candidate


async def update_candidate(session: Session | AsyncSession, candidate_id: str, fields: dict):
    fields = {**fields, "updated_at": utils.tz_now()}
    query = update(models.Candidate).where(
        models.Candidate.id == candidate_id
    ).values(fields)
    await db_handler.execute(session, query)
    await db_handler.commit(session)

    return await get_candidate_by_id(session=session, candidate_id=candidate_id)


async def review_candidate(session: Session | AsyncSession, candidate_id: str, fields: dict):
    """
    Applies an approve/reject transition only if the candidate is still
    pending. Returns False when another reviewer got there first.
    """
    fields = {**fields, "updated_at": utils.tz_now()}
    query = update(models.Candidate).where(
        models.Candidate.id == candidate_id,
        models.Candidate.status == CandidateStatusEnum.pending,
    ).values(fields)
    result = await db_handler.execute(session, query)
    await db_handler.commit(session)
    return result.rowcount == 1


async def delete_candidate(session: Session | AsyncSession, candidate_id: str):
    query = delete(models.Candidate).where(
        models.Candidate.id == candidate_id
    )
    await db_handler.execute(session, query)
    await db_handler.commit(session)


# ----- Vote CRUD Utils -----


async def get_vote_by_election_and_voter(session: Session | AsyncSession, election_id: str, voter_id: str):
    query = select(models.Vote).where(
        models.Vote.election_id == election_id,
        models.Vote.voter_id == voter_id,
    )
    result = await db_handler.execute(session, query)
    return result.scalars().first()


async def count_votes_by_election_id(session: Session | AsyncSession, election_id: str):
    query = select(func.count(models.Vote.id)).where(models.Vote.election_id == election_id)
    result = await db_handler.execute(session, query)
    return result.scalar()


async def count_votes_by_candidate_id(session: Session | AsyncSession, candidate_id: str):
    query = select(func.count(models.Vote.id)).where(models.Vote.candidate_id == candidate_id)
    result = await db_handler.execute(session, query)
    return result.scalar()


async def create_vote(session: Session | AsyncSession, election_id: str, candidate_id: str, voter_id: str):
    """
    Inserts the vote and bumps both counters in one transaction.

    The (election_id, voter_id) unique constraint decides between racing
    requests: the loser's transaction is rolled back whole, so the counters
    only ever move together with a stored vote.
    """
    db_vote = models.Vote(
        election_id=election_id,
        candidate_id=candidate_id,
        voter_id=voter_id,
        cast_at=utils.tz_now(),
    )
    try:
        db_handler.add(session, db_vote)
        await db_handler.execute(
            session,
            update(models.Candidate).where(
                models.Candidate.id == candidate_id
            ).values(vote_count=models.Candidate.vote_count + 1),
        )
        await db_handler.execute(
            session,
            update(models.Election).where(
                models.Election.id == election_id
            ).values(vote_count=models.Election.vote_count + 1),
        )
        await db_handler.commit(session)
    except IntegrityError as e:
        await db_handler.rollback(session)
        raise Conflict("You have already voted in this election") from e
    return db_vote


# --- ElectionLog CRUD Utils ---


async def log_to_db(session: Session | AsyncSession, election_id: str, log_level: str, event: str, event_params: str, created_at=None):
    db_log = models.ElectionLog(
        election_id=election_id,
        log_level=log_level,
        event=event,
        event_params=event_params,
        created_at=created_at or utils.tz_now(),
    )
    db_handler.add(session, db_log)
    await db_handler.commit(session)
    await db_handler.refresh(session, db_log)
    return db_log


async def get_logs_by_election_id(session: Session | AsyncSession, election_id: str, event: str | None = None):
    query = select(models.ElectionLog).where(
        models.ElectionLog.election_id == election_id,
    )
    if event is not None:
        query = query.where(models.ElectionLog.event == event)
    query = query.order_by(models.ElectionLog.id.asc())
    result = await db_handler.execute(session, query)
    return result.scalars().all()
