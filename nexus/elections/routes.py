from fastapi import Depends, APIRouter
from sqlalchemy.orm import Session
from sqlalchemy.ext.asyncio import AsyncSession

from nexus.dependencies import get_session
from nexus.elections import services
from nexus.elections.exceptions import NotFound, PermissionDenied
from nexus.elections.model.cruds import crud
from nexus.elections.model.enums import ElectionStatusEnum, ResourceKindEnum
from nexus.elections.model.schemas import schemas
from nexus.elections.permissions import can, resolve_permissions
from nexus.nexus_auth.auth_bearer import AuthUser
from nexus.nexus_auth.model.models import User

api_router = APIRouter()

auth_required = AuthUser()
auth_optional = AuthUser(required=False)


def envelope(data=None, message: str | None = None):
    response = {"success": True, "data": data}
    if message is not None:
        response["message"] = message
    return response


# ----- Election Routes -----


@api_router.get("/elections", status_code=200)
async def list_elections(
    status: ElectionStatusEnum | None = None,
    current_user: User | None = Depends(auth_optional),
    session: Session | AsyncSession = Depends(get_session),
):
    """
    Route for listing the elections visible to the caller
    """
    elections = await services.list_elections(session=session, viewer=current_user, status=status)
    return envelope(elections)


@api_router.post("/elections", status_code=201)
async def create_election(
    election_in: schemas.ElectionIn,
    current_user: User = Depends(auth_required),
    session: Session | AsyncSession = Depends(get_session),
):
    """
    Admin/Faculty route for creating an election
    """
    election = await services.create_election(session=session, data=election_in, actor=current_user)
    return envelope(election, "Election created successfully")


@api_router.get("/elections/{election_id}", status_code=200)
async def get_election(
    election_id: str,
    current_user: User | None = Depends(auth_optional),
    session: Session | AsyncSession = Depends(get_session),
):
    election = await services.get_election(session=session, election_id=election_id, viewer=current_user)
    return envelope(election)


@api_router.put("/elections/{election_id}", status_code=200)
async def update_election(
    election_id: str,
    election_in: schemas.ElectionUpdate,
    current_user: User = Depends(auth_required),
    session: Session | AsyncSession = Depends(get_session),
):
    election = await services.update_election(
        session=session, election_id=election_id, data=election_in, actor=current_user
    )
    return envelope(election, "Election updated successfully")


@api_router.delete("/elections/{election_id}", status_code=200)
async def delete_election(
    election_id: str,
    current_user: User = Depends(auth_required),
    session: Session | AsyncSession = Depends(get_session),
):
    await services.delete_election(session=session, election_id=election_id, actor=current_user)
    return envelope(message="Election deleted successfully")


@api_router.post("/elections/{election_id}/start", status_code=200)
async def start_election(
    election_id: str,
    current_user: User = Depends(auth_required),
    session: Session | AsyncSession = Depends(get_session),
):
    """
    Opens the voting of an upcoming election
    """
    election = await services.start_election(session=session, election_id=election_id, actor=current_user)
    return envelope(election, "Voting started")


@api_router.post("/elections/{election_id}/end", status_code=200)
async def end_election(
    election_id: str,
    current_user: User = Depends(auth_required),
    session: Session | AsyncSession = Depends(get_session),
):
    """
    Closes the voting of an active election
    """
    election = await services.end_election(session=session, election_id=election_id, actor=current_user)
    return envelope(election, "Voting ended")


@api_router.get("/elections/{election_id}/logs", status_code=200)
async def get_election_logs(
    election_id: str,
    current_user: User = Depends(auth_required),
    session: Session | AsyncSession = Depends(get_session),
):
    logs = await services.get_election_logs(session=session, election_id=election_id, actor=current_user)
    return envelope(logs)


# ----- Candidate Routes -----


@api_router.get("/elections/{election_id}/candidates", status_code=200)
async def list_candidates(
    election_id: str,
    current_user: User | None = Depends(auth_optional),
    session: Session | AsyncSession = Depends(get_session),
):
    candidates = await services.list_candidates(session=session, election_id=election_id, viewer=current_user)
    return envelope(candidates)


@api_router.post("/elections/{election_id}/candidates", status_code=201)
async def apply_candidate(
    election_id: str,
    candidate_in: schemas.CandidateIn,
    current_user: User = Depends(auth_required),
    session: Session | AsyncSession = Depends(get_session),
):
    """
    Student route for applying to a position of an election
    """
    candidate = await services.apply_candidate(
        session=session, election_id=election_id, applicant=current_user, data=candidate_in
    )
    return envelope(candidate, "Application submitted successfully")


@api_router.get("/candidates/{candidate_id}", status_code=200)
async def get_candidate(
    candidate_id: str,
    current_user: User | None = Depends(auth_optional),
    session: Session | AsyncSession = Depends(get_session),
):
    candidate = await services.get_candidate(session=session, candidate_id=candidate_id)
    return envelope(candidate)


@api_router.put("/candidates/{candidate_id}", status_code=200)
async def update_candidate(
    candidate_id: str,
    candidate_in: schemas.CandidateUpdate,
    current_user: User = Depends(auth_required),
    session: Session | AsyncSession = Depends(get_session),
):
    candidate = await services.update_candidate(
        session=session, candidate_id=candidate_id, data=candidate_in, actor=current_user
    )
    return envelope(candidate, "Application updated successfully")


@api_router.delete("/candidates/{candidate_id}", status_code=200)
async def delete_candidate(
    candidate_id: str,
    current_user: User = Depends(auth_required),
    session: Session | AsyncSession = Depends(get_session),
):
    await services.delete_candidate(session=session, candidate_id=candidate_id, actor=current_user)
    return envelope(message="Application deleted successfully")


@api_router.patch("/candidates/{candidate_id}/approve", status_code=200)
async def approve_candidate(
    candidate_id: str,
    current_user: User = Depends(auth_required),
    session: Session | AsyncSession = Depends(get_session),
):
    candidate = await services.approve_candidate(session=session, candidate_id=candidate_id, actor=current_user)
    return envelope(candidate, "Candidate approved")


@api_router.patch("/candidates/{candidate_id}/reject", status_code=200)
async def reject_candidate(
    candidate_id: str,
    reject_in: schemas.CandidateReject | None = None,
    current_user: User = Depends(auth_required),
    session: Session | AsyncSession = Depends(get_session),
):
    reason = reject_in.reason if reject_in else None
    candidate = await services.reject_candidate(
        session=session, candidate_id=candidate_id, actor=current_user, reason=reason
    )
    return envelope(candidate, "Candidate rejected")


# ----- Vote Routes -----


@api_router.post("/elections/{election_id}/votes", status_code=201)
async def cast_vote(
    election_id: str,
    vote_in: schemas.VoteIn,
    current_user: User = Depends(auth_required),
    session: Session | AsyncSession = Depends(get_session),
):
    """
    Student/Faculty route for casting the caller's vote
    """
    if not can(current_user.role, ResourceKindEnum.vote, "create"):
        raise PermissionDenied("Only students and faculty can vote")

    vote = await services.cast_vote(
        session=session, election_id=election_id, candidate_id=vote_in.candidate_id, voter_id=current_user.id
    )
    return envelope(vote, "Vote cast successfully")


@api_router.get("/elections/{election_id}/has-voted", status_code=200)
async def has_voted(
    election_id: str,
    current_user: User = Depends(auth_required),
    session: Session | AsyncSession = Depends(get_session),
):
    candidate_id = await services.get_user_vote(session=session, election_id=election_id, voter_id=current_user.id)
    status = schemas.VoteStatus(has_voted=candidate_id is not None, candidate_id=candidate_id)
    return envelope(status)


# ----- Results Routes -----


@api_router.get("/elections/{election_id}/results", status_code=200)
async def get_results(
    election_id: str,
    current_user: User | None = Depends(auth_optional),
    session: Session | AsyncSession = Depends(get_session),
):
    results = await services.get_results(session=session, election_id=election_id)
    return envelope(results)


# ----- Permission Routes -----


@api_router.get("/permissions/{resource_kind}", status_code=200)
async def get_permissions(
    resource_kind: str,
    record_id: str | None = None,
    current_user: User = Depends(auth_required),
    session: Session | AsyncSession = Depends(get_session),
):
    """
    Capabilities of the caller over a resource kind, optionally for a
    given election (election, vote) or candidate (candidate) record
    """
    record = None
    if record_id is not None:
        if resource_kind == ResourceKindEnum.candidate.value:
            record = await crud.get_candidate_by_id(session=session, candidate_id=record_id)
            model_name = "Candidate"
        else:
            record = await crud.get_election_by_id(session=session, election_id=record_id)
            model_name = "Election"
        if record is None:
            raise NotFound(model_name, record_id)

    permissions = resolve_permissions(current_user.role, resource_kind, record=record, actor_id=current_user.id)
    return envelope(permissions)
