import pytest

from nexus.elections import services
from nexus.elections.exceptions import Conflict, InvalidState, NotFound, PermissionDenied, ValidationError
from nexus.elections.model.cruds import crud
from nexus.elections.model.enums import CandidateStatusEnum, ElectionPublicEventEnum, ElectionStatusEnum
from nexus.elections.model.schemas import schemas

from tests.factories import make_candidate, make_election


def application(position="President", **kwargs):
    return schemas.CandidateIn(position=position, manifesto="Longer library opening hours", **kwargs)


async def test_apply_creates_pending_candidate(session, election, student):
    candidate = await services.apply_candidate(session, election.id, student, application())

    assert candidate.status == CandidateStatusEnum.pending
    assert candidate.vote_count == 0
    assert candidate.applicant_id == student.id
    assert candidate.applicant_name == "Sam Student"
    assert candidate.department == "Computer Science"


async def test_apply_keeps_given_applicant_name(session, election, student):
    candidate = await services.apply_candidate(session, election.id, student, application(applicant_name="Samuel S."))
    assert candidate.applicant_name == "Samuel S."


@pytest.mark.parametrize("user_fixture", ["admin", "faculty"])
async def test_only_students_can_apply(request, session, election, user_fixture):
    user = request.getfixturevalue(user_fixture)
    with pytest.raises(PermissionDenied):
        await services.apply_candidate(session, election.id, user, application())


async def test_apply_unknown_election(session, student):
    with pytest.raises(NotFound):
        await services.apply_candidate(session, "missing", student, application())


@pytest.mark.parametrize("status", [ElectionStatusEnum.completed, ElectionStatusEnum.cancelled])
async def test_apply_to_closed_election(session, faculty, student, status):
    election = make_election(session, faculty, status=status)
    with pytest.raises(InvalidState):
        await services.apply_candidate(session, election.id, student, application())


async def test_apply_to_active_election_is_allowed(session, active_election, student):
    candidate = await services.apply_candidate(session, active_election.id, student, application())
    assert candidate.status == CandidateStatusEnum.pending


async def test_apply_for_unknown_position_lists_valid_ones(session, faculty, student):
    election = make_election(session, faculty, positions=["President", "Treasurer"])
    with pytest.raises(ValidationError) as e:
        await services.apply_candidate(session, election.id, student, application(position="Mascot"))
    assert "President, Treasurer" in e.value.message


async def test_second_application_for_same_position_conflicts(session, election, student):
    await services.apply_candidate(session, election.id, student, application())
    with pytest.raises(Conflict):
        await services.apply_candidate(session, election.id, student, application())

    candidates = await crud.get_candidates_by_election_id(session, election.id)
    assert len(candidates) == 1


async def test_same_applicant_may_apply_for_other_positions(session, faculty, student):
    election = make_election(session, faculty, positions=["President", "Treasurer"])
    await services.apply_candidate(session, election.id, student, application("President"))
    await services.apply_candidate(session, election.id, student, application("Treasurer"))

    candidates = await crud.get_candidates_by_election_id(session, election.id)
    assert sorted(c.position for c in candidates) == ["President", "Treasurer"]


async def test_unique_constraint_backs_up_duplicate_check(session, election, student, monkeypatch):
    await services.apply_candidate(session, election.id, student, application())

    async def no_application(**kwargs):
        return None

    monkeypatch.setattr(crud, "get_application", no_application)
    with pytest.raises(Conflict):
        await services.apply_candidate(session, election.id, student, application())


async def test_approve_records_reviewer(session, election, student, faculty):
    candidate = make_candidate(session, election, student, status=CandidateStatusEnum.pending)

    approved = await services.approve_candidate(session, candidate.id, faculty)

    assert approved.status == CandidateStatusEnum.approved
    assert approved.reviewed_by == faculty.id
    assert approved.reviewed_at is not None
    assert approved.rejection_reason is None


async def test_reject_with_reason_then_approve_fails(session, election, student, admin):
    candidate = make_candidate(session, election, student, status=CandidateStatusEnum.pending)

    rejected = await services.reject_candidate(session, candidate.id, admin, reason="incomplete manifesto")
    assert rejected.status == CandidateStatusEnum.rejected
    assert rejected.rejection_reason == "incomplete manifesto"

    with pytest.raises(Conflict) as e:
        await services.approve_candidate(session, candidate.id, admin)
    assert e.value.message == "This application has already been rejected"

    stored = await crud.get_candidate_by_id(session, candidate.id)
    assert stored.status == CandidateStatusEnum.rejected


async def test_reject_without_reason_uses_default(session, election, student, faculty):
    candidate = make_candidate(session, election, student, status=CandidateStatusEnum.pending)
    rejected = await services.reject_candidate(session, candidate.id, faculty)
    assert rejected.rejection_reason == "No reason provided"


@pytest.mark.parametrize("first,second", [
    ("approve", "approve"),
    ("approve", "reject"),
    ("reject", "approve"),
    ("reject", "reject"),
])
async def test_review_is_terminal(session, election, student, admin, first, second):
    candidate = make_candidate(session, election, student, status=CandidateStatusEnum.pending)
    review = {"approve": services.approve_candidate, "reject": services.reject_candidate}

    reviewed = await review[first](session, candidate.id, admin)
    with pytest.raises(Conflict):
        await review[second](session, candidate.id, admin)

    stored = await crud.get_candidate_by_id(session, candidate.id)
    assert stored.status == reviewed.status


async def test_racing_review_only_applies_once(session, election, student, admin):
    candidate = make_candidate(session, election, student, status=CandidateStatusEnum.pending)
    approval = candidate.approve(admin.id)
    rejection = candidate.reject(admin.id)

    assert await crud.review_candidate(session, candidate.id, approval) is True
    assert await crud.review_candidate(session, candidate.id, rejection) is False

    stored = await crud.get_candidate_by_id(session, candidate.id)
    assert stored.status == CandidateStatusEnum.approved


async def test_students_cannot_review(session, election, student, other_student):
    candidate = make_candidate(session, election, student, status=CandidateStatusEnum.pending)
    with pytest.raises(PermissionDenied):
        await services.approve_candidate(session, candidate.id, other_student)
    with pytest.raises(PermissionDenied):
        await services.reject_candidate(session, candidate.id, student)


async def test_review_unknown_candidate(session, admin):
    with pytest.raises(NotFound):
        await services.approve_candidate(session, "missing", admin)


async def test_update_pending_application(session, election, student):
    candidate = make_candidate(session, election, student, status=CandidateStatusEnum.pending)
    updated = await services.update_candidate(
        session, candidate.id, schemas.CandidateUpdate(manifesto="A brand new manifesto"), student
    )
    assert updated.manifesto == "A brand new manifesto"


async def test_update_reviewed_application_fails(session, election, student):
    candidate = make_candidate(session, election, student, status=CandidateStatusEnum.approved)
    with pytest.raises(InvalidState):
        await services.update_candidate(
            session, candidate.id, schemas.CandidateUpdate(year="Third"), student
        )


async def test_update_someone_elses_application_fails(session, election, student, other_student):
    candidate = make_candidate(session, election, student, status=CandidateStatusEnum.pending)
    with pytest.raises(PermissionDenied):
        await services.update_candidate(
            session, candidate.id, schemas.CandidateUpdate(year="Third"), other_student
        )


async def test_withdraw_pending_application(session, election, student):
    candidate = make_candidate(session, election, student, status=CandidateStatusEnum.pending)
    await services.delete_candidate(session, candidate.id, student)
    assert await crud.get_candidate_by_id(session, candidate.id) is None


async def test_withdraw_approved_application_fails(session, election, student):
    candidate = make_candidate(session, election, student, status=CandidateStatusEnum.approved)
    with pytest.raises(InvalidState):
        await services.delete_candidate(session, candidate.id, student)


async def test_admin_cannot_remove_candidate_with_votes(session, approved_candidate, student, admin):
    await services.cast_vote(session, approved_candidate.election_id, approved_candidate.id, student.id)
    with pytest.raises(Conflict):
        await services.delete_candidate(session, approved_candidate.id, admin)


async def test_list_candidates_visibility(session, election, student, other_student, faculty):
    own_pending = make_candidate(session, election, student, status=CandidateStatusEnum.pending)
    approved = make_candidate(session, election, other_student, status=CandidateStatusEnum.approved)
    make_candidate(session, election, other_student, position="Treasurer", status=CandidateStatusEnum.rejected)

    anonymous = await services.list_candidates(session, election.id)
    as_student = await services.list_candidates(session, election.id, viewer=student)
    as_faculty = await services.list_candidates(session, election.id, viewer=faculty)

    assert [c.id for c in anonymous] == [approved.id]
    assert {c.id for c in as_student} == {own_pending.id, approved.id}
    assert len(as_faculty) == 3


async def test_workflow_is_logged(session, election, student, admin):
    candidate = await services.apply_candidate(session, election.id, student, application())
    await services.approve_candidate(session, candidate.id, admin)

    logs = await crud.get_logs_by_election_id(session, election.id)
    events = [log.event for log in logs]
    assert events == [
        ElectionPublicEventEnum.CANDIDATE_APPLIED.value,
        ElectionPublicEventEnum.CANDIDATE_APPROVED.value,
    ]
